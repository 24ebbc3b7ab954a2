"""Node - a mapper over one target object and its mounted children.

Node types are declared by subclassing ``Node`` with a blueprint::

    class CustomerMapper(Node):
        blueprint = (
            blueprint(Customer)
            .map("name", "email")
            .mount("address", node_class=AddressMapper)
            .trait("with_notes", lambda t: t.map("notes"))
            .build()
        )

    mapper = CustomerMapper.find(42, "with_notes")
    mapper.apply({"name": "Ann", "notes": "VIP", "city": "Oslo"})
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from flat_mapper.blueprint.builder import FragmentBody, build_fragment
from flat_mapper.blueprint.mounting import MountingBlueprint
from flat_mapper.blueprint.plan import EMPTY_BLUEPRINT, Blueprint
from flat_mapper.blueprint.relations import RelationResolver, default_resolver
from flat_mapper.core.enums import SaveOrder
from flat_mapper.core.exceptions import ConstructionError, NoTargetError
from flat_mapper.core.target import OpenTarget, new_target
from flat_mapper.node.attributes import AttributeMixin
from flat_mapper.node.composition import EXTENSION, CompositionMixin
from flat_mapper.node.persistence import PersistenceMixin
from flat_mapper.node.skipping import SkippingMixin

if TYPE_CHECKING:
    from flat_mapper.mapping.mapping import Mapping
    from flat_mapper.validation.errors import Errors


class Node(SkippingMixin, PersistenceMixin, AttributeMixin, CompositionMixin):
    """Mapper over a target object.

    Args:
        target: The backing object. Required.
        *traits: Names of the traits to activate.
        extension: Inline extension - a blueprint fragment, or a function
            declaring one on the builder it receives - applied to this
            instance only.
        blueprint: Overrides the class blueprint; used for trait nodes.

    Raises:
        NoTargetError: If *target* is None.
    """

    blueprint: ClassVar[Blueprint] = EMPTY_BLUEPRINT
    relation_resolver: ClassVar[RelationResolver] = default_resolver()
    requires_target: ClassVar[bool] = True

    def __init__(
        self,
        target: Any,
        *traits: str,
        extension: FragmentBody | None = None,
        blueprint: Blueprint | None = None,
    ) -> None:
        if target is None:
            raise NoTargetError(type(self))
        self._target = target
        self._setup(traits, extension, blueprint)

    def _setup(
        self,
        traits: tuple[str, ...],
        extension: FragmentBody | None,
        blueprint: Blueprint | None,
    ) -> None:
        self._traits = tuple(traits)
        self._blueprint = blueprint if blueprint is not None else type(self).blueprint
        self._extension_mounting = (
            MountingBlueprint.for_trait(EXTENSION, build_fragment(extension))
            if extension is not None
            else None
        )
        self._owner: Node | None = None
        self._trait_name: str | None = None
        self._host: Node | None = None
        self._name: str | None = None
        self._suffix: str | None = None
        self._save_order = SaveOrder.AFTER
        self._mountings: list[Node] | None = None
        self._building_mountings = False
        self._mappings_cache: list[Mapping] | None = None
        self._field_index_cache: dict[str, Mapping] | None = None
        self._errors: Errors | None = None
        self._skipped = False

    def __repr__(self) -> str:
        parts = [type(self).__name__]
        if self._trait_name is not None:
            parts.append(f"trait={self._trait_name!r}")
        if self._name is not None:
            parts.append(f"name={self._name!r}")
        if self._traits:
            parts.append(f"traits={list(self._traits)!r}")
        return f"<{' '.join(parts)}>"

    @property
    def target(self) -> Any:
        return self._target

    @property
    def trait_node_class(self) -> type[Node]:
        """Class instantiated for the traits of this node."""
        return Node

    @classmethod
    def target_class(cls) -> type:
        """Class of new targets; ``OpenTarget`` when the blueprint sets none."""
        return cls.blueprint.target_class or OpenTarget

    @classmethod
    def build(cls, *traits: str, extension: FragmentBody | None = None) -> Node:
        """Create a node over a new, empty target."""
        return cls(new_target(cls.target_class()), *traits, extension=extension)

    @classmethod
    def find(cls, id: Any, *traits: str, extension: FragmentBody | None = None) -> Node:
        """Create a node over the target returned by ``target_class.find(id)``.

        Raises:
            ConstructionError: If the target class has no ``find``.
            NoTargetError: If ``find`` returns None.
        """
        target_class = cls.target_class()
        finder = getattr(target_class, "find", None)
        if not callable(finder):
            raise ConstructionError(f"{target_class.__name__} does not define find()")
        return cls(finder(id), *traits, extension=extension)


class EmptyNode(Node):
    """Node without a target, used to compose other nodes.

    Mountings of an empty node need an explicit target or a child node
    class whose blueprint names a target class. They are always saved
    after the (nonexistent) own target.
    """

    requires_target: ClassVar[bool] = False

    def __init__(
        self,
        *traits: str,
        extension: FragmentBody | None = None,
        blueprint: Blueprint | None = None,
    ) -> None:
        self._target = None
        self._setup(traits, extension, blueprint)

    @property
    def trait_node_class(self) -> type[Node]:
        return EmptyNode

    @classmethod
    def build(cls, *traits: str, extension: FragmentBody | None = None) -> Node:
        return cls(*traits, extension=extension)

    @classmethod
    def find(cls, id: Any, *traits: str, extension: FragmentBody | None = None) -> Node:
        raise ConstructionError(f"{cls.__name__} has no target to find")

    def save_target(self) -> bool:
        return True
