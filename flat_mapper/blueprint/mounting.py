"""Mounting blueprints.

A mounting blueprint describes a child node of a host node - either a
named mounting (``mount("customer")``) or a trait (``trait("with_notes",
...)``) - and knows how to create it for a concrete parent: which node
class to instantiate, which target to give it, and when to save it.
"""

from __future__ import annotations

import functools
import logging
import types
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from flat_mapper.blueprint.relations import Relation, resolve_relation
from flat_mapper.core.enums import RelationKind, SaveOrder
from flat_mapper.core.exceptions import NoTargetError, TargetAccessorError
from flat_mapper.core.registry import NodeRegistry, default_class_name, default_registry
from flat_mapper.core.target import OpenTarget, new_target

if TYPE_CHECKING:
    from flat_mapper.blueprint.plan import Blueprint
    from flat_mapper.node.base import Node

logger = logging.getLogger(__name__)


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


# Marker for "no explicit target"; None is a legitimate (if invalid) target.
UNSET: Any = _Unset()


def _unique(items: tuple[str, ...]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(items))


@dataclass(frozen=True)
class MountingBlueprint:
    """Declaration of a mounted node or trait.

    Args:
        identifier: Mounting name, or trait name for traits.
        fragment: Blueprint of the trait body; set for traits only.
        node_class: Node class of a named mounting.
        node_class_name: Registry name of the node class.
        target: Explicit target - accessor name on the parent node,
            function of the parent's target, or a literal object.
        traits: Traits always activated on the mounted node.
        save: Explicit save order.
        suffix: Suffix for the mounted node's field names.
        open: Mount an anonymous node over an ``OpenTarget``.
        extension: Inline extension applied to the mounted node.
        registry: Registry used to resolve ``node_class_name``.
    """

    identifier: str
    fragment: Blueprint | None = None
    node_class: type[Node] | None = None
    node_class_name: str | None = None
    target: Any = UNSET
    traits: tuple[str, ...] = ()
    save: SaveOrder | None = None
    suffix: str | None = None
    open: bool = False
    extension: Blueprint | None = None
    registry: NodeRegistry | None = None

    @classmethod
    def for_trait(cls, name: str, fragment: Blueprint) -> MountingBlueprint:
        return cls(identifier=name, fragment=fragment)

    @property
    def is_trait(self) -> bool:
        return self.fragment is not None

    @property
    def name(self) -> str | None:
        """Mounting name; None for traits."""
        return None if self.is_trait else self.identifier

    @property
    def trait_name(self) -> str | None:
        return self.identifier if self.is_trait else None

    def is_required_for(self, traits: tuple[str, ...]) -> bool:
        """Named mountings are always required; traits only when activated.

        A trait is activated by its own name or by the name of any trait
        nested in it, at any depth.
        """
        if not self.is_trait:
            return True
        if self.identifier in traits:
            return True
        return any(
            m.is_trait and m.is_required_for(traits)
            for m in self.fragment.mountings  # type: ignore[union-attr]
        )

    # --- Node class resolution ---

    def resolve_node_class(self) -> type[Node]:
        """Node class instantiated by a named mounting.

        Raises:
            NodeClassNotFoundError: If a registry lookup fails.
        """
        if self.open:
            return _open_node_class(self.identifier)
        if self.node_class is not None:
            return self.node_class
        registry = self.registry or default_registry
        return registry.get(self.node_class_name or default_class_name(self.identifier))

    def node_blueprint(self) -> Blueprint:
        """Blueprint of the node this mounting creates."""
        if self.is_trait:
            return self.fragment  # type: ignore[return-value]
        return self.resolve_node_class().blueprint

    # --- Creation ---

    def create(self, parent: Node, *owner_traits: str) -> Node:
        """Create the child node of *parent*.

        Raises:
            NoTargetError: If no target can be resolved for the child.
            TargetAccessorError: If a named target accessor does not exist.
        """
        traits = _unique(self.traits + owner_traits)
        if self.is_trait:
            return self._create_trait(parent, traits)

        node_class = self.resolve_node_class()
        relation = self._relation(parent)
        target = self._fetch_target(parent, node_class, relation)
        if node_class.requires_target:
            child = node_class(target, *traits, extension=self.extension)
        else:
            child = node_class(*traits, extension=self.extension)

        suffix = self.suffix if self.suffix is not None else parent.suffix
        child._mount(
            host=parent,
            name=f"{self.identifier}_{suffix}" if suffix else self.identifier,
            suffix=suffix,
            save_order=self._save_order(relation),
        )
        logger.debug(
            "Mounted %s as '%s' on %s (save %s)",
            type(child).__name__,
            child.name,
            type(parent).__name__,
            child.save_order.value,
        )
        return child

    def _create_trait(self, parent: Node, traits: tuple[str, ...]) -> Node:
        node_class = parent.trait_node_class
        if node_class.requires_target:
            child = node_class(parent.target, *traits, blueprint=self.fragment)
        else:
            child = node_class(*traits, blueprint=self.fragment)
        child._own(owner=parent, trait_name=self.identifier)
        logger.debug("Activated trait '%s' on %s", self.identifier, type(parent).__name__)
        return child

    def _relation(self, parent: Node) -> Relation | None:
        if self.target is not UNSET or self.open:
            return None
        # Trait nodes resolve relations the way their owner does
        node: Any = parent
        while node.owner is not None:
            node = node.owner
        return resolve_relation(node.relation_resolver, parent.target, self.identifier)

    def _fetch_target(
        self,
        parent: Node,
        node_class: type[Node],
        relation: Relation | None,
    ) -> Any:
        if not node_class.requires_target:
            return None
        if self.open:
            return OpenTarget()
        if self.target is not UNSET:
            return self._explicit_target(parent)

        owner_target = parent.target
        if relation is not None:
            return self._target_from_relation(owner_target, relation)

        if owner_target is not None:
            value = getattr(owner_target, self.identifier, None)
            if isinstance(value, types.MethodType):
                value = value()
            if value is not None:
                return value

        target_class = node_class.blueprint.target_class
        if target_class is not None:
            return new_target(target_class)
        raise NoTargetError(node_class)

    def _explicit_target(self, parent: Node) -> Any:
        if isinstance(self.target, str):
            # Fields are not accessors: they are unavailable until the mountings exist
            try:
                accessor = getattr(parent, self.target)
            except AttributeError:
                raise TargetAccessorError(
                    self.target, self.identifier, type(parent).__name__
                ) from None
            return accessor()
        if callable(self.target) and not isinstance(self.target, type):
            return self.target(parent.target)
        return self.target

    @staticmethod
    def _target_from_relation(owner_target: Any, relation: Relation) -> Any:
        if relation.kind is RelationKind.HAS_ONE_CURRENT:
            return relation.effective(owner_target)
        if relation.kind is RelationKind.HAS_MANY:
            return relation.build(owner_target)
        existing = relation.get(owner_target)
        return existing if existing is not None else relation.build(owner_target)

    def _save_order(self, relation: Relation | None) -> SaveOrder:
        if self.save is not None:
            return self.save
        if relation is not None and relation.kind is RelationKind.BELONGS_TO:
            return SaveOrder.BEFORE
        return SaveOrder.AFTER


@functools.lru_cache(maxsize=None)
def _open_node_class(identifier: str) -> type[Node]:
    from flat_mapper.blueprint.plan import Blueprint
    from flat_mapper.node.base import Node

    return type(
        default_class_name(identifier),
        (Node,),
        {"blueprint": Blueprint(target_class=OpenTarget)},
    )
