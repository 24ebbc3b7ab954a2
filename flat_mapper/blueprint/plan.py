"""Blueprint data structures.

Blueprints are the compiled, immutable declaration of a node type produced
by ``BlueprintBuilder.build()``. They are shared by every instance of the
node type; per-instance state (mappings bound to a target, mounted child
nodes) is created from them lazily by the node.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from flat_mapper.mapping.mapping import Mapping, StrategyOption

if TYPE_CHECKING:
    from flat_mapper.blueprint.builder import BlueprintBuilder
    from flat_mapper.blueprint.mounting import MountingBlueprint
    from flat_mapper.node.base import Node
    from flat_mapper.validation.hooks import Hook
    from flat_mapper.validation.rules import ValidationRule

# Eager-load structure: None, a name, a list of structures, or {name: structure}
Associations = str | list[Any] | dict[str, Any] | None


@dataclass(frozen=True)
class MappingBlueprint:
    """Declaration of a single field."""

    name: str
    target_attribute: str
    reader: StrategyOption = None
    writer: StrategyOption = None
    format: str | None = None
    format_args: tuple[Any, ...] = ()
    multiparam: type | None = None

    def create(self, node: Node) -> Mapping:
        """Bind the declaration to *node*."""
        return Mapping(
            node,
            self.name,
            self.target_attribute,
            reader=self.reader,
            writer=self.writer,
            format=self.format,
            format_args=self.format_args,
            multiparam=self.multiparam,
        )


@dataclass(frozen=True)
class Blueprint:
    """Compiled declaration of a node type or of a trait fragment."""

    target_class: type | None = None
    mappings: tuple[MappingBlueprint, ...] = ()
    mountings: tuple[MountingBlueprint, ...] = ()
    rules: tuple[ValidationRule, ...] = ()
    hooks: tuple[Hook, ...] = ()
    methods: tuple[tuple[str, Callable[..., Any]], ...] = ()
    strict: bool = False

    @property
    def is_empty(self) -> bool:
        return not (self.mappings or self.mountings or self.rules or self.hooks or self.methods)

    @property
    def mapping_names(self) -> list[str]:
        return [m.name for m in self.mappings]

    @property
    def trait_names(self) -> list[str]:
        """Names of directly declared traits."""
        return [m.identifier for m in self.mountings if m.is_trait]

    def method(self, name: str) -> Callable[..., Any] | None:
        """Return the node-local method declared under *name*, if any."""
        for method_name, func in self.methods:
            if method_name == name:
                return func
        return None

    def has_trait(self, name: str) -> bool:
        """Check if *name* is declared as a trait, at any nesting depth."""
        for mounting in self.mountings:
            if not mounting.is_trait:
                continue
            if mounting.identifier == name or mounting.fragment.has_trait(name):  # type: ignore[union-attr]
                return True
        return False

    def required_mountings(self, traits: Iterable[str]) -> list[MountingBlueprint]:
        """Mounting blueprints to instantiate for the trait set *traits*."""
        traits = tuple(traits)
        return [m for m in self.mountings if m.is_required_for(traits)]

    def extend(self) -> BlueprintBuilder:
        """Start a builder pre-filled with this blueprint's declarations."""
        from flat_mapper.blueprint.builder import BlueprintBuilder

        return BlueprintBuilder(self.target_class, base=self)

    def associations(self, traits: Iterable[str] = ()) -> Associations:
        """Eager-load structure of the mountings required for *traits*.

        Example:
            ``mount("customer")`` whose node mounts ``"address"`` and
            ``mount("order")`` give ``[{"customer": "address"}, "order"]``.
        """
        return self._associations(tuple(traits), None)

    def _associations(self, traits: tuple[str, ...], own_name: str | None) -> Associations:
        dependencies: list[Any] = []
        for mounting in self.required_mountings(traits):
            if mounting.is_trait:
                nested = mounting.fragment._associations(traits, None)  # type: ignore[union-attr]
                if isinstance(nested, list):
                    dependencies.extend(nested)
                elif nested is not None:
                    dependencies.append(nested)
            else:
                child = mounting.node_blueprint()
                dependencies.append(child._associations(traits, mounting.identifier))

        if not dependencies:
            return own_name
        value = dependencies[0] if len(dependencies) == 1 else dependencies
        return {own_name: value} if own_name else value


EMPTY_BLUEPRINT = Blueprint()
