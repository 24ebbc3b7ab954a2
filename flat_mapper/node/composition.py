"""Mounted nodes and traits of a node.

Child nodes are created from the blueprint's mounting blueprints on first
access and cached for the lifetime of the node. Traits are children owned
by their parent: they share its target, host, suffix and field index, and
are flattened into it for saving and lookups.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from flat_mapper.core.enums import SaveOrder
from flat_mapper.core.exceptions import MountingNotFoundError, TraitNotFoundError

if TYPE_CHECKING:
    from flat_mapper.blueprint.mounting import MountingBlueprint
    from flat_mapper.blueprint.plan import Blueprint
    from flat_mapper.mapping.mapping import Mapping
    from flat_mapper.node.base import Node

logger = logging.getLogger(__name__)

EXTENSION = "extension"


class CompositionMixin:
    """Creation and traversal of mounted nodes and traits."""

    _blueprint: Blueprint
    _traits: tuple[str, ...]
    _owner: Node | None
    _trait_name: str | None
    _host: Node | None
    _name: str | None
    _suffix: str | None
    _save_order: SaveOrder
    _extension_mounting: MountingBlueprint | None
    _mountings: list[Node] | None
    _building_mountings: bool

    # --- Identity ---

    @property
    def owner(self) -> Node | None:
        """The node a trait belongs to; None for non-trait nodes."""
        return self._owner

    @property
    def is_owned(self) -> bool:
        return self._owner is not None

    @property
    def trait_name(self) -> str | None:
        return self._trait_name

    @property
    def host(self) -> Node | None:
        """The node that mounted this one. Traits report their owner's host."""
        return self._owner.host if self._owner is not None else self._host

    @property
    def is_hosted(self) -> bool:
        return self.host is not None

    @property
    def root(self) -> Node:
        """The topmost node of the tree."""
        node: Any = self
        while node.owner is not None or node.host is not None:
            node = node.owner if node.owner is not None else node.host
        return node

    @property
    def name(self) -> str | None:
        """Mounting name, suffixed when a suffix applies. None for roots and traits."""
        return self._name

    @property
    def suffix(self) -> str | None:
        return self._owner.suffix if self._owner is not None else self._suffix

    @property
    def save_order(self) -> SaveOrder:
        return self._save_order

    @property
    def traits(self) -> tuple[str, ...]:
        return self._traits

    @property
    def is_extension(self) -> bool:
        return self.is_owned and self._trait_name == EXTENSION

    def _mount(self, host: Node, name: str, suffix: str | None, save_order: SaveOrder) -> None:
        self._host = host
        self._name = name
        self._suffix = suffix
        self._save_order = save_order

    def _own(self, owner: Node, trait_name: str) -> None:
        self._owner = owner
        self._trait_name = trait_name

    # --- Children ---

    def mountings(self) -> list[Node]:
        """Direct children: named mountings and active traits, in declaration order.

        The inline extension, if any, comes last.
        """
        if self._mountings is None:
            required = self._blueprint.required_mountings(self._traits)
            if self._extension_mounting is not None:
                required.append(self._extension_mounting)
            logger.debug(
                "Creating %d mounting(s) of %s for traits %s",
                len(required),
                type(self).__name__,
                list(self._traits),
            )
            self._building_mountings = True
            try:
                self._mountings = [m.create(self, *self._traits) for m in required]  # type: ignore[arg-type]
            finally:
                self._building_mountings = False
        return self._mountings

    def trait_mountings(self) -> list[Node]:
        """Active traits; the extension trait is moved to the front."""
        result = [m for m in self.mountings() if m.is_owned]
        if len(result) > 1 and result[-1].is_extension:
            result.insert(0, result.pop())
        return result

    def mapper_mountings(self) -> list[Node]:
        """Named (non-trait) children."""
        return [m for m in self.mountings() if not m.is_owned]

    def self_mountings(self) -> list[Node]:
        """All traits, transitively, followed by the node itself."""
        result: list[Node] = []
        for mounting in self.mountings():
            if mounting.is_owned:
                result.extend(mounting.self_mountings())
        result.append(self)  # type: ignore[arg-type]
        return result

    def nearest_mountings(self) -> list[Node]:
        """Named children, looking through traits."""
        result: list[Node] = []
        for mounting in self.mountings():
            if mounting.is_owned:
                result.extend(mounting.nearest_mountings())
            else:
                result.append(mounting)
        return result

    def before_save_mountings(self) -> list[Node]:
        return [m for m in self.nearest_mountings() if m.save_order is SaveOrder.BEFORE]

    def after_save_mountings(self) -> list[Node]:
        return [m for m in self.nearest_mountings() if m.save_order is not SaveOrder.BEFORE]

    def all_nested_mountings(self) -> list[Node]:
        """Every descendant, children before grandchildren."""
        mountings = self.mountings()
        result = list(mountings)
        for mounting in mountings:
            result.extend(mounting.all_nested_mountings())
        return result

    def all_mountings(self) -> list[Node]:
        """Every node reachable for delegation, host first.

        Traits share their owner's list.
        """
        if self._owner is not None:
            return self._owner.all_mountings()
        return [self, *self.all_nested_mountings()]  # type: ignore[list-item]

    def all_nested_mappings(self) -> list[Mapping]:
        result = list(self.mappings())  # type: ignore[attr-defined]
        for mounting in self.mountings():
            result.extend(mounting.all_nested_mappings())
        return result

    def all_mappings(self) -> list[Mapping]:
        """Every mapping reachable from the node. Traits share their owner's."""
        if self._owner is not None:
            return self._owner.all_mappings()
        return self.all_nested_mappings()

    # --- Lookup ---

    def mounting(self, name: str, deep: bool = True) -> Node:
        """Find a named mounting among all reachable nodes or direct children.

        Raises:
            MountingNotFoundError: If no such mounting is reachable.
        """
        candidates = self.all_mountings() if deep else self.mountings()
        for mounting in candidates:
            if mounting.name == name:
                return mounting
        raise MountingNotFoundError(name, type(self).__name__)

    def trait(self, name: str) -> Node | None:
        """Return the active trait *name*, or None if it is declared but inactive.

        Raises:
            TraitNotFoundError: If the trait is not declared.
        """
        for mounting in self.self_mountings():
            if mounting.is_owned and mounting.trait_name == name:
                return mounting
        if name == EXTENSION or self._blueprint.has_trait(name):
            return None
        raise TraitNotFoundError(name, type(self).__name__)

    @property
    def extension(self) -> Node | None:
        """The inline extension trait, if the node was created with one."""
        return self.trait(EXTENSION)
