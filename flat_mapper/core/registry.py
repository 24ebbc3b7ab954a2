"""Node class registry - resolves mounting names to node classes.

Naming convention:
    mount("customer")                        -> "CustomerMapper"
    mount("email_address")                   -> "EmailAddressMapper"
    mount("owner", node_class_name="Person") -> "Person"
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from flat_mapper.core.exceptions import DuplicateNodeClassError, NodeClassNotFoundError

if TYPE_CHECKING:
    from flat_mapper.node.base import Node

N = TypeVar("N", bound="type[Node]")


def camelize(name: str) -> str:
    """Convert ``snake_case`` to ``CamelCase``."""
    return "".join(part[:1].upper() + part[1:] for part in name.split("_") if part)


def default_class_name(mounting_name: str) -> str:
    """Class name looked up for a mounting without an explicit node class."""
    return f"{camelize(mounting_name)}Mapper"


class NodeRegistry:
    """Maps class names to node classes.

    Registration happens once at import time; lookups are read-only after
    that.
    """

    def __init__(self) -> None:
        self._classes: dict[str, type[Node]] = {}

    def register(self, node_class: N, name: str | None = None) -> N:
        """Register *node_class* under *name* (defaults to its class name).

        Usable as a decorator.

        Raises:
            DuplicateNodeClassError: If another class already uses the name.
        """
        key = name or node_class.__name__
        existing = self._classes.get(key)
        if existing is not None and existing is not node_class:
            raise DuplicateNodeClassError(key, existing, node_class)
        self._classes[key] = node_class
        return node_class

    def get(self, name: str) -> type[Node]:
        """Look up a node class by name.

        Raises:
            NodeClassNotFoundError: If no class is registered under *name*.
        """
        try:
            return self._classes[name]
        except KeyError:
            raise NodeClassNotFoundError(name) from None

    def has(self, name: str) -> bool:
        """Check if a class name is registered."""
        return name in self._classes

    def unregister(self, name: str) -> None:
        """Remove a registration if present."""
        self._classes.pop(name, None)

    @property
    def class_names(self) -> list[str]:
        """List all registered class names, sorted alphabetically."""
        return sorted(self._classes)

    def __len__(self) -> int:
        """Number of registered classes."""
        return len(self._classes)


default_registry = NodeRegistry()


def register(node_class: N) -> N:
    """Register *node_class* in the default registry."""
    return default_registry.register(node_class)
