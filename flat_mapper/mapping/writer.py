"""Writer strategies."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from flat_mapper.mapping.mapping import Mapping


class BasicWriter:
    """Assign the target attribute directly."""

    def __init__(self, mapping: Mapping) -> None:
        self.mapping = mapping

    def write(self, value: Any) -> Any:
        setattr(self.mapping.target, self.mapping.target_attribute, value)
        return value


class MethodWriter(BasicWriter):
    """Call a method of the node with the mapping and the value.

    Nothing is assigned to the target unless the method does it.
    """

    def __init__(self, mapping: Mapping, method: str) -> None:
        super().__init__(mapping)
        self.method = method

    def write(self, value: Any) -> Any:
        return getattr(self.mapping.node, self.method)(self.mapping, value)


class CallableWriter(BasicWriter):
    """Call a function with the target and the value."""

    def __init__(self, mapping: Mapping, func: Callable[[Any, Any], Any]) -> None:
        super().__init__(mapping)
        self.func = func

    def write(self, value: Any) -> Any:
        return self.func(self.mapping.target, value)
