"""Reader strategies."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from flat_mapper.mapping.formats import get_format

if TYPE_CHECKING:
    from flat_mapper.mapping.mapping import Mapping


class BasicReader:
    """Read the target attribute directly."""

    def __init__(self, mapping: Mapping) -> None:
        self.mapping = mapping

    def read(self, *args: Any) -> Any:
        return getattr(self.mapping.target, self.mapping.target_attribute)


class MethodReader(BasicReader):
    """Call a method of the node, passing the mapping to it.

    The method is looked up through node dispatch, so a trait may use a
    method defined by its host.
    """

    def __init__(self, mapping: Mapping, method: str) -> None:
        super().__init__(mapping)
        self.method = method

    def read(self, *args: Any) -> Any:
        return getattr(self.mapping.node, self.method)(self.mapping)


class CallableReader(BasicReader):
    """Call a function with the target as its only argument."""

    def __init__(self, mapping: Mapping, func: Callable[[Any], Any]) -> None:
        super().__init__(mapping)
        self.func = func

    def read(self, *args: Any) -> Any:
        return self.func(self.mapping.target)


class FormattedReader(BasicReader):
    """Read like BasicReader, then post-process with a named format.

    Positional arguments given to ``read`` replace the format arguments
    declared on the mapping.
    """

    def __init__(
        self,
        mapping: Mapping,
        format_name: str,
        format_args: tuple[Any, ...] = (),
    ) -> None:
        super().__init__(mapping)
        self.format_name = format_name
        self.format_args = format_args

    def read(self, *args: Any) -> Any:
        value = super().read()
        return get_format(self.format_name)(value, *(args or self.format_args))
