"""Mapping - binds one named field of a node to one attribute of its target."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from flat_mapper.mapping.reader import BasicReader, CallableReader, FormattedReader, MethodReader
from flat_mapper.mapping.writer import BasicWriter, CallableWriter, MethodWriter

if TYPE_CHECKING:
    from flat_mapper.mapping.protocol import Reader, Writer
    from flat_mapper.node.base import Node

# Reader/writer option: None for the default strategy, False to disable,
# a node method name, or a function of the target.
StrategyOption = str | Callable[..., Any] | bool | None


class Mapping:
    """A field of a node.

    Args:
        node: The node owning the mapping; gateway to the target.
        name: External field name (before suffixing).
        target_attribute: Attribute of the target the field maps to.
        reader: Reader strategy option.
        writer: Writer strategy option.
        format: Name of a registered format for reading.
        format_args: Default extra arguments for the format.
        multiparam: Type built from multiparam fragments on write.
    """

    def __init__(
        self,
        node: Node,
        name: str,
        target_attribute: str,
        *,
        reader: StrategyOption = None,
        writer: StrategyOption = None,
        format: str | None = None,
        format_args: tuple[Any, ...] = (),
        multiparam: type | None = None,
    ) -> None:
        self.node = node
        self.name = name
        self.target_attribute = target_attribute
        self.multiparam = multiparam
        self.reader: Reader | None = self._fetch_reader(reader, format, format_args)
        self.writer: Writer | None = self._fetch_writer(writer)

    def __repr__(self) -> str:
        return f"<Mapping {self.full_name} -> {self.target_attribute}>"

    @property
    def target(self) -> Any:
        return self.node.target

    @property
    def suffix(self) -> str | None:
        return self.node.suffix

    @property
    def full_name(self) -> str:
        suffix = self.suffix
        return f"{self.name}_{suffix}" if suffix else self.name

    @property
    def is_multiparam(self) -> bool:
        return self.multiparam is not None

    def read(self, *args: Any) -> Any:
        """Read the value, or return None for a write-only mapping."""
        if self.reader is None:
            return None
        return self.reader.read(*args)

    def write(self, value: Any) -> Any:
        """Write the value; a no-op for a read-only mapping."""
        if self.writer is None:
            return None
        return self.writer.write(value)

    def read_as_params(self) -> dict[str, Any]:
        """Return ``{full_name: value}``, or an empty dict without a reader."""
        if self.reader is None:
            return {}
        return {self.full_name: self.read()}

    def write_from_params(self, params: dict[str, Any]) -> Any:
        """Write ``params[full_name]`` if present and writable."""
        full_name = self.full_name
        if full_name in params and self.writer is not None:
            return self.write(params[full_name])
        return None

    def _fetch_reader(
        self,
        option: StrategyOption,
        format_name: str | None,
        format_args: tuple[Any, ...],
    ) -> Reader | None:
        if option is False:
            return None
        if isinstance(option, str):
            return MethodReader(self, option)
        if callable(option):
            return CallableReader(self, option)
        if format_name is not None:
            return FormattedReader(self, format_name, format_args)
        return BasicReader(self)

    def _fetch_writer(self, option: StrategyOption) -> Writer | None:
        if option is False:
            return None
        if isinstance(option, str):
            return MethodWriter(self, option)
        if callable(option):
            return CallableWriter(self, option)
        return BasicWriter(self)
