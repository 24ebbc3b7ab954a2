"""Named value formats applied by formatted readers.

A format is a function ``(value, *args) -> formatted``. Built-in formats:

    i18n_l  - render dates, datetimes and times with the configured patterns
    enum    - return a property (``name`` by default) of an enumerated value
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime, time
from typing import Any, TypeVar

from flat_mapper.core.config import get_settings

F = TypeVar("F", bound=Callable[..., Any])

_FORMATS: dict[str, Callable[..., Any]] = {}


def register_format(name: str) -> Callable[[F], F]:
    """Register a format function under *name*.

    Usage:
        @register_format("upcase")
        def upcase(value):
            return value.upper() if value else value
    """

    def _register(func: F) -> F:
        _FORMATS[name] = func
        return func

    return _register


def get_format(name: str) -> Callable[..., Any]:
    """Look up a format function by name.

    Raises:
        KeyError: If no format is registered under *name*.
    """
    try:
        return _FORMATS[name]
    except KeyError:
        raise KeyError(f"Unknown format: '{name}'") from None


def has_format(name: str) -> bool:
    return name in _FORMATS


def format_names() -> list[str]:
    return sorted(_FORMATS)


@register_format("i18n_l")
def i18n_l(value: Any, pattern: str | None = None) -> Any:
    """Localize temporal values with the configured strftime patterns."""
    if value is None:
        return None
    settings = get_settings()
    # datetime is a date subclass, so it goes first
    if isinstance(value, datetime):
        return value.strftime(pattern or settings.datetime_format)
    if isinstance(value, date):
        return value.strftime(pattern or settings.date_format)
    if isinstance(value, time):
        return value.strftime(pattern or settings.time_format)
    return value


@register_format("enum")
def enum(value: Any, prop: str | None = None) -> Any:
    """Return the *prop* property of an enumerated value."""
    if value is None:
        return None
    return getattr(value, prop or get_settings().enum_property)
