"""Backing target helpers.

Targets may be dataclasses, Pydantic models or plain classes. Persistence
capabilities are optional: each member of PersistentTarget is detected
on its own.
"""

from __future__ import annotations

import dataclasses
import inspect
import types
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel


@runtime_checkable
class PersistentTarget(Protocol):
    """Record-like target whose lifecycle is owned by a persistence layer."""

    def is_new_record(self) -> bool:
        """Return True if the record was never stored."""
        ...

    def reload(self) -> Any:
        """Discard in-memory changes by re-reading the stored state."""
        ...

    def mark_for_destruction(self) -> None:
        """Flag the record so the store does not treat it as pending."""
        ...

    def unmark_for_destruction(self) -> None:
        """Clear a previous destruction flag."""
        ...

    def save(self, validate: bool = True) -> bool:
        """Persist the record; return False on failure."""
        ...


class OpenTarget(types.SimpleNamespace):
    """Attribute bag whose unset public attributes read as None."""

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return None


def is_pydantic_model(cls: type) -> bool:
    """Check if a class is a Pydantic BaseModel."""
    return isinstance(cls, type) and issubclass(cls, BaseModel)


def get_field_names(cls: type) -> list[str]:
    """Extract field names from a class (dataclass, Pydantic, or plain)."""
    if is_pydantic_model(cls):
        return list(cls.model_fields.keys())  # type: ignore[attr-defined]

    if dataclasses.is_dataclass(cls):
        return [f.name for f in dataclasses.fields(cls)]

    try:
        sig = inspect.signature(cls.__init__)  # type: ignore[misc]
        return [
            name
            for name, param in sig.parameters.items()
            if name != "self" and param.kind not in (param.VAR_POSITIONAL, param.VAR_KEYWORD)
        ]
    except (ValueError, TypeError):
        return []


def new_target(cls: type) -> Any:
    """Create an empty instance of *cls* to back a freshly built node.

    Detection order:
    1. Pydantic BaseModel -> model_construct() (no validation)
    2. dataclass -> cls(**{required_field: None})
    3. Plain class -> cls()
    """
    if is_pydantic_model(cls):
        return cls.model_construct()  # type: ignore[attr-defined]

    if dataclasses.is_dataclass(cls):
        required = {
            f.name: None
            for f in dataclasses.fields(cls)
            if f.init
            and f.default is dataclasses.MISSING
            and f.default_factory is dataclasses.MISSING
        }
        return cls(**required)

    return cls()


def is_new_record(target: Any) -> bool | None:
    """Return the new-record state of *target*, or None if it has none."""
    check = getattr(target, "is_new_record", None)
    if not callable(check):
        return None
    return bool(check())


def call_optional(target: Any, method_name: str) -> Any:
    """Call a zero-argument lifecycle method of *target* if it defines one."""
    method = getattr(target, method_name, None)
    return method() if callable(method) else None


def save_target(target: Any) -> bool:
    """Save *target* without validation if it can be saved."""
    save = getattr(target, "save", None)
    if not callable(save):
        return True
    return bool(save(validate=False))
