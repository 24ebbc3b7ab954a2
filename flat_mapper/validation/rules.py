"""Validation rules declared on blueprints.

Rules read values through ``Node.read_attribute_for_validation`` and add
messages to ``Node.errors``; they never raise. Numeric and type checks
delegate coercion to Pydantic's ``TypeAdapter`` so that ``"42"`` is a valid
number the same way it is a valid ``int`` field of a Pydantic model.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Collection
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import TypeAdapter, ValidationError

if TYPE_CHECKING:
    from flat_mapper.node.base import Node


def is_blank(value: Any) -> bool:
    """None, False, whitespace-only strings and empty collections are blank."""
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set, frozenset)):
        return len(value) == 0
    return False


@dataclass(frozen=True)
class ValidationRule:
    """Base rule applied to one or more attributes."""

    attributes: tuple[str, ...]
    message: str | None = None
    allow_none: bool = False

    default_message: ClassVar[str] = "is invalid"

    def validate(self, node: Node) -> None:
        for attr in self.attributes:
            value = node.read_attribute_for_validation(attr)
            if value is None and self.allow_none:
                continue
            error = self.check(value)
            if error is not None:
                node.errors.add(attr, self.message or error)

    def check(self, value: Any) -> str | None:
        """Return an error message for *value*, or None if it is valid."""
        raise NotImplementedError


@dataclass(frozen=True)
class PresenceRule(ValidationRule):
    default_message: ClassVar[str] = "can't be blank"

    def check(self, value: Any) -> str | None:
        return self.default_message if is_blank(value) else None


@dataclass(frozen=True)
class AbsenceRule(ValidationRule):
    default_message: ClassVar[str] = "must be blank"

    def check(self, value: Any) -> str | None:
        return None if is_blank(value) else self.default_message


@dataclass(frozen=True)
class AcceptanceRule(ValidationRule):
    allow_none: bool = True
    accept: tuple[Any, ...] = ("1", "true", True, 1)

    default_message: ClassVar[str] = "must be accepted"

    def check(self, value: Any) -> str | None:
        return None if value in self.accept else self.default_message


@dataclass(frozen=True)
class NumericalityRule(ValidationRule):
    only_integer: bool = False
    greater_than: float | None = None
    greater_than_or_equal_to: float | None = None
    less_than: float | None = None
    less_than_or_equal_to: float | None = None

    default_message: ClassVar[str] = "is not a number"

    _adapter: TypeAdapter[Any] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_adapter", TypeAdapter(int if self.only_integer else float))

    def check(self, value: Any) -> str | None:
        if isinstance(value, bool):
            return self.default_message
        try:
            number = self._adapter.validate_python(value)
        except ValidationError:
            return "must be an integer" if self.only_integer else self.default_message

        bounds: list[tuple[float | None, Callable[[Any, Any], bool], str]] = [
            (self.greater_than, lambda n, b: n > b, "must be greater than {}"),
            (
                self.greater_than_or_equal_to,
                lambda n, b: n >= b,
                "must be greater than or equal to {}",
            ),
            (self.less_than, lambda n, b: n < b, "must be less than {}"),
            (self.less_than_or_equal_to, lambda n, b: n <= b, "must be less than or equal to {}"),
        ]
        for bound, holds, template in bounds:
            if bound is not None and not holds(number, bound):
                return template.format(bound)
        return None


@dataclass(frozen=True)
class TypeRule(ValidationRule):
    """Check that the value validates against any Pydantic-supported annotation."""

    annotation: Any = None

    _adapter: TypeAdapter[Any] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_adapter", TypeAdapter(self.annotation))

    def check(self, value: Any) -> str | None:
        try:
            self._adapter.validate_python(value)
        except ValidationError as e:
            errors = e.errors()
            return errors[0]["msg"] if errors else self.default_message
        return None


@dataclass(frozen=True)
class FormatRule(ValidationRule):
    pattern: str = ""

    def check(self, value: Any) -> str | None:
        text = "" if value is None else str(value)
        return None if re.search(self.pattern, text) else self.default_message


@dataclass(frozen=True)
class LengthRule(ValidationRule):
    minimum: int | None = None
    maximum: int | None = None
    is_: int | None = None

    def check(self, value: Any) -> str | None:
        length = 0 if value is None else len(value)
        if self.is_ is not None and length != self.is_:
            return f"is the wrong length (should be {self.is_} characters)"
        if self.minimum is not None and length < self.minimum:
            return f"is too short (minimum is {self.minimum} characters)"
        if self.maximum is not None and length > self.maximum:
            return f"is too long (maximum is {self.maximum} characters)"
        return None


@dataclass(frozen=True)
class InclusionRule(ValidationRule):
    choices: Collection[Any] = ()

    default_message: ClassVar[str] = "is not included in the list"

    def check(self, value: Any) -> str | None:
        return None if value in self.choices else self.default_message


@dataclass(frozen=True)
class CustomRule(ValidationRule):
    """Run a node method (by name) or a function of the node.

    The action adds errors itself.
    """

    action: str | Callable[[Node], Any] | None = None

    def validate(self, node: Node) -> None:
        if isinstance(self.action, str):
            getattr(node, self.action)()
        elif self.action is not None:
            self.action(node)

    def check(self, value: Any) -> str | None:
        return None
