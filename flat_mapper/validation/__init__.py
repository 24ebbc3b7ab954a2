"""Validation - error collection, rules and hooks."""

from __future__ import annotations

from flat_mapper.validation.errors import Errors
from flat_mapper.validation.hooks import Hook, run_hooks, run_with_hooks
from flat_mapper.validation.rules import (
    AbsenceRule,
    AcceptanceRule,
    CustomRule,
    FormatRule,
    InclusionRule,
    LengthRule,
    NumericalityRule,
    PresenceRule,
    TypeRule,
    ValidationRule,
    is_blank,
)

__all__ = [
    "AbsenceRule",
    "AcceptanceRule",
    "CustomRule",
    "Errors",
    "FormatRule",
    "Hook",
    "InclusionRule",
    "LengthRule",
    "NumericalityRule",
    "PresenceRule",
    "TypeRule",
    "ValidationRule",
    "is_blank",
    "run_hooks",
    "run_with_hooks",
]
