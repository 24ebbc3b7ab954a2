"""Engine enumerations."""

from __future__ import annotations

from enum import Enum


class SaveOrder(Enum):
    """When a mounted node is saved relative to its host's own target."""

    BEFORE = "before"
    AFTER = "after"


class HookEvent(Enum):
    """Points of the validate/save workflow where hooks run."""

    BEFORE_VALIDATE = "before_validate"
    AFTER_VALIDATE = "after_validate"
    BEFORE_SAVE = "before_save"
    AFTER_SAVE = "after_save"


class RelationKind(Enum):
    """Kinds of relations a target may expose for a mounting name."""

    HAS_ONE = "has_one"
    HAS_ONE_CURRENT = "has_one_current"
    BELONGS_TO = "belongs_to"
    HAS_MANY = "has_many"
