"""Temporary exclusion of a subtree from validation and saving."""

from __future__ import annotations

import logging
from typing import Any

from flat_mapper.core.target import call_optional, is_new_record

logger = logging.getLogger(__name__)


class SkippingMixin:
    """``skip`` / ``use``.

    A skipped node reports success from ``is_valid``, ``save`` and
    ``shallow_save`` without doing any work. Writing to a node uses it again.
    """

    _skipped: bool

    @property
    def is_skipped(self) -> bool:
        return self._skipped

    def skip(self) -> None:
        """Exclude the node from validation and saving.

        A new record target is marked for destruction. A stored one is
        reloaded, and every nested node is skipped as well.
        """
        new_record = self._skip_self()
        if new_record is False:
            for mounting in self.all_nested_mountings():  # type: ignore[attr-defined]
                mounting._skip_self()

    def use(self) -> None:
        """Undo ``skip``. For a stored target, every nested node is used again."""
        new_record = self._use_self()
        if new_record is False:
            for mounting in self.all_nested_mountings():  # type: ignore[attr-defined]
                mounting._use_self()

    def _skip_self(self) -> bool | None:
        self._skipped = True
        target = self.target  # type: ignore[attr-defined]
        new_record = is_new_record(target)
        if new_record:
            call_optional(target, "mark_for_destruction")
        elif new_record is False:
            call_optional(target, "reload")
        logger.debug("Skipped %s", type(self).__name__)
        return new_record

    def _use_self(self) -> bool | None:
        was_skipped = self._skipped
        self._skipped = False
        target = self.target  # type: ignore[attr-defined]
        new_record = is_new_record(target)
        if new_record and was_skipped:
            call_optional(target, "unmark_for_destruction")
        return new_record

    def is_valid(self) -> bool:
        if self._skipped:
            self.errors.clear()  # type: ignore[attr-defined]
            return True
        return super().is_valid()  # type: ignore[misc]

    def save(self) -> bool:
        return True if self._skipped else super().save()  # type: ignore[misc]

    def shallow_save(self) -> bool:
        return True if self._skipped else super().shallow_save()  # type: ignore[misc]

    def write(self, params: dict[str, Any]) -> dict[str, Any]:
        self.use()
        return super().write(params)  # type: ignore[misc]
