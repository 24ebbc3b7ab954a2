"""Writing, validation and saving of a node tree."""

from __future__ import annotations

import contextlib
import logging
from typing import TYPE_CHECKING, Any

from flat_mapper.core.enums import HookEvent
from flat_mapper.core.exceptions import StrictModeViolation
from flat_mapper.core.target import is_new_record, save_target
from flat_mapper.mapping.multiparam import extract_multiparams
from flat_mapper.validation.errors import Errors
from flat_mapper.validation.hooks import run_with_hooks

if TYPE_CHECKING:
    from contextlib import AbstractContextManager

    from flat_mapper.blueprint.plan import Blueprint
    from flat_mapper.node.base import Node

logger = logging.getLogger(__name__)


def _all(results: list[bool]) -> bool:
    # Takes a list so that every member has been evaluated
    return all(results)


class PersistenceMixin:
    """``write`` / ``is_valid`` / ``save`` / ``apply``."""

    _blueprint: Blueprint
    _errors: Errors | None

    @property
    def errors(self) -> Errors:
        if self._errors is None:
            self._errors = Errors(self)  # type: ignore[arg-type]
        return self._errors

    @property
    def persisted(self) -> bool:
        """True if the target is a stored record."""
        return is_new_record(self.target) is False  # type: ignore[attr-defined]

    # --- Write ---

    def write(self, params: dict[str, Any]) -> dict[str, Any]:
        """Distribute a flat ``{full_name: value}`` dict over the tree.

        Multiparam fragments are composed in place first. Keys without a
        matching writable field are ignored unless the blueprint is strict.

        Raises:
            StrictModeViolation: If the blueprint is strict and *params*
                contains keys matching no reachable field.
        """
        extract_multiparams(params, self.all_mappings())  # type: ignore[attr-defined]
        if self._blueprint.strict:
            self._check_strict(params)

        for mapping in self.mappings():  # type: ignore[attr-defined]
            mapping.write_from_params(params)
        for mounting in self.mountings():  # type: ignore[attr-defined]
            mounting.write(params)
        return params

    def _check_strict(self, params: dict[str, Any]) -> None:
        known = self.root.field_index()  # type: ignore[attr-defined]
        unknown = [str(key) for key in params if key not in known]
        if unknown:
            raise StrictModeViolation(type(self).__name__, unknown)

    # --- Validation ---

    def is_valid(self) -> bool:
        """Validate traits, the node itself and named children.

        Every child is validated even after a failure; child errors are
        merged into ``self.errors``.
        """
        traits_ok = _all([trait.is_valid() for trait in self.trait_mountings()])  # type: ignore[attr-defined]
        own_ok = self._run_validations()
        mountings_ok = _all([m.is_valid() for m in self.mapper_mountings()])  # type: ignore[attr-defined]
        self._consolidate_errors()
        return traits_ok and own_ok and mountings_ok

    def _run_validations(self) -> bool:
        self.errors.clear()

        def validate() -> bool:
            for rule in self._blueprint.rules:
                rule.validate(self)  # type: ignore[arg-type]
            return True

        run_with_hooks(
            self._blueprint.hooks,
            HookEvent.BEFORE_VALIDATE,
            HookEvent.AFTER_VALIDATE,
            self,  # type: ignore[arg-type]
            validate,
        )
        return self.errors.is_empty()

    def _consolidate_errors(self) -> None:
        for mounting in self.mountings():  # type: ignore[attr-defined]
            self.errors.merge(mounting.errors)

    # --- Save ---

    def save(self) -> bool:
        """Save the tree: ``before`` children, own traits and target, ``after`` children.

        No group stops at the first failure.
        """
        before_ok = self._save_mountings(self.before_save_mountings())  # type: ignore[attr-defined]
        self_ok = _all([m.shallow_save() for m in self.self_mountings()])  # type: ignore[attr-defined]
        after_ok = self._save_mountings(self.after_save_mountings())  # type: ignore[attr-defined]
        return before_ok and self_ok and after_ok

    def _save_mountings(self, mountings: list[Node]) -> bool:
        return _all([m.save() for m in mountings])

    def shallow_save(self) -> bool:
        """Save the node's own target between its save hooks."""
        return run_with_hooks(
            self._blueprint.hooks,
            HookEvent.BEFORE_SAVE,
            HookEvent.AFTER_SAVE,
            self,  # type: ignore[arg-type]
            self.save_target,
        )

    def save_target(self) -> bool:
        """Persist the target. Traits do not save: their owner saves the shared target."""
        if self.is_owned:  # type: ignore[attr-defined]
            return True
        result = save_target(self.target)  # type: ignore[attr-defined]
        logger.debug("Saved target of %s: %s", type(self).__name__, result)
        return result

    # --- Apply ---

    def transaction(self) -> AbstractContextManager[Any]:
        """Context manager wrapping the save of ``apply``.

        No-op by default; override to return a ``TransactionManager``.
        """
        return contextlib.nullcontext()

    def apply(self, params: dict[str, Any]) -> bool:
        """Write *params*, then save the tree if it is valid."""
        self.write(params)
        if not self.is_valid():
            logger.debug("Not saving %s: %s", type(self).__name__, self.errors.to_dict())
            return False
        with self.transaction():
            return bool(self.save())
