"""FlatMapper exception hierarchy.

Field-level validation problems are never raised: they are collected in
``Node.errors``. Everything below signals a programming or wiring error
that the engine cannot recover from.
"""

from __future__ import annotations


class FlatMapperError(Exception):
    """Base exception for all FlatMapper errors."""


# --- Construction ---


class ConstructionError(FlatMapperError):
    """Base for errors raised while building a node tree."""


class NoTargetError(ConstructionError):
    """Raised when a node is created without a target."""

    def __init__(self, node_class: type | str) -> None:
        self.node_class = node_class if isinstance(node_class, str) else node_class.__name__
        super().__init__(f"Target object is required to initialize {self.node_class}")


class TargetAccessorError(ConstructionError):
    """Raised when a mounting's target accessor is not a method of its parent."""

    def __init__(self, accessor: str, mounting_name: str, node_class: str) -> None:
        self.accessor = accessor
        self.mounting_name = mounting_name
        super().__init__(
            f"Target accessor '{accessor}' of mounting '{mounting_name}' "
            f"is not a method of {node_class}"
        )


class RelationError(ConstructionError):
    """Raised when a relation exists but cannot produce a target."""

    def __init__(self, relation_name: str, detail: str) -> None:
        self.relation_name = relation_name
        super().__init__(f"Cannot resolve relation '{relation_name}': {detail}")


# --- Declaration ---


class BlueprintError(FlatMapperError):
    """Raised when a blueprint declaration fails validation during build()."""


# --- Resolution ---


class ResolutionError(FlatMapperError):
    """Base for name resolution errors."""


class TraitNotFoundError(ResolutionError):
    """Raised when a trait name is not declared anywhere in the tree."""

    def __init__(self, trait_name: str, node_class: str) -> None:
        self.trait_name = trait_name
        super().__init__(f"Trait '{trait_name}' is not defined for {node_class}")


class MountingNotFoundError(ResolutionError):
    """Raised when a mounting name is not reachable from a node."""

    def __init__(self, mounting_name: str, node_class: str) -> None:
        self.mounting_name = mounting_name
        super().__init__(f"Mounting '{mounting_name}' is not reachable from {node_class}")


class NodeClassNotFoundError(ResolutionError):
    """Raised when a node class cannot be found in the registry."""

    def __init__(self, class_name: str) -> None:
        self.class_name = class_name
        super().__init__(f"Node class not found: '{class_name}'")


class DuplicateNodeClassError(ResolutionError):
    """Raised when two node classes are registered under the same name."""

    def __init__(self, class_name: str, existing: type, duplicate: type) -> None:
        self.class_name = class_name
        super().__init__(
            f"Duplicate node class name '{class_name}': "
            f"{existing.__module__}.{existing.__qualname__} and "
            f"{duplicate.__module__}.{duplicate.__qualname__}"
        )


class FieldNotFoundError(ResolutionError, AttributeError):
    """Raised when a field name matches no reachable mapping."""

    def __init__(self, field_name: str, node_class: str) -> None:
        self.field_name = field_name
        super().__init__(f"{node_class} has no field '{field_name}'")


class StrictModeViolation(ResolutionError):
    """Raised by strict nodes when written params contain unknown keys."""

    def __init__(self, node_class: str, unknown_keys: list[str]) -> None:
        self.unknown_keys = unknown_keys
        super().__init__(f"Unknown fields for {node_class}: {unknown_keys}")


# --- Transaction ---


class TransactionError(FlatMapperError):
    """Base for transaction errors."""


class TransactionStateError(TransactionError):
    """Raised on invalid transaction state transitions."""

    def __init__(self, current_state: str, attempted_action: str) -> None:
        self.current_state = current_state
        self.attempted_action = attempted_action
        super().__init__(f"Cannot {attempted_action} transaction in state '{current_state}'")
