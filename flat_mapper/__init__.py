"""FlatMapper - flat field access over composed object graphs."""

from __future__ import annotations

import logging

from flat_mapper.blueprint.builder import BlueprintBuilder, blueprint
from flat_mapper.blueprint.plan import Blueprint
from flat_mapper.blueprint.relations import (
    Relation,
    RelationResolver,
    belongs_to,
    has_many,
    has_one,
)
from flat_mapper.core.config import MapperSettings, configure, get_settings, reset_settings
from flat_mapper.core.enums import HookEvent, RelationKind, SaveOrder
from flat_mapper.core.exceptions import (
    BlueprintError,
    ConstructionError,
    DuplicateNodeClassError,
    FieldNotFoundError,
    FlatMapperError,
    MountingNotFoundError,
    NodeClassNotFoundError,
    NoTargetError,
    RelationError,
    ResolutionError,
    StrictModeViolation,
    TargetAccessorError,
    TraitNotFoundError,
    TransactionError,
    TransactionStateError,
)
from flat_mapper.core.registry import NodeRegistry, default_registry, register
from flat_mapper.core.target import OpenTarget, PersistentTarget
from flat_mapper.core.transaction import TransactionManager
from flat_mapper.mapping.formats import register_format
from flat_mapper.node.base import EmptyNode, Node
from flat_mapper.validation.errors import Errors

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Nodes
    "Node",
    "EmptyNode",
    # Blueprints
    "blueprint",
    "Blueprint",
    "BlueprintBuilder",
    "register_format",
    # Relations
    "Relation",
    "RelationResolver",
    "has_one",
    "belongs_to",
    "has_many",
    # Registry
    "NodeRegistry",
    "default_registry",
    "register",
    # Targets
    "PersistentTarget",
    "OpenTarget",
    # Transaction
    "TransactionManager",
    # Settings
    "MapperSettings",
    "configure",
    "get_settings",
    "reset_settings",
    # Validation
    "Errors",
    # Enums
    "SaveOrder",
    "HookEvent",
    "RelationKind",
    # Exceptions
    "FlatMapperError",
    "ConstructionError",
    "NoTargetError",
    "TargetAccessorError",
    "RelationError",
    "BlueprintError",
    "ResolutionError",
    "TraitNotFoundError",
    "MountingNotFoundError",
    "NodeClassNotFoundError",
    "DuplicateNodeClassError",
    "FieldNotFoundError",
    "StrictModeViolation",
    "TransactionError",
    "TransactionStateError",
]
