"""Blueprints - immutable declarations of node types."""

from __future__ import annotations

from flat_mapper.blueprint.builder import BlueprintBuilder, blueprint
from flat_mapper.blueprint.mounting import UNSET, MountingBlueprint
from flat_mapper.blueprint.plan import EMPTY_BLUEPRINT, Blueprint, MappingBlueprint
from flat_mapper.blueprint.relations import (
    AnnotationRelationResolver,
    ChainRelationResolver,
    DeclaredRelationResolver,
    Relation,
    RelationResolver,
    belongs_to,
    default_resolver,
    has_many,
    has_one,
)

__all__ = [
    "EMPTY_BLUEPRINT",
    "UNSET",
    "AnnotationRelationResolver",
    "Blueprint",
    "BlueprintBuilder",
    "ChainRelationResolver",
    "DeclaredRelationResolver",
    "MappingBlueprint",
    "MountingBlueprint",
    "Relation",
    "RelationResolver",
    "belongs_to",
    "blueprint",
    "default_resolver",
    "has_many",
    "has_one",
]
