"""Relation resolution.

When a mounting has no explicit target, the host's target is asked whether
it exposes a relation under the mounting name. Resolvers are pluggable;
the default one combines two strategies:

1. Declared relations - a ``__relations__`` dict on the target class::

       @dataclass
       class Order:
           customer: Customer | None = None
           lines: list[Line] = field(default_factory=list)

           __relations__ = {
               "customer": belongs_to(Customer),
               "lines": has_many(Line),
           }

2. Annotation inference - dataclass and Pydantic fields annotated with
   another dataclass/Pydantic class are ``HAS_ONE``; fields annotated with
   ``list[...]`` of such classes are ``HAS_MANY``.
"""

from __future__ import annotations

import dataclasses
import inspect
import logging
import types
import typing
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from flat_mapper.core.enums import RelationKind
from flat_mapper.core.exceptions import RelationError
from flat_mapper.core.target import is_pydantic_model, new_target

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Relation:
    """A relation of an owner target, as reported by a resolver."""

    kind: RelationKind
    related_class: type | None = None
    name: str = ""

    @property
    def is_singular(self) -> bool:
        return self.kind is not RelationKind.HAS_MANY

    def get(self, owner: Any) -> Any:
        """Return the current related object (singular) or collection (plural)."""
        return _call_accessor(getattr(owner, self.name, None))

    def effective(self, owner: Any) -> Any:
        """Return the current/effective member of a ``HAS_ONE_CURRENT`` relation."""
        return _call_accessor(getattr(owner, f"effective_{self.name}", None))

    def build(self, owner: Any) -> Any:
        """Build a new related object and attach it to *owner*.

        Uses ``owner.build_<name>()`` when the owner defines it.

        Raises:
            RelationError: If the related class is unknown and there is no builder.
        """
        builder = getattr(owner, f"build_{self.name}", None)
        if callable(builder):
            return builder()
        if self.related_class is None:
            raise RelationError(self.name, "related class is unknown and no builder is defined")

        related = new_target(self.related_class)
        if self.is_singular:
            setattr(owner, self.name, related)
        else:
            collection = getattr(owner, self.name, None)
            if collection is None:
                collection = []
                setattr(owner, self.name, collection)
            collection.append(related)
        return related


def _call_accessor(value: Any) -> Any:
    return value() if inspect.ismethod(value) else value


def has_one(related_class: type | None = None, *, current: bool = False) -> Relation:
    """Declare a singular relation; ``current=True`` reads ``effective_<name>``."""
    kind = RelationKind.HAS_ONE_CURRENT if current else RelationKind.HAS_ONE
    return Relation(kind=kind, related_class=related_class)


def belongs_to(related_class: type | None = None) -> Relation:
    """Declare a singular relation whose target must be saved first."""
    return Relation(kind=RelationKind.BELONGS_TO, related_class=related_class)


def has_many(related_class: type | None = None) -> Relation:
    """Declare a plural relation."""
    return Relation(kind=RelationKind.HAS_MANY, related_class=related_class)


@runtime_checkable
class RelationResolver(Protocol):
    """Relation resolver protocol."""

    def resolve(self, target: Any, name: str) -> Relation | None:
        """Return the relation of *target* called *name*, or None."""
        ...


class DeclaredRelationResolver:
    """Resolve relations from a ``__relations__`` dict on the target class."""

    attribute = "__relations__"

    def resolve(self, target: Any, name: str) -> Relation | None:
        declared = getattr(type(target), self.attribute, None)
        if not declared or name not in declared:
            return None
        relation = declared[name]
        if isinstance(relation, RelationKind):
            relation = Relation(kind=relation)
        return dataclasses.replace(relation, name=name)


def _is_entity_class(cls: Any) -> bool:
    return isinstance(cls, type) and (dataclasses.is_dataclass(cls) or is_pydantic_model(cls))


def _unwrap_optional(annotation: Any) -> Any:
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


class AnnotationRelationResolver:
    """Infer relations from dataclass or Pydantic field annotations."""

    def resolve(self, target: Any, name: str) -> Relation | None:
        annotation = self._annotation(type(target), name)
        if annotation is None:
            return None

        annotation = _unwrap_optional(annotation)
        origin = typing.get_origin(annotation)
        if origin in (list, typing.List):  # noqa: UP006
            args = typing.get_args(annotation)
            if args and _is_entity_class(args[0]):
                return Relation(kind=RelationKind.HAS_MANY, related_class=args[0], name=name)
            return None
        if _is_entity_class(annotation):
            return Relation(kind=RelationKind.HAS_ONE, related_class=annotation, name=name)
        return None

    def _annotation(self, cls: type, name: str) -> Any:
        if is_pydantic_model(cls):
            field = cls.model_fields.get(name)  # type: ignore[attr-defined]
            return field.annotation if field is not None else None
        if not dataclasses.is_dataclass(cls):
            return None
        try:
            hints = typing.get_type_hints(cls)
        except (NameError, TypeError) as e:
            logger.debug("Cannot resolve annotations of %s: %s", cls.__name__, e)
            return None
        return hints.get(name)


class ChainRelationResolver:
    """Ask several resolvers in order; the first non-None answer wins."""

    def __init__(self, *resolvers: RelationResolver) -> None:
        self.resolvers = resolvers

    def resolve(self, target: Any, name: str) -> Relation | None:
        for resolver in self.resolvers:
            relation = resolver.resolve(target, name)
            if relation is not None:
                return relation
        return None


def default_resolver() -> RelationResolver:
    return ChainRelationResolver(DeclaredRelationResolver(), AnnotationRelationResolver())


def resolve_relation(resolver: RelationResolver, target: Any, name: str) -> Relation | None:
    """Resolve *name*, then its naive plural, on *target*."""
    if target is None:
        return None
    return resolver.resolve(target, name) or resolver.resolve(target, f"{name}s")
