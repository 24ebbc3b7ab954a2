"""Field access and call delegation.

Every reachable mapping is addressable by its full name from any node of
the tree that can reach it::

    node.get_field("email")            # explicit
    node.email                         # convenience
    node["email"]                      # plain (unsuffixed) mapping name

Names that are not attributes of the node itself are looked up among the
node-local methods of the blueprint, then among the fields, and finally
forwarded to the first reachable node that defines them, so that a trait may call methods
of its host and vice versa. Names starting with an underscore never take
part in this lookup.
"""

from __future__ import annotations

import types
from typing import TYPE_CHECKING, Any

from flat_mapper.core.exceptions import FieldNotFoundError

if TYPE_CHECKING:
    from flat_mapper.blueprint.plan import Blueprint
    from flat_mapper.mapping.mapping import Mapping
    from flat_mapper.node.base import Node


class AttributeMixin:
    """Mapping index, field accessors and delegation."""

    _blueprint: Blueprint
    _mappings_cache: list[Mapping] | None
    _field_index_cache: dict[str, Mapping] | None
    _building_mountings: bool

    # --- Mappings ---

    def mappings(self) -> list[Mapping]:
        """Mappings declared by the node's own blueprint."""
        if self._mappings_cache is None:
            self._mappings_cache = [m.create(self) for m in self._blueprint.mappings]  # type: ignore[arg-type]
        return self._mappings_cache

    def field_index(self) -> dict[str, Mapping]:
        """``full_name -> Mapping`` for every reachable mapping, built once."""
        owner = self.owner  # type: ignore[attr-defined]
        if owner is not None:
            return owner.field_index()
        if self._field_index_cache is None:
            index: dict[str, Mapping] = {}
            for mapping in self.all_mappings():  # type: ignore[attr-defined]
                # Later mappings win, as they do in read()
                index[mapping.full_name] = mapping
            self._field_index_cache = index
        return self._field_index_cache

    @property
    def field_names(self) -> list[str]:
        """Full names of all reachable fields."""
        return list(self.field_index())

    def mapping(self, name: str) -> Mapping | None:
        """Find a reachable mapping by its plain (unsuffixed) name."""
        for mapping in self.all_mappings():  # type: ignore[attr-defined]
            if mapping.name == name:
                return mapping
        return None

    # --- Explicit field API ---

    def get_field(self, name: str, *args: Any) -> Any:
        """Read the field with full name *name*.

        Extra *args* are passed to the reader, e.g. format arguments.

        Raises:
            FieldNotFoundError: If no reachable mapping has that name.
        """
        mapping = self.field_index().get(name)
        if mapping is None:
            raise FieldNotFoundError(name, type(self).__name__)
        return mapping.read(*args)

    def set_field(self, name: str, value: Any) -> None:
        """Write the field with full name *name*.

        Raises:
            FieldNotFoundError: If no reachable mapping has that name.
        """
        mapping = self.field_index().get(name)
        if mapping is None:
            raise FieldNotFoundError(name, type(self).__name__)
        mapping.write(value)

    def responds_to(self, name: str) -> bool:
        """Check if *name* is a field, an attribute or a delegated method of the node."""
        if name.startswith("_"):
            return hasattr(self, name)
        return (
            name in self.field_index()
            or self._responds_directly(name)
            or self._delegate_for(name) is not None
        )

    def read_attribute_for_validation(self, attr: str) -> Any:
        """Value checked by validation rules declared for *attr*.

        Tries the suffixed full name first, then the plain name, then any
        attribute of the node.
        """
        index = self.field_index()
        suffix = self.suffix  # type: ignore[attr-defined]
        if suffix and f"{attr}_{suffix}" in index:
            return index[f"{attr}_{suffix}"].read()
        if attr in index:
            return index[attr].read()
        return getattr(self, attr)

    def read(self) -> dict[str, Any]:
        """Flat ``{full_name: value}`` of the node and all its children."""
        result: dict[str, Any] = {}
        for mapping in self.mappings():
            result.update(mapping.read_as_params())
        for mounting in self.mountings():  # type: ignore[attr-defined]
            result.update(mounting.read())
        return result

    # --- Delegation ---

    def _local_method(self, name: str) -> Any:
        func = self._blueprint.method(name)
        return types.MethodType(func, self) if func is not None else None

    def _responds_directly(self, name: str) -> bool:
        """Defined by the node itself, without delegation."""
        if hasattr(type(self), name) or name in self.__dict__:
            return True
        if self._blueprint.method(name) is not None:
            return True
        return any(m.full_name == name for m in self.mappings())

    def _delegate_for(self, name: str) -> Node | None:
        for node in self.all_mountings():  # type: ignore[attr-defined]
            if node is not self and node._responds_directly(name):
                return node
        return None

    # --- Convenience layer ---

    def __getattr__(self, name: str) -> Any:
        # Only called when regular lookup fails
        if name.startswith("_"):
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

        # Node-local methods shadow fields and are available while the
        # mountings are still being created
        method = self._local_method(name)
        if method is not None:
            return method

        # Fields and delegates need the mountings that are being created
        if self._building_mountings:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

        mapping = self.field_index().get(name)
        if mapping is not None:
            return mapping.read()

        delegate = self._delegate_for(name)
        if delegate is not None:
            return getattr(delegate, name)

        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_") or name in self.__dict__ or hasattr(type(self), name):
            object.__setattr__(self, name, value)
            return
        mapping = self.field_index().get(name)
        if mapping is not None:
            mapping.write(value)
        else:
            object.__setattr__(self, name, value)

    def __getitem__(self, name: str) -> Any:
        mapping = self.mapping(name)
        if mapping is None:
            raise KeyError(name)
        return mapping.read()

    def __setitem__(self, name: str, value: Any) -> None:
        mapping = self.mapping(name)
        if mapping is None:
            raise KeyError(name)
        mapping.write(value)

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self.field_names))
