"""Field error collection.

Errors are keyed by field full name. A node with a suffix rewrites every
key it adds (except ``"base"``) so that errors line up with the names
exposed by ``Node.read``.

Node-defined writers that catch their own exceptions can *preserve* an
error instead of adding it: validation clears added errors before running
rules, while preserved ones survive and are merged on the next
``is_empty()`` call, exactly once::

    def assign_code(self, mapping, value):
        try:
            self.target.code = parse_code(value)
        except ValueError as e:
            self.errors.preserve(mapping.name, str(e))
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from flat_mapper.node.base import Node

BASE = "base"


def _humanize(key: str) -> str:
    text = key.replace("_", " ").strip()
    return text[:1].upper() + text[1:]


class Errors:
    """Ordered ``key -> [message, ...]`` collection with suffix support."""

    def __init__(self, node: Node | None = None) -> None:
        self._node = node
        self._messages: dict[str, list[str]] = {}
        self._preserved: dict[str, str] = {}

    def __repr__(self) -> str:
        return f"<Errors {self._messages!r}>"

    def add(self, key: str, message: str = "is invalid") -> None:
        """Add *message* under *key*, suffixed with the node suffix."""
        self._messages.setdefault(self._key_for(key), []).append(message)

    def preserve(self, key: str, message: str) -> None:
        """Postpone an error until the next ``is_empty()`` call."""
        self._preserved[key] = message

    def is_empty(self) -> bool:
        """Return True if there are no messages, merging preserved errors first."""
        if self._preserved:
            for key, message in self._preserved.items():
                self.add(key, message)
            self._preserved.clear()
        return not any(self._messages.values())

    def merge(self, other: Errors | Mapping[str, list[str]]) -> None:
        """Merge already-keyed messages; lists under the same key concatenate."""
        messages = other.to_dict() if isinstance(other, Errors) else other
        for key, values in messages.items():
            self._messages.setdefault(key, []).extend(values)

    def clear(self) -> None:
        """Remove all messages. Preserved errors are kept."""
        self._messages.clear()

    def to_dict(self) -> dict[str, list[str]]:
        return {key: list(values) for key, values in self._messages.items() if values}

    def full_messages(self) -> list[str]:
        """Human readable messages, e.g. ``"First name can't be blank"``."""
        result = []
        for key, values in self._messages.items():
            for message in values:
                result.append(message if key == BASE else f"{_humanize(key)} {message}")
        return result

    def keys(self) -> list[str]:
        return [key for key, values in self._messages.items() if values]

    def __getitem__(self, key: str) -> list[str]:
        return list(self._messages.get(key, []))

    def __contains__(self, key: object) -> bool:
        return bool(self._messages.get(key))  # type: ignore[call-overload]

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return sum(len(values) for values in self._messages.values())

    def _key_for(self, key: str) -> str:
        if key == BASE or self._node is None:
            return key
        suffix = self._node.suffix
        return f"{key}_{suffix}" if suffix else key
