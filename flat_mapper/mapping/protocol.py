"""Reader and writer protocols.

Every mapping owns at most one reader and one writer. The node calls
``read`` for ``Node.read`` results and ``write`` for ``Node.write`` input.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Reader(Protocol):
    """Base reader protocol."""

    def read(self, *args: Any) -> Any:
        """Return the mapped value."""
        ...


@runtime_checkable
class Writer(Protocol):
    """Base writer protocol."""

    def write(self, value: Any) -> Any:
        """Assign the mapped value."""
        ...
