"""Transaction management.

Wraps a unit-of-work connection (anything with ``commit()`` and
``rollback()``, such as ``sqlite3.Connection``) so that ``Node.apply`` can
run its save phase atomically. Auto-commits on success, auto-rolls-back on
exception. A save that merely returns ``False`` is committed as is: the
engine never rolls back on its own.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from flat_mapper.core.exceptions import TransactionStateError

logger = logging.getLogger(__name__)


class _TxState(Enum):
    IDLE = "idle"
    ACTIVE = "active"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@runtime_checkable
class UnitOfWork(Protocol):
    """Connection-like object a transaction commits or rolls back."""

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


class TransactionManager:
    """Synchronous transaction context manager."""

    def __init__(self, connection: UnitOfWork, begin: bool = False) -> None:
        self._connection = connection
        self._begin = begin
        self._state = _TxState.IDLE

    @property
    def connection(self) -> UnitOfWork:
        return self._connection

    @property
    def state(self) -> str:
        return self._state.value

    def __enter__(self) -> TransactionManager:
        if self._state != _TxState.IDLE:
            raise TransactionStateError(self._state.value, "begin")
        if self._begin and hasattr(self._connection, "begin"):
            self._connection.begin()
        self._state = _TxState.ACTIVE
        logger.debug("Transaction started on %r", self._connection)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        if self._state != _TxState.ACTIVE:
            return
        if exc_type is not None:
            logger.debug("Rolling back transaction after %s", exc_type.__name__)
            self._connection.rollback()
            self._state = _TxState.ROLLED_BACK
        else:
            self._connection.commit()
            self._state = _TxState.COMMITTED

    def commit(self) -> None:
        """Explicitly commit the transaction."""
        if self._state == _TxState.IDLE:
            raise TransactionStateError("idle", "commit")
        if self._state == _TxState.ROLLED_BACK:
            raise TransactionStateError("rolled_back", "commit")
        if self._state == _TxState.COMMITTED:
            raise TransactionStateError("committed", "commit")
        self._connection.commit()
        self._state = _TxState.COMMITTED

    def rollback(self) -> None:
        """Explicitly rollback the transaction."""
        if self._state == _TxState.IDLE:
            raise TransactionStateError("idle", "rollback")
        if self._state == _TxState.COMMITTED:
            raise TransactionStateError("committed", "rollback")
        self._connection.rollback()
        self._state = _TxState.ROLLED_BACK
