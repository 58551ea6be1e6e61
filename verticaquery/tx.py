"""Starting, committing and rolling back transactions."""

from __future__ import annotations

import enum
from types import TracebackType
from typing import Callable, Optional, Union

Execute = Callable[[str], object]


class IsolationLevel(enum.IntEnum):
    """Transaction isolation levels a caller may ask for."""

    DEFAULT = 0
    READ_UNCOMMITTED = 1
    READ_COMMITTED = 2
    WRITE_COMMITTED = 3
    REPEATABLE_READ = 4
    SNAPSHOT = 5
    SERIALIZABLE = 6
    LINEARIZABLE = 7

    @property
    def label(self) -> str:
        """Human-readable name of the level."""
        return self.name.replace("_", " ").title()


_ISOLATION_CLAUSES = {
    IsolationLevel.DEFAULT: "",
    IsolationLevel.READ_UNCOMMITTED: " ISOLATION LEVEL READ UNCOMMITTED",
    IsolationLevel.READ_COMMITTED: " ISOLATION LEVEL READ COMMITTED",
    IsolationLevel.SERIALIZABLE: " ISOLATION LEVEL SERIALIZABLE",
    IsolationLevel.REPEATABLE_READ: " ISOLATION LEVEL REPEATABLE READ",
}


def begin_statement(
    isolation: Union[IsolationLevel, int] = IsolationLevel.DEFAULT,
    read_only: bool = False,
) -> str:
    """Return the statement that starts a transaction with the given options."""
    try:
        level = IsolationLevel(isolation)
    except ValueError:
        raise ValueError(
            f"unsupported transaction isolation level: IsolationLevel({isolation})"
        ) from None
    clause = _ISOLATION_CLAUSES.get(level)
    if clause is None:
        raise ValueError(f"unsupported transaction isolation level: {level.label}")
    access = " READ ONLY" if read_only else " READ WRITE"
    return "START TRANSACTION" + clause + access


class Transaction:
    """An open transaction; commits or rolls back through ``execute``.

    Used as a context manager it commits on a clean exit and rolls back
    when an exception escapes, which is then re-raised.
    """

    def __init__(self, execute: Execute) -> None:
        self._execute = execute

    def commit(self) -> None:
        """Commit the transaction."""
        self._execute("COMMIT")

    def rollback(self) -> None:
        """Roll the transaction back."""
        self._execute("ROLLBACK")

    def __enter__(self) -> "Transaction":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        if exc_type is None:
            self.commit()
        else:
            self.rollback()


def begin(
    execute: Execute,
    isolation: Union[IsolationLevel, int] = IsolationLevel.DEFAULT,
    read_only: bool = False,
) -> Transaction:
    """Start a transaction by running its start statement through ``execute``."""
    statement = begin_statement(isolation, read_only)
    execute(statement)
    return Transaction(execute)