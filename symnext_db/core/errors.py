"""
Error taxonomy for statement building and execution.

Every failure raised by this package is a ``DatabaseError``. The ``kind``
field tells callers which layer rejected the work:

- ``STRUCTURE``: builder misuse (duplicate exactly-once clause, mixed
  placeholder modes, placeholder/value mismatch). Raised at build time.
- ``VALIDATION``: the injection guard rejected the serialized SQL. Raised
  before the backend is contacted.
- ``BACKEND``: the driver failed to prepare/execute. Carries the backend
  code, message and the failing SQL.
- ``CURSOR``: tabular result misuse (``next()`` after EOF, ``rows()``
  after partial consumption).
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Which layer produced a DatabaseError."""

    STRUCTURE = "structure"
    VALIDATION = "validation"
    BACKEND = "backend"
    CURSOR = "cursor"


class DatabaseError(Exception):
    """Raised when a query fails; keeps the backend error details as fields."""

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind = ErrorKind.BACKEND,
        code: Any = None,
        db_message: str | None = None,
        query: str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.code = code
        self.db_message = db_message
        self.query = query

    @classmethod
    def from_driver_error(cls, exc: BaseException, query: str | None) -> "DatabaseError":
        """Wrap a DB-API driver exception (PyMySQL, sqlite3)."""
        code, msg = _driver_error_info(exc)
        message = f"Database Error ({code}): {msg}"
        if query is not None:
            message += f" in query: {query}"
        return cls(
            message,
            kind=ErrorKind.BACKEND,
            code=code,
            db_message=msg,
            query=query,
        )


class DatabaseStatementError(DatabaseError):
    """Raised for structural, validation and cursor-state errors."""

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind = ErrorKind.STRUCTURE,
        query: str | None = None,
    ) -> None:
        super().__init__(message, kind=kind, query=query)

    def sql(self, query: str) -> "DatabaseStatementError":
        """Attach the offending SQL and return self (for ``raise ... .sql(q)``)."""
        self.query = query
        return self


def _driver_error_info(exc: BaseException) -> tuple[Any, str]:
    """Extract (code, message) from a driver error.

    PyMySQL errors carry ``(errno, message)`` in ``args``; sqlite3 errors carry
    the message in ``args[0]`` and the code in ``sqlite_errorcode``.
    """
    args = getattr(exc, "args", ()) or ()
    if len(args) >= 2 and isinstance(args[0], int):
        return args[0], str(args[1])
    code = getattr(exc, "sqlite_errorcode", 0)
    msg = str(args[0]) if args else str(exc)
    return code, msg
