"""
Result wrappers returned by ``DatabaseStatement.execute()``.

- ``DatabaseStatementResult``: success flag plus the executed cursor
  (row count, last insert id). Returned by statements that produce no rows.
- ``DatabaseTabularResult``: a forward-only cursor over rows with a strict
  state machine. ``next()`` returns one row at a time and ``None`` exactly once
  at the end of the stream; calling it again raises. ``rows()`` only works
  before anything was consumed.
"""

from __future__ import annotations

from enum import Enum
from types import SimpleNamespace
from typing import Any, Iterator

from symnext_db.core.connect import column_names, row_to_dict
from symnext_db.core.errors import DatabaseStatementError, ErrorKind
from symnext_db.reducer import ArrayReducer


class FetchType(str, Enum):
    """Shape of returned rows: dict (ASSOC) or attribute object (OBJ)."""

    ASSOC = "assoc"
    OBJ = "obj"


class FetchOrientation(str, Enum):
    """How offset() is applied: relative to the current row (NEXT) or from the first row (ABS)."""

    NEXT = "next"
    ABS = "abs"


class RowListCursor:
    """Minimal cursor over already materialized dict rows (cached results)."""

    lastrowid = None

    def __init__(self, rows: list[dict[str, Any]]) -> None:
        self._rows = rows
        self._index = 0
        self.rowcount = len(rows)
        # DB-API 7-item description; only the name is known.
        self.description = [(name, None, None, None, None, None, None) for name in rows[0]] if rows else None

    def fetchone(self) -> dict[str, Any] | None:
        if self._index >= len(self._rows):
            return None
        row = self._rows[self._index]
        self._index += 1
        return dict(row)

    def close(self) -> None:
        self._index = len(self._rows)


class DatabaseStatementResult:
    """Outcome of one statement execution."""

    def __init__(self, success: bool, cursor: Any) -> None:
        self._success = success
        self._cursor = cursor

    def success(self) -> bool:
        return self._success

    def statement(self) -> Any:
        """The underlying DB-API cursor."""
        return self._cursor

    def row_count(self) -> int:
        """Rows affected by the statement; -1 when the driver does not know."""
        count = getattr(self._cursor, "rowcount", None)
        return -1 if count is None else count

    def last_insert_id(self) -> int:
        """Auto-increment id generated by an INSERT; -1 when there is none."""
        value = getattr(self._cursor, "lastrowid", None)
        try:
            return int(value) if value else -1
        except (TypeError, ValueError):
            return -1


class DatabaseTabularResult(DatabaseStatementResult):
    """Cursor-backed rows with offset/orientation/type controls and reducers."""

    def __init__(self, success: bool, cursor: Any) -> None:
        super().__init__(success, cursor)
        self._offset = 0
        self._pending_offset = False
        self._type = FetchType.ASSOC
        self._orientation = FetchOrientation.NEXT
        self._eof = False
        self._position = -1
        self._cursor_index = 0
        self._names: list[str] | None = None

    def __iter__(self) -> Iterator[Any]:
        while True:
            row = self.next()
            if row is None:
                return
            yield row

    # ------------------------------------------------------------------
    # Cursor controls
    # ------------------------------------------------------------------

    def offset(self, offset: int) -> DatabaseTabularResult:
        """Skip rows before the next fetch (see orientation())."""
        if offset < 0:
            raise DatabaseStatementError("Offset must be a positive number", kind=ErrorKind.CURSOR)
        self._offset = offset
        self._pending_offset = True
        return self

    def fetch_type(self, fetch_type: FetchType) -> DatabaseTabularResult:
        if not isinstance(fetch_type, FetchType):
            raise DatabaseStatementError("Invalid fetch type", kind=ErrorKind.CURSOR)
        self._type = fetch_type
        return self

    def orientation(self, orientation: FetchOrientation) -> DatabaseTabularResult:
        if not isinstance(orientation, FetchOrientation):
            raise DatabaseStatementError("Invalid orientation type", kind=ErrorKind.CURSOR)
        self._orientation = orientation
        return self

    def _apply_offset(self) -> None:
        if not self._pending_offset:
            return
        self._pending_offset = False
        if self._orientation is FetchOrientation.ABS:
            target = self._offset
            if target < self._cursor_index:
                raise DatabaseStatementError(
                    f"Can not move the cursor back to row {target}, "
                    f"{self._cursor_index} rows were already read",
                    kind=ErrorKind.CURSOR,
                )
        else:
            target = self._cursor_index + self._offset
        while self._cursor_index < target:
            if self._cursor.fetchone() is None:
                break
            self._cursor_index += 1

    def _shape(self, row: Any) -> Any:
        if self._names is None:
            self._names = column_names(self._cursor)
        data = row_to_dict(self._names, row)
        if self._type is FetchType.OBJ:
            return SimpleNamespace(**data)
        return data

    def process(self, row: Any) -> Any:
        """Hook for sub-classes to transform each row; returns it unchanged."""
        return row

    # ------------------------------------------------------------------
    # Consumption
    # ------------------------------------------------------------------

    def next(self) -> Any:
        """Fetch the next row, or None once at the end of the stream.

        Raises DatabaseStatementError when called again after the end.
        """
        if self._eof:
            raise DatabaseStatementError(
                "Can not call next() after the cursor reached the end", kind=ErrorKind.CURSOR
            )
        self._apply_offset()
        row = self._cursor.fetchone()
        self._position += 1
        if row is None:
            self._eof = True
            return None
        self._cursor_index += 1
        return self.process(self._shape(row))

    def remaining_rows(self) -> list[Any]:
        rows = []
        while (row := self.next()) is not None:
            rows.append(row)
        return rows

    def rows(self) -> list[Any]:
        """All rows; fails if next() was already called."""
        if self._position != -1:
            consumed = self._position + 1
            raise DatabaseStatementError(
                f"Can not retrieve all rows, {consumed} were already consumed",
                kind=ErrorKind.CURSOR,
            )
        return self.remaining_rows()

    def column_count(self) -> int:
        return len(column_names(self._cursor))

    # ------------------------------------------------------------------
    # Reducers (consume all remaining rows)
    # ------------------------------------------------------------------

    def reducer(self) -> ArrayReducer:
        return ArrayReducer(self.remaining_rows(), self._type is FetchType.ASSOC)

    def column(self, col: str | int) -> list[Any]:
        return self.reducer().column(col)

    def rows_indexed_by_column(self, col: str | int) -> dict[Any, Any]:
        return self.reducer().rows_indexed_by_column(col)

    def rows_grouped_by_column(self, col: str | int) -> dict[Any, list[Any]]:
        return self.reducer().rows_grouped_by_column(col)

    def variable(self, col: str | int) -> Any:
        """Value of *col* in the next row. Can be None even if more rows exist."""
        return self.reducer().variable(col)

    def integer(self, col: str | int) -> int:
        return self.reducer().integer(col)

    def float(self, col: str | int) -> float:
        return self.reducer().float(col)

    def boolean(self, col: str | int) -> bool:
        """See reducer.to_boolean for the coercion rules."""
        return self.reducer().boolean(col)

    def string(self, col: str | int) -> str:
        return self.reducer().string(col)
