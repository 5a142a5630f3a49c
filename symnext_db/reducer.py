"""
ArrayReducer: typed extraction over a materialized row set.

Rows are dicts (``FetchType.ASSOC``) or ``SimpleNamespace`` objects
(``FetchType.OBJ``). Columns are addressed by name, or by 0-based position.
"""

from __future__ import annotations

import numbers
from typing import Any

from symnext_db.core.errors import DatabaseStatementError

_TRUE_STRINGS = ("yes", "true", "1")


def to_boolean(value: Any) -> bool:
    """Database value -> bool.

    bool is returned as is; strings (and bytes) are true for 'yes', 'true'
    and '1' (case-insensitive); numbers, Decimal included, are true when
    non-zero; anything else is false.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (bytes, bytearray)):
        value = value.decode()
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    if isinstance(value, numbers.Number):
        return value != 0
    return False


class ArrayReducer:
    """Reduce a list of rows to columns, single values, indexes and groups."""

    def __init__(self, rows: list[Any], associative: bool = True) -> None:
        self._rows = rows
        self._associative = associative

    def _value(self, row: Any, col: str | int) -> Any:
        data = row if self._associative else vars(row)
        if isinstance(col, int) and col not in data:
            values = list(data.values())
            if 0 <= col < len(values):
                return values[col]
        elif col in data:
            return data[col]
        raise DatabaseStatementError(f"Column {col!r} not found in row")

    def rows(self) -> list[Any]:
        return list(self._rows)

    def column(self, col: str | int) -> list[Any]:
        """All values of *col*, in row order."""
        return [self._value(row, col) for row in self._rows]

    def rows_indexed_by_column(self, col: str | int) -> dict[Any, Any]:
        """Rows keyed by the value of *col*, which must be unique."""
        indexed: dict[Any, Any] = {}
        for row in self._rows:
            key = self._value(row, col)
            if key in indexed:
                raise DatabaseStatementError(
                    f"Can not index by column {col!r}: value {key!r} is not unique"
                )
            indexed[key] = row
        return indexed

    def rows_grouped_by_column(self, col: str | int) -> dict[Any, list[Any]]:
        grouped: dict[Any, list[Any]] = {}
        for row in self._rows:
            grouped.setdefault(self._value(row, col), []).append(row)
        return grouped

    def variable(self, col: str | int) -> Any:
        """Value of *col* in the first row; None when there are no rows."""
        if not self._rows:
            return None
        return self._value(self._rows[0], col)

    def integer(self, col: str | int) -> int:
        value = self.variable(col)
        if value is None:
            return 0
        if isinstance(value, (bytes, bytearray)):
            value = value.decode()
        try:
            return int(float(value)) if isinstance(value, (float, str)) else int(value)
        except (TypeError, ValueError) as e:
            raise DatabaseStatementError(f"Column {col!r} holds {value!r}, not an integer") from e

    def float(self, col: str | int) -> float:
        value = self.variable(col)
        if value is None:
            return 0.0
        if isinstance(value, (bytes, bytearray)):
            value = value.decode()
        try:
            return float(value)
        except (TypeError, ValueError) as e:
            raise DatabaseStatementError(f"Column {col!r} holds {value!r}, not a number") from e

    def boolean(self, col: str | int) -> bool:
        return to_boolean(self.variable(col))

    def string(self, col: str | int) -> str:
        value = self.variable(col)
        if value is None:
            return ""
        if isinstance(value, (bytes, bytearray)):
            return value.decode()
        return str(value)
