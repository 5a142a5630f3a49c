"""INSERT INTO statements, with optional ON DUPLICATE KEY UPDATE."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from symnext_db.core.errors import DatabaseStatementError
from symnext_db.statements.base import DatabaseStatement

if TYPE_CHECKING:
    from symnext_db.database import Database


class DatabaseInsert(DatabaseStatement):
    """``INSERT INTO `table` (`a`, `b`) VALUES (:a, :b)``."""

    def __init__(self, db: Database, table: str) -> None:
        super().__init__(db, "INSERT INTO")
        self.unsafe_append_sql_part("table", self.as_table(table))
        self._columns: list[str] = []

    def get_statement_structure(self) -> list[str]:
        return ["statement", "table", "cols", "values", "on duplicate"]

    def get_separator_for_part_type(self, part: str) -> str:
        if part in ("values", "on duplicate"):
            return "\n"
        return " "

    def values(self, values: Mapping[str, Any]) -> DatabaseInsert:
        """Column -> value mapping of the row to insert. Can only be called once."""
        self._require_once("values", "values")
        if not isinstance(values, Mapping) or not values:
            raise DatabaseStatementError("DatabaseInsert needs a non-empty mapping of values")
        self._columns = list(values)
        self.unsafe_append_sql_part("cols", f"({self.as_ticked_list(self._columns)})")
        placeholders = ", ".join(self.bind_value("values", col, value) for col, value in values.items())
        self.unsafe_append_sql_part("values", f"VALUES ({placeholders})")
        return self

    def update_on_duplicate_key(self) -> DatabaseInsert:
        """On a key conflict, overwrite the existing row with the inserted values."""
        self._require_once("on duplicate", "on duplicate key")
        if not self._columns:
            raise DatabaseStatementError("DatabaseInsert needs values() before update_on_duplicate_key()")
        assignments = ", ".join(
            f"{ticked} = VALUES({ticked})" for ticked in (self.as_ticked_string(c) for c in self._columns)
        )
        self.unsafe_append_sql_part("on duplicate", f"ON DUPLICATE KEY UPDATE {assignments}")
        return self

    def finalize(self) -> DatabaseInsert:
        if not self.is_finalized() and not self.contains_sql_parts("values"):
            raise DatabaseStatementError("DatabaseInsert can not run without values")
        return super().finalize()
