"""UPDATE statements."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from symnext_db.core.errors import DatabaseStatementError
from symnext_db.statements.base import DatabaseStatement
from symnext_db.statements.clauses import DatabaseOrderLimitDefinition, DatabaseWhereDefinition

if TYPE_CHECKING:
    from symnext_db.database import Database


class DatabaseUpdate(DatabaseWhereDefinition, DatabaseOrderLimitDefinition, DatabaseStatement):
    """``UPDATE `table` SET `a` = :a WHERE ...``."""

    LIST_PARTS = frozenset({"order by"})

    def __init__(self, db: Database, table: str) -> None:
        super().__init__(db, "UPDATE")
        self.unsafe_append_sql_part("table", self.as_table(table))

    def get_statement_structure(self) -> list[str]:
        return ["statement", "table", "values", "where", "order by", "limit"]

    def get_separator_for_part_type(self, part: str) -> str:
        if part in ("values", "where", "order by", "limit"):
            return "\n"
        return " "

    def set(self, values: Mapping[str, Any]) -> DatabaseUpdate:
        """Column -> new value mapping. Can only be called once."""
        self._require_once("values", "set")
        if not isinstance(values, Mapping) or not values:
            raise DatabaseStatementError("DatabaseUpdate needs a non-empty mapping of values")
        assignments = ", ".join(
            f"{self.as_ticked_string(col)} = {self.bind_value('values', col, value)}"
            for col, value in values.items()
        )
        self.unsafe_append_sql_part("values", f"SET {assignments}")
        return self

    def finalize(self) -> DatabaseUpdate:
        if not self.is_finalized() and not self.contains_sql_parts("values"):
            raise DatabaseStatementError("DatabaseUpdate can not run without set()")
        return super().finalize()
