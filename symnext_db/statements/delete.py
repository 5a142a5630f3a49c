"""DELETE FROM statements."""

from __future__ import annotations

from typing import TYPE_CHECKING

from symnext_db.statements.base import DatabaseStatement
from symnext_db.statements.clauses import DatabaseOrderLimitDefinition, DatabaseWhereDefinition

if TYPE_CHECKING:
    from symnext_db.database import Database


class DatabaseDelete(DatabaseWhereDefinition, DatabaseOrderLimitDefinition, DatabaseStatement):
    """``DELETE FROM `table` WHERE ...``. Without where() every row goes."""

    LIST_PARTS = frozenset({"order by"})

    def __init__(self, db: Database, table: str) -> None:
        super().__init__(db, "DELETE FROM")
        self.unsafe_append_sql_part("table", self.as_table(table))

    def get_statement_structure(self) -> list[str]:
        return ["statement", "table", "where", "order by", "limit"]

    def get_separator_for_part_type(self, part: str) -> str:
        if part in ("where", "order by", "limit"):
            return "\n"
        return " "
