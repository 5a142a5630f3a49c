"""Whole-table statements: DROP, RENAME, OPTIMIZE and TRUNCATE."""

from __future__ import annotations

from typing import TYPE_CHECKING

from symnext_db.core.errors import DatabaseStatementError
from symnext_db.statements.base import DatabaseStatement

if TYPE_CHECKING:
    from symnext_db.database import Database


class DatabaseDrop(DatabaseStatement):
    """``DROP TABLE [IF EXISTS] `a`, `b```."""

    LIST_PARTS = frozenset({"table"})

    def __init__(self, db: Database, table: str) -> None:
        super().__init__(db, "DROP TABLE")
        self.table(table)

    def get_statement_structure(self) -> list[str]:
        return ["statement", "optimizer", "table"]

    def if_exists(self) -> DatabaseDrop:
        self._require_once("optimizer", "if exists")
        self.unsafe_append_sql_part("optimizer", "IF EXISTS")
        return self

    def table(self, table: str) -> DatabaseDrop:
        """Drop *table* too."""
        self.unsafe_append_sql_part("table", self.as_table(table))
        return self


class DatabaseRename(DatabaseStatement):
    """``RENAME TABLE `old` TO `new```."""

    def __init__(self, db: Database, table: str) -> None:
        super().__init__(db, "RENAME TABLE")
        self.unsafe_append_sql_part("table", self.as_table(table))

    def get_statement_structure(self) -> list[str]:
        return ["statement", "table", "to"]

    def to(self, table: str) -> DatabaseRename:
        """New table name. Can only be called once."""
        self._require_once("to", "to")
        self.unsafe_append_sql_part("to", f"TO {self.as_table(table)}")
        return self

    def finalize(self) -> DatabaseRename:
        if not self.is_finalized() and not self.contains_sql_parts("to"):
            raise DatabaseStatementError("DatabaseRename needs a new table name, call to()")
        return super().finalize()


class DatabaseOptimize(DatabaseStatement):
    """``OPTIMIZE TABLE `table```."""

    def __init__(self, db: Database, table: str) -> None:
        super().__init__(db, "OPTIMIZE TABLE")
        self.unsafe_append_sql_part("table", self.as_table(table))

    def get_statement_structure(self) -> list[str]:
        return ["statement", "table"]


class DatabaseTruncate(DatabaseStatement):
    """``TRUNCATE TABLE `table```."""

    def __init__(self, db: Database, table: str) -> None:
        super().__init__(db, "TRUNCATE TABLE")
        self.unsafe_append_sql_part("table", self.as_table(table))

    def get_statement_structure(self) -> list[str]:
        return ["statement", "table"]
