"""CREATE TABLE statements."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from symnext_db.core.errors import DatabaseStatementError
from symnext_db.statements.base import DatabaseStatement
from symnext_db.statements.columns import DatabaseColumnDefinition, validate_name

if TYPE_CHECKING:
    from symnext_db.database import Database


class DatabaseCreate(DatabaseColumnDefinition, DatabaseStatement):
    """``CREATE TABLE [IF NOT EXISTS] `table` (columns, keys) ENGINE=... ...``.

    Columns and keys render inside the same parentheses, columns first.
    """

    LIST_PARTS = frozenset({"fields", "keys"})

    def __init__(self, db: Database, table: str) -> None:
        super().__init__(db, "CREATE TABLE")
        self.unsafe_append_sql_part("table", self.as_table(table))

    def get_statement_structure(self) -> list[str]:
        return ["statement", "optimizer", "table", "fields", "engine", "charset", "collate"]

    def get_separator_for_part_type(self, part: str) -> str:
        if part in ("fields", "engine"):
            return "\n"
        return " "

    def render_part(self, part: str, fragments: list[str]) -> str:
        if part == "fields":
            return "(" + ", ".join(fragments + self.get_sql_parts("keys")) + ")"
        return super().render_part(part, fragments)

    def if_not_exists(self) -> DatabaseCreate:
        self._require_once("optimizer", "if not exists")
        self.unsafe_append_sql_part("optimizer", "IF NOT EXISTS")
        return self

    def fields(self, fields: Mapping[str, Any]) -> DatabaseCreate:
        """Column name -> definition (see statements.columns)."""
        for name, options in fields.items():
            self.unsafe_append_sql_part("fields", self.build_column_definition(name, options, "fields"))
        return self

    def keys(self, keys: Mapping[str, Any]) -> DatabaseCreate:
        """Key name -> key type or ``{"type", "cols"}``."""
        for name, options in keys.items():
            self.unsafe_append_sql_part("keys", self.build_key_definition(name, options))
        return self

    def engine(self, engine: str) -> DatabaseCreate:
        self._require_once("engine", "engine")
        self.unsafe_append_sql_part("engine", f"ENGINE={validate_name(engine, 'engine')}")
        return self

    def charset(self, charset: str) -> DatabaseCreate:
        self._require_once("charset", "charset")
        self.unsafe_append_sql_part("charset", f"DEFAULT CHARSET={validate_name(charset, 'charset')}")
        return self

    def collate(self, collate: str) -> DatabaseCreate:
        self._require_once("collate", "collate")
        self.unsafe_append_sql_part("collate", f"COLLATE={validate_name(collate, 'collation')}")
        return self

    def finalize(self) -> DatabaseCreate:
        if not self.is_finalized() and not self.contains_sql_parts("fields"):
            raise DatabaseStatementError("DatabaseCreate can not create a table without fields")
        return super().finalize()
