"""ALTER TABLE statements: a comma separated list of operations."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from symnext_db.core.errors import DatabaseStatementError
from symnext_db.statements.base import DatabaseStatement
from symnext_db.statements.columns import DatabaseColumnDefinition, validate_name

if TYPE_CHECKING:
    from symnext_db.database import Database


def _as_list(value: str | list[str]) -> list[str]:
    return [value] if isinstance(value, str) else list(value)


class DatabaseAlter(DatabaseColumnDefinition, DatabaseStatement):
    """``ALTER TABLE `table` ADD COLUMN ..., DROP KEY ...``."""

    LIST_PARTS = frozenset({"operations"})

    def __init__(self, db: Database, table: str) -> None:
        super().__init__(db, "ALTER TABLE")
        self.unsafe_append_sql_part("table", self.as_table(table))

    def get_statement_structure(self) -> list[str]:
        return ["statement", "table", "operations"]

    def _operation(self, sql: str) -> DatabaseAlter:
        self.unsafe_append_sql_part("operations", sql)
        return self

    # ------------------------------------------------------------------
    # Columns
    # ------------------------------------------------------------------

    def add(self, columns: Mapping[str, Any]) -> DatabaseAlter:
        for name, options in columns.items():
            self._operation(f"ADD COLUMN {self.build_column_definition(name, options, 'operations')}")
        return self

    def drop(self, columns: str | list[str]) -> DatabaseAlter:
        for name in _as_list(columns):
            self._operation(f"DROP COLUMN {self.as_ticked_string(name)}")
        return self

    def change(self, old_name: str, columns: Mapping[str, Any]) -> DatabaseAlter:
        """Rename and redefine *old_name*: ``change("a", {"b": "int(11)"})``."""
        if len(columns) != 1:
            raise DatabaseStatementError("change() expects exactly one new column definition")
        ((name, options),) = columns.items()
        definition = self.build_column_definition(name, options, "operations")
        return self._operation(f"CHANGE COLUMN {self.as_ticked_string(old_name)} {definition}")

    def modify(self, columns: Mapping[str, Any]) -> DatabaseAlter:
        for name, options in columns.items():
            self._operation(f"MODIFY COLUMN {self.build_column_definition(name, options, 'operations')}")
        return self

    def first(self) -> DatabaseAlter:
        """Place the column of the last operation first."""
        self.amend_last_sql_part("operations", " FIRST", "first")
        return self

    def after(self, column: str) -> DatabaseAlter:
        """Place the column of the last operation after *column*."""
        self.amend_last_sql_part("operations", f" AFTER {self.as_ticked_string(column)}", "after")
        return self

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    def add_key(self, keys: Mapping[str, Any]) -> DatabaseAlter:
        for name, options in keys.items():
            self._operation(f"ADD {self.build_key_definition(name, options)}")
        return self

    def drop_key(self, keys: str | list[str]) -> DatabaseAlter:
        for name in _as_list(keys):
            self._operation(f"DROP KEY {self.as_ticked_string(name)}")
        return self

    def add_index(self, indexes: Mapping[str, Any] | str | list[str]) -> DatabaseAlter:
        """Index names -> columns; a bare name indexes the column of the same name."""
        if not isinstance(indexes, Mapping):
            indexes = {name: [name] for name in _as_list(indexes)}
        for name, cols in indexes.items():
            self._operation(f"ADD {self.build_key_definition(name, {'type': 'index', 'cols': cols})}")
        return self

    def drop_index(self, indexes: str | list[str]) -> DatabaseAlter:
        for name in _as_list(indexes):
            self._operation(f"DROP INDEX {self.as_ticked_string(name)}")
        return self

    def add_primary_key(self, columns: str | list[str]) -> DatabaseAlter:
        return self._operation(f"ADD PRIMARY KEY ({self.as_ticked_list(_as_list(columns))})")

    def drop_primary_key(self) -> DatabaseAlter:
        return self._operation("DROP PRIMARY KEY")

    # ------------------------------------------------------------------
    # Table options
    # ------------------------------------------------------------------

    def charset(self, charset: str) -> DatabaseAlter:
        return self._operation(f"CHARACTER SET {validate_name(charset, 'charset')}")

    def collate(self, collate: str) -> DatabaseAlter:
        return self._operation(f"COLLATE {validate_name(collate, 'collation')}")

    def finalize(self) -> DatabaseAlter:
        if not self.is_finalized() and not self.contains_sql_parts("operations"):
            raise DatabaseStatementError("DatabaseAlter needs at least one operation")
        return super().finalize()
