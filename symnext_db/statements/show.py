"""
SHOW and DESCRIBE statements.

Both are cacheable: when the handle has query caching on, the rows of an
execution are kept in the handle's ``DatabaseCache`` under a hash of the SQL
and its values, and later identical statements are answered from there
without reaching the backend.
"""

from __future__ import annotations

import hashlib
import json
from typing import TYPE_CHECKING, Any

from symnext_db.core.errors import DatabaseStatementError
from symnext_db.results import DatabaseTabularResult, RowListCursor
from symnext_db.statements.base import DatabaseStatement
from symnext_db.statements.clauses import DatabaseWhereDefinition

if TYPE_CHECKING:
    from symnext_db.database import Database

SHOW_TARGETS = ("TABLES", "COLUMNS", "INDEX")
SHOW_MODIFIERS = ("FULL", "EXTENDED")


class DatabaseCacheableExecutionDefinition:
    """Mixin serving tabular results from the handle's query cache."""

    _use_cache = True

    def disable_cache(self) -> Any:
        """Always ask the backend, even when the handle caches queries."""
        self._use_cache = False
        return self

    def cache_key(self) -> str:
        payload = json.dumps([self.generate_sql(), self.get_values()], sort_keys=True, default=str)
        return hashlib.md5(payload.encode("utf-8")).hexdigest()

    def execute(self) -> DatabaseTabularResult:
        db = self.get_db()
        if not (self._use_cache and db.is_caching_enabled()):
            return super().execute()
        if not self.is_finalized():
            self.finalize()
        cache = db.get_cache()
        key = self.cache_key()
        if not cache.has(key):
            cache.append_all(key, super().execute().rows())
        return self.results(RowListCursor(cache.get(key)))


class DatabaseShow(DatabaseCacheableExecutionDefinition, DatabaseWhereDefinition, DatabaseStatement):
    """``SHOW [FULL|EXTENDED] TABLES|COLUMNS|INDEX [FROM t] [LIKE ..] [WHERE ..]``."""

    def __init__(self, db: Database, show: str = "TABLES", modifier: str | None = None) -> None:
        if show not in SHOW_TARGETS:
            raise DatabaseStatementError("Can only show TABLES, COLUMNS or INDEX")
        statement = f"SHOW {show}"
        if modifier:
            if modifier not in SHOW_MODIFIERS:
                raise DatabaseStatementError("Can modify with FULL or EXTENDED")
            statement = f"SHOW {modifier} {show}"
        super().__init__(db, statement)

    def get_statement_structure(self) -> list[str]:
        return ["statement", "table", "like", "where"]

    def get_separator_for_part_type(self, part: str) -> str:
        if part in ("like", "where"):
            return "\n"
        return " "

    def from_(self, table: str) -> DatabaseShow:
        """Table to show columns or indexes of. Can only be called once."""
        self._require_once("table", "table")
        self.unsafe_append_sql_part("table", f"FROM {self.as_table(table)}")
        return self

    def like(self, value: str) -> DatabaseShow:
        """LIKE pattern, usually a table name (the prefix is replaced). Can only be called once."""
        self._require_once("like", "like")
        placeholder = self.bind_value("like", "like", self.replace_table_prefix(value))
        self.unsafe_append_sql_part("like", f"LIKE {placeholder}")
        return self

    def results(self, cursor: Any) -> DatabaseTabularResult:
        return DatabaseTabularResult(True, cursor)


class DatabaseDescribe(DatabaseCacheableExecutionDefinition, DatabaseStatement):
    """``DESC `table` [`field`]``."""

    def __init__(self, db: Database, table: str) -> None:
        super().__init__(db, "DESC")
        self.unsafe_append_sql_part("table", self.as_table(table))

    def get_statement_structure(self) -> list[str]:
        return ["statement", "table", "field"]

    def field(self, field: str) -> DatabaseDescribe:
        """Describe only *field*. Can only be called once."""
        self._require_once("field", "field")
        self.unsafe_append_sql_part("field", self.as_ticked_string(field))
        return self

    def results(self, cursor: Any) -> DatabaseTabularResult:
        return DatabaseTabularResult(True, cursor)
