"""
Database: the connection handle every statement is built from and run on.

    db = Database({"driver": "mysql", "host": "localhost", "user": "sym",
                   "password": "...", "database": "symnext", "table_prefix": "sym_"})
    rows = db.select(["id", "handle"]).from_("tbl_sections").where({"id": 4}).execute().rows()

The handle owns the connection (opened lazily on first execution), the table
prefix, the logging and caching toggles, the query log and the query counter.
It is not thread-safe: one handle per thread or request.
"""

from __future__ import annotations

import hashlib
import logging
import time
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Callable, NamedTuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from symnext_db.core.cache import DatabaseCache
from symnext_db.core.config import SLOW_QUERY_THRESHOLD, DatabaseConfig, DriverEnum, Settings
from symnext_db.core.connect import Driver, connect, cursor_to_dicts, execute, get_driver
from symnext_db.core.errors import DatabaseError, DatabaseStatementError
from symnext_db.core.param_type import driver_params, typed_parameters
from symnext_db.core.safety import validate_sql_query
from symnext_db.core.script import split_statements
from symnext_db.results import DatabaseStatementResult
from symnext_db.statements import (
    DatabaseAlter,
    DatabaseCreate,
    DatabaseDelete,
    DatabaseDescribe,
    DatabaseDrop,
    DatabaseInsert,
    DatabaseOptimize,
    DatabaseQuery,
    DatabaseRename,
    DatabaseSet,
    DatabaseShow,
    DatabaseStatement,
    DatabaseTruncate,
    DatabaseUpdate,
    get_statement_class,
)
from symnext_db.transaction import DatabaseTransaction

logger = logging.getLogger(__name__)


class QueryLogEntry(NamedTuple):
    query: str  # formatted SQL
    query_hash: str  # md5 of the executed SQL
    query_values: dict[str, Any] | list[Any]
    query_safe: bool
    execution_time: float  # seconds


class Database:
    """One connection to one database, plus the query builders for it."""

    def __init__(self, config: DatabaseConfig | Mapping[str, Any] | None = None) -> None:
        if config is None:
            config = DatabaseConfig()
        elif not isinstance(config, DatabaseConfig):
            config = DatabaseConfig.model_validate(dict(config))
        self._config = config
        self._driver = get_driver(config.driver)
        self._conn: Any = None
        self._prefix = config.table_prefix
        self._logging = config.query_logging
        self._caching = config.query_caching
        self._cache = DatabaseCache()
        self._log: list[QueryLogEntry] = []
        self._query_count = 0
        self._in_transaction = False
        self.flush()

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> Database:
        """Build a handle from ``DB_*`` environment variables."""
        return cls((settings or Settings()).database_config())

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    @property
    def driver(self) -> Driver:
        return self._driver

    @property
    def quote_char(self) -> str:
        return self._driver.quote_char

    def get_prefix(self) -> str:
        return self._prefix

    def set_prefix(self, prefix: str) -> Database:
        """Table prefix replacing the ``tbl_`` marker in table names."""
        self._prefix = prefix
        return self

    def is_caching_enabled(self) -> bool:
        return self._caching

    def get_cache(self) -> DatabaseCache:
        return self._cache

    def is_logging_enabled(self) -> bool:
        return self._logging

    def enable_logging(self) -> Database:
        self._logging = True
        return self

    def disable_logging(self) -> Database:
        self._logging = False
        return self

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    def connect(self) -> Database:
        """Open the connection. Called automatically by the first execution."""
        if self._conn is None:
            try:
                self._conn = connect(self._config)
            except self._driver.error_class as e:
                logger.error("Could not connect to the %s database: %s", self._driver.name.value, e)
                raise DatabaseError.from_driver_error(e, None) from e
        return self

    def is_connected(self) -> bool:
        return self._conn is not None

    def connection(self) -> Any:
        """The DB-API connection, opened if needed."""
        self.connect()
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            try:
                self._conn.close()
            finally:
                self._conn = None
                self._in_transaction = False
        self.flush()

    def get_version(self) -> str:
        """Server version string."""
        return self.select([self._driver.version_function]).execute().string(0)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def flush(self) -> None:
        """Forget the last query state."""
        self._last_query: str | None = None
        self._last_query_hash: str | None = None
        self._last_query_values: dict[str, Any] | list[Any] | None = None
        self._last_query_safe: bool | None = None

    def get_last_query(self) -> dict[str, Any]:
        return {
            "query": self._last_query,
            "query_hash": self._last_query_hash,
            "query_values": self._last_query_values,
            "query_safe": self._last_query_safe,
        }

    def execute(self, stm: DatabaseStatement) -> DatabaseStatementResult:
        """Validate, bind and run *stm*; return what ``stm.results()`` makes of the cursor.

        The injection guard runs before anything is sent to the backend: strict
        for builder-made statements, relaxed for unsafe (import) statements.
        """
        conn = self.connection()
        sql = stm.generate_sql()
        values = stm.get_values()

        self.flush()
        self._last_query = stm.generate_formatted_sql()
        self._last_query_hash = hashlib.md5(sql.encode("utf-8")).hexdigest()
        self._last_query_values = values
        self._last_query_safe = stm.is_safe()

        validate_sql_query(sql, strict=stm.is_safe())
        if stm.is_safe():
            stm.check_placeholders(sql, values)

        params = driver_params(typed_parameters(values))
        start = time.perf_counter()
        try:
            cursor = execute(conn, sql, params, driver=self._driver)
        except self._driver.error_class as e:
            logger.error("Query failed: %s. SQL: %s", e, sql)
            raise DatabaseError.from_driver_error(e, sql) from e
        elapsed = time.perf_counter() - start

        self._query_count += 1
        if self._logging:
            self._log.append(
                QueryLogEntry(
                    query=self._last_query,
                    query_hash=self._last_query_hash,
                    query_values=values,
                    query_safe=self._last_query_safe,
                    execution_time=elapsed,
                )
            )
        logger.debug("Query %s ran in %.5fs", self._last_query_hash, elapsed)
        if elapsed > SLOW_QUERY_THRESHOLD:
            logger.warning("Slow query (%.5fs): %s", elapsed, self._last_query)
        return stm.results(cursor)

    def query_count(self) -> int:
        """Number of statements sent to the backend by this handle."""
        return self._query_count

    def get_logs(self) -> list[QueryLogEntry]:
        return list(self._log)

    def get_statistics(self) -> dict[str, Any]:
        """Query count, slow queries and total query time of the logged queries."""
        slow = [entry for entry in self._log if entry.execution_time > SLOW_QUERY_THRESHOLD]
        total = sum(entry.execution_time for entry in self._log)
        return {
            "queries": self._query_count,
            "slow_queries": slow,
            "total_query_time": f"{total:.5f}",
        }

    # ------------------------------------------------------------------
    # Statement factories
    # ------------------------------------------------------------------

    def statement(self, action: str = "", safe: bool = True) -> DatabaseStatement:
        """A raw statement; *action* is used verbatim.

        Unsafe statements skip the strict guard and must only carry trusted SQL.
        """
        return DatabaseStatement(self, action, safe=safe)

    def statement_for(self, kind: str, *args: Any, **kwargs: Any) -> DatabaseStatement:
        """Build a statement of *kind* (``"select"``, ``"drop"``, ...)."""
        return get_statement_class(kind)(self, *args, **kwargs)

    def select(self, projection: list[str] | None = None) -> DatabaseQuery:
        return DatabaseQuery(self, projection)

    def show(self) -> DatabaseShow:
        return DatabaseShow(self)

    def show_columns(self) -> DatabaseShow:
        return DatabaseShow(self, "COLUMNS")

    def show_full_columns(self) -> DatabaseShow:
        return DatabaseShow(self, "COLUMNS", "FULL")

    def show_index(self) -> DatabaseShow:
        return DatabaseShow(self, "INDEX")

    def describe(self, table: str) -> DatabaseDescribe:
        return DatabaseDescribe(self, table)

    def insert(self, table: str) -> DatabaseInsert:
        return DatabaseInsert(self, table)

    def update(self, table: str) -> DatabaseUpdate:
        return DatabaseUpdate(self, table)

    def delete(self, table: str) -> DatabaseDelete:
        return DatabaseDelete(self, table)

    def create(self, table: str) -> DatabaseCreate:
        """CREATE TABLE preset with the configured engine, charset and collation."""
        stm = DatabaseCreate(self, table)
        if self._config.engine:
            stm.engine(self._config.engine)
        if self._config.charset:
            stm.charset(self._config.charset)
        if self._config.collate:
            stm.collate(self._config.collate)
        return stm

    def alter(self, table: str) -> DatabaseAlter:
        return DatabaseAlter(self, table)

    def drop(self, table: str) -> DatabaseDrop:
        return DatabaseDrop(self, table)

    def rename(self, table: str) -> DatabaseRename:
        return DatabaseRename(self, table)

    def optimize(self, table: str) -> DatabaseOptimize:
        return DatabaseOptimize(self, table)

    def truncate(self, table: str) -> DatabaseTruncate:
        return DatabaseTruncate(self, table)

    def set(self, variable: str) -> DatabaseSet:
        return DatabaseSet(self, variable)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def transaction(self, tx: Callable[[Database], Any]) -> DatabaseTransaction:
        return DatabaseTransaction(self, tx)

    def in_transaction(self) -> bool:
        return self._in_transaction

    def begin_transaction(self) -> None:
        if self._in_transaction:
            raise DatabaseStatementError("Nested transactions are not supported")
        conn = self.connection()
        try:
            self._driver.begin(conn)
        except self._driver.error_class as e:
            raise DatabaseError.from_driver_error(e, "BEGIN") from e
        self._in_transaction = True

    def commit(self) -> bool:
        """Commit the current transaction; False (logged) when the backend refuses."""
        try:
            self.connection().commit()
            return True
        except self._driver.error_class as e:
            logger.warning("Commit failed: %s", e)
            return False
        finally:
            self._in_transaction = False

    def roll_back(self) -> bool:
        """Roll back the current transaction; False (logged) when the backend refuses."""
        try:
            self.connection().rollback()
            return True
        except self._driver.error_class as e:
            logger.warning("Rollback failed: %s", e)
            return False
        finally:
            self._in_transaction = False

    # ------------------------------------------------------------------
    # Scripts and helpers
    # ------------------------------------------------------------------

    def import_sql(self, sql: str) -> bool:
        """Run a multi-statement script (install/update dumps) in one transaction.

        Statements run unsafe: trusted SQL only. ``tbl_`` is replaced by the
        table prefix. Returns False when a statement failed and the script was
        rolled back.
        """
        queries = split_statements(sql)
        if not queries:
            raise ValueError("Nothing to import: the script holds no statements")

        def run(db: Database) -> None:
            for query in queries:
                stm = DatabaseStatement(db, safe=False)
                stm.unsafe_append_sql_part("statement", stm.replace_table_prefix(query))
                stm.execute()

        return self.transaction(run).execute().success()

    def set_time_zone(self, timezone: str | None = None) -> None:
        """Set the session time zone from an IANA name (sent as a ``+HH:MM`` offset)."""
        if not timezone:
            return
        try:
            offset = datetime.now(ZoneInfo(timezone)).strftime("%z")
        except ZoneInfoNotFoundError as e:
            raise ValueError(f"Unknown time zone: {timezone}") from e
        self.set("time_zone").value(f"{offset[:3]}:{offset[3:]}").execute()

    def table_exists(self, table: str) -> bool:
        if self._driver.name == DriverEnum.SQLITE:
            rows = (
                self.select(["name"])
                .from_("sqlite_master")
                .where({"type": "table", "name": self._as_table_name(table)})
                .execute()
                .rows()
            )
        else:
            rows = self.show().like(table).execute().rows()
        return bool(rows)

    def table_contains_field(self, table: str, field: str) -> bool:
        if self._driver.name == DriverEnum.SQLITE:
            stm = self.statement(f"PRAGMA table_info({self._as_quoted_table(table)})")
            columns = cursor_to_dicts(stm.execute().statement())
            return any(col["name"] == field for col in columns)
        return bool(self.describe(table).field(field).execute().rows())

    def get_insert_id(self) -> int:
        """Id generated by the last INSERT on this connection."""
        return self.select([self._driver.insert_id_function]).execute().integer(0)

    def _as_table_name(self, table: str) -> str:
        return DatabaseStatement(self).replace_table_prefix(table)

    def _as_quoted_table(self, table: str) -> str:
        return DatabaseStatement(self).as_table(table)
