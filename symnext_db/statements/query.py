"""
SELECT statements.

    db.select(["e.id", "COUNT(d.id) AS total"])
      .from_("tbl_entries").alias("e")
      .left_join("tbl_entries_data_1", "d").on({"d.entry_id": "$e.id"})
      .where({"e.section_id": 4})
      .group_by("e.id")
      .order_by({"total": "DESC"})
      .limit(10)
      .execute()
      .rows()
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from symnext_db.core.errors import DatabaseStatementError
from symnext_db.results import DatabaseTabularResult
from symnext_db.statements.base import DatabaseStatement
from symnext_db.statements.clauses import DatabaseOrderLimitDefinition, DatabaseWhereDefinition

if TYPE_CHECKING:
    from symnext_db.database import Database

JOIN_TYPES: dict[str, str] = {
    "join": "JOIN",
    "inner": "INNER JOIN",
    "left": "LEFT JOIN",
    "right": "RIGHT JOIN",
    "outer": "OUTER JOIN",
}


class DatabaseQuery(DatabaseWhereDefinition, DatabaseOrderLimitDefinition, DatabaseStatement):
    """SELECT builder. The default projection is ``*``."""

    LIST_PARTS = frozenset({"projection", "group by", "order by"})

    def __init__(self, db: Database, projection: list[str] | None = None) -> None:
        super().__init__(db, "SELECT")
        self._sub_query_count = 0
        if projection:
            self.projection(projection)

    def get_statement_structure(self) -> list[str]:
        return [
            "statement",
            "distinct",
            "projection",
            "from",
            "as",
            "join",
            "where",
            "group by",
            "having",
            "order by",
            "limit",
            "offset",
        ]

    def get_separator_for_part_type(self, part: str) -> str:
        if part in ("from", "join", "where", "group by", "having", "order by", "limit"):
            return "\n"
        return " "

    def projection(self, columns: list[str] | str) -> DatabaseQuery:
        """Append columns to select. ``FUNC(col)`` and ``col AS alias`` are allowed."""
        if isinstance(columns, str):
            columns = [columns]
        for col in columns:
            self.unsafe_append_sql_part("projection", self.as_projection_string(col))
        return self

    def distinct(self) -> DatabaseQuery:
        self._require_once("distinct", "distinct")
        self.unsafe_append_sql_part("distinct", "DISTINCT")
        return self

    def from_(self, table: str, alias: str | None = None) -> DatabaseQuery:
        """Append FROM. Can only be called once."""
        self._require_once("from", "from")
        self.unsafe_append_sql_part("from", f"FROM {self.as_table(table)}")
        if alias:
            self.alias(alias)
        return self

    def alias(self, alias: str) -> DatabaseQuery:
        """Alias the FROM table. Can only be called once."""
        self._require_once("as", "as")
        self.unsafe_append_sql_part("as", f"AS {self.quote_identifier(alias)}")
        return self

    # ------------------------------------------------------------------
    # Joins
    # ------------------------------------------------------------------

    def join(self, table: str, alias: str | None = None, join_type: str = "join") -> DatabaseQuery:
        """Append a join; follow with on() to add its condition."""
        if join_type not in JOIN_TYPES:
            raise DatabaseStatementError(f"Unsupported join type: {join_type}")
        sql = f"{JOIN_TYPES[join_type]} {self.as_table(table)}"
        if alias:
            sql += f" AS {self.quote_identifier(alias)}"
        self.unsafe_append_sql_part("join", sql)
        return self

    def inner_join(self, table: str, alias: str | None = None) -> DatabaseQuery:
        return self.join(table, alias, "inner")

    def left_join(self, table: str, alias: str | None = None) -> DatabaseQuery:
        return self.join(table, alias, "left")

    def right_join(self, table: str, alias: str | None = None) -> DatabaseQuery:
        return self.join(table, alias, "right")

    def outer_join(self, table: str, alias: str | None = None) -> DatabaseQuery:
        return self.join(table, alias, "outer")

    def on(self, conditions: Mapping[str, Any]) -> DatabaseQuery:
        """ON clause of the last join. Use ``$col`` values to compare columns."""
        clause = self.build_where_clause_from_array(conditions, "join")
        self.amend_last_sql_part("join", f" ON {clause}", "on")
        return self

    # ------------------------------------------------------------------
    # Grouping, paging
    # ------------------------------------------------------------------

    def group_by(self, columns: list[str] | str) -> DatabaseQuery:
        if isinstance(columns, str):
            columns = [columns]
        if not columns:
            raise DatabaseStatementError("group_by expects at least one column")
        sql = self.as_ticked_list(columns)
        if not self.contains_sql_parts("group by"):
            sql = f"GROUP BY {sql}"
        self.unsafe_append_sql_part("group by", sql)
        return self

    def having(self, conditions: Mapping[str, Any]) -> DatabaseQuery:
        """Append a HAVING clause; further calls are joined with AND."""
        op = "AND" if self.contains_sql_parts("having") else "HAVING"
        clause = self.build_where_clause_from_array(conditions, "having")
        self.unsafe_append_sql_part("having", f"{op} {clause}")
        return self

    def offset(self, offset: int) -> DatabaseQuery:
        """Append OFFSET. Needs limit() by the time the query runs."""
        self._require_once("offset", "offset")
        if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
            raise DatabaseStatementError(f"Invalid offset: {offset!r}")
        self.unsafe_append_sql_part("offset", f"OFFSET {offset}")
        return self

    def paginate(self, page: int, size: int) -> DatabaseQuery:
        """LIMIT/OFFSET for 1-based *page* of *size* rows."""
        if page < 1 or size < 1:
            raise DatabaseStatementError("Page and page size must be positive")
        return self.limit(size).offset((page - 1) * size)

    def count(self, col: str = "*") -> DatabaseQuery:
        """Project ``COUNT(col)`` only."""
        if self.contains_sql_parts("projection"):
            raise DatabaseStatementError("DatabaseQuery can not count with a projection already set")
        self.unsafe_append_sql_part("projection", self.as_projection_string(f"COUNT({col})"))
        return self

    # ------------------------------------------------------------------
    # Sub-queries
    # ------------------------------------------------------------------

    def next_sub_query_id(self) -> int:
        self._sub_query_count += 1
        return self._sub_query_count

    def select_query(self, projection: list[str] | None = None) -> DatabaseSubQuery:
        """A sub-query whose parameters can't collide with this query's."""
        return DatabaseSubQuery(self.get_db(), self.next_sub_query_id(), projection, parent=self)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def finalize(self) -> DatabaseQuery:
        if not self.is_finalized():
            if self.contains_sql_parts("offset") and not self.contains_sql_parts("limit"):
                raise DatabaseStatementError("DatabaseQuery can not use offset without a limit")
            if not self.contains_sql_parts("projection"):
                self.unsafe_append_sql_part("projection", "*")
        return super().finalize()

    def results(self, cursor: Any) -> DatabaseTabularResult:
        return DatabaseTabularResult(True, cursor)


class DatabaseSubQuery(DatabaseQuery):
    """SELECT nested in another query; parameter names are prefixed ``i{id}_``."""

    def __init__(
        self,
        db: Database,
        sub_query_id: int,
        projection: list[str] | None = None,
        *,
        parent: DatabaseQuery | None = None,
    ) -> None:
        self._id = sub_query_id
        self._parent = parent
        super().__init__(db, projection)

    def get_id(self) -> int:
        return self._id

    def format_parameter_name(self, name: str) -> str:
        return f"i{self._id}_{name}"

    def next_sub_query_id(self) -> int:
        # Ids come from the outermost query so nested prefixes never collide.
        if self._parent is not None:
            return self._parent.next_sub_query_id()
        return super().next_sub_query_id()
