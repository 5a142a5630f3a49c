"""
Clause mixins shared by several statement kinds.

- ``DatabaseWhereDefinition``: turns a conditions mapping into a WHERE/HAVING/ON
  expression, binding every literal as a parameter.
- ``DatabaseOrderLimitDefinition``: ORDER BY and LIMIT (select, update, delete).

Conditions language::

    {"id": 4}                                  `id` = :id
    {"parent": None}                           `parent` IS NULL
    {"a.id": "$b.a_id"}                        `a`.`id` = `b`.`a_id`
    {"id": {"in": [1, 2]}}                     `id` IN (:id, :id2)
    {"id": {"in": sub_query}}                  `id` IN (SELECT ...)
    {"date": {"between": [d1, d2]}}            `date` BETWEEN :date AND :date2
    {"or": {"a": 1, "b": 2}}                   (`a` = :a OR `b` = :b)
    {"or": [{"a": 1}, {"a": {">": 5}}]}        (`a` = :a OR `a` > :a2)
    {"a": 1, "b": 2}                           (`a` = :a AND `b` = :b)
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from symnext_db.core.errors import DatabaseStatementError
from symnext_db.statements.base import DatabaseStatement

# Accepted operator spellings -> SQL.
WHERE_OPERATORS: dict[str, str] = {
    "=": "=",
    "!=": "!=",
    "<>": "<>",
    "<": "<",
    "<=": "<=",
    ">": ">",
    ">=": ">=",
    "like": "LIKE",
    "not like": "NOT LIKE",
    "regexp": "REGEXP",
    "not regexp": "NOT REGEXP",
    "in": "IN",
    "not in": "NOT IN",
    "between": "BETWEEN",
    "is": "IS",
    "is not": "IS NOT",
}

_LOGICAL = ("and", "or")
_NEGATIVE = ("!=", "<>", "is not")

ORDER_DIRECTIONS = ("ASC", "DESC")


def _parenthesize(clauses: list[str], op: str) -> str:
    if len(clauses) == 1:
        return clauses[0]
    return "(" + f" {op} ".join(clauses) + ")"


class DatabaseWhereDefinition:
    """Mixin for DatabaseStatement sub-classes accepting conditions."""

    def build_where_clause_from_array(self, conditions: Mapping[str, Any], part: str = "where") -> str:
        """Build one SQL expression from *conditions*; values are bound for *part*."""
        if not isinstance(conditions, Mapping) or not conditions:
            raise DatabaseStatementError("Conditions must be a non-empty mapping")
        clauses = [self.build_single_where_clause(key, value, part) for key, value in conditions.items()]
        return _parenthesize(clauses, "AND")

    def build_single_where_clause(self, key: str, value: Any, part: str) -> str:
        if not isinstance(key, str):
            raise DatabaseStatementError(f"Invalid condition key: {key!r}")
        if key.lower() in _LOGICAL:
            return self._build_logical_clause(key.upper(), value, part)
        if isinstance(value, Mapping):
            if not value:
                raise DatabaseStatementError(f"No operator given for `{key}`")
            clauses = [self.build_comparison(key, op, operand, part) for op, operand in value.items()]
            return _parenthesize(clauses, "AND")
        return self.build_comparison(key, "=", value, part)

    def _build_logical_clause(self, op: str, value: Any, part: str) -> str:
        if isinstance(value, Mapping):
            groups = [{k: v} for k, v in value.items()]
        elif isinstance(value, (list, tuple)):
            groups = list(value)
        else:
            raise DatabaseStatementError(f"{op} expects a mapping or a list of mappings")
        if not groups:
            raise DatabaseStatementError(f"{op} expects at least one condition")
        return _parenthesize([self.build_where_clause_from_array(g, part) for g in groups], op)

    def build_comparison(self, col: str, operator: str, value: Any, part: str) -> str:
        """``col <op> value`` with *value* bound, referenced (``$col``) or NULL."""
        op = operator.strip().lower() if isinstance(operator, str) else operator
        if op not in WHERE_OPERATORS:
            raise DatabaseStatementError(f"Unsupported operator: {operator}")
        sql_op = WHERE_OPERATORS[op]
        column = self.as_projection_string(col)

        if op in ("in", "not in"):
            return f"{column} {sql_op} {self._build_in_list(col, value, part)}"
        if op == "between":
            if not isinstance(value, (list, tuple)) or len(value) != 2:
                raise DatabaseStatementError("BETWEEN expects exactly two values")
            low = self.bind_value(part, col, value[0])
            high = self.bind_value(part, col, value[1])
            return f"{column} BETWEEN {low} AND {high}"
        if value is None:
            if op in ("=", "is"):
                return f"{column} IS NULL"
            if op in _NEGATIVE:
                return f"{column} IS NOT NULL"
            raise DatabaseStatementError(f"Can not compare `{col}` to NULL with {sql_op}")
        if op in ("is", "is not"):
            if not isinstance(value, bool):
                raise DatabaseStatementError(f"{sql_op} only accepts None, True or False")
            return f"{column} {sql_op} {'TRUE' if value else 'FALSE'}"
        if isinstance(value, str) and value.startswith("$"):
            return f"{column} {sql_op} {self.as_ticked_string(value[1:])}"
        return f"{column} {sql_op} {self.bind_value(part, col, value)}"

    def _build_in_list(self, col: str, value: Any, part: str) -> str:
        if isinstance(value, DatabaseStatement):
            if not value.is_finalized():
                value.finalize()
            self.merge_values(value, part)
            return f"({value.generate_sql()})"
        if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple, set, frozenset)):
            raise DatabaseStatementError(f"IN expects a list of values or a sub-query for `{col}`")
        if not value:
            raise DatabaseStatementError(f"Can not use an empty list with IN for `{col}`")
        return "(" + ", ".join(self.bind_value(part, col, v) for v in value) + ")"

    def where(self, conditions: Mapping[str, Any]) -> Any:
        """Append a WHERE clause; further calls are joined with AND."""
        op = "AND" if self.contains_sql_parts("where") else "WHERE"
        clause = self.build_where_clause_from_array(conditions, "where")
        self.unsafe_append_sql_part("where", f"{op} {clause}")
        return self


class DatabaseOrderLimitDefinition:
    """Mixin adding ORDER BY and LIMIT."""

    def order_by(self, cols: str | list[str] | Mapping[str, str], direction: str = "ASC") -> Any:
        """Append sort columns.

        *cols* is a column, a list of columns (all sorted by *direction*) or a
        mapping of column -> direction. ``RAND()`` is accepted as a column.
        """
        if isinstance(cols, str):
            items = [(cols, direction)]
        elif isinstance(cols, Mapping):
            items = list(cols.items())
        else:
            items = [(c, direction) for c in cols]
        if not items:
            raise DatabaseStatementError("order_by expects at least one column")
        fragments = []
        for col, direc in items:
            direc = direc.strip().upper()
            if direc not in ORDER_DIRECTIONS:
                raise DatabaseStatementError(f"Invalid sort direction: {direc}")
            fragments.append(f"{self.as_projection_string(col)} {direc}")
        sql = ", ".join(fragments)
        if not self.contains_sql_parts("order by"):
            sql = f"ORDER BY {sql}"
        self.unsafe_append_sql_part("order by", sql)
        return self

    def limit(self, limit: int) -> Any:
        """Append LIMIT. Can only be called once."""
        self._require_once("limit", "limit")
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
            raise DatabaseStatementError(f"Invalid limit: {limit!r}")
        self.unsafe_append_sql_part("limit", f"LIMIT {limit}")
        return self
