"""
DatabaseStatement: the SQL part composer every statement kind builds on.

A statement is an ordered set of named SQL parts ("statement", "table",
"where", ...). Builder methods append fragments to parts and register the
values they need bound. ``generate_sql()`` walks the kind's fixed structure
list, so the emitted order never depends on the order builder methods were
called in. Parts missing from the structure list are never emitted.

Values are either positional (``?``) or named (``:name``), never both. The
mode is picked by the first value appended, or up front with
``use_placeholders()``.
"""

from __future__ import annotations

import hashlib
import re
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from symnext_db.core.config import TABLE_PREFIX_MARKER
from symnext_db.core.errors import DatabaseStatementError
from symnext_db.core.safety import validate_sql_query
from symnext_db.results import DatabaseStatementResult

if TYPE_CHECKING:
    from symnext_db.database import Database

LIST_DELIMITER = ", "
STATEMENTS_DELIMITER = " "
FORMATTED_PART_DELIMITER = "\n"
FORMATTED_PART_TAB = "    "

_POSITIONAL = "positional"
_NAMED = "named"

_IDENTIFIER = re.compile(r"^[A-Za-z0-9_$\-]+$")
_FUNCTION_CALL = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)\((.*)\)$")
_ALIAS_SPLIT = re.compile(r"\s+AS\s+", re.IGNORECASE)
_PARAM_NAME_CHARS = re.compile(r"[^A-Za-z0-9_]+")
_TABLE_PREFIX = re.compile(rf"(?<![A-Za-z0-9_]){TABLE_PREFIX_MARKER}(?=[A-Za-z0-9_])")
_NAMED_PLACEHOLDER = re.compile(r"(?<![:\w]):([A-Za-z_][A-Za-z0-9_]*)")


def _same_value(a: Any, b: Any) -> bool:
    return type(a) is type(b) and a == b


class DatabaseStatement:
    """Base statement: raw parts, values, quoting helpers and execution."""

    # Part types whose fragments are comma-joined (e.g. projected columns).
    LIST_PARTS: frozenset[str] = frozenset()

    def __init__(self, db: Database, statement: str = "", *, safe: bool = True) -> None:
        self._db = db
        self._safe = safe
        self._parts: dict[str, list[str]] = {}
        self._named: dict[str, Any] = {}
        self._positional: dict[str, list[Any]] = {}
        self._mode: str | None = None
        self._finalized = False
        if statement:
            self.unsafe_append_sql_part("statement", statement)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def get_db(self) -> Database:
        return self._db

    def is_safe(self) -> bool:
        """False for statements holding verbatim, trusted SQL (import scripts)."""
        return self._safe

    def get_statement_structure(self) -> list[str]:
        """Part names, in emission order. Sub-classes override."""
        return ["statement"]

    def get_part_delimiter(self, part: str) -> str:
        """String joining several fragments of the same part."""
        if part in self.LIST_PARTS:
            return LIST_DELIMITER
        return STATEMENTS_DELIMITER

    def get_separator_for_part_type(self, part: str) -> str:
        """String placed before *part* in the formatted (log) SQL."""
        return STATEMENTS_DELIMITER

    # ------------------------------------------------------------------
    # Parts
    # ------------------------------------------------------------------

    def _ensure_mutable(self) -> None:
        if self._finalized:
            raise DatabaseStatementError(
                f"{type(self).__name__} was already finalized and can not be modified"
            )

    def unsafe_append_sql_part(self, part: str, fragment: str) -> DatabaseStatement:
        """Append *fragment* verbatim to *part*. Callers quote/tick beforehand."""
        self._ensure_mutable()
        self._parts.setdefault(part, []).append(fragment)
        return self

    def append_sql_part(self, part: str, fragment: str) -> DatabaseStatement:
        """Append *fragment* after checking it with the strict injection guard."""
        validate_sql_query(fragment, strict=True)
        return self.unsafe_append_sql_part(part, fragment)

    def contains_sql_parts(self, part: str) -> bool:
        return bool(self._parts.get(part))

    def get_sql_parts(self, part: str) -> list[str]:
        return list(self._parts.get(part, []))

    def amend_last_sql_part(self, part: str, suffix: str, clause: str) -> DatabaseStatement:
        """Append *suffix* to the last fragment of *part* (ON, FIRST, AFTER)."""
        self._ensure_mutable()
        if not self.contains_sql_parts(part):
            raise DatabaseStatementError(f"{type(self).__name__} can not use {clause} without a {part} clause")
        self._parts[part][-1] += suffix
        return self

    def _require_once(self, part: str, clause: str) -> None:
        if self.contains_sql_parts(part):
            raise DatabaseStatementError(
                f"{type(self).__name__} can not hold more than one {clause} clause"
            )

    # ------------------------------------------------------------------
    # Values
    # ------------------------------------------------------------------

    def _set_mode(self, mode: str) -> None:
        if self._mode is not None and self._mode != mode:
            raise DatabaseStatementError("Can not mix positional and named values in one statement")
        self._mode = mode

    def use_placeholders(self) -> DatabaseStatement:
        """Bind values positionally (``?``) instead of by name."""
        self._ensure_mutable()
        self._set_mode(_POSITIONAL)
        return self

    def is_using_placeholders(self) -> bool:
        return self._mode == _POSITIONAL

    def append_values(self, values: Mapping[Any, Any] | Iterable[Any], part: str = "statement") -> DatabaseStatement:
        """Register values. Integer keys (or a plain sequence) bind positionally
        in the position of *part*; string keys bind by name."""
        self._ensure_mutable()
        items = values.items() if isinstance(values, Mapping) else enumerate(values)
        for key, value in items:
            if isinstance(key, bool) or not isinstance(key, (int, str)):
                raise DatabaseStatementError(f"Invalid value key: {key!r}")
            if isinstance(key, int):
                self._set_mode(_POSITIONAL)
                self._positional.setdefault(part, []).append(value)
            else:
                self._set_mode(_NAMED)
                self._named[key] = value
        return self

    def get_values(self) -> dict[str, Any] | list[Any]:
        """Values to bind: a dict (named) or a list ordered like the emitted SQL."""
        if self._mode != _POSITIONAL:
            return dict(self._named)
        ordered: list[Any] = []
        for part in self.get_statement_structure():
            ordered.extend(self._positional.get(part, []))
        return ordered

    def merge_values(self, other: DatabaseStatement, part: str) -> DatabaseStatement:
        """Take over the values of a nested statement whose SQL is inlined in *part*."""
        values = other.get_values()
        if isinstance(values, list):
            self._set_mode(_POSITIONAL)
            self._positional.setdefault(part, []).extend(values)
            return self
        for name, value in values.items():
            if name in self._named and not _same_value(self._named[name], value):
                raise DatabaseStatementError(f"Parameter `{name}` is already bound to another value")
        return self.append_values(values, part=part)

    def format_parameter_name(self, name: str) -> str:
        """Hook for sub-queries, which namespace their parameters."""
        return name

    def convert_to_parameter_name(self, name: str, value: Any) -> str:
        """Turn a column name into a unique parameter name.

        A name already bound to the same value is reused; otherwise a numeric
        suffix is added.
        """
        base = _PARAM_NAME_CHARS.sub("_", name).strip("_") or "param"
        base = self.format_parameter_name(base)
        candidate = base
        count = 1
        while candidate in self._named and not _same_value(self._named[candidate], value):
            count += 1
            candidate = f"{base}{count}"
        return candidate

    def bind_value(self, part: str, name: str, value: Any) -> str:
        """Register *value* for *part* and return its placeholder text."""
        if self.is_using_placeholders():
            self.append_values([value], part=part)
            return "?"
        param = self.convert_to_parameter_name(name, value)
        self.append_values({param: value}, part=part)
        return f":{param}"

    def check_placeholders(self, sql: str, values: dict[str, Any] | list[Any]) -> None:
        """Fail when the placeholders in *sql* don't match *values*."""
        if isinstance(values, list):
            count = sql.count("?")
            if count != len(values):
                raise DatabaseStatementError(
                    f"Statement has {count} placeholders but {len(values)} values"
                ).sql(sql)
            return
        names = set(_NAMED_PLACEHOLDER.findall(sql))
        if names != set(values):
            missing = sorted(names - set(values))
            extra = sorted(set(values) - names)
            raise DatabaseStatementError(
                f"Statement placeholders do not match values (missing: {missing}, unused: {extra})"
            ).sql(sql)

    # ------------------------------------------------------------------
    # Quoting and prefixing
    # ------------------------------------------------------------------

    def replace_table_prefix(self, sql: str) -> str:
        """Rewrite the ``tbl_`` marker to the handle's configured prefix."""
        prefix = self._db.get_prefix()
        if not prefix or prefix == TABLE_PREFIX_MARKER:
            return sql
        return _TABLE_PREFIX.sub(prefix, sql)

    def quote_identifier(self, name: str) -> str:
        """Wrap a single identifier in the backend quoting character."""
        if not _IDENTIFIER.match(name):
            raise DatabaseStatementError(f"Identifier `{name}` contains illegal characters")
        q = self._db.quote_char
        return f"{q}{name}{q}"

    def as_ticked_string(self, value: str, alias: str | None = None) -> str:
        """Quote a possibly dotted name (``s.id`` -> `s`.`id`), with optional alias."""
        value = value.strip()
        if not value:
            raise DatabaseStatementError("Can not quote an empty identifier")
        if alias is None:
            pieces = _ALIAS_SPLIT.split(value)
            if len(pieces) == 2:
                value, alias = pieces[0].strip(), pieces[1].strip()
            elif len(pieces) > 2:
                raise DatabaseStatementError(f"Invalid alias in `{value}`")
        ticked = ".".join(
            part if part == "*" else self.quote_identifier(part) for part in value.split(".")
        )
        if alias:
            return f"{ticked} AS {self.quote_identifier(alias)}"
        return ticked

    def as_ticked_list(self, values: Iterable[str]) -> str:
        return LIST_DELIMITER.join(self.as_ticked_string(v) for v in values)

    def as_projection_string(self, value: str) -> str:
        """Quote a projected column; ``*``, ``t.*`` and ``FUNC(args)`` are allowed."""
        value = value.strip()
        pieces = _ALIAS_SPLIT.split(value)
        alias = None
        if len(pieces) == 2:
            value, alias = pieces[0].strip(), pieces[1].strip()
        match = _FUNCTION_CALL.match(value)
        if match is None:
            return self.as_ticked_string(value, alias)
        func, args = match.group(1).upper(), match.group(2).strip()
        quoted_args = []
        for arg in (a.strip() for a in args.split(",")) if args else ():
            if arg.upper().startswith("DISTINCT "):
                quoted_args.append("DISTINCT " + self.as_ticked_string(arg[9:]))
            else:
                quoted_args.append(self.as_ticked_string(arg))
        sql = f"{func}({LIST_DELIMITER.join(quoted_args)})"
        if alias:
            sql += f" AS {self.quote_identifier(alias)}"
        return sql

    def as_table(self, table: str) -> str:
        """Prefix-replace and tick a table name."""
        return self.as_ticked_string(self.replace_table_prefix(table))

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def render_part(self, part: str, fragments: list[str]) -> str:
        """Join the fragments of one part. Sub-classes wrap parts here (e.g. parentheses)."""
        return self.get_part_delimiter(part).join(fragments)

    def _joined_parts(self) -> list[tuple[str, str]]:
        out = []
        for part in self.get_statement_structure():
            fragments = self._parts.get(part)
            if fragments:
                out.append((part, self.render_part(part, fragments)))
        return out

    def generate_sql(self) -> str:
        """The SQL sent to the backend."""
        return STATEMENTS_DELIMITER.join(sql for _, sql in self._joined_parts())

    def generate_formatted_sql(self) -> str:
        """Multi-line SQL for logs."""
        chunks: list[str] = []
        for part, sql in self._joined_parts():
            if chunks:
                chunks.append(self.get_separator_for_part_type(part))
            chunks.append(sql)
        return "".join(chunks)

    def compute_hash(self) -> str:
        """md5 of the generated SQL; identifies the statement in logs."""
        return hashlib.md5(self.generate_sql().encode("utf-8")).hexdigest()

    def __str__(self) -> str:
        return self.generate_sql()

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def is_finalized(self) -> bool:
        return self._finalized

    def finalize(self) -> DatabaseStatement:
        """Append variant defaults. Called once by execute(); the statement is
        read-only afterwards."""
        self._finalized = True
        return self

    def execute(self) -> DatabaseStatementResult:
        if not self._finalized:
            self.finalize()
        return self._db.execute(self)

    def results(self, cursor: Any) -> DatabaseStatementResult:
        """Wrap the executed cursor. Tabular kinds return a DatabaseTabularResult."""
        return DatabaseStatementResult(True, cursor)
