"""
Column and key definitions for CREATE TABLE and ALTER TABLE.

A column is a type string (``"int(11)"``) or a mapping::

    {
        "type": "varchar(255)",   # required
        "null": True,             # NULL / NOT NULL (default NOT NULL)
        "default": "none",        # numbers inline, else bound; None -> DEFAULT NULL
        "auto": True,             # AUTO_INCREMENT
        "signed": False,          # unsigned numeric column
        "values": ["yes", "no"],  # enum/set members, bound as parameters
        "charset": "utf8mb4",
        "collate": "utf8mb4_unicode_ci",
    }

A key is a type string (``"primary"``, ``"unique"``, ``"key"``, ``"index"``,
``"fulltext"``) applied to the column of the same name, or ``{"type", "cols"}``.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from typing import Any

from symnext_db.core.errors import DatabaseStatementError

_COLUMN_TYPE = re.compile(r"^[A-Za-z]+(\s*\(\s*[0-9]+(\s*,\s*[0-9]+)?\s*\))?$")
_NAME = re.compile(r"^[A-Za-z0-9_]+$")

COLUMN_OPTIONS = frozenset({"type", "null", "default", "auto", "signed", "values", "charset", "collate"})

_NUMERIC_TYPES = frozenset(
    {"tinyint", "smallint", "mediumint", "int", "integer", "bigint", "decimal", "numeric", "float", "double"}
)
_STRING_TYPES = frozenset(
    {"char", "varchar", "tinytext", "text", "mediumtext", "longtext", "enum", "set"}
)
_ENUM_TYPES = frozenset({"enum", "set"})

KEY_TYPES: dict[str, str] = {
    "primary": "PRIMARY KEY",
    "unique": "UNIQUE KEY",
    "key": "KEY",
    "index": "INDEX",
    "fulltext": "FULLTEXT KEY",
}


def validate_name(value: str, what: str) -> str:
    """Charset, collation and engine names are emitted verbatim; keep them plain."""
    if not isinstance(value, str) or not _NAME.match(value):
        raise DatabaseStatementError(f"Invalid {what}: {value!r}")
    return value


class DatabaseColumnDefinition:
    """Mixin rendering column and key definitions; literals are bound to *part*."""

    def _ddl_literal(self, part: str, name: str, value: Any) -> str:
        """Numbers are written inline; anything else is bound, where the driver allows it."""
        if isinstance(value, bool):
            return str(int(value))
        if isinstance(value, int) or (isinstance(value, float) and math.isfinite(value)):
            return repr(value)
        driver = self.get_db().driver
        if not driver.ddl_parameters:
            raise DatabaseStatementError(
                f"The {driver.name.value} driver can not bind `{name}` in a table definition, "
                "only numeric literals are supported"
            )
        return self.bind_value(part, name, value)

    def build_column_definition(self, name: str, options: str | Mapping[str, Any], part: str) -> str:
        if isinstance(options, str):
            options = {"type": options}
        if not isinstance(options, Mapping) or "type" not in options:
            raise DatabaseStatementError(f"Column `{name}` needs a type")
        unknown = set(options) - COLUMN_OPTIONS
        if unknown:
            raise DatabaseStatementError(f"Unknown option(s) for column `{name}`: {sorted(unknown)}")

        col_type = str(options["type"]).strip()
        if not _COLUMN_TYPE.match(col_type):
            raise DatabaseStatementError(f"Invalid type for column `{name}`: {col_type}")
        base_type = col_type.split("(")[0].strip().lower()

        sql = f"{self.as_ticked_string(name)} {col_type}"

        if base_type in _ENUM_TYPES:
            values = options.get("values")
            if not values or isinstance(values, str):
                raise DatabaseStatementError(f"Column `{name}` of type {base_type} needs a list of values")
            placeholders = ", ".join(self._ddl_literal(part, name, v) for v in values)
            sql += f"({placeholders})"
        elif "values" in options:
            raise DatabaseStatementError(f"Only enum and set columns accept values (`{name}`)")

        if options.get("signed") is False:
            if base_type not in _NUMERIC_TYPES:
                raise DatabaseStatementError(f"Column `{name}` is not numeric and can not be unsigned")
            sql += " unsigned"

        if base_type in _STRING_TYPES:
            if options.get("charset"):
                sql += f" CHARACTER SET {validate_name(options['charset'], 'charset')}"
            if options.get("collate"):
                sql += f" COLLATE {validate_name(options['collate'], 'collation')}"

        sql += " NULL" if options.get("null") else " NOT NULL"

        if "default" in options:
            default = options["default"]
            if default is None:
                sql += " DEFAULT NULL"
            else:
                sql += f" DEFAULT {self._ddl_literal(part, f'{name}_default', default)}"

        if options.get("auto"):
            sql += " AUTO_INCREMENT"
        return sql

    def build_key_definition(self, name: str, options: str | Mapping[str, Any]) -> str:
        if isinstance(options, str):
            options = {"type": options}
        if not isinstance(options, Mapping) or "type" not in options:
            raise DatabaseStatementError(f"Key `{name}` needs a type")
        key_type = str(options["type"]).strip().lower()
        if key_type not in KEY_TYPES:
            raise DatabaseStatementError(f"Invalid key type for `{name}`: {options['type']}")
        cols = options.get("cols", [name])
        if isinstance(cols, str):
            cols = [cols]
        if not cols:
            raise DatabaseStatementError(f"Key `{name}` needs at least one column")
        ticked = self.as_ticked_list(cols)
        if key_type == "primary":
            return f"PRIMARY KEY ({ticked})"
        return f"{KEY_TYPES[key_type]} {self.as_ticked_string(name)} ({ticked})"
