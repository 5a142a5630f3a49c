"""
DB connection helpers and driver registry.

Uses pymysql (MySQL) or sqlite3 (SQLite) based on ``DatabaseConfig.driver``.
Statements are built with canonical ``?`` / ``:name`` placeholders;
``execute()`` translates them to the driver paramstyle before handing the SQL
to the cursor.
"""

import re
import sqlite3
from dataclasses import dataclass
from types import SimpleNamespace
from typing import Any, Callable

import pymysql

from symnext_db.core.config import DatabaseConfig, DriverEnum

_QMARK = re.compile(r"\?")
_NAMED = re.compile(r"(?<![:\w]):([A-Za-z_][A-Za-z0-9_]*)")


@dataclass(frozen=True)
class Driver:
    """Everything the engine needs to know about one DB-API driver."""

    name: DriverEnum
    paramstyle: str
    connect: Callable[[DatabaseConfig], Any]
    begin: Callable[[Any], None]
    error_class: type[BaseException]
    version_function: str
    insert_id_function: str
    quote_char: str = "`"
    # False when the driver can not bind parameters inside CREATE/ALTER TABLE.
    ddl_parameters: bool = True


def _connect_mysql(config: DatabaseConfig) -> Any:
    for name in ("host", "database", "user"):
        if getattr(config, name) is None:
            raise ValueError(f"mysql driver requires {name}")
    kwargs: dict[str, Any] = {
        "host": config.host,
        "port": int(config.port or 3306),
        "user": config.user,
        "password": config.password if config.password is not None else "",
        "database": config.database,
        "connect_timeout": config.connect_timeout,
        "autocommit": True,
    }
    if config.charset:
        kwargs["charset"] = config.charset
    kwargs.update(config.options)
    return pymysql.connect(**kwargs)


def _connect_sqlite(config: DatabaseConfig) -> Any:
    # isolation_level=None: autocommit, transactions are opened explicitly.
    return sqlite3.connect(
        config.database or ":memory:",
        timeout=config.connect_timeout,
        isolation_level=None,
        **config.options,
    )


def _begin_mysql(conn: Any) -> None:
    conn.begin()


def _begin_sqlite(conn: Any) -> None:
    conn.execute("BEGIN")


DRIVERS: dict[DriverEnum, Driver] = {
    DriverEnum.MYSQL: Driver(
        name=DriverEnum.MYSQL,
        paramstyle="pyformat",
        connect=_connect_mysql,
        begin=_begin_mysql,
        error_class=pymysql.Error,
        version_function="VERSION()",
        insert_id_function="LAST_INSERT_ID()",
    ),
    DriverEnum.SQLITE: Driver(
        name=DriverEnum.SQLITE,
        paramstyle="named",
        connect=_connect_sqlite,
        begin=_begin_sqlite,
        error_class=sqlite3.Error,
        version_function="SQLITE_VERSION()",
        insert_id_function="LAST_INSERT_ROWID()",
        ddl_parameters=False,
    ),
}


def get_driver(name: DriverEnum | str) -> Driver:
    """Look up a registered driver by name."""
    try:
        return DRIVERS[DriverEnum(name)]
    except ValueError as e:
        raise ValueError(f"Unsupported driver: {name}") from e


def connect(config: DatabaseConfig) -> Any:
    """Open a connection for *config* with its registered driver."""
    return get_driver(config.driver).connect(config)


def translate_placeholders(sql: str, paramstyle: str) -> str:
    """Rewrite canonical ``?`` / ``:name`` placeholders for *paramstyle*.

    ``qmark`` and ``named`` drivers (sqlite3) understand both forms as-is.
    ``pyformat`` drivers (pymysql) need ``%s`` / ``%(name)s`` and a doubled
    literal ``%``.
    """
    if paramstyle in ("qmark", "named"):
        return sql
    if paramstyle in ("pyformat", "format"):
        sql = sql.replace("%", "%%")
        sql = _QMARK.sub("%s", sql)
        return _NAMED.sub(lambda m: f"%({m.group(1)})s", sql)
    raise ValueError(f"Unsupported paramstyle: {paramstyle}")


def execute(
    conn: Any,
    sql: str,
    params: dict | list | tuple | None = None,
    *,
    driver: Driver,
) -> Any:
    """
    Execute SQL and return the cursor. Caller reads rows from the cursor or uses cursor.rowcount.

    - params: positional list or named dict; None runs the SQL without arguments
      (and without placeholder translation).
    """
    cur = conn.cursor()
    if params:
        cur.execute(translate_placeholders(sql, driver.paramstyle), params)
    else:
        cur.execute(sql)
    return cur


def column_names(cursor: Any) -> list[str]:
    desc = cursor.description
    if not desc:
        return []
    return [d[0] for d in desc]


def row_to_dict(names: list[str], row: Any) -> dict[str, Any]:
    """Convert a driver row (tuple or mapping) to a dict keyed by column name."""
    if isinstance(row, dict):
        return dict(row)
    if isinstance(row, SimpleNamespace):
        return dict(vars(row))
    return dict(zip(names, row, strict=True))


def cursor_to_dicts(cursor: Any) -> list[dict[str, Any]]:
    """Convert cursor result to list of dicts. Works for both pymysql and sqlite3."""
    names = column_names(cursor)
    if not names:
        return []
    return [row_to_dict(names, row) for row in cursor.fetchall()]
