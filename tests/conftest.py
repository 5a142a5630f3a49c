from collections.abc import Generator

import pytest

from symnext_db import Database


@pytest.fixture
def db() -> Generator[Database, None, None]:
    """In-memory SQLite handle with the ``sym_`` prefix and query logging on."""
    database = Database(
        {
            "driver": "sqlite",
            "database": ":memory:",
            "table_prefix": "sym_",
            "query_logging": True,
        }
    )
    yield database
    database.close()


@pytest.fixture
def mysql_db() -> Database:
    """MySQL-configured handle that is never connected; for SQL generation only."""
    return Database(
        {
            "driver": "mysql",
            "host": "localhost",
            "user": "sym",
            "database": "symnext",
            "table_prefix": "sym_",
        }
    )


@pytest.fixture
def entries(db: Database) -> Database:
    """``sym_entries`` table with three rows."""
    db.create("tbl_entries").fields(
        {
            "id": "integer",
            "section_id": "integer",
            "handle": {"type": "varchar(255)", "null": True},
        }
    ).keys({"id": "primary"}).execute()
    for row in (
        {"id": 1, "section_id": 1, "handle": "first"},
        {"id": 2, "section_id": 1, "handle": "second"},
        {"id": 3, "section_id": 2, "handle": None},
    ):
        db.insert("tbl_entries").values(row).execute()
    return db
