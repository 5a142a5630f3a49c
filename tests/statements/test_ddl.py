"""Unit tests for CREATE, ALTER, DROP, RENAME, OPTIMIZE, TRUNCATE and SET building."""

import pytest

from symnext_db import Database
from symnext_db.core.errors import DatabaseStatementError, ErrorKind


class TestCreate:
    def test_create_with_config_presets(self, mysql_db) -> None:
        stm = (
            mysql_db.create("tbl_entries")
            .if_not_exists()
            .fields(
                {
                    "id": {"type": "int(11)", "auto": True, "signed": False},
                    "handle": {"type": "varchar(255)", "null": True, "collate": "utf8mb4_bin"},
                    "status": {"type": "enum", "values": ["yes", "no"], "default": "no"},
                }
            )
            .keys({"id": "primary", "handle": "unique", "idx_status": {"type": "key", "cols": ["status", "id"]}})
            .engine("InnoDB")
            .charset("utf8mb4")
        )
        assert stm.generate_sql() == (
            "CREATE TABLE IF NOT EXISTS `sym_entries` ("
            "`id` int(11) unsigned NOT NULL AUTO_INCREMENT, "
            "`handle` varchar(255) COLLATE utf8mb4_bin NULL, "
            "`status` enum(:status, :status2) NOT NULL DEFAULT :status_default, "
            "PRIMARY KEY (`id`), UNIQUE KEY `handle` (`handle`), KEY `idx_status` (`status`, `id`)"
            ") ENGINE=InnoDB DEFAULT CHARSET=utf8mb4"
        )
        assert stm.get_values() == {"status": "yes", "status2": "no", "status_default": "no"}

    def test_factory_presets_from_config(self) -> None:
        db = Database({"driver": "mysql", "engine": "InnoDB", "charset": "utf8mb4", "collate": "utf8mb4_unicode_ci"})
        stm = db.create("tbl_x").fields({"id": "int(11)"})
        assert stm.generate_sql() == (
            "CREATE TABLE `tbl_x` (`id` int(11) NOT NULL) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci"
        )

    def test_requires_fields(self, mysql_db) -> None:
        with pytest.raises(DatabaseStatementError, match="without fields"):
            mysql_db.create("tbl_x").keys({"id": "primary"}).finalize()

    @pytest.mark.parametrize(
        "definition, message",
        [
            ({"null": True}, "needs a type"),
            ({"type": "int(11); DROP"}, "Invalid type"),
            ({"type": "int", "colour": "red"}, "Unknown option"),
            ({"type": "enum"}, "needs a list of values"),
            ({"type": "int", "values": [1]}, "Only enum and set"),
            ({"type": "text", "signed": False}, "not numeric"),
            ({"type": "text", "charset": "utf8'"}, "Invalid charset"),
        ],
    )
    def test_invalid_columns(self, mysql_db, definition, message) -> None:
        with pytest.raises(DatabaseStatementError, match=message):
            mysql_db.create("tbl_x").fields({"c": definition})

    def test_invalid_key_type(self, mysql_db) -> None:
        with pytest.raises(DatabaseStatementError, match="Invalid key type"):
            mysql_db.create("tbl_x").keys({"c": "spatial"})

    def test_exactly_once_options(self, mysql_db) -> None:
        with pytest.raises(DatabaseStatementError, match="more than one if not exists clause"):
            mysql_db.create("tbl_x").if_not_exists().if_not_exists()


class TestAlter:
    def test_operations(self, mysql_db) -> None:
        stm = (
            mysql_db.alter("tbl_entries")
            .add({"author_id": "int(11)"})
            .after("id")
            .change("handle", {"slug": {"type": "varchar(100)", "null": True}})
            .modify({"section_id": {"type": "int(11)", "default": 0}})
            .first()
            .drop("obsolete")
            .add_key({"author": "key"})
            .drop_key("old_key")
            .add_index("slug")
            .drop_index(["a", "b"])
            .add_primary_key(["id"])
            .drop_primary_key()
            .collate("utf8mb4_bin")
        )
        assert stm.generate_sql() == (
            "ALTER TABLE `sym_entries` "
            "ADD COLUMN `author_id` int(11) NOT NULL AFTER `id`, "
            "CHANGE COLUMN `handle` `slug` varchar(100) NULL, "
            "MODIFY COLUMN `section_id` int(11) NOT NULL DEFAULT 0 FIRST, "
            "DROP COLUMN `obsolete`, "
            "ADD KEY `author` (`author`), "
            "DROP KEY `old_key`, "
            "ADD INDEX `slug` (`slug`), "
            "DROP INDEX `a`, DROP INDEX `b`, "
            "ADD PRIMARY KEY (`id`), "
            "DROP PRIMARY KEY, "
            "COLLATE utf8mb4_bin"
        )
        assert stm.get_values() == {}

    def test_requires_operation(self, mysql_db) -> None:
        with pytest.raises(DatabaseStatementError, match="at least one operation"):
            mysql_db.alter("tbl_x").finalize()

    def test_first_without_operation(self, mysql_db) -> None:
        with pytest.raises(DatabaseStatementError, match="can not use first"):
            mysql_db.alter("tbl_x").first()


class TestTableStatements:
    def test_drop(self, mysql_db) -> None:
        stm = mysql_db.drop("tbl_a").table("tbl_b").if_exists()
        assert stm.generate_sql() == "DROP TABLE IF EXISTS `sym_a`, `sym_b`"

    def test_rename(self, mysql_db) -> None:
        stm = mysql_db.rename("tbl_a").to("tbl_b")
        assert stm.generate_sql() == "RENAME TABLE `sym_a` TO `sym_b`"

    def test_rename_to_only_once(self, mysql_db) -> None:
        with pytest.raises(DatabaseStatementError, match="more than one to clause"):
            mysql_db.rename("tbl_a").to("tbl_b").to("tbl_c")

    def test_rename_requires_to(self, mysql_db) -> None:
        with pytest.raises(DatabaseStatementError, match="call to"):
            mysql_db.rename("tbl_a").finalize()

    def test_optimize_and_truncate(self, mysql_db) -> None:
        assert mysql_db.optimize("tbl_a").generate_sql() == "OPTIMIZE TABLE `sym_a`"
        assert mysql_db.truncate("tbl_a").generate_sql() == "TRUNCATE TABLE `sym_a`"


class TestSet:
    def test_set_value(self, mysql_db) -> None:
        stm = mysql_db.set("time_zone").value("+02:00")
        assert stm.generate_sql() == "SET time_zone = :time_zone"
        assert stm.get_values() == {"time_zone": "+02:00"}

    def test_set_system_variable(self, mysql_db) -> None:
        stm = mysql_db.set("@@session.sql_mode").use_placeholders().value("ANSI")
        assert stm.generate_sql() == "SET @@session.sql_mode = ?"

    def test_invalid_variable(self, mysql_db) -> None:
        with pytest.raises(DatabaseStatementError, match="Invalid variable name"):
            mysql_db.set("x = 1; DROP")

    def test_requires_value(self, mysql_db) -> None:
        with pytest.raises(DatabaseStatementError, match="needs a value"):
            mysql_db.set("time_zone").finalize()


class TestSqliteDefinitions:
    def test_numeric_defaults_are_inline(self, db) -> None:
        db.create("tbl_d").fields(
            {
                "id": "integer",
                "hits": {"type": "int(11)", "default": 5},
                "ratio": {"type": "float", "default": 0.5},
                "active": {"type": "tinyint", "default": True},
            }
        ).execute()
        db.insert("tbl_d").values({"id": 1}).execute()
        row = db.select(["hits", "ratio", "active"]).from_("tbl_d").execute().rows()[0]
        assert row == {"hits": 5, "ratio": 0.5, "active": 1}

    def test_text_default_fails_before_backend(self, db) -> None:
        before = db.query_count()
        with pytest.raises(DatabaseStatementError, match="can not bind `a_default`") as exc:
            db.create("tbl_d").fields({"a": {"type": "varchar(10)", "default": "x"}})
        assert exc.value.kind == ErrorKind.STRUCTURE
        assert db.query_count() == before
