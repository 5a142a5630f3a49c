"""Unit tests for statements.base.DatabaseStatement: parts, values, quoting, serialization."""

import hashlib

import pytest

from symnext_db.core.errors import DatabaseStatementError
from symnext_db.statements import DatabaseStatement


class _RawStatement(DatabaseStatement):
    LIST_PARTS = frozenset({"cols"})

    def get_statement_structure(self) -> list[str]:
        return ["statement", "cols", "where", "limit"]


class TestParts:
    def test_emission_follows_structure(self, mysql_db) -> None:
        stm = _RawStatement(mysql_db, "SELECT")
        stm.unsafe_append_sql_part("limit", "LIMIT 1")
        stm.unsafe_append_sql_part("where", "WHERE 1")
        stm.unsafe_append_sql_part("cols", "`a`")
        stm.unsafe_append_sql_part("cols", "`b`")
        assert stm.generate_sql() == "SELECT `a`, `b` WHERE 1 LIMIT 1"

    def test_parts_outside_structure_not_emitted(self, mysql_db) -> None:
        stm = _RawStatement(mysql_db, "SELECT 1")
        stm.unsafe_append_sql_part("secret", "DROP")
        assert stm.generate_sql() == "SELECT 1"
        assert stm.contains_sql_parts("secret")

    def test_append_sql_part_runs_strict_guard(self, mysql_db) -> None:
        stm = _RawStatement(mysql_db, "SELECT 1")
        with pytest.raises(DatabaseStatementError, match="illegal character"):
            stm.append_sql_part("where", "WHERE a = 'x'")
        stm.append_sql_part("where", "WHERE `a` = 1")
        assert stm.get_sql_parts("where") == ["WHERE `a` = 1"]

    def test_finalized_statement_is_read_only(self, mysql_db) -> None:
        stm = _RawStatement(mysql_db, "SELECT 1").finalize()
        assert stm.is_finalized()
        with pytest.raises(DatabaseStatementError, match="already finalized"):
            stm.unsafe_append_sql_part("where", "WHERE 1")

    def test_amend_last_part_requires_part(self, mysql_db) -> None:
        stm = _RawStatement(mysql_db, "SELECT 1")
        with pytest.raises(DatabaseStatementError, match="without a cols clause"):
            stm.amend_last_sql_part("cols", " FIRST", "first")

    def test_formatted_sql_and_hash(self, mysql_db) -> None:
        stm = _RawStatement(mysql_db, "SELECT")
        stm.unsafe_append_sql_part("cols", "`a`")
        assert stm.generate_formatted_sql() == "SELECT `a`"
        assert stm.compute_hash() == hashlib.md5(b"SELECT `a`").hexdigest()
        assert str(stm) == "SELECT `a`"


class TestValues:
    def test_named_values(self, mysql_db) -> None:
        stm = _RawStatement(mysql_db)
        stm.append_values({"a": 1, "b": "x"})
        assert stm.get_values() == {"a": 1, "b": "x"}
        assert not stm.is_using_placeholders()

    def test_positional_values_ordered_by_structure(self, mysql_db) -> None:
        stm = _RawStatement(mysql_db)
        stm.append_values([3], part="limit")
        stm.append_values([2], part="where")
        stm.append_values([1], part="cols")
        assert stm.get_values() == [1, 2, 3]

    def test_mixing_fails(self, mysql_db) -> None:
        stm = _RawStatement(mysql_db)
        stm.append_values({"a": 1})
        with pytest.raises(DatabaseStatementError, match="Can not mix"):
            stm.append_values([1])

    def test_use_placeholders_then_named_fails(self, mysql_db) -> None:
        stm = _RawStatement(mysql_db).use_placeholders()
        with pytest.raises(DatabaseStatementError, match="Can not mix"):
            stm.append_values({"a": 1})

    def test_parameter_name_reuse_and_suffix(self, mysql_db) -> None:
        stm = _RawStatement(mysql_db)
        assert stm.bind_value("where", "e.id", 1) == ":e_id"
        assert stm.bind_value("where", "e.id", 1) == ":e_id"
        assert stm.bind_value("where", "e.id", 2) == ":e_id2"
        assert stm.bind_value("where", "e.id", "1") == ":e_id3"
        assert stm.get_values() == {"e_id": 1, "e_id2": 2, "e_id3": "1"}

    def test_bind_value_positional(self, mysql_db) -> None:
        stm = _RawStatement(mysql_db).use_placeholders()
        assert stm.bind_value("where", "id", 1) == "?"
        assert stm.get_values() == [1]

    def test_check_placeholders(self, mysql_db) -> None:
        stm = _RawStatement(mysql_db)
        stm.check_placeholders("`a` = ? AND `b` = ?", [1, 2])
        stm.check_placeholders("`a` = :a", {"a": 1})
        with pytest.raises(DatabaseStatementError, match="2 placeholders but 1 values"):
            stm.check_placeholders("`a` = ? AND `b` = ?", [1])
        with pytest.raises(DatabaseStatementError, match="missing"):
            stm.check_placeholders("`a` = :a AND `b` = :b", {"a": 1})


class TestQuoting:
    def test_table_prefix(self, mysql_db) -> None:
        stm = DatabaseStatement(mysql_db)
        assert stm.replace_table_prefix("tbl_entries") == "sym_entries"
        assert stm.replace_table_prefix("xtbl_entries") == "xtbl_entries"
        assert stm.as_table("tbl_entries") == "`sym_entries`"

    def test_ticked_strings(self, mysql_db) -> None:
        stm = DatabaseStatement(mysql_db)
        assert stm.as_ticked_string("id") == "`id`"
        assert stm.as_ticked_string("e.id") == "`e`.`id`"
        assert stm.as_ticked_string("e.*") == "`e`.*"
        assert stm.as_ticked_string("e.id AS entry") == "`e`.`id` AS `entry`"
        assert stm.as_ticked_list(["a", "b"]) == "`a`, `b`"

    def test_illegal_identifier(self, mysql_db) -> None:
        stm = DatabaseStatement(mysql_db)
        with pytest.raises(DatabaseStatementError, match="illegal characters"):
            stm.as_ticked_string("id`; DROP")

    def test_projection_strings(self, mysql_db) -> None:
        stm = DatabaseStatement(mysql_db)
        assert stm.as_projection_string("*") == "*"
        assert stm.as_projection_string("count(id)") == "COUNT(`id`)"
        assert stm.as_projection_string("COUNT(DISTINCT e.id) AS total") == "COUNT(DISTINCT `e`.`id`) AS `total`"
        assert stm.as_projection_string("NOW()") == "NOW()"
