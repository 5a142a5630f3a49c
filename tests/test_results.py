"""Unit tests for results: the tabular cursor state machine and statement results."""

from unittest.mock import MagicMock

import pytest

from symnext_db.core.errors import DatabaseStatementError, ErrorKind
from symnext_db.results import (
    DatabaseStatementResult,
    DatabaseTabularResult,
    FetchOrientation,
    FetchType,
    RowListCursor,
)


def _rows(n: int = 3) -> list[dict]:
    return [{"id": i, "handle": f"h{i}"} for i in range(1, n + 1)]


def _result(n: int = 3) -> DatabaseTabularResult:
    return DatabaseTabularResult(True, RowListCursor(_rows(n)))


def _tuple_cursor(rows: list[tuple]) -> MagicMock:
    cursor = MagicMock()
    cursor.description = [("id",), ("handle",)]
    cursor.fetchone.side_effect = [*rows, None]
    return cursor


class TestNext:
    def test_returns_rows_then_none_then_raises(self) -> None:
        result = _result(2)
        assert result.next() == {"id": 1, "handle": "h1"}
        assert result.next() == {"id": 2, "handle": "h2"}
        assert result.next() is None
        with pytest.raises(DatabaseStatementError, match="after the cursor reached the end") as exc:
            result.next()
        assert exc.value.kind == ErrorKind.CURSOR

    def test_tuple_rows_become_dicts(self) -> None:
        result = DatabaseTabularResult(True, _tuple_cursor([(1, "a")]))
        assert result.next() == {"id": 1, "handle": "a"}

    def test_obj_fetch_type(self) -> None:
        row = _result().fetch_type(FetchType.OBJ).next()
        assert row.id == 1
        assert row.handle == "h1"

    def test_invalid_controls(self) -> None:
        with pytest.raises(DatabaseStatementError, match="Invalid fetch type"):
            _result().fetch_type("assoc")
        with pytest.raises(DatabaseStatementError, match="Invalid orientation"):
            _result().orientation("abs")
        with pytest.raises(DatabaseStatementError, match="positive"):
            _result().offset(-1)

    def test_process_hook(self) -> None:
        class Handles(DatabaseTabularResult):
            def process(self, row):
                return row["handle"]

        assert Handles(True, RowListCursor(_rows())).rows() == ["h1", "h2", "h3"]

    def test_iteration(self) -> None:
        assert [row["id"] for row in _result()] == [1, 2, 3]


class TestRows:
    def test_rows_returns_everything(self) -> None:
        assert _result().rows() == _rows()

    def test_rows_after_next_raises(self) -> None:
        result = _result()
        result.next()
        with pytest.raises(DatabaseStatementError, match="1 were already consumed"):
            result.rows()

    def test_remaining_rows_after_next(self) -> None:
        result = _result()
        result.next()
        assert [row["id"] for row in result.remaining_rows()] == [2, 3]

    def test_empty_result(self) -> None:
        result = DatabaseTabularResult(True, RowListCursor([]))
        assert result.rows() == []
        assert result.column_count() == 0


class TestOffset:
    def test_next_orientation_skips_relative(self) -> None:
        result = _result(5)
        result.next()
        assert result.offset(2).next()["id"] == 4

    def test_offset_applies_once(self) -> None:
        result = _result(5).offset(1)
        assert [row["id"] for row in result] == [2, 3, 4, 5]

    def test_abs_orientation_from_first_row(self) -> None:
        result = _result(5).orientation(FetchOrientation.ABS)
        result.next()
        assert result.offset(3).next()["id"] == 4

    def test_abs_backwards_raises(self) -> None:
        result = _result(5).orientation(FetchOrientation.ABS)
        result.next()
        result.next()
        with pytest.raises(DatabaseStatementError, match="Can not move the cursor back") as exc:
            result.offset(0).next()
        assert exc.value.kind == ErrorKind.CURSOR

    def test_offset_past_end(self) -> None:
        result = _result(2).offset(10)
        assert result.next() is None


class TestReducers:
    def test_column_and_index(self) -> None:
        assert _result().column("handle") == ["h1", "h2", "h3"]
        assert list(_result().rows_indexed_by_column("id")) == [1, 2, 3]

    def test_grouped(self) -> None:
        result = DatabaseTabularResult(
            True, RowListCursor([{"s": 1, "id": 1}, {"s": 2, "id": 2}, {"s": 1, "id": 3}])
        )
        assert {k: len(v) for k, v in result.rows_grouped_by_column("s").items()} == {1: 2, 2: 1}

    def test_scalars(self) -> None:
        def single() -> DatabaseTabularResult:
            return DatabaseTabularResult(True, RowListCursor([{"n": "12", "f": "1.5", "b": "yes", "s": 7}]))

        assert single().integer("n") == 12
        assert single().float("f") == 1.5
        assert single().boolean("b") is True
        assert single().string("s") == "7"

    def test_variable_by_position(self) -> None:
        assert _result().variable(1) == "h1"

    def test_reducers_on_obj_rows(self) -> None:
        assert _result().fetch_type(FetchType.OBJ).column("id") == [1, 2, 3]

    def test_column_count(self) -> None:
        assert _result().column_count() == 2


class TestStatementResult:
    def test_counts(self) -> None:
        cursor = MagicMock(rowcount=4, lastrowid=17)
        result = DatabaseStatementResult(True, cursor)
        assert result.success()
        assert result.statement() is cursor
        assert result.row_count() == 4
        assert result.last_insert_id() == 17

    def test_unknown_counts(self) -> None:
        cursor = MagicMock(rowcount=None, lastrowid=None)
        result = DatabaseStatementResult(False, cursor)
        assert not result.success()
        assert result.row_count() == -1
        assert result.last_insert_id() == -1
