"""Unit tests for core.cache.DatabaseCache."""

from symnext_db.core.cache import DatabaseCache


def test_get_missing_key_returns_none() -> None:
    cache = DatabaseCache()
    assert cache.get("k") is None
    assert cache.has("k") is False


def test_append_and_append_all() -> None:
    cache = DatabaseCache()
    cache.append("k", 1)
    cache.append_all("k", [2, 3])
    assert cache.get("k") == [1, 2, 3]
    assert cache.has("k") is True


def test_append_all_empty_list_marks_key() -> None:
    cache = DatabaseCache()
    cache.append_all("k", [])
    assert cache.has("k") is True
    assert cache.get("k") == []


def test_forget_and_clear() -> None:
    cache = DatabaseCache()
    cache.append("a", 1)
    cache.append("b", 2)
    cache.forget("a")
    assert cache.has("a") is False
    cache.clear()
    assert cache.has("b") is False
