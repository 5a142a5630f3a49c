"""Unit tests for core.config: DatabaseConfig validation and Settings loading."""

import pytest
from pydantic import ValidationError

from symnext_db.core.config import DatabaseConfig, DriverEnum, Settings


class TestDatabaseConfig:
    def test_defaults(self) -> None:
        config = DatabaseConfig()
        assert config.driver == DriverEnum.MYSQL
        assert config.table_prefix == "tbl_"
        assert config.query_caching is False
        assert config.query_logging is False
        assert config.options == {}

    @pytest.mark.parametrize("raw, expected", [("on", True), ("yes", True), ("off", False), ("no", False)])
    def test_legacy_toggles(self, raw: str, expected: bool) -> None:
        config = DatabaseConfig(query_caching=raw, query_logging=raw)
        assert config.query_caching is expected
        assert config.query_logging is expected

    def test_unknown_driver(self) -> None:
        with pytest.raises(ValidationError):
            DatabaseConfig(driver="oracle")

    def test_port_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            DatabaseConfig(port=0)

    def test_prefix_must_be_identifier(self) -> None:
        with pytest.raises(ValidationError, match="table_prefix"):
            DatabaseConfig(table_prefix="sym-`")


class TestSettings:
    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_DRIVER", "sqlite")
        monkeypatch.setenv("DB_DATABASE", "/tmp/sym.db")
        monkeypatch.setenv("DB_TABLE_PREFIX", "cms_")
        monkeypatch.setenv("DB_QUERY_LOGGING", "on")

        config = Settings(_env_file=None).database_config()

        assert config.driver == DriverEnum.SQLITE
        assert config.database == "/tmp/sym.db"
        assert config.table_prefix == "cms_"
        assert config.query_logging is True

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("DB_DRIVER", "DB_HOST", "DB_PORT", "DB_TABLE_PREFIX"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)
        assert settings.DB_DRIVER == DriverEnum.MYSQL
        assert settings.DB_HOST == "localhost"
        assert settings.DB_PORT == 3306
        assert settings.database_config().engine == "InnoDB"
