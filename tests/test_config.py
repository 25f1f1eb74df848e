"""Tests for configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from flatdb.config import ServerConfig, Settings
from flatdb.query_executor import QueryExecutor
from flatdb.types import CommitMode, RowFormat


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.storage.data_dir == Path("./data")
        assert settings.engine.row_format == RowFormat.PLAIN
        assert settings.engine.commit_mode == CommitMode.BEST_EFFORT
        assert settings.engine.strict_keywords is False
        assert settings.server.port == 5000

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("FLATDB_STORAGE__DATA_DIR", str(tmp_path))
        monkeypatch.setenv("FLATDB_ENGINE__COMMIT_MODE", "atomic")
        monkeypatch.setenv("FLATDB_ENGINE__ROW_FORMAT", "escaped")
        settings = Settings()
        assert settings.storage.data_dir == tmp_path
        assert settings.engine.commit_mode == CommitMode.ATOMIC
        assert settings.engine.row_format == RowFormat.ESCAPED

    def test_invalid_port(self):
        with pytest.raises(ValidationError):
            ServerConfig(port=0)

    def test_ensure_directories(self, test_settings):
        test_settings.ensure_directories()
        assert test_settings.storage.data_dir.is_dir()

    def test_executor_from_settings(self, test_settings, db_dir):
        test_settings.engine.strict_keywords = True
        executor = QueryExecutor.from_settings(db_dir, test_settings)
        result = executor.execute("SELECT * IN users")
        assert result.error_kind == "ParseFailure"
        assert "Expected FROM" in result.message
