"""Pytest configuration and fixtures for FlatDB tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from flatdb.config import Settings, StorageConfig, EngineConfig
from flatdb.query_executor import QueryExecutor
from flatdb.types import CommitMode, RowFormat


@pytest.fixture
def db_dir(tmp_path: Path) -> Path:
    """Provide an empty database directory."""
    path = tmp_path / "db"
    path.mkdir()
    return path


@pytest.fixture
def executor(db_dir: Path) -> QueryExecutor:
    """Executor with default (plain, best-effort) behaviour."""
    return QueryExecutor(db_dir)


@pytest.fixture
def atomic_executor(db_dir: Path) -> QueryExecutor:
    return QueryExecutor(db_dir, commit_mode=CommitMode.ATOMIC)


@pytest.fixture
def users(executor: QueryExecutor) -> QueryExecutor:
    """Executor with a users (id int, name varchar(10)) table."""
    result = executor.execute("CREATE TABLE users (id int, name varchar(10))")
    assert result.success, result.message
    return executor


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings pointing at a temporary data directory."""
    return Settings(
        storage=StorageConfig(data_dir=tmp_path / "data"),
        engine=EngineConfig(row_format=RowFormat.PLAIN, commit_mode=CommitMode.BEST_EFFORT),
    )


@pytest.fixture
def data_lines(db_dir: Path):
    """Read the raw lines of a table's data file."""

    def read(table: str) -> list:
        return (db_dir / f"{table}.txt").read_text(encoding="utf-8").splitlines()

    return read
