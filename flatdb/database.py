"""
Database directory management for FlatDB

Databases are directories under a base directory, optionally grouped by
owner: ``<base_dir>/<owner>/<database>/`` or ``<base_dir>/<database>/``.
"""

import os
import re
import shutil
import logging
from typing import List, Optional

from flatdb.query_executor import QueryExecutor
from flatdb.types import RowFormat, CommitMode
from flatdb.errors import ParseError, StorageError, DatabaseNotFoundError

logger = logging.getLogger(__name__)

_NAME_PATTERN = re.compile(r'[A-Za-z0-9_][A-Za-z0-9_.-]*')


def _check_name(name: str, what: str) -> str:
    if not name or not _NAME_PATTERN.fullmatch(name) or '..' in name:
        raise ParseError(f"Invalid {what} name '{name}'")
    return name


class DatabaseManager:
    """Creates, lists and opens database directories"""

    def __init__(self, base_dir: str = './data',
                 row_format: RowFormat = RowFormat.PLAIN,
                 commit_mode: CommitMode = CommitMode.BEST_EFFORT,
                 strict_keywords: bool = False):
        self.base_dir = str(base_dir)
        self.row_format = row_format
        self.commit_mode = commit_mode
        self.strict_keywords = strict_keywords
        os.makedirs(self.base_dir, exist_ok=True)

    @classmethod
    def from_settings(cls, settings) -> 'DatabaseManager':
        return cls(
            settings.storage.data_dir,
            row_format=settings.engine.row_format,
            commit_mode=settings.engine.commit_mode,
            strict_keywords=settings.engine.strict_keywords
        )

    def _root(self, owner: Optional[str]) -> str:
        if owner is None:
            return self.base_dir
        return os.path.join(self.base_dir, _check_name(owner, 'owner'))

    def database_path(self, name: str, owner: Optional[str] = None) -> str:
        return os.path.join(self._root(owner), _check_name(name, 'database'))

    def database_exists(self, name: str, owner: Optional[str] = None) -> bool:
        return os.path.isdir(self.database_path(name, owner))

    def create_database(self, name: str, owner: Optional[str] = None) -> bool:
        """Create a database directory; False if it already exists"""
        path = self.database_path(name, owner)
        if os.path.isdir(path):
            return False
        try:
            os.makedirs(path)
        except OSError as e:
            raise StorageError(f"Could not create database {name}: {e}") from e
        logger.info("Database %s created at %s", name, path)
        return True

    def list_databases(self, owner: Optional[str] = None) -> List[str]:
        root = self._root(owner)
        if not os.path.isdir(root):
            return []
        return sorted(d for d in os.listdir(root)
                      if os.path.isdir(os.path.join(root, d)))

    def get_database(self, owner: str) -> Optional[str]:
        """First existing database of an owner, if any"""
        databases = self.list_databases(owner)
        return databases[0] if databases else None

    def delete_databases(self, owner: str) -> bool:
        """Remove every database belonging to an owner"""
        root = self._root(owner)
        if not os.path.isdir(root):
            return False
        shutil.rmtree(root)
        logger.info("Deleted databases of %s", owner)
        return True

    def open(self, name: str, owner: Optional[str] = None) -> QueryExecutor:
        """Executor over an existing database"""
        if not self.database_exists(name, owner):
            raise DatabaseNotFoundError(f"Database {name} not found")
        return QueryExecutor(
            self.database_path(name, owner),
            row_format=self.row_format,
            commit_mode=self.commit_mode,
            strict_keywords=self.strict_keywords
        )
