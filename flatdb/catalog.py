"""
Table catalog for FlatDB

Maps table names to their files in one database directory. A catalog is
built from disk when its executor starts and is owned by that executor.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List

from flatdb.storage import Storage
from flatdb.table import Table
from flatdb.types import ColumnDefinition
from flatdb.errors import TableNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogEntry:
    """Where a table lives on disk"""
    name: str
    metadata_path: str
    data_path: str


class Catalog:
    """Resolves table names to schemas and data files"""

    def __init__(self, storage: Storage):
        self.storage = storage
        self._entries: Dict[str, CatalogEntry] = {}

    @classmethod
    def load(cls, storage: Storage) -> 'Catalog':
        """Build a catalog from the tables already on disk"""
        catalog = cls(storage)
        for name in storage.list_tables():
            if storage.table_exists(name):
                catalog._register(name)
        logger.debug("Loaded %d table(s) from %s", len(catalog._entries), storage.data_dir)
        return catalog

    def _register(self, name: str) -> CatalogEntry:
        entry = CatalogEntry(
            name=name,
            metadata_path=self.storage.metadata_path(name),
            data_path=self.storage.data_path(name)
        )
        self._entries[name] = entry
        return entry

    def table_names(self) -> List[str]:
        return sorted(self._entries)

    def __contains__(self, name: str) -> bool:
        """True while the table's data file is on disk"""
        return self.storage.table_exists(name)

    def entry(self, name: str) -> CatalogEntry:
        if name in self._entries:
            return self._entries[name]
        if self.storage.table_exists(name):
            # created by someone else since we loaded
            return self._register(name)
        raise TableNotFoundError(f"Table {name} does not exist.")

    def resolve(self, name: str) -> Table:
        """Load the current schema of a table"""
        self.entry(name)
        try:
            schema = self.storage.load_table_schema(name)
        except TableNotFoundError:
            self._entries.pop(name, None)
            raise
        return Table(name, schema, self.storage)

    def create_table(self, name: str, columns: List[ColumnDefinition]) -> Table:
        schema = self.storage.create_table(name, columns)
        self._register(name)
        logger.info("Table %s created with %d column(s)", name, len(columns))
        return Table(name, schema, self.storage)
