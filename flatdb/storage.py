"""
Storage engine for FlatDB
Handles file I/O for one database directory
"""

import os
import logging
from typing import List

from flatdb.codec import RowCodec, encode_schema, decode_schema
from flatdb.types import ColumnDefinition, TableSchema, RowFormat
from flatdb.errors import StorageError, SchemaError, TableNotFoundError, TableExistsError

logger = logging.getLogger(__name__)

METADATA_SUFFIX = '.metadata.txt'
DATA_SUFFIX = '.txt'


class Storage:
    """File-based storage for the tables of one database directory"""

    def __init__(self, data_dir: str, row_format: RowFormat = RowFormat.PLAIN):
        self.data_dir = str(data_dir)
        self.codec = RowCodec(row_format)
        try:
            os.makedirs(self.data_dir, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create database directory {self.data_dir}: {e}") from e

    # Paths
    def metadata_path(self, table_name: str) -> str:
        return os.path.join(self.data_dir, table_name + METADATA_SUFFIX)

    def data_path(self, table_name: str) -> str:
        return os.path.join(self.data_dir, table_name + DATA_SUFFIX)

    def table_exists(self, table_name: str) -> bool:
        """A table exists once its data file does"""
        return os.path.exists(self.data_path(table_name))

    def list_tables(self) -> List[str]:
        """Names of all tables that have a metadata record"""
        try:
            entries = os.listdir(self.data_dir)
        except OSError as e:
            raise StorageError(f"Cannot list {self.data_dir}: {e}") from e
        return sorted(name[:-len(METADATA_SUFFIX)] for name in entries
                      if name.endswith(METADATA_SUFFIX))

    # Table operations
    def create_table(self, table_name: str, columns: List[ColumnDefinition]) -> TableSchema:
        """Write the metadata record, then the empty data file"""
        if self.table_exists(table_name):
            raise TableExistsError(f"Table {table_name} already exists.")

        metadata_path = self.metadata_path(table_name)
        if os.path.exists(metadata_path):
            logger.warning("Overwriting metadata of incomplete table %s", table_name)

        try:
            with open(metadata_path, 'w', encoding='utf-8') as f:
                f.write(encode_schema(columns))
            with open(self.data_path(table_name), 'x', encoding='utf-8'):
                pass
        except FileExistsError as e:
            raise TableExistsError(f"Table {table_name} already exists.") from e
        except OSError as e:
            raise StorageError(f"Could not create table {table_name}: {e}") from e

        logger.debug("Created %s and its metadata in %s", table_name, self.data_dir)
        return TableSchema(name=table_name, columns=list(columns))

    def load_table_schema(self, table_name: str) -> TableSchema:
        """Load table schema from disk"""
        metadata_path = self.metadata_path(table_name)
        if not self.table_exists(table_name) or not os.path.exists(metadata_path):
            raise TableNotFoundError(f"Table {table_name} does not exist.")

        try:
            with open(metadata_path, 'r', encoding='utf-8') as f:
                text = f.read()
        except UnicodeDecodeError as e:
            raise SchemaError(f"Metadata of {table_name} is not valid UTF-8: {e.reason}") from e
        except OSError as e:
            raise StorageError(f"Could not read metadata of {table_name}: {e}") from e
        return TableSchema(name=table_name, columns=decode_schema(text))

    # Data operations
    def append_row(self, table_name: str, values: List[str]):
        """Append one encoded row to the data file"""
        line = self.codec.encode(values)
        try:
            with open(self.data_path(table_name), 'a', encoding='utf-8') as f:
                f.write(line + '\n')
        except OSError as e:
            raise StorageError(f"Could not write to table {table_name}: {e}") from e
        logger.debug("Appended row to %s", table_name)

    def read_rows(self, table_name: str) -> List[List[str]]:
        """Decode every stored row of a table"""
        try:
            with open(self.data_path(table_name), 'r', encoding='utf-8') as f:
                text = f.read()
        except FileNotFoundError as e:
            raise TableNotFoundError(f"Table {table_name} does not exist.") from e
        except UnicodeDecodeError as e:
            raise StorageError(f"Data of table {table_name} is not valid UTF-8: {e.reason}") from e
        except OSError as e:
            raise StorageError(f"Could not read table {table_name}: {e}") from e

        # rows end at '\n' only; universal newlines already folded '\r'
        lines = text.split('\n')
        if lines[-1] == '':
            lines.pop()
        return [self.codec.decode(line) for line in lines]

    def count_rows(self, table_name: str) -> int:
        return len(self.read_rows(table_name))
