"""
Table class with schema validation and row operations
"""

import re
import logging
from typing import Dict, List, Tuple

from flatdb.types import TableSchema, ColumnDefinition, DataType
from flatdb.storage import Storage
from flatdb.errors import ArityMismatchError, TypeMismatchError, SizeExceededError

logger = logging.getLogger(__name__)

WILDCARD = '*'
MISSING_CELL = '-'

_INT_PATTERN = re.compile(r'[0-9]+')
_LINE_BREAK = re.compile(r'[\r\n]')


def validate_value(value: str, column: ColumnDefinition):
    """Check a raw value against its column type before it is persisted"""
    if column.data_type == DataType.INT:
        if not _INT_PATTERN.fullmatch(value):
            raise TypeMismatchError(
                f'Type mismatch for column {column.name}; expected int, got "{value}"',
                column=column.name, value=value)
    elif column.data_type == DataType.VARCHAR:
        if _LINE_BREAK.search(value):
            raise TypeMismatchError(
                f'Value for column {column.name} may not contain a line break',
                column=column.name, value=value)
        if len(value) > column.max_length:
            raise SizeExceededError(
                f'Value "{value}" exceeds size limit of {column.max_length} for column {column.name}',
                column=column.name, value=value)


class Table:
    """A table on disk; rows are re-read on every select"""

    def __init__(self, name: str, schema: TableSchema, storage: Storage):
        self.name = name
        self.schema = schema
        self.storage = storage

    def validate_row(self, values: List[str]) -> bool:
        """Validate a full row against the schema, arity first"""
        if len(values) != len(self.schema):
            raise ArityMismatchError(
                f"Invalid number of values provided for insertion: "
                f"expected {len(self.schema)}, got {len(values)}")

        for value, column in zip(values, self.schema.columns):
            validate_value(value, column)
        return True

    def insert(self, values: List[str]):
        """Validate and append one row"""
        self.validate_row(values)
        self.storage.append_row(self.name, values)

    def project(self, requested: List[str]) -> List[str]:
        """Selected columns in schema order; unknown names are dropped"""
        names = self.schema.column_names
        if requested == [WILDCARD]:
            return names
        wanted = set(requested)
        return [name for name in names if name in wanted]

    def select(self, requested: List[str]) -> Tuple[List[str], List[List[str]]]:
        """Return selected column names and the display cells of every row"""
        columns = self.project(requested)
        indexes = [self.schema.index_of(name) for name in columns]

        rows = []
        for line_no, fields in enumerate(self.storage.read_rows(self.name), start=1):
            if len(fields) != len(self.schema):
                logger.warning("Row %d of %s has %d fields, expected %d",
                               line_no, self.name, len(fields), len(self.schema))
            rows.append([fields[i].strip() if i < len(fields) else MISSING_CELL
                         for i in indexes])
        return columns, rows

    def select_dicts(self, requested: List[str]) -> List[Dict[str, str]]:
        columns, rows = self.select(requested)
        return [dict(zip(columns, row)) for row in rows]

    def get_stats(self) -> Dict:
        """Get table statistics"""
        return {
            'name': self.name,
            'row_count': self.storage.count_rows(self.name),
            'columns': [str(col) for col in self.schema.columns]
        }
