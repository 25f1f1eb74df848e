"""
FlatDB Engine Package
"""

from flatdb.query_executor import QueryExecutor
from flatdb.database import DatabaseManager
from flatdb.parser import SQLParser
from flatdb.storage import Storage
from flatdb.catalog import Catalog
from flatdb.table import Table, validate_value
from flatdb.transaction import TransactionBuffer, TransactionState
from flatdb.types import (DataType, ColumnDefinition, TableSchema, QueryResult,
                          ResultStatus, RowFormat, CommitMode)
from flatdb.errors import (FlatDBError, ParseError, StorageError, SchemaError,
                           TableNotFoundError, TableExistsError, ArityMismatchError,
                           ValidationError, TypeMismatchError, SizeExceededError,
                           TransactionError)

__version__ = "1.0.0"
__author__ = "FlatDB Team"

__all__ = [
    'QueryExecutor',
    'DatabaseManager',
    'SQLParser',
    'Storage',
    'Catalog',
    'Table',
    'validate_value',
    'TransactionBuffer',
    'TransactionState',
    'DataType',
    'ColumnDefinition',
    'TableSchema',
    'QueryResult',
    'ResultStatus',
    'RowFormat',
    'CommitMode',
    'FlatDBError',
    'ParseError',
    'StorageError',
    'SchemaError',
    'TableNotFoundError',
    'TableExistsError',
    'ArityMismatchError',
    'ValidationError',
    'TypeMismatchError',
    'SizeExceededError',
    'TransactionError'
]
