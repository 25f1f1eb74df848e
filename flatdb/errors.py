"""
Custom exception classes for FlatDB
"""

class FlatDBError(Exception):
    """Base exception for FlatDB"""
    error_kind = "Error"

class ParseError(FlatDBError):
    """Malformed or unsupported command"""
    error_kind = "ParseFailure"

class StorageError(FlatDBError):
    """File system error while reading or writing a table"""
    error_kind = "IOFailure"

class SchemaError(FlatDBError):
    """Persisted metadata record could not be decoded"""
    error_kind = "ParseFailure"

class TableNotFoundError(FlatDBError):
    """Table or its metadata does not exist"""
    error_kind = "NotFound"

class TableExistsError(FlatDBError):
    """Table data file already exists"""
    error_kind = "AlreadyExists"

class ArityMismatchError(FlatDBError):
    """Value count differs from the column count"""
    error_kind = "ArityMismatch"

class ValidationError(FlatDBError):
    """A value was rejected by its column type"""

    def __init__(self, message: str, column: str = None, value: str = None):
        super().__init__(message)
        self.column = column
        self.value = value

class TypeMismatchError(ValidationError):
    """Value does not match an int column"""
    error_kind = "TypeMismatch"

class SizeExceededError(ValidationError):
    """Value is longer than a varchar column allows"""
    error_kind = "SizeExceeded"

class TransactionError(FlatDBError):
    """Transaction-related error"""
    error_kind = "TransactionFailure"

class DatabaseNotFoundError(FlatDBError):
    """Database does not exist"""
    error_kind = "NotFound"

class RemoteError(FlatDBError):
    """HTTP API could not be reached or answered garbage"""
    error_kind = "IOFailure"
