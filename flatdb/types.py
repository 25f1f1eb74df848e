"""
Type definitions and data structures for FlatDB
"""

from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field
from enum import Enum

class DataType(Enum):
    """Supported column types"""
    INT = "int"
    VARCHAR = "varchar"

class ResultStatus(Enum):
    """Outcome of a single execute() call"""
    PRINTED = "printed"
    ERROR = "error"
    BUFFERED = "buffered"

class RowFormat(Enum):
    """On-disk row encodings"""
    PLAIN = "plain"
    ESCAPED = "escaped"

class CommitMode(Enum):
    """How a COMMIT replays buffered commands"""
    BEST_EFFORT = "best_effort"
    ATOMIC = "atomic"

@dataclass(frozen=True)
class ColumnDefinition:
    """Column definition for table schema"""
    name: str
    data_type: DataType
    max_length: Optional[int] = None

    @property
    def type_string(self) -> str:
        """Type as written to the metadata record, e.g. varchar(10)"""
        if self.data_type == DataType.VARCHAR:
            return f"{self.data_type.value}({self.max_length})"
        return self.data_type.value

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'type': self.type_string,
            'data_type': self.data_type.value,
            'max_length': self.max_length
        }

    def __str__(self) -> str:
        return f"{self.name} {self.type_string}"

@dataclass
class TableSchema:
    """Ordered column definitions of one table"""
    name: str
    columns: List[ColumnDefinition]

    @property
    def column_names(self) -> List[str]:
        return [col.name for col in self.columns]

    def index_of(self, column_name: str) -> int:
        """Schema position of the first column with this name, -1 if absent"""
        for i, col in enumerate(self.columns):
            if col.name == column_name:
                return i
        return -1

    def __len__(self) -> int:
        return len(self.columns)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'columns': [col.to_dict() for col in self.columns]
        }

@dataclass
class QueryResult:
    """Standardized query result"""
    status: ResultStatus
    lines: List[str] = field(default_factory=list)
    message: Optional[str] = None
    columns: Optional[List[str]] = None
    data: Optional[List[Dict[str, str]]] = None
    error_kind: Optional[str] = None
    row_count: int = 0
    execution_time: float = 0.0
    results: List['QueryResult'] = field(default_factory=list)

    @classmethod
    def printed(cls, lines: List[str], message: Optional[str] = None, **kwargs) -> 'QueryResult':
        return cls(status=ResultStatus.PRINTED, lines=list(lines), message=message, **kwargs)

    @classmethod
    def error(cls, message: str, error_kind: str = "Error") -> 'QueryResult':
        return cls(status=ResultStatus.ERROR, lines=[message], message=message,
                   error_kind=error_kind)

    @classmethod
    def buffered(cls, pending: int) -> 'QueryResult':
        message = f"Command buffered ({pending} pending)."
        return cls(status=ResultStatus.BUFFERED, lines=[message], message=message,
                   row_count=pending)

    @property
    def success(self) -> bool:
        return self.status != ResultStatus.ERROR

    def render(self) -> List[str]:
        """Lines to show on a console"""
        if self.lines:
            return list(self.lines)
        return [self.message] if self.message else []

    def to_dict(self) -> Dict[str, Any]:
        """Convert to API-friendly dictionary"""
        return {
            'success': self.success,
            'status': self.status.value,
            'lines': self.lines,
            'message': self.message or '',
            'columns': self.columns or [],
            'data': self.data or [],
            'error_kind': self.error_kind,
            'row_count': self.row_count,
            'execution_time': self.execution_time,
            'results': [r.to_dict() for r in self.results]
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> 'QueryResult':
        """Rebuild a result received from the HTTP API"""
        return cls(
            status=ResultStatus(payload.get('status', 'error')),
            lines=payload.get('lines') or [],
            message=payload.get('message') or None,
            columns=payload.get('columns') or None,
            data=payload.get('data') or None,
            error_kind=payload.get('error_kind'),
            row_count=payload.get('row_count', 0),
            execution_time=payload.get('execution_time', 0.0),
            results=[cls.from_dict(r) for r in payload.get('results') or []]
        )
