"""
Text codecs for FlatDB table files

Metadata records hold one ``name:|type`` line per column. Data files hold one
line per row with values joined by the same delimiter.
"""

import re
from typing import List, Optional, Tuple

from flatdb.types import ColumnDefinition, DataType, RowFormat
from flatdb.errors import ParseError, SchemaError

DELIMITER = ":|"
ESCAPE = "\\"

_TYPE_PATTERN = re.compile(r'^(int|varchar)(?:\((\d+)\))?$', re.IGNORECASE)


def parse_type(type_str: str) -> Optional[Tuple[DataType, Optional[int]]]:
    """Parse ``int`` or ``varchar(n)``; None if unsupported"""
    match = _TYPE_PATTERN.match(type_str.strip())
    if not match:
        return None

    data_type = DataType(match.group(1).lower())
    length = match.group(2)
    if data_type == DataType.INT:
        return (data_type, None) if length is None else None

    if length is None or int(length) <= 0:
        return None
    return data_type, int(length)


def extract_parenthesized(text: str, what: str) -> str:
    """Text between the first '(' and the last ')'"""
    start = text.find('(')
    end = text.rfind(')')
    if start == -1 or end == -1 or end < start:
        raise ParseError(f"Malformed {what}: expected a parenthesized list")
    return text[start + 1:end]


def parse_column_definitions(raw: str) -> List[ColumnDefinition]:
    """Parse the column-definition blob of a CREATE TABLE command"""
    body = extract_parenthesized(raw, "column definition list").strip()
    if not body:
        raise ParseError("A table needs at least one column")

    columns = []
    for entry in body.split(','):
        cleaned = re.sub(r'\s+', ' ', entry.strip())
        parts = cleaned.split(' ')
        if len(parts) != 2 or not parts[0]:
            raise ParseError(f"Malformed column definition: '{cleaned}'")

        name, type_str = parts
        if DELIMITER in name or DELIMITER in type_str:
            raise ParseError(f"Column definition may not contain '{DELIMITER}': '{cleaned}'")

        parsed = parse_type(type_str)
        if parsed is None:
            raise ParseError(f"Unsupported column type '{type_str}' for column {name}")
        data_type, max_length = parsed
        columns.append(ColumnDefinition(name=name, data_type=data_type, max_length=max_length))

    return columns


def encode_schema(columns: List[ColumnDefinition]) -> str:
    return ''.join(f"{col.name}{DELIMITER}{col.type_string}\n" for col in columns)


def decode_schema(text: str) -> List[ColumnDefinition]:
    columns = []
    for line_no, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        parts = line.split(DELIMITER)
        if len(parts) != 2:
            raise SchemaError(f"Corrupt metadata record at line {line_no}: '{line}'")

        name, type_str = parts
        parsed = parse_type(type_str)
        if parsed is None:
            raise SchemaError(f"Unknown column type '{type_str}' at line {line_no}")
        columns.append(ColumnDefinition(name=name, data_type=parsed[0], max_length=parsed[1]))
    return columns


class RowCodec:
    """Encodes a row as one delimited line

    PLAIN is the legacy format: values are joined as-is, so a value holding
    the delimiter splits into extra fields on read. ESCAPED prefixes every
    backslash and colon inside a value with a backslash.
    """

    def __init__(self, row_format: RowFormat = RowFormat.PLAIN):
        self.row_format = RowFormat(row_format)

    def encode(self, values: List[str]) -> str:
        if self.row_format == RowFormat.PLAIN:
            return DELIMITER.join(values)
        return DELIMITER.join(self._escape(v) for v in values)

    def decode(self, line: str) -> List[str]:
        if self.row_format == RowFormat.PLAIN:
            return line.split(DELIMITER)
        return self._split_escaped(line)

    @staticmethod
    def _escape(value: str) -> str:
        return value.replace(ESCAPE, ESCAPE * 2).replace(':', ESCAPE + ':')

    @staticmethod
    def _split_escaped(line: str) -> List[str]:
        fields = []
        current = []
        i = 0
        while i < len(line):
            char = line[i]
            if char == ESCAPE and i + 1 < len(line):
                current.append(line[i + 1])
                i += 2
            elif line.startswith(DELIMITER, i):
                fields.append(''.join(current))
                current = []
                i += len(DELIMITER)
            else:
                current.append(char)
                i += 1
        fields.append(''.join(current))
        return fields
