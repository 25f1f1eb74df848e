"""
SQL Parser for FlatDB

Grammar (keywords are case-insensitive):

    CREATE TABLE <name> (<col> <type>, ...)
    INSERT INTO <name> VALUES (<value>, ...)
    SELECT <*|col,col,...> FROM <name>
    BEGIN TRANSACTION | COMMIT | ROLLBACK

A command other than the transaction keywords is split into at most
MIN_TOKENS whitespace-delimited tokens; shorter commands are rejected.
"""

import re
from typing import List, Optional
from dataclasses import dataclass
from flatdb.types import ColumnDefinition
from flatdb.codec import parse_column_definitions, extract_parenthesized
from flatdb.errors import ParseError

MIN_TOKENS = 4

BEGIN = 'BEGIN'
COMMIT = 'COMMIT'
ROLLBACK = 'ROLLBACK'

TRANSACTION_KEYWORDS = {
    'BEGIN TRANSACTION': BEGIN,
    'COMMIT': COMMIT,
    'ROLLBACK': ROLLBACK
}

# keyword expected in the unused token slot of each verb
_SLOT_KEYWORDS = {
    'CREATE': 'TABLE',
    'INSERT': 'INTO',
    'SELECT': 'FROM'
}

_IDENTIFIER = re.compile(r'[A-Za-z_][A-Za-z0-9_]*')

@dataclass
class ParsedQuery:
    """Base class for parsed queries"""
    query_type: str

@dataclass
class TransactionQuery(ParsedQuery):
    """BEGIN TRANSACTION, COMMIT or ROLLBACK"""
    action: str

@dataclass
class CreateTableQuery(ParsedQuery):
    """Parsed CREATE TABLE query"""
    table_name: str
    columns: List[ColumnDefinition]

@dataclass
class InsertQuery(ParsedQuery):
    """Parsed INSERT query"""
    table_name: str
    values: List[str]

@dataclass
class SelectQuery(ParsedQuery):
    """Parsed SELECT query"""
    columns: List[str]
    table_name: str


def normalize(command: str) -> str:
    """Trim and drop one trailing ';'"""
    command = command.strip()
    if command.endswith(';'):
        command = command[:-1].rstrip()
    return command


def strip_quotes(value: str) -> str:
    """Remove one leading and one trailing single quote"""
    return re.sub(r"^'|'$", '', value)


class SQLParser:
    """Turns command strings into parsed query objects"""

    def __init__(self, strict_keywords: bool = False):
        self.strict_keywords = strict_keywords

    @staticmethod
    def transaction_action(command: str) -> Optional[str]:
        """BEGIN/COMMIT/ROLLBACK if the command is a transaction keyword"""
        key = ' '.join(normalize(command).upper().split())
        return TRANSACTION_KEYWORDS.get(key)

    @staticmethod
    def tokenize(command: str) -> List[str]:
        return normalize(command).split(None, MIN_TOKENS - 1)

    def parse(self, command: str) -> ParsedQuery:
        """Main parsing method - routes to specific parsers"""
        action = self.transaction_action(command)
        if action:
            return TransactionQuery(query_type='TRANSACTION', action=action)

        tokens = self.tokenize(command)
        if len(tokens) < MIN_TOKENS:
            raise ParseError("Unsupported or incomplete query.")

        verb = tokens[0].upper()
        if verb not in _SLOT_KEYWORDS:
            raise ParseError("Unsupported query type.")
        if self.strict_keywords:
            self._check_keywords(verb, tokens)

        if verb == 'CREATE':
            return self._parse_create_table(tokens)
        elif verb == 'INSERT':
            return self._parse_insert(tokens)
        return self._parse_select(tokens)

    @staticmethod
    def _check_keywords(verb: str, tokens: List[str]):
        slot = 2 if verb == 'SELECT' else 1
        expected = _SLOT_KEYWORDS[verb]
        if tokens[slot].upper() != expected:
            raise ParseError(f"Expected {expected} after {verb}, got '{tokens[slot]}'")
        if verb == 'INSERT' and not tokens[3].upper().startswith('VALUES'):
            raise ParseError("Expected VALUES in INSERT")

    @staticmethod
    def _table_name(token: str) -> str:
        if not _IDENTIFIER.fullmatch(token):
            raise ParseError(f"Invalid table name '{token}'")
        return token

    def _parse_create_table(self, tokens: List[str]) -> CreateTableQuery:
        """Parse CREATE TABLE query"""
        return CreateTableQuery(
            query_type='CREATE_TABLE',
            table_name=self._table_name(tokens[2]),
            columns=parse_column_definitions(tokens[3])
        )

    def _parse_insert(self, tokens: List[str]) -> InsertQuery:
        """Parse INSERT query"""
        values_text = extract_parenthesized(tokens[3], "value list")
        return InsertQuery(
            query_type='INSERT',
            table_name=self._table_name(tokens[2]),
            values=[strip_quotes(v.strip()) for v in self.split_values(values_text)]
        )

    def _parse_select(self, tokens: List[str]) -> SelectQuery:
        """Parse SELECT query"""
        columns_part = tokens[1].strip()
        if columns_part == '*':
            columns = ['*']
        else:
            columns = [c.strip() for c in columns_part.split(',') if c.strip()]

        return SelectQuery(
            query_type='SELECT',
            columns=columns,
            table_name=self._table_name(tokens[3].strip())
        )

    @staticmethod
    def split_values(values_text: str) -> List[str]:
        """Split on commas that are not inside single quotes

        A quote opens a quoted value only as its first non-blank character
        and closes it only when a comma or the end of the list follows, so
        apostrophes inside bare values (O'Brien) are ordinary characters.
        """
        values = []
        current = ''
        in_quotes = False

        for i, char in enumerate(values_text):
            if char == "'":
                if not in_quotes:
                    in_quotes = not current.strip()
                else:
                    rest = values_text[i + 1:].lstrip()
                    in_quotes = bool(rest) and not rest.startswith(',')
                current += char
            elif char == ',' and not in_quotes:
                values.append(current)
                current = ''
            else:
                current += char

        values.append(current)
        return values
