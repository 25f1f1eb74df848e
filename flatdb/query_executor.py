"""
Query Executor for FlatDB
Public entry point: parses commands, handles transactions and runs queries
against one database directory
"""

import time
import logging
from typing import Any, Dict, List

from flatdb.parser import (SQLParser, ParsedQuery, TransactionQuery, CreateTableQuery,
                           InsertQuery, SelectQuery, BEGIN, COMMIT, ROLLBACK)
from flatdb.storage import Storage
from flatdb.catalog import Catalog
from flatdb.table import Table
from flatdb.transaction import TransactionBuffer
from flatdb.types import QueryResult, TableSchema, RowFormat, CommitMode
from flatdb.errors import FlatDBError, TableExistsError, TransactionError

logger = logging.getLogger(__name__)


class QueryExecutor:
    """Executes command strings against one database directory"""

    def __init__(self, db_directory: str,
                 row_format: RowFormat = RowFormat.PLAIN,
                 commit_mode: CommitMode = CommitMode.BEST_EFFORT,
                 strict_keywords: bool = False):
        self.db_directory = str(db_directory)
        self.storage = Storage(self.db_directory, row_format)
        self.catalog = Catalog.load(self.storage)
        self.parser = SQLParser(strict_keywords=strict_keywords)
        self.transaction = TransactionBuffer()
        self.commit_mode = CommitMode(commit_mode)

    @classmethod
    def from_settings(cls, db_directory: str, settings) -> 'QueryExecutor':
        return cls(
            db_directory,
            row_format=settings.engine.row_format,
            commit_mode=settings.engine.commit_mode,
            strict_keywords=settings.engine.strict_keywords
        )

    @property
    def in_transaction(self) -> bool:
        return self.transaction.is_open

    def execute(self, command: str) -> QueryResult:
        """Execute one command string; engine errors come back as ERROR results"""
        start_time = time.time()

        action = self.parser.transaction_action(command)
        if action == BEGIN:
            result = self._begin()
        elif action == COMMIT:
            result = self._commit()
        elif action == ROLLBACK:
            result = self._rollback()
        elif self.transaction.is_open:
            result = QueryResult.buffered(self.transaction.append(command))
        else:
            result = self.dispatch(command)

        result.execution_time = time.time() - start_time
        return result

    def dispatch(self, command: str) -> QueryResult:
        """Parse and run a single command outside of transaction handling"""
        try:
            parsed = self.parser.parse(command)
        except FlatDBError as e:
            return self._error(command, e)
        return self._apply(command, parsed)

    def _apply(self, command: str, parsed: ParsedQuery) -> QueryResult:
        try:
            if isinstance(parsed, CreateTableQuery):
                return self._execute_create_table(parsed)
            elif isinstance(parsed, InsertQuery):
                return self._execute_insert(parsed)
            elif isinstance(parsed, SelectQuery):
                return self._execute_select(parsed)
            raise TransactionError(f"Transaction control cannot be nested: {command.strip()}")
        except FlatDBError as e:
            return self._error(command, e)

    @staticmethod
    def _error(command: str, error: FlatDBError) -> QueryResult:
        logger.debug("Command failed (%s): %s", error.error_kind, command.strip())
        return QueryResult.error(str(error), error.error_kind)

    # ==================== QUERIES ====================

    def _execute_create_table(self, query: CreateTableQuery) -> QueryResult:
        self.catalog.create_table(query.table_name, query.columns)
        return QueryResult.printed(
            [f"Table and metadata for {query.table_name} created successfully."])

    def _execute_insert(self, query: InsertQuery) -> QueryResult:
        table = self.catalog.resolve(query.table_name)
        table.insert(query.values)
        message = f"Data inserted into table {query.table_name}."
        return QueryResult.printed([message], message=message, row_count=1)

    def _execute_select(self, query: SelectQuery) -> QueryResult:
        table = self.catalog.resolve(query.table_name)
        columns, rows = table.select(query.columns)

        lines = [' '.join(columns)]
        lines.extend(' '.join(row) for row in rows)
        return QueryResult.printed(
            lines,
            message=f"{len(rows)} row(s) selected",
            columns=columns,
            data=[dict(zip(columns, row)) for row in rows],
            row_count=len(rows)
        )

    # ==================== TRANSACTIONS ====================

    def _begin(self) -> QueryResult:
        self.transaction.begin()
        logger.info("Transaction started in %s", self.db_directory)
        return QueryResult.printed(["Transaction started."])

    def _rollback(self) -> QueryResult:
        if not self.transaction.is_open:
            return QueryResult.printed(["No transaction in progress."])
        discarded = self.transaction.discard()
        logger.info("Transaction rolled back, %d command(s) discarded", discarded)
        return QueryResult.printed(
            [f"Transaction rolled back: {discarded} command(s) discarded."])

    def _commit(self) -> QueryResult:
        if not self.transaction.is_open:
            return QueryResult.printed(["No transaction in progress."])

        commands = self.transaction.drain()
        if self.commit_mode == CommitMode.ATOMIC:
            return self._commit_atomic(commands)
        return self._commit_best_effort(commands)

    def _commit_best_effort(self, commands: List[str]) -> QueryResult:
        """Replay every command in order; failures do not undo earlier ones"""
        results = []
        lines = []
        for command in commands:
            result = self.dispatch(command)
            if not result.success:
                logger.warning("Buffered command failed during commit: %s", command.strip())
            results.append(result)
            lines.extend(result.render())

        failed = sum(1 for r in results if not r.success)
        summary = (f"Transaction committed: {len(commands) - failed} of "
                   f"{len(commands)} command(s) applied.")
        lines.append(summary)
        if failed:
            lines.append(f"Best-effort commit: {failed} command(s) failed; "
                         f"earlier changes were kept.")
        logger.info("Committed %d command(s), %d failed", len(commands), failed)
        return QueryResult.printed(lines, message=summary, results=results,
                                   row_count=len(commands) - failed)

    def _commit_atomic(self, commands: List[str]) -> QueryResult:
        """Validate every command first; apply them only if all pass"""
        staged: Dict[str, TableSchema] = {}
        plan = []
        failures = []
        for command in commands:
            try:
                parsed = self.parser.parse(command)
                self._stage(command, parsed, staged)
                plan.append((command, parsed))
            except FlatDBError as e:
                failures.append(QueryResult.error(f"{command.strip()}: {e}", e.error_kind))

        if failures:
            lines = [r.message for r in failures]
            message = (f"Transaction rolled back: {len(failures)} of {len(commands)} "
                       f"command(s) failed validation; nothing was applied.")
            lines.append(message)
            logger.warning("Atomic commit aborted, %d command(s) invalid", len(failures))
            result = QueryResult.error(message, TransactionError.error_kind)
            result.lines = lines
            result.results = failures
            return result

        results = []
        lines = []
        for command, parsed in plan:
            result = self._apply(command, parsed)
            results.append(result)
            lines.extend(result.render())

        summary = f"Transaction committed: {len(commands)} command(s) applied."
        lines.append(summary)
        logger.info("Atomically committed %d command(s)", len(commands))
        return QueryResult.printed(lines, message=summary, results=results,
                                   row_count=len(commands))

    def _stage(self, command: str, parsed: ParsedQuery, staged: Dict[str, TableSchema]):
        """Check a buffered command against disk plus the tables staged before it"""
        if isinstance(parsed, TransactionQuery):
            raise TransactionError(f"Transaction control cannot be nested: {command.strip()}")

        if isinstance(parsed, CreateTableQuery):
            if parsed.table_name in staged or parsed.table_name in self.catalog:
                raise TableExistsError(f"Table {parsed.table_name} already exists.")
            staged[parsed.table_name] = TableSchema(parsed.table_name, parsed.columns)
            return

        schema = staged.get(parsed.table_name)
        if schema is None:
            schema = self.catalog.resolve(parsed.table_name).schema
        if isinstance(parsed, InsertQuery):
            Table(parsed.table_name, schema, self.storage).validate_row(parsed.values)

    # ==================== INTROSPECTION ====================

    def table_names(self) -> List[str]:
        return self.catalog.table_names()

    def describe(self, table_name: str) -> TableSchema:
        return self.catalog.resolve(table_name).schema

    def table(self, table_name: str) -> Table:
        return self.catalog.resolve(table_name)

    def transaction_status(self) -> Dict[str, Any]:
        return {
            'open': self.transaction.is_open,
            'pending': len(self.transaction),
            'commit_mode': self.commit_mode.value
        }
