"""Tests for TransactionBuffer and COMMIT/ROLLBACK handling."""

from flatdb.transaction import TransactionBuffer, TransactionState
from flatdb.types import ResultStatus


class TestTransactionBuffer:
    def test_initial_state(self):
        buffer = TransactionBuffer()
        assert buffer.state == TransactionState.IDLE
        assert not buffer.is_open
        assert len(buffer) == 0

    def test_begin_clears_pending_commands(self):
        buffer = TransactionBuffer()
        buffer.begin()
        buffer.append("INSERT INTO t VALUES (1)")
        buffer.begin()
        assert buffer.is_open
        assert buffer.pending == []

    def test_drain_returns_commands_in_order(self):
        buffer = TransactionBuffer()
        buffer.begin()
        buffer.append("first")
        assert buffer.append("second") == 2
        assert buffer.drain() == ["first", "second"]
        assert buffer.state == TransactionState.IDLE
        assert len(buffer) == 0

    def test_discard(self):
        buffer = TransactionBuffer()
        buffer.begin()
        buffer.append("first")
        assert buffer.discard() == 1
        assert not buffer.is_open


class TestBestEffortCommit:
    def test_commands_are_buffered_not_run(self, users, data_lines):
        users.execute("BEGIN TRANSACTION")
        result = users.execute("INSERT INTO users VALUES (1, 'Bob')")
        assert result.status == ResultStatus.BUFFERED
        assert users.in_transaction
        assert data_lines("users") == []

    def test_rollback_leaves_table_unchanged(self, users, data_lines):
        users.execute("INSERT INTO users VALUES (0, 'Zed')")
        before = len(data_lines("users"))
        users.execute("BEGIN TRANSACTION")
        users.execute("INSERT INTO users VALUES (1, 'Bob')")
        users.execute("INSERT INTO users VALUES (2, 'Ann')")
        result = users.execute("ROLLBACK")
        assert result.lines == ["Transaction rolled back: 2 command(s) discarded."]
        assert len(data_lines("users")) == before
        assert not users.in_transaction

    def test_commit_appends_in_buffered_order(self, users, data_lines):
        users.execute("BEGIN TRANSACTION")
        users.execute("INSERT INTO users VALUES (1, 'Bob')")
        users.execute("INSERT INTO users VALUES (2, 'Ann')")
        result = users.execute("COMMIT")
        assert result.success
        assert data_lines("users") == ["1:|Bob", "2:|Ann"]
        assert [r.success for r in result.results] == [True, True]
        assert result.lines[-1] == "Transaction committed: 2 of 2 command(s) applied."

    def test_failed_command_does_not_undo_earlier_ones(self, users, data_lines):
        users.execute("BEGIN TRANSACTION")
        users.execute("INSERT INTO users VALUES (1, 'Bob')")
        users.execute("INSERT INTO users VALUES (oops, 'Ann')")
        users.execute("INSERT INTO users VALUES (3, 'Cy')")
        result = users.execute("COMMIT")
        assert data_lines("users") == ["1:|Bob", "3:|Cy"]
        assert [r.error_kind for r in result.results] == [None, "TypeMismatch", None]
        assert "Best-effort commit: 1 command(s) failed; earlier changes were kept." in result.lines
        assert not users.in_transaction

    def test_select_inside_transaction_sees_earlier_buffered_writes(self, users):
        users.execute("BEGIN TRANSACTION")
        users.execute("INSERT INTO users VALUES (1, 'Bob')")
        users.execute("SELECT name FROM users")
        result = users.execute("commit")
        assert result.results[1].lines == ["name", "Bob"]

    def test_commit_without_transaction(self, users):
        result = users.execute("COMMIT")
        assert result.success
        assert result.lines == ["No transaction in progress."]

    def test_rollback_without_transaction(self, users):
        assert users.execute("ROLLBACK").lines == ["No transaction in progress."]

    def test_transaction_status(self, users):
        users.execute("BEGIN TRANSACTION")
        users.execute("INSERT INTO users VALUES (1, 'Bob')")
        assert users.transaction_status() == {
            "open": True, "pending": 1, "commit_mode": "best_effort"
        }


class TestAtomicCommit:
    def setup_table(self, executor):
        executor.execute("CREATE TABLE users (id int, name varchar(10))")

    def test_all_valid_commands_are_applied(self, atomic_executor, data_lines):
        self.setup_table(atomic_executor)
        atomic_executor.execute("BEGIN TRANSACTION")
        atomic_executor.execute("INSERT INTO users VALUES (1, 'Bob')")
        atomic_executor.execute("INSERT INTO users VALUES (2, 'Ann')")
        result = atomic_executor.execute("COMMIT")
        assert result.success
        assert data_lines("users") == ["1:|Bob", "2:|Ann"]

    def test_one_invalid_command_applies_nothing(self, atomic_executor, data_lines):
        self.setup_table(atomic_executor)
        atomic_executor.execute("BEGIN TRANSACTION")
        atomic_executor.execute("INSERT INTO users VALUES (1, 'Bob')")
        atomic_executor.execute("INSERT INTO users VALUES (2, 'LongerThanTen')")
        result = atomic_executor.execute("COMMIT")
        assert result.status == ResultStatus.ERROR
        assert result.error_kind == "TransactionFailure"
        assert [r.error_kind for r in result.results] == ["SizeExceeded"]
        assert data_lines("users") == []
        assert not atomic_executor.in_transaction

    def test_tables_created_in_the_batch_are_visible(self, atomic_executor, data_lines):
        atomic_executor.execute("BEGIN TRANSACTION")
        atomic_executor.execute("CREATE TABLE pets (id int, kind varchar(5))")
        atomic_executor.execute("INSERT INTO pets VALUES (1, 'cat')")
        result = atomic_executor.execute("COMMIT")
        assert result.success
        assert data_lines("pets") == ["1:|cat"]

    def test_insert_into_unknown_table_aborts(self, atomic_executor, db_dir):
        atomic_executor.execute("BEGIN TRANSACTION")
        atomic_executor.execute("CREATE TABLE pets (id int)")
        atomic_executor.execute("INSERT INTO ghost VALUES (1)")
        result = atomic_executor.execute("COMMIT")
        assert result.results[0].error_kind == "NotFound"
        assert not (db_dir / "pets.txt").exists()

    def test_duplicate_create_in_batch(self, atomic_executor):
        atomic_executor.execute("BEGIN TRANSACTION")
        atomic_executor.execute("CREATE TABLE pets (id int)")
        atomic_executor.execute("CREATE TABLE pets (id int)")
        result = atomic_executor.execute("COMMIT")
        assert [r.error_kind for r in result.results] == ["AlreadyExists"]
