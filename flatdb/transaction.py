"""
Transaction buffer for FlatDB

Commands issued between BEGIN TRANSACTION and COMMIT are held here and only
executed when the transaction commits. The buffer lives in memory and
belongs to a single executor.
"""

import logging
from enum import Enum
from typing import List

logger = logging.getLogger(__name__)


class TransactionState(Enum):
    IDLE = "idle"
    OPEN = "open"


class TransactionBuffer:
    """Ordered queue of pending command strings plus an open flag"""

    def __init__(self):
        self.state = TransactionState.IDLE
        self._commands: List[str] = []

    @property
    def is_open(self) -> bool:
        return self.state == TransactionState.OPEN

    @property
    def pending(self) -> List[str]:
        return list(self._commands)

    def __len__(self) -> int:
        return len(self._commands)

    def begin(self):
        """Open a transaction; anything buffered so far is dropped"""
        if self._commands:
            logger.warning("BEGIN TRANSACTION discarded %d pending command(s)", len(self._commands))
        self._commands.clear()
        self.state = TransactionState.OPEN

    def append(self, command: str) -> int:
        self._commands.append(command)
        return len(self._commands)

    def drain(self) -> List[str]:
        """Hand back the buffered commands in order and return to IDLE"""
        commands = self._commands
        self._commands = []
        self.state = TransactionState.IDLE
        return commands

    def discard(self) -> int:
        """Drop the buffered commands and return to IDLE"""
        count = len(self._commands)
        self._commands = []
        self.state = TransactionState.IDLE
        return count
