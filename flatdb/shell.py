"""
Interactive read-eval loop for FlatDB
"""

import sys
import logging

from flatdb.errors import FlatDBError

logger = logging.getLogger(__name__)

PROMPT = "Please enter the query you want to execute or type X to exit:"
EXIT_COMMAND = "X"


def run_shell(executor, stdin=None, stdout=None) -> int:
    """Feed lines from stdin to executor.execute() until X or end of input

    Returns the number of commands executed.
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    executed = 0

    while True:
        print(PROMPT, file=stdout)
        line = stdin.readline()
        if not line or line.strip().upper() == EXIT_COMMAND:
            break
        if not line.strip():
            continue

        try:
            result = executor.execute(line.rstrip('\n'))
        except FlatDBError as e:
            print(f"Error: {e}", file=stdout)
            continue
        executed += 1
        for output_line in result.render():
            print(output_line, file=stdout)

    if getattr(executor, 'in_transaction', False):
        logger.warning("Shell closed with an open transaction; buffered commands were discarded")
    return executed
