#!/usr/bin/env python3
"""
FlatDB - a file-backed table store with a tiny SQL-like language

    python main.py serve                      start the REST API
    python main.py shell <database-dir>       interactive shell on a directory
    python main.py remote <url> <database>    interactive shell over the REST API
"""

import sys

from flatdb.config import get_settings
from flatdb.logging_setup import setup_logging

USAGE = __doc__


def start_api_server(settings):
    """Start the Flask API server"""
    from api.server import create_app
    app = create_app(settings)
    print(f"Starting API server on http://{settings.server.host}:{settings.server.port}")
    print(f"Storage path: {settings.storage.data_dir}")
    app.run(host=settings.server.host, port=settings.server.port,
            debug=settings.server.debug, use_reloader=False)


def start_shell(settings, db_directory):
    from flatdb.query_executor import QueryExecutor
    from flatdb.shell import run_shell
    executor = QueryExecutor.from_settings(db_directory, settings)
    print(f"Database path: {executor.db_directory}")
    run_shell(executor)


def start_remote_shell(base_url, database):
    from flatdb.client import RemoteExecutor
    from flatdb.shell import run_shell
    executor = RemoteExecutor.create_database(base_url, database)
    run_shell(executor)


def main(argv=None):
    """Main entry point"""
    argv = sys.argv[1:] if argv is None else argv
    settings = get_settings()
    setup_logging(settings.observability.log_level)

    if argv[:1] == ['serve'] and len(argv) == 1:
        start_api_server(settings)
    elif argv[:1] == ['shell'] and len(argv) == 2:
        start_shell(settings, argv[1])
    elif argv[:1] == ['remote'] and len(argv) == 3:
        start_remote_shell(argv[1], argv[2])
    else:
        print(USAGE)
        return 2
    return 0


if __name__ == '__main__':
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nShutting down FlatDB...")
        sys.exit(0)
