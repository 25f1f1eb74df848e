"""Logging configuration for the FlatDB shell and server."""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: str = "INFO"):
    """Send log records to stderr so they never mix with query output"""
    logging.basicConfig(
        format=LOG_FORMAT,
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
    )
