"""CLI utilities for running async operations and formatting output."""

from taskboard.cli.utils.async_runner import coro
from taskboard.cli.utils.database import cli_database, cli_session
from taskboard.cli.utils.formatters import (
    error,
    header,
    info,
    success,
    table,
    warning,
    yes_no,
)

__all__ = [
    "cli_database",
    "cli_session",
    "coro",
    "error",
    "header",
    "info",
    "success",
    "table",
    "warning",
    "yes_no",
]
