"""Console logging for the CLI.

Library modules log through ``from loguru import logger``; only the CLI
decides where records go.
"""

from __future__ import annotations

import sys

from loguru import logger

__all__ = ["configure_console_logging", "logger"]

_FORMAT = "<dim>{time:HH:mm:ss}</dim> <level>{level: <7}</level> {name}: {message}"


def _stderr_sink(message: str) -> None:
    # Looked up per record so a swapped sys.stderr (tests, CliRunner) is honoured.
    sys.stderr.write(message)


def configure_console_logging(verbose: bool = False) -> None:
    """Replace loguru's default handler with a stderr sink.

    WARNING and above by default, DEBUG when ``verbose``.
    """
    logger.remove()
    logger.add(
        _stderr_sink,
        level="DEBUG" if verbose else "WARNING",
        format=_FORMAT,
        colorize=False,
    )
