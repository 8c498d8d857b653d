"""Logging setup for the command line."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "cratesmith"


def setup_logging(verbose: bool = False, console: Console | None = None) -> logging.Logger:
    """Route cratesmith log records to a rich handler on stderr.

    Calling it again only adjusts the level.

    Args:
        verbose: Log at DEBUG instead of INFO.
        console: Console to render to (defaults to stderr).

    Returns:
        The package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=verbose,
            markup=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        logger.addHandler(handler)
        logger.propagate = False

    return logger
