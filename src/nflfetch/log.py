"""Logging setup for applications embedding nflfetch.

Library modules only create loggers with ``logging.getLogger(__name__)``.
Handlers are installed by the application (or the CLI) through
``configure_logging``.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


LOGGER_NAME = "nflfetch"

logging.getLogger(LOGGER_NAME).addHandler(logging.NullHandler())


def configure_logging(verbose: bool = False, console: Console | None = None) -> logging.Logger:
    """Attach a rich handler to the package logger.

    Calling this again replaces the handler installed by the previous call.

    Args:
        verbose: Log at DEBUG when True, WARNING otherwise.
        console: Console to write to; defaults to stderr.

    Returns:
        The package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=verbose,
        rich_tracebacks=verbose,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    return logger
