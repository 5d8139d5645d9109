"""
Logging configuration for fixtura.

Library modules only create module loggers (``logging.getLogger(__name__)``)
under the ``fixtura`` namespace and never configure handlers. Applications
and the CLI call ``setup_logging`` to route those records to the console
through rich.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "fixtura"


def setup_logging(
    level: int | str = logging.WARNING,
    console: Console | None = None,
) -> logging.Logger:
    """
    Configure the ``fixtura`` logger with a rich console handler.

    Calling this again replaces the handler installed by the previous call.

    Args:
        level: Logging level, as a number or level name
        console: Console to write to (default: stderr)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper() if isinstance(level, str) else level)

    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)

    return logger
