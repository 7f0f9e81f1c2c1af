"""
Logging setup for command-line entrypoints.

Library modules only create module-level loggers (logging.getLogger(__name__))
and never configure handlers themselves. Scripts call setup_logging() once at
startup to get rich console output.
"""

import logging

from rich.logging import RichHandler


def setup_logging(level: int | str = logging.INFO) -> logging.Logger:
    """
    Configure the root logger with a rich console handler.

    Args:
        level: Log level as a logging constant or name (e.g. "DEBUG").

    Returns:
        The "tabfile" package logger.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    console_handler = RichHandler(rich_tracebacks=True, show_time=False)
    console_handler.setFormatter(logging.Formatter("%(message)s"))

    logging.basicConfig(level=level, handlers=[console_handler], force=True)

    return logging.getLogger("tabfile")
