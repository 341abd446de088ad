"""Logging utilities for TableKit.

Engines never raise on recoverable cell-level problems; they log a warning
through this module and carry on.
"""

from __future__ import annotations

import logging
import sys


class _LoggerHolder:
    """Holder for the global logger instance."""

    instance: logging.Logger | None = None


def get_logger() -> logging.Logger:
    """Get the tablekit logger instance.

    Returns
    -------
    logging.Logger
        The tablekit logger configured with a stream handler.
    """
    if _LoggerHolder.instance is None:
        logger = logging.getLogger("tablekit")
        logger.setLevel(logging.WARNING)

        # Only add handler if none exists
        if not logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setLevel(logging.DEBUG)
            formatter = logging.Formatter("%(name)s - %(levelname)s - %(message)s")
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        _LoggerHolder.instance = logger

    return _LoggerHolder.instance


def configure(level: int | str, fmt: str | None = None) -> None:
    """Apply a level and optional format to the tablekit logger.

    Parameters
    ----------
    level : int or str
        The logging level (e.g., logging.DEBUG, "DEBUG").
    fmt : str, optional
        A ``logging.Formatter`` format string for the stream handler.
    """
    set_level(level)
    if fmt:
        for handler in get_logger().handlers:
            handler.setFormatter(logging.Formatter(fmt))


def debug(msg: str) -> None:
    """Log a debug message.

    Parameters
    ----------
    msg : str
        The message to log.
    """
    get_logger().debug(msg)


def warn(msg: str) -> None:
    """Log a warning message. Never raises exceptions.

    Parameters
    ----------
    msg : str
        The warning message to log.
    """
    get_logger().warning(msg)


def set_level(level: int | str) -> None:
    """Set the logging level.

    Parameters
    ----------
    level : int or str
        The logging level (e.g., logging.DEBUG, "DEBUG").
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())
    get_logger().setLevel(level)


def log_callback_error(concern: str, exc: BaseException) -> None:
    """Log a failure raised by a caller-supplied change callback.

    Parameters
    ----------
    concern : str
        The piece of table state whose callback failed (e.g. "selection").
    exc : BaseException
        The exception that was raised.
    """
    get_logger().error(f"Change callback for '{concern}' raised: {exc!r}")
