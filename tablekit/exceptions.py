"""TableKit exception hierarchy.

All TableKit-specific exceptions inherit from TableKitException, enabling
catch-all handling while supporting specific error types.

Selecting a row that the selectability predicate excludes has no exception
here: it is a normal UI race and is ignored, never raised.
"""

from __future__ import annotations

from typing import Any


class TableKitException(Exception):
    """Base exception for all TableKit errors."""

    def __init__(self, message: str, **context: Any) -> None:
        """Initialize TableKit exception.

        Parameters
        ----------
        message : str
            Human-readable error message.
        **context : Any
            Additional context (option, column_id, row_id, etc.).
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """Format exception with context."""
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx})"
        return self.message


class ConfigurationError(TableKitException):
    """Invalid table configuration.

    Raised at setup time for duplicate column ids, a missing ``total_count``
    in server pagination mode, a non-positive page size, or rows whose
    identity cannot be resolved uniquely.
    """

    def __init__(self, message: str, option: str | None = None, **context: Any) -> None:
        """Initialize configuration error.

        Parameters
        ----------
        message : str
            Human-readable error message.
        option : str, optional
            The configuration option that was rejected.
        **context : Any
            Additional context.
        """
        super().__init__(message, option=option, **context)
        self.option = option


class AccessorError(TableKitException):
    """A column value accessor raised.

    Never propagated out of the pipeline: the failing cell is logged and
    treated as an empty value for filtering, sorting, and display.
    """

    def __init__(
        self,
        message: str,
        column_id: str | None = None,
        row_id: str | int | None = None,
        **context: Any,
    ) -> None:
        """Initialize accessor error.

        Parameters
        ----------
        message : str
            Human-readable error message.
        column_id : str, optional
            The column whose accessor failed.
        row_id : str or int, optional
            The row being read, when known.
        **context : Any
            Additional context.
        """
        super().__init__(message, column_id=column_id, row_id=row_id, **context)
        self.column_id = column_id
        self.row_id = row_id


class CommitError(TableKitException):
    """An edit commit was rejected.

    The cell returns to idle without applying the value. The controller does
    not retry; the caller decides whether to start a new edit.
    """

    def __init__(
        self,
        message: str,
        row_id: str | int | None = None,
        column_id: str | None = None,
        **context: Any,
    ) -> None:
        """Initialize commit error.

        Parameters
        ----------
        message : str
            Human-readable error message.
        row_id : str or int, optional
            The row of the cell being committed.
        column_id : str, optional
            The column of the cell being committed.
        **context : Any
            Additional context.
        """
        super().__init__(message, row_id=row_id, column_id=column_id, **context)
        self.row_id = row_id
        self.column_id = column_id
