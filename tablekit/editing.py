"""Cell editing: commit results, editor registry, and commit invocation.

A cell is Idle, Editing (the single active editor holding a draft value),
or Committing (its commit has not resolved yet). A commit callback may
return a plain value or an awaitable; the outcome is always one of
``Committed``, ``Failed``, or ``Pending``, which later settles into one of
the first two. Rows are never modified here: applying a committed value
is the caller's job.
"""

from __future__ import annotations

import asyncio
import inspect

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any

from pydantic import Field

from .exceptions import CommitError
from .log import debug
from .models import ColumnDef, EditingState, EditMode, RowId, TableModel
from .rows import get_cell_value


OnEditCommit = Callable[[RowId, str, Any, Any], Any]


class EditPhase(str, Enum):
    """Editing phase of a single cell."""

    IDLE = "idle"
    EDITING = "editing"
    COMMITTING = "committing"


@dataclass(frozen=True)
class Committed:
    """The commit callback accepted the value."""

    row_id: RowId
    column_id: str
    value: Any


@dataclass(frozen=True)
class Failed:
    """The commit callback raised or its awaitable rejected."""

    row_id: RowId
    column_id: str
    value: Any
    error: CommitError


class Pending:
    """A commit whose awaitable has not resolved yet.

    When created inside a running event loop the awaitable is scheduled
    right away; otherwise it starts on the first ``wait()``. Either way the
    outcome is reported once through ``on_settle``.
    """

    def __init__(
        self,
        row_id: RowId,
        column_id: str,
        value: Any,
        awaitable: Awaitable[Any],
        on_settle: Callable[[Committed | Failed], None] | None = None,
    ) -> None:
        self.row_id = row_id
        self.column_id = column_id
        self.value = value
        self._awaitable = awaitable
        self._on_settle = on_settle
        self._task: asyncio.Future[Any] | None = None
        self._result: Committed | Failed | None = None
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            self._start()

    @property
    def cell(self) -> tuple[RowId, str]:
        return (self.row_id, self.column_id)

    @property
    def done(self) -> bool:
        """Whether the commit has settled."""
        return self._result is not None

    @property
    def result(self) -> Committed | Failed | None:
        """The settled outcome, or None while pending."""
        return self._result

    def _start(self) -> asyncio.Future[Any]:
        if self._task is None:
            self._task = asyncio.ensure_future(self._awaitable)
            self._task.add_done_callback(self._settle)
        return self._task

    def _settle(self, task: asyncio.Future[Any]) -> None:
        if self._result is not None:
            return
        if task.cancelled():
            error = CommitError(
                "Commit was cancelled", row_id=self.row_id, column_id=self.column_id
            )
            self._result = Failed(self.row_id, self.column_id, self.value, error)
        elif task.exception() is not None:
            self._result = _failure(self.row_id, self.column_id, self.value, task.exception())
        else:
            self._result = Committed(self.row_id, self.column_id, self.value)
        debug(f"Commit of {self.cell!r} settled: {type(self._result).__name__}")
        if self._on_settle is not None:
            self._on_settle(self._result)

    async def wait(self) -> Committed | Failed:
        """Wait for the commit to settle and return its outcome."""
        if self._result is not None:
            return self._result
        task = self._start()
        await asyncio.wait({task})
        self._settle(task)
        return self._result  # type: ignore[return-value]

    def __repr__(self) -> str:
        return f"Pending(row_id={self.row_id!r}, column_id={self.column_id!r})"


CommitResult = Committed | Failed | Pending


def _failure(row_id: RowId, column_id: str, value: Any, exc: BaseException) -> Failed:
    error = CommitError(f"Commit rejected: {exc}", row_id=row_id, column_id=column_id)
    error.__cause__ = exc
    return Failed(row_id, column_id, value, error)


def invoke_commit(
    on_edit_commit: OnEditCommit | None,
    editing: EditingState,
    row: Any,
    on_settle: Callable[[Committed | Failed], None] | None = None,
) -> CommitResult:
    """Hand the draft value to the commit callback.

    Parameters
    ----------
    on_edit_commit : Callable, optional
        ``on_edit_commit(row_id, column_id, value, row)``. May return an
        awaitable. Without a callback the commit is accepted immediately.
    editing : EditingState
        The editor being committed.
    row : Any
        The row the cell belongs to, passed through unchanged.
    on_settle : Callable, optional
        Receives the outcome of a ``Pending`` commit once it resolves.

    Returns
    -------
    Committed | Failed | Pending
        The outcome, or ``Pending`` when the callback returned an awaitable.
    """
    row_id, column_id, value = editing.row_id, editing.column_id, editing.value
    if on_edit_commit is None:
        return Committed(row_id, column_id, value)
    try:
        outcome = on_edit_commit(row_id, column_id, value, row)
    except Exception as e:
        return _failure(row_id, column_id, value, e)
    if inspect.isawaitable(outcome):
        return Pending(row_id, column_id, value, outcome, on_settle)
    return Committed(row_id, column_id, value)


def begin_edit(
    row: Any,
    row_id: RowId,
    column: ColumnDef,
    edit_mode: EditMode,
) -> EditingState | None:
    """Open an editor on a cell, seeded with its current value.

    Returns None when editing is disabled or the column is not editable.
    """
    if edit_mode == "none" or not column.editable:
        return None
    return EditingState(
        row_id=row_id, column_id=column.id, value=get_cell_value(row, column, row_id)
    )


def first_editable_column(columns: Sequence[ColumnDef]) -> ColumnDef | None:
    """First visible editable column, used by row edit mode."""
    for column in columns:
        if column.editable and not column.hidden:
            return column
    return None


# =============================================================================
# Editor registry
# =============================================================================


def _parse_number(raw: Any) -> int | float | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return raw
    text = str(raw).strip()
    try:
        return int(text)
    except ValueError:
        return float(text)


def _parse_boolean(raw: Any) -> bool:
    if isinstance(raw, str):
        return raw.strip().lower() in ("1", "true", "yes", "on")
    return bool(raw)


def _parse_date(raw: Any) -> date | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, date):
        return raw
    return date.fromisoformat(str(raw))


class EditorDescriptor(TableModel):
    """What a presentation layer needs to render an editor for a value type.

    Attributes:
        value_type: Registry key ("text", "number", ...).
        input_type: Suggested HTML-style input type.
        options: Choices for select editors.
        parse: Converts raw widget input into the committed value.
    """

    value_type: str = Field(alias="valueType")
    input_type: str = Field(default="text", alias="inputType")
    options: list[Any] | None = None
    parse: Callable[[Any], Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict, leaving out the parse callable."""
        return self.model_dump(by_alias=True, exclude_none=True, exclude={"parse"})

    def coerce(self, raw: Any) -> Any:
        """Run ``parse`` on raw input, or return it unchanged."""
        return self.parse(raw) if self.parse is not None else raw


class EditorRegistry:
    """Maps value types to editor descriptors."""

    def __init__(self, descriptors: Sequence[EditorDescriptor] = ()) -> None:
        self._descriptors: dict[str, EditorDescriptor] = {}
        for descriptor in descriptors:
            self.register(descriptor)

    def register(self, descriptor: EditorDescriptor) -> None:
        """Add or replace the descriptor for its value type."""
        self._descriptors[descriptor.value_type] = descriptor

    def get(self, value_type: str | None) -> EditorDescriptor | None:
        if value_type is None:
            return None
        return self._descriptors.get(value_type)

    def __contains__(self, value_type: object) -> bool:
        return value_type in self._descriptors

    @property
    def value_types(self) -> list[str]:
        return list(self._descriptors)

    def copy(self) -> EditorRegistry:
        return EditorRegistry(list(self._descriptors.values()))


def default_registry() -> EditorRegistry:
    """Registry with the built-in text, number, boolean, select and date editors."""
    return EditorRegistry(
        [
            EditorDescriptor(value_type="text"),
            EditorDescriptor(value_type="number", input_type="number", parse=_parse_number),
            EditorDescriptor(value_type="boolean", input_type="checkbox", parse=_parse_boolean),
            EditorDescriptor(value_type="select", input_type="select"),
            EditorDescriptor(value_type="date", input_type="date", parse=_parse_date),
        ]
    )
