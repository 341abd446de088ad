"""Table controller.

``TableController`` is constructed once per table and handed explicitly to
whatever renders it. It owns the pipeline

    data → filter → sort → group (pass-through) → paginate → page rows

and one ``ReconciledValue`` per stateful concern. Every mutation runs to
completion under a lock and leaves the derived state recomputed, so reads
always observe a consistent table.

Example
-------
>>> table = TableController(
...     data=[{"id": 1, "name": "Ada"}, {"id": 2, "name": "Linus"}],
...     columns=[ColumnDef(id="name")],
...     selection_mode="multiple",
... )
>>> table.toggle_sort("name")
>>> table.toggle_row_selection(2)
>>> table.selected_row_ids
frozenset({2})
"""

from __future__ import annotations

import threading

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from . import expansion, filtering, pagination, selection, sorting
from .config import get_settings
from .debounce import Debouncer
from .editing import (
    Committed,
    CommitResult,
    EditorDescriptor,
    EditPhase,
    Failed,
    Pending,
    begin_edit,
    default_registry,
    first_editable_column,
    invoke_commit,
)
from .exceptions import ConfigurationError
from .grouping import build_groups
from .keyboard import KeyResult, NavAction, clamp_cursor, resolve_key
from .log import debug, log_callback_error, warn
from .models import (
    ColumnDef,
    EditingState,
    FilterDescriptor,
    FocusCursor,
    MatchMode,
    PaginationState,
    RowGroup,
    RowId,
    SelectAllState,
    SortDescriptor,
    TableSnapshot,
)
from .options import TableOptions
from .reconciled import UNSET, ReconciledValue, is_unset
from .rows import RowIdentity


# =============================================================================
# Normalizers for reconciled state
# =============================================================================


def _to_id_set(value: Any) -> frozenset[RowId]:
    if value is None:
        return frozenset()
    if isinstance(value, (str, int)):
        return frozenset({value})
    return frozenset(value)


def _to_text(value: Any) -> str:
    return "" if value is None else str(value)


def _to_pagination(value: Any) -> PaginationState:
    if value is None:
        return PaginationState()
    if isinstance(value, PaginationState):
        return value
    try:
        return PaginationState.model_validate(value)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid pagination {value!r}", option="pagination") from e


def _to_editing(value: Any) -> EditingState | None:
    if value is None or isinstance(value, EditingState):
        return value
    try:
        return EditingState.model_validate(value)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid editing cell {value!r}", option="editing_cell") from e


def _build_options(base: TableOptions | None, changes: Mapping[str, Any]) -> TableOptions:
    """Create or evolve options, reporting validation failures as configuration errors."""
    try:
        if base is None:
            return TableOptions(**changes)
        return base.evolve(**changes)
    except ValidationError as e:
        errors = e.errors(include_url=False)
        detail = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'options'}: {err['msg']}" for err in errors
        )
        first = errors[0]["loc"][0] if errors and errors[0]["loc"] else None
        raise ConfigurationError(
            f"Invalid table options: {detail}",
            option=str(first) if first is not None else None,
        ) from e


class TableController:
    """Stateful controller for one data table.

    Parameters
    ----------
    options : TableOptions, optional
        Complete configuration. Keyword arguments are applied on top of it
        (or used alone to build it) and accept snake_case or camelCase
        option names.

    Raises
    ------
    ConfigurationError
        On invalid setup: duplicate column ids, rows without a unique id,
        server pagination without ``total_count``, a non-positive page size.
    """

    def __init__(self, options: TableOptions | None = None, **kwargs: Any) -> None:
        options = _build_options(options, kwargs) if kwargs or options is None else options
        defaults = get_settings().table

        self._lock = threading.RLock()
        self._defaults = defaults
        self._options = options

        self._selection: ReconciledValue[frozenset[RowId]] = ReconciledValue(
            "selection", normalize=_to_id_set
        )
        self._sort: ReconciledValue[list[SortDescriptor]] = ReconciledValue(
            "sort", normalize=sorting.normalize_sort
        )
        self._filters: ReconciledValue[list[FilterDescriptor]] = ReconciledValue(
            "filters", normalize=filtering.normalize_filters
        )
        self._global_filter: ReconciledValue[str] = ReconciledValue(
            "global_filter", normalize=_to_text
        )
        self._pagination: ReconciledValue[PaginationState] = ReconciledValue(
            "pagination", normalize=_to_pagination
        )
        self._expansion: ReconciledValue[frozenset[RowId]] = ReconciledValue(
            "expansion", normalize=_to_id_set
        )
        self._editing: ReconciledValue[EditingState | None] = ReconciledValue(
            "editing", normalize=_to_editing
        )

        self._selection.reset(options.default_selected_rows)
        self._sort.reset(options.default_sort)
        self._filters.reset(options.default_filters)
        self._global_filter.reset(options.default_global_filter)
        self._pagination.reset(
            options.default_pagination or PaginationState(page_size=defaults.page_size)
        )
        self._expansion.reset(options.default_expanded_rows)

        self._committing: dict[tuple[RowId, str], Pending] = {}
        self._toggle_all_undo: tuple[frozenset[RowId], frozenset[RowId], Any] | None = None
        self._focus: FocusCursor | None = None
        self._filter_generation = 0
        self._debouncer = Debouncer(
            self._apply_debounced_global_filter, self._debounce_ms(options)
        )

        # Pipeline state, recomputed by _refresh()
        self._config_version = 0
        self._filter_cache: tuple[Any, list[Any]] | None = None
        self._sort_cache: tuple[Any, list[Any]] | None = None
        self._processed_key: Any = None
        self._processed: list[Any] = []
        self._processed_ids: list[RowId] = []
        self._total = 0
        self._effective_pagination = self._pagination.value
        self._reported_clamp: tuple[PaginationState, PaginationState] | None = None
        self._page_rows: list[Any] = []
        self._page_ids: list[RowId] = []
        self._groups: list[RowGroup] = []

        self._apply_options(options)
        debug(f"TableController created with {len(options.data)} rows")

    # =========================================================================
    # Configuration
    # =========================================================================

    def _apply_options(self, options: TableOptions) -> None:
        identity = RowIdentity(options.get_row_id, options.row_id_key)
        ids = identity.resolve_all(options.data)
        by_object = {id(row): rid for row, rid in zip(options.data, ids)}
        if len(by_object) != len(ids):
            raise ConfigurationError(
                "The same row object appears more than once in data", option="data"
            )

        # Validate every controlled value before any field changes
        concerns = [
            (self._selection, options.selected_rows, options.on_selection_change),
            (self._sort, options.sort, options.on_sort_change),
            (self._filters, options.filters, options.on_filters_change),
            (self._global_filter, options.global_filter, options.on_global_filter_change),
            (self._pagination, options.pagination, options.on_pagination_change),
            (self._expansion, options.expanded_rows, options.on_expanded_change),
            (self._editing, options.editing_cell, options.on_editing_cell_change),
        ]
        try:
            prepared = [(state, state.prepare(raw), cb) for state, raw, cb in concerns]
        except (ValidationError, TypeError) as e:
            raise ConfigurationError(f"Invalid controlled state: {e}", option="state") from e

        self._options = options
        self._ids_by_object = by_object
        self._rows_by_id: dict[RowId, Any] = dict(zip(ids, options.data))
        self._columns_by_id = {column.id: column for column in options.columns}
        self._editors = options.editors or default_registry()

        # Data, columns and switches may all have changed
        self._config_version += 1

        for state, controlled, on_change in prepared:
            state.sync(controlled, on_change, prepared=True)

        delay = self._debounce_ms(options)
        if self._debouncer.delay_ms != delay:
            self._debouncer.cancel()
            self._debouncer = Debouncer(self._apply_debounced_global_filter, delay)

        self._refresh()

    def _debounce_ms(self, options: TableOptions) -> int:
        if options.global_filter_debounce_ms is not None:
            return options.global_filter_debounce_ms
        return self._defaults.global_filter_debounce_ms

    def update(self, **changes: Any) -> None:
        """Re-render with changed options (new data, new controlled values).

        Raises
        ------
        ConfigurationError
            If the resulting options are invalid. The controller keeps its
            previous configuration in that case.
        """
        with self._lock:
            self._apply_options(_build_options(self._options, changes))

    @property
    def options(self) -> TableOptions:
        return self._options

    @property
    def columns(self) -> list[ColumnDef]:
        return list(self._options.columns)

    @property
    def visible_columns(self) -> list[ColumnDef]:
        """Columns not marked hidden, in definition order."""
        return [column for column in self._options.columns if not column.hidden]

    def get_column(self, column_id: str) -> ColumnDef | None:
        return self._columns_by_id.get(column_id)

    def get_row(self, row_id: RowId) -> Any:
        """Row with the given id, or None if the data does not contain it."""
        return self._rows_by_id.get(row_id)

    def row_id_of(self, row: Any) -> RowId:
        """Id resolved for a row object of the current data."""
        try:
            return self._ids_by_object[id(row)]
        except KeyError:
            raise ConfigurationError("Row is not part of the table data", option="data") from None

    # =========================================================================
    # Pipeline
    # =========================================================================

    def _filtered_rows(self) -> tuple[Any, list[Any]]:
        opts = self._options
        key = (
            self._config_version,
            tuple(self._filters.value) if opts.enable_filtering else (),
            self._global_filter.value if opts.enable_filtering else "",
        )
        if self._filter_cache is None or self._filter_cache[0] != key:
            if opts.enable_filtering:
                rows = filtering.apply_filters(
                    opts.data, opts.columns, self._filters.value, self._global_filter.value
                )
            else:
                rows = list(opts.data)
            self._filter_cache = (key, rows)
        return self._filter_cache

    def _sorted_rows(self, filter_key: Any, rows: list[Any]) -> tuple[Any, list[Any]]:
        opts = self._options
        sort = tuple(self._sort.value) if opts.enable_sorting else ()
        key = (filter_key, sort)
        if self._sort_cache is None or self._sort_cache[0] != key:
            self._sort_cache = (key, sorting.sort_rows(rows, opts.columns, sort))
        return self._sort_cache

    def _refresh(self) -> None:
        opts = self._options
        if opts.pagination_mode == "server":
            processed = list(opts.data)
            processed_key: Any = (self._config_version,)
            total = opts.total_count or 0
        else:
            filter_key, filtered = self._filtered_rows()
            processed_key, processed = self._sorted_rows(filter_key, filtered)
            total = len(processed)

        self._processed_key = processed_key
        self._processed = processed
        self._processed_ids = [self._ids_by_object[id(row)] for row in processed]
        self._total = total

        current = self._pagination.value
        effective = pagination.clamp_pagination(current, total)
        if effective != current and self._reported_clamp != (current, effective):
            # Out-of-range page after the data shrank
            self._reported_clamp = (current, effective)
            self._pagination.apply(effective)
        self._effective_pagination = effective

        if opts.enable_pagination:
            self._page_rows = pagination.paginate(processed, effective, opts.pagination_mode)
        else:
            self._page_rows = list(processed)
        self._page_ids = [self._ids_by_object[id(row)] for row in self._page_rows]

        if opts.group_by:
            self._groups = build_groups(
                processed, opts.columns, opts.group_by, self.row_id_of, opts.groups
            )
        else:
            self._groups = []

        self._focus = clamp_cursor(self._focus, len(self._page_rows), len(self.visible_columns))

    @property
    def rows(self) -> list[Any]:
        """Rows of the current page, in display order."""
        return list(self._page_rows)

    @property
    def row_ids(self) -> list[RowId]:
        """Ids of the rows of the current page."""
        return list(self._page_ids)

    @property
    def processed_rows(self) -> list[Any]:
        """Filtered and sorted rows across all pages."""
        return list(self._processed)

    @property
    def processed_row_ids(self) -> list[RowId]:
        return list(self._processed_ids)

    @property
    def row_groups(self) -> list[RowGroup]:
        return list(self._groups)

    # =========================================================================
    # Filtering
    # =========================================================================

    @property
    def filters(self) -> list[FilterDescriptor]:
        return list(self._filters.value)

    @property
    def global_filter(self) -> str:
        return self._global_filter.value

    def set_filters(self, filters: Iterable[Any]) -> None:
        """Replace the column filters."""
        with self._lock:
            if not self._options.enable_filtering:
                return
            self._filters.apply(list(filters))
            self._refresh()

    def set_column_filter(
        self, column_id: str, value: Any, match_mode: MatchMode = "contains"
    ) -> None:
        """Filter one column; ``None`` or ``""`` removes its filter."""
        with self._lock:
            if not self._options.enable_filtering:
                return
            self._filters.apply(
                filtering.set_column_filter(self._filters.value, column_id, value, match_mode)
            )
            self._refresh()

    def set_global_filter(self, value: str | None, *, debounce: bool = False) -> None:
        """Set the global search text.

        With ``debounce=True`` the filter pass waits for the input to stay
        unchanged for the debounce window; only the last value is applied.
        A later direct set, ``clear_filters`` or ``close`` supersedes any
        debounced value still in flight.
        """
        with self._lock:
            self._filter_generation += 1
            generation = self._filter_generation
        if debounce:
            self._debouncer.submit((generation, value))
            return
        self._debouncer.cancel()
        self._apply_global_filter(value)

    def _apply_debounced_global_filter(self, submitted: tuple[int, str | None]) -> None:
        generation, value = submitted
        with self._lock:
            if generation != self._filter_generation:
                debug("Dropping superseded debounced global filter")
                return
            self._apply_global_filter(value)

    def _apply_global_filter(self, value: str | None) -> None:
        with self._lock:
            if not self._options.enable_filtering:
                return
            self._global_filter.apply(value)
            self._refresh()

    def flush_global_filter(self) -> None:
        """Apply a debounced global filter right away."""
        self._debouncer.flush()

    @property
    def global_filter_pending(self) -> bool:
        """Whether a debounced global filter is waiting to be applied."""
        return self._debouncer.pending

    def clear_filters(self) -> None:
        """Remove every column filter and the global filter."""
        with self._lock:
            if not self._options.enable_filtering:
                return
            self._filter_generation += 1
            self._debouncer.cancel()
            if self._filters.value:
                self._filters.apply([])
            if self._global_filter.value:
                self._global_filter.apply("")
            self._refresh()

    # =========================================================================
    # Sorting
    # =========================================================================

    @property
    def sort(self) -> list[SortDescriptor]:
        return list(self._sort.value)

    def toggle_sort(self, column_id: str, multi: bool = False) -> None:
        """Advance a column through its sort cycle.

        ``multi`` (a shift-click) keeps the other sorted columns when
        multi-sort is enabled. Non-sortable columns are ignored.
        """
        with self._lock:
            opts = self._options
            column = self._columns_by_id.get(column_id)
            if not opts.enable_sorting or (column is not None and not column.sortable):
                debug(f"Ignoring sort toggle on '{column_id}'")
                return
            max_columns = opts.max_multi_sort_columns
            if max_columns is None:
                max_columns = self._defaults.max_multi_sort_columns
            self._sort.apply(
                sorting.toggle_sort(
                    self._sort.value,
                    column_id,
                    multi=multi,
                    enable_multi_sort=opts.enable_multi_sort,
                    max_columns=max_columns,
                )
            )
            self._refresh()

    def set_sort(self, sort: Iterable[Any]) -> None:
        """Replace the sort list."""
        with self._lock:
            if not self._options.enable_sorting:
                return
            self._sort.apply(list(sort))
            self._refresh()

    def clear_sort(self) -> None:
        self.set_sort([])

    def get_sort_direction(self, column_id: str) -> str | None:
        return sorting.sort_direction(self._sort.value, column_id)

    def get_sort_index(self, column_id: str) -> int | None:
        return sorting.sort_priority(self._sort.value, column_id)

    # =========================================================================
    # Pagination
    # =========================================================================

    @property
    def pagination(self) -> PaginationState:
        """Page position in effect, clamped to the current row count."""
        return self._effective_pagination

    @property
    def total_count(self) -> int:
        """Rows across all pages (``total_count`` as given in server mode)."""
        return self._total

    @property
    def page_count(self) -> int:
        if not self._options.enable_pagination:
            return 1 if self._total else 0
        return pagination.page_count(self._total, self._effective_pagination.page_size)

    @property
    def can_previous_page(self) -> bool:
        return self._options.enable_pagination and pagination.can_previous_page(
            self._effective_pagination
        )

    @property
    def can_next_page(self) -> bool:
        return self._options.enable_pagination and pagination.can_next_page(
            self._effective_pagination, self._total
        )

    @property
    def page_size_options(self) -> list[int]:
        return list(self._options.page_size_options or self._defaults.page_size_options)

    @property
    def page_window(self) -> list[int | None]:
        """Page numbers to offer, with None for ellipsis gaps."""
        return pagination.page_window(self._effective_pagination.page_index, self.page_count)

    @property
    def page_range(self) -> tuple[int, int]:
        """1-based first and last row numbers on the current page."""
        if not self._options.enable_pagination:
            return (1, self._total) if self._total else (0, 0)
        return pagination.page_range(self._effective_pagination, self._total)

    def set_pagination(self, state: PaginationState | Mapping[str, Any]) -> None:
        """Request a page position, clamped to the valid range."""
        with self._lock:
            state = _to_pagination(state)
            self._pagination.apply(pagination.clamp_pagination(state, self._total))
            self._refresh()

    def go_to_page(self, page_index: int) -> None:
        with self._lock:
            self._pagination.apply(
                pagination.go_to_page(self._effective_pagination, page_index, self._total)
            )
            self._refresh()

    def next_page(self) -> None:
        if self.can_next_page:
            self.go_to_page(self._effective_pagination.page_index + 1)

    def previous_page(self) -> None:
        if self.can_previous_page:
            self.go_to_page(self._effective_pagination.page_index - 1)

    def first_page(self) -> None:
        self.go_to_page(0)

    def last_page(self) -> None:
        self.go_to_page(pagination.last_page_index(
            self._total, self._effective_pagination.page_size
        ))

    def set_page_size(self, page_size: int) -> None:
        """Change rows per page, keeping the first visible row in view.

        Raises
        ------
        ConfigurationError
            If ``page_size`` is not positive.
        """
        with self._lock:
            self._pagination.apply(
                pagination.resize_page(self._effective_pagination, page_size, self._total)
            )
            self._refresh()

    # =========================================================================
    # Selection
    # =========================================================================

    @property
    def selected_row_ids(self) -> frozenset[RowId]:
        """Selected ids, minus known rows the selectability predicate excludes."""
        return selection.sanitize_selection(
            self._selection.value, self._rows_by_id, self._options.is_row_selectable
        )

    @property
    def selected_rows(self) -> list[Any]:
        """Selected rows present in the data, in data order."""
        selected = self.selected_row_ids
        return [row for rid, row in self._rows_by_id.items() if rid in selected]

    def is_selected(self, row_id: RowId) -> bool:
        return row_id in self.selected_row_ids

    def is_row_selectable(self, row_id: RowId) -> bool:
        row = self._rows_by_id.get(row_id)
        if row is None or self._options.selection_mode == "none":
            return False
        return selection.is_selectable(row, self._options.is_row_selectable)

    @property
    def select_all_state(self) -> SelectAllState:
        """Checkbox state over the selectable rows of the filtered data."""
        selectable = selection.selectable_ids(
            self._processed, self._processed_ids, self._options.is_row_selectable
        )
        return selection.select_all_state(self.selected_row_ids, selectable)

    def toggle_row_selection(self, row_id: RowId) -> None:
        """Flip one row; ignored for unknown or non-selectable rows."""
        with self._lock:
            row = self._rows_by_id.get(row_id)
            if row is None:
                debug(f"Ignoring selection of unknown row {row_id!r}")
                return
            current = self.selected_row_ids
            nxt = selection.toggle_row(
                current,
                row_id,
                row,
                self._options.selection_mode,
                self._options.is_row_selectable,
            )
            if nxt == current:
                return
            self._toggle_all_undo = None
            self._selection.apply(nxt)

    def set_selection(self, row_ids: Iterable[RowId]) -> None:
        """Replace the selection; non-selectable rows are dropped."""
        with self._lock:
            if self._options.selection_mode == "none":
                return
            self._toggle_all_undo = None
            self._selection.apply(
                selection.sanitize_selection(
                    row_ids, self._rows_by_id, self._options.is_row_selectable
                )
            )

    def clear_selection(self) -> None:
        with self._lock:
            self._toggle_all_undo = None
            self._selection.apply(frozenset())

    def toggle_all_rows(self) -> None:
        """Select every selectable filtered row, or clear them all.

        Toggling twice in a row restores the selection that was in place
        before the first toggle.
        """
        with self._lock:
            if self._options.selection_mode != "multiple":
                return
            current = self.selected_row_ids
            undo = self._toggle_all_undo
            if undo is not None and undo[1] == current and undo[2] == self._processed_key:
                nxt = undo[0]
                self._toggle_all_undo = None
            else:
                nxt = selection.toggle_all(
                    current,
                    self._processed,
                    self._processed_ids,
                    self._options.is_row_selectable,
                )
                self._toggle_all_undo = (current, nxt, self._processed_key)
            self._selection.apply(nxt)

    # =========================================================================
    # Expansion
    # =========================================================================

    @property
    def expanded_row_ids(self) -> frozenset[RowId]:
        return self._expansion.value

    def is_expanded(self, row_id: RowId) -> bool:
        return row_id in self._expansion.value

    def toggle_expanded(self, row_id: RowId) -> None:
        with self._lock:
            self._expansion.apply(expansion.toggle_expanded(self._expansion.value, row_id))

    def expand_all(self, row_ids: Iterable[RowId] | None = None) -> None:
        """Expand the given rows, or every filtered row."""
        with self._lock:
            ids = self._processed_ids if row_ids is None else row_ids
            self._expansion.apply(expansion.expand_all(self._expansion.value, ids))

    def collapse_all(self) -> None:
        with self._lock:
            self._expansion.apply(expansion.collapse_all())

    # =========================================================================
    # Editing
    # =========================================================================

    @property
    def editing_cell(self) -> EditingState | None:
        return self._editing.value

    @property
    def committing_cells(self) -> list[tuple[RowId, str]]:
        """Cells whose commit has not resolved yet."""
        return [cell for cell, pending in self._committing.items() if not pending.done]

    def cell_phase(self, row_id: RowId, column_id: str) -> EditPhase:
        cell = (row_id, column_id)
        pending = self._committing.get(cell)
        if pending is not None and not pending.done:
            return EditPhase.COMMITTING
        editing = self._editing.value
        if editing is not None and editing.cell == cell:
            return EditPhase.EDITING
        return EditPhase.IDLE

    def editor_for(self, column_id: str) -> EditorDescriptor | None:
        """Editor descriptor of a column, from its ``editor`` value type."""
        column = self._columns_by_id.get(column_id)
        if column is None or not column.editable:
            return None
        return self._editors.get(column.editor or "text")

    def start_editing(self, row_id: RowId, column_id: str) -> bool:
        """Open the editor on a cell.

        An editor already open on another cell is cancelled first.

        Returns
        -------
        bool
            False when editing is disabled, the row or column is unknown,
            the column is not editable, or the cell is still committing.
        """
        with self._lock:
            column = self._columns_by_id.get(column_id)
            row = self._rows_by_id.get(row_id)
            if column is None or row is None:
                debug(f"Cannot edit unknown cell ({row_id!r}, {column_id!r})")
                return False
            if self.cell_phase(row_id, column_id) is EditPhase.COMMITTING:
                debug(f"Cell ({row_id!r}, {column_id!r}) is still committing")
                return False
            state = begin_edit(row, row_id, column, self._options.edit_mode)
            if state is None:
                return False
            current = self._editing.value
            if current is not None:
                if current.cell == state.cell:
                    return True
                self._notify_cancel(current)
            self._editing.apply(state)
            return True

    def set_edit_value(self, value: Any) -> None:
        """Update the draft value of the open editor."""
        with self._lock:
            current = self._editing.value
            if current is None:
                return
            self._editing.apply(current.model_copy(update={"value": value}))

    def cancel_editing(self) -> None:
        """Close the open editor and discard its draft value."""
        with self._lock:
            current = self._editing.value
            if current is None:
                return
            self._notify_cancel(current)
            self._editing.apply(None)

    def _notify_cancel(self, editing: EditingState) -> None:
        callback = self._options.on_edit_cancel
        if callback is None:
            return
        try:
            callback(editing.row_id, editing.column_id)
        except Exception as e:
            log_callback_error("edit_cancel", e)

    def commit_edit(self, value: Any = UNSET) -> CommitResult | None:
        """Commit the open editor's draft (or ``value``).

        The editor closes immediately. The row data is never modified;
        ``on_edit_commit`` is responsible for persisting the value.

        Returns
        -------
        Committed | Failed | Pending | None
            None when no editor is open. A second commit on a cell whose
            commit is still pending is ignored and returns that ``Pending``.
        """
        with self._lock:
            current = self._editing.value
            if current is None:
                return None
            if not is_unset(value):
                current = current.model_copy(update={"value": value})

            pending = self._committing.get(current.cell)
            if pending is not None and not pending.done:
                debug(f"Ignoring commit on ({current.row_id!r}, {current.column_id!r}): pending")
                return pending

            result = invoke_commit(
                self._options.on_edit_commit,
                current,
                self._rows_by_id.get(current.row_id),
                on_settle=self._settle_commit,
            )
            if isinstance(result, Pending) and not result.done:
                self._committing[current.cell] = result
            elif isinstance(result, Failed):
                warn(str(result.error))
            self._editing.apply(None)
            return result

    async def commit_edit_async(self, value: Any = UNSET) -> Committed | Failed | None:
        """Commit and wait for the outcome of an asynchronous commit."""
        result = self.commit_edit(value)
        if isinstance(result, Pending):
            return await result.wait()
        return result

    def _settle_commit(self, result: Committed | Failed) -> None:
        with self._lock:
            cell = (result.row_id, result.column_id)
            pending = self._committing.get(cell)
            if pending is not None and pending.done:
                del self._committing[cell]
            if isinstance(result, Failed):
                warn(str(result.error))

    def bind_editor(self) -> ReconciledValue[Any] | None:
        """Draft value of the open editor as a controlled value for an edit widget.

        The returned value reads the editor's draft; the widget's changes
        flow back through ``set_edit_value``. Returns None when no editor is
        open.
        """
        editing = self._editing.value
        if editing is None:
            return None
        draft: ReconciledValue[Any] = ReconciledValue(f"edit_value{editing.cell!r}")

        def on_change(value: Any) -> None:
            self.set_edit_value(value)
            current = self._editing.value
            if current is not None and current.cell == editing.cell:
                draft.sync(current.value, on_change)
            else:
                draft.sync(UNSET, on_change)

        draft.sync(editing.value, on_change)
        return draft

    # =========================================================================
    # Keyboard navigation
    # =========================================================================

    @property
    def focused_cell(self) -> FocusCursor | None:
        return self._focus

    def focus_cell(self, row_index: int, column_index: int) -> FocusCursor | None:
        """Focus a cell of the displayed page, clamped to its bounds."""
        with self._lock:
            self._focus = clamp_cursor(
                FocusCursor(row_index=max(0, row_index), column_index=max(0, column_index)),
                len(self._page_rows),
                len(self.visible_columns),
            )
            return self._focus

    def clear_focus(self) -> None:
        self._focus = None

    def handle_key(self, key: str, modifiers: Iterable[str] = ()) -> KeyResult:
        """Apply one key press to the focused cell.

        Arrow keys, Home/End and PageUp/PageDown move the focus; Space
        toggles selection of the focused row; Enter starts editing the
        focused cell or, when it is not editable, toggles row expansion.
        """
        with self._lock:
            opts = self._options
            columns = self.visible_columns
            cursor = clamp_cursor(self._focus, len(self._page_rows), len(columns))
            target: ColumnDef | None = None
            if cursor is not None and opts.edit_mode != "none":
                column = columns[cursor.column_index]
                if column.editable:
                    target = column
                elif opts.edit_mode == "row":
                    target = first_editable_column(columns)

            page_jump = opts.page_jump_rows or self._defaults.page_jump_rows
            result = resolve_key(
                cursor,
                key,
                len(self._page_rows),
                len(columns),
                modifiers=modifiers,
                page_jump=page_jump,
                can_select=opts.selection_mode != "none",
                can_edit=target is not None,
                can_expand=opts.enable_expanding,
            )
            self._focus = result.cursor
            if result.cursor is None or result.action is NavAction.NONE:
                return result

            row_id = self._page_ids[result.cursor.row_index]
            if result.action is NavAction.TOGGLE_SELECTION:
                self.toggle_row_selection(row_id)
            elif result.action is NavAction.START_EDITING:
                self.start_editing(row_id, target.id)
            elif result.action is NavAction.TOGGLE_EXPANSION:
                self.toggle_expanded(row_id)
            return result

    # =========================================================================
    # Snapshot & lifecycle
    # =========================================================================

    def _ordered(self, ids: frozenset[RowId]) -> list[RowId]:
        known = [rid for rid in self._rows_by_id if rid in ids]
        return known + sorted((rid for rid in ids if rid not in self._rows_by_id), key=repr)

    def snapshot(self) -> TableSnapshot:
        """Consistent view of the current page and state."""
        with self._lock:
            return TableSnapshot(
                rows=list(self._page_rows),
                row_ids=list(self._page_ids),
                total_count=self._total,
                page_count=self.page_count,
                can_previous_page=self.can_previous_page,
                can_next_page=self.can_next_page,
                pagination=self._effective_pagination,
                sort=self.sort,
                filters=self.filters,
                global_filter=self.global_filter,
                selected_row_ids=self._ordered(self.selected_row_ids),
                select_all_state=self.select_all_state,
                expanded_row_ids=self._ordered(self._expansion.value),
                editing_cell=self._editing.value,
                committing_cells=self.committing_cells,
                focused_cell=self._focus,
                groups=list(self._groups),
            )

    def close(self) -> None:
        """Drop any pending debounced filter."""
        with self._lock:
            self._filter_generation += 1
        self._debouncer.cancel()

    def __enter__(self) -> TableController:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"TableController(rows={len(self._options.data)}, "
            f"total={self._total}, page={self._effective_pagination.page_index})"
        )

