"""Row selection.

Selection is a set of RowIds, so it survives filtering, sorting, and
paging. A row excluded by the selectability predicate is never added;
trying to select one is ignored rather than reported as an error.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from .log import debug
from .models import RowId, SelectAllState, SelectionMode


IsRowSelectable = Callable[[Any], bool]


def is_selectable(row: Any, predicate: IsRowSelectable | None) -> bool:
    """Evaluate the selectability predicate; no predicate means selectable."""
    return predicate is None or bool(predicate(row))


def selectable_ids(
    rows: Sequence[Any],
    row_ids: Sequence[RowId],
    predicate: IsRowSelectable | None = None,
) -> list[RowId]:
    """Ids of the rows in ``rows`` passing the predicate, in row order."""
    return [rid for row, rid in zip(rows, row_ids) if is_selectable(row, predicate)]


def sanitize_selection(
    selected: Iterable[RowId],
    rows_by_id: Mapping[RowId, Any],
    predicate: IsRowSelectable | None = None,
) -> frozenset[RowId]:
    """Drop ids of known rows that fail the predicate.

    Ids the data does not contain (yet) are kept; with server-side paging a
    selection routinely refers to rows outside the current data.
    """
    selected = frozenset(selected)
    if predicate is None:
        return selected
    return frozenset(
        rid for rid in selected if rid not in rows_by_id or is_selectable(rows_by_id[rid], predicate)
    )


def toggle_row(
    selected: frozenset[RowId],
    row_id: RowId,
    row: Any,
    mode: SelectionMode = "multiple",
    predicate: IsRowSelectable | None = None,
) -> frozenset[RowId]:
    """Flip the membership of one row.

    In single mode the toggled row replaces the whole selection, unless it
    was already the selected row, in which case the selection is cleared.
    Returns ``selected`` unchanged when selection is disabled or the row is
    not selectable.
    """
    if mode == "none":
        return selected
    if not is_selectable(row, predicate):
        debug(f"Ignoring selection of non-selectable row {row_id!r}")
        return selected
    if mode == "single":
        return frozenset() if row_id in selected else frozenset({row_id})
    if row_id in selected:
        return selected - {row_id}
    return selected | {row_id}


def toggle_all(
    selected: frozenset[RowId],
    rows: Sequence[Any],
    row_ids: Sequence[RowId],
    predicate: IsRowSelectable | None = None,
) -> frozenset[RowId]:
    """Select every selectable row of ``rows``, or clear if all already are.

    ``rows`` is the whole visible data domain (filtered and sorted), not
    just the current page.
    """
    domain = selectable_ids(rows, row_ids, predicate)
    if domain and all(rid in selected for rid in domain):
        return frozenset()
    return frozenset(domain)


def select_all_state(selected: frozenset[RowId], selectable: Sequence[RowId]) -> SelectAllState:
    """Tri-valued select-all checkbox state over the selectable subset."""
    count = sum(1 for rid in selectable if rid in selected)
    if selectable and count == len(selectable):
        return SelectAllState.CHECKED
    if count > 0:
        return SelectAllState.INDETERMINATE
    return SelectAllState.UNCHECKED
