"""Row expansion: a plain set of RowIds, independent from selection."""

from __future__ import annotations

from collections.abc import Iterable

from .models import RowId


def toggle_expanded(expanded: frozenset[RowId], row_id: RowId) -> frozenset[RowId]:
    if row_id in expanded:
        return expanded - {row_id}
    return expanded | {row_id}


def expand_all(expanded: frozenset[RowId], row_ids: Iterable[RowId]) -> frozenset[RowId]:
    return expanded | frozenset(row_ids)


def collapse_all() -> frozenset[RowId]:
    return frozenset()
