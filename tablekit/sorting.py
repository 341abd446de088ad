"""Multi-column sorting.

One stable sort with a composite comparator: descriptors are evaluated in
list order and the first non-zero comparison wins. Missing values always
sort after present ones, whichever the direction.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from functools import cmp_to_key
from typing import Any

from pydantic import ValidationError

from .exceptions import ConfigurationError
from .log import debug
from .models import ColumnDef, SortDescriptor, SortDirection
from .rows import get_cell_value, is_empty, read_field


def compare_values(a: Any, b: Any) -> int:
    """Three-way comparison of two present values.

    Values of incomparable types fall back to comparing their string forms.
    """
    try:
        if a < b:
            return -1
        if a > b:
            return 1
        return 0
    except TypeError:
        sa, sb = str(a), str(b)
        return (sa > sb) - (sa < sb)


def _sort_value(row: Any, descriptor: SortDescriptor, column: ColumnDef | None) -> Any:
    if column is None:
        return read_field(row, descriptor.column_id)
    return get_cell_value(row, column)


def sort_rows(
    rows: Sequence[Any],
    columns: Sequence[ColumnDef],
    sort: Sequence[SortDescriptor],
) -> list[Any]:
    """Return a new list of ``rows`` ordered by ``sort``.

    The input sequence is never reordered in place. Rows that compare equal
    on every descriptor keep their input order.
    """
    if not sort:
        return list(rows)

    by_id = {column.id: column for column in columns}
    plan = [(descriptor, by_id.get(descriptor.column_id)) for descriptor in sort]

    # Each accessor runs once per row and descriptor
    keys = [[_sort_value(row, d, column) for d, column in plan] for row in rows]

    def compare(i: int, j: int) -> int:
        for position, (descriptor, column) in enumerate(plan):
            sign = -1 if descriptor.direction == "desc" else 1
            if column is not None and column.sort_fn is not None:
                result = column.sort_fn(rows[i], rows[j], column.id)
                if result:
                    return sign * (1 if result > 0 else -1)
                continue
            a, b = keys[i][position], keys[j][position]
            a_missing, b_missing = is_empty(a), is_empty(b)
            if a_missing or b_missing:
                if a_missing and b_missing:
                    continue
                return 1 if a_missing else -1
            result = compare_values(a, b)
            if result:
                return sign * result
        return 0

    order = sorted(range(len(rows)), key=cmp_to_key(compare))
    debug(f"Sorted {len(rows)} rows by {[(d.column_id, d.direction) for d in sort]}")
    return [rows[i] for i in order]


def sort_direction(sort: Sequence[SortDescriptor], column_id: str) -> SortDirection | None:
    """Direction a column is currently sorted in, or None."""
    for descriptor in sort:
        if descriptor.column_id == column_id:
            return descriptor.direction
    return None


def sort_priority(sort: Sequence[SortDescriptor], column_id: str) -> int | None:
    """Zero-based precedence of a column in the sort list, or None."""
    for index, descriptor in enumerate(sort):
        if descriptor.column_id == column_id:
            return index
    return None


def toggle_sort(
    sort: Sequence[SortDescriptor],
    column_id: str,
    *,
    multi: bool = False,
    enable_multi_sort: bool = False,
    max_columns: int | None = None,
) -> list[SortDescriptor]:
    """Advance the sort cycle of one column.

    Single sort (the default, or whenever multi-sort is disabled): the
    column cycles unsorted → asc → desc → unsorted and replaces any other
    descriptor.

    Multi sort: the column cycles unsorted → asc → desc → removed while the
    other descriptors are kept; new columns are appended at the end unless
    the list already holds ``max_columns`` entries.
    """
    current = sort_direction(sort, column_id)

    if not (enable_multi_sort and multi):
        if current == "asc":
            return [SortDescriptor(column_id=column_id, direction="desc")]
        if current == "desc":
            return []
        return [SortDescriptor(column_id=column_id, direction="asc")]

    result = list(sort)
    if current == "asc":
        index = sort_priority(result, column_id)
        result[index] = SortDescriptor(column_id=column_id, direction="desc")  # type: ignore[index]
    elif current == "desc":
        result = [d for d in result if d.column_id != column_id]
    elif max_columns is None or len(result) < max_columns:
        result.append(SortDescriptor(column_id=column_id, direction="asc"))
    else:
        debug(f"Multi-sort limit of {max_columns} reached, ignoring '{column_id}'")
    return result


def normalize_sort(sort: Iterable[Any] | None) -> list[SortDescriptor]:
    """Coerce descriptors (models or dicts), keeping the first entry per column."""
    result: list[SortDescriptor] = []
    seen: set[str] = set()
    for item in sort or ():
        if isinstance(item, SortDescriptor):
            descriptor = item
        else:
            try:
                descriptor = SortDescriptor.model_validate(item)
            except ValidationError as e:
                raise ConfigurationError(f"Invalid sort {item!r}", option="sort") from e
        if descriptor.column_id in seen:
            continue
        seen.add(descriptor.column_id)
        result.append(descriptor)
    return result
