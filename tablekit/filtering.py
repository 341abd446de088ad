"""Column and global filtering.

Match modes compare case-insensitive string forms of the accessed value
and the filter value. Missing values (None, NaN) read as the empty string,
so a missing value never raises.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from pydantic import ValidationError

from .exceptions import ConfigurationError
from .log import debug
from .models import ColumnDef, FilterDescriptor, MatchMode
from .rows import get_cell_value, is_empty, read_field


def to_text(value: Any) -> str:
    """Lower-cased string form used for matching."""
    if is_empty(value):
        return ""
    return str(value).lower()


def match_value(value: Any, filter_value: Any, match_mode: MatchMode = "contains") -> bool:
    """Test a single accessed value against a filter value.

    Parameters
    ----------
    value : Any
        The accessed cell value.
    filter_value : Any
        The value the user filtered by.
    match_mode : MatchMode
        One of contains, startsWith, endsWith, equals, notEquals.

    Returns
    -------
    bool
        True if the value passes.
    """
    text = to_text(value)
    needle = to_text(filter_value)
    if match_mode == "equals":
        return text == needle
    if match_mode == "notEquals":
        return text != needle
    if match_mode == "startsWith":
        return text.startswith(needle)
    if match_mode == "endsWith":
        return text.endswith(needle)
    return needle in text


def _column_passes(
    row: Any, descriptor: FilterDescriptor, column: ColumnDef | None
) -> bool:
    if column is None:
        value = read_field(row, descriptor.column_id)
        return match_value(value, descriptor.value, descriptor.match_mode)
    if column.filter_fn is not None:
        return bool(column.filter_fn(row, column.id, descriptor.value))
    return match_value(get_cell_value(row, column), descriptor.value, descriptor.match_mode)


def _global_passes(row: Any, needle: str, columns: Sequence[ColumnDef]) -> bool:
    if not columns:
        values: Iterable[Any] = row.values() if hasattr(row, "values") else vars(row).values()
        return any(needle in to_text(v) for v in values if not is_empty(v))
    return any(
        needle in to_text(get_cell_value(row, column))
        for column in columns
        if column.filterable and not column.hidden
    )


def apply_filters(
    rows: Sequence[Any],
    columns: Sequence[ColumnDef],
    filters: Sequence[FilterDescriptor] = (),
    global_filter: str = "",
) -> list[Any]:
    """Return the rows passing every active column filter and the global filter.

    Order is preserved from ``rows``; the input is never modified. A row
    passes the global filter when at least one searchable column contains
    the filter text (case-insensitive). With no columns defined, every
    field of the row is searched.
    """
    active = [f for f in filters if f.active]
    needle = (global_filter or "").lower()
    if not active and not needle:
        return list(rows)

    by_id = {column.id: column for column in columns}
    result = [
        row
        for row in rows
        if all(_column_passes(row, f, by_id.get(f.column_id)) for f in active)
        and (not needle or _global_passes(row, needle, columns))
    ]
    debug(f"Filtered {len(rows)} rows to {len(result)}")
    return result


def set_column_filter(
    filters: Sequence[FilterDescriptor],
    column_id: str,
    value: Any,
    match_mode: MatchMode = "contains",
) -> list[FilterDescriptor]:
    """Replace the filter of one column; an empty value removes it."""
    result = [f for f in filters if f.column_id != column_id]
    if value is not None and value != "":
        result.append(
            _validate_filter({"columnId": column_id, "value": value, "matchMode": match_mode})
        )
    return result


def _validate_filter(item: Any) -> FilterDescriptor:
    if isinstance(item, FilterDescriptor):
        return item
    try:
        return FilterDescriptor.model_validate(item)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid filter {item!r}", option="filters") from e


def normalize_filters(filters: Iterable[Any] | None) -> list[FilterDescriptor]:
    """Coerce descriptors (models or dicts), keeping the last one per column."""
    latest: dict[str, FilterDescriptor] = {}
    for item in filters or ():
        descriptor = _validate_filter(item)
        latest.pop(descriptor.column_id, None)
        latest[descriptor.column_id] = descriptor
    return list(latest.values())
