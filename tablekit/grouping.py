"""Row grouping.

Grouping sits between sorting and pagination but does not reorder the
displayed rows; it only summarizes them into groups.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from .models import ColumnDef, GroupDef, RowGroup, RowId
from .rows import get_cell_value, read_field


def _group_value(row: Any, column_id: str, column: ColumnDef | None) -> Any:
    if column is None:
        return read_field(row, column_id)
    return get_cell_value(row, column)


def _group_key(values: list[Any]) -> tuple[Any, ...]:
    # Unhashable values (lists, dicts) group by their repr
    key = []
    for value in values:
        try:
            hash(value)
        except TypeError:
            value = repr(value)
        key.append(value)
    return tuple(key)


def build_groups(
    rows: Sequence[Any],
    columns: Sequence[ColumnDef],
    group_by: Sequence[str],
    row_id: Callable[[Any], RowId],
    groups: Sequence[GroupDef] = (),
) -> list[RowGroup]:
    """Group ``rows`` by the values of the ``group_by`` columns.

    Groups are returned in order of first appearance. Each ``GroupDef``
    with an aggregation function contributes ``aggregates[column_id]``,
    computed over the member rows.
    """
    if not group_by:
        return []

    by_id = {column.id: column for column in columns}
    buckets: dict[tuple[Any, ...], tuple[dict[str, Any], list[Any]]] = {}
    for row in rows:
        values = [_group_value(row, cid, by_id.get(cid)) for cid in group_by]
        key = _group_key(values)
        if key not in buckets:
            buckets[key] = (dict(zip(group_by, values)), [])
        buckets[key][1].append(row)

    result = []
    for values, members in buckets.values():
        aggregates = {
            definition.column_id: definition.aggregation_fn(members)
            for definition in groups
            if definition.aggregation_fn is not None
        }
        result.append(
            RowGroup(
                values=values,
                row_ids=[row_id(member) for member in members],
                aggregates=aggregates,
            )
        )
    return result
