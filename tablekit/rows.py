"""Row identity, row normalization, and cell access.

Everything that tracks rows across filtering, sorting, and paging keys off
the RowId resolved here, never off a row's position.
"""

from __future__ import annotations

import math

from collections.abc import Callable, Iterable, Mapping
from datetime import date, datetime
from typing import Any

from .exceptions import AccessorError, ConfigurationError
from .log import debug, warn
from .models import ColumnDef, RowId


GetRowId = Callable[[Any, int], RowId]


def read_field(row: Any, key: str) -> Any:
    """Read ``key`` from a mapping row or an attribute of an object row."""
    if isinstance(row, Mapping):
        return row.get(key)
    return getattr(row, key, None)


def is_empty(value: Any) -> bool:
    """Return True for values treated as missing (None and NaN)."""
    if value is None:
        return True
    return isinstance(value, float) and math.isnan(value)


class RowIdentity:
    """Resolves the stable identifier of each row.

    Either a caller-supplied ``get_row_id(row, index)`` or, when omitted, the
    ``id_key`` field of each row. There is no positional fallback: a row
    without an identifier is a configuration error.

    Parameters
    ----------
    get_row_id : Callable[[Any, int], RowId], optional
        Identity function taking the row and its index in the data.
    id_key : str, optional
        Field read when ``get_row_id`` is not supplied (default: "id").
    """

    def __init__(self, get_row_id: GetRowId | None = None, id_key: str = "id") -> None:
        self._get_row_id = get_row_id
        self.id_key = id_key

    def __call__(self, row: Any, index: int) -> RowId:
        """Return the identifier of ``row`` found at ``index``."""
        if self._get_row_id is not None:
            row_id = self._get_row_id(row, index)
        else:
            row_id = read_field(row, self.id_key)
        if row_id is None or isinstance(row_id, bool) or not isinstance(row_id, (str, int)):
            # Ids travel through snapshots and editing state, which hold str or int
            raise ConfigurationError(
                f"Row at index {index} has no usable identifier (expected str or int)",
                option="get_row_id" if self._get_row_id is not None else "row_id_key",
                index=index,
                row_id=row_id,
            )
        return row_id  # type: ignore[no-any-return]

    def resolve_all(self, rows: list[Any]) -> list[RowId]:
        """Resolve and validate the identifiers of a whole collection.

        Raises
        ------
        ConfigurationError
            If a row has no identifier or two rows share one.
        """
        ids = [self(row, index) for index, row in enumerate(rows)]
        seen: set[RowId] = set()
        for index, row_id in enumerate(ids):
            if row_id in seen:
                raise ConfigurationError(
                    f"Duplicate row id {row_id!r}",
                    option="get_row_id" if self._get_row_id is not None else "row_id_key",
                    index=index,
                )
            seen.add(row_id)
        debug(f"Resolved {len(ids)} row ids")
        return ids


def normalize_rows(data: Any) -> list[Any]:
    """Convert supported data shapes into a list of rows.

    Handles:
    - None → empty list
    - pandas DataFrame (duck typed) → list of record dicts
    - dict of lists: {'a': [1, 2], 'b': [3, 4]} → row dicts
    - single dict: {'a': 1} → one row
    - any other iterable of mappings or objects → list, rows kept as-is
    """
    if data is None:
        return []

    # pandas DataFrame (duck typing)
    if hasattr(data, "to_dict") and hasattr(data, "columns"):
        records = data.to_dict(orient="records")
        return [{k: (None if is_empty(v) else v) for k, v in rec.items()} for rec in records]

    if isinstance(data, Mapping):
        first_value = next(iter(data.values()), None)
        if isinstance(first_value, (list, tuple)):
            columns = list(data.keys())
            num_rows = len(first_value)
            return [{col: data[col][i] for col in columns} for i in range(num_rows)]
        return [dict(data)]

    if isinstance(data, (str, bytes)):
        raise ConfigurationError("Row data must be a collection of rows", option="data")

    if isinstance(data, Iterable):
        return list(data)

    raise ConfigurationError(
        f"Unsupported data type: {type(data).__name__}", option="data"
    )


def get_cell_value(row: Any, column: ColumnDef, row_id: RowId | None = None) -> Any:
    """Read a cell through the column accessor.

    A failing accessor never breaks the whole table: the error is logged
    and the cell reads as None.
    """
    try:
        if column.accessor_fn is not None:
            return column.accessor_fn(row)
        return read_field(row, column.key)
    except Exception as e:
        err = AccessorError(
            f"Accessor failed: {e!r}", column_id=column.id, row_id=row_id
        )
        warn(str(err))
        return None


def check_columns(columns: Iterable[ColumnDef]) -> dict[str, ColumnDef]:
    """Index columns by id, rejecting duplicates.

    Raises
    ------
    ConfigurationError
        If two columns share an id.
    """
    by_id: dict[str, ColumnDef] = {}
    for column in columns:
        if column.id in by_id:
            raise ConfigurationError(
                f"Duplicate column id {column.id!r}", option="columns", column_id=column.id
            )
        by_id[column.id] = column
    return by_id


def _editor_type(values: Iterable[Any]) -> str:
    """Pick an editor value type from the first present value."""
    for value in values:
        if is_empty(value):
            continue
        if isinstance(value, bool):
            return "boolean"
        if isinstance(value, (int, float)):
            return "number"
        if isinstance(value, (date, datetime)):
            return "date"
        return "text"
    return "text"


def infer_columns(rows: list[Any]) -> list[ColumnDef]:
    """Build read-only column definitions from the keys of mapping rows.

    Keys are taken in first-appearance order across all rows; the editor
    type of each column is guessed from its first present value.
    """
    keys: dict[str, None] = {}
    for row in rows:
        if isinstance(row, Mapping):
            keys.update(dict.fromkeys(str(k) for k in row))
    return [
        ColumnDef(id=key, header=key, editor=_editor_type(read_field(r, key) for r in rows))
        for key in keys
    ]
