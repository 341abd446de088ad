"""Pydantic models for table state.

All models use camelCase aliases so that state can be handed to a
JavaScript presentation layer as-is, while Python code keeps snake_case:

    SortDescriptor(column_id="age", direction="desc").to_dict()
    # {"columnId": "age", "direction": "desc"}

State models are frozen. Engines never mutate them; they return new ones.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


RowId = str | int

SelectionMode = Literal["none", "single", "multiple"]
EditMode = Literal["none", "cell", "row"]
PaginationMode = Literal["client", "server"]
MatchMode = Literal["contains", "startsWith", "endsWith", "equals", "notEquals"]
SortDirection = Literal["asc", "desc"]

MATCH_MODES: tuple[str, ...] = ("contains", "startsWith", "endsWith", "equals", "notEquals")


class SelectAllState(str, Enum):
    """Tri-valued state of a select-all checkbox."""

    CHECKED = "checked"
    INDETERMINATE = "indeterminate"
    UNCHECKED = "unchecked"


class TableModel(BaseModel):
    """Base model for table objects with camelCase serialization."""

    model_config = ConfigDict(
        populate_by_name=True,  # Accept both snake_case and camelCase
        frozen=True,
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict with camelCase keys, excluding None values."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ColumnDef(TableModel):
    """Column definition.

    The value of a cell is read with ``accessor_fn(row)`` when given,
    otherwise from the ``accessor_key`` field (defaulting to ``id``) of a
    mapping row or an attribute of an object row.

    Example:
        ColumnDef(id="age", sortable=True, editable=True, editor="number")
    """

    id: str
    header: str | None = None
    accessor_key: str | None = Field(default=None, alias="accessorKey")
    accessor_fn: Callable[[Any], Any] | None = Field(default=None, alias="accessorFn")

    # Interaction
    sortable: bool = True
    sort_fn: Callable[[Any, Any, str], int] | None = Field(default=None, alias="sortFn")
    filterable: bool = True
    filter_fn: Callable[[Any, str, Any], bool] | None = Field(default=None, alias="filterFn")
    editable: bool = False
    editor: str | None = None  # key into the editor registry

    hidden: bool = False
    meta: dict[str, Any] | None = None

    _CALLABLE_FIELDS: ClassVar[frozenset[str]] = frozenset(
        {"accessor_fn", "sort_fn", "filter_fn"}
    )

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        """Column ids must be non-empty."""
        if not v:
            raise ValueError("Column id must be a non-empty string")
        return v

    @property
    def key(self) -> str:
        """Field name read from a row when no accessor function is set."""
        return self.accessor_key or self.id

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict, leaving out accessor and comparison callables."""
        return self.model_dump(by_alias=True, exclude_none=True, exclude=set(self._CALLABLE_FIELDS))


class SortDescriptor(TableModel):
    """One entry of the ordered sort list. Earlier entries take precedence."""

    column_id: str = Field(alias="columnId")
    direction: SortDirection = "asc"


class FilterDescriptor(TableModel):
    """A per-column filter. Inactive while ``value`` is None or empty."""

    column_id: str = Field(alias="columnId")
    value: Any = None
    match_mode: MatchMode = Field(default="contains", alias="matchMode")

    @property
    def active(self) -> bool:
        """Whether this descriptor constrains the result."""
        return self.value is not None and self.value != ""


class PaginationState(TableModel):
    """Current page position."""

    page_index: int = Field(default=0, ge=0, alias="pageIndex")
    page_size: int = Field(default=10, gt=0, alias="pageSize")


class EditingState(TableModel):
    """The single active cell editor."""

    row_id: RowId = Field(alias="rowId")
    column_id: str = Field(alias="columnId")
    value: Any = None

    @property
    def cell(self) -> tuple[RowId, str]:
        """(row_id, column_id) pair identifying the edited cell."""
        return (self.row_id, self.column_id)


class FocusCursor(TableModel):
    """Keyboard focus position within the displayed page."""

    row_index: int = Field(default=0, ge=0, alias="rowIndex")
    column_index: int = Field(default=0, ge=0, alias="columnIndex")


class GroupDef(TableModel):
    """Grouping definition with an optional aggregation over member rows."""

    column_id: str = Field(alias="columnId")
    aggregation_fn: Callable[[list[Any]], Any] | None = Field(default=None, alias="aggregationFn")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict, leaving out the aggregation callable."""
        return self.model_dump(by_alias=True, exclude_none=True, exclude={"aggregation_fn"})


class RowGroup(TableModel):
    """Rows sharing the same values for every grouped column."""

    values: dict[str, Any]
    row_ids: list[RowId] = Field(default_factory=list, alias="rowIds")
    aggregates: dict[str, Any] = Field(default_factory=dict)

    @property
    def size(self) -> int:
        """Number of member rows."""
        return len(self.row_ids)


class TableSnapshot(TableModel):
    """Consistent read-only view of a controller for a presentation layer."""

    rows: list[Any] = Field(default_factory=list)
    row_ids: list[RowId] = Field(default_factory=list, alias="rowIds")
    total_count: int = Field(default=0, alias="totalCount")
    page_count: int = Field(default=0, alias="pageCount")
    can_previous_page: bool = Field(default=False, alias="canPreviousPage")
    can_next_page: bool = Field(default=False, alias="canNextPage")
    pagination: PaginationState = Field(default_factory=PaginationState)
    sort: list[SortDescriptor] = Field(default_factory=list)
    filters: list[FilterDescriptor] = Field(default_factory=list)
    global_filter: str = Field(default="", alias="globalFilter")
    selected_row_ids: list[RowId] = Field(default_factory=list, alias="selectedRowIds")
    select_all_state: SelectAllState = Field(
        default=SelectAllState.UNCHECKED, alias="selectAllState"
    )
    expanded_row_ids: list[RowId] = Field(default_factory=list, alias="expandedRowIds")
    editing_cell: EditingState | None = Field(default=None, alias="editingCell")
    committing_cells: list[tuple[RowId, str]] = Field(
        default_factory=list, alias="committingCells"
    )
    focused_cell: FocusCursor | None = Field(default=None, alias="focusedCell")
    groups: list[RowGroup] = Field(default_factory=list)
