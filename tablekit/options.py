"""Table configuration.

``TableOptions`` carries every option family a controller accepts. Each
stateful concern comes as a triple:

- a controlled value (``selected_rows``, ``sort``, ``filters``,
  ``global_filter``, ``pagination``, ``expanded_rows``, ``editing_cell``),
  defaulting to ``UNSET``, which means "uncontrolled";
- a ``default_*`` seed for the uncontrolled value;
- an ``on_*_change`` callback.

Options accept both snake_case and camelCase names:

    TableOptions(data=rows, selectionMode="multiple", onSelectionChange=cb)
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .editing import EditorRegistry
from .exceptions import ConfigurationError
from .models import (
    ColumnDef,
    EditMode,
    FilterDescriptor,
    GroupDef,
    PaginationMode,
    PaginationState,
    RowId,
    SelectionMode,
    SortDescriptor,
)
from .reconciled import UNSET
from .rows import check_columns, normalize_rows


class TableOptions(BaseModel):
    """Configuration object consumed by ``TableController``.

    Controlled values are typed ``Any`` so that ``UNSET`` can be told apart
    from ``None``; the controller normalizes them.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        extra="forbid",
    )

    # Data
    data: list[Any] = Field(default_factory=list)
    columns: list[ColumnDef] = Field(default_factory=list)
    get_row_id: Callable[[Any, int], RowId] | None = Field(default=None, alias="getRowId")
    row_id_key: str = Field(default="id", alias="rowIdKey")

    # Selection
    selection_mode: SelectionMode = Field(default="none", alias="selectionMode")
    selected_rows: Any = Field(default=UNSET, alias="selectedRows")
    default_selected_rows: list[RowId] = Field(default_factory=list, alias="defaultSelectedRows")
    on_selection_change: Callable[[frozenset[RowId]], Any] | None = Field(
        default=None, alias="onSelectionChange"
    )
    is_row_selectable: Callable[[Any], bool] | None = Field(default=None, alias="isRowSelectable")

    # Sorting
    enable_sorting: bool = Field(default=True, alias="enableSorting")
    sort: Any = UNSET
    default_sort: list[SortDescriptor] = Field(default_factory=list, alias="defaultSort")
    on_sort_change: Callable[[list[SortDescriptor]], Any] | None = Field(
        default=None, alias="onSortChange"
    )
    enable_multi_sort: bool = Field(default=False, alias="enableMultiSort")
    max_multi_sort_columns: int | None = Field(default=None, ge=1, alias="maxMultiSortColumns")

    # Filtering
    enable_filtering: bool = Field(default=True, alias="enableFiltering")
    filters: Any = UNSET
    default_filters: list[FilterDescriptor] = Field(default_factory=list, alias="defaultFilters")
    on_filters_change: Callable[[list[FilterDescriptor]], Any] | None = Field(
        default=None, alias="onFiltersChange"
    )
    global_filter: Any = Field(default=UNSET, alias="globalFilter")
    default_global_filter: str = Field(default="", alias="defaultGlobalFilter")
    on_global_filter_change: Callable[[str], Any] | None = Field(
        default=None, alias="onGlobalFilterChange"
    )
    global_filter_debounce_ms: int | None = Field(
        default=None, ge=0, alias="globalFilterDebounceMs"
    )

    # Pagination
    enable_pagination: bool = Field(default=True, alias="enablePagination")
    pagination_mode: PaginationMode = Field(default="client", alias="paginationMode")
    pagination: Any = UNSET
    default_pagination: PaginationState | None = Field(default=None, alias="defaultPagination")
    on_pagination_change: Callable[[PaginationState], Any] | None = Field(
        default=None, alias="onPaginationChange"
    )
    total_count: int | None = Field(default=None, ge=0, alias="totalCount")
    page_size_options: list[int] | None = Field(default=None, alias="pageSizeOptions")

    # Expansion
    enable_expanding: bool = Field(default=False, alias="enableExpanding")
    expanded_rows: Any = Field(default=UNSET, alias="expandedRows")
    default_expanded_rows: list[RowId] = Field(default_factory=list, alias="defaultExpandedRows")
    on_expanded_change: Callable[[frozenset[RowId]], Any] | None = Field(
        default=None, alias="onExpandedChange"
    )

    # Editing
    edit_mode: EditMode = Field(default="none", alias="editMode")
    editing_cell: Any = Field(default=UNSET, alias="editingCell")
    on_editing_cell_change: Callable[[Any], Any] | None = Field(
        default=None, alias="onEditingCellChange"
    )
    on_edit_commit: Callable[[RowId, str, Any, Any], Any] | None = Field(
        default=None, alias="onEditCommit"
    )
    on_edit_cancel: Callable[[RowId, str], Any] | None = Field(default=None, alias="onEditCancel")
    editors: EditorRegistry | None = None

    # Grouping
    group_by: list[str] = Field(default_factory=list, alias="groupBy")
    groups: list[GroupDef] = Field(default_factory=list)

    # Keyboard
    page_jump_rows: int | None = Field(default=None, ge=1, alias="pageJumpRows")

    @field_validator("data", mode="before")
    @classmethod
    def normalize_data(cls, v: Any) -> list[Any]:
        """Accept a list of rows, a dict of lists, or a DataFrame."""
        return normalize_rows(v)

    @model_validator(mode="after")
    def validate_setup(self) -> TableOptions:
        """Fail fast on setups the controller cannot honor."""
        check_columns(self.columns)

        if self.pagination_mode == "server" and self.total_count is None:
            raise ConfigurationError(
                "total_count is required in server pagination mode", option="total_count"
            )

        if self.pagination is not UNSET:
            size = _page_size_of(self.pagination)
            if size is not None and size <= 0:
                raise ConfigurationError(
                    f"Page size must be positive, got {size}", option="pagination"
                )

        if self.page_size_options and any(size <= 0 for size in self.page_size_options):
            raise ConfigurationError(
                "page_size_options must all be positive", option="page_size_options"
            )
        return self

    def evolve(self, **changes: Any) -> TableOptions:
        """Return new options with ``changes`` applied.

        ``changes`` may use either field names or their camelCase aliases.
        """
        names = {}
        for name, info in type(self).model_fields.items():
            names[name] = name
            if info.alias:
                names[info.alias] = name
        merged = {name: getattr(self, name) for name in type(self).model_fields}
        for key, value in changes.items():
            if key not in names:
                raise ConfigurationError(f"Unknown table option {key!r}", option=key)
            merged[names[key]] = value
        return TableOptions(**merged)


def _page_size_of(value: Any) -> int | None:
    if isinstance(value, PaginationState):
        return value.page_size
    if isinstance(value, Mapping):
        size = value.get("page_size", value.get("pageSize"))
        return size if isinstance(size, int) else None
    return None
