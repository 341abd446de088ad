"""Tests for the state models."""

import pytest

from pydantic import ValidationError

from tablekit.models import (
    ColumnDef,
    EditingState,
    FilterDescriptor,
    GroupDef,
    PaginationState,
    RowGroup,
    SelectAllState,
    SortDescriptor,
    TableSnapshot,
)


class TestColumnDef:
    """Tests for ColumnDef."""

    def test_defaults(self):
        """Columns are sortable and filterable, not editable, by default."""
        column = ColumnDef(id="name")
        assert column.sortable is True
        assert column.filterable is True
        assert column.editable is False
        assert column.hidden is False
        assert column.key == "name"

    def test_accessor_key_alias(self):
        """accessorKey is accepted and used as the read key."""
        column = ColumnDef(id="full", accessorKey="name")
        assert column.accessor_key == "name"
        assert column.key == "name"

    def test_empty_id_rejected(self):
        """An empty id is invalid."""
        with pytest.raises(ValidationError):
            ColumnDef(id="")

    def test_to_dict_drops_callables(self):
        """Serialization leaves out accessor and comparison functions."""
        column = ColumnDef(id="age", accessor_fn=lambda row: row["age"], editable=True)
        data = column.to_dict()
        assert data["id"] == "age"
        assert data["editable"] is True
        assert "accessorFn" not in data

    def test_frozen(self):
        """Column definitions cannot be modified in place."""
        column = ColumnDef(id="name")
        with pytest.raises(ValidationError):
            column.sortable = False  # type: ignore[misc]


class TestStateModels:
    """Tests for descriptors and state values."""

    def test_sort_descriptor_camel_case(self):
        """Sort descriptors serialize with camelCase keys."""
        assert SortDescriptor(column_id="age", direction="desc").to_dict() == {
            "columnId": "age",
            "direction": "desc",
        }

    def test_sort_descriptor_from_alias(self):
        """Descriptors can be built from camelCase payloads."""
        descriptor = SortDescriptor.model_validate({"columnId": "age"})
        assert descriptor.column_id == "age"
        assert descriptor.direction == "asc"

    def test_sort_direction_validated(self):
        """Only asc and desc are valid directions."""
        with pytest.raises(ValidationError):
            SortDescriptor(column_id="age", direction="up")

    def test_filter_descriptor_active(self):
        """Empty filter values do not constrain."""
        assert FilterDescriptor(column_id="name", value="a").active
        assert not FilterDescriptor(column_id="name", value="").active
        assert not FilterDescriptor(column_id="name").active
        assert FilterDescriptor(column_id="age", value=0).active

    def test_filter_match_mode_validated(self):
        """Unknown match modes are rejected."""
        with pytest.raises(ValidationError):
            FilterDescriptor(column_id="name", value="a", match_mode="regex")

    def test_pagination_defaults(self):
        """Pagination starts on the first page of ten."""
        state = PaginationState()
        assert (state.page_index, state.page_size) == (0, 10)

    @pytest.mark.parametrize("size", [0, -5])
    def test_pagination_rejects_non_positive_size(self, size):
        """A page size must be positive."""
        with pytest.raises(ValidationError):
            PaginationState(page_size=size)

    def test_pagination_rejects_negative_index(self):
        """A page index cannot be negative."""
        with pytest.raises(ValidationError):
            PaginationState(page_index=-1)

    def test_editing_state_cell(self):
        """EditingState exposes its (row, column) pair."""
        state = EditingState(row_id=1, column_id="name", value="X")
        assert state.cell == (1, "name")
        assert state.to_dict() == {"rowId": 1, "columnId": "name", "value": "X"}

    def test_group_models(self):
        """Groups report their size; GroupDef drops its callable on export."""
        group = RowGroup(values={"team": "a"}, row_ids=[1, 2])
        assert group.size == 2
        assert GroupDef(column_id="age", aggregation_fn=len).to_dict() == {"columnId": "age"}

    def test_snapshot_serializes(self):
        """Snapshots export camelCase keys and enum values."""
        snapshot = TableSnapshot(total_count=3, select_all_state=SelectAllState.INDETERMINATE)
        data = snapshot.to_dict()
        assert data["totalCount"] == 3
        assert data["selectAllState"] == SelectAllState.INDETERMINATE
        assert data["pagination"] == {"pageIndex": 0, "pageSize": 10}
