"""Tests for page slicing and page arithmetic."""

import pytest

from tablekit.exceptions import ConfigurationError
from tablekit.models import PaginationState
from tablekit.pagination import (
    can_next_page,
    can_previous_page,
    clamp_page_index,
    clamp_pagination,
    go_to_page,
    last_page_index,
    page_count,
    page_range,
    page_window,
    paginate,
    resize_page,
)


ROWS = list(range(5))


class TestPaginate:
    """Tests for paginate."""

    def test_last_partial_page(self):
        """Five rows, two per page: the third page holds only row index 4."""
        assert paginate(ROWS, PaginationState(page_index=2, page_size=2)) == [4]

    def test_first_page(self):
        """The first page starts at row zero."""
        assert paginate(ROWS, PaginationState(page_index=0, page_size=2)) == [0, 1]

    def test_past_the_end_is_empty(self):
        """An unclamped index past the data yields no rows."""
        assert paginate(ROWS, PaginationState(page_index=9, page_size=2)) == []

    def test_server_mode_passes_through(self):
        """Server mode never slices; the data already is the page."""
        assert paginate(ROWS, PaginationState(page_index=3, page_size=2), "server") == ROWS


class TestPageArithmetic:
    """Tests for counts and clamping."""

    @pytest.mark.parametrize(
        ("total", "size", "expected"),
        [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (5, 2, 3)],
    )
    def test_page_count(self, total, size, expected):
        """page_count is ceil(total / size), zero when empty."""
        assert page_count(total, size) == expected

    def test_last_page_index_never_negative(self):
        """An empty table still has page zero."""
        assert last_page_index(0, 10) == 0

    @pytest.mark.parametrize("size", [1, 2, 3, 7, 10, 100])
    @pytest.mark.parametrize("total", [0, 1, 5, 9, 10, 11, 99])
    @pytest.mark.parametrize("index", [-3, 0, 1, 4, 50])
    def test_clamped_index_in_range(self, index, total, size):
        """0 <= clamped index < max(1, ceil(total / size))."""
        clamped = clamp_page_index(index, total, size)
        assert 0 <= clamped < max(1, -(-total // size))

    def test_clamp_pagination_returns_same_when_valid(self):
        """A valid state is returned unchanged."""
        state = PaginationState(page_index=1, page_size=2)
        assert clamp_pagination(state, 5) is state

    def test_clamp_after_shrink(self):
        """A shrinking row count pulls the page index down."""
        state = PaginationState(page_index=4, page_size=10)
        assert clamp_pagination(state, 25).page_index == 2
        assert clamp_pagination(state, 0).page_index == 0

    def test_go_to_page_clamps(self):
        """Navigation never leaves the valid range."""
        state = PaginationState(page_size=10)
        assert go_to_page(state, 7, 25).page_index == 2
        assert go_to_page(state, -1, 25).page_index == 0

    def test_can_previous_and_next(self):
        """Boundary flags follow the page index."""
        first = PaginationState(page_index=0, page_size=2)
        last = PaginationState(page_index=2, page_size=2)
        assert not can_previous_page(first)
        assert can_next_page(first, 5)
        assert can_previous_page(last)
        assert not can_next_page(last, 5)
        assert not can_next_page(first, 0)


class TestResizePage:
    """Tests for page size changes."""

    def test_keeps_top_row_in_view(self):
        """The new page contains the row that topped the old one."""
        state = PaginationState(page_index=3, page_size=10)
        resized = resize_page(state, 25, 100)
        assert resized == PaginationState(page_index=1, page_size=25)

    def test_smaller_size(self):
        """Shrinking the size moves to a later page index."""
        state = PaginationState(page_index=1, page_size=20)
        assert resize_page(state, 5, 100).page_index == 4

    def test_size_larger_than_total_goes_to_first_page(self):
        """A page size covering every row lands on page zero."""
        state = PaginationState(page_index=3, page_size=2)
        assert resize_page(state, 50, 9).page_index == 0

    @pytest.mark.parametrize("size", [0, -1])
    def test_non_positive_size_rejected(self, size):
        """Page sizes must be positive."""
        with pytest.raises(ConfigurationError):
            resize_page(PaginationState(), size, 10)


class TestPageDisplay:
    """Tests for page windows and row ranges."""

    def test_window_with_gaps(self):
        """First, last, current and neighbours, with gaps as None."""
        assert page_window(5, 10) == [0, None, 4, 5, 6, None, 9]

    def test_window_near_start(self):
        """No leading gap when the current page is near the start."""
        assert page_window(1, 10) == [0, 1, 2, None, 9]

    def test_window_small(self):
        """Few pages are all shown."""
        assert page_window(0, 3) == [0, 1, 2]
        assert page_window(0, 0) == []

    def test_window_adjacent_gap_shows_page(self):
        """A single-page gap never collapses into an ellipsis."""
        assert page_window(3, 10) == [0, 1, 2, 3, 4, None, 9]
        assert page_window(5, 9) == [0, None, 4, 5, 6, 7, 8]
        assert page_window(2, 5) == [0, 1, 2, 3, 4]

    def test_page_range(self):
        """Showing X to Y of Z."""
        assert page_range(PaginationState(page_index=0, page_size=10), 25) == (1, 10)
        assert page_range(PaginationState(page_index=2, page_size=10), 25) == (21, 25)
        assert page_range(PaginationState(), 0) == (0, 0)
