"""Page slicing and page-position arithmetic.

Client mode slices the processed rows; server mode leaves slicing to the
caller and only keeps the page position consistent with ``total_count``.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from .exceptions import ConfigurationError
from .models import PaginationMode, PaginationState


def page_count(total_count: int, page_size: int) -> int:
    """Number of pages needed for ``total_count`` rows (0 when empty)."""
    if total_count <= 0:
        return 0
    return (total_count - 1) // page_size + 1


def last_page_index(total_count: int, page_size: int) -> int:
    """Index of the last valid page, never negative."""
    return max(0, page_count(total_count, page_size) - 1)


def clamp_page_index(page_index: int, total_count: int, page_size: int) -> int:
    """Clamp a page index into ``[0, last_page_index]``."""
    return max(0, min(page_index, last_page_index(total_count, page_size)))


def clamp_pagination(state: PaginationState, total_count: int) -> PaginationState:
    """Return ``state`` with its page index clamped to the valid range."""
    page_index = clamp_page_index(state.page_index, total_count, state.page_size)
    if page_index == state.page_index:
        return state
    return state.model_copy(update={"page_index": page_index})


def paginate(
    rows: Sequence[Any], state: PaginationState, mode: PaginationMode = "client"
) -> list[Any]:
    """Return the rows of the current page.

    In server mode ``rows`` already is the page and is returned as given.
    """
    if mode == "server":
        return list(rows)
    start = state.page_index * state.page_size
    return list(rows[start : start + state.page_size])


def go_to_page(state: PaginationState, page_index: int, total_count: int) -> PaginationState:
    """Move to ``page_index``, clamped to the valid range."""
    return PaginationState(
        page_index=clamp_page_index(page_index, total_count, state.page_size),
        page_size=state.page_size,
    )


def resize_page(state: PaginationState, page_size: int, total_count: int) -> PaginationState:
    """Change the page size while keeping the first visible row in view.

    The new page is the one containing the row that topped the old page:
    ``floor(page_index * old_size / new_size)``, then clamped.

    Raises
    ------
    ConfigurationError
        If ``page_size`` is not positive.
    """
    if page_size <= 0:
        raise ConfigurationError(
            f"Page size must be positive, got {page_size}", option="page_size"
        )
    top_row = state.page_index * state.page_size
    return PaginationState(
        page_index=clamp_page_index(top_row // page_size, total_count, page_size),
        page_size=page_size,
    )


def can_previous_page(state: PaginationState) -> bool:
    """Whether a previous page exists."""
    return state.page_index > 0


def can_next_page(state: PaginationState, total_count: int) -> bool:
    """Whether a next page exists."""
    return state.page_index < page_count(total_count, state.page_size) - 1


def page_range(state: PaginationState, total_count: int) -> tuple[int, int]:
    """1-based (first, last) row numbers shown on the page; (0, 0) when empty."""
    if total_count <= 0:
        return (0, 0)
    first = state.page_index * state.page_size + 1
    last = min((state.page_index + 1) * state.page_size, total_count)
    return (min(first, last), last)


def page_window(page_index: int, pages: int) -> list[int | None]:
    """Page buttons to show: first, last, current and adjacent pages.

    ``None`` marks an ellipsis gap.

    Examples
    --------
    >>> page_window(5, 10)
    [0, None, 4, 5, 6, None, 9]
    """
    result: list[int | None] = []
    for index in range(pages):
        if index in (0, pages - 1) or abs(index - page_index) <= 1:
            result.append(index)
        elif index in (page_index - 2, page_index + 2):
            # A gap of exactly one page shows that page
            result.append(index if index in (1, pages - 2) else None)
    return result
