"""Keyboard navigation over the displayed page.

The cursor addresses (row index within the page, visible column index).
Movement is clamped to the page bounds and never wraps. Keys that act on
the focused row (Space, Enter) resolve to a ``NavAction`` that the
controller carries out.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from .models import FocusCursor


class Key(str, Enum):
    """Navigation keys, named after their DOM ``KeyboardEvent.key`` values."""

    UP = "ArrowUp"
    DOWN = "ArrowDown"
    LEFT = "ArrowLeft"
    RIGHT = "ArrowRight"
    HOME = "Home"
    END = "End"
    PAGE_UP = "PageUp"
    PAGE_DOWN = "PageDown"
    SPACE = " "
    ENTER = "Enter"


_ALIASES: dict[str, Key] = {
    "up": Key.UP,
    "down": Key.DOWN,
    "left": Key.LEFT,
    "right": Key.RIGHT,
    "home": Key.HOME,
    "end": Key.END,
    "pageup": Key.PAGE_UP,
    "pagedown": Key.PAGE_DOWN,
    "space": Key.SPACE,
    "spacebar": Key.SPACE,
    "enter": Key.ENTER,
    "return": Key.ENTER,
}


def parse_key(key: str | Key) -> Key | None:
    """Resolve a DOM key value or a common alias; None for other keys."""
    if isinstance(key, Key):
        return key
    try:
        return Key(key)
    except ValueError:
        return _ALIASES.get(key.lower().replace("_", "").replace("arrow", ""))


class NavAction(str, Enum):
    """Row-level action requested by a key press."""

    NONE = "none"
    TOGGLE_SELECTION = "toggle_selection"
    START_EDITING = "start_editing"
    TOGGLE_EXPANSION = "toggle_expansion"


@dataclass(frozen=True)
class KeyResult:
    """Outcome of one key press."""

    cursor: FocusCursor | None
    action: NavAction = NavAction.NONE
    handled: bool = False


def clamp_cursor(cursor: FocusCursor | None, rows: int, columns: int) -> FocusCursor | None:
    """Pull a cursor back inside a ``rows`` x ``columns`` page.

    Returns None when the page is empty.
    """
    if cursor is None or rows <= 0 or columns <= 0:
        return None
    row_index = min(cursor.row_index, rows - 1)
    column_index = min(cursor.column_index, columns - 1)
    if (row_index, column_index) == (cursor.row_index, cursor.column_index):
        return cursor
    return FocusCursor(row_index=row_index, column_index=column_index)


def move_cursor(
    cursor: FocusCursor,
    key: Key,
    rows: int,
    columns: int,
    *,
    ctrl: bool = False,
    page_jump: int = 10,
) -> FocusCursor:
    """Return the cursor position after a movement key."""
    r, c = cursor.row_index, cursor.column_index
    if key is Key.UP:
        r -= 1
    elif key is Key.DOWN:
        r += 1
    elif key is Key.LEFT:
        c -= 1
    elif key is Key.RIGHT:
        c += 1
    elif key is Key.HOME:
        c = 0
        if ctrl:
            r = 0
    elif key is Key.END:
        c = columns - 1
        if ctrl:
            r = rows - 1
    elif key is Key.PAGE_UP:
        r -= page_jump
    elif key is Key.PAGE_DOWN:
        r += page_jump
    return FocusCursor(
        row_index=max(0, min(r, rows - 1)), column_index=max(0, min(c, columns - 1))
    )


_MOVES = frozenset(
    {Key.UP, Key.DOWN, Key.LEFT, Key.RIGHT, Key.HOME, Key.END, Key.PAGE_UP, Key.PAGE_DOWN}
)


def resolve_key(
    cursor: FocusCursor | None,
    key: str | Key,
    rows: int,
    columns: int,
    *,
    modifiers: Iterable[str] = (),
    page_jump: int = 10,
    can_select: bool = False,
    can_edit: bool = False,
    can_expand: bool = False,
) -> KeyResult:
    """Resolve one key press against the focused cell.

    Parameters
    ----------
    cursor : FocusCursor, optional
        Current focus; without one no key is handled.
    key : str | Key
        DOM key value or alias.
    rows, columns : int
        Size of the displayed page in rows and visible columns.
    modifiers : Iterable[str]
        Held modifiers; "ctrl" or "meta" make Home/End jump to the page
        corners.
    page_jump : int
        Row delta of PageUp/PageDown.
    can_select : bool
        Whether Space may toggle selection of the focused row.
    can_edit : bool
        Whether Enter may start editing the focused cell.
    can_expand : bool
        Whether Enter may toggle expansion of the focused row.
    """
    parsed = parse_key(key)
    cursor = clamp_cursor(cursor, rows, columns)
    if parsed is None or cursor is None:
        return KeyResult(cursor)

    if parsed in _MOVES:
        held = {m.lower() for m in modifiers}
        ctrl = bool(held & {"ctrl", "control", "meta", "cmd"})
        moved = move_cursor(cursor, parsed, rows, columns, ctrl=ctrl, page_jump=page_jump)
        return KeyResult(moved, handled=True)

    if parsed is Key.SPACE:
        if can_select:
            return KeyResult(cursor, NavAction.TOGGLE_SELECTION, handled=True)
        return KeyResult(cursor)

    # Enter
    if can_edit:
        return KeyResult(cursor, NavAction.START_EDITING, handled=True)
    if can_expand:
        return KeyResult(cursor, NavAction.TOGGLE_EXPANSION, handled=True)
    return KeyResult(cursor)
