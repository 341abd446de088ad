"""Controlled/uncontrolled state reconciliation.

Every piece of table state (selection, sort, filters, pagination,
expansion, editing) goes through one ``ReconciledValue``:

- When a controlled value is supplied (anything but ``UNSET``), it is the
  single source of truth for reads. ``apply`` computes the next value and
  reports it through ``on_change`` without touching local state, so a caller
  that ignores the callback freezes that piece of state.
- Otherwise the value is owned locally; ``apply`` stores the next value and
  still calls ``on_change`` (if any) for observation.

Collaborating widgets that keep a single value (open/closed, selected
option, a cell's draft value) follow exactly the same contract.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Generic, TypeVar

from .log import debug, log_callback_error


# Sentinel value to distinguish "not passed" from "passed as None"
class _Unset:
    """Sentinel to indicate a parameter was not provided."""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "<UNSET>"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _Unset:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> _Unset:
        return self


UNSET: Any = _Unset()

T = TypeVar("T")


def is_unset(value: Any) -> bool:
    """Return True if ``value`` is the ``UNSET`` sentinel."""
    return value is UNSET


class ReconciledValue(Generic[T]):
    """A value that is either caller-owned (controlled) or self-owned.

    Parameters
    ----------
    name : str
        Name of the concern, used in log messages.
    controlled : Any, optional
        Externally supplied value. ``UNSET`` means uncontrolled.
    on_change : Callable[[T], Any], optional
        Called with every next value.
    default : Any, optional
        Initial local value for uncontrolled mode.
    normalize : Callable[[Any], T], optional
        Coerces raw inputs (controlled values, defaults, next values)
        into the canonical state type.
    """

    def __init__(
        self,
        name: str,
        controlled: Any = UNSET,
        on_change: Callable[[T], Any] | None = None,
        default: Any = None,
        normalize: Callable[[Any], T] | None = None,
    ) -> None:
        self.name = name
        self._normalize: Callable[[Any], T] = normalize or (lambda v: v)
        self._internal: T = self._normalize(default)
        self._controlled: Any = UNSET
        self._on_change = on_change
        self.sync(controlled, on_change)

    @property
    def is_controlled(self) -> bool:
        """Whether reads come from the externally supplied value."""
        return self._controlled is not UNSET

    @property
    def value(self) -> T:
        """The authoritative current value."""
        if self._controlled is not UNSET:
            return self._controlled  # type: ignore[no-any-return]
        return self._internal

    def prepare(self, controlled: Any) -> Any:
        """Normalize a controlled value without adopting it."""
        return UNSET if controlled is UNSET else self._normalize(controlled)

    def sync(
        self,
        controlled: Any = UNSET,
        on_change: Callable[[T], Any] | None = None,
        *,
        prepared: bool = False,
    ) -> None:
        """Take new external inputs (a re-render with new props).

        Parameters
        ----------
        controlled : Any, optional
            The new controlled value, or ``UNSET`` to hand ownership back
            to the local value.
        on_change : Callable[[T], Any], optional
            The new change callback.
        prepared : bool, optional
            ``controlled`` already went through ``prepare``.
        """
        self._controlled = controlled if prepared else self.prepare(controlled)
        self._on_change = on_change

    def reset(self, default: Any) -> None:
        """Replace the local value without notifying."""
        self._internal = self._normalize(default)

    def apply(self, next_value: Any) -> T:
        """Request a transition to ``next_value``.

        Returns
        -------
        T
            The normalized next value that was computed and reported. In
            controlled mode this is not necessarily the value reads return
            afterwards.
        """
        nxt = self._normalize(next_value)
        if self._controlled is UNSET:
            self._internal = nxt
            debug(f"{self.name}: updated local state")
        else:
            debug(f"{self.name}: forwarding controlled update")
        self._notify(nxt)
        return nxt

    def update(self, fn: Callable[[T], Any]) -> T:
        """Request a transition computed from the current value."""
        return self.apply(fn(self.value))

    def _notify(self, value: T) -> None:
        if self._on_change is None:
            return
        try:
            self._on_change(value)
        except Exception as e:
            log_callback_error(self.name, e)

    def __repr__(self) -> str:
        mode = "controlled" if self.is_controlled else "uncontrolled"
        return f"ReconciledValue({self.name!r}, {mode}, value={self.value!r})"
