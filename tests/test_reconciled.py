"""Tests for the controlled/uncontrolled reconciliation primitive."""

import copy
import logging

from unittest.mock import MagicMock

from tablekit.reconciled import UNSET, ReconciledValue, is_unset


class TestUnset:
    """Tests for the UNSET sentinel."""

    def test_singleton(self):
        """Copies of UNSET are UNSET."""
        assert copy.copy(UNSET) is UNSET
        assert copy.deepcopy(UNSET) is UNSET

    def test_falsy_and_repr(self):
        """UNSET is falsy and prints recognizably."""
        assert not UNSET
        assert repr(UNSET) == "<UNSET>"

    def test_is_unset(self):
        """None is a value, UNSET is not."""
        assert is_unset(UNSET)
        assert not is_unset(None)


class TestUncontrolled:
    """Tests for locally owned values."""

    def test_default_is_initial_value(self):
        """Without a controlled value the default is read."""
        value = ReconciledValue("count", default=1)
        assert not value.is_controlled
        assert value.value == 1

    def test_apply_stores_and_notifies(self):
        """apply() updates local state and still reports the change."""
        on_change = MagicMock()
        value = ReconciledValue("count", default=1, on_change=on_change)
        assert value.apply(2) == 2
        assert value.value == 2
        on_change.assert_called_once_with(2)

    def test_update_uses_current_value(self):
        """update() derives the next value from the current one."""
        value = ReconciledValue("count", default=1)
        value.update(lambda v: v + 10)
        assert value.value == 11

    def test_normalize_applies_to_default_and_next(self):
        """Inputs are normalized into the canonical type."""
        value = ReconciledValue("ids", default=[1, 1, 2], normalize=frozenset)
        assert value.value == frozenset({1, 2})
        value.apply([3])
        assert value.value == frozenset({3})


class TestControlled:
    """Tests for caller-owned values."""

    def test_controlled_value_wins(self):
        """The controlled value is the source of truth for reads."""
        value = ReconciledValue("count", controlled=5, default=1)
        assert value.is_controlled
        assert value.value == 5

    def test_apply_only_reports(self):
        """apply() forwards the next value without touching reads."""
        on_change = MagicMock()
        value = ReconciledValue("count", controlled=5, on_change=on_change)
        assert value.apply(6) == 6
        on_change.assert_called_once_with(6)
        assert value.value == 5

    def test_caller_applies_through_sync(self):
        """A caller that re-syncs with the reported value moves the state."""
        value: ReconciledValue[int] = ReconciledValue("count", controlled=5)

        def on_change(nxt):
            value.sync(nxt, on_change)

        value.sync(5, on_change)
        value.apply(7)
        assert value.value == 7

    def test_none_is_a_controlled_value(self):
        """Passing None controls the value; only UNSET releases it."""
        value = ReconciledValue("editing", controlled=None, default="draft")
        assert value.is_controlled
        assert value.value is None
        value.sync(UNSET)
        assert value.value == "draft"

    def test_local_value_survives_controlled_phase(self):
        """Returning to uncontrolled mode reads the last local value."""
        value = ReconciledValue("count", default=1)
        value.apply(2)
        value.sync(9)
        value.apply(10)
        value.sync(UNSET)
        assert value.value == 2


class TestCallbackErrors:
    """Tests for failing change callbacks."""

    def test_callback_error_is_logged(self, caplog):
        """A raising callback is logged and does not corrupt state."""
        on_change = MagicMock(side_effect=RuntimeError("boom"))
        value = ReconciledValue("selection", default=0, on_change=on_change)
        with caplog.at_level(logging.ERROR, logger="tablekit"):
            value.apply(1)
        assert value.value == 1
        assert "selection" in caplog.text
        assert "boom" in caplog.text

    def test_repr_mentions_mode(self):
        """repr shows the concern and its mode."""
        assert "uncontrolled" in repr(ReconciledValue("sort", default=[]))
        assert "controlled" in repr(ReconciledValue("sort", controlled=[]))
