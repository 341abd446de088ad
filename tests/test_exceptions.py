"""Tests for the exception hierarchy."""

import pytest

from tablekit.exceptions import (
    AccessorError,
    CommitError,
    ConfigurationError,
    TableKitException,
)


class TestTableKitException:
    """Tests for the base exception."""

    def test_message_only(self):
        """Without context the message is the string form."""
        exc = TableKitException("Something broke")
        assert str(exc) == "Something broke"
        assert exc.message == "Something broke"
        assert exc.context == {}

    def test_context_is_rendered(self):
        """Context keywords are appended to the message."""
        exc = TableKitException("Bad", option="page_size", value=0)
        assert str(exc) == "Bad (option='page_size', value=0)"

    def test_subclasses_share_base(self):
        """All specific errors can be caught through the base class."""
        for exc in (
            ConfigurationError("x"),
            AccessorError("x"),
            CommitError("x"),
        ):
            assert isinstance(exc, TableKitException)

    def test_configuration_error_is_not_value_error(self):
        """Pydantic validators let it propagate unchanged."""
        assert not issubclass(ConfigurationError, ValueError)


class TestSpecificErrors:
    """Tests for the attributes of each error type."""

    def test_configuration_error_option(self):
        """ConfigurationError records the rejected option."""
        exc = ConfigurationError("Duplicate column id 'a'", option="columns")
        assert exc.option == "columns"
        assert "option='columns'" in str(exc)

    def test_accessor_error_cell(self):
        """AccessorError records the failing cell."""
        exc = AccessorError("boom", column_id="age", row_id=3)
        assert exc.column_id == "age"
        assert exc.row_id == 3

    def test_commit_error_cell(self):
        """CommitError records the cell being committed."""
        exc = CommitError("rejected", row_id=1, column_id="name")
        assert (exc.row_id, exc.column_id) == (1, "name")

    def test_commit_error_can_be_raised(self):
        """CommitError behaves as a regular exception."""
        with pytest.raises(CommitError, match="rejected"):
            raise CommitError("rejected", row_id=1, column_id="name")
