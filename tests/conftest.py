"""Pytest configuration and fixtures."""

from __future__ import annotations

import os

from typing import Any

import pytest

from tablekit.config import clear_settings
from tablekit.controller import TableController
from tablekit.log import get_logger
from tablekit.models import ColumnDef
from tests.constants import AGES, NAMES


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keep every test independent of the developer's configuration.

    TABLEKIT_* variables are removed, config files are looked up in an empty
    directory, and the cached settings are dropped before and after.
    """
    for key in list(os.environ):
        if key.startswith("TABLEKIT_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("APPDATA", str(tmp_path / "appdata"))
    monkeypatch.chdir(tmp_path)
    clear_settings()
    get_logger()
    yield
    clear_settings()


@pytest.fixture
def people() -> list[dict[str, Any]]:
    """The five-row scenario dataset, in id order."""
    return [{"id": rid, "name": NAMES[rid], "age": AGES[rid]} for rid in sorted(AGES)]


@pytest.fixture
def columns() -> list[ColumnDef]:
    """Name (editable text) and age (editable number) columns."""
    return [
        ColumnDef(id="name", header="Name", editable=True, editor="text"),
        ColumnDef(id="age", header="Age", editable=True, editor="number"),
    ]


@pytest.fixture
def make_table(people, columns):
    """Factory building a controller over the sample data."""
    created: list[TableController] = []

    def _make(**options: Any) -> TableController:
        options.setdefault("data", people)
        options.setdefault("columns", columns)
        table = TableController(**options)
        created.append(table)
        return table

    yield _make

    for table in created:
        table.close()


@pytest.fixture
def numbered_rows() -> list[dict[str, Any]]:
    """Twenty-five rows with ids 1..25 and a parity group."""
    return [
        {"id": i, "value": i, "group": "even" if i % 2 == 0 else "odd"} for i in range(1, 26)
    ]
