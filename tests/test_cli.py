"""Tests for CLI module.

Tests the command-line interface for TableKit configuration management and
the view command.
"""

import json
import sys

from io import StringIO
from pathlib import Path
from unittest.mock import patch

import pytest

from tablekit.cli import _coerce_csv_value, load_rows, main
from tablekit.exceptions import TableKitException


@pytest.fixture
def people_json(tmp_path, people):
    path = tmp_path / "people.json"
    path.write_text(json.dumps(people), encoding="utf-8")
    return path


@pytest.fixture
def parts_csv(tmp_path):
    path = tmp_path / "parts.csv"
    path.write_text("code,part,qty\n007,bolt,5\n010,nut,12\n020,washer,\n", encoding="utf-8")
    return path


def body_lines(output):
    """Data lines of a printed page, without the header and summary."""
    lines = output.strip().splitlines()
    return lines[2:-2]


class TestMainEntryPoint:
    """Tests for CLI main entry point."""

    def test_no_args_prints_help_text(self):
        """Running with no args prints help text with usage info."""
        with (
            patch.object(sys, "argv", ["tablekit"]),
            patch("sys.stdout", new_callable=StringIO) as mock_stdout,
        ):
            result = main()

        output = mock_stdout.getvalue()
        assert result == 0
        assert "usage:" in output.lower()
        assert "config" in output
        assert "init" in output
        assert "view" in output

    def test_help_flag_exits(self, capsys):
        """--help shows usage and exits."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])
        assert exc_info.value.code == 0
        assert "tablekit" in capsys.readouterr().out


class TestHandleConfig:
    """Tests for the config command."""

    def test_show(self, capsys):
        """--show prints the readable configuration."""
        assert main(["config", "--show"]) == 0
        assert "Table Defaults" in capsys.readouterr().out

    def test_default_is_show(self, capsys):
        """Without a flag the configuration is shown."""
        assert main(["config"]) == 0
        assert "TableKit Configuration" in capsys.readouterr().out

    def test_toml(self, capsys):
        """--toml prints TOML sections."""
        assert main(["config", "--toml"]) == 0
        output = capsys.readouterr().out
        assert "[table]" in output
        assert "page_size = 10" in output

    def test_env(self, capsys, monkeypatch):
        """--env reflects environment overrides."""
        monkeypatch.setenv("TABLEKIT_TABLE__PAGE_SIZE", "33")
        assert main(["config", "--env"]) == 0
        assert 'TABLEKIT_TABLE__PAGE_SIZE="33"' in capsys.readouterr().out

    def test_output_file(self, capsys, tmp_path):
        """-o writes the export to a file."""
        target = tmp_path / "out.toml"
        assert main(["config", "--toml", "-o", str(target)]) == 0
        assert "[log]" in target.read_text(encoding="utf-8")
        assert str(target) in capsys.readouterr().out

    def test_sources(self, capsys, monkeypatch):
        """--sources lists each source with its status."""
        Path("tablekit.toml").write_text("[table]\npage_size = 5\n", encoding="utf-8")
        monkeypatch.setenv("TABLEKIT_LOG__LEVEL", "INFO")
        assert main(["config", "--sources"]) == 0
        output = capsys.readouterr().out
        assert "./tablekit.toml" in output
        assert "✓ Found" in output
        assert "✓ 1 vars" in output

    def test_flags_are_exclusive(self):
        """Only one export flag may be given."""
        with pytest.raises(SystemExit):
            main(["config", "--toml", "--env"])


class TestHandleInit:
    """Tests for the init command."""

    def test_creates_file(self, capsys):
        """init writes tablekit.toml in the working directory."""
        assert main(["init"]) == 0
        content = Path("tablekit.toml").read_text(encoding="utf-8")
        assert content.startswith("# TableKit Configuration File")
        assert "[table]" in content
        assert "Created" in capsys.readouterr().out

    def test_refuses_to_overwrite(self, capsys):
        """An existing file is kept unless --force is given."""
        Path("tablekit.toml").write_text("keep", encoding="utf-8")
        assert main(["init"]) == 1
        assert "already exists" in capsys.readouterr().err
        assert Path("tablekit.toml").read_text(encoding="utf-8") == "keep"

        assert main(["init", "--force"]) == 0
        assert "[table]" in Path("tablekit.toml").read_text(encoding="utf-8")

    def test_custom_path(self, tmp_path):
        """--path chooses the file location."""
        target = tmp_path / "conf" / "table.toml"
        target.parent.mkdir()
        assert main(["init", "--path", str(target)]) == 0
        assert target.exists()

    def test_created_file_is_loaded(self):
        """The generated file is a valid configuration source."""
        from tablekit.config import TableKitSettings

        main(["init"])
        assert TableKitSettings().table.page_size == 10


class TestHandleView:
    """Tests for the view command."""

    def test_sorted_page(self, capsys, people_json):
        """Rows are sorted and the first page is printed."""
        assert main(["view", str(people_json), "--sort", "age:desc", "--page-size", "2"]) == 0
        output = capsys.readouterr().out
        rows = body_lines(output)
        assert len(rows) == 2
        assert "Margaret" in rows[0]
        assert "Ada" in rows[1]
        assert "Showing 1 to 2 of 5 (page 1 of 3)" in output

    def test_last_page(self, capsys, people_json):
        """--page is 1-based and clamped to the last page."""
        assert main(["view", str(people_json), "--page-size", "2", "--page", "9"]) == 0
        output = capsys.readouterr().out
        assert "Showing 5 to 5 of 5 (page 3 of 3)" in output
        assert "Alan" in body_lines(output)[0]

    def test_filter_with_mode(self, capsys, people_json):
        """--filter accepts a match mode suffix."""
        assert main(["view", str(people_json), "--filter", "name=a:startsWith"]) == 0
        rows = body_lines(capsys.readouterr().out)
        assert [r.split()[1] for r in rows] == ["Ada", "Alan"]

    def test_search(self, capsys, people_json):
        """--search applies the global filter."""
        assert main(["view", str(people_json), "--search", "gar"]) == 0
        output = capsys.readouterr().out
        assert "Margaret" in output
        assert "of 1 " in output

    def test_multi_sort(self, capsys, people_json):
        """Repeated --sort options sort by several columns."""
        assert main(["view", str(people_json), "--sort", "age", "--sort", "name:desc"]) == 0
        rows = body_lines(capsys.readouterr().out)
        assert [r.split()[1] for r in rows] == ["Alan", "Linus", "Grace", "Ada", "Margaret"]

    def test_csv_without_ids(self, capsys, parts_csv):
        """CSV rows without an id column are keyed by position."""
        assert main(["view", str(parts_csv), "--sort", "qty:desc"]) == 0
        output = capsys.readouterr().out
        rows = body_lines(output)
        assert rows[0].startswith("010")
        assert rows[1].startswith("007")
        # Missing values sort last
        assert rows[2].startswith("020")

    def test_empty_result(self, capsys, people_json):
        """A filter matching nothing prints an empty page."""
        assert main(["view", str(people_json), "--search", "zzz"]) == 0
        assert "Showing 0 to 0 of 0 (page 1 of 1)" in capsys.readouterr().out

    @pytest.mark.parametrize(
        "extra",
        [["--filter", "name"], ["--page-size", "0"]],
    )
    def test_invalid_options(self, capsys, people_json, extra):
        """Malformed options report an error."""
        assert main(["view", str(people_json), *extra]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_missing_file(self, capsys, tmp_path):
        """A missing file reports an error."""
        assert main(["view", str(tmp_path / "nope.json")]) == 1
        assert "Cannot read" in capsys.readouterr().err

    def test_duplicate_ids(self, capsys, tmp_path):
        """Duplicate row ids are reported as a configuration error."""
        path = tmp_path / "dupes.json"
        path.write_text(json.dumps([{"id": 1}, {"id": 1}]), encoding="utf-8")
        assert main(["view", str(path)]) == 1
        assert "Duplicate row id" in capsys.readouterr().err


class TestLoadRows:
    """Tests for file loading helpers."""

    def test_json_columns(self, tmp_path):
        """JSON objects of lists become rows."""
        path = tmp_path / "cols.json"
        path.write_text(json.dumps({"id": [1, 2], "name": ["a", "b"]}), encoding="utf-8")
        assert load_rows(path) == [{"id": 1, "name": "a"}, {"id": 2, "name": "b"}]

    def test_invalid_json(self, tmp_path):
        """Unparseable JSON raises TableKitException."""
        path = tmp_path / "bad.json"
        path.write_text("{nope", encoding="utf-8")
        with pytest.raises(TableKitException, match="Invalid JSON"):
            load_rows(path)

    def test_csv_values(self, parts_csv):
        """CSV cells are converted to numbers where possible."""
        rows = load_rows(parts_csv)
        assert rows[1] == {"code": "010", "part": "nut", "qty": 12}
        assert rows[2]["qty"] is None

    @pytest.mark.parametrize(
        ("text", "value"),
        [("12", 12), ("1.5", 1.5), ("007", "007"), ("0", 0), ("", None), ("abc", "abc")],
    )
    def test_coerce_csv_value(self, text, value):
        """Numbers convert; leading-zero codes stay text."""
        assert _coerce_csv_value(text) == value
