"""Command-line interface for TableKit configuration and quick table views."""

from __future__ import annotations

import argparse
import csv
import json
import os
import sys

from pathlib import Path
from typing import TYPE_CHECKING, Any

from .exceptions import TableKitException


if TYPE_CHECKING:
    from .controller import TableController


def main(argv: list[str] | None = None) -> int:
    """Run the main CLI entry point.

    Parameters
    ----------
    argv : list of str, optional
        Arguments to parse (default: ``sys.argv[1:]``).

    Returns
    -------
    int
        Exit code.
    """
    parser = argparse.ArgumentParser(
        prog="tablekit",
        description="TableKit configuration and table tools",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # config command
    config_parser = subparsers.add_parser(
        "config",
        help="Show or export configuration",
    )
    config_group = config_parser.add_mutually_exclusive_group()
    config_group.add_argument(
        "--show",
        action="store_true",
        help="Show current configuration",
    )
    config_group.add_argument(
        "--toml",
        action="store_true",
        help="Export configuration as TOML",
    )
    config_group.add_argument(
        "--env",
        action="store_true",
        help="Export configuration as environment variables",
    )
    config_group.add_argument(
        "--sources",
        action="store_true",
        help="Show configuration file sources",
    )
    config_parser.add_argument(
        "--output",
        "-o",
        type=str,
        help="Output file path (default: stdout)",
    )

    # init command
    init_parser = subparsers.add_parser(
        "init",
        help="Initialize a tablekit.toml configuration file",
    )
    init_parser.add_argument(
        "--force",
        "-f",
        action="store_true",
        help="Overwrite existing configuration file",
    )
    init_parser.add_argument(
        "--path",
        "-p",
        type=str,
        default="tablekit.toml",
        help="Path for configuration file (default: tablekit.toml)",
    )

    # view command
    view_parser = subparsers.add_parser(
        "view",
        help="Print one page of a JSON or CSV file after filtering and sorting",
    )
    view_parser.add_argument("file", type=str, help="JSON (records or columns) or CSV file")
    view_parser.add_argument(
        "--sort",
        action="append",
        default=[],
        metavar="COLUMN[:desc]",
        help="Sort by a column; repeat for multi-column sorting",
    )
    view_parser.add_argument(
        "--filter",
        action="append",
        default=[],
        metavar="COLUMN=VALUE[:MODE]",
        help="Filter a column (modes: contains, startsWith, endsWith, equals, notEquals)",
    )
    view_parser.add_argument("--search", type=str, default="", help="Global filter text")
    view_parser.add_argument("--page", type=int, default=1, help="1-based page number")
    view_parser.add_argument("--page-size", type=int, default=None, help="Rows per page")

    args = parser.parse_args(argv)

    from .config import get_settings
    from .log import configure

    configure(get_settings().log.level, get_settings().log.format)

    if args.command == "config":
        return handle_config(args)
    if args.command == "init":
        return handle_init(args)
    if args.command == "view":
        return handle_view(args)
    parser.print_help()
    return 0


def handle_config(args: argparse.Namespace) -> int:
    """Handle the config command.

    Parameters
    ----------
    args : argparse.Namespace
        Parsed command line arguments.

    Returns
    -------
    int
        Exit code.
    """
    from .config import TableKitSettings

    settings = TableKitSettings()

    if args.sources:
        return show_config_sources()

    if args.toml:
        output = settings.to_toml()
    elif args.env:
        output = settings.to_env()
    else:
        output = settings.show()

    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        print(f"Configuration written to {args.output}")
    else:
        print(output)

    return 0


def handle_init(args: argparse.Namespace) -> int:
    """Handle the init command.

    Parameters
    ----------
    args : argparse.Namespace
        Parsed command line arguments.

    Returns
    -------
    int
        Exit code.
    """
    from .config import TableKitSettings

    path = Path(args.path)

    if path.exists() and not args.force:
        print(f"Error: {path} already exists. Use --force to overwrite.", file=sys.stderr)
        return 1

    toml_content = TableKitSettings().to_toml()

    header = """# TableKit Configuration File
#
# Environment variables can override any setting:
#   TABLEKIT_TABLE__PAGE_SIZE=25
#   TABLEKIT_TABLE__GLOBAL_FILTER_DEBOUNCE_MS=250
#   TABLEKIT_LOG__LEVEL=DEBUG
#
# Use nested keys with __ (double underscore) delimiter.

"""
    path.write_text(header + toml_content, encoding="utf-8")
    print(f"Created {path}")

    return 0


def show_config_sources() -> int:
    """Show configuration file sources and their status.

    Returns
    -------
    int
        Exit code.
    """
    from .config import _user_config_path

    sources = [
        ("Built-in defaults", "", True),
        ("pyproject.toml [tool.tablekit]", "pyproject.toml", None),
        ("./tablekit.toml", "tablekit.toml", None),
        ("User config", str(_user_config_path()), None),
        ("TABLEKIT_CONFIG_FILE", os.environ.get("TABLEKIT_CONFIG_FILE", ""), None),
        ("Environment variables", "TABLEKIT_* vars", None),
    ]

    print("Configuration Sources (in order of precedence):\n")
    print(f"{'Source':<40} {'Status':<15} {'Path'}")
    print("-" * 80)

    for name, path_str, forced_status in sources:
        if forced_status is True:
            status = "✓ Active"
            path_display = ""
        elif name == "Environment variables":
            tablekit_vars = [
                k for k in os.environ if k.startswith("TABLEKIT_") and k != "TABLEKIT_CONFIG_FILE"
            ]
            if tablekit_vars:
                status = f"✓ {len(tablekit_vars)} vars"
                path_display = ", ".join(tablekit_vars[:3])
                if len(tablekit_vars) > 3:
                    path_display += "..."
            else:
                status = "✗ No vars"
                path_display = ""
        elif not path_str:
            status = "✗ Not set"
            path_display = ""
        else:
            path = Path(path_str).expanduser()
            status = "✓ Found" if path.exists() else "✗ Not found"
            path_display = str(path)

        print(f"{name:<40} {status:<15} {path_display}")

    print("\nNote: Later sources override earlier ones.")
    return 0


# =============================================================================
# view
# =============================================================================


def _coerce_csv_value(text: str) -> Any:
    """Turn CSV cells into numbers where they look like numbers."""
    if text == "":
        return None
    # Leading zeros mark codes and ids that must stay text
    if len(text) > 1 and text[0] == "0" and text.isdigit():
        return text
    for convert in (int, float):
        try:
            return convert(text)
        except ValueError:
            pass
    return text


def load_rows(path: Path) -> list[Any]:
    """Load rows from a JSON or CSV file.

    Raises
    ------
    TableKitException
        If the file cannot be read or parsed.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise TableKitException(f"Cannot read {path}: {e}", path=str(path)) from e

    if path.suffix.lower() == ".csv":
        reader = csv.DictReader(text.splitlines())
        return [{k: _coerce_csv_value(v or "") for k, v in row.items()} for row in reader]

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise TableKitException(f"Invalid JSON in {path}: {e}", path=str(path)) from e

    from .rows import normalize_rows

    return normalize_rows(data)


def _parse_sort(specs: list[str]) -> list[dict[str, str]]:
    sort = []
    for spec in specs:
        column, _, direction = spec.partition(":")
        sort.append({"columnId": column, "direction": direction.lower() or "asc"})
    return sort


def _parse_filter(specs: list[str]) -> list[dict[str, Any]]:
    from .models import MATCH_MODES

    filters = []
    for spec in specs:
        column, sep, rest = spec.partition("=")
        if not sep:
            raise TableKitException(f"Invalid filter {spec!r}, expected COLUMN=VALUE[:MODE]")
        value, colon, mode = rest.rpartition(":")
        if not colon or mode not in MATCH_MODES:
            value, mode = rest, "contains"
        filters.append({"columnId": column, "value": value, "matchMode": mode})
    return filters


def _cell_text(value: Any) -> str:
    return "" if value is None else str(value)


def format_page(table: TableController) -> str:
    """Render the current page as a fixed-width text table."""
    from .rows import get_cell_value

    columns = table.visible_columns
    headers = [column.header or column.id for column in columns]
    cells = [[_cell_text(get_cell_value(row, column)) for column in columns] for row in table.rows]
    widths = [
        max([len(h)] + [len(line[i]) for line in cells]) for i, h in enumerate(headers)
    ]

    lines = [
        "  ".join(h.ljust(w) for h, w in zip(headers, widths)),
        "  ".join("-" * w for w in widths),
    ]
    lines.extend("  ".join(c.ljust(w) for c, w in zip(line, widths)) for line in cells)

    first, last = table.page_range
    lines.append("")
    lines.append(
        f"Showing {first} to {last} of {table.total_count} "
        f"(page {table.pagination.page_index + 1} of {max(1, table.page_count)})"
    )
    return "\n".join(lines)


def handle_view(args: argparse.Namespace) -> int:
    """Handle the view command.

    Parameters
    ----------
    args : argparse.Namespace
        Parsed command line arguments.

    Returns
    -------
    int
        Exit code.
    """
    from .controller import TableController
    from .rows import infer_columns

    try:
        rows = load_rows(Path(args.file))
        has_ids = bool(rows) and all(isinstance(r, dict) and "id" in r for r in rows)
        options: dict[str, Any] = {
            "data": rows,
            "columns": infer_columns(rows),
            "default_sort": _parse_sort(args.sort),
            "default_filters": _parse_filter(args.filter),
            "default_global_filter": args.search,
            "enable_multi_sort": True,
        }
        if not has_ids:
            options["get_row_id"] = lambda row, index: index
        if args.page_size is not None:
            options["default_pagination"] = {"pageSize": args.page_size}

        with TableController(**options) as table:
            table.go_to_page(max(0, args.page - 1))
            print(format_page(table))
    except TableKitException as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
