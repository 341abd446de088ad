"""Configuration system for TableKit using pydantic-settings.

Supports layered configuration:
1. Built-in defaults (lowest priority)
2. pyproject.toml [tool.tablekit] section (project-level)
3. ./tablekit.toml (project-level, explicit)
4. ~/.config/tablekit/config.toml (user-level, overrides project)
5. Environment variables (highest priority)

Environment variables use TABLEKIT_ prefix with nested delimiter __.
Example: TABLEKIT_TABLE__PAGE_SIZE, TABLEKIT_LOG__LEVEL
"""

from __future__ import annotations

import os
import sys

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .log import warn


if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


def _user_config_path() -> Path:
    """Location of the user-level configuration file."""
    if sys.platform == "win32":
        return Path(os.environ.get("APPDATA", "~")) / "tablekit" / "config.toml"
    return Path("~/.config/tablekit/config.toml")


def _find_config_files() -> list[Path]:
    """Find all configuration files in order of precedence (lowest first)."""
    files = []

    pyproject = Path("pyproject.toml")
    if pyproject.exists():
        files.append(pyproject)

    tablekit_toml = Path("tablekit.toml")
    if tablekit_toml.exists():
        files.append(tablekit_toml)

    user_config = _user_config_path().expanduser()
    if user_config.exists():
        files.append(user_config)

    env_config = os.environ.get("TABLEKIT_CONFIG_FILE")
    if env_config:
        env_path = Path(env_config)
        if env_path.exists():
            files.append(env_path)

    return files


def _load_toml_config() -> dict[str, Any]:
    """Load and merge all TOML configuration files."""
    merged: dict[str, Any] = {}

    for config_file in _find_config_files():
        try:
            data = tomllib.loads(config_file.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError) as e:
            warn(f"Ignoring unreadable config file {config_file}: {e}")
            continue

        if config_file.name == "pyproject.toml":
            data = data.get("tool", {}).get("tablekit", {})

        merged = _deep_merge(merged, data)

    return merged


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class TableDefaults(BaseSettings):
    """Defaults applied to every table controller.

    Environment prefix: TABLEKIT_TABLE__
    Example: TABLEKIT_TABLE__PAGE_SIZE=25
    """

    model_config = SettingsConfigDict(
        env_prefix="TABLEKIT_TABLE__",
        extra="ignore",
    )

    page_size: int = Field(default=10, gt=0, description="Initial rows per page")
    page_size_options: Annotated[list[int], NoDecode] = Field(
        default_factory=lambda: [10, 20, 30, 40, 50],
        description="Page sizes offered by a page-size selector",
    )
    max_multi_sort_columns: int | None = Field(
        default=None, ge=1, description="Cap on multi-sort descriptors (None for no cap)"
    )
    page_jump_rows: int = Field(
        default=10, ge=1, description="Rows moved by PageUp / PageDown"
    )
    global_filter_debounce_ms: int = Field(
        default=300, ge=0, description="Quiescence window before the global filter applies"
    )

    @field_validator("page_size_options", mode="before")
    @classmethod
    def parse_comma_separated(cls, v: Any) -> list[int]:
        """Parse comma-separated strings from env vars."""
        if isinstance(v, str):
            return [int(s.strip()) for s in v.split(",") if s.strip()]
        return v or []

    @model_validator(mode="after")
    def validate_options(self) -> TableDefaults:
        """Reject non-positive page size options."""
        if any(size <= 0 for size in self.page_size_options):
            raise ValueError("page_size_options must all be positive")
        return self


class LogSettings(BaseSettings):
    """Logging settings.

    Environment prefix: TABLEKIT_LOG__
    Example: TABLEKIT_LOG__LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="TABLEKIT_LOG__",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    format: str = "%(name)s - %(levelname)s - %(message)s"


class TableKitSettings(BaseSettings):
    """Main settings aggregating all configuration sections.

    Environment prefix: TABLEKIT__

    Configuration sources (in order of precedence):
    1. Built-in defaults
    2. pyproject.toml [tool.tablekit] section
    3. ./tablekit.toml (project-level)
    4. ~/.config/tablekit/config.toml (user-level, overrides project)
    5. Environment variables (highest priority)
    """

    model_config = SettingsConfigDict(
        env_prefix="TABLEKIT__",
        env_nested_delimiter="__",
        extra="ignore",
    )

    table: TableDefaults = Field(default_factory=TableDefaults)
    log: LogSettings = Field(default_factory=LogSettings)

    def __init__(self, **data: Any) -> None:
        toml_config = _load_toml_config()
        merged = _deep_merge(toml_config, data)
        super().__init__(**merged)

    def _sections(self) -> list[tuple[str, str, str]]:
        """(display name, attribute, env prefix) for each section."""
        return [
            ("Table Defaults", "table", "TABLE"),
            ("Logging", "log", "LOG"),
        ]

    def to_toml(self) -> str:
        """Export settings as TOML string."""
        lines = ["# TableKit Configuration", "# Generated by: tablekit config --toml", ""]

        all_data = self.model_dump()
        for _, section_name, _ in self._sections():
            lines.append(f"[{section_name}]")
            for field_name, field_value in all_data[section_name].items():
                if field_value is None:
                    # TOML has no null; leaving the key out keeps the default
                    continue
                if isinstance(field_value, list):
                    value_str = "[" + ", ".join(str(v) for v in field_value) + "]"
                elif isinstance(field_value, bool):
                    value_str = "true" if field_value else "false"
                elif isinstance(field_value, str):
                    value_str = f'"{field_value}"'
                else:
                    value_str = str(field_value)
                lines.append(f"{field_name} = {value_str}")
            lines.append("")

        return "\n".join(lines)

    def to_env(self) -> str:
        """Export settings as shell environment variables."""
        lines = [
            "# TableKit Environment Variables",
            "# Generated by: tablekit config --env",
            "",
        ]

        all_data = self.model_dump()
        for _, attr_name, env_prefix in self._sections():
            for field_name, field_value in all_data[attr_name].items():
                if field_value is None:
                    continue
                env_name = f"TABLEKIT_{env_prefix}__{field_name.upper()}"
                if isinstance(field_value, list):
                    value_str = ",".join(str(v) for v in field_value)
                elif isinstance(field_value, bool):
                    value_str = "true" if field_value else "false"
                else:
                    value_str = str(field_value)
                lines.append(f'export {env_name}="{value_str}"')

        return "\n".join(lines)

    def show(self) -> str:
        """Format settings as a readable table."""
        lines = ["TableKit Configuration", "=" * 60, ""]

        all_data = self.model_dump()
        for display_name, attr_name, _ in self._sections():
            lines.append(f"\n{display_name}")
            lines.append("-" * 40)
            for field_name, field_value in all_data[attr_name].items():
                value_str = str(field_value)
                if len(value_str) > 50:
                    value_str = value_str[:47] + "..."
                lines.append(f"  {field_name:24} = {value_str}")

        return "\n".join(lines)


@lru_cache(maxsize=1)
def get_settings() -> TableKitSettings:
    """Get the global settings instance (cached).

    Call clear_settings() to reload configuration.
    """
    return TableKitSettings()


def clear_settings() -> None:
    """Clear the cached settings to force reload."""
    get_settings.cache_clear()


def reload_settings() -> TableKitSettings:
    """Reload settings from all sources."""
    clear_settings()
    return get_settings()
