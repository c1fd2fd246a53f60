from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

CONFIG_FILENAME = "seams.toml"

OutputFormat = Literal["text", "jsonl"]


class SeamsConfig(BaseModel):
    """Configuration for a seams analysis run."""

    model_config = ConfigDict(extra="forbid")

    include: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files to include (empty = all Python files)",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files to exclude",
    )
    nested_gitignore: bool = Field(
        default=False,
        description=(
            "Enable nested .gitignore composition (default: false for root-only)"
        ),
    )
    search_paths: list[str] = Field(
        default_factory=list,
        description=(
            "Extra directories, relative to the root, searched when resolving "
            "imported modules"
        ),
    )
    format: OutputFormat = Field(
        default="text",
        description="Default output format for reported diagnostics",
    )

    @field_validator("search_paths", mode="before")
    @classmethod
    def validate_search_paths(cls, v: Any) -> Any:
        """Reject absolute or home-relative search paths.

        Note: this runs in `mode="before"` so the error names the raw TOML value.
        """
        if v is None:
            return []

        if not isinstance(v, list):
            msg = "search_paths must be a list of relative directory paths"
            raise ValueError(msg)

        for entry in v:
            if not isinstance(entry, str) or not entry:
                msg = "search_paths entries must be non-empty strings"
                raise ValueError(msg)
            if entry.startswith("~") or Path(entry).is_absolute():
                msg = f"search_paths entry '{entry}' must be relative to the root"
                raise ValueError(msg)

        return v

    def resolved_search_paths(self, root: Path) -> list[Path]:
        return [(root / entry).resolve() for entry in self.search_paths]


class ConfigError(Exception):
    """Raised when config file exists but cannot be parsed."""


def project_paths(root: Path) -> list[Path]:
    """Import roots of the analyzed project: ``src/`` first, then the root."""
    resolved = root.resolve()
    src = resolved / "src"
    return [src, resolved] if src.is_dir() else [resolved]


def load_config(root: Path) -> SeamsConfig:
    """Load configuration from seams.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return SeamsConfig()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return SeamsConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e
