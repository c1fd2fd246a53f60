"""Configuration for seams analysis runs."""

from rules.config import (
    CONFIG_FILENAME,
    ConfigError,
    SeamsConfig,
    load_config,
    project_paths,
)

__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "SeamsConfig",
    "load_config",
    "project_paths",
]
