"""Shared utilities for seams."""

from __future__ import annotations

from pathlib import Path


def path_to_module(file_path: str | Path) -> str:
    """Convert a repository-relative file path to a dotted module name.

    Args:
        file_path: Relative file path (e.g., "src/app/main.py" or Path object)

    Returns:
        Module name (e.g., "app.main"), the identity used for the
        same-module rule.

    Examples:
        >>> path_to_module("src/app/main.py")
        'app.main'
        >>> path_to_module("src/app/__init__.py")
        'app'
        >>> path_to_module(Path("scripts/tool.py"))
        'scripts.tool'
    """
    path_str = file_path.as_posix() if isinstance(file_path, Path) else str(file_path)
    parts = [part for part in path_str.replace("\\", "/").split("/") if part]

    # src/<package>/... is importable as <package>...
    if len(parts) >= 2 and parts[0] == "src":
        parts = parts[1:]

    if parts and parts[-1].endswith(".py"):
        parts[-1] = parts[-1][:-3]

    if parts and parts[-1] == "__init__":
        parts = parts[:-1]

    return ".".join(parts)
