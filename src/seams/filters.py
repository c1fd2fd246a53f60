"""Source-file participation rules."""

from __future__ import annotations

from pathlib import PurePosixPath

SOURCE_SUFFIX = ".py"
TEST_FILE_SUFFIX = "_test.py"
TEST_FILE_PREFIX = "test_"


def is_test_file(path: str) -> bool:
    """Return True for pytest-style test module names."""
    name = PurePosixPath(path.replace("\\", "/")).name
    return name.endswith(TEST_FILE_SUFFIX) or (
        name.startswith(TEST_FILE_PREFIX) and name.endswith(SOURCE_SUFFIX)
    )


def is_source_file(path: str) -> bool:
    return PurePosixPath(path.replace("\\", "/")).suffix == SOURCE_SUFFIX


def is_analyzable(path: str) -> bool:
    """Return True when a file participates in seams analysis.

    Test modules are never analyzed, and neither is anything that is not a
    plain ``.py`` source (stubs, extension modules, archive members).
    """
    return is_source_file(path) and not is_test_file(path)


__all__ = ["is_analyzable", "is_source_file", "is_test_file"]
