from __future__ import annotations

import pytest

from seams.filters import is_analyzable, is_source_file, is_test_file
from seams.generated import is_generated


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("app/main.py", True),
        ("app/main_test.py", False),
        ("tests/test_main.py", False),
        ("app/testing.py", True),
        ("app/contest_test_data.py", True),
        ("app/main.pyi", False),
        ("app/_speedups.so", False),
        ("README.md", False),
    ],
)
def test_is_analyzable(path: str, expected: bool) -> None:
    assert is_analyzable(path) is expected


def test_test_file_detection_uses_file_name_only() -> None:
    assert is_test_file("test_pkg/module.py") is False
    assert is_test_file("pkg\\sub\\test_module.py") is True
    assert is_test_file("pkg/module_test.py") is True


def test_source_file_requires_py_suffix() -> None:
    assert is_source_file("pkg/module.py") is True
    assert is_source_file("pkg/module.pyc") is False
    assert is_source_file("pkg/module") is False


def test_generated_marker_detected() -> None:
    comments = [
        "#!/usr/bin/env python",
        "# Code generated by protoc-gen-python. DO NOT EDIT.",
    ]

    assert is_generated(comments) is True


@pytest.mark.parametrize(
    "comment",
    [
        "# Code generated by tool. DO NOT EDIT",
        "#Code generated by tool. DO NOT EDIT.",
        "# code generated by tool. DO NOT EDIT.",
        "# Code generated by tool. DO NOT EDIT. Really.",
        "    # Code generated by tool. DO NOT EDIT.",
    ],
)
def test_near_miss_markers_are_not_generated(comment: str) -> None:
    assert is_generated([comment]) is False


def test_no_comments_is_not_generated() -> None:
    assert is_generated([]) is False
