from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from scan.files import _build_gitignore_matcher, find_python_files

if TYPE_CHECKING:
    from pathlib import Path


@pytest.mark.skipif(
    os.name == "nt",
    reason="Symlink semantics vary on Windows test runners.",
)
def test_find_python_files_skips_symlinked_dirs(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()
    (repo_root / "pkg").mkdir()
    (repo_root / "pkg" / "module.py").write_text("print('ok')\n", encoding="utf-8")

    external_root = tmp_path / "external"
    external_root.mkdir()
    (external_root / "leak.py").write_text("print('leak')\n", encoding="utf-8")

    symlink_dir = repo_root / "linked"
    symlink_dir.symlink_to(external_root, target_is_directory=True)

    results = [
        path.relative_to(repo_root).as_posix() for path in find_python_files(repo_root)
    ]

    assert "pkg/module.py" in results
    assert "linked/leak.py" not in results


@pytest.mark.skipif(
    os.name == "nt",
    reason="Symlink semantics vary on Windows test runners.",
)
def test_nested_gitignore_skips_symlinked_gitignore(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()
    (repo_root / "pkg").mkdir()
    (repo_root / "pkg" / "module.py").write_text("print('ok')\n", encoding="utf-8")
    (repo_root / ".gitignore").write_text("*.bin\n", encoding="utf-8")

    external_root = tmp_path / "external"
    external_root.mkdir()
    (external_root / "outside.gitignore").write_text(
        "pkg/module.py\n", encoding="utf-8"
    )

    symlink_gitignore = repo_root / "linked.gitignore"
    symlink_gitignore.symlink_to(external_root / "outside.gitignore")

    matcher = _build_gitignore_matcher(repo_root, nested_gitignore=True)
    assert matcher is not None
    assert matcher(str(repo_root / "pkg" / "module.py")) is False


def _write_python_file(repo_root: Path, relative_path: str, source: str) -> Path:
    path = repo_root / relative_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(source, encoding="utf-8")
    return path


def test_find_python_files_skips_tooling_dirs(tmp_path: Path) -> None:
    _write_python_file(tmp_path, "pkg/module.py", "x = 1\n")
    _write_python_file(tmp_path, ".venv/lib/site.py", "x = 1\n")
    _write_python_file(tmp_path, "pkg/__pycache__/module.py", "x = 1\n")

    results = [
        path.relative_to(tmp_path).as_posix() for path in find_python_files(tmp_path)
    ]

    assert results == ["pkg/module.py"]


def test_find_python_files_is_sorted_and_filtered(tmp_path: Path) -> None:
    for relative_path in ("b/z.py", "a/y.py", "a/x.py", "gen/out.py", "notes.txt"):
        _write_python_file(tmp_path, relative_path, "x = 1\n")
    (tmp_path / ".gitignore").write_text("gen/\n", encoding="utf-8")

    results = [
        path.relative_to(tmp_path).as_posix()
        for path in find_python_files(tmp_path, exclude_patterns=["b/*"])
    ]

    assert results == ["a/x.py", "a/y.py"]


def test_find_python_files_include_patterns(tmp_path: Path) -> None:
    for relative_path in ("app/main.py", "scripts/tool.py"):
        _write_python_file(tmp_path, relative_path, "x = 1\n")

    results = [
        path.relative_to(tmp_path).as_posix()
        for path in find_python_files(tmp_path, include_patterns=["app/*"])
    ]

    assert results == ["app/main.py"]


def test_nested_gitignore_composes_subdirectory_rules(tmp_path: Path) -> None:
    _write_python_file(tmp_path, "pkg/keep.py", "x = 1\n")
    _write_python_file(tmp_path, "pkg/drop.py", "x = 1\n")
    (tmp_path / "pkg" / ".gitignore").write_text("drop.py\n", encoding="utf-8")

    root_only = [
        path.name for path in find_python_files(tmp_path, nested_gitignore=False)
    ]
    nested = [path.name for path in find_python_files(tmp_path, nested_gitignore=True)]

    assert root_only == ["drop.py", "keep.py"]
    assert nested == ["keep.py"]
