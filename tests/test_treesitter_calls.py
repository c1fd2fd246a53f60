from __future__ import annotations

from pathlib import Path

import pytest

from parse.module_index import ModuleIndex
from parse.treesitter_calls import (
    collect_comments,
    extract_unit,
    extract_unit_from_source,
)
from parse.treesitter_symbols import parse_source
from seams.models import NameCallee, SelectorCallee, UnsupportedCallee


def _write_python_file(repo_root: Path, relative_path: str, source: str) -> Path:
    path = repo_root / relative_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(source, encoding="utf-8")
    return path


def _index(repo_root: Path) -> ModuleIndex:
    return ModuleIndex([repo_root], use_sys_path=False)


@pytest.mark.parametrize(
    ("source", "expected_callee"),
    [
        ("foo()\n", NameCallee("foo")),
        ("a.b.c()\n", SelectorCallee(receiver="a.b", name="c")),
        ("obj.method()\n", SelectorCallee(receiver="obj", name="method")),
        ("handlers[0]()\n", UnsupportedCallee("subscript")),
        ("(lambda: 1)()\n", UnsupportedCallee("parenthesized_expression")),
    ],
)
def test_callee_shapes(
    tmp_path: Path,
    source: str,
    expected_callee: object,
) -> None:
    unit = extract_unit_from_source(source.encode(), "sample.py", _index(tmp_path))

    assert unit.calls[0].callee == expected_callee


def test_call_result_callee_records_both_calls(tmp_path: Path) -> None:
    unit = extract_unit_from_source(b"make()()\n", "sample.py", _index(tmp_path))

    assert [call.callee for call in unit.calls] == [
        UnsupportedCallee("call"),
        NameCallee("make"),
    ]


def test_unsupported_callee_has_no_symbol(tmp_path: Path) -> None:
    unit = extract_unit_from_source(
        b"import os\n\n[os.getcwd][0]()\n", "sample.py", _index(tmp_path)
    )

    outer = unit.calls[0]
    assert isinstance(outer.callee, UnsupportedCallee)
    assert outer.symbol is None


def test_positions_are_one_based(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    file_path = _write_python_file(
        repo_root,
        "pkg/module.py",
        "def run():\n    value = compute(1)\n    return value\n",
    )

    unit = extract_unit(file_path, repo_root, _index(repo_root))

    assert unit.path == "pkg/module.py"
    assert unit.module == "pkg.module"
    position = unit.calls[0].position
    assert (position.path, position.line, position.col) == ("pkg/module.py", 2, 13)


def test_nested_calls_are_all_recorded(tmp_path: Path) -> None:
    unit = extract_unit_from_source(
        b"outer(inner(1), key=other())\n", "sample.py", _index(tmp_path)
    )

    assert sorted(call.callee.name for call in unit.calls) == [
        "inner",
        "other",
        "outer",
    ]


def test_comments_are_collected_in_source_order(tmp_path: Path) -> None:
    source = b"# first\nx = 1  # trailing\n\n\ndef f():\n    # inner\n    pass\n"

    unit = extract_unit_from_source(source, "sample.py", _index(tmp_path))

    assert unit.comments == ("# first", "# trailing", "# inner")


def test_crlf_comments_are_normalized(tmp_path: Path) -> None:
    source = b"# Code generated by tool. DO NOT EDIT.\r\nx = 1\r\n"

    unit = extract_unit_from_source(source, "sample.py", _index(tmp_path))

    assert unit.comments == ("# Code generated by tool. DO NOT EDIT.",)


def test_package_init_maps_to_package_module(tmp_path: Path) -> None:
    unit = extract_unit_from_source(b"", "src/app/__init__.py", _index(tmp_path))

    assert unit.module == "app"
    assert unit.calls == ()


def test_syntax_errors_still_produce_a_unit(tmp_path: Path) -> None:
    source = b"def broken(:\n    pass\n\n\nprint('still here')\n"

    unit = extract_unit_from_source(source, "broken.py", _index(tmp_path))

    assert unit.path == "broken.py"
    assert unit.module == "broken"


def test_extract_unit_rejects_paths_outside_root(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()
    outside = _write_python_file(tmp_path, "outside.py", "print(1)\n")

    with pytest.raises(ValueError):
        extract_unit(outside, repo_root, _index(repo_root))


def test_extract_unit_missing_file_raises_oserror(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        extract_unit(tmp_path / "missing.py", tmp_path, _index(tmp_path))


def test_collect_comments_matches_unit_comments(tmp_path: Path) -> None:
    source = b"# first\nclass A:\n    # body\n    x = [1]  # tail\n"

    unit = extract_unit_from_source(source, "sample.py", _index(tmp_path))

    assert collect_comments(parse_source(source)) == list(unit.comments)
    assert unit.comments == ("# first", "# body", "# tail")
