from __future__ import annotations

import sys


def test_seams_import_does_not_load_front_end() -> None:
    before_modules = set(sys.modules)
    import seams  # noqa: F401

    newly_imported = set(sys.modules) - before_modules
    assert not any(
        name == "parse" or name.startswith("parse.") for name in newly_imported
    )
    assert "tree_sitter" not in newly_imported
