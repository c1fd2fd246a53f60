"""Rendering of diagnostics for the command line."""

from __future__ import annotations

from typing import TYPE_CHECKING, TextIO

import orjson

if TYPE_CHECKING:
    from collections.abc import Iterable

    from seams.models import Diagnostic


def format_text(diagnostic: Diagnostic) -> str:
    return f"{diagnostic.location()}: {diagnostic.message}"


def format_jsonl(diagnostic: Diagnostic) -> bytes:
    payload = {
        "path": diagnostic.position.path,
        "line": diagnostic.position.line,
        "col": diagnostic.position.col,
        "message": diagnostic.message,
    }
    return orjson.dumps(payload, option=orjson.OPT_SORT_KEYS)


def write_diagnostics(
    diagnostics: Iterable[Diagnostic],
    stream: TextIO,
    output_format: str = "text",
) -> None:
    """Write one line per diagnostic in the requested format."""
    for diagnostic in diagnostics:
        if output_format == "jsonl":
            stream.write(format_jsonl(diagnostic).decode("utf-8"))
        else:
            stream.write(format_text(diagnostic))
        stream.write("\n")


__all__ = ["format_jsonl", "format_text", "write_diagnostics"]
