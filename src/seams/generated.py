"""Detection of machine-generated source files."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

# Marker convention from https://golang.org/s/generatedcode, as a Python comment.
GENERATED_PATTERN = re.compile(r"^# Code generated .* DO NOT EDIT\.$")


def is_generated(comments: Iterable[str]) -> bool:
    """Return True if any comment line carries the generated-code marker."""
    return any(GENERATED_PATTERN.match(comment) for comment in comments)


__all__ = ["GENERATED_PATTERN", "is_generated"]
