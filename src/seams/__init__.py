"""Find function and method calls that cannot be replaced by test doubles."""

from __future__ import annotations

from typing import TYPE_CHECKING

from seams.classifier import classify, is_untestable
from seams.models import CallSite, CompilationUnit, Diagnostic, Symbol

if TYPE_CHECKING:
    from pathlib import Path

    from rules.config import SeamsConfig
    from seams.analyzer import AnalysisResult

ANALYZER_NAME = "seams"
ANALYZER_DOC = "find function/method calls which cannot be replaced by test doubles."


def analyze_repository(
    root: Path,
    config: SeamsConfig | None = None,
) -> AnalysisResult:
    """Analyze a repository via lazy import to avoid package import cycles."""
    from seams.analyzer import analyze_repository as _analyze_repository

    return _analyze_repository(root, config)


__all__ = [
    "ANALYZER_DOC",
    "ANALYZER_NAME",
    "CallSite",
    "CompilationUnit",
    "Diagnostic",
    "Symbol",
    "analyze_repository",
    "classify",
    "is_untestable",
]
