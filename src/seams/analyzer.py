"""Seams analysis driver: one compilation unit, or a whole repository."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from parse.module_index import ModuleIndex
from parse.treesitter_calls import collect_comments, extract_unit_from_source
from parse.treesitter_symbols import parse_source
from rules.config import SeamsConfig, load_config, project_paths
from scan.files import find_python_files
from seams.classifier import classify
from seams.filters import is_analyzable
from seams.generated import is_generated

if TYPE_CHECKING:
    from seams.models import CompilationUnit, Diagnostic

logger = logging.getLogger(__name__)


def _sort_key(diagnostic: Diagnostic) -> tuple[str, int, int]:
    position = diagnostic.position
    return (position.path, position.line, position.col)


def run(unit: CompilationUnit) -> list[Diagnostic]:
    """Analyze one compilation unit and return its diagnostics in order."""
    if not is_analyzable(unit.path):
        return []

    if is_generated(unit.comments):
        logger.debug("%s: generated, skipping", unit.path)
        return []

    diagnostics = []
    for call in unit.calls:
        diagnostic = classify(call, unit.module)
        if diagnostic is not None:
            diagnostics.append(diagnostic)

    return sorted(diagnostics, key=_sort_key)


def _analyze_file(
    path: Path,
    relative_path: str,
    index: ModuleIndex,
) -> list[Diagnostic]:
    """Gate one file on its comments, then resolve and classify its calls."""
    source_bytes = path.read_bytes()
    root_node = parse_source(source_bytes)
    if is_generated(collect_comments(root_node)):
        logger.debug("%s: generated, skipping", relative_path)
        return []

    unit = extract_unit_from_source(
        source_bytes, relative_path, index, root_node=root_node
    )
    return run(unit)


@dataclass
class AnalysisResult:
    """Outcome of analyzing a repository."""

    diagnostics: list[Diagnostic] = field(default_factory=list)
    files_analyzed: int = 0
    failed_files: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.diagnostics


def analyze_repository(
    root: Path,
    config: SeamsConfig | None = None,
    *,
    index: ModuleIndex | None = None,
) -> AnalysisResult:
    """Run seams analysis over every participating Python file under root.

    Args:
        root: Root directory of the repository to analyze
        config: Optional configuration; loaded from ``seams.toml`` if omitted
        index: Optional module index, shared across runs by callers that
            analyze the same tree repeatedly

    Returns:
        AnalysisResult with diagnostics sorted by path, line and column.

    Raises:
        ConfigError: ``config`` is omitted and ``seams.toml`` is invalid.
    """
    root = Path(root).resolve()
    if config is None:
        config = load_config(root)

    if index is None:
        index = ModuleIndex(
            project_paths(root),
            config.resolved_search_paths(root),
        )

    result = AnalysisResult()
    for path in find_python_files(
        root,
        include_patterns=config.include,
        exclude_patterns=config.exclude,
        nested_gitignore=config.nested_gitignore,
    ):
        relative_path = path.relative_to(root).as_posix()
        if not is_analyzable(relative_path):
            continue

        try:
            diagnostics = _analyze_file(path, relative_path, index)
        except (OSError, ValueError, RecursionError) as exc:
            logger.warning("%s: skipped: %s", relative_path, exc)
            result.failed_files.append(relative_path)
            continue

        result.files_analyzed += 1
        result.diagnostics.extend(diagnostics)

    result.diagnostics.sort(key=_sort_key)
    logger.info(
        "analyzed %d files, %d diagnostics",
        result.files_analyzed,
        len(result.diagnostics),
    )
    return result


__all__ = [
    "AnalysisResult",
    "analyze_repository",
    "run",
]
