"""AST-based import binding extraction."""

from __future__ import annotations

import ast
from dataclasses import dataclass

STAR = "*"


@dataclass(frozen=True)
class ImportBinding:
    """A name bound by an import statement.

    ``name`` is None for ``import x`` forms, where the local name is bound to
    the module itself. Star imports use ``local_name == name == "*"``.
    """

    lineno: int
    local_name: str
    module: str
    name: str | None = None


def _process_import_node(node: ast.Import, bindings: list[ImportBinding]) -> None:
    """Process a standard import node (import x)."""
    for alias in node.names:
        if alias.asname:
            bindings.append(ImportBinding(node.lineno, alias.asname, alias.name))
            continue
        top_level = alias.name.split(".", 1)[0]
        bindings.append(ImportBinding(node.lineno, top_level, top_level))


def _process_import_from_node(
    node: ast.ImportFrom,
    bindings: list[ImportBinding],
    package: str,
) -> None:
    """Process a from-import node (from x import y)."""
    module = node.module or ""
    if node.level > 0:
        module = resolve_relative_import(package, module, node.level)
    if not module:
        return

    for alias in node.names:
        if alias.name == STAR:
            bindings.append(ImportBinding(node.lineno, STAR, module, STAR))
            continue
        local_name = alias.asname or alias.name
        bindings.append(ImportBinding(node.lineno, local_name, module, alias.name))


def extract_imports(
    source: str,
    module_name: str,
    *,
    is_package: bool = False,
    filename: str = "<unknown>",
) -> list[ImportBinding]:
    """Extract import bindings from Python source using AST.

    Imports anywhere in the file are treated as module-level bindings, in
    source order. Relative imports are resolved against the importing module.

    Args:
        source: Python source text
        module_name: Dotted name of the importing module
        is_package: True when the source is a package ``__init__``
        filename: Used for syntax error reporting only

    Returns:
        Import bindings sorted by line number.
    """
    package = module_name if is_package else module_name.rpartition(".")[0]
    bindings: list[ImportBinding] = []

    try:
        tree = ast.parse(source, filename)
    except (SyntaxError, ValueError, RecursionError):
        # Unparsable or too deeply nested source binds no imports; Tree-sitter
        # still sees the calls.
        return bindings

    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            _process_import_node(node, bindings)
        elif isinstance(node, ast.ImportFrom):
            _process_import_from_node(node, bindings, package)

    bindings.sort(key=lambda b: b.lineno)
    return bindings


def resolve_relative_import(
    package: str,
    relative_module: str,
    level: int,
) -> str:
    """Resolve a relative import to an absolute module name.

    Args:
        package: The package containing the importing module (e.g., "pkg.sub")
        relative_module: The relative module name (e.g., "foo" from ".foo")
        level: Number of dots (1 for ".", 2 for "..", etc.)

    Returns:
        Absolute module name, or "" when the import climbs past the top level.

    Examples:
        >>> resolve_relative_import("pkg.sub", "foo", 1)
        'pkg.sub.foo'
        >>> resolve_relative_import("pkg.sub", "", 1)
        'pkg.sub'
        >>> resolve_relative_import("pkg.sub", "bar", 2)
        'pkg.bar'
    """
    parts = package.split(".") if package else []

    if level - 1 >= len(parts):
        return ""

    base_parts = parts[: len(parts) - (level - 1)]

    if relative_module:
        return ".".join([*base_parts, relative_module])
    return ".".join(base_parts)


__all__ = ["STAR", "ImportBinding", "extract_imports", "resolve_relative_import"]
