"""Tree-sitter based compilation units: comments and resolved call sites."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from parse.declarations import ClassDecl, FunctionDecl
from parse.name_resolution import NameResolver
from parse.treesitter_symbols import (
    dotted_name,
    extract_module_summary,
    function_parameters,
    last_segment,
    node_text,
    parse_source,
    unwrap_definition,
)
from seams.models import (
    Callee,
    CallSite,
    CompilationUnit,
    NameCallee,
    SelectorCallee,
    SourcePosition,
    UnsupportedCallee,
)
from utils import path_to_module

if TYPE_CHECKING:
    from tree_sitter import Node

    from parse.module_index import ModuleIndex

logger = logging.getLogger(__name__)

# Expressions with their own scope for loop targets.
_COMPREHENSIONS = frozenset(
    {
        "list_comprehension",
        "set_comprehension",
        "dictionary_comprehension",
        "generator_expression",
    }
)

# Binding forms whose targets become plain, untyped local values.
_TARGET_FIELDS = {
    "for_statement": "left",
    "as_pattern": "alias",
}


@dataclass
class _TraversalState:
    relative_path: str
    resolver: NameResolver
    comments: list[str] = field(default_factory=list)
    calls: list[CallSite] = field(default_factory=list)


def callee_shape(callee_node: Node | None) -> Callee:
    """Classify the syntactic shape of a call target."""
    if callee_node is None:
        return UnsupportedCallee("<missing>")

    if callee_node.type == "identifier":
        return NameCallee(node_text(callee_node))

    if callee_node.type == "attribute":
        attribute = callee_node.child_by_field_name("attribute")
        if attribute is not None and attribute.type == "identifier":
            return SelectorCallee(
                receiver=node_text(callee_node.child_by_field_name("object")),
                name=node_text(attribute),
            )

    return UnsupportedCallee(callee_node.type)


def _position(relative_path: str, node: Node) -> SourcePosition:
    return SourcePosition(
        path=relative_path,
        line=node.start_point[0] + 1,
        col=node.start_point[1] + 1,
    )


def _identifiers(node: Node | None) -> list[str]:
    """Collect the names bound by an assignment target."""
    if node is None:
        return []
    if node.type == "identifier":
        return [node_text(node)]
    if node.type in (
        "pattern_list",
        "tuple_pattern",
        "list_pattern",
        "as_pattern_target",
        "parenthesized_expression",
        "list_splat_pattern",
    ):
        names: list[str] = []
        for child in node.named_children:
            names.extend(_identifiers(child))
        return names
    return []


def _record_call(node: Node, state: _TraversalState) -> None:
    function_node = node.child_by_field_name("function")
    callee = callee_shape(function_node)
    symbol = None
    if function_node is not None and not isinstance(callee, UnsupportedCallee):
        symbol = state.resolver.resolve_call(function_node)
    state.calls.append(
        CallSite(
            position=_position(state.relative_path, node),
            callee=callee,
            symbol=symbol,
        )
    )


def _collect_comments(node: Node, state: _TraversalState) -> None:
    # Comments before the first statement of a body attach to the definition.
    for child in node.children:
        if child.type == "comment":
            _traverse(child, state)


def _handle_assignment(node: Node, state: _TraversalState) -> None:
    for child in node.children:
        _traverse(child, state)

    resolver = state.resolver
    left = node.child_by_field_name("left")
    if left is None:
        return

    if left.type == "identifier":
        cls = resolver.resolve_class(dotted_name(node.child_by_field_name("type")))
        if cls is None:
            cls = resolver.constructed_class(node.child_by_field_name("right"))
        resolver.bind_value(node_text(left), cls)
        return

    for name in _identifiers(left):
        resolver.bind_value(name)


def _handle_function(
    node: Node,
    decorators: list[str],
    state: _TraversalState,
) -> None:
    resolver = state.resolver
    owner = resolver.enclosing_class()

    # Defaults and annotations are evaluated in the enclosing scope.
    for field_name in ("parameters", "return_type"):
        child = node.child_by_field_name(field_name)
        if child is not None:
            _traverse(child, state)

    _collect_comments(node, state)
    name = node_text(node.child_by_field_name("name"))
    if resolver.current.kind == "function":
        resolver.bind(name, FunctionDecl(resolver.module_name, name))

    params = function_parameters(node)
    is_static = any(last_segment(d) == "staticmethod" for d in decorators)

    resolver.push("function")
    for position, (param, type_expr) in enumerate(params):
        if position == 0 and owner is not None and not is_static:
            resolver.bind_value(param, owner)
            continue
        resolver.bind_value(param, resolver.resolve_class(type_expr))

    body = node.child_by_field_name("body")
    if body is not None:
        _traverse(body, state)
    resolver.pop()


def _handle_class(node: Node, state: _TraversalState) -> None:
    resolver = state.resolver

    superclasses = node.child_by_field_name("superclasses")
    if superclasses is not None:
        _traverse(superclasses, state)

    _collect_comments(node, state)
    name = node_text(node.child_by_field_name("name"))
    cls = _class_decl_for(name, resolver)
    if resolver.current.kind != "module":
        resolver.bind_value(name)

    resolver.push("class", cls)
    body = node.child_by_field_name("body")
    if body is not None:
        _traverse(body, state)
    resolver.pop()


def _class_decl_for(name: str, resolver: NameResolver) -> ClassDecl | None:
    outer = resolver.enclosing_class()
    if outer is not None:
        decl = outer.attributes.get(name)
    elif resolver.current.kind == "module":
        decl = resolver.module.declarations.get(name)
    else:
        decl = None
    return decl if isinstance(decl, ClassDecl) else None


def _handle_lambda(node: Node, state: _TraversalState) -> None:
    resolver = state.resolver
    resolver.push("function")
    parameters = node.child_by_field_name("parameters")
    if parameters is not None:
        for child in parameters.named_children:
            target = child.child_by_field_name("name") or child
            for name in _identifiers(target):
                resolver.bind_value(name)
    body = node.child_by_field_name("body")
    if body is not None:
        _traverse(body, state)
    resolver.pop()


def _handle_comprehension(node: Node, state: _TraversalState) -> None:
    resolver = state.resolver
    clauses = [
        child for child in node.named_children if child.type == "for_in_clause"
    ]

    # The outermost iterable is evaluated in the enclosing scope.
    outer_iterable = clauses[0].child_by_field_name("right") if clauses else None
    if outer_iterable is not None:
        _traverse(outer_iterable, state)

    resolver.push("function")
    for clause in clauses:
        for name in _identifiers(clause.child_by_field_name("left")):
            resolver.bind_value(name)

    for child in node.children:
        if child.type != "for_in_clause":
            _traverse(child, state)
            continue
        for part in child.children:
            if outer_iterable is None or part != outer_iterable:
                _traverse(part, state)
    resolver.pop()


def _traverse(node: Node, state: _TraversalState) -> None:
    node_type = node.type

    if node_type == "comment":
        state.comments.append(node_text(node).rstrip("\r"))
        return

    if node_type == "decorated_definition":
        definition, decorators = unwrap_definition(node)
        for child in node.children:
            if child.type in ("decorator", "comment"):
                _traverse(child, state)
        if definition.type == "function_definition":
            _handle_function(definition, decorators, state)
        elif definition is not node:
            _traverse(definition, state)
        return

    if node_type == "function_definition":
        _handle_function(node, [], state)
        return

    if node_type == "class_definition":
        _handle_class(node, state)
        return

    if node_type == "lambda":
        _handle_lambda(node, state)
        return

    if node_type in _COMPREHENSIONS:
        _handle_comprehension(node, state)
        return

    if node_type == "assignment":
        _handle_assignment(node, state)
        return

    if node_type == "call":
        _record_call(node, state)

    target_field = _TARGET_FIELDS.get(node_type)
    if target_field is not None:
        for name in _identifiers(node.child_by_field_name(target_field)):
            state.resolver.bind_value(name)

    for child in node.children:
        _traverse(child, state)


def extract_unit(
    file_path: str | Path,
    repo_root: str | Path,
    index: ModuleIndex,
) -> CompilationUnit:
    """Parse one Python file into a compilation unit.

    The file's own summary is registered in ``index`` so that module-level
    names resolve to the current module. Files with syntax errors still
    produce a unit from Tree-sitter's partial tree.

    Raises:
        OSError: The file cannot be read.
        ValueError: The file lies outside ``repo_root``.
    """
    root_resolved = Path(repo_root).resolve()
    file_resolved = Path(file_path).resolve(strict=False)
    relative_path = file_resolved.relative_to(root_resolved).as_posix()

    source_bytes = file_resolved.read_bytes()
    return extract_unit_from_source(source_bytes, relative_path, index)


def collect_comments(root_node: Node) -> list[str]:
    """Return every comment line of a tree in source order, without resolving."""
    comments: list[str] = []
    stack = [root_node]
    while stack:
        node = stack.pop()
        if node.type == "comment":
            comments.append(node_text(node).rstrip("\r"))
            continue
        stack.extend(reversed(node.children))
    return comments


def extract_unit_from_source(
    source_bytes: bytes,
    relative_path: str,
    index: ModuleIndex,
    *,
    root_node: Node | None = None,
) -> CompilationUnit:
    """Build a compilation unit from in-memory source.

    Pass ``root_node`` to reuse a tree already parsed from ``source_bytes``.
    """
    module_name = path_to_module(relative_path)
    if root_node is None:
        root_node = parse_source(source_bytes)
    if root_node.has_error:
        logger.debug("%s: syntax errors, analyzing partial tree", relative_path)

    summary = extract_module_summary(
        source_bytes,
        module_name,
        path=relative_path,
        is_package=Path(relative_path).name == "__init__.py",
        root_node=root_node,
    )
    index.register(summary)

    state = _TraversalState(
        relative_path=relative_path,
        resolver=NameResolver(index, summary),
    )
    _traverse(root_node, state)

    return CompilationUnit(
        path=relative_path,
        module=module_name,
        comments=tuple(state.comments),
        calls=tuple(state.calls),
    )


__all__ = [
    "callee_shape",
    "collect_comments",
    "extract_unit",
    "extract_unit_from_source",
]
