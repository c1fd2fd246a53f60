"""Tree-sitter based module summaries for name resolution."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from tree_sitter import Language, Node, Parser
from tree_sitter_python import language as get_python_language

from parse.ast_imports import STAR, extract_imports
from parse.declarations import (
    ClassDecl,
    Declaration,
    FunctionDecl,
    ImportRef,
    MethodInfo,
    ModuleRef,
    SourceModule,
    ValueDecl,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

_PARSER: Parser | None = None

_DOTTED_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")

# Compound statements whose bodies still bind module (or class) level names.
_TRANSPARENT_BLOCKS = frozenset(
    {
        "if_statement",
        "elif_clause",
        "else_clause",
        "try_statement",
        "except_clause",
        "finally_clause",
        "with_statement",
        "block",
    }
)

_PROPERTY_DECORATORS = frozenset(
    {"property", "cached_property", "abstractproperty", "setter", "getter", "deleter"}
)


def _get_parser() -> Parser:
    """Initialize and return the Tree-sitter parser with Python language."""
    global _PARSER
    if _PARSER is None:
        lang = Language(get_python_language())
        _PARSER = Parser(lang)

    return _PARSER


def node_text(node: Node | None) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf8", errors="ignore")


def dotted_name(node: Node | None) -> str | None:
    """Return ``a.b.c`` for identifier/attribute chains, else None.

    Annotation wrappers (``type``) are unwrapped and quoted forward
    references are accepted when they contain a plain dotted name.
    """
    if node is None:
        return None

    if node.type == "identifier":
        return node_text(node)

    if node.type == "attribute":
        base = dotted_name(node.child_by_field_name("object"))
        attribute = node.child_by_field_name("attribute")
        if base is None or attribute is None:
            return None
        return f"{base}.{node_text(attribute)}"

    if node.type == "type":
        named = node.named_children
        return dotted_name(named[0]) if named else None

    if node.type == "string":
        text = node_text(node).strip("\"'")
        return text if _DOTTED_NAME.match(text) else None

    return None


def last_segment(dotted: str) -> str:
    return dotted.rsplit(".", 1)[-1]


def iter_block_statements(node: Node) -> Iterator[Node]:
    """Yield statements of a body, descending into if/try/with blocks."""
    for child in node.named_children:
        if child.type in _TRANSPARENT_BLOCKS:
            yield from iter_block_statements(child)
            continue
        yield child


def unwrap_definition(node: Node) -> tuple[Node, list[str]]:
    """Return the definition node and its decorator names."""
    if node.type != "decorated_definition":
        return node, []

    decorators: list[str] = []
    for child in node.children:
        if child.type != "decorator":
            continue
        named = child.named_children
        if not named:
            continue
        expr = named[0]
        if expr.type == "call":
            expr = expr.child_by_field_name("function") or expr
        name = dotted_name(expr)
        if name is not None:
            decorators.append(name)

    definition = node.child_by_field_name("definition")
    return (definition if definition is not None else node), decorators


def function_parameters(node: Node) -> list[tuple[str, str | None]]:
    """Return ``(name, type_expr)`` pairs for a function's parameters."""
    params_node = node.child_by_field_name("parameters")
    if params_node is None:
        return []

    params: list[tuple[str, str | None]] = []
    for child in params_node.named_children:
        if child.type == "identifier":
            params.append((node_text(child), None))
        elif child.type == "typed_parameter":
            ident = next(
                (c for c in child.named_children if c.type == "identifier"), None
            )
            if ident is not None:
                params.append(
                    (node_text(ident), dotted_name(child.child_by_field_name("type")))
                )
        elif child.type in ("default_parameter", "typed_default_parameter"):
            name_node = child.child_by_field_name("name")
            if name_node is not None and name_node.type == "identifier":
                params.append(
                    (
                        node_text(name_node),
                        dotted_name(child.child_by_field_name("type")),
                    )
                )
    return params


def assignment_of(statement: Node) -> Node | None:
    """Return the ``assignment`` node of an expression statement, if any."""
    if statement.type == "assignment":
        return statement
    if statement.type != "expression_statement":
        return None
    named = statement.named_children
    if named and named[0].type == "assignment":
        return named[0]
    return None


def assigned_type_expr(assignment: Node) -> str | None:
    """Infer the class expression of an assignment's value.

    An annotation wins; otherwise a call's callee is taken as a possible
    constructor and resolved later.
    """
    annotated = dotted_name(assignment.child_by_field_name("type"))
    if annotated is not None:
        return annotated

    right = assignment.child_by_field_name("right")
    if right is not None and right.type == "call":
        return dotted_name(right.child_by_field_name("function"))
    return None


def _is_abstract(decorators: list[str]) -> bool:
    return any(
        last_segment(d) in {"abstractmethod", "abstractproperty"} for d in decorators
    )


def _is_property(decorators: list[str]) -> bool:
    return any(last_segment(d) in _PROPERTY_DECORATORS for d in decorators)


def _collect_self_attributes(
    function_node: Node,
    self_name: str,
    module_name: str,
    attributes: dict[str, Declaration],
) -> None:
    """Record ``self.x = ...`` assignments made inside a method body."""
    body = function_node.child_by_field_name("body")
    if body is None:
        return

    stack = list(body.named_children)
    while stack:
        node = stack.pop(0)
        if node.type in ("function_definition", "class_definition", "lambda"):
            continue
        assignment = assignment_of(node)
        if assignment is not None:
            left = assignment.child_by_field_name("left")
            if (
                left is not None
                and left.type == "attribute"
                and node_text(left.child_by_field_name("object")) == self_name
            ):
                attr = node_text(left.child_by_field_name("attribute"))
                if attr and attr not in attributes:
                    attributes[attr] = ValueDecl(
                        module_name, attr, assigned_type_expr(assignment)
                    )
        stack.extend(node.named_children)


def _summarize_class(node: Node, module_name: str, outer: str | None) -> ClassDecl:
    class_name = node_text(node.child_by_field_name("name"))
    qualified = f"{outer}.{class_name}" if outer else class_name

    bases: list[str] = []
    metaclass: str | None = None
    superclasses = node.child_by_field_name("superclasses")
    if superclasses is not None:
        for child in superclasses.named_children:
            if child.type == "keyword_argument":
                if node_text(child.child_by_field_name("name")) == "metaclass":
                    metaclass = dotted_name(child.child_by_field_name("value"))
                continue
            if child.type in ("subscript", "generic_type"):
                # Protocol[T], Generic[T]
                value = child.child_by_field_name("value")
                if value is None and child.named_children:
                    value = child.named_children[0]
                child = value
            base = dotted_name(child)
            if base is not None:
                bases.append(base)

    decl = ClassDecl(
        module=module_name,
        name=qualified,
        bases=tuple(bases),
        metaclass=metaclass,
    )

    body = node.child_by_field_name("body")
    if body is None:
        return decl

    for statement in iter_block_statements(body):
        definition, decorators = unwrap_definition(statement)
        if definition.type == "function_definition":
            method_name = node_text(definition.child_by_field_name("name"))
            is_static = any(last_segment(d) == "staticmethod" for d in decorators)
            decl.methods[method_name] = MethodInfo(
                name=method_name,
                abstract=_is_abstract(decorators),
                static=is_static,
                is_property=_is_property(decorators),
            )
            params = function_parameters(definition)
            if params and not is_static:
                _collect_self_attributes(
                    definition, params[0][0], module_name, decl.attributes
                )
        elif definition.type == "class_definition":
            nested = _summarize_class(definition, module_name, qualified)
            decl.attributes[last_segment(nested.name)] = nested
        else:
            assignment = assignment_of(statement)
            if assignment is None:
                continue
            left = assignment.child_by_field_name("left")
            if left is not None and left.type == "identifier":
                name = node_text(left)
                decl.attributes[name] = ValueDecl(
                    module_name, name, assigned_type_expr(assignment)
                )

    return decl


def _add_import_bindings(
    summary: SourceModule,
    source: str,
    star_imports: list[str],
) -> None:
    for binding in extract_imports(
        source,
        summary.name,
        is_package=summary.is_package,
        filename=summary.path or "<unknown>",
    ):
        if binding.name is None:
            summary.declarations[binding.local_name] = ModuleRef(binding.module)
        elif binding.name == STAR:
            star_imports.append(binding.module)
        else:
            summary.declarations[binding.local_name] = ImportRef(
                binding.module, binding.name
            )


def _add_top_level_declarations(summary: SourceModule, root_node: Node) -> None:
    module_name = summary.name
    for statement in iter_block_statements(root_node):
        definition, _ = unwrap_definition(statement)
        if definition.type == "function_definition":
            name = node_text(definition.child_by_field_name("name"))
            summary.declarations[name] = FunctionDecl(module_name, name)
        elif definition.type == "class_definition":
            decl = _summarize_class(definition, module_name, None)
            summary.declarations[decl.name] = decl
        else:
            assignment = assignment_of(statement)
            if assignment is None:
                continue
            left = assignment.child_by_field_name("left")
            if left is None:
                continue
            if left.type == "identifier":
                name = node_text(left)
                summary.declarations[name] = ValueDecl(
                    module_name, name, assigned_type_expr(assignment)
                )
            elif left.type in ("pattern_list", "tuple_pattern"):
                for target in left.named_children:
                    if target.type == "identifier":
                        name = node_text(target)
                        summary.declarations[name] = ValueDecl(module_name, name)


def parse_source(source_bytes: bytes) -> Node:
    return _get_parser().parse(source_bytes).root_node


def extract_module_summary(
    source_bytes: bytes,
    module_name: str,
    *,
    path: str | None = None,
    is_package: bool = False,
    root_node: Node | None = None,
) -> SourceModule:
    """Summarize the top-level declarations of a Python module.

    Args:
        source_bytes: Raw module source
        module_name: Dotted module name (e.g., "pkg.sub.mod")
        path: Source path, for diagnostics only
        is_package: True for a package ``__init__`` module
        root_node: Pre-parsed tree, to avoid parsing twice

    Returns:
        SourceModule with functions, classes, variables and import bindings.
        Later bindings of the same name win, with definitions applied after
        imports.
    """
    summary = SourceModule(name=module_name, path=path, is_package=is_package)

    star_imports: list[str] = []
    _add_import_bindings(
        summary, source_bytes.decode("utf8", errors="ignore"), star_imports
    )

    if root_node is None:
        root_node = parse_source(source_bytes)
    _add_top_level_declarations(summary, root_node)

    summary.star_imports = tuple(star_imports)
    return summary


__all__ = [
    "assigned_type_expr",
    "assignment_of",
    "dotted_name",
    "extract_module_summary",
    "function_parameters",
    "iter_block_statements",
    "last_segment",
    "node_text",
    "parse_source",
    "unwrap_definition",
]
