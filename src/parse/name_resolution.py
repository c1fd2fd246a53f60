"""Scope-aware resolution of call targets to symbols."""

from __future__ import annotations

import builtins
import inspect
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from parse.declarations import (
    ClassDecl,
    Declaration,
    FunctionDecl,
    ImportRef,
    Instance,
    MethodDecl,
    ModuleRef,
    ValueDecl,
)
from parse.treesitter_symbols import node_text
from seams.models import DeclKind, ReceiverType, Symbol

if TYPE_CHECKING:
    from tree_sitter import Node

    from parse.declarations import SourceModule
    from parse.module_index import ModuleIndex

ScopeKind = Literal["module", "class", "function"]

_BUILTINS = vars(builtins)


@dataclass
class Scope:
    """Names bound in one lexical scope."""

    kind: ScopeKind
    bindings: dict[str, Declaration] = field(default_factory=dict)
    cls: ClassDecl | None = None


class NameResolver:
    """Resolve names and call targets while a module is being traversed.

    Module-level names are hoisted from the module summary, so a function
    may refer to helpers defined further down. Inner scopes are filled in
    source order as assignments and parameters are encountered.
    """

    def __init__(self, index: ModuleIndex, module: SourceModule) -> None:
        self.index = index
        self.module = module
        self.scopes: list[Scope] = [Scope("module", dict(module.declarations))]

    @property
    def module_name(self) -> str:
        return self.module.name

    @property
    def current(self) -> Scope:
        return self.scopes[-1]

    def push(self, kind: ScopeKind, cls: ClassDecl | None = None) -> None:
        self.scopes.append(Scope(kind, cls=cls))

    def pop(self) -> None:
        if len(self.scopes) > 1:
            self.scopes.pop()

    def bind(self, name: str, decl: Declaration) -> None:
        self.current.bindings[name] = decl

    def bind_value(self, name: str, cls: ClassDecl | None = None) -> None:
        self.bind(name, ValueDecl(self.module_name, name, value_type=cls))

    def enclosing_class(self) -> ClassDecl | None:
        """Return the class whose body is the innermost scope, if any."""
        return self.current.cls if self.current.kind == "class" else None

    def lookup_name(self, name: str) -> Declaration | None:
        """Resolve a bare name; class bodies are only visible from inside."""
        innermost = len(self.scopes) - 1
        for position in range(innermost, -1, -1):
            scope = self.scopes[position]
            if scope.kind == "class" and position != innermost:
                continue
            decl = scope.bindings.get(name)
            if decl is not None:
                return self._follow(decl)

        if not name.startswith("_"):
            for star_module in self.module.star_imports:
                decl = self.index.lookup(star_module, name)
                if decl is not None:
                    return decl
        return None

    def _follow(self, decl: Declaration) -> Declaration | None:
        if isinstance(decl, ImportRef):
            return self.index.lookup(decl.module, decl.name)
        return decl

    def resolve_dotted(self, dotted: str) -> Declaration | None:
        head, *rest = dotted.split(".")
        decl = self.lookup_name(head)
        for part in rest:
            if decl is None:
                return None
            decl = self.index.member(decl, part)
        return decl

    def resolve_class(self, dotted: str | None) -> ClassDecl | None:
        """Resolve a type expression to a class, if it names one."""
        if dotted is None:
            return None
        decl = self.resolve_dotted(dotted)
        return decl if isinstance(decl, ClassDecl) else None

    def resolve_expression(self, node: Node | None) -> Declaration | Instance | None:
        """Resolve what an expression evaluates to, as far as it is known."""
        if node is None:
            return None

        if node.type == "identifier":
            return self.lookup_name(node_text(node))

        if node.type == "attribute":
            base = self._entity(
                self.resolve_expression(node.child_by_field_name("object"))
            )
            if base is None:
                return None
            attribute = node_text(node.child_by_field_name("attribute"))
            return self.index.member(base, attribute)

        if node.type == "call":
            callee = self.resolve_expression(node.child_by_field_name("function"))
            return Instance(callee) if isinstance(callee, ClassDecl) else None

        if node.type == "parenthesized_expression":
            named = node.named_children
            return self.resolve_expression(named[0]) if len(named) == 1 else None

        return None

    def constructed_class(self, node: Node | None) -> ClassDecl | None:
        """Return the class a value expression constructs, if any."""
        resolved = self._entity(self.resolve_expression(node))
        return resolved.cls if isinstance(resolved, Instance) else None

    def _entity(
        self,
        resolved: Declaration | Instance | None,
    ) -> Declaration | Instance | None:
        if isinstance(resolved, ValueDecl):
            cls = self.index.instance_type(resolved)
            return Instance(cls) if cls is not None else None
        return resolved

    def resolve_call(self, function_node: Node) -> Symbol | None:
        """Resolve the callee of a call expression to a symbol."""
        if function_node.type == "identifier":
            name = node_text(function_node)
            decl = self.lookup_name(name)
            if decl is None:
                return _builtin_symbol(name)
            return self._symbol_for(decl, name)

        if function_node.type != "attribute":
            return None

        name = node_text(function_node.child_by_field_name("attribute"))
        receiver = self._entity(
            self.resolve_expression(function_node.child_by_field_name("object"))
        )

        if isinstance(receiver, (ClassDecl, Instance)):
            cls = receiver if isinstance(receiver, ClassDecl) else receiver.cls
            member = self.index.find_member(cls, name)
            if isinstance(member, MethodDecl):
                return Symbol(
                    module=member.owner.module,
                    kind=DeclKind.METHOD,
                    name=name,
                    qualified_name=member.qualified_name,
                    receiver=ReceiverType(
                        qualified_name=cls.qualified_name,
                        is_interface=self.index.is_interface(cls),
                    ),
                )
            return self._symbol_for(member, name)

        if isinstance(receiver, ModuleRef):
            return self._symbol_for(self.index.lookup(receiver.name, name), name)

        return None

    def _symbol_for(self, decl: Declaration | None, name: str) -> Symbol | None:
        if decl is None:
            return None
        if isinstance(decl, FunctionDecl):
            return Symbol(
                decl.module, DeclKind.FUNCTION, decl.name, decl.qualified_name
            )
        if isinstance(decl, MethodDecl):
            return Symbol(
                module=decl.owner.module,
                kind=DeclKind.METHOD,
                name=decl.name,
                qualified_name=decl.qualified_name,
                receiver=ReceiverType(
                    decl.owner.qualified_name, self.index.is_interface(decl.owner)
                ),
            )
        if isinstance(decl, ClassDecl):
            return Symbol(decl.module, DeclKind.OTHER, name, decl.qualified_name)
        if isinstance(decl, ValueDecl):
            return Symbol(
                decl.module, DeclKind.OTHER, decl.name, f"{decl.module}.{decl.name}"
            )
        if isinstance(decl, ModuleRef):
            return Symbol(decl.name, DeclKind.OTHER, name, decl.name)
        return None


def _builtin_symbol(name: str) -> Symbol | None:
    if name not in _BUILTINS:
        return None
    kind = DeclKind.FUNCTION if inspect.isroutine(_BUILTINS[name]) else DeclKind.OTHER
    return Symbol(module=None, kind=kind, name=name, qualified_name=name)


__all__ = ["NameResolver", "Scope", "ScopeKind"]
