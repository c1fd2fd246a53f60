"""Declaration records used for cross-module name resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import ModuleType


@dataclass(frozen=True)
class ModuleRef:
    """A name bound to a module."""

    name: str


@dataclass(frozen=True)
class ImportRef:
    """A ``from module import name`` binding, not yet followed."""

    module: str
    name: str


@dataclass(frozen=True)
class FunctionDecl:
    """A module-level function."""

    module: str
    name: str

    @property
    def qualified_name(self) -> str:
        return f"{self.module}.{self.name}"


@dataclass(frozen=True)
class ValueDecl:
    """A variable, property or other non-callable declaration.

    ``type_expr`` is the dotted source text of the value's class when it is
    known from an annotation or a constructor call, resolved lazily in the
    context of ``module``. ``value_type`` holds an already resolved class.
    """

    module: str
    name: str
    type_expr: str | None = None
    value_type: ClassDecl | None = None


@dataclass(frozen=True)
class MethodInfo:
    """A callable declared in a class body."""

    name: str
    abstract: bool = False
    static: bool = False
    is_property: bool = False


@dataclass(eq=False)
class ClassDecl:
    """A class, summarized from source or wrapping a runtime class object."""

    module: str
    name: str
    bases: tuple[str, ...] = ()
    metaclass: str | None = None
    methods: dict[str, MethodInfo] = field(default_factory=dict)
    attributes: dict[str, Declaration] = field(default_factory=dict)
    runtime: type | None = None

    @property
    def qualified_name(self) -> str:
        return f"{self.module}.{self.name}"

    def __repr__(self) -> str:
        return f"ClassDecl({self.qualified_name!r})"


@dataclass(frozen=True, eq=False)
class MethodDecl:
    """A method found on ``owner`` by member lookup."""

    owner: ClassDecl
    name: str

    @property
    def qualified_name(self) -> str:
        return f"({self.owner.qualified_name}).{self.name}"


@dataclass(frozen=True)
class Instance:
    """An expression known to evaluate to an instance of ``cls``."""

    cls: ClassDecl


Declaration = (
    ModuleRef | ImportRef | FunctionDecl | ValueDecl | ClassDecl | MethodDecl
)


@dataclass(eq=False)
class SourceModule:
    """Top-level declarations of a module summarized from its source."""

    name: str
    path: str | None = None
    is_package: bool = False
    declarations: dict[str, Declaration] = field(default_factory=dict)
    star_imports: tuple[str, ...] = ()

    def lookup(self, name: str) -> Declaration | None:
        return self.declarations.get(name)


@dataclass(eq=False)
class RuntimeModule:
    """An imported standard-library module, inspected at runtime."""

    name: str
    module: ModuleType

    star_imports: tuple[str, ...] = ()


ModuleSummary = SourceModule | RuntimeModule


__all__ = [
    "ClassDecl",
    "Declaration",
    "FunctionDecl",
    "ImportRef",
    "Instance",
    "MethodDecl",
    "MethodInfo",
    "ModuleRef",
    "ModuleSummary",
    "RuntimeModule",
    "SourceModule",
    "ValueDecl",
]
