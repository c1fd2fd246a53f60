"""Call-site and diagnostic models for seams analysis.

In-memory analysis types are frozen dataclasses; the diagnostic is a pydantic
model because it is serialized for reporting.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict


class DeclKind(str, Enum):
    """Declaration kind of a resolved callee."""

    FUNCTION = "function"
    METHOD = "method"
    OTHER = "other"


@dataclass(frozen=True)
class ReceiverType:
    """Static receiver type of a method call."""

    qualified_name: str
    is_interface: bool


@dataclass(frozen=True)
class Symbol:
    """Resolved declaration a callee identifier refers to.

    ``module`` is ``None`` for builtins. ``qualified_name`` is the display
    name used in diagnostics.
    """

    module: str | None
    kind: DeclKind
    name: str
    qualified_name: str
    receiver: ReceiverType | None = None


@dataclass(frozen=True)
class NameCallee:
    """Callee written as a bare name: ``f(...)``."""

    name: str


@dataclass(frozen=True)
class SelectorCallee:
    """Callee written as a qualified selector: ``receiver.name(...)``."""

    receiver: str
    name: str


@dataclass(frozen=True)
class UnsupportedCallee:
    """Any other callee shape (subscript, call result, lambda, ...)."""

    node_type: str


Callee = NameCallee | SelectorCallee | UnsupportedCallee


class SourcePosition(BaseModel):
    """1-based source position of a call expression."""

    model_config = ConfigDict(frozen=True)

    path: str
    line: int
    col: int


@dataclass(frozen=True)
class CallSite:
    """One call expression with its resolved callee."""

    position: SourcePosition
    callee: Callee
    symbol: Symbol | None = None


@dataclass(frozen=True)
class CompilationUnit:
    """A single parsed source file."""

    path: str
    module: str
    comments: tuple[str, ...] = ()
    calls: tuple[CallSite, ...] = field(default_factory=tuple)


class Diagnostic(BaseModel):
    """A reported untestable call."""

    position: SourcePosition
    message: str

    def location(self) -> str:
        return f"{self.position.path}:{self.position.line}:{self.position.col}"


__all__ = [
    "CallSite",
    "Callee",
    "CompilationUnit",
    "DeclKind",
    "Diagnostic",
    "NameCallee",
    "ReceiverType",
    "SelectorCallee",
    "SourcePosition",
    "Symbol",
    "UnsupportedCallee",
]
