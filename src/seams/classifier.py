"""Classification of call sites into testable and untestable calls."""

from __future__ import annotations

from seams.models import (
    CallSite,
    DeclKind,
    Diagnostic,
    NameCallee,
    SelectorCallee,
)

MESSAGE_PREFIX = "untestable function/method call"


def callee_name(call: CallSite) -> str | None:
    """Return the callee identifier, or None for unsupported callee shapes."""
    if isinstance(call.callee, (NameCallee, SelectorCallee)):
        return call.callee.name
    return None


def is_untestable(call: CallSite, current_module: str) -> bool:
    """Decide whether a call cannot be replaced by a test double.

    Only direct references to concrete callables owned by another module are
    untestable. Builtins, same-module declarations, variables, classes and
    methods reached through an interface-typed receiver are all skipped.
    """
    if callee_name(call) is None:
        return False

    symbol = call.symbol
    if symbol is None:
        return False

    # Builtins and same-module declarations.
    if symbol.module is None or symbol.module == current_module:
        return False

    # Variables, classes (construction) and modules.
    if symbol.kind not in (DeclKind.FUNCTION, DeclKind.METHOD):
        return False

    if symbol.kind == DeclKind.FUNCTION:
        return True

    return symbol.receiver is None or not symbol.receiver.is_interface


def classify(call: CallSite, current_module: str) -> Diagnostic | None:
    """Return a diagnostic for an untestable call, otherwise None."""
    if not is_untestable(call, current_module):
        return None

    assert call.symbol is not None
    return Diagnostic(
        position=call.position,
        message=f"{MESSAGE_PREFIX}: {call.symbol.qualified_name}",
    )


__all__ = ["MESSAGE_PREFIX", "callee_name", "classify", "is_untestable"]
