from __future__ import annotations

from seams.classifier import MESSAGE_PREFIX, callee_name, classify, is_untestable
from seams.models import (
    CallSite,
    DeclKind,
    NameCallee,
    ReceiverType,
    SelectorCallee,
    SourcePosition,
    Symbol,
    UnsupportedCallee,
)

_POSITION = SourcePosition(path="app/main.py", line=3, col=5)


def _call(callee, symbol: Symbol | None) -> CallSite:
    return CallSite(position=_POSITION, callee=callee, symbol=symbol)


def _function(module: str | None, name: str) -> Symbol:
    qualified = f"{module}.{name}" if module else name
    return Symbol(module, DeclKind.FUNCTION, name, qualified)


def _method(module: str, cls: str, name: str, *, interface: bool) -> Symbol:
    receiver = ReceiverType(f"{module}.{cls}", is_interface=interface)
    return Symbol(
        module=module,
        kind=DeclKind.METHOD,
        name=name,
        qualified_name=f"({module}.{cls}).{name}",
        receiver=receiver,
    )


def test_unsupported_callee_is_never_reported() -> None:
    call = _call(UnsupportedCallee("subscript"), _function("os", "getcwd"))

    assert callee_name(call) is None
    assert is_untestable(call, "app.main") is False


def test_unresolved_symbol_is_not_reported() -> None:
    call = _call(NameCallee("mystery"), None)

    assert is_untestable(call, "app.main") is False


def test_builtin_is_not_reported() -> None:
    call = _call(NameCallee("len"), _function(None, "len"))

    assert is_untestable(call, "app.main") is False


def test_same_module_function_is_not_reported() -> None:
    call = _call(NameCallee("private"), _function("app.main", "private"))

    assert is_untestable(call, "app.main") is False


def test_same_module_method_is_not_reported() -> None:
    symbol = _method("app.main", "Service", "run", interface=False)
    call = _call(SelectorCallee("self", "run"), symbol)

    assert is_untestable(call, "app.main") is False


def test_variables_and_classes_are_not_reported() -> None:
    symbol = Symbol("ext.fmt", DeclKind.OTHER, "printf", "ext.fmt.printf")
    call = _call(NameCallee("printf"), symbol)

    assert is_untestable(call, "app.main") is False


def test_external_function_is_reported() -> None:
    call = _call(SelectorCallee("os", "getcwd"), _function("os", "getcwd"))

    diagnostic = classify(call, "app.main")

    assert diagnostic is not None
    assert diagnostic.message == "untestable function/method call: os.getcwd"
    assert diagnostic.position == _POSITION


def test_method_on_interface_receiver_is_not_reported() -> None:
    symbol = _method("ext.contracts", "Writer", "write", interface=True)
    call = _call(SelectorCallee("out", "write"), symbol)

    assert classify(call, "app.main") is None


def test_method_on_concrete_receiver_is_reported() -> None:
    symbol = _method("ext.strings", "Builder", "write_string", interface=False)
    call = _call(SelectorCallee("b", "write_string"), symbol)

    diagnostic = classify(call, "app.main")

    assert diagnostic is not None
    assert diagnostic.message == (
        f"{MESSAGE_PREFIX}: (ext.strings.Builder).write_string"
    )


def test_method_without_receiver_type_is_reported() -> None:
    symbol = Symbol(
        "ext.strings", DeclKind.METHOD, "string", "(ext.strings.Builder).string"
    )
    call = _call(SelectorCallee("Builder", "string"), symbol)

    assert is_untestable(call, "app.main") is True


def test_classification_is_independent_of_callee_text() -> None:
    symbol = _function("ext.fmt", "printf")

    by_name = classify(_call(NameCallee("printf"), symbol), "app.main")
    by_selector = classify(_call(SelectorCallee("fmt", "printf"), symbol), "app.main")

    assert by_name == by_selector
