"""Lazily built index of module summaries for cross-module resolution.

Project and third-party modules are located with ``PathFinder`` and
summarized from source without executing them. Standard-library modules are
imported and inspected instead, because much of their public surface is
re-exported from compiled modules that have no Python source.
"""

from __future__ import annotations

import functools
import importlib
import inspect
import logging
import sys
from importlib.machinery import PathFinder
from pathlib import Path
from typing import TYPE_CHECKING

from parse.declarations import (
    ClassDecl,
    Declaration,
    FunctionDecl,
    ImportRef,
    Instance,
    MethodDecl,
    ModuleRef,
    ModuleSummary,
    RuntimeModule,
    SourceModule,
    ValueDecl,
)
from parse.treesitter_symbols import extract_module_summary, last_segment

if TYPE_CHECKING:
    from collections.abc import Sequence
    from importlib.machinery import ModuleSpec

logger = logging.getLogger(__name__)

MAX_RESOLUTION_DEPTH = 16

# Standard-library modules that print, open browsers or start GUIs on import.
NEVER_IMPORT = frozenset(
    {"antigravity", "this", "__hello__", "__phello__", "idlelib", "turtledemo"}
)


class ModuleIndex:
    """Resolve module names and their members for one analysis run."""

    def __init__(
        self,
        project_paths: Sequence[Path],
        search_paths: Sequence[Path] = (),
        *,
        use_sys_path: bool = True,
    ) -> None:
        self._project_paths = [str(path) for path in project_paths]
        self._search_paths = [str(path) for path in search_paths]
        if use_sys_path:
            self._search_paths.extend(entry or "." for entry in sys.path)
        self._modules: dict[str, ModuleSummary | None] = {}
        self._runtime_classes: dict[int, ClassDecl] = {}
        self._interfaces: dict[ClassDecl, bool] = {}

    def register(self, summary: ModuleSummary) -> None:
        """Install a summary built elsewhere (e.g. the file being analyzed)."""
        self._modules[summary.name] = summary

    def get(self, module_name: str) -> ModuleSummary | None:
        """Return the summary for a module, or None if it cannot be found."""
        if module_name not in self._modules:
            self._modules[module_name] = self._load(module_name)
        return self._modules[module_name]

    def _load(self, module_name: str) -> ModuleSummary | None:
        spec = _find_spec(module_name, self._project_paths)
        if spec is not None:
            return _load_source(module_name, spec)

        top_level = module_name.partition(".")[0]
        if top_level in sys.stdlib_module_names:
            return _load_runtime(module_name)

        spec = _find_spec(module_name, self._search_paths)
        if spec is not None:
            return _load_source(module_name, spec)

        logger.debug("module %s not found", module_name)
        return None

    def lookup(self, module_name: str, name: str, depth: int = 0) -> Declaration | None:
        """Resolve ``module_name.name`` to its declaration.

        Re-exports and star imports are followed; a missing attribute falls
        back to a submodule of the same name.
        """
        if depth > MAX_RESOLUTION_DEPTH:
            logger.debug("resolution depth exceeded at %s.%s", module_name, name)
            return None

        summary = self.get(module_name)
        if summary is None:
            return None

        decl = self._declared(summary, name, depth)
        if isinstance(decl, ImportRef):
            if (decl.module, decl.name) == (module_name, name):
                decl = None
            else:
                decl = self.lookup(decl.module, decl.name, depth + 1)

        if decl is None:
            submodule = f"{module_name}.{name}"
            if self.get(submodule) is not None:
                return ModuleRef(submodule)
        return decl

    def _declared(
        self,
        summary: ModuleSummary,
        name: str,
        depth: int,
    ) -> Declaration | None:
        if isinstance(summary, RuntimeModule):
            return self._runtime_attribute(summary, name)

        decl = summary.lookup(name)
        if decl is not None or name.startswith("_"):
            return decl

        for star_module in summary.star_imports:
            decl = self.lookup(star_module, name, depth + 1)
            if decl is not None:
                return decl
        return None

    def _runtime_attribute(
        self,
        summary: RuntimeModule,
        name: str,
    ) -> Declaration | None:
        value = getattr(summary.module, name, None)
        if value is None:
            return None

        if inspect.ismodule(value):
            accessed = f"{summary.name}.{name}"
            return ModuleRef(accessed if accessed in sys.modules else value.__name__)
        if inspect.isclass(value):
            return self._runtime_class(summary.name, name, value)
        if inspect.isroutine(value):
            return FunctionDecl(summary.name, name)
        return ValueDecl(summary.name, name)

    def _runtime_class(self, module_name: str, name: str, cls: type) -> ClassDecl:
        # Keyed by class identity; the decl keeps the class alive.
        decl = self._runtime_classes.get(id(cls))
        if decl is None:
            decl = ClassDecl(module=module_name, name=name, runtime=cls)
            self._runtime_classes[id(cls)] = decl
        return decl

    def resolve_dotted(
        self,
        module_name: str,
        dotted: str,
        depth: int = 0,
    ) -> Declaration | None:
        """Resolve a dotted expression written at the top level of a module."""
        head, *rest = dotted.split(".")
        decl = self.lookup(module_name, head, depth)
        for part in rest:
            member = self.member(decl, part, depth)
            if member is None:
                return None
            decl = member
        return decl

    def member(
        self,
        entity: Declaration | Instance | None,
        name: str,
        depth: int = 0,
    ) -> Declaration | None:
        """Resolve attribute ``name`` on a module, class or instance."""
        if isinstance(entity, ImportRef):
            entity = self.lookup(entity.module, entity.name, depth + 1)
        if isinstance(entity, ModuleRef):
            return self.lookup(entity.name, name, depth + 1)
        if isinstance(entity, ClassDecl):
            return self.find_member(entity, name, depth + 1)
        if isinstance(entity, Instance):
            return self.find_member(entity.cls, name, depth + 1)
        if isinstance(entity, ValueDecl):
            cls = self.instance_type(entity, depth + 1)
            return self.find_member(cls, name, depth + 1) if cls else None
        return None

    def instance_type(self, decl: ValueDecl, depth: int = 0) -> ClassDecl | None:
        """Return the class of a variable's value, when it is known."""
        if decl.value_type is not None:
            return decl.value_type
        if decl.type_expr is None or depth > MAX_RESOLUTION_DEPTH:
            return None
        resolved = self.resolve_dotted(decl.module, decl.type_expr, depth + 1)
        return resolved if isinstance(resolved, ClassDecl) else None

    def find_member(
        self,
        cls: ClassDecl,
        name: str,
        depth: int = 0,
    ) -> Declaration | None:
        """Find ``name`` on a class or, in declaration order, its bases."""
        if depth > MAX_RESOLUTION_DEPTH:
            return None

        if cls.runtime is not None:
            return self._runtime_member(cls, name)

        info = cls.methods.get(name)
        if info is not None:
            if info.is_property:
                return ValueDecl(cls.module, name)
            return MethodDecl(cls, name)

        attribute = cls.attributes.get(name)
        if attribute is not None:
            return attribute

        for base in self.class_bases(cls, depth):
            found = self.find_member(base, name, depth + 1)
            if found is not None:
                return found
        return None

    def _runtime_member(self, cls: ClassDecl, name: str) -> Declaration | None:
        assert cls.runtime is not None
        try:
            value = inspect.getattr_static(cls.runtime, name)
        except AttributeError:
            return None

        if isinstance(value, functools.cached_property):
            return ValueDecl(cls.module, name)
        if isinstance(value, (staticmethod, classmethod)) or inspect.isroutine(value):
            return MethodDecl(cls, name)
        if inspect.isclass(value):
            return self._runtime_class(cls.module, f"{cls.name}.{name}", value)
        return ValueDecl(cls.module, name)

    def class_bases(self, cls: ClassDecl, depth: int = 0) -> list[ClassDecl]:
        """Resolve the base classes of a source class that can be found."""
        bases: list[ClassDecl] = []
        for base in cls.bases:
            resolved = self.resolve_dotted(cls.module, base, depth + 1)
            if isinstance(resolved, ClassDecl) and resolved is not cls:
                bases.append(resolved)
        return bases

    def is_interface(self, cls: ClassDecl) -> bool:
        """Return True for protocols and classes with unimplemented abstract methods."""
        cached = self._interfaces.get(cls)
        if cached is None:
            cached = self._compute_interface(cls)
            self._interfaces[cls] = cached
        return cached

    def _compute_interface(self, cls: ClassDecl) -> bool:
        if cls.runtime is not None:
            return inspect.isabstract(cls.runtime) or bool(
                getattr(cls.runtime, "_is_protocol", False)
            )
        if any(last_segment(base) == "Protocol" for base in cls.bases):
            return True
        return bool(self.abstract_methods(cls))

    def abstract_methods(self, cls: ClassDecl, depth: int = 0) -> frozenset[str]:
        """Names of abstract methods a class declares or inherits unimplemented."""
        if cls.runtime is not None:
            return frozenset(getattr(cls.runtime, "__abstractmethods__", ()))

        declared = {name for name, info in cls.methods.items() if info.abstract}
        concrete = {name for name, info in cls.methods.items() if not info.abstract}
        concrete.update(cls.attributes)

        inherited: set[str] = set()
        if depth < MAX_RESOLUTION_DEPTH:
            for base in self.class_bases(cls, depth):
                inherited.update(self.abstract_methods(base, depth + 1))

        return frozenset(declared | (inherited - concrete))


def _find_spec(module_name: str, paths: list[str]) -> ModuleSpec | None:
    """Locate a module on ``paths`` one package level at a time."""
    parts = module_name.split(".")
    search: list[str] | None = paths
    spec: ModuleSpec | None = None

    for i in range(len(parts)):
        if search is None:
            return None
        fullname = ".".join(parts[: i + 1])
        try:
            spec = PathFinder.find_spec(fullname, search)
        except (ImportError, OSError, ValueError) as exc:
            logger.debug("cannot locate %s: %s", fullname, exc)
            return None
        if spec is None:
            return None
        locations = spec.submodule_search_locations
        search = list(locations) if locations is not None else None

    return spec


def _load_source(module_name: str, spec: ModuleSpec) -> SourceModule | None:
    is_package = spec.submodule_search_locations is not None
    origin = spec.origin

    if origin is None or origin == "namespace":
        return SourceModule(name=module_name, is_package=True)

    if not origin.endswith(".py"):
        logger.debug("no Python source for %s (%s)", module_name, origin)
        return None

    try:
        source_bytes = Path(origin).read_bytes()
    except OSError as exc:
        logger.warning("cannot read %s: %s", origin, exc)
        return None

    return extract_module_summary(
        source_bytes,
        module_name,
        path=origin,
        is_package=is_package,
    )


def _load_runtime(module_name: str) -> RuntimeModule | None:
    if module_name.partition(".")[0] in NEVER_IMPORT:
        return None
    try:
        module = importlib.import_module(module_name)
    except Exception as exc:  # noqa: BLE001 - any import failure leaves it unresolved
        logger.debug("cannot import %s: %s", module_name, exc)
        return None
    return RuntimeModule(name=module_name, module=module)


__all__ = ["MAX_RESOLUTION_DEPTH", "NEVER_IMPORT", "ModuleIndex"]
