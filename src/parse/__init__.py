"""Parsing and name resolution for seams analysis."""

from parse.ast_imports import extract_imports, resolve_relative_import
from parse.module_index import ModuleIndex
from parse.name_resolution import NameResolver
from parse.treesitter_calls import callee_shape, extract_unit, extract_unit_from_source
from parse.treesitter_symbols import extract_module_summary

__all__ = [
    "ModuleIndex",
    "NameResolver",
    "callee_shape",
    "extract_imports",
    "extract_module_summary",
    "extract_unit",
    "extract_unit_from_source",
    "resolve_relative_import",
]
