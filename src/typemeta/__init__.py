# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Public import surface for type metadata extraction."""

from typemeta.catalog import TypeCatalog, extract_module, extract_modules, merge_catalogs
from typemeta.dump import ModuleDumpError, load_module_dump
from typemeta.extractor import DataMapperVisitor, VisitorNotBoundError
from typemeta.model import ExtractionOutcome, FunctionRecord

__all__ = [
    "DataMapperVisitor",
    "ExtractionOutcome",
    "FunctionRecord",
    "ModuleDumpError",
    "TypeCatalog",
    "VisitorNotBoundError",
    "extract_module",
    "extract_modules",
    "load_module_dump",
    "merge_catalogs",
]
