# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Compiled module contract consumed by the extractor."""

from dataclasses import dataclass
from typing import Protocol

from typemeta.semantic import ModuleID, SemanticModel
from typemeta.syntax import ModulePart


class CompiledModule(Protocol):
    """Expose one compiled module's syntax tree and semantic model."""

    @property
    def module_id(self) -> ModuleID: ...

    @property
    def syntax_tree(self) -> ModulePart: ...

    @property
    def semantic_model(self) -> SemanticModel: ...


@dataclass(frozen=True)
class LoadedModule:
    """Represent a compiled module held in memory.

    Attributes:
        module_id: Identifier of the module.
        syntax_tree: Root of the module's declarations.
        semantic_model: Model resolving the module's nodes.
        source: Where the module was loaded from, for reporting.
    """

    module_id: ModuleID
    syntax_tree: ModulePart
    semantic_model: SemanticModel
    source: str = ""
