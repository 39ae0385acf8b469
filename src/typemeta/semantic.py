# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Semantic model contracts and resolved symbol types."""

import enum
import logging
from dataclasses import dataclass, field
from typing import Protocol

from typemeta.syntax import Node

logger = logging.getLogger(__name__)


class TypeDescKind(enum.Enum):
    """Enumerate resolved type kinds; values are their textual rendering."""

    ANY = "any"
    ANYDATA = "anydata"
    BOOLEAN = "boolean"
    BYTE = "byte"
    DECIMAL = "decimal"
    ERROR = "error"
    FLOAT = "float"
    INT = "int"
    JSON = "json"
    MAP = "map"
    NIL = "()"
    ARRAY = "array"
    OBJECT = "object"
    RECORD = "record"
    STREAM = "stream"
    STRING = "string"
    TABLE = "table"
    TUPLE = "tuple"
    TYPE_REFERENCE = "typeReference"
    UNION = "union"
    XML = "xml"


class Qualifier(enum.Enum):
    """Enumerate method qualifiers."""

    PUBLIC = "public"
    PRIVATE = "private"
    ISOLATED = "isolated"
    REMOTE = "remote"
    RESOURCE = "resource"
    TRANSACTIONAL = "transactional"


@dataclass(frozen=True)
class ModuleID:
    """Identify a module as ``org/name:version``; missing parts are omitted."""

    module_name: str
    org_name: str | None = None
    version: str | None = None

    def __str__(self) -> str:
        text = self.module_name
        if self.org_name:
            text = f"{self.org_name}/{text}"
        if self.version:
            text = f"{text}:{self.version}"
        return text


@dataclass(frozen=True)
class ModuleSymbol:
    """Represent the module that owns a symbol."""

    id: ModuleID


@dataclass(frozen=True)
class TypeSymbol:
    """Represent a resolved type.

    Attributes:
        type_kind: Kind of the resolved type.
        signature: Canonical textual rendering; ``None`` when it cannot be rendered.
    """

    type_kind: TypeDescKind
    signature: str | None = None


@dataclass(frozen=True)
class UnionTypeSymbol(TypeSymbol):
    """Represent a union type with members in declaration order."""

    type_kind: TypeDescKind = TypeDescKind.UNION
    member_type_descriptors: tuple[TypeSymbol, ...] = ()


@dataclass(frozen=True)
class RecordFieldSymbol:
    """Represent one record field."""

    name: str
    type_descriptor: TypeSymbol


@dataclass(frozen=True)
class RecordTypeSymbol(TypeSymbol):
    """Represent a record type and its field descriptors keyed by field name."""

    type_kind: TypeDescKind = TypeDescKind.RECORD
    field_descriptors: dict[str, RecordFieldSymbol] = field(default_factory=dict)


@dataclass(frozen=True)
class Symbol:
    """Base resolved symbol.

    Attributes:
        name: Simple name; ``None`` when the symbol is anonymous.
        module: Owning module; ``None`` when it cannot be determined.
    """

    name: str | None
    module: ModuleSymbol | None = None


@dataclass(frozen=True)
class TypeDefinitionSymbol(Symbol):
    """Represent a type definition and the type it declares."""

    type_descriptor: TypeSymbol | None = None


@dataclass(frozen=True)
class ParameterSymbol(Symbol):
    """Represent one method parameter."""

    type_descriptor: TypeSymbol = TypeSymbol(TypeDescKind.ANY)


@dataclass(frozen=True)
class MethodSymbol(Symbol):
    """Represent a class method.

    Attributes:
        qualifiers: Method qualifiers such as ``remote``.
        parameters: Declared parameters in order.
        return_type_descriptor: Declared return type; ``None`` when not declared.
    """

    qualifiers: frozenset[Qualifier] = frozenset()
    parameters: tuple[ParameterSymbol, ...] = ()
    return_type_descriptor: TypeSymbol | None = None


@dataclass(frozen=True)
class ClassSymbol(Symbol):
    """Represent a class and its methods keyed by method name."""

    methods: dict[str, MethodSymbol] = field(default_factory=dict)


class SemanticModel(Protocol):
    """Resolve syntax tree nodes to semantic symbols."""

    def symbol(self, node: Node) -> Symbol | None:
        """Return the symbol declared by ``node``, or ``None`` when unresolved."""


class MappingSemanticModel:
    """Semantic model backed by an explicit node-to-symbol binding table."""

    def __init__(self) -> None:
        self._symbols: dict[Node, Symbol] = {}

    def register(self, node: Node, symbol: Symbol) -> None:
        """Bind a node to its resolved symbol.

        Args:
            node: Declaration node.
            symbol: Symbol the node declares.
        """
        self._symbols[node] = symbol

    def symbol(self, node: Node) -> Symbol | None:
        return self._symbols.get(node)
