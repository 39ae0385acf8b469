# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Syntax tree nodes for module-level declarations and the tree walker."""

import abc
import enum
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class SyntaxKind(enum.Enum):
    """Enumerate the declaration node kinds the walker can dispatch on."""

    MODULE_PART = "module_part"
    TYPE_DEFINITION = "type_definition"
    CLASS_DEFINITION = "class_definition"
    FUNCTION_DEFINITION = "function_definition"
    MODULE_VARIABLE = "module_variable"


class TypeDescriptorKind(enum.Enum):
    """Enumerate the syntactic shapes a type definition can declare."""

    RECORD_TYPE_DESC = "record"
    OBJECT_TYPE_DESC = "object"
    UNION_TYPE_DESC = "union"
    SIMPLE_NAME_REFERENCE = "reference"
    BUILTIN_TYPE_DESC = "builtin"


@dataclass(frozen=True)
class Token:
    """Represent one source token, such as a class qualifier keyword."""

    text: str


# Nodes compare and hash by identity so a semantic model can bind each one.
@dataclass(frozen=True, eq=False)
class Node(abc.ABC):
    """Base class for syntax tree nodes."""

    @property
    @abc.abstractmethod
    def kind(self) -> SyntaxKind:
        """Return the kind used to dispatch this node."""


@dataclass(frozen=True, eq=False)
class TypeDefinitionNode(Node):
    """Represent ``type <name> <descriptor>;``.

    Attributes:
        name: Declared type name as written in source.
        type_descriptor_kind: Shape of the declared type descriptor.
    """

    name: str
    type_descriptor_kind: TypeDescriptorKind

    @property
    def kind(self) -> SyntaxKind:
        return SyntaxKind.TYPE_DEFINITION


@dataclass(frozen=True, eq=False)
class ClassDefinitionNode(Node):
    """Represent a class definition and its class-type qualifier tokens.

    Attributes:
        name: Declared class name as written in source.
        class_type_qualifiers: Qualifier tokens (``client``, ``isolated``, ...).
    """

    name: str
    class_type_qualifiers: tuple[Token, ...] = ()

    @property
    def kind(self) -> SyntaxKind:
        return SyntaxKind.CLASS_DEFINITION


@dataclass(frozen=True, eq=False)
class FunctionDefinitionNode(Node):
    """Represent a module-level function definition."""

    name: str

    @property
    def kind(self) -> SyntaxKind:
        return SyntaxKind.FUNCTION_DEFINITION


@dataclass(frozen=True, eq=False)
class ModuleVariableNode(Node):
    """Represent a module-level variable declaration."""

    name: str

    @property
    def kind(self) -> SyntaxKind:
        return SyntaxKind.MODULE_VARIABLE


@dataclass(frozen=True, eq=False)
class ModulePart(Node):
    """Represent the root of one source module: its top-level members in order."""

    members: tuple[Node, ...] = ()

    @property
    def kind(self) -> SyntaxKind:
        return SyntaxKind.MODULE_PART


class NodeVisitor:
    """Walk module declarations and dispatch each node to ``visit_<kind>``.

    Kinds without a handler are ignored. Only ``visit_module_part`` descends,
    so each top-level member is visited exactly once and nested declarations
    are never treated as top-level.
    """

    def visit(self, node: Node) -> None:
        """Dispatch one node to its kind-specific handler.

        Args:
            node: Syntax tree node to visit.
        """
        handler = getattr(self, f"visit_{node.kind.value}", None)
        if handler is None:
            logger.debug("No handler for node kind (kind=%s)", node.kind.value)
            return
        handler(node)

    def visit_module_part(self, node: ModulePart) -> None:
        """Visit top-level members in source order.

        Args:
            node: Module root node.
        """
        for member in node.members:
            self.visit(member)
