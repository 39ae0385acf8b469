# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Extract record shapes and client remote-method signatures from a module."""

import json
import logging
from collections.abc import Mapping
from types import MappingProxyType

from typemeta.model import ExtractionOutcome, FunctionRecord, UnitKind
from typemeta.module import CompiledModule
from typemeta.semantic import (
    ClassSymbol,
    MethodSymbol,
    Qualifier,
    RecordFieldSymbol,
    RecordTypeSymbol,
    SemanticModel,
    TypeDefinitionSymbol,
    TypeDescKind,
    TypeSymbol,
    UnionTypeSymbol,
)
from typemeta.syntax import (
    ClassDefinitionNode,
    NodeVisitor,
    TypeDefinitionNode,
    TypeDescriptorKind,
)

logger = logging.getLogger(__name__)

CLIENT_QUALIFIER = "client"


class VisitorNotBoundError(RuntimeError):
    """Represent a traversal started before a semantic model was bound."""


class RecordSerializationError(RuntimeError):
    """Represent a record whose field map cannot be rendered as JSON."""


class DataMapperVisitor(NodeVisitor):
    """Collect record type shapes and client method signatures.

    One instance owns its catalogs for one traversal. Use a separate instance
    per module when extracting modules concurrently.
    """

    def __init__(self, model: SemanticModel | None = None) -> None:
        """Initialize empty catalogs.

        Args:
            model: Semantic model resolving the visited module's nodes.
        """
        self._model = model
        self._record_types: dict[str, str] = {}
        self._client_map: dict[str, dict[str, FunctionRecord]] = {}
        self._outcomes: list[ExtractionOutcome] = []

    def bind(self, module: CompiledModule) -> None:
        """Bind the visitor to a compiled module's semantic model.

        Args:
            module: Compiled module whose tree will be visited.
        """
        self._model = module.semantic_model

    def get_record_types(self) -> Mapping[str, str]:
        """Return qualified record name to serialized field map."""
        return MappingProxyType(self._record_types)

    def get_client_map(self) -> Mapping[str, Mapping[str, FunctionRecord]]:
        """Return client name to remote method name to signature record."""
        return MappingProxyType(
            {
                name: MappingProxyType(methods)
                for name, methods in self._client_map.items()
            }
        )

    @property
    def outcomes(self) -> tuple[ExtractionOutcome, ...]:
        """Return per-unit outcomes in the order they were decided."""
        return tuple(self._outcomes)

    def visit_type_definition(self, node: TypeDefinitionNode) -> None:
        """Record the field shape of a record type definition.

        Args:
            node: Type definition node.
        """
        if node.type_descriptor_kind is not TypeDescriptorKind.RECORD_TYPE_DESC:
            return
        symbol = self._semantic_model().symbol(node)
        if symbol is None:
            self._skip("record", node.name, "symbol_unresolved")
            return
        if symbol.name is None:
            self._skip("record", node.name, "name_unresolved")
            return
        if symbol.module is None:
            self._skip("record", symbol.name, "module_unresolved")
            return
        if not isinstance(symbol, TypeDefinitionSymbol) or not isinstance(
            symbol.type_descriptor, RecordTypeSymbol
        ):
            self._skip("record", symbol.name, "not_a_record_type")
            return

        record_name = f"{symbol.module.id}:{symbol.name}"
        try:
            serialized = serialize_record(
                record_name, symbol.type_descriptor.field_descriptors
            )
        except RecordSerializationError as exc:
            logger.warning(
                f"Skipping record due to serialization failure (record={record_name} error={exc})"
            )
            self._outcomes.append(
                ExtractionOutcome(
                    unit="record",
                    name=record_name,
                    status="failed",
                    reason="serialization_failed",
                )
            )
            return

        self._record_types[record_name] = serialized
        self._outcomes.append(
            ExtractionOutcome(unit="record", name=record_name, status="recorded")
        )

    def visit_class_definition(self, node: ClassDefinitionNode) -> None:
        """Record remote method signatures of a client class.

        Args:
            node: Class definition node.
        """
        if not any(
            token.text == CLIENT_QUALIFIER for token in node.class_type_qualifiers
        ):
            return
        symbol = self._semantic_model().symbol(node)
        if symbol is None:
            self._skip("client", node.name, "symbol_unresolved")
            return
        if symbol.name is None:
            self._skip("client", node.name, "name_unresolved")
            return
        if not isinstance(symbol, ClassSymbol):
            self._skip("client", symbol.name, "not_a_class")
            return

        client_name = symbol.name
        function_map: dict[str, FunctionRecord] = {}
        for method in symbol.methods.values():
            if Qualifier.REMOTE not in method.qualifiers:
                continue
            if method.name is None:
                self._skip("method", None, "name_unresolved")
                continue
            function_map[method.name] = self._build_function_record(method)
            self._outcomes.append(
                ExtractionOutcome(unit="method", name=method.name, status="recorded")
            )

        if not function_map:
            self._skip("client", client_name, "no_remote_methods")
            return
        self._client_map[client_name] = function_map
        self._outcomes.append(
            ExtractionOutcome(unit="client", name=client_name, status="recorded")
        )

    def _build_function_record(self, method: MethodSymbol) -> FunctionRecord:
        function_record = FunctionRecord()
        for parameter in method.parameters:
            if parameter.name is None:
                self._skip("parameter", None, "name_unresolved")
                continue
            function_record.add_parameter(
                parameter.name, parameter.type_descriptor.type_kind.value
            )
        function_record.set_return_type(
            return_signature(method.return_type_descriptor)
        )
        return function_record

    def _semantic_model(self) -> SemanticModel:
        if self._model is None:
            raise VisitorNotBoundError("Visitor is not bound to a semantic model")
        return self._model

    def _skip(self, unit: UnitKind, name: str | None, reason: str) -> None:
        logger.debug(f"Skipping unresolved {unit} (name={name} reason={reason})")
        self._outcomes.append(
            ExtractionOutcome(unit=unit, name=name, status="skipped", reason=reason)
        )


def serialize_record(
    record_name: str, field_descriptors: Mapping[str, RecordFieldSymbol]
) -> str:
    """Serialize a record's field map as ``{"<record_name>": {field: type}}``.

    Args:
        record_name: Module-qualified record name.
        field_descriptors: Field name to field symbol.

    Returns:
        Compact JSON text.

    Raises:
        RecordSerializationError: If a field type has no signature.
    """
    field_types: dict[str, str] = {}
    for field_name, field_symbol in field_descriptors.items():
        signature = field_symbol.type_descriptor.signature
        if signature is None:
            raise RecordSerializationError(f"field '{field_name}' has no type signature")
        field_types[field_name] = signature
    return json.dumps({record_name: field_types}, separators=(",", ":"))


def return_signature(type_symbol: TypeSymbol | None) -> str:
    """Resolve the return signature of a remote method.

    For a union, the first member that is not an error type wins; a union of
    errors only resolves to an empty string.

    Args:
        type_symbol: Declared return type, ``None`` when not declared.

    Returns:
        Return type signature, or an empty string when unresolved.
    """
    if type_symbol is None:
        return ""
    if isinstance(type_symbol, UnionTypeSymbol):
        for member in type_symbol.member_type_descriptors:
            if member.type_kind is TypeDescKind.ERROR:
                continue
            return member.signature or ""
        return ""
    return type_symbol.signature or ""
