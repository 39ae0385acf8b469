# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Load compiled modules from JSON module dumps."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from typemeta.module import LoadedModule
from typemeta.semantic import (
    ClassSymbol,
    MappingSemanticModel,
    MethodSymbol,
    ModuleID,
    ModuleSymbol,
    ParameterSymbol,
    Qualifier,
    RecordFieldSymbol,
    RecordTypeSymbol,
    Symbol,
    TypeDefinitionSymbol,
    TypeDescKind,
    TypeSymbol,
    UnionTypeSymbol,
)
from typemeta.syntax import (
    ClassDefinitionNode,
    FunctionDefinitionNode,
    ModulePart,
    ModuleVariableNode,
    Node,
    Token,
    TypeDefinitionNode,
    TypeDescriptorKind,
)

logger = logging.getLogger(__name__)


class ModuleDumpError(RuntimeError):
    """Represent an unreadable or malformed module dump."""


@dataclass(frozen=True)
class ModuleLoadError:
    """Represent a module dump that could not be loaded."""

    path: str
    message: str


def load_module_dump(path: Path) -> LoadedModule:
    """Load one module dump file.

    Args:
        path: JSON dump file path.

    Returns:
        Loaded module with its syntax tree and semantic model.

    Raises:
        ModuleDumpError: If the file cannot be read or does not describe a module.
    """
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ModuleDumpError(f"Failed to read module dump {path}: {exc}") from exc
    return parse_module_dump(payload, source=str(path))


def parse_module_dump(payload: Any, source: str = "") -> LoadedModule:
    """Build a loaded module from a decoded module dump.

    Args:
        payload: Decoded JSON document.
        source: Origin of the payload, for reporting.

    Returns:
        Loaded module with its syntax tree and semantic model.

    Raises:
        ModuleDumpError: If the payload does not describe a module.
    """
    if not isinstance(payload, dict):
        raise ModuleDumpError("Module dump must be a JSON object")
    module_id = _parse_module_id(payload.get("module"))
    module_symbol = ModuleSymbol(id=module_id)
    declarations = payload.get("declarations", [])
    if not isinstance(declarations, list):
        raise ModuleDumpError("'declarations' must be a list")

    model = MappingSemanticModel()
    members: list[Node] = []
    for index, declaration in enumerate(declarations):
        if not isinstance(declaration, dict):
            raise ModuleDumpError(f"Declaration #{index} must be an object")
        node, symbol = _parse_declaration(declaration, module_symbol)
        members.append(node)
        if symbol is not None and declaration.get("resolved", True):
            model.register(node, symbol)

    logger.debug(
        "Loaded module dump",
        extra={"module_id": str(module_id), "declarations": len(members)},
    )
    return LoadedModule(
        module_id=module_id,
        syntax_tree=ModulePart(members=tuple(members)),
        semantic_model=model,
        source=source,
    )


def _parse_module_id(value: Any) -> ModuleID:
    if isinstance(value, str) and value:
        return ModuleID(module_name=value)
    if not isinstance(value, dict) or not isinstance(value.get("name"), str):
        raise ModuleDumpError("'module' must be a name or an object with a 'name'")
    return ModuleID(
        module_name=value["name"],
        org_name=value.get("org"),
        version=value.get("version"),
    )


def _parse_declaration(
    declaration: dict[str, Any], module_symbol: ModuleSymbol
) -> tuple[Node, Symbol | None]:
    kind = declaration.get("kind")
    declared_name = _declared_name(declaration)
    symbol_name = _optional_name(declaration, "name")
    if kind == "type_definition":
        descriptor = _enum_value(
            TypeDescriptorKind, declaration.get("descriptor", "record"), "descriptor"
        )
        node: Node = TypeDefinitionNode(
            name=declared_name, type_descriptor_kind=descriptor
        )
        type_descriptor: TypeSymbol | None = None
        if descriptor is TypeDescriptorKind.RECORD_TYPE_DESC:
            type_descriptor = RecordTypeSymbol(
                signature=declaration.get("signature"),
                field_descriptors=_parse_fields(declaration.get("fields", {})),
            )
        return node, TypeDefinitionSymbol(
            name=symbol_name, module=module_symbol, type_descriptor=type_descriptor
        )
    if kind == "class_definition":
        qualifiers = _list_value(declaration, "qualifiers")
        node = ClassDefinitionNode(
            name=declared_name,
            class_type_qualifiers=tuple(Token(text=str(text)) for text in qualifiers),
        )
        methods = [
            _parse_method(method) for method in _list_value(declaration, "methods")
        ]
        # Anonymous methods are kept under a positional key.
        method_map = {
            method.name if method.name is not None else f"${position}": method
            for position, method in enumerate(methods)
        }
        return node, ClassSymbol(
            name=symbol_name, module=module_symbol, methods=method_map
        )
    if kind == "function_definition":
        return FunctionDefinitionNode(name=declared_name), None
    if kind == "module_variable":
        return ModuleVariableNode(name=declared_name), None
    raise ModuleDumpError(f"Unsupported declaration kind: {kind!r}")


def _declared_name(declaration: dict[str, Any]) -> str:
    name = _optional_name(declaration, "source_name")
    if name is None:
        name = _optional_name(declaration, "name")
    return name or ""


def _optional_name(entry: dict[str, Any], key: str) -> str | None:
    name = entry.get(key)
    if name is not None and not isinstance(name, str):
        raise ModuleDumpError(f"'{key}' must be a string or null, got {name!r}")
    return name


def _list_value(entry: dict[str, Any], key: str) -> list[Any]:
    value = entry.get(key, [])
    if not isinstance(value, list):
        raise ModuleDumpError(f"'{key}' must be a list, got {value!r}")
    return value


def _parse_fields(fields: Any) -> dict[str, RecordFieldSymbol]:
    if not isinstance(fields, dict):
        raise ModuleDumpError("'fields' must be an object")
    return {
        str(name): RecordFieldSymbol(name=str(name), type_descriptor=_parse_type(value))
        for name, value in fields.items()
    }


def _parse_method(method: Any) -> MethodSymbol:
    if not isinstance(method, dict):
        raise ModuleDumpError("Method entries must be objects")
    qualifiers = frozenset(
        _enum_value(Qualifier, text, "qualifier")
        for text in _list_value(method, "qualifiers")
    )
    parameters = tuple(
        _parse_parameter(parameter) for parameter in _list_value(method, "parameters")
    )
    returns = method.get("returns")
    return MethodSymbol(
        name=_optional_name(method, "name"),
        qualifiers=qualifiers,
        parameters=parameters,
        return_type_descriptor=None if returns is None else _parse_type(returns),
    )


def _parse_parameter(parameter: Any) -> ParameterSymbol:
    if not isinstance(parameter, dict):
        raise ModuleDumpError("Parameter entries must be objects")
    return ParameterSymbol(
        name=_optional_name(parameter, "name"),
        type_descriptor=_parse_type(parameter.get("type")),
    )


def _parse_type(value: Any) -> TypeSymbol:
    """Parse a type given as a kind name or a ``{kind, signature, members}`` object.

    A missing ``signature`` defaults to the kind text; an explicit ``null``
    marks a type the compiler could not render.
    """
    if isinstance(value, str):
        kind = _enum_value(TypeDescKind, value, "type kind")
        return TypeSymbol(type_kind=kind, signature=value)
    if not isinstance(value, dict):
        raise ModuleDumpError(f"Type must be a kind name or an object, got {value!r}")
    kind = _enum_value(TypeDescKind, value.get("kind"), "type kind")
    signature = value.get("signature", kind.value)
    if kind is TypeDescKind.UNION:
        return UnionTypeSymbol(
            signature=signature,
            member_type_descriptors=tuple(
                _parse_type(member) for member in _list_value(value, "members")
            ),
        )
    return TypeSymbol(type_kind=kind, signature=signature)


def _enum_value(enum_type: Any, value: Any, label: str) -> Any:
    try:
        return enum_type(value)
    except ValueError as exc:
        raise ModuleDumpError(f"Unsupported {label}: {value!r}") from exc
