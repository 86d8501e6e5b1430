"""Closed classification of parser-reported syntax node kinds."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional

from ..models import ElementKind


class NodeKind(Enum):
    """Declaration forms the structural walk understands."""

    CLASS_DECL = "class_decl"
    FUNCTION_DECL = "function_decl"
    METHOD_DECL = "method_decl"
    INTERFACE_DECL = "interface_decl"
    ENUM_DECL = "enum_decl"
    EXPORT_WRAPPER = "export_wrapper"
    VARIABLE_DECL = "variable_decl"
    OTHER = "other"


_RAW_KINDS: Dict[str, NodeKind] = {
    "class_declaration": NodeKind.CLASS_DECL,
    "abstract_class_declaration": NodeKind.CLASS_DECL,
    "class_definition": NodeKind.CLASS_DECL,
    "class": NodeKind.CLASS_DECL,
    "function_declaration": NodeKind.FUNCTION_DECL,
    "generator_function_declaration": NodeKind.FUNCTION_DECL,
    "function_definition": NodeKind.FUNCTION_DECL,
    "method_definition": NodeKind.METHOD_DECL,
    "method_declaration": NodeKind.METHOD_DECL,
    "interface_declaration": NodeKind.INTERFACE_DECL,
    "type_alias_declaration": NodeKind.INTERFACE_DECL,
    "enum_declaration": NodeKind.ENUM_DECL,
    "export_statement": NodeKind.EXPORT_WRAPPER,
    "lexical_declaration": NodeKind.VARIABLE_DECL,
    "variable_declaration": NodeKind.VARIABLE_DECL,
}

_ELEMENT_KINDS: Dict[NodeKind, ElementKind] = {
    NodeKind.CLASS_DECL: ElementKind.CLASS,
    NodeKind.FUNCTION_DECL: ElementKind.FUNCTION,
    NodeKind.METHOD_DECL: ElementKind.METHOD,
    NodeKind.INTERFACE_DECL: ElementKind.INTERFACE,
    NodeKind.ENUM_DECL: ElementKind.ENUM,
}

FUNCTION_LITERAL_KINDS = frozenset(
    {"arrow_function", "function", "function_expression", "generator_function"}
)


def classify(raw_kind: str, named: bool = True) -> NodeKind:
    """Map a raw node-type string to a NodeKind; unknown kinds become OTHER.

    Anonymous tokens (keywords such as the `class` keyword) are always OTHER,
    even when their text matches a declaration kind.
    """
    if not named:
        return NodeKind.OTHER
    return _RAW_KINDS.get(raw_kind, NodeKind.OTHER)


def element_kind_for(kind: NodeKind) -> Optional[ElementKind]:
    """Return the element kind a plain declaration maps to, if any."""
    return _ELEMENT_KINDS.get(kind)


__all__ = ["FUNCTION_LITERAL_KINDS", "NodeKind", "classify", "element_kind_for"]
