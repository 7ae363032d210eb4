"""
Analyzer module.

Contains name allocation, type resolution, default rendering and
declaration synthesis.
"""

from __future__ import annotations

from .analyzer import SchemaAnalyzer
from .errors import (
    CodeGenerationError,
    Diagnostic,
    DiagnosticCode,
    NameExhaustionError,
    SchemaParseError,
)
from .ir_nodes import (
    AggregateDeclaration,
    CollectionType,
    DeclarationKind,
    DeclarationSet,
    EnumerationDeclaration,
    EnumMember,
    Expression,
    ExtensionData,
    MapType,
    Member,
    NamedType,
    NullableType,
    PrimitiveKind,
    PrimitiveType,
    TypeAliasDeclaration,
    UnionDeclaration,
    UnionVariant,
)
from .literal_renderer import LiteralRenderer
from .name_resolver import CollisionResolution, NameRegistry
from .type_resolver import NameTable, TypeResolver

__all__ = [
    "SchemaAnalyzer",
    "NameRegistry",
    "CollisionResolution",
    "TypeResolver",
    "NameTable",
    "LiteralRenderer",
    "DeclarationSet",
    "DeclarationKind",
    "AggregateDeclaration",
    "EnumerationDeclaration",
    "UnionDeclaration",
    "TypeAliasDeclaration",
    "Member",
    "EnumMember",
    "UnionVariant",
    "ExtensionData",
    "Expression",
    "PrimitiveKind",
    "PrimitiveType",
    "CollectionType",
    "MapType",
    "NamedType",
    "NullableType",
    "Diagnostic",
    "DiagnosticCode",
    "CodeGenerationError",
    "NameExhaustionError",
    "SchemaParseError",
]
