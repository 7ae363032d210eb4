"""
Pipeline - OpenAPI schema to C# declaration generator.

This module provides a multi-phase architecture for generating typed
declarations from an API description:

1. Phase 1 (Parser): Parse the schema map into a schema graph
2. Phase 2 (Analyzer): Allocate names, resolve types and synthesize declarations
3. Phase 3 (Backend): Render declarations as C# source through templates
"""

from __future__ import annotations

from .analyzer import (
    CodeGenerationError,
    DeclarationSet,
    Diagnostic,
    DiagnosticCode,
    NameExhaustionError,
    NameRegistry,
    SchemaAnalyzer,
    SchemaParseError,
)
from .config import GeneratorConfig, NameStyle
from .generator import PipelineGenerator
from .schema_ast import SchemaDocument, SchemaParser

__all__ = [
    "PipelineGenerator",
    "GeneratorConfig",
    "NameStyle",
    "SchemaParser",
    "SchemaDocument",
    "SchemaAnalyzer",
    "NameRegistry",
    "DeclarationSet",
    "Diagnostic",
    "DiagnosticCode",
    "CodeGenerationError",
    "NameExhaustionError",
    "SchemaParseError",
]
