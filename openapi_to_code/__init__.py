"""OpenAPI to Code Generator

A Python package for generating C# declarations (records, enums,
discriminated unions and record-struct aliases) from OpenAPI schemas,
with deterministic naming under name collisions.
"""

__version__ = "1.0.1"

from .pipeline import (
    CodeGenerationError,
    DeclarationSet,
    GeneratorConfig,
    NameExhaustionError,
    NameStyle,
    PipelineGenerator,
    SchemaParseError,
)

__all__ = [
    "PipelineGenerator",
    "GeneratorConfig",
    "NameStyle",
    "DeclarationSet",
    "CodeGenerationError",
    "NameExhaustionError",
    "SchemaParseError",
]
