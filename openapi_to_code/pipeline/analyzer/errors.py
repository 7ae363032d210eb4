"""
Errors and diagnostics raised or recorded during declaration synthesis.

Diagnostics describe schema shapes that were approximated; they never stop a
run. Exceptions are reserved for conditions that would produce invalid output.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class CodeGenerationError(Exception):
    """Base class for errors that abort a generation run."""

    pass


class SchemaParseError(CodeGenerationError):
    """Raised when the input document cannot be read as a schema map."""

    pass


class NameExhaustionError(CodeGenerationError):
    """Raised when no unique identifier can be found for a raw name."""

    def __init__(self, raw_name: str, canonical_name: str):
        super().__init__(f"Could not find a unique name for {raw_name!r} (canonical form {canonical_name!r})")
        self.raw_name = raw_name
        self.canonical_name = canonical_name


class DiagnosticCode(str, Enum):
    """Kind of approximation recorded for a declaration."""

    COMPOSITION_CYCLE = "composition-cycle"
    UNRESOLVED_DISCRIMINATOR_TARGET = "unresolved-discriminator-target"
    UNRESOLVED_REFERENCE = "unresolved-reference"
    DEPTH_EXCEEDED = "depth-exceeded"
    UNSUPPORTED_UNION_VARIANT = "unsupported-union-variant"


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal problem found while synthesizing one declaration."""

    code: DiagnosticCode
    message: str
    schema: str = ""  # Raw name of the schema being synthesized

    def __str__(self) -> str:
        location = f"{self.schema}: " if self.schema else ""
        return f"[{self.code.value}] {location}{self.message}"
