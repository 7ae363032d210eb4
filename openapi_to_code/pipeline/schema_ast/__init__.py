"""
Schema graph module.

Contains the schema node definitions and the OpenAPI parser.
"""

from __future__ import annotations

from .nodes import (
    Discriminator,
    SchemaDocument,
    SchemaKind,
    SchemaNode,
    SchemaRef,
)
from .parser import SchemaParser

__all__ = [
    "SchemaKind",
    "SchemaNode",
    "SchemaRef",
    "Discriminator",
    "SchemaDocument",
    "SchemaParser",
]
