"""
Schema graph node definitions.

These nodes represent the parsed structure of an OpenAPI schema map before
any naming, type resolution or target-language processing. References are
already reduced to the raw name of the schema they point at.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Flag, auto
from typing import Any


class SchemaKind(Flag):
    """JSON type keywords of a schema node, combinable (e.g. STRING | NULL)."""

    NONE = 0
    STRING = auto()
    INTEGER = auto()
    NUMBER = auto()
    BOOLEAN = auto()
    ARRAY = auto()
    OBJECT = auto()
    NULL = auto()

    @property
    def base(self) -> SchemaKind:
        """The kind flags without NULL."""
        return self & ~SchemaKind.NULL

    @property
    def is_nullable(self) -> bool:
        return bool(self & SchemaKind.NULL)


# JSON Schema type name -> kind flag
KIND_BY_NAME = {
    "string": SchemaKind.STRING,
    "integer": SchemaKind.INTEGER,
    "number": SchemaKind.NUMBER,
    "boolean": SchemaKind.BOOLEAN,
    "array": SchemaKind.ARRAY,
    "object": SchemaKind.OBJECT,
    "null": SchemaKind.NULL,
}


@dataclass
class SchemaRef:
    """A reference to a top-level schema by its raw name."""

    target: str = ""

    # Sibling keywords allowed next to a $ref
    default: Any = None
    has_default: bool = False
    description: str | None = None


@dataclass
class Discriminator:
    """Property used at the data level to select a union variant."""

    property_name: str = ""
    mapping: dict[str, SchemaRef] = field(default_factory=dict)  # literal -> target


@dataclass
class SchemaNode:
    """One logical unit of the input API description."""

    kind: SchemaKind = SchemaKind.NONE
    format: str | None = None
    enum: list[Any] = field(default_factory=list)

    # Object structure
    properties: dict[str, SchemaNode | SchemaRef] = field(default_factory=dict)
    required: list[str] = field(default_factory=list)
    additional_properties: SchemaNode | SchemaRef | None = None

    # Array element
    items: SchemaNode | SchemaRef | None = None

    # Composition
    all_of: list[SchemaNode | SchemaRef] = field(default_factory=list)
    one_of: list[SchemaNode | SchemaRef] = field(default_factory=list)
    any_of: list[SchemaNode | SchemaRef] = field(default_factory=list)
    discriminator: Discriminator | None = None

    default: Any = None
    has_default: bool = False
    description: str | None = None

    @property
    def is_nullable(self) -> bool:
        return self.kind.is_nullable

    @property
    def union_members(self) -> list[SchemaNode | SchemaRef]:
        """oneOf members, or anyOf members when there is no oneOf."""
        return self.one_of or self.any_of

    def non_null_union_members(self) -> list[SchemaNode | SchemaRef]:
        return [m for m in self.union_members if not is_null_node(m)]


@dataclass
class SchemaDocument:
    """Ordered mapping from raw schema name to its node."""

    title: str = ""
    schemas: dict[str, SchemaNode | SchemaRef] = field(default_factory=dict)


def is_null_node(node: SchemaNode | SchemaRef | None) -> bool:
    """Check whether a node only admits null (e.g. the null arm of anyOf)."""
    return isinstance(node, SchemaNode) and node.kind == SchemaKind.NULL
