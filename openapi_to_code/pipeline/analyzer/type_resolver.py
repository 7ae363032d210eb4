"""
Type resolver mapping schema nodes to resolved type references.

The resolver is stateless apart from the name tables filled in by the
synthesizer; every call produces a fresh ResolvedType.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..config import GeneratorConfig
from ..schema_ast.nodes import SchemaKind, SchemaNode, SchemaRef
from .errors import Diagnostic, DiagnosticCode
from .ir_nodes import (
    OPAQUE,
    CollectionType,
    MapType,
    NamedType,
    PrimitiveKind,
    PrimitiveType,
    ResolvedType,
    make_nullable,
)

# Format tables (format names are matched case-insensitively)
STRING_FORMATS = {
    "date-time": PrimitiveKind.DATE_TIME,
    "date": PrimitiveKind.DATE,
    "time": PrimitiveKind.TIME,
    "duration": PrimitiveKind.DURATION,
    "uuid": PrimitiveKind.UUID,
    "uri": PrimitiveKind.URI,
    "byte": PrimitiveKind.BYTES,
    "binary": PrimitiveKind.BINARY,
}

INTEGER_FORMATS = {
    "int64": PrimitiveKind.INT64,
}

NUMBER_FORMATS = {
    "float": PrimitiveKind.FLOAT,
    "decimal": PrimitiveKind.DECIMAL,
}


@dataclass
class NameTable:
    """Final declaration names the resolver needs for named references."""

    # Raw top-level schema name -> declaration name (alias chains already followed)
    references: dict[str, str] = field(default_factory=dict)

    # id() of an inline schema node -> declaration synthesized for it
    inline: dict[int, str] = field(default_factory=dict)

    # Raw top-level names known to resolve to the opaque type (e.g. reference cycles)
    opaque: set[str] = field(default_factory=set)

    def reference(self, raw_name: str) -> str | None:
        return self.references.get(raw_name)

    def inline_name(self, node: SchemaNode) -> str | None:
        return self.inline.get(id(node))


def primitive_kind(node: SchemaNode) -> PrimitiveKind:
    """Map a primitive schema node to its target primitive via the format table."""
    base = node.kind.base
    fmt = (node.format or "").lower()

    if base == SchemaKind.STRING:
        return STRING_FORMATS.get(fmt, PrimitiveKind.STRING)
    if base == SchemaKind.INTEGER:
        return INTEGER_FORMATS.get(fmt, PrimitiveKind.INT32)
    if base == SchemaKind.NUMBER:
        return NUMBER_FORMATS.get(fmt, PrimitiveKind.DOUBLE)
    if base == SchemaKind.BOOLEAN:
        return PrimitiveKind.BOOLEAN
    return PrimitiveKind.OBJECT


def has_non_null_default(node: SchemaNode | SchemaRef | None) -> bool:
    return node is not None and node.has_default and node.default is not None


class TypeResolver:
    """Resolves schema nodes to ResolvedType values."""

    def __init__(
        self,
        config: GeneratorConfig,
        names: NameTable | None = None,
        diagnostics: list[Diagnostic] | None = None,
    ):
        """
        Initialize the resolver.

        Args:
            config: Generation configuration (mutability and nullability options)
            names: Name tables for references and synthesized inline declarations
            diagnostics: List receiving unresolved-reference diagnostics
        """
        self.config = config
        self.names = names if names is not None else NameTable()
        self.diagnostics = diagnostics if diagnostics is not None else []

        # Raw name of the schema being synthesized, attached to diagnostics
        self.context = ""

    def resolve(
        self,
        node: SchemaNode | SchemaRef | None,
        owning_required: bool = True,
        has_default: bool | None = None,
    ) -> ResolvedType:
        """
        Resolve a node to a type reference.

        Args:
            node: The schema node or reference
            owning_required: Whether the owning member is in the required set
            has_default: Whether a non-null default is present (read from the
                node when None)

        Returns:
            The resolved type, wrapped nullable when required
        """
        resolved = self._resolve_base(node)
        if self.is_nullable(node, owning_required, has_default):
            return make_nullable(resolved)
        return resolved

    def is_nullable(
        self,
        node: SchemaNode | SchemaRef | None,
        owning_required: bool = True,
        has_default: bool | None = None,
    ) -> bool:
        if isinstance(node, SchemaNode) and node.is_nullable:
            return True

        if owning_required:
            return False

        if has_default is None:
            has_default = has_non_null_default(node)

        # An optional member with a non-null default always has a value
        return not (self.config.default_non_nullable and has_default)

    def _resolve_base(self, node: SchemaNode | SchemaRef | None) -> ResolvedType:
        if node is None:
            return OPAQUE

        if isinstance(node, SchemaRef):
            return self.resolve_reference(node.target)

        inline_name = self.names.inline_name(node)
        if inline_name is not None:
            return NamedType(inline_name)

        # allOf: the first referenced component stands for the whole
        if node.all_of:
            for part in node.all_of:
                if isinstance(part, SchemaRef):
                    return self.resolve_reference(part.target)
            return OPAQUE

        if node.union_members:
            return self._resolve_union(node)

        base = node.kind.base

        if base == SchemaKind.ARRAY:
            if node.items is None:
                return CollectionType(OPAQUE, mutable=not self.config.immutable_arrays)
            return CollectionType(self.resolve(node.items), mutable=not self.config.immutable_arrays)

        if base == SchemaKind.OBJECT or (base == SchemaKind.NONE and node.properties):
            if node.additional_properties is not None and not node.properties:
                value_type = self.resolve(node.additional_properties)
                return MapType(value_type, mutable=not self.config.immutable_dictionaries)
            return OPAQUE

        # Enumerations without a synthesized name fall back to their primitive
        return PrimitiveType(primitive_kind(node))

    def _resolve_union(self, node: SchemaNode) -> ResolvedType:
        non_null = node.non_null_union_members()

        if len(non_null) == 1:
            inner = self._resolve_base(non_null[0])
            # [T, null] is the OpenAPI 3.1 spelling of a nullable T
            if len(non_null) < len(node.union_members):
                return make_nullable(inner)
            return inner

        # Untagged unions have no precise encoding
        return OPAQUE

    def resolve_reference(self, raw_name: str) -> ResolvedType:
        name = self.names.reference(raw_name)
        if name is not None:
            return NamedType(name)

        if raw_name not in self.names.opaque:
            self.diagnostics.append(
                Diagnostic(
                    DiagnosticCode.UNRESOLVED_REFERENCE,
                    f"Reference to unknown schema {raw_name!r} resolved to an opaque type",
                    schema=self.context,
                )
            )
        return OPAQUE
