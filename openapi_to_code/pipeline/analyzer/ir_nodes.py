"""
IR (Intermediate Representation) node definitions.

These nodes represent the analyzed and resolved schema, ready for
code generation. All references are resolved, names are final and
types are determined.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Union

from .errors import Diagnostic


class PrimitiveKind(Enum):
    """Target primitive a schema type/format pair resolves to."""

    STRING = "string"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT = "float"
    DOUBLE = "double"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    DATE_TIME = "date-time"
    DATE = "date"
    TIME = "time"
    DURATION = "duration"
    UUID = "uuid"
    URI = "uri"
    BYTES = "byte"
    BINARY = "binary"
    OBJECT = "object"  # Opaque placeholder


INTEGER_KINDS = (PrimitiveKind.INT32, PrimitiveKind.INT64)
FLOATING_KINDS = (PrimitiveKind.FLOAT, PrimitiveKind.DOUBLE, PrimitiveKind.DECIMAL)
FORMATTED_STRING_KINDS = (
    PrimitiveKind.DATE_TIME,
    PrimitiveKind.DATE,
    PrimitiveKind.TIME,
    PrimitiveKind.DURATION,
    PrimitiveKind.UUID,
    PrimitiveKind.URI,
)


@dataclass(frozen=True)
class PrimitiveType:
    kind: PrimitiveKind = PrimitiveKind.OBJECT

    @property
    def is_opaque(self) -> bool:
        return self.kind == PrimitiveKind.OBJECT


@dataclass(frozen=True)
class CollectionType:
    element: ResolvedType
    mutable: bool = False


@dataclass(frozen=True)
class MapType:
    """String-keyed map."""

    value: ResolvedType
    mutable: bool = False


@dataclass(frozen=True)
class NamedType:
    """Reference to a declaration by its final name."""

    name: str


@dataclass(frozen=True)
class NullableType:
    inner: ResolvedType


ResolvedType = Union[PrimitiveType, CollectionType, MapType, NamedType, NullableType]

OPAQUE = PrimitiveType(PrimitiveKind.OBJECT)


def make_nullable(type_ref: ResolvedType) -> ResolvedType:
    """Wrap a type as nullable without nesting wrappers."""
    if isinstance(type_ref, NullableType):
        return type_ref
    return NullableType(type_ref)


def strip_nullable(type_ref: ResolvedType) -> ResolvedType:
    if isinstance(type_ref, NullableType):
        return type_ref.inner
    return type_ref


class DeclarationKind(Enum):
    """Kind of a synthesized declaration."""

    AGGREGATE = "aggregate"
    ENUMERATION = "enumeration"
    UNION = "union"
    TYPE_ALIAS = "type_alias"


@dataclass(frozen=True)
class Expression:
    """A target-language expression used as a member initializer."""

    text: str
    is_placeholder: bool = False  # Suppresses null warnings without a real value
    namespaces: tuple[str, ...] = ()  # Namespaces the expression needs imported


@dataclass
class Member:
    """A member of an aggregate."""

    name: str = ""
    type_ref: ResolvedType = OPAQUE
    required: bool = False
    default: Expression | None = None
    json_name: str = ""  # Original property key, used for serialization
    description: str | None = None


@dataclass
class ExtensionData:
    """Catch-all member collecting input keys that no member models."""

    name: str = "AdditionalProperties"

    # Type declared by additionalProperties. [JsonExtensionData] only binds
    # object or JsonElement values, so the C# backend emits
    # Dictionary<string, object> whatever this is.
    value_type: ResolvedType = OPAQUE


@dataclass
class AggregateDeclaration:
    name: str = ""
    original_name: str = ""
    base: str | None = None  # Name of the base aggregate
    members: list[Member] = field(default_factory=list)
    extension_data: ExtensionData | None = None
    description: str | None = None

    kind = DeclarationKind.AGGREGATE


@dataclass
class EnumMember:
    name: str = ""
    value: Any = None  # Original literal value


@dataclass
class EnumerationDeclaration:
    name: str = ""
    original_name: str = ""
    underlying: PrimitiveKind = PrimitiveKind.STRING
    members: list[EnumMember] = field(default_factory=list)
    description: str | None = None

    kind = DeclarationKind.ENUMERATION

    def member_for(self, value: Any) -> EnumMember | None:
        """Find the member whose original literal equals a raw value."""
        for member in self.members:
            if type(member.value) is type(value) and member.value == value:
                return member
        return None


@dataclass
class UnionVariant:
    name: str = ""  # Name of the variant declaration
    discriminator_value: str | None = None


@dataclass
class UnionDeclaration:
    name: str = ""
    original_name: str = ""
    is_abstract: bool = True
    discriminator: str | None = None  # Discriminator property name
    variants: list[UnionVariant] = field(default_factory=list)
    description: str | None = None

    kind = DeclarationKind.UNION


@dataclass
class TypeAliasDeclaration:
    name: str = ""
    original_name: str = ""
    target: ResolvedType = OPAQUE
    description: str | None = None

    kind = DeclarationKind.TYPE_ALIAS


Declaration = Union[AggregateDeclaration, EnumerationDeclaration, UnionDeclaration, TypeAliasDeclaration]


@dataclass
class DeclarationSet:
    """The complete output of one synthesis run."""

    declarations: list[Declaration] = field(default_factory=list)

    # Declaration name -> kind
    kinds: dict[str, DeclarationKind] = field(default_factory=dict)

    diagnostics: list[Diagnostic] = field(default_factory=list)

    def add(self, declaration: Declaration) -> None:
        if declaration.name in self.kinds:
            raise ValueError(f"Duplicate declaration name: {declaration.name}")
        self.declarations.append(declaration)
        self.kinds[declaration.name] = declaration.kind

    def get(self, name: str) -> Declaration | None:
        for declaration in self.declarations:
            if declaration.name == name:
                return declaration
        return None

    def kind_of(self, name: str) -> DeclarationKind | None:
        return self.kinds.get(name)

    def of_kind(self, kind: DeclarationKind) -> list[Declaration]:
        return [d for d in self.declarations if d.kind == kind]

    def __iter__(self) -> Iterator[Declaration]:
        return iter(self.declarations)

    def __len__(self) -> int:
        return len(self.declarations)
