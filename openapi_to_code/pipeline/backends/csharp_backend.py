"""
C# code generation backend.

Generates C# records, enums and record structs from a declaration set.
"""

from __future__ import annotations

from html import escape
from typing import Any

from ..analyzer.ir_nodes import (
    AggregateDeclaration,
    CollectionType,
    DeclarationSet,
    EnumerationDeclaration,
    MapType,
    NamedType,
    NullableType,
    PrimitiveKind,
    PrimitiveType,
    ResolvedType,
    TypeAliasDeclaration,
    UnionDeclaration,
)
from ..analyzer.literal_renderer import cs_string_literal
from ..config import GeneratorConfig
from .base import CodeBackend


class CSharpBackend(CodeBackend):
    """C# code generation backend."""

    TEMPLATE_LANG = "cs"
    FILE_EXTENSION = "cs"

    TYPE_MAP = {
        PrimitiveKind.STRING: "string",
        PrimitiveKind.INT32: "int",
        PrimitiveKind.INT64: "long",
        PrimitiveKind.FLOAT: "float",
        PrimitiveKind.DOUBLE: "double",
        PrimitiveKind.DECIMAL: "decimal",
        PrimitiveKind.BOOLEAN: "bool",
        PrimitiveKind.DATE_TIME: "DateTimeOffset",
        PrimitiveKind.DATE: "DateOnly",
        PrimitiveKind.TIME: "TimeOnly",
        PrimitiveKind.DURATION: "TimeSpan",
        PrimitiveKind.UUID: "Guid",
        PrimitiveKind.URI: "Uri",
        PrimitiveKind.BYTES: "byte[]",
        PrimitiveKind.BINARY: "Stream",
        PrimitiveKind.OBJECT: "object",
    }

    # Namespaces every generated file imports
    BASE_IMPORTS = {"System", "System.Text.Json.Serialization"}

    def __init__(self, config: GeneratorConfig):
        super().__init__(config)
        self.required_imports: set[str] = set()

    def generate(self, declarations: DeclarationSet, generation_comment: str = "") -> str:
        """Generate C# code from a declaration set."""
        # Reset import tracking
        self.required_imports = set(self.BASE_IMPORTS)

        body = "\n".join(self.render_declaration(declaration) for declaration in declarations)

        prefix = self.prefix_template.render(
            file_header=self.config.generate_file_header,
            generation_comment=generation_comment,
            required_imports=sorted(self.required_imports),
            namespace=self.config.namespace,
        )

        return prefix + body

    def translate_type(self, type_ref: ResolvedType) -> str:
        """Translate a resolved type to a C# type string."""
        if isinstance(type_ref, NullableType):
            inner = self.translate_type(type_ref.inner)
            return inner if inner.endswith("?") else f"{inner}?"

        if isinstance(type_ref, PrimitiveType):
            if type_ref.kind == PrimitiveKind.BINARY:
                self.required_imports.add("System.IO")
            return self.TYPE_MAP[type_ref.kind]

        if isinstance(type_ref, CollectionType):
            self.required_imports.add("System.Collections.Generic")
            element = self.translate_type(type_ref.element)
            return f"List<{element}>" if type_ref.mutable else f"IReadOnlyList<{element}>"

        if isinstance(type_ref, MapType):
            self.required_imports.add("System.Collections.Generic")
            value = self.translate_type(type_ref.value)
            if type_ref.mutable:
                return f"Dictionary<string, {value}>"
            return f"IReadOnlyDictionary<string, {value}>"

        if isinstance(type_ref, NamedType):
            return type_ref.name

        return "object"

    @staticmethod
    def escape_doc(text: str) -> str:
        return escape(text, quote=False)

    def aggregate_context(self, declaration: AggregateDeclaration) -> dict[str, Any]:
        members = []
        for member in declaration.members:
            default = None
            if member.default is not None:
                default = member.default.text
                self.required_imports.update(member.default.namespaces)
            members.append(
                {
                    "name": member.name,
                    "type": self.translate_type(member.type_ref),
                    "required": member.required,
                    "json_name": cs_string_literal(member.json_name),
                    "default": default,
                    "summary": self.summary_lines(member.description),
                }
            )

        extension_data = None
        if declaration.extension_data is not None:
            self.required_imports.add("System.Collections.Generic")
            extension_data = {"name": declaration.extension_data.name}

        return {
            "name": declaration.name,
            "base": declaration.base,
            "members": members,
            "extension_data": extension_data,
            "summary": self.summary_lines(declaration.description),
        }

    def enumeration_context(self, declaration: EnumerationDeclaration) -> dict[str, Any]:
        string_enum = declaration.underlying == PrimitiveKind.STRING
        members = []
        for member in declaration.members:
            if string_enum:
                literal = cs_string_literal(str(member.value))
            else:
                literal = str(member.value)
            members.append({"name": member.name, "literal": literal})

        return {
            "name": declaration.name,
            "string_enum": string_enum,
            "underlying": "long" if declaration.underlying == PrimitiveKind.INT64 else None,
            "members": members,
            "summary": self.summary_lines(declaration.description),
        }

    def union_context(self, declaration: UnionDeclaration) -> dict[str, Any]:
        variants = []
        for variant in declaration.variants:
            value = None
            if variant.discriminator_value is not None:
                value = cs_string_literal(variant.discriminator_value)
            variants.append({"name": variant.name, "value": value})

        return {
            "name": declaration.name,
            "discriminator": cs_string_literal(declaration.discriminator) if declaration.discriminator else None,
            "variants": variants,
            "variant_names": " | ".join(v.name for v in declaration.variants),
            "summary": self.summary_lines(declaration.description),
        }

    def type_alias_context(self, declaration: TypeAliasDeclaration) -> dict[str, Any]:
        return {
            "name": declaration.name,
            "type": self.translate_type(declaration.target),
            "summary": self.summary_lines(declaration.description),
        }
