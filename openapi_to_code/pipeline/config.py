"""
Configuration for the code generator pipeline.

One configuration object is constant for a whole generation run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

# C# reserved keywords that need escaping
CS_RESERVED_KEYWORDS = [
    "abstract",
    "as",
    "base",
    "bool",
    "break",
    "byte",
    "case",
    "catch",
    "char",
    "checked",
    "class",
    "const",
    "continue",
    "decimal",
    "default",
    "delegate",
    "do",
    "double",
    "else",
    "enum",
    "event",
    "explicit",
    "extern",
    "false",
    "finally",
    "fixed",
    "float",
    "for",
    "foreach",
    "goto",
    "if",
    "implicit",
    "in",
    "int",
    "interface",
    "internal",
    "is",
    "lock",
    "long",
    "namespace",
    "new",
    "null",
    "object",
    "operator",
    "out",
    "override",
    "params",
    "private",
    "protected",
    "public",
    "readonly",
    "record",
    "ref",
    "return",
    "sbyte",
    "sealed",
    "short",
    "sizeof",
    "stackalloc",
    "static",
    "string",
    "struct",
    "switch",
    "this",
    "throw",
    "true",
    "try",
    "typeof",
    "uint",
    "ulong",
    "unchecked",
    "unsafe",
    "ushort",
    "using",
    "virtual",
    "void",
    "volatile",
    "while",
]


class NameStyle(str, Enum):
    """Casing style of generated identifiers."""

    PASCAL = "pascal"  # Default: UserStatus
    CAMEL = "camel"  # userStatus
    SNAKE = "snake"  # user_status


@dataclass
class GeneratorConfig:
    """Configuration options for code generation."""

    # Namespace wrapping all generated types; also qualifies enum defaults
    namespace: str = "GeneratedModels"

    # Emit /// <summary> comments from schema descriptions
    generate_doc_comments: bool = True

    # Emit the auto-generated file header
    generate_file_header: bool = True

    # Casing style of declaration and member names
    name_style: NameStyle = NameStyle.PASCAL

    # IReadOnlyList<T> instead of List<T>
    immutable_arrays: bool = True

    # IReadOnlyDictionary<string, T> instead of Dictionary<string, T>
    immutable_dictionaries: bool = True

    # An optional member with a non-null default is not nullable
    default_non_nullable: bool = True

    # Initialize members to their schema defaults
    add_default_values: bool = True

    # Identifiers that must be escaped in the target language
    reserved_words: list[str] = field(default_factory=lambda: list(CS_RESERVED_KEYWORDS))

    # Maximum depth of allOf/base chains and reference alias chains
    max_composition_depth: int = 32

    @staticmethod
    def from_dict(d: dict) -> GeneratorConfig:
        """Create a config from a dictionary."""
        config = GeneratorConfig()
        for k, v in d.items():
            if k == "name_style" and isinstance(v, str):
                config.name_style = NameStyle(v)
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "namespace": self.namespace,
            "generate_doc_comments": self.generate_doc_comments,
            "generate_file_header": self.generate_file_header,
            "name_style": self.name_style.value,
            "immutable_arrays": self.immutable_arrays,
            "immutable_dictionaries": self.immutable_dictionaries,
            "default_non_nullable": self.default_non_nullable,
            "add_default_values": self.add_default_values,
            "reserved_words": list(self.reserved_words),
            "max_composition_depth": self.max_composition_depth,
        }
