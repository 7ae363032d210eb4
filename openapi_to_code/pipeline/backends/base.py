"""
Base class for code generation backends.

Defines the interface that all language-specific backends must implement.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import jinja2

from ..analyzer.errors import CodeGenerationError
from ..analyzer.ir_nodes import (
    AggregateDeclaration,
    Declaration,
    DeclarationKind,
    DeclarationSet,
    EnumerationDeclaration,
    ResolvedType,
    TypeAliasDeclaration,
    UnionDeclaration,
)
from ..config import GeneratorConfig


class CodeBackend(ABC):
    """Abstract base class for code generation backends."""

    # Template directory name
    TEMPLATE_LANG: str = ""

    # File extension
    FILE_EXTENSION: str = ""

    # Declaration kind -> template name stem
    TEMPLATE_NAMES = {
        DeclarationKind.AGGREGATE: "aggregate",
        DeclarationKind.ENUMERATION: "enumeration",
        DeclarationKind.UNION: "union",
        DeclarationKind.TYPE_ALIAS: "type_alias",
    }

    def __init__(self, config: GeneratorConfig):
        """
        Initialize the backend.

        Args:
            config: Code generation configuration
        """
        self.config = config
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = Path(__file__).parent.parent.parent / "templates" / self.TEMPLATE_LANG
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=True,
        )

        self.prefix_template = self.jinja_env.get_template(f"prefix.{self.FILE_EXTENSION}.jinja2")
        self.templates = {
            kind: self.jinja_env.get_template(f"{stem}.{self.FILE_EXTENSION}.jinja2")
            for kind, stem in self.TEMPLATE_NAMES.items()
        }

    @abstractmethod
    def generate(self, declarations: DeclarationSet, generation_comment: str = "") -> str:
        """
        Generate code from a declaration set.

        Args:
            declarations: The synthesized declarations
            generation_comment: Extra line for the file header

        Returns:
            Generated code as a string
        """

    @abstractmethod
    def translate_type(self, type_ref: ResolvedType) -> str:
        """
        Translate a resolved type to a language-specific type string.

        Args:
            type_ref: The type reference

        Returns:
            Language-specific type string
        """

    @abstractmethod
    def aggregate_context(self, declaration: AggregateDeclaration) -> dict[str, Any]:
        pass

    @abstractmethod
    def enumeration_context(self, declaration: EnumerationDeclaration) -> dict[str, Any]:
        pass

    @abstractmethod
    def union_context(self, declaration: UnionDeclaration) -> dict[str, Any]:
        pass

    @abstractmethod
    def type_alias_context(self, declaration: TypeAliasDeclaration) -> dict[str, Any]:
        pass

    def render_declaration(self, declaration: Declaration) -> str:
        """
        Render one declaration with the template for its kind.

        Raises:
            CodeGenerationError: For a declaration kind without a template
        """
        contexts = {
            DeclarationKind.AGGREGATE: self.aggregate_context,
            DeclarationKind.ENUMERATION: self.enumeration_context,
            DeclarationKind.UNION: self.union_context,
            DeclarationKind.TYPE_ALIAS: self.type_alias_context,
        }
        context_builder = contexts.get(declaration.kind)
        if context_builder is None:
            raise CodeGenerationError(f"No template for declaration kind {declaration.kind!r}")
        return self.templates[declaration.kind].render(context_builder(declaration))

    def summary_lines(self, description: str | None) -> list[str]:
        """Documentation comment lines for a description (empty when disabled)."""
        if not self.config.generate_doc_comments or not description:
            return []
        return [self.escape_doc(line.rstrip()) for line in description.strip().splitlines()]

    @staticmethod
    def escape_doc(text: str) -> str:
        return text
