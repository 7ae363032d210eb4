"""
Pipeline generator orchestrating the generation phases.

1. Parser: document dict -> SchemaDocument
2. Analyzer: SchemaDocument -> DeclarationSet
3. Backend: DeclarationSet -> source code
"""

from __future__ import annotations

import logging
from typing import Any

from .analyzer import SchemaAnalyzer
from .analyzer.ir_nodes import DeclarationSet
from .analyzer.name_resolver import NameRegistry
from .backends import CSharpBackend
from .config import GeneratorConfig
from .schema_ast import SchemaDocument, SchemaParser

logger = logging.getLogger(__name__)


class PipelineGenerator:
    """Generates C# declarations from an OpenAPI document."""

    def __init__(
        self,
        document: dict[str, Any],
        config: GeneratorConfig | None = None,
        generation_comment: str = "",
    ):
        """
        Initialize the generator.

        Args:
            document: The decoded OpenAPI / JSON Schema document
            config: Code generation configuration
            generation_comment: Extra header line (e.g. the command line used)
        """
        self.document = document
        self.config = config or GeneratorConfig()
        self.generation_comment = generation_comment

        self.parser = SchemaParser()
        self.backend = CSharpBackend(self.config)

    def parse(self) -> SchemaDocument:
        return self.parser.parse(self.document)

    def synthesize(self, registry: NameRegistry | None = None) -> DeclarationSet:
        """
        Run the parser and the analyzer.

        Args:
            registry: Pre-seeded name registry (a fresh one when omitted)

        Returns:
            The declaration set, including diagnostics
        """
        schema_document = self.parse()
        logger.debug("Parsed %d schemas from %r", len(schema_document.schemas), schema_document.title)
        return SchemaAnalyzer(self.config, registry).analyze(schema_document)

    def generate(self) -> str:
        """
        Generate the source file.

        Returns:
            Generated C# code
        """
        declarations = self.synthesize()
        return self.backend.generate(declarations, self.generation_comment)
