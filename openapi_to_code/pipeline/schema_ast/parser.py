"""
OpenAPI schema parser that builds the schema graph.

Phase 1 of the pipeline: read the schema map of an OpenAPI 3.x, Swagger 2
or JSON Schema document into SchemaNode / SchemaRef objects, without
resolving references or doing language-specific processing.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import unquote

from ..analyzer.errors import SchemaParseError
from .nodes import KIND_BY_NAME, Discriminator, SchemaDocument, SchemaKind, SchemaNode, SchemaRef


def ref_target(ref: str) -> str:
    """
    Reduce a $ref string to the raw name of the schema it points at.

    Args:
        ref: Reference such as "#/components/schemas/Pet" or "Pet"

    Returns:
        The final path segment with JSON pointer escapes decoded
    """
    segment = ref.rsplit("/", 1)[-1]
    segment = segment.rsplit("#", 1)[-1]
    return unquote(segment).replace("~1", "/").replace("~0", "~")


def infer_enum_kind(values: list[Any]) -> SchemaKind:
    """Infer the kind of an enum declared without a type."""
    present = [v for v in values if v is not None]
    if not present:
        return SchemaKind.NONE
    if all(isinstance(v, str) for v in present):
        return SchemaKind.STRING
    if all(isinstance(v, bool) for v in present):
        return SchemaKind.BOOLEAN
    if all(isinstance(v, int) and not isinstance(v, bool) for v in present):
        return SchemaKind.INTEGER
    if all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in present):
        return SchemaKind.NUMBER
    return SchemaKind.NONE


class SchemaParser:
    """Parses an API description document into a SchemaDocument."""

    def parse(self, document: Any) -> SchemaDocument:
        """
        Parse a document into the schema graph.

        Args:
            document: The decoded JSON/YAML document

        Returns:
            SchemaDocument with schemas in document order

        Raises:
            SchemaParseError: If the document or its schema map is not a mapping
        """
        if not isinstance(document, Mapping):
            raise SchemaParseError(f"Expected a mapping at the document root, got {type(document).__name__}")

        schemas = self._schema_map(document)
        if not isinstance(schemas, Mapping):
            raise SchemaParseError("The schema map must be a mapping from schema name to schema")

        info = document.get("info")
        title = info.get("title", "") if isinstance(info, Mapping) else document.get("title", "")

        result = SchemaDocument(title=title or "")
        for name, schema in schemas.items():
            # Skip comment entries
            if not isinstance(schema, (Mapping, bool)) or str(name).startswith("_comment"):
                continue
            result.schemas[str(name)] = self.parse_node(schema)

        return result

    @staticmethod
    def _schema_map(document: Mapping) -> Any:
        components = document.get("components")
        if isinstance(components, Mapping) and "schemas" in components:
            return components["schemas"] or {}
        if "definitions" in document:
            return document["definitions"] or {}
        return document.get("$defs") or {}

    def parse_node(self, schema: Any) -> SchemaNode | SchemaRef:
        """
        Parse a schema node recursively.

        Args:
            schema: The schema dictionary (or a boolean schema)

        Returns:
            SchemaRef for references, SchemaNode otherwise
        """
        # Boolean schemas accept anything (or nothing): both are opaque
        if not isinstance(schema, Mapping):
            return SchemaNode()

        if isinstance(schema.get("$ref"), str):
            return self._parse_ref(schema)

        node = SchemaNode(
            kind=self._parse_kind(schema),
            format=schema.get("format") if isinstance(schema.get("format"), str) else None,
            description=schema.get("description"),
        )

        if isinstance(schema.get("enum"), list):
            node.enum = list(schema["enum"])
            if None in node.enum:
                node.kind |= SchemaKind.NULL
            if node.kind.base == SchemaKind.NONE:
                node.kind |= infer_enum_kind(node.enum)

        if "default" in schema:
            node.default = schema["default"]
            node.has_default = True

        self._parse_object(schema, node)

        items = schema.get("items")
        if isinstance(items, list):
            # Tuple validation: the first position stands for the element type
            items = items[0] if items else None
        if items is not None:
            node.items = self.parse_node(items)
            if node.kind.base == SchemaKind.NONE:
                node.kind |= SchemaKind.ARRAY

        node.all_of = self._parse_list(schema.get("allOf"))
        node.one_of = self._parse_list(schema.get("oneOf"))
        node.any_of = self._parse_list(schema.get("anyOf"))

        if isinstance(schema.get("discriminator"), Mapping):
            node.discriminator = self._parse_discriminator(schema["discriminator"])

        return node

    def _parse_ref(self, schema: Mapping) -> SchemaRef:
        ref = SchemaRef(target=ref_target(schema["$ref"]), description=schema.get("description"))
        if "default" in schema:
            ref.default = schema["default"]
            ref.has_default = True
        return ref

    @staticmethod
    def _parse_kind(schema: Mapping) -> SchemaKind:
        kind = SchemaKind.NONE

        type_value = schema.get("type")
        type_names = type_value if isinstance(type_value, list) else [type_value]
        for type_name in type_names:
            if isinstance(type_name, str):
                kind |= KIND_BY_NAME.get(type_name, SchemaKind.NONE)

        # OpenAPI 3.0 and Swagger 2 spellings of a nullable type
        if schema.get("nullable") is True or schema.get("x-nullable") is True:
            kind |= SchemaKind.NULL

        return kind

    def _parse_object(self, schema: Mapping, node: SchemaNode) -> None:
        properties = schema.get("properties")
        if isinstance(properties, Mapping):
            for name, prop in properties.items():
                node.properties[str(name)] = self.parse_node(prop)

        required = schema.get("required")
        if isinstance(required, list):
            node.required = [str(r) for r in required]

        additional = schema.get("additionalProperties")
        if additional is True:
            node.additional_properties = SchemaNode()
        elif isinstance(additional, Mapping):
            node.additional_properties = self.parse_node(additional)

        if node.additional_properties is not None and node.kind.base == SchemaKind.NONE and not node.properties:
            node.kind |= SchemaKind.OBJECT

    def _parse_list(self, value: Any) -> list[SchemaNode | SchemaRef]:
        if not isinstance(value, list):
            return []
        return [self.parse_node(item) for item in value]

    @staticmethod
    def _parse_discriminator(value: Mapping) -> Discriminator:
        discriminator = Discriminator(property_name=str(value.get("propertyName", "")))
        mapping = value.get("mapping")
        if isinstance(mapping, Mapping):
            for literal, ref in mapping.items():
                if isinstance(ref, str):
                    discriminator.mapping[str(literal)] = SchemaRef(target=ref_target(ref))
        return discriminator
