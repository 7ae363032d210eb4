"""
Literal renderer for schema default values.

Converts a default value into a C# literal or constructor expression for the
resolved type of the member it initializes. Values that cannot be written as
a constant expression render as None (no initializer) instead of a lossy
encoding.
"""

from __future__ import annotations

import math
import re
import uuid
from datetime import date, datetime, time
from typing import Any, Callable
from urllib.parse import urlparse

from ..config import GeneratorConfig
from .ir_nodes import (
    CollectionType,
    Declaration,
    EnumerationDeclaration,
    Expression,
    NamedType,
    PrimitiveKind,
    PrimitiveType,
    ResolvedType,
    TypeAliasDeclaration,
    strip_nullable,
)

INT32_RANGE = (-(2**31), 2**31 - 1)
INT64_RANGE = (-(2**63), 2**63 - 1)

# xs:duration, as accepted by XmlConvert.ToTimeSpan
_DURATION = re.compile(r"^-?P(?=\d|T\d)(\d+Y)?(\d+M)?(\d+D)?(T(?=\d)(\d+H)?(\d+M)?(\d+(\.\d+)?S)?)?$")

_CS_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\0": "\\0",
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
}

_REAL_SUFFIXES = {
    PrimitiveKind.DOUBLE: "d",
    PrimitiveKind.FLOAT: "f",
    PrimitiveKind.DECIMAL: "m",
}

# Largest magnitude a literal of each real type can hold: float.MaxValue, decimal.MaxValue
_REAL_LIMITS = {
    PrimitiveKind.DOUBLE: math.inf,
    PrimitiveKind.FLOAT: 3.4028234663852886e38,
    PrimitiveKind.DECIMAL: 7.922816251426433e28,
}

PLACEHOLDER = Expression("default!", is_placeholder=True)


def cs_string_literal(value: str) -> str:
    """Quote and escape a string as a C# regular string literal."""
    parts = []
    for c in value:
        if c in _CS_ESCAPES:
            parts.append(_CS_ESCAPES[c])
        elif ord(c) < 0x20 or ord(c) == 0x7F:
            parts.append(f"\\u{ord(c):04x}")
        else:
            parts.append(c)
    return '"' + "".join(parts) + '"'


def _format_real(value: float) -> str:
    # Shortest text that round-trips: 0.5 -> "0.5", 1.0 -> "1"
    text = repr(float(value))
    if text.endswith(".0"):
        text = text[:-2]
    return text


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class LiteralRenderer:
    """Renders default values as target-language expressions."""

    def __init__(self, config: GeneratorConfig, declarations_lookup: Callable[[str], Declaration | None] | None = None):
        """
        Initialize the renderer.

        Args:
            config: Generation configuration (namespace qualifies enum members)
            declarations_lookup: Finds a declaration by name, for enumeration
                and type-alias defaults
        """
        self.config = config
        self.lookup = declarations_lookup or (lambda name: None)

    @staticmethod
    def placeholder() -> Expression:
        """Initializer that silences null warnings without asserting a value."""
        return PLACEHOLDER

    def initializer(self, value: Any, resolved_type: ResolvedType) -> Expression | None:
        """Member initializer honoring the add_default_values option."""
        expression = self.render(value, resolved_type)
        if expression is None or self.config.add_default_values:
            return expression
        return self.placeholder()

    def render(self, value: Any, resolved_type: ResolvedType) -> Expression | None:
        """
        Render a default value.

        Args:
            value: The raw default from the schema
            resolved_type: The type of the member being initialized

        Returns:
            The expression, or None when the value has no constant encoding
        """
        if value is None:
            return None

        target = strip_nullable(resolved_type)

        if isinstance(target, PrimitiveType):
            return self._render_primitive(value, target.kind)

        if isinstance(target, CollectionType):
            return self._render_collection(value, target)

        if isinstance(target, NamedType):
            return self._render_named(value, target)

        # Maps and anything else structured
        return None

    def _render_collection(self, value: Any, target: CollectionType) -> Expression | None:
        if not isinstance(value, list):
            return None

        elements = []
        for item in value:
            element = self.render(item, target.element)
            if element is None:
                return None
            elements.append(element)

        namespaces = tuple(ns for element in elements for ns in element.namespaces)
        return Expression("[" + ", ".join(e.text for e in elements) + "]", namespaces=namespaces)

    def _render_named(self, value: Any, target: NamedType) -> Expression | None:
        declaration = self.lookup(target.name)

        if isinstance(declaration, EnumerationDeclaration):
            member = declaration.member_for(value)
            if member is None:
                return None
            qualifier = f"{self.config.namespace}." if self.config.namespace else ""
            return Expression(f"{qualifier}{declaration.name}.{member.name}")

        if isinstance(declaration, TypeAliasDeclaration):
            inner = self.render(value, declaration.target)
            if inner is None:
                return None
            return Expression(f"new {declaration.name}({inner.text})", namespaces=inner.namespaces)

        return None

    def _render_primitive(self, value: Any, kind: PrimitiveKind) -> Expression | None:
        if kind == PrimitiveKind.BOOLEAN:
            if isinstance(value, bool):
                return Expression("true" if value else "false")
            return None

        if kind in (PrimitiveKind.INT32, PrimitiveKind.INT64):
            return self._render_integer(value, kind)

        if kind in _REAL_SUFFIXES:
            if not _is_number(value):
                return None
            try:
                value = float(value)
            except OverflowError:
                return None
            if not math.isfinite(value) or abs(value) > _REAL_LIMITS[kind]:
                return None
            return Expression(_format_real(value) + _REAL_SUFFIXES[kind])

        # YAML loaders decode unquoted timestamps
        if kind in (PrimitiveKind.DATE_TIME, PrimitiveKind.DATE) and isinstance(value, date):
            value = value.isoformat()

        if not isinstance(value, str):
            return None

        if kind == PrimitiveKind.STRING:
            return Expression(cs_string_literal(value))

        return self._render_formatted(value, kind)

    @staticmethod
    def _render_integer(value: Any, kind: PrimitiveKind) -> Expression | None:
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if not isinstance(value, int) or isinstance(value, bool):
            return None

        low, high = INT64_RANGE if kind == PrimitiveKind.INT64 else INT32_RANGE
        if not low <= value <= high:
            return None

        if kind == PrimitiveKind.INT64:
            return Expression(f"{value}L")
        return Expression(str(value))

    @staticmethod
    def _render_formatted(value: str, kind: PrimitiveKind) -> Expression | None:
        literal = cs_string_literal(value)

        try:
            if kind == PrimitiveKind.DATE_TIME:
                datetime.fromisoformat(value.replace("Z", "+00:00"))
                return Expression(
                    f"DateTimeOffset.Parse({literal}, CultureInfo.InvariantCulture, DateTimeStyles.AdjustToUniversal)",
                    namespaces=("System.Globalization",),
                )

            if kind == PrimitiveKind.DATE:
                date.fromisoformat(value)
                return Expression(
                    f"DateOnly.Parse({literal}, CultureInfo.InvariantCulture)",
                    namespaces=("System.Globalization",),
                )

            if kind == PrimitiveKind.TIME:
                # TimeOnly.Parse rejects zone designators
                if time.fromisoformat(value).tzinfo is not None:
                    return None
                return Expression(
                    f"TimeOnly.Parse({literal}, CultureInfo.InvariantCulture)",
                    namespaces=("System.Globalization",),
                )

            if kind == PrimitiveKind.UUID:
                uuid.UUID(value)
                return Expression(f"Guid.Parse({literal})")
        except ValueError:
            return None

        if kind == PrimitiveKind.DURATION:
            if not _DURATION.match(value):
                return None
            return Expression(f"XmlConvert.ToTimeSpan({literal})", namespaces=("System.Xml",))

        if kind == PrimitiveKind.URI:
            if not urlparse(value).scheme:
                return None
            return Expression(f"new Uri({literal})")

        # Byte arrays, streams and opaque objects
        return None
