"""
Schema analyzer that synthesizes declarations from a schema document.

Phase 2 of the pipeline. Pass 1 classifies every schema, settles allOf
bases and member properties, discovers inline declarations and allocates
all declaration names in one batch. Pass 2 assembles aggregates,
enumerations, unions and type aliases into a DeclarationSet ready for a
syntax backend.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Iterator

from ..config import GeneratorConfig
from ..schema_ast.nodes import SchemaDocument, SchemaKind, SchemaNode, SchemaRef
from .errors import Diagnostic, DiagnosticCode
from .ir_nodes import (
    AggregateDeclaration,
    Declaration,
    DeclarationKind,
    DeclarationSet,
    EnumerationDeclaration,
    EnumMember,
    ExtensionData,
    Member,
    PrimitiveKind,
    TypeAliasDeclaration,
    UnionDeclaration,
    UnionVariant,
)
from .literal_renderer import INT32_RANGE, LiteralRenderer
from .name_resolver import NameRegistry
from .type_resolver import NameTable, TypeResolver, has_non_null_default

logger = logging.getLogger(__name__)

ENUM_BASE_KINDS = (SchemaKind.STRING, SchemaKind.INTEGER)


@dataclass
class InlineDeclaration:
    """A declaration synthesized for a non-top-level schema node."""

    kind: DeclarationKind
    raw_name: str
    node: SchemaNode
    owner: str  # Raw name of the top-level schema that introduced it
    nodes: list[SchemaNode] = field(default_factory=list)  # All nodes sharing the declaration
    name: str = ""


@dataclass
class PropertySource:
    """A property contributing a member to an aggregate."""

    key: str
    node: SchemaNode | SchemaRef
    required: bool = False
    flattened: bool = False  # Copied from another aggregate named in allOf


@dataclass
class CompositionEdge:
    """An allOf reference from one aggregate to another."""

    target: str
    is_base: bool = False
    dropped: bool = False


def enum_values(node: SchemaNode) -> list[Any]:
    """Non-null enum values, first occurrence kept."""
    values = []
    for value in node.enum:
        if value is None:
            continue
        if any(type(v) is type(value) and v == value for v in values):
            continue
        values.append(value)
    return values


def is_enumeration(node: SchemaNode) -> bool:
    return bool(enum_values(node)) and node.kind.base in ENUM_BASE_KINDS


def inline_raw_name(owner: str, key: str) -> str:
    """Raw name of an inline declaration: owner and property as separate words."""
    return " ".join(part for part in (owner, key) if part)


class SchemaAnalyzer:
    """Synthesizes a DeclarationSet from a SchemaDocument."""

    def __init__(self, config: GeneratorConfig, registry: NameRegistry | None = None):
        """
        Initialize the analyzer.

        Args:
            config: Code generation configuration
            registry: Name registry for the next run (a fresh one is created
                per run when omitted)
        """
        self.config = config
        self._injected_registry = registry

    def analyze(self, document: SchemaDocument) -> DeclarationSet:
        """
        Analyze a schema document and build its declarations.

        Args:
            document: The parsed schema document

        Returns:
            DeclarationSet with every declaration and the diagnostics recorded

        Raises:
            NameExhaustionError: If a unique name cannot be allocated
        """
        self._reset(document)

        # Pass 1: classification and naming
        self._resolve_aliases()
        self._classify_schemas()
        self._plan_aggregates()
        self._discover_inline_declarations()
        self._allocate_names()

        # Pass 2: assembly
        self._build_enumerations()
        self._build_type_aliases()
        self._build_inline_aggregates()
        self._build_aggregates()
        self._build_unions()
        self._attach_union_bases()

        result = self._collect()

        for diagnostic in result.diagnostics:
            logger.warning("%s", diagnostic)
        logger.debug("Synthesized %d declarations from %d schemas", len(result), len(document.schemas))

        return result

    def _reset(self, document: SchemaDocument) -> None:
        self.document = document
        self.registry = self._injected_registry or NameRegistry.from_config(self.config)
        self._injected_registry = None

        self.diagnostics: list[Diagnostic] = []
        self.names = NameTable()
        self.resolver = TypeResolver(self.config, self.names, self.diagnostics)

        # Declarations built so far, by final name
        self._built: dict[str, Declaration] = {}
        self.renderer = LiteralRenderer(self.config, self._built.get)

        # Raw top-level name -> classification / final name
        self._kinds: dict[str, DeclarationKind] = {}
        self._top_names: dict[str, str] = {}

        # Raw alias name -> raw name of the schema node it stands for
        self._alias_targets: dict[str, str] = {}

        self._inline: list[InlineDeclaration] = []
        self._inline_by_owner: dict[str, list[InlineDeclaration]] = {}
        self._enum_groups: dict[tuple[str, int, str], InlineDeclaration] = {}

        # Composition state, per raw aggregate name
        self._edges: dict[str, list[CompositionEdge]] = {}
        self._full_properties: dict[str, list[PropertySource]] = {}
        self._own_properties: dict[str, list[PropertySource]] = {}
        self._bases: dict[str, str | None] = {}
        self._aggregate_order: list[str] = []  # Bases before derived aggregates
        self._unions: list[UnionDeclaration] = []
        self._union_contexts: dict[str, str] = {}  # Union name -> raw top-level name for diagnostics

    def _diagnose(self, code: DiagnosticCode, message: str, schema: str = "") -> None:
        self.diagnostics.append(Diagnostic(code, message, schema=schema))

    def _schema_nodes(self) -> Iterator[tuple[str, SchemaNode]]:
        for raw, node in self.document.schemas.items():
            if isinstance(node, SchemaNode):
                yield raw, node

    # ------------------------------------------------------------------
    # Pass 1
    # ------------------------------------------------------------------

    def _resolve_aliases(self) -> None:
        """Follow top-level $ref chains to the schema node they stand for."""
        schemas = self.document.schemas
        for raw, entry in schemas.items():
            if not isinstance(entry, SchemaRef):
                continue

            path = [raw]
            target = entry.target
            while True:
                node = schemas.get(target)
                if node is None:
                    self._diagnose(DiagnosticCode.UNRESOLVED_REFERENCE, f"Alias target {target!r} does not exist", raw)
                    self.names.opaque.add(raw)
                    break
                if target in path:
                    chain = " -> ".join(path + [target])
                    self._diagnose(DiagnosticCode.COMPOSITION_CYCLE, f"Reference cycle {chain}", raw)
                    self.names.opaque.add(raw)
                    break
                if isinstance(node, SchemaNode):
                    self._alias_targets[raw] = target
                    break
                if len(path) >= self.config.max_composition_depth:
                    self._diagnose(DiagnosticCode.DEPTH_EXCEEDED, f"Reference chain longer than {len(path)}", raw)
                    self.names.opaque.add(raw)
                    break
                path.append(target)
                target = node.target

    def _target_schema(self, raw: str) -> str | None:
        """Raw name of the top-level schema node a reference ends at."""
        if isinstance(self.document.schemas.get(raw), SchemaNode):
            return raw
        return self._alias_targets.get(raw)

    def _is_untagged_union(self, raw: str) -> bool:
        return self._kinds.get(raw) == DeclarationKind.UNION and self.document.schemas[raw].discriminator is None

    def _classify_schemas(self) -> None:
        for raw, node in self._schema_nodes():
            self._kinds[raw] = self.classify(node)

    @staticmethod
    def classify(node: SchemaNode) -> DeclarationKind:
        """Decide which declaration a top-level schema node becomes."""
        if is_enumeration(node):
            return DeclarationKind.ENUMERATION

        if len(node.non_null_union_members()) >= 2:
            return DeclarationKind.UNION

        if node.properties or node.all_of:
            return DeclarationKind.AGGREGATE

        # A lone [T, null] union wraps T
        if node.union_members:
            return DeclarationKind.TYPE_ALIAS

        if node.kind.base in (SchemaKind.OBJECT, SchemaKind.NONE):
            return DeclarationKind.AGGREGATE

        return DeclarationKind.TYPE_ALIAS

    def _plan_aggregates(self) -> None:
        """Choose bases and member properties of top-level aggregates.

        The allOf graph is walked iteratively with an explicit path stack;
        an edge back onto the path is a composition cycle and is dropped.
        """
        aggregates = [raw for raw, _ in self._schema_nodes() if self._kinds[raw] == DeclarationKind.AGGREGATE]
        for raw in aggregates:
            self._edges[raw] = self._composition_edges(raw)

        state: dict[str, str] = {}  # raw -> "active" | "done"
        for start in aggregates:
            if start in state:
                continue

            state[start] = "active"
            path: list[tuple[str, Iterator[CompositionEdge]]] = [(start, iter(self._edges[start]))]
            while path:
                current, edges = path[-1]
                descended = False
                for edge in edges:
                    status = state.get(edge.target)
                    if status == "done":
                        continue
                    if status == "active":
                        edge.dropped = True
                        chain = " -> ".join([raw for raw, _ in path] + [edge.target])
                        self._diagnose(DiagnosticCode.COMPOSITION_CYCLE, f"allOf cycle {chain}", current)
                        continue
                    if len(path) >= self.config.max_composition_depth:
                        edge.dropped = True
                        self._diagnose(
                            DiagnosticCode.DEPTH_EXCEEDED,
                            f"allOf chain deeper than {self.config.max_composition_depth} at {edge.target!r}",
                            current,
                        )
                        continue
                    state[edge.target] = "active"
                    path.append((edge.target, iter(self._edges[edge.target])))
                    descended = True
                    break

                if not descended:
                    path.pop()
                    state[current] = "done"
                    self._plan_aggregate(current)

    def _composition_edges(self, raw: str) -> list[CompositionEdge]:
        edges: list[CompositionEdge] = []
        seen: set[str] = set()
        for ref in self._all_of_references(self.document.schemas[raw]):
            target = self._target_schema(ref.target)
            if target is None:
                self._diagnose(
                    DiagnosticCode.UNRESOLVED_REFERENCE,
                    f"allOf reference {ref.target!r} does not resolve to a schema; its members are dropped",
                    raw,
                )
                continue
            if self._kinds.get(target) != DeclarationKind.AGGREGATE:
                # Variants may name their own union in allOf; the union becomes their base later
                if not self._lists_variant(target, raw):
                    self._diagnose(
                        DiagnosticCode.UNRESOLVED_REFERENCE,
                        f"allOf reference {ref.target!r} is not an aggregate; its members are dropped",
                        raw,
                    )
                continue
            if target in seen:
                continue
            seen.add(target)
            edges.append(CompositionEdge(target=target, is_base=not edges))
        return edges

    def _lists_variant(self, union: str, raw: str) -> bool:
        """Whether a top-level union names a schema among its variants."""
        if self._kinds.get(union) != DeclarationKind.UNION:
            return False
        node = self.document.schemas[union]
        refs = [member for member in node.non_null_union_members() if isinstance(member, SchemaRef)]
        if node.discriminator is not None:
            refs.extend(node.discriminator.mapping.values())
        return any(self._target_schema(ref.target) == raw for ref in refs)

    def _all_of_references(self, node: SchemaNode) -> Iterator[SchemaRef]:
        for part in node.all_of:
            if isinstance(part, SchemaRef):
                yield part
            else:
                yield from self._all_of_references(part)

    def _plan_aggregate(self, raw: str) -> None:
        node = self.document.schemas[raw]
        edges = {edge.target: edge for edge in self._edges[raw]}

        base = None
        for edge in self._edges[raw]:
            if edge.is_base and not edge.dropped:
                base = edge.target

        ancestor_keys = {p.key for p in self._full_properties.get(base, [])} if base else set()

        # Own properties: allOf parts in order, then the schema's own properties
        own: list[PropertySource] = []
        seen = set(ancestor_keys)

        for source in self._part_properties(node, node.required, edges):
            if source.key not in seen:
                seen.add(source.key)
                own.append(source)

        self._full_properties[raw] = self._full_properties.get(base, []) + own if base else list(own)
        self._own_properties[raw] = own
        self._bases[raw] = base
        self._aggregate_order.append(raw)

    def _discover_inline_declarations(self) -> None:
        """Find inline declarations in the properties that become members.

        Properties an aggregate inherits or copies from another aggregate
        are discovered under the aggregate that declares them.
        """
        for raw, node in self._schema_nodes():
            kind = self._kinds[raw]
            if kind == DeclarationKind.AGGREGATE:
                for source in self._own_properties[raw]:
                    if not source.flattened:
                        self._discover(raw, raw, source.key, source.node)
            elif kind == DeclarationKind.TYPE_ALIAS and node.kind.base == SchemaKind.ARRAY:
                self._discover(raw, "", f"{raw} item", node.items)

    def _discover_in_object(self, top: str, owner: str, node: SchemaNode) -> None:
        for part in node.all_of:
            if isinstance(part, SchemaNode):
                self._discover_in_object(top, owner, part)
        for key, prop in node.properties.items():
            self._discover(top, owner, key, prop)

    def _discover(self, top: str, owner: str, key: str, node: SchemaNode | SchemaRef | None) -> None:
        """Find inline declarations in one property node."""
        if not isinstance(node, SchemaNode):
            return

        if is_enumeration(node):
            group_key = (key, node.kind.base.value, json.dumps(enum_values(node), default=str))
            inline = self._enum_groups.get(group_key)
            if inline is None:
                inline = self._add_inline(DeclarationKind.ENUMERATION, key, node, top)
                self._enum_groups[group_key] = inline
            inline.nodes.append(node)
            return

        non_null = node.non_null_union_members()
        if len(non_null) >= 2:
            if node.discriminator is not None:
                inline = self._add_inline(DeclarationKind.UNION, inline_raw_name(owner, key), node, top)
                inline.nodes.append(node)
            return

        if len(non_null) == 1:
            self._discover(top, owner, key, non_null[0])
            return

        base = node.kind.base
        if base == SchemaKind.ARRAY:
            self._discover(top, owner, key, node.items)
            return

        if node.properties and not node.all_of and base in (SchemaKind.OBJECT, SchemaKind.NONE):
            inline = self._add_inline(DeclarationKind.AGGREGATE, inline_raw_name(owner, key), node, top)
            inline.nodes.append(node)
            self._discover_in_object(top, inline.raw_name, node)
            return

        if node.additional_properties is not None:
            self._discover(top, owner, key, node.additional_properties)

    def _add_inline(self, kind: DeclarationKind, raw_name: str, node: SchemaNode, owner: str) -> InlineDeclaration:
        inline = InlineDeclaration(kind=kind, raw_name=raw_name, node=node, owner=owner)
        self._inline.append(inline)
        self._inline_by_owner.setdefault(owner, []).append(inline)
        return inline

    def _allocate_names(self) -> None:
        """Allocate every declaration name in one document-ordered batch."""
        raws: list[str] = []
        targets: list[str | InlineDeclaration] = []
        for raw, _ in self._schema_nodes():
            raws.append(raw)
            targets.append(raw)
            for inline in self._inline_by_owner.get(raw, []):
                raws.append(inline.raw_name)
                targets.append(inline)

        for target, name in zip(targets, self.registry.allocate(raws)):
            if isinstance(target, InlineDeclaration):
                target.name = name
                for node in target.nodes:
                    self.names.inline[id(node)] = name
            else:
                self._top_names[target] = name
                if self._is_untagged_union(target):
                    # Referenced untagged unions have no precise encoding
                    self.names.opaque.add(target)
                else:
                    self.names.references[target] = name

        for alias, target in self._alias_targets.items():
            if target in self.names.opaque:
                self.names.opaque.add(alias)
            else:
                self.names.references[alias] = self._top_names[target]

        logger.debug("Allocated %d declaration names", len(raws))

    # ------------------------------------------------------------------
    # Pass 2
    # ------------------------------------------------------------------

    def _build_enumerations(self) -> None:
        for raw, node in self._schema_nodes():
            if self._kinds[raw] == DeclarationKind.ENUMERATION:
                self._built[self._top_names[raw]] = self._analyze_enumeration(self._top_names[raw], raw, node)

        for inline in self._inline:
            if inline.kind == DeclarationKind.ENUMERATION:
                self._built[inline.name] = self._analyze_enumeration(inline.name, inline.raw_name, inline.node)

    def _analyze_enumeration(self, name: str, raw: str, node: SchemaNode) -> EnumerationDeclaration:
        values = enum_values(node)

        underlying = PrimitiveKind.STRING
        if node.kind.base == SchemaKind.INTEGER:
            low, high = INT32_RANGE
            wide = (node.format or "").lower() == "int64" or any(
                isinstance(v, int) and not low <= v <= high for v in values
            )
            underlying = PrimitiveKind.INT64 if wide else PrimitiveKind.INT32

        scope = self.registry.scope(enclosing_name=name)
        member_names = scope.allocate([str(v) for v in values])

        return EnumerationDeclaration(
            name=name,
            original_name=raw,
            underlying=underlying,
            members=[EnumMember(name=n, value=v) for n, v in zip(member_names, values)],
            description=node.description,
        )

    def _build_type_aliases(self) -> None:
        for raw, node in self._schema_nodes():
            if self._kinds[raw] != DeclarationKind.TYPE_ALIAS:
                continue
            name = self._top_names[raw]
            self.resolver.context = raw
            self._built[name] = TypeAliasDeclaration(
                name=name,
                original_name=raw,
                target=self.resolver.resolve(node),
                description=node.description,
            )

    def _build_inline_aggregates(self) -> None:
        for inline in self._inline:
            if inline.kind != DeclarationKind.AGGREGATE:
                continue
            node = inline.node
            properties = [
                PropertySource(key=key, node=prop, required=key in node.required) for key, prop in node.properties.items()
            ]
            self._built[inline.name] = self._analyze_aggregate(
                inline.name, inline.raw_name, node, base=None, properties=properties, context=inline.owner
            )

    def _build_aggregates(self) -> None:
        """Build top-level aggregates, bases before the aggregates deriving from them."""
        for raw in self._aggregate_order:
            base = self._bases[raw]
            name = self._top_names[raw]
            self._built[name] = self._analyze_aggregate(
                name,
                raw,
                self.document.schemas[raw],
                base=self._top_names[base] if base else None,
                properties=self._own_properties[raw],
                context=raw,
            )

    def _part_properties(
        self, node: SchemaNode, required: list[str], edges: dict[str, CompositionEdge]
    ) -> Iterator[PropertySource]:
        required_keys = set(required) | set(node.required)
        for part in node.all_of:
            if isinstance(part, SchemaRef):
                edge = edges.get(self._target_schema(part.target) or "")
                if edge is None or edge.is_base or edge.dropped:
                    continue
                # Referenced aggregates other than the base are flattened in
                for source in self._full_properties.get(edge.target, []):
                    yield replace(source, flattened=True)
            else:
                yield from self._part_properties(part, list(required_keys), edges)

        for key, prop in node.properties.items():
            yield PropertySource(key=key, node=prop, required=key in required_keys)

    def _ancestors(self, base: str | None) -> Iterator[AggregateDeclaration]:
        visited = set()
        while base is not None and base not in visited:
            visited.add(base)
            declaration = self._built.get(base)
            if not isinstance(declaration, AggregateDeclaration):
                return
            yield declaration
            base = declaration.base

    def _analyze_aggregate(
        self,
        name: str,
        raw: str,
        node: SchemaNode,
        base: str | None,
        properties: list[PropertySource],
        context: str,
    ) -> AggregateDeclaration:
        """
        Build one aggregate from its own (non-inherited) properties.

        Args:
            name: Final declaration name
            raw: Original schema key
            node: Schema node of the aggregate
            base: Final name of the base aggregate
            properties: Properties to turn into members
            context: Raw top-level name for diagnostics

        Returns:
            The aggregate declaration
        """
        self.resolver.context = context

        # Inherited member names are taken in this aggregate's scope
        scope = self.registry.scope(enclosing_name=name)
        inherited_extension = False
        for ancestor in self._ancestors(base):
            for member in ancestor.members:
                scope.reserve(member.name)
            if ancestor.extension_data is not None:
                scope.reserve(ancestor.extension_data.name)
                inherited_extension = True

        member_names = scope.allocate([p.key for p in properties])

        members = []
        for member_name, source in zip(member_names, properties):
            has_default = has_non_null_default(source.node)
            type_ref = self.resolver.resolve(source.node, owning_required=source.required, has_default=has_default)
            default = None
            if has_default:
                default = self.renderer.initializer(source.node.default, type_ref)
            members.append(
                Member(
                    name=member_name,
                    type_ref=type_ref,
                    required=source.required,
                    default=default,
                    json_name=source.key,
                    description=source.node.description,
                )
            )

        extension_data = None
        if node.additional_properties is not None and not inherited_extension:
            extension_data = ExtensionData(
                name=scope.allocate_one("AdditionalProperties"),
                value_type=self.resolver.resolve(node.additional_properties),
            )

        return AggregateDeclaration(
            name=name,
            original_name=raw,
            base=base,
            members=members,
            extension_data=extension_data,
            description=node.description,
        )

    def _build_unions(self) -> None:
        for raw, node in self._schema_nodes():
            if self._kinds[raw] == DeclarationKind.UNION:
                self._built[self._top_names[raw]] = self._analyze_union(self._top_names[raw], raw, node, raw)

        for inline in self._inline:
            if inline.kind == DeclarationKind.UNION:
                self._built[inline.name] = self._analyze_union(inline.name, inline.raw_name, inline.node, inline.owner)

    def _analyze_union(self, name: str, raw: str, node: SchemaNode, context: str) -> UnionDeclaration:
        union = UnionDeclaration(name=name, original_name=raw, description=node.description)
        discriminator = node.discriminator

        candidates: list[tuple[str, str | None]] = []
        if discriminator is not None:
            union.discriminator = discriminator.property_name
            if discriminator.mapping:
                candidates = [(ref.target, value) for value, ref in discriminator.mapping.items()]
            else:
                candidates = self._referenced_members(node, context, keyed=True)
        else:
            candidates = self._referenced_members(node, context, keyed=False)

        seen: set[str] = set()
        for target, value in candidates:
            variant_name = self._variant_name(target)
            if variant_name is None:
                self._diagnose(
                    DiagnosticCode.UNRESOLVED_DISCRIMINATOR_TARGET,
                    f"Variant {target!r} of union {name} is not an aggregate declaration; dropped",
                    context,
                )
                continue
            if variant_name in seen:
                continue
            seen.add(variant_name)
            union.variants.append(UnionVariant(name=variant_name, discriminator_value=value))

        self._unions.append(union)
        self._union_contexts[union.name] = context
        return union

    def _referenced_members(self, node: SchemaNode, context: str, keyed: bool) -> list[tuple[str, str | None]]:
        members = []
        for member in node.non_null_union_members():
            if isinstance(member, SchemaRef):
                members.append((member.target, member.target if keyed else None))
            else:
                self._diagnose(
                    DiagnosticCode.UNSUPPORTED_UNION_VARIANT,
                    "Inline union member cannot become a variant; dropped",
                    context,
                )
        return members

    def _variant_name(self, raw_target: str) -> str | None:
        target = self._target_schema(raw_target)
        if target is None or self._kinds.get(target) != DeclarationKind.AGGREGATE:
            return None
        return self._top_names[target]

    def _attach_union_bases(self) -> None:
        """Variants without a base of their own derive from their union.

        A variant that ends up deriving from something else cannot be
        serialized through the union and is dropped from it.
        """
        for union in self._unions:
            for variant in union.variants:
                declaration = self._built[variant.name]
                if isinstance(declaration, AggregateDeclaration) and declaration.base is None:
                    declaration.base = union.name

        for union in self._unions:
            variants = []
            for variant in union.variants:
                if self._derives_from(variant.name, union.name):
                    variants.append(variant)
                    continue
                self._diagnose(
                    DiagnosticCode.UNSUPPORTED_UNION_VARIANT,
                    f"Variant {variant.name} of union {union.name} derives from {self._built[variant.name].base}; dropped",
                    self._union_contexts[union.name],
                )
            union.variants = variants

    def _derives_from(self, name: str, ancestor: str) -> bool:
        declaration = self._built.get(name)
        visited = set()
        while isinstance(declaration, AggregateDeclaration) and declaration.base not in (None, *visited):
            if declaration.base == ancestor:
                return True
            visited.add(declaration.base)
            declaration = self._built.get(declaration.base)
        return False

    def _collect(self) -> DeclarationSet:
        result = DeclarationSet(diagnostics=self.diagnostics)
        for raw, _ in self._schema_nodes():
            result.add(self._built[self._top_names[raw]])
            for inline in self._inline_by_owner.get(raw, []):
                result.add(self._built[inline.name])
        return result
