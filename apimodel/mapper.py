# File: apimodel/mapper.py
"""
apimodel - Model Mapper
=========================
Groups endpoints and schemas into logical models.

Two flows feed the code generator:

- ``map_models`` (endpoint driven): every endpoint is assigned to a model
  named after its first tag or first static path segment.  The model
  collects the endpoint's CRUD binding, the component schemas referenced
  from its parameters and bodies, and the properties of those schemas.
- ``map_schema_models`` (schema driven): one model per component schema
  that is an object with properties, optionally plus inline body models.

Relationship detection is a shape heuristic over each model's merged
attributes:

    =============================== =========== ============================
    property shape                  type        foreign key
    =============================== =========== ============================
    bare ``$ref``                   belongsTo   ``{property}_id``
    array whose items are ``$ref``  hasMany     ``{snake(model)}_id``
    object with inline properties   embedded    (none)
    =============================== =========== ============================

``ParserConfig.relationship_overrides`` replaces or suppresses a detected
relationship per ``"Model.property"``.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from apimodel.models import (
    AttributeRecord,
    CrudType,
    EndpointRecord,
    ModelMapping,
    OperationBinding,
    ParserConfig,
    RelationshipKind,
    RelationshipOverride,
    RelationshipRecord,
    SchemaKind,
    SchemaNode,
)
from apimodel.resolver import SchemaGraph
from apimodel.utils import (
    model_name_from_label,
    to_camel_case,
    to_pascal_case,
    to_plural,
    to_snake_case,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("apimodel.mapper")

FALLBACK_MODEL_NAME: str = "Resource"

_CATALOG_METHODS = ("get", "post", "put", "patch", "delete")


# ---------------------------------------------------------------------------
# Naming & CRUD heuristics
# ---------------------------------------------------------------------------


def derive_model_name(endpoint: EndpointRecord) -> str:
    """
    First tag, else first static path segment, singularised and studly-cased.

    Examples:
        ``tags: [pets]`` → ``Pet``; ``/store/orders/{id}`` → ``Store``;
        ``/{id}`` → ``Resource``.
    """
    if endpoint.tags:
        name: str = model_name_from_label(endpoint.tags[0])
        if name:
            return name

    segment: str = ""
    for part in endpoint.path.strip("/").split("/"):
        if "{" not in part:
            segment = part
            break
    return model_name_from_label(segment) if segment else FALLBACK_MODEL_NAME


def base_endpoint(path: str) -> str:
    """Path segments up to (not including) the first ``{placeholder}``."""
    segments: List[str] = []
    for part in path.strip("/").split("/"):
        if "{" in part:
            break
        segments.append(part)
    return "/" + "/".join(segments)


def operation_type(method: str, path: str) -> CrudType:
    method = method.lower()
    if "{" in path:
        if method == "get":
            return CrudType.SHOW
        if method in ("put", "patch"):
            return CrudType.UPDATE
        if method == "delete":
            return CrudType.DESTROY
    else:
        if method == "get":
            return CrudType.INDEX
        if method == "post":
            return CrudType.STORE
    return CrudType.CUSTOM


def inline_model_name(path: str, method: str, suffix: str) -> str:
    """
    Examples:
        >>> inline_model_name("/pets/{petId}", "get", "Response200")
        'PetsPetIdGetResponse200'
    """
    parts: str = "".join(to_pascal_case(p) for p in path.split("/") if p)
    return f"{parts}{method.lower().capitalize()}{suffix}"


def binding_for(endpoint: EndpointRecord) -> OperationBinding:
    return OperationBinding(
        operation_id=endpoint.operation_id,
        type=operation_type(endpoint.method, endpoint.path),
        method=endpoint.method,
        path=endpoint.path,
        summary=endpoint.summary,
        parameters=[p.name for p in endpoint.parameters],
    )


# ---------------------------------------------------------------------------
# Mapper
# ---------------------------------------------------------------------------


class ModelMapper:
    """
    Build ``ModelMapping`` tables from a resolved graph.

    Args:
        graph: Source of component schemas.
        config: Supplies ``relationship_overrides``.
    """

    def __init__(self, graph: SchemaGraph, config: Optional[ParserConfig] = None) -> None:
        self.graph: SchemaGraph = graph
        self.config: ParserConfig = config or ParserConfig()

    # -- Endpoint-driven flow ----------------------------------------------

    def map_models(self, endpoints: Iterable[EndpointRecord]) -> Dict[str, ModelMapping]:
        """Group *endpoints* into models, in order of first appearance."""
        bases: Dict[str, str] = {}
        operations: Dict[str, List[OperationBinding]] = {}
        refs: Dict[str, Dict[str, None]] = {}
        attributes: Dict[str, Dict[str, AttributeRecord]] = {}

        for endpoint in endpoints:
            name: str = derive_model_name(endpoint)
            if name not in bases:
                bases[name] = base_endpoint(endpoint.path)
                operations[name] = []
                refs[name] = {}
                attributes[name] = {}

            operations[name].append(binding_for(endpoint))

            endpoint_refs: List[str] = self.schema_refs_for(endpoint)
            for ref_name in endpoint_refs:
                refs[name][ref_name] = None
            for ref_name in endpoint_refs:
                schema: Optional[SchemaNode] = self.graph.get(ref_name)
                if schema is None:
                    continue
                for attr in self.attributes_of(schema, ref_name):
                    # Reassigning keeps the first position, later metadata wins.
                    attributes[name][attr.name] = attr

        mappings: Dict[str, ModelMapping] = {}
        for name in bases:
            merged: List[AttributeRecord] = list(attributes[name].values())
            mappings[name] = ModelMapping(
                model_name=name,
                base_endpoint=bases[name],
                operations=operations[name],
                schema_refs=list(refs[name]),
                attributes=merged,
                relationships=self.relationships_for(name, merged),
            )
            logger.debug("Mapped %r", mappings[name])

        logger.info("Generated %d model mappings", len(mappings))
        return mappings

    def schema_refs_for(self, endpoint: EndpointRecord) -> List[str]:
        """
        Component schema names referenced from an endpoint's parameters and
        bodies (through properties, items and composition lists, without
        entering the referenced schemas themselves).
        """
        found: Dict[str, None] = {}
        bodies: List[SchemaNode] = []
        if endpoint.request_body is not None:
            bodies.extend(n for n in endpoint.request_body.content.values() if n is not None)
        for response in endpoint.responses.values():
            bodies.extend(n for n in response.content.values() if n is not None)
        bodies.extend(p.schema_node for p in endpoint.parameters if p.schema_node is not None)

        for root in bodies:
            for node in root.walk():
                if node.kind == SchemaKind.REFERENCE:
                    ref_name: Optional[str] = self._component_name(node)
                    if ref_name:
                        found[ref_name] = None
        return list(found)

    # -- Schema-driven flow -------------------------------------------------

    def map_schema_models(
        self,
        endpoints: Iterable[EndpointRecord],
        include_inline: bool = False,
    ) -> Dict[str, ModelMapping]:
        """One mapping per object component schema (plus inline body models)."""
        endpoint_list: List[EndpointRecord] = list(endpoints)
        mappings: Dict[str, ModelMapping] = {}

        for name, node in self.graph.schemas.items():
            schema: SchemaNode = node.deref()
            if schema.kind != SchemaKind.OBJECT or schema.properties is None:
                continue
            related: List[EndpointRecord] = self._endpoints_mentioning(name, endpoint_list)
            attrs: List[AttributeRecord] = self.attributes_of(schema, name)
            mappings[name] = ModelMapping(
                model_name=name,
                base_endpoint=(
                    base_endpoint(related[0].path)
                    if related
                    else "/" + to_plural(to_snake_case(name))
                ),
                operations=[binding_for(e) for e in related],
                schema_refs=[name],
                attributes=attrs,
                relationships=self.relationships_for(name, attrs),
            )

        if include_inline:
            for mapping in self._inline_models(endpoint_list):
                mappings.setdefault(mapping.model_name, mapping)

        logger.info("Generated %d schema models", len(mappings))
        return mappings

    def _endpoints_mentioning(
        self, model_name: str, endpoints: List[EndpointRecord]
    ) -> List[EndpointRecord]:
        lower: str = model_name.lower()
        plural: str = to_plural(lower)
        return [
            e
            for e in endpoints
            if e.method in _CATALOG_METHODS
            and (lower in e.path.lower() or plural in e.path.lower())
        ]

    def _inline_models(self, endpoints: List[EndpointRecord]) -> List[ModelMapping]:
        found: List[ModelMapping] = []
        for endpoint in endpoints:
            if endpoint.method not in _CATALOG_METHODS:
                continue
            candidates: List[tuple] = []
            if endpoint.request_body is not None:
                for node in endpoint.request_body.content.values():
                    candidates.append(("Request", node))
            for status, response in endpoint.responses.items():
                for node in response.content.values():
                    candidates.append((f"Response{status}", node))

            for suffix, node in candidates:
                if node is None or node.kind != SchemaKind.OBJECT or node.properties is None:
                    continue
                name: str = inline_model_name(endpoint.path, endpoint.method, suffix)
                attrs: List[AttributeRecord] = self.attributes_of(node, None)
                found.append(
                    ModelMapping(
                        model_name=name,
                        base_endpoint=base_endpoint(endpoint.path),
                        operations=[binding_for(endpoint)],
                        attributes=attrs,
                        relationships=self.relationships_for(name, attrs),
                        inline=True,
                    )
                )
        return found

    # -- Attributes ---------------------------------------------------------

    def attributes_of(self, schema: SchemaNode, source: Optional[str]) -> List[AttributeRecord]:
        """Flatten the ``properties`` of *schema* (dereferenced) into records."""
        target: SchemaNode = schema.deref()
        if not target.properties:
            return []
        required: List[str] = target.required
        records: List[AttributeRecord] = []
        for prop_name, prop in target.properties.items():
            records.append(
                AttributeRecord(
                    name=prop_name,
                    type=prop.kind,
                    format=prop.format if prop.format else prop.deref().format,
                    required=prop_name in required,
                    nullable=prop.nullable,
                    read_only=prop.read_only,
                    write_only=prop.write_only,
                    description=prop.description,
                    default=prop.default,
                    enum=prop.enum,
                    schema_node=prop,
                    source_schema=source,
                )
            )
        return records

    # -- Relationships ------------------------------------------------------

    def relationships_for(
        self, model_name: str, attributes: List[AttributeRecord]
    ) -> List[RelationshipRecord]:
        overrides: Dict[str, Optional[RelationshipOverride]] = self.config.relationship_overrides
        relationships: List[RelationshipRecord] = []
        for attr in attributes:
            key: str = f"{model_name}.{attr.name}"
            detected: Optional[RelationshipRecord] = self.detect_relationship(attr, model_name)
            if key in overrides:
                override: Optional[RelationshipOverride] = overrides[key]
                if override is None:
                    logger.debug("Relationship detection suppressed for %s", key)
                    continue
                detected = self._apply_override(attr, detected, override)
            if detected is not None:
                relationships.append(detected)
        return relationships

    def detect_relationship(
        self, attr: AttributeRecord, model_name: str
    ) -> Optional[RelationshipRecord]:
        """Apply the shape heuristic to one attribute."""
        node: SchemaNode = attr.schema_node
        accessor: str = to_camel_case(attr.name) or attr.name

        if node.kind == SchemaKind.REFERENCE:
            return RelationshipRecord(
                type=RelationshipKind.BELONGS_TO,
                name=accessor,
                attribute=attr.name,
                related_model=self._component_name(node),
                foreign_key=f"{attr.name}_id",
            )
        if (
            node.kind == SchemaKind.ARRAY
            and node.items is not None
            and node.items.kind == SchemaKind.REFERENCE
        ):
            return RelationshipRecord(
                type=RelationshipKind.HAS_MANY,
                name=accessor,
                attribute=attr.name,
                related_model=self._component_name(node.items),
                foreign_key=f"{to_snake_case(model_name)}_id",
            )
        if node.kind == SchemaKind.OBJECT and node.properties is not None:
            return RelationshipRecord(
                type=RelationshipKind.EMBEDDED,
                name=accessor,
                attribute=attr.name,
                properties=list(node.properties),
            )
        return None

    @staticmethod
    def _apply_override(
        attr: AttributeRecord,
        detected: Optional[RelationshipRecord],
        override: RelationshipOverride,
    ) -> RelationshipRecord:
        related: Optional[str] = override.related_model or (
            detected.related_model if detected else None
        )
        foreign_key: Optional[str] = override.foreign_key or (
            detected.foreign_key if detected else None
        )
        properties: Optional[List[str]] = None
        if override.type == RelationshipKind.EMBEDDED:
            node: SchemaNode = attr.schema_node.deref()
            properties = list(node.properties or {})
            related, foreign_key = None, None
        return RelationshipRecord(
            type=override.type,
            name=override.name or to_camel_case(attr.name) or attr.name,
            attribute=attr.name,
            related_model=related,
            foreign_key=foreign_key,
            local_key=override.local_key,
            properties=properties,
        )

    def _component_name(self, node: SchemaNode) -> Optional[str]:
        return self.graph.name_for_key(node.target or "") or node.ref_name


def map_models(
    endpoints: Iterable[EndpointRecord],
    graph: SchemaGraph,
    config: Optional[ParserConfig] = None,
) -> Dict[str, ModelMapping]:
    return ModelMapper(graph, config).map_models(endpoints)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ModelMapper",
    "map_models",
    "derive_model_name",
    "base_endpoint",
    "operation_type",
    "inline_model_name",
    "binding_for",
    "FALLBACK_MODEL_NAME",
]

logger.debug("apimodel.mapper loaded: %d public symbols.", len(__all__))
