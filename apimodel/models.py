# File: apimodel/models.py
"""
apimodel - Core Data Models
=============================
Pydantic V2 models for every record that flows through the OpenAPI
processing pipeline, plus the configuration models that drive it:

    Document Loader → Reference Resolver → Schema Normalizer
        → Endpoint Extractor → Model Mapper → {Rules, Code Generator}

``SchemaNode`` is the intermediate schema representation (ISR).  It is a
tagged union keyed by ``kind``: every consumer dispatches on ``kind``
instead of probing raw dictionaries for optional keys.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Set, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    computed_field,
    field_validator,
    model_validator,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("apimodel.models")

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class SchemaKind(str, Enum):
    """Discriminator of a ``SchemaNode``."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    REFERENCE = "reference"
    COMPOSITE = "composite"


class ParameterLocation(str, Enum):
    QUERY = "query"
    HEADER = "header"
    PATH = "path"
    COOKIE = "cookie"


class CrudType(str, Enum):
    """CRUD verb of an operation, inferred from method + path parameters."""

    INDEX = "index"
    SHOW = "show"
    STORE = "store"
    UPDATE = "update"
    DESTROY = "destroy"
    CUSTOM = "custom"


class RelationshipKind(str, Enum):
    BELONGS_TO = "belongsTo"
    HAS_MANY = "hasMany"
    EMBEDDED = "embedded"


class NamingConvention(str, Enum):
    """Naming style applied to generated identifiers."""

    PASCAL_CASE = "pascal_case"
    SNAKE_CASE = "snake_case"
    CAMEL_CASE = "camel_case"


class CompareStrategy(str, Enum):
    HASH = "hash"
    CONTENT = "content"
    TIMESTAMP = "timestamp"


class MigrationStrategy(str, Enum):
    BACKUP_AND_REPLACE = "backup_and_replace"
    MERGE = "merge"
    MANUAL = "manual"


# Fixed method order used by the endpoint extractor.
HTTP_METHODS: List[str] = [
    "get",
    "post",
    "put",
    "patch",
    "delete",
    "head",
    "options",
    "trace",
]

SUPPORTED_OPENAPI_VERSIONS: List[str] = [
    "3.0.0",
    "3.0.1",
    "3.0.2",
    "3.0.3",
    "3.1.0",
]

# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    use_enum_values=True,
    frozen=False,
    extra="forbid",
)


# ---------------------------------------------------------------------------
# Schema registry (binds reference nodes to their targets)
# ---------------------------------------------------------------------------


class SchemaRegistry:
    """
    Canonical-key → ``SchemaNode`` table owned by one resolution run.

    Reference nodes hold a pointer to the registry and look their target
    up on access, so a self-referencing schema is a finite structure.
    Two registries compare equal when they hold the same keys; comparing
    the nodes themselves would recurse through cycles.
    """

    __slots__ = ("_nodes",)

    def __init__(self) -> None:
        self._nodes: Dict[str, SchemaNode] = {}

    def register(self, key: str, node: "SchemaNode") -> None:
        self._nodes[key] = node

    def get(self, key: str) -> Optional["SchemaNode"]:
        return self._nodes.get(key)

    def keys(self) -> List[str]:
        return list(self._nodes)

    def items(self) -> List[tuple]:
        return list(self._nodes.items())

    def __contains__(self, key: object) -> bool:
        return key in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SchemaRegistry):
            return NotImplemented
        return list(self._nodes) == list(other._nodes)

    def __repr__(self) -> str:
        return f"<SchemaRegistry {len(self._nodes)} schemas>"


# ---------------------------------------------------------------------------
# Intermediate schema representation
# ---------------------------------------------------------------------------


class SchemaNode(BaseModel):
    """
    One OpenAPI Schema Object in canonical form.

    Common annotations are always present; kind-specific fields are
    ``None`` when the keyword was absent from the source.  Composition
    lists (``all_of``/``any_of``/``one_of``/``not_``) may appear on any
    kind and are never flattened here.  Keywords with no ISR field
    (``discriminator``, ``xml``, ``x-*`` extensions, ...) are kept
    verbatim in ``metadata``.
    """

    model_config = _SHARED_CONFIG

    kind: SchemaKind = Field(..., description="Node discriminator.")

    # -- Common annotations -------------------------------------------------
    format: Optional[str] = Field(default=None, description="Format tag, e.g. 'email'.")
    nullable: bool = Field(default=False, description="Null is an accepted value.")
    deprecated: bool = Field(default=False)
    description: Optional[str] = Field(default=None)
    title: Optional[str] = Field(default=None)
    default: Any = Field(default=None)
    example: Any = Field(default=None)
    read_only: bool = Field(default=False, alias="readOnly")
    write_only: bool = Field(default=False, alias="writeOnly")
    enum: Optional[List[Any]] = Field(default=None, description="Allowed values.")

    # -- object -------------------------------------------------------------
    properties: Optional[Dict[str, SchemaNode]] = Field(default=None)
    required: List[str] = Field(default_factory=list)
    additional_properties: Optional[Union[bool, SchemaNode]] = Field(
        default=None, alias="additionalProperties"
    )
    min_properties: Optional[int] = Field(default=None, alias="minProperties")
    max_properties: Optional[int] = Field(default=None, alias="maxProperties")

    # -- array --------------------------------------------------------------
    items: Optional[SchemaNode] = Field(default=None)
    min_items: Optional[int] = Field(default=None, alias="minItems")
    max_items: Optional[int] = Field(default=None, alias="maxItems")
    unique_items: bool = Field(default=False, alias="uniqueItems")

    # -- string -------------------------------------------------------------
    min_length: Optional[int] = Field(default=None, alias="minLength")
    max_length: Optional[int] = Field(default=None, alias="maxLength")
    pattern: Optional[str] = Field(default=None)

    # -- number / integer ---------------------------------------------------
    minimum: Optional[Union[int, float]] = Field(default=None)
    maximum: Optional[Union[int, float]] = Field(default=None)
    exclusive_minimum: Optional[Union[bool, int, float]] = Field(
        default=None, alias="exclusiveMinimum"
    )
    exclusive_maximum: Optional[Union[bool, int, float]] = Field(
        default=None, alias="exclusiveMaximum"
    )
    multiple_of: Optional[Union[int, float]] = Field(default=None, alias="multipleOf")

    # -- reference ----------------------------------------------------------
    ref: Optional[str] = Field(default=None, description="Pointer as written in the source.")
    target: Optional[str] = Field(
        default=None, description="Canonical registry key of the referenced schema."
    )

    # -- composition --------------------------------------------------------
    all_of: Optional[List[SchemaNode]] = Field(default=None, alias="allOf")
    any_of: Optional[List[SchemaNode]] = Field(default=None, alias="anyOf")
    one_of: Optional[List[SchemaNode]] = Field(default=None, alias="oneOf")
    not_: Optional[SchemaNode] = Field(default=None, alias="not")

    # -- Unmapped keywords --------------------------------------------------
    metadata: Dict[str, Any] = Field(default_factory=dict)

    _registry: Optional[SchemaRegistry] = PrivateAttr(default=None)

    # -- Validators ---------------------------------------------------------

    @model_validator(mode="after")
    def _reference_has_pointer(self) -> "SchemaNode":
        if self.kind == SchemaKind.REFERENCE and not self.ref:
            raise ValueError("A reference node requires 'ref'.")
        return self

    # -- Reference handling -------------------------------------------------

    def bind(self, registry: SchemaRegistry) -> None:
        """Attach the registry used to look up ``target``."""
        self._registry = registry

    @property
    def resolved(self) -> Optional["SchemaNode"]:
        """Target of a reference node; ``None`` for other kinds or before binding."""
        if self.kind != SchemaKind.REFERENCE or self._registry is None:
            return None
        return self._registry.get(self.target or "")

    def deref(self) -> "SchemaNode":
        """Follow reference chains to the first non-reference node."""
        node: SchemaNode = self
        seen: Set[str] = set()
        while node.kind == SchemaKind.REFERENCE:
            key: str = node.target or node.ref or ""
            target: Optional[SchemaNode] = node.resolved
            if target is None or key in seen:
                return node
            seen.add(key)
            node = target
        return node

    @property
    def ref_name(self) -> Optional[str]:
        """Last pointer segment, e.g. ``Pet`` for ``#/components/schemas/Pet``."""
        if self.kind != SchemaKind.REFERENCE:
            return None
        pointer: str = self.target or self.ref or ""
        return pointer.rstrip("/").rsplit("/", 1)[-1] or None

    # -- Traversal ----------------------------------------------------------

    def children(self) -> Iterator["SchemaNode"]:
        """Direct sub-schemas, without following references."""
        if self.properties:
            yield from self.properties.values()
        if isinstance(self.additional_properties, SchemaNode):
            yield self.additional_properties
        if self.items is not None:
            yield self.items
        for branch_list in (self.all_of, self.any_of, self.one_of):
            if branch_list:
                yield from branch_list
        if self.not_ is not None:
            yield self.not_

    def walk(self) -> Iterator["SchemaNode"]:
        """Depth-first iteration over this node and every nested node."""
        stack: List[SchemaNode] = [self]
        while stack:
            node: SchemaNode = stack.pop()
            yield node
            stack.extend(reversed(list(node.children())))

    @property
    def is_reference(self) -> bool:
        return self.kind == SchemaKind.REFERENCE

    @property
    def has_composition(self) -> bool:
        return bool(self.all_of or self.any_of or self.one_of or self.not_)

    def __repr__(self) -> str:
        if self.kind == SchemaKind.REFERENCE:
            return f"<SchemaNode reference → {self.target or self.ref}>"
        extra: str = f" ({self.format})" if self.format else ""
        if self.properties is not None:
            extra += f" {len(self.properties)} props"
        return f"<SchemaNode {self.kind}{extra}>"


SchemaNode.model_rebuild()


# ---------------------------------------------------------------------------
# Endpoint catalog
# ---------------------------------------------------------------------------


class ParameterRecord(BaseModel):
    """One operation parameter."""

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1)
    location: ParameterLocation = Field(..., alias="in")
    required: bool = Field(default=False)
    schema_node: Optional[SchemaNode] = Field(default=None, alias="schema")
    style: Optional[str] = Field(default=None)
    explode: Optional[bool] = Field(default=None)
    description: Optional[str] = Field(default=None)
    deprecated: bool = Field(default=False)
    example: Any = Field(default=None)

    @model_validator(mode="after")
    def _path_parameters_are_required(self) -> "ParameterRecord":
        if self.location == ParameterLocation.PATH and not self.required:
            logger.debug(
                "Path parameter '%s' declared optional; treating as required.",
                self.name,
            )
            object.__setattr__(self, "required", True)
        return self

    def __repr__(self) -> str:
        return f"<Parameter {self.location}:{self.name}{' *' if self.required else ''}>"


class RequestBodyRecord(BaseModel):
    model_config = _SHARED_CONFIG

    description: Optional[str] = Field(default=None)
    required: bool = Field(default=False)
    content: Dict[str, Optional[SchemaNode]] = Field(
        default_factory=dict, description="Media type → schema."
    )


class ResponseRecord(BaseModel):
    model_config = _SHARED_CONFIG

    description: Optional[str] = Field(default=None)
    content: Dict[str, Optional[SchemaNode]] = Field(default_factory=dict)
    headers: List[str] = Field(default_factory=list, description="Header names.")


class EndpointRecord(BaseModel):
    """
    One HTTP operation (path × method).

    ``operation_id`` is the unique catalog key; it is synthesised from
    method and path when the document does not provide one.
    """

    model_config = _SHARED_CONFIG

    operation_id: str = Field(..., min_length=1, alias="operationId")
    path: str = Field(..., min_length=1)
    method: str = Field(..., min_length=1)
    summary: Optional[str] = Field(default=None)
    description: Optional[str] = Field(default=None)
    tags: List[str] = Field(default_factory=list)
    parameters: List[ParameterRecord] = Field(default_factory=list)
    request_body: Optional[RequestBodyRecord] = Field(default=None, alias="requestBody")
    responses: Dict[str, ResponseRecord] = Field(default_factory=dict)
    deprecated: bool = Field(default=False)
    security: Optional[List[Dict[str, List[str]]]] = Field(default=None)

    @field_validator("method")
    @classmethod
    def _lowercase_method(cls, v: str) -> str:
        return v.lower()

    @computed_field  # type: ignore[misc]
    @property
    def has_path_parameters(self) -> bool:
        return "{" in self.path

    def get_parameter(self, name: str, location: Optional[str] = None) -> Optional[ParameterRecord]:
        for param in self.parameters:
            if param.name == name and (location is None or param.location == location):
                return param
        return None

    def schemas(self) -> Iterator[SchemaNode]:
        """Every top-level schema attached to this operation."""
        for param in self.parameters:
            if param.schema_node is not None:
                yield param.schema_node
        if self.request_body is not None:
            for node in self.request_body.content.values():
                if node is not None:
                    yield node
        for response in self.responses.values():
            for node in response.content.values():
                if node is not None:
                    yield node

    def __repr__(self) -> str:
        return f"<Endpoint {self.method.upper()} {self.path} ({self.operation_id})>"


# ---------------------------------------------------------------------------
# Model mapping
# ---------------------------------------------------------------------------


class OperationBinding(BaseModel):
    model_config = _SHARED_CONFIG

    operation_id: str = Field(..., min_length=1)
    type: CrudType = Field(..., description="CRUD verb.")
    method: str = Field(...)
    path: str = Field(...)
    summary: Optional[str] = Field(default=None)
    parameters: List[str] = Field(default_factory=list)

    def __repr__(self) -> str:
        return f"<Operation {self.type} {self.method.upper()} {self.path}>"


class AttributeRecord(BaseModel):
    """One model attribute, flattened from a referenced schema's properties."""

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1)
    type: str = Field(..., description="Declared kind; 'reference' for a bare $ref.")
    format: Optional[str] = Field(default=None)
    required: bool = Field(default=False)
    nullable: bool = Field(default=False)
    read_only: bool = Field(default=False)
    write_only: bool = Field(default=False)
    description: Optional[str] = Field(default=None)
    default: Any = Field(default=None)
    enum: Optional[List[Any]] = Field(default=None)
    schema_node: SchemaNode = Field(..., description="The property schema as declared.")
    source_schema: Optional[str] = Field(default=None)

    def __repr__(self) -> str:
        return f"<Attribute {self.name}: {self.type}{'' if self.required else '?'}>"


class RelationshipRecord(BaseModel):
    model_config = _SHARED_CONFIG

    type: RelationshipKind = Field(...)
    name: str = Field(..., min_length=1, description="camelCase accessor name.")
    attribute: str = Field(..., min_length=1, description="Property the relation came from.")
    related_model: Optional[str] = Field(default=None)
    foreign_key: Optional[str] = Field(default=None)
    local_key: str = Field(default="id")
    properties: Optional[List[str]] = Field(
        default=None, description="Embedded property names."
    )

    @model_validator(mode="after")
    def _target_matches_kind(self) -> "RelationshipRecord":
        if self.type != RelationshipKind.EMBEDDED and not self.related_model:
            raise ValueError(f"Relationship '{self.name}' ({self.type}) needs related_model.")
        return self

    def __repr__(self) -> str:
        target: str = self.related_model or "inline"
        return f"<Relationship {self.type} {self.name} → {target}>"


class RelationshipOverride(BaseModel):
    """Replacement for a heuristically detected relationship."""

    model_config = _SHARED_CONFIG

    type: RelationshipKind = Field(...)
    name: Optional[str] = Field(default=None)
    related_model: Optional[str] = Field(default=None)
    foreign_key: Optional[str] = Field(default=None)
    local_key: str = Field(default="id")


class ModelMapping(BaseModel):
    """One logical model: endpoints + schema attributes + relationships."""

    model_config = _SHARED_CONFIG

    model_name: str = Field(..., min_length=1)
    base_endpoint: str = Field(default="/")
    operations: List[OperationBinding] = Field(default_factory=list)
    schema_refs: List[str] = Field(
        default_factory=list, description="Referenced component schema names, ordered."
    )
    attributes: List[AttributeRecord] = Field(default_factory=list)
    relationships: List[RelationshipRecord] = Field(default_factory=list)
    inline: bool = Field(default=False, description="Built from an inline body schema.")

    @model_validator(mode="after")
    def _unique_attribute_names(self) -> "ModelMapping":
        names: List[str] = [a.name for a in self.attributes]
        if len(names) != len(set(names)):
            dupes: List[str] = sorted({n for n in names if names.count(n) > 1})
            raise ValueError(f"Duplicate attributes on '{self.model_name}': {dupes}")
        return self

    @computed_field  # type: ignore[misc]
    @property
    def attribute_names(self) -> List[str]:
        return [a.name for a in self.attributes]

    @computed_field  # type: ignore[misc]
    @property
    def required_attributes(self) -> List[str]:
        return [a.name for a in self.attributes if a.required]

    @computed_field  # type: ignore[misc]
    @property
    def crud_types(self) -> List[str]:
        return [op.type for op in self.operations]

    @property
    def primary_schema(self) -> Optional[str]:
        """The referenced schema named like the model, else the first one."""
        if self.model_name in self.schema_refs:
            return self.model_name
        return self.schema_refs[0] if self.schema_refs else None

    def get_attribute(self, name: str) -> Optional[AttributeRecord]:
        for attr in self.attributes:
            if attr.name == name:
                return attr
        return None

    def get_relationship(self, name: str) -> Optional[RelationshipRecord]:
        for rel in self.relationships:
            if rel.name == name:
                return rel
        return None

    def __repr__(self) -> str:
        return (
            f"<ModelMapping {self.model_name} {self.base_endpoint} "
            f"({len(self.operations)} ops, {len(self.attributes)} attrs, "
            f"{len(self.relationships)} rels)>"
        )


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ParserConfig(BaseModel):
    """Settings threaded into the loader, resolver and mapper."""

    model_config = _SHARED_CONFIG

    cache_enabled: bool = Field(default=True)
    cache_ttl: int = Field(default=3600, ge=0, description="Seconds; 0 never expires.")
    cache_max_entries: int = Field(
        default=128, ge=1, description="Sources kept before LRU eviction."
    )
    remote_timeout: float = Field(default=30.0, gt=0, description="Seconds.")
    max_file_size: int = Field(default=10 * 1024 * 1024, ge=1, description="Bytes.")
    supported_versions: List[str] = Field(
        default_factory=lambda: list(SUPPORTED_OPENAPI_VERSIONS), min_length=1
    )
    allow_external_refs: bool = Field(
        default=False, description="Load documents named by cross-document $refs."
    )
    strict_structure: bool = Field(
        default=False, description="Raise on structural errors instead of logging."
    )
    relationship_overrides: Dict[str, Optional[RelationshipOverride]] = Field(
        default_factory=dict,
        description="'Model.property' → override, or null to suppress detection.",
    )

    @field_validator("relationship_overrides")
    @classmethod
    def _qualified_override_keys(
        cls, v: Dict[str, Optional[RelationshipOverride]]
    ) -> Dict[str, Optional[RelationshipOverride]]:
        bad: List[str] = [k for k in v if k.count(".") != 1]
        if bad:
            raise ValueError(f"Override keys must look like 'Model.property': {bad}")
        return v


class GenerationConfig(BaseModel):
    """
    Controls the text produced by the code generator.

    ``naming_convention`` applies to attribute and accessor names.  Class
    names are always PascalCase (plus ``prefix``/``suffix``) and module
    files are their snake_case form.
    """

    model_config = _SHARED_CONFIG

    namespace: str = Field(default="models", description="Dotted package of generated code.")
    output_directory: str = Field(default="./generated")
    naming_convention: NamingConvention = Field(
        default=NamingConvention.SNAKE_CASE,
        description="Case of attribute and accessor names; class names stay PascalCase.",
    )
    prefix: str = Field(default="", description="Class name prefix.")
    suffix: str = Field(default="", description="Class name suffix.")
    overwrite_existing: bool = Field(default=False)
    generate_factories: bool = Field(default=True)
    base_class: str = Field(default="ApiModel")
    base_module: str = Field(default="apimodel_runtime")
    factory_base_class: str = Field(default="Factory")
    factory_base_module: str = Field(default="apimodel_runtime.factories")
    include_validation_rules: bool = Field(default=True)
    indent_size: int = Field(default=4, ge=2, le=8)

    @field_validator("namespace")
    @classmethod
    def _dotted_identifier(cls, v: str) -> str:
        if not all(part.isidentifier() for part in v.split(".")):
            raise ValueError(f"namespace must be a dotted Python identifier, got {v!r}")
        return v

    @computed_field  # type: ignore[misc]
    @property
    def namespace_path(self) -> str:
        return self.namespace.replace(".", "/")


class VersioningConfig(BaseModel):
    model_config = _SHARED_CONFIG

    enabled: bool = Field(default=True)
    storage_path: str = Field(default="./schema_versions")
    version_format: str = Field(default="%Y-%m-%d_%H-%M-%S", description="strftime format.")
    compare_strategy: CompareStrategy = Field(default=CompareStrategy.HASH)
    migration_strategy: MigrationStrategy = Field(default=MigrationStrategy.BACKUP_AND_REPLACE)
    backup_enabled: bool = Field(default=True)
    backup_retention_days: int = Field(default=30, ge=0)


class Settings(BaseModel):
    """Aggregate settings file: ``parser``, ``generation``, ``versioning``."""

    model_config = _SHARED_CONFIG

    default_source: Optional[str] = Field(default=None)
    parser: ParserConfig = Field(default_factory=ParserConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    versioning: VersioningConfig = Field(default_factory=VersioningConfig)


def load_settings(path: Union[str, Path]) -> Settings:
    """
    Load ``Settings`` from a YAML or JSON file.

    An empty file yields the defaults.  Unknown keys are rejected.
    """
    file_path: Path = Path(path)
    raw_text: str = file_path.read_text(encoding="utf-8")
    if file_path.suffix.lower() == ".json":
        data: Any = json.loads(raw_text) if raw_text.strip() else {}
    else:
        data = yaml.safe_load(raw_text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {file_path} must contain a mapping.")
    settings: Settings = Settings.model_validate(data)
    logger.debug("Loaded settings from %s", file_path)
    return settings


# ---------------------------------------------------------------------------
# Schema versioning records
# ---------------------------------------------------------------------------


class VersionMetadata(BaseModel):
    """Sidecar ``{version}.meta.json`` content."""

    model_config = _SHARED_CONFIG

    version: str = Field(..., min_length=1)
    schema_name: str = Field(..., min_length=1)
    created_at: str = Field(..., description="ISO-8601 timestamp.")
    size: int = Field(..., ge=0)
    hash: str = Field(..., min_length=64, max_length=64, description="sha256 hex.")
    generator_version: str = Field(...)


class VersionDifference(BaseModel):
    model_config = _SHARED_CONFIG

    type: str = Field(..., description="added | removed | changed")
    path: str = Field(...)
    old_value: Any = Field(default=None)
    new_value: Any = Field(default=None)


class VersionComparison(BaseModel):
    model_config = _SHARED_CONFIG

    strategy: CompareStrategy = Field(...)
    version1: str = Field(...)
    version2: str = Field(...)
    identical: bool = Field(...)
    hash1: Optional[str] = Field(default=None)
    hash2: Optional[str] = Field(default=None)
    differences: List[VersionDifference] = Field(default_factory=list)
    newer_version: Optional[str] = Field(default=None)


class MigrationResult(BaseModel):
    model_config = _SHARED_CONFIG

    strategy: MigrationStrategy = Field(...)
    success: bool = Field(default=True)
    message: str = Field(default="")
    backup_version: Optional[str] = Field(default=None)
    new_version: Optional[str] = Field(default=None)
    instructions: List[str] = Field(default_factory=list)
    comparison: Optional[VersionComparison] = Field(default=None)


# ---------------------------------------------------------------------------
# Generation result
# ---------------------------------------------------------------------------


class GeneratedFile(BaseModel):
    """A single file produced by the code generator."""

    model_config = _SHARED_CONFIG

    path: str = Field(..., min_length=1, description="Path relative to the output root.")
    content: str = Field(...)
    kind: str = Field(default="model", description="model | factory | package")
    model_name: Optional[str] = Field(default=None)
    line_count: int = Field(default=0, ge=0)
    size_bytes: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _compute_metrics(self) -> "GeneratedFile":
        object.__setattr__(
            self, "line_count", self.content.count("\n") + (1 if self.content else 0)
        )
        object.__setattr__(self, "size_bytes", len(self.content.encode("utf-8")))
        return self


class GenerationResult(BaseModel):
    """Files rendered for one document, consumed by the exporter and the CLI."""

    model_config = _SHARED_CONFIG

    files: List[GeneratedFile] = Field(default_factory=list)
    config: GenerationConfig = Field(...)
    source: Optional[str] = Field(default=None)
    model_names: List[str] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = Field(default=None)
    success: bool = Field(default=True)
    errors: List[str] = Field(default_factory=list)

    @computed_field  # type: ignore[misc]
    @property
    def total_files(self) -> int:
        return len(self.files)

    @computed_field  # type: ignore[misc]
    @property
    def total_lines(self) -> int:
        return sum(f.line_count for f in self.files)

    @computed_field  # type: ignore[misc]
    @property
    def duration_seconds(self) -> Optional[float]:
        if self.finished_at and self.started_at:
            return (self.finished_at - self.started_at).total_seconds()
        return None

    def add_file(
        self, path: str, content: str, kind: str = "model", model_name: Optional[str] = None
    ) -> None:
        self.files.append(
            GeneratedFile(path=path, content=content, kind=kind, model_name=model_name)
        )

    def as_mapping(self) -> Dict[str, str]:
        """Relative path → content, in generation order."""
        return {f.path: f.content for f in self.files}

    def __repr__(self) -> str:
        return (
            f"<GenerationResult {self.total_files} files, {self.total_lines} lines, "
            f"{'OK' if self.success else 'FAILED'}>"
        )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "SchemaKind",
    "ParameterLocation",
    "CrudType",
    "RelationshipKind",
    "NamingConvention",
    "CompareStrategy",
    "MigrationStrategy",
    "HTTP_METHODS",
    "SUPPORTED_OPENAPI_VERSIONS",
    "SchemaRegistry",
    "SchemaNode",
    "ParameterRecord",
    "RequestBodyRecord",
    "ResponseRecord",
    "EndpointRecord",
    "OperationBinding",
    "AttributeRecord",
    "RelationshipRecord",
    "RelationshipOverride",
    "ModelMapping",
    "ParserConfig",
    "GenerationConfig",
    "VersioningConfig",
    "Settings",
    "load_settings",
    "VersionMetadata",
    "VersionDifference",
    "VersionComparison",
    "MigrationResult",
    "GeneratedFile",
    "GenerationResult",
]

logger.debug("apimodel.models loaded: %d public symbols.", len(__all__))
