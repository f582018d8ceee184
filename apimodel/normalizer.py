# File: apimodel/normalizer.py
"""
apimodel - Schema Normalizer
==============================
Pure recursive transform from a raw OpenAPI Schema Object (``dict``) to a
``SchemaNode``.

Every recognised keyword lands in exactly one ISR field; anything else
(``discriminator``, ``xml``, ``externalDocs``, ``x-*`` extensions, 3.1
``const``/``examples`` ...) is copied verbatim into ``metadata``.
Composition keywords are kept as sibling lists and never merged.

``$ref`` objects are delegated to a *ref factory* supplied by the
reference resolver, so the normalizer itself never performs lookups.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, FrozenSet, List, Optional

from pydantic import ValidationError

from apimodel.exceptions import MalformedDocumentError
from apimodel.models import SchemaKind, SchemaNode

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("apimodel.normalizer")

# ``ref_factory(ref, location) -> SchemaNode``
RefFactory = Callable[[str, str], SchemaNode]

# ---------------------------------------------------------------------------
# Keyword tables
# ---------------------------------------------------------------------------

# Raw keyword → SchemaNode field, for scalar keywords copied as-is.
_SCALAR_KEYWORDS: Dict[str, str] = {
    "format": "format",
    "nullable": "nullable",
    "deprecated": "deprecated",
    "description": "description",
    "title": "title",
    "default": "default",
    "example": "example",
    "readOnly": "read_only",
    "writeOnly": "write_only",
    "minProperties": "min_properties",
    "maxProperties": "max_properties",
    "minItems": "min_items",
    "maxItems": "max_items",
    "uniqueItems": "unique_items",
    "minLength": "min_length",
    "maxLength": "max_length",
    "pattern": "pattern",
    "minimum": "minimum",
    "maximum": "maximum",
    "exclusiveMinimum": "exclusive_minimum",
    "exclusiveMaximum": "exclusive_maximum",
    "multipleOf": "multiple_of",
}

# Annotations honoured next to a ``$ref``.
_REF_SIBLINGS: FrozenSet[str] = frozenset({
    "description", "title", "nullable", "deprecated", "readOnly", "writeOnly",
    "default", "example",
})

_STRUCTURAL_KEYWORDS: FrozenSet[str] = frozenset({
    "type", "enum", "properties", "required", "additionalProperties", "items",
    "allOf", "anyOf", "oneOf", "not", "$ref",
})

_COMPOSITION_KEYWORDS: Dict[str, str] = {
    "allOf": "all_of",
    "anyOf": "any_of",
    "oneOf": "one_of",
}

_KIND_VALUES: FrozenSet[str] = frozenset(
    {"string", "integer", "number", "boolean", "array", "object"}
)


def _default_ref_factory(ref: str, location: str) -> SchemaNode:
    """Unbound reference node, used when no resolver is attached."""
    return SchemaNode(kind=SchemaKind.REFERENCE, ref=ref, target=ref)


class SchemaNormalizer:
    """
    Convert raw schema objects into ``SchemaNode`` trees.

    Args:
        ref_factory: Called with ``(ref, location)`` for every ``$ref``
            object; must return a reference-kind node.
    """

    def __init__(self, ref_factory: Optional[RefFactory] = None) -> None:
        self._ref_factory: RefFactory = ref_factory or _default_ref_factory

    def normalize(self, raw: Any, location: str = "#") -> SchemaNode:
        """
        Normalize one schema object.

        Args:
            raw: The schema object (``dict`` or a 3.1 boolean schema).
            location: JSON pointer of *raw*, used in diagnostics.

        Raises:
            MalformedDocumentError: when a keyword has an unusable value.
        """
        if isinstance(raw, bool):
            return SchemaNode(kind=SchemaKind.OBJECT, metadata={"schema": raw})
        if not isinstance(raw, dict):
            raise MalformedDocumentError(
                location, [f"schema must be an object, got {type(raw).__name__}"]
            )

        if "$ref" in raw:
            return self._normalize_reference(raw, location)

        fields: Dict[str, Any] = {}
        metadata: Dict[str, Any] = {}

        kind, nullable_from_type = self._infer_kind(raw, metadata)
        fields["kind"] = kind

        for key, value in raw.items():
            if key in _SCALAR_KEYWORDS:
                fields[_SCALAR_KEYWORDS[key]] = value
            elif key not in _STRUCTURAL_KEYWORDS:
                metadata[key] = value

        if nullable_from_type:
            fields["nullable"] = True

        if "enum" in raw:
            enum_values: Any = raw["enum"]
            if not isinstance(enum_values, list):
                raise MalformedDocumentError(location, ["'enum' must be a list"])
            fields["enum"] = list(enum_values)

        if "properties" in raw:
            props: Any = raw["properties"] or {}
            if not isinstance(props, dict):
                raise MalformedDocumentError(location, ["'properties' must be a mapping"])
            fields["properties"] = {
                str(name): self.normalize(sub, f"{location}/properties/{name}")
                for name, sub in props.items()
            }

        if "required" in raw:
            required: Any = raw["required"]
            if isinstance(required, list):
                fields["required"] = [str(r) for r in required]
            else:
                # 3.0 property-level ``required: true`` is not a schema keyword.
                metadata["required"] = required

        if "additionalProperties" in raw:
            extra: Any = raw["additionalProperties"]
            fields["additional_properties"] = (
                extra
                if isinstance(extra, bool)
                else self.normalize(extra, f"{location}/additionalProperties")
            )

        if "items" in raw:
            fields["items"] = self.normalize(raw["items"], f"{location}/items")

        for keyword, field_name in _COMPOSITION_KEYWORDS.items():
            if keyword in raw:
                branches: Any = raw[keyword]
                if not isinstance(branches, list):
                    raise MalformedDocumentError(location, [f"'{keyword}' must be a list"])
                fields[field_name] = [
                    self.normalize(branch, f"{location}/{keyword}/{i}")
                    for i, branch in enumerate(branches)
                ]

        if "not" in raw:
            fields["not_"] = self.normalize(raw["not"], f"{location}/not")

        fields["metadata"] = metadata
        return self._build(fields, location)

    # -- Internals ----------------------------------------------------------

    def _normalize_reference(self, raw: Dict[str, Any], location: str) -> SchemaNode:
        ref: Any = raw["$ref"]
        if not isinstance(ref, str) or not ref:
            raise MalformedDocumentError(location, ["'$ref' must be a non-empty string"])

        node: SchemaNode = self._ref_factory(ref, location)
        for key, value in raw.items():
            if key == "$ref":
                continue
            if key in _REF_SIBLINGS:
                setattr(node, _SCALAR_KEYWORDS[key], value)
            else:
                node.metadata[key] = value
        return node

    @staticmethod
    def _infer_kind(raw: Dict[str, Any], metadata: Dict[str, Any]) -> tuple:
        """Return ``(kind, nullable_from_type_list)``."""
        declared: Any = raw.get("type")
        nullable: bool = False

        if isinstance(declared, list):
            nullable = "null" in declared
            candidates: List[str] = [t for t in declared if t != "null"]
            if len(candidates) > 1:
                metadata["type"] = declared
            declared = candidates[0] if candidates else None

        if isinstance(declared, str) and declared in _KIND_VALUES:
            return SchemaKind(declared), nullable
        if declared is not None:
            metadata.setdefault("type", raw.get("type"))

        if any(k in raw for k in ("properties", "additionalProperties", "minProperties", "maxProperties")):
            return SchemaKind.OBJECT, nullable
        if any(k in raw for k in ("items", "minItems", "maxItems", "uniqueItems")):
            return SchemaKind.ARRAY, nullable
        if any(k in raw for k in _COMPOSITION_KEYWORDS) or "not" in raw:
            return SchemaKind.COMPOSITE, nullable
        if any(k in raw for k in ("minLength", "maxLength", "pattern", "format")):
            return SchemaKind.STRING, nullable
        if any(k in raw for k in ("minimum", "maximum", "multipleOf")):
            return SchemaKind.NUMBER, nullable

        enum_values: Any = raw.get("enum")
        if isinstance(enum_values, list) and enum_values:
            sample: Any = enum_values[0]
            if isinstance(sample, bool):
                return SchemaKind.BOOLEAN, nullable
            if isinstance(sample, int):
                return SchemaKind.INTEGER, nullable
            if isinstance(sample, float):
                return SchemaKind.NUMBER, nullable
            return SchemaKind.STRING, nullable

        return SchemaKind.OBJECT, nullable

    @staticmethod
    def _build(fields: Dict[str, Any], location: str) -> SchemaNode:
        try:
            return SchemaNode(**fields)
        except ValidationError as exc:
            diagnostics: List[str] = [
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in exc.errors()
            ]
            raise MalformedDocumentError(location, diagnostics) from exc


def normalize_schema(raw: Any, ref_factory: Optional[RefFactory] = None) -> SchemaNode:
    """Shortcut for ``SchemaNormalizer(ref_factory).normalize(raw)``."""
    return SchemaNormalizer(ref_factory).normalize(raw)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "RefFactory",
    "SchemaNormalizer",
    "normalize_schema",
]

logger.debug("apimodel.normalizer loaded: %d public symbols.", len(__all__))
