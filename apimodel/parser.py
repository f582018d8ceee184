# File: apimodel/parser.py
"""
apimodel - OpenAPI Schema Parser
==================================
Sequential pipeline facade::

    load → version check → structure check → resolve references
         → extract endpoints → map models → generate validation rules

Every stage either succeeds completely or raises; no partial result is
ever returned.  Parse results are cached per source and invalidated
when the document content hash changes (see ``apimodel.cache``).

Usage::

    parser = OpenAPISchemaParser()
    result = parser.parse("petstore.yaml")
    result.get_model_names()                        # ['Pet']
    result.get_validation_rules_for_schema("Pet")   # {'id': ['required', 'integer'], ...}
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from apimodel.cache import DocumentCache
from apimodel.endpoints import (
    EndpointExtractor,
    extract_info,
    extract_security_schemes,
    extract_servers,
)
from apimodel.exceptions import UnsupportedVersionError
from apimodel.loader import DocumentLoader
from apimodel.mapper import ModelMapper
from apimodel.models import (
    AttributeRecord,
    EndpointRecord,
    ModelMapping,
    OperationBinding,
    ParserConfig,
    RelationshipRecord,
    SchemaNode,
)
from apimodel.resolver import ReferenceResolver, SchemaGraph
from apimodel.rules import RuleGenerator, RuleSet
from apimodel.utils import Timer, sha256_hex
from apimodel.validators import ValidationResult, validate_document

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("apimodel.parser")

DEFAULT_MEDIA_TYPE: str = "application/json"


def document_version(document: Dict[str, Any]) -> str:
    """The ``openapi`` (or legacy ``swagger``) version string, ``""`` if absent."""
    raw: Any = document.get("openapi", document.get("swagger"))
    return "" if raw is None else str(raw)


def check_version(document: Dict[str, Any], supported: List[str]) -> str:
    """
    Raises:
        UnsupportedVersionError: the version is not in *supported*.
    """
    version: str = document_version(document)
    if version not in supported:
        raise UnsupportedVersionError(version, supported)
    logger.debug("OpenAPI version %s accepted", version)
    return version


# ---------------------------------------------------------------------------
# Parse result
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class ParseResult:
    """Everything derived from one document."""

    source: str
    openapi: str
    content_hash: str
    graph: SchemaGraph
    endpoints: Dict[str, EndpointRecord]
    model_mappings: Dict[str, ModelMapping]
    validation_rules: Dict[str, Dict[str, Any]]
    structure: ValidationResult
    info: Dict[str, Any] = field(default_factory=dict)
    servers: List[Dict[str, Any]] = field(default_factory=list)
    security_schemes: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    @property
    def schemas(self) -> Dict[str, SchemaNode]:
        return self.graph.schemas

    # -- Models -------------------------------------------------------------

    def get_model_mapping(self, model_name: str) -> Optional[ModelMapping]:
        return self.model_mappings.get(model_name)

    def get_model_names(self) -> List[str]:
        return list(self.model_mappings)

    def get_model_operations(self, model_name: str) -> List[OperationBinding]:
        mapping: Optional[ModelMapping] = self.get_model_mapping(model_name)
        return list(mapping.operations) if mapping else []

    def get_model_attributes(self, model_name: str) -> List[AttributeRecord]:
        mapping: Optional[ModelMapping] = self.get_model_mapping(model_name)
        return list(mapping.attributes) if mapping else []

    def get_model_relationships(self, model_name: str) -> List[RelationshipRecord]:
        mapping: Optional[ModelMapping] = self.get_model_mapping(model_name)
        return list(mapping.relationships) if mapping else []

    # -- Rules --------------------------------------------------------------

    def get_validation_rules_for_schema(self, schema_name: str) -> RuleSet:
        return dict(self.validation_rules["schemas"].get(schema_name, {}))

    def get_validation_rules_for_endpoint(
        self, operation_id: str, media_type: str = DEFAULT_MEDIA_TYPE
    ) -> RuleSet:
        """Parameter rules merged with the request body rules for *media_type*."""
        entry: Dict[str, Any] = self.validation_rules["endpoints"].get(operation_id, {})
        rules: RuleSet = dict(entry.get("parameters", {}))
        rules.update(entry.get("request_body", {}).get(media_type, {}))
        return rules

    def primary_validation_rules(self) -> RuleSet:
        """
        Rules of the first mapped model's schema, else of the first
        component schema, else every endpoint's parameter rules merged.
        """
        for mapping in self.model_mappings.values():
            primary: Optional[str] = mapping.primary_schema
            if primary and self.validation_rules["schemas"].get(primary):
                return self.get_validation_rules_for_schema(primary)
            break

        for rules in self.validation_rules["schemas"].values():
            if rules:
                return dict(rules)

        merged: RuleSet = {}
        for entry in self.validation_rules["endpoints"].values():
            merged.update(entry.get("parameters", {}))
        return merged

    # -- Output -------------------------------------------------------------

    def inspect(self) -> Dict[str, Any]:
        """JSON-ready summary of endpoints and model mappings."""
        return {
            "source": self.source,
            "openapi": self.openapi,
            "info": self.info,
            "endpoints": [
                {
                    "operation_id": ep.operation_id,
                    "method": ep.method,
                    "path": ep.path,
                    "summary": ep.summary,
                    "tags": list(ep.tags),
                    "parameters": [p.name for p in ep.parameters],
                    "request_body": (
                        list(ep.request_body.content) if ep.request_body is not None else []
                    ),
                    "responses": list(ep.responses),
                }
                for ep in self.endpoints.values()
            ],
            "models": {
                name: mapping.model_dump(
                    mode="json", exclude={"attributes": {"__all__": {"schema_node"}}}
                )
                for name, mapping in self.model_mappings.items()
            },
            "structure": self.structure.to_dict(),
        }

    def __repr__(self) -> str:
        return (
            f"<ParseResult {self.source} openapi={self.openapi} "
            f"{len(self.endpoints)} endpoints, {len(self.model_mappings)} models>"
        )


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class OpenAPISchemaParser:
    """
    Run the full pipeline for one source at a time.

    Args:
        config: Parser settings.
        loader: Document loader (inject one with a custom ``httpx.Client``).
        cache: Parse cache; created from ``cache_enabled``/``cache_ttl``
            when omitted.
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        loader: Optional[DocumentLoader] = None,
        cache: Optional[DocumentCache] = None,
    ) -> None:
        self.config: ParserConfig = config or ParserConfig()
        self.loader: DocumentLoader = loader or DocumentLoader(self.config)
        self.cache: Optional[DocumentCache] = cache
        if self.cache is None and self.config.cache_enabled:
            self.cache = DocumentCache(
                ttl=self.config.cache_ttl, maxsize=self.config.cache_max_entries
            )
        self.rules: RuleGenerator = RuleGenerator()

    def parse(self, source: str, use_cache: bool = True) -> ParseResult:
        """
        Load and process *source* (path or URL).

        The document is always fetched so a changed content hash
        invalidates the cached result.
        """
        logger.info("Parsing OpenAPI document: %s", source)
        text: str = self.loader.fetch(source)
        content_hash: str = sha256_hex(text)

        if use_cache and self.cache is not None:
            cached: Optional[ParseResult] = self.cache.get(source, content_hash)
            if cached is not None:
                logger.info("Using cached parse result for %s", source)
                return cached

        document: Dict[str, Any] = self.loader.parse_text(text, source)
        result: ParseResult = self.parse_document(document, source, content_hash)

        if use_cache and self.cache is not None:
            self.cache.put(source, content_hash, result)
        return result

    def parse_document(
        self,
        document: Dict[str, Any],
        source: str = "<memory>",
        content_hash: Optional[str] = None,
    ) -> ParseResult:
        """Process an already-deserialised document."""
        with Timer(f"parse {source}"):
            version: str = check_version(document, self.config.supported_versions)
            structure: ValidationResult = self.check_structure(document, source)

            graph: SchemaGraph = ReferenceResolver(self.config, self.loader).resolve(
                document, source
            )

            extractor: EndpointExtractor = EndpointExtractor(graph)
            endpoints: Dict[str, EndpointRecord] = extractor.catalog(extractor.extract())

            mappings: Dict[str, ModelMapping] = ModelMapper(graph, self.config).map_models(
                endpoints.values()
            )
            rules: Dict[str, Dict[str, Any]] = self.rules.generate(graph.schemas, endpoints)

        result: ParseResult = ParseResult(
            source=source,
            openapi=version,
            content_hash=content_hash
            or sha256_hex(json.dumps(document, sort_keys=True, default=str)),
            graph=graph,
            endpoints=endpoints,
            model_mappings=mappings,
            validation_rules=rules,
            structure=structure,
            info=extract_info(document),
            servers=extract_servers(document),
            security_schemes=extract_security_schemes(document),
        )
        logger.info(
            "Parsed %s: %d schemas, %d endpoints, %d models",
            source,
            len(graph.schemas),
            len(endpoints),
            len(mappings),
        )
        return result

    def check_structure(self, document: Dict[str, Any], source: str) -> ValidationResult:
        """
        Raises:
            InvalidDocumentError: structural errors while ``strict_structure`` is on.
        """
        structure: ValidationResult = validate_document(document)
        if self.config.strict_structure:
            structure.raise_for_errors(source)
        for issue in structure.errors:
            logger.warning("Structure problem in %s at %s: %s", source, issue.pointer, issue.message)
        for issue in structure.warnings:
            logger.debug("Structure warning in %s: %s", source, issue.message)
        return structure

    def clear_cache(self) -> int:
        return self.cache.clear() if self.cache is not None else 0


def parse(source: str, config: Optional[ParserConfig] = None) -> ParseResult:
    return OpenAPISchemaParser(config).parse(source)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "OpenAPISchemaParser",
    "ParseResult",
    "parse",
    "check_version",
    "document_version",
    "DEFAULT_MEDIA_TYPE",
]

logger.debug("apimodel.parser loaded: %d public symbols.", len(__all__))
