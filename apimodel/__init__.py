# File: apimodel/__init__.py
"""
apimodel - OpenAPI Schema Parser & Model Generator
=====================================================

Turns an OpenAPI 3.0/3.1 document (JSON or YAML, local file or URL) into
a resolved schema graph, an endpoint catalog, resource model mappings,
validation rules, and generated model and factory source files.

Architecture overview::

    ┌──────────────┐     ┌────────────────┐     ┌───────────────────┐
    │  CLI / Entry │────▶│ ModelGenerator │────▶│ TemplateGenerator │
    │   (cli.py)   │     │ (generator.py) │     │  (templates.py)   │
    └──────────────┘     └───────┬────────┘     └───────────────────┘
                                 │
               ┌─────────────────┼──────────────┐
               ▼                 ▼              ▼
    ┌─────────────────────┐ ┌───────────┐ ┌────────────┐
    │ OpenAPISchemaParser │ │ exporters │ │ versioning │
    │     (parser.py)     │ │   (.py)   │ │   (.py)    │
    └──────────┬──────────┘ └───────────┘ └────────────┘
               │
     loader → resolver/normalizer → endpoints → mapper → rules

Usage::

    # As a library
    from apimodel import OpenAPISchemaParser
    result = OpenAPISchemaParser().parse("petstore.yaml")
    result.get_model_names()

    # From the command line
    apimodel --source petstore.yaml --output ./generated --verbose

Public API:
    - OpenAPISchemaParser  - Parsing pipeline facade
    - ModelGenerator       - Parse, render and export orchestrator
    - TemplateGenerator    - Model and factory source renderer
    - SourceExporter       - File-system writer
    - SchemaVersionManager - Versioned document storage
"""

from __future__ import annotations

__version__: str = "1.0.0"
__author__: str = "apimodel contributors"
__license__: str = "MIT"

from apimodel.exceptions import (
    APIModelError,
    ExternalReferenceUnsupportedError,
    InvalidDocumentError,
    InvalidModelMappingError,
    MalformedDocumentError,
    SchemaVersionError,
    SourceError,
    SourceNotFoundError,
    SourceTooLargeError,
    SourceUnreadableError,
    UnresolvableReferenceError,
    UnsupportedVersionError,
    WouldOverwriteError,
)
from apimodel.models import (
    AttributeRecord,
    CrudType,
    EndpointRecord,
    GenerationConfig,
    ModelMapping,
    NamingConvention,
    OperationBinding,
    ParserConfig,
    RelationshipKind,
    RelationshipRecord,
    SchemaKind,
    SchemaNode,
    Settings,
    VersioningConfig,
    load_settings,
)
from apimodel.cache import DocumentCache
from apimodel.loader import DocumentLoader
from apimodel.resolver import ReferenceResolver, SchemaGraph
from apimodel.endpoints import EndpointExtractor
from apimodel.mapper import ModelMapper
from apimodel.rules import RuleGenerator
from apimodel.validators import ValidationResult, validate_document
from apimodel.parser import OpenAPISchemaParser, ParseResult
from apimodel.templates import TemplateGenerator
from apimodel.exporters import ExportManifest, ExportResult, SourceExporter
from apimodel.generator import GenerationReport, ModelGenerator
from apimodel.versioning import SchemaVersionManager

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    # Version info
    "__version__",
    "__author__",
    "__license__",
    # Pipeline
    "OpenAPISchemaParser",
    "ParseResult",
    "ModelGenerator",
    "GenerationReport",
    "DocumentLoader",
    "DocumentCache",
    "ReferenceResolver",
    "SchemaGraph",
    "EndpointExtractor",
    "ModelMapper",
    "RuleGenerator",
    "TemplateGenerator",
    "SourceExporter",
    "ExportManifest",
    "ExportResult",
    "SchemaVersionManager",
    # Validation
    "validate_document",
    "ValidationResult",
    # Models
    "AttributeRecord",
    "CrudType",
    "EndpointRecord",
    "GenerationConfig",
    "ModelMapping",
    "NamingConvention",
    "OperationBinding",
    "ParserConfig",
    "RelationshipKind",
    "RelationshipRecord",
    "SchemaKind",
    "SchemaNode",
    "Settings",
    "VersioningConfig",
    "load_settings",
    # Errors
    "APIModelError",
    "SourceError",
    "SourceNotFoundError",
    "SourceUnreadableError",
    "SourceTooLargeError",
    "MalformedDocumentError",
    "UnsupportedVersionError",
    "InvalidDocumentError",
    "UnresolvableReferenceError",
    "ExternalReferenceUnsupportedError",
    "WouldOverwriteError",
    "InvalidModelMappingError",
    "SchemaVersionError",
]
