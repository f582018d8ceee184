"""
tests/test_endpoints.py
Comprehensive unit tests for apimodel.endpoints module.

Tests cover:
- Extraction order (path order × fixed method order)
- Parameter merging, path parameter requirement, referenced parameters
- Request bodies and responses with normalized schemas
- Operation id synthesis and duplicate handling in the catalog
- Document-level info, servers and security schemes
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict

import pytest

from apimodel.endpoints import (
    EndpointExtractor,
    extract_endpoints,
    extract_info,
    extract_security_schemes,
    extract_servers,
)
from apimodel.exceptions import MalformedDocumentError
from apimodel.models import SchemaKind
from apimodel.resolver import SchemaGraph, schema_key

Resolve = Callable[[Dict[str, Any]], SchemaGraph]


# ===========================================================================
# Extraction order
# ===========================================================================


class TestExtraction:
    """Tests for EndpointExtractor.extract."""

    def test_petstore_order(self, petstore_graph: SchemaGraph) -> None:
        endpoints = EndpointExtractor(petstore_graph).extract()
        assert [(e.method, e.path, e.operation_id) for e in endpoints] == [
            ("get", "/pets", "listPets"),
            ("post", "/pets", "createPet"),
            ("get", "/pets/{petId}", "showPetById"),
        ]

    def test_method_order_is_fixed(self, resolve: Resolve) -> None:
        doc = {
            "openapi": "3.0.3",
            "info": {"version": "1"},
            "paths": {
                "/items": {
                    "delete": {"responses": {"204": {"description": "gone"}}},
                    "get": {"responses": {"200": {"description": "ok"}}},
                    "patch": {"responses": {"200": {"description": "ok"}}},
                }
            },
        }
        methods = [e.method for e in extract_endpoints(resolve(doc))]
        assert methods == ["get", "patch", "delete"]

    def test_operation_id_synthesized(self, resolve: Resolve) -> None:
        doc = {
            "openapi": "3.0.3",
            "info": {"version": "1"},
            "paths": {"/pets/{petId}": {"get": {"responses": {"200": {"description": "ok"}}}}},
        }
        (endpoint,) = extract_endpoints(resolve(doc))
        assert endpoint.operation_id == "get_pets__petId"

    def test_summary_and_tags(self, petstore_graph: SchemaGraph) -> None:
        endpoint = EndpointExtractor(petstore_graph).extract()[0]
        assert endpoint.summary == "List all pets"
        assert endpoint.tags == ["pets"]
        assert endpoint.deprecated is False

    def test_operation_must_be_mapping(self, resolve: Resolve) -> None:
        doc = {"openapi": "3.0.3", "paths": {"/pets": {"get": "listPets"}}}
        with pytest.raises(MalformedDocumentError):
            extract_endpoints(resolve(doc))


# ===========================================================================
# Parameters
# ===========================================================================


class TestParameters:
    """Tests for parameter records."""

    def test_query_parameter(self, petstore_graph: SchemaGraph) -> None:
        endpoint = EndpointExtractor(petstore_graph).extract()[0]
        limit = endpoint.get_parameter("limit", "query")
        assert limit is not None
        assert limit.required is False
        assert limit.schema_node is not None
        assert limit.schema_node.kind == SchemaKind.INTEGER
        assert limit.schema_node.maximum == 100

    def test_path_parameter_forced_required(self, resolve: Resolve) -> None:
        doc = {
            "openapi": "3.0.3",
            "paths": {
                "/pets/{petId}": {
                    "get": {
                        "parameters": [{"name": "petId", "in": "path", "schema": {"type": "string"}}],
                        "responses": {"200": {"description": "ok"}},
                    }
                }
            },
        }
        (endpoint,) = extract_endpoints(resolve(doc))
        assert endpoint.has_path_parameters
        assert endpoint.parameters[0].required is True

    def test_path_level_parameters_merged(self, relations_graph: SchemaGraph) -> None:
        catalog = EndpointExtractor(relations_graph).catalog()
        for op_id in ("showProduct", "updateProduct", "deleteProduct"):
            names = [p.name for p in catalog[op_id].parameters]
            assert names == ["productId"]

    def test_operation_overrides_path_parameter(self, resolve: Resolve) -> None:
        doc = {
            "openapi": "3.0.3",
            "paths": {
                "/pets": {
                    "parameters": [
                        {"name": "limit", "in": "query", "description": "shared"},
                        {"name": "page", "in": "query"},
                    ],
                    "get": {
                        "parameters": [{"name": "limit", "in": "query", "description": "own"}],
                        "responses": {"200": {"description": "ok"}},
                    },
                }
            },
        }
        (endpoint,) = extract_endpoints(resolve(doc))
        assert [p.name for p in endpoint.parameters] == ["limit", "page"]
        assert endpoint.parameters[0].description == "own"

    def test_referenced_parameter(self, resolve: Resolve) -> None:
        doc = {
            "openapi": "3.0.3",
            "paths": {
                "/pets": {
                    "get": {
                        "parameters": [{"$ref": "#/components/parameters/Limit"}],
                        "responses": {"200": {"description": "ok"}},
                    }
                }
            },
            "components": {
                "parameters": {
                    "Limit": {"name": "limit", "in": "query", "schema": {"type": "integer"}}
                }
            },
        }
        (endpoint,) = extract_endpoints(resolve(doc))
        assert endpoint.parameters[0].name == "limit"

    def test_content_parameter_schema(self, resolve: Resolve) -> None:
        doc = {
            "openapi": "3.0.3",
            "paths": {
                "/search": {
                    "get": {
                        "parameters": [
                            {
                                "name": "filter",
                                "in": "query",
                                "content": {"application/json": {"schema": {"type": "object"}}},
                            }
                        ],
                        "responses": {"200": {"description": "ok"}},
                    }
                }
            },
        }
        (endpoint,) = extract_endpoints(resolve(doc))
        assert endpoint.parameters[0].schema_node is not None
        assert endpoint.parameters[0].schema_node.kind == SchemaKind.OBJECT

    @pytest.mark.parametrize(
        "param",
        [
            {"in": "query"},
            {"name": "x", "in": "body"},
        ],
    )
    def test_invalid_parameter(self, param: Dict[str, Any], resolve: Resolve) -> None:
        doc = {
            "openapi": "3.0.3",
            "paths": {"/x": {"get": {"parameters": [param], "responses": {"200": {"description": "ok"}}}}},
        }
        with pytest.raises(MalformedDocumentError):
            extract_endpoints(resolve(doc))


# ===========================================================================
# Bodies and responses
# ===========================================================================


class TestBodiesAndResponses:
    """Tests for request body and response records."""

    def test_request_body(self, petstore_graph: SchemaGraph) -> None:
        catalog = EndpointExtractor(petstore_graph).catalog()
        body = catalog["createPet"].request_body
        assert body is not None
        assert body.required is True
        schema = body.content["application/json"]
        assert schema is not None
        assert schema.kind == SchemaKind.REFERENCE
        assert schema.target == schema_key("Pet")
        assert schema.resolved is petstore_graph.get("Pet")

    def test_responses(self, petstore_graph: SchemaGraph) -> None:
        catalog = EndpointExtractor(petstore_graph).catalog()
        responses = catalog["listPets"].responses
        assert list(responses) == ["200"]
        schema = responses["200"].content["application/json"]
        assert schema is not None and schema.kind == SchemaKind.ARRAY
        assert catalog["createPet"].responses["201"].content == {}

    def test_media_type_without_schema(self, resolve: Resolve) -> None:
        doc = {
            "openapi": "3.0.3",
            "paths": {
                "/upload": {
                    "post": {
                        "requestBody": {"content": {"application/octet-stream": {}}},
                        "responses": {"200": {"description": "ok", "headers": {"X-Rate": {}}}},
                    }
                }
            },
        }
        (endpoint,) = extract_endpoints(resolve(doc))
        assert endpoint.request_body is not None
        assert endpoint.request_body.content == {"application/octet-stream": None}
        assert endpoint.responses["200"].headers == ["X-Rate"]

    def test_endpoint_schemas(self, petstore_graph: SchemaGraph) -> None:
        catalog = EndpointExtractor(petstore_graph).catalog()
        assert len(list(catalog["showPetById"].schemas())) >= 2


# ===========================================================================
# Catalog
# ===========================================================================


class TestCatalog:
    """Tests for EndpointExtractor.catalog."""

    def test_keys_in_order(self, petstore_graph: SchemaGraph) -> None:
        catalog = EndpointExtractor(petstore_graph).catalog()
        assert list(catalog) == ["listPets", "createPet", "showPetById"]

    def test_duplicate_operation_id_replaces(
        self, resolve: Resolve, caplog: pytest.LogCaptureFixture
    ) -> None:
        doc = {
            "openapi": "3.0.3",
            "paths": {
                "/a": {"get": {"operationId": "dup", "responses": {"200": {"description": "ok"}}}},
                "/b": {"get": {"operationId": "dup", "responses": {"200": {"description": "ok"}}}},
            },
        }
        with caplog.at_level(logging.WARNING, logger="apimodel.endpoints"):
            catalog = EndpointExtractor(resolve(doc)).catalog()
        assert list(catalog) == ["dup"]
        assert catalog["dup"].path == "/b"
        assert "Duplicate operationId" in caplog.text


# ===========================================================================
# Document sections
# ===========================================================================


class TestDocumentSections:
    """Tests for extract_info / extract_servers / extract_security_schemes."""

    def test_info(self, petstore_dict: Dict[str, Any]) -> None:
        info = extract_info(petstore_dict)
        assert info["title"] == "Petstore"
        assert info["version"] == "1.0.0"
        assert info["contact"] == {}

    def test_numeric_version_stringified(self) -> None:
        assert extract_info({"info": {"version": 2}})["version"] == "2"

    def test_servers(self, petstore_dict: Dict[str, Any]) -> None:
        assert extract_servers(petstore_dict) == [
            {"url": "https://petstore.example.com/v1", "description": "", "variables": {}}
        ]

    def test_security_schemes(self) -> None:
        doc = {
            "components": {
                "securitySchemes": {
                    "bearer": {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"},
                    "apiKey": {"type": "apiKey", "name": "X-Key", "in": "header"},
                }
            }
        }
        schemes = extract_security_schemes(doc)
        assert schemes["bearer"]["scheme"] == "bearer"
        assert schemes["bearer"]["bearerFormat"] == "JWT"
        assert schemes["apiKey"]["in"] == "header"
        assert schemes["apiKey"]["flows"] == {}

    def test_malformed_sections_yield_empty_values(self) -> None:
        assert extract_info({"info": "petstore"})["title"] == ""
        assert extract_info({})["contact"] == {}
        assert extract_servers({"servers": {"url": "https://x"}}) == []
        assert extract_security_schemes({"components": "none"}) == {}
        assert extract_security_schemes({"components": {"securitySchemes": ["bearer"]}}) == {}
