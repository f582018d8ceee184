"""
tests/conftest.py
Shared fixtures for the apimodel test suite.

Documents are plain dicts built per test so each test can mutate freely.
No external mocking libraries are used; real file I/O is performed
inside temporary directories managed by pytest's tmp_path fixtures, and
HTTP is served through ``httpx.MockTransport``.
"""

from __future__ import annotations

import copy
import json
import pathlib
from datetime import datetime, timezone
from typing import Any, Callable, Dict

import pytest
import yaml

from apimodel.models import GenerationConfig, ParserConfig, Settings, VersioningConfig
from apimodel.resolver import ReferenceResolver, SchemaGraph


# ---------------------------------------------------------------------------
# Raw document fixtures
# ---------------------------------------------------------------------------

_PETSTORE: Dict[str, Any] = {
    "openapi": "3.0.3",
    "info": {"title": "Petstore", "version": "1.0.0"},
    "servers": [{"url": "https://petstore.example.com/v1"}],
    "paths": {
        "/pets": {
            "get": {
                "operationId": "listPets",
                "summary": "List all pets",
                "tags": ["pets"],
                "parameters": [
                    {
                        "name": "limit",
                        "in": "query",
                        "schema": {"type": "integer", "minimum": 1, "maximum": 100},
                    }
                ],
                "responses": {
                    "200": {
                        "description": "A list of pets",
                        "content": {
                            "application/json": {
                                "schema": {
                                    "type": "array",
                                    "items": {"$ref": "#/components/schemas/Pet"},
                                }
                            }
                        },
                    }
                },
            },
            "post": {
                "operationId": "createPet",
                "summary": "Create a pet",
                "tags": ["pets"],
                "requestBody": {
                    "required": True,
                    "content": {
                        "application/json": {"schema": {"$ref": "#/components/schemas/Pet"}}
                    },
                },
                "responses": {"201": {"description": "Created"}},
            },
        },
        "/pets/{petId}": {
            "get": {
                "operationId": "showPetById",
                "summary": "Info for a specific pet",
                "tags": ["pets"],
                "parameters": [
                    {
                        "name": "petId",
                        "in": "path",
                        "required": True,
                        "schema": {"type": "string"},
                    }
                ],
                "responses": {
                    "200": {
                        "description": "Expected response to a valid request",
                        "content": {
                            "application/json": {
                                "schema": {"$ref": "#/components/schemas/Pet"}
                            }
                        },
                    }
                },
            }
        },
    },
    "components": {
        "schemas": {
            "Pet": {
                "type": "object",
                "required": ["id", "name"],
                "properties": {
                    "id": {"type": "integer", "format": "int64"},
                    "name": {"type": "string", "maxLength": 100},
                    "tag": {"type": "string"},
                },
            }
        }
    },
}


_CYCLIC: Dict[str, Any] = {
    "openapi": "3.0.3",
    "info": {"title": "Tree", "version": "1.0.0"},
    "paths": {
        "/nodes": {
            "get": {
                "operationId": "listNodes",
                "responses": {
                    "200": {
                        "description": "ok",
                        "content": {
                            "application/json": {"schema": {"$ref": "#/components/schemas/Node"}}
                        },
                    }
                },
            }
        }
    },
    "components": {
        "schemas": {
            "Node": {
                "type": "object",
                "required": ["name"],
                "properties": {
                    "name": {"type": "string"},
                    "children": {
                        "type": "array",
                        "items": {"$ref": "#/components/schemas/Node"},
                    },
                },
            }
        }
    },
}


_RELATIONS: Dict[str, Any] = {
    "openapi": "3.1.0",
    "info": {"title": "Shop", "version": "2.0.0"},
    "paths": {
        "/products": {
            "get": {
                "operationId": "listProducts",
                "tags": ["products"],
                "responses": {
                    "200": {
                        "description": "ok",
                        "content": {
                            "application/json": {
                                "schema": {
                                    "type": "array",
                                    "items": {"$ref": "#/components/schemas/Product"},
                                }
                            }
                        },
                    }
                },
            },
            "post": {
                "operationId": "createProduct",
                "tags": ["products"],
                "requestBody": {
                    "content": {
                        "application/json": {
                            "schema": {"$ref": "#/components/schemas/Product"}
                        }
                    }
                },
                "responses": {"201": {"description": "created"}},
            },
        },
        "/products/{productId}": {
            "parameters": [
                {"name": "productId", "in": "path", "required": True, "schema": {"type": "integer"}}
            ],
            "get": {
                "operationId": "showProduct",
                "tags": ["products"],
                "responses": {"200": {"description": "ok"}},
            },
            "put": {
                "operationId": "updateProduct",
                "tags": ["products"],
                "responses": {"200": {"description": "ok"}},
            },
            "delete": {
                "operationId": "deleteProduct",
                "tags": ["products"],
                "responses": {"204": {"description": "deleted"}},
            },
        },
    },
    "components": {
        "schemas": {
            "Category": {
                "type": "object",
                "properties": {
                    "id": {"type": "integer"},
                    "title": {"type": "string"},
                },
            },
            "Tag": {
                "type": "object",
                "properties": {"label": {"type": "string"}},
            },
            "Product": {
                "type": "object",
                "required": ["name", "price"],
                "properties": {
                    "id": {"type": "integer", "readOnly": True},
                    "name": {"type": "string", "minLength": 1, "maxLength": 80},
                    "price": {"type": "number", "minimum": 0},
                    "email": {"type": "string", "format": "email"},
                    "status": {"type": "string", "enum": ["draft", "published"]},
                    "category": {"$ref": "#/components/schemas/Category"},
                    "tags": {
                        "type": "array",
                        "items": {"$ref": "#/components/schemas/Tag"},
                    },
                    "address": {
                        "type": "object",
                        "properties": {
                            "street": {"type": "string"},
                            "city": {"type": "string"},
                        },
                    },
                },
            },
        }
    },
}


@pytest.fixture()
def petstore_dict() -> Dict[str, Any]:
    """The classic three-operation petstore document."""
    return copy.deepcopy(_PETSTORE)


@pytest.fixture()
def cyclic_dict() -> Dict[str, Any]:
    """A document whose ``Node`` schema refers to itself."""
    return copy.deepcopy(_CYCLIC)


@pytest.fixture()
def relations_dict() -> Dict[str, Any]:
    """A document exercising belongsTo, hasMany and embedded relationships."""
    return copy.deepcopy(_RELATIONS)


# ---------------------------------------------------------------------------
# File fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def petstore_yaml_path(petstore_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    """Write the petstore to a temporary YAML file and return its path."""
    path = tmp_path / "petstore.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.safe_dump(petstore_dict, fh, default_flow_style=False, sort_keys=False)
    return path


@pytest.fixture()
def petstore_json_path(petstore_dict: Dict[str, Any], tmp_path: pathlib.Path) -> pathlib.Path:
    path = tmp_path / "petstore.json"
    path.write_text(json.dumps(petstore_dict, indent=2), encoding="utf-8")
    return path


@pytest.fixture()
def output_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """Clean output directory inside tmp_path."""
    out = tmp_path / "output"
    out.mkdir()
    return out


# ---------------------------------------------------------------------------
# Configuration fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def parser_config() -> ParserConfig:
    return ParserConfig()


@pytest.fixture()
def generation_config(output_dir: pathlib.Path) -> GenerationConfig:
    """Default generation config pointing at the temporary output directory."""
    return GenerationConfig(output_directory=str(output_dir))


@pytest.fixture()
def versioning_config(tmp_path: pathlib.Path) -> VersioningConfig:
    return VersioningConfig(storage_path=str(tmp_path / "versions"))


@pytest.fixture()
def settings(
    generation_config: GenerationConfig, versioning_config: VersioningConfig
) -> Settings:
    return Settings(generation=generation_config, versioning=versioning_config)


# ---------------------------------------------------------------------------
# Resolved graph fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def resolve() -> Callable[[Dict[str, Any]], SchemaGraph]:
    """Resolve a raw document with the default parser config."""

    def _resolve(document: Dict[str, Any]) -> SchemaGraph:
        return ReferenceResolver(ParserConfig()).resolve(document, "<test>")

    return _resolve


@pytest.fixture()
def petstore_graph(
    petstore_dict: Dict[str, Any], resolve: Callable[[Dict[str, Any]], SchemaGraph]
) -> SchemaGraph:
    return resolve(petstore_dict)


@pytest.fixture()
def relations_graph(
    relations_dict: Dict[str, Any], resolve: Callable[[Dict[str, Any]], SchemaGraph]
) -> SchemaGraph:
    return resolve(relations_dict)


# ---------------------------------------------------------------------------
# Clock fixtures
# ---------------------------------------------------------------------------


class FakeClock:
    """Manually advanced clock returning aware datetimes."""

    def __init__(self, start: datetime) -> None:
        self.now: datetime = start

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock(datetime(2026, 1, 1, 10, 0, 0, tzinfo=timezone.utc))
