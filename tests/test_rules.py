"""
tests/test_rules.py
Comprehensive unit tests for apimodel.rules module.

Tests cover:
- Token order for string, numeric and array constraints
- Presence markers (required / nullable)
- Format and enum tokens
- Composition (allOf concatenation, first anyOf/oneOf branch)
- Flat rule sets with dotted and ``*`` keys, including cyclic schemas
- Endpoint rules (parameters and request bodies)
"""

from __future__ import annotations

from typing import Any, Callable, Dict

import pytest

from apimodel.endpoints import EndpointExtractor
from apimodel.mapper import ModelMapper
from apimodel.normalizer import normalize_schema
from apimodel.resolver import SchemaGraph
from apimodel.rules import (
    RuleGenerator,
    format_enum_value,
    format_number,
    generate_rules,
)

Resolve = Callable[[Dict[str, Any]], SchemaGraph]


def _rules(raw: Dict[str, Any], required: Any = None) -> list:
    return generate_rules(normalize_schema(raw), required)


# ===========================================================================
# Single field tokens
# ===========================================================================


class TestFieldTokens:
    """Tests for RuleGenerator.rules_for."""

    def test_string_token_order(self) -> None:
        raw = {"type": "string", "minLength": 3, "maxLength": 10, "format": "email"}
        assert _rules(raw, True) == ["required", "string", "min:3", "max:10", "email"]

    def test_pattern_slashes_escaped(self) -> None:
        assert _rules({"type": "string", "pattern": "^a/b$"}) == ["string", "regex:/^a\\/b$/"]

    def test_integer_bounds(self) -> None:
        assert _rules({"type": "integer", "minimum": 1, "maximum": 10}) == ["integer", "min:1", "max:10"]

    def test_exclusive_bounds_boolean_form(self) -> None:
        raw = {"type": "number", "minimum": 0, "exclusiveMinimum": True, "maximum": 5, "exclusiveMaximum": True}
        assert _rules(raw) == ["numeric", "gt:0", "lt:5"]

    def test_exclusive_bounds_numeric_form(self) -> None:
        raw = {"type": "number", "exclusiveMinimum": 0, "exclusiveMaximum": 10}
        assert _rules(raw) == ["numeric", "gt:0", "lt:10"]

    def test_multiple_of(self) -> None:
        assert _rules({"type": "number", "multipleOf": 0.5}) == ["numeric", "multiple_of:0.5"]

    def test_array_bounds(self) -> None:
        raw = {"type": "array", "minItems": 1, "maxItems": 3, "items": {"type": "string"}}
        assert _rules(raw) == ["array", "min:1", "max:3"]

    def test_object_is_array_token(self) -> None:
        assert _rules({"type": "object"}) == ["array"]

    def test_boolean(self) -> None:
        assert _rules({"type": "boolean"}, False) == ["nullable", "boolean"]

    @pytest.mark.parametrize(
        "fmt, token",
        [
            ("email", "email"),
            ("uri", "url"),
            ("date", "date"),
            ("date-time", "date"),
            ("uuid", "uuid"),
            ("ipv4", "ip"),
            ("ipv6", "ipv6"),
        ],
    )
    def test_format_tokens(self, fmt: str, token: str) -> None:
        assert _rules({"type": "string", "format": fmt}) == ["string", token]

    def test_unknown_or_non_string_format_ignored(self) -> None:
        assert _rules({"type": "string", "format": "binary"}) == ["string"]
        assert _rules({"type": "integer", "format": "int64"}) == ["integer"]

    def test_enum(self) -> None:
        assert _rules({"type": "string", "enum": ["a", "b"]}) == ["string", "in:a,b"]
        assert _rules({"type": "integer", "enum": [1, 2]}) == ["integer", "in:1,2"]


class TestPresenceMarkers:
    """Tests for the required / nullable marker."""

    def test_required(self) -> None:
        assert _rules({"type": "string"}, True)[0] == "required"

    def test_optional(self) -> None:
        assert _rules({"type": "string"}, False)[0] == "nullable"

    def test_required_but_nullable(self) -> None:
        assert _rules({"type": "string", "nullable": True}, True) == ["nullable", "string"]

    def test_standalone_has_no_marker(self) -> None:
        assert _rules({"type": "string"}) == ["string"]

    def test_standalone_nullable(self) -> None:
        assert _rules({"type": ["integer", "null"]}) == ["nullable", "integer"]

    def test_missing_schema(self) -> None:
        assert RuleGenerator().rules_for(None, required=True) == ["required"]
        assert RuleGenerator().rules_for(None) == []


class TestComposition:
    """Tests for allOf / anyOf / oneOf token handling."""

    def test_all_of_concatenated_and_deduped(self) -> None:
        raw = {"allOf": [{"type": "string", "minLength": 1}, {"type": "string", "maxLength": 5}]}
        assert _rules(raw) == ["string", "min:1", "max:5"]

    def test_one_of_first_branch(self) -> None:
        assert _rules({"oneOf": [{"type": "integer"}, {"type": "string"}]}) == ["integer"]

    def test_any_of_first_branch(self) -> None:
        assert _rules({"anyOf": [{"type": "boolean"}, {"type": "string"}]}) == ["boolean"]


# ===========================================================================
# Rule sets
# ===========================================================================


class TestRuleSet:
    """Tests for RuleGenerator.rule_set."""

    def test_petstore_pet(self, petstore_graph: SchemaGraph) -> None:
        rules = RuleGenerator().rule_set(petstore_graph.get("Pet"))
        assert rules == {
            "id": ["required", "integer"],
            "name": ["required", "string", "max:100"],
            "tag": ["nullable", "string"],
        }

    def test_scalar_root_is_empty(self) -> None:
        assert RuleGenerator().rule_set(normalize_schema({"type": "string"})) == {}
        assert RuleGenerator().rule_set(None) == {}

    def test_array_root(self) -> None:
        node = normalize_schema({"type": "array", "items": {"type": "string", "maxLength": 4}})
        assert RuleGenerator().rule_set(node) == {"*": ["string", "max:4"]}

    def test_nested_keys(self) -> None:
        node = normalize_schema(
            {
                "type": "object",
                "required": ["address"],
                "properties": {
                    "address": {
                        "type": "object",
                        "required": ["city"],
                        "properties": {"city": {"type": "string"}, "zip": {"type": "string"}},
                    },
                    "tags": {"type": "array", "items": {"type": "string"}},
                },
            }
        )
        rules = RuleGenerator().rule_set(node)
        assert rules["address"] == ["required", "array"]
        assert rules["address.city"] == ["required", "string"]
        assert rules["address.zip"] == ["nullable", "string"]
        assert rules["tags"] == ["nullable", "array"]
        assert rules["tags.*"] == ["string"]

    def test_references_followed(self, relations_graph: SchemaGraph) -> None:
        rules = RuleGenerator().rule_set(relations_graph.get("Product"))
        assert rules["category"] == ["nullable", "array"]
        assert rules["category.title"] == ["nullable", "string"]
        assert rules["tags.*.label"] == ["nullable", "string"]
        assert rules["status"] == ["nullable", "string", "in:draft,published"]
        assert rules["price"] == ["required", "numeric", "min:0"]

    def test_cycle_expanded_once(self, cyclic_dict: Dict[str, Any], resolve: Resolve) -> None:
        graph = resolve(cyclic_dict)
        rules = RuleGenerator().rule_set(graph.get("Node"))
        assert rules["name"] == ["required", "string"]
        assert rules["children.*"] == ["array"]
        assert rules["children.*.name"] == ["required", "string"]
        assert "children.*.children.*.name" not in rules

    def test_all_of_properties_merged(self, resolve: Resolve) -> None:
        doc = {
            "openapi": "3.0.3",
            "paths": {},
            "components": {
                "schemas": {
                    "Base": {"type": "object", "required": ["id"], "properties": {"id": {"type": "integer"}}},
                    "Extended": {
                        "allOf": [
                            {"$ref": "#/components/schemas/Base"},
                            {"type": "object", "required": ["extra"], "properties": {"extra": {"type": "string"}}},
                        ]
                    },
                }
            },
        }
        rules = RuleGenerator().rule_set(resolve(doc).get("Extended"))
        assert rules == {"id": ["required", "integer"], "extra": ["required", "string"]}

    def test_attribute_rules(self, relations_graph: SchemaGraph) -> None:
        endpoints = EndpointExtractor(relations_graph).extract()
        product = ModelMapper(relations_graph).map_models(endpoints)["Product"]
        rules = RuleGenerator().attribute_rules(product.attributes)
        assert rules["name"] == ["required", "string", "min:1", "max:80"]
        assert rules["address.street"] == ["nullable", "string"]
        assert rules["email"] == ["nullable", "string", "email"]


# ===========================================================================
# Endpoint rules
# ===========================================================================


class TestEndpointRules:
    """Tests for parameter and request body rules."""

    def test_parameter_rules(self, petstore_graph: SchemaGraph) -> None:
        catalog = EndpointExtractor(petstore_graph).catalog()
        generator = RuleGenerator()
        assert generator.parameter_rules(catalog["listPets"].parameters) == {
            "limit": ["nullable", "integer", "min:1", "max:100"]
        }
        assert generator.parameter_rules(catalog["showPetById"].parameters) == {
            "petId": ["required", "string"]
        }

    def test_request_body_rules(self, petstore_graph: SchemaGraph) -> None:
        catalog = EndpointExtractor(petstore_graph).catalog()
        rules = RuleGenerator().request_body_rules(catalog["createPet"].request_body)
        assert list(rules) == ["application/json"]
        assert rules["application/json"]["name"] == ["required", "string", "max:100"]
        assert RuleGenerator().request_body_rules(None) == {}

    def test_generate(self, petstore_graph: SchemaGraph) -> None:
        catalog = EndpointExtractor(petstore_graph).catalog()
        rules = RuleGenerator().generate(petstore_graph.schemas, catalog)
        assert set(rules) == {"schemas", "endpoints"}
        assert list(rules["schemas"]) == ["Pet"]
        assert list(rules["endpoints"]) == ["listPets", "createPet", "showPetById"]
        assert rules["endpoints"]["listPets"]["request_body"] == {}


# ===========================================================================
# Formatting helpers
# ===========================================================================


class TestFormatting:
    """Tests for format_number / format_enum_value."""

    @pytest.mark.parametrize(
        "value, text",
        [(3.0, "3"), (0.5, "0.5"), (7, "7"), (True, "true")],
    )
    def test_format_number(self, value: Any, text: str) -> None:
        assert format_number(value) == text

    def test_format_enum_value(self) -> None:
        assert format_enum_value(None) == "null"
        assert format_enum_value(False) == "false"
        assert format_enum_value("x") == "x"
