"""
tests/test_templates.py
Comprehensive unit tests for apimodel.templates module.

Tests cover:
- Naming helpers (class, module, field and accessor names)
- Attribute annotations and casts
- Faker expressions and invalid values
- Model class rendering (class vars, fields, relationship accessors)
- Factory rendering (definition, enum states, invalid state)
- Package layout and deterministic output
"""

from __future__ import annotations

import ast
from typing import Any, Dict, Optional

import pytest

from apimodel.endpoints import EndpointExtractor
from apimodel.exceptions import InvalidModelMappingError
from apimodel.mapper import ModelMapper
from apimodel.models import AttributeRecord, GenerationConfig, ModelMapping, RelationshipRecord
from apimodel.normalizer import normalize_schema
from apimodel.resolver import SchemaGraph, resolve_document
from apimodel.templates import (
    TemplateGenerator,
    annotation_for,
    cast_for,
    class_name_for,
    faker_expression,
    invalid_value,
    module_name_for,
    select_mappings,
)


# ===========================================================================
# Helpers
# ===========================================================================


def _mappings(graph: SchemaGraph) -> Dict[str, ModelMapping]:
    return ModelMapper(graph).map_models(EndpointExtractor(graph).extract())


def _attr(name: str, raw: Dict[str, Any], required: bool = False) -> AttributeRecord:
    node = normalize_schema(raw)
    return AttributeRecord(
        name=name,
        type=node.kind,
        format=node.format,
        required=required,
        enum=node.enum,
        schema_node=node,
    )


def _compiles(source: str, filename: str) -> bool:
    ast.parse(source, filename=filename)
    return True


@pytest.fixture()
def pet_mapping(petstore_graph: SchemaGraph) -> ModelMapping:
    return _mappings(petstore_graph)["Pet"]


@pytest.fixture()
def product_mapping(relations_graph: SchemaGraph) -> ModelMapping:
    return _mappings(relations_graph)["Product"]


# ===========================================================================
# Naming
# ===========================================================================


class TestNaming:
    """Tests for class, module, field and accessor names."""

    def test_class_name_affixes(self) -> None:
        assert class_name_for("Pet", GenerationConfig(suffix="Model")) == "PetModel"
        assert class_name_for("Pet", GenerationConfig(prefix="Api")) == "ApiPet"

    def test_class_name_pascalised(self) -> None:
        assert class_name_for("pet_owner", GenerationConfig()) == "PetOwner"

    def test_class_name_ignores_naming_convention(self) -> None:
        for convention in ("snake_case", "camel_case", "pascal_case"):
            cfg = GenerationConfig(naming_convention=convention)
            assert class_name_for("pet_owner", cfg) == "PetOwner"

    def test_module_name(self) -> None:
        assert module_name_for("PetOwner") == "pet_owner"

    def test_field_name_conventions(self) -> None:
        assert TemplateGenerator().field_name("firstName") == "first_name"
        camel = TemplateGenerator(GenerationConfig(naming_convention="camel_case"))
        assert camel.field_name("first_name") == "firstName"

    def test_field_name_keyword(self) -> None:
        assert TemplateGenerator().field_name("class") == "class_"

    def test_accessor_name_suffixed(self) -> None:
        rel = RelationshipRecord(
            type="belongsTo", name="ownerProfile", attribute="ownerProfile", related_model="Owner"
        )
        assert TemplateGenerator().accessor_name(rel) == "owner_profile_relation"
        camel = TemplateGenerator(GenerationConfig(naming_convention="camel_case"))
        assert camel.accessor_name(rel) == "ownerProfileRelation"
        assert camel.field_name(rel.attribute) != camel.accessor_name(rel)


# ===========================================================================
# Types and casts
# ===========================================================================


class TestAnnotations:
    """Tests for annotation_for and cast_for."""

    @pytest.mark.parametrize(
        "raw, annotation",
        [
            ({"type": "integer"}, "int"),
            ({"type": "number"}, "float"),
            ({"type": "boolean"}, "bool"),
            ({"type": "string"}, "str"),
            ({"type": "string", "format": "date-time"}, "datetime"),
            ({"type": "string", "format": "date"}, "datetime"),
            ({"type": "array", "items": {"type": "string"}}, "List[Any]"),
            ({"type": "object"}, "Dict[str, Any]"),
            ({"oneOf": [{"type": "string"}]}, "Any"),
        ],
    )
    def test_annotation(self, raw: Dict[str, Any], annotation: str) -> None:
        assert annotation_for(_attr("field", raw))[0] == annotation

    def test_annotation_imports(self) -> None:
        assert annotation_for(_attr("f", {"type": "array"}))[1] == {"List", "Any"}
        assert annotation_for(_attr("f", {"type": "string", "format": "date"}))[1] == {"datetime"}
        assert annotation_for(_attr("f", {"type": "string"}))[1] == set()

    @pytest.mark.parametrize(
        "raw, cast",
        [
            ({"type": "integer"}, "integer"),
            ({"type": "number"}, "float"),
            ({"type": "boolean"}, "boolean"),
            ({"type": "array"}, "array"),
            ({"type": "object"}, "object"),
            ({"type": "string", "format": "date-time"}, "datetime"),
            ({"type": "string", "format": "date"}, "date"),
            ({"type": "string"}, None),
        ],
    )
    def test_cast(self, raw: Dict[str, Any], cast: Optional[str]) -> None:
        assert cast_for(_attr("field", raw)) == cast


# ===========================================================================
# Faker helpers
# ===========================================================================


class TestFaker:
    """Tests for faker_expression and invalid_value."""

    def test_by_name(self) -> None:
        assert faker_expression(_attr("email", {"type": "string"})) == "self.faker.email()"
        assert faker_expression(_attr("firstName", {"type": "string"})) == "self.faker.first_name()"

    def test_by_format(self) -> None:
        assert faker_expression(_attr("token", {"type": "string", "format": "uuid"})) == "self.faker.uuid4()"

    def test_enum(self) -> None:
        expr = faker_expression(_attr("status", {"type": "string", "enum": ["a", "b"]}))
        assert expr == 'self.faker.random_element(elements=["a", "b"])'

    def test_integer_bounds(self) -> None:
        assert faker_expression(_attr("age", {"type": "integer"})) == "self.faker.random_int(min=1, max=1000)"
        expr = faker_expression(_attr("age", {"type": "integer", "minimum": 5, "maximum": 10}))
        assert expr == "self.faker.random_int(min=5, max=10)"
        expr = faker_expression(_attr("big", {"type": "integer", "minimum": 2000}))
        assert expr == "self.faker.random_int(min=2000, max=3000)"

    def test_number(self) -> None:
        expr = faker_expression(_attr("price", {"type": "number"}))
        assert expr == "self.faker.pyfloat(right_digits=2, min_value=1.0, max_value=1000.0)"

    @pytest.mark.parametrize(
        "raw, expr",
        [
            ({"type": "boolean"}, "self.faker.pybool()"),
            ({"type": "array"}, "self.faker.words(nb=3)"),
            ({"type": "object"}, "self.faker.pydict(nb_elements=3)"),
            ({"type": "string", "maxLength": 30}, "self.faker.word()"),
            ({"type": "string", "maxLength": 80}, "self.faker.sentence()"),
            ({"type": "string"}, "self.faker.text(max_nb_chars=255)"),
        ],
    )
    def test_by_kind(self, raw: Dict[str, Any], expr: str) -> None:
        assert faker_expression(_attr("value", raw)) == expr

    @pytest.mark.parametrize(
        "raw, broken",
        [
            ({"type": "integer", "minimum": 1}, 0),
            ({"type": "integer"}, "invalid_integer"),
            ({"type": "number"}, "invalid_number"),
            ({"type": "boolean"}, "invalid_boolean"),
            ({"type": "string", "format": "email"}, "invalid_email"),
            ({"type": "string", "maxLength": 3}, "aaaa"),
            ({"type": "string", "enum": ["x"]}, "invalid_enum_value"),
            ({"type": "string"}, None),
            ({"type": "array"}, None),
        ],
    )
    def test_invalid_value(self, raw: Dict[str, Any], broken: Any) -> None:
        assert invalid_value(_attr("value", raw)) == broken


# ===========================================================================
# Model source
# ===========================================================================


class TestModelSource:
    """Tests for TemplateGenerator.generate_model_source."""

    def test_petstore_model(self, pet_mapping: ModelMapping) -> None:
        source = TemplateGenerator().generate_model_source(pet_mapping)
        assert "class Pet(ApiModel):" in source
        assert "from apimodel_runtime import ApiModel" in source
        assert 'base_endpoint: ClassVar[str] = "/pets"' in source
        assert "    id: int\n" in source
        assert "    name: str\n" in source
        assert "    tag: Optional[str] = None\n" in source
        assert _compiles(source, "pet.py")

    def test_class_vars(self, pet_mapping: ModelMapping) -> None:
        source = TemplateGenerator().generate_model_source(pet_mapping)
        assert 'fillable: ClassVar[List[str]] = [\n        "name",\n        "tag",\n    ]' in source
        assert '"id": "integer",' in source
        assert '"id": ["required", "integer"],' in source
        assert '"name": ["required", "string", "max:100"],' in source
        assert '"listPets": "index",' in source
        assert '"showPetById": "show",' in source

    def test_explicit_rules(self, pet_mapping: ModelMapping) -> None:
        source = TemplateGenerator().generate_model_source(pet_mapping, rules={"name": ["required"]})
        assert '"name": ["required"],' in source
        assert '"id": ["required", "integer"],' not in source

    def test_rules_can_be_disabled(self, pet_mapping: ModelMapping) -> None:
        source = TemplateGenerator(GenerationConfig(include_validation_rules=False)).generate_model_source(
            pet_mapping
        )
        assert "validation_rules" not in source

    def test_custom_base_class(self, pet_mapping: ModelMapping) -> None:
        cfg = GenerationConfig(base_class="Resource", base_module="app.base", suffix="Model")
        source = TemplateGenerator(cfg).generate_model_source(pet_mapping)
        assert "from app.base import Resource" in source
        assert "class PetModel(Resource):" in source

    def test_relationship_accessors(self, product_mapping: ModelMapping) -> None:
        source = TemplateGenerator().generate_model_source(product_mapping)
        assert "def category_relation(self) -> Optional[Category]:" in source
        assert 'return self.belongs_to("Category", "category_id", "id")' in source
        assert "def tags_relation(self) -> List[Tag]:" in source
        assert 'return self.has_many("Tag", "product_id", "id")' in source
        assert "def address_relation(self) -> Optional[Dict[str, Any]]:" in source
        assert 'return self.get_attribute("address")' in source
        assert "if TYPE_CHECKING:" in source
        assert "    from .category import Category" in source
        assert "    from .tag import Tag" in source
        assert _compiles(source, "product.py")

    def test_unknown_related_model_typed_any(self, product_mapping: ModelMapping) -> None:
        source = TemplateGenerator().generate_model_source(product_mapping, known_models=["Product"])
        assert "def category_relation(self) -> Optional[Any]:" in source
        assert "def tags_relation(self) -> List[Any]:" in source
        assert "TYPE_CHECKING" not in source

    def test_read_only_not_fillable(self, product_mapping: ModelMapping) -> None:
        source = TemplateGenerator().generate_model_source(product_mapping)
        fillable = source.split("fillable: ClassVar[List[str]] = [", 1)[1].split("]", 1)[0]
        assert '"id"' not in fillable
        assert '"name"' in fillable

    def test_alias_for_renamed_field(self, resolve: Any) -> None:
        doc = {
            "openapi": "3.0.3",
            "paths": {
                "/people": {
                    "get": {
                        "responses": {
                            "200": {
                                "description": "ok",
                                "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Person"}}},
                            }
                        }
                    }
                }
            },
            "components": {
                "schemas": {
                    "Person": {
                        "type": "object",
                        "properties": {
                            "firstName": {"type": "string", "description": "Given name"},
                            "class": {"type": "string"},
                        },
                    }
                }
            },
        }
        mapping = _mappings(resolve(doc))["Person"]
        source = TemplateGenerator().generate_model_source(mapping)
        assert (
            'first_name: Optional[str] = Field(default=None, alias="firstName", description="Given name")'
            in source
        )
        assert 'class_: Optional[str] = Field(default=None, alias="class")' in source
        assert "from pydantic import Field" in source
        assert _compiles(source, "person.py")


# ===========================================================================
# Factory source
# ===========================================================================


class TestFactorySource:
    """Tests for TemplateGenerator.generate_factory_source."""

    def test_petstore_factory(self, pet_mapping: ModelMapping) -> None:
        source = TemplateGenerator().generate_factory_source(pet_mapping)
        assert "class PetFactory(Factory):" in source
        assert "from apimodel_runtime.factories import Factory" in source
        assert "from ..pet import Pet" in source
        assert "    model = Pet" in source
        assert '"name": self.faker.name(),' in source
        assert '"id": self.faker.random_int(min=1, max=1000),' in source
        assert _compiles(source, "pet_factory.py")

    def test_invalid_state(self, pet_mapping: ModelMapping) -> None:
        source = TemplateGenerator().generate_factory_source(pet_mapping)
        assert "def invalid(self) -> PetFactory:" in source
        assert 'return self.state({"id": "invalid_integer"})' in source

    def test_enum_states(self, product_mapping: ModelMapping) -> None:
        source = TemplateGenerator().generate_factory_source(product_mapping)
        assert "def status_draft(self) -> ProductFactory:" in source
        assert 'return self.state({"status": "draft"})' in source
        assert "def status_published(self) -> ProductFactory:" in source
        assert _compiles(source, "product_factory.py")

    def test_empty_model(self) -> None:
        source = TemplateGenerator().generate_factory_source(ModelMapping(model_name="Health"))
        assert "        return {}" in source
        assert "def invalid" not in source


# ===========================================================================
# Package
# ===========================================================================


class TestPackage:
    """Tests for generate_package and select_mappings."""

    def test_layout(self, petstore_graph: SchemaGraph) -> None:
        files = TemplateGenerator().generate_package(_mappings(petstore_graph))
        assert list(files) == [
            "models/pet.py",
            "models/factories/pet_factory.py",
            "models/__init__.py",
            "models/factories/__init__.py",
        ]
        assert "from .pet import Pet" in files["models/__init__.py"]
        assert "from .pet_factory import PetFactory" in files["models/factories/__init__.py"]
        for path, content in files.items():
            assert _compiles(content, path)

    def test_namespace_and_no_factories(self, petstore_graph: SchemaGraph) -> None:
        cfg = GenerationConfig(namespace="app.models", generate_factories=False)
        files = TemplateGenerator(cfg).generate_package(_mappings(petstore_graph))
        assert list(files) == ["app/models/pet.py", "app/models/__init__.py"]
        assert '"""\napp.models package.' in files["app/models/__init__.py"]

    def test_deterministic(self, relations_graph: SchemaGraph) -> None:
        generator = TemplateGenerator()
        assert generator.generate_package(_mappings(relations_graph)) == generator.generate_package(
            _mappings(relations_graph)
        )

    def test_only_selects_models(self, relations_graph: SchemaGraph) -> None:
        files = TemplateGenerator().generate_package(_mappings(relations_graph), only=["Product"])
        assert "models/product.py" in files

    def test_only_unknown_model(self, petstore_graph: SchemaGraph) -> None:
        with pytest.raises(InvalidModelMappingError) as exc_info:
            TemplateGenerator().generate_package(_mappings(petstore_graph), only=["Order"])
        assert exc_info.value.model_name == "Order"
        assert exc_info.value.available == ["Pet"]

    def test_select_mappings_order(self, petstore_graph: SchemaGraph) -> None:
        mappings = _mappings(petstore_graph)
        assert select_mappings(mappings) == [mappings["Pet"]]
        assert select_mappings(mappings, ["Pet"]) == [mappings["Pet"]]

    def test_empty_package(self) -> None:
        files = TemplateGenerator().generate_package({})
        assert files["models/__init__.py"].count("import") == 0

    def test_colliding_class_names_get_suffixes(self) -> None:
        item: Dict[str, Any] = {"type": "object", "properties": {"sku": {"type": "string"}}}
        graph = resolve_document(
            {
                "openapi": "3.0.3",
                "info": {"title": "Shop", "version": "1"},
                "paths": {},
                "components": {"schemas": {"pet_item": item, "PetItem": item}},
            }
        )
        mappings = ModelMapper(graph).map_schema_models([])
        assert len(mappings) == 2

        files = TemplateGenerator().generate_package(mappings)
        models = sorted(p for p in files if p.count("/") == 1 and not p.endswith("__init__.py"))
        assert models == ["models/pet_item.py", "models/pet_item_2.py"]
        assert "class PetItem_2(ApiModel):" in files["models/pet_item_2.py"]
        assert "from ..pet_item_2 import PetItem_2" in files["models/factories/pet_item_2_factory.py"]
        init = files["models/__init__.py"]
        assert "from .pet_item import PetItem" in init
        assert "from .pet_item_2 import PetItem_2" in init
        for path, content in files.items():
            assert _compiles(content, path)

    def test_assign_class_names(self) -> None:
        generator = TemplateGenerator()
        assert generator.assign_class_names(["Pet", "pet", "Owner"]) == {
            "Pet": "Pet",
            "pet": "Pet_2",
            "Owner": "Owner",
        }
        assert generator.class_name("pet") == "Pet_2"
