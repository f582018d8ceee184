# File: apimodel/templates.py
"""
apimodel - Code Template Engine
=================================
Turns ``ModelMapping`` tables into Python source text:

    1. API model classes (pydantic models on top of a runtime base class)
       with endpoint metadata, casts, validation rules and relationship
       accessors.
    2. Faker-based factories with one state per enum value and an
       ``invalid()`` state.
    3. Package ``__init__.py`` modules re-exporting the generated classes.

All string assembly uses the ``List[str]`` + ``"\\n".join()`` pattern.
Output depends only on the mapping and the ``GenerationConfig``: no
timestamps, no set iteration, so regenerating an unchanged document is
byte-for-byte identical.

Attribute type table::

    integer → int          number → float        boolean → bool
    array   → List[Any]    object → Dict[str, Any]
    string (date, date-time) → datetime          string → str
    composite / unresolved   → Any

Attributes outside the model's required set become ``Optional[...] = None``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from apimodel.exceptions import InvalidModelMappingError
from apimodel.models import (
    AttributeRecord,
    CrudType,
    GenerationConfig,
    ModelMapping,
    RelationshipKind,
    RelationshipRecord,
    SchemaKind,
    SchemaNode,
)
from apimodel.rules import RuleGenerator, RuleSet
from apimodel.utils import (
    build_import_block,
    convert_case,
    python_literal,
    safe_identifier,
    to_pascal_case,
    to_snake_case,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("apimodel.templates")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_ANNOTATION_MAP: Dict[str, str] = {
    SchemaKind.INTEGER.value: "int",
    SchemaKind.NUMBER.value: "float",
    SchemaKind.BOOLEAN.value: "bool",
    SchemaKind.ARRAY.value: "List[Any]",
    SchemaKind.OBJECT.value: "Dict[str, Any]",
    SchemaKind.STRING.value: "str",
}

_DATETIME_FORMATS: Tuple[str, ...] = ("date", "date-time")

_CAST_MAP: Dict[str, str] = {
    SchemaKind.INTEGER.value: "integer",
    SchemaKind.NUMBER.value: "float",
    SchemaKind.BOOLEAN.value: "boolean",
    SchemaKind.ARRAY.value: "array",
    SchemaKind.OBJECT.value: "object",
}

# Faker providers chosen by (snake_case) property name before anything else.
_FAKER_BY_NAME: Dict[str, str] = {
    "email": "email()",
    "name": "name()",
    "first_name": "first_name()",
    "last_name": "last_name()",
    "phone": "phone_number()",
    "address": "address()",
    "city": "city()",
    "country": "country()",
    "postal_code": "postcode()",
    "zip_code": "postcode()",
    "description": "text()",
    "title": "sentence(nb_words=3)",
    "url": "url()",
    "website": "url()",
    "company": "company()",
    "username": "user_name()",
    "password": "password()",
    "avatar": "image_url()",
    "image": "image_url()",
    "slug": "slug()",
}

_FAKER_BY_FORMAT: Dict[str, str] = {
    "email": "email()",
    "date": "date()",
    "date-time": "iso8601()",
    "uri": "url()",
    "url": "url()",
    "uuid": "uuid4()",
    "password": "password()",
}

_INVALID_FORMAT_VALUES: Dict[str, str] = {
    "email": "invalid_email",
    "date": "invalid_date",
    "date-time": "invalid_datetime",
}


# ---------------------------------------------------------------------------
# Naming helpers
# ---------------------------------------------------------------------------


def class_name_for(model_name: str, config: GenerationConfig) -> str:
    """
    Class name with the configured prefix/suffix; always PascalCase.

    Examples:
        >>> class_name_for("Pet", GenerationConfig(suffix="Model"))
        'PetModel'
    """
    core: str = model_name
    if not (model_name.isidentifier() and model_name[0].isupper()):
        core = to_pascal_case(model_name) or "Model"
    return safe_identifier(f"{config.prefix}{core}{config.suffix}")


def module_name_for(class_name: str) -> str:
    return to_snake_case(class_name) or "model"


def _target(node: SchemaNode) -> SchemaNode:
    return node.deref()


def annotation_for(attr: AttributeRecord) -> Tuple[str, Set[str]]:
    """
    Base annotation of one attribute (without ``Optional``) plus the
    ``typing``/``datetime`` names it needs.
    """
    node: SchemaNode = _target(attr.schema_node)
    if node.kind == SchemaKind.STRING and (attr.format or node.format) in _DATETIME_FORMATS:
        return "datetime", {"datetime"}
    base: Optional[str] = _ANNOTATION_MAP.get(node.kind)
    if base is None:
        return "Any", {"Any"}
    needed: Set[str] = set()
    if "List[" in base:
        needed.update({"List", "Any"})
    if "Dict[" in base:
        needed.update({"Dict", "Any"})
    return base, needed


def cast_for(attr: AttributeRecord) -> Optional[str]:
    node: SchemaNode = _target(attr.schema_node)
    fmt: Optional[str] = attr.format or node.format
    if node.kind == SchemaKind.STRING:
        if fmt == "date-time":
            return "datetime"
        if fmt == "date":
            return "date"
        return None
    return _CAST_MAP.get(node.kind)


def _unique(name: str, used: Set[str]) -> str:
    candidate: str = name
    counter: int = 2
    while candidate in used:
        candidate = f"{name}_{counter}"
        counter += 1
    used.add(candidate)
    return candidate


# ---------------------------------------------------------------------------
# Faker helpers
# ---------------------------------------------------------------------------


def faker_expression(attr: AttributeRecord) -> str:
    """
    ``self.faker`` call producing a plausible value for *attr*.

    Lookup order: property name, string format, enum, then kind (with
    numeric bounds and string length limits).
    """
    node: SchemaNode = _target(attr.schema_node)
    by_name: Optional[str] = _FAKER_BY_NAME.get(to_snake_case(attr.name))
    if by_name:
        return f"self.faker.{by_name}"

    fmt: Optional[str] = attr.format or node.format
    if fmt in _FAKER_BY_FORMAT:
        return f"self.faker.{_FAKER_BY_FORMAT[fmt]}"

    enum_values: Optional[List[Any]] = attr.enum or node.enum
    if enum_values:
        return f"self.faker.random_element(elements={python_literal(list(enum_values))})"

    if node.kind == SchemaKind.INTEGER:
        low, high = _bounds(node, 1, 1000)
        return f"self.faker.random_int(min={int(low)}, max={int(high)})"
    if node.kind == SchemaKind.NUMBER:
        low, high = _bounds(node, 1.0, 1000.0)
        return (
            f"self.faker.pyfloat(right_digits=2, min_value={float(low)!r}, "
            f"max_value={float(high)!r})"
        )
    if node.kind == SchemaKind.BOOLEAN:
        return "self.faker.pybool()"
    if node.kind == SchemaKind.ARRAY:
        return "self.faker.words(nb=3)"
    if node.kind == SchemaKind.OBJECT:
        return "self.faker.pydict(nb_elements=3)"
    if node.kind == SchemaKind.STRING:
        max_length: int = node.max_length if node.max_length is not None else 255
        if max_length <= 50:
            return "self.faker.word()"
        if max_length <= 100:
            return "self.faker.sentence()"
        return f"self.faker.text(max_nb_chars={max_length})"
    return "self.faker.word()"


def _bounds(node: SchemaNode, low_default: float, high_default: float) -> Tuple[float, float]:
    low: float = node.minimum if node.minimum is not None else low_default
    high: float = node.maximum if node.maximum is not None else high_default
    if node.maximum is None and high < low:
        high = low + high_default
    if node.minimum is None and low > high:
        low = high - high_default
    return low, high


def invalid_value(attr: AttributeRecord) -> Optional[Any]:
    """A value that breaks *attr*'s constraints, or ``None`` if there is none."""
    node: SchemaNode = _target(attr.schema_node)
    if node.kind == SchemaKind.INTEGER:
        return int(node.minimum) - 1 if node.minimum is not None else "invalid_integer"
    if node.kind == SchemaKind.NUMBER:
        return node.minimum - 1 if node.minimum is not None else "invalid_number"
    if node.kind == SchemaKind.BOOLEAN:
        return "invalid_boolean"
    if node.kind == SchemaKind.STRING:
        fmt: Optional[str] = attr.format or node.format
        if fmt in _INVALID_FORMAT_VALUES:
            return _INVALID_FORMAT_VALUES[fmt]
        if node.max_length is not None:
            return "a" * (node.max_length + 1)
        if attr.enum or node.enum:
            return "invalid_enum_value"
    return None


# ---------------------------------------------------------------------------
# Template generator
# ---------------------------------------------------------------------------


class TemplateGenerator:
    """
    Code-generation engine.

    Each ``generate_*`` method returns a complete file content string;
    ``generate_package`` returns ``relative path → content``.  The only
    state is the class-name table assigned by ``assign_class_names``.
    """

    def __init__(self, config: Optional[GenerationConfig] = None) -> None:
        self._config: GenerationConfig = config or GenerationConfig()
        self._indent: str = " " * self._config.indent_size
        self._double_indent: str = self._indent * 2
        self._rules: RuleGenerator = RuleGenerator()
        self._class_names: Dict[str, str] = {}
        logger.debug(
            "TemplateGenerator initialised (namespace=%s, naming=%s).",
            self._config.namespace,
            self._config.naming_convention,
        )

    # -- Naming -------------------------------------------------------------

    def class_name(self, model_name: str) -> str:
        assigned: Optional[str] = self._class_names.get(model_name)
        return assigned or class_name_for(model_name, self._config)

    def assign_class_names(self, model_names: Iterable[str]) -> Dict[str, str]:
        """
        Give every model a class name whose module file is unique.

        Models whose names reduce to the same class (``pet_item`` and
        ``PetItem``) get ``_2``, ``_3``, ... in mapping order.
        """
        assigned: Dict[str, str] = {}
        used_modules: Set[str] = set()
        for model_name in model_names:
            base: str = class_name_for(model_name, self._config)
            candidate: str = base
            counter: int = 2
            while module_name_for(candidate) in used_modules:
                candidate = f"{base}_{counter}"
                counter += 1
            if candidate != base:
                logger.warning(
                    "Class name %s already taken; model %s rendered as %s",
                    base,
                    model_name,
                    candidate,
                )
            used_modules.add(module_name_for(candidate))
            assigned[model_name] = candidate
        self._class_names = assigned
        return assigned

    def field_name(self, attribute: str) -> str:
        return safe_identifier(
            convert_case(attribute, self._config.naming_convention) or attribute
        )

    def accessor_name(self, relationship: RelationshipRecord) -> str:
        """
        Accessor method for *relationship*: its name plus ``_relation``.

        The suffix keeps the accessor apart from the attribute of the same
        name (``category`` holds the raw payload, ``category_relation()``
        traverses it).
        """
        return safe_identifier(
            convert_case(f"{relationship.name}_relation", self._config.naming_convention)
        )

    # ===================================================================
    # 1. Model class
    # ===================================================================

    def generate_model_source(
        self,
        mapping: ModelMapping,
        rules: Optional[RuleSet] = None,
        known_models: Optional[Iterable[str]] = None,
    ) -> str:
        """
        Render the model class for *mapping*.

        Args:
            mapping: The model to render.
            rules: Validation rules to embed; computed from the attributes
                when omitted.
            known_models: Models that get their own generated class.
                Related models outside this set are typed ``Any``.
                Defaults to every related model.
        """
        cfg: GenerationConfig = self._config
        class_name: str = self.class_name(mapping.model_name)
        known: Optional[Set[str]] = set(known_models) if known_models is not None else None

        imports: Dict[str, Set[str]] = {
            "typing": {"ClassVar", "Dict", "List"},
            cfg.base_module: {cfg.base_class},
        }

        # --- Fields ---
        used: Set[str] = set()
        field_lines: List[str] = []
        for attr in mapping.attributes:
            line, needed, uses_field = self._field_line(attr, used)
            field_lines.append(f"{self._indent}{line}")
            for name in needed:
                if name == "datetime":
                    imports.setdefault("datetime", set()).add("datetime")
                else:
                    imports["typing"].add(name)
            if uses_field:
                imports.setdefault("pydantic", set()).add("Field")

        # --- Relationship accessors ---
        related_imports: Dict[str, str] = {}
        accessor_blocks: List[List[str]] = []
        for rel in mapping.relationships:
            block, related = self._accessor_block(rel, known, used)
            accessor_blocks.append(block)
            if rel.type == RelationshipKind.HAS_MANY:
                imports["typing"].add("List")
            elif rel.type == RelationshipKind.EMBEDDED:
                imports["typing"].update({"Any", "Dict", "Optional"})
            else:
                imports["typing"].add("Optional")
            if related is None:
                imports["typing"].add("Any")
            elif related != mapping.model_name:
                related_class: str = self.class_name(related)
                related_imports[module_name_for(related_class)] = related_class
        if related_imports:
            imports["typing"].add("TYPE_CHECKING")

        # --- Header ---
        lines: List[str] = ['"""', f"{class_name} API model.", ""]
        lines.append("Auto-generated by apimodel from an OpenAPI document.")
        lines.append(f"Base endpoint: {mapping.base_endpoint}")
        if mapping.schema_refs:
            lines.append(f"Schemas: {', '.join(mapping.schema_refs)}")
        lines.extend(['"""', "", "from __future__ import annotations", ""])
        lines.append(build_import_block(imports))
        if related_imports:
            lines.append("")
            lines.append("if TYPE_CHECKING:")
            for module in sorted(related_imports):
                lines.append(f"{self._indent}from .{module} import {related_imports[module]}")
        lines.extend(["", ""])

        # --- Class body ---
        lines.append(f"class {class_name}({cfg.base_class}):")
        lines.append(f'{self._indent}"""{mapping.model_name} resource."""')
        lines.append("")
        lines.extend(self._class_vars(mapping, rules))

        if field_lines:
            lines.append("")
            lines.extend(field_lines)

        for block in accessor_blocks:
            lines.append("")
            lines.extend(block)

        lines.append("")
        content: str = "\n".join(lines)
        logger.debug(
            "Generated model '%s': %d lines.",
            class_name,
            content.count("\n") + 1,
        )
        return content

    def _class_vars(self, mapping: ModelMapping, rules: Optional[RuleSet]) -> List[str]:
        lines: List[str] = []
        lines.append(
            f"{self._indent}base_endpoint: ClassVar[str] = {python_literal(mapping.base_endpoint)}"
        )

        fillable: List[str] = [
            a.name
            for a in mapping.attributes
            if not a.read_only and not (a.required and a.name == "id")
        ]
        lines.extend(self._literal_block("fillable", "List[str]", fillable))

        casts: Dict[str, str] = {}
        for attr in mapping.attributes:
            cast: Optional[str] = cast_for(attr)
            if cast:
                casts[attr.name] = cast
        lines.extend(self._literal_block("casts", "Dict[str, str]", casts))

        if self._config.include_validation_rules:
            rule_set: RuleSet = (
                rules if rules is not None else self._rules.attribute_rules(mapping.attributes)
            )
            lines.extend(
                self._literal_block("validation_rules", "Dict[str, List[str]]", rule_set)
            )

        operations: Dict[str, str] = {
            op.operation_id: CrudType(op.type).value for op in mapping.operations
        }
        lines.extend(self._literal_block("operations", "Dict[str, str]", operations))
        return lines

    def _literal_block(self, name: str, annotation: str, value: Any) -> List[str]:
        """``name: ClassVar[...] = ...``, one entry per line when non-empty."""
        head: str = f"{self._indent}{name}: ClassVar[{annotation}] = "
        if not value:
            return [head + ("{}" if isinstance(value, dict) else "[]")]
        if isinstance(value, dict):
            lines: List[str] = [head + "{"]
            for key, item in value.items():
                lines.append(
                    f"{self._double_indent}{python_literal(str(key))}: {python_literal(item)},"
                )
            lines.append(f"{self._indent}}}")
            return lines
        lines = [head + "["]
        for item in value:
            lines.append(f"{self._double_indent}{python_literal(item)},")
        lines.append(f"{self._indent}]")
        return lines

    def _field_line(self, attr: AttributeRecord, used: Set[str]) -> Tuple[str, Set[str], bool]:
        name: str = _unique(self.field_name(attr.name), used)
        base, needed = annotation_for(attr)

        optional: bool = not attr.required or attr.nullable or attr.schema_node.nullable
        annotation: str = f"Optional[{base}]" if optional else base
        if optional:
            needed = needed | {"Optional"}

        kwargs: List[str] = []
        if not attr.required:
            kwargs.append("default=None")
        if name != attr.name:
            kwargs.append(f"alias={python_literal(attr.name)}")
        if attr.description:
            kwargs.append(f"description={python_literal(attr.description)}")

        if kwargs == ["default=None"]:
            return f"{name}: {annotation} = None", needed, False
        if kwargs:
            return f"{name}: {annotation} = Field({', '.join(kwargs)})", needed, True
        return f"{name}: {annotation}", needed, False

    def _accessor_block(
        self,
        rel: RelationshipRecord,
        known: Optional[Set[str]],
        used: Set[str],
    ) -> Tuple[List[str], Optional[str]]:
        """Accessor method lines plus the related model it annotates, if any."""
        method: str = _unique(self.accessor_name(rel), used)
        related: Optional[str] = rel.related_model
        if related is not None and known is not None and related not in known:
            related = None
        target: str = self.class_name(related) if related else "Any"

        if rel.type == RelationshipKind.BELONGS_TO:
            returns: str = f"Optional[{target}]"
            body: str = (
                f"return self.belongs_to({python_literal(rel.related_model)}, "
                f"{python_literal(rel.foreign_key)}, {python_literal(rel.local_key)})"
            )
            doc: str = f"The {rel.related_model} this record belongs to."
        elif rel.type == RelationshipKind.HAS_MANY:
            returns = f"List[{target}]"
            body = (
                f"return self.has_many({python_literal(rel.related_model)}, "
                f"{python_literal(rel.foreign_key)}, {python_literal(rel.local_key)})"
            )
            doc = f"Related {rel.related_model} records."
        else:
            related = None
            returns = "Optional[Dict[str, Any]]"
            body = f"return self.get_attribute({python_literal(rel.attribute)})"
            doc = f"Embedded '{rel.attribute}' object."

        lines: List[str] = [
            f"{self._indent}def {method}(self) -> {returns}:",
            f'{self._double_indent}"""{doc}"""',
            f"{self._double_indent}{body}",
        ]
        return lines, related

    # ===================================================================
    # 2. Factory
    # ===================================================================

    def generate_factory_source(self, mapping: ModelMapping) -> str:
        """Render a Faker-based factory for *mapping*."""
        cfg: GenerationConfig = self._config
        class_name: str = self.class_name(mapping.model_name)
        factory_name: str = f"{class_name}Factory"

        imports: Dict[str, Set[str]] = {
            "typing": {"Any", "Dict"},
            cfg.factory_base_module: {cfg.factory_base_class},
        }

        lines: List[str] = ['"""', f"Factory for the {class_name} API model.", ""]
        lines.append("Auto-generated by apimodel from an OpenAPI document.")
        lines.extend(['"""', "", "from __future__ import annotations", ""])
        lines.append(build_import_block(imports))
        lines.append("")
        lines.append(f"from ..{module_name_for(class_name)} import {class_name}")
        lines.extend(["", ""])

        lines.append(f"class {factory_name}({cfg.factory_base_class}):")
        lines.append(f'{self._indent}"""Builds fake ``{class_name}`` payloads."""')
        lines.append("")
        lines.append(f"{self._indent}model = {class_name}")
        lines.append("")
        lines.append(f"{self._indent}def definition(self) -> Dict[str, Any]:")
        if mapping.attributes:
            lines.append(f"{self._double_indent}return {{")
            for attr in mapping.attributes:
                lines.append(
                    f"{self._double_indent}{self._indent}"
                    f"{python_literal(attr.name)}: {faker_expression(attr)},"
                )
            lines.append(f"{self._double_indent}}}")
        else:
            lines.append(f"{self._double_indent}return {{}}")

        used: Set[str] = {"definition", "model"}
        for attr in mapping.attributes:
            for value in self._enum_values(attr):
                state: str = _unique(
                    safe_identifier(
                        convert_case(f"{attr.name}_{value}", cfg.naming_convention)
                        or f"{attr.name}_state"
                    ),
                    used,
                )
                lines.append("")
                lines.extend(
                    self._state_method(
                        state, factory_name, f"State with {attr.name} = {value}.", attr.name, value
                    )
                )

        for attr in mapping.attributes:
            broken: Optional[Any] = invalid_value(attr)
            if broken is not None:
                lines.append("")
                lines.extend(
                    self._state_method(
                        "invalid",
                        factory_name,
                        "State with invalid data for testing validation.",
                        attr.name,
                        broken,
                    )
                )
                break

        lines.append("")
        content: str = "\n".join(lines)
        logger.debug("Generated factory '%s': %d lines.", factory_name, content.count("\n") + 1)
        return content

    @staticmethod
    def _enum_values(attr: AttributeRecord) -> List[Any]:
        values: Optional[List[Any]] = attr.enum or _target(attr.schema_node).enum
        return [v for v in values or [] if v is not None]

    def _state_method(
        self, name: str, factory_name: str, doc: str, attribute: str, value: Any
    ) -> List[str]:
        return [
            f"{self._indent}def {name}(self) -> {factory_name}:",
            f'{self._double_indent}"""{doc}"""',
            f"{self._double_indent}return self.state("
            f"{{{python_literal(attribute)}: {python_literal(value)}}})",
        ]

    # ===================================================================
    # 3. Package files
    # ===================================================================

    def generate_init_file(self, package: str, exports: Sequence[Tuple[str, str]]) -> str:
        """``__init__.py`` re-exporting ``(module, class)`` pairs."""
        lines: List[str] = ['"""', f"{package} package.", ""]
        lines.append("Auto-generated by apimodel from an OpenAPI document.")
        lines.append('"""')
        lines.append("")
        for module, name in exports:
            lines.append(f"from .{module} import {name}")
        if exports:
            lines.append("")
            lines.append("__all__ = [")
            for _, name in exports:
                lines.append(f"{self._indent}{python_literal(name)},")
            lines.append("]")
        lines.append("")
        return "\n".join(lines)

    def generate_package(
        self,
        mappings: Dict[str, ModelMapping],
        rules: Optional[Dict[str, RuleSet]] = None,
        only: Optional[Sequence[str]] = None,
    ) -> Dict[str, str]:
        """
        Render every model (and factory) into ``relative path → content``.

        Args:
            mappings: Model name → mapping, in the order files are rendered.
            rules: Optional per-model rule sets overriding the computed ones.
            only: Restrict output to these model names.

        Raises:
            InvalidModelMappingError: if *only* names an unknown model.
        """
        selected: List[ModelMapping] = select_mappings(mappings, only)
        known: Set[str] = set(mappings)
        self.assign_class_names(mappings)
        root: str = self._config.namespace_path
        result: Dict[str, str] = {}

        model_exports: List[Tuple[str, str]] = []
        factory_exports: List[Tuple[str, str]] = []
        for mapping in selected:
            class_name: str = self.class_name(mapping.model_name)
            module: str = module_name_for(class_name)
            result[f"{root}/{module}.py"] = self.generate_model_source(
                mapping, (rules or {}).get(mapping.model_name), known
            )
            model_exports.append((module, class_name))
            if self._config.generate_factories:
                result[f"{root}/factories/{module}_factory.py"] = self.generate_factory_source(
                    mapping
                )
                factory_exports.append((f"{module}_factory", f"{class_name}Factory"))

        result[f"{root}/__init__.py"] = self.generate_init_file(
            self._config.namespace, model_exports
        )
        if self._config.generate_factories:
            result[f"{root}/factories/__init__.py"] = self.generate_init_file(
                f"{self._config.namespace}.factories", factory_exports
            )

        logger.info(
            "Rendered %d files for %d models.",
            len(result),
            len(selected),
        )
        return result


def select_mappings(
    mappings: Dict[str, ModelMapping], names: Optional[Sequence[str]] = None
) -> List[ModelMapping]:
    """Mappings for *names* (all when ``None``), in the requested order."""
    if names is None:
        return list(mappings.values())
    selected: List[ModelMapping] = []
    for name in names:
        if name not in mappings:
            raise InvalidModelMappingError(name, list(mappings))
        selected.append(mappings[name])
    return selected


def generate_model_source(
    mapping: ModelMapping, config: Optional[GenerationConfig] = None
) -> str:
    return TemplateGenerator(config).generate_model_source(mapping)


def generate_factory_source(
    mapping: ModelMapping, config: Optional[GenerationConfig] = None
) -> str:
    return TemplateGenerator(config).generate_factory_source(mapping)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "TemplateGenerator",
    "generate_model_source",
    "generate_factory_source",
    "select_mappings",
    "class_name_for",
    "module_name_for",
    "annotation_for",
    "cast_for",
    "faker_expression",
    "invalid_value",
]

logger.debug("apimodel.templates loaded: %d public symbols.", len(__all__))
