# File: apimodel/rules.py
"""
apimodel - Validation Rule Generator
======================================
Translates ISR constraints into portable rule tokens::

    {"type": "string", "minLength": 3, "maxLength": 10, "format": "email"}
    (required)  →  ["required", "string", "min:3", "max:10", "email"]

Token order per field is fixed: presence marker (``required`` or
``nullable``), type token, then constraints in declaration order
(``minLength`` → ``maxLength`` → ``pattern`` → ``enum`` → format token).
Numeric constraints follow the same slot (``min``/``gt``, ``max``/``lt``,
``multiple_of``).

A rule set is a flat ``field → tokens`` map.  Top-level properties are
keyed by name, nested object properties by dotted path (``address.city``)
and array items by ``field.*`` (``*`` when the root itself is an array).

Composition: ``allOf`` branch tokens are concatenated onto the field and
de-duplicated; ``anyOf``/``oneOf`` contribute only their first branch.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple

from apimodel.models import (
    AttributeRecord,
    EndpointRecord,
    ParameterRecord,
    RequestBodyRecord,
    SchemaKind,
    SchemaNode,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("apimodel.rules")

RuleSet = Dict[str, List[str]]

_TYPE_TOKENS: Dict[str, str] = {
    SchemaKind.STRING.value: "string",
    SchemaKind.INTEGER.value: "integer",
    SchemaKind.NUMBER.value: "numeric",
    SchemaKind.BOOLEAN.value: "boolean",
    SchemaKind.ARRAY.value: "array",
    SchemaKind.OBJECT.value: "array",
}

_FORMAT_TOKENS: Dict[str, str] = {
    "email": "email",
    "uri": "url",
    "url": "url",
    "date": "date",
    "date-time": "date",
    "uuid": "uuid",
    "ipv4": "ip",
    "ipv6": "ipv6",
}


def format_number(value: Any) -> str:
    """
    Render a numeric bound; integral floats lose their ``.0``.

    Examples:
        >>> format_number(3.0)
        '3'
        >>> format_number(0.5)
        '0.5'
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_enum_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, (bool, int, float)):
        return format_number(value)
    return str(value)


def _dedupe(tokens: Iterable[str]) -> List[str]:
    seen: Dict[str, None] = {}
    for token in tokens:
        seen.setdefault(token, None)
    return list(seen)


class RuleGenerator:
    """Pure ISR → rule-token conversion."""

    # -- Single field -------------------------------------------------------

    def rules_for(self, node: Optional[SchemaNode], required: Optional[bool] = None) -> List[str]:
        """
        Tokens for one field.

        Args:
            node: Field schema; ``None`` yields only the presence marker.
            required: ``True``/``False`` when the field sits in a parent
                that declares ``required``; ``None`` for standalone nodes
                (marker only when the node is nullable).
        """
        nullable: bool = False
        if node is not None:
            nullable = node.nullable or node.deref().nullable

        tokens: List[str] = []
        if required is True:
            tokens.append("nullable" if nullable else "required")
        elif required is False or nullable:
            tokens.append("nullable")

        if node is not None:
            tokens.extend(self._tokens(node, frozenset()))
        return _dedupe(tokens)

    def _tokens(self, node: SchemaNode, visiting: FrozenSet[str]) -> List[str]:
        if node.kind == SchemaKind.REFERENCE:
            key: str = node.target or node.ref or ""
            target: Optional[SchemaNode] = node.resolved
            if target is None or key in visiting:
                return []
            return self._tokens(target, visiting | {key})

        tokens: List[str] = []
        type_token: Optional[str] = _TYPE_TOKENS.get(node.kind)
        if type_token:
            tokens.append(type_token)

        if node.kind == SchemaKind.STRING:
            if node.min_length is not None:
                tokens.append(f"min:{node.min_length}")
            if node.max_length is not None:
                tokens.append(f"max:{node.max_length}")
            if node.pattern:
                tokens.append("regex:/" + node.pattern.replace("/", "\\/") + "/")
        elif node.kind in (SchemaKind.INTEGER, SchemaKind.NUMBER):
            tokens.extend(self._numeric_bounds(node))
        elif node.kind == SchemaKind.ARRAY:
            if node.min_items is not None:
                tokens.append(f"min:{node.min_items}")
            if node.max_items is not None:
                tokens.append(f"max:{node.max_items}")

        if node.enum:
            tokens.append("in:" + ",".join(format_enum_value(v) for v in node.enum))

        if node.kind == SchemaKind.STRING and node.format in _FORMAT_TOKENS:
            tokens.append(_FORMAT_TOKENS[node.format])

        for branch in node.all_of or []:
            tokens.extend(self._tokens(branch, visiting))
        either: Optional[List[SchemaNode]] = node.any_of or node.one_of
        if either:
            tokens.extend(self._tokens(either[0], visiting))

        return tokens

    @staticmethod
    def _numeric_bounds(node: SchemaNode) -> List[str]:
        tokens: List[str] = []
        # 3.0 boolean form modifies minimum/maximum; 3.1 numeric form stands alone.
        if node.minimum is not None:
            exclusive: bool = node.exclusive_minimum is True
            tokens.append(f"{'gt' if exclusive else 'min'}:{format_number(node.minimum)}")
        if isinstance(node.exclusive_minimum, (int, float)) and not isinstance(
            node.exclusive_minimum, bool
        ):
            tokens.append(f"gt:{format_number(node.exclusive_minimum)}")
        if node.maximum is not None:
            exclusive = node.exclusive_maximum is True
            tokens.append(f"{'lt' if exclusive else 'max'}:{format_number(node.maximum)}")
        if isinstance(node.exclusive_maximum, (int, float)) and not isinstance(
            node.exclusive_maximum, bool
        ):
            tokens.append(f"lt:{format_number(node.exclusive_maximum)}")
        if node.multiple_of is not None:
            tokens.append(f"multiple_of:{format_number(node.multiple_of)}")
        return tokens

    # -- Whole schema -------------------------------------------------------

    def rule_set(self, node: Optional[SchemaNode]) -> RuleSet:
        """
        Flat rule map of an object (or array) schema.

        Scalar roots have no field names and yield an empty map; use
        ``rules_for`` for them.
        """
        result: RuleSet = {}
        if node is not None:
            self._collect(node, "", result, frozenset())
        return result

    def _collect(self, node: SchemaNode, base: str, result: RuleSet, visiting: FrozenSet[str]) -> None:
        node, visiting, cyclic = self._follow(node, visiting)
        if cyclic:
            return

        if node.kind == SchemaKind.ARRAY and node.items is not None:
            key: str = f"{base}.*" if base else "*"
            result[key] = self.rules_for(node.items)
            self._collect(node.items, key, result, visiting)
            return

        properties, required = self._merged_properties(node, visiting)
        for name, prop in properties.items():
            key = f"{base}.{name}" if base else name
            result[key] = self.rules_for(prop, required=name in required)
            self._collect(prop, key, result, visiting)

    def _merged_properties(
        self, node: SchemaNode, visiting: FrozenSet[str]
    ) -> Tuple[Dict[str, SchemaNode], List[str]]:
        """Own properties plus those of ``allOf`` branches and the first ``anyOf``/``oneOf``."""
        properties: Dict[str, SchemaNode] = {}
        required: List[str] = []

        branches: List[SchemaNode] = list(node.all_of or [])
        either: Optional[List[SchemaNode]] = node.any_of or node.one_of
        if either:
            branches.append(either[0])

        for branch in branches:
            target, branch_visiting, cyclic = self._follow(branch, visiting)
            if cyclic:
                continue
            sub_props, sub_required = self._merged_properties(target, branch_visiting)
            properties.update(sub_props)
            required.extend(sub_required)

        properties.update(node.properties or {})
        required.extend(node.required)
        return properties, required

    @staticmethod
    def _follow(
        node: SchemaNode, visiting: FrozenSet[str]
    ) -> Tuple[SchemaNode, FrozenSet[str], bool]:
        """Dereference *node*; the flag is set when a cycle was hit."""
        while node.kind == SchemaKind.REFERENCE:
            key: str = node.target or node.ref or ""
            target: Optional[SchemaNode] = node.resolved
            if target is None or key in visiting:
                return node, visiting, True
            visiting = visiting | {key}
            node = target
        return node, visiting, False

    def attribute_rules(self, attributes: Iterable[AttributeRecord]) -> RuleSet:
        """Rule set of a mapped model, keyed the same way as ``rule_set``."""
        result: RuleSet = {}
        for attr in attributes:
            result[attr.name] = self.rules_for(attr.schema_node, required=attr.required)
            self._collect(attr.schema_node, attr.name, result, frozenset())
        return result

    # -- Endpoint rules -----------------------------------------------------

    def parameter_rules(self, parameters: Iterable[ParameterRecord]) -> RuleSet:
        return {p.name: self.rules_for(p.schema_node, required=p.required) for p in parameters}

    def request_body_rules(self, body: Optional[RequestBodyRecord]) -> Dict[str, RuleSet]:
        if body is None:
            return {}
        return {
            media_type: self.rule_set(schema)
            for media_type, schema in body.content.items()
            if schema is not None
        }

    def endpoint_rules(self, endpoint: EndpointRecord) -> Dict[str, Any]:
        return {
            "parameters": self.parameter_rules(endpoint.parameters),
            "request_body": self.request_body_rules(endpoint.request_body),
        }

    def generate(
        self,
        schemas: Dict[str, SchemaNode],
        endpoints: Dict[str, EndpointRecord],
    ) -> Dict[str, Dict[str, Any]]:
        """Rules for every component schema and every endpoint."""
        rules: Dict[str, Dict[str, Any]] = {
            "schemas": {name: self.rule_set(node) for name, node in schemas.items()},
            "endpoints": {op_id: self.endpoint_rules(ep) for op_id, ep in endpoints.items()},
        }
        logger.info(
            "Generated validation rules: %d schemas, %d endpoints",
            len(rules["schemas"]),
            len(rules["endpoints"]),
        )
        return rules


def generate_rules(node: SchemaNode, required: Optional[bool] = None) -> List[str]:
    """Tokens for a single field."""
    return RuleGenerator().rules_for(node, required)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "RuleGenerator",
    "RuleSet",
    "generate_rules",
    "format_number",
    "format_enum_value",
]

logger.debug("apimodel.rules loaded: %d public symbols.", len(__all__))
