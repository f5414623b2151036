"""JSON-Schema-like description -> native schema node.

Used for caller-declared tool schemas. The conversion is best effort: numeric
constraints are not carried over, ``const`` becomes a literal and anything
unrecognised becomes an ``AnyNode`` instead of raising.
"""

from __future__ import annotations

from functools import reduce
from typing import Any, Mapping, Sequence

from .nodes import (
    AnyNode,
    ArrayNode,
    BooleanNode,
    EnumNode,
    IntersectionNode,
    LiteralNode,
    NullNode,
    NumberNode,
    ObjectNode,
    SchemaNode,
    StringNode,
    UnionNode,
)


def _union_of(definitions: Sequence[Any]) -> SchemaNode:
    members = tuple(to_schema_node(definition) for definition in definitions)
    if len(members) == 1:
        return members[0]
    return UnionNode(members)


def _intersection_of(definitions: Sequence[Any]) -> SchemaNode:
    if not definitions:
        return AnyNode()
    members = [to_schema_node(definition) for definition in definitions]
    return reduce(lambda left, right: IntersectionNode((left, right)), members)


def _enum_or_literals(values: Any, preferred_type: str | None) -> SchemaNode | None:
    if not isinstance(values, list) or not values:
        return None
    if preferred_type == "string" and all(isinstance(value, str) for value in values):
        return EnumNode(tuple(values))
    literals = tuple(LiteralNode(value) for value in values)
    if len(literals) == 1:
        return literals[0]
    return UnionNode(literals)


def object_fields(definition: Mapping[str, Any]) -> dict[str, SchemaNode]:
    """Convert ``properties``/``required`` into object fields.

    Properties missing from ``required`` are wrapped as optional.
    """
    properties = definition.get("properties")
    if not isinstance(properties, Mapping):
        return {}
    required = definition.get("required")
    required_keys = set(required) if isinstance(required, list) else set()
    fields: dict[str, SchemaNode] = {}
    for key, child in properties.items():
        node = to_schema_node(child)
        fields[str(key)] = node if key in required_keys else node.optional()
    return fields


def _by_type(definition: Mapping[str, Any]) -> SchemaNode:
    schema_type = definition.get("type")
    enum_values = definition.get("enum")
    if isinstance(schema_type, list) and schema_type:
        members = tuple(
            NullNode() if member == "null" else _by_type({**definition, "type": member})
            for member in schema_type
        )
        return members[0] if len(members) == 1 else UnionNode(members)
    if schema_type == "string":
        enum_node = _enum_or_literals(enum_values, "string")
        if enum_node is not None:
            return enum_node
        if definition.get("format") == "date-time":
            return StringNode(format="date-time")
        return StringNode()
    if schema_type in ("number", "integer"):
        enum_node = _enum_or_literals(enum_values, "number")
        if enum_node is not None:
            return enum_node
        return NumberNode(integer=schema_type == "integer")
    if schema_type == "boolean":
        return _enum_or_literals(enum_values, "boolean") or BooleanNode()
    if schema_type == "array":
        items = definition.get("items")
        return ArrayNode(to_schema_node(items) if items else AnyNode())
    if schema_type == "object":
        return ObjectNode(object_fields(definition), unknown_keys="allow")
    return _enum_or_literals(enum_values, None) or AnyNode()


def to_schema_node(definition: Any) -> SchemaNode:
    """Convert a JSON-Schema-like mapping into a schema node. Never raises."""
    if not isinstance(definition, Mapping):
        return AnyNode()

    any_of = definition.get("anyOf")
    one_of = definition.get("oneOf")
    all_of = definition.get("allOf")
    if isinstance(any_of, list) and any_of:
        node = _union_of(any_of)
    elif isinstance(one_of, list) and one_of:
        node = _union_of(one_of)
    elif isinstance(all_of, list) and all_of:
        node = _intersection_of(all_of)
    elif "const" in definition:
        node = LiteralNode(definition["const"])
    else:
        try:
            node = _by_type(definition)
        except (TypeError, ValueError):
            node = AnyNode()
    # nullable applies to combinators too
    if definition.get("nullable") is True:
        return node.nullable()
    return node


__all__ = ["object_fields", "to_schema_node"]
