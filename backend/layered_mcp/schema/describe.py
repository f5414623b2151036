"""Native schema node -> JSON-Schema-like description."""

from __future__ import annotations

from typing import Any, Callable

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
    RecordNode,
    SchemaNode,
    StringNode,
    UnionNode,
    first_description,
    is_omittable,
    is_schema_node,
    unwrap,
)


def json_type_of(value: Any) -> str | None:
    """Return the JSON type name of a scalar, or None when it has none."""
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if value is None:
        return "null"
    return None


def _string(node: StringNode) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "string"}
    if node.format:
        schema["format"] = node.format
    return schema


def _number(node: NumberNode) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "integer" if node.integer else "number"}
    if node.minimum is not None:
        schema["minimum"] = node.minimum
    if node.maximum is not None:
        schema["maximum"] = node.maximum
    if node.multiple_of is not None:
        schema["multipleOf"] = node.multiple_of
    return schema


def _const(value: Any) -> dict[str, Any]:
    schema: dict[str, Any] = {}
    json_type = json_type_of(value)
    if json_type in {"string", "number", "boolean"}:
        schema["type"] = json_type
    schema["const"] = value
    return schema


def _enum(node: EnumNode) -> dict[str, Any]:
    values = list(node.values)
    if values and all(isinstance(value, str) for value in values):
        return {"type": "string", "enum": values}
    if len(values) == 1:
        return _const(values[0])
    schema: dict[str, Any] = {"enum": values}
    json_types = {json_type_of(value) for value in values}
    if len(json_types) == 1 and None not in json_types:
        schema["type"] = json_types.pop()
    return schema


def _object(node: ObjectNode) -> dict[str, Any]:
    properties: dict[str, Any] = {}
    required: list[str] = []
    for key, child in node.fields.items():
        properties[key] = to_description(child)
        if not is_omittable(child):
            required.append(key)
    schema: dict[str, Any] = {
        "type": "object",
        "properties": properties,
        "additionalProperties": False,
    }
    if required:
        schema["required"] = required
    return schema


_HANDLERS: dict[type, Callable[[Any], dict[str, Any]]] = {
    StringNode: _string,
    NumberNode: _number,
    BooleanNode: lambda node: {"type": "boolean"},
    NullNode: lambda node: {"type": "null"},
    AnyNode: lambda node: {},
    LiteralNode: lambda node: _const(node.value),
    EnumNode: _enum,
    ArrayNode: lambda node: {"type": "array", "items": to_description(node.items)},
    RecordNode: lambda node: {
        "type": "object",
        "additionalProperties": to_description(node.values),
    },
    ObjectNode: _object,
    UnionNode: lambda node: {"anyOf": [to_description(option) for option in node.options]},
    IntersectionNode: lambda node: {
        "allOf": [to_description(member) for member in node.members]
    },
}


def to_description(node: SchemaNode) -> dict[str, Any]:
    """Convert a schema node into its JSON-Schema-like description.

    Wrapper nodes are unwrapped first; a nullable wrapper anywhere in the chain
    marks the result with ``nullable: true``. The outermost description wins.
    Values that are not schema nodes produce an empty (permissive) schema.
    """
    if not is_schema_node(node):
        return {}
    inner, nullable = unwrap(node)
    handler = _HANDLERS.get(type(inner))
    if handler is None:
        return {}
    schema = handler(inner)
    description = first_description(node)
    if description:
        schema["description"] = description
    if nullable:
        schema["nullable"] = True
    return schema


__all__ = ["json_type_of", "to_description"]
