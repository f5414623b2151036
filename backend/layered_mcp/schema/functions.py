"""Function schemas and their tool-facing descriptions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .describe import to_description
from .nodes import (
    AnyNode,
    NullNode,
    ObjectNode,
    RecordNode,
    SchemaNode,
    StringNode,
    UnionNode,
)
from .pydantic_adapter import from_annotation

ERROR_OBJECT_NODE = ObjectNode(
    {
        "error": ObjectNode(
            {
                "code": StringNode(),
                "message": StringNode(),
                "details": AnyNode().optional(),
                "errorDetails": StringNode().optional(),
                "data": RecordNode(AnyNode()).optional(),
                "trace": StringNode().optional(),
                "cause": AnyNode().optional(),
            }
        )
    }
)


@dataclass(frozen=True)
class FunctionSchema:
    """Arguments, return value and description of an annotated function."""

    args: SchemaNode | None = None
    returns: SchemaNode | None = None
    description: str | None = None

    @classmethod
    def create(
        cls,
        *,
        args: Any = None,
        returns: Any = None,
        description: str | None = None,
    ) -> "FunctionSchema":
        """Build a schema from pydantic models, annotations or schema nodes.

        The return value is widened to ``returns | error object`` since any
        feature may answer with a structured error instead of raising.
        """
        args_node = from_annotation(args) if args is not None else None
        returns_node = from_annotation(returns) if returns is not None else NullNode()
        return cls(
            args=args_node,
            returns=UnionNode((returns_node, ERROR_OBJECT_NODE)),
            description=description,
        )


def cross_layer_props_schema() -> dict[str, Any]:
    """Static description of the cross-call context accepted by features."""
    return {
        "type": "object",
        "additionalProperties": True,
        "properties": {
            "logging": {
                "type": "object",
                "additionalProperties": True,
                "properties": {
                    "ids": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "additionalProperties": {"type": "string"},
                        },
                    },
                },
            },
        },
    }


def function_to_openapi(name: str, schema: FunctionSchema) -> dict[str, Any]:
    """Describe an annotated function for ``describe_feature``."""
    args_json = to_description(schema.args) if schema.args is not None else {}
    output_json = to_description(schema.returns) if schema.returns is not None else {}
    if output_json.get("type") == "object" and output_json.get("properties"):
        output_json = output_json["properties"]
    description: dict[str, Any] = {"name": name}
    if schema.description:
        description["description"] = schema.description
    description["input"] = {
        "type": "object",
        "additionalProperties": False,
        "properties": {
            "args": args_json,
            "crossLayerProps": cross_layer_props_schema(),
        },
        "required": ["args"],
    }
    description["output"] = output_json
    return description


def plain_function_openapi(name: str) -> dict[str, Any]:
    """Best-effort description for functions that carry no schema."""
    return {
        "name": name,
        "input": {
            "type": "object",
            "additionalProperties": True,
            "properties": {
                "args": {"type": "object"},
                "crossLayerProps": cross_layer_props_schema(),
            },
            "required": ["args"],
        },
        "output": {"type": "object", "additionalProperties": True},
    }


__all__ = [
    "ERROR_OBJECT_NODE",
    "FunctionSchema",
    "cross_layer_props_schema",
    "function_to_openapi",
    "plain_function_openapi",
]
