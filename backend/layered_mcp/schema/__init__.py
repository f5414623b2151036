"""Schema bridge between native schema nodes and JSON-Schema-like descriptions."""

from .describe import to_description
from .functions import (
    ERROR_OBJECT_NODE,
    FunctionSchema,
    cross_layer_props_schema,
    function_to_openapi,
    plain_function_openapi,
)
from .nodes import (
    AnyNode,
    ArrayNode,
    BooleanNode,
    DefaultNode,
    EnumNode,
    IntersectionNode,
    LiteralNode,
    NullNode,
    NullableNode,
    NumberNode,
    ObjectNode,
    OptionalNode,
    RecordNode,
    SchemaNode,
    StringNode,
    UnionNode,
)
from .parse import to_schema_node
from .pydantic_adapter import from_annotation, from_model
from .validation import accepts, build_validator

__all__ = [
    "AnyNode",
    "ArrayNode",
    "BooleanNode",
    "DefaultNode",
    "ERROR_OBJECT_NODE",
    "EnumNode",
    "FunctionSchema",
    "IntersectionNode",
    "LiteralNode",
    "NullNode",
    "NullableNode",
    "NumberNode",
    "ObjectNode",
    "OptionalNode",
    "RecordNode",
    "SchemaNode",
    "StringNode",
    "UnionNode",
    "accepts",
    "build_validator",
    "cross_layer_props_schema",
    "from_annotation",
    "from_model",
    "function_to_openapi",
    "plain_function_openapi",
    "to_description",
    "to_schema_node",
]
