"""Native schema node types used by the schema bridge.

Nodes form a closed tagged union. Adapters for concrete validation libraries
(see ``pydantic_adapter``) produce these nodes; nothing downstream inspects the
library objects themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Literal, Mapping, Union

UnknownKeys = Literal["ignore", "allow", "forbid"]


class _NodeOps:
    """Builder helpers shared by every node type."""

    description: str | None

    def describe(self, description: str) -> "SchemaNode":
        return replace(self, description=description)  # type: ignore[type-var]

    def optional(self) -> "OptionalNode":
        return OptionalNode(self)  # type: ignore[arg-type]

    def nullable(self) -> "NullableNode":
        return NullableNode(self)  # type: ignore[arg-type]

    def default(self, value: Any) -> "DefaultNode":
        return DefaultNode(self, value)  # type: ignore[arg-type]


@dataclass(frozen=True)
class StringNode(_NodeOps):
    format: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class NumberNode(_NodeOps):
    integer: bool = False
    minimum: float | None = None
    maximum: float | None = None
    multiple_of: float | None = None
    description: str | None = None


@dataclass(frozen=True)
class BooleanNode(_NodeOps):
    description: str | None = None


@dataclass(frozen=True)
class NullNode(_NodeOps):
    """An undefined/void value."""

    description: str | None = None


@dataclass(frozen=True)
class AnyNode(_NodeOps):
    """Maximally permissive placeholder."""

    description: str | None = None


@dataclass(frozen=True)
class LiteralNode(_NodeOps):
    value: Any
    description: str | None = None


@dataclass(frozen=True)
class EnumNode(_NodeOps):
    values: tuple[Any, ...]
    description: str | None = None


@dataclass(frozen=True)
class ArrayNode(_NodeOps):
    items: "SchemaNode"
    description: str | None = None


@dataclass(frozen=True)
class ObjectNode(_NodeOps):
    """Object with named fields.

    ``unknown_keys`` controls keys that are not declared: ``ignore`` accepts and
    drops them, ``allow`` keeps them, ``forbid`` rejects them.
    """

    fields: Mapping[str, "SchemaNode"] = field(default_factory=dict)
    unknown_keys: UnknownKeys = "ignore"
    description: str | None = None


@dataclass(frozen=True)
class RecordNode(_NodeOps):
    """String-keyed map with uniform values."""

    values: "SchemaNode"
    description: str | None = None


@dataclass(frozen=True)
class UnionNode(_NodeOps):
    options: tuple["SchemaNode", ...]
    description: str | None = None


@dataclass(frozen=True)
class IntersectionNode(_NodeOps):
    members: tuple["SchemaNode", ...]
    description: str | None = None


@dataclass(frozen=True)
class NullableNode(_NodeOps):
    inner: "SchemaNode"
    description: str | None = None


@dataclass(frozen=True)
class OptionalNode(_NodeOps):
    inner: "SchemaNode"
    description: str | None = None


@dataclass(frozen=True)
class DefaultNode(_NodeOps):
    inner: "SchemaNode"
    value: Any = None
    description: str | None = None


SchemaNode = Union[
    StringNode,
    NumberNode,
    BooleanNode,
    NullNode,
    AnyNode,
    LiteralNode,
    EnumNode,
    ArrayNode,
    ObjectNode,
    RecordNode,
    UnionNode,
    IntersectionNode,
    NullableNode,
    OptionalNode,
    DefaultNode,
]

WRAPPER_NODES = (NullableNode, OptionalNode, DefaultNode)
NODE_TYPES = (
    StringNode,
    NumberNode,
    BooleanNode,
    NullNode,
    AnyNode,
    LiteralNode,
    EnumNode,
    ArrayNode,
    ObjectNode,
    RecordNode,
    UnionNode,
    IntersectionNode,
) + WRAPPER_NODES


def is_schema_node(value: object) -> bool:
    return isinstance(value, NODE_TYPES)


def is_omittable(node: SchemaNode) -> bool:
    """True when an object field using this node may be absent."""
    return isinstance(node, (OptionalNode, DefaultNode))


def unwrap(node: SchemaNode) -> tuple[SchemaNode, bool]:
    """Strip optional/default/nullable wrappers.

    Returns the innermost node and whether a nullable wrapper was seen.
    """
    nullable = False
    current = node
    while isinstance(current, WRAPPER_NODES):
        if isinstance(current, NullableNode):
            nullable = True
        current = current.inner
    return current, nullable


def first_description(node: SchemaNode) -> str | None:
    """Return the closest description, outermost wrapper first."""
    current: SchemaNode | None = node
    while current is not None:
        if current.description:
            return current.description
        current = current.inner if isinstance(current, WRAPPER_NODES) else None
    return None


__all__ = [
    "AnyNode",
    "ArrayNode",
    "BooleanNode",
    "DefaultNode",
    "EnumNode",
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
    "first_description",
    "is_omittable",
    "is_schema_node",
    "unwrap",
]
