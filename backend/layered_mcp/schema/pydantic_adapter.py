"""Build schema nodes from pydantic models and type annotations.

Only public reflection is used: ``BaseModel.model_fields``, ``FieldInfo`` and
``typing.get_origin``/``get_args``. Anything unsupported becomes ``AnyNode``.
"""

from __future__ import annotations

import collections.abc
import inspect
import types
from datetime import date, datetime
from enum import Enum
from typing import Annotated, Any, Literal, Union, get_args, get_origin

import annotated_types
from pydantic import BaseModel
from pydantic.fields import FieldInfo

from .nodes import (
    AnyNode,
    ArrayNode,
    BooleanNode,
    DefaultNode,
    EnumNode,
    LiteralNode,
    NullNode,
    NumberNode,
    ObjectNode,
    RecordNode,
    SchemaNode,
    StringNode,
    UnionNode,
    is_schema_node,
)

_SEQUENCE_ORIGINS = {
    list,
    tuple,
    set,
    frozenset,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.Iterable,
}
_MAPPING_ORIGINS = {dict, collections.abc.Mapping, collections.abc.MutableMapping}


def _apply_constraints(node: SchemaNode, metadata: list[Any]) -> SchemaNode:
    description = None
    minimum = maximum = multiple_of = None
    for item in metadata:
        if isinstance(item, FieldInfo):
            description = item.description or description
            node = _apply_constraints(node, list(item.metadata))
        elif isinstance(item, annotated_types.Ge):
            minimum = item.ge
        elif isinstance(item, annotated_types.Le):
            maximum = item.le
        elif isinstance(item, annotated_types.MultipleOf):
            multiple_of = item.multiple_of
    if isinstance(node, NumberNode):
        node = NumberNode(
            integer=node.integer,
            minimum=minimum if minimum is not None else node.minimum,
            maximum=maximum if maximum is not None else node.maximum,
            multiple_of=multiple_of if multiple_of is not None else node.multiple_of,
            description=node.description,
        )
    if description:
        node = node.describe(description)
    return node


def _class_description(cls: type) -> str | None:
    doc = cls.__dict__.get("__doc__")
    return inspect.cleandoc(doc) if doc else None


def from_model(model: type[BaseModel]) -> ObjectNode:
    """Describe a pydantic model as an object node."""
    fields: dict[str, SchemaNode] = {}
    for name, info in model.model_fields.items():
        key = info.alias or name
        node = from_annotation(info.annotation)
        node = _apply_constraints(node, list(info.metadata))
        if info.description:
            node = node.describe(info.description)
        if not info.is_required():
            default = None if info.default_factory is not None else info.default
            node = DefaultNode(node, default)
        fields[key] = node
    extra = model.model_config.get("extra") or "ignore"
    return ObjectNode(fields, unknown_keys=extra, description=_class_description(model))


def _from_union(args: tuple[Any, ...]) -> SchemaNode:
    non_null = [arg for arg in args if arg is not type(None)]
    has_null = len(non_null) != len(args)
    if len(non_null) == 1:
        inner = from_annotation(non_null[0])
    else:
        inner = UnionNode(tuple(from_annotation(arg) for arg in non_null))
    return inner.nullable() if has_null else inner


def _from_generic(annotation: Any, origin: Any) -> SchemaNode:
    args = get_args(annotation)
    if origin is Annotated:
        return _apply_constraints(from_annotation(args[0]), list(args[1:]))
    if origin is Union or origin is types.UnionType:
        return _from_union(args)
    if origin is Literal:
        if len(args) == 1:
            return LiteralNode(args[0])
        return EnumNode(tuple(args))
    if origin in _SEQUENCE_ORIGINS:
        item = args[0] if args and args[0] is not Ellipsis else Any
        return ArrayNode(from_annotation(item))
    if origin in _MAPPING_ORIGINS:
        value = args[1] if len(args) == 2 else Any
        return RecordNode(from_annotation(value))
    return AnyNode()


def from_annotation(annotation: Any) -> SchemaNode:
    """Describe a type annotation (or pass a schema node through unchanged)."""
    if is_schema_node(annotation):
        return annotation
    if annotation is None or annotation is type(None):
        return NullNode()
    if annotation is Any:
        return AnyNode()
    origin = get_origin(annotation)
    if origin is not None:
        return _from_generic(annotation, origin)
    if not isinstance(annotation, type):
        return AnyNode()
    if issubclass(annotation, BaseModel):
        return from_model(annotation)
    if issubclass(annotation, Enum):
        return EnumNode(
            tuple(member.value for member in annotation),
            description=_class_description(annotation),
        )
    if issubclass(annotation, bool):
        return BooleanNode()
    if issubclass(annotation, int):
        return NumberNode(integer=True)
    if issubclass(annotation, float):
        return NumberNode()
    if issubclass(annotation, datetime):
        return StringNode(format="date-time")
    if issubclass(annotation, date):
        return StringNode(format="date")
    if issubclass(annotation, str):
        return StringNode()
    if annotation in (list, tuple, set, frozenset):
        return ArrayNode(AnyNode())
    if annotation is dict:
        return RecordNode(AnyNode())
    return AnyNode()


__all__ = ["from_annotation", "from_model"]
