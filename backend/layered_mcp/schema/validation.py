"""Build pydantic validators from native schema nodes."""

from __future__ import annotations

import itertools
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Optional, Union

from pydantic import (
    AfterValidator,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    TypeAdapter,
    ValidationError,
    create_model,
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
    is_omittable,
)

_DATETIME = TypeAdapter(datetime)
_MODEL_COUNTER = itertools.count()


def _check_datetime(value: str) -> str:
    _DATETIME.validate_python(value)
    return value


def _same_value(value: Any, expected: Any) -> bool:
    if isinstance(value, bool) or isinstance(expected, bool):
        return value is expected
    if isinstance(value, (int, float)) and isinstance(expected, (int, float)):
        return value == expected
    return type(value) is type(expected) and value == expected


def _one_of_annotation(values: tuple[Any, ...]) -> Any:
    def _check(value: Any) -> Any:
        if not any(_same_value(value, expected) for expected in values):
            raise ValueError(f"value must be one of {list(values)!r}")
        return value

    return Annotated[Any, AfterValidator(_check)]


def _is_multiple(value: float, step: float) -> bool:
    # decimal arithmetic, so 0.3 is a multiple of 0.1
    if not step:
        return True
    try:
        return Decimal(str(value)) % Decimal(str(step)) == 0
    except ArithmeticError:
        return False


def _number_annotation(node: NumberNode) -> Any:
    base: Any = StrictInt if node.integer else Union[StrictInt, StrictFloat]
    if node.minimum is None and node.maximum is None and node.multiple_of is None:
        return base

    def _check_range(value: Any) -> Any:
        if node.minimum is not None and value < node.minimum:
            raise ValueError(f"must be greater than or equal to {node.minimum}")
        if node.maximum is not None and value > node.maximum:
            raise ValueError(f"must be less than or equal to {node.maximum}")
        if node.multiple_of is not None and not _is_multiple(value, node.multiple_of):
            raise ValueError(f"must be a multiple of {node.multiple_of}")
        return value

    return Annotated[base, AfterValidator(_check_range)]


def _object_annotation(node: ObjectNode) -> Any:
    # Keys become aliases so that names which are not identifiers still work.
    field_definitions: dict[str, Any] = {}
    for index, (key, child) in enumerate(node.fields.items()):
        annotation = to_annotation(child)
        if isinstance(child, DefaultNode):
            spec = Field(default=child.value, alias=key)
        elif is_omittable(child):
            spec = Field(default=None, alias=key)
        else:
            spec = Field(alias=key)
        field_definitions[f"field_{index}"] = (annotation, spec)
    return create_model(
        f"SchemaObject{next(_MODEL_COUNTER)}",
        __config__=ConfigDict(extra=node.unknown_keys),
        **field_definitions,
    )


def _intersection_annotation(node: IntersectionNode) -> Any:
    adapters = [TypeAdapter(to_annotation(member)) for member in node.members]

    def _check_all(value: Any) -> Any:
        for adapter in adapters:
            try:
                adapter.validate_python(value)
            except ValidationError as exc:
                raise ValueError(str(exc)) from exc
        return value

    return Annotated[Any, AfterValidator(_check_all)]


def to_annotation(node: SchemaNode) -> Any:
    """Return a type annotation accepting the values the node describes."""
    if isinstance(node, StringNode):
        if node.format == "date-time":
            return Annotated[StrictStr, AfterValidator(_check_datetime)]
        return StrictStr
    if isinstance(node, NumberNode):
        return _number_annotation(node)
    if isinstance(node, BooleanNode):
        return StrictBool
    if isinstance(node, NullNode):
        return type(None)
    if isinstance(node, LiteralNode):
        return _one_of_annotation((node.value,))
    if isinstance(node, EnumNode):
        return _one_of_annotation(tuple(node.values))
    if isinstance(node, ArrayNode):
        return list[to_annotation(node.items)]  # type: ignore[misc]
    if isinstance(node, RecordNode):
        return dict[str, to_annotation(node.values)]  # type: ignore[misc]
    if isinstance(node, ObjectNode):
        return _object_annotation(node)
    if isinstance(node, UnionNode):
        if not node.options:
            return Any
        return Union[tuple(to_annotation(option) for option in node.options)]
    if isinstance(node, IntersectionNode):
        return _intersection_annotation(node)
    if isinstance(node, (NullableNode, OptionalNode)):
        return Optional[to_annotation(node.inner)]
    if isinstance(node, DefaultNode):
        return to_annotation(node.inner)
    return Any


def build_validator(node: SchemaNode) -> TypeAdapter:
    """Build a ``TypeAdapter`` for the node.

    Optional object fields may be omitted or sent as ``null``.
    """
    return TypeAdapter(to_annotation(node))


def accepts(node: SchemaNode, value: Any) -> bool:
    try:
        build_validator(node).validate_python(value)
    except ValidationError:
        return False
    return True


__all__ = ["accepts", "build_validator", "to_annotation"]
