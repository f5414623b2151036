from __future__ import annotations

from layered_mcp.schema import (
    AnyNode,
    ArrayNode,
    EnumNode,
    IntersectionNode,
    LiteralNode,
    NullNode,
    NullableNode,
    NumberNode,
    ObjectNode,
    StringNode,
    UnionNode,
    to_description,
    to_schema_node,
)


def test_scalars():
    assert to_schema_node({"type": "string"}) == StringNode()
    assert to_schema_node({"type": "string", "format": "date-time"}) == StringNode(
        format="date-time"
    )
    assert to_schema_node({"type": "integer"}) == NumberNode(integer=True)
    assert to_schema_node({"type": "number"}) == NumberNode()
    assert to_schema_node({"type": "array"}) == ArrayNode(AnyNode())


def test_json_null_type_is_permissive():
    assert to_schema_node({"type": "null"}) == AnyNode()


def test_object_properties_outside_required_become_optional():
    node = to_schema_node(
        {
            "type": "object",
            "properties": {"name": {"type": "string"}, "age": {"type": "integer"}},
            "required": ["name"],
        }
    )
    assert isinstance(node, ObjectNode)
    assert node.unknown_keys == "allow"
    assert node.fields["name"] == StringNode()
    assert node.fields["age"] == NumberNode(integer=True).optional()


def test_enums_and_literals():
    assert to_schema_node({"type": "string", "enum": ["a", "b"]}) == EnumNode(("a", "b"))
    assert to_schema_node({"type": "number", "enum": [1]}) == LiteralNode(1)
    assert to_schema_node({"type": "integer", "enum": [1, 2]}) == UnionNode(
        (LiteralNode(1), LiteralNode(2))
    )
    assert to_schema_node({"enum": ["x", 3]}) == UnionNode((LiteralNode("x"), LiteralNode(3)))


def test_type_lists_become_unions():
    assert to_schema_node({"type": ["string", "null"]}) == UnionNode(
        (StringNode(), NullNode())
    )
    assert to_schema_node({"type": ["integer"]}) == NumberNode(integer=True)


def test_combinators():
    assert to_schema_node({"anyOf": [{"type": "string"}]}) == StringNode()
    assert to_schema_node({"oneOf": [{"type": "string"}, {"type": "boolean"}]}) == to_schema_node(
        {"anyOf": [{"type": "string"}, {"type": "boolean"}]}
    )
    node = to_schema_node(
        {"allOf": [{"type": "string"}, {"type": "number"}, {"type": "boolean"}]}
    )
    assert isinstance(node, IntersectionNode)
    left, right = node.members
    assert isinstance(left, IntersectionNode)
    assert to_description(right) == {"type": "boolean"}


def test_nullable_flag_wraps_node():
    assert to_schema_node({"type": "string", "nullable": True}) == NullableNode(StringNode())


def test_malformed_input_never_raises():
    assert to_schema_node("oops") == AnyNode()
    assert to_schema_node(None) == AnyNode()
    assert to_schema_node({"allOf": []}) == AnyNode()
    assert to_schema_node({"type": "mystery"}) == AnyNode()
    node = to_schema_node({"type": "object", "properties": ["not", "a", "mapping"]})
    assert node == ObjectNode({}, unknown_keys="allow")


def test_nullable_flag_wraps_combinators():
    union = to_schema_node(
        {"anyOf": [{"type": "string"}, {"type": "integer"}], "nullable": True}
    )
    intersection = to_schema_node(
        {"allOf": [{"type": "object"}, {"type": "object"}], "nullable": True}
    )

    assert union == NullableNode(UnionNode((StringNode(), NumberNode(integer=True))))
    assert isinstance(intersection, NullableNode)


def test_const_becomes_a_literal():
    assert to_schema_node({"type": "string", "const": "on"}) == LiteralNode("on")
    assert to_schema_node({"const": None}) == LiteralNode(None)
