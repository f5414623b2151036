from __future__ import annotations

import logging

from layered_mcp.context import (
    build_auth_info,
    build_merged_tool_input,
    build_request_info,
    combine_cross_layer_props,
    merge_cross_call_context,
)
from layered_mcp.mcp.schema import ToolCallExtras
from layered_mcp.request_logging import CorrelationLogger


def test_combine_is_a_shallow_merge_where_second_wins():
    combined = combine_cross_layer_props({"a": 1, "b": {"x": 1}}, {"b": {"y": 2}, "c": 3})

    assert combined == {"a": 1, "b": {"y": 2}, "c": 3}


def test_combine_accumulates_logging_ids_without_duplicates():
    first = {"logging": {"ids": [{"a": "1"}, {"b": "2"}], "level": "debug"}}
    second = {"logging": {"ids": [{"b": "2"}, {"c": "3"}]}}

    combined = combine_cross_layer_props(first, second)

    assert combined["logging"] == {
        "ids": [{"a": "1"}, {"b": "2"}, {"c": "3"}],
        "level": "debug",
    }


def test_combine_ignores_non_mappings():
    assert combine_cross_layer_props(None, {"a": 1}) == {"a": 1}
    assert combine_cross_layer_props({"a": 1}, "nope") == {"a": 1}  # type: ignore[arg-type]


def test_request_info_has_defaults_and_stringified_headers():
    extras = ToolCallExtras(headers={"x-count": 2, "accept": ["a", "b"], "skip": None})

    info = build_request_info(extras)

    assert info["headers"] == {"x-count": "2", "accept": "a, b"}
    assert info["body"] == {}
    assert info["method"] == ""
    assert build_request_info(None)["headers"] == {}


def test_auth_info_accepts_both_key_styles():
    assert build_auth_info(ToolCallExtras()) is None
    assert build_auth_info(
        ToolCallExtras(auth_info={"token": "t", "clientId": "c", "expires_at": 10})
    ) == {"token": "t", "clientId": "c", "scopes": [], "expiresAt": 10}


def test_transport_context_overrides_client_context():
    extras = ToolCallExtras(headers={"x-real": "yes"}, auth_info={"token": "real"})

    context = merge_cross_call_context(
        {"requestInfo": {"headers": {"x-real": "forged"}}, "authInfo": {"token": "forged"}},
        None,
        extras,
    )

    assert context["requestInfo"]["headers"] == {"x-real": "yes"}
    assert context["authInfo"]["token"] == "real"


def test_client_auth_is_dropped_without_transport_auth():
    context = merge_cross_call_context({"authInfo": {"token": "forged"}}, None, ToolCallExtras())

    assert "authInfo" not in context


def test_nested_context_wins_over_top_level():
    context = merge_cross_call_context({"tenant": "top"}, {"tenant": "nested"}, None)

    assert context["tenant"] == "nested"


def test_logger_ids_are_appended_after_client_ids():
    logger = CorrelationLogger(logging.getLogger("tests.context")).with_id("requestId", "r-1")

    context = merge_cross_call_context(
        {"logging": {"ids": [{"conversationId": "c-1"}]}}, None, None, logger
    )

    assert context["logging"]["ids"] == [{"conversationId": "c-1"}, {"requestId": "r-1"}]


def test_each_nested_call_adds_one_id():
    base = CorrelationLogger(logging.getLogger("tests.context"))
    props: dict = {}
    for depth in range(3):
        logger = base.with_id("requestId", f"r-{depth}")
        _, props = build_merged_tool_input({"crossLayerProps": props}, None, logger)

    assert props["logging"]["ids"] == [
        {"requestId": "r-0"},
        {"requestId": "r-1"},
        {"requestId": "r-2"},
    ]


def test_build_merged_tool_input_strips_context_keys():
    clean, context = build_merged_tool_input(
        {
            "domain": "billing",
            "args": {"name": "Ada", "crossLayerProps": {"tenant": "acme"}},
            "crossLayerProps": {"trace": "on"},
        },
        ToolCallExtras(),
    )

    assert clean == {"domain": "billing", "args": {"name": "Ada"}}
    assert context["tenant"] == "acme"
    assert context["trace"] == "on"
    assert "requestInfo" in context


def test_build_merged_tool_input_tolerates_missing_arguments():
    clean, context = build_merged_tool_input(None, None)

    assert clean == {}
    assert context["requestInfo"]["path"] == ""
