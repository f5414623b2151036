from __future__ import annotations

import json

import pytest

from layered_mcp.errors import McpServerError
from layered_mcp.mcp.models import cleanup_search_query, default_tool_name
from layered_mcp.mcp.server import mcp_models

TODOS = "tasks/Todos"


def _payload(envelope):
    return json.loads(envelope["content"][0]["text"])


@pytest.mark.asyncio
async def test_list_models(call_tool):
    envelope = await call_tool("list_models", {"domain": "tasks"})

    assert _payload(envelope) == {
        "models": [{"modelType": TODOS, "description": "A thing to do."}]
    }


@pytest.mark.asyncio
async def test_list_models_for_domain_without_models(call_tool):
    envelope = await call_tool("list_models", {"domain": "billing"})

    assert _payload(envelope)["error"]["code"] == "MODELS_NOT_FOUND"


@pytest.mark.asyncio
async def test_list_models_hidden_model_is_omitted(make_server, call_tool):
    registry = make_server(paths=("tasks.cruds.Todos",)).build_registry()

    envelope = await call_tool("list_models", {"domain": "tasks"}, tools=registry)

    assert _payload(envelope) == {"models": []}


@pytest.mark.asyncio
async def test_describe_model_returns_json_schema(call_tool):
    envelope = await call_tool("describe_model", {"domain": "tasks", "modelType": TODOS})

    schema = _payload(envelope)
    assert schema["type"] == "object"
    assert set(schema["properties"]) == {"id", "title", "done"}
    assert schema["required"] == ["title"]


@pytest.mark.asyncio
async def test_describe_unknown_model(call_tool):
    envelope = await call_tool(
        "describe_model", {"domain": "tasks", "modelType": "tasks/Nothing"}
    )

    assert _payload(envelope)["error"]["code"] == "MODEL_NOT_FOUND"


@pytest.mark.asyncio
async def test_save_then_retrieve(call_tool):
    saved = _payload(
        await call_tool("model_save", {"modelType": TODOS, "instance": {"title": "Write docs"}})
    )
    assert saved["title"] == "Write docs"
    assert saved["done"] is False
    assert saved["id"]

    envelope = await call_tool("model_retrieve", {"modelType": TODOS, "id": saved["id"]})

    assert _payload(envelope) == saved


@pytest.mark.asyncio
async def test_save_invalid_instance_is_a_validation_error(call_tool):
    envelope = await call_tool(
        "model_save", {"modelType": TODOS, "instance": {"done": "maybe"}}
    )

    assert envelope["isError"] is True
    error = _payload(envelope)["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["message"] == "Validation Error"
    assert error["details"]["modelName"] == TODOS
    assert set(error["details"]["keysToErrors"]) == {"title", "done"}


@pytest.mark.asyncio
async def test_bulk_delete_then_retrieve_is_not_found(call_tool):
    await call_tool(
        "model_bulk_insert",
        {"modelType": TODOS, "items": [{"id": "a", "title": "A"}, {"id": "b", "title": "B"}]},
    )

    envelope = await call_tool("model_bulk_delete", {"modelType": TODOS, "ids": ["a", "b"]})
    assert "isError" not in envelope
    assert envelope["content"][0]["text"] == '""'
    assert "structuredContent" not in envelope

    missing = await call_tool("model_retrieve", {"modelType": TODOS, "id": "a"})
    assert _payload(missing)["error"]["code"] == "MODEL_NOT_FOUND"


@pytest.mark.asyncio
async def test_delete_removes_instance(call_tool):
    await call_tool("model_save", {"modelType": TODOS, "instance": {"id": "x", "title": "X"}})

    await call_tool("model_delete", {"modelType": TODOS, "id": "x"})

    envelope = await call_tool("model_retrieve", {"modelType": TODOS, "id": "x"})
    assert _payload(envelope)["error"]["code"] == "MODEL_NOT_FOUND"


@pytest.mark.asyncio
async def test_search_with_like_and_paging(call_tool):
    await call_tool(
        "model_bulk_insert",
        {
            "modelType": TODOS,
            "items": [
                {"id": "1", "title": "Write docs"},
                {"id": "2", "title": "write tests"},
                {"id": "3", "title": "Ship it"},
            ],
        },
    )

    envelope = await call_tool(
        "model_search",
        {
            "modelType": TODOS,
            "search": {
                "query": [
                    {"type": "property", "key": "title", "value": "write%", "equalitySymbol": "like"}
                ],
                "take": 1,
                "page": 2,
            },
        },
    )

    result = _payload(envelope)
    assert [item["id"] for item in result["instances"]] == ["2"]
    assert result["page"] == {"page": 2, "take": 1, "total": 2}


@pytest.mark.asyncio
async def test_search_with_unreadable_page_uses_the_first_page(call_tool):
    await call_tool(
        "model_bulk_insert",
        {"modelType": TODOS, "items": [{"id": "1", "title": "a"}, {"id": "2", "title": "b"}]},
    )

    envelope = await call_tool(
        "model_search",
        {"modelType": TODOS, "search": {"query": [], "take": 1, "page": "next"}},
    )

    assert "isError" not in envelope
    result = _payload(envelope)
    assert [item["id"] for item in result["instances"]] == ["1"]
    assert result["page"] == {"page": 1, "take": 1, "total": 2}


@pytest.mark.asyncio
async def test_hidden_operation_is_not_found(make_server, call_tool):
    registry = make_server(paths=("tasks.cruds.Todos.delete",)).build_registry()

    envelope = await call_tool("model_delete", {"modelType": TODOS, "id": "x"}, tools=registry)

    assert _payload(envelope)["error"]["code"] == "OPERATION_NOT_FOUND"


@pytest.mark.asyncio
async def test_hidden_model_is_not_found(make_server, call_tool):
    registry = make_server(paths=("tasks.cruds",)).build_registry()

    envelope = await call_tool("model_retrieve", {"modelType": TODOS, "id": "x"}, tools=registry)

    assert _payload(envelope)["error"]["code"] == "MODEL_NOT_FOUND"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("model_type", "code"),
    [
        ("missing/Todos", "DOMAIN_NOT_FOUND"),
        ("layered-core/Things", "DOMAIN_NOT_FOUND"),
        ("tasks/Nothing", "MODEL_NOT_FOUND"),
        ("tasks/", "MODEL_NOT_FOUND"),
    ],
)
async def test_generic_tools_resolve_model_type(call_tool, model_type, code):
    envelope = await call_tool("model_retrieve", {"modelType": model_type, "id": "x"})

    assert _payload(envelope)["error"]["code"] == code


@pytest.mark.asyncio
async def test_per_model_tools(server, catalog, call_tool):
    mcp_models("tasks", server)
    registry = server.build_registry()

    for operation in ("save", "retrieve", "delete", "search", "bulk_insert", "bulk_delete"):
        assert registry.get_tool(f"tasks_Todos_{operation}") is not None
    save_tool = registry.get_tool("tasks_Todos_save")
    assert save_tool.input_schema["properties"]["title"]["type"] == "string"

    saved = _payload(
        await call_tool("tasks_Todos_save", {"id": "t1", "title": "Plan"}, tools=registry)
    )
    assert saved == {"id": "t1", "title": "Plan", "done": False}
    found = await call_tool("tasks_Todos_retrieve", {"id": "t1"}, tools=registry)
    assert _payload(found) == saved
    missing = await call_tool("tasks_Todos_retrieve", {"id": "nope"}, tools=registry)
    assert missing["content"][0]["text"] == '""'


def test_per_model_tools_custom_names(server):
    mcp_models("tasks", server, name_generator=lambda model, operation: f"{operation}Todo")

    names = server.build_registry().names()

    assert {"saveTodo", "bulkInsertTodo", "bulkDeleteTodo"} <= set(names)


def test_mcp_models_unknown_namespace(server):
    with pytest.raises(McpServerError):
        mcp_models("missing", server)


def test_default_tool_name(catalog):
    model = catalog.get("tasks").cruds["Todos"].get_model()

    assert default_tool_name(model, "bulkDelete") == "tasks_Todos_bulk_delete"


def test_cleanup_search_query():
    assert cleanup_search_query(None) == {"query": []}
    assert cleanup_search_query({"query": [None, "AND"], "take": None, "page": 1}) == {
        "page": 1,
        "query": ["AND"],
    }
