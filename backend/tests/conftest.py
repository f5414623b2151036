"""Shared fixtures: a small catalog with annotated, plain and failing features."""

from __future__ import annotations

from typing import Any, Awaitable, Callable

import pytest
from pydantic import BaseModel, Field

from layered_mcp.datastore import MemoryModel, MemoryModelCruds
from layered_mcp.domains import Domain, DomainCatalog, annotated_function
from layered_mcp.errors import ErrorObjectError, create_error_object
from layered_mcp.mcp.registry import ToolRegistry
from layered_mcp.mcp.schema import ToolCallExtras
from layered_mcp.mcp.server import McpServer
from layered_mcp.settings import (
    ConnectionSettings,
    HideComponentsSettings,
    McpServerSettings,
    StartHereSettings,
)


class GreetArgs(BaseModel):
    name: str


class GreetResult(BaseModel):
    greeting: str


class InvoiceArgs(BaseModel):
    customer: str
    amount: float = Field(ge=0)


class TodoItem(BaseModel):
    """A thing to do."""

    id: str | None = None
    title: str
    done: bool = False


@annotated_function(args=GreetArgs, returns=GreetResult, description="Greets someone by name.")
async def greet(args: dict[str, Any], cross_layer_props: dict[str, Any] | None) -> dict[str, Any]:
    return {"greeting": f"Hello, {args['name']}"}


@annotated_function(args=InvoiceArgs, description="Creates an invoice.")
def create_invoice(args: dict[str, Any], cross_layer_props: dict[str, Any] | None) -> dict[str, Any]:
    return {"customer": args["customer"], "amount": args["amount"]}


async def inspect_context(args: dict[str, Any], cross_layer_props: dict[str, Any] | None) -> Any:
    return {"args": args, "crossLayerProps": cross_layer_props}


async def explode(args: dict[str, Any], cross_layer_props: dict[str, Any] | None) -> Any:
    raise RuntimeError("Test cause")


async def refuse(args: dict[str, Any], cross_layer_props: dict[str, Any] | None) -> Any:
    raise ErrorObjectError(create_error_object("NOT_ALLOWED", "Not allowed"))


def build_catalog() -> DomainCatalog:
    todos = MemoryModelCruds(MemoryModel(TodoItem, namespace="tasks", plural_name="Todos"))
    return DomainCatalog(
        [
            Domain(
                "billing",
                description="Invoices and payments.",
                features={"createInvoice": create_invoice, "greet": greet},
            ),
            Domain(
                "tasks",
                description="Task tracking.",
                features={
                    "inspectContext": inspect_context,
                    "explode": explode,
                    "refuse": refuse,
                },
                cruds=[todos],
            ),
            Domain("internal", description="Internal tooling.", features={"greet": greet}),
            Domain("empty", description="Nothing exposed."),
            Domain("layered-core", features={"greet": greet}),
        ]
    )


def build_settings(
    *,
    paths: tuple[str, ...] = (),
    domains: tuple[str, ...] = (),
    all_models: bool = False,
    stateless: bool = False,
    start_here: StartHereSettings | None = None,
) -> McpServerSettings:
    return McpServerSettings(
        name="test-server",
        version="1.2.3",
        stateless=stateless,
        connection=ConnectionSettings(type="http", path="/mcp"),
        hide_components=HideComponentsSettings(
            paths=frozenset(paths), domains=frozenset(domains), all_models=all_models
        ),
        start_here=start_here or StartHereSettings(),
        system_name="test-system",
        system_description="A system used in tests.",
        system_version="1.2.3",
    )


@pytest.fixture
def catalog() -> DomainCatalog:
    return build_catalog()


@pytest.fixture
def settings() -> McpServerSettings:
    return build_settings()


@pytest.fixture
def make_server(catalog: DomainCatalog) -> Callable[..., McpServer]:
    def _make(**kwargs: Any) -> McpServer:
        return McpServer(catalog, build_settings(**kwargs))

    return _make


@pytest.fixture
def server(make_server: Callable[..., McpServer]) -> McpServer:
    return make_server()


@pytest.fixture
def registry(server: McpServer) -> ToolRegistry:
    return server.build_registry()


@pytest.fixture
def call_tool(
    registry: ToolRegistry,
) -> Callable[..., Awaitable[dict[str, Any]]]:
    async def _call(
        name: str,
        arguments: dict[str, Any] | None = None,
        *,
        extras: ToolCallExtras | None = None,
        tools: ToolRegistry | None = None,
    ) -> dict[str, Any]:
        tool = (tools or registry).get_tool(name)
        assert tool is not None, f"tool {name} is not registered"
        return await tool.handler(arguments or {}, extras or ToolCallExtras())

    return _call
