"""MCP protocol glue: an SDK server over the tool registry, served over
streamable HTTP (mounted in a FastAPI app) or stdio."""

from __future__ import annotations

import contextlib
import logging
from typing import TYPE_CHECKING, Any, AsyncIterator, Mapping

import mcp.types as types
from fastapi import FastAPI
from mcp.server.auth.middleware.auth_context import get_access_token
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from pydantic import BaseModel, ValidationError
from starlette.requests import Request
from starlette.types import Receive, Scope, Send

from ..envelope import Envelope, format_response
from ..errors import invalid_arguments, tool_not_found
from ..settings import McpServerSettings
from .registry import ToolRegistry
from .schema import ToolCallExtras, ToolDescriptor

if TYPE_CHECKING:
    from .server import McpServer

logger = logging.getLogger(__name__)

SESSION_HEADER = "mcp-session-id"


def to_mcp_tool(tool: ToolDescriptor) -> types.Tool:
    return types.Tool.model_validate(tool.listing())


async def dispatch_tool_call(
    registry: ToolRegistry,
    name: str,
    arguments: Mapping[str, Any] | None,
    extras: ToolCallExtras | None = None,
) -> Envelope:
    """Validate the arguments against the tool's input schema and run it.

    Unknown tools and invalid arguments come back as error envelopes.
    """
    tool = registry.get_tool(name)
    if tool is None:
        return format_response(tool_not_found(name))
    arguments = dict(arguments or {})
    try:
        tool.input_validator().validate_python(arguments)
    except ValidationError as exc:
        logger.info("rejected arguments for tool=%s errors=%s", name, exc.error_count())
        return format_response(invalid_arguments(name, exc))
    return await tool.handler(arguments, extras or ToolCallExtras())


def _auth_info_of(request: Request | None) -> dict[str, Any] | None:
    auth_info = getattr(request.state, "auth_info", None) if request is not None else None
    if auth_info is None:
        auth_info = get_access_token()
    if auth_info is None:
        return None
    if isinstance(auth_info, BaseModel):
        return auth_info.model_dump(by_alias=True, exclude_none=True)
    return dict(auth_info)


def _call_extras(protocol_server: Server) -> ToolCallExtras:
    try:
        request = protocol_server.request_context.request
    except LookupError:
        request = None
    if not isinstance(request, Request):
        return ToolCallExtras(auth_info=_auth_info_of(None))
    return ToolCallExtras(headers=dict(request.headers), auth_info=_auth_info_of(request))


def create_protocol_server(registry: ToolRegistry, settings: McpServerSettings) -> Server:
    """Expose ``registry`` through the SDK's low-level server."""
    protocol_server: Server = Server(settings.name, version=settings.version)

    @protocol_server.list_tools()
    async def _list_tools() -> list[types.Tool]:
        return [to_mcp_tool(tool) for tool in registry]

    # arguments are checked against our own schema nodes in dispatch_tool_call
    @protocol_server.call_tool(validate_input=False)
    async def _call_tool(name: str, arguments: dict[str, Any]) -> types.CallToolResult:
        envelope = await dispatch_tool_call(
            registry, name, arguments, _call_extras(protocol_server)
        )
        return types.CallToolResult.model_validate(envelope)

    return protocol_server


class StreamableHttpEndpoint:
    """ASGI endpoint that hands requests to the session manager."""

    def __init__(self, session_manager: StreamableHTTPSessionManager) -> None:
        self.session_manager = session_manager

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self.session_manager.handle_request(scope, receive, send)


def create_transport_app(server: "McpServer") -> FastAPI:
    """Build the FastAPI app that serves the tool server over streamable HTTP.

    Stateful mode keeps one SDK session per ``mcp-session-id``; stateless mode
    answers every request with a throwaway session.
    """
    settings = server.settings
    path = settings.connection.path or "/"
    protocol_server = create_protocol_server(server.build_registry(), settings)
    session_manager = StreamableHTTPSessionManager(
        app=protocol_server,
        json_response=True,
        stateless=settings.stateless,
    )

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        async with session_manager.run():
            logger.info(
                "mcp transport ready path=%s stateless=%s", path, settings.stateless
            )
            yield
        logger.info("mcp transport stopped path=%s", path)

    app = FastAPI(title=settings.name, version=settings.version, lifespan=lifespan)
    app.state.mcp_server = server
    app.state.session_manager = session_manager
    for key, value in server.state.items():
        setattr(app.state, key, value)
    for middleware in server.pre_route_middleware:
        app.middleware("http")(middleware)
    for route in server.additional_routes:
        app.add_api_route(route.path, route.endpoint, methods=list(route.methods))
    app.add_route(
        path, StreamableHttpEndpoint(session_manager), methods=["GET", "POST", "DELETE"]
    )
    return app


async def run_stdio(server: "McpServer") -> None:
    """Serve the tool server on stdin/stdout until the client disconnects."""
    protocol_server = create_protocol_server(server.build_registry(), server.settings)
    async with stdio_server() as (read_stream, write_stream):
        await protocol_server.run(
            read_stream, write_stream, protocol_server.create_initialization_options()
        )


__all__ = [
    "SESSION_HEADER",
    "StreamableHttpEndpoint",
    "create_protocol_server",
    "create_transport_app",
    "dispatch_tool_call",
    "run_stdio",
    "to_mcp_tool",
]
