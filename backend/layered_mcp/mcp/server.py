"""Tool server facade: collects custom tools and builds registries and apps."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Sequence

import uvicorn
from fastapi import FastAPI, Request, Response

from ..domains import DomainCatalog, ModelCruds, maybe_await
from ..envelope import mcp_execute
from ..errors import McpServerError
from ..request_logging import CorrelationLogger, get_correlation_logger
from ..settings import McpServerSettings, get_settings
from ..visibility import VisibilityResolver, VisibilityRuleSet
from .features import feature_tools
from .models import ToolNameGenerator, model_cruds_tools, model_tools
from .registry import ToolRegistry, with_request_logging
from .schema import EMPTY_INPUT_SCHEMA, ToolCallExtras, ToolDescriptor
from .start_here import start_here_tool
from .transport import create_transport_app, run_stdio

logger = logging.getLogger(__name__)

PreRouteMiddleware = Callable[[Request, Callable[[Request], Awaitable[Response]]], Awaitable[Response]]


@dataclass(frozen=True)
class AdditionalRoute:
    path: str
    endpoint: Callable[..., Any]
    methods: Sequence[str] = ("GET",)


class McpServer:
    """Exposes a domain catalog as tools over HTTP or stdio."""

    def __init__(
        self,
        catalog: DomainCatalog,
        settings: McpServerSettings | None = None,
        *,
        base_logger: CorrelationLogger | None = None,
    ) -> None:
        self.catalog = catalog
        self.settings = settings or get_settings()
        self.rules = VisibilityRuleSet.from_settings(self.settings)
        self.resolver = VisibilityResolver(self.rules)
        self.base_logger = base_logger or get_correlation_logger(__name__)
        self.state: dict[str, Any] = {}
        self.pre_route_middleware: list[PreRouteMiddleware] = []
        self.additional_routes: list[AdditionalRoute] = []
        self._custom_tools: list[ToolDescriptor] = []

    def add_tool(self, tool: ToolDescriptor) -> None:
        """Register a custom tool; its handler is wrapped to always return an envelope."""
        self._custom_tools.append(tool.model_copy(update={"handler": mcp_execute(tool.handler)}))

    def add_feature(
        self,
        fn: Callable[..., Any],
        *,
        name: str,
        description: str | None = None,
        input_schema: Mapping[str, Any] | None = None,
        output_schema: Mapping[str, Any] | None = None,
    ) -> None:
        """Expose ``fn(arguments, cross_layer_props)`` directly as a tool."""

        async def _call(arguments: Mapping[str, Any], extras: ToolCallExtras) -> Any:
            return await maybe_await(fn(dict(arguments), extras.cross_layer_props))

        _call.__name__ = getattr(fn, "__name__", name)
        self._custom_tools.append(
            ToolDescriptor(
                name=name,
                description=description,
                input_schema=dict(input_schema or EMPTY_INPUT_SCHEMA),
                output_schema=dict(output_schema) if output_schema is not None else None,
                handler=mcp_execute(_call),
            )
        )

    def add_model_cruds(
        self, cruds: ModelCruds, *, name_generator: ToolNameGenerator | None = None
    ) -> None:
        self._custom_tools.extend(model_cruds_tools(cruds, name_generator))

    def add_pre_route_middleware(self, middleware: PreRouteMiddleware) -> None:
        self.pre_route_middleware.append(middleware)

    def add_additional_route(
        self, path: str, endpoint: Callable[..., Any], *, methods: Sequence[str] = ("GET",)
    ) -> None:
        self.additional_routes.append(AdditionalRoute(path, endpoint, tuple(methods)))

    def set(self, key: str, value: Any) -> None:
        """Store a value that is copied onto ``app.state`` of every built app."""
        self.state[key] = value

    def build_registry(self) -> ToolRegistry:
        return ToolRegistry.build(
            [
                start_here_tool(self.catalog, self.resolver, self.settings),
                *feature_tools(self.catalog, self.resolver),
            ],
            model_tools(self.catalog, self.resolver),
            list(self._custom_tools),
            all_models_hidden=self.rules.all_models,
            middleware=lambda tool: with_request_logging(tool, self.base_logger, self.settings),
        )

    def build_tools(self) -> tuple[ToolDescriptor, ...]:
        return self.build_registry().list_tools()

    def get_app(self) -> FastAPI:
        if self.settings.connection.type != "http":
            raise McpServerError(
                "server is not configured for http",
                details={"connection": self.settings.connection.type},
            )
        return create_transport_app(self)

    def start(self) -> None:
        connection = self.settings.connection
        if connection.type == "cli":
            logger.info("mcp server starting on stdio name=%s", self.settings.name)
            asyncio.run(run_stdio(self))
            return
        logger.info(
            "mcp server starting name=%s host=%s port=%s path=%s",
            self.settings.name,
            connection.host,
            connection.port,
            connection.path,
        )
        uvicorn.run(self.get_app(), host=connection.host, port=connection.port)


def mcp_models(
    namespace: str,
    server: McpServer,
    catalog: DomainCatalog | None = None,
    *,
    name_generator: ToolNameGenerator | None = None,
) -> None:
    """Register dedicated CRUD tools for every model of one domain."""
    domain = (catalog or server.catalog).get(namespace)
    if domain is None:
        raise McpServerError(
            f"domain {namespace} does not exist in the catalog",
            details={"namespace": namespace},
        )
    for cruds in domain.cruds.values():
        server.add_model_cruds(cruds, name_generator=name_generator)


__all__ = ["AdditionalRoute", "McpServer", "mcp_models"]
