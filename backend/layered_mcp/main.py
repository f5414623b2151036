"""Entrypoints that build a tool server for a host application's catalog."""

from __future__ import annotations

from typing import Any, Mapping

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .domains import DomainCatalog
from .env import load_dotenv_if_present
from .mcp.server import McpServer
from .request_logging import configure_logging
from .settings import McpServerSettings, get_settings


async def _health() -> dict[str, str]:
    return {"status": "ok"}


def create_server(
    catalog: DomainCatalog, config: Mapping[str, Any] | None = None
) -> McpServer:
    """Configure logging, load ``.env`` and build the server.

    Settings come from ``config`` when given, otherwise from the environment.
    """
    load_dotenv_if_present()
    settings = (
        McpServerSettings.from_mapping(config) if config is not None else get_settings()
    )
    configure_logging(settings.logging.request_log_level)
    server = McpServer(catalog, settings)
    server.add_additional_route("/health", _health)
    return server


def create_app(catalog: DomainCatalog, config: Mapping[str, Any] | None = None) -> FastAPI:
    """Construct the FastAPI application."""
    app = create_server(catalog, config).get_app()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*", "mcp-session-id"],
        expose_headers=["mcp-session-id"],
    )
    return app


def serve(catalog: DomainCatalog, config: Mapping[str, Any] | None = None) -> None:
    create_server(catalog, config).start()


__all__ = ["create_app", "create_server", "serve"]
