from __future__ import annotations

from fastapi.testclient import TestClient

from layered_mcp.main import create_app, create_server
from layered_mcp.settings import MCP_NAMESPACE

CONFIG = {
    "systemName": "acme",
    MCP_NAMESPACE: {
        "name": "acme-tools",
        "server": {"connection": {"type": "http", "path": "/mcp"}},
        "hideComponents": {"domains": ["internal"]},
    },
}


def test_create_server_uses_the_given_config(catalog):
    server = create_server(catalog, CONFIG)

    assert server.settings.name == "acme-tools"
    assert server.resolver.is_domain_hidden("internal")
    assert [route.path for route in server.additional_routes] == ["/health"]


def test_app_serves_health_and_cors(catalog):
    client = TestClient(create_app(catalog, CONFIG))

    response = client.get("/health", headers={"origin": "http://localhost:5173"})

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert response.headers["access-control-allow-origin"] in {"*", "http://localhost:5173"}


def test_app_exposes_the_session_header(catalog):
    initialize = {
        "jsonrpc": "2.0",
        "id": 1,
        "method": "initialize",
        "params": {
            "protocolVersion": "2025-06-18",
            "capabilities": {},
            "clientInfo": {"name": "tests", "version": "0"},
        },
    }

    with TestClient(create_app(catalog, CONFIG)) as client:
        response = client.post(
            "/mcp",
            json=initialize,
            headers={
                "origin": "http://localhost:5173",
                "accept": "application/json, text/event-stream",
            },
        )

    assert response.status_code == 200
    assert "mcp-session-id" in response.headers["access-control-expose-headers"]
