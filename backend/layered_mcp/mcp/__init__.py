"""Tool server: registry, built-in tools and transport."""

from .features import feature_tools
from .models import model_cruds_tools, model_tools
from .registry import ToolRegistry, with_request_logging
from .schema import ToolCallExtras, ToolDescriptor
from .server import McpServer, mcp_models
from .start_here import start_here_tool
from .transport import (
    create_protocol_server,
    create_transport_app,
    dispatch_tool_call,
    run_stdio,
)

__all__ = [
    "McpServer",
    "ToolCallExtras",
    "ToolDescriptor",
    "ToolRegistry",
    "create_protocol_server",
    "create_transport_app",
    "dispatch_tool_call",
    "feature_tools",
    "mcp_models",
    "model_cruds_tools",
    "model_tools",
    "run_stdio",
    "start_here_tool",
    "with_request_logging",
]
