"""Expose domain features and model CRUD as tools for AI agents."""

from .domains import Domain, DomainCatalog, annotated_function
from .errors import ErrorObjectError, McpServerError, ModelValidationError
from .mcp import McpServer, ToolDescriptor, mcp_models
from .settings import McpServerSettings

__all__ = [
    "Domain",
    "DomainCatalog",
    "ErrorObjectError",
    "McpServer",
    "McpServerError",
    "McpServerSettings",
    "ModelValidationError",
    "ToolDescriptor",
    "annotated_function",
    "mcp_models",
]
