"""Server settings built from the host config mapping or the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Callable, Literal, Mapping

MCP_NAMESPACE = "layered-mcp-server"
DEFAULT_LOG_LEVEL = "info"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    return normalized in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_str(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip()
    return normalized or default


def _env_list(name: str) -> frozenset[str]:
    value = os.getenv(name) or ""
    return frozenset(item.strip() for item in value.split(",") if item.strip())


def _section(config: Mapping[str, Any] | None, key: str) -> Mapping[str, Any]:
    value = (config or {}).get(key)
    return value if isinstance(value, Mapping) else {}


ConnectionType = Literal["http", "cli"]


@dataclass(frozen=True)
class HideComponentsSettings:
    """Dot-paths, domains and the all-models switch hidden from every tool."""

    paths: frozenset[str] = frozenset()
    domains: frozenset[str] = frozenset()
    all_models: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "HideComponentsSettings":
        return cls(
            paths=frozenset(data.get("paths") or ()),
            domains=frozenset(data.get("domains") or ()),
            all_models=bool(data.get("allModels", False)),
        )


@dataclass(frozen=True)
class LoggingSettings:
    """Levels for the request/response log lines of every tool call.

    The ``*_get_data`` callbacks receive the tool arguments (request) or the
    envelope (response) and return extra fields for the log record.
    """

    request_log_level: str = DEFAULT_LOG_LEVEL
    response_log_level: str = DEFAULT_LOG_LEVEL
    request_log_get_data: Callable[[Mapping[str, Any]], Mapping[str, Any]] | None = None
    response_log_get_data: Callable[[Mapping[str, Any]], Mapping[str, Any]] | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "LoggingSettings":
        return cls(
            request_log_level=data.get("requestLogLevel") or DEFAULT_LOG_LEVEL,
            response_log_level=data.get("responseLogLevel") or DEFAULT_LOG_LEVEL,
            request_log_get_data=data.get("requestLogGetData"),
            response_log_get_data=data.get("responseLogGetData"),
        )


@dataclass(frozen=True)
class StartHereSettings:
    name: str | None = None
    description: str | None = None
    hide_default_system_entries: bool = False
    include_domains: bool = False
    include_features: bool = False
    examples_of_use: tuple[Mapping[str, Any], ...] = ()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "StartHereSettings":
        return cls(
            name=data.get("name"),
            description=data.get("description"),
            hide_default_system_entries=bool(data.get("hideDefaultSystemEntries", False)),
            include_domains=bool(data.get("includeDomains", False)),
            include_features=bool(data.get("includeFeatures", False)),
            examples_of_use=tuple(data.get("examplesOfUse") or ()),
        )


@dataclass(frozen=True)
class ConnectionSettings:
    type: ConnectionType = "http"
    host: str = "127.0.0.1"
    port: int = 3000
    path: str = "/"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ConnectionSettings":
        raw_type = str(data.get("type") or "http").lower()
        connection_type: ConnectionType = "cli" if raw_type == "cli" else "http"
        return cls(
            type=connection_type,
            host=str(data.get("host") or "127.0.0.1"),
            port=int(data.get("port") or 3000),
            path=str(data.get("path") or "/"),
        )


@dataclass(frozen=True)
class McpServerSettings:
    """Complete configuration of one tool server."""

    name: str = MCP_NAMESPACE
    version: str = "1.0.0"
    stateless: bool = False
    connection: ConnectionSettings = field(default_factory=ConnectionSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    hide_components: HideComponentsSettings = field(default_factory=HideComponentsSettings)
    hidden_paths: frozenset[str] = frozenset()
    start_here: StartHereSettings = field(default_factory=StartHereSettings)
    system_name: str = ""
    system_description: str = ""
    system_version: str = ""

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any] | None) -> "McpServerSettings":
        """Read the camelCase host config stored under ``MCP_NAMESPACE``."""
        section = _section(config, MCP_NAMESPACE)
        server = _section(section, "server")
        system_description = _section(section, "systemDescription")
        return cls(
            name=section.get("name") or MCP_NAMESPACE,
            version=section.get("version") or "1.0.0",
            stateless=bool(section.get("stateless", False)),
            connection=ConnectionSettings.from_mapping(_section(server, "connection")),
            logging=LoggingSettings.from_mapping(_section(section, "logging")),
            hide_components=HideComponentsSettings.from_mapping(
                _section(section, "hideComponents")
            ),
            hidden_paths=frozenset(section.get("hiddenPaths") or ()),
            start_here=StartHereSettings.from_mapping(_section(section, "startHere")),
            system_name=str((config or {}).get("systemName") or ""),
            system_description=str(system_description.get("description") or ""),
            system_version=str(system_description.get("version") or ""),
        )

    @classmethod
    def from_env(cls) -> "McpServerSettings":
        raw_connection = (_env_str("MCP_CONNECTION", "http") or "http").lower()
        connection_type: ConnectionType = "cli" if raw_connection == "cli" else "http"
        return cls(
            name=_env_str("MCP_SERVER_NAME", MCP_NAMESPACE) or MCP_NAMESPACE,
            version=_env_str("MCP_SERVER_VERSION", "1.0.0") or "1.0.0",
            stateless=_env_bool("MCP_STATELESS", False),
            connection=ConnectionSettings(
                type=connection_type,
                host=_env_str("MCP_HOST", "127.0.0.1") or "127.0.0.1",
                port=_env_int("MCP_PORT", 3000),
                path=_env_str("MCP_PATH", "/") or "/",
            ),
            logging=LoggingSettings(
                request_log_level=_env_str("MCP_REQUEST_LOG_LEVEL", DEFAULT_LOG_LEVEL)
                or DEFAULT_LOG_LEVEL,
                response_log_level=_env_str("MCP_RESPONSE_LOG_LEVEL", DEFAULT_LOG_LEVEL)
                or DEFAULT_LOG_LEVEL,
            ),
            hide_components=HideComponentsSettings(
                paths=_env_list("MCP_HIDDEN_PATHS"),
                domains=_env_list("MCP_HIDDEN_DOMAINS"),
                all_models=_env_bool("MCP_HIDE_ALL_MODELS", False),
            ),
            system_name=_env_str("MCP_SYSTEM_NAME", "") or "",
        )


_SETTINGS: McpServerSettings | None = None


def get_settings() -> McpServerSettings:
    """Return a cached settings instance built from the current environment."""

    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = McpServerSettings.from_env()
    return _SETTINGS


def reset_settings() -> None:
    global _SETTINGS
    _SETTINGS = None


__all__ = [
    "ConnectionSettings",
    "HideComponentsSettings",
    "LoggingSettings",
    "MCP_NAMESPACE",
    "McpServerSettings",
    "StartHereSettings",
    "get_settings",
    "reset_settings",
]
