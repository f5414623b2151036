"""Ordered tool registry and the request-logging middleware stage."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Iterator, Mapping, Sequence
from uuid import uuid4

from ..context import build_merged_tool_input
from ..request_logging import CorrelationLogger
from ..settings import McpServerSettings
from .schema import ToolCallExtras, ToolDescriptor

logger = logging.getLogger(__name__)

ToolMiddleware = Callable[[ToolDescriptor], ToolDescriptor]


def _log_data(
    callback: Callable[[Mapping[str, Any]], Mapping[str, Any]] | None,
    value: Any,
) -> dict[str, Any]:
    if callback is None:
        return {}
    try:
        return dict(callback(value) or {})
    except Exception:
        logger.warning("log data callback failed", exc_info=True)
        return {}


def with_request_logging(
    descriptor: ToolDescriptor,
    base_logger: CorrelationLogger,
    settings: McpServerSettings,
) -> ToolDescriptor:
    """Return a copy of ``descriptor`` whose handler logs and merges context.

    Each call gets a fresh ``requestId``. The handler receives the arguments
    without ``crossLayerProps`` and the merged context on ``extras``; its
    result is returned unchanged.
    """
    inner = descriptor.handler
    log_settings = settings.logging
    url = settings.connection.path or "/"

    async def _handler(arguments: Mapping[str, Any], extras: ToolCallExtras | None = None) -> Any:
        extras = extras or ToolCallExtras()
        request_logger = base_logger.with_id("requestId", str(uuid4()))
        request_logger.log_at(
            log_settings.request_log_level,
            "Request received tool=%s",
            descriptor.name,
            extra={
                "method": "POST",
                "url": url,
                "tool": descriptor.name,
                "body": dict(arguments or {}),
                "data": _log_data(log_settings.request_log_get_data, arguments),
            },
        )

        clean_arguments, merged = build_merged_tool_input(arguments, extras, request_logger)
        result = await inner(clean_arguments, extras.model_copy(update={"cross_layer_props": merged}))

        request_logger.log_at(
            log_settings.response_log_level,
            "Request Response tool=%s is_error=%s",
            descriptor.name,
            bool(isinstance(result, Mapping) and result.get("isError")),
            extra={
                "response": result,
                "data": _log_data(log_settings.response_log_get_data, result),
            },
        )
        return result

    return descriptor.model_copy(update={"handler": _handler})


class ToolRegistry:
    """Immutable, ordered collection of tool descriptors."""

    def __init__(self, tools: Iterable[ToolDescriptor]) -> None:
        self._tools: dict[str, ToolDescriptor] = {}
        for tool in tools:
            if tool.name in self._tools:
                raise ValueError(f"duplicate tool name: {tool.name}")
            self._tools[tool.name] = tool

    @classmethod
    def build(
        cls,
        builtin_feature_tools: Sequence[ToolDescriptor],
        builtin_model_tools: Sequence[ToolDescriptor],
        custom_tools: Sequence[ToolDescriptor],
        *,
        all_models_hidden: bool = False,
        middleware: ToolMiddleware | None = None,
    ) -> "ToolRegistry":
        """Assemble feature tools, then model tools, then custom tools.

        Model tools are left out entirely when all models are hidden.
        """
        ordered = list(builtin_feature_tools)
        if not all_models_hidden:
            ordered.extend(builtin_model_tools)
        ordered.extend(custom_tools)
        if middleware is not None:
            ordered = [middleware(tool) for tool in ordered]
        return cls(ordered)

    def list_tools(self) -> tuple[ToolDescriptor, ...]:
        return tuple(self._tools.values())

    def get_tool(self, name: str) -> ToolDescriptor | None:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)


__all__ = ["ToolMiddleware", "ToolRegistry", "with_request_logging"]
