"""Uniform tool response envelope.

Every tool answers with ``{"content": [{"type": "text", "text": <json>}]}``,
plus ``isError`` for error objects and ``structuredContent`` for dict results.
"""

from __future__ import annotations

import functools
import inspect
import json
import logging
from typing import Any, Awaitable, Callable, Mapping

from pydantic_core import to_jsonable_python

from .errors import (
    ErrorObjectError,
    ModelValidationError,
    is_error_object,
    uncaught_exception,
    validation_error,
)

logger = logging.getLogger(__name__)

Envelope = dict[str, Any]


def to_json_text(value: Any) -> str:
    if value is None:
        return '""'
    return json.dumps(value, separators=(",", ":"), default=to_jsonable_python)


def is_mcp_response(value: Any) -> bool:
    if not isinstance(value, Mapping):
        return False
    content = value.get("content")
    if not isinstance(content, (list, tuple)) or not content:
        return False
    first = content[0]
    return isinstance(first, Mapping) and first.get("type") == "text"


def create_mcp_response(result: Any, *, is_error: bool = False) -> Envelope:
    envelope: Envelope = {"content": [{"type": "text", "text": to_json_text(result)}]}
    if is_error:
        envelope["isError"] = True
    if isinstance(result, Mapping):
        envelope["structuredContent"] = dict(result)
    return envelope


def format_response(result: Any) -> Envelope:
    if is_mcp_response(result):
        return dict(result)
    if is_error_object(result):
        return create_mcp_response(result, is_error=True)
    return create_mcp_response(result)


def mcp_execute(
    fn: Callable[..., Any],
) -> Callable[..., Awaitable[Envelope]]:
    """Wrap ``fn`` (sync or async) so it always resolves to an envelope."""

    @functools.wraps(fn)
    async def _execute(*args: Any, **kwargs: Any) -> Envelope:
        try:
            result = fn(*args, **kwargs)
            if inspect.isawaitable(result):
                result = await result
            return format_response(result)
        except ModelValidationError as exc:
            return format_response(validation_error(exc))
        except ErrorObjectError as exc:
            return format_response(exc.error_object)
        except Exception as exc:
            logger.warning(
                "Uncaught exception in %s: %s",
                getattr(fn, "__name__", "tool"),
                exc,
                exc_info=True,
            )
            return format_response(uncaught_exception(exc))

    return _execute


__all__ = [
    "Envelope",
    "create_mcp_response",
    "format_response",
    "is_mcp_response",
    "mcp_execute",
    "to_json_text",
]
