"""Request-scoped logging helpers.

Log records emitted through :class:`CorrelationLogger` carry the ordered
correlation ids of the call that produced them, so a tool call can be traced
across nested feature calls.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, MutableMapping

_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


def resolve_level(level: str | int | None, default: int = logging.INFO) -> int:
    if isinstance(level, int):
        return level
    if not level:
        return default
    return _LEVELS.get(level.strip().lower(), default)


class CorrelationLogger(logging.LoggerAdapter):
    """Logger adapter that carries a chain of ``{key: id}`` correlation maps."""

    def __init__(
        self,
        logger: logging.Logger,
        ids: tuple[Mapping[str, str], ...] = (),
    ) -> None:
        super().__init__(logger, {})
        self.ids = tuple(dict(item) for item in ids)

    def with_id(self, key: str, value: str) -> "CorrelationLogger":
        return CorrelationLogger(self.logger, self.ids + ({key: value},))

    @property
    def request_id(self) -> str:
        for item in reversed(self.ids):
            if "requestId" in item:
                return item["requestId"]
        return "system"

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("request_id", self.request_id)
        extra.setdefault("correlation_ids", [dict(item) for item in self.ids])
        kwargs["extra"] = extra
        return msg, kwargs

    def log_at(self, level: str | int | None, msg: str, *args: Any, **kwargs: Any) -> None:
        self.log(resolve_level(level), msg, *args, **kwargs)


def get_correlation_logger(name: str) -> CorrelationLogger:
    return CorrelationLogger(logging.getLogger(name))


class _RequestIdFilter(logging.Filter):
    """Ensure every log record has a request_id attribute."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = "system"
        return True


def configure_logging(level: str | int | None = "info") -> None:
    logging.basicConfig(
        level=resolve_level(level),
        format="%(asctime)s %(levelname)s [request_id=%(request_id)s] %(name)s: %(message)s",
    )
    root_logger = logging.getLogger()
    request_filter = _RequestIdFilter()
    for handler in root_logger.handlers:
        if not any(isinstance(existing, _RequestIdFilter) for existing in handler.filters):
            handler.addFilter(request_filter)


__all__ = [
    "CorrelationLogger",
    "configure_logging",
    "get_correlation_logger",
    "resolve_level",
]
