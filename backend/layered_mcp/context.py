"""Cross-call context assembly.

A tool call can receive context from three places: the client (at the top
level of the arguments, or nested inside ``args`` for feature execution), the
transport (headers and verified auth) and the logger of the call itself. They
are merged here into one ``crossLayerProps`` dict.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping

from .request_logging import CorrelationLogger

if TYPE_CHECKING:
    from .mcp.schema import ToolCallExtras

CROSS_LAYER_PROPS_KEY = "crossLayerProps"


def _headers_of(extras: "ToolCallExtras | None") -> dict[str, str]:
    raw = extras.headers if extras is not None else None
    headers: dict[str, str] = {}
    for key, value in (raw or {}).items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            headers[str(key)] = ", ".join(str(item) for item in value)
        else:
            headers[str(key)] = str(value)
    return headers


def build_request_info(extras: "ToolCallExtras | None") -> dict[str, Any]:
    """Request metadata as seen by the transport.

    Only headers are available through the tool transport; the remaining
    fields keep empty defaults so consumers can rely on their presence.
    """
    return {
        "headers": _headers_of(extras),
        "body": {},
        "query": {},
        "params": {},
        "path": "",
        "method": "",
        "url": "",
        "protocol": "",
    }


def _pick(source: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if source.get(key) is not None:
            return source[key]
    return None


def build_auth_info(extras: "ToolCallExtras | None") -> dict[str, Any] | None:
    raw = extras.auth_info if extras is not None else None
    if not raw:
        return None
    auth: dict[str, Any] = {
        "token": _pick(raw, "token"),
        "clientId": _pick(raw, "clientId", "client_id"),
        "scopes": list(_pick(raw, "scopes") or []),
    }
    for wire_key, alias in (
        ("expiresAt", "expires_at"),
        ("resource", "resource"),
        ("extra", "extra"),
    ):
        value = _pick(raw, wire_key, alias)
        if value is not None:
            auth[wire_key] = value
    return auth


def _logging_ids(props: Mapping[str, Any]) -> list[dict[str, str]]:
    logging_section = props.get("logging")
    if not isinstance(logging_section, Mapping):
        return []
    ids = logging_section.get("ids")
    if not isinstance(ids, (list, tuple)):
        return []
    return [dict(item) for item in ids if isinstance(item, Mapping)]


def combine_cross_layer_props(
    first: Mapping[str, Any] | None, second: Mapping[str, Any] | None
) -> dict[str, Any]:
    """Shallow merge where ``second`` wins, except ``logging.ids`` which accumulate."""
    first = first if isinstance(first, Mapping) else {}
    second = second if isinstance(second, Mapping) else {}
    combined: dict[str, Any] = {**first, **second}

    if "logging" in first or "logging" in second:
        ids = _logging_ids(first)
        for item in _logging_ids(second):
            if item not in ids:
                ids.append(item)
        logging_section: dict[str, Any] = {}
        for source in (first, second):
            if isinstance(source.get("logging"), Mapping):
                logging_section.update(source["logging"])
        logging_section["ids"] = ids
        combined["logging"] = logging_section
    return combined


def attach_logger_ids(
    logger: CorrelationLogger | None, props: Mapping[str, Any]
) -> dict[str, Any]:
    if logger is None:
        return dict(props)
    return combine_cross_layer_props(
        props, {"logging": {"ids": [dict(item) for item in logger.ids]}}
    )


def merge_cross_call_context(
    top_level: Mapping[str, Any] | None,
    nested: Mapping[str, Any] | None,
    extras: "ToolCallExtras | None",
    logger: CorrelationLogger | None = None,
) -> dict[str, Any]:
    """Merge client, transport and logger context for one call.

    ``requestInfo`` and ``authInfo`` always come from the transport. A client
    cannot claim auth the transport did not verify.
    """
    context = combine_cross_layer_props({}, top_level)
    context = combine_cross_layer_props(context, nested)
    context.pop("authInfo", None)

    transport: dict[str, Any] = {"requestInfo": build_request_info(extras)}
    auth_info = build_auth_info(extras)
    if auth_info is not None:
        transport["authInfo"] = auth_info
    context = combine_cross_layer_props(context, transport)
    return attach_logger_ids(logger, context)


def build_merged_tool_input(
    arguments: Mapping[str, Any] | None,
    extras: "ToolCallExtras | None",
    logger: CorrelationLogger | None = None,
) -> tuple[dict[str, Any], dict[str, Any]]:
    """Return ``(clean_arguments, merged_context)`` for a raw tool call."""
    arguments = arguments if isinstance(arguments, Mapping) else {}
    args = arguments.get("args")
    nested = args.get(CROSS_LAYER_PROPS_KEY) if isinstance(args, Mapping) else None
    context = merge_cross_call_context(
        arguments.get(CROSS_LAYER_PROPS_KEY), nested, extras, logger
    )

    clean = {key: value for key, value in arguments.items() if key != CROSS_LAYER_PROPS_KEY}
    if isinstance(args, Mapping):
        clean["args"] = {
            key: value for key, value in args.items() if key != CROSS_LAYER_PROPS_KEY
        }
    return clean, context


__all__ = [
    "CROSS_LAYER_PROPS_KEY",
    "attach_logger_ids",
    "build_auth_info",
    "build_merged_tool_input",
    "build_request_info",
    "combine_cross_layer_props",
    "merge_cross_call_context",
]
