"""The START_HERE tool: an overview an agent should read before anything else."""

from __future__ import annotations

from typing import Any, Mapping

from ..domains import DomainCatalog
from ..envelope import mcp_execute
from ..settings import McpServerSettings
from ..visibility import VisibilityResolver
from .features import list_visible_domains, list_visible_features
from .schema import ToolCallExtras, ToolDescriptor

START_HERE_NAME = "START_HERE"
START_HERE_DESCRIPTION = (
    "BEFORE YOU DO ANYTHING, you should call this tool first!!! "
    "It provides a robust description about the system and how to use it."
)

SYSTEM_ENTRIES: tuple[dict[str, Any], ...] = (
    {
        "name": "Domains",
        "description": (
            "The system is divided into domains. Each domain groups related features "
            "and models. Call list_domains to see the domains available to you."
        ),
    },
    {
        "name": "Features",
        "description": (
            "Features are the business functions of a domain. Call list_features with a "
            "domain, then describe_feature to get the input and output schema of one "
            "feature, then execute_feature with {domain, featureName, args}."
        ),
        "example": {
            "tool": "execute_feature",
            "arguments": {"domain": "billing", "featureName": "createInvoice", "args": {}},
        },
    },
    {
        "name": "Cross Layer Props",
        "description": (
            "Every tool accepts an optional crossLayerProps object. Put correlation ids in "
            "crossLayerProps.logging.ids as a list of single-key objects to trace a call "
            "end to end. Request headers and auth are filled in by the server."
        ),
        "example": {"crossLayerProps": {"logging": {"ids": [{"conversationId": "abc-123"}]}}},
    },
    {
        "name": "Errors",
        "description": (
            "Failures are returned, not thrown. An error result has isError set and its "
            "payload is {error: {code, message, details?}}. A NOT_FOUND code means the "
            "item does not exist or is not available to you."
        ),
    },
    {
        "name": "Model CRUD",
        "description": (
            "Models hold the data of a domain. Call list_models with a domain to get each "
            "model's modelType (<domain>/<PluralName>), and describe_model for its schema. "
            "model_save, model_retrieve, model_delete, model_bulk_insert and "
            "model_bulk_delete take that modelType plus an instance, id, items or ids."
        ),
        "example": {
            "tool": "model_save",
            "arguments": {"modelType": "billing/Invoices", "instance": {"total": 10}},
        },
    },
    {
        "name": "Model CRUD Search",
        "description": (
            "model_search takes {modelType, search} where search is {query, take?, page?}. "
            "query is a list of property statements joined by 'AND' or 'OR'. A statement is "
            "{type: 'property', key, value, equalitySymbol} with equalitySymbol one of "
            "'=', '!=' or 'like' ('%' is a wildcard for like)."
        ),
        "example": {
            "tool": "model_search",
            "arguments": {
                "modelType": "billing/Invoices",
                "search": {
                    "query": [
                        {"type": "property", "key": "status", "value": "open", "equalitySymbol": "="}
                    ],
                    "take": 10,
                },
            },
        },
    },
)


def _system_entries(settings: McpServerSettings) -> list[dict[str, Any]]:
    if settings.start_here.hide_default_system_entries:
        return []
    if settings.hide_components.all_models:
        return [entry for entry in SYSTEM_ENTRIES if not entry["name"].startswith("Model CRUD")]
    return [dict(entry) for entry in SYSTEM_ENTRIES]


def build_entries(
    catalog: DomainCatalog, resolver: VisibilityResolver, settings: McpServerSettings
) -> list[dict[str, Any]]:
    start_here = settings.start_here
    entries: list[dict[str, Any]] = [
        {"name": "systemName", "value": settings.system_name},
        {"name": "systemDescription", "value": settings.system_description},
        {"name": "systemVersion", "value": settings.system_version},
    ]
    entries.extend(dict(example) for example in start_here.examples_of_use)
    entries.extend(_system_entries(settings))

    if start_here.include_domains:
        entries.append(
            {
                "name": "List of Domains",
                "description": (
                    "A list of all the domains on the system. "
                    "This is the output of the list_domains tool."
                ),
                "domains": list_visible_domains(catalog, resolver),
            }
        )
    if start_here.include_features:
        for domain in list_visible_domains(catalog, resolver):
            name = domain["name"]
            entries.append(
                {
                    "name": f"List of Features for {name}",
                    "description": (
                        f"A list of all the features for the {name} domain. This is the "
                        f"output of the list_features tool for the {name} domain. You will "
                        "still need to call describe_feature to get the schema of a given feature."
                    ),
                    "features": list_visible_features(catalog, resolver, name),
                }
            )
    return entries


def start_here_tool(
    catalog: DomainCatalog, resolver: VisibilityResolver, settings: McpServerSettings
) -> ToolDescriptor:
    async def _start_here(arguments: Mapping[str, Any], extras: ToolCallExtras) -> Any:
        return {"entries": build_entries(catalog, resolver, settings)}

    return ToolDescriptor(
        name=settings.start_here.name or START_HERE_NAME,
        description=settings.start_here.description or START_HERE_DESCRIPTION,
        input_schema={"type": "object", "properties": {}, "required": []},
        output_schema={"type": "object", "additionalProperties": True},
        handler=mcp_execute(_start_here),
    )


__all__ = ["START_HERE_NAME", "SYSTEM_ENTRIES", "build_entries", "start_here_tool"]
