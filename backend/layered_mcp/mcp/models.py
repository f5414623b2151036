"""Model discovery and CRUD tools.

The generic tools address a model by ``modelType`` (``"<domain>/<PluralName>"``)
and go through the same visibility checks as listings. ``model_cruds_tools``
builds six dedicated tools for a single model instead.
"""

from __future__ import annotations

import re
from typing import Any, Awaitable, Callable, Mapping

from ..domains import DomainCatalog, Model, ModelCruds, maybe_await, parse_model_type, to_plain
from ..envelope import mcp_execute
from ..errors import (
    domain_not_found,
    model_not_found,
    models_not_found,
    operation_not_found,
)
from ..visibility import VisibilityResolver
from .schema import ToolCallExtras, ToolDescriptor

MODEL_OPERATIONS = ("save", "retrieve", "delete", "search", "bulkInsert", "bulkDelete")

ToolNameGenerator = Callable[[Model, str], str]

_MODEL_TYPE = {"type": "string", "description": "The model type, as <domain>/<PluralName>."}
_ID = {"type": "string"}
_SEARCH = {
    "type": "object",
    "properties": {
        "query": {"type": "array", "items": {}},
        "take": {"type": "integer"},
        "page": {},
    },
}


def cleanup_search_query(search: Any) -> dict[str, Any]:
    """Normalise a client search object to ``{query: [...], take?, page?}``."""
    if not isinstance(search, Mapping):
        return {"query": []}
    query = search.get("query")
    cleaned: dict[str, Any] = {
        key: value
        for key, value in search.items()
        if key != "query" and value is not None
    }
    cleaned["query"] = [item for item in query if item is not None] if isinstance(query, list) else []
    return cleaned


def _snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def default_tool_name(model: Model, operation: str) -> str:
    raw = f"{model.namespace}_{model.plural_name}_{_snake_case(operation)}"
    return re.sub(r"[^a-zA-Z0-9_-]", "_", raw)


async def _search(cruds: ModelCruds, search: Any) -> dict[str, Any]:
    result = await maybe_await(cruds.search(cleanup_search_query(search)))
    if isinstance(result, Mapping):
        instances, page = result.get("instances") or [], result.get("page")
    else:
        instances, page = getattr(result, "instances", []), getattr(result, "page", None)
    return {"instances": to_plain(list(instances)), "page": page}


ModelOperation = Callable[[Mapping[str, Any], ModelCruds], Awaitable[Any]]


def model_tools(
    catalog: DomainCatalog, resolver: VisibilityResolver
) -> list[ToolDescriptor]:
    """Return list_models, describe_model and the six generic CRUD tools."""

    def _model_operation(operation: str, fn: ModelOperation) -> Callable[..., Any]:
        async def _run(arguments: Mapping[str, Any], extras: ToolCallExtras) -> Any:
            namespace, plural_name = parse_model_type(arguments.get("modelType"))
            domain = catalog.get(namespace)
            if domain is None or resolver.is_domain_hidden(domain.name):
                return domain_not_found()
            if not plural_name:
                return model_not_found()
            cruds = domain.cruds.get(plural_name)
            if cruds is None or resolver.is_model_hidden(domain.name, plural_name):
                return model_not_found()
            if resolver.is_operation_hidden(domain.name, plural_name, operation):
                return operation_not_found()
            return await fn(arguments, cruds)

        _run.__name__ = f"model_{_snake_case(operation)}"
        return mcp_execute(_run)

    async def _list_models(arguments: Mapping[str, Any], extras: ToolCallExtras) -> Any:
        domain = catalog.get(arguments.get("domain"))
        if (
            domain is None
            or resolver.is_domain_hidden(domain.name)
            or resolver.are_all_models_hidden(domain.name)
        ):
            return domain_not_found()
        if not domain.cruds:
            return models_not_found()
        models = []
        for plural_name, cruds in domain.cruds.items():
            if resolver.is_model_hidden(domain.name, plural_name):
                continue
            model = cruds.get_model()
            entry: dict[str, Any] = {"modelType": model.get_name()}
            description = model.get_model_definition().description
            if description:
                entry["description"] = description
            models.append(entry)
        return {"models": models}

    async def _describe_model(arguments: Mapping[str, Any], extras: ToolCallExtras) -> Any:
        domain = catalog.get(arguments.get("domain"))
        if domain is None or resolver.is_domain_hidden(domain.name):
            return domain_not_found()
        namespace, plural_name = parse_model_type(arguments.get("modelType"))
        if not namespace or not plural_name:
            return model_not_found()
        cruds = domain.cruds.get(plural_name)
        if (
            cruds is None
            or resolver.is_model_hidden(domain.name, plural_name)
            or resolver.are_all_models_hidden(domain.name)
        ):
            return model_not_found()
        return cruds.get_model().to_json_schema()

    async def _save(arguments: Mapping[str, Any], cruds: ModelCruds) -> Any:
        instance = await maybe_await(cruds.create(arguments.get("instance") or {}))
        return to_plain(instance)

    async def _retrieve(arguments: Mapping[str, Any], cruds: ModelCruds) -> Any:
        instance = await maybe_await(cruds.retrieve(arguments.get("id")))
        if instance is None:
            return model_not_found()
        return to_plain(instance)

    async def _delete(arguments: Mapping[str, Any], cruds: ModelCruds) -> Any:
        await maybe_await(cruds.delete(arguments.get("id")))
        return None

    async def _search_tool(arguments: Mapping[str, Any], cruds: ModelCruds) -> Any:
        return await _search(cruds, arguments.get("search"))

    async def _bulk_insert(arguments: Mapping[str, Any], cruds: ModelCruds) -> Any:
        await maybe_await(cruds.bulk_insert(list(arguments.get("items") or [])))
        return None

    async def _bulk_delete(arguments: Mapping[str, Any], cruds: ModelCruds) -> Any:
        await maybe_await(cruds.bulk_delete(list(arguments.get("ids") or [])))
        return None

    def _input(**properties: Any) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {"modelType": _MODEL_TYPE, **properties},
            "required": ["modelType", *properties],
        }

    return [
        ToolDescriptor(
            name="list_models",
            description="Gets a list of models for a given domain and their description.",
            input_schema={
                "type": "object",
                "properties": {"domain": {"type": "string"}},
                "required": ["domain"],
            },
            output_schema={
                "type": "object",
                "properties": {
                    "models": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "required": ["modelType"],
                            "properties": {
                                "modelType": {"type": "string"},
                                "description": {"type": "string"},
                            },
                        },
                    },
                },
            },
            handler=mcp_execute(_list_models),
        ),
        ToolDescriptor(
            name="describe_model",
            description="Gets the schema of a given model",
            input_schema={
                "type": "object",
                "properties": {"domain": {"type": "string"}, "modelType": {"type": "string"}},
                "required": ["domain", "modelType"],
            },
            output_schema={"type": "object", "additionalProperties": True},
            handler=mcp_execute(_describe_model),
        ),
        ToolDescriptor(
            name="model_save",
            description="Creates or updates an instance of a model.",
            input_schema=_input(instance={"type": "object", "additionalProperties": True}),
            handler=_model_operation("save", _save),
        ),
        ToolDescriptor(
            name="model_retrieve",
            description="Retrieves one instance of a model by its id.",
            input_schema=_input(id=_ID),
            handler=_model_operation("retrieve", _retrieve),
        ),
        ToolDescriptor(
            name="model_delete",
            description="Deletes one instance of a model by its id.",
            input_schema=_input(id=_ID),
            handler=_model_operation("delete", _delete),
        ),
        ToolDescriptor(
            name="model_search",
            description="Searches the instances of a model.",
            input_schema=_input(search=_SEARCH),
            handler=_model_operation("search", _search_tool),
        ),
        ToolDescriptor(
            name="model_bulk_insert",
            description="Inserts many instances of a model at once.",
            input_schema=_input(
                items={"type": "array", "items": {"type": "object", "additionalProperties": True}}
            ),
            handler=_model_operation("bulkInsert", _bulk_insert),
        ),
        ToolDescriptor(
            name="model_bulk_delete",
            description="Deletes many instances of a model by id.",
            input_schema=_input(ids={"type": "array", "items": _ID}),
            handler=_model_operation("bulkDelete", _bulk_delete),
        ),
    ]


def model_cruds_tools(
    cruds: ModelCruds, name_generator: ToolNameGenerator | None = None
) -> list[ToolDescriptor]:
    """Six tools bound to one model, with inputs taken from the model's JSON schema."""
    model = cruds.get_model()
    generate = name_generator or default_tool_name
    label = model.get_name()

    async def _save(arguments: Mapping[str, Any], extras: ToolCallExtras) -> Any:
        return to_plain(await maybe_await(cruds.create(dict(arguments))))

    async def _retrieve(arguments: Mapping[str, Any], extras: ToolCallExtras) -> Any:
        instance = await maybe_await(cruds.retrieve(arguments.get("id")))
        return to_plain(instance) if instance is not None else None

    async def _delete(arguments: Mapping[str, Any], extras: ToolCallExtras) -> Any:
        await maybe_await(cruds.delete(arguments.get("id")))
        return None

    async def _search_tool(arguments: Mapping[str, Any], extras: ToolCallExtras) -> Any:
        return await _search(cruds, arguments)

    async def _bulk_insert(arguments: Mapping[str, Any], extras: ToolCallExtras) -> Any:
        await maybe_await(cruds.bulk_insert(list(arguments.get("items") or [])))
        return None

    async def _bulk_delete(arguments: Mapping[str, Any], extras: ToolCallExtras) -> Any:
        await maybe_await(cruds.bulk_delete(list(arguments.get("ids") or [])))
        return None

    id_input = {"type": "object", "properties": {"id": _ID}, "required": ["id"]}
    specs: list[tuple[str, str, dict[str, Any], Callable[..., Any]]] = [
        ("save", f"Saves an instance of {label}.", model.to_json_schema(), _save),
        ("retrieve", f"Retrieves an instance of {label} by id.", id_input, _retrieve),
        ("delete", f"Deletes an instance of {label} by id.", id_input, _delete),
        ("search", f"Searches instances of {label}.", _SEARCH, _search_tool),
        (
            "bulkInsert",
            f"Inserts many instances of {label}.",
            {
                "type": "object",
                "properties": {"items": {"type": "array", "items": model.to_json_schema()}},
                "required": ["items"],
            },
            _bulk_insert,
        ),
        (
            "bulkDelete",
            f"Deletes many instances of {label} by id.",
            {
                "type": "object",
                "properties": {"ids": {"type": "array", "items": _ID}},
                "required": ["ids"],
            },
            _bulk_delete,
        ),
    ]
    return [
        ToolDescriptor(
            name=generate(model, operation),
            description=description,
            input_schema=input_schema,
            handler=mcp_execute(handler),
        )
        for operation, description, input_schema, handler in specs
    ]


__all__ = [
    "MODEL_OPERATIONS",
    "ToolNameGenerator",
    "cleanup_search_query",
    "default_tool_name",
    "model_cruds_tools",
    "model_tools",
]
