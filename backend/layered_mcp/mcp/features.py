"""Discovery and execution tools for domain features."""

from __future__ import annotations

from typing import Any, Mapping

from ..domains import AnnotatedFeature, DomainCatalog, Feature, call_feature
from ..envelope import mcp_execute
from ..errors import domain_not_found, feature_not_found, is_error_object
from ..schema import cross_layer_props_schema, function_to_openapi, plain_function_openapi
from ..visibility import VisibilityResolver
from .schema import ToolCallExtras, ToolDescriptor

_NAME_AND_DESCRIPTION_ITEMS = {
    "type": "object",
    "required": ["name"],
    "properties": {
        "name": {"type": "string"},
        "description": {"type": "string"},
    },
}


def _has_exposed_models(
    catalog: DomainCatalog, resolver: VisibilityResolver, domain_name: str
) -> bool:
    domain = catalog.get(domain_name)
    if domain is None or not domain.cruds or resolver.are_all_models_hidden(domain_name):
        return False
    return any(not resolver.is_model_hidden(domain_name, name) for name in domain.cruds)


def list_visible_features(
    catalog: DomainCatalog, resolver: VisibilityResolver, domain_name: Any
) -> list[dict[str, Any]] | dict[str, Any]:
    """Visible features of a domain, or a DOMAIN_NOT_FOUND error object."""
    domain = catalog.get(domain_name)
    if domain is None or resolver.is_domain_hidden(domain.name):
        return domain_not_found()
    features = []
    for name, feature in domain.features.items():
        if resolver.is_feature_hidden(domain.name, name):
            continue
        entry: dict[str, Any] = {"name": name}
        if feature.description:
            entry["description"] = feature.description
        features.append(entry)
    return features


def list_visible_domains(
    catalog: DomainCatalog, resolver: VisibilityResolver
) -> list[dict[str, Any]]:
    """Domains that are visible and expose at least one feature or model."""
    domains = []
    for domain in catalog:
        if resolver.is_domain_hidden(domain.name):
            continue
        features = list_visible_features(catalog, resolver, domain.name)
        has_features = not is_error_object(features) and len(features) > 0
        if not has_features and not _has_exposed_models(catalog, resolver, domain.name):
            continue
        entry: dict[str, Any] = {"name": domain.name}
        if domain.description:
            entry["description"] = domain.description
        domains.append(entry)
    return domains


def resolve_feature(
    catalog: DomainCatalog,
    resolver: VisibilityResolver,
    domain_name: Any,
    feature_name: Any,
) -> Feature | None:
    """Return the feature, or ``None`` when it is absent or hidden."""
    domain = catalog.get(domain_name)
    if domain is None or not isinstance(feature_name, str):
        return None
    feature = domain.features.get(feature_name)
    if feature is None:
        return None
    if resolver.is_domain_hidden(domain.name) or resolver.is_feature_hidden(
        domain.name, feature_name
    ):
        return None
    return feature


def describe(feature: Feature) -> dict[str, Any]:
    if isinstance(feature, AnnotatedFeature):
        return function_to_openapi(feature.name, feature.schema)
    return plain_function_openapi(feature.name)


def feature_tools(
    catalog: DomainCatalog, resolver: VisibilityResolver
) -> list[ToolDescriptor]:
    """Return list_domains, list_features, describe_feature and execute_feature."""

    async def _list_domains(arguments: Mapping[str, Any], extras: ToolCallExtras) -> Any:
        return {"domains": list_visible_domains(catalog, resolver)}

    async def _list_features(arguments: Mapping[str, Any], extras: ToolCallExtras) -> Any:
        features = list_visible_features(catalog, resolver, arguments.get("domain"))
        if is_error_object(features):
            return features
        return {"features": features}

    async def _describe_feature(arguments: Mapping[str, Any], extras: ToolCallExtras) -> Any:
        feature = resolve_feature(
            catalog, resolver, arguments.get("domain"), arguments.get("featureName")
        )
        if feature is None:
            return feature_not_found()
        return describe(feature)

    async def _execute_feature(arguments: Mapping[str, Any], extras: ToolCallExtras) -> Any:
        feature = resolve_feature(
            catalog, resolver, arguments.get("domain"), arguments.get("featureName")
        )
        if feature is None:
            return feature_not_found()
        args = arguments.get("args")
        return await call_feature(
            feature, args if args is not None else {}, extras.cross_layer_props
        )

    return [
        ToolDescriptor(
            name="list_domains",
            description="Gets a list of domains on the system, including their descriptions.",
            input_schema={"type": "object", "properties": {}},
            output_schema={
                "type": "object",
                "properties": {
                    "domains": {"type": "array", "items": _NAME_AND_DESCRIPTION_ITEMS},
                },
            },
            handler=mcp_execute(_list_domains),
        ),
        ToolDescriptor(
            name="list_features",
            description="Gets a list of features for a given domain",
            input_schema={
                "type": "object",
                "properties": {"domain": {"type": "string"}},
                "required": ["domain"],
            },
            output_schema={
                "type": "object",
                "properties": {
                    "features": {"type": "array", "items": _NAME_AND_DESCRIPTION_ITEMS},
                },
            },
            handler=mcp_execute(_list_features),
        ),
        ToolDescriptor(
            name="describe_feature",
            description="Gets the schema of a given feature",
            input_schema={
                "type": "object",
                "properties": {
                    "domain": {"type": "string"},
                    "featureName": {"type": "string"},
                },
                "required": ["domain", "featureName"],
            },
            output_schema={"type": "object", "properties": {"schema": {"type": "object"}}},
            handler=mcp_execute(_describe_feature),
        ),
        ToolDescriptor(
            name="execute_feature",
            description="Executes a given feature",
            input_schema={
                "type": "object",
                "properties": {
                    "domain": {"type": "string"},
                    "featureName": {"type": "string"},
                    "args": {"type": "object", "additionalProperties": True},
                    "crossLayerProps": cross_layer_props_schema(),
                },
                "required": ["domain", "featureName", "args"],
            },
            output_schema={"type": "object", "properties": {"result": {"type": "string"}}},
            handler=mcp_execute(_execute_feature),
        ),
    ]


__all__ = [
    "describe",
    "feature_tools",
    "list_visible_domains",
    "list_visible_features",
    "resolve_feature",
]
