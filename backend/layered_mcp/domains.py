"""Domain catalog consumed by the tool server.

A domain groups features (callables taking ``(args, cross_layer_props)``) and
model CRUD objects. Features are classified once, when the domain is built,
as annotated (carrying a :class:`FunctionSchema`) or plain.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Iterable,
    Iterator,
    Mapping,
    Protocol,
    Union,
    runtime_checkable,
)

from .schema import FunctionSchema

FEATURE_SCHEMA_ATTR = "__feature_schema__"


async def maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


@dataclass(frozen=True)
class ModelDefinition:
    schema: Any
    description: str | None = None


@runtime_checkable
class Model(Protocol):
    namespace: str
    plural_name: str

    def get_name(self) -> str: ...

    def get_model_definition(self) -> ModelDefinition: ...

    def to_json_schema(self) -> dict[str, Any]: ...


@runtime_checkable
class ModelCruds(Protocol):
    """CRUD functions of one model. Methods may be sync or async."""

    def get_model(self) -> Model: ...

    def create(self, data: Mapping[str, Any]) -> Any: ...

    def retrieve(self, primary_key: str) -> Any: ...

    def delete(self, primary_key: str) -> Any: ...

    def search(self, query: Mapping[str, Any]) -> Any: ...

    def bulk_insert(self, items: list[Mapping[str, Any]]) -> Any: ...

    def bulk_delete(self, ids: list[str]) -> Any: ...


def to_plain(value: Any) -> Any:
    """Project model instances (anything with ``to_obj``) to plain data."""
    if hasattr(value, "to_obj"):
        return to_plain(value.to_obj())
    if isinstance(value, Mapping):
        return {key: to_plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(item) for item in value]
    return value


def parse_model_type(model_type: Any) -> tuple[str | None, str | None]:
    """Split ``"<namespace>/<PluralName>"``; namespaces may contain slashes."""
    if not isinstance(model_type, str) or "/" not in model_type:
        return None, None
    namespace, plural_name = model_type.rsplit("/", 1)
    return namespace or None, plural_name or None


@dataclass(frozen=True)
class AnnotatedFeature:
    name: str
    fn: Callable[..., Any]
    schema: FunctionSchema

    @property
    def description(self) -> str | None:
        return self.schema.description


@dataclass(frozen=True)
class PlainFeature:
    name: str
    fn: Callable[..., Any]

    @property
    def description(self) -> str | None:
        return None


Feature = Union[AnnotatedFeature, PlainFeature]


def annotated_function(
    *,
    args: Any = None,
    returns: Any = None,
    description: str | None = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Attach a :class:`FunctionSchema` to a feature function.

    ``args`` and ``returns`` accept pydantic models, type annotations or
    schema nodes.
    """
    schema = FunctionSchema.create(args=args, returns=returns, description=description)

    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        setattr(fn, FEATURE_SCHEMA_ATTR, schema)
        return fn

    return decorator


def as_feature(name: str, obj: Any) -> Feature:
    if isinstance(obj, (AnnotatedFeature, PlainFeature)):
        return obj
    if not callable(obj):
        raise TypeError(f"feature {name!r} is not callable")
    schema = getattr(obj, FEATURE_SCHEMA_ATTR, None)
    if isinstance(schema, FunctionSchema):
        return AnnotatedFeature(name=name, fn=obj, schema=schema)
    return PlainFeature(name=name, fn=obj)


async def call_feature(
    feature: Feature, args: Any, cross_layer_props: Mapping[str, Any] | None
) -> Any:
    return await maybe_await(feature.fn(args, cross_layer_props))


class Domain:
    """Features and model cruds registered under one name."""

    def __init__(
        self,
        name: str,
        *,
        description: str | None = None,
        features: Mapping[str, Any] | None = None,
        cruds: Mapping[str, ModelCruds] | Iterable[ModelCruds] | None = None,
    ) -> None:
        self.name = name
        self.description = description
        self.features: dict[str, Feature] = {
            feature_name: as_feature(feature_name, fn)
            for feature_name, fn in (features or {}).items()
        }
        if isinstance(cruds, Mapping):
            self.cruds: dict[str, ModelCruds] = dict(cruds)
        else:
            self.cruds = {item.get_model().plural_name: item for item in cruds or ()}

    def __repr__(self) -> str:
        return f"Domain(name={self.name!r}, features={list(self.features)!r}, cruds={list(self.cruds)!r})"


class DomainCatalog:
    """Ordered collection of domains."""

    def __init__(self, domains: Iterable[Domain] = ()) -> None:
        self._domains: dict[str, Domain] = {}
        for domain in domains:
            self.add(domain)

    def add(self, domain: Domain) -> None:
        if domain.name in self._domains:
            raise ValueError(f"duplicate domain {domain.name!r}")
        self._domains[domain.name] = domain

    def get(self, name: Any) -> Domain | None:
        if not isinstance(name, str):
            return None
        return self._domains.get(name)

    def names(self) -> list[str]:
        return list(self._domains)

    def __contains__(self, name: object) -> bool:
        return name in self._domains

    def __iter__(self) -> Iterator[Domain]:
        return iter(self._domains.values())

    def __len__(self) -> int:
        return len(self._domains)


__all__ = [
    "AnnotatedFeature",
    "Domain",
    "DomainCatalog",
    "FEATURE_SCHEMA_ATTR",
    "Feature",
    "Model",
    "ModelCruds",
    "ModelDefinition",
    "PlainFeature",
    "annotated_function",
    "as_feature",
    "call_feature",
    "maybe_await",
    "parse_model_type",
    "to_plain",
]
