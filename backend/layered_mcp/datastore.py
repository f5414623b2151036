"""In-memory model store used by tests and local demos.

Records are validated with the model's pydantic schema and keyed by a string
primary key, generated with ``uuid4`` when the caller does not supply one.
"""

from __future__ import annotations

import inspect
import re
from typing import Any, Iterable, Mapping
from uuid import uuid4

from pydantic import BaseModel, ValidationError

from .domains import ModelDefinition
from .errors import ModelValidationError


def _keys_to_errors(exc: ValidationError) -> dict[str, list[str]]:
    keys_to_errors: dict[str, list[str]] = {}
    for error in exc.errors():
        key = ".".join(str(part) for part in error.get("loc", ())) or "__root__"
        keys_to_errors.setdefault(key, []).append(error.get("msg", "invalid"))
    return keys_to_errors


class MemoryModel:
    """Model handle backed by a pydantic schema."""

    def __init__(
        self,
        schema: type[BaseModel],
        *,
        namespace: str,
        plural_name: str | None = None,
        primary_key: str = "id",
        description: str | None = None,
    ) -> None:
        self.schema = schema
        self.namespace = namespace
        self.plural_name = plural_name or f"{schema.__name__}s"
        self.primary_key = primary_key
        doc = schema.__dict__.get("__doc__")
        self.description = description or (inspect.cleandoc(doc) if doc else None)

    def get_name(self) -> str:
        return f"{self.namespace}/{self.plural_name}"

    def get_model_definition(self) -> ModelDefinition:
        return ModelDefinition(schema=self.schema, description=self.description)

    def to_json_schema(self) -> dict[str, Any]:
        return self.schema.model_json_schema(by_alias=True)

    def validate(self, data: Mapping[str, Any]) -> BaseModel:
        if not isinstance(data, Mapping):
            raise ModelValidationError(
                self.get_name(), {"__root__": ["instance must be an object"]}
            )
        payload = dict(data)
        if payload.get(self.primary_key) is None:
            payload[self.primary_key] = str(uuid4())
        try:
            return self.schema.model_validate(payload)
        except ValidationError as exc:
            raise ModelValidationError(self.get_name(), _keys_to_errors(exc)) from exc


class MemoryInstance:
    def __init__(self, model: MemoryModel, record: BaseModel) -> None:
        self.model = model
        self.record = record

    def get_primary_key(self) -> str:
        return str(getattr(self.record, self.model.primary_key))

    def to_obj(self) -> dict[str, Any]:
        return self.record.model_dump(mode="json", by_alias=True)


def _matches_statement(obj: Mapping[str, Any], statement: Mapping[str, Any]) -> bool:
    key = statement.get("key")
    expected = statement.get("value")
    symbol = statement.get("equalitySymbol") or "="
    options = statement.get("options") or {}
    actual = obj.get(key) if isinstance(key, str) else None

    if symbol == "like":
        if actual is None or expected is None:
            return False
        pattern = ".*".join(re.escape(part) for part in str(expected).split("%"))
        flags = 0 if options.get("caseSensitive") else re.IGNORECASE
        return re.fullmatch(pattern, str(actual), flags) is not None
    if symbol == "!=":
        return actual != expected
    return actual == expected


def _matches_query(obj: Mapping[str, Any], query: Iterable[Any]) -> bool:
    result: bool | None = None
    operator = "AND"
    for token in query:
        if isinstance(token, str) and token.upper() in {"AND", "OR"}:
            operator = token.upper()
            continue
        if not isinstance(token, Mapping):
            continue
        matched = _matches_statement(obj, token)
        if result is None:
            result = matched
        elif operator == "OR":
            result = result or matched
        else:
            result = result and matched
        operator = "AND"
    return True if result is None else result


def _positive_int(value: Any) -> int | None:
    """Paging values arrive untyped; anything that is not a positive int is None."""
    if isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


class MemoryModelCruds:
    """Dict-backed CRUD functions for one :class:`MemoryModel`."""

    def __init__(self, model: MemoryModel) -> None:
        self._model = model
        self._records: dict[str, MemoryInstance] = {}

    def get_model(self) -> MemoryModel:
        return self._model

    async def create(self, data: Mapping[str, Any]) -> MemoryInstance:
        instance = MemoryInstance(self._model, self._model.validate(data))
        self._records[instance.get_primary_key()] = instance
        return instance

    async def retrieve(self, primary_key: str) -> MemoryInstance | None:
        return self._records.get(str(primary_key))

    async def delete(self, primary_key: str) -> None:
        self._records.pop(str(primary_key), None)

    async def search(self, query: Mapping[str, Any]) -> dict[str, Any]:
        statements = query.get("query") or []
        matches = [
            instance
            for instance in self._records.values()
            if _matches_query(instance.to_obj(), statements)
        ]
        take = _positive_int(query.get("take"))
        if take is None:
            return {"instances": matches, "page": None}
        page = _positive_int(query.get("page")) or 1
        start = (page - 1) * take
        return {
            "instances": matches[start : start + take],
            "page": {"page": page, "take": take, "total": len(matches)},
        }

    async def bulk_insert(self, items: Iterable[Mapping[str, Any]]) -> None:
        instances = [MemoryInstance(self._model, self._model.validate(item)) for item in items]
        for instance in instances:
            self._records[instance.get_primary_key()] = instance

    async def bulk_delete(self, ids: Iterable[str]) -> None:
        for primary_key in ids:
            self._records.pop(str(primary_key), None)


__all__ = ["MemoryInstance", "MemoryModel", "MemoryModelCruds"]
