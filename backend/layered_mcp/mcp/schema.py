"""Shared tool models."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Mapping

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from ..schema import SchemaNode, build_validator, to_schema_node

EMPTY_INPUT_SCHEMA: dict[str, Any] = {"type": "object", "properties": {}}


class ToolCallExtras(BaseModel):
    """Transport data that travels alongside the tool arguments."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    headers: dict[str, Any] = Field(default_factory=dict)
    auth_info: dict[str, Any] | None = None
    cross_layer_props: dict[str, Any] | None = None


ToolHandler = Callable[[Mapping[str, Any], ToolCallExtras], Awaitable[dict[str, Any]]]


class ToolDescriptor(BaseModel):
    """A tool as advertised to clients, with the handler that runs it."""

    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    name: str
    description: str | None = None
    input_schema: dict[str, Any] = Field(default_factory=lambda: dict(EMPTY_INPUT_SCHEMA))
    output_schema: dict[str, Any] | None = None
    handler: ToolHandler

    def input_node(self) -> SchemaNode:
        return to_schema_node(self.input_schema)

    def input_validator(self) -> TypeAdapter:
        return build_validator(self.input_node())

    def listing(self) -> dict[str, Any]:
        """Return the ``tools/list`` entry for this tool."""
        entry: dict[str, Any] = {"name": self.name, "inputSchema": self.input_schema}
        if self.description:
            entry["description"] = self.description
        if self.output_schema is not None:
            entry["outputSchema"] = self.output_schema
        return entry


__all__ = ["EMPTY_INPUT_SCHEMA", "ToolCallExtras", "ToolDescriptor", "ToolHandler"]
