"""Module contract, tool definitions and tool-call result shapes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from tool_gateway.modules.context import CallContext


class ToolParams(BaseModel):
    """Base model for tool inputs.

    Parameters not declared by a tool are passed through untouched.
    """

    model_config = ConfigDict(extra="allow")


class StrictModel(BaseModel):
    """Base model for strict schema validation."""

    model_config = ConfigDict(extra="forbid")


class ToolAnnotations(StrictModel):
    read_only_hint: bool | None = Field(default=None, alias="readOnlyHint")
    destructive_hint: bool | None = Field(default=None, alias="destructiveHint")
    idempotent_hint: bool | None = Field(default=None, alias="idempotentHint")
    open_world_hint: bool | None = Field(default=None, alias="openWorldHint")

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


READ_ONLY = ToolAnnotations(read_only_hint=True, open_world_hint=False)
CREATE = ToolAnnotations(
    read_only_hint=False,
    destructive_hint=False,
    idempotent_hint=False,
    open_world_hint=False,
)


@dataclass(frozen=True)
class ToolDef:
    name: str
    description: str = ""
    input_model: type[BaseModel] | None = None
    annotations: ToolAnnotations | None = None

    def tool_id(self, module_name: str) -> str:
        return f"{module_name}:{self.name}"

    def input_schema(self) -> dict[str, Any]:
        if self.input_model is None:
            return {"type": "object", "properties": {}}
        return self.input_model.model_json_schema()

    def describe(self, module_name: str) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.tool_id(module_name),
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema(),
        }
        if self.annotations is not None:
            payload["annotations"] = self.annotations.model_dump(by_alias=True, exclude_none=True)
        return payload


class Module(Protocol):
    name: str
    description: str
    api_version: str

    def tools(self) -> list[ToolDef]: ...

    def execute_tool(self, ctx: CallContext, name: str, params: dict[str, Any]) -> str: ...


@runtime_checkable
class CompactConverter(Protocol):
    def to_compact(self, tool_name: str, json_result: str) -> str: ...


class ContentBlock(BaseModel):
    type: str = "text"
    text: str


class ToolCallResult(BaseModel):
    content: list[ContentBlock] = Field(default_factory=list)
    is_error: bool = Field(default=False, alias="isError")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def text(cls, text: str, *, is_error: bool = False) -> ToolCallResult:
        return cls(content=[ContentBlock(text=text)], is_error=is_error)

    @classmethod
    def error(cls, text: str) -> ToolCallResult:
        return cls.text(text, is_error=True)

    @property
    def first_text(self) -> str:
        return self.content[0].text if self.content else ""


@dataclass(frozen=True)
class ToolSpec:
    input_model: type[BaseModel]
    output_model: type[BaseModel]
    fn: Callable[[BaseModel], BaseModel]
    description: str = ""
    annotations: ToolAnnotations | None = None


@dataclass
class SpecModule:
    """Module assembled from pydantic-typed tool functions.

    Inputs are validated against each tool's input model and outputs
    against its output model before being serialized to JSON.
    """

    name: str
    description: str
    specs: dict[str, ToolSpec] = field(default_factory=dict)
    api_version: str = "v1"

    def tools(self) -> list[ToolDef]:
        return [
            ToolDef(
                name=tool_name,
                description=spec.description,
                input_model=spec.input_model,
                annotations=spec.annotations,
            )
            for tool_name, spec in self.specs.items()
        ]

    def execute_tool(self, ctx: CallContext, name: str, params: dict[str, Any]) -> str:
        spec = self.specs.get(name)
        if spec is None:
            raise ValueError(f"Unknown tool: {name}")

        payload = spec.input_model.model_validate(params)
        raw_output = spec.fn(payload)
        validated_output = spec.output_model.model_validate(raw_output)
        return validated_output.model_dump_json()
