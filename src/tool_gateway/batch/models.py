"""Batch task descriptors, per-run task state and response shapes."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from tool_gateway.modules.base import ToolCallResult

SKIPPED_MESSAGE = "skipped due to dependency failure"


class BatchCommand(BaseModel):
    """One JSONL line of a batch request."""

    model_config = ConfigDict(frozen=True, strict=True)

    id: str = ""
    module: str = ""
    tool: str = ""
    params: dict[str, Any] | None = None
    # Dependency task ids; the task waits for all of them to finish.
    after: list[str] = Field(default_factory=list)
    output: bool = False

    @field_validator("id", "module", "tool", "after", "output", mode="before")
    @classmethod
    def _null_as_default(cls, value: Any, info: ValidationInfo) -> Any:
        # JSON null means the field was not given.
        if value is not None:
            return value
        return {"after": [], "output": False}.get(info.field_name, "")

    @property
    def response_format(self) -> str | None:
        value = (self.params or {}).get("format")
        return value if isinstance(value, str) else None


@dataclass
class TaskState:
    """Execution state of one task, written only by its own worker before ``done`` is set."""

    command: BatchCommand
    result: str = ""
    error: str | None = None
    skipped: bool = False
    done: threading.Event = field(default_factory=threading.Event)

    @property
    def failed(self) -> bool:
        return self.error is not None or self.skipped

    @property
    def status(self) -> str:
        if self.error is not None:
            return "error"
        if self.skipped:
            return "skipped"
        return "success"


class BatchResponse(BaseModel):
    results: dict[str, str] | None = None
    errors: dict[str, str] | None = None

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)


class SuccessfulTask(BaseModel):
    task_id: str
    module: str
    tool: str


class BatchResult(BaseModel):
    result: ToolCallResult
    success_count: int = 0
    successful_tasks: list[SuccessfulTask] = Field(default_factory=list)
