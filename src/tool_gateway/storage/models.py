"""Usage ledger models."""

from datetime import datetime

from pydantic import BaseModel, Field


class ToolDetail(BaseModel):
    """One billable tool execution."""

    task_id: str | None = None
    module: str
    tool: str


class UsageRecord(BaseModel):
    """Successful executions recorded for one gateway request."""

    record_id: int
    meta_tool: str
    request_id: str
    details: list[ToolDetail] = Field(default_factory=list)
    credits: int
    created_at: datetime
