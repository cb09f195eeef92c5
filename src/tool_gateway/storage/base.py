"""Storage interface for usage bookkeeping."""

from __future__ import annotations

from typing import Protocol

from tool_gateway.storage.models import ToolDetail, UsageRecord


class UsageStorage(Protocol):
    def record_usage(
        self,
        *,
        meta_tool: str,
        request_id: str,
        details: list[ToolDetail],
    ) -> UsageRecord | None: ...

    def list_usage(self) -> list[UsageRecord]: ...
