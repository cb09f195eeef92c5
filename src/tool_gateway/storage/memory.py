"""In-memory usage ledger."""

from __future__ import annotations

import threading
from datetime import UTC, datetime

from tool_gateway.storage.models import ToolDetail, UsageRecord


class InMemoryUsageStorage:
    """Process-local ledger; one credit per successful tool execution."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: list[UsageRecord] = []
        self._next_record_id = 1

    def record_usage(
        self,
        *,
        meta_tool: str,
        request_id: str,
        details: list[ToolDetail],
    ) -> UsageRecord | None:
        if not details:
            return None
        with self._lock:
            record = UsageRecord(
                record_id=self._next_record_id,
                meta_tool=meta_tool,
                request_id=request_id,
                details=list(details),
                credits=len(details),
                created_at=datetime.now(UTC),
            )
            self._next_record_id += 1
            self._records.append(record)
        return record

    def list_usage(self) -> list[UsageRecord]:
        with self._lock:
            return list(self._records)
