"""Usage ledger backends and models."""

from tool_gateway.storage.base import UsageStorage
from tool_gateway.storage.memory import InMemoryUsageStorage
from tool_gateway.storage.models import ToolDetail, UsageRecord

__all__ = [
    "InMemoryUsageStorage",
    "ToolDetail",
    "UsageRecord",
    "UsageStorage",
]
