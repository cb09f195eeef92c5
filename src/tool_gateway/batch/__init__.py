"""Dependency-ordered batch execution of module tool calls."""

from tool_gateway.batch.errors import BatchValidationError
from tool_gateway.batch.graph import detect_cycle
from tool_gateway.batch.models import (
    SKIPPED_MESSAGE,
    BatchCommand,
    BatchResponse,
    BatchResult,
    SuccessfulTask,
    TaskState,
)
from tool_gateway.batch.orchestrator import MAX_BATCH_SIZE, BatchOrchestrator
from tool_gateway.batch.parser import parse_commands
from tool_gateway.batch.resolver import ResultStore, resolve_variables

__all__ = [
    "MAX_BATCH_SIZE",
    "SKIPPED_MESSAGE",
    "BatchCommand",
    "BatchOrchestrator",
    "BatchResponse",
    "BatchResult",
    "BatchValidationError",
    "ResultStore",
    "SuccessfulTask",
    "TaskState",
    "detect_cycle",
    "parse_commands",
    "resolve_variables",
]
