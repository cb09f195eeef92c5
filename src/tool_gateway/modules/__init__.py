"""Module contract, registry and single-call execution."""

from tool_gateway.modules.base import (
    CompactConverter,
    ContentBlock,
    Module,
    SpecModule,
    ToolDef,
    ToolCallResult,
    ToolParams,
    ToolSpec,
)
from tool_gateway.modules.context import CallContext
from tool_gateway.modules.registry import ModuleRegistry
from tool_gateway.modules.runner import TOOL_TIMEOUT_S, ToolRunner

__all__ = [
    "TOOL_TIMEOUT_S",
    "CallContext",
    "CompactConverter",
    "ContentBlock",
    "Module",
    "ModuleRegistry",
    "SpecModule",
    "ToolCallResult",
    "ToolDef",
    "ToolParams",
    "ToolRunner",
    "ToolSpec",
]
