"""Meta tool handlers shared by the REST routes and the JSON-RPC endpoint."""

from __future__ import annotations

import logging
from typing import Any

from tool_gateway.api.jsonrpc import INVALID_PARAMS, JsonRpcError
from tool_gateway.api.meta_tools import build_meta_tools
from tool_gateway.batch import BatchOrchestrator
from tool_gateway.modules import CallContext, ModuleRegistry, ToolCallResult, ToolRunner
from tool_gateway.storage import ToolDetail, UsageStorage

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2025-03-26"


class GatewayHandler:
    def __init__(
        self,
        *,
        registry: ModuleRegistry,
        usage_storage: UsageStorage,
        tool_timeout_s: float,
        max_batch_size: int,
        server_name: str,
        server_version: str,
    ) -> None:
        self.registry = registry
        self.usage_storage = usage_storage
        self.max_batch_size = max_batch_size
        self.server_name = server_name
        self.server_version = server_version
        self.runner = ToolRunner(registry=registry, tool_timeout_s=tool_timeout_s)
        self.orchestrator = BatchOrchestrator(runner=self.runner, max_batch_size=max_batch_size)

    def initialize(self) -> dict[str, Any]:
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"tools": {}},
            "serverInfo": {"name": self.server_name, "version": self.server_version},
        }

    def tools_list(self) -> dict[str, Any]:
        return {"tools": build_meta_tools(self.registry, max_batch_size=self.max_batch_size)}

    def call_tool(self, ctx: CallContext, name: str, arguments: dict[str, Any]) -> ToolCallResult:
        if name == "get_module_schema":
            return self.module_schema(_module_names(arguments.get("module")))
        if name == "run":
            module_name = arguments.get("module")
            tool_name = arguments.get("tool")
            if not isinstance(module_name, str):
                raise JsonRpcError(INVALID_PARAMS, "module must be a string")
            if not isinstance(tool_name, str):
                raise JsonRpcError(INVALID_PARAMS, "tool must be a string")
            params = arguments.get("params")
            return self.run(ctx, module_name, tool_name, params if isinstance(params, dict) else {})
        if name == "batch":
            commands = arguments.get("commands")
            if not isinstance(commands, str):
                raise JsonRpcError(INVALID_PARAMS, "commands must be a string")
            return self.batch(ctx, commands)
        raise JsonRpcError(INVALID_PARAMS, f"Unknown tool: {name}")

    def module_schema(self, module_names: list[str]) -> ToolCallResult:
        return self.runner.get_module_schemas(module_names)

    def run(
        self,
        ctx: CallContext,
        module_name: str,
        tool_name: str,
        params: dict[str, Any],
    ) -> ToolCallResult:
        result = self.runner.run(ctx, module_name, tool_name, params)
        if result.is_error:
            return result

        if params.get("format") != "json":
            result = ToolCallResult.text(
                self.runner.apply_compact(module_name, tool_name, result.first_text)
            )
        self.usage_storage.record_usage(
            meta_tool="run",
            request_id=ctx.request_id,
            details=[ToolDetail(module=module_name, tool=tool_name)],
        )
        return result

    def batch(self, ctx: CallContext, commands: str) -> ToolCallResult:
        batch_result = self.orchestrator.run_batch(ctx, commands)
        if batch_result.successful_tasks:
            self.usage_storage.record_usage(
                meta_tool="batch",
                request_id=ctx.request_id,
                details=[
                    ToolDetail(task_id=task.task_id, module=task.module, tool=task.tool)
                    for task in batch_result.successful_tasks
                ],
            )
        return batch_result.result


def _module_names(raw: Any) -> list[str]:
    if isinstance(raw, str):
        names = [raw]
    elif isinstance(raw, list):
        if not all(isinstance(item, str) for item in raw):
            raise JsonRpcError(INVALID_PARAMS, "module array must contain strings")
        names = list(raw)
    else:
        raise JsonRpcError(INVALID_PARAMS, "module must be a string or array of strings")
    if not names:
        raise JsonRpcError(INVALID_PARAMS, "module must not be empty")
    return names
