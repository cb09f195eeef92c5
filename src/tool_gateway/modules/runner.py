"""Single tool-call execution with validation, timeout and call logging."""

from __future__ import annotations

import json
import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any

from tool_gateway.modules.base import CompactConverter, Module, ToolCallResult
from tool_gateway.modules.context import DEADLINE_EXCEEDED, CallContext
from tool_gateway.modules.registry import ModuleRegistry
from tool_gateway.modules.validation import ParamsValidationError, find_tool, validate_params

logger = logging.getLogger(__name__)

TOOL_TIMEOUT_S = 30.0
_POLL_INTERVAL_S = 0.05


class CallAbortedError(RuntimeError):
    """The call context ended before the module returned."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class ToolRunner:
    """Execute one module tool per call against an injected registry."""

    def __init__(
        self,
        *,
        registry: ModuleRegistry,
        tool_timeout_s: float = TOOL_TIMEOUT_S,
    ) -> None:
        self.registry = registry
        self.tool_timeout_s = tool_timeout_s

    def run(
        self,
        ctx: CallContext,
        module_name: str,
        tool_name: str,
        params: dict[str, Any] | None,
    ) -> ToolCallResult:
        started_at = time.perf_counter()
        module = self.registry.get(module_name)
        if module is None:
            message = f"Unknown module: {module_name}"
            self._log_call(ctx, module_name, tool_name, started_at, error=message)
            return ToolCallResult.error(message)

        effective_params = dict(params or {})
        tool = find_tool(module.tools(), tool_name)
        if tool is not None and tool.input_model is not None:
            try:
                effective_params = validate_params(tool.input_model, effective_params)
            except ParamsValidationError as exc:
                self._log_call(ctx, module_name, tool_name, started_at, error=str(exc))
                return ToolCallResult.error(str(exc))

        call_ctx = ctx.with_timeout(self.tool_timeout_s)
        try:
            output = self._execute_once(call_ctx, module, tool_name, effective_params)
        except Exception as exc:  # noqa: BLE001
            message = self._failure_message(module_name, call_ctx, exc)
            self._log_call(ctx, module_name, tool_name, started_at, error=message)
            return ToolCallResult.error(message)

        self._log_call(ctx, module_name, tool_name, started_at)
        return ToolCallResult.text(output)

    def apply_compact(self, module_name: str, tool_name: str, json_result: str) -> str:
        """Render a JSON result in the module's compact form, if it has one."""
        module = self.registry.get(module_name)
        if module is None or not isinstance(module, CompactConverter):
            return json_result
        try:
            return module.to_compact(tool_name, json_result)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "compact_format module=%s tool=%s status=failed error=%s",
                module_name,
                tool_name,
                exc,
            )
            return json_result

    def get_module_schemas(self, module_names: list[str]) -> ToolCallResult:
        schemas: list[dict[str, Any]] = []
        errors: list[str] = []
        for name in module_names:
            module = self.registry.get(name)
            if module is None:
                errors.append(f"Unknown module: {name}")
                continue
            schemas.append(
                {
                    "module": module.name,
                    "description": module.description,
                    "api_version": module.api_version,
                    "tools": [tool.describe(module.name) for tool in module.tools()],
                }
            )

        if not schemas and errors:
            return ToolCallResult.error(
                f"{'; '.join(errors)}. Available: {self.registry.names()}"
            )

        parts: list[str] = []
        if errors:
            parts.append(f"Warning: {'; '.join(errors)}")
        parts.append(json.dumps(schemas, indent=2, ensure_ascii=False))
        return ToolCallResult.text("\n\n".join(parts))

    def _execute_once(
        self,
        call_ctx: CallContext,
        module: Module,
        tool_name: str,
        params: dict[str, Any],
    ) -> str:
        reason = call_ctx.err()
        if reason is not None:
            raise CallAbortedError(reason)

        pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"tool-{module.name}")
        try:
            future = pool.submit(module.execute_tool, call_ctx, tool_name, params)
            while not wait([future], timeout=_wait_slice(call_ctx)).done:
                reason = call_ctx.err()
                if reason is not None:
                    # Lets cooperative modules stop; the worker thread is not joined.
                    call_ctx.cancel()
                    raise CallAbortedError(reason)
            output = future.result()
        finally:
            pool.shutdown(wait=False)

        if not isinstance(output, str):
            raise TypeError(
                f"module {module.name} returned {type(output).__name__}, expected a JSON string"
            )
        return output

    def _failure_message(self, module_name: str, call_ctx: CallContext, exc: Exception) -> str:
        reason = exc.reason if isinstance(exc, CallAbortedError) else call_ctx.err()
        if reason == DEADLINE_EXCEEDED:
            return (
                f"Request to {module_name} timed out after {_format_seconds(self.tool_timeout_s)}. "
                "The external service did not respond in time."
            )
        if isinstance(exc, CallAbortedError):
            return f"Request to {module_name} was canceled before it completed."
        return str(exc) or type(exc).__name__

    def _log_call(
        self,
        ctx: CallContext,
        module_name: str,
        tool_name: str,
        started_at: float,
        *,
        error: str | None = None,
    ) -> None:
        if error is None:
            logger.info(
                "tool_call request_id=%s module=%s tool=%s status=success duration_ms=%s",
                ctx.request_id,
                module_name,
                tool_name,
                _duration_ms(started_at),
            )
            return
        logger.warning(
            "tool_call request_id=%s module=%s tool=%s status=error duration_ms=%s error=%s",
            ctx.request_id,
            module_name,
            tool_name,
            _duration_ms(started_at),
            error,
        )


def _wait_slice(call_ctx: CallContext) -> float:
    remaining = call_ctx.remaining()
    if remaining is None:
        return _POLL_INTERVAL_S
    return min(remaining, _POLL_INTERVAL_S)


def _format_seconds(seconds: float) -> str:
    return f"{seconds:g}s"


def _duration_ms(started_at: float) -> float:
    return round((time.perf_counter() - started_at) * 1000.0, 2)
