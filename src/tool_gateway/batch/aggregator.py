"""Build the batch response and the list of tasks eligible for credit."""

from __future__ import annotations

from tool_gateway.batch.models import (
    SKIPPED_MESSAGE,
    BatchResponse,
    BatchResult,
    SuccessfulTask,
    TaskState,
)
from tool_gateway.modules.base import ToolCallResult
from tool_gateway.modules.runner import ToolRunner


def aggregate(order: list[str], states: dict[str, TaskState], runner: ToolRunner) -> BatchResult:
    results: dict[str, str] = {}
    errors: dict[str, str] = {}
    successful_tasks: list[SuccessfulTask] = []

    for task_id in order:
        state = states[task_id]
        command = state.command
        if state.error is not None:
            errors[task_id] = state.error
            continue
        if state.skipped:
            errors[task_id] = SKIPPED_MESSAGE
            continue

        successful_tasks.append(
            SuccessfulTask(task_id=task_id, module=command.module, tool=command.tool)
        )
        if not command.output:
            continue
        if command.response_format == "json":
            results[task_id] = state.result
        else:
            results[task_id] = runner.apply_compact(command.module, command.tool, state.result)

    response = BatchResponse(results=results or None, errors=errors or None)
    return BatchResult(
        result=ToolCallResult.text(response.to_json()),
        success_count=len(successful_tasks),
        successful_tasks=successful_tasks,
    )
