"""Concurrent execution of a validated task DAG, one worker per task."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from tool_gateway.batch.models import BatchCommand, TaskState
from tool_gateway.batch.resolver import ResultStore, resolve_variables
from tool_gateway.modules.context import CallContext
from tool_gateway.modules.runner import ToolRunner


class DagExecutor:
    """Start every task at once and let dependency waits impose the order.

    ``tasks`` must be acyclic; a cycle would leave its workers waiting forever.
    """

    def __init__(self, *, runner: ToolRunner) -> None:
        self.runner = runner

    def execute(
        self,
        ctx: CallContext,
        order: list[str],
        tasks: dict[str, BatchCommand],
    ) -> dict[str, TaskState]:
        states = {task_id: TaskState(command=tasks[task_id]) for task_id in order}
        if not states:
            return states

        store = ResultStore()
        with ThreadPoolExecutor(
            max_workers=len(states), thread_name_prefix="batch-task"
        ) as pool:
            futures = [
                pool.submit(self._run_task, ctx, task_id, states, store) for task_id in order
            ]
        for future in futures:
            future.result()
        return states

    def _run_task(
        self,
        ctx: CallContext,
        task_id: str,
        states: dict[str, TaskState],
        store: ResultStore,
    ) -> None:
        state = states[task_id]
        command = state.command
        try:
            dependencies = [states[dependency] for dependency in command.after]
            # Every dependency is terminal before the skip decision.
            for dependency in dependencies:
                dependency.done.wait()
            if any(dependency.failed for dependency in dependencies):
                state.skipped = True
                return

            params = resolve_variables(command.params, store)
            result = self.runner.run(ctx, command.module, command.tool, params)
            if result.is_error:
                state.error = result.first_text
                return

            state.result = result.first_text
            store.store(task_id, state.result)
        except Exception as exc:  # noqa: BLE001
            state.error = str(exc) or type(exc).__name__
        finally:
            state.done.set()
