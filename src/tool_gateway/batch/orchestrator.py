"""Batch entry point: parse, validate the DAG, execute, aggregate."""

from __future__ import annotations

import logging
import time

from tool_gateway.batch.aggregator import aggregate
from tool_gateway.batch.errors import BatchValidationError, CircularDependencyError
from tool_gateway.batch.executor import DagExecutor
from tool_gateway.batch.graph import detect_cycle
from tool_gateway.batch.models import BatchResult
from tool_gateway.batch.parser import parse_commands
from tool_gateway.modules.base import ToolCallResult
from tool_gateway.modules.context import CallContext
from tool_gateway.modules.runner import ToolRunner

logger = logging.getLogger(__name__)

MAX_BATCH_SIZE = 10


class BatchOrchestrator:
    def __init__(self, *, runner: ToolRunner, max_batch_size: int | None = MAX_BATCH_SIZE) -> None:
        self.runner = runner
        self.max_batch_size = max_batch_size
        self.executor = DagExecutor(runner=runner)

    def run_batch(self, ctx: CallContext, commands: str) -> BatchResult:
        """Run a JSONL batch.

        Structural problems return an error result without running any task;
        task failures are reported per task and skip their dependents.
        """
        started_at = time.perf_counter()
        try:
            order, tasks = parse_commands(commands, max_commands=self.max_batch_size)
            cycle = detect_cycle(tasks)
            if cycle:
                raise CircularDependencyError(cycle)
        except BatchValidationError as exc:
            logger.warning(
                "batch event=rejected request_id=%s reason=%s",
                ctx.request_id,
                exc,
            )
            return BatchResult(result=ToolCallResult.error(str(exc)))

        states = self.executor.execute(ctx, order, tasks)
        batch_result = aggregate(order, states, self.runner)

        errored = sum(1 for state in states.values() if state.error is not None)
        skipped = sum(1 for state in states.values() if state.skipped)
        logger.info(
            "batch event=completed request_id=%s tasks=%s succeeded=%s errored=%s "
            "skipped=%s duration_ms=%s",
            ctx.request_id,
            len(order),
            batch_result.success_count,
            errored,
            skipped,
            round((time.perf_counter() - started_at) * 1000.0, 2),
        )
        return batch_result
