"""Cycle detection over the ``after`` dependency edges of a batch."""

from __future__ import annotations

from collections.abc import Mapping

from tool_gateway.batch.models import BatchCommand

_UNVISITED = 0
_VISITING = 1
_VISITED = 2


def detect_cycle(tasks: Mapping[str, BatchCommand]) -> str:
    """Return the first dependency cycle as ``"a -> b -> a"``, or ``""`` when acyclic.

    Roots are visited in mapping order. Edges point from a task to the
    tasks listed in its ``after``; ids missing from ``tasks`` are ignored.
    """
    state: dict[str, int] = {}
    path: list[str] = []

    def visit(task_id: str) -> list[str] | None:
        mark = state.get(task_id, _UNVISITED)
        if mark == _VISITED:
            return None
        if mark == _VISITING:
            start = path.index(task_id)
            return path[start:] + [task_id]

        state[task_id] = _VISITING
        path.append(task_id)
        for dependency in tasks[task_id].after:
            if dependency not in tasks:
                continue
            cycle = visit(dependency)
            if cycle is not None:
                return cycle
        path.pop()
        state[task_id] = _VISITED
        return None

    for task_id in tasks:
        cycle = visit(task_id)
        if cycle is not None:
            return " -> ".join(cycle)
    return ""
