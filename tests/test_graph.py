from __future__ import annotations

from tool_gateway.batch.graph import detect_cycle
from tool_gateway.batch.models import BatchCommand


def _tasks(edges: dict[str, list[str]]) -> dict[str, BatchCommand]:
    return {
        task_id: BatchCommand(id=task_id, module="m", tool="t", after=after)
        for task_id, after in edges.items()
    }


def test_independent_tasks_have_no_cycle() -> None:
    assert detect_cycle(_tasks({"a": [], "b": [], "c": []})) == ""


def test_diamond_is_acyclic() -> None:
    tasks = _tasks({"a": [], "b": ["a"], "c": ["a"], "d": ["b", "c"]})

    assert detect_cycle(tasks) == ""


def test_self_dependency_is_a_cycle() -> None:
    assert detect_cycle(_tasks({"a": ["a"]})) == "a -> a"


def test_two_task_cycle() -> None:
    assert detect_cycle(_tasks({"a": ["b"], "b": ["a"]})) == "a -> b -> a"


def test_cycle_path_excludes_the_tasks_leading_into_it() -> None:
    tasks = _tasks({"x": ["a"], "a": ["b"], "b": ["c"], "c": ["a"]})

    assert detect_cycle(tasks) == "a -> b -> c -> a"


def test_empty_batch() -> None:
    assert detect_cycle({}) == ""
