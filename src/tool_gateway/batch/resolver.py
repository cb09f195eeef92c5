"""Substitution of ``${task.results[N].field}`` references in task params.

References that cannot be resolved are left in place unchanged.
"""

from __future__ import annotations

import json
import re
import threading
from typing import Any

VARIABLE_PATTERN = re.compile(
    r"\$\{([a-zA-Z_][a-zA-Z0-9_]*)\.results\[(\d+)\]\.([a-zA-Z_][a-zA-Z0-9_]*)\}"
)


class ResultStore:
    """Raw JSON results of completed tasks, keyed by task id."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._results: dict[str, str] = {}

    def store(self, task_id: str, raw_json: str) -> None:
        with self._lock:
            self._results[task_id] = raw_json

    def load(self, task_id: str) -> str | None:
        with self._lock:
            return self._results.get(task_id)

    @classmethod
    def from_mapping(cls, results: dict[str, str]) -> ResultStore:
        store = cls()
        for task_id, raw_json in results.items():
            store.store(task_id, raw_json)
        return store


def resolve_variables(params: dict[str, Any] | None, store: ResultStore) -> dict[str, Any] | None:
    if params is None:
        return None
    return {key: resolve_value(value, store) for key, value in params.items()}


def resolve_value(value: Any, store: ResultStore) -> Any:
    if isinstance(value, str):
        return resolve_string(value, store)
    if isinstance(value, dict):
        return {key: resolve_value(item, store) for key, item in value.items()}
    if isinstance(value, list):
        return [resolve_value(item, store) for item in value]
    return value


def resolve_string(text: str, store: ResultStore) -> str:
    def substitute(match: re.Match[str]) -> str:
        task_id, index, field = match.group(1), int(match.group(2)), match.group(3)
        resolved = _lookup(store.load(task_id), index, field)
        return match.group(0) if resolved is None else resolved

    return VARIABLE_PATTERN.sub(substitute, text)


def _lookup(raw_json: str | None, index: int, field: str) -> str | None:
    if raw_json is None:
        return None
    try:
        data = json.loads(raw_json)
    except ValueError:
        return None

    rows = data.get("results") if isinstance(data, dict) else data
    if not isinstance(rows, list) or index >= len(rows):
        return None
    item = rows[index]
    if not isinstance(item, dict) or field not in item:
        return None

    value = item[field]
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)
