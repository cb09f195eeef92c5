"""Structural batch errors: any of these rejects the whole batch before execution."""

from __future__ import annotations


class BatchValidationError(ValueError):
    pass


class BatchParseError(BatchValidationError):
    def __init__(self, line_number: int, detail: str) -> None:
        super().__init__(f"JSON parse error on line {line_number}: {detail}")
        self.line_number = line_number


class MissingTaskIdError(BatchValidationError):
    def __init__(self) -> None:
        super().__init__("id field is required for all commands")


class DuplicateTaskIdError(BatchValidationError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"duplicate id: {task_id}")
        self.task_id = task_id


class UnknownDependencyError(BatchValidationError):
    def __init__(self, dependency: str, task_id: str) -> None:
        super().__init__(f"unknown dependency {dependency} for task {task_id}")
        self.dependency = dependency
        self.task_id = task_id


class CircularDependencyError(BatchValidationError):
    def __init__(self, cycle: str) -> None:
        super().__init__(f"circular dependency detected: {cycle}")
        self.cycle = cycle


class BatchTooLargeError(BatchValidationError):
    def __init__(self, count: int, limit: int) -> None:
        super().__init__(f"batch too large: {count} commands (max {limit})")
        self.count = count
        self.limit = limit
