"""JSONL batch parsing with whole-batch rejection of structural errors."""

from __future__ import annotations

from pydantic import ValidationError

from tool_gateway.batch.errors import (
    BatchParseError,
    BatchTooLargeError,
    DuplicateTaskIdError,
    MissingTaskIdError,
    UnknownDependencyError,
)
from tool_gateway.batch.models import BatchCommand


def parse_commands(
    commands: str,
    *,
    max_commands: int | None = None,
) -> tuple[list[str], dict[str, BatchCommand]]:
    """Parse one JSON object per non-blank, newline-delimited line.

    Returns the task ids in input order and the id-to-command table.
    Raises a ``BatchValidationError`` subclass on the first structural problem.
    """
    order: list[str] = []
    tasks: dict[str, BatchCommand] = {}

    for line_number, raw_line in enumerate(commands.split("\n"), start=1):
        line = raw_line.strip()
        if not line:
            continue

        try:
            command = BatchCommand.model_validate_json(line)
        except ValidationError as exc:
            raise BatchParseError(line_number, _first_error(exc)) from exc

        if not command.id:
            raise MissingTaskIdError()
        if command.id in tasks:
            raise DuplicateTaskIdError(command.id)

        tasks[command.id] = command
        order.append(command.id)

    if max_commands is not None and len(order) > max_commands:
        raise BatchTooLargeError(len(order), max_commands)

    for task_id in order:
        for dependency in tasks[task_id].after:
            if dependency not in tasks:
                raise UnknownDependencyError(dependency, task_id)

    return order, tasks


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "invalid input")
    return f"{location}: {message}" if location else message
