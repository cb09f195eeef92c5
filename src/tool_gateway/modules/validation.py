"""Parameter validation against a tool's declared input model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ValidationError

from tool_gateway.modules.base import ToolDef


class ParamsValidationError(ValueError):
    pass


def find_tool(tools: list[ToolDef], name: str) -> ToolDef | None:
    for tool in tools:
        if tool.name == name:
            return tool
    return None


def validate_params(input_model: type[BaseModel], params: dict[str, Any] | None) -> dict[str, Any]:
    """Validate ``params`` and return the normalized mapping.

    Declared fields are coerced to their declared types and defaults are
    filled in; undeclared keys are kept as-is when the model allows it.
    Required parameters that are absent, null or empty strings are reported
    together as missing.
    """
    params = params or {}
    missing = [
        name
        for name, field in input_model.model_fields.items()
        if field.is_required() and params.get(field.alias or name) in (None, "")
    ]
    if missing:
        raise ParamsValidationError(_missing_message(missing))

    try:
        payload = input_model.model_validate(params)
    except ValidationError as exc:
        raise ParamsValidationError(format_validation_error(exc)) from exc
    return payload.model_dump(mode="json")


def format_validation_error(exc: ValidationError) -> str:
    missing: list[str] = []
    problems: list[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        if error.get("type") == "missing":
            missing.append(location)
        else:
            problems.append(f'parameter "{location}": {error.get("msg", "invalid value")}')
    if missing:
        return _missing_message(missing)
    return "; ".join(problems) or str(exc)


def _missing_message(names: list[str]) -> str:
    return f"missing required parameter(s): {', '.join(names)}"
