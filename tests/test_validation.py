from __future__ import annotations

import pytest
from pydantic import Field

from tool_gateway.modules.base import ToolDef, ToolParams
from tool_gateway.modules.validation import ParamsValidationError, find_tool, validate_params


class SearchInput(ToolParams):
    query: str = Field(min_length=1)
    limit: int = 5


class PairInput(ToolParams):
    first: str
    second: int


def test_validate_params_fills_defaults_and_coerces_types() -> None:
    normalized = validate_params(SearchInput, {"query": "design", "limit": "3"})

    assert normalized == {"query": "design", "limit": 3}


def test_validate_params_keeps_undeclared_keys() -> None:
    normalized = validate_params(SearchInput, {"query": "design", "format": "json"})

    assert normalized["format"] == "json"
    assert normalized["limit"] == 5


def test_missing_parameters_are_listed_together() -> None:
    with pytest.raises(ParamsValidationError) as exc_info:
        validate_params(PairInput, {})

    assert str(exc_info.value) == "missing required parameter(s): first, second"


def test_invalid_value_names_the_parameter() -> None:
    with pytest.raises(ParamsValidationError) as exc_info:
        validate_params(PairInput, {"first": "a", "second": "not-a-number"})

    assert str(exc_info.value).startswith('parameter "second":')


def test_find_tool_by_name() -> None:
    tools = [ToolDef(name="search"), ToolDef(name="get_note")]

    assert find_tool(tools, "get_note") is tools[1]
    assert find_tool(tools, "missing") is None


@pytest.mark.parametrize("blank", [None, ""])
def test_null_or_empty_required_parameter_counts_as_missing(blank: str | None) -> None:
    with pytest.raises(ParamsValidationError) as exc_info:
        validate_params(PairInput, {"first": blank, "second": 2})

    assert str(exc_info.value) == "missing required parameter(s): first"


def test_empty_optional_parameter_is_accepted() -> None:
    class NoteInput(ToolParams):
        title: str
        body: str = ""

    assert validate_params(NoteInput, {"title": "Retro", "body": ""}) == {
        "title": "Retro",
        "body": "",
    }
