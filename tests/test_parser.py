from __future__ import annotations

import json

import pytest

from tool_gateway.batch.errors import (
    BatchParseError,
    BatchTooLargeError,
    DuplicateTaskIdError,
    MissingTaskIdError,
    UnknownDependencyError,
)
from tool_gateway.batch.parser import parse_commands


def test_parse_keeps_input_order_and_skips_blank_lines() -> None:
    commands = "\n".join(
        [
            '{"id":"search","module":"notes","tool":"search","params":{"query":"design"}}',
            "",
            "   ",
            '{"id":"note","module":"notes","tool":"get_note","after":["search"],"output":true}',
        ]
    )

    order, tasks = parse_commands(commands)

    assert order == ["search", "note"]
    assert tasks["search"].params == {"query": "design"}
    assert tasks["search"].after == []
    assert tasks["search"].output is False
    assert tasks["note"].after == ["search"]
    assert tasks["note"].output is True
    assert tasks["note"].params is None


def test_response_format_reads_params_format() -> None:
    _, tasks = parse_commands('{"id":"a","module":"m","tool":"t","params":{"format":"json"}}')

    assert tasks["a"].response_format == "json"


def test_invalid_json_rejects_the_batch_with_line_number() -> None:
    commands = '{"id":"a","module":"m","tool":"t"}\n{"id":"b",'

    with pytest.raises(BatchParseError) as exc_info:
        parse_commands(commands)

    assert exc_info.value.line_number == 2
    assert str(exc_info.value).startswith("JSON parse error on line 2:")


def test_wrong_field_type_is_a_parse_error() -> None:
    with pytest.raises(BatchParseError):
        parse_commands('{"id":"a","module":"m","tool":"t","after":"b"}')


@pytest.mark.parametrize(
    "line",
    [
        '{"module":"m","tool":"t"}',
        '{"id":"","module":"m","tool":"t"}',
    ],
)
def test_missing_id_rejects_the_batch(line: str) -> None:
    with pytest.raises(MissingTaskIdError) as exc_info:
        parse_commands(line)

    assert str(exc_info.value) == "id field is required for all commands"


def test_duplicate_id_names_the_offender() -> None:
    commands = '{"id":"a","module":"m","tool":"t"}\n{"id":"a","module":"m","tool":"t"}'

    with pytest.raises(DuplicateTaskIdError) as exc_info:
        parse_commands(commands)

    assert str(exc_info.value) == "duplicate id: a"


def test_unknown_dependency_names_dependency_and_referrer() -> None:
    commands = '{"id":"a","module":"m","tool":"t","after":["ghost"]}'

    with pytest.raises(UnknownDependencyError) as exc_info:
        parse_commands(commands)

    assert str(exc_info.value) == "unknown dependency ghost for task a"


def test_forward_references_are_allowed() -> None:
    commands = '{"id":"b","module":"m","tool":"t","after":["a"]}\n{"id":"a","module":"m","tool":"t"}'

    order, _ = parse_commands(commands)

    assert order == ["b", "a"]


def test_batch_size_limit() -> None:
    commands = "\n".join(
        f'{{"id":"t{index}","module":"m","tool":"t"}}' for index in range(11)
    )

    with pytest.raises(BatchTooLargeError) as exc_info:
        parse_commands(commands, max_commands=10)

    assert str(exc_info.value) == "batch too large: 11 commands (max 10)"
    order, _ = parse_commands(commands)
    assert len(order) == 11


@pytest.mark.parametrize("separator", ["\u0085", "\u2028", "\u2029"])
def test_unicode_line_separators_inside_strings_stay_in_the_line(separator: str) -> None:
    line = json.dumps(
        {"id": "a", "module": "m", "tool": "t", "params": {"text": f"x{separator}y"}},
        ensure_ascii=False,
    )

    order, tasks = parse_commands(f"{line}\r\n")

    assert order == ["a"]
    assert tasks["a"].params == {"text": f"x{separator}y"}


def test_null_optional_fields_take_their_defaults() -> None:
    _, tasks = parse_commands(
        '{"id":"a","module":"m","tool":"t","params":null,"after":null,"output":null}'
    )

    assert tasks["a"].after == []
    assert tasks["a"].output is False
    assert tasks["a"].params is None


def test_null_id_is_a_missing_id() -> None:
    with pytest.raises(MissingTaskIdError) as exc_info:
        parse_commands('{"id":null,"module":"m","tool":"t"}')

    assert str(exc_info.value) == "id field is required for all commands"
