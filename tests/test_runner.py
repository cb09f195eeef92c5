from __future__ import annotations

import json
import logging

import pytest

from tool_gateway.modules import CallContext, ModuleRegistry, ToolRunner
from tool_gateway.modules.runner import TOOL_TIMEOUT_S

from conftest import ITEMS_RESULT, FakeModule


def test_default_timeout_is_thirty_seconds(registry: ModuleRegistry) -> None:
    assert TOOL_TIMEOUT_S == 30.0
    assert ToolRunner(registry=registry).tool_timeout_s == 30.0


def test_unknown_module_is_an_error_result(runner: ToolRunner, ctx: CallContext) -> None:
    result = runner.run(ctx, "nope", "items", {})

    assert result.is_error is True
    assert result.first_text == "Unknown module: nope"


def test_success_returns_raw_json_unmodified(
    runner: ToolRunner, ctx: CallContext, compact_module: FakeModule
) -> None:
    result = runner.run(ctx, "compact", "items", {})

    assert result.is_error is False
    assert json.loads(result.first_text) == ITEMS_RESULT
    assert compact_module.tool_names() == ["items"]


def test_validation_failure_skips_the_call(
    runner: ToolRunner, ctx: CallContext, fake_module: FakeModule
) -> None:
    result = runner.run(ctx, "fake", "greet", {})

    assert result.is_error is True
    assert result.first_text == "missing required parameter(s): name"
    assert fake_module.calls == []


def test_validated_params_reach_the_module(
    runner: ToolRunner, ctx: CallContext, fake_module: FakeModule
) -> None:
    result = runner.run(ctx, "fake", "greet", {"name": "Ada"})

    assert json.loads(result.first_text) == {"greeting": "hello Ada"}
    assert fake_module.call_for("greet")["params"] == {"name": "Ada"}


def test_module_exception_becomes_error_result(runner: ToolRunner, ctx: CallContext) -> None:
    result = runner.run(ctx, "fake", "fail", {})

    assert result.is_error is True
    assert result.first_text == "boom"


def test_unknown_tool_is_reported_by_the_module(runner: ToolRunner, ctx: CallContext) -> None:
    result = runner.run(ctx, "fake", "missing", {})

    assert result.is_error is True
    assert result.first_text == "Unknown tool: missing"


def test_non_string_output_is_rejected(runner: ToolRunner, ctx: CallContext) -> None:
    result = runner.run(ctx, "fake", "bad_type", {})

    assert result.is_error is True
    assert result.first_text == "module fake returned dict, expected a JSON string"


def test_timeout_names_module_and_duration(runner: ToolRunner, ctx: CallContext) -> None:
    result = runner.run(ctx, "fake", "hang", {})

    assert result.is_error is True
    assert result.first_text == (
        "Request to fake timed out after 0.2s. The external service did not respond in time."
    )


def test_canceled_parent_fails_fast_without_calling_module(
    runner: ToolRunner, fake_module: FakeModule
) -> None:
    parent = CallContext.background()
    parent.cancel()

    result = runner.run(parent, "fake", "items", {})

    assert result.is_error is True
    assert result.first_text == "Request to fake was canceled before it completed."
    assert fake_module.calls == []


def test_each_call_is_logged(
    runner: ToolRunner, ctx: CallContext, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.INFO, logger="tool_gateway.modules.runner")

    runner.run(ctx, "fake", "items", {})
    runner.run(ctx, "fake", "fail", {})

    messages = [record.getMessage() for record in caplog.records]
    assert any(
        "request_id=req-test module=fake tool=items status=success" in message
        for message in messages
    )
    assert any("tool=fail status=error" in message and "error=boom" in message for message in messages)


def test_apply_compact_uses_module_formatter(runner: ToolRunner) -> None:
    assert runner.apply_compact("compact", "items", "{}") == "compact:items"


def test_apply_compact_falls_back_to_json(runner: ToolRunner) -> None:
    assert runner.apply_compact("fake", "items", '{"a": 1}') == '{"a": 1}'
    assert runner.apply_compact("nope", "items", '{"a": 1}') == '{"a": 1}'
    assert runner.apply_compact("compact", "fail", '{"a": 1}') == '{"a": 1}'


def test_module_schemas_list_tools(runner: ToolRunner) -> None:
    result = runner.get_module_schemas(["fake"])

    assert result.is_error is False
    schemas = json.loads(result.first_text)
    assert schemas[0]["module"] == "fake"
    tool_ids = [tool["id"] for tool in schemas[0]["tools"]]
    assert "fake:greet" in tool_ids
    greet = next(tool for tool in schemas[0]["tools"] if tool["name"] == "greet")
    assert greet["inputSchema"]["required"] == ["name"]


def test_module_schemas_warn_about_unknown_names(runner: ToolRunner) -> None:
    result = runner.get_module_schemas(["fake", "nope"])

    assert result.is_error is False
    assert result.first_text.startswith("Warning: Unknown module: nope")


def test_module_schemas_all_unknown_is_an_error(runner: ToolRunner) -> None:
    result = runner.get_module_schemas(["nope"])

    assert result.is_error is True
    assert result.first_text == "Unknown module: nope. Available: ['compact', 'fake']"


def test_empty_required_parameter_is_reported_missing(
    runner: ToolRunner, ctx: CallContext, fake_module: FakeModule
) -> None:
    result = runner.run(ctx, "fake", "greet", {"name": ""})

    assert result.is_error is True
    assert result.first_text == "missing required parameter(s): name"
    assert fake_module.calls == []
