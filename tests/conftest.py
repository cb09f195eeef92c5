from __future__ import annotations

import json
import threading
import time
from typing import Any

import pytest
from fastapi.testclient import TestClient

from tool_gateway.api.main import create_app
from tool_gateway.config.settings import Settings
from tool_gateway.modules import CallContext, ModuleRegistry, ToolDef, ToolParams, ToolRunner
from tool_gateway.storage import InMemoryUsageStorage

ITEMS_RESULT = {
    "results": [
        {"id": "a1", "name": "first", "count": 3},
        {"id": "a2", "name": "second", "count": 5},
    ]
}


class GreetInput(ToolParams):
    name: str


class FakeModule:
    """Test-only module that records every call it receives."""

    api_version = "v1"

    def __init__(self, name: str = "fake") -> None:
        self.name = name
        self.description = f"{name} test module"
        self.calls: list[dict[str, Any]] = []
        self._lock = threading.Lock()

    def tools(self) -> list[ToolDef]:
        return [
            ToolDef(name="items", description="Return two rows"),
            ToolDef(name="echo", description="Return params as JSON"),
            ToolDef(name="greet", description="Requires a name", input_model=GreetInput),
            ToolDef(name="fail", description="Always raises"),
            ToolDef(name="sleep", description="Sleep for params.seconds"),
            ToolDef(name="hang", description="Block until the call context ends"),
            ToolDef(name="bad_type", description="Return a dict instead of JSON"),
        ]

    def execute_tool(self, ctx: CallContext, name: str, params: dict[str, Any]) -> Any:
        started_at = time.monotonic()
        try:
            return self._dispatch(ctx, name, params)
        finally:
            with self._lock:
                self.calls.append(
                    {
                        "tool": name,
                        "params": params,
                        "started_at": started_at,
                        "finished_at": time.monotonic(),
                    }
                )

    def _dispatch(self, ctx: CallContext, name: str, params: dict[str, Any]) -> Any:
        if name == "items":
            return json.dumps(ITEMS_RESULT)
        if name == "echo":
            return json.dumps(params)
        if name == "greet":
            return json.dumps({"greeting": f"hello {params['name']}"})
        if name == "fail":
            raise RuntimeError("boom")
        if name == "sleep":
            time.sleep(float(params.get("seconds", 0.1)))
            return json.dumps({"slept": True})
        if name == "hang":
            while not ctx.done():
                time.sleep(0.01)
            return "{}"
        if name == "bad_type":
            return {"not": "json"}
        raise ValueError(f"Unknown tool: {name}")

    def tool_names(self) -> list[str]:
        with self._lock:
            return [call["tool"] for call in self.calls]

    def call_for(self, tool: str) -> dict[str, Any]:
        with self._lock:
            return next(call for call in self.calls if call["tool"] == tool)


class CompactFakeModule(FakeModule):
    def to_compact(self, tool_name: str, json_result: str) -> str:
        if tool_name == "fail":
            raise ValueError("cannot compact")
        return f"compact:{tool_name}"


@pytest.fixture
def fake_module() -> FakeModule:
    return FakeModule()


@pytest.fixture
def compact_module() -> CompactFakeModule:
    return CompactFakeModule("compact")


@pytest.fixture
def registry(fake_module: FakeModule, compact_module: CompactFakeModule) -> ModuleRegistry:
    return ModuleRegistry([fake_module, compact_module])


@pytest.fixture
def runner(registry: ModuleRegistry) -> ToolRunner:
    return ToolRunner(registry=registry, tool_timeout_s=0.2)


@pytest.fixture
def ctx() -> CallContext:
    return CallContext.background(request_id="req-test")


@pytest.fixture
def usage_storage() -> InMemoryUsageStorage:
    return InMemoryUsageStorage()


@pytest.fixture
def client(registry: ModuleRegistry, usage_storage: InMemoryUsageStorage) -> TestClient:
    settings = Settings(_env_file=None, tool_timeout_s=0.2, max_batch_size=10)
    app = create_app(
        registry=registry,
        usage_storage=usage_storage,
        settings_override=settings,
    )
    with TestClient(app) as test_client:
        yield test_client
