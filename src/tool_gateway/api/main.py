"""FastAPI app entrypoint for tool-gateway."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Body, FastAPI, Header, Query
from fastapi.responses import Response
from pydantic import BaseModel, Field, ValidationError

from tool_gateway import __version__
from tool_gateway.api.handlers import GatewayHandler
from tool_gateway.api.jsonrpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    JsonRpcError,
    JsonRpcRequest,
    ToolCallParams,
    error_response,
    success_response,
)
from tool_gateway.config.settings import Settings, configure_logging, get_settings
from tool_gateway.modules import CallContext, ModuleRegistry, ToolCallResult
from tool_gateway.modules.builtin import build_default_registry
from tool_gateway.storage import InMemoryUsageStorage, UsageRecord, UsageStorage

logger = logging.getLogger(__name__)


class RunRequest(BaseModel):
    module: str = Field(min_length=1)
    tool: str = Field(min_length=1)
    params: dict[str, Any] = Field(default_factory=dict)


class BatchRequest(BaseModel):
    commands: str


def create_app(
    *,
    registry: ModuleRegistry | None = None,
    usage_storage: UsageStorage | None = None,
    settings_override: Settings | None = None,
) -> FastAPI:
    settings = settings_override or get_settings()
    configure_logging(settings.log_level)

    full_registry = registry if registry is not None else build_default_registry()
    handler = GatewayHandler(
        registry=full_registry.restricted_to(settings.enabled_modules),
        usage_storage=usage_storage or InMemoryUsageStorage(),
        tool_timeout_s=settings.tool_timeout_s,
        max_batch_size=settings.max_batch_size,
        server_name=settings.app_name,
        server_version=__version__,
    )

    app = FastAPI(title=settings.app_name, version=__version__)
    app.state.settings = settings
    app.state.handler = handler

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "service": settings.app_name}

    @app.get("/modules")
    def modules() -> dict[str, list[str]]:
        return {"modules": handler.registry.names()}

    @app.get("/modules/schema", response_model=ToolCallResult)
    def module_schema(module: list[str] = Query(...)) -> ToolCallResult:
        return handler.module_schema(module)

    @app.post("/run", response_model=ToolCallResult)
    def run(
        payload: RunRequest,
        x_request_id: str | None = Header(default=None),
    ) -> ToolCallResult:
        ctx = CallContext.background(request_id=x_request_id)
        return handler.run(ctx, payload.module, payload.tool, payload.params)

    @app.post("/batch", response_model=ToolCallResult)
    def batch(
        payload: BatchRequest,
        x_request_id: str | None = Header(default=None),
    ) -> ToolCallResult:
        ctx = CallContext.background(request_id=x_request_id)
        return handler.batch(ctx, payload.commands)

    @app.get("/usage", response_model=list[UsageRecord])
    def usage() -> list[UsageRecord]:
        return handler.usage_storage.list_usage()

    @app.post("/mcp", response_model=None)
    def mcp(
        payload: dict[str, Any] = Body(...),
        x_request_id: str | None = Header(default=None),
    ) -> dict[str, Any] | Response:
        try:
            rpc_request = JsonRpcRequest.model_validate(payload)
        except ValidationError:
            return error_response(
                payload.get("id"), JsonRpcError(INVALID_REQUEST, "Invalid request")
            )

        if rpc_request.method.startswith("notifications/") or rpc_request.method == "initialized":
            return Response(status_code=202)

        ctx = CallContext.background(request_id=x_request_id)
        try:
            result = _dispatch(handler, ctx, rpc_request)
        except JsonRpcError as exc:
            return error_response(rpc_request.id, exc)
        except Exception as exc:  # noqa: BLE001
            logger.exception(
                "mcp event=failed request_id=%s method=%s", ctx.request_id, rpc_request.method
            )
            return error_response(rpc_request.id, JsonRpcError(INTERNAL_ERROR, str(exc)))
        return success_response(rpc_request.id, result)

    return app


def _dispatch(handler: GatewayHandler, ctx: CallContext, request: JsonRpcRequest) -> Any:
    if request.method == "initialize":
        return handler.initialize()
    if request.method == "tools/list":
        return handler.tools_list()
    if request.method == "tools/call":
        try:
            params = ToolCallParams.model_validate(request.params)
        except ValidationError as exc:
            raise JsonRpcError(INVALID_PARAMS, "Invalid params structure") from exc
        result = handler.call_tool(ctx, params.name, params.arguments)
        return result.model_dump(by_alias=True)
    raise JsonRpcError(METHOD_NOT_FOUND, "Method not found")


# Module-level app for `uvicorn tool_gateway.api.main:app`.
app = create_app()
