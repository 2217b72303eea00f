"""FastAPI application wiring wallet MCP tools to HTTP routes."""

from __future__ import annotations

import json
import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from wallet_mcp import mcp
from wallet_mcp.config import WalletConfig, default_config
from wallet_mcp.tools.validators import ToolValidationError
from wallet_mcp.wallet_api import (
    BackendError,
    BackendUnreachableError,
    RequestTimeoutError,
    WalletApiError,
    default_client,
)

logger = logging.getLogger(__name__)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "message": record.getMessage(),
            "name": record.name,
        }
        for key in ("tool", "request_id", "error"):
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        return json.dumps(payload)


def configure_logging(config: WalletConfig = default_config) -> None:
    """Install the root handler. Logs go to stderr so stdio stays clean."""
    level = getattr(logging, config.log_level.upper(), logging.INFO)
    if config.log_format.lower() == "json":
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
        logging.basicConfig(level=level, handlers=[handler])
    else:
        logging.basicConfig(level=level)


configure_logging()
HEALTH_STATUS = {"status": "ok"}
APP_VERSION = mcp.MCP_SERVER_VERSION


@asynccontextmanager
async def lifespan(_app: FastAPI):
    # Startup
    yield
    # Shutdown
    await default_client.aclose()


app = FastAPI(
    title="Purple Flea Wallet MCP Server",
    description="Multi-chain wallet and swap tools for LLM agents.",
    version=APP_VERSION,
    lifespan=lifespan,
)


@app.middleware("http")
async def add_request_context(request: Request, call_next):
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


def _error_status(exc: Exception) -> int:
    if isinstance(exc, mcp.UnknownToolError):
        return 404
    if isinstance(exc, ToolValidationError):
        return 422
    if isinstance(exc, RequestTimeoutError):
        return 504
    if isinstance(exc, BackendUnreachableError):
        return 502
    if isinstance(exc, BackendError):
        return exc.status_code
    return 502


@app.get("/health")
async def health() -> JSONResponse:
    """Lightweight health endpoint for monitoring."""
    return JSONResponse(content=HEALTH_STATUS)


@app.get("/tools")
async def tools_index() -> JSONResponse:
    """List available tools with their input schemas."""
    return JSONResponse(content={"tools": mcp.list_tools()})


@app.post("/tools/{tool_name}")
async def call_tool_route(tool_name: str, request: Request) -> Response:
    """Call a tool with a JSON object of arguments and return the raw backend JSON."""
    request_id = getattr(request.state, "request_id", None)
    raw = await request.body()
    try:
        arguments: Any = json.loads(raw) if raw.strip() else {}
    except ValueError:
        return JSONResponse(status_code=400, content={"error": "Request body must be JSON."})

    try:
        result = await mcp.call_tool(tool_name, arguments)
    except (mcp.UnknownToolError, ToolValidationError, WalletApiError) as exc:
        mcp.log_tool_result(tool_name, str(exc), request_id)
        return JSONResponse(status_code=_error_status(exc), content={"error": str(exc)})
    mcp.log_tool_result(tool_name, None, request_id)
    return JSONResponse(content=result)


@app.post("/mcp")
async def mcp_gateway(request: Request) -> Response:
    """
    Minimal JSON-RPC gateway for MCP integrations.

    See ``wallet_mcp.mcp.handle_jsonrpc`` for the supported methods.
    """
    request_id = getattr(request.state, "request_id", None)
    try:
        body: Dict[str, Any] = await request.json()
    except ValueError:
        payload = mcp.jsonrpc_error_payload(None, mcp.PARSE_ERROR, "Parse error")
        return JSONResponse(status_code=400, content=payload)

    outcome = await mcp.handle_jsonrpc(body, request_id=request_id)
    if outcome is None:
        # Notifications should not return a JSON-RPC response body.
        return Response(status_code=204)
    payload, status_code = outcome
    return JSONResponse(status_code=status_code, content=payload)


# Run with: uvicorn wallet_mcp.server:app --reload
