"""FastAPI app serving the MCP streamable HTTP endpoint plus health checks.

Endpoints:
    GET  /, /healthz -> "ok"
    GET  /mcp        -> readiness probe without a session, SSE stream with one
    POST /mcp        -> initialize a session, or continue an existing one
    DELETE /mcp      -> terminate a session ("ok" when there is none)

Session bookkeeping belongs to the SDK's StreamableHTTPSessionManager. This
module only answers the session-less cases the connectors expect and
normalizes the Accept header before handing requests over.
"""

from __future__ import annotations

import json
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from mcp.server.fastmcp import FastMCP
from mcp.server.streamable_http import MCP_SESSION_ID_HEADER
from starlette.datastructures import Headers
from starlette.requests import Request
from starlette.types import Receive, Scope, Send

from ..config.settings import Settings, get_settings
from ..logging import get_logger
from ..todoist.client import TodoistClient
from .sdk_server import SERVER_NAME, SERVER_VERSION, build_server

LOG = get_logger(__name__)

MCP_PATH = "/mcp"
REQUIRED_ACCEPT = ("application/json", "text/event-stream")

_BAD_SESSION = {
    "jsonrpc": "2.0",
    "error": {"code": -32000, "message": "Bad Request: No valid session ID provided"},
    "id": None,
}


def _is_initialize(body: bytes) -> bool:
    try:
        msg = json.loads(body)
    except ValueError:
        return False
    return isinstance(msg, dict) and msg.get("method") == "initialize"


def _complete_accept(scope: Scope) -> Scope:
    accept = Headers(scope=scope).get("accept", "")
    parts = [p.strip() for p in accept.split(",") if p.strip()]
    present = {p.split(";")[0].strip().lower() for p in parts}
    missing = [m for m in REQUIRED_ACCEPT if m not in present]
    if not missing:
        return scope
    headers = [(k, v) for k, v in scope["headers"] if k.lower() != b"accept"]
    headers.append((b"accept", ", ".join(parts + missing).encode("latin-1")))
    return {**scope, "headers": headers}


def _replay_body(body: bytes, receive: Receive) -> Receive:
    sent = False

    async def _receive() -> Any:
        nonlocal sent
        if not sent:
            sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return _receive


class MCPEndpoint:
    """Raw ASGI endpoint in front of the SDK session manager."""

    def __init__(self, server: FastMCP):
        self.server = server

    @property
    def session_manager(self):
        return self.server.session_manager

    def has_session(self, session_id: Optional[str]) -> bool:
        if not session_id:
            return False
        instances = getattr(self.session_manager, "_server_instances", None)
        if instances is None:
            # Session map not reachable on this SDK release; let the SDK judge
            return True
        return session_id in instances

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        session_id = request.headers.get(MCP_SESSION_ID_HEADER)
        method = request.method

        if method == "GET":
            if not session_id:
                response = JSONResponse(
                    {
                        "status": "ready",
                        "message": "Use POST initialize to start an MCP session",
                    }
                )
                return await response(scope, receive, send)
            if not self.has_session(session_id):
                response = PlainTextResponse("Invalid or missing session ID", status_code=400)
                return await response(scope, receive, send)
            return await self.session_manager.handle_request(scope, receive, send)

        if method == "DELETE":
            if not self.has_session(session_id):
                return await PlainTextResponse("ok")(scope, receive, send)
            LOG.info("[mcp] closing session %s", session_id)
            return await self.session_manager.handle_request(scope, receive, send)

        if method == "POST":
            body = await request.body()
            if not self.has_session(session_id):
                if session_id or not _is_initialize(body):
                    LOG.debug("[mcp] rejected POST session=%s", session_id)
                    response = JSONResponse(_BAD_SESSION, status_code=400)
                    return await response(scope, receive, send)
                LOG.info("[mcp] new session requested")
            return await self.session_manager.handle_request(
                _complete_accept(scope), _replay_body(body, receive), send
            )

        response = PlainTextResponse(
            "Method Not Allowed", status_code=405, headers={"Allow": "GET, POST, DELETE"}
        )
        await response(scope, receive, send)


def _add_cors(app: FastAPI, origins: list[str]) -> None:
    reflect_any = "*" in origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[] if reflect_any else origins,
        allow_origin_regex=".*" if reflect_any else None,
        allow_credentials=False,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["Mcp-Session-Id"],
    )


def create_app(
    settings: Optional[Settings] = None, client: Optional[TodoistClient] = None
) -> FastAPI:
    settings = settings or get_settings()
    if client is None:
        client = TodoistClient.from_settings(settings.todoist)
    server = build_server(client, settings)
    # Creates the session manager used by MCPEndpoint
    server.streamable_http_app()
    endpoint = MCPEndpoint(server)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        async with server.session_manager.run():
            LOG.info("Todoist MCP shim listening on port %s", settings.port)
            try:
                yield
            finally:
                await client.aclose()

    app = FastAPI(title="Todoist MCP Shim", version=SERVER_VERSION, lifespan=lifespan)
    app.state.mcp_server = server
    _add_cors(app, settings.cors_allow_origins)

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        return "ok"

    @app.get("/healthz", response_class=PlainTextResponse)
    async def healthz() -> str:
        return "ok"

    app.add_route(MCP_PATH, endpoint, include_in_schema=False, name=SERVER_NAME)
    return app
