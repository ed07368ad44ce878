"""FastMCP server exposing the Todoist tools through the official MCP SDK.

The same server instance backs both the streamable HTTP app
(`todoist_mcp_shim.mcp.http_app`) and the stdio transport.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from mcp.server.fastmcp import FastMCP

from ..config.settings import MissingTokenError, Settings, get_settings
from ..logging import get_logger
from ..todoist.client import TodoistClient
from .tools.add_task import build_add_task_tool
from .tools.fetch import build_fetch_tool
from .tools.search import build_search_tool

LOG = get_logger(__name__)

SERVER_NAME = "todoist-mcp-shim"
SERVER_VERSION = "1.0.1"

ToolBuilder = Callable[[TodoistClient], Dict[str, Any]]

TOOL_BUILDERS: list[ToolBuilder] = [
    build_search_tool,
    build_fetch_tool,
    build_add_task_tool,
]


def build_server(client: TodoistClient, settings: Optional[Settings] = None) -> FastMCP:
    settings = settings or get_settings()
    server = FastMCP(
        SERVER_NAME,
        host=settings.host,
        port=settings.port,
        json_response=settings.json_response,
        log_level=settings.log_level.upper(),
    )
    # FastMCP takes no version argument; the low-level server reports this
    # as serverInfo.version during initialize
    server._mcp_server.version = SERVER_VERSION
    for build in TOOL_BUILDERS:
        spec = build(client)
        server.add_tool(
            spec["handler"],
            name=spec["name"],
            title=spec.get("title"),
            description=spec.get("description", spec["name"]),
            structured_output=False,
        )
        LOG.debug("[mcp] registered tool %s", spec["name"])
    return server


def run_stdio(settings: Optional[Settings] = None) -> None:
    """Serve over stdio; exits with status 1 when no Todoist token is configured."""
    settings = settings or get_settings()
    try:
        client = TodoistClient.from_settings(settings.todoist)
    except MissingTokenError as e:
        LOG.error("[ERROR] %s", e)
        raise SystemExit(1)
    server = build_server(client, settings)
    LOG.info("[mcp] serving %s over stdio", SERVER_NAME)
    server.run(transport="stdio")
