from __future__ import annotations

from typing import Any, Dict, Literal

from mcp.types import TextContent

from ...todoist.client import TodoistClient
from ._content import relay


def build_fetch_tool(client: TodoistClient) -> Dict[str, Any]:
    async def fetch(kind: Literal["task", "project"], id: str) -> list[TextContent]:
        if kind == "task":
            resp = await client.get_task(id)
        else:
            resp = await client.get_project(id)
        return relay(resp)

    return {
        "name": "fetch",
        "title": "Fetch Todoist entity",
        "description": "Fetch a Todoist task or project by ID",
        "handler": fetch,
    }
