from __future__ import annotations

from typing import Any, Dict, Optional

from mcp.types import TextContent

from ...todoist.client import TodoistClient
from ._content import relay


def build_add_task_tool(client: TodoistClient) -> Dict[str, Any]:
    """Tool definition for creating a task.

    Optional fields left unset are omitted from the request body so Todoist
    applies its own defaults (inbox project, no due date).
    """

    async def add_task(
        content: str,
        project_id: Optional[str] = None,
        due_string: Optional[str] = None,
    ) -> list[TextContent]:
        resp = await client.add_task(content, project_id=project_id, due_string=due_string)
        return relay(resp)

    return {
        "name": "add-task",
        "title": "Add task",
        "description": "Create a new Todoist task",
        "handler": add_task,
    }
