from __future__ import annotations

from typing import Any

from mcp.types import ResourceLink, TextContent

from ...todoist.client import TodoistResponse

TASK_URI_PREFIX = "todoist://task/"


def text_block(text: str) -> TextContent:
    return TextContent(type="text", text=text)


def relay(resp: TodoistResponse) -> list[TextContent]:
    """Wrap a Todoist reply as a single text block, error or not."""
    if not resp.ok:
        return [text_block(resp.error_text())]
    return [text_block(resp.text)]


def task_link(task: dict[str, Any]) -> ResourceLink:
    task_id = task.get("id")
    due = task.get("due") or {}
    date = due.get("date") if isinstance(due, dict) else None
    return ResourceLink(
        type="resource_link",
        uri=f"{TASK_URI_PREFIX}{task_id}",
        name=str(task.get("content") or f"task {task_id}"),
        mimeType="application/json",
        description=f"{date if date is not None else 'no date'} • project {task.get('project_id')}",
    )
