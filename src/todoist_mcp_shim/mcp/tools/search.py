from __future__ import annotations

from typing import Annotated, Any, Dict

from mcp.types import ContentBlock
from pydantic import Field

from ...logging import get_logger
from ...todoist.client import TodoistClient
from ._content import task_link, text_block

LOG = get_logger(__name__)

DEFAULT_LIMIT = 50
MAX_LIMIT = 200


def build_search_tool(client: TodoistClient) -> Dict[str, Any]:
    """Tool definition for searching tasks with a Todoist filter.

    Input:
      query (str, required) Todoist filter syntax
      limit (int, optional, default 50, 1..200)
    Output:
      a summary text block followed by one resource link per matching task
    """

    async def search(
        query: Annotated[
            str, Field(description='Todoist filter, e.g. "next 7 days & project: Volunteers"')
        ],
        limit: Annotated[int, Field(ge=1, le=MAX_LIMIT)] = DEFAULT_LIMIT,
    ) -> list[ContentBlock]:
        resp = await client.filter_tasks(query, limit)
        if not resp.ok:
            return [text_block(resp.error_text())]
        data = resp.json()
        results = data.get("results") if isinstance(data, dict) else None
        if not isinstance(results, list):
            results = []
        links: list[ContentBlock] = [task_link(t) for t in results if isinstance(t, dict)]
        LOG.debug("[search] query=%r hits=%d", query, len(links))
        return [text_block(f'Found {len(links)} task(s) for "{query}".'), *links]

    return {
        "name": "search",
        "title": "Search Todoist",
        "description": (
            "Search tasks using Todoist filter syntax "
            "(e.g. 'next 7 days & project: Volunteers')"
        ),
        "handler": search,
    }
