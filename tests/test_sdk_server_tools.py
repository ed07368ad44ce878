import json

import httpx
import pytest
from mcp.server.fastmcp.exceptions import ToolError

from todoist_mcp_shim.config.settings import Settings
from todoist_mcp_shim.mcp.sdk_server import build_server
from todoist_mcp_shim.todoist.client import TodoistClient


def content_of(raw):
    # Some SDK releases return (content, structured) pairs
    if isinstance(raw, tuple):
        raw = raw[0]
    return list(raw)


@pytest.fixture
def server(client):
    return build_server(client, Settings())


@pytest.mark.asyncio
async def test_search_renders_summary_and_links(server, todoist):
    todoist.reply(
        "GET",
        "/tasks/filter",
        body={
            "results": [
                {"id": "1", "content": "Buy milk", "due": {"date": "2025-01-02"}, "project_id": "p1"},
                {"id": "2", "content": "", "due": None, "project_id": "p2"},
            ]
        },
    )
    blocks = content_of(await server.call_tool("search", {"query": "today"}))
    assert blocks[0].type == "text"
    assert blocks[0].text == 'Found 2 task(s) for "today".'
    first, second = blocks[1], blocks[2]
    assert first.type == "resource_link"
    assert str(first.uri) == "todoist://task/1"
    assert first.name == "Buy milk"
    assert first.mimeType == "application/json"
    assert first.description == "2025-01-02 • project p1"
    assert second.name == "task 2"
    assert second.description == "no date • project p2"


@pytest.mark.asyncio
async def test_search_default_limit_is_50(server, todoist):
    todoist.reply("GET", "/tasks/filter", body={"results": []})
    await server.call_tool("search", {"query": "overdue"})
    assert todoist.last.url.params["limit"] == "50"


@pytest.mark.asyncio
async def test_search_without_results_array(server, todoist):
    todoist.reply("GET", "/tasks/filter", body={"unexpected": True})
    blocks = content_of(await server.call_tool("search", {"query": "x", "limit": 5}))
    assert len(blocks) == 1
    assert blocks[0].text == 'Found 0 task(s) for "x".'


@pytest.mark.asyncio
async def test_search_error_passthrough(server, todoist):
    todoist.reply("GET", "/tasks/filter", status=400, body="Invalid filter")
    blocks = content_of(await server.call_tool("search", {"query": "(("}))
    assert [b.text for b in blocks] == ["Todoist error 400: Invalid filter"]


@pytest.mark.asyncio
async def test_search_limit_out_of_range_never_calls_todoist(server, todoist):
    with pytest.raises(ToolError):
        await server.call_tool("search", {"query": "today", "limit": 201})
    with pytest.raises(ToolError):
        await server.call_tool("search", {"query": "today", "limit": 0})
    assert todoist.requests == []


@pytest.mark.asyncio
async def test_fetch_task_returns_raw_json(server, todoist):
    raw = '{"id": "7", "content": "Water plants"}'
    todoist.reply("GET", "/tasks/7", body=raw)
    blocks = content_of(await server.call_tool("fetch", {"kind": "task", "id": "7"}))
    assert [b.text for b in blocks] == [raw]


@pytest.mark.asyncio
async def test_fetch_project_hits_projects_endpoint(server, todoist):
    todoist.reply("GET", "/projects/p3", body={"id": "p3", "name": "Volunteers"})
    blocks = content_of(await server.call_tool("fetch", {"kind": "project", "id": "p3"}))
    assert todoist.last.url.path == "/api/v1/projects/p3"
    assert json.loads(blocks[0].text)["name"] == "Volunteers"


@pytest.mark.asyncio
async def test_fetch_rejects_unknown_kind(server, todoist):
    with pytest.raises(ToolError):
        await server.call_tool("fetch", {"kind": "label", "id": "1"})
    assert todoist.requests == []


@pytest.mark.asyncio
async def test_fetch_error_passthrough(server, todoist):
    todoist.reply("GET", "/tasks/404", status=404, body="Task not found")
    blocks = content_of(await server.call_tool("fetch", {"kind": "task", "id": "404"}))
    assert blocks[0].text == "Todoist error 404: Task not found"


@pytest.mark.asyncio
async def test_add_task_forwards_fields(server, todoist):
    todoist.reply("POST", "/tasks", body={"id": "99", "content": "Call Ann"})
    blocks = content_of(
        await server.call_tool(
            "add-task", {"content": "Call Ann", "project_id": "42", "due_string": "tomorrow"}
        )
    )
    assert json.loads(todoist.last.content) == {
        "content": "Call Ann",
        "project_id": "42",
        "due_string": "tomorrow",
    }
    assert json.loads(blocks[0].text)["id"] == "99"


@pytest.mark.asyncio
async def test_add_task_error_passthrough(server, todoist):
    todoist.reply("POST", "/tasks", status=403, body="Forbidden")
    blocks = content_of(await server.call_tool("add-task", {"content": "x"}))
    assert blocks[0].text == "Todoist error 403: Forbidden"


@pytest.mark.asyncio
async def test_network_failure_becomes_tool_error():
    def boom(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    client = TodoistClient("t", transport=httpx.MockTransport(boom))
    server = build_server(client, Settings())
    with pytest.raises(ToolError):
        await server.call_tool("fetch", {"kind": "task", "id": "1"})
    await client.aclose()


@pytest.mark.asyncio
async def test_search_counts_only_rendered_tasks(server, todoist):
    todoist.reply(
        "GET",
        "/tasks/filter",
        body={"results": [{"id": "1", "content": 42, "project_id": "p1"}, "junk", None]},
    )
    blocks = content_of(await server.call_tool("search", {"query": "all"}))
    assert blocks[0].text == 'Found 1 task(s) for "all".'
    assert len(blocks) == 2
    assert blocks[1].name == "42"
