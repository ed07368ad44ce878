import json

import httpx
import pytest

from todoist_mcp_shim.todoist.client import TodoistClient

API_URL = "https://api.todoist.test/api/v1"


class FakeTodoist:
    """Records outbound requests and answers them from canned replies."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._replies: dict[tuple[str, str], httpx.Response] = {}

    def reply(self, method: str, path: str, status: int = 200, body=None) -> None:
        if isinstance(body, (dict, list)):
            body = json.dumps(body)
        self._replies[(method, "/api/v1" + path)] = httpx.Response(status, text=body or "")

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        resp = self._replies.get((request.method, request.url.path))
        if resp is None:
            return httpx.Response(404, text="not stubbed")
        return resp

    @property
    def last(self) -> httpx.Request:
        assert self.requests, "no request reached Todoist"
        return self.requests[-1]


@pytest.fixture
def todoist():
    return FakeTodoist()


@pytest.fixture
def client(todoist):
    return TodoistClient(
        "test-token", api_url=API_URL, transport=httpx.MockTransport(todoist.handler)
    )
