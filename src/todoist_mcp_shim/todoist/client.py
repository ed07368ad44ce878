"""Async client for the handful of Todoist REST endpoints the shim forwards to.

Each method issues exactly one request and hands back the status and raw body
text untouched. Deciding what a non-2xx status means is left to the caller.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from ..config.settings import TodoistSettings
from ..logging import get_logger

LOG = get_logger(__name__)


@dataclass(frozen=True)
class TodoistResponse:
    status_code: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        return json.loads(self.text)

    def error_text(self) -> str:
        return f"Todoist error {self.status_code}: {self.text}"


class TodoistClient:
    def __init__(
        self,
        token: str,
        api_url: str = "https://api.todoist.com/api/v1",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.api_url,
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls, settings: TodoistSettings, transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "TodoistClient":
        return cls(
            settings.require_token(),
            api_url=settings.api_url,
            timeout=settings.timeout,
            transport=transport,
        )

    async def _request(self, method: str, path: str, **kwargs: Any) -> TodoistResponse:
        LOG.debug("[todoist] %s %s", method, path)
        try:
            r = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError:
            LOG.error("[todoist] request failed %s %s", method, path, exc_info=True)
            raise
        resp = TodoistResponse(r.status_code, r.text)
        if not resp.ok:
            LOG.warning("[todoist] %s %s -> %s", method, path, r.status_code)
        return resp

    async def filter_tasks(self, query: str, limit: int = 50) -> TodoistResponse:
        return await self._request(
            "GET", "/tasks/filter", params={"query": query, "limit": str(limit)}
        )

    async def get_task(self, task_id: str) -> TodoistResponse:
        return await self._request("GET", f"/tasks/{task_id}")

    async def get_project(self, project_id: str) -> TodoistResponse:
        return await self._request("GET", f"/projects/{project_id}")

    async def add_task(
        self,
        content: str,
        project_id: Optional[str] = None,
        due_string: Optional[str] = None,
    ) -> TodoistResponse:
        body: dict[str, Any] = {"content": content}
        if project_id is not None:
            body["project_id"] = project_id
        if due_string is not None:
            body["due_string"] = due_string
        return await self._request("POST", "/tasks", json=body)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "TodoistClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
