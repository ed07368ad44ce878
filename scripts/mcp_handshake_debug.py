#!/usr/bin/env python
"""Handshake debug against a running shim over streamable HTTP.

Sends the connector probe (GET /mcp), an initialize request, the initialized
notification and tools/list, printing status, timing and the headers that
matter for browser-based connectors (session id, CORS).

    MCP_URL=http://localhost:8787/mcp python scripts/mcp_handshake_debug.py
"""

from __future__ import annotations
import asyncio
import json
import os
import time

import httpx

MCP_URL = os.environ.get("MCP_URL", "http://localhost:8787/mcp")
ORIGIN = os.environ.get("MCP_ORIGIN", "https://example.invalid")
# Deliberately only application/json; the shim completes the Accept header
ACCEPT = os.environ.get("MCP_ACCEPT", "application/json")

INIT_REQ = {
    "jsonrpc": "2.0",
    "id": 1,
    "method": "initialize",
    "params": {
        "protocolVersion": "2025-03-26",
        "capabilities": {},
        "clientInfo": {"name": "debug-handshake", "version": "0.0.1"},
    },
}
INITIALIZED_NOTE = {"jsonrpc": "2.0", "method": "notifications/initialized"}
LIST_REQ = {"jsonrpc": "2.0", "id": 2, "method": "tools/list", "params": {}}

INTERESTING = ("mcp-session-id", "access-control-allow-origin", "access-control-expose-headers")


def _show(label: str, r: httpx.Response, t0: float) -> None:
    hdrs = {k: r.headers[k] for k in INTERESTING if k in r.headers}
    print(f"[{label}+{time.time() - t0:0.3f}s] status={r.status_code} headers={hdrs}")
    print(f"    {r.text[:500]}")


async def main():
    t0 = time.time()
    base_headers = {"Origin": ORIGIN, "Accept": ACCEPT, "Content-Type": "application/json"}
    async with httpx.AsyncClient(timeout=15) as client:
        r = await client.get(MCP_URL, headers={"Origin": ORIGIN})
        _show("probe", r, t0)

        r = await client.post(MCP_URL, headers=base_headers, content=json.dumps(INIT_REQ))
        _show("initialize", r, t0)
        session_id = r.headers.get("mcp-session-id")
        if not session_id:
            print("[handshake] no session id returned; aborting")
            return
        headers = {**base_headers, "Mcp-Session-Id": session_id}

        r = await client.post(MCP_URL, headers=headers, content=json.dumps(INITIALIZED_NOTE))
        _show("initialized", r, t0)

        r = await client.post(MCP_URL, headers=headers, content=json.dumps(LIST_REQ))
        _show("tools/list", r, t0)

        r = await client.delete(MCP_URL, headers=headers)
        _show("delete", r, t0)


if __name__ == "__main__":
    asyncio.run(main())
