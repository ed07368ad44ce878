from __future__ import annotations

from todoist_mcp_shim.mcp import sdk_server

"""Launch the shim over MCP stdio.

Use this script if external tooling expects a runnable file instead of the
`todoist-mcp-shim stdio` console entry point.
"""

if __name__ == "__main__":  # pragma: no cover
    sdk_server.run_stdio()
