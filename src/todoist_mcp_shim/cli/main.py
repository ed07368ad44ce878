from __future__ import annotations

import asyncio
import json

import click
import uvicorn
from mcp.server.fastmcp.exceptions import ToolError

from ..config.settings import MissingTokenError, Settings, get_settings
from ..logging import configure_logging, get_logger
from ..mcp.http_app import create_app
from ..mcp.sdk_server import build_server, run_stdio
from ..todoist.client import TodoistClient

LOG = get_logger("todoist_mcp_shim.cli")


def _load_settings(**overrides) -> Settings:
    settings = get_settings()
    updates = {k: v for k, v in overrides.items() if v is not None}
    if updates:
        settings = settings.model_copy(update=updates)
    configure_logging(settings.log_level)
    return settings


def _fail_missing_token(err: MissingTokenError) -> None:
    LOG.error("[ERROR] %s", err)
    raise SystemExit(1)


def _render(block) -> str:
    if getattr(block, "type", None) == "resource_link":
        return f"{block.uri}  {block.name}  ({block.description})"
    return getattr(block, "text", str(block))


@click.group()
def cli():
    """Todoist MCP shim CLI"""


@cli.command()
@click.option("--host", default=None, help="Bind address (default: HOST or 0.0.0.0)")
@click.option("--port", type=int, default=None, help="Listen port (default: PORT or 8787)")
@click.option("--json-response/--sse", "json_response", default=None, help="Reply framing")
def serve(host: str | None, port: int | None, json_response: bool | None):
    """Serve the tools over streamable HTTP at /mcp."""
    settings = _load_settings(host=host, port=port, json_response=json_response)
    try:
        app = create_app(settings)
    except MissingTokenError as e:
        _fail_missing_token(e)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


@cli.command()
def stdio():
    """Serve the tools over MCP stdio."""
    run_stdio(_load_settings())


@cli.command()
def tools():
    """List the registered tools."""
    settings = _load_settings()

    async def _run():
        # Listing never reaches Todoist, so a token is not needed
        client = TodoistClient(settings.todoist.token or "", api_url=settings.todoist.api_url)
        try:
            server = build_server(client, settings)
            for t in await server.list_tools():
                click.echo(f"{t.name}: {t.description}")
        finally:
            await client.aclose()

    asyncio.run(_run())


@cli.command()
@click.argument("name", type=str)
@click.option("--args", "raw_args", default="{}", help="Tool arguments as a JSON object")
def call(name: str, raw_args: str):
    """Invoke one tool once and print its content blocks."""
    try:
        arguments = json.loads(raw_args)
    except ValueError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint="--args")
    if not isinstance(arguments, dict):
        raise click.BadParameter("must be a JSON object", param_hint="--args")
    settings = _load_settings()
    try:
        client = TodoistClient.from_settings(settings.todoist)
    except MissingTokenError as e:
        _fail_missing_token(e)

    async def _run():
        async with client:
            server = build_server(client, settings)
            return await server.call_tool(name, arguments)

    try:
        result = asyncio.run(_run())
    except ToolError as e:
        raise click.ClickException(str(e))
    # Newer SDKs return (content, structured) pairs
    if isinstance(result, tuple):
        result = result[0]
    for block in result:
        click.echo(_render(block))


if __name__ == "__main__":
    cli()
