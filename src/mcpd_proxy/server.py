# Copyright(c) Microsoft Corporation.
# Licensed under the MIT License.

"""mcpd-proxy MCP server implementation."""

import asyncio
import logging
import signal
from typing import Any, Optional

import mcp.server.stdio
import mcp.types as types
from mcp.server import InitializationOptions, Server
from mcp.server.models import ServerCapabilities

from . import __version__
from .aggregation import (
    aggregate_prompts,
    aggregate_resource_templates,
    aggregate_resources,
    aggregate_tools,
)
from .backend_api import DirectoryInterface
from .client import McpdClient
from .config import Config
from .naming import parse_prefixed_name
from .router import Router

logger = logging.getLogger(__name__)

SERVER_NAME: str = "mcpd-proxy"

# Global shutdown event
shutdown_event = asyncio.Event()


def signal_handler(signum: int, frame: Any) -> None:
    """Handle shutdown signals gracefully."""
    signal_name = signal.Signals(signum).name
    logger.info(
        f"Received signal {signal_name} ({signum}), initiating graceful shutdown..."
    )
    shutdown_event.set()


def setup_signal_handlers() -> None:
    """Set up signal handlers for graceful shutdown."""
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    if hasattr(signal, "SIGHUP"):
        signal.signal(signal.SIGHUP, signal_handler)


def _to_tool(tool: dict[str, Any]) -> types.Tool:
    return types.Tool(
        name=tool["name"],
        description=tool.get("description") or f"Tool {tool['name']}",
        inputSchema=tool.get("inputSchema") or {"type": "object", "properties": {}},
    )


def _to_resource(resource: dict[str, Any]) -> types.Resource:
    server = resource["_server_name"]
    local_name = parse_prefixed_name(resource["name"], "resource").name
    return types.Resource(
        uri=resource["uri"],
        name=resource["name"],
        description=resource.get("description")
        or f"Resource {local_name} from {server} server",
        mimeType=resource.get("mimeType"),
    )


def _to_resource_template(template: dict[str, Any]) -> types.ResourceTemplate:
    return types.ResourceTemplate(
        name=template["name"],
        uriTemplate=template["uriTemplate"],
        description=template.get("description"),
        mimeType=template.get("mimeType"),
    )


def create_server(
    config: Config, client: Optional[DirectoryInterface] = None
) -> Server:
    """
    Create the MCP server and register its request handlers.

    A single daemon client is created here (unless one is given) and shared
    by every handler so that its caches survive across requests.

    Args:
        config: Daemon address and credentials.
        client: Directory to use instead of a new ``McpdClient``.

    Returns:
        Server: The configured low-level MCP server.
    """
    directory = client if client is not None else McpdClient.from_config(config)
    router = Router(directory)
    server: Server = Server(SERVER_NAME)

    def to_listed_resource(resource: dict[str, Any]) -> types.Resource:
        listed = _to_resource(resource)
        # The URI as listed may be normalized; reads route back by it.
        router.remember_resource(
            str(listed.uri), resource["_server_name"], resource["_original_uri"]
        )
        return listed

    @server.list_tools()  # type: ignore
    async def handle_list_tools() -> list[types.Tool]:
        """List tools from all healthy servers."""
        return await aggregate_tools(directory, convert=_to_tool)

    @server.list_resources()  # type: ignore
    async def handle_list_resources() -> list[types.Resource]:
        """List resources from all healthy servers."""
        return await aggregate_resources(directory, convert=to_listed_resource)

    @server.list_resource_templates()  # type: ignore
    async def handle_list_resource_templates() -> list[types.ResourceTemplate]:
        """List resource templates from all healthy servers."""
        return await aggregate_resource_templates(
            directory, convert=_to_resource_template
        )

    @server.list_prompts()  # type: ignore
    async def handle_list_prompts() -> list[types.Prompt]:
        """List prompts from all healthy servers."""
        return await aggregate_prompts(directory, convert=types.Prompt.model_validate)

    @server.get_prompt()  # type: ignore
    async def handle_get_prompt(
        name: str, arguments: dict[str, str] | None
    ) -> types.GetPromptResult:
        return await router.get_prompt(name, arguments)

    # tools/call, resources/read and ping are registered directly so results
    # pass through as built by the router.
    async def handle_call_tool(req: types.CallToolRequest) -> types.ServerResult:
        return types.ServerResult(
            await router.call_tool(req.params.name, req.params.arguments)
        )

    async def handle_read_resource(req: types.ReadResourceRequest) -> types.ServerResult:
        return types.ServerResult(await router.read_resource(str(req.params.uri)))

    async def handle_ping(_: types.PingRequest) -> types.ServerResult:
        return types.ServerResult(await router.ping())

    server.request_handlers[types.CallToolRequest] = handle_call_tool
    server.request_handlers[types.ReadResourceRequest] = handle_read_resource
    server.request_handlers[types.PingRequest] = handle_ping

    return server


def initialization_options() -> InitializationOptions:
    return InitializationOptions(
        server_name=SERVER_NAME,
        server_version=__version__,
        capabilities=ServerCapabilities(
            tools=types.ToolsCapability(),
            resources=types.ResourcesCapability(),
            prompts=types.PromptsCapability(),
        ),
    )


async def run(config: Config) -> None:
    """Serve the aggregated MCP surface over stdio until EOF or a signal."""
    setup_signal_handlers()
    server = create_server(config)

    try:
        async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
            server_task = asyncio.create_task(
                server.run(read_stream, write_stream, initialization_options())
            )
            shutdown_task = asyncio.create_task(shutdown_event.wait())

            done, pending = await asyncio.wait(
                [server_task, shutdown_task],
                return_when=asyncio.FIRST_COMPLETED,
            )

            for task in pending:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass

            for task in done:
                exception = task.exception()
                if exception:
                    raise exception

    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
    except Exception as e:
        logger.error(f"Server error: {e}")
        raise
    finally:
        logger.info("mcpd-proxy shutdown complete.")
