# Copyright(c) Microsoft Corporation.
# Licensed under the MIT License.

"""
Fan-out aggregation of backend capabilities.

Every healthy server is queried concurrently and the results are merged into
one namespaced list. A server that fails is logged and left out; it never
fails the aggregate.
"""

import asyncio
import logging
from collections.abc import Awaitable, Sequence
from typing import Any, Callable, Optional, TypeVar

from .backend_api import BackendInterface, DirectoryInterface
from .errors import McpdError
from .health import get_healthy_servers
from .naming import encode_name, encode_resource_uri

logger = logging.getLogger(__name__)

T = TypeVar("T")

FetchOne = Callable[[str], Awaitable[list[T]]]
NamespaceItem = Callable[[T, str], Any]
Convert = Callable[[dict[str, Any]], Any]


async def aggregate(
    servers: Sequence[str],
    fetch_one: FetchOne[T],
    namespace_item: NamespaceItem[T],
    kind: str = "items",
) -> list[Any]:
    """
    Fetch items from every server concurrently and namespace the successes.

    Args:
        servers: Servers to query, in the order results should appear.
        fetch_one: Coroutine function returning a server's items.
        namespace_item: Rewrites one item for the owning server.
        kind: Capability kind, used in log messages.

    Returns:
        list: Items from every server that answered, in server order and,
        within a server, in the order the server returned them.
    """

    async def fetch_namespaced(server: str) -> list[Any]:
        items = await fetch_one(server)
        return [namespace_item(item, server) for item in items]

    results = await asyncio.gather(
        *(fetch_namespaced(server) for server in servers), return_exceptions=True
    )

    merged: list[Any] = []
    for server, result in zip(servers, results):
        if isinstance(result, BaseException):
            logger.warning(f"Failed to list {kind} from server '{server}': {result}")
            continue
        merged.extend(result)
    return merged


def namespace_tool(tool: dict[str, Any], server: str) -> dict[str, Any]:
    return {**tool, "name": encode_name(server, tool["name"])}


def namespace_prompt(prompt: dict[str, Any], server: str) -> dict[str, Any]:
    return {**prompt, "name": encode_name(server, prompt["name"])}


def namespace_resource(resource: dict[str, Any], server: str) -> dict[str, Any]:
    # _server_name/_original_uri let callers route without decoding the URI.
    return {
        **resource,
        "name": encode_name(server, resource["name"]),
        "uri": encode_resource_uri(server, resource["uri"]),
        "_server_name": server,
        "_original_uri": resource["uri"],
    }


def namespace_resource_template(
    template: dict[str, Any], server: str
) -> dict[str, Any]:
    return {**template, "name": encode_name(server, template["name"])}


async def _aggregate_kind(
    directory: DirectoryInterface,
    server_names: Optional[Sequence[str]],
    kind: str,
    fetch: Callable[[BackendInterface], Awaitable[list[dict[str, Any]]]],
    namespace_item: NamespaceItem[dict[str, Any]],
    convert: Optional[Convert] = None,
) -> list[Any]:
    try:
        servers = await get_healthy_servers(directory, server_names)
    except McpdError as e:
        logger.error(f"Cannot resolve healthy servers for {kind}: {e}")
        return []

    async def fetch_one(server: str) -> list[dict[str, Any]]:
        return await fetch(directory.server(server))

    def prepare(item: dict[str, Any], server: str) -> Any:
        # Runs inside the server's fan-out branch, so a bad item drops only it.
        namespaced = namespace_item(item, server)
        return convert(namespaced) if convert is not None else namespaced

    return await aggregate(servers, fetch_one, prepare, kind)


async def aggregate_tools(
    directory: DirectoryInterface,
    server_names: Optional[Sequence[str]] = None,
    convert: Optional[Convert] = None,
) -> list[Any]:
    """
    List tools from every healthy server as ``server__tool``.

    ``convert``, when given, is applied to each namespaced tool; a server
    whose items fail conversion is dropped like one that fails to answer.
    """
    return await _aggregate_kind(
        directory,
        server_names,
        "tools",
        lambda backend: backend.list_tools(),
        namespace_tool,
        convert,
    )


async def aggregate_prompts(
    directory: DirectoryInterface,
    server_names: Optional[Sequence[str]] = None,
    convert: Optional[Convert] = None,
) -> list[Any]:
    """List prompts from every healthy server as ``server__prompt``."""
    return await _aggregate_kind(
        directory,
        server_names,
        "prompts",
        lambda backend: backend.list_prompts(),
        namespace_prompt,
        convert,
    )


async def aggregate_resources(
    directory: DirectoryInterface,
    server_names: Optional[Sequence[str]] = None,
    convert: Optional[Convert] = None,
) -> list[Any]:
    """List resources from every healthy server with ``mcpd://`` URIs."""
    return await _aggregate_kind(
        directory,
        server_names,
        "resources",
        lambda backend: backend.list_resources(),
        namespace_resource,
        convert,
    )


async def aggregate_resource_templates(
    directory: DirectoryInterface,
    server_names: Optional[Sequence[str]] = None,
    convert: Optional[Convert] = None,
) -> list[Any]:
    return await _aggregate_kind(
        directory,
        server_names,
        "resource templates",
        lambda backend: backend.list_resource_templates(),
        namespace_resource_template,
        convert,
    )
