# Copyright(c) Microsoft Corporation.
# Licensed under the MIT License.

import json
import logging
from typing import Any, Optional

import mcp.types as types
from mcp.shared.exceptions import McpError

from .backend_api import DirectoryInterface
from .naming import (
    NameFormatError,
    ParsedResourceUri,
    parse_prefixed_name,
    parse_resource_uri,
)
from .translation import error_result, translate_error

logger = logging.getLogger(__name__)


class Router:
    """Routes single-target requests to the backend owning the identifier."""

    def __init__(self, directory: DirectoryInterface) -> None:
        self._directory = directory
        # Listed resource URI, as the client sees it, to its backend origin.
        self._resource_routes: dict[str, ParsedResourceUri] = {}

    def remember_resource(self, listed_uri: str, server: str, original_uri: str) -> None:
        """Record where a listed resource came from so reads forward it verbatim."""
        self._resource_routes[listed_uri] = ParsedResourceUri(server, original_uri)

    async def call_tool(
        self, full_name: str, arguments: Optional[dict[str, Any]] = None
    ) -> types.CallToolResult:
        """
        Invoke ``server__tool`` on its backend.

        Failures, including a malformed name, are returned as an error result
        rather than raised.
        """
        try:
            parsed = parse_prefixed_name(full_name, "tool")
            result = await self._directory.server(parsed.server).call_tool(
                parsed.name, arguments or {}
            )
        except Exception as e:
            logger.warning(f"Tool call '{full_name}' failed: {e!r}")
            return error_result(e, full_name)

        return types.CallToolResult(
            content=[types.TextContent(type="text", text=json.dumps(result, indent=2))]
        )

    async def read_resource(self, uri: str) -> types.ReadResourceResult:
        """
        Read an ``mcpd://server/original`` resource from its backend.

        Raises:
            McpError: With the translated diagnostic when the read fails.
        """
        try:
            parsed = self._resource_routes.get(uri) or parse_resource_uri(uri)
            contents = await self._directory.server(parsed.server).read_resource(
                parsed.original_uri
            )
            return types.ReadResourceResult.model_validate({"contents": contents})
        except NameFormatError as e:
            raise McpError(types.ErrorData(code=types.INVALID_PARAMS, message=str(e))) from e
        except Exception as e:
            logger.warning(f"Reading resource '{uri}' failed: {e!r}")
            message = translate_error(e, uri, "resource")
            raise McpError(types.ErrorData(code=types.INTERNAL_ERROR, message=message)) from e

    async def get_prompt(
        self, full_name: str, arguments: Optional[dict[str, str]] = None
    ) -> types.GetPromptResult:
        """
        Generate ``server__prompt`` on its backend.

        Raises:
            McpError: With the translated diagnostic when generation fails.
        """
        try:
            parsed = parse_prefixed_name(full_name, "prompt")
            result = await self._directory.server(parsed.server).generate_prompt(
                parsed.name, arguments
            )
            return types.GetPromptResult.model_validate(
                {
                    "description": result.get("description"),
                    "messages": result.get("messages") or [],
                }
            )
        except NameFormatError as e:
            raise McpError(types.ErrorData(code=types.INVALID_PARAMS, message=str(e))) from e
        except Exception as e:
            logger.warning(f"Prompt '{full_name}' failed: {e!r}")
            message = translate_error(e, full_name, "prompt")
            raise McpError(types.ErrorData(code=types.INTERNAL_ERROR, message=message)) from e

    async def ping(self) -> types.EmptyResult:
        # Directory failures propagate: reporting them is what ping is for.
        await self._directory.get_health()
        return types.EmptyResult()
