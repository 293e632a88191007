# Copyright(c) Microsoft Corporation.
# Licensed under the MIT License.

from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import requests

from . import api_paths
from .backend_api import BackendInterface, DirectoryInterface, ErrorModel, ServerHealth
from .config import (
    DEFAULT_HEALTH_CACHE_TTL,
    DEFAULT_MCPD_ADDR,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_SERVER_CACHE_TTL,
    Config,
)
from .errors import (
    AuthenticationError,
    McpdConnectionError,
    McpdError,
    McpdTimeoutError,
    ServerNotFoundError,
    ServerUnhealthyError,
    ToolExecutionError,
    ToolNotFoundError,
)

logger = logging.getLogger(__name__)

_SERVERS_CACHE_KEY: str = "servers"
_HEALTH_CACHE_KEY: str = "health"


@dataclass
class McpdClient(DirectoryInterface):
    """
    Thin client for the mcpd daemon HTTP API.

    A single instance is meant to be shared by every request so that the
    server list and health snapshot caches are effective.

    Methods:
        - list_servers()
        - get_health()
        - server(name)
        - clear_cache()
    """

    api_endpoint: str = DEFAULT_MCPD_ADDR
    api_key: Optional[str] = None
    health_cache_ttl: float = DEFAULT_HEALTH_CACHE_TTL
    server_cache_ttl: float = DEFAULT_SERVER_CACHE_TTL
    timeout: float = DEFAULT_REQUEST_TIMEOUT
    _cache: dict[str, tuple[float, Any]] = field(
        default_factory=dict, init=False, repr=False
    )

    @classmethod
    def from_config(cls, config: Config) -> McpdClient:
        return cls(
            api_endpoint=config.mcpd_addr,
            api_key=config.mcpd_api_key,
            health_cache_ttl=config.health_cache_ttl,
            server_cache_ttl=config.server_cache_ttl,
            timeout=config.request_timeout,
        )

    def __post_init__(self) -> None:
        self._session = requests.Session()
        self._session.headers.update({"Accept": "application/json"})
        if self.api_key:
            self._session.headers.update({"Authorization": f"Bearer {self.api_key}"})

    # --------------------------------------------------------------------------
    # Helpers
    # --------------------------------------------------------------------------

    def _url(self, path: str) -> str:
        if not path.startswith("/"):
            path = "/" + path
        return self.api_endpoint.rstrip("/") + path

    def _request(
        self, method: str, path: str, *, body: Optional[Any] = None
    ) -> requests.Response:
        try:
            resp = self._session.request(
                method, self._url(path), json=body, timeout=self.timeout
            )
        except requests.Timeout as e:
            raise McpdTimeoutError(f"{method} {path}", self.timeout) from e
        except requests.ConnectionError as e:
            raise McpdConnectionError(
                f"Cannot connect to mcpd daemon at {self.api_endpoint}: {e}"
            ) from e
        except requests.RequestException as e:
            raise McpdError(f"{method} {path} failed: {e}") from e

        if resp.status_code in (401, 403):
            raise AuthenticationError(
                f"Authentication failed for {method} {path} (HTTP {resp.status_code})"
            )
        return resp

    def _parse_json(self, resp: requests.Response) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise McpdError(
                f"Expected JSON from {resp.request.method} {resp.request.url}, "
                f"got status {resp.status_code} and non-JSON body: {resp.text[:200]}"
            ) from e

    def _error_model(self, resp: requests.Response) -> Optional[ErrorModel]:
        try:
            body = resp.json()
        except ValueError:
            return None
        if not isinstance(body, dict):
            return None
        return ErrorModel.model_validate(body)

    def _check_status(
        self, resp: requests.Response, server_name: Optional[str] = None
    ) -> None:
        if 200 <= resp.status_code < 300:
            return
        if resp.status_code == 404 and server_name is not None:
            raise ServerNotFoundError(server_name)
        model = self._error_model(resp)
        detail = json.dumps(model.model_dump(), indent=2) if model else resp.text
        raise McpdError(
            f"HTTP {resp.status_code} for {resp.request.method} {resp.request.url}\n{detail}"
        )

    def _get_json(self, path: str, server_name: Optional[str] = None) -> Any:
        resp = self._request("GET", path)
        self._check_status(resp, server_name)
        return self._parse_json(resp)

    def _post_json(
        self, path: str, body: Any, server_name: Optional[str] = None
    ) -> Any:
        resp = self._request("POST", path, body=body)
        self._check_status(resp, server_name)
        return self._parse_json(resp)

    def _get_items(self, path: str, key: str, server_name: str) -> list[dict[str, Any]]:
        """GET a listing endpoint; servers without support for it yield []."""
        resp = self._request("GET", path)
        if resp.status_code == 501:
            logger.debug(f"Server '{server_name}' does not implement {path}")
            return []
        self._check_status(resp, server_name)
        data = self._parse_json(resp)
        if isinstance(data, dict):
            data = data.get(key, [])
        return list(data or [])

    def _cached(self, key: str, ttl: float, loader: Callable[[], Any]) -> Any:
        now = time.monotonic()
        entry = self._cache.get(key)
        if entry is not None and now - entry[0] < ttl:
            return entry[1]
        value = loader()
        if ttl > 0:
            self._cache[key] = (now, value)
        return value

    def _load_servers(self) -> list[str]:
        data = self._get_json(api_paths.SERVERS)
        if isinstance(data, dict):
            data = data.get("servers", [])
        return [str(name) for name in data]

    def _load_health(self) -> dict[str, ServerHealth]:
        data = self._get_json(api_paths.HEALTH_SERVERS)
        if isinstance(data, dict):
            data = data.get("servers", [])
        health = [ServerHealth.model_validate(entry) for entry in data]
        return {entry.name: entry for entry in health}

    # --------------------------------------------------------------------------
    # Public API
    # --------------------------------------------------------------------------

    async def list_servers(self) -> list[str]:
        """GET /api/v1/servers -> list of server names (cached)."""
        return await asyncio.to_thread(
            self._cached, _SERVERS_CACHE_KEY, self.server_cache_ttl, self._load_servers
        )

    async def get_health(self) -> dict[str, ServerHealth]:
        """GET /api/v1/health/servers -> {name: ServerHealth} (cached)."""
        return await asyncio.to_thread(
            self._cached, _HEALTH_CACHE_KEY, self.health_cache_ttl, self._load_health
        )

    def clear_cache(self) -> None:
        self._cache.clear()

    def server(self, name: str) -> McpdServer:
        return McpdServer(self, name)


class McpdServer(BackendInterface):
    """A backend server as seen through the daemon."""

    def __init__(self, client: McpdClient, name: str) -> None:
        self._client = client
        self.name = name

    async def _ensure_healthy(self) -> None:
        health = await self._client.get_health()
        entry = health.get(self.name)
        if entry is None:
            raise ServerNotFoundError(self.name)
        if not entry.is_ok:
            raise ServerUnhealthyError(self.name, entry.status)

    async def list_tools(self) -> list[dict[str, Any]]:
        return await asyncio.to_thread(
            self._client._get_items,
            api_paths.server_tools(self.name),
            "tools",
            self.name,
        )

    async def list_prompts(self) -> list[dict[str, Any]]:
        return await asyncio.to_thread(
            self._client._get_items,
            api_paths.server_prompts(self.name),
            "prompts",
            self.name,
        )

    async def list_resources(self) -> list[dict[str, Any]]:
        return await asyncio.to_thread(
            self._client._get_items,
            api_paths.server_resources(self.name),
            "resources",
            self.name,
        )

    async def list_resource_templates(self) -> list[dict[str, Any]]:
        return await asyncio.to_thread(
            self._client._get_items,
            api_paths.resource_templates(self.name),
            "templates",
            self.name,
        )

    def _invoke_tool(self, tool_name: str, arguments: dict[str, Any]) -> Any:
        resp = self._client._request(
            "POST", api_paths.tool_call(self.name, tool_name), body=arguments
        )
        if not 200 <= resp.status_code < 300:
            model = self._client._error_model(resp)
            message = (
                (model.detail or model.title) if model else ""
            ) or f"HTTP {resp.status_code}"
            raise ToolExecutionError(message, self.name, tool_name, model)
        return self._client._parse_json(resp)

    def _tool_names(self) -> set[str]:
        return {
            tool.get("name")
            for tool in self._client._get_items(
                api_paths.server_tools(self.name), "tools", self.name
            )
        }

    async def _has_tool(self, name: str) -> bool:
        key = f"tools:{self.name}"
        ttl = self._client.server_cache_ttl
        names = await asyncio.to_thread(self._client._cached, key, ttl, self._tool_names)
        if name in names:
            return True
        # The listing may predate the tool; refresh once before rejecting.
        self._client._cache.pop(key, None)
        names = await asyncio.to_thread(self._client._cached, key, ttl, self._tool_names)
        return name in names

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> Any:
        await self._ensure_healthy()
        if not await self._has_tool(name):
            raise ToolNotFoundError(self.name, name)
        return await asyncio.to_thread(self._invoke_tool, name, arguments)

    async def read_resource(self, uri: str) -> list[dict[str, Any]]:
        await self._ensure_healthy()
        data = await asyncio.to_thread(
            self._client._get_json, api_paths.resource_content(self.name, uri), self.name
        )
        if isinstance(data, dict):
            data = data.get("contents", [])
        return list(data or [])

    async def generate_prompt(
        self, name: str, arguments: Optional[dict[str, str]] = None
    ) -> dict[str, Any]:
        await self._ensure_healthy()
        return await asyncio.to_thread(
            self._client._post_json,
            api_paths.prompt_get(self.name, name),
            {"arguments": arguments or {}},
            self.name,
        )
