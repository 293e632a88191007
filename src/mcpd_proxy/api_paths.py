# Copyright(c) Microsoft Corporation.
# Licensed under the MIT License.

"""Endpoint paths of the mcpd daemon HTTP API."""

from urllib.parse import quote

API_BASE: str = "/api/v1"
SERVERS_BASE: str = f"{API_BASE}/servers"
HEALTH_BASE: str = f"{API_BASE}/health"

SERVERS: str = SERVERS_BASE
HEALTH_SERVERS: str = f"{HEALTH_BASE}/servers"


def _segment(value: str) -> str:
    return quote(value, safe="")


def server_tools(server_name: str) -> str:
    return f"{SERVERS_BASE}/{_segment(server_name)}/tools"


def tool_call(server_name: str, tool_name: str) -> str:
    return f"{server_tools(server_name)}/{_segment(tool_name)}"


def server_prompts(server_name: str) -> str:
    return f"{SERVERS_BASE}/{_segment(server_name)}/prompts"


def prompt_get(server_name: str, prompt_name: str) -> str:
    return f"{server_prompts(server_name)}/{_segment(prompt_name)}"


def server_resources(server_name: str) -> str:
    return f"{SERVERS_BASE}/{_segment(server_name)}/resources"


def resource_templates(server_name: str) -> str:
    return f"{server_resources(server_name)}/templates"


def resource_content(server_name: str, uri: str) -> str:
    return f"{server_resources(server_name)}/content?uri={_segment(uri)}"
