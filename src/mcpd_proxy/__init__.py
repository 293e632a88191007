# Copyright(c) Microsoft Corporation.
# Licensed under the MIT License.

"""mcpd-proxy - One MCP server in front of every mcpd-managed server"""

__version__ = "0.1.0"

from .aggregation import (  # noqa: E402
    aggregate,
    aggregate_prompts,
    aggregate_resource_templates,
    aggregate_resources,
    aggregate_tools,
)
from .client import McpdClient  # noqa: E402
from .config import Config, load_config  # noqa: E402
from .health import get_healthy_servers  # noqa: E402
from .router import Router  # noqa: E402
from .server import create_server  # noqa: E402

__all__ = [
    "Config",
    "McpdClient",
    "Router",
    "aggregate",
    "aggregate_prompts",
    "aggregate_resource_templates",
    "aggregate_resources",
    "aggregate_tools",
    "create_server",
    "get_healthy_servers",
    "load_config",
]
