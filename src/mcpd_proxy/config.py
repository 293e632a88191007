# Copyright(c) Microsoft Corporation.
# Licensed under the MIT License.

"""Configuration loaded from the environment."""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Default address of the mcpd daemon.
DEFAULT_MCPD_ADDR: str = "http://localhost:8090"

# Default lifetime of cached health snapshots, in seconds.
DEFAULT_HEALTH_CACHE_TTL: float = 10.0

# Default lifetime of the cached server list, in seconds.
DEFAULT_SERVER_CACHE_TTL: float = 60.0

# Default timeout for a single HTTP request to the daemon, in seconds.
DEFAULT_REQUEST_TIMEOUT: float = 30.0


@dataclass
class Config:
    mcpd_addr: str = DEFAULT_MCPD_ADDR
    mcpd_api_key: Optional[str] = None
    health_cache_ttl: float = DEFAULT_HEALTH_CACHE_TTL
    server_cache_ttl: float = DEFAULT_SERVER_CACHE_TTL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e


def load_config() -> Config:
    """
    Load configuration from environment variables.

    A ``.env`` file in the working directory is read first; variables already
    set in the environment take precedence.

    Environment variables:
        MCPD_ADDR: mcpd daemon address (default: http://localhost:8090)
        MCPD_API_KEY: Optional API key for mcpd authentication
        MCPD_HEALTH_CACHE_TTL: Seconds to cache health snapshots (default: 10)
        MCPD_SERVER_CACHE_TTL: Seconds to cache the server list (default: 60)
        MCPD_REQUEST_TIMEOUT: Seconds before a daemon request times out (default: 30)
    """
    load_dotenv()

    return Config(
        mcpd_addr=os.getenv("MCPD_ADDR") or DEFAULT_MCPD_ADDR,
        mcpd_api_key=os.getenv("MCPD_API_KEY"),
        health_cache_ttl=_float_env("MCPD_HEALTH_CACHE_TTL", DEFAULT_HEALTH_CACHE_TTL),
        server_cache_ttl=_float_env("MCPD_SERVER_CACHE_TTL", DEFAULT_SERVER_CACHE_TTL),
        request_timeout=_float_env("MCPD_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
    )
