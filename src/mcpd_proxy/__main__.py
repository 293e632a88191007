# Copyright(c) Microsoft Corporation.
# Licensed under the MIT License.

"""Command-line entry point for mcpd-proxy."""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from . import __version__
from .config import load_config
from .server import run

logger = logging.getLogger("mcpd_proxy")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        description="Expose all mcpd-managed MCP servers through a single stdio MCP server"
    )
    ap.add_argument("--addr", help="mcpd daemon address (overrides MCPD_ADDR)")
    ap.add_argument("--api-key", help="mcpd API key (overrides MCPD_API_KEY)")
    ap.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    return ap.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> None:
    args = parse_args(argv)

    # stdout carries the MCP protocol; logs go to stderr.
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s.%(msecs)03d - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )

    config = load_config()
    if args.addr:
        config.mcpd_addr = args.addr
    if args.api_key is not None:
        config.mcpd_api_key = args.api_key

    logger.info("=" * 60)
    logger.info(f"mcpd-proxy v{__version__}")
    logger.info("=" * 60)
    logger.info(f"mcpd daemon: {config.mcpd_addr}")
    logger.info(f"API key: {'***configured***' if config.mcpd_api_key else 'not set'}")
    logger.info("=" * 60)

    try:
        asyncio.run(run(config))
    except Exception as e:
        logger.error(f"Failed to start: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
