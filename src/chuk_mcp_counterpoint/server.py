#!/usr/bin/env python3
"""
Entry point for the CHUK Counterpoint MCP Server.

Supports stdio and http transports. The server keeps its project files
(exercises/, progress/, output/) under the working directory; pass
--project-dir to use another one.
"""

import argparse
import asyncio
import logging
import os
from pathlib import Path

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="CHUK Counterpoint MCP Server")
    parser.add_argument(
        "--transport",
        choices=["stdio", "http"],
        default="stdio",
        help="Transport mode (default: stdio)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="HTTP port (only for http transport)",
    )
    parser.add_argument(
        "--project-dir",
        type=Path,
        default=None,
        help="Directory holding exercises/, progress/ and output/ (default: current directory)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def main() -> None:
    """Parse arguments, then start the server on the chosen transport."""
    args = build_parser().parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.project_dir is not None:
        args.project_dir.mkdir(parents=True, exist_ok=True)
        os.chdir(args.project_dir)
        logger.debug(f"Project directory: {args.project_dir.resolve()}")

    # Paths are resolved at import time, so import after changing directory
    from chuk_mcp_counterpoint.async_server import mcp

    if args.transport == "stdio":
        logger.info("Starting CHUK Counterpoint MCP Server (stdio)")
        asyncio.run(mcp.run_stdio())
    else:
        logger.info(f"Starting CHUK Counterpoint MCP Server (http:{args.port})")
        asyncio.run(mcp.run_http(port=args.port))


if __name__ == "__main__":
    main()
