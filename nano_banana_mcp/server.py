"""MCP server exposing the ``generate_image`` tool over stdio."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Sequence

from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from . import __version__
from .config import Settings
from .gemini import GeminiImageClient
from .tool import GENERATE_IMAGE_TOOL, TOOL_NAME, error_result, handle_generate_image
from .utils import load_dotenv

SERVER_NAME = "mcp-nano-banana"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger(__name__)


async def dispatch_tool(
    name: str, arguments: dict[str, Any] | None, settings: Settings | None = None
) -> types.CallToolResult:
    if name == TOOL_NAME:
        # Settings are read per call so a missing key is reported, not fatal.
        client = GeminiImageClient(settings or Settings.from_env())
        return await handle_generate_image(client, arguments)
    logger.warning("Unknown tool requested: %s", name)
    return error_result(f"Unknown tool: {name}")


def create_server() -> Server:
    server: Server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [GENERATE_IMAGE_TOOL]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> types.CallToolResult:
        return await dispatch_tool(name, arguments)

    return server


async def serve() -> None:
    server = create_server()
    async with stdio_server() as (read_stream, write_stream):
        logger.info("Nano Banana MCP server running on stdio")
        await server.run(read_stream, write_stream, server.create_initialization_options())


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nano-banana-mcp",
        description="Serve Gemini image generation as an MCP tool over stdio.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level for stderr output (default: INFO).",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to a .env file to load before serving.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    load_dotenv(args.env_file)
    configure_logging(args.log_level)
    try:
        asyncio.run(serve())
    except KeyboardInterrupt:
        return 130
    return 0
