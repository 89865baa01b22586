"""Bridges between the synchronous Flask routes and async code."""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any, TypeVar

from fastmcp import Client as MCPClient

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _failed(url: str, error: str) -> dict[str, Any]:
    logger.warning(f"⚠️ MCP server {url} unreachable: {error}")
    return {"url": url, "status": "failed", "error": error}


async def _probe(client: MCPClient, url: str) -> dict[str, Any]:
    async with client:
        tools = await client.list_tools() or []
        info = client.initialize_result.serverInfo if client.initialize_result else None
    return {
        "url": url,
        "status": "connected",
        "tools": [tool.name for tool in tools],
        "server_name": info.name if info else None,
    }


async def check_mcp_server(url: str, timeout: float = 5.0) -> dict[str, Any]:
    """Connect to the MCP server at ``url`` and list what it offers.

    Never raises. A reachable server yields ``status="connected"`` with its
    tool names and, when the handshake reports one, its ``server_name``.
    Anything else yields ``status="failed"`` and an ``error`` string.
    """
    try:
        async with asyncio.timeout(timeout):
            return await _probe(MCPClient(url), url)
    except TimeoutError:
        return _failed(url, f"Connection timeout ({timeout}s)")
    except Exception as e:
        return _failed(url, str(e))


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Drive ``coro`` to completion on a private event loop.

    Each call gets its own loop, which is closed (default executor included)
    before returning, so Flask worker threads never share loop state.
    """
    with asyncio.Runner() as runner:
        return runner.run(coro)
