"""
Stdio transport for MCP clients that spawn the server as a subprocess.

Reads newline-delimited JSON-RPC messages from stdin and writes one response
line per request to stdout. Notifications get no reply and logs go to stderr.
Requests are dispatched as concurrent tasks, so replies may arrive out of
order; clients match them by ``id``.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import stat
import sys
import uuid
from typing import Any, Callable, Dict, Optional, Set

from wallet_mcp import mcp
from wallet_mcp.wallet_api import default_client

logger = logging.getLogger(__name__)

# Upper bound on a single JSON-RPC line read from stdin.
STDIO_LINE_LIMIT = 16 * 1024 * 1024


async def handle_line(line: bytes | str, *, client=None) -> Optional[Dict[str, Any]]:
    """Decode one input line and return the JSON-RPC reply, if any."""
    text = line.decode("utf-8") if isinstance(line, (bytes, bytearray)) else line
    try:
        body = json.loads(text)
    except ValueError:
        return mcp.jsonrpc_error_payload(None, mcp.PARSE_ERROR, "Parse error")
    outcome = await mcp.handle_jsonrpc(body, request_id=str(uuid.uuid4()), client=client)
    if outcome is None:
        return None
    payload, _status = outcome
    return payload


def _encode(reply: Dict[str, Any]) -> bytes:
    return (json.dumps(reply, ensure_ascii=False) + "\n").encode("utf-8")


async def serve(
    reader: asyncio.StreamReader,
    write: Callable[[bytes], None],
    *,
    client=None,
) -> None:
    """
    Process messages from ``reader`` until EOF.

    Each request runs in its own task so a slow tool call does not hold up
    later messages. ``write`` is called from the event loop thread with one
    complete line at a time. Returns once every in-flight request has replied.
    """
    pending: Set[asyncio.Task] = set()

    async def respond(line: bytes) -> None:
        reply = await handle_line(line, client=client)
        if reply is not None:
            write(_encode(reply))

    try:
        while True:
            try:
                line = await reader.readline()
            except ValueError:
                logger.warning("Dropped stdin message longer than the line limit")
                write(_encode(mcp.jsonrpc_error_payload(None, mcp.INVALID_REQUEST, "Request too large")))
                continue
            if not line:
                return
            if not line.strip():
                continue
            task = asyncio.create_task(respond(line))
            pending.add(task)
            task.add_done_callback(pending.discard)
    finally:
        if pending:
            await asyncio.gather(*pending)


def _stdin_is_regular_file() -> bool:
    try:
        return stat.S_ISREG(os.fstat(sys.stdin.fileno()).st_mode)
    except (OSError, ValueError):
        return False


async def open_stdin_reader() -> asyncio.StreamReader:
    """Wrap stdin in a StreamReader; regular files are read on a worker thread."""
    reader = asyncio.StreamReader(limit=STDIO_LINE_LIMIT)
    if _stdin_is_regular_file():
        # connect_read_pipe only accepts pipes, sockets and character devices.
        data = await asyncio.to_thread(sys.stdin.buffer.read)
        reader.feed_data(data)
        reader.feed_eof()
        return reader
    loop = asyncio.get_running_loop()
    protocol = asyncio.StreamReaderProtocol(reader)
    await loop.connect_read_pipe(lambda: protocol, sys.stdin)
    return reader


async def _run() -> None:
    reader = await open_stdin_reader()
    stdout = sys.stdout.buffer

    def write(data: bytes) -> None:
        stdout.write(data)
        stdout.flush()

    logger.info("Wallet MCP stdio server started")
    try:
        await serve(reader, write)
    finally:
        await default_client.aclose()


def run() -> None:
    """Run the stdio server until stdin closes."""
    asyncio.run(_run())
