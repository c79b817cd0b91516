"""
MCP Stdio Transport

Architectural Intent:
- JSON-RPC over stdin/stdout transport layer for MCP protocol
- Routes MCP methods to an MCPServer instance
- stdout carries protocol traffic only; diagnostics go to stderr via logging

Framing:
- Newline-delimited JSON, one message per line (MCP stdio framing)
- Content-Length framed messages are also accepted; each response uses the
  framing of the request it answers
- A newline frame longer than the reader limit is dropped and answered
  with a parse error; the loop keeps reading

Concurrency:
- Messages are read in order, but each request is handled in its own task,
  so a slow NCP call does not block unrelated requests
- On EOF or shutdown the loop waits for in-flight requests before returning

MCP Integration:
- Handles initialize/initialized handshake and ping
- Routes tools/list, tools/call
- Graceful shutdown on shutdown request or exit notification
"""

import json
import sys
import asyncio
import logging
from typing import Any, Optional

from ncloud_mcp.infrastructure.mcp_servers.ncloud_server import MCPServer

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"
MCP_PROTOCOL_VERSION = "2025-06-18"
SUPPORTED_PROTOCOL_VERSIONS = ("2024-11-05", "2025-03-26", "2025-06-18")

FRAMING_NEWLINE = "newline"
FRAMING_CONTENT_LENGTH = "content-length"

# JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# Line limit for the stdin reader; asyncio's 64 KiB default is too small
# for large tool arguments
MAX_MESSAGE_BYTES = 16 * 1024 * 1024


class OversizedMessageError(ValueError):
    """A newline-framed message exceeded the reader's line limit.

    The oversized line has already been discarded from the stream.
    """


def _encode_message(obj: dict[str, Any], framing: str = FRAMING_NEWLINE) -> bytes:
    """Encode a JSON-RPC message in the given framing."""
    body = json.dumps(obj, ensure_ascii=False).encode("utf-8")
    if framing == FRAMING_CONTENT_LENGTH:
        header = f"Content-Length: {len(body)}\r\n\r\n".encode("ascii")
        return header + body
    return body + b"\n"


def _parse_header(header_data: bytes) -> int:
    """Parse Content-Length from header bytes. Returns content length."""
    header_str = header_data.decode("ascii")
    for line in header_str.splitlines():
        line = line.strip()
        if line.lower().startswith("content-length:"):
            return int(line.split(":", 1)[1].strip())
    raise ValueError("Missing Content-Length header")


async def _read_message(
    reader: asyncio.StreamReader,
) -> Optional[tuple[bytes, str]]:
    """Read the raw body of a single message and the framing it arrived in.

    Returns None on EOF.

    Raises:
        OversizedMessageError: if a line is longer than the reader's limit.
    """
    # Skip blank lines between messages
    while True:
        try:
            line = await reader.readline()
        except ValueError as e:
            # readline() drops the oversized chunk before raising
            raise OversizedMessageError(str(e)) from e
        if not line:
            return None
        if line.strip():
            break

    if not line.lower().startswith(b"content-length:"):
        return line.strip(), FRAMING_NEWLINE

    header_bytes = line
    while True:
        more = await reader.readline()
        if not more:
            return None
        if not more.strip():
            break
        header_bytes += more

    content_length = _parse_header(header_bytes)
    body = await reader.readexactly(content_length)
    return body, FRAMING_CONTENT_LENGTH


def _make_response(id: Any, result: Any) -> dict[str, Any]:
    """Create a JSON-RPC success response."""
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": id,
        "result": result,
    }


def _make_error(id: Any, code: int, message: str, data: Any = None) -> dict[str, Any]:
    """Create a JSON-RPC error response."""
    error: dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": id,
        "error": error,
    }


async def _handle_initialize(
    server: MCPServer, params: dict[str, Any]
) -> dict[str, Any]:
    """Handle the initialize request, returning server capabilities."""
    requested = params.get("protocolVersion")
    version = requested if requested in SUPPORTED_PROTOCOL_VERSIONS else MCP_PROTOCOL_VERSION
    return {
        "protocolVersion": version,
        "capabilities": {
            "tools": {"listChanged": False},
        },
        "serverInfo": {
            "name": server.name,
            "version": server.version,
        },
    }


async def _handle_tools_list(
    server: MCPServer, params: dict[str, Any]
) -> dict[str, Any]:
    """Handle tools/list request."""
    tools = await server.list_tools()
    return {"tools": [t.to_dict() for t in tools]}


async def _handle_tools_call(
    server: MCPServer, params: dict[str, Any]
) -> dict[str, Any]:
    """Handle tools/call request. Tool failures come back as isError results."""
    name = params.get("name", "")
    arguments = params.get("arguments")
    return await server.call_tool(name, arguments)


async def _handle_ping(server: MCPServer, params: dict[str, Any]) -> dict[str, Any]:
    return {}


# Method dispatch table
_METHOD_HANDLERS = {
    "initialize": _handle_initialize,
    "ping": _handle_ping,
    "tools/list": _handle_tools_list,
    "tools/call": _handle_tools_call,
}

# Notifications that should be silently acknowledged (no response)
_NOTIFICATIONS = {"notifications/initialized", "notifications/cancelled"}


async def _dispatch(
    server: MCPServer, message: Any
) -> Optional[dict[str, Any]]:
    """Dispatch a JSON-RPC message and return the response, or None for notifications."""
    if not isinstance(message, dict):
        return _make_error(None, INVALID_REQUEST, "Invalid Request")

    method = message.get("method", "")
    msg_id = message.get("id")
    params = message.get("params") or {}

    # Notifications have no id and require no response
    if msg_id is None:
        if method not in _NOTIFICATIONS and method not in ("shutdown", "exit"):
            logger.debug("Ignoring unknown notification: %s", method)
        return None

    if method == "shutdown":
        return _make_response(msg_id, {})

    handler = _METHOD_HANDLERS.get(method)
    if handler is None:
        return _make_error(msg_id, METHOD_NOT_FOUND, f"Method not found: {method}")

    if not isinstance(params, dict):
        return _make_error(msg_id, INVALID_PARAMS, "params must be an object")

    try:
        result = await handler(server, params)
        return _make_response(msg_id, result)
    except Exception as e:
        logger.exception("Error handling %s", method)
        return _make_error(msg_id, INTERNAL_ERROR, f"Internal error: {e}")


async def run_stdio(
    server: MCPServer,
    reader: Optional[asyncio.StreamReader] = None,
    writer: Optional[asyncio.StreamWriter] = None,
    limit: int = MAX_MESSAGE_BYTES,
) -> None:
    """Run the MCP server using stdio JSON-RPC transport.

    Args:
        server: The MCPServer instance to serve.
        reader: Optional StreamReader (defaults to stdin).
        writer: Optional StreamWriter (defaults to stdout).
        limit: Line limit for the stdin reader built when reader is None.
    """
    if reader is None:
        loop = asyncio.get_running_loop()
        _reader = asyncio.StreamReader(limit=limit)
        await loop.connect_read_pipe(
            lambda: asyncio.StreamReaderProtocol(_reader), sys.stdin.buffer
        )
        reader = _reader

    write_lock = asyncio.Lock()
    pending: set[asyncio.Task] = set()

    async def send(response: dict[str, Any], framing: str) -> None:
        data = _encode_message(response, framing)
        async with write_lock:
            if writer is not None:
                writer.write(data)
                await writer.drain()
            else:
                sys.stdout.buffer.write(data)
                sys.stdout.buffer.flush()

    async def respond(message: dict[str, Any], framing: str) -> None:
        response = await _dispatch(server, message)
        if response is not None:
            await send(response, framing)

    while True:
        try:
            raw = await _read_message(reader)
        except OversizedMessageError as e:
            logger.warning("Dropped oversized message on stdin: %s", e)
            await send(
                _make_error(None, PARSE_ERROR, f"Parse error: message too large ({e})"),
                FRAMING_NEWLINE,
            )
            continue
        except (asyncio.IncompleteReadError, ValueError) as e:
            logger.error("Unreadable frame on stdin, closing: %s", e)
            break

        if raw is None:
            break  # EOF

        body, framing = raw
        try:
            message = json.loads(body.decode("utf-8"))
        except ValueError as e:
            await send(_make_error(None, PARSE_ERROR, f"Parse error: {e}"), framing)
            continue

        method = message.get("method", "") if isinstance(message, dict) else ""

        if method in ("shutdown", "exit"):
            if pending:
                await asyncio.gather(*pending)
            await respond(message, framing)
            break

        task = asyncio.create_task(respond(message, framing))
        pending.add(task)
        task.add_done_callback(pending.discard)

    if pending:
        await asyncio.gather(*pending)
