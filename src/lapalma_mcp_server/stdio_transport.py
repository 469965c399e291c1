#!/usr/bin/env python3
# src/lapalma_mcp_server/stdio_transport.py
"""
STDIO Transport - MCP over newline-delimited JSON on stdin/stdout.

Intended for a single local client (e.g. a desktop assistant or the MCP
inspector). Logs must go to stderr; stdout carries protocol frames only.
"""

import asyncio
import logging
import sys
from typing import Any, TextIO

import orjson

from .constants import DEFAULT_ENCODING, JSONRPC_KEY, JSONRPC_VERSION, KEY_ERROR, KEY_ID, JsonRpcError
from .errors import error_object
from .protocol import MethodRouter

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 4096
MAX_LINE_BYTES = 16 * 1024 * 1024


class StdioTransport:
    """Handle MCP protocol communication over stdio."""

    max_line_bytes = MAX_LINE_BYTES

    def __init__(self, router: MethodRouter) -> None:
        self.router = router
        self.reader: asyncio.StreamReader | None = None
        self.writer: TextIO | None = None
        self.running = False

    async def start(self) -> None:
        """Attach to the process's stdin/stdout and serve until EOF."""
        self.running = True

        loop = asyncio.get_running_loop()
        self.reader = asyncio.StreamReader()
        protocol = asyncio.StreamReaderProtocol(self.reader)
        await loop.connect_read_pipe(lambda: protocol, sys.stdin)
        self.writer = sys.stdout

        await self._listen()

    async def _listen(self) -> None:
        """Read newline-delimited messages until stdin closes.

        stdin is consumed in chunks, so no line length limit of the reader
        applies. A line longer than ``max_line_bytes`` is dropped with a
        parse error and reading resumes after its newline.
        """
        buffer = b""
        discarding = False

        while self.running and self.reader is not None:
            chunk = await self.reader.read(READ_CHUNK_SIZE)
            if not chunk:
                break
            buffer += chunk

            while b"\n" in buffer:
                raw, buffer = buffer.split(b"\n", 1)
                if discarding:
                    discarding = False
                    continue
                await self._handle_line(raw)

            if len(buffer) > self.max_line_bytes:
                if not discarding:
                    logger.warning(f"Dropping stdio message over {self.max_line_bytes} bytes")
                    await self._send_error(None, JsonRpcError.PARSE_ERROR, "Parse error: message too large")
                discarding = True
                buffer = b""

        if self.running and buffer.strip() and not discarding:
            await self._handle_line(buffer)

    async def _handle_line(self, raw: bytes) -> None:
        try:
            line = raw.decode(DEFAULT_ENCODING).strip()
        except UnicodeDecodeError as e:
            logger.debug(f"Undecodable stdio message: {e}")
            await self._send_error(None, JsonRpcError.PARSE_ERROR, f"Parse error: {e}")
            return
        if line:
            await self._handle_message(line)

    async def _handle_message(self, line: str) -> None:
        """Parse one line, route it and write the response, if any."""
        try:
            message = orjson.loads(line)
        except orjson.JSONDecodeError as e:
            logger.debug(f"Invalid JSON in stdio message: {e}")
            await self._send_error(None, JsonRpcError.PARSE_ERROR, f"Parse error: {e}")
            return

        response = await self.router.handle_message(message)
        if response is not None:
            await self._send_response(response)

    async def _send_response(self, response: dict[str, Any]) -> None:
        if self.writer is None:
            return
        try:
            self.writer.write(orjson.dumps(response).decode(DEFAULT_ENCODING) + "\n")
            self.writer.flush()
        except (OSError, ValueError) as e:
            logger.error(f"Failed to write stdio response: {e}")
            self.running = False

    async def _send_error(self, request_id: Any, code: int, message: str) -> None:
        await self._send_response(
            {JSONRPC_KEY: JSONRPC_VERSION, KEY_ID: request_id, KEY_ERROR: error_object(code, message)}
        )

    async def stop(self) -> None:
        self.running = False
        if self.reader is not None:
            self.reader.feed_eof()


def run_stdio_server(router: MethodRouter) -> None:
    """Run the MCP server in stdio mode until stdin closes."""

    async def _run() -> None:
        transport = StdioTransport(router)
        try:
            await transport.start()
        finally:
            await transport.stop()
            await router.dispatcher.backend.aclose()

    logger.info("MCP server started in stdio mode")
    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        logger.info("stdio server interrupted")
