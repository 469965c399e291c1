#!/usr/bin/env python3
"""
endpoints/sse.py - Streaming MCP transport (Server-Sent Events)

GET /sse opens an event stream bound to a session. Clients inject JSON-RPC
messages with POST /message?sessionId=...; those requests are acknowledged
with 202 at once and the router's answer arrives later as a ``message`` event
on the session's stream.
"""

import logging
from collections.abc import AsyncIterator
from typing import Any
from urllib.parse import quote

import orjson
from starlette.background import BackgroundTask
from starlette.requests import Request
from starlette.responses import Response, StreamingResponse

from ..constants import (
    CONTENT_TYPE_SSE,
    HEADER_SESSION_ID,
    KEY_ID,
    KEY_METHOD,
    MESSAGE_PATH,
    QUERY_SESSION_ID,
    SSE_EVENT_CONNECTED,
    SSE_EVENT_ENDPOINT,
    SSE_EVENT_MESSAGE,
)
from ..errors import DuplicateSessionError
from ..protocol import MethodRouter, SessionRegistry
from ..protocol.session_manager import utc_timestamp
from .utils import json_response, read_json_body

logger = logging.getLogger(__name__)


def format_event(event: str, data: Any) -> str:
    """Frame one SSE event."""
    payload = data if isinstance(data, str) else orjson.dumps(data).decode()
    return f"event: {event}\ndata: {payload}\n\n"


class SSEEndpoint:
    """Streaming transport: session-bound event stream plus message injection."""

    def __init__(self, router: MethodRouter, registry: SessionRegistry):
        self.router = router
        self.registry = registry

    # ------------------------------------------------------------------
    # GET /sse
    # ------------------------------------------------------------------

    async def handle_stream(self, request: Request) -> Response:
        session_id = request.query_params.get(QUERY_SESSION_ID)
        if session_id and not self.registry.is_valid_id(session_id):
            logger.warning("Refusing stream with invalid client session id")
            return json_response({"error": "Invalid sessionId"}, status_code=400)
        session_id = session_id or self.registry.generate_id()
        if session_id in self.registry:
            logger.warning(f"Refusing second stream for open session {session_id[:8]}...")
            return json_response({"error": "Session already open"}, status_code=409)

        return StreamingResponse(
            self._event_stream(session_id),
            media_type=CONTENT_TYPE_SSE,
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "X-Accel-Buffering": "no",
                HEADER_SESSION_ID: session_id,
            },
        )

    async def _event_stream(self, session_id: str) -> AsyncIterator[str]:
        """Yield SSE frames until the client disconnects or the session closes.

        The session is opened on the first iteration and closed when the
        generator exits for any reason (including cancellation on disconnect).
        """
        try:
            with self.registry.session(session_id) as session:
                yield format_event(SSE_EVENT_ENDPOINT, f"{MESSAGE_PATH}?{QUERY_SESSION_ID}={quote(session.id, safe='')}")
                yield format_event(
                    SSE_EVENT_CONNECTED,
                    {
                        "status": "connected",
                        "server": self.router.server_name,
                        "sessionId": session.id,
                        "timestamp": utc_timestamp(),
                    },
                )

                while True:
                    item = await session.next_event()
                    if item is None:
                        break
                    event, data = item
                    yield format_event(event, data)
        except DuplicateSessionError as e:
            logger.warning(str(e))
            yield format_event("error", {"error": str(e)})

    # ------------------------------------------------------------------
    # POST /message
    # ------------------------------------------------------------------

    async def handle_message(self, request: Request) -> Response:
        session_id = request.query_params.get(QUERY_SESSION_ID) or request.headers.get(HEADER_SESSION_ID)
        if not session_id:
            return json_response({"error": "Missing sessionId"}, status_code=400)

        if self.registry.get(session_id) is None:
            logger.info(f"Message for unknown session {session_id[:8]}...")
            return json_response({"error": "Session not found"}, status_code=404)

        try:
            message = await read_json_body(request)
        except ValueError as e:
            return json_response({"error": f"Parse error: {e}"}, status_code=400)

        method = message.get(KEY_METHOD) if isinstance(message, dict) else None
        logger.info(f"[{session_id[:8]}] Received: {method}")

        response = json_response({"status": "accepted"}, status_code=202)
        response.background = BackgroundTask(self._process_message, session_id, message)
        return response

    async def _process_message(self, session_id: str, message: Any) -> None:
        """Route ``message`` and write any answer onto the session's stream."""
        response = await self.router.handle_message(message)
        if response is None:
            return
        if not self.registry.send(session_id, SSE_EVENT_MESSAGE, response):
            msg_id = message.get(KEY_ID) if isinstance(message, dict) else None
            logger.warning(f"Response to {msg_id!r} lost: session {session_id[:8]}... closed")

    async def handle_options(self, request: Request) -> Response:
        return Response(status_code=204)
