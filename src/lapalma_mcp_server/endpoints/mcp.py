#!/usr/bin/env python3
"""
endpoints/mcp.py - Synchronous MCP-over-HTTP endpoint

One POST body is one JSON-RPC message; the response frame is returned as the
HTTP response body. No session state.
"""

import logging

from starlette.requests import Request
from starlette.responses import Response

from ..constants import JSONRPC_KEY, JSONRPC_VERSION, KEY_ERROR, KEY_ID, KEY_METHOD, JsonRpcError
from ..errors import error_object
from ..protocol import MethodRouter
from .utils import json_response, jsonrpc_status, read_json_body

logger = logging.getLogger(__name__)


class MCPEndpoint:
    """POST / handler for the synchronous transport."""

    def __init__(self, router: MethodRouter):
        self.router = router

    async def handle_request(self, request: Request) -> Response:
        try:
            message = await read_json_body(request)
        except ValueError as e:
            logger.warning(f"Rejected unparseable body: {e}")
            return json_response(
                {
                    JSONRPC_KEY: JSONRPC_VERSION,
                    KEY_ID: None,
                    KEY_ERROR: error_object(JsonRpcError.PARSE_ERROR, f"Parse error: {e}"),
                },
                status_code=400,
            )

        method = message.get(KEY_METHOD) if isinstance(message, dict) else None
        logger.info(f"[HTTP-MCP] Received: {method or 'no method'}")

        response = await self.router.handle_message(message)
        if response is None:
            # Notifications are acknowledged without a JSON-RPC frame
            return Response(status_code=202)

        return json_response(response, status_code=jsonrpc_status(response))
