#!/usr/bin/env python3
"""
endpoints/info.py - Discovery endpoint

GET / describes the server, its transport and the tools it exposes.
"""

from typing import Any

from starlette.requests import Request
from starlette.responses import Response

from ..constants import MCP_PROTOCOL_VERSION, MESSAGE_PATH, SERVER_TITLE, SSE_PATH, TRANSPORT_SSE
from ..protocol import MethodRouter
from .utils import json_response


class InfoEndpoint:
    def __init__(self, router: MethodRouter, transport: str):
        self.router = router
        self.transport = transport

    def server_info(self) -> dict[str, Any]:
        if self.transport == TRANSPORT_SSE:
            endpoints = {"sse": SSE_PATH, "message": MESSAGE_PATH, "health": "/health"}
        else:
            endpoints = {"mcp": "/", "health": "/health"}

        return {
            "name": SERVER_TITLE,
            "version": self.router.server_version,
            "protocol": "mcp",
            "transport": self.transport,
            "protocolVersion": MCP_PROTOCOL_VERSION,
            "endpoints": endpoints,
            "tools": [{"name": tool.name, "description": tool.description} for tool in self.router.tools],
        }

    async def handle_request(self, request: Request) -> Response:
        return json_response(self.server_info())
