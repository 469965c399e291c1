#!/usr/bin/env python3
"""
endpoints/tools.py - Direct tool execution without JSON-RPC

POST /tools/{tool_name} with the tool arguments as the JSON body returns the
backend payload itself.
"""

import logging

import orjson
from starlette.requests import Request
from starlette.responses import Response

from ..dispatcher import ToolDispatcher
from ..errors import suggest_tool_name
from .utils import json_response, read_json_body

logger = logging.getLogger(__name__)


class ToolsEndpoint:
    def __init__(self, dispatcher: ToolDispatcher, tool_names: list[str]):
        self.dispatcher = dispatcher
        self.tool_names = tool_names

    async def handle_request(self, request: Request) -> Response:
        tool_name = request.path_params["tool_name"]

        if tool_name not in self.tool_names:
            body = {"success": False, "error": f"Tool not found: {tool_name}", "available": self.tool_names}
            suggestion = suggest_tool_name(tool_name, self.tool_names)
            if suggestion:
                body["suggestion"] = suggestion
            return json_response(body, status_code=404)

        try:
            arguments = await read_json_body(request, empty={})
        except ValueError as e:
            return json_response({"success": False, "error": f"Parse error: {e}"}, status_code=400)
        if not isinstance(arguments, dict):
            return json_response({"success": False, "error": "Arguments must be a JSON object"}, status_code=400)

        logger.info(f"[REST] Executing: {tool_name}")
        envelope = await self.dispatcher.dispatch(tool_name, arguments)
        payload = orjson.loads(envelope["content"][0]["text"])
        return json_response(payload, status_code=500 if envelope.get("isError") else 200)
