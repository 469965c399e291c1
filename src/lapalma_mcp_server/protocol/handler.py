#!/usr/bin/env python3
# src/lapalma_mcp_server/protocol/handler.py
"""
JSON-RPC method router - the MCP semantics shared by every transport.
"""

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

from ..catalog import TOOL_CATALOG, ToolDescriptor
from ..constants import (
    JSONRPC_KEY,
    JSONRPC_VERSION,
    KEY_ARGUMENTS,
    KEY_CAPABILITIES,
    KEY_ERROR,
    KEY_ID,
    KEY_METHOD,
    KEY_NAME,
    KEY_PARAMS,
    KEY_PROTOCOL_VERSION,
    KEY_RESULT,
    KEY_SERVER_INFO,
    KEY_TOOLS,
    MCP_PROTOCOL_VERSION,
    NOTIFICATION_PREFIX,
    SERVER_NAME,
    SERVER_VERSION,
    JsonRpcError,
    McpMethod,
)
from ..dispatcher import ToolDispatcher
from ..errors import InvalidParamsError, error_object

logger = logging.getLogger(__name__)


def is_notification(message: Any) -> bool:
    """A message without an ``id`` key never gets a response."""
    return isinstance(message, dict) and KEY_ID not in message


class MethodRouter:
    """Turn one decoded JSON-RPC message into a response, or ``None``.

    :meth:`handle_message` never raises (cancellation excepted): internal
    failures become ``-32603`` error responses.
    """

    def __init__(
        self,
        dispatcher: ToolDispatcher,
        tools: Sequence[ToolDescriptor] = TOOL_CATALOG,
        server_name: str = SERVER_NAME,
        server_version: str = SERVER_VERSION,
    ):
        self.dispatcher = dispatcher
        self.tools = tuple(tools)
        self.server_name = server_name
        self.server_version = server_version

    def get_tools_list(self) -> list[dict[str, Any]]:
        """Get list of tools in MCP format."""
        return [tool.to_mcp_format() for tool in self.tools]

    async def handle_message(self, message: Any) -> dict[str, Any] | None:
        msg_id = message.get(KEY_ID) if isinstance(message, dict) else None
        notification = is_notification(message)

        try:
            # Envelope check precedes dispatch, notifications included
            if not isinstance(message, dict) or message.get(JSONRPC_KEY) != JSONRPC_VERSION:
                return self._create_error_response(
                    msg_id, JsonRpcError.INVALID_REQUEST, 'Invalid Request: jsonrpc must be "2.0"'
                )

            method = message.get(KEY_METHOD)
            params = message.get(KEY_PARAMS)

            if not isinstance(method, str):
                if notification:
                    logger.debug("Ignoring notification without method")
                    return None
                return self._create_error_response(
                    msg_id, JsonRpcError.INVALID_REQUEST, "Invalid Request: method must be a string"
                )

            logger.debug(f"Handling {method} (ID: {msg_id})")

            if method == McpMethod.INITIALIZED:
                logger.info("Client finished initialization")
                return None
            if method.startswith(NOTIFICATION_PREFIX):
                logger.info(f"Notification received: {method}")
                return None

            if method == McpMethod.INITIALIZE:
                result = self._handle_initialize()
            elif method == McpMethod.PING:
                result = {}
            elif method == McpMethod.TOOLS_LIST:
                result = {KEY_TOOLS: self.get_tools_list()}
                logger.debug(f"Returning {len(self.tools)} tools")
            elif method == McpMethod.TOOLS_CALL:
                result = await self._handle_tools_call(params)
            elif method == McpMethod.PROMPTS_LIST:
                result = {"prompts": []}
            elif method == McpMethod.RESOURCES_LIST:
                result = {"resources": []}
            else:
                if notification:
                    logger.debug(f"Ignoring unknown notification-shaped message: {method}")
                    return None
                logger.warning(f"Method not found: {method}")
                return self._create_error_response(
                    msg_id, JsonRpcError.METHOD_NOT_FOUND, f"Method not found: {method}"
                )

            if notification:
                return None
            return {JSONRPC_KEY: JSONRPC_VERSION, KEY_ID: msg_id, KEY_RESULT: result}

        except asyncio.CancelledError:
            raise  # Never swallow cancellation
        except InvalidParamsError as e:
            logger.warning(f"Invalid params: {e}")
            if notification:
                return None
            return self._create_error_response(msg_id, e.code, f"Invalid params: {e}")
        except Exception as e:
            logger.error(f"Error handling request: {e}", exc_info=True)
            if notification:
                return None
            return self._create_error_response(msg_id, JsonRpcError.INTERNAL_ERROR, "Internal error", str(e))

    def _handle_initialize(self) -> dict[str, Any]:
        logger.info("Initialize OK")
        return {
            KEY_PROTOCOL_VERSION: MCP_PROTOCOL_VERSION,
            KEY_CAPABILITIES: {KEY_TOOLS: {}},
            KEY_SERVER_INFO: {"name": self.server_name, "version": self.server_version},
        }

    async def _handle_tools_call(self, params: Any) -> dict[str, Any]:
        if params is None:
            params = {}
        if not isinstance(params, dict):
            raise InvalidParamsError(f"params must be an object, got {type(params).__name__}")

        name = params.get(KEY_NAME)
        if not isinstance(name, str):
            raise InvalidParamsError("tool name must be a string")

        arguments = params.get(KEY_ARGUMENTS)
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise InvalidParamsError(f"arguments must be an object, got {type(arguments).__name__}")

        logger.info(f"Executing tool: {name}")
        return await self.dispatcher.dispatch(name, arguments)

    @staticmethod
    def _create_error_response(msg_id: Any, code: int, message: str, data: Any = None) -> dict[str, Any]:
        return {JSONRPC_KEY: JSONRPC_VERSION, KEY_ID: msg_id, KEY_ERROR: error_object(code, message, data)}
