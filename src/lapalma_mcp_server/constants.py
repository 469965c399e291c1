#!/usr/bin/env python3
"""
Top-level constants shared across the lapalma_mcp_server package.
"""

from enum import IntEnum

# ---------------------------------------------------------------------------
# JSON-RPC
# ---------------------------------------------------------------------------
JSONRPC_VERSION = "2.0"
JSONRPC_KEY = "jsonrpc"

# JSON-RPC message keys
KEY_METHOD = "method"
KEY_PARAMS = "params"
KEY_ID = "id"
KEY_RESULT = "result"
KEY_ERROR = "error"


class JsonRpcError(IntEnum):
    """Standard JSON-RPC 2.0 error codes."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


# ---------------------------------------------------------------------------
# MCP protocol
# ---------------------------------------------------------------------------
MCP_PROTOCOL_VERSION = "2024-11-05"
NOTIFICATION_PREFIX = "notifications/"


# MCP method names
class McpMethod:
    INITIALIZE = "initialize"
    INITIALIZED = "notifications/initialized"
    PING = "ping"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"
    PROMPTS_LIST = "prompts/list"
    RESOURCES_LIST = "resources/list"


# MCP message keys
KEY_PROTOCOL_VERSION = "protocolVersion"
KEY_SERVER_INFO = "serverInfo"
KEY_CAPABILITIES = "capabilities"
KEY_TOOLS = "tools"
KEY_NAME = "name"
KEY_ARGUMENTS = "arguments"


# ---------------------------------------------------------------------------
# Content types
# ---------------------------------------------------------------------------
CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_SSE = "text/event-stream"


# ---------------------------------------------------------------------------
# HTTP headers
# ---------------------------------------------------------------------------
HEADER_API_KEY = "X-API-Key"
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_SESSION_ID = "X-Session-Id"
CORS_ALLOW_ALL = "*"


# ---------------------------------------------------------------------------
# Streaming transport
# ---------------------------------------------------------------------------
SSE_PATH = "/sse"
MESSAGE_PATH = "/message"
QUERY_SESSION_ID = "sessionId"
MAX_SESSION_ID_LENGTH = 128

SSE_EVENT_ENDPOINT = "endpoint"
SSE_EVENT_CONNECTED = "connected"
SSE_EVENT_PING = "ping"
SSE_EVENT_MESSAGE = "message"

DEFAULT_HEARTBEAT_INTERVAL = 30.0


# ---------------------------------------------------------------------------
# Environment variables
# ---------------------------------------------------------------------------
ENV_API_BASE_URL = "API_BASE_URL"
ENV_API_KEY = "API_KEY"
ENV_HOST = "HOST"
ENV_PORT = "PORT"
ENV_MCP_SERVER_NAME = "MCP_SERVER_NAME"
ENV_MCP_SERVER_VERSION = "MCP_SERVER_VERSION"
ENV_MCP_LOG_LEVEL = "MCP_LOG_LEVEL"
ENV_BACKEND_TIMEOUT = "BACKEND_TIMEOUT"
ENV_SSE_HEARTBEAT_INTERVAL = "SSE_HEARTBEAT_INTERVAL"


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
DEFAULT_API_BASE_URL = "https://admin.la-palma24.net"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000
DEFAULT_ENCODING = "utf-8"
DEFAULT_LOG_LEVEL = "info"
DEFAULT_BACKEND_TIMEOUT = 30.0
DEFAULT_LANGUAGE = "es"


# ---------------------------------------------------------------------------
# Server identity
# ---------------------------------------------------------------------------
SERVER_NAME = "lapalma24-propiedades"
SERVER_VERSION = "1.0.0"
SERVER_TITLE = "MCP Server - La Palma 24 Propiedades Vacacionales"


# ---------------------------------------------------------------------------
# Transports
# ---------------------------------------------------------------------------
TRANSPORT_HTTP = "http"
TRANSPORT_SSE = "sse"
TRANSPORT_STDIO = "stdio"


# ---------------------------------------------------------------------------
# Logging level strings
# ---------------------------------------------------------------------------
LOG_LEVELS = ["debug", "info", "warning", "error", "critical"]
