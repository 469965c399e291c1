#!/usr/bin/env python3
"""HTTP endpoints for the synchronous and streaming transports."""

from .health import health_endpoint
from .info import InfoEndpoint
from .mcp import MCPEndpoint
from .sse import SSEEndpoint, format_event
from .tools import ToolsEndpoint

__all__ = [
    "InfoEndpoint",
    "MCPEndpoint",
    "SSEEndpoint",
    "ToolsEndpoint",
    "format_event",
    "health_endpoint",
]
