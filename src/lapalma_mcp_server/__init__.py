#!/usr/bin/env python3
"""
lapalma_mcp_server - MCP gateway for the La Palma 24 vacation rentals API

Exposes rental search, pricing and listing operations as MCP tools over
synchronous HTTP, a session-bound SSE stream or stdio:

    from lapalma_mcp_server import ServerConfig, create_app

    app = create_app(ServerConfig.from_env(), transport="sse")
"""

from .app import create_app, create_router
from .backend import BackendClient
from .catalog import TOOL_CATALOG, ToolDescriptor
from .config import ServerConfig
from .dispatcher import TOOL_BINDINGS, ToolBinding, ToolDispatcher
from .protocol import MethodRouter, SessionRegistry

__version__ = "1.0.0"
__all__ = [
    "TOOL_BINDINGS",
    "TOOL_CATALOG",
    "BackendClient",
    "MethodRouter",
    "ServerConfig",
    "SessionRegistry",
    "ToolBinding",
    "ToolDescriptor",
    "ToolDispatcher",
    "create_app",
    "create_router",
]
