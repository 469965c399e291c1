#!/usr/bin/env python3
"""
app.py - Application factory

Builds the shared router/dispatcher pair and mounts it behind the requested
HTTP transport.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.routing import Route

from .backend import BackendClient
from .catalog import TOOL_CATALOG, tool_names
from .config import ServerConfig
from .constants import CORS_ALLOW_ALL, HEADER_SESSION_ID, MESSAGE_PATH, SSE_PATH, TRANSPORT_HTTP, TRANSPORT_SSE
from .dispatcher import Backend, ToolDispatcher
from .endpoints import InfoEndpoint, MCPEndpoint, SSEEndpoint, ToolsEndpoint, health_endpoint
from .protocol import MethodRouter, SessionRegistry

logger = logging.getLogger(__name__)


def create_backend(config: ServerConfig) -> BackendClient:
    return BackendClient(config.api_base_url, api_key=config.api_key, timeout=config.backend_timeout)


def create_router(config: ServerConfig, backend: Backend) -> MethodRouter:
    """Wire dispatcher and router around a backend client."""
    dispatcher = ToolDispatcher(backend)
    return MethodRouter(
        dispatcher,
        tools=TOOL_CATALOG,
        server_name=config.server_name,
        server_version=config.server_version,
    )


def create_app(
    config: ServerConfig | None = None,
    transport: str = TRANSPORT_HTTP,
    backend: BackendClient | None = None,
) -> Starlette:
    """Create the Starlette application for the ``http`` or ``sse`` transport."""
    if transport not in (TRANSPORT_HTTP, TRANSPORT_SSE):
        raise ValueError(f"Unsupported HTTP transport: {transport}")

    config = config or ServerConfig.from_env()
    backend = backend or create_backend(config)
    router = create_router(config, backend)
    registry = SessionRegistry(heartbeat_interval=config.heartbeat_interval)

    info = InfoEndpoint(router, transport)
    tools = ToolsEndpoint(router.dispatcher, tool_names())

    routes = [
        Route("/", info.handle_request, methods=["GET"]),
        Route("/health", health_endpoint, methods=["GET"]),
        Route("/tools/{tool_name}", tools.handle_request, methods=["POST"]),
    ]
    if transport == TRANSPORT_HTTP:
        routes.append(Route("/", MCPEndpoint(router).handle_request, methods=["POST"]))
    else:
        sse = SSEEndpoint(router, registry)
        routes += [
            Route(SSE_PATH, sse.handle_stream, methods=["GET"]),
            Route(MESSAGE_PATH, sse.handle_message, methods=["POST"]),
            Route(MESSAGE_PATH, sse.handle_options, methods=["OPTIONS"]),
        ]

    middleware = [
        Middleware(
            CORSMiddleware,
            allow_origins=[CORS_ALLOW_ALL],
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["Content-Type", "Authorization", HEADER_SESSION_ID],
            expose_headers=[HEADER_SESSION_ID],
        )
    ]

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        logger.info(f"{config.server_name} v{config.server_version} starting ({transport} transport)")
        for tool in router.tools:
            logger.info(f"  tool: {tool.name}")
        try:
            yield
        finally:
            closed = registry.close_all()
            if closed:
                logger.info(f"Closed {closed} open session(s) on shutdown")
            await backend.aclose()

    app = Starlette(routes=routes, middleware=middleware, lifespan=lifespan)
    app.state.router = router
    app.state.registry = registry
    app.state.transport = transport
    return app
