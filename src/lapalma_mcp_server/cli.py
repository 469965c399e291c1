#!/usr/bin/env python3
# src/lapalma_mcp_server/cli.py
"""
CLI entry point for the La Palma 24 MCP gateway.

Runs the server with one of three transports: ``http`` (one JSON-RPC message
per POST), ``sse`` (session-bound event stream) or ``stdio``.
"""

import argparse
import logging
import sys

import uvicorn

from .app import create_app, create_backend, create_router
from .config import ServerConfig
from .constants import LOG_LEVELS, TRANSPORT_HTTP, TRANSPORT_SSE, TRANSPORT_STDIO
from .errors import ConfigError
from .stdio_transport import run_stdio_server

logger = logging.getLogger(__name__)


def setup_logging(level: str = "info") -> None:
    """Log to stderr so stdout stays free for stdio frames."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lapalma24-mcp",
        description="MCP gateway for the La Palma 24 vacation rentals API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Synchronous MCP over HTTP on port 3000
  lapalma24-mcp http

  # Streaming transport (GET /sse + POST /message)
  lapalma24-mcp sse --port 8080

  # stdio, for local MCP clients
  API_KEY=... lapalma24-mcp stdio
        """,
    )
    parser.add_argument(
        "transport",
        nargs="?",
        choices=[TRANSPORT_HTTP, TRANSPORT_SSE, TRANSPORT_STDIO],
        default=TRANSPORT_STDIO,
        help="Transport to serve (default: stdio)",
    )
    parser.add_argument("--host", help="Host to bind to (HTTP transports)")
    parser.add_argument("--port", type=int, help="Port to bind to (HTTP transports)")
    parser.add_argument("--log-level", choices=LOG_LEVELS, help="Logging level")
    parser.add_argument("--debug", action="store_true", help="Shortcut for --log-level debug")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    args = create_parser().parse_args(argv)

    try:
        config = ServerConfig.from_env().with_overrides(
            host=args.host,
            port=args.port,
            log_level="debug" if args.debug else args.log_level,
        )
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(2)

    setup_logging(config.log_level)

    if args.transport == TRANSPORT_STDIO:
        run_stdio_server(create_router(config, create_backend(config)))
        return

    app = create_app(config, transport=args.transport)
    logger.info(f"Serving {args.transport} transport on http://{config.host}:{config.port}")
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level)


if __name__ == "__main__":
    main()
