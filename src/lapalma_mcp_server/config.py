#!/usr/bin/env python3
# src/lapalma_mcp_server/config.py
"""
Runtime configuration read from environment variables.
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from .constants import (
    DEFAULT_API_BASE_URL,
    DEFAULT_BACKEND_TIMEOUT,
    DEFAULT_HEARTBEAT_INTERVAL,
    DEFAULT_HOST,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PORT,
    ENV_API_BASE_URL,
    ENV_API_KEY,
    ENV_BACKEND_TIMEOUT,
    ENV_HOST,
    ENV_MCP_LOG_LEVEL,
    ENV_MCP_SERVER_NAME,
    ENV_MCP_SERVER_VERSION,
    ENV_PORT,
    ENV_SSE_HEARTBEAT_INTERVAL,
    LOG_LEVELS,
    SERVER_NAME,
    SERVER_VERSION,
)
from .errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServerConfig:
    """Settings for one gateway process."""

    api_base_url: str = DEFAULT_API_BASE_URL
    api_key: str | None = None
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    server_name: str = SERVER_NAME
    server_version: str = SERVER_VERSION
    log_level: str = DEFAULT_LOG_LEVEL
    backend_timeout: float = DEFAULT_BACKEND_TIMEOUT
    heartbeat_interval: float = DEFAULT_HEARTBEAT_INTERVAL

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ServerConfig":
        """Build a config from ``environ`` (defaults to ``os.environ``)."""
        env = os.environ if environ is None else environ

        config = cls(
            api_base_url=env.get(ENV_API_BASE_URL, DEFAULT_API_BASE_URL).rstrip("/"),
            api_key=env.get(ENV_API_KEY) or None,
            host=env.get(ENV_HOST, DEFAULT_HOST),
            port=_parse_number(env, ENV_PORT, DEFAULT_PORT, int),
            server_name=env.get(ENV_MCP_SERVER_NAME, SERVER_NAME),
            server_version=env.get(ENV_MCP_SERVER_VERSION, SERVER_VERSION),
            log_level=env.get(ENV_MCP_LOG_LEVEL, DEFAULT_LOG_LEVEL).lower(),
            backend_timeout=_parse_number(env, ENV_BACKEND_TIMEOUT, DEFAULT_BACKEND_TIMEOUT, float),
            heartbeat_interval=_parse_number(env, ENV_SSE_HEARTBEAT_INTERVAL, DEFAULT_HEARTBEAT_INTERVAL, float),
        )
        if config.log_level not in LOG_LEVELS:
            raise ConfigError(f"{ENV_MCP_LOG_LEVEL} must be one of {', '.join(LOG_LEVELS)}, got {config.log_level!r}")
        logger.debug(f"Loaded config for {config.server_name} (backend: {config.api_base_url})")
        return config

    def with_overrides(self, **overrides: Any) -> "ServerConfig":
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes) if changes else self


def _parse_number(env: Mapping[str, str], name: str, default: Any, cast: type) -> Any:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value
