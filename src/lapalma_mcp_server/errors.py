"""
Structured error types for the La Palma 24 MCP gateway.

Protocol-level failures are expressed as JSON-RPC error objects by the router;
the exceptions below describe failures of the collaborators behind it.
"""

from difflib import get_close_matches
from typing import Any

from .constants import JsonRpcError


class GatewayError(Exception):
    """Base class for every error raised inside the gateway."""


class ConfigError(GatewayError):
    """Invalid configuration value."""


class BackendError(GatewayError):
    """A call to the rentals backend could not be completed."""


class BackendResponseError(BackendError):
    """The backend answered with a non-2xx status."""

    def __init__(self, status: int, status_text: str):
        self.status = status
        self.status_text = status_text
        super().__init__(f"API Error: {status} {status_text}")


class ToolArgumentError(GatewayError):
    """A tool call is missing an argument its backend binding needs."""


class SessionError(GatewayError):
    """Base class for streaming session errors."""


class DuplicateSessionError(SessionError):
    """A session with the requested identifier is already open."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session already open: {session_id}")


class SessionClosedError(SessionError):
    """Write attempted on a channel that has been closed."""


class InvalidParamsError(GatewayError):
    """JSON-RPC params do not have the shape a method requires."""

    code = JsonRpcError.INVALID_PARAMS


def suggest_tool_name(tool_name: str, available_tools: list[str]) -> str | None:
    """Find the closest matching tool name using fuzzy matching."""
    matches = get_close_matches(tool_name, available_tools, n=1, cutoff=0.6)
    return matches[0] if matches else None


def describe_exception(exc: BaseException) -> str:
    """Render an exception as ``<Type>: <message>`` for error payloads."""
    message = str(exc)
    return f"{type(exc).__name__}: {message}" if message else type(exc).__name__


def error_object(code: int, message: str, data: Any = None) -> dict[str, Any]:
    """Build a JSON-RPC error object."""
    error: dict[str, Any] = {"code": int(code), "message": message}
    if data is not None:
        error["data"] = data
    return error
