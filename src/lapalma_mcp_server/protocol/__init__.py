#!/usr/bin/env python3
# src/lapalma_mcp_server/protocol/__init__.py
"""
MCP protocol package.

Re-exports the method router and the streaming session registry.
"""

from .handler import MethodRouter, is_notification
from .session_manager import Session, SessionRegistry

__all__ = [
    "MethodRouter",
    "Session",
    "SessionRegistry",
    "is_notification",
]
