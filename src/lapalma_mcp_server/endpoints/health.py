#!/usr/bin/env python3
"""
endpoints/health.py - Health check endpoint for load balancers.
"""

from starlette.requests import Request
from starlette.responses import Response

from ..protocol.session_manager import utc_timestamp
from .utils import json_response


async def health_endpoint(request: Request) -> Response:
    return json_response({"status": "ok", "timestamp": utc_timestamp()})
