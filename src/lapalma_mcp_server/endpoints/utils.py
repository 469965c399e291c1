#!/usr/bin/env python3
"""
Endpoint utilities shared by the HTTP transports.
"""

from typing import Any

import orjson
from starlette.requests import Request
from starlette.responses import Response

from ..constants import CONTENT_TYPE_JSON, KEY_ERROR, JsonRpcError

HEADERS_NOCACHE = {"cache-control": "no-cache"}


def json_response(data: Any, status_code: int = 200) -> Response:
    """Serialize ``data`` with orjson."""
    return Response(orjson.dumps(data), status_code=status_code, media_type=CONTENT_TYPE_JSON, headers=HEADERS_NOCACHE)


def jsonrpc_status(response: dict[str, Any]) -> int:
    """HTTP status for a JSON-RPC response frame on the synchronous transport."""
    error = response.get(KEY_ERROR)
    if not error:
        return 200
    code = error.get("code")
    if code in (JsonRpcError.PARSE_ERROR, JsonRpcError.INVALID_REQUEST):
        return 400
    if code == JsonRpcError.INTERNAL_ERROR:
        return 500
    return 200


async def read_json_body(request: Request, empty: Any = ...) -> Any:
    """Decode a request body with orjson.

    An empty body returns ``empty`` when given, otherwise it is a parse error.

    Raises:
        ValueError: the body is missing or not valid JSON.
    """
    body = await request.body()
    if not body.strip():
        if empty is not ...:
            return empty
        raise ValueError("Empty body")
    try:
        return orjson.loads(body)
    except orjson.JSONDecodeError as e:
        raise ValueError(str(e)) from e
