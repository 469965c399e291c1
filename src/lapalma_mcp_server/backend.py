#!/usr/bin/env python3
# src/lapalma_mcp_server/backend.py
"""
Backend gateway client - async HTTP access to the La Palma 24 rentals API.
"""

import logging
from typing import Any, Literal

import httpx
import orjson

from .constants import CONTENT_TYPE_JSON, HEADER_API_KEY, HEADER_CONTENT_TYPE
from .errors import BackendError, BackendResponseError

logger = logging.getLogger(__name__)

HttpMethod = Literal["GET", "POST"]


def encode_query(params: dict[str, Any]) -> dict[str, str]:
    """Render defined, non-null params as query-string values."""
    query: dict[str, str] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            query[key] = "true" if value else "false"
        elif isinstance(value, float) and value.is_integer():
            query[key] = str(int(value))
        elif isinstance(value, (dict, list)):
            query[key] = orjson.dumps(value).decode()
        else:
            query[key] = str(value)
    return query


class BackendClient:
    """Thin async client for the rentals backend.

    One ``httpx.AsyncClient`` is shared by every call and closed with
    :meth:`aclose`. Each call is bounded by ``timeout`` seconds.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            headers = {HEADER_CONTENT_TYPE: CONTENT_TYPE_JSON}
            if self.api_key:
                headers[HEADER_API_KEY] = self.api_key
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )
        return self._client

    async def call(self, path: str, params: dict[str, Any] | None = None, method: HttpMethod = "GET") -> Any:
        """Call ``path`` on the backend and return the decoded JSON body.

        GET sends ``params`` as a query string, POST as a JSON body.

        Raises:
            BackendResponseError: the backend answered with a non-2xx status.
            BackendError: transport failure, timeout or undecodable body.
        """
        params = params or {}
        client = self._get_client()

        try:
            if method == "GET":
                response = await client.get(path, params=encode_query(params))
            elif method == "POST":
                response = await client.post(path, content=orjson.dumps(params))
            else:
                raise BackendError(f"Unsupported HTTP method: {method}")
        except httpx.TimeoutException as e:
            logger.warning(f"Backend timeout on {method} {path}: {e}")
            raise BackendError(f"Backend timeout after {self.timeout:g}s: {method} {path}") from e
        except httpx.HTTPError as e:
            logger.warning(f"Backend request failed on {method} {path}: {e}")
            raise BackendError(f"Backend request failed: {e}") from e

        if not response.is_success:
            logger.info(f"Backend {method} {path} -> {response.status_code}")
            raise BackendResponseError(response.status_code, response.reason_phrase)

        try:
            return orjson.loads(response.content)
        except orjson.JSONDecodeError as e:
            raise BackendError(f"Invalid JSON from backend: {e}") from e

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
