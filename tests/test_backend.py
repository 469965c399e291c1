#!/usr/bin/env python3
"""Tests for the rentals backend client."""

import httpx
import orjson
import pytest

from lapalma_mcp_server.backend import BackendClient, encode_query
from lapalma_mcp_server.errors import BackendError, BackendResponseError

from .conftest import BASE_URL, MUNICIPIOS, FakeBackend


def _client(handler, **kwargs):
    return BackendClient(BASE_URL, transport=httpx.MockTransport(handler), **kwargs)


class TestEncodeQuery:
    def test_skips_none(self):
        assert encode_query({"a": None, "b": 1}) == {"b": "1"}

    def test_booleans_are_lowercase(self):
        assert encode_query({"piscina": True, "wifi": False}) == {"piscina": "true", "wifi": "false"}

    def test_structures_are_json(self):
        assert encode_query({"ids": [1, 2]}) == {"ids": "[1,2]"}

    def test_whole_floats_render_as_integers(self):
        assert encode_query({"dormitorios": 2.0, "limit": 10, "precio": 99.5}) == {
            "dormitorios": "2",
            "limit": "10",
            "precio": "99.5",
        }


class TestBackendClient:
    @pytest.mark.asyncio
    async def test_get_sends_query_and_api_key(self, fake_backend):
        client = _client(fake_backend, api_key="secret")

        result = await client.call("/api/municipios", {"pagina": 2, "vacio": None})

        assert result == MUNICIPIOS
        request = fake_backend.last
        assert request.method == "GET"
        assert request.url.params["pagina"] == "2"
        assert "vacio" not in request.url.params
        assert request.headers["X-API-Key"] == "secret"
        assert request.headers["Content-Type"] == "application/json"
        await client.aclose()

    @pytest.mark.asyncio
    async def test_no_api_key_header_when_unset(self, fake_backend):
        client = _client(fake_backend)
        await client.call("/api/municipios")
        assert "X-API-Key" not in fake_backend.last.headers
        await client.aclose()

    @pytest.mark.asyncio
    async def test_post_sends_json_body(self):
        backend = FakeBackend({("POST", "/api/disponibilidad"): (200, {"disponible": True})})
        client = _client(backend)

        result = await client.call("/api/disponibilidad", {"fecha_entrada": "2025-07-01", "adultos": 2}, "POST")

        assert result == {"disponible": True}
        assert orjson.loads(backend.last.content) == {"fecha_entrada": "2025-07-01", "adultos": 2}
        await client.aclose()

    @pytest.mark.asyncio
    async def test_non_success_status_raises(self):
        client = _client(FakeBackend({("POST", "/api/disponibilidad"): (400, {"error": "bad"})}))

        with pytest.raises(BackendResponseError) as exc_info:
            await client.call("/api/disponibilidad", {}, "POST")

        assert exc_info.value.status == 400
        assert str(exc_info.value) == "API Error: 400 Bad Request"
        await client.aclose()

    @pytest.mark.asyncio
    async def test_invalid_json_raises_backend_error(self):
        client = _client(FakeBackend({("GET", "/api/barrios"): (200, b"<html>")}))

        with pytest.raises(BackendError, match="Invalid JSON"):
            await client.call("/api/barrios")
        await client.aclose()

    @pytest.mark.asyncio
    async def test_connection_failure_raises_backend_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = _client(handler)
        with pytest.raises(BackendError, match="Backend request failed"):
            await client.call("/api/barrios")
        await client.aclose()

    @pytest.mark.asyncio
    async def test_timeout_raises_backend_error(self):
        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        client = _client(handler, timeout=5)
        with pytest.raises(BackendError, match="Backend timeout after 5s"):
            await client.call("/api/barrios")
        await client.aclose()

    @pytest.mark.asyncio
    async def test_aclose_is_idempotent(self, fake_backend):
        client = _client(fake_backend)
        await client.call("/api/municipios")
        await client.aclose()
        await client.aclose()
        assert client._client is None
