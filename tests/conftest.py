#!/usr/bin/env python3
"""Shared fixtures: a router wired to an in-memory rentals backend."""

import httpx
import orjson
import pytest

from lapalma_mcp_server.backend import BackendClient
from lapalma_mcp_server.dispatcher import ToolDispatcher
from lapalma_mcp_server.protocol import MethodRouter

BASE_URL = "https://backend.test"

MUNICIPIOS = ["Santa Cruz de La Palma", "Tazacorte"]


class FakeBackend:
    """Records every request and answers from a ``{(method, path): (status, body)}`` table."""

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, body = self.routes.get((request.method, request.url.path), (404, {"error": "not found"}))
        if isinstance(body, bytes):
            return httpx.Response(status, content=body)
        return httpx.Response(status, content=orjson.dumps(body))

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def fake_backend():
    return FakeBackend({("GET", "/api/municipios"): (200, MUNICIPIOS)})


@pytest.fixture
def backend_client(fake_backend):
    return BackendClient(BASE_URL, api_key="secret", transport=httpx.MockTransport(fake_backend))


@pytest.fixture
def router(backend_client):
    return MethodRouter(ToolDispatcher(backend_client))
