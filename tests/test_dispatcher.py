#!/usr/bin/env python3
"""Tests for the tool dispatcher and the catalog it serves."""

import asyncio
from unittest.mock import AsyncMock

import httpx
import orjson
import pytest

from lapalma_mcp_server.backend import BackendClient
from lapalma_mcp_server.catalog import TOOL_CATALOG, get_tool, tool_names
from lapalma_mcp_server.dispatcher import TOOL_BINDINGS, ToolBinding, ToolDispatcher, text_envelope
from lapalma_mcp_server.errors import ToolArgumentError

from .conftest import BASE_URL, MUNICIPIOS, FakeBackend

# ============================================================================
# Helpers
# ============================================================================


def _dispatcher(routes):
    backend = FakeBackend(routes)
    client = BackendClient(BASE_URL, transport=httpx.MockTransport(backend))
    return ToolDispatcher(client), backend


def _payload(envelope):
    assert len(envelope["content"]) == 1
    assert envelope["content"][0]["type"] == "text"
    return orjson.loads(envelope["content"][0]["text"])


# ============================================================================
# Catalog
# ============================================================================


class TestCatalog:
    def test_catalog_order(self):
        assert tool_names() == [
            "buscar_disponibilidad",
            "obtener_detalles_propiedad",
            "calcular_precio_estancia",
            "listar_propiedades",
            "listar_municipios",
            "listar_barrios",
        ]

    def test_every_tool_has_a_binding(self):
        assert set(tool_names()) == set(TOOL_BINDINGS)

    def test_mcp_format_uses_input_schema_key(self):
        tool = get_tool("listar_municipios").to_mcp_format()
        assert set(tool) == {"name", "description", "inputSchema"}
        assert tool["inputSchema"]["type"] == "object"

    def test_required_arguments(self):
        assert get_tool("obtener_detalles_propiedad").input_schema["required"] == ["id_casa"]
        assert get_tool("calcular_precio_estancia").input_schema["required"] == [
            "id_casa",
            "fecha_llegada",
            "fecha_salida",
        ]

    def test_get_tool_unknown(self):
        assert get_tool("nope") is None

    def test_descriptors_are_frozen(self):
        with pytest.raises(Exception):
            TOOL_CATALOG[0].name = "other"


# ============================================================================
# ToolBinding
# ============================================================================


class TestToolBinding:
    def test_path_placeholder_is_filled_and_removed(self):
        binding = TOOL_BINDINGS["obtener_detalles_propiedad"]
        path, payload = binding.build_request({"id_casa": "42", "idioma": "de", "extra": 1})
        assert path == "/api/propiedad/42"
        assert payload == {"idioma": "de"}

    def test_default_language(self):
        _, payload = TOOL_BINDINGS["obtener_detalles_propiedad"].build_request({"id_casa": "42"})
        assert payload == {"idioma": "es"}

    def test_path_value_is_escaped(self):
        path, _ = TOOL_BINDINGS["obtener_detalles_propiedad"].build_request({"id_casa": "a/b c"})
        assert path == "/api/propiedad/a%2Fb%20c"

    def test_missing_path_argument(self):
        with pytest.raises(ToolArgumentError, match="id_casa"):
            TOOL_BINDINGS["obtener_detalles_propiedad"].build_request({})

    def test_forward_nothing(self):
        _, payload = TOOL_BINDINGS["listar_municipios"].build_request({"ignored": True})
        assert payload == {}

    def test_forward_everything(self):
        binding = ToolBinding("/api/barrios")
        _, payload = binding.build_request({"municipio": "Tazacorte"})
        assert payload == {"municipio": "Tazacorte"}


# ============================================================================
# ToolDispatcher
# ============================================================================


class TestToolDispatcher:
    @pytest.mark.asyncio
    async def test_listar_municipios_pretty_prints_backend_payload(self):
        dispatcher, backend = _dispatcher({("GET", "/api/municipios"): (200, MUNICIPIOS)})

        envelope = await dispatcher.dispatch("listar_municipios", {})

        assert "isError" not in envelope
        text = envelope["content"][0]["text"]
        assert text == orjson.dumps(MUNICIPIOS, option=orjson.OPT_INDENT_2).decode()
        assert "\n  " in text
        assert backend.last.method == "GET"

    @pytest.mark.asyncio
    async def test_backend_error_becomes_error_envelope(self):
        dispatcher, _ = _dispatcher({("POST", "/api/disponibilidad"): (400, {"error": "fechas"})})

        envelope = await dispatcher.dispatch(
            "buscar_disponibilidad", {"fecha_llegada": "2025-07-01", "fecha_salida": "2025-07-08"}
        )

        assert envelope["isError"] is True
        payload = _payload(envelope)
        assert payload["success"] is False
        assert payload["error"] == "API Error: 400 Bad Request"
        assert payload["details"] == "BackendResponseError: API Error: 400 Bad Request"

    @pytest.mark.asyncio
    async def test_post_tools_send_arguments_as_body(self):
        dispatcher, backend = _dispatcher({("POST", "/api/calcular-precio"): (200, {"total": 700})})
        arguments = {"id_casa": "7", "fecha_llegada": "2025-07-01", "fecha_salida": "2025-07-08"}

        envelope = await dispatcher.dispatch("calcular_precio_estancia", arguments)

        assert _payload(envelope) == {"total": 700}
        assert orjson.loads(backend.last.content) == arguments

    @pytest.mark.asyncio
    async def test_detalles_uses_path_and_language(self):
        dispatcher, backend = _dispatcher({("GET", "/api/propiedad/42"): (200, {"id": 42})})

        await dispatcher.dispatch("obtener_detalles_propiedad", {"id_casa": 42})

        assert backend.last.url.path == "/api/propiedad/42"
        assert backend.last.url.params["idioma"] == "es"

    @pytest.mark.asyncio
    async def test_unknown_tool(self):
        dispatcher, backend = _dispatcher({})

        envelope = await dispatcher.dispatch("reservar_casa", {})

        assert envelope["isError"] is True
        assert _payload(envelope) == {"success": False, "error": "Unknown tool: reservar_casa"}
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_missing_argument_is_reported_in_envelope(self):
        dispatcher, backend = _dispatcher({})

        envelope = await dispatcher.dispatch("obtener_detalles_propiedad", {})

        assert envelope["isError"] is True
        assert _payload(envelope)["error"] == "Missing required argument: id_casa"
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self):
        backend = AsyncMock()
        backend.call.side_effect = asyncio.CancelledError()
        dispatcher = ToolDispatcher(backend)

        with pytest.raises(asyncio.CancelledError):
            await dispatcher.dispatch("listar_barrios", {})


class TestTextEnvelope:
    def test_success_has_no_error_flag(self):
        assert text_envelope([]) == {"content": [{"type": "text", "text": "[]"}]}

    def test_error_flag(self):
        assert text_envelope({"success": False}, is_error=True)["isError"] is True
