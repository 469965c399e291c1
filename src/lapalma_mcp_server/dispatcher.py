#!/usr/bin/env python3
# src/lapalma_mcp_server/dispatcher.py
"""
Tool dispatcher - maps a tool call onto exactly one backend request.

Each tool's backend binding is plain data (``ToolBinding``), so adding a tool
means adding a catalog entry and a table row.
"""

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from string import Formatter
from typing import Any, Protocol
from urllib.parse import quote

import orjson

from .backend import HttpMethod
from .constants import DEFAULT_LANGUAGE
from .errors import ToolArgumentError, describe_exception

logger = logging.getLogger(__name__)


class Backend(Protocol):
    async def call(self, path: str, params: dict[str, Any] | None = None, method: HttpMethod = "GET") -> Any: ...

    async def aclose(self) -> None: ...


@dataclass(frozen=True)
class ToolBinding:
    """How one tool reaches the backend.

    ``path`` may contain ``{placeholders}`` filled from (and removed from) the
    arguments. ``forward`` lists the argument keys sent to the backend;
    ``None`` sends every remaining argument.
    """

    path: str
    method: HttpMethod = "GET"
    forward: tuple[str, ...] | None = None
    defaults: Mapping[str, Any] = field(default_factory=dict)

    @property
    def path_params(self) -> list[str]:
        return [name for _, name, _, _ in Formatter().parse(self.path) if name]

    def build_request(self, arguments: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        """Resolve the request path and payload for ``arguments``."""
        values = dict(arguments)
        for key, default in self.defaults.items():
            if values.get(key) is None:
                values[key] = default

        path_values = {}
        for name in self.path_params:
            value = values.pop(name, None)
            if value is None or value == "":
                raise ToolArgumentError(f"Missing required argument: {name}")
            path_values[name] = quote(str(value), safe="")

        if self.forward is not None:
            values = {key: values[key] for key in self.forward if key in values}

        return self.path.format(**path_values), values


TOOL_BINDINGS: dict[str, ToolBinding] = {
    "buscar_disponibilidad": ToolBinding("/api/disponibilidad", "POST"),
    "obtener_detalles_propiedad": ToolBinding(
        "/api/propiedad/{id_casa}", "GET", forward=("idioma",), defaults={"idioma": DEFAULT_LANGUAGE}
    ),
    "calcular_precio_estancia": ToolBinding("/api/calcular-precio", "POST"),
    "listar_propiedades": ToolBinding("/api/propiedades", "GET"),
    "listar_municipios": ToolBinding("/api/municipios", "GET", forward=()),
    "listar_barrios": ToolBinding("/api/barrios", "GET"),
}


def text_envelope(payload: Any, is_error: bool = False) -> dict[str, Any]:
    """Wrap ``payload`` as an MCP tool result with pretty-printed JSON text."""
    text = orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode()
    envelope: dict[str, Any] = {"content": [{"type": "text", "text": text}]}
    if is_error:
        envelope["isError"] = True
    return envelope


class ToolDispatcher:
    """Execute tool calls against the backend.

    :meth:`dispatch` never raises; every failure ends up in the returned
    envelope with ``isError`` set.
    """

    def __init__(self, backend: Backend, bindings: Mapping[str, ToolBinding] | None = None):
        self.backend = backend
        self.bindings = dict(TOOL_BINDINGS if bindings is None else bindings)

    async def dispatch(self, name: str, arguments: dict[str, Any] | None = None) -> dict[str, Any]:
        binding = self.bindings.get(name)
        if binding is None:
            logger.warning(f"Unknown tool requested: {name}")
            return text_envelope({"success": False, "error": f"Unknown tool: {name}"}, is_error=True)

        try:
            path, payload = binding.build_request(arguments or {})
            logger.info(f"Executing tool {name}: {binding.method} {path}")
            result = await self.backend.call(path, payload, binding.method)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.info(f"Tool {name} failed: {e}")
            return text_envelope(
                {"success": False, "error": str(e), "details": describe_exception(e)},
                is_error=True,
            )

        return text_envelope(result)
