#!/usr/bin/env python3
# src/lapalma_mcp_server/catalog.py
"""
Tool catalog - the fixed, ordered list of tools this gateway exposes.

Descriptions and schemas are published to MCP clients verbatim through
``tools/list``.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


class ToolDescriptor(BaseModel):
    """An immutable MCP tool description."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    description: str
    input_schema: dict[str, Any] = Field(alias="inputSchema")

    def to_mcp_format(self) -> dict[str, Any]:
        """Serialize with MCP key names."""
        return self.model_dump(by_alias=True)


def _date(description: str) -> dict[str, Any]:
    return {"type": "string", "description": description, "pattern": DATE_PATTERN}


def _guests() -> dict[str, Any]:
    return {"type": "number", "description": "Número de huéspedes (default: 2)", "minimum": 1}


TOOL_CATALOG: tuple[ToolDescriptor, ...] = (
    ToolDescriptor(
        name="buscar_disponibilidad",
        description=(
            "Busca propiedades vacacionales disponibles en La Palma para unas fechas específicas. "
            "Permite filtrar por municipio, barrio y número de personas."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "fecha_llegada": _date("Fecha de llegada en formato YYYY-MM-DD (ej: 2024-06-15)"),
                "fecha_salida": _date("Fecha de salida en formato YYYY-MM-DD (ej: 2024-06-22)"),
                "num_personas": _guests(),
                "municipio": {
                    "type": "string",
                    "description": "Filtrar por municipio (ej: Santa Cruz de La Palma, Los Llanos de Aridane)",
                },
                "barrio": {
                    "type": "string",
                    "description": "Filtrar por barrio/zona (ej: Centro, San Telmo, El Charco)",
                },
            },
            "required": ["fecha_llegada", "fecha_salida"],
        },
    ),
    ToolDescriptor(
        name="obtener_detalles_propiedad",
        description=(
            "Obtiene información completa de una propiedad específica: características, amenidades, "
            "ubicación, precios, fotos, descripciones en el idioma solicitado."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "id_casa": {"type": "string", "description": "ID de la propiedad a consultar"},
                "idioma": {
                    "type": "string",
                    "description": "Idioma para descripciones: es (español), en (inglés), de (alemán)",
                    "enum": ["es", "en", "de"],
                    "default": "es",
                },
            },
            "required": ["id_casa"],
        },
    ),
    ToolDescriptor(
        name="calcular_precio_estancia",
        description=(
            "Calcula el precio total de una estancia incluyendo tarifas por temporada, descuentos "
            "aplicables, número de noches y personas."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "id_casa": {"type": "string", "description": "ID de la propiedad"},
                "fecha_llegada": _date("Fecha de llegada en formato YYYY-MM-DD"),
                "fecha_salida": _date("Fecha de salida en formato YYYY-MM-DD"),
                "num_personas": _guests(),
            },
            "required": ["id_casa", "fecha_llegada", "fecha_salida"],
        },
    ),
    ToolDescriptor(
        name="listar_propiedades",
        description=(
            "Lista todas las propiedades vacacionales disponibles con filtros opcionales por ubicación, "
            "capacidad y características. Incluye paginación."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "municipio": {"type": "string", "description": "Filtrar por municipio"},
                "barrio": {"type": "string", "description": "Filtrar por barrio/zona"},
                "dormitorios": {"type": "number", "description": "Número de dormitorios", "minimum": 1},
                "personas_max": {"type": "number", "description": "Capacidad mínima de personas", "minimum": 1},
                "limit": {
                    "type": "number",
                    "description": "Número máximo de resultados (default: 50)",
                    "minimum": 1,
                    "maximum": 100,
                    "default": 50,
                },
                "offset": {
                    "type": "number",
                    "description": "Offset para paginación (default: 0)",
                    "minimum": 0,
                    "default": 0,
                },
            },
        },
    ),
    ToolDescriptor(
        name="listar_municipios",
        description=(
            "Obtiene la lista completa de municipios disponibles en La Palma donde hay propiedades. "
            "Útil para saber qué ubicaciones se pueden filtrar."
        ),
        inputSchema={"type": "object", "properties": {}},
    ),
    ToolDescriptor(
        name="listar_barrios",
        description=(
            "Obtiene la lista de barrios/zonas disponibles, opcionalmente filtrados por municipio. "
            "Útil para búsquedas más específicas de ubicación."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "municipio": {
                    "type": "string",
                    "description": "Filtrar barrios por municipio (ej: Santa Cruz de La Palma)",
                },
            },
        },
    ),
)


def get_tool(name: str) -> ToolDescriptor | None:
    """Look a descriptor up by name."""
    for tool in TOOL_CATALOG:
        if tool.name == name:
            return tool
    return None


def tool_names() -> list[str]:
    return [tool.name for tool in TOOL_CATALOG]
