"""
Servicios de aplicacion.

Contiene el pipeline de ingesta de promociones: parser de filas,
lectura del CSV, carga por chunk y orquestacion del refresco.
"""
from app.application.services.promotion_parser import (
    collapse_duplicate_ids,
    parse_expiration,
    parse_price,
    parse_promotion_row,
    parse_rows,
)
from app.application.services.source_reader import iter_chunks, iter_source_rows
from app.application.services.chunk_loader import ChunkLoader

__all__ = [
    # Parser
    "collapse_duplicate_ids",
    "parse_expiration",
    "parse_price",
    "parse_promotion_row",
    "parse_rows",
    # Lectura
    "iter_chunks",
    "iter_source_rows",
    # Carga
    "ChunkLoader",
]
