"""
Entidades del dominio.
"""
from app.domain.entities.promotion import Promotion
from app.domain.entities.refresh import (
    Chunk,
    ChunkResult,
    RawRow,
    RecordRejection,
    RefreshReport,
)

__all__ = [
    "Promotion",
    "Chunk",
    "ChunkResult",
    "RawRow",
    "RecordRejection",
    "RefreshReport",
]
