"""
DTOs relacionados con promociones.
Definen la estructura de datos que expone la API de consulta.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_serializer

from app.domain.entities.promotion import Promotion
from app.domain.entities.refresh import RefreshReport
from app.shared.utils.datetime_utils import DateTimeUtils


class PromotionDTO(BaseModel):
    """
    DTO de una promocion.
    El JSON resultante es {"id", "price", "expiration_date"}.
    """
    id: str = Field(..., description="Identificador de la promocion")
    price: Decimal = Field(..., ge=0, description="Precio de la promocion")
    expiration_date: datetime = Field(..., description="Fecha de expiracion (ISO 8601)")

    @field_serializer("price")
    def serialize_price(self, price: Decimal) -> float:
        # Numero JSON, no string
        return float(price)

    @classmethod
    def from_entity(cls, promotion: Promotion) -> "PromotionDTO":
        return cls(
            id=promotion.id,
            price=promotion.price,
            expiration_date=DateTimeUtils.ensure_utc(promotion.expiration_date),
        )


class RefreshReportDTO(BaseModel):
    """Resumen del ultimo ciclo de refresco (para /health)."""
    status: str
    started_at: datetime
    finished_at: Optional[datetime] = None
    cleanup_attempts: int = 0
    deleted_rows: int = 0
    chunks: int = 0
    rows_read: int = 0
    inserted: int = 0
    rejected: int = 0
    duplicates: int = 0
    failed_chunks: int = 0

    @classmethod
    def from_report(cls, report: RefreshReport) -> "RefreshReportDTO":
        return cls(**report.to_summary())
