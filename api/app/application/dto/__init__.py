"""
Data Transfer Objects (DTOs) para la capa de aplicacion.
"""
from .promotion_dto import PromotionDTO, RefreshReportDTO

__all__ = [
    "PromotionDTO",
    "RefreshReportDTO",
]
