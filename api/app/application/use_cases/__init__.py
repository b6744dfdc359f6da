"""
Casos de uso de la aplicacion.
"""
from .promotion_use_cases import PromotionUseCases

__all__ = ["PromotionUseCases"]
