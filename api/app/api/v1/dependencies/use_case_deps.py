"""
Dependencias para inyeccion de casos de uso.
"""
from fastapi import Depends

from app.application.use_cases.promotion_use_cases import PromotionUseCases
from app.domain.repositories.promotion_store import IPromotionStore
from app.api.v1.dependencies.repository_deps import get_promotion_store


def get_promotion_use_cases(
    store: IPromotionStore = Depends(get_promotion_store)
) -> PromotionUseCases:
    """
    Dependencia para obtener los casos de uso de promociones.
    
    Args:
        store: Gateway de promociones
        
    Returns:
        PromotionUseCases: Instancia de casos de uso de promociones
    """
    return PromotionUseCases(store)
