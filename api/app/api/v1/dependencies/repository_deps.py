"""
Dependencias para inyeccion de repositorios.
"""
from fastapi import Request

from app.domain.repositories.promotion_store import IPromotionStore
from app.infrastructure.database.session import engine
from app.infrastructure.repositories.promotion_repository import PostgresPromotionStore


def get_promotion_store(request: Request) -> IPromotionStore:
    """
    Dependencia para obtener el gateway de promociones.
    
    Usa la instancia creada en el startup (compartida con el refresco);
    si no existe, crea una sobre el engine global.
    
    Returns:
        IPromotionStore: Gateway de promociones
    """
    store = getattr(request.app.state, "promotion_store", None)
    if store is None:
        store = PostgresPromotionStore(engine)
        request.app.state.promotion_store = store
    return store
