"""
Casos de uso relacionados con promociones.
Contiene la logica de consulta que expone la API.
"""
import asyncio

from loguru import logger

from app.application.dto.promotion_dto import PromotionDTO
from app.domain.repositories.promotion_store import IPromotionStore
from app.shared.exceptions.domain import PromotionLookupException, PromotionNotFoundException
from app.shared.exceptions.ingestion import PromotionStoreError


class PromotionUseCases:
    """
    Casos de uso para consulta de promociones.
    """
    
    def __init__(self, store: IPromotionStore):
        self.store = store
    
    async def get_promotion(self, promotion_id: str) -> PromotionDTO:
        """
        Obtiene una promocion por su ID.
        
        La consulta es bloqueante (pool sincrono), se ejecuta en un
        thread para no bloquear el event loop.
        
        Args:
            promotion_id: ID de la promocion
            
        Returns:
            PromotionDTO: Promocion encontrada
            
        Raises:
            PromotionNotFoundException: Si la promocion no existe
            PromotionLookupException: Si falla la consulta
        """
        try:
            promotion = await asyncio.to_thread(self.store.get_by_id, promotion_id)
        except PromotionStoreError as e:
            logger.error(f"Error consultando promocion '{promotion_id}': {e}")
            raise PromotionLookupException() from e
        
        if promotion is None:
            raise PromotionNotFoundException(promotion_id)
        
        return PromotionDTO.from_entity(promotion)
