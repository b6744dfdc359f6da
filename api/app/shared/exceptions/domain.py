"""
Excepciones relacionadas con la logica de dominio.
"""
from typing import Any

from app.shared.exceptions.base import AppException


class DomainException(AppException):
    """Excepcion base para errores de dominio."""
    
    def __init__(self, message: str, error_code: str = "DOMAIN_ERROR", details=None):
        super().__init__(
            message=message,
            status_code=400,
            error_code=error_code,
            details=details
        )


class EntityNotFoundException(DomainException):
    """Excepcion cuando no se encuentra una entidad."""
    
    def __init__(self, entity_name: str, entity_id: Any):
        super().__init__(
            message=f"{entity_name} con ID {entity_id} no encontrado",
            error_code="ENTITY_NOT_FOUND",
            details={"entity": entity_name, "id": str(entity_id)}
        )
        self.status_code = 404


class PromotionNotFoundException(EntityNotFoundException):
    """Excepcion cuando no existe una promocion con el ID pedido."""
    
    def __init__(self, promotion_id: str):
        super().__init__("Promotion", promotion_id)
        self.error_code = "PROMOTION_NOT_FOUND"


class PromotionLookupException(AppException):
    """
    Error interno al consultar una promocion.
    El mensaje es generico: el detalle del driver solo va al log.
    """
    
    def __init__(self):
        super().__init__(
            message="Ha ocurrido un error interno del servidor",
            status_code=500,
            error_code="INTERNAL_SERVER_ERROR",
        )
