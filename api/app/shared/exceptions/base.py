"""
Excepcion base para las excepciones que se exponen por la API.
"""
from typing import Optional, Dict, Any


class AppException(Exception):
    """
    Excepcion base de la aplicacion.
    El manejador global la convierte en una respuesta JSON con
    el formato {"error", "message", "details"}.
    """
    
    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Inicializa la excepcion.
        
        Args:
            message: Mensaje de error descriptivo (visible para el cliente)
            status_code: Codigo de estado HTTP
            error_code: Codigo de error personalizado
            details: Detalles adicionales del error
        """
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)
