"""
Utilidades para manejo de fechas y horas.
"""
from datetime import datetime, timezone


class DateTimeUtils:
    """Clase de utilidades para operaciones con fechas y horas."""
    
    @staticmethod
    def now_utc() -> datetime:
        """
        Obtiene la fecha y hora actual en UTC.
        
        Returns:
            datetime: Fecha y hora actual en UTC
        """
        return datetime.now(timezone.utc)
    
    @staticmethod
    def ensure_utc(dt: datetime) -> datetime:
        """
        Normaliza un datetime a UTC (aware).

        Los datetime sin zona (columna TIMESTAMP) se interpretan como UTC,
        igual que hace el driver al leerlos.
        """
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)
