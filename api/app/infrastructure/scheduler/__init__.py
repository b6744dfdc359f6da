"""
Ejecucion en segundo plano del refresco de promociones.
"""
from app.infrastructure.scheduler.refresh_runner import RefreshRunner

__all__ = ["RefreshRunner"]
