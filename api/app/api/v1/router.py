"""
Router principal de la API v1.
Agrupa todos los endpoints de la version 1.

Se monta sin prefijo: la ruta publica es /promotions/{id}.
"""
from fastapi import APIRouter

from app.api.v1.endpoints import promotions


# Router principal de la API v1
api_router = APIRouter()

# Incluir routers de endpoints especificos
api_router.include_router(promotions.router)
