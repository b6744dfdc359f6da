"""
Script para ejecutar el servidor en modo desarrollo (con reload).

Por defecto el refresco periodico queda apagado para no depender de
/app/promotions/promotions.csv en la maquina local; exportar
REFRESH_ENABLED=true para probarlo.
"""
import os

import uvicorn
from loguru import logger


if __name__ == "__main__":
    os.environ.setdefault("ENVIRONMENT", "development")
    os.environ.setdefault("REFRESH_ENABLED", "false")

    # Importar despues de fijar el entorno: Settings se lee al importar
    from app.core.config import settings

    logger.info(f"Modo desarrollo: refresco {'activo' if settings.REFRESH_ENABLED else 'apagado'}")
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=True,
        reload_dirs=["app"],
        log_level=settings.LOG_LEVEL.lower()
    )
