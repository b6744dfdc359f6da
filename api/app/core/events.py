"""
Manejadores de eventos de inicio y cierre de la aplicacion.

Startup:
- conecta a la base de datos (fatal si no responde)
- crea la tabla de promociones si no existe (fatal si falla)
- arranca el refresco periodico del CSV en un thread dedicado

Shutdown:
- detiene el refresco entre ciclos, cierra el executor y el pool
"""
import asyncio
import os
from typing import Callable
from fastapi import FastAPI
from loguru import logger

from app.core.config import settings
from app.application.services.chunk_loader import ChunkLoader
from app.application.services.refresh_orchestrator import PromotionRefresher
from app.infrastructure.database.session import engine, close_db
from app.infrastructure.executor.chunk_executor import ChunkDispatcher
from app.infrastructure.repositories.promotion_repository import PostgresPromotionStore
from app.infrastructure.scheduler.refresh_runner import RefreshRunner
from app.shared.constants.promotion_constants import PROMOTIONS_CSV_FILE, CHUNK_SIZE

# Espera maxima al detener el refresco en el shutdown
REFRESH_STOP_TIMEOUT_SECONDS = 5.0


def startup_handler(app: FastAPI) -> Callable:
    """
    Manejador de eventos de inicio de la aplicacion.

    Args:
        app: Instancia de FastAPI

    Returns:
        Callable: Funcion asincrona de inicio
    """
    async def startup() -> None:
        """Inicializa recursos al inicio de la aplicacion."""
        try:
            logger.info(f"Iniciando {settings.APP_NAME} v{settings.APP_VERSION}")
            logger.info(f"Entorno: {settings.ENVIRONMENT}")

            _validate_config()

            # Configurar logging adicional
            logger.add(
                settings.LOG_FILE,
                rotation="500 MB",
                retention="10 days",
                level=settings.LOG_LEVEL
            )

            store = PostgresPromotionStore(engine)

            # Verificar conectividad y crear la tabla (ambos fatales)
            await asyncio.to_thread(store.ping)
            logger.info("Conexion a base de datos verificada")
            await asyncio.to_thread(store.ensure_schema)
            logger.info("Base de datos inicializada")

            app.state.promotion_store = store

            if settings.REFRESH_ENABLED:
                _start_refresh(app, store)
            else:
                logger.warning("CONFIG: REFRESH_ENABLED=false - solo se atienden consultas")

            logger.success("Aplicacion iniciada correctamente")

        except Exception as e:
            logger.error(f"Error durante startup: {e}")
            logger.exception("Detalle del error:")
            raise

    return startup


def _validate_config() -> None:
    """Valida que la configuracion critica este presente."""
    warnings = []

    if not settings.DATABASE_URL and settings.DATABASE_PASSWORD == "postgres" and not settings.is_development:
        warnings.append("DATABASE_PASSWORD con valor por defecto fuera de desarrollo")

    if settings.DB_POOL_SIZE < 1:
        warnings.append("DB_POOL_SIZE < 1 - se usara 1 worker de carga")

    if not os.path.exists(PROMOTIONS_CSV_FILE):
        warnings.append(f"{PROMOTIONS_CSV_FILE} no existe - el refresco terminara el proceso")

    # Mostrar advertencias
    for warning in warnings:
        logger.warning(f"CONFIG: {warning}")


def _start_refresh(app: FastAPI, store: PostgresPromotionStore) -> None:
    """Arranca el refresco periodico en segundo plano."""
    dispatcher = ChunkDispatcher(ChunkLoader(store), max_workers=settings.loader_workers)
    refresher = PromotionRefresher(store=store, dispatcher=dispatcher)
    runner = RefreshRunner(refresher)
    runner.start()

    app.state.chunk_dispatcher = dispatcher
    app.state.promotion_refresher = refresher
    app.state.refresh_runner = runner
    logger.info(
        f"Refresco periodico iniciado: {PROMOTIONS_CSV_FILE} "
        f"(chunk_size={CHUNK_SIZE}, workers={settings.loader_workers})"
    )


def shutdown_handler(app: FastAPI) -> Callable:
    """
    Manejador de eventos de cierre de la aplicacion.

    Args:
        app: Instancia de FastAPI

    Returns:
        Callable: Funcion asincrona de cierre
    """
    async def shutdown() -> None:
        """Libera recursos al cerrar la aplicacion."""
        logger.info("Cerrando aplicacion...")

        # Detener el refresco (un ciclo en curso no se aborta)
        runner = getattr(app.state, "refresh_runner", None)
        if runner is not None:
            stopped = await asyncio.to_thread(runner.stop, REFRESH_STOP_TIMEOUT_SECONDS)
            if stopped:
                logger.info("Refresco de promociones detenido")
            else:
                logger.warning("Hay un ciclo de refresco en curso; se abandona al cerrar")

        dispatcher = getattr(app.state, "chunk_dispatcher", None)
        if dispatcher is not None:
            dispatcher.shutdown(wait=False)

        # Cerrar conexiones de base de datos
        close_db()
        logger.info("Conexiones de base de datos cerradas")

        logger.success("Aplicacion cerrada correctamente")

    return shutdown
