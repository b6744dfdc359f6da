"""
Gestion del engine de base de datos.

El engine (y su pool de conexiones) es el unico recurso compartido entre
el refresco periodico y las consultas HTTP. Se inyecta explicitamente en
el gateway de promociones.
"""
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from app.core.config import settings


# Base para modelos de SQLAlchemy
Base = declarative_base()


def _create_engine_args() -> dict:
    """
    Construye los argumentos del engine segun el tipo de base de datos.
    PostgreSQL usa pool de conexiones, SQLite no lo soporta.
    """
    args = {
        "echo": settings.DEBUG,
        "future": True,
    }

    # Configuracion de pool solo para PostgreSQL
    if "postgresql" in settings.effective_database_url:
        args.update({
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
            "pool_pre_ping": True,  # Verifica conexion antes de usar
        })

    return args


# Engine de base de datos (no conecta hasta el primer uso)
engine = create_engine(settings.effective_database_url, **_create_engine_args())


def init_db(bind: Engine = None) -> None:
    """Crea las tablas si no existen (CREATE TABLE IF NOT EXISTS)."""
    # Registrar modelos antes de create_all
    from app.infrastructure.database import models  # noqa: F401

    Base.metadata.create_all(bind or engine)


def close_db(bind: Engine = None) -> None:
    """Cierra las conexiones del pool."""
    (bind or engine).dispose()
