"""
Script para inicializar la base de datos (crea la tabla de promociones).
"""
from loguru import logger

from app.infrastructure.database.session import init_db, close_db


def main():
    """Funcion principal para inicializar la base de datos."""
    logger.info("Inicializando base de datos...")

    try:
        init_db()
        logger.success("Base de datos inicializada correctamente")
    except Exception as e:
        logger.error(f"Error al inicializar base de datos: {e}")
        raise
    finally:
        close_db()


if __name__ == "__main__":
    main()
