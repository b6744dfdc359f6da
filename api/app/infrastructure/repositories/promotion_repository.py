"""
Gateway PostgreSQL (psycopg v3) para la tabla de promociones:
- borrado completo al inicio de cada ciclo
- carga masiva por chunk con COPY FROM STDIN dentro de una transaccion
- consulta puntual por ID para la API

Cada transaccion toma su propia conexion del pool del engine; no hay
locks a nivel aplicacion entre transacciones concurrentes.
"""

from __future__ import annotations

from typing import Iterable, Optional

import psycopg
from loguru import logger
from sqlalchemy import delete, func, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from app.domain.entities.promotion import Promotion
from app.domain.repositories.promotion_store import IPromotionStore, IPromotionTransaction
from app.infrastructure.database.models import PromotionModel
from app.infrastructure.database.session import init_db
from app.shared.constants.promotion_constants import PROMOTIONS_TABLE
from app.shared.exceptions.ingestion import PromotionStoreError, StoreUnavailableError


COPY_PROMOTIONS_SQL = (
    f'COPY "{PROMOTIONS_TABLE}" ("id", "price", "expiration_date") FROM STDIN'
)

_DB_ERRORS = (psycopg.Error, SQLAlchemyError)


class PostgresPromotionTransaction(IPromotionTransaction):
    """
    Transaccion de un chunk sobre una conexion cruda del pool.

    La conexion es psycopg (autocommit False): la transaccion empieza con
    el COPY y termina con commit() o rollback(). close() devuelve la
    conexion al pool, que descarta cualquier transaccion pendiente.
    """

    def __init__(self, pooled_connection) -> None:
        self._pooled = pooled_connection
        self._conn: psycopg.Connection = pooled_connection.driver_connection
        self._closed = False

    def bulk_insert(self, promotions: Iterable[Promotion]) -> int:
        written = 0
        try:
            with self._conn.cursor() as cur:
                # Al salir del bloque copy se hace el flush del stream
                with cur.copy(COPY_PROMOTIONS_SQL) as copy:
                    for promotion in promotions:
                        copy.write_row(
                            (promotion.id, promotion.price, promotion.local_expiration)
                        )
                        written += 1
        except psycopg.Error as e:
            raise PromotionStoreError(f"Error en COPY de promociones: {e}") from e
        return written

    def commit(self) -> None:
        try:
            self._conn.commit()
        except psycopg.Error as e:
            raise PromotionStoreError(f"Error confirmando la transaccion: {e}") from e

    def rollback(self) -> None:
        try:
            self._conn.rollback()
        except psycopg.Error as e:
            raise PromotionStoreError(f"Error descartando la transaccion: {e}") from e

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._pooled.close()
        except _DB_ERRORS as e:
            # La conexion queda invalidada en el pool; el chunk ya termino.
            logger.warning(f"No se pudo devolver la conexion al pool: {e}")


class PostgresPromotionStore(IPromotionStore):
    """Implementacion del gateway sobre un Engine de SQLAlchemy."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine

    def ping(self) -> None:
        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except _DB_ERRORS as e:
            raise StoreUnavailableError(
                f"No se pudo conectar a la base de datos: {e}\n"
                f"Sugerencia: verifica DATABASE_HOST/DATABASE_PORT y que Postgres este corriendo."
            ) from e

    def ensure_schema(self) -> None:
        try:
            init_db(self._engine)
        except _DB_ERRORS as e:
            raise PromotionStoreError(f"Error creando la tabla {PROMOTIONS_TABLE}: {e}") from e

    def delete_all(self) -> int:
        try:
            with self._engine.begin() as conn:
                result = conn.execute(delete(PromotionModel))
                return result.rowcount or 0
        except _DB_ERRORS as e:
            raise PromotionStoreError(f"Error borrando promociones: {e}") from e

    def begin(self) -> PostgresPromotionTransaction:
        try:
            pooled = self._engine.raw_connection()
        except _DB_ERRORS as e:
            raise PromotionStoreError(f"Error iniciando la transaccion: {e}") from e
        return PostgresPromotionTransaction(pooled)

    def get_by_id(self, promotion_id: str) -> Optional[Promotion]:
        query = select(
            PromotionModel.id,
            PromotionModel.price,
            PromotionModel.expiration_date,
        ).where(PromotionModel.id == promotion_id)
        try:
            with self._engine.connect() as conn:
                row = conn.execute(query).first()
        except _DB_ERRORS as e:
            raise PromotionStoreError(f"Error consultando la promocion {promotion_id}: {e}") from e

        if row is None:
            return None
        return Promotion(id=row.id, price=row.price, expiration_date=row.expiration_date)

    def count(self) -> int:
        try:
            with self._engine.connect() as conn:
                return conn.execute(select(func.count()).select_from(PromotionModel)).scalar_one()
        except _DB_ERRORS as e:
            raise PromotionStoreError(f"Error contando promociones: {e}") from e
