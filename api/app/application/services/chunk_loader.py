"""
Carga de un chunk en una sola transaccion.

Algoritmo:
1. Abrir una transaccion (conexion propia del pool)
2. Parsear cada fila; las invalidas se descartan del set de escritura
   y de cada id repetido queda solo la ultima fila
3. Enviar todas las validas en un unico COPY dentro de la transaccion
4. Flush del COPY y commit
5. Retornar un ChunkResult, haya o no errores

Los fallos de almacenamiento se loguean y quedan en el resultado: nunca
se propagan al orquestador ni se reintentan en el mismo ciclo.
"""
from __future__ import annotations

import time

from loguru import logger

from app.application.services.promotion_parser import collapse_duplicate_ids, parse_rows
from app.domain.entities.refresh import Chunk, ChunkResult
from app.domain.repositories.promotion_store import IPromotionStore
from app.shared.exceptions.ingestion import PromotionStoreError


class ChunkLoader:
    """
    Escribe chunks de filas crudas en el almacenamiento.

    Uso:
        loader = ChunkLoader(store)
        result = loader.load(chunk)
    """

    def __init__(self, store: IPromotionStore) -> None:
        self._store = store

    def load(self, chunk: Chunk) -> ChunkResult:
        """
        Carga un chunk completo como unidad atomica.

        Un chunk sin filas validas igual confirma una escritura vacia.

        Returns:
            ChunkResult: filas leidas, insertadas, rechazos y error de store
        """
        started = time.monotonic()

        try:
            transaction = self._store.begin()
        except PromotionStoreError as e:
            logger.error(f"Chunk {chunk.index}: error iniciando la transaccion: {e}")
            return ChunkResult(
                chunk_index=chunk.index,
                rows_read=len(chunk),
                inserted=0,
                store_error=str(e),
            )

        promotions, rejections = parse_rows(chunk.rows, chunk.first_row_number)
        promotions, duplicates = collapse_duplicate_ids(promotions)

        with transaction:
            try:
                sent = transaction.bulk_insert(promotions)
                transaction.commit()
            except PromotionStoreError as e:
                logger.error(
                    f"Chunk {chunk.index}: error insertando {len(promotions)} promociones: {e}"
                )
                self._rollback_quietly(transaction, chunk)
                return ChunkResult(
                    chunk_index=chunk.index,
                    rows_read=len(chunk),
                    inserted=0,
                    rejections=tuple(rejections),
                    duplicates=duplicates,
                    store_error=str(e),
                )

        logger.debug(
            f"Chunk {chunk.index}: {sent} insertadas, {len(rejections)} descartadas "
            f"({time.monotonic() - started:.3f}s)"
        )
        return ChunkResult(
            chunk_index=chunk.index,
            rows_read=len(chunk),
            inserted=sent,
            rejections=tuple(rejections),
            duplicates=duplicates,
        )

    @staticmethod
    def _rollback_quietly(transaction, chunk: Chunk) -> None:
        try:
            transaction.rollback()
        except PromotionStoreError as e:
            # close() devuelve la conexion al pool igual
            logger.warning(f"Chunk {chunk.index}: rollback fallido: {e}")
