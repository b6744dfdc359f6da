"""
Ejecutor de cargas de chunks en threads separados.

Cada chunk se carga en un thread de un ThreadPoolExecutor dedicado, con su
propia transaccion. Un semaforo limita los chunks en vuelo: cuando todos
los slots estan ocupados, dispatch() bloquea al lector del CSV hasta que
un worker termine (backpressure), asi el archivo nunca se materializa
completo en memoria.

Caracteristicas:
- ThreadPoolExecutor dedicado con limite explicito de workers
  (por defecto igual al pool de conexiones)
- Threads con nombre prefijado para facil identificacion en logs
- drain() es la barrera de fin de ciclo: espera todos los chunks
  despachados y devuelve sus resultados; sin despachos nuevos es un no-op

Uso:
    dispatcher = ChunkDispatcher(ChunkLoader(store), max_workers=5)
    for chunk in chunks:
        dispatcher.dispatch(chunk)
    results = dispatcher.drain()
"""
from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait as wait_futures
from typing import List

from loguru import logger

from app.application.services.chunk_loader import ChunkLoader
from app.domain.entities.refresh import Chunk, ChunkResult


THREAD_NAME_PREFIX = "promotions-chunk-"


class ChunkDispatcher:
    """
    Despacha chunks a workers concurrentes y los espera por ciclo.

    No es thread-safe para multiples productores: dispatch() y drain()
    los llama un unico hilo (el orquestador).
    """

    def __init__(self, loader: ChunkLoader, max_workers: int) -> None:
        if max_workers < 1:
            raise ValueError("max_workers debe ser >= 1")
        self._loader = loader
        self._max_workers = max_workers
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix=THREAD_NAME_PREFIX,
        )
        self._slots = threading.BoundedSemaphore(max_workers)
        self._pending: List[Future] = []

    @property
    def max_workers(self) -> int:
        return self._max_workers

    @property
    def in_flight(self) -> int:
        """Chunks despachados en el ciclo actual que aun no terminaron."""
        return sum(1 for f in self._pending if not f.done())

    def dispatch(self, chunk: Chunk) -> None:
        """
        Entrega un chunk a un worker.
        Bloquea mientras no haya slots libres.
        """
        self._slots.acquire()
        try:
            future = self._executor.submit(self._run, chunk)
        except RuntimeError:
            # Executor cerrado
            self._slots.release()
            raise
        self._pending.append(future)

    def drain(self) -> List[ChunkResult]:
        """
        Espera a que terminen todos los chunks despachados.

        Returns:
            List[ChunkResult]: Resultados en orden de despacho
        """
        pending, self._pending = self._pending, []
        if not pending:
            return []

        wait_futures(pending)
        return [future.result() for future in pending]

    def _run(self, chunk: Chunk) -> ChunkResult:
        try:
            return self._loader.load(chunk)
        except Exception as e:
            # El loader ya captura los errores de store; esto es un bug.
            logger.exception(f"Chunk {chunk.index}: error inesperado en el worker")
            return ChunkResult(
                chunk_index=chunk.index,
                rows_read=len(chunk),
                inserted=0,
                store_error=f"{type(e).__name__}: {e}",
            )
        finally:
            self._slots.release()

    def shutdown(self, wait: bool = True) -> None:
        """Cierra el executor. Llamar solo al apagar el servicio."""
        logger.info("Cerrando ThreadPoolExecutor de carga de chunks...")
        self._executor.shutdown(wait=wait)
        logger.info("ThreadPoolExecutor de carga de chunks cerrado")

    def get_stats(self) -> dict:
        """
        Retorna estadisticas del executor.

        Util para monitoreo y debugging.
        """
        return {
            "max_workers": self._max_workers,
            "thread_name_prefix": THREAD_NAME_PREFIX,
            "in_flight": self.in_flight,
        }
