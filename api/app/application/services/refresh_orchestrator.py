"""
Orquestador del refresco completo de promociones.

Un ciclo (nunca dos a la vez):
    Idle -> Cleaning -> Streaming -> Draining -> Sleeping -> Idle

- Cleaning: DELETE de toda la tabla. Si falla se reintenta con backoff
  exponencial; agotados los intentos el ciclo se abandona (no se carga
  sobre una tabla sucia) y se pasa a Sleeping.
- Streaming: lectura secuencial del CSV, particion en chunks y despacho
  concurrente de cada chunk.
- Draining: barrera; espera a todos los chunks del ciclo, sin timeout.
- Sleeping: pausa fija hasta el proximo ciclo.

Los errores de lectura del CSV (SourceFileError) no se capturan aqui:
son fatales para el proceso.
"""
from __future__ import annotations

import threading
from typing import Optional, Tuple

from loguru import logger

from app.application.services.source_reader import iter_chunks, iter_source_rows
from app.domain.entities.refresh import RefreshReport
from app.domain.repositories.promotion_store import IPromotionStore
from app.infrastructure.executor.chunk_executor import ChunkDispatcher
from app.shared.constants.promotion_constants import (
    CHUNK_SIZE,
    CLEANUP_MAX_ATTEMPTS,
    CLEANUP_MAX_BACKOFF_SECONDS,
    CLEANUP_MIN_BACKOFF_SECONDS,
    PROMOTIONS_CSV_FILE,
    REFRESH_INTERVAL_SECONDS,
    RefreshState,
    RefreshStatus,
)
from app.shared.exceptions.ingestion import PromotionStoreError, SourceFileError
from app.shared.utils.datetime_utils import DateTimeUtils


class PromotionRefresher:
    """
    Ejecuta ciclos de borrado + recarga del CSV de promociones.

    Uso:
        refresher = PromotionRefresher(store=store, dispatcher=dispatcher)
        report = refresher.run_cycle()      # un ciclo
        refresher.run_forever()             # bucle hasta stop()
    """

    def __init__(
        self,
        *,
        store: IPromotionStore,
        dispatcher: ChunkDispatcher,
        source_path: str = PROMOTIONS_CSV_FILE,
        chunk_size: int = CHUNK_SIZE,
        interval_seconds: float = REFRESH_INTERVAL_SECONDS,
        cleanup_max_attempts: int = CLEANUP_MAX_ATTEMPTS,
        cleanup_min_backoff_s: float = CLEANUP_MIN_BACKOFF_SECONDS,
        cleanup_max_backoff_s: float = CLEANUP_MAX_BACKOFF_SECONDS,
    ) -> None:
        if cleanup_max_attempts < 1:
            raise ValueError("cleanup_max_attempts debe ser >= 1")
        self._store = store
        self._dispatcher = dispatcher
        self._source_path = source_path
        self._chunk_size = chunk_size
        self._interval_s = interval_seconds
        self._cleanup_max_attempts = cleanup_max_attempts
        self._cleanup_min_backoff_s = cleanup_min_backoff_s
        self._cleanup_max_backoff_s = cleanup_max_backoff_s

        self._stop_event = threading.Event()
        self._cycle_lock = threading.Lock()
        self._state = RefreshState.IDLE
        self._last_report: Optional[RefreshReport] = None
        self._cycles = 0

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def last_report(self) -> Optional[RefreshReport]:
        """Reporte del ultimo ciclo terminado (o None)."""
        return self._last_report

    @property
    def cycles(self) -> int:
        return self._cycles

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def stop(self) -> None:
        """
        Pide detener el bucle. Solo interrumpe esperas (sleep/backoff):
        un ciclo en curso no se aborta.
        """
        self._stop_event.set()

    def run_forever(self) -> None:
        """Ejecuta ciclos hasta que se llame stop()."""
        logger.info(
            f"Refresco de promociones iniciado: archivo={self._source_path}, "
            f"chunk_size={self._chunk_size}, intervalo={self._interval_s}s"
        )
        while not self._stop_event.is_set():
            self.run_cycle()

            self._state = RefreshState.SLEEPING
            if self._stop_event.wait(self._interval_s):
                break
            self._state = RefreshState.IDLE

        self._state = RefreshState.STOPPED
        logger.info("Refresco de promociones detenido")

    def run_cycle(self) -> RefreshReport:
        """
        Ejecuta un ciclo completo: borrado, carga concurrente y drenaje.

        Returns:
            RefreshReport: Resumen del ciclo

        Raises:
            SourceFileError: Si el CSV no se puede abrir o leer (fatal)
        """
        with self._cycle_lock:
            report = RefreshReport(started_at=DateTimeUtils.now_utc())
            try:
                self._run_cycle(report)
            except SourceFileError:
                report.status = RefreshStatus.FAILED
                raise
            finally:
                report.finished_at = DateTimeUtils.now_utc()
                self._state = RefreshState.IDLE
                self._cycles += 1
                self._last_report = report
            self._log_report(report)
            return report

    def _run_cycle(self, report: RefreshReport) -> None:
        self._state = RefreshState.CLEANING
        cleaned, attempts, deleted = self._clean_storage()
        report.cleanup_attempts = attempts
        report.deleted_rows = deleted
        if not cleaned:
            report.status = RefreshStatus.ABANDONED
            return

        self._state = RefreshState.STREAMING
        try:
            rows = iter_source_rows(self._source_path)
            for chunk in iter_chunks(rows, self._chunk_size):
                self._dispatcher.dispatch(chunk)
        finally:
            # Incluso ante un error fatal de lectura se espera a los
            # chunks ya despachados antes de propagar
            self._state = RefreshState.DRAINING
            report.chunk_results = self._dispatcher.drain()

        report.status = RefreshStatus.PARTIAL if report.failed_chunks else RefreshStatus.COMPLETED

    def _clean_storage(self) -> Tuple[bool, int, int]:
        """
        Borra la tabla destino con reintentos.

        Returns:
            (exito, intentos, filas_borradas)
        """
        for attempt in range(1, self._cleanup_max_attempts + 1):
            try:
                deleted = self._store.delete_all()
                logger.info(f"Tabla de promociones vaciada ({deleted} filas)")
                return True, attempt, deleted
            except PromotionStoreError as e:
                logger.error(
                    f"Error borrando promociones (intento {attempt}/{self._cleanup_max_attempts}): {e}"
                )

            if attempt >= self._cleanup_max_attempts:
                break

            # Exponencial simple, acotado
            backoff_s = min(
                self._cleanup_max_backoff_s,
                self._cleanup_min_backoff_s * (2 ** (attempt - 1)),
            )
            if self._stop_event.wait(backoff_s):
                logger.warning("Refresco detenido durante el backoff de limpieza")
                return False, attempt, 0

        logger.error(
            f"Limpieza abandonada tras {self._cleanup_max_attempts} intentos; "
            f"el ciclo se omite hasta el proximo intervalo"
        )
        return False, self._cleanup_max_attempts, 0

    @staticmethod
    def _log_report(report: RefreshReport) -> None:
        summary = (
            f"chunks={report.chunks}, filas={report.rows_read}, insertadas={report.inserted}, "
            f"descartadas={report.rejected}, duplicadas={report.duplicates}, "
            f"chunks_fallidos={report.failed_chunks}, "
            f"duracion={report.elapsed_seconds:.2f}s"
        )
        if report.status == RefreshStatus.COMPLETED:
            logger.success(f"Procesamiento completo: {summary}")
        elif report.status == RefreshStatus.PARTIAL:
            logger.warning(f"Procesamiento parcial: {summary}")
        else:
            logger.error(f"Ciclo abandonado: {summary}")
