"""
Hilo de fondo que ejecuta el refresco periodico de promociones.

El refresco es bloqueante (lectura de archivo, barrera de chunks, sleep),
por eso corre en un thread dedicado y no en el event loop de FastAPI.

Un error no controlado dentro del bucle (p.ej. SourceFileError) es fatal:
se loguea y se pide al proceso que termine (SIGTERM a si mismo) para que
el supervisor lo reinicie.
"""
import os
import signal
import threading
from typing import Callable, Optional

from loguru import logger

from app.application.services.refresh_orchestrator import PromotionRefresher


THREAD_NAME = "promotions-refresher"


def terminate_process(exc: BaseException) -> None:
    """Pide un apagado ordenado del proceso actual."""
    logger.critical(f"Terminando el proceso por error fatal en el refresco: {exc}")
    os.kill(os.getpid(), signal.SIGTERM)


class RefreshRunner:
    """
    Gestiona el thread del refresco.

    Uso:
        runner = RefreshRunner(refresher)
        runner.start()
        ...
        runner.stop()
    """

    def __init__(
        self,
        refresher: PromotionRefresher,
        on_fatal: Callable[[BaseException], None] = terminate_process,
    ) -> None:
        self._refresher = refresher
        self._on_fatal = on_fatal
        self._thread: Optional[threading.Thread] = None
        self._error: Optional[BaseException] = None

    @property
    def refresher(self) -> PromotionRefresher:
        return self._refresher

    @property
    def error(self) -> Optional[BaseException]:
        """Error fatal que detuvo el bucle, si lo hubo."""
        return self._error

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            logger.warning("El refresco de promociones ya esta corriendo")
            return
        # daemon: un ciclo en curso no debe impedir que el proceso termine
        self._thread = threading.Thread(target=self._run, name=THREAD_NAME, daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> bool:
        """
        Detiene el bucle entre ciclos.

        Returns:
            bool: True si el thread termino dentro del timeout
        """
        self._refresher.stop()
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def _run(self) -> None:
        try:
            self._refresher.run_forever()
        except Exception as e:
            self._error = e
            logger.exception("Error fatal en el refresco de promociones")
            self._on_fatal(e)
