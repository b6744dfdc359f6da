"""
Interfaz del almacenamiento de promociones.
Define el contrato que debe cumplir cualquier implementacion
(PostgreSQL en produccion, memoria en tests).
"""
from abc import ABC, abstractmethod
from typing import Iterable, Optional

from app.domain.entities.promotion import Promotion


class IPromotionTransaction(ABC):
    """
    Transaccion abierta sobre una conexion propia del pool.
    Nunca se comparte entre workers.
    """

    @abstractmethod
    def bulk_insert(self, promotions: Iterable[Promotion]) -> int:
        """
        Escribe las promociones con carga masiva dentro de la transaccion.

        Args:
            promotions: Promociones ya validadas, en orden de archivo

        Returns:
            int: Numero de filas enviadas

        Raises:
            PromotionStoreError: Si falla la preparacion o el flush
        """
        pass

    @abstractmethod
    def commit(self) -> None:
        """Confirma la transaccion. Lanza PromotionStoreError si falla."""
        pass

    @abstractmethod
    def rollback(self) -> None:
        """Descarta la transaccion. Lanza PromotionStoreError si falla."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Devuelve la conexion al pool."""
        pass

    def __enter__(self) -> "IPromotionTransaction":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False


class IPromotionStore(ABC):
    """
    Interfaz del gateway transaccional sobre la tabla de promociones.
    Todas las operaciones son bloqueantes.
    """

    @abstractmethod
    def ping(self) -> None:
        """
        Verifica conectividad.

        Raises:
            StoreUnavailableError: Si la base de datos no responde
        """
        pass

    @abstractmethod
    def ensure_schema(self) -> None:
        """Crea la tabla destino si no existe (idempotente)."""
        pass

    @abstractmethod
    def delete_all(self) -> int:
        """
        Borra todas las promociones.

        Returns:
            int: Filas borradas
        """
        pass

    @abstractmethod
    def begin(self) -> IPromotionTransaction:
        """Abre una transaccion nueva con su propia conexion."""
        pass

    @abstractmethod
    def get_by_id(self, promotion_id: str) -> Optional[Promotion]:
        """
        Obtiene una promocion por su ID.

        Returns:
            Optional[Promotion]: Promocion encontrada o None
        """
        pass

    @abstractmethod
    def count(self) -> int:
        """Numero de promociones almacenadas."""
        pass
