"""
Configuracion de fixtures para pytest.

InMemoryPromotionStore implementa el gateway de promociones en memoria
(thread-safe) con inyeccion de fallos, para testear el pipeline de
refresco sin Postgres.
"""
from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence

import pytest

from app.domain.entities.promotion import Promotion
from app.domain.repositories.promotion_store import IPromotionStore, IPromotionTransaction
from app.shared.exceptions.ingestion import PromotionStoreError


class InMemoryTransaction(IPromotionTransaction):
    """Transaccion en memoria: las filas se publican solo en commit()."""

    def __init__(self, store: "InMemoryPromotionStore") -> None:
        self._store = store
        self._staged: List[Promotion] = []
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def bulk_insert(self, promotions: Iterable[Promotion]) -> int:
        staged = list(promotions)
        if self._store.fail_insert_when is not None and self._store.fail_insert_when(staged):
            raise PromotionStoreError("fallo de COPY simulado")
        self._staged.extend(staged)
        return len(staged)

    def commit(self) -> None:
        if self._store.fail_commit:
            raise PromotionStoreError("fallo de commit simulado")
        self._store._publish(self._staged)
        self.committed = True

    def rollback(self) -> None:
        self._staged = []
        self.rolled_back = True

    def close(self) -> None:
        self.closed = True


class InMemoryPromotionStore(IPromotionStore):
    """
    Gateway en memoria.

    Un id repetido dentro de la misma transaccion o contra filas ya
    confirmadas hace fallar el commit completo (como la PK en Postgres).
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.rows: Dict[str, Promotion] = {}
        self.transactions: List[InMemoryTransaction] = []
        self.delete_calls = 0
        self.commits = 0

        # Inyeccion de fallos
        self.fail_ping = False
        self.fail_begin = False
        self.fail_commit = False
        self.fail_deletes = 0
        self.fail_get = False
        self.fail_insert_when: Optional[Callable[[Sequence[Promotion]], bool]] = None

    def ping(self) -> None:
        if self.fail_ping:
            raise PromotionStoreError("base de datos no disponible")

    def ensure_schema(self) -> None:
        pass

    def delete_all(self) -> int:
        with self._lock:
            self.delete_calls += 1
            if self.fail_deletes > 0:
                self.fail_deletes -= 1
                raise PromotionStoreError("fallo de DELETE simulado")
            deleted = len(self.rows)
            self.rows.clear()
            return deleted

    def begin(self) -> InMemoryTransaction:
        if self.fail_begin:
            raise PromotionStoreError("pool agotado")
        transaction = InMemoryTransaction(self)
        with self._lock:
            self.transactions.append(transaction)
        return transaction

    def get_by_id(self, promotion_id: str) -> Optional[Promotion]:
        if self.fail_get:
            raise PromotionStoreError("conexion perdida")
        with self._lock:
            return self.rows.get(promotion_id)

    def count(self) -> int:
        with self._lock:
            return len(self.rows)

    def _publish(self, promotions: List[Promotion]) -> None:
        with self._lock:
            ids = [p.id for p in promotions]
            if len(set(ids)) != len(ids) or any(i in self.rows for i in ids):
                raise PromotionStoreError("duplicate key value violates unique constraint")
            for promotion in promotions:
                self.rows[promotion.id] = promotion
            self.commits += 1


@pytest.fixture
def memory_store() -> InMemoryPromotionStore:
    return InMemoryPromotionStore()


@pytest.fixture
def write_csv(tmp_path: Path) -> Callable[..., str]:
    """Escribe un CSV temporal y retorna su ruta."""

    def _write(lines: Sequence[str], name: str = "promotions.csv") -> str:
        path = tmp_path / name
        path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        return str(path)

    return _write
