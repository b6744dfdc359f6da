"""
Entidades del ciclo de refresco: chunks, rechazos y reportes.

Se mantienen libres de I/O para poder testearlas facilmente.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Sequence

from app.shared.constants.promotion_constants import RejectionReason, RefreshStatus

# Fila cruda del CSV, en orden: (id, price, expiration_date)
RawRow = Sequence[str]


@dataclass(frozen=True)
class Chunk:
    """
    Lote acotado de filas crudas, en orden de archivo.

    first_row_number es el numero (1-based) de la primera fila del chunk
    dentro del archivo; se usa solo para los logs de rechazo.
    """

    index: int
    first_row_number: int
    rows: tuple[RawRow, ...]

    def __len__(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class RecordRejection:
    """Fila descartada por el parser, con el motivo."""

    row_number: int
    reason: RejectionReason
    value: str
    detail: str = ""


@dataclass(frozen=True)
class ChunkResult:
    """
    Resultado de cargar un chunk.

    duplicates cuenta las filas validas descartadas porque una fila
    posterior del mismo chunk repite su id.

    store_error es None si la transaccion se confirmo. Si no, contiene el
    mensaje del fallo y ninguna fila del chunk quedo escrita.
    """

    chunk_index: int
    rows_read: int
    inserted: int
    rejections: tuple[RecordRejection, ...] = ()
    duplicates: int = 0
    store_error: Optional[str] = None

    @property
    def rejected(self) -> int:
        return len(self.rejections)

    @property
    def succeeded(self) -> bool:
        return self.store_error is None


@dataclass
class RefreshReport:
    """Resumen de un ciclo completo (borrado + carga)."""

    started_at: datetime
    finished_at: Optional[datetime] = None
    status: RefreshStatus = RefreshStatus.COMPLETED
    cleanup_attempts: int = 0
    deleted_rows: int = 0
    chunk_results: list[ChunkResult] = field(default_factory=list)

    @property
    def chunks(self) -> int:
        return len(self.chunk_results)

    @property
    def rows_read(self) -> int:
        return sum(r.rows_read for r in self.chunk_results)

    @property
    def inserted(self) -> int:
        return sum(r.inserted for r in self.chunk_results)

    @property
    def rejected(self) -> int:
        return sum(r.rejected for r in self.chunk_results)

    @property
    def duplicates(self) -> int:
        return sum(r.duplicates for r in self.chunk_results)

    @property
    def failed_chunks(self) -> int:
        return sum(1 for r in self.chunk_results if not r.succeeded)

    @property
    def elapsed_seconds(self) -> Optional[float]:
        if self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()

    def to_summary(self) -> dict[str, Any]:
        """Representacion plana para logs y para /health."""
        return {
            "status": self.status.value,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "cleanup_attempts": self.cleanup_attempts,
            "deleted_rows": self.deleted_rows,
            "chunks": self.chunks,
            "rows_read": self.rows_read,
            "inserted": self.inserted,
            "rejected": self.rejected,
            "duplicates": self.duplicates,
            "failed_chunks": self.failed_chunks,
        }
