"""
Tests unitarios para chunk_loader.py.

Un chunk es atomico: o se confirman todas sus filas validas o ninguna.
Los errores de almacenamiento quedan en el ChunkResult, no se propagan.
"""
from __future__ import annotations

from decimal import Decimal

from app.application.services.chunk_loader import ChunkLoader
from app.domain.entities.refresh import Chunk
from app.shared.constants.promotion_constants import RejectionReason


EXP = "2030-01-02 15:04:05 +0000 UTC"


def _chunk(rows, index: int = 0, first_row_number: int = 1) -> Chunk:
    return Chunk(index=index, first_row_number=first_row_number, rows=tuple(rows))


def test_loads_valid_rows(memory_store) -> None:
    loader = ChunkLoader(memory_store)

    result = loader.load(_chunk([["p1", "1.00", EXP], ["p2", "2.00", EXP]]))

    assert result.succeeded
    assert result.rows_read == 2
    assert result.inserted == 2
    assert memory_store.count() == 2
    assert memory_store.transactions[0].closed


def test_invalid_rows_are_skipped_not_fatal(memory_store) -> None:
    loader = ChunkLoader(memory_store)

    result = loader.load(_chunk([["p1", "abc", EXP], ["p2", "2.00", EXP], ["p3"]], first_row_number=5))

    assert result.succeeded
    assert result.inserted == 1
    assert [r.reason for r in result.rejections] == [
        RejectionReason.INVALID_PRICE,
        RejectionReason.MALFORMED_ROW,
    ]
    assert [r.row_number for r in result.rejections] == [5, 7]
    assert set(memory_store.rows) == {"p2"}


def test_all_invalid_commits_empty_write(memory_store) -> None:
    loader = ChunkLoader(memory_store)

    result = loader.load(_chunk([["p1", "-1", EXP]]))

    assert result.succeeded
    assert result.inserted == 0
    assert memory_store.transactions[0].committed


def test_commit_failure_discards_whole_chunk(memory_store) -> None:
    memory_store.fail_commit = True
    loader = ChunkLoader(memory_store)

    result = loader.load(_chunk([["p1", "1.00", EXP], ["p2", "2.00", EXP]], index=3))

    assert not result.succeeded
    assert result.chunk_index == 3
    assert result.inserted == 0
    assert memory_store.count() == 0
    transaction = memory_store.transactions[0]
    assert transaction.rolled_back
    assert transaction.closed


def test_repeated_id_keeps_last_row_in_file_order(memory_store) -> None:
    loader = ChunkLoader(memory_store)

    result = loader.load(_chunk([["p1", "1.00", EXP], ["p1", "2.00", EXP], ["bad", "x", EXP]]))

    assert result.succeeded
    assert result.inserted == 1
    assert result.duplicates == 1
    assert result.rejected == 1
    assert memory_store.rows["p1"].price == Decimal("2.00")


def test_repeated_id_does_not_drop_sibling_rows(memory_store) -> None:
    rows = [[f"p{i}", "1.00", EXP] for i in range(998)]
    rows += [["dup", "1", EXP], ["dup", "2", EXP]]
    loader = ChunkLoader(memory_store)

    result = loader.load(_chunk(rows))

    assert result.succeeded
    assert memory_store.count() == 999


def test_id_already_loaded_by_other_chunk_fails_the_chunk(memory_store) -> None:
    loader = ChunkLoader(memory_store)
    loader.load(_chunk([["p1", "1.00", EXP]], index=0))

    result = loader.load(_chunk([["p1", "2.00", EXP], ["p2", "2.00", EXP]], index=1))

    assert not result.succeeded
    assert "duplicate" in result.store_error
    assert set(memory_store.rows) == {"p1"}


def test_long_identifier_is_loaded_verbatim(memory_store) -> None:
    long_id = "x" * 300
    loader = ChunkLoader(memory_store)

    result = loader.load(_chunk([[long_id, "1.00", EXP]]))

    assert result.succeeded
    assert memory_store.get_by_id(long_id) is not None


def test_begin_failure_is_reported(memory_store) -> None:
    memory_store.fail_begin = True
    loader = ChunkLoader(memory_store)

    result = loader.load(_chunk([["p1", "1.00", EXP]]))

    assert not result.succeeded
    assert result.rows_read == 1
    assert result.store_error == "pool agotado"
