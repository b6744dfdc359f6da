"""
Tests unitarios para source_reader.py (lectura secuencial y chunks).
"""
from __future__ import annotations

import pytest

from app.application.services.source_reader import iter_chunks, iter_source_rows
from app.shared.exceptions.ingestion import SourceFileError


def test_reads_rows_in_file_order(write_csv) -> None:
    path = write_csv(["a,1,x", "b,2,y", "c,3,z"])

    rows = list(iter_source_rows(path))

    assert rows == [["a", "1", "x"], ["b", "2", "y"], ["c", "3", "z"]]


def test_skips_blank_lines(write_csv) -> None:
    path = write_csv(["a,1,x", "", "b,2,y"])

    assert len(list(iter_source_rows(path))) == 2


def test_header_is_not_skipped(write_csv) -> None:
    path = write_csv(["id,price,expiration_date", "a,1,x"])

    rows = list(iter_source_rows(path))

    assert rows[0] == ["id", "price", "expiration_date"]


def test_empty_file_yields_nothing(write_csv) -> None:
    path = write_csv([])

    assert list(iter_source_rows(path)) == []


def test_missing_file_is_fatal(tmp_path) -> None:
    with pytest.raises(SourceFileError, match="No se pudo abrir"):
        list(iter_source_rows(str(tmp_path / "missing.csv")))


def test_unterminated_quote_is_fatal(tmp_path) -> None:
    path = tmp_path / "broken.csv"
    path.write_text('a,1,x\nb,"2,y\n', encoding="utf-8")

    with pytest.raises(SourceFileError):
        list(iter_source_rows(str(path)))


def test_invalid_encoding_is_fatal(tmp_path) -> None:
    path = tmp_path / "latin.csv"
    path.write_bytes(b"a,1,x\n\xff\xfe,2,y\n")

    with pytest.raises(SourceFileError):
        list(iter_source_rows(str(path)))


class TestIterChunks:
    def test_splits_and_flushes_remainder(self) -> None:
        rows = [[str(i), "1", "x"] for i in range(5)]

        chunks = list(iter_chunks(rows, chunk_size=2))

        assert [len(c) for c in chunks] == [2, 2, 1]
        assert [c.index for c in chunks] == [0, 1, 2]
        assert [c.first_row_number for c in chunks] == [1, 3, 5]

    def test_exact_multiple_has_no_empty_tail(self) -> None:
        rows = [[str(i), "1", "x"] for i in range(4)]

        chunks = list(iter_chunks(rows, chunk_size=2))

        assert [len(c) for c in chunks] == [2, 2]

    def test_no_rows_no_chunks(self) -> None:
        assert list(iter_chunks([], chunk_size=10)) == []

    def test_is_lazy(self) -> None:
        consumed = []

        def rows():
            for i in range(100):
                consumed.append(i)
                yield [str(i), "1", "x"]

        first = next(iter_chunks(rows(), chunk_size=3))

        assert len(first) == 3
        assert len(consumed) == 3

    def test_rejects_invalid_chunk_size(self) -> None:
        with pytest.raises(ValueError):
            list(iter_chunks([["a", "1", "x"]], chunk_size=0))
