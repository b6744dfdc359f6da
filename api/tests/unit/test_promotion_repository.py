"""
Tests unitarios para promotion_repository.py.

La transaccion COPY se prueba con una conexion psycopg simulada; las
operaciones basadas en SQLAlchemy Core se prueban sobre SQLite.
"""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

psycopg = pytest.importorskip("psycopg")

from sqlalchemy import create_engine

from app.domain.entities.promotion import Promotion
from app.infrastructure.repositories.promotion_repository import (
    COPY_PROMOTIONS_SQL,
    PostgresPromotionStore,
    PostgresPromotionTransaction,
)
from app.shared.exceptions.ingestion import PromotionStoreError, StoreUnavailableError


def _promotion(promotion_id: str = "p1") -> Promotion:
    return Promotion(
        id=promotion_id,
        price=Decimal("9.99"),
        expiration_date=datetime(2030, 1, 2, 15, 4, 5, tzinfo=timezone.utc),
    )


def _pooled_connection():
    pooled = MagicMock()
    conn = pooled.driver_connection
    cursor = conn.cursor.return_value.__enter__.return_value
    copy = cursor.copy.return_value.__enter__.return_value
    return pooled, conn, cursor, copy


class TestPostgresPromotionTransaction:
    def test_bulk_insert_streams_rows_through_copy(self) -> None:
        pooled, _, cursor, copy = _pooled_connection()
        transaction = PostgresPromotionTransaction(pooled)

        sent = transaction.bulk_insert([_promotion("p1"), _promotion("p2")])

        assert sent == 2
        cursor.copy.assert_called_once_with(COPY_PROMOTIONS_SQL)
        first_row = copy.write_row.call_args_list[0].args[0]
        assert first_row == ("p1", Decimal("9.99"), datetime(2030, 1, 2, 15, 4, 5))

    def test_copy_error_is_wrapped(self) -> None:
        pooled, _, _, copy = _pooled_connection()
        copy.write_row.side_effect = psycopg.errors.UniqueViolation("duplicate key")
        transaction = PostgresPromotionTransaction(pooled)

        with pytest.raises(PromotionStoreError, match="COPY"):
            transaction.bulk_insert([_promotion()])

    def test_commit_error_is_wrapped(self) -> None:
        pooled, conn, _, _ = _pooled_connection()
        conn.commit.side_effect = psycopg.OperationalError("server closed the connection")
        transaction = PostgresPromotionTransaction(pooled)

        with pytest.raises(PromotionStoreError):
            transaction.commit()

    def test_close_returns_connection_once(self) -> None:
        pooled, _, _, _ = _pooled_connection()

        with PostgresPromotionTransaction(pooled) as transaction:
            transaction.commit()
        transaction.close()

        pooled.close.assert_called_once()


class TestPostgresPromotionStore:
    @pytest.fixture
    def store(self, tmp_path) -> PostgresPromotionStore:
        engine = create_engine(f"sqlite:///{tmp_path / 'promotions.db'}")
        store = PostgresPromotionStore(engine)
        store.ensure_schema()
        yield store
        engine.dispose()

    def _insert(self, store: PostgresPromotionStore, *ids: str) -> None:
        from app.infrastructure.database.models import PromotionModel

        with store.engine.begin() as conn:
            conn.execute(
                PromotionModel.__table__.insert(),
                [
                    {"id": i, "price": Decimal("9.99"), "expiration_date": datetime(2030, 1, 2, 15, 4, 5)}
                    for i in ids
                ],
            )

    def test_ping(self, store: PostgresPromotionStore) -> None:
        store.ping()

    def test_get_by_id(self, store: PostgresPromotionStore) -> None:
        self._insert(store, "p1")

        promotion = store.get_by_id("p1")

        assert promotion is not None
        assert promotion.price == Decimal("9.99")
        assert promotion.expiration_date == datetime(2030, 1, 2, 15, 4, 5)

    def test_get_by_id_missing(self, store: PostgresPromotionStore) -> None:
        assert store.get_by_id("nope") is None

    def test_delete_all_and_count(self, store: PostgresPromotionStore) -> None:
        self._insert(store, "p1", "p2", "p3")

        assert store.count() == 3
        assert store.delete_all() == 3
        assert store.count() == 0

    def test_ping_failure_is_unavailable(self) -> None:
        engine = MagicMock()
        engine.connect.side_effect = psycopg.OperationalError("connection refused")

        with pytest.raises(StoreUnavailableError):
            PostgresPromotionStore(engine).ping()

    def test_delete_failure_is_wrapped(self) -> None:
        engine = MagicMock()
        engine.begin.side_effect = psycopg.OperationalError("connection refused")

        with pytest.raises(PromotionStoreError):
            PostgresPromotionStore(engine).delete_all()

    def test_begin_failure_is_wrapped(self) -> None:
        engine = MagicMock()
        engine.raw_connection.side_effect = psycopg.OperationalError("pool timeout")

        with pytest.raises(PromotionStoreError):
            PostgresPromotionStore(engine).begin()


def test_identifier_column_has_no_length_limit() -> None:
    from sqlalchemy.dialects import postgresql
    from sqlalchemy.schema import CreateTable

    from app.infrastructure.database.models import PromotionModel

    ddl = str(CreateTable(PromotionModel.__table__).compile(dialect=postgresql.dialect()))

    assert PromotionModel.__table__.c.id.type.length is None
    assert "id VARCHAR NOT NULL" in ddl


def test_long_identifier_is_copied_verbatim() -> None:
    pooled, _, _, copy = _pooled_connection()
    long_id = "x" * 300

    PostgresPromotionTransaction(pooled).bulk_insert([_promotion(long_id)])

    assert copy.write_row.call_args.args[0][0] == long_id
