"""Tests for native type binding in the SQLAlchemy store."""

import uuid
from datetime import date, datetime, time, timezone
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import (
    BigInteger,
    Boolean,
    Date,
    DateTime,
    Float,
    LargeBinary,
    Numeric,
    String,
    Time,
    Uuid,
)
from sqlalchemy.dialects import postgresql

from db_snapshot.stores.base import Statement
from db_snapshot.stores.sqlalchemy_store import AsyncSQLAlchemyStore, coerce_value


class TestCoerceValuePostgres:
    """Values bound for asyncpg, which refuses text for typed columns."""

    def test_temporal_text(self) -> None:
        assert coerce_value(
            "2026-01-15T09:30:00+00:00", postgresql.TIMESTAMP(timezone=True), "postgresql"
        ) == datetime(2026, 1, 15, 9, 30, tzinfo=timezone.utc)
        assert coerce_value("2026-01-15", Date(), "postgresql") == date(2026, 1, 15)
        assert coerce_value("09:30:00", Time(), "postgresql") == time(9, 30)

    def test_uuid_text(self) -> None:
        value = uuid.uuid4()
        assert coerce_value(str(value), postgresql.UUID(), "postgresql") == value
        assert coerce_value(str(value), Uuid(), "postgresql") == value

    def test_binary_base64(self) -> None:
        assert coerce_value("AAH+/w==", postgresql.BYTEA(), "postgresql") == b"\x00\x01\xfe\xff"

    def test_boolean_and_numeric(self) -> None:
        assert coerce_value(1, Boolean(), "postgresql") is True
        assert coerce_value(1.5, Numeric(10, 2), "postgresql") == Decimal("1.5")
        assert coerce_value(7, postgresql.NUMERIC(), "postgresql") == Decimal("7")
        assert coerce_value(1.5, Float(), "postgresql") == 1.5
        assert isinstance(coerce_value(1.5, Float(), "postgresql"), float)

    def test_unchanged(self) -> None:
        assert coerce_value("Acme", String(), "postgresql") == "Acme"
        assert coerce_value(7, BigInteger(), "postgresql") == 7
        assert coerce_value(None, DateTime(), "postgresql") is None
        assert coerce_value("x", None, "postgresql") == "x"

    def test_malformed_text(self) -> None:
        with pytest.raises(ValueError):
            coerce_value("yesterday", DateTime(), "postgresql")
        with pytest.raises(ValueError):
            coerce_value("not base64!", LargeBinary(), "postgresql")


class TestCoerceValueSqlite:
    def test_text_kept(self) -> None:
        assert coerce_value("2026-01-15", Date(), "sqlite") == "2026-01-15"
        assert coerce_value(1, Boolean(), "sqlite") == 1

    def test_binary_decoded(self) -> None:
        assert coerce_value("AAE=", LargeBinary(), "sqlite") == b"\x00\x01"


class TestTypedBinding:
    async def test_batch_binds_reflected_types(self, tmp_path: Path) -> None:
        store = AsyncSQLAlchemyStore(f"sqlite:///{tmp_path / 'typed.db'}")
        try:
            await store.execute('CREATE TABLE "File" ("id" INTEGER PRIMARY KEY, "body" BLOB)')
            await store.execute_batch([
                Statement(
                    'INSERT INTO "File" ("id", "body") VALUES (:p0, :p1)',
                    {"p0": 1, "p1": "AAE="},
                    "File",
                    {"p0": "id", "p1": "body"},
                )
            ])
            await store.execute(
                'UPDATE "File" SET "body" = :set_0 WHERE "id" = :pk',
                {"set_0": "/w==", "pk": 1},
                table="File",
                columns={"set_0": "body", "pk": "id"},
            )

            rows = await store.query('SELECT typeof("body") AS kind, "body" FROM "File"')
            assert rows == [{"kind": "blob", "body": b"\xff"}]
        finally:
            await store.close()

    async def test_untyped_statement_bound_as_given(self, tmp_path: Path) -> None:
        store = AsyncSQLAlchemyStore(f"sqlite:///{tmp_path / 'plain.db'}")
        try:
            await store.execute('CREATE TABLE "File" ("id" INTEGER PRIMARY KEY, "body" BLOB)')
            await store.execute('INSERT INTO "File" VALUES (1, :body)', {"body": "AAE="})
            rows = await store.query('SELECT typeof("body") AS kind FROM "File"')
            assert rows == [{"kind": "text"}]
        finally:
            await store.close()
