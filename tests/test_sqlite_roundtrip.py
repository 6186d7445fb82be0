"""End-to-end export and restore against a real SQLite database."""

from pathlib import Path

import pytest
from sqlalchemy.exc import IntegrityError

from db_snapshot.catalog import TableCatalog, TableDef
from db_snapshot.stores.sqlalchemy_store import AsyncSQLAlchemyStore
from db_snapshot.transfer import (
    RestoreState,
    SnapshotRestorer,
    export_snapshot,
    load_snapshot_document,
    save_snapshot,
)

SCHEMA = [
    'CREATE TABLE "Company" ("id" INTEGER PRIMARY KEY, "name" TEXT NOT NULL)',
    'CREATE TABLE "Contact" ('
    ' "id" INTEGER PRIMARY KEY,'
    ' "name" TEXT NOT NULL,'
    ' "companyId" INTEGER REFERENCES "Company"("id"),'
    ' "referredById" INTEGER REFERENCES "Contact"("id"))',
]


async def _seed(store: AsyncSQLAlchemyStore, document: dict) -> None:
    for ddl in SCHEMA:
        await store.execute(ddl)
    for table in ("Company", "Contact"):
        for row in document[table]:
            cols = ", ".join(f'"{c}"' for c in row)
            params = ", ".join(f":{c}" for c in row)
            await store.execute(f'INSERT INTO "{table}" ({cols}) VALUES ({params})', row)


async def _rows(store: AsyncSQLAlchemyStore, table: str) -> list[dict]:
    return await store.query(f'SELECT * FROM "{table}" ORDER BY "id"')


@pytest.fixture
async def store(tmp_path: Path):
    store = AsyncSQLAlchemyStore(f"sqlite:///{tmp_path / 'contacts.db'}")
    yield store
    await store.close()


class TestSqliteRoundTrip:
    async def test_foreign_keys_enforced(self, store, company_contact_document) -> None:
        await _seed(store, company_contact_document)
        with pytest.raises(IntegrityError):
            await store.execute('DELETE FROM "Company"')

    async def test_export_then_restore(
        self,
        store,
        tmp_path: Path,
        company_contact_catalog: TableCatalog,
        company_contact_document: dict,
    ) -> None:
        await _seed(store, company_contact_document)

        snapshot = await export_snapshot(store, company_contact_catalog)
        path = save_snapshot(snapshot, output_path=str(tmp_path / "snap.json"))

        # Diverge from the snapshot before restoring
        await store.execute('UPDATE "Contact" SET "referredById" = NULL')
        await store.execute('DELETE FROM "Contact" WHERE "id" = 2')
        await store.execute(
            'INSERT INTO "Company" ("id", "name") VALUES (:id, :name)',
            {"id": 9, "name": "Initech"},
        )

        restorer = SnapshotRestorer(store, company_contact_catalog, chunk_size=2)
        summary = await restorer.run(load_snapshot_document(path))

        assert restorer.state is RestoreState.COMPLETE
        assert summary.inserted == {"Company": 2, "Contact": 3}
        assert summary.self_references_restored == {"Contact": 1}
        assert await _rows(store, "Company") == company_contact_document["Company"]
        assert await _rows(store, "Contact") == company_contact_document["Contact"]

    async def test_restore_into_self_referencing_chain(
        self, store, company_contact_catalog, company_contact_document
    ) -> None:
        """Rows referring to later rows restore regardless of insert order."""
        await _seed(store, {"Company": [], "Contact": []})
        document = dict(company_contact_document)
        document["Contact"] = [
            {"id": 1, "name": "Ada", "companyId": None, "referredById": 3},
            {"id": 2, "name": "Grace", "companyId": None, "referredById": 1},
            {"id": 3, "name": "Linus", "companyId": None, "referredById": 2},
        ]

        summary = await SnapshotRestorer(store, company_contact_catalog).run(document)

        assert summary.self_references_restored == {"Contact": 3}
        assert await _rows(store, "Contact") == document["Contact"]

    async def test_binary_column_round_trip(self, store, tmp_path: Path) -> None:
        """Base64 text in the snapshot is written back as a BLOB."""
        catalog = TableCatalog(tables=[TableDef(name="Attachment")])
        await store.execute(
            'CREATE TABLE "Attachment" ('
            ' "id" INTEGER PRIMARY KEY, "data" BLOB, "createdAt" TIMESTAMP)'
        )
        payload = b"\x00\x01\xfe\xff"
        await store.execute(
            'INSERT INTO "Attachment" VALUES (1, :data, :created)',
            {"data": payload, "created": "2026-01-15 09:30:00"},
        )

        snapshot = await export_snapshot(store, catalog)
        assert snapshot.rows("Attachment")[0]["data"] == "AAH+/w=="
        path = save_snapshot(snapshot, output_path=str(tmp_path / "snap.json"))

        await SnapshotRestorer(store, catalog).run(load_snapshot_document(path))

        rows = await store.query(
            'SELECT typeof("data") AS kind, "data", "createdAt" FROM "Attachment"'
        )
        assert rows == [
            {"kind": "blob", "data": payload, "createdAt": "2026-01-15 09:30:00"}
        ]
