"""Import phase of a restore.

Inserts snapshot rows table by table in parent-first order, then restores
self-referential columns.

Tables owning a self-referential foreign key are inserted with those
columns forced to NULL, so no row depends on a sibling that is not
inserted yet.  Once every table is inserted, each row whose original
self-reference was non-null gets one targeted UPDATE keyed by primary key.
The progress event of a self-referencing table is emitted only after its
updates, so events arrive in completion order rather than table order.

Every failure propagates.  Chunks committed before the failure stay
committed; nothing is rolled back.

Usage:
    from db_snapshot.transfer.importer import import_all

    summary = await import_all(store, catalog, snapshot, chunk_size=50)
    summary.inserted["Contact"]                  # rows inserted
    summary.self_references_restored["Contact"]  # rows updated
"""

import logging

from pydantic import BaseModel, Field

from db_snapshot.catalog.models import TableCatalog
from db_snapshot.catalog.orderer import DependencyOrder, resolve_order
from db_snapshot.stores.base import RelationalStore
from db_snapshot.transfer import statements
from db_snapshot.transfer.batch import DEFAULT_CHUNK_SIZE, write_batch
from db_snapshot.transfer.progress import ProgressCallback, report_progress
from db_snapshot.transfer.snapshot import Snapshot

logger = logging.getLogger(__name__)


class ImportSummary(BaseModel):
    """Counts produced by an import.

    Attributes:
        inserted: Rows inserted per table (every catalog table present).
        self_references_restored: Rows updated per self-referencing table.
        groups: Atomic batch groups executed across all tables.
    """

    inserted: dict[str, int] = Field(default_factory=dict)
    self_references_restored: dict[str, int] = Field(default_factory=dict)
    groups: int = 0


async def insert_tables(
    store: RelationalStore,
    snapshot: Snapshot,
    order: DependencyOrder,
    summary: ImportSummary,
    on_progress: ProgressCallback | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> None:
    """Insert every table's rows in forward order.

    Self-referential columns are bound as NULL.  Emits one ``import``
    progress event per table without self-references, including empty
    ones; tables with self-references report from
    ``restore_self_references``.

    Args:
        store: Store implementing ``RelationalStore``.
        snapshot: Snapshot to insert.
        order: Dependency order of the catalog.
        summary: Summary updated in place.
        on_progress: Optional progress callback.
        chunk_size: Maximum statements per atomic group.

    Raises:
        ValueError: If a row of a self-referencing table has no primary
            key value (checked before any write).
    """
    check_self_reference_keys(snapshot, order)
    total = len(order.forward)

    for index, table_name in enumerate(order.forward):
        rows = snapshot.rows(table_name)
        breaks = order.breaks_for(table_name)
        overrides = {cb.column: None for cb in breaks}

        stmts = statements.insert_rows(table_name, rows, overrides=overrides)
        summary.groups += await write_batch(store, stmts, chunk_size=chunk_size)
        summary.inserted[table_name] = len(stmts)
        logger.debug("Inserted %s: %d rows", table_name, len(stmts))

        if not breaks:
            report_progress(on_progress, "import", table_name, index, total)


def check_self_reference_keys(snapshot: Snapshot, order: DependencyOrder) -> None:
    """Ensure every row of a self-referencing table has a primary key.

    Without one, its targeted UPDATE could never match the row.

    Raises:
        ValueError: Naming the first table and row index without a key.
    """
    for table_name in dict.fromkeys(cb.table for cb in order.cycle_breaks):
        pk = order.breaks_for(table_name)[0].pk
        for i, row in enumerate(snapshot.rows(table_name)):
            if row.get(pk) is None:
                raise ValueError(
                    f"{table_name} row {i} has no '{pk}' value; "
                    f"its self-references cannot be restored"
                )


async def restore_self_references(
    store: RelationalStore,
    snapshot: Snapshot,
    order: DependencyOrder,
    summary: ImportSummary,
    on_progress: ProgressCallback | None = None,
) -> None:
    """Restore self-referential values nulled during insert.

    One UPDATE per row that had at least one non-null self-reference,
    setting all of that row's non-null self-referential columns at once.
    Emits the ``import`` progress event of each self-referencing table once
    its updates are done.

    Args:
        store: Store implementing ``RelationalStore``.
        snapshot: Snapshot holding the original values.
        order: Dependency order of the catalog.
        summary: Summary updated in place.
        on_progress: Optional progress callback.

    Raises:
        ValueError: If a row of a self-referencing table has no primary
            key value (checked before any write).
    """
    check_self_reference_keys(snapshot, order)
    tables = list(dict.fromkeys(cb.table for cb in order.cycle_breaks))
    total = len(order.forward)

    for table_name in tables:
        breaks = order.breaks_for(table_name)
        pk = breaks[0].pk
        restored = 0
        for row in snapshot.rows(table_name):
            values = {
                cb.column: row[cb.column]
                for cb in breaks
                if row.get(cb.column) is not None
            }
            if not values:
                continue
            stmt = statements.update_by_pk(table_name, pk, row[pk], values)
            await store.execute(
                stmt.sql, stmt.params, table=stmt.table, columns=stmt.columns
            )
            restored += 1

        summary.self_references_restored[table_name] = restored
        logger.debug("Restored %d self-references on %s", restored, table_name)

        index = order.forward.index(table_name)
        report_progress(on_progress, "import", table_name, index, total)


async def import_all(
    store: RelationalStore,
    catalog: TableCatalog,
    snapshot: Snapshot,
    on_progress: ProgressCallback | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> ImportSummary:
    """Insert a snapshot into a store, then restore self-references.

    The store is expected to be empty (see ``delete_all``).

    Args:
        store: Store implementing ``RelationalStore``.
        catalog: Table catalog (parent-first).
        snapshot: Snapshot to import.
        on_progress: Optional callback, invoked once per table.
        chunk_size: Maximum statements per atomic group.

    Returns:
        ``ImportSummary`` with per-table counts.

    Raises:
        CatalogError: If the catalog is malformed.
        ValueError: If a self-referencing row has no primary key value
            (raised before any write).
        Exception: Whatever the store raised; tables after the failing one
            are never touched.

    Example:
        await delete_all(store, catalog)
        summary = await import_all(store, catalog, snapshot)
    """
    order = resolve_order(catalog)
    summary = ImportSummary()

    logger.info("Importing %d tables", len(order.forward))
    await insert_tables(store, snapshot, order, summary, on_progress, chunk_size)
    await restore_self_references(store, snapshot, order, summary, on_progress)

    return summary
