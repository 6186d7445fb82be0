"""Snapshot export.

Reads every catalog table in parent-first order into an in-memory
``Snapshot``.  Export is best-effort: a table that cannot be read is
logged and recorded as empty, and the export carries on.
"""

import logging
from datetime import datetime, timezone

from db_snapshot.catalog.models import TableCatalog
from db_snapshot.catalog.orderer import resolve_order
from db_snapshot.stores.base import RelationalStore
from db_snapshot.transfer import statements
from db_snapshot.transfer.progress import ProgressCallback, report_progress
from db_snapshot.transfer.snapshot import SNAPSHOT_VERSION, Snapshot, SnapshotMeta, normalize_row

logger = logging.getLogger(__name__)


async def export_snapshot(
    store: RelationalStore,
    catalog: TableCatalog,
    on_progress: ProgressCallback | None = None,
) -> Snapshot:
    """Export all catalog tables from a store.

    Issues one full-table read per table.  Never writes to the store.

    Args:
        store: Store implementing ``RelationalStore``.
        catalog: Table catalog (parent-first).
        on_progress: Optional callback, invoked once per table after its
            read succeeds or its failure is isolated.

    Returns:
        ``Snapshot`` with one row list per catalog table.

    Raises:
        CatalogError: If the catalog is malformed.

    Example:
        snapshot = await export_snapshot(store, CONTACTS_CATALOG)
        path = save_snapshot(snapshot)
    """
    order = resolve_order(catalog)
    total = len(order.forward)
    tables: dict[str, list[dict]] = {}

    logger.info("Exporting %d tables", total)

    for index, table_name in enumerate(order.forward):
        try:
            rows = await store.query(statements.select_all(table_name))
            tables[table_name] = [normalize_row(row) for row in rows]
            logger.debug("Exported %s: %d rows", table_name, len(rows))
        except Exception:
            logger.warning("Failed to export %s", table_name, exc_info=True)
            tables[table_name] = []

        report_progress(on_progress, "export", table_name, index, total)

    meta = SnapshotMeta(
        exported_at=datetime.now(timezone.utc).isoformat(),
        version=SNAPSHOT_VERSION,
    )
    return Snapshot(meta=meta, tables=tables)
