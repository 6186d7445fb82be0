"""Delete phase of a restore.

Clears every catalog table in child-first order.  Self-referential
columns are nulled before their table is deleted so no row is ever
blocked by a reference from a sibling row.
"""

import logging

from db_snapshot.catalog.models import TableCatalog
from db_snapshot.catalog.orderer import DependencyOrder, resolve_order
from db_snapshot.stores.base import RelationalStore
from db_snapshot.transfer import statements
from db_snapshot.transfer.progress import ProgressCallback, report_progress

logger = logging.getLogger(__name__)


async def delete_all(
    store: RelationalStore,
    catalog: TableCatalog,
    on_progress: ProgressCallback | None = None,
    order: DependencyOrder | None = None,
) -> None:
    """Delete every row of every catalog table.

    One table at a time, never batched across tables.  A failure on any
    table propagates immediately; tables already cleared stay cleared.

    Args:
        store: Store implementing ``RelationalStore``.
        catalog: Table catalog (parent-first).
        on_progress: Optional callback, invoked once per deleted table.
        order: Pre-computed order; derived from ``catalog`` when ``None``.

    Raises:
        CatalogError: If the catalog is malformed.
        Exception: Whatever the store raised.
    """
    order = order or resolve_order(catalog)
    total = len(order.reverse)

    logger.info("Deleting %d tables", total)

    for index, table_name in enumerate(order.reverse):
        breaks = order.breaks_for(table_name)
        if breaks:
            await store.execute(
                statements.null_columns(table_name, [cb.column for cb in breaks])
            )
            logger.debug("Cleared self-references on %s", table_name)

        await store.execute(statements.delete_all(table_name))
        logger.debug("Deleted %s", table_name)

        report_progress(on_progress, "delete", table_name, index, total)
