"""Full restore: validate, delete, insert, restore self-references.

``SnapshotRestorer`` drives one restore through its states::

    IDLE -> VALIDATING -> DELETING -> INSERTING
         -> RESTORING_SELF_REFERENCES -> COMPLETE

Any error moves the restorer to ``FATAL``.  A validation error is raised
before the store is touched; a store error is re-raised unchanged and
leaves the store partially restored.  There is no rollback, no retry and
no cancellation.

Usage:
    from db_snapshot.transfer.restore import SnapshotRestorer, restore_snapshot

    restorer = SnapshotRestorer(store, CONTACTS_CATALOG, on_progress=print)
    summary = await restorer.run(document)

    # Or in one call
    summary = await restore_snapshot(store, CONTACTS_CATALOG, document)
"""

import logging
from enum import Enum
from typing import Any

from db_snapshot.catalog.models import TableCatalog
from db_snapshot.catalog.orderer import resolve_order
from db_snapshot.stores.base import RelationalStore
from db_snapshot.transfer.batch import DEFAULT_CHUNK_SIZE
from db_snapshot.transfer.deleter import delete_all
from db_snapshot.transfer.importer import (
    ImportSummary,
    check_self_reference_keys,
    insert_tables,
    restore_self_references,
)
from db_snapshot.transfer.progress import ProgressCallback
from db_snapshot.transfer.snapshot import Snapshot

logger = logging.getLogger(__name__)


class RestoreState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    DELETING = "deleting"
    INSERTING = "inserting"
    RESTORING_SELF_REFERENCES = "restoring_self_references"
    COMPLETE = "complete"
    FATAL = "fatal"


class SnapshotRestorer:
    """Single-use driver for restoring one snapshot into one store.

    Args:
        store: Store implementing ``RelationalStore``.  Must not be used by
            anything else while the restore runs.
        catalog: Table catalog (parent-first).
        on_progress: Optional callback for ``delete`` and ``import`` events.
        chunk_size: Maximum insert statements per atomic group.

    Attributes:
        state: Current ``RestoreState``.
        error: The exception that moved the restorer to ``FATAL``.
    """

    def __init__(
        self,
        store: RelationalStore,
        catalog: TableCatalog,
        on_progress: ProgressCallback | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._on_progress = on_progress
        self._chunk_size = chunk_size
        self.state: RestoreState = RestoreState.IDLE
        self.error: BaseException | None = None

    def _enter(self, state: RestoreState) -> None:
        logger.debug("Restore state %s -> %s", self.state.value, state.value)
        self.state = state

    async def run(self, document: dict[str, Any] | Snapshot) -> ImportSummary:
        """Validate the document, then replace the store's contents with it.

        Args:
            document: Deserialized snapshot document, or a ``Snapshot``.

        Returns:
            ``ImportSummary`` of the import.

        Raises:
            RuntimeError: If this restorer has already run.
            SnapshotValidationError: If the document is rejected (store
                untouched).
            ValueError: If a ``Snapshot`` holds a self-referencing row
                without a primary key value (store untouched).
            CatalogError: If the catalog is malformed.
            Exception: Whatever the store raised during delete or import.
        """
        if self.state is not RestoreState.IDLE:
            raise RuntimeError(
                f"Restorer already used (state: {self.state.value})"
            )

        self._enter(RestoreState.VALIDATING)
        try:
            order = resolve_order(self._catalog)
            if isinstance(document, Snapshot):
                snapshot = document
            else:
                snapshot = Snapshot.from_document(document, self._catalog)
            check_self_reference_keys(snapshot, order)
        except Exception as e:
            self.error = e
            self._enter(RestoreState.FATAL)
            logger.error("Snapshot rejected: %s", e)
            raise

        summary = ImportSummary()
        try:
            self._enter(RestoreState.DELETING)
            await delete_all(self._store, self._catalog, self._on_progress, order=order)

            self._enter(RestoreState.INSERTING)
            await insert_tables(
                self._store,
                snapshot,
                order,
                summary,
                self._on_progress,
                self._chunk_size,
            )

            self._enter(RestoreState.RESTORING_SELF_REFERENCES)
            await restore_self_references(
                self._store, snapshot, order, summary, self._on_progress
            )
        except Exception as e:
            failed_in = self.state
            self.error = e
            self._enter(RestoreState.FATAL)
            logger.error(
                "Restore aborted while %s; store left partially restored: %s",
                failed_in.value,
                e,
            )
            raise

        self._enter(RestoreState.COMPLETE)
        logger.info(
            "Restore complete: %d rows in %d tables",
            sum(summary.inserted.values()),
            len(summary.inserted),
        )
        return summary


async def restore_snapshot(
    store: RelationalStore,
    catalog: TableCatalog,
    document: dict[str, Any] | Snapshot,
    on_progress: ProgressCallback | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> ImportSummary:
    """Restore a snapshot with a fresh ``SnapshotRestorer``.

    See ``SnapshotRestorer.run`` for behavior and errors.
    """
    restorer = SnapshotRestorer(store, catalog, on_progress, chunk_size)
    return await restorer.run(document)
