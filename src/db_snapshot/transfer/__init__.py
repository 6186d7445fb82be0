"""Snapshot transfer engine: export, delete, import and restore.

Usage:
    from db_snapshot.transfer import export_snapshot, restore_snapshot
    from db_snapshot.transfer import save_snapshot, load_snapshot_document
"""

from db_snapshot.transfer.batch import DEFAULT_CHUNK_SIZE, write_batch
from db_snapshot.transfer.deleter import delete_all
from db_snapshot.transfer.exporter import export_snapshot
from db_snapshot.transfer.importer import ImportSummary, import_all
from db_snapshot.transfer.progress import ProgressCallback, ProgressEvent
from db_snapshot.transfer.restore import RestoreState, SnapshotRestorer, restore_snapshot
from db_snapshot.transfer.snapshot import (
    Snapshot,
    SnapshotFile,
    SnapshotMeta,
    SnapshotValidationError,
    list_snapshots,
    load_snapshot_document,
    normalize_value,
    save_snapshot,
    validate_snapshot,
)

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "write_batch",
    "delete_all",
    "export_snapshot",
    "ImportSummary",
    "import_all",
    "ProgressCallback",
    "ProgressEvent",
    "RestoreState",
    "SnapshotRestorer",
    "restore_snapshot",
    "Snapshot",
    "SnapshotFile",
    "SnapshotMeta",
    "SnapshotValidationError",
    "list_snapshots",
    "load_snapshot_document",
    "normalize_value",
    "save_snapshot",
    "validate_snapshot",
]
