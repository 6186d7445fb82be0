"""db-snapshot: Relational snapshot export and restore.

Exports a fixed catalog of foreign-key-linked tables to a portable JSON
document and restores it into an empty or populated database, honoring
foreign-key order and self-referential cycles.

Usage:
    from db_snapshot import get_store, export_snapshot, save_snapshot
    from db_snapshot import restore_snapshot, load_snapshot_document
    from db_snapshot import TableCatalog, TableDef, ForeignKey, CONTACTS_CATALOG
"""

__version__ = "0.1.0"

# Catalog
from db_snapshot.catalog.contacts import CONTACTS_CATALOG
from db_snapshot.catalog.models import CatalogError, ForeignKey, TableCatalog, TableDef
from db_snapshot.catalog.orderer import resolve_order, sort_tables

# Config
from db_snapshot.config.loader import load_config
from db_snapshot.config.models import DatabaseProfile, SnapshotConfig

# Factory
from db_snapshot.factory import ProfileNotFoundError, get_store, resolve_url

# Stores
from db_snapshot.stores.base import RelationalStore, Statement
from db_snapshot.stores.sqlalchemy_store import AsyncSQLAlchemyStore

# Transfer
from db_snapshot.transfer.exporter import export_snapshot
from db_snapshot.transfer.progress import ProgressEvent
from db_snapshot.transfer.restore import RestoreState, SnapshotRestorer, restore_snapshot
from db_snapshot.transfer.snapshot import (
    Snapshot,
    SnapshotValidationError,
    load_snapshot_document,
    save_snapshot,
    validate_snapshot,
)

__all__ = [
    # Catalog
    "CONTACTS_CATALOG",
    "CatalogError",
    "ForeignKey",
    "TableCatalog",
    "TableDef",
    "resolve_order",
    "sort_tables",
    # Config
    "load_config",
    "DatabaseProfile",
    "SnapshotConfig",
    # Factory
    "get_store",
    "ProfileNotFoundError",
    "resolve_url",
    # Stores
    "RelationalStore",
    "Statement",
    "AsyncSQLAlchemyStore",
    # Transfer
    "export_snapshot",
    "ProgressEvent",
    "RestoreState",
    "SnapshotRestorer",
    "restore_snapshot",
    "Snapshot",
    "SnapshotValidationError",
    "load_snapshot_document",
    "save_snapshot",
    "validate_snapshot",
]
