"""Table catalog: declarative table hierarchy and dependency ordering.

Usage:
    from db_snapshot.catalog import TableCatalog, TableDef, ForeignKey
    from db_snapshot.catalog import resolve_order, sort_tables, CONTACTS_CATALOG
"""

from db_snapshot.catalog.contacts import CONTACTS_CATALOG
from db_snapshot.catalog.models import CatalogError, ForeignKey, TableCatalog, TableDef
from db_snapshot.catalog.orderer import (
    CycleBreak,
    DependencyOrder,
    resolve_order,
    sort_tables,
)

__all__ = [
    "CONTACTS_CATALOG",
    "CatalogError",
    "ForeignKey",
    "TableCatalog",
    "TableDef",
    "CycleBreak",
    "DependencyOrder",
    "resolve_order",
    "sort_tables",
]
