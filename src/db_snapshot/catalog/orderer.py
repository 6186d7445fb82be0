"""Dependency ordering for snapshot traversal.

Derives the parent-first (forward) and child-first (reverse) table orders
from a ``TableCatalog`` and identifies the self-referential foreign keys
that act as cycle-break points.

Usage:
    from db_snapshot.catalog.orderer import resolve_order, sort_tables

    order = resolve_order(catalog)
    order.forward        # ("authors", "books")
    order.reverse        # ("books", "authors")
    order.cycle_breaks   # (CycleBreak(table="reviewers", column="mentor_id", pk="id"),)

    # Build a catalog from definitions in arbitrary order
    catalog = sort_tables([books_def, authors_def])
"""

from dataclasses import dataclass

from db_snapshot.catalog.models import CatalogError, TableCatalog, TableDef


@dataclass(frozen=True)
class CycleBreak:
    """A nullable self-referential column nulled before delete and restored after insert."""

    table: str
    column: str
    pk: str


@dataclass(frozen=True)
class DependencyOrder:
    """Traversal orders derived from a catalog.

    Attributes:
        forward: Table names by ascending rank (parents first).
        reverse: Table names by descending rank (children first).
        cycle_breaks: Self-referential columns, in forward table order.
    """

    forward: tuple[str, ...]
    reverse: tuple[str, ...]
    cycle_breaks: tuple[CycleBreak, ...]

    def breaks_for(self, table_name: str) -> list[CycleBreak]:
        """Cycle-break points owned by one table."""
        return [cb for cb in self.cycle_breaks if cb.table == table_name]


def resolve_order(catalog: TableCatalog) -> DependencyOrder:
    """Validate the catalog and derive its traversal orders.

    Every non-self foreign key must reference a table of strictly lower
    rank.  Every self-referential foreign key must be nullable.

    Args:
        catalog: Table catalog in parent-first order.

    Returns:
        ``DependencyOrder`` with forward/reverse orders and cycle breaks.

    Raises:
        CatalogError: If an edge references an unknown table, a table of
            equal or higher rank, or a self edge is not nullable.
    """
    ranks = {name: i for i, name in enumerate(catalog.table_names)}
    cycle_breaks: list[CycleBreak] = []

    for rank, table in enumerate(catalog.tables):
        for fk in table.foreign_keys:
            if fk.references == table.name:
                if not fk.nullable:
                    raise CatalogError(
                        f"Self-referential column {table.name}.{fk.column} "
                        f"must be nullable"
                    )
                cycle_breaks.append(
                    CycleBreak(table=table.name, column=fk.column, pk=table.pk)
                )
                continue

            if fk.references not in ranks:
                raise CatalogError(
                    f"{table.name}.{fk.column} references unknown table "
                    f"'{fk.references}'"
                )
            if ranks[fk.references] >= rank:
                raise CatalogError(
                    f"{table.name}.{fk.column} references '{fk.references}' "
                    f"(rank {ranks[fk.references]}), which is not ranked "
                    f"before '{table.name}' (rank {rank})"
                )

    forward = tuple(catalog.table_names)
    return DependencyOrder(
        forward=forward,
        reverse=tuple(reversed(forward)),
        cycle_breaks=tuple(cycle_breaks),
    )


def sort_tables(tables: list[TableDef]) -> TableCatalog:
    """Build a parent-first catalog from table definitions in any order.

    Self-referential edges are removed from the dependency graph before a
    depth-first topological sort.  Tables keep their input order wherever
    the dependencies allow it.

    Args:
        tables: Table definitions in arbitrary order.

    Returns:
        ``TableCatalog`` whose order satisfies every non-self edge.

    Raises:
        CatalogError: If an edge references an unknown table or the tables
            form a cycle spanning more than one table.
    """
    by_name = {t.name: t for t in tables}

    dependencies: dict[str, set[str]] = {}
    for table in tables:
        deps: set[str] = set()
        for fk in table.parent_references:
            if fk.references not in by_name:
                raise CatalogError(
                    f"{table.name}.{fk.column} references unknown table "
                    f"'{fk.references}'"
                )
            deps.add(fk.references)
        dependencies[table.name] = deps

    sorted_names: list[str] = []
    visited: set[str] = set()
    visiting: list[str] = []

    def visit(name: str) -> None:
        if name in visited:
            return
        if name in visiting:
            cycle = visiting[visiting.index(name):] + [name]
            raise CatalogError(
                f"Foreign key cycle across tables: {' -> '.join(cycle)}"
            )
        visiting.append(name)
        # Sorted for a deterministic result
        for dep in sorted(dependencies[name]):
            visit(dep)
        visiting.pop()
        visited.add(name)
        sorted_names.append(name)

    for table in tables:
        visit(table.name)

    return TableCatalog(tables=[by_name[name] for name in sorted_names])
