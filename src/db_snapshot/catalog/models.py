"""Catalog models for declarative table hierarchy.

Projects declare their tables in parent-first order together with each
table's foreign keys.  The snapshot engine derives traversal order and
cycle-break points from these declarations.

Usage:
    from db_snapshot.catalog.models import TableCatalog, TableDef, ForeignKey

    catalog = TableCatalog(tables=[
        TableDef(name="authors"),
        TableDef(name="books", foreign_keys=[
            ForeignKey(column="author_id", references="authors"),
        ]),
        TableDef(name="reviewers", foreign_keys=[
            ForeignKey(column="mentor_id", references="reviewers", nullable=True),
        ]),
    ])
"""

from pydantic import BaseModel, Field, model_validator


class CatalogError(Exception):
    """Raised when a table catalog is malformed.

    This is a catalog authoring bug, not a runtime condition: the engine
    never catches or retries it.
    """

    pass


class ForeignKey(BaseModel):
    """Foreign key edge owned by the enclosing ``TableDef``."""

    column: str                 # FK column in the owning table
    references: str             # referenced table name
    nullable: bool = False


class TableDef(BaseModel):
    """Definition of a table for snapshot export/restore."""

    name: str                                                   # table name
    pk: str = "id"                                              # primary key column
    foreign_keys: list[ForeignKey] = Field(default_factory=list)

    @property
    def self_references(self) -> list[ForeignKey]:
        """Foreign keys that point back at this table."""
        return [fk for fk in self.foreign_keys if fk.references == self.name]

    @property
    def parent_references(self) -> list[ForeignKey]:
        """Foreign keys that point at other tables."""
        return [fk for fk in self.foreign_keys if fk.references != self.name]


class TableCatalog(BaseModel):
    """Declarative table catalog. Tables ordered by dependency (parents first).

    A table's rank is its index in ``tables``.
    """

    tables: list[TableDef]

    @model_validator(mode="after")
    def _check_unique_names(self) -> "TableCatalog":
        seen: set[str] = set()
        for table in self.tables:
            if table.name in seen:
                raise ValueError(f"Duplicate table name in catalog: {table.name}")
            seen.add(table.name)
        return self

    @property
    def table_names(self) -> list[str]:
        return [t.name for t in self.tables]

    def rank(self, table_name: str) -> int:
        """Return the parent-first rank of a table.

        Raises:
            CatalogError: If the table is not in the catalog.
        """
        for i, table in enumerate(self.tables):
            if table.name == table_name:
                return i
        raise CatalogError(f"Table '{table_name}' is not in the catalog")

    def get(self, table_name: str) -> TableDef | None:
        """Find a TableDef by name."""
        for table in self.tables:
            if table.name == table_name:
                return table
        return None
