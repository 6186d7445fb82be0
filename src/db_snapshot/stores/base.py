"""Relational store protocol definition.

Defines the ``RelationalStore`` Protocol the snapshot engine consumes.
All methods are ``async def`` -- the engine awaits every store round-trip
before issuing the next one.

Usage:
    from db_snapshot.stores.base import RelationalStore, Statement

    async def do_work(store: RelationalStore) -> None:
        rows = await store.query('SELECT * FROM "Company"')
        await store.execute('DELETE FROM "Company"')
        await store.execute_batch([
            Statement('INSERT INTO "Company" ("id") VALUES (:p0)', {"p0": 1}),
        ])
        await store.close()
"""

from typing import Any, Literal, NamedTuple, Protocol


class Statement(NamedTuple):
    """A SQL statement with named parameters (``:name`` placeholders).

    ``table`` and ``columns`` (parameter name -> column of ``table``) are
    optional typing hints: a store may use them to bind each value with
    the column's native type.
    """

    sql: str
    params: dict[str, Any] = {}
    table: str | None = None
    columns: dict[str, str] = {}


class RelationalStore(Protocol):
    """Relational store interface consumed by the snapshot engine.

    Stores do not lock: a store handle must be owned by one export or one
    restore at a time.
    """

    async def query(self, sql: str) -> list[dict]:
        """Run a read statement and return its rows.

        Args:
            sql: SELECT statement.

        Returns:
            List of dicts, one per row, keys in column order.

        Example:
            rows = await store.query('SELECT * FROM "Contact"')
        """
        ...

    async def execute(
        self,
        sql: str,
        params: dict[str, Any] | None = None,
        table: str | None = None,
        columns: dict[str, str] | None = None,
    ) -> None:
        """Execute a single write statement in its own transaction.

        Args:
            sql: SQL statement.
            params: Optional dict of named parameters.
            table: Table the parameters are written to, if any.
            columns: Parameter name -> column of ``table``.

        Example:
            await store.execute(
                'UPDATE "Contact" SET "referredById" = :v WHERE "id" = :pk',
                {"v": 1, "pk": 3},
            )
        """
        ...

    async def execute_batch(
        self,
        statements: list[Statement],
        mode: Literal["write"] = "write",
    ) -> None:
        """Execute statements as one atomic unit.

        Either every statement commits or none does.

        Args:
            statements: Statements to execute, in order.
            mode: Transaction mode.  Only ``"write"`` is supported.
        """
        ...

    async def close(self) -> None:
        """Close the store and release its connections."""
        ...
