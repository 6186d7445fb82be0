"""Shared fixtures: an in-memory store that records every call."""

import re
from typing import Any, Callable

import pytest

from db_snapshot.catalog.models import ForeignKey, TableCatalog, TableDef
from db_snapshot.stores.base import Statement

_TABLE_RE = re.compile(r'(?:FROM|INTO|UPDATE)\s+"([^"]+)"')


def table_of(sql: str) -> str:
    """Extract the first quoted table name from a statement."""
    match = _TABLE_RE.search(sql)
    assert match, f"no table in {sql!r}"
    return match.group(1)


class RecordingStore:
    """Fake ``RelationalStore`` that records calls in order.

    Args:
        rows: Rows returned by ``query`` per table.
        fail: Called with ``(kind, sql)`` before each operation; an
            exception it returns is raised instead of recording the call.
    """

    def __init__(
        self,
        rows: dict[str, list[dict]] | None = None,
        fail: Callable[[str, str], Exception | None] | None = None,
    ) -> None:
        self.rows = rows or {}
        self.fail = fail
        self.calls: list[tuple[str, Any]] = []
        self.execute_targets: list[tuple[str | None, dict | None]] = []
        self.closed = False

    def _check(self, kind: str, sql: str) -> None:
        if self.fail is not None:
            error = self.fail(kind, sql)
            if error is not None:
                raise error

    async def query(self, sql: str) -> list[dict]:
        self._check("query", sql)
        self.calls.append(("query", sql))
        return [dict(r) for r in self.rows.get(table_of(sql), [])]

    async def execute(
        self,
        sql: str,
        params: dict | None = None,
        table: str | None = None,
        columns: dict | None = None,
    ) -> None:
        self._check("execute", sql)
        self.calls.append(("execute", (sql, params)))
        self.execute_targets.append((table, columns))

    async def execute_batch(self, statements: list[Statement], mode: str = "write") -> None:
        for stmt in statements:
            self._check("batch", stmt.sql)
        self.calls.append(("batch", list(statements)))

    async def close(self) -> None:
        self.closed = True

    # Helpers

    @property
    def batches(self) -> list[list[Statement]]:
        return [payload for kind, payload in self.calls if kind == "batch"]

    @property
    def executed(self) -> list[tuple[str, dict | None]]:
        return [payload for kind, payload in self.calls if kind == "execute"]

    @property
    def inserted(self) -> list[Statement]:
        return [stmt for batch in self.batches for stmt in batch]


@pytest.fixture
def company_contact_catalog() -> TableCatalog:
    """Company -> Contact with a nullable self-reference on Contact."""
    return TableCatalog(
        tables=[
            TableDef(name="Company"),
            TableDef(
                name="Contact",
                foreign_keys=[
                    ForeignKey(column="companyId", references="Company", nullable=True),
                    ForeignKey(column="referredById", references="Contact", nullable=True),
                ],
            ),
        ]
    )


@pytest.fixture
def company_contact_document() -> dict:
    """Two companies and three contacts; contact 3 was referred by contact 1."""
    return {
        "_meta": {"exportedAt": "2026-01-15T09:30:00+00:00", "version": 1},
        "Company": [
            {"id": 1, "name": "Acme"},
            {"id": 2, "name": "Globex"},
        ],
        "Contact": [
            {"id": 1, "name": "Ada", "companyId": 1, "referredById": None},
            {"id": 2, "name": "Grace", "companyId": 2, "referredById": None},
            {"id": 3, "name": "Linus", "companyId": 1, "referredById": 1},
        ],
    }


@pytest.fixture
def make_store() -> type[RecordingStore]:
    return RecordingStore
