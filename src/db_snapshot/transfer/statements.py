"""SQL statement builders for snapshot transfer.

Identifiers are always double-quoted so mixed-case table names such as
``"Contact"`` survive on PostgreSQL.  Values are always bound as named
parameters, never inlined.  Write statements name their target table and
map each parameter to its column, so a store can bind native types.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from db_snapshot.stores.base import Statement


def quote_ident(name: str) -> str:
    """Quote a SQL identifier, doubling embedded quotes."""
    return '"' + name.replace('"', '""') + '"'


def select_all(table: str) -> str:
    return f"SELECT * FROM {quote_ident(table)}"


def delete_all(table: str) -> str:
    return f"DELETE FROM {quote_ident(table)}"


def null_columns(table: str, columns: list[str]) -> str:
    """UPDATE setting every given column to NULL on every row."""
    set_clause = ", ".join(f"{quote_ident(c)} = NULL" for c in columns)
    return f"UPDATE {quote_ident(table)} SET {set_clause}"


def insert_rows(
    table: str,
    rows: Sequence[Mapping[str, Any]],
    overrides: dict[str, Any] | None = None,
) -> list[Statement]:
    """Build one INSERT per row.

    The column list is taken from the first row; later rows missing a
    column bind ``NULL`` for it.  ``overrides`` replaces the value of the
    given columns on every row without touching the input rows.

    Example:
        insert_rows("Contact", rows, overrides={"referredById": None})
    """
    if not rows:
        return []

    overrides = overrides or {}
    columns = list(rows[0].keys())
    placeholders = ", ".join(f":p{i}" for i in range(len(columns)))
    quoted_cols = ", ".join(quote_ident(c) for c in columns)
    sql = f"INSERT INTO {quote_ident(table)} ({quoted_cols}) VALUES ({placeholders})"

    param_columns = {f"p{i}": col for i, col in enumerate(columns)}

    statements: list[Statement] = []
    for row in rows:
        params: dict[str, Any] = {}
        for i, col in enumerate(columns):
            params[f"p{i}"] = overrides[col] if col in overrides else row.get(col)
        statements.append(Statement(sql, params, table, param_columns))
    return statements


def update_by_pk(
    table: str,
    pk: str,
    pk_value: Any,
    values: dict[str, Any],
) -> Statement:
    """Targeted UPDATE of one row keyed by primary key."""
    params: dict[str, Any] = {}
    param_columns: dict[str, str] = {}
    set_parts: list[str] = []
    for i, (col, val) in enumerate(values.items()):
        set_parts.append(f"{quote_ident(col)} = :set_{i}")
        params[f"set_{i}"] = val
        param_columns[f"set_{i}"] = col
    params["pk"] = pk_value
    param_columns["pk"] = pk

    sql = (
        f"UPDATE {quote_ident(table)} SET {', '.join(set_parts)} "
        f"WHERE {quote_ident(pk)} = :pk"
    )
    return Statement(sql, params, table, param_columns)
