"""Relational stores package.

Provides the ``RelationalStore`` Protocol consumed by the snapshot engine
and ``AsyncSQLAlchemyStore``, its SQLAlchemy implementation for
PostgreSQL (asyncpg) and SQLite (aiosqlite).

Usage:
    from db_snapshot.stores import RelationalStore, Statement, AsyncSQLAlchemyStore
"""

from db_snapshot.stores.base import RelationalStore, Statement
from db_snapshot.stores.sqlalchemy_store import AsyncSQLAlchemyStore

__all__ = [
    "RelationalStore",
    "Statement",
    "AsyncSQLAlchemyStore",
]
