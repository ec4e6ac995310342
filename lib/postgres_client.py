# =============================================================================
# lib/postgres_client.py - PostgreSQL Store Backend
# =============================================================================
# Implements the Store protocol directly against PostgreSQL with an asyncpg
# connection pool. Write instructions from core.mutation are executed as-is
# (their SQL already uses asyncpg's $1..$n placeholders).
#
# Selected with STORE_BACKEND=postgres and DATABASE_URL.
# =============================================================================

from __future__ import annotations

import logging
import re
from typing import Any

import asyncpg

from lib.store import StoreError, UniqueViolation, WriteInstruction

logger = logging.getLogger(__name__)

# Table and column names are interpolated into SQL, so only plain
# lowercase identifiers are accepted.
_IDENTIFIER = re.compile(r"^[a-z_][a-z0-9_]*$")


def _ident(name: str) -> str:
    if not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid SQL identifier: {name!r}")
    return name


async def create_postgres_pool(dsn: str, min_size: int = 2, max_size: int = 10) -> asyncpg.Pool:
    """Create a PostgreSQL connection pool."""
    try:
        pool = await asyncpg.create_pool(dsn=dsn, min_size=min_size, max_size=max_size)
    except (OSError, asyncpg.PostgresError) as e:
        raise StoreError(
            f"Failed to connect to PostgreSQL: {e}",
            code="CLIENT_INIT_FAILED",
            suggestion="Check DATABASE_URL in your .env file",
        ) from e
    logger.info(f"PostgreSQL pool created (min={min_size}, max={max_size})")
    return pool


class PostgresStore:
    """Store backed by an asyncpg pool."""

    def __init__(self, pool: asyncpg.Pool):
        self._pool = pool

    @classmethod
    async def connect(cls, dsn: str, min_size: int = 2, max_size: int = 10) -> "PostgresStore":
        return cls(await create_postgres_pool(dsn, min_size=min_size, max_size=max_size))

    async def _fetch(self, table: str, query: str, *args: Any) -> list[dict[str, Any]]:
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(query, *args)
        except asyncpg.UniqueViolationError as e:
            raise UniqueViolation(table, constraint=getattr(e, "constraint_name", None)) from e
        except asyncpg.PostgresError as e:
            raise StoreError(
                f"Query on '{table}' failed: {e}",
                code="QUERY_FAILED",
                details={"table": table, "sqlstate": getattr(e, "sqlstate", None)},
            ) from e
        return [dict(row) for row in rows]

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def fetch_by_key(self, table: str, key: int) -> dict[str, Any] | None:
        rows = await self._fetch(table, f"SELECT * FROM {_ident(table)} WHERE id=$1", key)
        return rows[0] if rows else None

    async def fetch_by_unique_field(
        self, table: str, field: str, value: Any
    ) -> dict[str, Any] | None:
        rows = await self._fetch(
            table,
            f"SELECT * FROM {_ident(table)} WHERE {_ident(field)}=$1 LIMIT 1",
            value,
        )
        return rows[0] if rows else None

    async def fetch_all(
        self, table: str, order_by: str = "id", descending: bool = False
    ) -> list[dict[str, Any]]:
        direction = "DESC" if descending else "ASC"
        return await self._fetch(
            table,
            f"SELECT * FROM {_ident(table)} ORDER BY {_ident(order_by)} {direction}",
        )

    async def fetch_where(
        self,
        table: str,
        field: str,
        value: Any,
        order_by: str = "id",
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        direction = "DESC" if descending else "ASC"
        return await self._fetch(
            table,
            f"SELECT * FROM {_ident(table)} WHERE {_ident(field)}=$1 "
            f"ORDER BY {_ident(order_by)} {direction}",
            value,
        )

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def write(self, instruction: WriteInstruction) -> dict[str, Any] | None:
        rows = await self._fetch(instruction.table, instruction.statement, *instruction.params)
        if not rows:
            return None
        logger.debug(f"{instruction.kind} on {instruction.table}: {instruction.columns}")
        return rows[0]

    async def delete(self, table: str, key: int) -> int | None:
        rows = await self._fetch(
            table, f"DELETE FROM {_ident(table)} WHERE id=$1 RETURNING id", key
        )
        return rows[0]["id"] if rows else None

    async def close(self) -> None:
        await self._pool.close()
        logger.info("PostgreSQL pool closed")
