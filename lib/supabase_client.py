# =============================================================================
# lib/supabase_client.py - Supabase Store Backend
# =============================================================================
# This module provides the Supabase (PostgREST) implementation of the
# Store protocol from lib/store.py, plus the client factory shared with
# the storage service for image uploads.
#
# The supabase-py client is synchronous; every query runs in the thread
# pool so the event loop is never blocked by a round-trip.
#
# Usage:
#   store = SupabaseStore(url=settings.SUPABASE_URL, service_key=settings.SUPABASE_SERVICE_KEY)
#   user = await store.fetch_by_key("users", 42)
# =============================================================================

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any

from fastapi.concurrency import run_in_threadpool
from postgrest.exceptions import APIError
from supabase import create_client, Client

from lib.store import StoreError, UniqueViolation, WriteInstruction

# Set up logging for this module
logger = logging.getLogger(__name__)

# Postgres SQLSTATE for unique_violation, passed through by PostgREST
UNIQUE_VIOLATION_CODE = "23505"


class SupabaseClientError(StoreError):
    """
    Error during Supabase operations.

    Provides actionable error messages following the principle:
    "Errors should tell HOW to fix, not just WHAT failed."
    """

    def __init__(self, message: str, code: str = "SUPABASE_ERROR", **kwargs):
        super().__init__(message, code=code, **kwargs)


def create_supabase_client(url: str, service_key: str) -> Client:
    """
    Create a Supabase client with the service_role key.

    The service_role key bypasses Row Level Security (RLS), which is
    appropriate for server-side operations.

    Raises:
        SupabaseClientError: If client creation fails
    """
    try:
        client = create_client(url, service_key)
    except Exception as e:
        raise SupabaseClientError(
            message=f"Failed to create Supabase client: {e}",
            code="CLIENT_INIT_FAILED",
            suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file",
        ) from e
    logger.info("Supabase client initialized successfully")
    return client


def _to_json(value: Any) -> Any:
    """Convert values PostgREST cannot serialize (Decimal, datetime)."""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class SupabaseStore:
    """
    Store backed by Supabase tables.

    The client is created lazily on first use, so constructing the store
    never touches the network.

    Example:
        store = SupabaseStore(url="https://xxx.supabase.co", service_key="...")
        product = await store.fetch_by_key("products", 7)
    """

    def __init__(self, url: str, service_key: str, client: Client | None = None):
        self._url = url
        self._service_key = service_key
        self._client = client

    def get_client(self) -> Client:
        """Get or create the underlying Supabase client."""
        if self._client is None:
            self._client = create_supabase_client(self._url, self._service_key)
        return self._client

    async def _execute(self, query, table: str) -> list[dict[str, Any]]:
        """
        Run a PostgREST query in the thread pool.

        Raises:
            UniqueViolation: If the query broke a unique constraint
            SupabaseClientError: For any other API failure
        """
        try:
            response = await run_in_threadpool(query.execute)
        except APIError as e:
            if e.code == UNIQUE_VIOLATION_CODE:
                raise UniqueViolation(table, constraint=e.message) from e
            raise SupabaseClientError(
                message=f"Query on '{table}' failed: {e.message}",
                code="QUERY_FAILED",
                details={"table": table, "postgrest_code": e.code},
            ) from e
        return response.data or []

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def fetch_by_key(self, table: str, key: int) -> dict[str, Any] | None:
        rows = await self._execute(
            self.get_client().table(table).select("*").eq("id", key).limit(1),
            table,
        )
        return rows[0] if rows else None

    async def fetch_by_unique_field(
        self, table: str, field: str, value: Any
    ) -> dict[str, Any] | None:
        rows = await self._execute(
            self.get_client().table(table).select("*").eq(field, _to_json(value)).limit(1),
            table,
        )
        return rows[0] if rows else None

    async def fetch_all(
        self, table: str, order_by: str = "id", descending: bool = False
    ) -> list[dict[str, Any]]:
        return await self._execute(
            self.get_client().table(table).select("*").order(order_by, desc=descending),
            table,
        )

    async def fetch_where(
        self,
        table: str,
        field: str,
        value: Any,
        order_by: str = "id",
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        return await self._execute(
            self.get_client()
            .table(table)
            .select("*")
            .eq(field, _to_json(value))
            .order(order_by, desc=descending),
            table,
        )

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def write(self, instruction: WriteInstruction) -> dict[str, Any] | None:
        """
        Execute an insert or update built by core.mutation.

        PostgREST returns the full row; it is narrowed to the instruction's
        returning columns so hidden columns (password hashes) never leak.
        """
        payload = {column: _to_json(value) for column, value in instruction.assignments}
        table = self.get_client().table(instruction.table)

        if instruction.kind == "insert":
            query = table.insert(payload)
        else:
            query = table.update(payload).eq("id", instruction.key)

        rows = await self._execute(query, instruction.table)
        if not rows:
            return None

        logger.debug(f"{instruction.kind} on {instruction.table}: {instruction.columns}")
        return {column: rows[0].get(column) for column in instruction.returning}

    async def delete(self, table: str, key: int) -> int | None:
        rows = await self._execute(
            self.get_client().table(table).delete().eq("id", key),
            table,
        )
        return rows[0]["id"] if rows else None

    async def close(self) -> None:
        # supabase-py holds no pooled resources that need explicit release
        self._client = None
