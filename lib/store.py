# =============================================================================
# lib/store.py - Relational Store Contract
# =============================================================================
# Defines the interface every store backend implements, the write
# instruction the mutation builder hands to it, and the errors a backend
# may raise.
#
# Backends:
# - lib/supabase_client.py: SupabaseStore (PostgREST over HTTP)
# - lib/postgres_client.py: PostgresStore (asyncpg connection pool)
#
# All calls are atomic at single-row granularity. A backend must surface a
# unique-constraint failure as UniqueViolation so callers can translate it
# into a conflict response.
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Protocol

from lib.utils import ApplicationError


# =============================================================================
# Errors
# =============================================================================

class StoreError(ApplicationError):
    """Raised when the store is unreachable or rejects a query."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("code", "STORE_ERROR")
        super().__init__(message, **kwargs)


class UniqueViolation(StoreError):
    """
    Raised when a write breaks a unique constraint.

    `constraint` is the backend's constraint name or raw error text
    (e.g. "users_email_key"); callers match it against their unique
    field names.
    """

    def __init__(self, table: str, constraint: str | None = None):
        super().__init__(
            f"Unique constraint violated on {table}",
            code="UNIQUE_VIOLATION",
            suggestion="Use a different value for the conflicting field",
            details={"table": table, "constraint": constraint},
        )
        self.table = table
        self.constraint = constraint or ""


# =============================================================================
# Write Instruction
# =============================================================================

@dataclass(frozen=True)
class WriteInstruction:
    """
    A single-row INSERT or UPDATE ready to execute.

    Attributes:
        kind: "insert" or "update"
        table: Target table
        assignments: Ordered (column, value) pairs to write
        key: Primary key of the row to update (None for inserts)
        statement: SQL text with $1..$n positional placeholders
        params: Values for the placeholders, key last for updates
        returning: Columns to return from the written row
    """

    kind: Literal["insert", "update"]
    table: str
    assignments: tuple[tuple[str, Any], ...]
    key: int | None
    statement: str
    params: tuple[Any, ...]
    returning: tuple[str, ...]

    @property
    def values(self) -> dict[str, Any]:
        """Assignments as a column -> value dict."""
        return dict(self.assignments)

    @property
    def columns(self) -> list[str]:
        return [column for column, _ in self.assignments]


# =============================================================================
# Store Protocol
# =============================================================================

class Store(Protocol):
    """Interface consumed by the services layer."""

    async def fetch_by_key(self, table: str, key: int) -> dict[str, Any] | None:
        ...

    async def fetch_by_unique_field(
        self, table: str, field: str, value: Any
    ) -> dict[str, Any] | None:
        ...

    async def fetch_all(
        self, table: str, order_by: str = "id", descending: bool = False
    ) -> list[dict[str, Any]]:
        ...

    async def fetch_where(
        self,
        table: str,
        field: str,
        value: Any,
        order_by: str = "id",
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        ...

    async def write(self, instruction: WriteInstruction) -> dict[str, Any] | None:
        ...

    async def delete(self, table: str, key: int) -> int | None:
        ...

    async def close(self) -> None:
        ...
