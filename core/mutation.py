# =============================================================================
# core/mutation.py - Partial Mutation Builder
# =============================================================================
# Turns a sparse set of field changes into a single-row write instruction.
#
# Update rules:
# - columns are inspected in declaration order, never payload order
# - Absent fields are skipped, Clear writes NULL, SetTo writes the value
# - updated_at is appended whenever at least one column is assigned
# - placeholders are numbered $1..$n in assignment order, the key is last
# - no assigned columns means nothing to do (None), never a no-op write
# =============================================================================

from datetime import datetime
from typing import Any, Mapping, Sequence

from core.models.changes import Absent, Clear, FieldChange, SetTo
from lib.store import WriteInstruction

UPDATED_AT = "updated_at"
CREATED_AT = "created_at"


def _placeholders(count: int, start: int = 1) -> list[str]:
    return [f"${index}" for index in range(start, start + count)]


def build_update(
    table: str,
    key: int,
    changes: Mapping[str, FieldChange],
    columns: Sequence[str],
    returning: Sequence[str],
    now: datetime,
) -> WriteInstruction | None:
    """
    Build an UPDATE touching only the supplied fields.

    Args:
        table: Target table
        key: Primary key of the row
        changes: Field name -> Absent | Clear | SetTo
        columns: Updatable columns, in the order they are inspected
        returning: Columns to return from the updated row
        now: Timestamp written to updated_at

    Returns:
        WriteInstruction, or None when no column would change

    Example:
        build_update("users", 4, {"email": SetTo("a@x.com")}, ["username", "email"], ["id"], now)
        # UPDATE users SET email=$1, updated_at=$2 WHERE id=$3 RETURNING id
    """
    assignments: list[tuple[str, Any]] = []
    for column in columns:
        change = changes.get(column, Absent())
        if isinstance(change, SetTo):
            assignments.append((column, change.value))
        elif isinstance(change, Clear):
            assignments.append((column, None))

    if not assignments:
        return None

    assignments.append((UPDATED_AT, now))

    placeholders = _placeholders(len(assignments) + 1)
    set_clause = ", ".join(
        f"{column}={placeholder}"
        for (column, _), placeholder in zip(assignments, placeholders)
    )
    statement = (
        f"UPDATE {table} SET {set_clause} WHERE id={placeholders[-1]} "
        f"RETURNING {', '.join(returning)}"
    )

    return WriteInstruction(
        kind="update",
        table=table,
        assignments=tuple(assignments),
        key=key,
        statement=statement,
        params=tuple(value for _, value in assignments) + (key,),
        returning=tuple(returning),
    )


def build_insert(
    table: str,
    values: Mapping[str, Any],
    returning: Sequence[str],
    now: datetime,
) -> WriteInstruction:
    """
    Build an INSERT for a fully validated record.

    created_at and updated_at are both stamped with `now`.
    """
    assignments = [(column, value) for column, value in values.items()]
    assignments.append((CREATED_AT, now))
    assignments.append((UPDATED_AT, now))

    placeholders = _placeholders(len(assignments))
    statement = (
        f"INSERT INTO {table} ({', '.join(column for column, _ in assignments)}) "
        f"VALUES ({', '.join(placeholders)}) "
        f"RETURNING {', '.join(returning)}"
    )

    return WriteInstruction(
        kind="insert",
        table=table,
        assignments=tuple(assignments),
        key=None,
        statement=statement,
        params=tuple(value for _, value in assignments),
        returning=tuple(returning),
    )
