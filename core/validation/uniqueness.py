# =============================================================================
# core/validation/uniqueness.py - Uniqueness Guard
# =============================================================================
# Decides whether a unique field's new value needs a store lookup, performs
# it, and reports a conflict when a different record already holds it.
#
# The check is not atomic with the write that follows. The store's own
# unique constraint is the final guard; its violation is translated into the
# same conflict response by the orchestrator.
# =============================================================================

import logging
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

Lookup = Callable[[Any], Awaitable[dict[str, Any] | None]]


def conflict_message(field: str, value: Any) -> str:
    label = field.replace("_", " ").capitalize()
    return f"{label} '{value}' is already in use."


async def check_unique(
    field: str,
    new_value: Any,
    current_value: Any,
    lookup: Lookup,
    owner_key: Any = None,
) -> str | None:
    """
    Check that `new_value` is not held by another record.

    Args:
        field: Name of the unique field (used in the message)
        new_value: Candidate value; None means nothing to check
        current_value: Value the record holds now (None on creation)
        lookup: Async function returning the record holding a value, or None
        owner_key: Primary key of the record being changed, if any

    Returns:
        A conflict message, or None if there is no conflict

    Example:
        await check_unique("email", "a@x.com", "a@x.com", lookup)  # None, no lookup
    """
    if new_value is None or new_value == current_value:
        return None

    holder = await lookup(new_value)
    if holder is None:
        return None
    if owner_key is not None and holder.get("id") == owner_key:
        return None

    logger.info(f"Uniqueness conflict on {field}")
    return conflict_message(field, new_value)
