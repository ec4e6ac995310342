# =============================================================================
# core/models/changes.py - Field Change Types
# =============================================================================
# A sparse update payload says one of three things about each field:
# - Absent: the field was not sent; leave the stored value alone
# - Clear: the field was sent as null; set the stored value to NULL
# - SetTo(value): the field was sent with a value; store it
#
# Keeping these distinct avoids confusing "not sent" with "sent as null".
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Union


class Absent:
    """The field was not part of the payload."""

    _instance: "Absent | None" = None

    def __new__(cls) -> "Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


class Clear:
    """The field was explicitly sent as null."""

    _instance: "Clear | None" = None

    def __new__(cls) -> "Clear":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "CLEAR"


@dataclass(frozen=True)
class SetTo:
    """The field was sent with a concrete value."""

    value: Any


ABSENT = Absent()
CLEAR = Clear()

FieldChange = Union[Absent, Clear, SetTo]


def change_from_mapping(payload: Mapping[str, Any], field: str) -> FieldChange:
    """
    Classify one field of a request mapping.

    Example:
        change_from_mapping({"phone": None}, "phone")   # CLEAR
        change_from_mapping({}, "phone")                # ABSENT
        change_from_mapping({"phone": "555"}, "phone")  # SetTo("555")
    """
    if field not in payload:
        return ABSENT
    value = payload[field]
    if value is None:
        return CLEAR
    return SetTo(value)


def changes_from_mapping(
    payload: Mapping[str, Any], fields: Iterable[str]
) -> dict[str, FieldChange]:
    """Classify every recognised field; unrecognised keys are ignored."""
    return {field: change_from_mapping(payload, field) for field in fields}
