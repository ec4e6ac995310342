# =============================================================================
# core/validation/errors.py - Error Aggregator
# =============================================================================
# Combines the problem lists produced by validation rules into one ordered
# list and wraps it in a FailureEnvelope. The aggregator has no success
# value: callers ask it for a failure and proceed when it returns None.
# =============================================================================

from datetime import datetime
from typing import Callable, Iterable

from core.models.failure import FailureEnvelope, FailureKind
from lib.utils import isoformat_utc, utc_now


def aggregate(*problem_lists: Iterable[str]) -> list[str]:
    """
    Concatenate problem lists in call order.

    Example:
        aggregate(["Username is required."], [], ["Email is required."])
        # ["Username is required.", "Email is required."]
    """
    return [problem for problems in problem_lists for problem in problems]


def failure(
    kind: FailureKind,
    summary: str,
    problems: Iterable[str] = (),
    clock: Callable[[], datetime] = utc_now,
) -> FailureEnvelope:
    """Build a failure envelope of the given kind, stamped with the current time."""
    return FailureEnvelope(
        code=kind,
        summary=summary,
        problems=list(problems),
        timestamp=isoformat_utc(clock()),
    )


def collect_failure(
    summary: str,
    *problem_lists: Iterable[str],
    kind: FailureKind = FailureKind.INVALID_INPUT,
    clock: Callable[[], datetime] = utc_now,
) -> FailureEnvelope | None:
    """
    Aggregate problem lists and return a failure only if any problem exists.

    Args:
        summary: Message used when there are problems
        *problem_lists: Outputs of validation rules, in field order
        kind: Failure kind of the envelope (INVALID_INPUT by default)
        clock: Time source for the envelope timestamp

    Returns:
        FailureEnvelope, or None when every list was empty
    """
    problems = aggregate(*problem_lists)
    if not problems:
        return None
    return failure(kind, summary, problems, clock=clock)
