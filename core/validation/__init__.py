# =============================================================================
# core/validation/ - Request Validation
# =============================================================================
# - rules.py: One validation rule per field kind
# - errors.py: Error aggregator and failure envelope construction
# - uniqueness.py: Uniqueness guard for unique fields
# =============================================================================

from .errors import aggregate, collect_failure, failure
from .uniqueness import check_unique, conflict_message

__all__ = [
    "aggregate",
    "collect_failure",
    "failure",
    "check_unique",
    "conflict_message",
]
