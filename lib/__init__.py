# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable infrastructure:
# - store.py: Store protocol, write instruction, store errors
# - supabase_client.py: Supabase (PostgREST) store backend
# - postgres_client.py: PostgreSQL (asyncpg) store backend
# - security.py: Password hashing and access tokens
# - utils.py: Shared utilities (time, base error class)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.store import Store, StoreError, UniqueViolation, WriteInstruction
from lib.security import PasswordHasher, TokenError, TokenService
from lib.utils import ApplicationError, isoformat_utc, utc_now

__all__ = [
    # Store
    "Store",
    "StoreError",
    "UniqueViolation",
    "WriteInstruction",
    # Security
    "PasswordHasher",
    "TokenError",
    "TokenService",
    # Utils
    "ApplicationError",
    "isoformat_utc",
    "utc_now",
]
