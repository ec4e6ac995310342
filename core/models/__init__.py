# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - account.py: Account record, registration, update and login schemas
# - catalog.py: Category and product schemas
# - article.py: News article schemas
# - failure.py: Failure envelope and failure kinds
# - changes.py: Absent / Clear / SetTo sparse field changes
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Account Models
# -----------------------------------------------------------------------------
from .account import (
    AccountCreateRequest,
    AccountRecord,
    AccountRole,
    AccountUpdateRequest,
    LoginRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    TokenResponse,
)

# -----------------------------------------------------------------------------
# Catalog Models
# -----------------------------------------------------------------------------
from .catalog import (
    CategoryRecord,
    CategoryRequest,
    ProductRecord,
    ProductRequest,
)

# -----------------------------------------------------------------------------
# Article Models
# -----------------------------------------------------------------------------
from .article import (
    ArticleRecord,
    ArticleRequest,
    ArticleStatus,
)

# -----------------------------------------------------------------------------
# Failures and Sparse Changes
# -----------------------------------------------------------------------------
from .failure import FailureEnvelope, FailureKind
from .changes import ABSENT, CLEAR, Absent, Clear, FieldChange, SetTo

__all__ = [
    # Account
    "AccountCreateRequest",
    "AccountRecord",
    "AccountRole",
    "AccountUpdateRequest",
    "LoginRequest",
    "ProfileUpdateRequest",
    "RegisterRequest",
    "TokenResponse",
    # Catalog
    "CategoryRecord",
    "CategoryRequest",
    "ProductRecord",
    "ProductRequest",
    # Article
    "ArticleRecord",
    "ArticleRequest",
    "ArticleStatus",
    # Failure
    "FailureEnvelope",
    "FailureKind",
    # Changes
    "ABSENT",
    "CLEAR",
    "Absent",
    "Clear",
    "FieldChange",
    "SetTo",
]
