# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the request-validation and partial-mutation core:
# - models/: Pydantic schemas and the sparse change types
# - validation/: Field rules, error aggregation, uniqueness guard
# - mutation.py: Partial mutation builder
# - resources.py: Declarative resource definitions
# - services/: CRUD orchestration, accounts, image storage
#
# Code in this package talks to the store only through lib/store.py,
# which keeps it testable with an in-memory store.
# =============================================================================
