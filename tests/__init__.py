# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Storefront API:
# - test_rules.py, test_uniqueness.py, test_mutation.py: validation core
# - test_resource_service.py, test_account_service.py: orchestration
# - test_security.py, test_stores.py: infrastructure in lib/
# - test_models.py: Pydantic model behaviour
# - test_api.py: End-to-end requests through TestClient
#
# Run tests with: pytest
# =============================================================================
