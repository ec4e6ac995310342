# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .resource_service import ResourceService, RequestRejected, NO_FIELDS_MESSAGE
from .account_service import AccountService, INVALID_CREDENTIALS
from .storage_service import StorageService

__all__ = [
    "ResourceService",
    "RequestRejected",
    "NO_FIELDS_MESSAGE",
    "AccountService",
    "INVALID_CREDENTIALS",
    "StorageService",
]
