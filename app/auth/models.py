# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from typing import Optional

from pydantic import BaseModel

from core.models.account import AccountRole


class AuthUser(BaseModel):
    """
    Authenticated caller extracted from the access token.

    This is the minimal identity available from the token itself,
    without querying the store.
    """
    id: int
    email: Optional[str] = None
    role: AccountRole = AccountRole.USER

    model_config = {"frozen": True}

    @property
    def is_admin(self) -> bool:
        return self.role == AccountRole.ADMIN


class TokenPayload(BaseModel):
    """Decoded access token claims."""
    sub: str  # Account ID
    email: Optional[str] = None
    role: str = AccountRole.USER.value
    exp: int  # Expiration timestamp
    iat: int  # Issued at timestamp
