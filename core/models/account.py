# =============================================================================
# core/models/account.py - Account Schemas
# =============================================================================
# These models define the API contract for user accounts:
# - AccountRole: Enum for the two roles
# - AccountRecord: Canonical account returned to clients (never the password)
# - RegisterRequest / AccountCreateRequest: Creation payloads
# - AccountUpdateRequest / ProfileUpdateRequest: Sparse update payloads
# - LoginRequest / TokenResponse: Credential exchange
#
# Request models only shape the payload. Field rules (length, charset,
# email shape, password strength) live in core/validation/rules.py so that
# every problem is reported at once in a failure envelope.
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class AccountRole(str, Enum):
    """
    Account roles.

    - user: standard account, may only manage its own profile
    - admin: may manage every resource
    """
    USER = "user"
    ADMIN = "admin"


class AccountRecord(BaseModel):
    """
    Canonical account representation.

    Built from a store row; columns not declared here (the password hash)
    are dropped.

    Example:
        {
            "id": 1,
            "username": "ana",
            "email": "ana@x.com",
            "role": "user",
            "avatar_url": null,
            "address": null,
            "phone": null,
            "created_at": "2024-01-15T10:30:00Z",
            "updated_at": "2024-01-15T10:30:00Z"
        }
    """

    id: int = Field(..., description="Account identifier")
    username: str = Field(..., description="Unique identity name")
    email: str = Field(..., description="Unique email address")
    role: AccountRole = Field(default=AccountRole.USER, description="Account role")
    avatar_url: str | None = Field(default=None, description="Avatar image URL")
    address: str | None = Field(default=None, description="Postal address")
    phone: str | None = Field(default=None, description="Phone number")
    created_at: datetime | None = Field(default=None, description="Creation time")
    updated_at: datetime | None = Field(default=None, description="Last modification time")


class RegisterRequest(BaseModel):
    """Public self-registration. The role is always `user`."""
    username: str | None = None
    email: str | None = None
    password: str | None = None
    address: str | None = None
    phone: str | None = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "username": "ana",
                "email": "ana@x.com",
                "password": "Abcd1234",
            }
        }
    }


class AccountCreateRequest(RegisterRequest):
    """Admin account creation; the role may be chosen."""
    role: str | None = Field(default=None, example="admin")
    avatar_url: str | None = None


class AccountUpdateRequest(BaseModel):
    """
    Admin partial update. Omitted fields are left untouched; fields sent
    as null are cleared (optional fields only).
    """
    username: str | None = None
    email: str | None = None
    role: str | None = None
    avatar_url: str | None = None
    address: str | None = None
    phone: str | None = None


class ProfileUpdateRequest(BaseModel):
    """Self-service partial update. Role changes are not accepted here."""
    username: str | None = None
    email: str | None = None
    avatar_url: str | None = None
    address: str | None = None
    phone: str | None = None


class LoginRequest(BaseModel):
    """Credentials for POST /auth/login."""
    email: str | None = Field(default=None, example="ana@x.com")
    password: str | None = Field(default=None, example="Abcd1234")


class TokenResponse(BaseModel):
    """Access token issued on successful login."""
    token: str
    token_type: str = "bearer"
