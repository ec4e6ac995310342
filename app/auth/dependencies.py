# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for authentication and authorization.
#
# Usage:
#   from app.auth import get_current_user, require_admin, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
#
#   @router.delete("/{id}", dependencies=[Depends(require_admin)])
# =============================================================================

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import ValidationError

from app.auth.models import AuthUser, TokenPayload
from app.exceptions import AuthenticationError, PermissionDeniedError
from core.models.account import AccountRole
from lib.security import TokenError, TokenService

logger = logging.getLogger(__name__)

# Missing credentials are reported by get_current_user as a failure envelope
security = HTTPBearer(auto_error=False)


def get_token_service(request: Request) -> TokenService:
    return request.app.state.tokens


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    tokens: TokenService = Depends(get_token_service),
) -> AuthUser:
    """
    Extract and validate the caller from the Bearer token.

    This dependency:
    1. Extracts the Bearer token from the Authorization header
    2. Verifies the signature and expiry
    3. Returns an AuthUser with the caller's id, email and role

    Raises:
        AuthenticationError: 401 if the token is missing, invalid or expired
    """
    if credentials is None:
        raise AuthenticationError("Missing bearer token.")

    try:
        claims = TokenPayload.model_validate(tokens.verify(credentials.credentials))
        user_id = int(claims.sub)
        role = AccountRole(claims.role)
    except TokenError as e:
        logger.warning(f"Token rejected: {e.message}")
        raise AuthenticationError("Invalid or expired token.") from e
    except (ValidationError, ValueError) as e:
        logger.warning(f"Token has malformed claims: {e}")
        raise AuthenticationError("Invalid or expired token.") from e

    return AuthUser(id=user_id, email=claims.email, role=role)


async def require_admin(user: AuthUser = Depends(get_current_user)) -> AuthUser:
    """
    Allow only administrators.

    Raises:
        PermissionDeniedError: 403 for authenticated non-admin callers
    """
    if not user.is_admin:
        logger.warning(f"User {user.id} denied admin access")
        raise PermissionDeniedError(AccountRole.ADMIN.value)
    return user
