# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Registration, login and the caller's own profile.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile

from app.auth.dependencies import get_current_user
from app.auth.models import AuthUser
from app.dependencies import AccountServiceDep, StorageDep
from app.exceptions import unwrap
from core.models.account import (
    AccountRecord,
    LoginRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    TokenResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", response_model=AccountRecord, status_code=201)
async def register(request: RegisterRequest, service: AccountServiceDep):
    """
    Create a standard account.

    The new account always has the `user` role. Returns the account
    without its password.
    """
    return unwrap(await service.register(request.model_dump(exclude_unset=True)))


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest, service: AccountServiceDep):
    """
    Exchange email and password for a bearer token.

    Raises:
        401: If the email is unknown or the password is wrong
    """
    return unwrap(await service.login(request.model_dump(exclude_unset=True)))


@router.get("/profile", response_model=AccountRecord)
async def get_profile(
    service: AccountServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Get the current authenticated user's profile.

    Raises:
        401: If not authenticated
        404: If the account was deleted after the token was issued
    """
    return unwrap(await service.get_profile(user))


@router.put("/profile", response_model=AccountRecord)
async def update_profile(
    request: ProfileUpdateRequest,
    service: AccountServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Partially update the caller's own account.

    Role cannot be changed here; only fields present in the body change.
    """
    return unwrap(await service.update_profile(user, request.model_dump(exclude_unset=True)))


@router.put("/profile/avatar", response_model=AccountRecord)
async def upload_profile_avatar(
    avatar: Annotated[UploadFile, File(description="Avatar image")],
    service: AccountServiceDep,
    storage: StorageDep,
    user: AuthUser = Depends(get_current_user),
):
    """Upload an avatar image and set it as the caller's avatar_url."""
    unwrap(await service.get_profile(user))
    url = await storage.upload_image(f"avatars/{user.id}", avatar.filename, await avatar.read())
    return unwrap(await service.update_profile(user, {"avatar_url": url}))
