# =============================================================================
# app/routers/users.py - Admin User Management Endpoints
# =============================================================================
# Every endpoint requires the admin role. Self-service profile endpoints
# live in app/auth/routes.py.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, File, Path, UploadFile

from app.auth import AuthUser, require_admin
from app.dependencies import AccountServiceDep, StorageDep
from app.exceptions import unwrap
from core.models.account import AccountCreateRequest, AccountRecord, AccountUpdateRequest

router = APIRouter(dependencies=[Depends(require_admin)])

UserId = Annotated[str, Path(description="User id (positive integer)")]


@router.get("", response_model=list[AccountRecord])
async def list_users(service: AccountServiceDep):
    return await service.list_all()


@router.get("/{user_id}", response_model=AccountRecord)
async def get_user(user_id: UserId, service: AccountServiceDep):
    return unwrap(await service.get(user_id))


@router.post("", response_model=AccountRecord, status_code=201)
async def create_user(
    request: AccountCreateRequest,
    service: AccountServiceDep,
    user: AuthUser = Depends(require_admin),
):
    """
    Create an account with any role (defaults to user).

    Username and email must not be held by another account.
    """
    return unwrap(await service.create(request.model_dump(exclude_unset=True), actor=user))


@router.put("/{user_id}", response_model=AccountRecord)
async def update_user(
    user_id: UserId,
    request: AccountUpdateRequest,
    service: AccountServiceDep,
    user: AuthUser = Depends(require_admin),
):
    """
    Partially update an account, including its role.

    Passwords cannot be changed here.
    """
    return unwrap(
        await service.update(user_id, request.model_dump(exclude_unset=True), actor=user)
    )


@router.post("/{user_id}/avatar", response_model=AccountRecord)
async def upload_user_avatar(
    user_id: UserId,
    avatar: Annotated[UploadFile, File(description="Avatar image")],
    service: AccountServiceDep,
    storage: StorageDep,
    user: AuthUser = Depends(require_admin),
):
    account = unwrap(await service.get(user_id))
    url = await storage.upload_image(f"avatars/{account.id}", avatar.filename, await avatar.read())
    return unwrap(await service.update(account.id, {"avatar_url": url}, actor=user))


@router.delete("/{user_id}")
async def delete_user(
    user_id: UserId,
    service: AccountServiceDep,
    user: AuthUser = Depends(require_admin),
):
    deleted = unwrap(await service.delete(user_id, actor=user))
    return {"success": True, "id": deleted, "message": "User deleted"}
