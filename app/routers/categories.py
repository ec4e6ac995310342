# =============================================================================
# app/routers/categories.py - Category Endpoints
# =============================================================================
# Public reads; create/update/delete require the admin role.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Path

from app.auth import AuthUser, require_admin
from app.dependencies import CategoryServiceDep
from app.exceptions import unwrap
from core.models.catalog import CategoryRecord, CategoryRequest

router = APIRouter()

CategoryId = Annotated[str, Path(description="Category id (positive integer)")]


@router.get("", response_model=list[CategoryRecord])
async def list_categories(service: CategoryServiceDep):
    """List every category, oldest first."""
    return await service.list_all()


@router.get("/{category_id}", response_model=CategoryRecord)
async def get_category(category_id: CategoryId, service: CategoryServiceDep):
    return unwrap(await service.get(category_id))


@router.post("", response_model=CategoryRecord, status_code=201)
async def create_category(
    request: CategoryRequest,
    service: CategoryServiceDep,
    user: AuthUser = Depends(require_admin),
):
    """Create a category. Names are not required to be unique."""
    return unwrap(await service.create(request.model_dump(exclude_unset=True), actor=user))


@router.put("/{category_id}", response_model=CategoryRecord)
async def update_category(
    category_id: CategoryId,
    request: CategoryRequest,
    service: CategoryServiceDep,
    user: AuthUser = Depends(require_admin),
):
    return unwrap(
        await service.update(category_id, request.model_dump(exclude_unset=True), actor=user)
    )


@router.delete("/{category_id}")
async def delete_category(
    category_id: CategoryId,
    service: CategoryServiceDep,
    user: AuthUser = Depends(require_admin),
):
    deleted = unwrap(await service.delete(category_id, actor=user))
    return {"success": True, "id": deleted, "message": "Category deleted"}
