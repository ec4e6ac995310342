# =============================================================================
# app/routers/products.py - Product Endpoints
# =============================================================================
# Public reads (including listing by category tag); create/update/delete and
# image upload require the admin role.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, File, Path, UploadFile

from app.auth import AuthUser, require_admin
from app.dependencies import ProductServiceDep, StorageDep
from app.exceptions import unwrap
from core.models.catalog import ProductRecord, ProductRequest

router = APIRouter()

ProductId = Annotated[str, Path(description="Product id (positive integer)")]


@router.get("", response_model=list[ProductRecord])
async def list_products(service: ProductServiceDep):
    return await service.list_all()


@router.get("/category/{tag}", response_model=list[ProductRecord])
async def list_products_by_category(
    tag: Annotated[str, Path(description="Category tag, matched exactly")],
    service: ProductServiceDep,
):
    """List products carrying the given category tag."""
    return unwrap(await service.list_by("category", tag))


@router.get("/{product_id}", response_model=ProductRecord)
async def get_product(product_id: ProductId, service: ProductServiceDep):
    return unwrap(await service.get(product_id))


@router.post("", response_model=ProductRecord, status_code=201)
async def create_product(
    request: ProductRequest,
    service: ProductServiceDep,
    user: AuthUser = Depends(require_admin),
):
    """
    Create a product.

    `name` and `price` are required; `price` must be a non-negative number
    with at most two decimal places.
    """
    return unwrap(await service.create(request.model_dump(exclude_unset=True), actor=user))


@router.put("/{product_id}", response_model=ProductRecord)
async def update_product(
    product_id: ProductId,
    request: ProductRequest,
    service: ProductServiceDep,
    user: AuthUser = Depends(require_admin),
):
    """
    Partially update a product.

    Omitted fields are left untouched; optional fields sent as null are cleared.
    """
    return unwrap(
        await service.update(product_id, request.model_dump(exclude_unset=True), actor=user)
    )


@router.post("/{product_id}/image", response_model=ProductRecord)
async def upload_product_image(
    product_id: ProductId,
    image: Annotated[UploadFile, File(description="Product image")],
    service: ProductServiceDep,
    storage: StorageDep,
    user: AuthUser = Depends(require_admin),
):
    """Upload an image and set it as the product's image_url."""
    product = unwrap(await service.get(product_id))
    url = await storage.upload_image(f"products/{product.id}", image.filename, await image.read())
    return unwrap(await service.update(product.id, {"image_url": url}, actor=user))


@router.delete("/{product_id}")
async def delete_product(
    product_id: ProductId,
    service: ProductServiceDep,
    user: AuthUser = Depends(require_admin),
):
    deleted = unwrap(await service.delete(product_id, actor=user))
    return {"success": True, "id": deleted, "message": "Product deleted"}
