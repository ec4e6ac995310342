# =============================================================================
# app/routers/articles.py - News Article Endpoints
# =============================================================================
# Public reads (including listing by status); create/update/delete and image
# upload require the admin role.
#
# Status lifecycle: draft -> published -> archived (any transition allowed)
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, File, Path, UploadFile

from app.auth import AuthUser, require_admin
from app.dependencies import ArticleServiceDep, StorageDep
from app.exceptions import unwrap
from core.models.article import ArticleRecord, ArticleRequest

router = APIRouter()

ArticleId = Annotated[str, Path(description="Article id (positive integer)")]


@router.get("", response_model=list[ArticleRecord])
async def list_articles(service: ArticleServiceDep):
    return await service.list_all()


@router.get("/status/{status}", response_model=list[ArticleRecord])
async def list_articles_by_status(
    status: Annotated[str, Path(description="draft, published or archived")],
    service: ArticleServiceDep,
):
    """
    List articles with the given status, newest first.

    An unknown status is rejected with INVALID_INPUT listing the accepted values.
    """
    return unwrap(
        await service.list_by("status", status, order_by="created_at", descending=True)
    )


@router.get("/{article_id}", response_model=ArticleRecord)
async def get_article(article_id: ArticleId, service: ArticleServiceDep):
    return unwrap(await service.get(article_id))


@router.post("", response_model=ArticleRecord, status_code=201)
async def create_article(
    request: ArticleRequest,
    service: ArticleServiceDep,
    user: AuthUser = Depends(require_admin),
):
    """Create an article. Status defaults to draft."""
    return unwrap(await service.create(request.model_dump(exclude_unset=True), actor=user))


@router.put("/{article_id}", response_model=ArticleRecord)
async def update_article(
    article_id: ArticleId,
    request: ArticleRequest,
    service: ArticleServiceDep,
    user: AuthUser = Depends(require_admin),
):
    return unwrap(
        await service.update(article_id, request.model_dump(exclude_unset=True), actor=user)
    )


@router.post("/{article_id}/image", response_model=ArticleRecord)
async def upload_article_image(
    article_id: ArticleId,
    image: Annotated[UploadFile, File(description="Article image")],
    service: ArticleServiceDep,
    storage: StorageDep,
    user: AuthUser = Depends(require_admin),
):
    """Upload an image and set it as the article's image_url."""
    article = unwrap(await service.get(article_id))
    url = await storage.upload_image(f"articles/{article.id}", image.filename, await image.read())
    return unwrap(await service.update(article.id, {"image_url": url}, actor=user))


@router.delete("/{article_id}")
async def delete_article(
    article_id: ArticleId,
    service: ArticleServiceDep,
    user: AuthUser = Depends(require_admin),
):
    deleted = unwrap(await service.delete(article_id, actor=user))
    return {"success": True, "id": deleted, "message": "Article deleted"}
