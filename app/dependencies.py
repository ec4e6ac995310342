# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
#
# Everything is read from app.state, which create_app() (app/main.py)
# populates, so each app instance carries its own store and services.
# =============================================================================

from typing import Annotated

from fastapi import Depends, Request

from core.resources import ARTICLES, CATEGORIES, PRODUCTS
from core.services import AccountService, ResourceService, StorageService
from lib.store import Store


def get_store(request: Request) -> Store:
    """Get the store opened by the application lifespan."""
    return request.app.state.store


def get_account_service(request: Request, store: Store = Depends(get_store)) -> AccountService:
    return AccountService(
        store,
        hasher=request.app.state.hasher,
        tokens=request.app.state.tokens,
    )


def get_category_service(store: Store = Depends(get_store)) -> ResourceService:
    return ResourceService(CATEGORIES, store)


def get_product_service(store: Store = Depends(get_store)) -> ResourceService:
    return ResourceService(PRODUCTS, store)


def get_article_service(store: Store = Depends(get_store)) -> ResourceService:
    return ResourceService(ARTICLES, store)


def get_storage_service(request: Request) -> StorageService:
    return request.app.state.storage


# Type aliases for dependency injection
StoreDep = Annotated[Store, Depends(get_store)]
AccountServiceDep = Annotated[AccountService, Depends(get_account_service)]
CategoryServiceDep = Annotated[ResourceService, Depends(get_category_service)]
ProductServiceDep = Annotated[ResourceService, Depends(get_product_service)]
ArticleServiceDep = Annotated[ResourceService, Depends(get_article_service)]
StorageDep = Annotated[StorageService, Depends(get_storage_service)]
