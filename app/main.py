# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Storefront API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
#
# Tests build isolated apps with create_app(settings, store=...).
# =============================================================================

import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from functools import lru_cache, partial

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.auth import routes as auth_routes
from app.config import Settings, get_settings
from app.exceptions import (
    StorefrontException,
    general_exception_handler,
    http_exception_handler,
    storefront_exception_handler,
    validation_exception_handler,
)
from app.routers import articles, categories, health, products, users
from core.services import StorageService
from lib.postgres_client import PostgresStore
from lib.security import PasswordHasher, TokenService
from lib.store import Store, StoreError
from lib.supabase_client import SupabaseStore, create_supabase_client

logger = logging.getLogger(__name__)

API_DESCRIPTION = """
## Storefront API

CRUD backend for a small shop and its news page.

### Resources

| Resource | Read | Write |
|----------|------|-------|
| **Users** | admin | admin (or the account itself via /auth/profile) |
| **Categories** | public | admin |
| **Products** | public | admin |
| **Articles** | public | admin |

### Conventions

- Updates are partial: omitted fields are left untouched, optional fields
  sent as `null` are cleared.
- Every error uses one envelope:
  `{"success": false, "code": "...", "summary": "...", "problems": [...], "timestamp": "..."}`

### Quick Start

```bash
# 1. Register
curl -X POST http://localhost:8000/api/v1/auth/register \\
  -H "Content-Type: application/json" \\
  -d '{"username": "ana", "email": "ana@x.com", "password": "Abcd1234"}'

# 2. Log in
curl -X POST http://localhost:8000/api/v1/auth/login \\
  -H "Content-Type: application/json" \\
  -d '{"email": "ana@x.com", "password": "Abcd1234"}'

# 3. Browse products
curl http://localhost:8000/api/v1/products
```
"""


async def open_store(settings: Settings) -> Store:
    """Open the store backend selected by STORE_BACKEND."""
    if settings.STORE_BACKEND == "postgres":
        if not settings.DATABASE_URL:
            raise StoreError(
                "STORE_BACKEND=postgres requires DATABASE_URL",
                code="CONFIG_ERROR",
                suggestion="Set DATABASE_URL in your .env file",
            )
        return await PostgresStore.connect(
            settings.DATABASE_URL,
            min_size=settings.DB_POOL_MIN_SIZE,
            max_size=settings.DB_POOL_MAX_SIZE,
        )
    return SupabaseStore(url=settings.SUPABASE_URL, service_key=settings.SUPABASE_SERVICE_KEY)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    - Startup: open the store unless one was injected
    - Shutdown: close the store if it was opened here
    """
    settings = app.state.settings
    logger.info(f"Starting Storefront API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    opened_here = app.state.store is None
    if opened_here:
        app.state.store = await open_store(settings)
        logger.info(f"Store backend: {settings.STORE_BACKEND}")

    yield

    logger.info("Shutting down Storefront API")
    if opened_here:
        await app.state.store.close()
        app.state.store = None


def create_app(settings: Settings | None = None, store: Store | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Application settings (defaults to get_settings())
        store: Store to use instead of the one opened at startup

    Returns:
        Configured FastAPI app
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Storefront API",
        description=API_DESCRIPTION,
        version=health.VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "Auth", "description": "Registration, login and the caller's profile"},
            {"name": "Users", "description": "Account management (admin only)"},
            {"name": "Categories", "description": "Product categories"},
            {"name": "Products", "description": "Products and product images"},
            {"name": "Articles", "description": "News articles and article images"},
            {"name": "Health", "description": "API health and readiness checks"},
        ],
    )

    # -------------------------------------------------------------------------
    # Shared components
    # -------------------------------------------------------------------------
    app.state.settings = settings
    app.state.store = store
    app.state.hasher = PasswordHasher(rounds=settings.BCRYPT_ROUNDS)
    app.state.tokens = TokenService(
        settings.SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
        default_ttl=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    # Client is created on the first upload
    app.state.storage = StorageService(
        client_factory=lru_cache(maxsize=1)(
            partial(create_supabase_client, settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY)
        ),
        bucket=settings.STORAGE_BUCKET,
        allowed_extensions=settings.allowed_image_extensions_list,
        max_bytes=settings.max_upload_size_bytes,
    )

    # -------------------------------------------------------------------------
    # Middleware
    # -------------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------------------------------
    # Exception Handlers
    # -------------------------------------------------------------------------
    app.add_exception_handler(StorefrontException, storefront_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    # -------------------------------------------------------------------------
    # Routers
    # -------------------------------------------------------------------------
    app.include_router(auth_routes.router, prefix="/api/v1/auth", tags=["Auth"])
    app.include_router(health.router, prefix="/api/v1", tags=["Health"])
    app.include_router(users.router, prefix="/api/v1/users", tags=["Users"])
    app.include_router(categories.router, prefix="/api/v1/categories", tags=["Categories"])
    app.include_router(products.router, prefix="/api/v1/products", tags=["Products"])
    app.include_router(articles.router, prefix="/api/v1/articles", tags=["Articles"])

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint - returns API info."""
        return {
            "name": "Storefront API",
            "version": health.VERSION,
            "docs": "/docs",
            "health": "/api/v1/health",
        }

    return app


# Configure logging
_settings = get_settings()
logging.basicConfig(
    level=logging.DEBUG if _settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

app = create_app(_settings)
