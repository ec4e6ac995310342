# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by resource:
# - health.py: Health check endpoints
# - users.py: Admin user management
# - categories.py: Product categories
# - products.py: Products and product images
# - articles.py: News articles and article images
#
# Authentication routes live in app/auth/routes.py.
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import users
from . import categories
from . import products
from . import articles

__all__ = [
    "health",
    "users",
    "categories",
    "products",
    "articles",
]
