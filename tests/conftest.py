# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Provides an in-memory store, services with a fixed clock, and an
#   API client wired to both
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# app.main builds the default app at import time, which loads settings

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-signing")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

from datetime import datetime
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app
from core.resources import ARTICLES, CATEGORIES, PRODUCTS
from core.services import AccountService, ResourceService, StorageService
from lib.security import PasswordHasher, TokenService
from tests.fakes import FIXED_NOW, PUBLIC_URL, InMemoryStore


def fixed_clock() -> datetime:
    return FIXED_NOW


# =============================================================================
# Core Fixtures
# =============================================================================

@pytest.fixture
def store():
    """Empty in-memory store."""
    return InMemoryStore()


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def tokens():
    return TokenService("test-secret-key-for-signing")


@pytest.fixture
def account_service(store, hasher, tokens):
    return AccountService(store, hasher, tokens, clock=fixed_clock)


@pytest.fixture
def category_service(store):
    return ResourceService(CATEGORIES, store, clock=fixed_clock)


@pytest.fixture
def product_service(store):
    return ResourceService(PRODUCTS, store, clock=fixed_clock)


@pytest.fixture
def article_service(store):
    return ResourceService(ARTICLES, store, clock=fixed_clock)


# =============================================================================
# API Fixtures
# =============================================================================

@pytest.fixture
def storage_client():
    """Mock Supabase client whose uploads always succeed."""
    client = MagicMock()
    client.storage.from_.return_value.get_public_url.return_value = PUBLIC_URL
    return client


@pytest.fixture
def app(store, storage_client):
    """App wired to the in-memory store and a mocked storage client."""
    application = create_app(Settings(), store=store)
    application.state.storage = StorageService(
        lambda: storage_client,
        bucket="images",
        allowed_extensions=[".jpg", ".png"],
        max_bytes=1024,
    )
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin(store):
    return store.seed("users", username="root", email="root@x.com", password="", role="admin")


@pytest.fixture
def member(store):
    return store.seed("users", username="ana", email="ana@x.com", password="", role="user")


def bearer(app, account: dict) -> dict[str, str]:
    """Authorization header for a seeded account."""
    token = app.state.tokens.issue(
        {"sub": str(account["id"]), "email": account["email"], "role": account["role"]}
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(app, admin):
    return bearer(app, admin)


@pytest.fixture
def member_headers(app, member):
    return bearer(app, member)
