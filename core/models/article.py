# =============================================================================
# core/models/article.py - News Article Schemas
# =============================================================================
# API contract for news articles:
# - ArticleStatus: Enum for the publication lifecycle
# - ArticleRecord: Canonical article returned to clients
# - ArticleRequest: Creation / sparse update payload
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class ArticleStatus(str, Enum):
    """
    Publication lifecycle of an article.

    Flow: draft -> published -> archived
    """
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class ArticleRecord(BaseModel):
    """Canonical article representation."""
    id: int
    title: str
    body: str
    image_url: str | None = None
    author: str | None = None
    status: ArticleStatus = ArticleStatus.DRAFT
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ArticleRequest(BaseModel):
    """
    Payload for creating or partially updating an article.

    `status` is a plain string here; unknown values are reported with the
    list of accepted statuses.
    """
    title: str | None = Field(default=None, example="Grand opening this Saturday")
    body: str | None = Field(default=None, example="Join us for ...")
    image_url: str | None = None
    author: str | None = Field(default=None, example="Editorial team")
    status: str | None = Field(default=None, example="draft")
