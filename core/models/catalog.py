# =============================================================================
# core/models/catalog.py - Category and Product Schemas
# =============================================================================
# API contract for the catalog:
# - CategoryRecord / CategoryRequest: display name only
# - ProductRecord / ProductRequest: name, price, description, image, tag
#
# The product `category` is a free-form tag, not a foreign key.
# =============================================================================

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field


class CategoryRecord(BaseModel):
    """Canonical category representation."""
    id: int
    name: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CategoryRequest(BaseModel):
    """Payload for creating or partially updating a category."""
    name: str | None = Field(default=None, example="Beverages")


class ProductRecord(BaseModel):
    """
    Canonical product representation.

    Example:
        {
            "id": 7,
            "name": "Kopi Susu",
            "price": "18000.00",
            "description": "Iced coffee with palm sugar",
            "image_url": null,
            "category": "Beverages",
            "created_at": "2024-01-15T10:30:00Z",
            "updated_at": "2024-01-15T10:30:00Z"
        }
    """
    id: int
    name: str
    price: Decimal = Field(..., ge=0, description="Non-negative price")
    description: str | None = None
    image_url: str | None = None
    category: str | None = Field(default=None, description="Free-form category tag")
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProductRequest(BaseModel):
    """
    Payload for creating or partially updating a product.

    `price` accepts numbers or numeric strings; it is parsed by the price
    rule so a bad value is reported alongside every other problem.
    """
    name: str | None = Field(default=None, example="Kopi Susu")
    # Unconstrained so booleans and malformed values reach the price rule
    price: Any = Field(default=None, example=18000)
    description: str | None = None
    image_url: str | None = None
    category: str | None = Field(default=None, example="Beverages")
