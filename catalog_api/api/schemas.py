"""API schemas for the Catalog API.

Pydantic models for request/response validation and serialization.
Request bodies only shape the payload; field rules (lengths, blank
names, negative prices) are enforced by the domain and reported as
INVALID_ARGUMENT.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | list[Any] = Field(
        default_factory=dict, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


class SoftDeletableResponse(BaseModel):
    """Lifecycle fields shared by every catalog entity."""

    is_deleted: bool = Field(..., description="Whether the entity is soft-deleted")
    deleted_at: datetime | None = Field(default=None, description="When it was deleted")
    version: int = Field(..., description="Optimistic concurrency version")
    created_at: datetime = Field(..., description="When the entity was created")
    updated_at: datetime = Field(..., description="When the entity was last updated")


class NameRequest(BaseModel):
    """Request carrying a single name (create or rename)."""

    name: str = Field(..., description="Name")


# ============================================================================
# Category Schemas
# ============================================================================


class CategoryResponse(SoftDeletableResponse):
    """Response for a category."""

    id: str = Field(..., description="Category identifier")
    name: str = Field(..., description="Category name")
    product_ids: list[str] = Field(
        default_factory=list, description="Products attached to the category"
    )


class CategoriesListResponse(BaseModel):
    """List of categories."""

    items: list[CategoryResponse] = Field(..., description="Categories ordered by name")
    total: int = Field(..., description="Number of categories")


# ============================================================================
# Product Schemas
# ============================================================================


class ProductCreateRequest(BaseModel):
    """Request to create a product."""

    name: str = Field(..., description="Product name (max 200 characters)")
    description: str = Field(..., description="Product description (max 1000 characters)")
    price: Decimal = Field(..., description="Non-negative price")
    category_id: str = Field(..., description="Existing category identifier")
    active: bool = Field(default=True, description="Whether the product is active")


class ProductUpdateRequest(BaseModel):
    """Request to replace every editable product attribute."""

    name: str = Field(..., description="Product name")
    description: str = Field(..., description="Product description")
    price: Decimal = Field(..., description="Non-negative price")
    active: bool = Field(..., description="Whether the product is active")


class DescriptionRequest(BaseModel):
    """Request to replace a product description."""

    description: str = Field(..., description="Product description")


class PriceRequest(BaseModel):
    """Request to change a product price."""

    price: Decimal = Field(..., description="Non-negative price")


class ProductResponse(SoftDeletableResponse):
    """Response for a product."""

    id: str = Field(..., description="Product identifier")
    name: str = Field(..., description="Product name")
    description: str = Field(..., description="Product description")
    price: Decimal = Field(..., description="Price")
    active: bool = Field(..., description="Whether the product is active")
    category_id: str = Field(..., description="Category identifier")
    tag_ids: list[str] = Field(default_factory=list, description="Attached tags")


class ProductsListResponse(BaseModel):
    """List of products."""

    items: list[ProductResponse] = Field(..., description="Products ordered by name")
    total: int = Field(..., description="Number of products")


class ProductViewSchema(BaseModel):
    """Read-side product projection used by search and statistics."""

    id: str
    name: str
    description: str
    price: Decimal
    active: bool
    category_id: str
    category_name: str
    tags: list[str] = Field(default_factory=list, description="Tag names, sorted")
    created_at: datetime
    updated_at: datetime


class ProductSearchResponse(BaseModel):
    """One page of search results with aggregates over all matches."""

    items: list[ProductViewSchema] = Field(..., description="Products on this page")
    total_items: int = Field(..., description="Number of matching products")
    total_pages: int = Field(..., description="Number of pages")
    current_page: int = Field(..., description="Requested page")
    page_size: int = Field(..., description="Items per page")
    has_next: bool = Field(..., description="Whether a later page exists")
    has_prev: bool = Field(..., description="Whether an earlier page exists")
    average_price: Decimal = Field(..., description="Mean price of all matches")
    items_by_category: dict[str, int] = Field(
        default_factory=dict, description="Match count per category name"
    )


class CatalogStatisticsResponse(BaseModel):
    """Statistics over active, non-deleted products."""

    total_active_products: int
    average_price: Decimal
    products_by_category: dict[str, int] = Field(default_factory=dict)
    most_expensive: list[ProductViewSchema] = Field(default_factory=list)


# ============================================================================
# Tag Schemas
# ============================================================================


class TagResponse(SoftDeletableResponse):
    """Response for a tag."""

    id: str = Field(..., description="Tag identifier")
    name: str = Field(..., description="Tag name")
    product_id: str | None = Field(default=None, description="Assigned product")


class TagsListResponse(BaseModel):
    """List of tags."""

    items: list[TagResponse] = Field(..., description="Tags ordered by name")
    total: int = Field(..., description="Number of tags")
