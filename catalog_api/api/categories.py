"""Category API endpoints.

Provides endpoints for creating, renaming, soft-deleting and restoring
categories and for attaching products to them.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from catalog_api.api.dependencies import (
    get_catalog_service,
    get_category_service,
    parse_id,
    unwrap,
)
from catalog_api.api.schemas import (
    CategoriesListResponse,
    CategoryResponse,
    ErrorResponse,
    NameRequest,
)
from catalog_api.application.category_service import CategoryService
from catalog_api.catalog.service import CatalogService
from catalog_api.domain.entities import Category
from catalog_api.domain.value_objects import CategoryId, ProductId

router = APIRouter(prefix="/categories", tags=["Categories"])

CommandService = Annotated[CategoryService, Depends(get_category_service)]
ReadService = Annotated[CatalogService, Depends(get_catalog_service)]

_COMMAND_ERRORS = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


# ============================================================================
# Converters
# ============================================================================


def category_to_response(category: Category) -> CategoryResponse:
    """Convert Category entity to response schema."""
    return CategoryResponse(
        id=str(category.id),
        name=category.name,
        product_ids=sorted(str(product_id) for product_id in category.product_ids),
        is_deleted=category.is_deleted,
        deleted_at=category.deleted_at,
        version=category.version,
        created_at=category.created_at,
        updated_at=category.updated_at,
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_COMMAND_ERRORS,
    summary="Create category",
)
async def create_category(request: NameRequest, service: CommandService) -> CategoryResponse:
    """Create a category with a name unique among live categories."""
    result = await service.create_category(request.name)
    return category_to_response(unwrap(result))


@router.get(
    "",
    response_model=CategoriesListResponse,
    responses={401: {"model": ErrorResponse}},
    summary="List categories",
)
async def list_categories(
    service: ReadService,
    include_deleted: Annotated[bool, Query()] = False,
) -> CategoriesListResponse:
    """List categories ordered by name.

    Args:
        service: Catalog read service.
        include_deleted: Whether soft-deleted categories are listed.

    Returns:
        Categories.
    """
    categories = await service.list_categories(include_deleted)
    return CategoriesListResponse(
        items=[category_to_response(c) for c in categories],
        total=len(categories),
    )


@router.get(
    "/{category_id}",
    response_model=CategoryResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Get category",
)
async def get_category(
    category_id: str,
    service: ReadService,
    include_deleted: Annotated[bool, Query()] = False,
) -> CategoryResponse:
    """Get a category by ID."""
    result = await service.get_category(parse_id(CategoryId, category_id), include_deleted)
    return category_to_response(unwrap(result))


@router.patch(
    "/{category_id}/name",
    response_model=CategoryResponse,
    responses=_COMMAND_ERRORS,
    summary="Rename category",
)
async def rename_category(
    category_id: str, request: NameRequest, service: CommandService
) -> CategoryResponse:
    """Rename a category."""
    result = await service.rename_category(parse_id(CategoryId, category_id), request.name)
    return category_to_response(unwrap(result))


@router.post(
    "/{category_id}/products/{product_id}",
    response_model=CategoryResponse,
    responses=_COMMAND_ERRORS,
    summary="Attach product to category",
    description="Move a product into this category. Attaching a member again is a no-op.",
)
async def add_product_to_category(
    category_id: str, product_id: str, service: CommandService
) -> CategoryResponse:
    """Attach a product to a category."""
    result = await service.add_product_to_category(
        parse_id(CategoryId, category_id), parse_id(ProductId, product_id)
    )
    return category_to_response(unwrap(result))


@router.delete(
    "/{category_id}/products/{product_id}",
    response_model=CategoryResponse,
    responses=_COMMAND_ERRORS,
    summary="Detach product from category",
)
async def remove_product_from_category(
    category_id: str, product_id: str, service: CommandService
) -> CategoryResponse:
    """Detach a product from a category's product set."""
    result = await service.remove_product_from_category(
        parse_id(CategoryId, category_id), parse_id(ProductId, product_id)
    )
    return category_to_response(unwrap(result))


@router.delete(
    "/{category_id}",
    response_model=CategoryResponse,
    responses=_COMMAND_ERRORS,
    summary="Delete category",
    description="Soft-delete a category. Fails while any of its products is not deleted.",
)
async def delete_category(category_id: str, service: CommandService) -> CategoryResponse:
    """Soft-delete a category."""
    result = await service.delete_category(parse_id(CategoryId, category_id))
    return category_to_response(unwrap(result))


@router.patch(
    "/{category_id}/restore",
    response_model=CategoryResponse,
    responses=_COMMAND_ERRORS,
    summary="Restore category",
)
async def restore_category(category_id: str, service: CommandService) -> CategoryResponse:
    """Restore a soft-deleted category."""
    result = await service.restore_category(parse_id(CategoryId, category_id))
    return category_to_response(unwrap(result))
