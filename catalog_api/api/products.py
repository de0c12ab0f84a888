"""Product API endpoints.

Provides endpoints for product search and statistics, product CRUD with
soft delete, re-categorizing, and tag attachment.
"""

from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from catalog_api.api.dependencies import (
    error_to_http,
    get_catalog_service,
    get_product_service,
    parse_id,
    unwrap,
)
from catalog_api.api.schemas import (
    CatalogStatisticsResponse,
    DescriptionRequest,
    ErrorResponse,
    NameRequest,
    PriceRequest,
    ProductCreateRequest,
    ProductResponse,
    ProductSearchResponse,
    ProductsListResponse,
    ProductUpdateRequest,
    ProductViewSchema,
    TagsListResponse,
)
from catalog_api.api.tags import tag_to_response
from catalog_api.application.product_service import ProductService
from catalog_api.catalog.search import ProductSearchCriteria, ProductView, SortKey
from catalog_api.catalog.service import CatalogService
from catalog_api.domain.entities import Product
from catalog_api.domain.value_objects import CategoryId, ProductId, TagId
from catalog_api.infrastructure.config import settings

router = APIRouter(prefix="/products", tags=["Products"])

CommandService = Annotated[ProductService, Depends(get_product_service)]
ReadService = Annotated[CatalogService, Depends(get_catalog_service)]

SEARCHABLE_SORT_KEYS = {SortKey.NAME.value, SortKey.PRICE.value, SortKey.DATE.value}

_COMMAND_ERRORS = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


# ============================================================================
# Converters
# ============================================================================


def product_to_response(product: Product) -> ProductResponse:
    """Convert Product entity to response schema."""
    return ProductResponse(
        id=str(product.id),
        name=product.name,
        description=product.description,
        price=product.price,
        active=product.active,
        category_id=str(product.category_id),
        tag_ids=sorted(str(tag_id) for tag_id in product.tag_ids),
        is_deleted=product.is_deleted,
        deleted_at=product.deleted_at,
        version=product.version,
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


def view_to_schema(view: ProductView) -> ProductViewSchema:
    """Convert a read-side ProductView to its schema."""
    return ProductViewSchema(
        id=view.id,
        name=view.name,
        description=view.description,
        price=view.price,
        active=view.active,
        category_id=view.category_id,
        category_name=view.category_name,
        tags=list(view.tags),
        created_at=view.created_at,
        updated_at=view.updated_at,
    )


def _invalid_argument(field: str, reason: str):
    return error_to_http(
        "INVALID_ARGUMENT",
        f"Invalid {field}: {reason}",
        {"field": field, "reason": reason},
    )


# ============================================================================
# Search and Statistics
# ============================================================================


@router.get(
    "/search",
    response_model=ProductSearchResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
    summary="Search products",
    description=(
        "Filter live products by term, category, price range, active flag and tag "
        "names, then sort and paginate. Aggregates cover every match, not just the page."
    ),
)
async def search_products(
    service: ReadService,
    term: Annotated[str | None, Query(description="Substring of name or description")] = None,
    category_id: Annotated[str | None, Query()] = None,
    min_price: Annotated[Decimal | None, Query(ge=0)] = None,
    max_price: Annotated[Decimal | None, Query(ge=0)] = None,
    active: Annotated[bool | None, Query()] = None,
    tags: Annotated[list[str] | None, Query(description="Match any of these tag names")] = None,
    sort_by: Annotated[str | None, Query(description="name, price or date")] = None,
    sort_descending: Annotated[bool, Query()] = False,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1)] = settings.default_page_size,
) -> ProductSearchResponse:
    """Search products.

    Args:
        service: Catalog read service.
        term: Case-insensitive substring of name or description.
        category_id: Exact category filter.
        min_price: Inclusive lower price bound.
        max_price: Inclusive upper price bound.
        active: Active flag filter.
        tags: Tag names; products carrying any of them match.
        sort_by: Sort key; omitted means name ascending.
        sort_descending: Reverse the sort key.
        page: 1-based page number.
        page_size: Items per page.

    Returns:
        One page of matches with aggregates.

    Raises:
        HTTPException: On invalid query parameters.
    """
    if page_size > settings.max_page_size:
        raise _invalid_argument("page_size", f"must be at most {settings.max_page_size}")
    if min_price is not None and max_price is not None and min_price > max_price:
        raise _invalid_argument("min_price", "must not exceed max_price")
    if sort_by is not None and sort_by.strip().lower() not in SEARCHABLE_SORT_KEYS:
        raise _invalid_argument("sort_by", "must be one of name, price, date")

    criteria = ProductSearchCriteria(
        term=term,
        category_id=parse_id(CategoryId, category_id) if category_id else None,
        min_price=min_price,
        max_price=max_price,
        active=active,
        tags=frozenset(tags or ()),
        sort_by=SortKey.parse(sort_by),
        sort_descending=sort_descending,
        page=page,
        page_size=page_size,
    )
    result = unwrap(await service.search_products(criteria))

    return ProductSearchResponse(
        items=[view_to_schema(v) for v in result.items],
        total_items=result.total_items,
        total_pages=result.total_pages,
        current_page=result.current_page,
        page_size=result.page_size,
        has_next=result.has_next,
        has_prev=result.has_prev,
        average_price=result.average_price,
        items_by_category=result.items_by_category,
    )


@router.get(
    "/statistics",
    response_model=CatalogStatisticsResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Catalog statistics",
)
async def get_statistics(service: ReadService) -> CatalogStatisticsResponse:
    """Statistics over active, non-deleted products."""
    statistics = await service.get_statistics()
    return CatalogStatisticsResponse(
        total_active_products=statistics.total_active_products,
        average_price=statistics.average_price,
        products_by_category=statistics.products_by_category,
        most_expensive=[view_to_schema(v) for v in statistics.most_expensive],
    )


# ============================================================================
# Products
# ============================================================================


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_COMMAND_ERRORS,
    summary="Create product",
)
async def create_product(request: ProductCreateRequest, service: CommandService) -> ProductResponse:
    """Create a product inside an existing category."""
    result = await service.create_product(
        name=request.name,
        description=request.description,
        price=request.price,
        category_id=parse_id(CategoryId, request.category_id),
        active=request.active,
    )
    return product_to_response(unwrap(result))


@router.get(
    "",
    response_model=ProductsListResponse,
    responses={401: {"model": ErrorResponse}},
    summary="List products",
)
async def list_products(
    service: ReadService,
    include_deleted: Annotated[bool, Query()] = False,
) -> ProductsListResponse:
    """List products ordered by name."""
    products = await service.list_products(include_deleted)
    return ProductsListResponse(
        items=[product_to_response(p) for p in products],
        total=len(products),
    )


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Get product",
)
async def get_product(
    product_id: str,
    service: ReadService,
    include_deleted: Annotated[bool, Query()] = False,
) -> ProductResponse:
    """Get a product by ID."""
    result = await service.get_product(parse_id(ProductId, product_id), include_deleted)
    return product_to_response(unwrap(result))


@router.get(
    "/{product_id}/tags",
    response_model=TagsListResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="List product tags",
)
async def list_product_tags(product_id: str, service: ReadService) -> TagsListResponse:
    """List the live tags attached to a product."""
    tags = unwrap(await service.list_tags_for_product(parse_id(ProductId, product_id)))
    return TagsListResponse(items=[tag_to_response(t) for t in tags], total=len(tags))


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    responses=_COMMAND_ERRORS,
    summary="Update product",
    description="Replace name, description, price and active flag in one step.",
)
async def update_product(
    product_id: str, request: ProductUpdateRequest, service: CommandService
) -> ProductResponse:
    """Replace every editable attribute of a product."""
    result = await service.update_product(
        parse_id(ProductId, product_id),
        name=request.name,
        description=request.description,
        price=request.price,
        active=request.active,
    )
    return product_to_response(unwrap(result))


@router.patch("/{product_id}/name", response_model=ProductResponse, responses=_COMMAND_ERRORS)
async def rename_product(
    product_id: str, request: NameRequest, service: CommandService
) -> ProductResponse:
    """Rename a product."""
    result = await service.rename_product(parse_id(ProductId, product_id), request.name)
    return product_to_response(unwrap(result))


@router.patch(
    "/{product_id}/description", response_model=ProductResponse, responses=_COMMAND_ERRORS
)
async def redescribe_product(
    product_id: str, request: DescriptionRequest, service: CommandService
) -> ProductResponse:
    """Replace a product description."""
    result = await service.redescribe_product(
        parse_id(ProductId, product_id), request.description
    )
    return product_to_response(unwrap(result))


@router.patch("/{product_id}/price", response_model=ProductResponse, responses=_COMMAND_ERRORS)
async def reprice_product(
    product_id: str, request: PriceRequest, service: CommandService
) -> ProductResponse:
    """Change a product price."""
    result = await service.reprice_product(parse_id(ProductId, product_id), request.price)
    return product_to_response(unwrap(result))


@router.patch("/{product_id}/activate", response_model=ProductResponse, responses=_COMMAND_ERRORS)
async def activate_product(product_id: str, service: CommandService) -> ProductResponse:
    """Mark a product as active."""
    result = await service.activate_product(parse_id(ProductId, product_id))
    return product_to_response(unwrap(result))


@router.patch(
    "/{product_id}/deactivate", response_model=ProductResponse, responses=_COMMAND_ERRORS
)
async def deactivate_product(product_id: str, service: CommandService) -> ProductResponse:
    """Mark a product as inactive."""
    result = await service.deactivate_product(parse_id(ProductId, product_id))
    return product_to_response(unwrap(result))


@router.patch(
    "/{product_id}/category/{category_id}",
    response_model=ProductResponse,
    responses=_COMMAND_ERRORS,
    summary="Change product category",
)
async def change_product_category(
    product_id: str, category_id: str, service: CommandService
) -> ProductResponse:
    """Move a product to another live category."""
    result = await service.change_product_category(
        parse_id(ProductId, product_id), parse_id(CategoryId, category_id)
    )
    return product_to_response(unwrap(result))


@router.post(
    "/{product_id}/tags/{tag_id}",
    response_model=ProductResponse,
    responses=_COMMAND_ERRORS,
    summary="Attach tag",
)
async def add_tag_to_product(product_id: str, tag_id: str, service: CommandService) -> ProductResponse:
    """Attach a live tag to a product, moving it off any other product."""
    result = await service.add_tag_to_product(
        parse_id(ProductId, product_id), parse_id(TagId, tag_id)
    )
    return product_to_response(unwrap(result))


@router.delete(
    "/{product_id}/tags/{tag_id}",
    response_model=ProductResponse,
    responses=_COMMAND_ERRORS,
    summary="Detach tag",
)
async def remove_tag_from_product(
    product_id: str, tag_id: str, service: CommandService
) -> ProductResponse:
    """Detach a tag from a product."""
    result = await service.remove_tag_from_product(
        parse_id(ProductId, product_id), parse_id(TagId, tag_id)
    )
    return product_to_response(unwrap(result))


@router.delete(
    "/{product_id}/tags",
    response_model=ProductResponse,
    responses=_COMMAND_ERRORS,
    summary="Clear tags",
)
async def clear_product_tags(product_id: str, service: CommandService) -> ProductResponse:
    """Detach every tag from a product."""
    result = await service.clear_product_tags(parse_id(ProductId, product_id))
    return product_to_response(unwrap(result))


@router.delete(
    "/{product_id}",
    response_model=ProductResponse,
    responses=_COMMAND_ERRORS,
    summary="Delete product",
)
async def delete_product(product_id: str, service: CommandService) -> ProductResponse:
    """Soft-delete a product."""
    result = await service.delete_product(parse_id(ProductId, product_id))
    return product_to_response(unwrap(result))


@router.patch(
    "/{product_id}/restore",
    response_model=ProductResponse,
    responses=_COMMAND_ERRORS,
    summary="Restore product",
)
async def restore_product(product_id: str, service: CommandService) -> ProductResponse:
    """Restore a soft-deleted product."""
    result = await service.restore_product(parse_id(ProductId, product_id))
    return product_to_response(unwrap(result))
