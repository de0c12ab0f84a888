"""Catalog read service.

High-level service that combines repository lookups with the search
engine for the read side of the catalog: product search, single-entity
lookups, listings and catalog statistics.
"""

from dataclasses import dataclass
from decimal import Decimal

import structlog

from catalog_api.application.results import ServiceResult
from catalog_api.catalog.repository import CatalogRepository, InMemoryCatalogRepository
from catalog_api.catalog.search import (
    ProductSearchCriteria,
    ProductSearchEngine,
    ProductSearchResult,
    ProductView,
    SortKey,
)
from catalog_api.domain.entities import Category, Product, Tag
from catalog_api.domain.exceptions import DomainError, NotFoundError
from catalog_api.domain.value_objects import CategoryId, ProductId, TagId

logger = structlog.get_logger()

TOP_EXPENSIVE_COUNT = 3


@dataclass(frozen=True)
class CatalogStatistics:
    """Summary of the active, non-deleted products.

    Attributes:
        total_active_products: Number of active products.
        average_price: Mean price, 0 when there are none.
        products_by_category: Category name to product count.
        most_expensive: Up to three products, highest price first.
    """

    total_active_products: int
    average_price: Decimal
    products_by_category: dict[str, int]
    most_expensive: list[ProductView]


class CatalogService:
    """Service for catalog read operations.

    Example usage:
        service = CatalogService(InMemoryCatalogRepository())

        result = await service.search_products(
            ProductSearchCriteria(term="lamp", sort_by=SortKey.PRICE),
        )
        if result.success:
            print(result.value.total_items)
    """

    def __init__(
        self,
        repository: CatalogRepository | None = None,
        engine: ProductSearchEngine | None = None,
        request_id: str | None = None,
    ) -> None:
        """Initialize service.

        Args:
            repository: Catalog repository.
            engine: Search engine.
            request_id: Request ID for correlation.
        """
        self.repository = repository or InMemoryCatalogRepository()
        self.engine = engine or ProductSearchEngine()
        self.request_id = request_id

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    async def search_products(
        self, criteria: ProductSearchCriteria
    ) -> ServiceResult[ProductSearchResult]:
        """Search live products.

        Args:
            criteria: Filters, sort and pagination.

        Returns:
            ServiceResult with one page of results and the aggregates.
        """
        candidates = await self.repository.fetch_candidate_products()
        try:
            result = self.engine.search(candidates, criteria)
        except DomainError as e:
            logger.warning(
                "Product search rejected",
                error_code=e.error_code,
                error=e.message,
                request_id=self.request_id,
            )
            return ServiceResult.failure(e)

        logger.debug(
            "Product search completed",
            total_items=result.total_items,
            page=result.current_page,
            request_id=self.request_id,
        )
        return ServiceResult.ok(result)

    async def get_statistics(self) -> CatalogStatistics:
        """Compute statistics over active, non-deleted products.

        Returns:
            CatalogStatistics.
        """
        candidates = await self.repository.fetch_candidate_products()
        result = self.engine.search(
            candidates,
            ProductSearchCriteria(
                active=True,
                sort_by=SortKey.PRICE,
                sort_descending=True,
                page=1,
                page_size=TOP_EXPENSIVE_COUNT,
            ),
        )
        return CatalogStatistics(
            total_active_products=result.total_items,
            average_price=result.average_price,
            products_by_category=result.items_by_category,
            most_expensive=result.items,
        )

    # -------------------------------------------------------------------------
    # Products
    # -------------------------------------------------------------------------

    async def get_product(
        self, product_id: ProductId, include_deleted: bool = False
    ) -> ServiceResult[Product]:
        """Get a product by ID.

        Args:
            product_id: Product identifier.
            include_deleted: Whether a soft-deleted product is returned.

        Returns:
            ServiceResult with the product, or NOT_FOUND.
        """
        product = await self.repository.find_product_by_id(product_id, include_deleted)
        if product is None:
            return ServiceResult.failure(NotFoundError("Product", str(product_id)))
        return ServiceResult.ok(product)

    async def get_product_view(self, product_id: ProductId) -> ServiceResult[ProductView]:
        """Get the read-side view of a live product.

        Returns:
            ServiceResult with the view, or NOT_FOUND.
        """
        for candidate in await self.repository.fetch_candidate_products():
            if candidate.product.id == product_id:
                return ServiceResult.ok(ProductView.from_candidate(candidate))
        return ServiceResult.failure(NotFoundError("Product", str(product_id)))

    async def list_products(self, include_deleted: bool = False) -> list[Product]:
        """List products ordered by name."""
        return await self.repository.list_products(include_deleted)

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def get_category(
        self, category_id: CategoryId, include_deleted: bool = False
    ) -> ServiceResult[Category]:
        """Get a category by ID.

        Returns:
            ServiceResult with the category, or NOT_FOUND.
        """
        category = await self.repository.find_category_by_id(category_id, include_deleted)
        if category is None:
            return ServiceResult.failure(NotFoundError("Category", str(category_id)))
        return ServiceResult.ok(category)

    async def list_categories(self, include_deleted: bool = False) -> list[Category]:
        """List categories ordered by name."""
        return await self.repository.list_categories(include_deleted)

    # -------------------------------------------------------------------------
    # Tags
    # -------------------------------------------------------------------------

    async def get_tag(self, tag_id: TagId, include_deleted: bool = False) -> ServiceResult[Tag]:
        """Get a tag by ID.

        Returns:
            ServiceResult with the tag, or NOT_FOUND.
        """
        tag = await self.repository.find_tag_by_id(tag_id, include_deleted)
        if tag is None:
            return ServiceResult.failure(NotFoundError("Tag", str(tag_id)))
        return ServiceResult.ok(tag)

    async def list_tags(self, include_deleted: bool = False) -> list[Tag]:
        """List tags ordered by name."""
        return await self.repository.list_tags(include_deleted)

    async def list_tags_for_product(self, product_id: ProductId) -> ServiceResult[list[Tag]]:
        """List the non-deleted tags attached to a live product.

        Returns:
            ServiceResult with tags ordered by name, or NOT_FOUND.
        """
        product = await self.repository.find_product_by_id(product_id)
        if product is None:
            return ServiceResult.failure(NotFoundError("Product", str(product_id)))

        tags = []
        for tag_id in product.tag_ids:
            tag = await self.repository.find_tag_by_id(tag_id)
            if tag is not None and tag.product_id == product.id:
                tags.append(tag)
        return ServiceResult.ok(sorted(tags, key=lambda t: (t.name, str(t.id))))
