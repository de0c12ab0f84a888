"""Shared plumbing for catalog command services.

Every command follows the same shape: look up the target aggregate and
its related aggregates, let the aggregates evaluate their guards and
mutate, then commit once and forward audited events. Domain errors roll
the unit of work back and come back as failed ServiceResults.
"""

from collections.abc import Awaitable, Callable, Iterable
from typing import Any, TypeVar

import structlog

from catalog_api.application.audit_service import AuditService
from catalog_api.application.results import ServiceResult
from catalog_api.catalog.repository import CatalogRepository, InMemoryCatalogRepository
from catalog_api.domain.base import AggregateRoot
from catalog_api.domain.entities import Category, Product, Tag
from catalog_api.domain.exceptions import DomainError, NotFoundError
from catalog_api.domain.value_objects import CategoryId, ProductId, TagId
from catalog_api.infrastructure.config import settings

logger = structlog.get_logger()

T = TypeVar("T")

Mutation = Callable[[], Awaitable[tuple[T, Iterable[AggregateRoot]]]]


class CatalogCommandService:
    """Base class for the category, product and tag command services."""

    def __init__(
        self,
        repository: CatalogRepository | None = None,
        audit: AuditService | None = None,
        request_id: str | None = None,
        actor_id: str | None = None,
    ) -> None:
        """Initialize service.

        Args:
            repository: Catalog repository (unit of work).
            audit: Audit service for committed events.
            request_id: Request ID for correlation.
            actor_id: Caller identity recorded in audit entries.
        """
        self.repository = repository or InMemoryCatalogRepository()
        self.audit = audit or AuditService(
            enabled=settings.audit_enabled,
            request_id=request_id,
        )
        self.request_id = request_id
        self.actor_id = actor_id

    async def _execute(
        self,
        operation: str,
        mutation: Mutation[T],
        **context: Any,
    ) -> ServiceResult[T]:
        """Run a mutation as one unit of work.

        Args:
            operation: Log message used on success (e.g. "Category created").
            mutation: Coroutine function returning the result value and the
                aggregates it touched.
            **context: Extra fields for the log entries.

        Returns:
            ServiceResult with the mutation's value or the domain error.
        """
        try:
            value, touched = await mutation()
            events = [event for aggregate in touched for event in aggregate.collect_events()]
            await self.repository.commit()
        except DomainError as e:
            await self.repository.rollback()
            logger.warning(
                "Catalog command rejected",
                command=operation,
                error_code=e.error_code,
                error=e.message,
                request_id=self.request_id,
                **context,
            )
            return ServiceResult.failure(e)

        logger.info(
            operation,
            events=[event.event_type for event in events],
            request_id=self.request_id,
            **context,
        )
        await self.audit.publish(events, self.actor_id)
        return ServiceResult.ok(value)

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    async def _category(self, category_id: CategoryId, include_deleted: bool = False) -> Category:
        category = await self.repository.find_category_by_id(category_id, include_deleted)
        if category is None:
            raise NotFoundError("Category", str(category_id))
        return category

    async def _product(self, product_id: ProductId, include_deleted: bool = False) -> Product:
        product = await self.repository.find_product_by_id(product_id, include_deleted)
        if product is None:
            raise NotFoundError("Product", str(product_id))
        return product

    async def _tag(self, tag_id: TagId, include_deleted: bool = False) -> Tag:
        tag = await self.repository.find_tag_by_id(tag_id, include_deleted)
        if tag is None:
            raise NotFoundError("Tag", str(tag_id))
        return tag

    # -------------------------------------------------------------------------
    # Relationship Helpers
    # -------------------------------------------------------------------------

    async def _attach_tag(self, product: Product, tag: Tag) -> list[AggregateRoot]:
        """Attach a tag to a product, keeping both sides in step.

        A tag assigned to another live product is moved: it leaves the
        previous product's tag set before joining the new one. A deleted
        previous product is left as it is; its stale link no longer counts
        because the tag points elsewhere, and restoring the product drops it.

        Returns:
            Every aggregate touched.
        """
        product.ensure_mutable()
        touched: list[AggregateRoot] = [product, tag]

        previous_id = tag.assign_to_product(product.id)
        if previous_id is not None:
            previous = await self.repository.find_product_by_id(previous_id)
            if previous is not None:
                previous.remove_tag(tag)
                touched.append(previous)

        product.add_tag(tag)
        return touched

    async def _move_product(self, product: Product, target: Category) -> list[AggregateRoot]:
        """Move a product into a category's product set.

        The product's category reference follows, and the product leaves the
        product set of its previous live category.

        Returns:
            Every aggregate touched.
        """
        target.ensure_mutable()
        touched: list[AggregateRoot] = [product, target]

        if product.category_id != target.id:
            previous = await self.repository.find_category_by_id(product.category_id)
            product.change_category(target.id)
            if previous is not None:
                previous.remove_product(product)
                touched.append(previous)

        target.add_product(product)
        return touched
