"""SQLAlchemy implementation of the catalog repository.

Maps catalog rows to domain aggregates and back. Aggregates loaded
through one repository are tracked by identity, so a command that looks
up the same product twice works on a single instance, and ``commit()``
writes the added and changed aggregates, including their association
rows, in one transaction guarded by each row's version column.
"""

from collections.abc import Sequence
from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID

import structlog
from sqlalchemy import and_, delete, func, insert, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from catalog_api.catalog.models import (
    CategoryModel,
    ProductModel,
    TagModel,
    category_products,
    product_tags,
)
from catalog_api.catalog.repository import Aggregate
from catalog_api.catalog.search import SearchCandidate
from catalog_api.domain.entities import Category, Product, Tag
from catalog_api.domain.exceptions import ConcurrencyConflictError
from catalog_api.domain.value_objects import CategoryId, ProductId, TagId

logger = structlog.get_logger()


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SqlAlchemyCatalogRepository:
    """Catalog repository backed by an async SQLAlchemy session.

    Example usage:
        async with async_session_factory() as session:
            repo = SqlAlchemyCatalogRepository(session)
            product = await repo.find_product_by_id(product_id)
            product.rename("New name")
            await repo.commit()
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session
        self._tracked: dict[tuple[type, object], Aggregate] = {}
        self._loaded_versions: dict[tuple[type, object], int] = {}

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    async def find_category_by_id(
        self, category_id: CategoryId, include_deleted: bool = False
    ) -> Category | None:
        """Find a category by ID.

        Args:
            category_id: Category identifier.
            include_deleted: Whether soft-deleted categories are returned.

        Returns:
            Category if found, None otherwise.
        """
        category = self._tracked.get((Category, category_id))
        if category is None:
            row = await self.session.get(CategoryModel, str(category_id))
            category = await self._category_from_row(row) if row else None
        return self._visible(category, include_deleted)

    async def find_category_by_name(self, name: str) -> Category | None:
        """Find a non-deleted category by name, ignoring case."""
        wanted = name.strip().lower()
        for tracked in self._tracked_of(Category):
            if not tracked.is_deleted and tracked.name.strip().lower() == wanted:
                return tracked

        query = select(CategoryModel).where(
            CategoryModel.deleted_at.is_(None),
            func.lower(func.trim(CategoryModel.name)) == wanted,
        )
        result = await self.session.execute(query)
        for row in result.scalars():
            category = self._tracked.get((Category, CategoryId.from_string(row.id)))
            if category is None:
                return await self._category_from_row(row)
            if not category.is_deleted and category.name.strip().lower() == wanted:
                return category
        return None

    async def find_product_by_id(
        self, product_id: ProductId, include_deleted: bool = False
    ) -> Product | None:
        """Find a product by ID.

        Args:
            product_id: Product identifier.
            include_deleted: Whether soft-deleted products are returned.

        Returns:
            Product if found, None otherwise.
        """
        product = self._tracked.get((Product, product_id))
        if product is None:
            row = await self.session.get(ProductModel, str(product_id))
            product = await self._product_from_row(row) if row else None
        return self._visible(product, include_deleted)

    async def find_tag_by_id(self, tag_id: TagId, include_deleted: bool = False) -> Tag | None:
        """Find a tag by ID.

        Args:
            tag_id: Tag identifier.
            include_deleted: Whether soft-deleted tags are returned.

        Returns:
            Tag if found, None otherwise.
        """
        tag = self._tracked.get((Tag, tag_id))
        if tag is None:
            row = await self.session.get(TagModel, str(tag_id))
            tag = self._tag_from_row(row) if row else None
        return self._visible(tag, include_deleted)

    async def find_products_by_category(self, category_id: CategoryId) -> list[Product]:
        """Find every product associated with a category, deleted included.

        Args:
            category_id: Category identifier.

        Returns:
            Products in the category's product set or pointing at it.
        """
        members = select(category_products.c.product_id).where(
            category_products.c.category_id == str(category_id)
        )
        query = select(ProductModel).where(
            or_(
                ProductModel.category_id == str(category_id),
                ProductModel.id.in_(members),
            )
        )
        result = await self.session.execute(query)
        products = [await self._product_from_row(row) for row in result.scalars()]

        seen = {p.id for p in products}
        for tracked in self._tracked_of(Product):
            if tracked.id not in seen and tracked.category_id == category_id:
                products.append(tracked)
        return products

    async def list_categories(self, include_deleted: bool = False) -> list[Category]:
        """List categories ordered by name."""
        rows = await self._rows(CategoryModel, include_deleted)
        return [await self._category_from_row(row) for row in rows]

    async def list_products(self, include_deleted: bool = False) -> list[Product]:
        """List products ordered by name."""
        rows = await self._rows(ProductModel, include_deleted)
        return [await self._product_from_row(row) for row in rows]

    async def list_tags(self, include_deleted: bool = False) -> list[Tag]:
        """List tags ordered by name."""
        rows = await self._rows(TagModel, include_deleted)
        return [self._tag_from_row(row) for row in rows]

    async def fetch_candidate_products(self) -> list[SearchCandidate]:
        """Build the search candidate set.

        Returns:
            One candidate per non-deleted product, with its category name
            and the names of the tags assigned to it, deleted tags included.
        """
        query = (
            select(ProductModel, CategoryModel.name)
            .join(CategoryModel, CategoryModel.id == ProductModel.category_id)
            .where(ProductModel.deleted_at.is_(None))
        )
        result = await self.session.execute(query)
        rows = result.all()

        tag_query = select(product_tags.c.product_id, TagModel.name).join(
            TagModel,
            and_(
                TagModel.id == product_tags.c.tag_id,
                TagModel.product_id == product_tags.c.product_id,
            ),
        )
        tag_names: dict[str, set[str]] = {}
        for product_id, tag_name in (await self.session.execute(tag_query)).all():
            tag_names.setdefault(product_id, set()).add(tag_name)

        candidates = []
        for row, category_name in rows:
            product = await self._product_from_row(row)
            candidates.append(
                SearchCandidate(
                    product=product,
                    category_name=category_name,
                    tag_names=frozenset(tag_names.get(row.id, ())),
                )
            )
        return candidates

    # -------------------------------------------------------------------------
    # Unit of Work
    # -------------------------------------------------------------------------

    def add(self, aggregate: Aggregate) -> None:
        """Track a new aggregate for the next commit."""
        self._tracked[(type(aggregate), aggregate.id)] = aggregate

    async def commit(self) -> None:
        """Write added and changed aggregates and commit the transaction.

        Updates are guarded by the row's version, so a row another session
        committed since it was loaded is a conflict and nothing is written.

        Raises:
            ConcurrencyConflictError: If a changed row's stored version moved.
        """
        changed = [
            aggregate
            for key, aggregate in self._tracked.items()
            if aggregate.version != self._loaded_versions.get(key)
        ]
        try:
            # Parents first so foreign keys resolve on insert
            for kind in (Category, Product, Tag):
                for aggregate in changed:
                    if isinstance(aggregate, kind):
                        await self._write(aggregate)
            await self.session.flush()
            for aggregate in changed:
                await self._write_links(aggregate)
            await self.session.commit()
        except StaleDataError as e:
            await self.rollback()
            logger.warning("Catalog commit rejected", reason="stale version", error=str(e))
            raise ConcurrencyConflictError("Catalog aggregate") from e

        logger.debug("Catalog changes committed", aggregates=len(changed))
        self._clear()

    async def rollback(self) -> None:
        """Discard every tracked change."""
        self._clear()
        await self.session.rollback()

    def _clear(self) -> None:
        self._tracked.clear()
        self._loaded_versions.clear()

    # -------------------------------------------------------------------------
    # Row Mapping
    # -------------------------------------------------------------------------

    async def _category_from_row(self, row: CategoryModel) -> Category:
        key = (Category, CategoryId.from_string(row.id))
        if key in self._tracked:
            return self._tracked[key]

        member_rows = await self.session.execute(
            select(category_products.c.product_id).where(
                category_products.c.category_id == row.id
            )
        )
        category = Category(
            id=key[1],
            name=row.name,
            product_ids={ProductId(value=UUID(pid)) for pid in member_rows.scalars()},
            version=row.version,
            created_at=_as_utc(row.created_at),
            updated_at=_as_utc(row.updated_at),
            deleted_at=_as_utc(row.deleted_at),
        )
        self._tracked[key] = category
        self._loaded_versions[key] = category.version
        return category

    async def _product_from_row(self, row: ProductModel) -> Product:
        key = (Product, ProductId.from_string(row.id))
        if key in self._tracked:
            return self._tracked[key]

        tag_rows = await self.session.execute(
            select(product_tags.c.tag_id).where(product_tags.c.product_id == row.id)
        )
        product = Product(
            id=key[1],
            name=row.name,
            description=row.description,
            price=Decimal(row.price),
            active=row.active,
            category_id=CategoryId.from_string(row.category_id),
            tag_ids={TagId(value=UUID(tid)) for tid in tag_rows.scalars()},
            version=row.version,
            created_at=_as_utc(row.created_at),
            updated_at=_as_utc(row.updated_at),
            deleted_at=_as_utc(row.deleted_at),
        )
        self._tracked[key] = product
        self._loaded_versions[key] = product.version
        return product

    def _tag_from_row(self, row: TagModel) -> Tag:
        key = (Tag, TagId.from_string(row.id))
        if key in self._tracked:
            return self._tracked[key]

        tag = Tag(
            id=key[1],
            name=row.name,
            product_id=ProductId.from_string(row.product_id) if row.product_id else None,
            version=row.version,
            created_at=_as_utc(row.created_at),
            updated_at=_as_utc(row.updated_at),
            deleted_at=_as_utc(row.deleted_at),
        )
        self._tracked[key] = tag
        self._loaded_versions[key] = tag.version
        return tag

    async def _write(self, aggregate: Aggregate) -> None:
        if isinstance(aggregate, Category):
            row = await self._upsert(CategoryModel, aggregate)
            row.name = aggregate.name
        elif isinstance(aggregate, Product):
            row = await self._upsert(ProductModel, aggregate)
            row.name = aggregate.name
            row.description = aggregate.description
            row.price = aggregate.price
            row.active = aggregate.active
            row.category_id = str(aggregate.category_id)
        else:
            row = await self._upsert(TagModel, aggregate)
            row.name = aggregate.name
            row.product_id = str(aggregate.product_id) if aggregate.product_id else None

    async def _write_links(self, aggregate: Aggregate) -> None:
        owner_id = str(aggregate.id)
        if isinstance(aggregate, Category):
            await self._replace_links(
                category_products,
                category_products.c.category_id,
                owner_id,
                [{"category_id": owner_id, "product_id": str(p)} for p in aggregate.product_ids],
            )
        elif isinstance(aggregate, Product):
            await self._replace_links(
                product_tags,
                product_tags.c.product_id,
                owner_id,
                [{"product_id": owner_id, "tag_id": str(t)} for t in aggregate.tag_ids],
            )

    async def _upsert(self, model: type, aggregate: Aggregate):
        row = await self.session.get(model, str(aggregate.id))
        if row is None:
            row = model(id=str(aggregate.id))
            self.session.add(row)
        row.version = aggregate.version
        row.created_at = aggregate.created_at
        row.updated_at = aggregate.updated_at
        row.deleted_at = aggregate.deleted_at
        return row

    async def _replace_links(self, table, owner_column, owner_id: str, rows: list[dict]) -> None:
        await self.session.execute(delete(table).where(owner_column == owner_id))
        if rows:
            await self.session.execute(insert(table), rows)

    async def _rows(self, model: type, include_deleted: bool) -> Sequence:
        query = select(model).order_by(model.name, model.id)
        if not include_deleted:
            query = query.where(model.deleted_at.is_(None))
        result = await self.session.execute(query)
        return result.scalars().all()

    def _tracked_of(self, kind: type) -> list:
        return [a for (k, _), a in self._tracked.items() if k is kind]

    @staticmethod
    def _visible(aggregate: Aggregate | None, include_deleted: bool) -> Aggregate | None:
        if aggregate is None:
            return None
        if aggregate.is_deleted and not include_deleted:
            return None
        return aggregate
