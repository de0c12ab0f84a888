"""Catalog repository protocol and in-memory implementation.

The repository is the persistence boundary of the catalog. It performs
identifier lookups, enumerates the live candidate set for searches and
commits accumulated mutations. It never evaluates business rules.

Each repository instance is a unit of work: aggregates handed out are
private copies tracked in an identity map, and ``commit()`` writes the
added and changed ones back to the shared store in one step, checking
each changed aggregate's version against the store.
"""

import copy
from typing import Protocol

from catalog_api.catalog.search import SearchCandidate
from catalog_api.domain.entities import Category, Product, Tag
from catalog_api.domain.exceptions import ConcurrencyConflictError
from catalog_api.domain.value_objects import CategoryId, ProductId, TagId

Aggregate = Category | Product | Tag


# ============================================================================
# Repository Protocol
# ============================================================================


class CatalogRepository(Protocol):
    """Persistence operations used by the catalog services."""

    async def find_category_by_id(
        self, category_id: CategoryId, include_deleted: bool = False
    ) -> Category | None: ...

    async def find_category_by_name(self, name: str) -> Category | None: ...

    async def find_product_by_id(
        self, product_id: ProductId, include_deleted: bool = False
    ) -> Product | None: ...

    async def find_tag_by_id(
        self, tag_id: TagId, include_deleted: bool = False
    ) -> Tag | None: ...

    async def find_products_by_category(self, category_id: CategoryId) -> list[Product]: ...

    async def list_categories(self, include_deleted: bool = False) -> list[Category]: ...

    async def list_products(self, include_deleted: bool = False) -> list[Product]: ...

    async def list_tags(self, include_deleted: bool = False) -> list[Tag]: ...

    async def fetch_candidate_products(self) -> list[SearchCandidate]: ...

    def add(self, aggregate: Aggregate) -> None: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


# ============================================================================
# In-Memory Store
# ============================================================================


class InMemoryCatalogStore:
    """Committed catalog state shared by in-memory repositories.

    In production, this would be replaced with database persistence.
    """

    def __init__(self) -> None:
        self.categories: dict[CategoryId, Category] = {}
        self.products: dict[ProductId, Product] = {}
        self.tags: dict[TagId, Tag] = {}


# Global store instance
_catalog_store: InMemoryCatalogStore | None = None


def get_catalog_store() -> InMemoryCatalogStore:
    """Get catalog store singleton."""
    global _catalog_store
    if _catalog_store is None:
        _catalog_store = InMemoryCatalogStore()
    return _catalog_store


def reset_catalog_store() -> None:
    """Reset catalog store (for testing)."""
    global _catalog_store
    _catalog_store = InMemoryCatalogStore()


# ============================================================================
# In-Memory Repository
# ============================================================================


class InMemoryCatalogRepository:
    """Unit of work over an InMemoryCatalogStore.

    Example usage:
        repo = InMemoryCatalogRepository()
        category = Category.create("Books")
        repo.add(category)
        await repo.commit()
    """

    def __init__(self, store: InMemoryCatalogStore | None = None) -> None:
        """Initialize repository.

        Args:
            store: Backing store, defaults to the process-wide singleton.
        """
        self.store = store or get_catalog_store()
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
        return self._visible(self._load(Category, category_id), include_deleted)

    async def find_category_by_name(self, name: str) -> Category | None:
        """Find a non-deleted category by name, ignoring case."""
        wanted = name.strip().casefold()
        for category in self._all(Category):
            if not category.is_deleted and category.name.strip().casefold() == wanted:
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
        return self._visible(self._load(Product, product_id), include_deleted)

    async def find_tag_by_id(self, tag_id: TagId, include_deleted: bool = False) -> Tag | None:
        """Find a tag by ID.

        Args:
            tag_id: Tag identifier.
            include_deleted: Whether soft-deleted tags are returned.

        Returns:
            Tag if found, None otherwise.
        """
        return self._visible(self._load(Tag, tag_id), include_deleted)

    async def find_products_by_category(self, category_id: CategoryId) -> list[Product]:
        """Find every product associated with a category.

        Associated products are those in the category's product set plus
        those whose category_id points at it. Deleted products are included
        so the caller can evaluate them.

        Args:
            category_id: Category identifier.

        Returns:
            Associated products.
        """
        category = self._load(Category, category_id)
        member_ids = category.product_ids if category else set()
        return [
            product
            for product in self._all(Product)
            if product.id in member_ids or product.category_id == category_id
        ]

    async def list_categories(self, include_deleted: bool = False) -> list[Category]:
        """List categories ordered by name."""
        return self._listing(Category, include_deleted)

    async def list_products(self, include_deleted: bool = False) -> list[Product]:
        """List products ordered by name."""
        return self._listing(Product, include_deleted)

    async def list_tags(self, include_deleted: bool = False) -> list[Tag]:
        """List tags ordered by name."""
        return self._listing(Tag, include_deleted)

    async def fetch_candidate_products(self) -> list[SearchCandidate]:
        """Build the search candidate set.

        Returns:
            One candidate per non-deleted product, with its category name
            and the names of the tags assigned to it, deleted tags included.
        """
        candidates = []
        for product in self._all(Product):
            if product.is_deleted:
                continue
            category = self._load(Category, product.category_id)
            tag_names = frozenset(
                tag.name
                for tag in (self._load(Tag, tag_id) for tag_id in product.tag_ids)
                if tag is not None and tag.product_id == product.id
            )
            candidates.append(
                SearchCandidate(
                    product=product,
                    category_name=category.name if category else "",
                    tag_names=tag_names,
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
        """Write changed and added aggregates back to the store.

        Aggregates that were only read are not written. A changed aggregate
        whose stored version moved since it was loaded is a conflict, and
        nothing is written.

        Raises:
            ConcurrencyConflictError: If another unit of work committed a
                newer version of a changed aggregate.
        """
        changed = [
            (key, aggregate)
            for key, aggregate in self._tracked.items()
            if aggregate.version != self._loaded_versions.get(key)
        ]
        for (kind, aggregate_id), _ in changed:
            loaded_version = self._loaded_versions.get((kind, aggregate_id))
            stored = self._table(kind).get(aggregate_id)
            if loaded_version is not None and stored is not None and stored.version != loaded_version:
                raise ConcurrencyConflictError(kind.__name__, str(aggregate_id))

        for (kind, aggregate_id), aggregate in changed:
            stored = copy.deepcopy(aggregate)
            stored.collect_events()
            self._table(kind)[aggregate_id] = stored
        self._clear()

    async def rollback(self) -> None:
        """Discard every tracked change."""
        self._clear()

    # -------------------------------------------------------------------------
    # Internal Helpers
    # -------------------------------------------------------------------------

    def _clear(self) -> None:
        self._tracked.clear()
        self._loaded_versions.clear()

    def _load(self, kind: type, aggregate_id: object) -> Aggregate | None:
        key = (kind, aggregate_id)
        if key in self._tracked:
            return self._tracked[key]

        committed = self._table(kind).get(aggregate_id)
        if committed is None:
            return None

        loaded = copy.deepcopy(committed)
        self._tracked[key] = loaded
        self._loaded_versions[key] = loaded.version
        return loaded

    def _all(self, kind: type) -> list:
        ids = set(self._table(kind))
        ids.update(agg_id for (k, agg_id) in self._tracked if k is kind)
        return [agg for agg in (self._load(kind, i) for i in ids) if agg is not None]

    def _listing(self, kind: type, include_deleted: bool) -> list:
        items = [a for a in self._all(kind) if include_deleted or not a.is_deleted]
        return sorted(items, key=lambda a: (a.name, str(a.id)))

    def _table(self, kind: type) -> dict:
        if kind is Category:
            return self.store.categories
        if kind is Product:
            return self.store.products
        return self.store.tags

    @staticmethod
    def _visible(aggregate: Aggregate | None, include_deleted: bool) -> Aggregate | None:
        if aggregate is None:
            return None
        if aggregate.is_deleted and not include_deleted:
            return None
        return aggregate
