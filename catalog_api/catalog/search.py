"""Product search and aggregation engine.

Pure, synchronous computation over an already-materialized candidate set:
filter, sort, aggregate, then paginate. Aggregates (average price and
counts per category) describe the whole filtered set, never just the
returned page.

Example usage:
    engine = ProductSearchEngine()
    result = engine.search(
        candidates,
        ProductSearchCriteria(term="laptop", sort_by=SortKey.PRICE, page_size=20),
    )
    print(result.total_items, result.average_price)
"""

import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from catalog_api.domain.entities import Product
from catalog_api.domain.exceptions import InvalidArgumentError
from catalog_api.domain.value_objects import CategoryId


# ============================================================================
# Search Criteria
# ============================================================================


class SortKey(str, Enum):
    """Closed set of sort keys accepted by the engine."""

    NAME = "name"
    PRICE = "price"
    DATE = "date"
    DEFAULT = "default"

    @classmethod
    def parse(cls, value: str | None) -> "SortKey":
        """Resolve a user-supplied sort key.

        Matching is case-insensitive. Missing or unknown values resolve
        to DEFAULT instead of failing.

        Args:
            value: Raw sort key, e.g. from a query string.

        Returns:
            Matching SortKey.
        """
        if not value or not value.strip():
            return cls.DEFAULT
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.DEFAULT


@dataclass(frozen=True)
class ProductSearchCriteria:
    """Filter, sort and pagination parameters for a product search.

    Attributes:
        term: Case-insensitive substring of name or description.
        category_id: Exact category match.
        min_price: Inclusive lower price bound.
        max_price: Inclusive upper price bound.
        active: Exact match on the active flag.
        tags: Tag names; a product matches when it carries any of them.
        sort_by: Primary sort key.
        sort_descending: Reverse the primary comparison.
        page: 1-based page number.
        page_size: Items per page.
    """

    term: str | None = None
    category_id: CategoryId | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    active: bool | None = None
    tags: frozenset[str] = field(default_factory=frozenset)
    sort_by: SortKey = SortKey.DEFAULT
    sort_descending: bool = False
    page: int = 1
    page_size: int = 10

    @property
    def offset(self) -> int:
        """Index of the first item on the requested page."""
        return (self.page - 1) * self.page_size

    @property
    def normalized_term(self) -> str | None:
        """Lower-cased term, or None when the term is blank."""
        if self.term is None or not self.term.strip():
            return None
        return self.term.lower()


# ============================================================================
# Read-side Shapes
# ============================================================================


@dataclass(frozen=True)
class SearchCandidate:
    """A live product together with the names it is searched and grouped by.

    Attributes:
        product: The product aggregate.
        category_name: Name of the product's category.
        tag_names: Names of the tags linked to the product, deleted ones included.
    """

    product: Product
    category_name: str
    tag_names: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class ProductView:
    """Read-side projection of a product."""

    id: str
    name: str
    description: str
    price: Decimal
    active: bool
    category_id: str
    category_name: str
    tags: tuple[str, ...]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_candidate(cls, candidate: SearchCandidate) -> "ProductView":
        """Project a search candidate.

        Args:
            candidate: Candidate to project.

        Returns:
            ProductView with tag names sorted.
        """
        product = candidate.product
        return cls(
            id=str(product.id),
            name=product.name,
            description=product.description,
            price=product.price,
            active=product.active,
            category_id=str(product.category_id),
            category_name=candidate.category_name,
            tags=tuple(sorted(candidate.tag_names)),
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


@dataclass(frozen=True)
class ProductSearchResult:
    """One page of search results plus aggregates over the filtered set.

    Attributes:
        items: Products on the requested page.
        total_items: Size of the filtered set.
        total_pages: Number of pages, 0 when nothing matched.
        current_page: Requested page.
        page_size: Requested page size.
        average_price: Mean price over the filtered set, 0 when empty.
        items_by_category: Category name to product count over the filtered set.
    """

    items: list[ProductView]
    total_items: int
    total_pages: int
    current_page: int
    page_size: int
    average_price: Decimal
    items_by_category: dict[str, int]

    @property
    def has_next(self) -> bool:
        """Check if there's a next page."""
        return self.current_page < self.total_pages

    @property
    def has_prev(self) -> bool:
        """Check if there's a previous page."""
        return self.current_page > 1


# ============================================================================
# Engine
# ============================================================================


_SORT_KEYS: dict[SortKey, Callable[[SearchCandidate], Any]] = {
    SortKey.NAME: lambda c: c.product.name,
    SortKey.PRICE: lambda c: c.product.price,
    SortKey.DATE: lambda c: c.product.created_at,
    SortKey.DEFAULT: lambda c: c.product.name,
}


class ProductSearchEngine:
    """Filters, sorts, aggregates and paginates product candidates.

    Ties on the primary sort key are broken by product id (string form)
    ascending, in both sort directions. The DEFAULT key sorts by name
    ascending and ignores ``sort_descending``.

    The engine holds no state, so a single instance may be shared.
    """

    def search(
        self,
        candidates: Iterable[SearchCandidate],
        criteria: ProductSearchCriteria,
    ) -> ProductSearchResult:
        """Run a search.

        Args:
            candidates: Live products to search.
            criteria: Filters, sort and page to apply.

        Returns:
            ProductSearchResult for the requested page.

        Raises:
            InvalidArgumentError: If page_size is less than 1.
        """
        if criteria.page_size < 1:
            raise InvalidArgumentError(
                "page_size", "must be at least 1", criteria.page_size
            )

        matched = [c for c in candidates if self._matches(c, criteria)]
        ordered = self._sort(matched, criteria)

        total_items = len(ordered)
        total_pages = math.ceil(total_items / criteria.page_size)

        if criteria.page < 1:
            page_items: list[SearchCandidate] = []
        else:
            page_items = ordered[criteria.offset : criteria.offset + criteria.page_size]

        return ProductSearchResult(
            items=[ProductView.from_candidate(c) for c in page_items],
            total_items=total_items,
            total_pages=total_pages,
            current_page=criteria.page,
            page_size=criteria.page_size,
            average_price=self._average_price(ordered),
            items_by_category=self._count_by_category(ordered),
        )

    def _matches(self, candidate: SearchCandidate, criteria: ProductSearchCriteria) -> bool:
        product = candidate.product
        if product.is_deleted:
            return False

        term = criteria.normalized_term
        if term is not None and not (
            term in product.name.lower() or term in product.description.lower()
        ):
            return False

        if criteria.category_id is not None and product.category_id != criteria.category_id:
            return False

        if criteria.min_price is not None and product.price < criteria.min_price:
            return False

        if criteria.max_price is not None and product.price > criteria.max_price:
            return False

        if criteria.active is not None and product.active != criteria.active:
            return False

        if criteria.tags and candidate.tag_names.isdisjoint(criteria.tags):
            return False

        return True

    def _sort(
        self,
        candidates: list[SearchCandidate],
        criteria: ProductSearchCriteria,
    ) -> list[SearchCandidate]:
        descending = criteria.sort_descending and criteria.sort_by != SortKey.DEFAULT

        # Secondary key first; the stable primary sort keeps it for ties.
        ordered = sorted(candidates, key=lambda c: str(c.product.id))
        ordered.sort(key=_SORT_KEYS[criteria.sort_by], reverse=descending)
        return ordered

    def _average_price(self, candidates: list[SearchCandidate]) -> Decimal:
        if not candidates:
            return Decimal("0")
        total = sum((c.product.price for c in candidates), Decimal("0"))
        return total / len(candidates)

    def _count_by_category(self, candidates: list[SearchCandidate]) -> dict[str, int]:
        counts: dict[str, int] = {}
        for candidate in candidates:
            counts[candidate.category_name] = counts.get(candidate.category_name, 0) + 1
        return counts
