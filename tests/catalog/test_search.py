"""Tests for the product search and aggregation engine."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from catalog_api.catalog.search import (
    ProductSearchCriteria,
    ProductSearchEngine,
    SearchCandidate,
    SortKey,
)
from catalog_api.domain import CategoryId, Product, ProductId
from catalog_api.domain.exceptions import InvalidArgumentError

BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)
ELECTRONICS = CategoryId.from_string("11111111-1111-1111-1111-111111111111")
BOOKS = CategoryId.from_string("22222222-2222-2222-2222-222222222222")


# ============================================================================
# Test Fixtures
# ============================================================================


def make_candidate(
    name: str,
    price: str,
    category_id: CategoryId = ELECTRONICS,
    category_name: str = "Electronics",
    description: str | None = None,
    active: bool = True,
    tags: tuple[str, ...] = (),
    age_days: int = 0,
    product_id: str | None = None,
) -> SearchCandidate:
    """Create a search candidate around a fresh product."""
    product = Product.create(
        name=name,
        description=description or f"{name} description",
        price=Decimal(price),
        category_id=category_id,
        active=active,
        product_id=ProductId.from_string(product_id) if product_id else None,
    )
    product.created_at = BASE_TIME - timedelta(days=age_days)
    return SearchCandidate(
        product=product,
        category_name=category_name,
        tag_names=frozenset(tags),
    )


@pytest.fixture
def engine() -> ProductSearchEngine:
    """Search engine under test."""
    return ProductSearchEngine()


@pytest.fixture
def catalog() -> list[SearchCandidate]:
    """A small mixed catalog."""
    return [
        make_candidate("Laptop", "1200.00", tags=("premium",), age_days=3),
        make_candidate("Mouse", "25.00", tags=("sale",), age_days=1),
        make_candidate("Keyboard", "75.00", active=False, age_days=2),
        make_candidate(
            "Python Cookbook",
            "40.00",
            category_id=BOOKS,
            category_name="Books",
            description="Recipes for laptop owners",
            tags=("sale", "bestseller"),
            age_days=0,
        ),
    ]


def names(result) -> list[str]:
    """Names of the products on a result page."""
    return [item.name for item in result.items]


# ============================================================================
# Sort Key Tests
# ============================================================================


class TestSortKey:
    """Tests for SortKey.parse."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("name", SortKey.NAME),
            ("PRICE", SortKey.PRICE),
            (" Date ", SortKey.DATE),
            (None, SortKey.DEFAULT),
            ("", SortKey.DEFAULT),
            ("popularity", SortKey.DEFAULT),
        ],
    )
    def test_parse(self, raw: str | None, expected: SortKey) -> None:
        """Parsing is case-insensitive and falls back to DEFAULT."""
        assert SortKey.parse(raw) == expected


# ============================================================================
# Filter Tests
# ============================================================================


class TestFilters:
    """Tests for search filters."""

    def test_no_filters_returns_everything(self, engine, catalog) -> None:
        """An empty criteria matches every candidate."""
        result = engine.search(catalog, ProductSearchCriteria())
        assert result.total_items == 4

    def test_term_matches_name_or_description(self, engine, catalog) -> None:
        """The term is a case-insensitive substring of name or description."""
        result = engine.search(catalog, ProductSearchCriteria(term="LAPTOP"))
        assert names(result) == ["Laptop", "Python Cookbook"]

    def test_blank_term_is_ignored(self, engine, catalog) -> None:
        """A whitespace term imposes no constraint."""
        result = engine.search(catalog, ProductSearchCriteria(term="   "))
        assert result.total_items == 4

    def test_category_filter(self, engine, catalog) -> None:
        """Only products of the category match."""
        result = engine.search(catalog, ProductSearchCriteria(category_id=BOOKS))
        assert names(result) == ["Python Cookbook"]

    def test_price_bounds_are_inclusive(self, engine, catalog) -> None:
        """Products priced exactly at a bound match."""
        result = engine.search(
            catalog,
            ProductSearchCriteria(min_price=Decimal("25.00"), max_price=Decimal("75.00")),
        )
        assert names(result) == ["Keyboard", "Mouse", "Python Cookbook"]

    def test_active_filter(self, engine, catalog) -> None:
        """The active flag matches exactly."""
        result = engine.search(catalog, ProductSearchCriteria(active=False))
        assert names(result) == ["Keyboard"]

    def test_tags_match_any(self, engine, catalog) -> None:
        """A product matches when it carries any requested tag."""
        result = engine.search(
            catalog, ProductSearchCriteria(tags=frozenset({"premium", "bestseller"}))
        )
        assert names(result) == ["Laptop", "Python Cookbook"]

    def test_tag_names_match_exactly(self, engine, catalog) -> None:
        """Tag matching is exact, not case-insensitive."""
        result = engine.search(catalog, ProductSearchCriteria(tags=frozenset({"SALE"})))
        assert result.total_items == 0

    def test_filters_combine_with_and(self, engine, catalog) -> None:
        """All present filters must hold."""
        result = engine.search(
            catalog,
            ProductSearchCriteria(
                tags=frozenset({"sale"}),
                max_price=Decimal("30"),
                active=True,
            ),
        )
        assert names(result) == ["Mouse"]

    def test_deleted_products_never_match(self, engine, catalog) -> None:
        """Deleted products are excluded even if handed to the engine."""
        catalog[0].product.delete()
        result = engine.search(catalog, ProductSearchCriteria(term="laptop"))
        assert names(result) == ["Python Cookbook"]


# ============================================================================
# Sort Tests
# ============================================================================


class TestSorting:
    """Tests for result ordering."""

    def test_default_sort_is_name_ascending(self, engine, catalog) -> None:
        """Without a key, products are ordered by name."""
        result = engine.search(catalog, ProductSearchCriteria())
        assert names(result) == ["Keyboard", "Laptop", "Mouse", "Python Cookbook"]

    def test_default_sort_ignores_descending(self, engine, catalog) -> None:
        """The default order does not reverse."""
        result = engine.search(catalog, ProductSearchCriteria(sort_descending=True))
        assert names(result) == ["Keyboard", "Laptop", "Mouse", "Python Cookbook"]

    def test_sort_by_price(self, engine, catalog) -> None:
        """Price sorts ascending and descending."""
        ascending = engine.search(catalog, ProductSearchCriteria(sort_by=SortKey.PRICE))
        descending = engine.search(
            catalog, ProductSearchCriteria(sort_by=SortKey.PRICE, sort_descending=True)
        )

        assert names(ascending) == ["Mouse", "Python Cookbook", "Keyboard", "Laptop"]
        assert names(descending) == list(reversed(names(ascending)))

    def test_sort_by_name_descending(self, engine, catalog) -> None:
        """Name sorts descending on request."""
        result = engine.search(
            catalog, ProductSearchCriteria(sort_by=SortKey.NAME, sort_descending=True)
        )
        assert names(result) == ["Python Cookbook", "Mouse", "Laptop", "Keyboard"]

    def test_sort_by_date(self, engine, catalog) -> None:
        """Date sorts by creation time, oldest first."""
        result = engine.search(catalog, ProductSearchCriteria(sort_by=SortKey.DATE))
        assert names(result) == ["Laptop", "Keyboard", "Mouse", "Python Cookbook"]

    def test_ties_break_on_id_in_both_directions(self, engine) -> None:
        """Equal prices keep id order whether ascending or descending."""
        low_id = "00000000-0000-0000-0000-00000000000a"
        high_id = "00000000-0000-0000-0000-00000000000b"
        candidates = [
            make_candidate("B", "10.00", product_id=high_id),
            make_candidate("A", "10.00", product_id=low_id),
        ]

        for descending in (False, True):
            result = engine.search(
                candidates,
                ProductSearchCriteria(sort_by=SortKey.PRICE, sort_descending=descending),
            )
            assert [item.id for item in result.items] == [low_id, high_id]

    def test_search_is_deterministic(self, engine, catalog) -> None:
        """Repeated searches return identical results."""
        criteria = ProductSearchCriteria(sort_by=SortKey.PRICE, page_size=2)
        first = engine.search(catalog, criteria)
        second = engine.search(list(reversed(catalog)), criteria)

        assert first.items == second.items
        assert first.total_items == second.total_items
        assert first.average_price == second.average_price


# ============================================================================
# Aggregation and Pagination Tests
# ============================================================================


class TestAggregation:
    """Tests for aggregates and pagination."""

    def test_three_products_two_per_page(self, engine) -> None:
        """Prices 10, 20, 30 with page_size 2 give two pages averaging 20."""
        candidates = [
            make_candidate("A", "10"),
            make_candidate("B", "20"),
            make_candidate("C", "30"),
        ]

        result = engine.search(candidates, ProductSearchCriteria(page=1, page_size=2))

        assert len(result.items) == 2
        assert result.total_items == 3
        assert result.total_pages == 2
        assert result.average_price == Decimal("20")
        assert result.has_next
        assert not result.has_prev

    def test_average_covers_filtered_set_not_page(self, engine, catalog) -> None:
        """Aggregates describe every match, not just the returned page."""
        result = engine.search(catalog, ProductSearchCriteria(page=2, page_size=1))

        assert len(result.items) == 1
        expected = (Decimal("1200") + Decimal("25") + Decimal("75") + Decimal("40")) / 4
        assert result.average_price == expected
        assert result.items_by_category == {"Electronics": 3, "Books": 1}

    def test_empty_result(self, engine, catalog) -> None:
        """No matches yield zero pages and a zero average."""
        result = engine.search(catalog, ProductSearchCriteria(term="nothing-matches"))

        assert result.items == []
        assert result.total_items == 0
        assert result.total_pages == 0
        assert result.average_price == Decimal("0")
        assert result.items_by_category == {}

    def test_page_beyond_last_is_empty(self, engine, catalog) -> None:
        """Out-of-range pages keep the totals of the filtered set."""
        result = engine.search(catalog, ProductSearchCriteria(page=5, page_size=2))

        assert result.items == []
        assert result.total_items == 4
        assert result.total_pages == 2
        assert result.current_page == 5

    def test_page_below_one_is_empty(self, engine, catalog) -> None:
        """Page 0 returns no items."""
        result = engine.search(catalog, ProductSearchCriteria(page=0, page_size=2))
        assert result.items == []
        assert result.total_items == 4

    def test_invalid_page_size_raises(self, engine, catalog) -> None:
        """page_size below 1 is rejected."""
        with pytest.raises(InvalidArgumentError):
            engine.search(catalog, ProductSearchCriteria(page_size=0))

    def test_view_lists_sorted_tag_names(self, engine, catalog) -> None:
        """The read-side view carries category name and sorted tags."""
        result = engine.search(catalog, ProductSearchCriteria(category_id=BOOKS))
        view = result.items[0]

        assert view.category_name == "Books"
        assert view.tags == ("bestseller", "sale")
        assert view.category_id == str(BOOKS)
