"""Tests for the SQLAlchemy catalog repository against in-memory SQLite."""

from collections.abc import AsyncGenerator
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from catalog_api.application.category_service import CategoryService
from catalog_api.application.product_service import ProductService
from catalog_api.application.tag_service import TagService
from catalog_api.catalog.search import ProductSearchCriteria, ProductSearchEngine
from catalog_api.catalog.sql_repository import SqlAlchemyCatalogRepository
from catalog_api.domain import Category, ConcurrencyConflictError, Product, Tag
from catalog_api.infrastructure.database import create_schema


@pytest_asyncio.fixture
async def sqlite_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with the catalog schema."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
    )
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(sqlite_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the SQLite engine."""
    return async_sessionmaker(sqlite_engine, expire_on_commit=False)


class TestSqlRepository:
    """Tests for row mapping and the unit of work."""

    @pytest.mark.asyncio
    async def test_round_trip_aggregates(self, session_factory) -> None:
        """Aggregates, link sets and lifecycle fields survive a round trip."""
        category = Category.create("Home")
        product = Product.create(
            name="Lamp",
            description="LED",
            price=Decimal("19.99"),
            category_id=category.id,
        )
        category.add_product(product)
        tag = Tag.create("sale")
        tag.assign_to_product(product.id)
        product.add_tag(tag)

        async with session_factory() as session:
            repo = SqlAlchemyCatalogRepository(session)
            for aggregate in (category, product, tag):
                repo.add(aggregate)
            await repo.commit()

        async with session_factory() as session:
            repo = SqlAlchemyCatalogRepository(session)
            loaded_category = await repo.find_category_by_id(category.id)
            loaded_product = await repo.find_product_by_id(product.id)
            loaded_tag = await repo.find_tag_by_id(tag.id)

        assert loaded_category.product_ids == {product.id}
        assert loaded_product.price == Decimal("19.99")
        assert loaded_product.category_id == category.id
        assert loaded_product.tag_ids == {tag.id}
        assert loaded_product.version == product.version
        assert loaded_tag.product_id == product.id
        assert loaded_category.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_deleted_rows_hidden_unless_requested(self, session_factory) -> None:
        """Soft-deleted rows need include_deleted."""
        category = Category.create("Archive")
        category.delete()

        async with session_factory() as session:
            repo = SqlAlchemyCatalogRepository(session)
            repo.add(category)
            await repo.commit()

        async with session_factory() as session:
            repo = SqlAlchemyCatalogRepository(session)
            assert await repo.find_category_by_id(category.id) is None
            found = await repo.find_category_by_id(category.id, include_deleted=True)
            assert found.is_deleted
            assert await repo.list_categories() == []

    @pytest.mark.asyncio
    async def test_find_category_by_name(self, session_factory) -> None:
        """Name lookup ignores case."""
        async with session_factory() as session:
            repo = SqlAlchemyCatalogRepository(session)
            repo.add(Category.create("Garden"))
            await repo.commit()

        async with session_factory() as session:
            repo = SqlAlchemyCatalogRepository(session)
            assert (await repo.find_category_by_name("garden")).name == "Garden"
            assert await repo.find_category_by_name("kitchen") is None

    @pytest.mark.asyncio
    async def test_stale_version_is_a_conflict(self, session_factory) -> None:
        """An update against a row another session changed is rejected."""
        category = Category.create("Home")
        async with session_factory() as session:
            repo = SqlAlchemyCatalogRepository(session)
            repo.add(category)
            await repo.commit()

        async with session_factory() as first_session:
            first = SqlAlchemyCatalogRepository(first_session)
            mine = await first.find_category_by_id(category.id)

            async with session_factory() as second_session:
                second = SqlAlchemyCatalogRepository(second_session)
                theirs = await second.find_category_by_id(category.id)
                theirs.rename("Garden")
                await second.commit()

            mine.rename("Kitchen")
            with pytest.raises(ConcurrencyConflictError):
                await first.commit()

        async with session_factory() as session:
            stored = await SqlAlchemyCatalogRepository(session).find_category_by_id(category.id)
        assert stored.name == "Garden"
        assert stored.version == 2


class TestServicesOnSql:
    """The command services behave the same on the SQL backend."""

    @pytest.mark.asyncio
    async def test_category_delete_guard(self, session_factory) -> None:
        """A live product blocks category deletion until it is deleted."""
        async with session_factory() as session:
            repo = SqlAlchemyCatalogRepository(session)
            category = (await CategoryService(repo).create_category("Books")).value
            product = (
                await ProductService(repo).create_product(
                    name="Novel",
                    description="Paperback",
                    price=Decimal("12.50"),
                    category_id=category.id,
                )
            ).value

        async with session_factory() as session:
            repo = SqlAlchemyCatalogRepository(session)
            blocked = await CategoryService(repo).delete_category(category.id)
            assert blocked.error_code == "HAS_ACTIVE_DEPENDENTS"

        async with session_factory() as session:
            repo = SqlAlchemyCatalogRepository(session)
            assert (await ProductService(repo).delete_product(product.id)).success

        async with session_factory() as session:
            repo = SqlAlchemyCatalogRepository(session)
            assert (await CategoryService(repo).delete_category(category.id)).success

    @pytest.mark.asyncio
    async def test_tag_move_and_search(self, session_factory) -> None:
        """Moving a tag updates both products and the candidate set."""
        async with session_factory() as session:
            repo = SqlAlchemyCatalogRepository(session)
            category = (await CategoryService(repo).create_category("Home")).value
            products = ProductService(repo)
            lamp = (
                await products.create_product("Lamp", "LED", Decimal("20.00"), category.id)
            ).value
            chair = (
                await products.create_product("Chair", "Oak", Decimal("80.00"), category.id)
            ).value
            tag = (await TagService(repo).create_tag("sale")).value
            await products.add_tag_to_product(lamp.id, tag.id)

        async with session_factory() as session:
            repo = SqlAlchemyCatalogRepository(session)
            moved = await TagService(repo).assign_tag_to_product(tag.id, chair.id)
            assert moved.success

        async with session_factory() as session:
            repo = SqlAlchemyCatalogRepository(session)
            assert (await repo.find_product_by_id(lamp.id)).tag_ids == set()
            assert (await repo.find_product_by_id(chair.id)).tag_ids == {tag.id}

            candidates = await repo.fetch_candidate_products()
            result = ProductSearchEngine().search(
                candidates, ProductSearchCriteria(tags=frozenset({"sale"}))
            )
            assert [item.name for item in result.items] == ["Chair"]
            assert result.items_by_category == {"Home": 1}

    @pytest.mark.asyncio
    async def test_deleted_tag_still_matches(self, session_factory) -> None:
        """Soft-deleted tags keep their names in the candidate set."""
        async with session_factory() as session:
            repo = SqlAlchemyCatalogRepository(session)
            category = (await CategoryService(repo).create_category("Home")).value
            products = ProductService(repo)
            tags = TagService(repo)
            lamp = (
                await products.create_product("Lamp", "LED", Decimal("20.00"), category.id)
            ).value
            tag = (await tags.create_tag("sale")).value
            await products.add_tag_to_product(lamp.id, tag.id)
            assert (await tags.delete_tag(tag.id)).success

        async with session_factory() as session:
            candidates = await SqlAlchemyCatalogRepository(session).fetch_candidate_products()

        assert [c.tag_names for c in candidates] == [frozenset({"sale"})]
