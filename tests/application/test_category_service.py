"""Tests for CategoryService."""

from decimal import Decimal

import pytest

from catalog_api.application.audit_service import AuditAction
from catalog_api.application.category_service import CategoryService
from catalog_api.application.product_service import ProductService
from catalog_api.catalog.repository import InMemoryCatalogRepository, get_catalog_store
from catalog_api.domain import CategoryId


# ============================================================================
# Test Fixtures
# ============================================================================


async def make_product(repository, category_id, name: str = "Lamp"):
    """Create a product through the service and return it."""
    result = await ProductService(repository).create_product(
        name=name,
        description=f"{name} description",
        price=Decimal("10.00"),
        category_id=category_id,
    )
    assert result.success, result.error
    return result.value


# ============================================================================
# Create / Rename Tests
# ============================================================================


class TestCreateCategory:
    """Tests for creating and renaming categories."""

    @pytest.mark.asyncio
    async def test_create_category(self, repository, audit_sink) -> None:
        """A created category is stored and audited."""
        service = CategoryService(repository, actor_id="alice")

        result = await service.create_category("Garden")

        assert result.success
        stored = await repository.find_category_by_id(result.value.id)
        assert stored.name == "Garden"
        assert audit_sink.actions() == [AuditAction.CATEGORY_CREATED]
        assert audit_sink.entries[0].actor_id == "alice"

    @pytest.mark.asyncio
    async def test_invalid_name_rejected(self, repository) -> None:
        """Blank names fail with INVALID_ARGUMENT."""
        result = await CategoryService(repository).create_category("   ")

        assert not result.success
        assert result.error_code == "INVALID_ARGUMENT"
        assert result.details["field"] == "name"
        assert await repository.list_categories() == []

    @pytest.mark.asyncio
    async def test_duplicate_name_conflicts_ignoring_case(self, repository) -> None:
        """A second live category with the same name conflicts."""
        service = CategoryService(repository)
        await service.create_category("Garden")

        result = await service.create_category("GARDEN")

        assert result.error_code == "NAME_CONFLICT"
        assert len(await repository.list_categories()) == 1

    @pytest.mark.asyncio
    async def test_deleted_category_frees_its_name(self, repository) -> None:
        """A deleted category's name can be reused."""
        service = CategoryService(repository)
        first = (await service.create_category("Garden")).value
        await service.delete_category(first.id)

        result = await service.create_category("Garden")

        assert result.success

    @pytest.mark.asyncio
    async def test_rename(self, repository) -> None:
        """Renaming keeps uniqueness and bumps the version."""
        service = CategoryService(repository)
        garden = (await service.create_category("Garden")).value
        await service.create_category("Kitchen")

        conflict = await service.rename_category(garden.id, "kitchen")
        renamed = await service.rename_category(garden.id, "Outdoor")

        assert conflict.error_code == "NAME_CONFLICT"
        assert renamed.success
        assert renamed.value.name == "Outdoor"
        assert renamed.value.version == 2

    @pytest.mark.asyncio
    async def test_rename_to_own_name_is_allowed(self, repository) -> None:
        """A category does not conflict with itself."""
        service = CategoryService(repository)
        garden = (await service.create_category("Garden")).value

        result = await service.rename_category(garden.id, "garden")

        assert result.success

    @pytest.mark.asyncio
    async def test_rename_deleted_category_fails(self, repository) -> None:
        """Deleted categories are immutable."""
        service = CategoryService(repository)
        garden = (await service.create_category("Garden")).value
        await service.delete_category(garden.id)

        result = await service.rename_category(garden.id, "Outdoor")

        assert result.error_code == "ENTITY_DELETED"

    @pytest.mark.asyncio
    async def test_rename_unknown_category(self, repository) -> None:
        """Unknown ids fail with NOT_FOUND."""
        result = await CategoryService(repository).rename_category(
            CategoryId.generate(), "Outdoor"
        )
        assert result.error_code == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_stale_copy_conflicts_then_retry_succeeds(self, repository) -> None:
        """A command on a copy another writer changed fails and can be retried."""
        garden = (await CategoryService(repository).create_category("Garden")).value
        await repository.find_category_by_id(garden.id)
        other = CategoryService(InMemoryCatalogRepository(get_catalog_store()))
        assert (await other.rename_category(garden.id, "Outdoor")).success

        conflict = await CategoryService(repository).rename_category(garden.id, "Yard")
        retried = await CategoryService(repository).rename_category(garden.id, "Yard")

        assert conflict.error_code == "CONCURRENCY_CONFLICT"
        assert retried.success
        assert retried.value.version == 3


# ============================================================================
# Membership Tests
# ============================================================================


class TestMembership:
    """Tests for attaching and detaching products."""

    @pytest.mark.asyncio
    async def test_create_product_joins_category(self, repository) -> None:
        """A new product is a member of its category."""
        category = (await CategoryService(repository).create_category("Home")).value
        product = await make_product(repository, category.id)

        stored = await repository.find_category_by_id(category.id)
        assert stored.product_ids == {product.id}

    @pytest.mark.asyncio
    async def test_add_product_moves_it_between_categories(self, repository) -> None:
        """Attaching re-points the product and leaves the old set."""
        service = CategoryService(repository)
        home = (await service.create_category("Home")).value
        garden = (await service.create_category("Garden")).value
        product = await make_product(repository, home.id)

        result = await service.add_product_to_category(garden.id, product.id)

        assert result.success
        assert (await repository.find_category_by_id(garden.id)).product_ids == {product.id}
        assert (await repository.find_category_by_id(home.id)).product_ids == set()
        assert (await repository.find_product_by_id(product.id)).category_id == garden.id

    @pytest.mark.asyncio
    async def test_add_existing_member_is_noop(self, repository) -> None:
        """Attaching a member again changes nothing."""
        service = CategoryService(repository)
        home = (await service.create_category("Home")).value
        product = await make_product(repository, home.id)
        version = (await repository.find_category_by_id(home.id)).version

        result = await service.add_product_to_category(home.id, product.id)

        assert result.success
        assert result.value.version == version

    @pytest.mark.asyncio
    async def test_remove_product_keeps_category_reference(self, repository) -> None:
        """Detaching leaves the product's category_id alone."""
        service = CategoryService(repository)
        home = (await service.create_category("Home")).value
        product = await make_product(repository, home.id)

        result = await service.remove_product_from_category(home.id, product.id)

        assert result.success
        assert result.value.product_ids == set()
        assert (await repository.find_product_by_id(product.id)).category_id == home.id

    @pytest.mark.asyncio
    async def test_add_deleted_product_fails(self, repository) -> None:
        """Deleted products cannot be attached."""
        service = CategoryService(repository)
        home = (await service.create_category("Home")).value
        garden = (await service.create_category("Garden")).value
        product = await make_product(repository, home.id)
        await ProductService(repository).delete_product(product.id)

        result = await service.add_product_to_category(garden.id, product.id)

        assert result.error_code == "NOT_FOUND"


# ============================================================================
# Delete / Restore Tests
# ============================================================================


class TestDeleteRestore:
    """Tests for the category lifecycle."""

    @pytest.mark.asyncio
    async def test_live_dependents_block_delete(self, repository, audit_sink) -> None:
        """A category with a live product cannot be deleted until it is gone."""
        categories = CategoryService(repository)
        products = ProductService(repository)
        category = (await categories.create_category("Books")).value
        product = await make_product(repository, category.id, "Novel")

        blocked = await categories.delete_category(category.id)

        assert blocked.error_code == "HAS_ACTIVE_DEPENDENTS"
        assert blocked.details["dependent_ids"] == [str(product.id)]
        assert not (await repository.find_category_by_id(category.id)).is_deleted

        assert (await products.delete_product(product.id)).success
        deleted = await categories.delete_category(category.id)

        assert deleted.success
        assert deleted.value.is_deleted
        assert await repository.find_category_by_id(category.id) is None
        assert AuditAction.CATEGORY_DELETED in audit_sink.actions()

    @pytest.mark.asyncio
    async def test_delete_twice_fails(self, repository) -> None:
        """Deleting a deleted category fails with ALREADY_DELETED."""
        service = CategoryService(repository)
        category = (await service.create_category("Books")).value
        await service.delete_category(category.id)

        result = await service.delete_category(category.id)

        assert result.error_code == "ALREADY_DELETED"

    @pytest.mark.asyncio
    async def test_restore(self, repository, audit_sink) -> None:
        """A restored category is visible again."""
        service = CategoryService(repository)
        category = (await service.create_category("Books")).value
        await service.delete_category(category.id)

        result = await service.restore_category(category.id)

        assert result.success
        assert not result.value.is_deleted
        assert await repository.find_category_by_id(category.id) is not None
        assert audit_sink.actions()[-1] == AuditAction.CATEGORY_RESTORED

    @pytest.mark.asyncio
    async def test_restore_live_category_fails(self, repository) -> None:
        """Restoring a live category fails with NOT_DELETED."""
        service = CategoryService(repository)
        category = (await service.create_category("Books")).value

        result = await service.restore_category(category.id)

        assert result.error_code == "NOT_DELETED"

    @pytest.mark.asyncio
    async def test_restore_conflicts_with_live_namesake(self, repository) -> None:
        """Restore fails when a live category took the name meanwhile."""
        service = CategoryService(repository)
        old = (await service.create_category("Books")).value
        await service.delete_category(old.id)
        await service.create_category("books")

        result = await service.restore_category(old.id)

        assert result.error_code == "NAME_CONFLICT"
        reloaded = await repository.find_category_by_id(old.id, include_deleted=True)
        assert reloaded.is_deleted
