"""Category application service.

Orchestrates category commands:
- Creating and renaming categories with name uniqueness
- Attaching and detaching products
- Soft delete guarded by the category's live products, and restore
"""

from catalog_api.application.command_service import CatalogCommandService
from catalog_api.application.results import ServiceResult
from catalog_api.domain.entities import Category
from catalog_api.domain.exceptions import NameConflictError
from catalog_api.domain.value_objects import CategoryId, ProductId


class CategoryService(CatalogCommandService):
    """Application service for category commands.

    Example usage:
        service = CategoryService(repository)
        result = await service.create_category("Garden")
        if not result.success:
            print(result.error_code)
    """

    async def create_category(self, name: str) -> ServiceResult[Category]:
        """Create a category.

        Args:
            name: Category name, unique among non-deleted categories.

        Returns:
            ServiceResult with the new category.
        """

        async def mutation():
            category = Category.create(name)
            await self._ensure_unique_name(name, category.id)
            self.repository.add(category)
            return category, [category]

        return await self._execute("Category created", mutation, name=name)

    async def rename_category(self, category_id: CategoryId, name: str) -> ServiceResult[Category]:
        """Rename a category.

        Args:
            category_id: Category to rename.
            name: New name, unique among non-deleted categories.

        Returns:
            ServiceResult with the renamed category.
        """

        async def mutation():
            category = await self._category(category_id, include_deleted=True)
            category.ensure_mutable()
            await self._ensure_unique_name(name, category.id)
            category.rename(name)
            return category, [category]

        return await self._execute(
            "Category renamed", mutation, category_id=str(category_id), name=name
        )

    async def add_product_to_category(
        self, category_id: CategoryId, product_id: ProductId
    ) -> ServiceResult[Category]:
        """Attach a product to a category.

        The product is moved out of its previous category, and its category
        reference now points at this one. Attaching a member again is a no-op.

        Args:
            category_id: Target category.
            product_id: Live product to attach.

        Returns:
            ServiceResult with the category.
        """

        async def mutation():
            category = await self._category(category_id, include_deleted=True)
            category.ensure_mutable()
            product = await self._product(product_id)
            touched = await self._move_product(product, category)
            return category, touched

        return await self._execute(
            "Product added to category",
            mutation,
            category_id=str(category_id),
            product_id=str(product_id),
        )

    async def remove_product_from_category(
        self, category_id: CategoryId, product_id: ProductId
    ) -> ServiceResult[Category]:
        """Detach a product from a category's product set.

        The product keeps its category reference. Detaching a product that
        is not a member is a no-op.

        Args:
            category_id: Category to detach from.
            product_id: Live product to detach.

        Returns:
            ServiceResult with the category.
        """

        async def mutation():
            category = await self._category(category_id, include_deleted=True)
            category.ensure_mutable()
            product = await self._product(product_id)
            category.remove_product(product)
            return category, [category]

        return await self._execute(
            "Product removed from category",
            mutation,
            category_id=str(category_id),
            product_id=str(product_id),
        )

    async def delete_category(self, category_id: CategoryId) -> ServiceResult[Category]:
        """Soft-delete a category.

        Fails with HAS_ACTIVE_DEPENDENTS while any associated product is
        not deleted.

        Args:
            category_id: Category to delete.

        Returns:
            ServiceResult with the deleted category.
        """

        async def mutation():
            category = await self._category(category_id, include_deleted=True)
            dependents = await self.repository.find_products_by_category(category.id)
            category.delete(dependents)
            return category, [category]

        return await self._execute("Category deleted", mutation, category_id=str(category_id))

    async def restore_category(self, category_id: CategoryId) -> ServiceResult[Category]:
        """Restore a soft-deleted category.

        Args:
            category_id: Category to restore.

        Returns:
            ServiceResult with the restored category.
        """

        async def mutation():
            category = await self._category(category_id, include_deleted=True)
            if category.is_deleted:
                await self._ensure_unique_name(category.name, category.id)
            category.restore()
            return category, [category]

        return await self._execute("Category restored", mutation, category_id=str(category_id))

    async def _ensure_unique_name(self, name: str, category_id: CategoryId) -> None:
        existing = await self.repository.find_category_by_name(name)
        if existing is not None and existing.id != category_id:
            raise NameConflictError("Category", name)
