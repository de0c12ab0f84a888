"""Product application service.

Orchestrates product commands:
- Creating products inside an existing category
- Attribute updates (name, description, price, active flag)
- Re-categorizing, with the category product sets kept in step
- Tag attach/detach/clear, with the tag side kept in step
- Soft delete and restore
"""

from decimal import Decimal

from catalog_api.application.command_service import CatalogCommandService
from catalog_api.application.results import ServiceResult
from catalog_api.domain.entities import Product
from catalog_api.domain.value_objects import CategoryId, ProductId, TagId

PriceInput = Decimal | int | float | str


class ProductService(CatalogCommandService):
    """Application service for product commands.

    Example usage:
        service = ProductService(repository)
        result = await service.create_product(
            name="Desk lamp",
            description="LED, warm white",
            price=Decimal("39.90"),
            category_id=lighting.id,
        )
    """

    async def create_product(
        self,
        name: str,
        description: str,
        price: PriceInput,
        category_id: CategoryId | None,
        active: bool = True,
    ) -> ServiceResult[Product]:
        """Create a product and attach it to its category.

        Args:
            name: Product name.
            description: Product description.
            price: Non-negative price.
            category_id: Existing, non-deleted category.
            active: Initial active flag.

        Returns:
            ServiceResult with the new product.
        """

        async def mutation():
            product = Product.create(
                name=name,
                description=description,
                price=price,
                category_id=category_id,
                active=active,
            )
            category = await self._category(category_id)
            category.add_product(product)
            self.repository.add(product)
            return product, [product, category]

        return await self._execute(
            "Product created", mutation, name=name, category_id=str(category_id)
        )

    # -------------------------------------------------------------------------
    # Attribute Updates
    # -------------------------------------------------------------------------

    async def rename_product(self, product_id: ProductId, name: str) -> ServiceResult[Product]:
        """Rename a product."""

        async def mutation():
            product = await self._product(product_id, include_deleted=True)
            product.rename(name)
            return product, [product]

        return await self._execute("Product renamed", mutation, product_id=str(product_id))

    async def redescribe_product(
        self, product_id: ProductId, description: str
    ) -> ServiceResult[Product]:
        """Replace a product's description."""

        async def mutation():
            product = await self._product(product_id, include_deleted=True)
            product.redescribe(description)
            return product, [product]

        return await self._execute("Product redescribed", mutation, product_id=str(product_id))

    async def reprice_product(self, product_id: ProductId, price: PriceInput) -> ServiceResult[Product]:
        """Change a product's price."""

        async def mutation():
            product = await self._product(product_id, include_deleted=True)
            product.reprice(price)
            return product, [product]

        return await self._execute(
            "Product repriced", mutation, product_id=str(product_id), price=str(price)
        )

    async def update_product(
        self,
        product_id: ProductId,
        name: str,
        description: str,
        price: PriceInput,
        active: bool,
    ) -> ServiceResult[Product]:
        """Replace every editable attribute of a product.

        Args:
            product_id: Product to update.
            name: New name.
            description: New description.
            price: New price.
            active: New active flag.

        Returns:
            ServiceResult with the updated product.
        """

        async def mutation():
            product = await self._product(product_id, include_deleted=True)
            product.update(name=name, description=description, price=price, active=active)
            return product, [product]

        return await self._execute("Product updated", mutation, product_id=str(product_id))

    async def activate_product(self, product_id: ProductId) -> ServiceResult[Product]:
        """Mark a product as active."""

        async def mutation():
            product = await self._product(product_id, include_deleted=True)
            product.activate()
            return product, [product]

        return await self._execute("Product activated", mutation, product_id=str(product_id))

    async def deactivate_product(self, product_id: ProductId) -> ServiceResult[Product]:
        """Mark a product as inactive."""

        async def mutation():
            product = await self._product(product_id, include_deleted=True)
            product.deactivate()
            return product, [product]

        return await self._execute("Product deactivated", mutation, product_id=str(product_id))

    async def change_product_category(
        self, product_id: ProductId, category_id: CategoryId | None
    ) -> ServiceResult[Product]:
        """Move a product to another category.

        The target category must exist and not be deleted. A nil identifier
        is rejected as an invalid argument before any lookup.

        Args:
            product_id: Product to move.
            category_id: Target category.

        Returns:
            ServiceResult with the moved product.
        """

        async def mutation():
            product = await self._product(product_id, include_deleted=True)
            product.ensure_mutable()
            if category_id is None or category_id.is_nil():
                # Let the aggregate reject the identifier
                product.change_category(category_id)
            target = await self._category(category_id)
            touched = await self._move_product(product, target)
            return product, touched

        return await self._execute(
            "Product category changed",
            mutation,
            product_id=str(product_id),
            category_id=str(category_id),
        )

    # -------------------------------------------------------------------------
    # Tags
    # -------------------------------------------------------------------------

    async def add_tag_to_product(self, product_id: ProductId, tag_id: TagId) -> ServiceResult[Product]:
        """Attach a live tag to a product.

        The tag is assigned to this product, moving it off any other product.
        Attaching a tag that is already attached is a no-op.

        Args:
            product_id: Product to tag.
            tag_id: Tag to attach.

        Returns:
            ServiceResult with the product.
        """

        async def mutation():
            product = await self._product(product_id, include_deleted=True)
            product.ensure_mutable()
            tag = await self._tag(tag_id)
            touched = await self._attach_tag(product, tag)
            return product, touched

        return await self._execute(
            "Tag added to product", mutation, product_id=str(product_id), tag_id=str(tag_id)
        )

    async def remove_tag_from_product(
        self, product_id: ProductId, tag_id: TagId
    ) -> ServiceResult[Product]:
        """Detach a tag from a product.

        Detaching a tag that is not attached is a no-op. A deleted tag can
        still be detached; it simply stays assigned on its own side.

        Args:
            product_id: Product to untag.
            tag_id: Tag to detach.

        Returns:
            ServiceResult with the product.
        """

        async def mutation():
            product = await self._product(product_id, include_deleted=True)
            product.ensure_mutable()
            tag = await self._tag(tag_id, include_deleted=True)
            product.remove_tag(tag)
            if tag.product_id == product.id and not tag.is_deleted:
                tag.unassign()
            return product, [product, tag]

        return await self._execute(
            "Tag removed from product", mutation, product_id=str(product_id), tag_id=str(tag_id)
        )

    async def clear_product_tags(self, product_id: ProductId) -> ServiceResult[Product]:
        """Detach every tag from a product."""

        async def mutation():
            product = await self._product(product_id, include_deleted=True)
            touched = [product]
            for removed_id in product.clear_tags():
                tag = await self.repository.find_tag_by_id(removed_id, include_deleted=True)
                if tag is not None and tag.product_id == product.id and not tag.is_deleted:
                    tag.unassign()
                    touched.append(tag)
            return product, touched

        return await self._execute("Product tags cleared", mutation, product_id=str(product_id))

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def delete_product(self, product_id: ProductId) -> ServiceResult[Product]:
        """Soft-delete a product."""

        async def mutation():
            product = await self._product(product_id, include_deleted=True)
            product.delete()
            return product, [product]

        return await self._execute("Product deleted", mutation, product_id=str(product_id))

    async def restore_product(self, product_id: ProductId) -> ServiceResult[Product]:
        """Restore a soft-deleted product.

        Tags that were moved to another product while this one was deleted
        are dropped from its tag set.
        """

        async def mutation():
            product = await self._product(product_id, include_deleted=True)
            product.restore()
            for tag_id in sorted(product.tag_ids, key=str):
                tag = await self._tag(tag_id, include_deleted=True)
                if tag.product_id != product.id:
                    product.remove_tag(tag)
            return product, [product]

        return await self._execute("Product restored", mutation, product_id=str(product_id))
