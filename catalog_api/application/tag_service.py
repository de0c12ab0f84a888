"""Tag application service.

Orchestrates tag commands: create, rename, assignment to a product,
soft delete and restore.
"""

from catalog_api.application.command_service import CatalogCommandService
from catalog_api.application.results import ServiceResult
from catalog_api.domain.entities import Tag
from catalog_api.domain.value_objects import ProductId, TagId


class TagService(CatalogCommandService):
    """Application service for tag commands."""

    async def create_tag(self, name: str) -> ServiceResult[Tag]:
        """Create an unassigned tag.

        Args:
            name: Tag name.

        Returns:
            ServiceResult with the new tag.
        """

        async def mutation():
            tag = Tag.create(name)
            self.repository.add(tag)
            return tag, [tag]

        return await self._execute("Tag created", mutation, name=name)

    async def rename_tag(self, tag_id: TagId, name: str) -> ServiceResult[Tag]:
        """Rename a tag."""

        async def mutation():
            tag = await self._tag(tag_id, include_deleted=True)
            tag.rename(name)
            return tag, [tag]

        return await self._execute("Tag renamed", mutation, tag_id=str(tag_id))

    async def assign_tag_to_product(
        self, tag_id: TagId, product_id: ProductId | None
    ) -> ServiceResult[Tag]:
        """Assign a tag to a live product.

        Same symmetric update as attaching the tag from the product side.

        Args:
            tag_id: Tag to assign.
            product_id: Target product.

        Returns:
            ServiceResult with the tag.
        """

        async def mutation():
            tag = await self._tag(tag_id, include_deleted=True)
            tag.ensure_mutable()
            if product_id is None or product_id.is_nil():
                # Let the aggregate reject the identifier
                tag.assign_to_product(product_id)
            product = await self._product(product_id)
            touched = await self._attach_tag(product, tag)
            return tag, touched

        return await self._execute(
            "Tag assigned to product", mutation, tag_id=str(tag_id), product_id=str(product_id)
        )

    async def delete_tag(self, tag_id: TagId) -> ServiceResult[Tag]:
        """Soft-delete a tag.

        The tag stays in its product's tag set and still matches tag
        filters in searches.
        """

        async def mutation():
            tag = await self._tag(tag_id, include_deleted=True)
            tag.delete()
            return tag, [tag]

        return await self._execute("Tag deleted", mutation, tag_id=str(tag_id))

    async def restore_tag(self, tag_id: TagId) -> ServiceResult[Tag]:
        """Restore a soft-deleted tag."""

        async def mutation():
            tag = await self._tag(tag_id, include_deleted=True)
            tag.restore()
            return tag, [tag]

        return await self._execute("Tag restored", mutation, tag_id=str(tag_id))
