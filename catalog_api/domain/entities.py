"""Domain entities for the catalog.

Entities are domain objects with identity that persists across state changes.
This module contains the catalog aggregates: Category, Product and Tag.

Aggregates reference each other by identifier only. Guards that need a
sibling's state (a category's live products, a tag's previous product)
receive the sibling from the orchestrating command instead of loading it.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import ClassVar

from catalog_api.domain.base import DomainEvent, SoftDeletableAggregate
from catalog_api.domain.events import (
    CategoryCreated,
    CategoryDeleted,
    CategoryProductAdded,
    CategoryProductRemoved,
    CategoryRestored,
    CategoryUpdated,
    ProductCategoryChanged,
    ProductCreated,
    ProductDeleted,
    ProductRestored,
    ProductTagAdded,
    ProductTagRemoved,
    ProductTagsCleared,
    ProductUpdated,
    TagAssigned,
    TagCreated,
    TagDeleted,
    TagRestored,
    TagUnassigned,
    TagUpdated,
)
from catalog_api.domain.exceptions import (
    HasActiveDependentsError,
    InvalidArgumentError,
    NullArgumentError,
)
from catalog_api.domain.state_machines import LifecycleState
from catalog_api.domain.value_objects import (
    CATEGORY_NAME_MAX_LENGTH,
    PRODUCT_DESCRIPTION_MAX_LENGTH,
    PRODUCT_NAME_MAX_LENGTH,
    TAG_NAME_MAX_LENGTH,
    CategoryId,
    ProductId,
    TagId,
    validate_price,
    validate_text,
)


# ============================================================================
# Category Aggregate
# ============================================================================


@dataclass(kw_only=True, eq=False)
class Category(SoftDeletableAggregate[CategoryId]):
    """Named group of products.

    Attributes:
        id: Unique category identifier.
        name: Display name, unique among non-deleted categories.
        product_ids: Identifiers of the products attached to this category.
    """

    aggregate_type: ClassVar[str] = "Category"

    id: CategoryId
    name: str
    product_ids: set[ProductId] = field(default_factory=set)

    @classmethod
    def create(cls, name: str, category_id: CategoryId | None = None) -> "Category":
        """Create a new category.

        Args:
            name: Category name.
            category_id: Optional pre-generated category ID.

        Returns:
            New Category instance.

        Raises:
            InvalidArgumentError: If the name is empty or too long.
        """
        validate_text("name", name, CATEGORY_NAME_MAX_LENGTH)
        category = cls(id=category_id or CategoryId.generate(), name=name)
        category._record_event(
            CategoryCreated(
                aggregate_id=str(category.id),
                aggregate_type=cls.aggregate_type,
                category_id=str(category.id),
                name=name,
            )
        )
        return category

    def has_product(self, product_id: ProductId) -> bool:
        """Check whether a product is attached to this category."""
        return product_id in self.product_ids

    def rename(self, new_name: str) -> None:
        """Rename the category.

        Args:
            new_name: New category name.

        Raises:
            EntityDeletedError: If the category is deleted.
            InvalidArgumentError: If the name is empty or too long.
        """
        self.ensure_mutable()
        validate_text("name", new_name, CATEGORY_NAME_MAX_LENGTH)
        old_name = self.name
        self.name = new_name
        self._touch()
        self._record_event(
            CategoryUpdated(
                aggregate_id=str(self.id),
                aggregate_type=self.aggregate_type,
                category_id=str(self.id),
                changes={"name": {"old": old_name, "new": new_name}},
            )
        )

    def add_product(self, product: "Product | None") -> bool:
        """Attach a product to this category.

        Args:
            product: Product to attach.

        Returns:
            True if membership changed, False for a no-op.

        Raises:
            EntityDeletedError: If the category is deleted.
            NullArgumentError: If product is None.
        """
        self.ensure_mutable()
        if product is None:
            raise NullArgumentError("product")
        if product.id in self.product_ids:
            return False

        self.product_ids.add(product.id)
        self._touch()
        self._record_event(
            CategoryProductAdded(
                aggregate_id=str(self.id),
                aggregate_type=self.aggregate_type,
                category_id=str(self.id),
                product_id=str(product.id),
            )
        )
        return True

    def remove_product(self, product: "Product | None") -> bool:
        """Detach a product from this category.

        Args:
            product: Product to detach.

        Returns:
            True if membership changed, False for a no-op.

        Raises:
            EntityDeletedError: If the category is deleted.
            NullArgumentError: If product is None.
        """
        self.ensure_mutable()
        if product is None:
            raise NullArgumentError("product")
        if product.id not in self.product_ids:
            return False

        self.product_ids.discard(product.id)
        self._touch()
        self._record_event(
            CategoryProductRemoved(
                aggregate_id=str(self.id),
                aggregate_type=self.aggregate_type,
                category_id=str(self.id),
                product_id=str(product.id),
            )
        )
        return True

    def delete(self, dependents: Iterable["Product"] = ()) -> None:
        """Soft-delete the category.

        Args:
            dependents: Products associated with this category, as fetched
                by the caller. Deleted products are ignored.

        Raises:
            AlreadyDeletedError: If the category is already deleted.
            HasActiveDependentsError: If any dependent is not deleted.
        """
        self._ensure_can_transition(LifecycleState.DELETED)

        live = sorted(str(p.id) for p in dependents if not p.is_deleted)
        if live:
            raise HasActiveDependentsError(self.aggregate_type, str(self.id), live)

        self._mark_deleted()

    def _deleted_event(self) -> DomainEvent:
        return CategoryDeleted(
            aggregate_id=str(self.id),
            aggregate_type=self.aggregate_type,
            category_id=str(self.id),
            name=self.name,
        )

    def _restored_event(self) -> DomainEvent:
        return CategoryRestored(
            aggregate_id=str(self.id),
            aggregate_type=self.aggregate_type,
            category_id=str(self.id),
            name=self.name,
        )


# ============================================================================
# Tag Aggregate
# ============================================================================


@dataclass(kw_only=True, eq=False)
class Tag(SoftDeletableAggregate[TagId]):
    """Label that can be assigned to at most one product.

    Attributes:
        id: Unique tag identifier.
        name: Tag name, matched exactly by tag search filters.
        product_id: Product this tag is assigned to, if any.
    """

    aggregate_type: ClassVar[str] = "Tag"

    id: TagId
    name: str
    product_id: ProductId | None = None

    @classmethod
    def create(cls, name: str, tag_id: TagId | None = None) -> "Tag":
        """Create a new, unassigned tag.

        Args:
            name: Tag name.
            tag_id: Optional pre-generated tag ID.

        Returns:
            New Tag instance.

        Raises:
            InvalidArgumentError: If the name is empty or too long.
        """
        validate_text("name", name, TAG_NAME_MAX_LENGTH)
        tag = cls(id=tag_id or TagId.generate(), name=name)
        tag._record_event(
            TagCreated(
                aggregate_id=str(tag.id),
                aggregate_type=cls.aggregate_type,
                tag_id=str(tag.id),
                name=name,
            )
        )
        return tag

    @property
    def is_assigned(self) -> bool:
        return self.product_id is not None

    def rename(self, new_name: str) -> None:
        """Rename the tag.

        Raises:
            EntityDeletedError: If the tag is deleted.
            InvalidArgumentError: If the name is empty or too long.
        """
        self.ensure_mutable()
        validate_text("name", new_name, TAG_NAME_MAX_LENGTH)
        old_name = self.name
        self.name = new_name
        self._touch()
        self._record_event(
            TagUpdated(
                aggregate_id=str(self.id),
                aggregate_type=self.aggregate_type,
                tag_id=str(self.id),
                changes={"name": {"old": old_name, "new": new_name}},
            )
        )

    def assign_to_product(self, product_id: ProductId | None) -> ProductId | None:
        """Assign the tag to a product.

        The previous product, if any, is returned so the caller can drop
        the tag from that product's tag set.

        Args:
            product_id: Target product identifier.

        Returns:
            Identifier of the previously assigned product, or None.

        Raises:
            EntityDeletedError: If the tag is deleted.
            InvalidArgumentError: If product_id is None or nil.
        """
        self.ensure_mutable()
        if product_id is None or product_id.is_nil():
            raise InvalidArgumentError("product_id", "must not be empty", product_id)

        previous = self.product_id
        if previous == product_id:
            return None

        self.product_id = product_id
        self._touch()
        self._record_event(
            TagAssigned(
                aggregate_id=str(self.id),
                aggregate_type=self.aggregate_type,
                tag_id=str(self.id),
                product_id=str(product_id),
                previous_product_id=str(previous) if previous else None,
            )
        )
        return previous

    def unassign(self) -> ProductId | None:
        """Release the tag from its product.

        Returns:
            Identifier of the product the tag was assigned to, or None
            when it was already unassigned.

        Raises:
            EntityDeletedError: If the tag is deleted.
        """
        self.ensure_mutable()
        previous = self.product_id
        if previous is None:
            return None

        self.product_id = None
        self._touch()
        self._record_event(
            TagUnassigned(
                aggregate_id=str(self.id),
                aggregate_type=self.aggregate_type,
                tag_id=str(self.id),
                product_id=str(previous),
            )
        )
        return previous

    def _deleted_event(self) -> DomainEvent:
        return TagDeleted(
            aggregate_id=str(self.id),
            aggregate_type=self.aggregate_type,
            tag_id=str(self.id),
            name=self.name,
        )

    def _restored_event(self) -> DomainEvent:
        return TagRestored(
            aggregate_id=str(self.id),
            aggregate_type=self.aggregate_type,
            tag_id=str(self.id),
            name=self.name,
        )


# ============================================================================
# Product Aggregate
# ============================================================================


@dataclass(kw_only=True, eq=False)
class Product(SoftDeletableAggregate[ProductId]):
    """Sellable item belonging to exactly one category.

    Attributes:
        id: Unique product identifier.
        name: Product name.
        description: Product description.
        price: Non-negative price.
        category_id: Owning category.
        active: Whether the product is offered.
        tag_ids: Identifiers of the tags attached to this product.
    """

    aggregate_type: ClassVar[str] = "Product"

    id: ProductId
    name: str
    description: str
    price: Decimal
    category_id: CategoryId
    active: bool = True
    tag_ids: set[TagId] = field(default_factory=set)

    @classmethod
    def create(
        cls,
        name: str,
        description: str,
        price: Decimal | int | float | str,
        category_id: CategoryId | None,
        active: bool = True,
        product_id: ProductId | None = None,
    ) -> "Product":
        """Create a new product.

        Factory method that validates every field and records the
        creation event. Category existence is checked by the caller.

        Args:
            name: Product name.
            description: Product description.
            price: Non-negative price.
            category_id: Owning category.
            active: Initial active flag.
            product_id: Optional pre-generated product ID.

        Returns:
            New Product instance.

        Raises:
            InvalidArgumentError: If any field violates its rule.
        """
        validate_text("name", name, PRODUCT_NAME_MAX_LENGTH)
        validate_text("description", description, PRODUCT_DESCRIPTION_MAX_LENGTH)
        normalized_price = validate_price(price)
        _validate_category_id(category_id)

        product = cls(
            id=product_id or ProductId.generate(),
            name=name,
            description=description,
            price=normalized_price,
            category_id=category_id,
            active=active,
        )
        product._record_event(
            ProductCreated(
                aggregate_id=str(product.id),
                aggregate_type=cls.aggregate_type,
                product_id=str(product.id),
                name=name,
                category_id=str(category_id),
                price=str(normalized_price),
                active=active,
            )
        )
        return product

    # -------------------------------------------------------------------------
    # Query Methods
    # -------------------------------------------------------------------------

    def has_tag(self, tag_id: TagId) -> bool:
        return tag_id in self.tag_ids

    # -------------------------------------------------------------------------
    # Attribute Operations
    # -------------------------------------------------------------------------

    def rename(self, new_name: str) -> None:
        """Rename the product.

        Raises:
            EntityDeletedError: If the product is deleted.
            InvalidArgumentError: If the name is empty or too long.
        """
        self.ensure_mutable()
        validate_text("name", new_name, PRODUCT_NAME_MAX_LENGTH)
        self.name = new_name
        self._updated({"name": new_name})

    def redescribe(self, new_description: str) -> None:
        """Replace the product description.

        Raises:
            EntityDeletedError: If the product is deleted.
            InvalidArgumentError: If the description is empty or too long.
        """
        self.ensure_mutable()
        validate_text("description", new_description, PRODUCT_DESCRIPTION_MAX_LENGTH)
        self.description = new_description
        self._updated({"description": new_description})

    def reprice(self, new_price: Decimal | int | float | str) -> None:
        """Change the product price.

        Raises:
            EntityDeletedError: If the product is deleted.
            InvalidArgumentError: If the price is missing or negative.
        """
        self.ensure_mutable()
        price = validate_price(new_price)
        self.price = price
        self._updated({"price": str(price)})

    def update(
        self,
        name: str,
        description: str,
        price: Decimal | int | float | str,
        active: bool,
    ) -> None:
        """Replace all editable attributes at once.

        Every value is validated before any is applied, so a failure
        leaves the product unchanged.

        Raises:
            EntityDeletedError: If the product is deleted.
            InvalidArgumentError: If any field violates its rule.
        """
        self.ensure_mutable()
        validate_text("name", name, PRODUCT_NAME_MAX_LENGTH)
        validate_text("description", description, PRODUCT_DESCRIPTION_MAX_LENGTH)
        normalized_price = validate_price(price)

        self.name = name
        self.description = description
        self.price = normalized_price
        self.active = active
        self._updated(
            {
                "name": name,
                "description": description,
                "price": str(normalized_price),
                "active": active,
            }
        )

    def activate(self) -> None:
        """Mark the product as active.

        Raises:
            EntityDeletedError: If the product is deleted.
        """
        self.ensure_mutable()
        self.active = True
        self._updated({"active": True})

    def deactivate(self) -> None:
        """Mark the product as inactive.

        Raises:
            EntityDeletedError: If the product is deleted.
        """
        self.ensure_mutable()
        self.active = False
        self._updated({"active": False})

    def change_category(self, new_category_id: CategoryId | None) -> CategoryId:
        """Move the product to another category.

        Existence of the target category is not checked here.

        Args:
            new_category_id: Target category identifier.

        Returns:
            The previous category identifier.

        Raises:
            EntityDeletedError: If the product is deleted.
            InvalidArgumentError: If the identifier is None or nil.
        """
        self.ensure_mutable()
        _validate_category_id(new_category_id)

        old_category_id = self.category_id
        self.category_id = new_category_id
        self._touch()
        self._record_event(
            ProductCategoryChanged(
                aggregate_id=str(self.id),
                aggregate_type=self.aggregate_type,
                product_id=str(self.id),
                old_category_id=str(old_category_id),
                new_category_id=str(new_category_id),
            )
        )
        return old_category_id

    # -------------------------------------------------------------------------
    # Tag Operations
    # -------------------------------------------------------------------------

    def add_tag(self, tag: Tag | None) -> bool:
        """Attach a tag to this product.

        Returns:
            True if membership changed, False for a no-op.

        Raises:
            EntityDeletedError: If the product is deleted.
            NullArgumentError: If tag is None.
        """
        self.ensure_mutable()
        if tag is None:
            raise NullArgumentError("tag")
        if tag.id in self.tag_ids:
            return False

        self.tag_ids.add(tag.id)
        self._touch()
        self._record_event(
            ProductTagAdded(
                aggregate_id=str(self.id),
                aggregate_type=self.aggregate_type,
                product_id=str(self.id),
                tag_id=str(tag.id),
            )
        )
        return True

    def remove_tag(self, tag: Tag | None) -> bool:
        """Detach a tag from this product.

        Returns:
            True if membership changed, False for a no-op.

        Raises:
            EntityDeletedError: If the product is deleted.
            NullArgumentError: If tag is None.
        """
        self.ensure_mutable()
        if tag is None:
            raise NullArgumentError("tag")
        return self._discard_tag(tag.id)

    def clear_tags(self) -> list[TagId]:
        """Detach every tag from this product.

        Returns:
            Identifiers of the removed tags, empty for a no-op.

        Raises:
            EntityDeletedError: If the product is deleted.
        """
        self.ensure_mutable()
        if not self.tag_ids:
            return []

        removed = sorted(self.tag_ids, key=str)
        self.tag_ids.clear()
        self._touch()
        self._record_event(
            ProductTagsCleared(
                aggregate_id=str(self.id),
                aggregate_type=self.aggregate_type,
                product_id=str(self.id),
                tag_ids=tuple(str(t) for t in removed),
            )
        )
        return removed

    def _discard_tag(self, tag_id: TagId) -> bool:
        if tag_id not in self.tag_ids:
            return False

        self.tag_ids.discard(tag_id)
        self._touch()
        self._record_event(
            ProductTagRemoved(
                aggregate_id=str(self.id),
                aggregate_type=self.aggregate_type,
                product_id=str(self.id),
                tag_id=str(tag_id),
            )
        )
        return True

    # -------------------------------------------------------------------------
    # Internal Helpers
    # -------------------------------------------------------------------------

    def _updated(self, changes: dict[str, object]) -> None:
        self._touch()
        self._record_event(
            ProductUpdated(
                aggregate_id=str(self.id),
                aggregate_type=self.aggregate_type,
                product_id=str(self.id),
                changes=changes,
            )
        )

    def _deleted_event(self) -> DomainEvent:
        return ProductDeleted(
            aggregate_id=str(self.id),
            aggregate_type=self.aggregate_type,
            product_id=str(self.id),
            name=self.name,
            category_id=str(self.category_id),
        )

    def _restored_event(self) -> DomainEvent:
        return ProductRestored(
            aggregate_id=str(self.id),
            aggregate_type=self.aggregate_type,
            product_id=str(self.id),
            name=self.name,
            category_id=str(self.category_id),
        )


def _validate_category_id(category_id: CategoryId | None) -> None:
    if category_id is None or category_id.is_nil():
        raise InvalidArgumentError("category_id", "must not be empty", category_id)
