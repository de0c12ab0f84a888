"""Domain events for the catalog.

Domain events represent significant occurrences in the domain.
They are used for:
- Audit logging of create, delete and restore operations
- Structured logging of committed changes
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar

from catalog_api.domain.base import DomainEvent


# ============================================================================
# Category Events
# ============================================================================


@dataclass(frozen=True)
class CategoryCreated(DomainEvent):
    """Event raised when a new category is created."""

    event_type: ClassVar[str] = "category.created"

    category_id: str = ""
    name: str = ""

    def _payload(self) -> dict[str, Any]:
        """Get event-specific payload."""
        return {"category_id": self.category_id, "name": self.name}


@dataclass(frozen=True)
class CategoryUpdated(DomainEvent):
    """Event raised when category attributes change."""

    event_type: ClassVar[str] = "category.updated"

    category_id: str = ""
    changes: dict[str, Any] = field(default_factory=dict)

    def _payload(self) -> dict[str, Any]:
        return {"category_id": self.category_id, "changes": dict(self.changes)}


@dataclass(frozen=True)
class CategoryProductAdded(DomainEvent):
    """Event raised when a product joins a category's product set."""

    event_type: ClassVar[str] = "category.product_added"

    category_id: str = ""
    product_id: str = ""

    def _payload(self) -> dict[str, Any]:
        return {"category_id": self.category_id, "product_id": self.product_id}


@dataclass(frozen=True)
class CategoryProductRemoved(DomainEvent):
    """Event raised when a product leaves a category's product set."""

    event_type: ClassVar[str] = "category.product_removed"

    category_id: str = ""
    product_id: str = ""

    def _payload(self) -> dict[str, Any]:
        return {"category_id": self.category_id, "product_id": self.product_id}


@dataclass(frozen=True)
class CategoryDeleted(DomainEvent):
    """Event raised when a category is soft-deleted."""

    event_type: ClassVar[str] = "category.deleted"

    category_id: str = ""
    name: str = ""

    def _payload(self) -> dict[str, Any]:
        return {"category_id": self.category_id, "name": self.name}


@dataclass(frozen=True)
class CategoryRestored(DomainEvent):
    """Event raised when a deleted category is restored."""

    event_type: ClassVar[str] = "category.restored"

    category_id: str = ""
    name: str = ""

    def _payload(self) -> dict[str, Any]:
        return {"category_id": self.category_id, "name": self.name}


# ============================================================================
# Product Events
# ============================================================================


@dataclass(frozen=True)
class ProductCreated(DomainEvent):
    """Event raised when a new product is created."""

    event_type: ClassVar[str] = "product.created"

    product_id: str = ""
    name: str = ""
    category_id: str = ""
    price: str = "0"
    active: bool = True

    def _payload(self) -> dict[str, Any]:
        """Get event-specific payload."""
        return {
            "product_id": self.product_id,
            "name": self.name,
            "category_id": self.category_id,
            "price": self.price,
            "active": self.active,
        }


@dataclass(frozen=True)
class ProductUpdated(DomainEvent):
    """Event raised when product attributes change.

    ``changes`` maps each changed field to its new value, with prices
    rendered as strings.
    """

    event_type: ClassVar[str] = "product.updated"

    product_id: str = ""
    changes: dict[str, Any] = field(default_factory=dict)

    def _payload(self) -> dict[str, Any]:
        return {"product_id": self.product_id, "changes": dict(self.changes)}


@dataclass(frozen=True)
class ProductCategoryChanged(DomainEvent):
    """Event raised when a product moves to another category."""

    event_type: ClassVar[str] = "product.category_changed"

    product_id: str = ""
    old_category_id: str = ""
    new_category_id: str = ""

    def _payload(self) -> dict[str, Any]:
        return {
            "product_id": self.product_id,
            "old_category_id": self.old_category_id,
            "new_category_id": self.new_category_id,
        }


@dataclass(frozen=True)
class ProductTagAdded(DomainEvent):
    """Event raised when a tag is attached to a product."""

    event_type: ClassVar[str] = "product.tag_added"

    product_id: str = ""
    tag_id: str = ""

    def _payload(self) -> dict[str, Any]:
        return {"product_id": self.product_id, "tag_id": self.tag_id}


@dataclass(frozen=True)
class ProductTagRemoved(DomainEvent):
    """Event raised when a tag is detached from a product."""

    event_type: ClassVar[str] = "product.tag_removed"

    product_id: str = ""
    tag_id: str = ""

    def _payload(self) -> dict[str, Any]:
        return {"product_id": self.product_id, "tag_id": self.tag_id}


@dataclass(frozen=True)
class ProductTagsCleared(DomainEvent):
    """Event raised when all tags are detached from a product."""

    event_type: ClassVar[str] = "product.tags_cleared"

    product_id: str = ""
    tag_ids: tuple[str, ...] = ()

    def _payload(self) -> dict[str, Any]:
        return {"product_id": self.product_id, "tag_ids": list(self.tag_ids)}


@dataclass(frozen=True)
class ProductDeleted(DomainEvent):
    """Event raised when a product is soft-deleted."""

    event_type: ClassVar[str] = "product.deleted"

    product_id: str = ""
    name: str = ""
    category_id: str = ""

    def _payload(self) -> dict[str, Any]:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "category_id": self.category_id,
        }


@dataclass(frozen=True)
class ProductRestored(DomainEvent):
    """Event raised when a deleted product is restored."""

    event_type: ClassVar[str] = "product.restored"

    product_id: str = ""
    name: str = ""
    category_id: str = ""

    def _payload(self) -> dict[str, Any]:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "category_id": self.category_id,
        }


# ============================================================================
# Tag Events
# ============================================================================


@dataclass(frozen=True)
class TagCreated(DomainEvent):
    """Event raised when a new tag is created."""

    event_type: ClassVar[str] = "tag.created"

    tag_id: str = ""
    name: str = ""

    def _payload(self) -> dict[str, Any]:
        """Get event-specific payload."""
        return {"tag_id": self.tag_id, "name": self.name}


@dataclass(frozen=True)
class TagUpdated(DomainEvent):
    """Event raised when tag attributes change."""

    event_type: ClassVar[str] = "tag.updated"

    tag_id: str = ""
    changes: dict[str, Any] = field(default_factory=dict)

    def _payload(self) -> dict[str, Any]:
        return {"tag_id": self.tag_id, "changes": dict(self.changes)}


@dataclass(frozen=True)
class TagAssigned(DomainEvent):
    """Event raised when a tag is assigned to a product."""

    event_type: ClassVar[str] = "tag.assigned"

    tag_id: str = ""
    product_id: str = ""
    previous_product_id: str | None = None

    def _payload(self) -> dict[str, Any]:
        return {
            "tag_id": self.tag_id,
            "product_id": self.product_id,
            "previous_product_id": self.previous_product_id,
        }


@dataclass(frozen=True)
class TagUnassigned(DomainEvent):
    """Event raised when a tag is released from its product."""

    event_type: ClassVar[str] = "tag.unassigned"

    tag_id: str = ""
    product_id: str = ""

    def _payload(self) -> dict[str, Any]:
        return {"tag_id": self.tag_id, "product_id": self.product_id}


@dataclass(frozen=True)
class TagDeleted(DomainEvent):
    """Event raised when a tag is soft-deleted."""

    event_type: ClassVar[str] = "tag.deleted"

    tag_id: str = ""
    name: str = ""

    def _payload(self) -> dict[str, Any]:
        return {"tag_id": self.tag_id, "name": self.name}


@dataclass(frozen=True)
class TagRestored(DomainEvent):
    """Event raised when a deleted tag is restored."""

    event_type: ClassVar[str] = "tag.restored"

    tag_id: str = ""
    name: str = ""

    def _payload(self) -> dict[str, Any]:
        return {"tag_id": self.tag_id, "name": self.name}
