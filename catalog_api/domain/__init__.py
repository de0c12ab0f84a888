"""Domain layer - Aggregates, value objects, lifecycle state machine, events.

This module exports the core domain building blocks following DDD patterns:

- **Aggregates**: Objects with identity (Category, Product, Tag)
- **Value Objects**: Immutable objects compared by value (typed IDs)
- **State Machines**: Soft-delete lifecycle shared by every aggregate
- **Domain Events**: Represent significant domain occurrences
- **Exceptions**: Domain-specific errors and invariant violations

Example usage:
    from catalog_api.domain import Category, Product

    electronics = Category.create("Electronics")
    laptop = Product.create(
        name="Laptop",
        description="14 inch ultrabook",
        price=Decimal("999.00"),
        category_id=electronics.id,
    )
    electronics.add_product(laptop)

    # Deleting the category is refused while the laptop is live
    electronics.delete(dependents=[laptop])  # HasActiveDependentsError
"""

# Base classes
from catalog_api.domain.base import (
    AggregateRoot,
    DomainEvent,
    Entity,
    SoftDeletableAggregate,
    ValueObject,
)

# Aggregates
from catalog_api.domain.entities import Category, Product, Tag

# Events
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

# Exceptions
from catalog_api.domain.exceptions import (
    AlreadyDeletedError,
    ConcurrencyConflictError,
    DomainError,
    EntityDeletedError,
    HasActiveDependentsError,
    InvalidArgumentError,
    InvalidStateTransitionError,
    NameConflictError,
    NotDeletedError,
    NotFoundError,
    NullArgumentError,
)

# State machines
from catalog_api.domain.state_machines import (
    LifecycleState,
    ensure_mutable,
    validate_lifecycle_transition,
)

# Value objects
from catalog_api.domain.value_objects import (
    CategoryId,
    ProductId,
    TagId,
    UuidIdentifier,
)

__all__ = [
    # Base classes
    "AggregateRoot",
    "DomainEvent",
    "Entity",
    "SoftDeletableAggregate",
    "ValueObject",
    # Aggregates
    "Category",
    "Product",
    "Tag",
    # Value Objects
    "CategoryId",
    "ProductId",
    "TagId",
    "UuidIdentifier",
    # State Machines
    "LifecycleState",
    "ensure_mutable",
    "validate_lifecycle_transition",
    # Domain Events - Category
    "CategoryCreated",
    "CategoryUpdated",
    "CategoryProductAdded",
    "CategoryProductRemoved",
    "CategoryDeleted",
    "CategoryRestored",
    # Domain Events - Product
    "ProductCreated",
    "ProductUpdated",
    "ProductCategoryChanged",
    "ProductTagAdded",
    "ProductTagRemoved",
    "ProductTagsCleared",
    "ProductDeleted",
    "ProductRestored",
    # Domain Events - Tag
    "TagCreated",
    "TagUpdated",
    "TagAssigned",
    "TagUnassigned",
    "TagDeleted",
    "TagRestored",
    # Exceptions
    "DomainError",
    "NotFoundError",
    "InvalidArgumentError",
    "NameConflictError",
    "NullArgumentError",
    "EntityDeletedError",
    "InvalidStateTransitionError",
    "AlreadyDeletedError",
    "NotDeletedError",
    "HasActiveDependentsError",
    "ConcurrencyConflictError",
]
