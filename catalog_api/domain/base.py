"""Base classes for domain layer.

Provides foundational abstractions for entities, value objects,
aggregates, and domain events following DDD patterns, plus the
soft-delete lifecycle shared by every catalog aggregate.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, Generic, TypeVar
from uuid import UUID, uuid4

from catalog_api.domain.state_machines import (
    LifecycleState,
    ensure_mutable as _ensure_state_mutable,
    validate_lifecycle_transition,
)


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


# ============================================================================
# Value Object Base
# ============================================================================


@dataclass(frozen=True)
class ValueObject(ABC):
    """Base class for value objects.

    Value objects are immutable and compared by their attributes,
    not by identity. They have no lifecycle and are interchangeable
    when their values are equal.

    Example:
        @dataclass(frozen=True)
        class CategoryId(ValueObject):
            value: UUID
    """

    pass


# ============================================================================
# Entity Base
# ============================================================================


T = TypeVar("T")


@dataclass(eq=False)
class Entity(ABC, Generic[T]):
    """Base class for entities.

    Entities have identity that persists across state changes.
    Two entities are equal if they have the same identity,
    regardless of their other attributes.

    Attributes:
        id: Unique identifier for this entity.
    """

    id: T

    def __eq__(self, other: object) -> bool:
        """Compare entities by identity.

        Args:
            other: Object to compare with.

        Returns:
            True if other is same type with same id.
        """
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash entity by identity.

        Returns:
            Hash of the entity id.
        """
        return hash(self.id)


# ============================================================================
# Aggregate Root Base
# ============================================================================


@dataclass(kw_only=True, eq=False)
class AggregateRoot(Entity[T], Generic[T]):
    """Base class for aggregate roots.

    Aggregate roots are the entry point to a cluster of domain objects.
    They ensure consistency of the aggregate and emit domain events.

    Attributes:
        version: Optimistic locking version for concurrency control.
        created_at: Timestamp when the aggregate was created.
        updated_at: Timestamp of last modification.
    """

    version: int = field(default=1, compare=False)
    created_at: datetime = field(default_factory=utcnow, compare=False)
    updated_at: datetime = field(default_factory=utcnow, compare=False)
    _events: list["DomainEvent"] = field(
        default_factory=list,
        init=False,
        repr=False,
        compare=False,
    )

    def _record_event(self, event: "DomainEvent") -> None:
        """Record a domain event.

        Events are collected and published after the aggregate is persisted.

        Args:
            event: Domain event to record.
        """
        self._events.append(event)

    def collect_events(self) -> list["DomainEvent"]:
        """Collect and clear recorded events.

        Returns:
            List of domain events that were recorded.
        """
        events = self._events.copy()
        self._events.clear()
        return events

    def _touch(self, at: datetime | None = None) -> None:
        """Update the updated_at timestamp and increment version."""
        self.updated_at = at or utcnow()
        self.version += 1


# ============================================================================
# Soft-Deletable Aggregate Base
# ============================================================================


@dataclass(kw_only=True, eq=False)
class SoftDeletableAggregate(AggregateRoot[T], Generic[T]):
    """Aggregate root with soft delete and restore.

    The lifecycle transition table lives in ``LifecycleState``; this base
    only applies it. Subclasses call ``ensure_mutable()`` before every
    mutation and provide the events recorded on delete and restore.
    Commands may also call ``ensure_mutable()`` when the guard has to run
    before a lookup of a related aggregate.

    Attributes:
        deleted_at: Timestamp of soft deletion, None while active.
    """

    aggregate_type: ClassVar[str] = "Aggregate"

    deleted_at: datetime | None = field(default=None, compare=False)

    @property
    def is_deleted(self) -> bool:
        """Check whether the aggregate is soft-deleted.

        Returns:
            True if deleted_at is set.
        """
        return self.deleted_at is not None

    @property
    def lifecycle_state(self) -> LifecycleState:
        """Current lifecycle state derived from deleted_at.

        Returns:
            ACTIVE or DELETED.
        """
        return LifecycleState.DELETED if self.is_deleted else LifecycleState.ACTIVE

    def ensure_mutable(self) -> None:
        """Raise EntityDeletedError if the aggregate is deleted."""
        _ensure_state_mutable(self.aggregate_type, str(self.id), self.lifecycle_state)

    def _ensure_can_transition(self, target: LifecycleState) -> None:
        """Raise if the aggregate cannot move to the target state."""
        validate_lifecycle_transition(
            self.aggregate_type,
            str(self.id),
            self.lifecycle_state,
            target,
        )

    def delete(self) -> None:
        """Soft-delete the aggregate.

        Raises:
            AlreadyDeletedError: If the aggregate is already deleted.
        """
        self._ensure_can_transition(LifecycleState.DELETED)
        self._mark_deleted()

    def restore(self) -> None:
        """Restore a soft-deleted aggregate.

        Raises:
            NotDeletedError: If the aggregate is not deleted.
        """
        self._ensure_can_transition(LifecycleState.ACTIVE)
        self.deleted_at = None
        self._touch()
        self._record_event(self._restored_event())

    def _mark_deleted(self) -> None:
        now = utcnow()
        self.deleted_at = now
        self._touch(now)
        self._record_event(self._deleted_event())

    @abstractmethod
    def _deleted_event(self) -> "DomainEvent":
        """Build the event recorded when the aggregate is deleted."""

    @abstractmethod
    def _restored_event(self) -> "DomainEvent":
        """Build the event recorded when the aggregate is restored."""


# ============================================================================
# Domain Event Base
# ============================================================================


@dataclass(frozen=True)
class DomainEvent(ABC):
    """Base class for domain events.

    Domain events represent something significant that happened
    in the domain. They are immutable and contain all information
    about what happened.

    Attributes:
        event_id: Unique identifier for this event instance.
        event_type: String identifier for the event type (set by subclass).
        occurred_at: Timestamp when the event occurred.
        aggregate_id: ID of the aggregate that emitted this event.
        aggregate_type: Type name of the aggregate.
    """

    event_type: ClassVar[str]

    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=utcnow)
    aggregate_id: str = field(default="")
    aggregate_type: str = field(default="")

    def to_dict(self) -> dict[str, Any]:
        """Convert event to dictionary for serialization.

        Returns:
            Dictionary representation of the event.
        """
        return {
            "event_id": str(self.event_id),
            "event_type": self.event_type,
            "occurred_at": self.occurred_at.isoformat(),
            "aggregate_id": self.aggregate_id,
            "aggregate_type": self.aggregate_type,
            "payload": self._payload(),
        }

    @abstractmethod
    def _payload(self) -> dict[str, Any]:
        """Get event-specific payload data.

        Returns:
            Dictionary with event-specific data.
        """
        pass
