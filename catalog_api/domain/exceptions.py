"""Domain exceptions.

All domain-level errors that represent business rule violations.
These exceptions are raised by aggregates and state machines when
invariants are violated or invalid operations are attempted.

Every error carries a machine-readable ``error_code`` so callers can
map failures without inspecting messages.
"""

from typing import Any, ClassVar


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    error_code: ClassVar[str] = "DOMAIN_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Lookup Errors
# ============================================================================


class NotFoundError(DomainError):
    """Raised when an identifier does not resolve to a live entity."""

    error_code: ClassVar[str] = "NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: str) -> None:
        """Initialize not found error.

        Args:
            entity_type: Type of entity (e.g., "Category", "Product").
            entity_id: Identifier that could not be resolved.
        """
        super().__init__(
            f"{entity_type} {entity_id} not found",
            details={"entity_type": entity_type, "entity_id": entity_id},
        )


# ============================================================================
# Argument Errors
# ============================================================================


class InvalidArgumentError(DomainError):
    """Raised when a value violates a field rule.

    Empty or whitespace names, over-long text, negative prices and nil
    identifiers all end up here.
    """

    error_code: ClassVar[str] = "INVALID_ARGUMENT"

    def __init__(self, field: str, reason: str, value: Any = None) -> None:
        """Initialize invalid argument error.

        Args:
            field: Name of the offending argument.
            reason: Explanation of why the value is invalid.
            value: The rejected value, if useful for diagnostics.
        """
        super().__init__(
            f"Invalid {field}: {reason}",
            details={"field": field, "reason": reason, "value": _printable(value)},
        )


class NameConflictError(InvalidArgumentError):
    """Raised when a name is already taken by another live entity."""

    error_code: ClassVar[str] = "NAME_CONFLICT"

    def __init__(self, entity_type: str, name: str) -> None:
        """Initialize name conflict error.

        Args:
            entity_type: Type of entity whose names must be unique.
            name: The conflicting name.
        """
        super().__init__("name", f"{entity_type} named '{name}' already exists", name)


class NullArgumentError(DomainError):
    """Raised when a required relationship argument is missing."""

    error_code: ClassVar[str] = "NULL_ARGUMENT"

    def __init__(self, argument: str) -> None:
        """Initialize null argument error.

        Args:
            argument: Name of the missing argument.
        """
        super().__init__(
            f"Argument '{argument}' is required",
            details={"argument": argument},
        )


# ============================================================================
# Lifecycle Errors
# ============================================================================


class EntityDeletedError(DomainError):
    """Raised when mutating an entity that has been soft-deleted."""

    error_code: ClassVar[str] = "ENTITY_DELETED"

    def __init__(self, entity_type: str, entity_id: str) -> None:
        """Initialize entity deleted error.

        Args:
            entity_type: Type of entity.
            entity_id: ID of the deleted entity.
        """
        super().__init__(
            f"{entity_type} {entity_id} is deleted and cannot be modified",
            details={"entity_type": entity_type, "entity_id": entity_id},
        )


class InvalidStateTransitionError(DomainError):
    """Raised when an invalid lifecycle transition is attempted.

    This error indicates that the requested operation cannot be performed
    in the current state of the entity.
    """

    error_code: ClassVar[str] = "INVALID_STATE_TRANSITION"

    def __init__(
        self,
        entity_type: str,
        entity_id: str,
        current_state: str,
        target_state: str,
        allowed_transitions: list[str] | None = None,
    ) -> None:
        """Initialize invalid state transition error.

        Args:
            entity_type: Type of entity (e.g., "Category", "Tag").
            entity_id: ID of the entity.
            current_state: Current state of the entity.
            target_state: Attempted target state.
            allowed_transitions: List of allowed target states from current state.
        """
        allowed = allowed_transitions or []
        message = (
            f"Cannot transition {entity_type}({entity_id}) "
            f"from '{current_state}' to '{target_state}'. "
            f"Allowed transitions: {allowed}"
        )
        super().__init__(
            message,
            details={
                "entity_type": entity_type,
                "entity_id": entity_id,
                "current_state": current_state,
                "target_state": target_state,
                "allowed_transitions": allowed,
            },
        )


class AlreadyDeletedError(InvalidStateTransitionError):
    """Raised when deleting an entity that is already deleted."""

    error_code: ClassVar[str] = "ALREADY_DELETED"


class NotDeletedError(InvalidStateTransitionError):
    """Raised when restoring an entity that is not deleted."""

    error_code: ClassVar[str] = "NOT_DELETED"


# ============================================================================
# Relationship Errors
# ============================================================================


class HasActiveDependentsError(DomainError):
    """Raised when deleting a category that still has live products."""

    error_code: ClassVar[str] = "HAS_ACTIVE_DEPENDENTS"

    def __init__(
        self,
        entity_type: str,
        entity_id: str,
        dependent_ids: list[str],
    ) -> None:
        """Initialize has active dependents error.

        Args:
            entity_type: Type of the entity being deleted.
            entity_id: ID of the entity being deleted.
            dependent_ids: IDs of the non-deleted dependents.
        """
        super().__init__(
            f"{entity_type} {entity_id} has {len(dependent_ids)} active dependent(s)",
            details={
                "entity_type": entity_type,
                "entity_id": entity_id,
                "dependent_ids": dependent_ids,
            },
        )


def _printable(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return str(value)


# ============================================================================
# Concurrency Errors
# ============================================================================


class ConcurrencyConflictError(DomainError):
    """Raised when an aggregate changed in storage after it was loaded."""

    error_code: ClassVar[str] = "CONCURRENCY_CONFLICT"

    def __init__(self, entity_type: str, entity_id: str | None = None) -> None:
        """Initialize concurrency conflict error.

        Args:
            entity_type: Kind of aggregate that was written concurrently.
            entity_id: Identifier of the aggregate, when known.
        """
        subject = f"{entity_type} {entity_id}" if entity_id else entity_type
        super().__init__(
            f"{subject} was modified concurrently; reload and retry",
            details={"entity_type": entity_type, "entity_id": entity_id},
        )
