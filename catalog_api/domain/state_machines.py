"""State machines for domain entities.

Deterministic state machine shared by every catalog aggregate.
Categories, products and tags are never physically removed; they move
between ACTIVE and DELETED through soft delete and restore.
"""

from enum import Enum

from catalog_api.domain.exceptions import (
    AlreadyDeletedError,
    EntityDeletedError,
    InvalidStateTransitionError,
    NotDeletedError,
)


# ============================================================================
# Lifecycle State Machine
# ============================================================================


class LifecycleState(str, Enum):
    """Soft-delete lifecycle states.

    State diagram:
        ACTIVE ───── delete (guarded) ─────► DELETED
          ▲                                     │
          └──────────── restore ────────────────┘

    Neither state is terminal: both transitions stay available subject
    to their guards.
    """

    ACTIVE = "active"
    DELETED = "deleted"

    def can_transition_to(self, target: "LifecycleState") -> bool:
        """Check if transition to target state is valid.

        Args:
            target: Target state to transition to.

        Returns:
            True if transition is valid.
        """
        return target in _LIFECYCLE_TRANSITIONS.get(self, set())

    def allowed_transitions(self) -> list["LifecycleState"]:
        """Get list of valid target states.

        Returns:
            List of states that can be transitioned to.
        """
        return list(_LIFECYCLE_TRANSITIONS.get(self, set()))

    def is_mutable(self) -> bool:
        """Check if ordinary mutators may run in this state.

        Returns:
            True if the entity can be modified.
        """
        return self == LifecycleState.ACTIVE

    def is_terminal(self) -> bool:
        """Check if this is a terminal (final) state.

        Returns:
            True if no further transitions are possible.
        """
        return len(_LIFECYCLE_TRANSITIONS.get(self, set())) == 0


# Lifecycle transitions (defined outside enum to avoid Enum restrictions)
_LIFECYCLE_TRANSITIONS: dict[LifecycleState, set[LifecycleState]] = {
    LifecycleState.ACTIVE: {LifecycleState.DELETED},
    LifecycleState.DELETED: {LifecycleState.ACTIVE},
}


# ============================================================================
# State Machine Helpers
# ============================================================================


def validate_lifecycle_transition(
    entity_type: str,
    entity_id: str,
    current_state: LifecycleState,
    target_state: LifecycleState,
) -> None:
    """Validate and raise if a lifecycle transition is invalid.

    Args:
        entity_type: Entity type name for error message.
        entity_id: Entity identifier for error message.
        current_state: Current lifecycle state.
        target_state: Target lifecycle state.

    Raises:
        AlreadyDeletedError: If deleting an already deleted entity.
        NotDeletedError: If restoring an entity that is not deleted.
        InvalidStateTransitionError: For any other invalid transition.
    """
    if current_state.can_transition_to(target_state):
        return

    if target_state == LifecycleState.DELETED:
        error_class: type[InvalidStateTransitionError] = AlreadyDeletedError
    elif target_state == LifecycleState.ACTIVE:
        error_class = NotDeletedError
    else:
        error_class = InvalidStateTransitionError

    raise error_class(
        entity_type=entity_type,
        entity_id=entity_id,
        current_state=current_state.value,
        target_state=target_state.value,
        allowed_transitions=[s.value for s in current_state.allowed_transitions()],
    )


def ensure_mutable(
    entity_type: str,
    entity_id: str,
    current_state: LifecycleState,
) -> None:
    """Raise if an entity in the given state cannot be modified.

    Args:
        entity_type: Entity type name for error message.
        entity_id: Entity identifier for error message.
        current_state: Current lifecycle state.

    Raises:
        EntityDeletedError: If the entity is soft-deleted.
    """
    if not current_state.is_mutable():
        raise EntityDeletedError(entity_type, entity_id)
