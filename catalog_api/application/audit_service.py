"""Audit application service.

Forwards create, delete and restore events to an audit sink after the
mutation has been committed. Audit is fire-and-forget: a failing sink is
logged and never undoes the committed change.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Protocol

import structlog

from catalog_api.domain.base import DomainEvent
from catalog_api.domain.events import (
    CategoryCreated,
    CategoryDeleted,
    CategoryRestored,
    ProductCreated,
    ProductDeleted,
    ProductRestored,
    TagCreated,
    TagDeleted,
    TagRestored,
)

logger = structlog.get_logger()


class AuditAction(str, Enum):
    """Audited catalog actions."""

    CATEGORY_CREATED = "category_created"
    CATEGORY_DELETED = "category_deleted"
    CATEGORY_RESTORED = "category_restored"
    PRODUCT_CREATED = "product_created"
    PRODUCT_DELETED = "product_deleted"
    PRODUCT_RESTORED = "product_restored"
    TAG_CREATED = "tag_created"
    TAG_DELETED = "tag_deleted"
    TAG_RESTORED = "tag_restored"


_AUDITED_EVENTS: dict[type[DomainEvent], AuditAction] = {
    CategoryCreated: AuditAction.CATEGORY_CREATED,
    CategoryDeleted: AuditAction.CATEGORY_DELETED,
    CategoryRestored: AuditAction.CATEGORY_RESTORED,
    ProductCreated: AuditAction.PRODUCT_CREATED,
    ProductDeleted: AuditAction.PRODUCT_DELETED,
    ProductRestored: AuditAction.PRODUCT_RESTORED,
    TagCreated: AuditAction.TAG_CREATED,
    TagDeleted: AuditAction.TAG_DELETED,
    TagRestored: AuditAction.TAG_RESTORED,
}


# ============================================================================
# Audit Sinks
# ============================================================================


class AuditSink(Protocol):
    """Destination for audit entries."""

    async def record(
        self, action: AuditAction, actor_id: str | None, payload: dict[str, Any]
    ) -> None: ...


@dataclass
class AuditEntry:
    """Audit entry captured by InMemoryAuditSink."""

    action: AuditAction
    actor_id: str | None
    payload: dict[str, Any]
    recorded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class LoggingAuditSink:
    """Audit sink that writes entries to the structured log."""

    async def record(
        self, action: AuditAction, actor_id: str | None, payload: dict[str, Any]
    ) -> None:
        logger.info("Audit entry", action=action.value, actor_id=actor_id, payload=payload)


class InMemoryAuditSink:
    """Audit sink that keeps entries in memory (for testing)."""

    def __init__(self) -> None:
        self.entries: list[AuditEntry] = []

    async def record(
        self, action: AuditAction, actor_id: str | None, payload: dict[str, Any]
    ) -> None:
        self.entries.append(AuditEntry(action=action, actor_id=actor_id, payload=payload))

    def actions(self) -> list[AuditAction]:
        """Get recorded actions in order."""
        return [entry.action for entry in self.entries]


# Global sink instance
_audit_sink: AuditSink | None = None


def get_audit_sink() -> AuditSink:
    """Get audit sink singleton."""
    global _audit_sink
    if _audit_sink is None:
        _audit_sink = LoggingAuditSink()
    return _audit_sink


def set_audit_sink(sink: AuditSink | None) -> None:
    """Replace the audit sink; None restores the logging sink."""
    global _audit_sink
    _audit_sink = sink


# ============================================================================
# Audit Service
# ============================================================================


class AuditService:
    """Publishes audited domain events to a sink."""

    def __init__(
        self,
        sink: AuditSink | None = None,
        enabled: bool = True,
        request_id: str | None = None,
    ) -> None:
        """Initialize service.

        Args:
            sink: Audit sink, defaults to the process-wide sink.
            enabled: When False, publish() does nothing.
            request_id: Request ID for correlation.
        """
        self.sink = sink or get_audit_sink()
        self.enabled = enabled
        self.request_id = request_id

    async def publish(self, events: Iterable[DomainEvent], actor_id: str | None = None) -> int:
        """Record one audit entry per audited event.

        Args:
            events: Events of a committed command.
            actor_id: Who performed the command, if known.

        Returns:
            Number of entries the sink accepted.
        """
        if not self.enabled:
            return 0

        recorded = 0
        for event in events:
            action = _AUDITED_EVENTS.get(type(event))
            if action is None:
                continue
            try:
                await self.sink.record(action, actor_id, event.to_dict())
                recorded += 1
            except Exception as e:
                logger.error(
                    "Audit sink failed",
                    action=action.value,
                    aggregate_id=event.aggregate_id,
                    error=str(e),
                    request_id=self.request_id,
                )
        return recorded
