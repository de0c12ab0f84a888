"""Application layer module.

Contains application services (use cases) that orchestrate
domain logic and infrastructure.
"""

from catalog_api.application.audit_service import (
    AuditAction,
    AuditService,
    AuditSink,
    InMemoryAuditSink,
    LoggingAuditSink,
    get_audit_sink,
    set_audit_sink,
)
from catalog_api.application.category_service import CategoryService
from catalog_api.application.product_service import ProductService
from catalog_api.application.results import ServiceResult
from catalog_api.application.tag_service import TagService

__all__ = [
    "AuditAction",
    "AuditService",
    "AuditSink",
    "InMemoryAuditSink",
    "LoggingAuditSink",
    "get_audit_sink",
    "set_audit_sink",
    "CategoryService",
    "ProductService",
    "TagService",
    "ServiceResult",
]
