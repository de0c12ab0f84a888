"""Shared fixtures for all tests."""

from collections.abc import Generator

import pytest

from catalog_api.application.audit_service import InMemoryAuditSink, set_audit_sink
from catalog_api.catalog.repository import (
    InMemoryCatalogRepository,
    get_catalog_store,
    reset_catalog_store,
)


@pytest.fixture(autouse=True)
def clean_catalog() -> Generator[None, None, None]:
    """Start every test with an empty catalog and the default audit sink."""
    reset_catalog_store()
    set_audit_sink(None)
    yield
    reset_catalog_store()
    set_audit_sink(None)


@pytest.fixture
def audit_sink() -> InMemoryAuditSink:
    """Capture audit entries in memory."""
    sink = InMemoryAuditSink()
    set_audit_sink(sink)
    return sink


@pytest.fixture
def repository() -> InMemoryCatalogRepository:
    """In-memory repository over the shared test store."""
    return InMemoryCatalogRepository(get_catalog_store())
