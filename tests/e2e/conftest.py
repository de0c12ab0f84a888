"""Shared fixtures for E2E tests.

These fixtures drive the full application over HTTP against the
in-memory catalog store.
"""

import pytest
from fastapi.testclient import TestClient

from catalog_api.infrastructure.config import settings
from catalog_api.main import app


# ============================================================================
# Client Fixtures
# ============================================================================


@pytest.fixture
def client() -> TestClient:
    """Create test client without authentication."""
    return TestClient(app)


@pytest.fixture
def auth_client() -> TestClient:
    """Create test client with valid API key authentication."""
    return TestClient(
        app,
        headers={
            "Authorization": f"Bearer {settings.catalog_api_key}",
            "X-Request-ID": "e2e-test-request",
            "X-Actor-ID": "e2e-test-user",
        },
    )
