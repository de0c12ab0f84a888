"""Shared fixtures for API tests."""

from collections.abc import Callable
from typing import Any

import pytest
from fastapi.testclient import TestClient

from catalog_api.infrastructure.config import settings
from catalog_api.main import app


@pytest.fixture
def client() -> TestClient:
    """Create test client without authentication."""
    return TestClient(app)


@pytest.fixture
def auth_client() -> TestClient:
    """Create test client with valid API key authentication."""
    return TestClient(
        app,
        headers={"Authorization": f"Bearer {settings.catalog_api_key}"},
    )


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Get authentication headers."""
    return {"Authorization": f"Bearer {settings.catalog_api_key}"}


# ============================================================================
# Resource Factories
# ============================================================================


@pytest.fixture
def create_category(auth_client: TestClient) -> Callable[..., dict[str, Any]]:
    """Factory creating a category over HTTP."""

    def _create(name: str = "Home") -> dict[str, Any]:
        response = auth_client.post("/categories", json={"name": name})
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def create_product(auth_client: TestClient) -> Callable[..., dict[str, Any]]:
    """Factory creating a product over HTTP."""

    def _create(
        category_id: str,
        name: str = "Lamp",
        price: str = "19.99",
        active: bool = True,
        description: str | None = None,
    ) -> dict[str, Any]:
        response = auth_client.post(
            "/products",
            json={
                "name": name,
                "description": description or f"{name} description",
                "price": price,
                "category_id": category_id,
                "active": active,
            },
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def create_tag(auth_client: TestClient) -> Callable[..., dict[str, Any]]:
    """Factory creating a tag over HTTP."""

    def _create(name: str = "sale") -> dict[str, Any]:
        response = auth_client.post("/tags", json={"name": name})
        assert response.status_code == 201, response.text
        return response.json()

    return _create
