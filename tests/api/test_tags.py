"""Tests for tag endpoints."""

from fastapi.testclient import TestClient

UNKNOWN_ID = "00000000-0000-0000-0000-000000000001"


class TestTagEndpoints:
    """Tests for /tags."""

    def test_create_get_and_list(self, auth_client: TestClient, create_tag) -> None:
        """Tags are created unassigned and listed by name."""
        sale = create_tag("sale")
        create_tag("new")

        fetched = auth_client.get(f"/tags/{sale['id']}")
        listed = auth_client.get("/tags")

        assert sale["product_id"] is None
        assert fetched.json()["name"] == "sale"
        assert [t["name"] for t in listed.json()["items"]] == ["new", "sale"]

    def test_overlong_name_is_bad_request(self, auth_client: TestClient) -> None:
        """Names longer than 100 characters are rejected."""
        response = auth_client.post("/tags", json={"name": "t" * 101})

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_ARGUMENT"

    def test_rename(self, auth_client: TestClient, create_tag) -> None:
        """Renaming returns the updated tag."""
        sale = create_tag("sale")

        response = auth_client.patch(f"/tags/{sale['id']}/name", json={"name": "clearance"})

        assert response.status_code == 200
        assert response.json()["name"] == "clearance"

    def test_assign_to_product(
        self, auth_client: TestClient, create_category, create_product, create_tag
    ) -> None:
        """Assigning a tag moves it between products."""
        home = create_category()
        lamp = create_product(home["id"], "Lamp")
        chair = create_product(home["id"], "Chair")
        sale = create_tag("sale")

        auth_client.patch(f"/tags/{sale['id']}/product/{lamp['id']}")
        response = auth_client.patch(f"/tags/{sale['id']}/product/{chair['id']}")

        assert response.status_code == 200
        assert response.json()["product_id"] == chair["id"]
        assert auth_client.get(f"/products/{lamp['id']}").json()["tag_ids"] == []
        assert auth_client.get(f"/products/{chair['id']}").json()["tag_ids"] == [sale["id"]]

    def test_assign_to_unknown_product(self, auth_client: TestClient, create_tag) -> None:
        """Unknown products are 404."""
        sale = create_tag("sale")

        response = auth_client.patch(f"/tags/{sale['id']}/product/{UNKNOWN_ID}")

        assert response.status_code == 404

    def test_delete_and_restore(self, auth_client: TestClient, create_tag) -> None:
        """Deleted tags are hidden until restored."""
        sale = create_tag("sale")

        deleted = auth_client.delete(f"/tags/{sale['id']}")
        assert deleted.status_code == 200
        assert auth_client.get(f"/tags/{sale['id']}").status_code == 404
        assert auth_client.get("/tags?include_deleted=true").json()["total"] == 1

        restored = auth_client.patch(f"/tags/{sale['id']}/restore")
        assert restored.status_code == 200
        assert auth_client.get(f"/tags/{sale['id']}").status_code == 200
