"""HTTP-level tests: routes, status mapping and error bodies."""

from __future__ import annotations

import asyncio

import pytest
from fastapi.testclient import TestClient

from main import create_app
from users.errors import Backend
from users.memory import InMemoryUserStore
from users.schemas import User


def _create(client: TestClient, name: str, email: str) -> dict:
    response = client.post("/users", json={"name": name, "email": email})
    assert response.status_code == 201
    return response.json()


class TestHealthAndDocs:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_unknown_route(self, client: TestClient) -> None:
        response = client.get("/nope")
        assert response.status_code == 404
        assert response.json() == {"error": "Route not found"}

    def test_openapi_document(self, client: TestClient) -> None:
        response = client.get("/api-doc/openapi.json")
        assert response.status_code == 200
        doc = response.json()
        assert doc["info"]["title"] == "User API"
        assert set(doc["paths"]) >= {"/users", "/users/{user_id}", "/health"}
        assert "409" in doc["paths"]["/users"]["post"]["responses"]
        assert set(doc["paths"]["/users/{user_id}"]) >= {"get", "patch", "delete"}

    def test_swagger_ui(self, client: TestClient) -> None:
        response = client.get("/docs")
        assert response.status_code == 200
        assert "swagger" in response.text.lower()


class TestCreate:
    def test_created(self, client: TestClient) -> None:
        response = client.post("/users", json={"name": "Charlie", "email": "charlie@example.com"})
        assert response.status_code == 201
        assert response.json() == {"id": 1, "name": "Charlie", "email": "charlie@example.com"}

    def test_missing_name_is_400(self, client: TestClient) -> None:
        response = client.post("/users", json={"email": "charlie@example.com"})
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation"
        assert body["field"] == "name"
        assert body["rule"] == "required"

    def test_bad_email_is_400(self, client: TestClient) -> None:
        response = client.post("/users", json={"name": "C", "email": "not-an-email"})
        assert response.status_code == 400
        assert response.json()["field"] == "email"

    def test_duplicate_email_is_409(self, client: TestClient) -> None:
        _create(client, "Alice", "alice@example.com")
        response = client.post("/users", json={"name": "Alice 2", "email": "alice@example.com"})
        assert response.status_code == 409
        assert response.json() == {
            "error": "conflict",
            "field": "email",
            "detail": "A user with this email already exists.",
        }
        assert len(client.get("/users").json()) == 1

    def test_long_values_accepted(self, client: TestClient) -> None:
        name = "a" * 1000
        email = "b" * 400 + "@example.com"
        response = client.post("/users", json={"name": name, "email": email})
        assert response.status_code == 201
        assert response.json()["name"] == name
        assert response.json()["email"] == email

    def test_malformed_body_rejected_before_core(self, client: TestClient) -> None:
        response = client.post(
            "/users",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 422


class TestRead:
    def test_list_in_id_order(self, client: TestClient) -> None:
        for name in ("A", "B", "C"):
            _create(client, name, f"{name.lower()}@x.io")
        response = client.get("/users")
        assert response.status_code == 200
        assert [u["id"] for u in response.json()] == [1, 2, 3]

    def test_list_empty(self, client: TestClient) -> None:
        assert client.get("/users").json() == []

    def test_get(self, client: TestClient) -> None:
        created = _create(client, "Alice", "alice@example.com")
        response = client.get(f"/users/{created['id']}")
        assert response.status_code == 200
        assert response.json() == created

    def test_get_not_found(self, client: TestClient) -> None:
        response = client.get("/users/999")
        assert response.status_code == 404
        assert response.json() == {"error": "not_found", "id": 999, "detail": "User 999 not found."}

    def test_huge_id_not_found(self, client: TestClient) -> None:
        response = client.get(f"/users/{2**70}")
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_non_integer_id(self, client: TestClient) -> None:
        assert client.get("/users/abc").status_code == 422


class TestUpdate:
    def test_patch_name_only(self, client: TestClient) -> None:
        created = _create(client, "Alice", "alice@example.com")
        response = client.patch(f"/users/{created['id']}", json={"name": "X"})
        assert response.status_code == 200
        assert response.json() == {"id": created["id"], "name": "X", "email": "alice@example.com"}

    def test_patch_not_found(self, client: TestClient) -> None:
        assert client.patch("/users/5", json={"name": "X"}).status_code == 404

    def test_patch_invalid(self, client: TestClient) -> None:
        created = _create(client, "Alice", "alice@example.com")
        response = client.patch(f"/users/{created['id']}", json={"name": ""})
        assert response.status_code == 400
        assert response.json()["rule"] == "blank"

    def test_patch_explicit_null(self, client: TestClient) -> None:
        created = _create(client, "Alice", "alice@example.com")
        response = client.patch(f"/users/{created['id']}", json={"email": None})
        assert response.status_code == 400
        assert response.json()["rule"] == "null"

    def test_patch_conflict(self, client: TestClient) -> None:
        _create(client, "Alice", "alice@example.com")
        bob = _create(client, "Bob", "bob@example.com")
        response = client.patch(f"/users/{bob['id']}", json={"email": "alice@example.com"})
        assert response.status_code == 409

    def test_patch_empty_body(self, client: TestClient) -> None:
        created = _create(client, "Alice", "alice@example.com")
        response = client.patch(f"/users/{created['id']}", json={})
        assert response.status_code == 200
        assert response.json() == created


class TestDelete:
    def test_delete(self, client: TestClient) -> None:
        created = _create(client, "Alice", "alice@example.com")
        response = client.delete(f"/users/{created['id']}")
        assert response.status_code == 204
        assert response.content == b""
        assert client.get(f"/users/{created['id']}").status_code == 404

    def test_delete_not_found(self, client: TestClient) -> None:
        assert client.delete("/users/3").status_code == 404


class _FailingStore(InMemoryUserStore):
    async def list_all(self) -> list[User]:
        raise Backend(RuntimeError("password authentication failed for user app"))


class _SlowStore(InMemoryUserStore):
    async def list_all(self) -> list[User]:
        await asyncio.sleep(2)
        return []


class TestMiddleware:
    def test_backend_error_is_generic_500(self) -> None:
        with TestClient(create_app(store=_FailingStore())) as client:
            response = client.get("/users")
        assert response.status_code == 500
        assert response.json() == {"error": "backend", "detail": "Internal server error."}
        assert "password" not in response.text

    def test_request_timeout(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REQUEST_TIMEOUT_S", "0.05")
        with TestClient(create_app(store=_SlowStore())) as client:
            response = client.get("/users")
            assert response.status_code == 408
            assert response.json()["error"] == "timeout"
            assert client.get("/health").status_code == 200

    def test_cors_headers(self, client: TestClient) -> None:
        response = client.get("/health", headers={"Origin": "http://localhost:5173"})
        assert response.headers["access-control-allow-origin"] == "*"
