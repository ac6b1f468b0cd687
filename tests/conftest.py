"""Shared pytest fixtures for the user API tests."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from main import create_app
from users.memory import InMemoryUserStore
from users.service import UserService


@pytest.fixture
def store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture
def service(store: InMemoryUserStore) -> UserService:
    return UserService(store)


@pytest.fixture
def client(store: InMemoryUserStore) -> TestClient:
    with TestClient(create_app(store=store)) as test_client:
        yield test_client
