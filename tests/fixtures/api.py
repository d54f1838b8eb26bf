"""FastAPI application and test client fixtures."""

from collections.abc import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.userauth.api.http.app import create_app
from src.userauth.api.http.app_data import build_dependencies
from src.userauth.core.storage.user_store import InMemoryUserStore

API = "/api/users"


@pytest.fixture
def api_store() -> InMemoryUserStore:
    """Store behind the test application; tests inspect it directly."""
    return InMemoryUserStore()


@pytest.fixture
def test_app(app_config, api_store: InMemoryUserStore) -> FastAPI:
    app = create_app()
    app.state.app_dependencies = build_dependencies(store=api_store)
    return app


@pytest.fixture
def client(test_app: FastAPI) -> Generator[TestClient]:
    with TestClient(test_app) as test_client:
        yield test_client
