"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- In-memory user store
- Application settings and test client setup
"""

from collections.abc import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.adapters.repository.memory import InMemoryUserRepository
from src.api.main import create_app
from src.config.settings import Settings


@pytest.fixture
def repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def settings() -> Settings:
    """Settings for an app backed by the in-memory store, CSRF off."""
    return Settings(
        _env_file=None,
        user_store="memory",
        mail_transport="console",
        csrf_enabled=False,
        bcrypt_cost=4,
        session_secret="test-secret",
        public_base_url="http://testserver",
    )


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """Test client with lifespan run, so app.state is populated."""
    with TestClient(app) as test_client:
        yield test_client
