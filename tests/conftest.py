"""Pytest configuration and global fixtures for TaskSync tests.

This file provides test fixtures that are automatically available to all tests.
"""

import pytest
from fastapi.testclient import TestClient

from tasksync.api import create_app
from tasksync.c1_database_session import DatabaseManager
from tasksync.c2_identity_service import IdentityService, TokenIssuer
from tasksync.c2_task_repository import TaskRepository
from tasksync.c2_task_service import TaskService
from tasksync.core.config import AuthConfig, DatabaseConfig, Settings
from tests.fixtures.fakes import FakeHub

TEST_SECRET = "test-secret-key-for-unit-tests"


@pytest.fixture
def db_manager():
    """Fresh in-memory database with all tables created."""
    manager = DatabaseManager(":memory:")
    manager.create_tables()
    yield manager
    manager.drop_tables()
    manager.dispose()


@pytest.fixture
def token_issuer():
    return TokenIssuer(secret=TEST_SECRET)


@pytest.fixture
def identity_service(db_manager, token_issuer):
    # Low bcrypt cost keeps the suite fast
    return IdentityService(db_manager, token_issuer, bcrypt_rounds=4)


@pytest.fixture
def make_user(identity_service):
    """Factory registering a user and returning its id.

    Usage:
        def test_something(make_user):
            alice = make_user("alice")
    """
    def _make_user(handle: str) -> str:
        user, _ = identity_service.register(f"{handle}@example.com", "Password123!", handle.title())
        return user["id"]

    return _make_user


@pytest.fixture
def fake_hub():
    return FakeHub()


@pytest.fixture
def task_repository(db_manager):
    return TaskRepository(db_manager)


@pytest.fixture
def task_service(task_repository, fake_hub):
    return TaskService(task_repository, fake_hub)


@pytest.fixture
def settings():
    """Settings pointing at an in-memory database."""
    return Settings(
        database=DatabaseConfig(database_path=":memory:"),
        auth=AuthConfig(jwt_secret=TEST_SECRET, bcrypt_rounds=4),
        log_level="DEBUG",
    )


@pytest.fixture
def client(settings):
    """TestClient with the application lifespan running."""
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register(client):
    """Factory registering a user over HTTP; returns (user, auth headers, token)."""
    def _register(handle: str, name: str = None):
        response = client.post(
            "/api/auth/register",
            json={"email": f"{handle}@example.com", "password": "Password123!", "name": name or handle.title()},
        )
        assert response.status_code == 201, response.text
        data = response.json()
        return data["user"], {"Authorization": f"Bearer {data['token']}"}, data["token"]

    return _register
