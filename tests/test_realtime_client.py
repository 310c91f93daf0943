"""End-to-end tests for the SDK realtime client against a live server."""

import socket
import threading
import time
import uuid

import pytest
import uvicorn

from tasksync.api import create_app
from tasksync.core.config import AuthConfig, DatabaseConfig, Settings
from tasksync.sdk import (
    EventDispatcher,
    RealtimeClient,
    RealtimeConnectionError,
    ReconciliationStore,
    TaskSyncApiClient,
    live_session,
)


def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def wait_for(predicate, timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return predicate()


@pytest.fixture(scope="module")
def base_url():
    """Base URL of a uvicorn server running the app on a background thread."""
    settings = Settings(
        database=DatabaseConfig(database_path=":memory:"),
        auth=AuthConfig(jwt_secret="realtime-client-secret", bcrypt_rounds=4),
        log_level="WARNING",
    )
    port = free_port()
    server = uvicorn.Server(uvicorn.Config(create_app(settings), host="127.0.0.1", port=port, log_level="warning"))
    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()
    assert wait_for(lambda: server.started, timeout=10), "server did not start"

    yield f"http://127.0.0.1:{port}"

    server.should_exit = True
    thread.join(timeout=10)


@pytest.fixture
def signup(base_url):
    """Factory returning a logged-in API client for a fresh user."""
    def _signup(handle: str):
        api = TaskSyncApiClient(base_url)
        user = api.register(f"{handle}-{uuid.uuid4().hex[:8]}@example.com", "Password123!", handle.title())
        return api, user

    return _signup


def test_store_follows_rest_mutations(signup):
    alice_api, _ = signup("alice")
    bob_api, bob = signup("bob")
    store = ReconciliationStore(current_user_id=bob["id"])

    with live_session(bob_api, store):
        task = alice_api.create_task("Review PR", assignedToId=bob["id"])

        assert wait_for(lambda: store.get(task["id"]) is not None and store.notifications)
        assert store.get(task["id"])["assignedToId"] == bob["id"]
        assert [n.task_id for n in store.notifications] == [task["id"]]

        alice_api.update_task(task["id"], {"status": "InProgress"})
        assert wait_for(lambda: store.get(task["id"])["status"] == "InProgress")

        alice_api.delete_task(task["id"])
        assert wait_for(lambda: store.get(task["id"]) is None)


def test_session_seeds_store_from_full_fetch(signup):
    api, user = signup("carol")
    existing = api.create_task("Already there")
    store = ReconciliationStore(current_user_id=user["id"])

    with live_session(api, store):
        assert store.get(existing["id"]) is not None


def test_closing_releases_channel_and_handlers(signup):
    api, user = signup("dave")
    dispatcher = EventDispatcher()
    store = ReconciliationStore(current_user_id=user["id"])

    with RealtimeClient(api.websocket_url(), dispatcher=dispatcher) as realtime:
        with store.bind(dispatcher):
            assert realtime.ping()
            assert realtime.connected

    assert not realtime.connected
    assert dispatcher.handler_count() == 0

    # Further mutations no longer reach the store
    api.create_task("After close")
    time.sleep(0.2)
    assert store.tasks == []


def test_refused_credential(base_url):
    client = RealtimeClient(base_url.replace("http", "ws", 1) + "/ws?token=garbage", open_timeout=5)

    with pytest.raises(RealtimeConnectionError):
        client.connect()

    assert not client.connected
