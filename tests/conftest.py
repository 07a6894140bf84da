"""Shared fixtures for planty tests."""

import socket
import threading
import time
from datetime import date

import pytest
import uvicorn
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from planty.core.db import create_db_engine
from planty.core.security import CredentialManager
from planty.core.store import PlantStore
from planty.main import create_app
from planty.models.plant import PlantCreate
from planty.tools.dispatcher import ToolDispatcher

TODAY = date(2025, 6, 15)


@pytest.fixture
def engine():
    """In-memory sqlite shared by every session of a test."""
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    store = PlantStore(engine)
    store.init_db()
    return store


@pytest.fixture
def credentials(store):
    return CredentialManager(store, secret_key="test-secret")


@pytest.fixture
def user_id(store):
    return store.create_user("alice@example.com")


@pytest.fixture
def other_user_id(store):
    return store.create_user("bob@example.com")


@pytest.fixture
def make_plant(store):
    """Factory adding a plant with sensible defaults."""
    def _make_plant(owner: str, **overrides):
        fields = {
            "name": "Monstera",
            "species": "Monstera deliciosa",
            "location": "Living Room",
            "acquired_date": date(2025, 1, 1),
            "watering_frequency": 7,
            "notes": "Bright indirect light",
        }
        fields.update(overrides)
        return store.add_plant(owner, PlantCreate(**fields))
    return _make_plant


@pytest.fixture
def dispatcher(store, user_id):
    return ToolDispatcher(store, user_id, today=lambda: TODAY)


@pytest.fixture
def app(store):
    return create_app(store=store)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def api_key(app):
    """A freshly issued key through the app's own credential manager."""
    return app.state.credentials.create_identity().api_key


@pytest.fixture
def auth_headers(api_key):
    return {"Authorization": f"Bearer {api_key}"}


@pytest.fixture
def live_server(app):
    """The app served by uvicorn on a free local port, for event stream tests."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    sock.bind(("127.0.0.1", 0))
    host, port = sock.getsockname()

    config = uvicorn.Config(app, log_level="warning", timeout_graceful_shutdown=1)
    server = uvicorn.Server(config)
    thread = threading.Thread(target=server.run, kwargs={"sockets": [sock]}, daemon=True)
    thread.start()

    deadline = time.monotonic() + 10
    while not server.started:
        if time.monotonic() > deadline:
            raise RuntimeError("uvicorn did not start")
        time.sleep(0.01)

    yield f"http://{host}:{port}"

    server.should_exit = True
    thread.join(timeout=10)
    sock.close()
