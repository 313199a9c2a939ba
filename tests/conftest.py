"""Shared fixtures for the relay tests."""
import random
from datetime import datetime, timezone

import pytest

from backend.minenav.realtime.registry import SessionRegistry
from backend.minenav.realtime.router import EventRouter
from backend.minenav.rooms.store import InMemoryRoomRepository
from backend.minenav.server import create_app
from helpers import FakeClock, SequenceRandom


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc))


@pytest.fixture
def rooms(clock):
    return InMemoryRoomRepository(clock=clock, rng=random.Random(42))


@pytest.fixture
def registry(rooms):
    return SessionRegistry(rooms)


@pytest.fixture
def router(rooms, registry, clock):
    return EventRouter(rooms, registry, clock=clock)


@pytest.fixture
def app_config(tmp_path):
    return {
        "TESTING": True,
        "SOCKETIO_ASYNC_MODE": "threading",
        "TRUST_PROXY_HEADERS": False,
        "DATA_DIR": str(tmp_path / "data"),
        "PUBLIC_DIR": str(tmp_path / "public"),
    }


@pytest.fixture
def server(app_config):
    """(app, socketio, rooms) with the first allocated room code fixed to 4821."""
    repo = InMemoryRoomRepository(rng=SequenceRandom(4821))
    app, socketio = create_app(app_config, rooms=repo)
    return app, socketio, repo


@pytest.fixture
def sio_clients(server):
    app, socketio, _ = server
    clients = []

    def connect():
        client = socketio.test_client(app)
        clients.append(client)
        return client

    yield connect

    for client in clients:
        if client.is_connected():
            client.disconnect()


@pytest.fixture
def http(server):
    app, _, _ = server
    return app.test_client()
