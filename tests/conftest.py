"""
Pytest configuration and shared fixtures for the puzzle room relay.
"""

import json

import pytest
from fastapi.testclient import TestClient

from app import create_app
from backend import RoomRegistry
from broadcast import BroadcastDispatcher
from message_router import MessageRouter


class FakeConnection:
    """Stands in for a ConnectionHandle; records every frame it accepts."""

    def __init__(self, name="conn", is_open=True, fail=False):
        self.name = name
        self.is_open = is_open
        self.fail = fail
        self.raw = []

    def __repr__(self):
        return f"<FakeConnection {self.name}>"

    def send(self, payload):
        if self.fail:
            raise RuntimeError("transport exploded")
        self.raw.append(payload)
        return True

    @property
    def sent(self):
        return [json.loads(payload) for payload in self.raw]

    def of_type(self, message_type):
        return [m for m in self.sent if m["type"] == message_type]

    def last(self):
        return self.sent[-1]

    def clear(self):
        self.raw = []


def join_frame(room_id="r1", player_id="a1", player_name="Alice"):
    frame = {"type": "join", "playerId": player_id, "playerName": player_name}
    if room_id is not None:
        frame["roomId"] = room_id
    return json.dumps(frame)


@pytest.fixture
def registry():
    return RoomRegistry()


@pytest.fixture
def dispatcher():
    return BroadcastDispatcher()


@pytest.fixture
def make_router(registry, dispatcher):
    def factory(name="conn"):
        connection = FakeConnection(name)
        return connection, MessageRouter(connection, registry, dispatcher)
    return factory


@pytest.fixture
def client():
    with TestClient(create_app()) as test_client:
        yield test_client
