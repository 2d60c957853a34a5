"""Tests for the viewer WebSocket gateway."""

import asyncio
import random
from types import SimpleNamespace
from unittest.mock import Mock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.models.arena_config import GatewayConfig
from src.api.routers import debate, viewer_gateway
from src.api.routers.viewer_gateway import ViewerConnection
from src.api.services.arena_bootstrap import build_orchestrator


def _client(config) -> tuple[TestClient, object]:
    app = FastAPI()
    app.include_router(debate.router)
    app.include_router(viewer_gateway.router)
    # Built outside any event loop; TestClient drives it on its own loop
    app.state.orchestrator = build_orchestrator(config, rng=random.Random(0), call_logger=Mock())
    return TestClient(app), app.state.orchestrator


def _receive_until(websocket, event_type, limit=500):
    for _ in range(limit):
        payload = websocket.receive_json()
        if payload["type"] == event_type:
            return payload
    raise AssertionError(f"no {event_type} event within {limit} messages")


def test_viewer_receives_snapshot_first(sample_arena_config):
    client, orchestrator = _client(sample_arena_config)

    with client:
        with client.websocket_connect("/ws") as websocket:
            first = websocket.receive_json()
            assert orchestrator.publisher.subscriber_count == 1

    assert first["type"] == "initial_state"
    assert first["debate"]["status"] == "stopped"
    assert first["debate"]["topic"] == "Is AI good for jobs?"
    assert orchestrator.publisher.subscriber_count == 0


def test_viewer_follows_live_debate_and_chat(sample_arena_config):
    client, orchestrator = _client(sample_arena_config)

    with client:
        with client.websocket_connect("/ws") as websocket:
            assert websocket.receive_json()["type"] == "initial_state"

            response = client.post("/api/debate/start")
            assert response.status_code == 200
            assert response.json()["success"] is True

            update = websocket.receive_json()
            assert update["type"] == "debate_update"
            assert update["debate"]["is_live"] is True

            message = _receive_until(websocket, "new_message")
            assert message["message"]["speaker"] in {"alex", "luna", "rex", "sage"}

            websocket.send_json({"type": "chat", "message": "Who is winning?"})
            reply = _receive_until(websocket, "ai_chat_response")
            assert reply["message"]["text"].startswith("@Chat: ")
            assert reply["message"]["reply_to"] == "Who is winning?"

            stop = client.post("/api/debate/stop")
            assert stop.json()["status"] == "stopped"
            _receive_until(websocket, "debate_stopped")


def test_rest_surface(sample_arena_config):
    client, _ = _client(sample_arena_config)

    with client:
        snapshot = client.get("/api/debate")
        rejected = client.post("/api/chat", json={"message": "hello"})
        stopped = client.post("/api/debate/stop")

    assert snapshot.status_code == 200
    assert snapshot.json()["is_live"] is False
    assert rejected.status_code == 400
    assert stopped.json()["message"] == "Debate already stopped"


def test_quiet_socket_gets_pings(sample_arena_config):
    config = sample_arena_config.model_copy(
        update={"gateway": GatewayConfig(ping_interval_seconds=0.05, idle_timeout_seconds=5.0)}
    )
    client, orchestrator = _client(config)

    with client:
        with client.websocket_connect("/ws") as websocket:
            assert websocket.receive_json()["type"] == "initial_state"
            ping = websocket.receive_json()
            websocket.send_json({"type": "pong"})

    assert ping["type"] == "ping"
    assert orchestrator.publisher.subscriber_count == 0


class _FakeSocket:
    def __init__(self):
        self.sent = []
        self.closed_with = None

    async def send_json(self, payload):
        self.sent.append(payload)

    async def close(self, code=1000, reason=None):
        self.closed_with = (code, reason)

    def types(self):
        return [payload["type"] for payload in self.sent]


def _connection(socket, *, ping_interval, idle_timeout):
    gateway = GatewayConfig(ping_interval_seconds=ping_interval, idle_timeout_seconds=idle_timeout)
    orchestrator = SimpleNamespace(config=SimpleNamespace(gateway=gateway))
    connection = ViewerConnection(socket, orchestrator)
    connection.subscriber_id = "viewer-1"
    return connection


async def _feed_timer_updates(connection):
    while True:
        connection.subscriber.deliver({"type": "timer_update", "timer": 1})
        await asyncio.sleep(0.01)


@pytest.mark.asyncio
async def test_busy_stream_still_pings_and_closes_silent_viewer():
    socket = _FakeSocket()
    connection = _connection(socket, ping_interval=0.05, idle_timeout=0.2)
    feeder = asyncio.create_task(_feed_timer_updates(connection))
    try:
        await asyncio.wait_for(connection.write_loop(), timeout=2.0)
    finally:
        feeder.cancel()

    assert "timer_update" in socket.types()
    assert "ping" in socket.types()
    assert socket.closed_with == (1000, "idle timeout")


@pytest.mark.asyncio
async def test_answering_viewer_stays_connected():
    socket = _FakeSocket()
    connection = _connection(socket, ping_interval=0.05, idle_timeout=0.15)

    async def answer_pings():
        while True:
            await asyncio.sleep(0.02)
            connection.touch()

    feeder = asyncio.create_task(_feed_timer_updates(connection))
    answerer = asyncio.create_task(answer_pings())
    try:
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(connection.write_loop(), timeout=0.4)
    finally:
        feeder.cancel()
        answerer.cancel()

    assert socket.closed_with is None
    assert socket.types().count("ping") >= 3


@pytest.mark.asyncio
async def test_viewer_behind_the_broadcast_is_drained_then_closed():
    socket = _FakeSocket()
    connection = _connection(socket, ping_interval=5.0, idle_timeout=60.0)
    connection.subscriber.deliver({"type": "timer_update", "timer": 2})
    connection.subscriber.deliver({"type": "timer_update", "timer": 1})
    connection.subscriber.close()

    await asyncio.wait_for(connection.write_loop(), timeout=1.0)

    assert [payload["timer"] for payload in socket.sent] == [2, 1]
    assert socket.closed_with == (1000, "fell behind")
