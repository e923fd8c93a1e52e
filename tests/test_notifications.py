import asyncio
import json
from unittest.mock import MagicMock
from uuid import uuid4

import pytest
import redis
from fastapi import WebSocketDisconnect, status

from app.api.v1.notifications import stream_events
from app.config.settings import Settings
from app.models.provider import UserRole
from app.services.notification.notification_service import (
    APPOINTMENT_BOOKED,
    LocalBroadcaster,
    RedisBroadcaster,
    create_notifier,
)


def test_every_subscriber_receives_event():
    notifier = LocalBroadcaster()
    first, second = [], []
    notifier.subscribe(first.append)
    notifier.subscribe(second.append)

    notifier.publish(APPOINTMENT_BOOKED, {"id": "a1"})

    assert first == second
    assert first[0]["type"] == APPOINTMENT_BOOKED
    assert first[0]["payload"] == {"id": "a1"}
    assert isinstance(first[0]["ts"], int)


def test_failing_subscriber_does_not_block_others():
    notifier = LocalBroadcaster()
    received = []

    def broken(event):
        raise RuntimeError("listener went away")

    notifier.subscribe(broken)
    notifier.subscribe(received.append)

    notifier.publish(APPOINTMENT_BOOKED, {"id": "a1"})

    assert len(received) == 1


def test_unsubscribed_listener_gets_nothing():
    notifier = LocalBroadcaster()
    received = []
    unsubscribe = notifier.subscribe(received.append)
    assert notifier.subscriber_count == 1

    unsubscribe()
    notifier.publish(APPOINTMENT_BOOKED, {})

    assert received == []
    assert notifier.subscriber_count == 0


def test_redis_publish_without_relay_delivers_locally():
    client = MagicMock()
    notifier = RedisBroadcaster(client, "appointments:events")
    received = []
    notifier.subscribe(received.append)

    notifier.publish(APPOINTMENT_BOOKED, {"id": "a1"})

    channel, message = client.publish.call_args[0]
    assert channel == "appointments:events"
    assert json.loads(message)["payload"] == {"id": "a1"}
    assert len(received) == 1


def test_redis_relay_delivers_channel_messages():
    client = MagicMock()
    notifier = RedisBroadcaster(client, "appointments:events")
    notifier.start()
    received = []
    notifier.subscribe(received.append)

    notifier.publish(APPOINTMENT_BOOKED, {"id": "a1"})
    assert received == []

    message = client.publish.call_args[0][1]
    notifier._on_message({"type": "message", "data": message.encode()})
    notifier._on_message({"type": "message", "data": b"not json"})

    assert [event["payload"] for event in received] == [{"id": "a1"}]

    relay_thread = client.pubsub.return_value.run_in_thread.return_value
    notifier.close()
    relay_thread.stop.assert_called_once()
    assert not notifier.relaying


def test_redis_outage_still_reaches_local_listeners():
    client = MagicMock()
    client.publish.side_effect = redis.ConnectionError("down")
    client.ping.side_effect = redis.ConnectionError("down")
    notifier = RedisBroadcaster(client, "appointments:events")
    notifier.start()
    received = []
    notifier.subscribe(received.append)

    notifier.publish(APPOINTMENT_BOOKED, {"id": "a1"})

    assert len(received) == 1
    assert notifier.is_healthy() is False


def test_create_notifier_selects_backend():
    assert type(create_notifier(Settings(NOTIFICATION_BACKEND="memory"))) is LocalBroadcaster

    notifier = create_notifier(Settings(NOTIFICATION_BACKEND="redis"), redis_client=MagicMock())
    assert isinstance(notifier, RedisBroadcaster)

    with pytest.raises(ValueError):
        create_notifier(Settings(NOTIFICATION_BACKEND="carrier-pigeon"))


def test_websocket_streams_booking_events(client, auth, provider, service, slot, client_id):
    token = auth(provider.user_id, UserRole.PROVIDER)["Authorization"].split()[1]

    with client.websocket_connect(f"/api/v1/notifications/ws?token={token}") as websocket:
        response = client.post(
            "/api/v1/appointments",
            json={"providerId": str(provider.id), "serviceId": str(service.id), "slotId": str(slot.id)},
            headers=auth(client_id),
        )
        assert response.status_code == 201

        event = websocket.receive_json()

    assert event["type"] == "appointment.booked"
    assert event["payload"]["id"] == response.json()["id"]


def test_websocket_rejects_bad_token(client):
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect("/api/v1/notifications/ws?token=garbage") as websocket:
            websocket.receive_json()

    assert exc_info.value.code == status.WS_1008_POLICY_VIOLATION


def test_websocket_connection_subscribes_listener(client, auth, notifier):
    token = auth(uuid4())["Authorization"].split()[1]

    with client.websocket_connect(f"/api/v1/notifications/ws?token={token}"):
        assert notifier.subscriber_count == 1


class IdleWebSocket:
    """Connection that never sends anything and records what it is sent"""

    def __init__(self):
        self.sent = []
        self._closed = asyncio.Event()

    async def send_json(self, data):
        self.sent.append(data)

    async def receive_text(self):
        await self._closed.wait()
        raise WebSocketDisconnect(code=1000)

    def disconnect(self):
        self._closed.set()


def test_cancelled_stream_leaves_no_tasks_behind():
    async def scenario():
        websocket = IdleWebSocket()
        stream = asyncio.create_task(stream_events(websocket, asyncio.Queue(), "listener"))
        await asyncio.sleep(0.01)

        stream.cancel()
        with pytest.raises(asyncio.CancelledError):
            await stream

        return [task for task in asyncio.all_tasks() if task is not asyncio.current_task()]

    assert asyncio.run(scenario()) == []


def test_stream_forwards_events_until_disconnect():
    async def scenario():
        websocket = IdleWebSocket()
        queue = asyncio.Queue()
        stream = asyncio.create_task(stream_events(websocket, queue, "listener"))

        queue.put_nowait({"type": APPOINTMENT_BOOKED})
        await asyncio.sleep(0.01)
        websocket.disconnect()
        await asyncio.wait_for(stream, timeout=1)

        return websocket.sent

    assert asyncio.run(scenario()) == [{"type": APPOINTMENT_BOOKED}]
