# app/services/notification/notification_service.py
"""
Notification fan-out for appointment events.

Best-effort, at-most-once: an event goes to whoever is subscribed at the
moment it is published. Nothing is persisted or replayed, and a failing
subscriber never breaks the publisher or the other subscribers.

Two transports:
- LocalBroadcaster: in-process subscribers (single worker, tests)
- RedisBroadcaster: Redis pub/sub channel relayed to local subscribers,
  so every worker's dashboards see every event
"""
import itertools
import json
import logging
import threading
import time
from typing import Any, Callable, Dict, Optional

import redis

from app.config.settings import Settings

logger = logging.getLogger(__name__)

APPOINTMENT_BOOKED = "appointment.booked"
APPOINTMENT_CANCELLED = "appointment.cancelled"
APPOINTMENT_CONFIRMED = "appointment.confirmed"

EVENT_TYPES = (APPOINTMENT_BOOKED, APPOINTMENT_CANCELLED, APPOINTMENT_CONFIRMED)

Subscriber = Callable[[Dict[str, Any]], None]


def build_event(event_type: str, payload: dict) -> Dict[str, Any]:
    return {
        "type": event_type,
        "payload": payload,
        "ts": int(time.time()),
    }


class LocalBroadcaster:
    """Thread-safe in-process publish/subscribe hub"""

    def __init__(self):
        self._subscribers: Dict[int, Subscriber] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    # ── Lifecycle ───────────────────────────────────────────────────────

    def start(self) -> None:
        logger.info(f"{type(self).__name__} started")

    def close(self) -> None:
        with self._lock:
            self._subscribers.clear()
        logger.info(f"{type(self).__name__} closed")

    def is_healthy(self) -> bool:
        return True

    # ── Subscriptions ───────────────────────────────────────────────────

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a listener.

        Returns:
            A function that removes the listener again.
        """
        with self._lock:
            subscriber_id = next(self._ids)
            self._subscribers[subscriber_id] = callback

        def unsubscribe() -> None:
            with self._lock:
                self._subscribers.pop(subscriber_id, None)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    # ── Publishing ──────────────────────────────────────────────────────

    def publish(self, event_type: str, payload: dict) -> None:
        event = build_event(event_type, payload)
        self._deliver(event)
        logger.info(f"Event published: {event_type}")

    def _deliver(self, event: Dict[str, Any]) -> int:
        """Hand the event to every current subscriber; returns how many accepted it"""
        with self._lock:
            targets = list(self._subscribers.values())

        delivered = 0
        for callback in targets:
            try:
                callback(event)
                delivered += 1
            except Exception as e:
                logger.warning(f"Subscriber failed for {event.get('type')}: {e}")
        return delivered


class RedisBroadcaster(LocalBroadcaster):
    """Publishes to a Redis channel and relays that channel to local subscribers"""

    def __init__(self, redis_client: redis.Redis, channel: str):
        super().__init__()
        self.redis = redis_client
        self.channel = channel
        self._pubsub = None
        self._relay_thread = None

    def start(self) -> None:
        self._pubsub = self.redis.pubsub(ignore_subscribe_messages=True)
        self._pubsub.subscribe(**{self.channel: self._on_message})
        self._relay_thread = self._pubsub.run_in_thread(sleep_time=0.01, daemon=True)
        logger.info(f"RedisBroadcaster relaying channel {self.channel}")

    def close(self) -> None:
        if self._relay_thread is not None:
            self._relay_thread.stop()
            self._relay_thread = None
        if self._pubsub is not None:
            self._pubsub.close()
            self._pubsub = None
        super().close()

    def is_healthy(self) -> bool:
        try:
            return bool(self.redis.ping())
        except redis.RedisError as e:
            logger.warning(f"Redis ping failed: {e}")
            return False

    @property
    def relaying(self) -> bool:
        return self._relay_thread is not None

    def publish(self, event_type: str, payload: dict) -> None:
        event = build_event(event_type, payload)

        try:
            receivers = self.redis.publish(self.channel, json.dumps(event))
            logger.info(f"Event published: {event_type} → {self.channel} ({receivers} workers)")
        except redis.RedisError as e:
            logger.error(f"Failed to publish {event_type} to {self.channel}: {e}")
            # Still reach this worker's listeners
            if self.relaying:
                self._deliver(event)

        if not self.relaying:
            # No relay thread: our own message would never come back to us
            self._deliver(event)

    def _on_message(self, message: dict) -> None:
        data = message.get("data")
        if isinstance(data, bytes):
            data = data.decode()

        try:
            event = json.loads(data)
        except (TypeError, ValueError):
            logger.warning(f"Dropping malformed event on {self.channel}: {data!r}")
            return

        self._deliver(event)


def create_notifier(app_settings: Settings, redis_client: Optional[redis.Redis] = None) -> LocalBroadcaster:
    """Build the notifier selected by NOTIFICATION_BACKEND"""
    backend = app_settings.NOTIFICATION_BACKEND.lower()

    if backend == "memory":
        return LocalBroadcaster()

    if backend == "redis":
        if redis_client is None:
            from app.config.redis import get_redis
            redis_client = get_redis()
        return RedisBroadcaster(redis_client, app_settings.NOTIFICATION_CHANNEL)

    raise ValueError(f"Unknown notification backend: {app_settings.NOTIFICATION_BACKEND}")
