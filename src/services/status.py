"""Transient status notifications published through Redis."""

import json
import logging
import uuid
from datetime import UTC, datetime, timedelta

import redis

from src.config import get_settings
from src.schemas.notification import NotificationKind, StatusNotification

logger = logging.getLogger(__name__)
settings = get_settings()

# Synchronous Redis client shared by all reporters
_sync_redis: redis.Redis | None = None


def get_sync_redis() -> redis.Redis:
    """Get synchronous Redis client for publishing notifications."""
    global _sync_redis
    if _sync_redis is None:
        _sync_redis = redis.from_url(settings.redis_url)
    return _sync_redis


class StatusReporter:
    """Emits independent, self-expiring success/error notifications.

    Each notification is written to its own ``status:<collection>:<id>`` key
    with a TTL and published on the ``status:<collection>`` channel. Nothing
    is queued or merged, and Redis failures never reach the caller.
    """

    def __init__(self, collection: str, redis_client: redis.Redis | None = None):
        self.collection = collection
        self._redis = redis_client

    @property
    def channel(self) -> str:
        return f"status:{self.collection}"

    def _client(self) -> redis.Redis:
        return self._redis if self._redis is not None else get_sync_redis()

    def notify(
        self, kind: NotificationKind, message: str, ttl: int | None = None
    ) -> StatusNotification:
        """Build, log and publish a notification."""
        ttl = ttl if ttl is not None else settings.status_ttl_seconds
        now = datetime.now(UTC)
        notification = StatusNotification(
            id=uuid.uuid4().hex,
            kind=kind,
            message=message,
            ttl_seconds=ttl,
            created_at=now,
            expires_at=now + timedelta(seconds=ttl),
        )

        if kind == NotificationKind.ERROR:
            logger.error(f"[{self.collection}] {message}")
        else:
            logger.info(f"[{self.collection}] {message}")

        try:
            payload = notification.model_dump_json()
            client = self._client()
            client.setex(f"{self.channel}:{notification.id}", ttl, payload)
            client.publish(self.channel, payload)
            logger.debug(f"Published {kind} notification to {self.channel}")
        except Exception as e:
            # Don't fail the operation if pub/sub fails
            logger.error(f"Failed to publish status notification: {e}")

        return notification

    def success(self, message: str, ttl: int | None = None) -> StatusNotification:
        return self.notify(NotificationKind.SUCCESS, message, ttl)

    def error(self, message: str, ttl: int | None = None) -> StatusNotification:
        return self.notify(NotificationKind.ERROR, message, ttl)

    def active(self) -> list[StatusNotification]:
        """Notifications that have not expired yet, oldest first."""
        try:
            client = self._client()
            keys = list(client.scan_iter(match=f"{self.channel}:*"))
            payloads = client.mget(keys) if keys else []
        except Exception as e:
            logger.error(f"Failed to read status notifications: {e}")
            return []

        notifications = []
        for payload in payloads:
            if payload is None:
                continue
            try:
                notifications.append(StatusNotification.model_validate(json.loads(payload)))
            except ValueError:
                logger.warning(f"Invalid status notification payload: {payload!r}")
        return sorted(notifications, key=lambda n: n.created_at)
