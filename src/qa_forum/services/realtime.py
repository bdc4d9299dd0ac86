"""Best-effort real-time push of notification hints over Redis pub/sub.

A published event is only a hint that something new is stored; clients
that miss it still find the notification on their next fetch.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from threading import Lock
from typing import Any

import redis

from qa_forum.core.settings import settings

logger = logging.getLogger(__name__)


class RealtimePublisher:
    """Publishes per-account events on ``<prefix>:<account_id>`` channels."""

    def __init__(
        self,
        *,
        enabled: bool | None = None,
        redis_url: str | None = None,
        channel_prefix: str | None = None,
    ) -> None:
        self.enabled = settings.realtime_enabled if enabled is None else enabled
        self._redis_url = redis_url or settings.redis_url
        self._channel_prefix = channel_prefix or settings.realtime_channel_prefix
        self._client: redis.Redis | None = None
        self._client_lock = Lock()

    def channel_for(self, account_id: int) -> str:
        """Return the pub/sub channel name of an account."""
        return f"{self._channel_prefix}:{account_id}"

    def _ensure_client(self) -> redis.Redis:
        with self._client_lock:
            if self._client is None:
                self._client = redis.Redis.from_url(self._redis_url)
        return self._client

    def publish(self, account_id: int, event: Mapping[str, Any]) -> bool:
        """Publish ``event`` to an account's channel.

        Returns:
            True if the event was handed to Redis, False if publishing is
            disabled or failed. Failures are logged, never raised.
        """
        if not self.enabled:
            return False

        try:
            client = self._ensure_client()
            client.publish(self.channel_for(account_id), json.dumps(dict(event), default=str))
        except (redis.RedisError, OSError) as exc:
            logger.warning("Real-time publish to account %s failed: %s", account_id, exc)
            return False
        return True

    def close(self) -> None:
        """Release the underlying connection pool."""
        with self._client_lock:
            if self._client is not None:
                self._client.close()
                self._client = None


class _RealtimePublisherSingleton:
    """Singleton wrapper for RealtimePublisher."""

    _instance: RealtimePublisher | None = None

    @classmethod
    def get_instance(cls) -> RealtimePublisher:
        """Get or create the singleton RealtimePublisher instance."""
        if cls._instance is None:
            cls._instance = RealtimePublisher()
        return cls._instance


def get_realtime_publisher() -> RealtimePublisher:
    """Return the process-wide real-time publisher."""
    return _RealtimePublisherSingleton.get_instance()
