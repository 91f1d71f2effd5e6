"""Publisher port and its implementations.

*  ``IMessagePublisher``: "send this integration event to this destination".
*  ``RedisStreamsPublisher``: broker-backed.  Each exchange is a Redis
   Stream; every entry is self-describing (event type, JSON body, routing
   key, message id, timestamp) so consumer groups can route and dedupe.
*  ``NoOpPublisher``: used when no broker is configured.  Always succeeds
   and only logs; nothing is kept.

The Redis connection is opened once in ``start()`` and shared for the
process lifetime.  Publishes are serialized through an ``asyncio.Lock`` so
only one XADD is in flight on the shared client at a time.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol, runtime_checkable

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from product_catalog.core.errors import DeliveryFailed
from product_catalog.core.ids import new_id, utc_now

from .integration_events import IntegrationEvent, get_event_class

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------

@runtime_checkable
class IMessagePublisher(Protocol):
    """Publish an integration event to an exchange with a routing key."""

    async def publish(
        self, event: IntegrationEvent, exchange: str, routing_key: str,
    ) -> None:
        """Deliver *event*.  Raises ``DeliveryFailed`` on transport error."""
        ...

    async def start(self) -> None: ...
    async def stop(self) -> None: ...


# ---------------------------------------------------------------------------
# Redis Streams
# ---------------------------------------------------------------------------

class RedisStreamsPublisher:
    """Production publisher backed by Redis Streams.

    Parameters
    ----------
    redis_url
        Connection URL used by ``start()``.
    max_stream_length
        Approximate ``MAXLEN`` per stream.  ``None`` (default) never trims,
        so delivered entries stay until consumers acknowledge and the
        operator trims.
    client
        Pre-built client (tests).  When given, ``start()`` does not connect
        and ``stop()`` does not close it.
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        max_stream_length: int | None = None,
        client: aioredis.Redis | None = None,
    ) -> None:
        self._redis_url = redis_url
        self._max_len = max_stream_length
        self._redis: aioredis.Redis | None = client
        self._owns_client = client is None
        self._lock = asyncio.Lock()
        self._messages_published: int = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Connect to Redis."""
        if self._redis is None:
            self._redis = aioredis.from_url(
                self._redis_url, decode_responses=True
            )
            logger.info("Redis publisher connected to %s", self._redis_url.split("@")[-1])

    async def stop(self) -> None:
        """Close the Redis connection."""
        if self._redis is not None and self._owns_client:
            await self._redis.aclose()
            self._redis = None

    # ------------------------------------------------------------------
    # Publish
    # ------------------------------------------------------------------

    async def publish(
        self, event: IntegrationEvent, exchange: str, routing_key: str,
    ) -> None:
        """Append *event* to the ``exchange`` stream.

        Raises
        ------
        DeliveryFailed
            If the publisher has not been started, or Redis is unreachable
            or rejects the entry.
        """
        if self._redis is None:
            logger.error(
                "Cannot publish %s to exchange %s: publisher not started",
                type(event).__name__, exchange,
            )
            raise DeliveryFailed(exchange, routing_key, "publisher not started")

        fields = self.serialize(event, routing_key)
        try:
            async with self._lock:
                await self._redis.xadd(
                    exchange,
                    fields,
                    maxlen=self._max_len,
                    approximate=self._max_len is not None,
                )
        except (RedisError, OSError) as exc:
            logger.error(
                "Failed to publish %s to exchange %s with routing key %s: %s",
                type(event).__name__, exchange, routing_key, exc,
            )
            raise DeliveryFailed(exchange, routing_key, str(exc)) from exc

        self._messages_published += 1
        logger.info(
            "Published %s to exchange %s with routing key %s",
            type(event).__name__, exchange, routing_key,
        )

    @property
    def messages_published(self) -> int:
        return self._messages_published

    # ------------------------------------------------------------------
    # Wire format
    # ------------------------------------------------------------------

    @staticmethod
    def serialize(event: IntegrationEvent, routing_key: str) -> dict[str, str]:
        """Build the stream entry for *event*.

        ``message_id``/``timestamp`` are transport-level stamps, separate
        from the event's own ``event_id``/``event_time``.
        """
        return {
            "_type": type(event).__name__,
            "_data": event.model_dump_json(),
            "routing_key": routing_key,
            "message_id": new_id(),
            "timestamp": str(int(utc_now().timestamp())),
            "content_type": "application/json",
            "delivery_mode": "persistent",
        }

    @staticmethod
    def deserialize(fields: dict[str, str]) -> IntegrationEvent | None:
        """Restore an integration event from a stream entry.

        Returns ``None`` for malformed entries or unknown event types.
        """
        event_type_name = fields.get("_type")
        event_data = fields.get("_data")

        if not event_type_name or not event_data:
            logger.warning("Malformed message: %s", fields)
            return None

        event_cls = get_event_class(event_type_name)
        if not event_cls:
            logger.warning("Unknown event type: %s", event_type_name)
            return None

        return event_cls.model_validate_json(event_data)


# ---------------------------------------------------------------------------
# No-op
# ---------------------------------------------------------------------------

class NoOpPublisher:
    """Publisher for deployments without a broker."""

    async def start(self) -> None:
        logger.info("No broker configured; integration events will not leave the process")

    async def stop(self) -> None:
        pass

    async def publish(
        self, event: IntegrationEvent, exchange: str, routing_key: str,
    ) -> None:
        logger.info(
            "Would publish %s to exchange %s with routing key %s",
            type(event).__name__, exchange, routing_key,
        )
