"""Tests for the message publishers."""

import asyncio
import logging
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from product_catalog.core.errors import DeliveryFailed
from product_catalog.messaging.integration_events import (
    ProductDeletedIntegrationEvent,
)
from product_catalog.messaging.publishers import (
    IMessagePublisher,
    NoOpPublisher,
    RedisStreamsPublisher,
)


@pytest.fixture
def deleted_event(sim_clock):
    return ProductDeletedIntegrationEvent(
        event_time=sim_clock.now(), product_id="p-1", deleted_at=sim_clock.now(),
    )


class TestNoOpPublisher:
    @pytest.mark.asyncio
    async def test_succeeds_and_keeps_nothing(self, deleted_event, caplog):
        publisher = NoOpPublisher()
        await publisher.start()
        with caplog.at_level(logging.INFO, logger="product_catalog.messaging.publishers"):
            for _ in range(20):
                await publisher.publish(
                    deleted_event, "product.events", "product.deleted",
                )
        await publisher.stop()

        assert "Would publish ProductDeletedIntegrationEvent" in caplog.text
        assert vars(publisher) == {}

    def test_satisfies_protocol(self):
        assert isinstance(NoOpPublisher(), IMessagePublisher)


class TestRedisStreamsPublisher:
    @pytest.mark.asyncio
    async def test_publish_appends_to_exchange_stream(self, deleted_event):
        client = AsyncMock()
        publisher = RedisStreamsPublisher(client=client)
        await publisher.start()

        await publisher.publish(deleted_event, "product.events", "product.deleted")

        client.xadd.assert_awaited_once()
        stream, fields = client.xadd.await_args.args
        assert stream == "product.events"
        assert fields["_type"] == "ProductDeletedIntegrationEvent"
        assert fields["routing_key"] == "product.deleted"
        assert fields["content_type"] == "application/json"
        assert fields["delivery_mode"] == "persistent"
        assert fields["message_id"]
        assert client.xadd.await_args.kwargs == {"maxlen": None, "approximate": False}
        assert publisher.messages_published == 1

    @pytest.mark.asyncio
    async def test_max_stream_length_is_approximate(self, deleted_event):
        client = AsyncMock()
        publisher = RedisStreamsPublisher(max_stream_length=1000, client=client)
        await publisher.publish(deleted_event, "product.events", "product.deleted")
        assert client.xadd.await_args.kwargs == {"maxlen": 1000, "approximate": True}

    @pytest.mark.asyncio
    async def test_transport_error_becomes_delivery_failed(self, deleted_event):
        client = AsyncMock()
        client.xadd.side_effect = RedisConnectionError("connection refused")
        publisher = RedisStreamsPublisher(client=client)

        with pytest.raises(DeliveryFailed) as exc_info:
            await publisher.publish(deleted_event, "product.events", "product.deleted")

        assert exc_info.value.exchange == "product.events"
        assert exc_info.value.routing_key == "product.deleted"
        assert "connection refused" in exc_info.value.reason
        assert publisher.messages_published == 0

    @pytest.mark.asyncio
    async def test_publish_before_start_is_delivery_failure(self, deleted_event):
        with pytest.raises(DeliveryFailed) as exc_info:
            await RedisStreamsPublisher().publish(
                deleted_event, "product.events", "product.deleted",
            )
        assert exc_info.value.reason == "publisher not started"
        assert exc_info.value.routing_key == "product.deleted"

    @pytest.mark.asyncio
    async def test_injected_client_not_closed(self):
        client = AsyncMock()
        publisher = RedisStreamsPublisher(client=client)
        await publisher.start()
        await publisher.stop()
        client.aclose.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_publishes_are_serialized(self, deleted_event):
        in_flight = 0
        max_in_flight = 0

        async def slow_xadd(*args, **kwargs):
            nonlocal in_flight, max_in_flight
            in_flight += 1
            max_in_flight = max(max_in_flight, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return "0-1"

        client = AsyncMock()
        client.xadd.side_effect = slow_xadd
        publisher = RedisStreamsPublisher(client=client)

        await asyncio.gather(*(
            publisher.publish(deleted_event, "product.events", "product.deleted")
            for _ in range(5)
        ))

        assert max_in_flight == 1
        assert publisher.messages_published == 5


class TestWireFormat:
    def test_round_trip(self, deleted_event):
        fields = RedisStreamsPublisher.serialize(deleted_event, "product.deleted")
        assert RedisStreamsPublisher.deserialize(fields) == deleted_event

    def test_malformed_entry(self):
        assert RedisStreamsPublisher.deserialize({"_type": "X"}) is None

    def test_unknown_type(self, deleted_event):
        fields = RedisStreamsPublisher.serialize(deleted_event, "product.deleted")
        fields["_type"] = "SomethingElse"
        assert RedisStreamsPublisher.deserialize(fields) is None
