"""Unit tests for the Kafka adapter (mocked, no broker required)."""
from __future__ import annotations

import asyncio
import json
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from baggage_relay.adapters.kafka.consumer import KafkaConsumer
from baggage_relay.adapters.kafka.producer import KafkaProducer
from baggage_relay.adapters.kafka.serializer import KafkaMessageSerializer
from baggage_relay.config import PropagationSettings
from baggage_relay.kernel.errors import SerializationError
from baggage_relay.kernel.messaging import Message
from baggage_relay.propagation import SpanIdentity, TraceContext

TRACEPARENT = "00-4bf92f3577b34da6a3ce929d0e0e4736-00f067aa0ba902b7-01"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _context(**baggage: str) -> TraceContext:
    return TraceContext(
        span=SpanIdentity(trace_id="4bf92f3577b34da6a3ce929d0e0e4736", span_id="00f067aa0ba902b7"),
        baggage=dict(baggage),
    )


def _make_producer() -> tuple[KafkaProducer, MagicMock]:
    mock_prod = MagicMock()
    mock_prod.start = AsyncMock()
    mock_prod.stop = AsyncMock()
    mock_prod.send = AsyncMock()
    mock_ak = MagicMock()
    mock_ak.AIOKafkaProducer.return_value = mock_prod
    with patch("baggage_relay.adapters.kafka.producer._require_aiokafka", return_value=mock_ak):
        producer = KafkaProducer("localhost:9092")
    return producer, mock_prod


class _FakeAIOKafkaConsumer:
    def __init__(self, records: list[Any]) -> None:
        self._records = records
        self.start = AsyncMock()
        self.stop = AsyncMock()

    def __aiter__(self) -> Any:
        return self._iterate()

    async def _iterate(self) -> Any:
        for record in self._records:
            yield record


def _make_consumer(records: list[Any], concurrency: int = 8) -> KafkaConsumer:
    mock_ak = MagicMock()
    mock_ak.AIOKafkaConsumer.return_value = _FakeAIOKafkaConsumer(records)
    with patch("baggage_relay.adapters.kafka.consumer._require_aiokafka", return_value=mock_ak):
        return KafkaConsumer("localhost:9092", group_id="grp", topics=["orders"], concurrency=concurrency)


def _record(headers: list[tuple[str, bytes]], value: Any = None, key: bytes | None = b"m-1") -> SimpleNamespace:
    return SimpleNamespace(
        topic="orders",
        key=key,
        value=json.dumps(value if value is not None else {"n": 1}).encode(),
        headers=headers,
        timestamp=1_700_000_000_000,
        offset=0,
    )


# ===========================================================================
# KafkaMessageSerializer
# ===========================================================================

class TestKafkaMessageSerializer:
    def test_serialize_dict_returns_bytes(self) -> None:
        assert json.loads(KafkaMessageSerializer().serialize({"key": "value"})) == {"key": "value"}

    def test_serialize_bytes_passthrough(self) -> None:
        raw = b"already bytes"
        assert KafkaMessageSerializer().serialize(raw) is raw

    def test_deserialize_invalid_json(self) -> None:
        with pytest.raises(SerializationError):
            KafkaMessageSerializer().deserialize(b"{nope", dict)


# ===========================================================================
# KafkaProducer
# ===========================================================================

class TestKafkaProducer:
    def test_import_guard(self) -> None:
        with patch(
            "baggage_relay.adapters.kafka.producer._require_aiokafka",
            side_effect=ImportError("baggage-relay[kafka]"),
        ):
            with pytest.raises(ImportError, match="kafka"):
                KafkaProducer("localhost:9092")

    def test_publish_sends_binary_trace_headers(self) -> None:
        producer, mock_prod = _make_producer()
        message = Message(topic="orders", payload={"order": 1})
        asyncio.run(producer.publish(message, _context(**{"tenant-id": "acme corp"})))

        mock_prod.start.assert_awaited_once()
        kwargs = mock_prod.send.call_args.kwargs
        assert kwargs["topic"] == "orders"
        assert kwargs["key"] == message.id.encode()
        assert dict(kwargs["headers"]) == {
            "traceparent": TRACEPARENT.encode(),
            "baggage": b"tenant-id=acme%20corp",
        }

    def test_empty_baggage_has_no_header(self) -> None:
        producer, _ = _make_producer()
        names = [name for name, _ in producer.headers_for(_context())]
        assert names == ["traceparent"]

    def test_publish_batch_uses_same_context(self) -> None:
        producer, mock_prod = _make_producer()
        messages = [Message(topic="orders", payload=i) for i in range(3)]
        asyncio.run(producer.publish_batch(messages, _context()))
        assert mock_prod.send.await_count == 3


# ===========================================================================
# KafkaConsumer
# ===========================================================================

class TestKafkaConsumer:
    def test_rejects_zero_concurrency(self) -> None:
        with pytest.raises(ValueError):
            _make_consumer([], concurrency=0)

    def test_each_record_gets_its_own_context(self) -> None:
        records = [
            _record([("traceparent", TRACEPARENT.encode()), ("baggage", b"tenant-id=a")]),
            _record([("baggage", b"tenant-id=b")], key=None),
        ]
        consumer = _make_consumer(records)
        seen: list[tuple[Message[Any], TraceContext]] = []

        async def handler(message: Message[Any], context: TraceContext) -> None:
            seen.append((message, context))

        asyncio.run(consumer.consume(handler))
        by_tenant = {ctx.get_baggage("tenant-id"): (msg, ctx) for msg, ctx in seen}
        msg_a, ctx_a = by_tenant["a"]
        _, ctx_b = by_tenant["b"]
        assert ctx_a.parent_span_id == "00f067aa0ba902b7"
        assert msg_a.id == "m-1"
        assert msg_a.payload == {"n": 1}
        assert ctx_b.parent_span_id is None
        assert ctx_a.baggage is not ctx_b.baggage

    def test_concurrency_is_bounded(self) -> None:
        consumer = _make_consumer([_record([]) for _ in range(10)], concurrency=3)
        active = 0
        peak = 0

        async def handler(message: Message[Any], context: TraceContext) -> None:
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1

        asyncio.run(consumer.consume(handler))
        assert peak <= 3

    def test_handler_failure_does_not_stop_consumption(self) -> None:
        consumer = _make_consumer([_record([]), _record([])])
        calls: list[int] = []

        async def handler(message: Message[Any], context: TraceContext) -> None:
            calls.append(1)
            raise RuntimeError("boom")

        asyncio.run(consumer.consume(handler))
        assert len(calls) == 2

    def test_cancel_waits_for_in_flight_handlers(self) -> None:
        class _BlockingConsumer(_FakeAIOKafkaConsumer):
            async def _iterate(self) -> Any:
                for record in self._records:
                    yield record
                await asyncio.Event().wait()

        consumer = _make_consumer([])
        consumer._consumer = _BlockingConsumer([_record([])])
        finished: list[int] = []

        async def run() -> None:
            started = asyncio.Event()
            release = asyncio.Event()

            async def handler(message: Message[Any], context: TraceContext) -> None:
                started.set()
                await release.wait()
                finished.append(1)

            task = asyncio.create_task(consumer.consume(handler))
            await started.wait()
            task.cancel()
            await asyncio.sleep(0)
            assert not task.done()
            release.set()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(run())
        assert finished == [1]


# ===========================================================================
# Settings wiring
# ===========================================================================

class TestKafkaFromSettings:
    def test_consumer_uses_settings(self) -> None:
        settings = PropagationSettings(kafka_topic="payments", kafka_group_id="billing", consumer_concurrency=2)
        mock_ak = MagicMock()
        with patch("baggage_relay.adapters.kafka.consumer._require_aiokafka", return_value=mock_ak):
            consumer = KafkaConsumer.from_settings(settings)
        args, kwargs = mock_ak.AIOKafkaConsumer.call_args
        assert args == ("payments",)
        assert kwargs["group_id"] == "billing"
        assert kwargs["bootstrap_servers"] == settings.kafka_bootstrap_servers
        assert consumer._concurrency == 2

    def test_producer_honours_tracestate_switch(self) -> None:
        settings = PropagationSettings(propagate_tracestate=False)
        mock_ak = MagicMock()
        with patch("baggage_relay.adapters.kafka.producer._require_aiokafka", return_value=mock_ak):
            producer = KafkaProducer.from_settings(settings)
        context = TraceContext(
            span=SpanIdentity(
                trace_id="4bf92f3577b34da6a3ce929d0e0e4736",
                span_id="00f067aa0ba902b7",
                trace_state="k=v",
            )
        )
        assert [name for name, _ in producer.headers_for(context)] == ["traceparent"]
