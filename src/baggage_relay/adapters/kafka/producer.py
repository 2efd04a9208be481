"""Kafka adapter – KafkaProducer."""
from __future__ import annotations

from typing import Any

import structlog

from baggage_relay.adapters.kafka.serializer import KafkaMessageSerializer
from baggage_relay.config import PropagationSettings
from baggage_relay.kernel.messaging import Message, MessageBus, MessageSerializer
from baggage_relay.propagation import BinaryHeaderAdapter, TraceContext, W3CPropagator

logger = structlog.get_logger(__name__)


def _require_aiokafka() -> Any:
    try:
        import aiokafka  # type: ignore[import-untyped]
        return aiokafka
    except ImportError as exc:
        raise ImportError("Install 'baggage-relay[kafka]' to use the Kafka adapter") from exc


class KafkaProducer(MessageBus):
    """aiokafka-backed producer implementing ``MessageBus``.

    The trace context is injected into a ``dict[str, bytes]`` through
    :class:`BinaryHeaderAdapter` and sent as aiokafka's list of
    ``(name, bytes)`` header tuples.
    """

    def __init__(
        self,
        bootstrap_servers: str,
        serializer: MessageSerializer[Any] | None = None,
        propagator: W3CPropagator | None = None,
        **producer_kwargs: Any,
    ) -> None:
        aiokafka = _require_aiokafka()
        self._producer = aiokafka.AIOKafkaProducer(bootstrap_servers=bootstrap_servers, **producer_kwargs)
        self._serializer = serializer or KafkaMessageSerializer()
        self._propagator = propagator or W3CPropagator()
        self._adapter = BinaryHeaderAdapter()
        self._started = False

    @classmethod
    def from_settings(cls, settings: PropagationSettings, **producer_kwargs: Any) -> "KafkaProducer":
        return cls(
            settings.kafka_bootstrap_servers,
            propagator=W3CPropagator(propagate_tracestate=settings.propagate_tracestate),
            **producer_kwargs,
        )

    async def start(self) -> None:
        await self._producer.start()
        self._started = True

    async def stop(self) -> None:
        await self._producer.stop()
        self._started = False

    async def __aenter__(self) -> "KafkaProducer":
        await self.start()
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.stop()

    def headers_for(self, context: TraceContext) -> list[tuple[str, bytes]]:
        carrier: dict[str, bytes] = {}
        self._propagator.inject(context, carrier, self._adapter)
        return list(carrier.items())

    async def publish(self, message: Message[Any], context: TraceContext) -> None:
        if not self._started:
            await self.start()
        await self._producer.send(
            topic=message.topic,
            value=self._serializer.serialize(message.payload),
            headers=self.headers_for(context),
            key=message.id.encode(),
            timestamp_ms=int(message.occurred_at.timestamp() * 1000),
        )
        logger.debug(
            "kafka.published",
            topic=message.topic,
            message_id=message.id,
            trace_id=context.trace_id,
            span_id=context.span_id,
        )

    async def publish_batch(self, messages: list[Message[Any]], context: TraceContext) -> None:
        for msg in messages:
            await self.publish(msg, context)


__all__ = ["KafkaProducer"]
