"""Kafka adapter – KafkaConsumer."""
from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any

import structlog

from baggage_relay.adapters.kafka.serializer import KafkaMessageSerializer
from baggage_relay.config import PropagationSettings
from baggage_relay.kernel.messaging import Message, MessageSerializer
from baggage_relay.propagation import BinaryHeaderAdapter, TraceContext, W3CPropagator

logger = structlog.get_logger(__name__)

type KafkaHandler = Callable[[Message[Any], TraceContext], Awaitable[None]]


def _require_aiokafka() -> Any:
    try:
        import aiokafka  # type: ignore[import-untyped]
        return aiokafka
    except ImportError as exc:
        raise ImportError("Install 'baggage-relay[kafka]' to use the Kafka adapter") from exc


class KafkaConsumer:
    """aiokafka-backed consumer.

    :meth:`consume` extracts an independent :class:`TraceContext` per record
    and runs at most *concurrency* handlers at the same time.  Handlers never
    share a context instance, so one record's baggage cannot leak into
    another's.
    """

    def __init__(
        self,
        bootstrap_servers: str,
        group_id: str,
        topics: list[str],
        serializer: MessageSerializer[Any] | None = None,
        propagator: W3CPropagator | None = None,
        concurrency: int = 8,
        **kwargs: Any,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        aiokafka = _require_aiokafka()
        self._consumer = aiokafka.AIOKafkaConsumer(
            *topics,
            bootstrap_servers=bootstrap_servers,
            group_id=group_id,
            **kwargs,
        )
        self._serializer = serializer or KafkaMessageSerializer()
        self._propagator = propagator or W3CPropagator()
        self._adapter = BinaryHeaderAdapter()
        self._concurrency = concurrency

    @classmethod
    def from_settings(cls, settings: PropagationSettings, **kwargs: Any) -> "KafkaConsumer":
        return cls(
            settings.kafka_bootstrap_servers,
            group_id=settings.kafka_group_id,
            topics=[settings.kafka_topic],
            propagator=W3CPropagator(propagate_tracestate=settings.propagate_tracestate),
            concurrency=settings.consumer_concurrency,
            **kwargs,
        )

    async def start(self) -> None:
        await self._consumer.start()

    async def stop(self) -> None:
        await self._consumer.stop()

    async def __aiter__(self) -> Any:
        async for msg in self._consumer:
            yield msg

    async def __aenter__(self) -> "KafkaConsumer":
        await self.start()
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.stop()

    def to_message(self, record: Any) -> tuple[Message[Any], TraceContext]:
        """Turn an aiokafka record into a message and its extracted context."""
        headers: dict[str, bytes] = {}
        for name, value in record.headers or ():
            headers[name] = value
        context = self._propagator.extract(headers, self._adapter)
        key = record.key.decode("utf-8", errors="replace") if record.key else None
        occurred_at = (
            datetime.fromtimestamp(record.timestamp / 1000, tz=UTC)
            if record.timestamp is not None
            else datetime.now(UTC)
        )
        fields: dict[str, Any] = {
            "topic": record.topic,
            "payload": self._serializer.deserialize(record.value, object) if record.value is not None else None,
            "occurred_at": occurred_at,
        }
        if key:
            fields["id"] = key
        message: Message[Any] = Message(**fields)
        return message, context

    async def consume(self, handler: KafkaHandler) -> None:
        """Dispatch every record to *handler* until the consumer stops.

        A failing handler is logged and does not stop consumption.
        """
        semaphore = asyncio.Semaphore(self._concurrency)
        tasks: set[asyncio.Task[None]] = set()

        async def _dispatch(record: Any) -> None:
            try:
                message, context = self.to_message(record)
                await handler(message, context)
            except Exception as exc:  # noqa: BLE001
                logger.warning(
                    "kafka.handler_failed",
                    topic=record.topic,
                    offset=getattr(record, "offset", None),
                    error=repr(exc),
                )
            finally:
                semaphore.release()

        try:
            async for record in self._consumer:
                await semaphore.acquire()
                task = asyncio.create_task(_dispatch(record))
                tasks.add(task)
                task.add_done_callback(tasks.discard)
        finally:
            if tasks:
                await asyncio.gather(*tasks, return_exceptions=True)


__all__ = ["KafkaConsumer", "KafkaHandler"]
