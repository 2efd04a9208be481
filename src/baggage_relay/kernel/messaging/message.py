"""Kernel messaging – message primitives and bus ports.

Trace and baggage headers are not part of the envelope: publishers receive the
:class:`~baggage_relay.propagation.context.TraceContext` explicitly and inject
it into the transport's own header representation.
"""
from __future__ import annotations

import abc
import dataclasses
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Generic, TypeVar
from uuid import uuid4

if TYPE_CHECKING:
    from baggage_relay.propagation.context import TraceContext

T = TypeVar("T")

type EventName = str
type MessageId = str


@dataclasses.dataclass(frozen=True)
class Message(Generic[T]):
    """Transport-agnostic message envelope."""

    id: MessageId = dataclasses.field(default_factory=lambda: str(uuid4()))
    topic: str = ""
    payload: T | None = None
    occurred_at: datetime = dataclasses.field(default_factory=lambda: datetime.now(UTC))


class MessageSerializer(abc.ABC, Generic[T]):
    """Port: serialize / deserialize message payloads."""

    @abc.abstractmethod
    def serialize(self, payload: T) -> bytes: ...

    @abc.abstractmethod
    def deserialize(self, data: bytes, target_type: type[T]) -> T: ...


class MessageBus(abc.ABC):
    """Port: publish messages to a transport carrying *context* in its headers."""

    @abc.abstractmethod
    async def publish(self, message: Message[Any], context: "TraceContext") -> None: ...

    @abc.abstractmethod
    async def publish_batch(self, messages: list[Message[Any]], context: "TraceContext") -> None: ...


__all__ = [
    "EventName",
    "Message",
    "MessageBus",
    "MessageId",
    "MessageSerializer",
]
