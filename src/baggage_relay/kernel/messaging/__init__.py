"""Kernel messaging – message envelope, serializer and bus ports."""
from baggage_relay.kernel.messaging.message import (
    EventName,
    Message,
    MessageBus,
    MessageId,
    MessageSerializer,
)

__all__ = [
    "EventName",
    "Message",
    "MessageBus",
    "MessageId",
    "MessageSerializer",
]
