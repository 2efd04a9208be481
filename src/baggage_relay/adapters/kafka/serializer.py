"""Kafka adapter – KafkaMessageSerializer."""
from __future__ import annotations

import json
from typing import Any

from baggage_relay.kernel.errors import SerializationError
from baggage_relay.kernel.messaging import MessageSerializer


class KafkaMessageSerializer(MessageSerializer[Any]):
    """JSON serialiser/deserialiser for Kafka messages."""

    def serialize(self, payload: Any) -> bytes:
        if isinstance(payload, bytes):
            return payload
        return json.dumps(payload, default=str).encode()

    def deserialize(self, data: bytes, target_type: type[Any] = object) -> Any:
        try:
            parsed = json.loads(data)
        except ValueError as exc:
            raise SerializationError(
                "Kafka record value is not valid JSON",
                payload_type=getattr(target_type, "__name__", None),
                cause=exc,
            ) from exc
        if hasattr(target_type, "model_validate"):
            return target_type.model_validate(parsed)
        return parsed


__all__ = ["KafkaMessageSerializer"]
