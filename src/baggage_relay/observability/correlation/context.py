"""Observability – RequestContext.

Tenant, correlation and user ids travel as one JSON-encoded baggage entry
keyed ``RequestContext``.  Peers that only set the flat ``tenant-id`` /
``correlation-id`` / ``user-id`` baggage keys are understood too.
"""
from __future__ import annotations

import dataclasses
import json
from typing import TYPE_CHECKING, Any, ClassVar
from uuid import uuid4

import structlog

if TYPE_CHECKING:
    from baggage_relay.propagation.context import TraceContext

logger = structlog.get_logger(__name__)

_FLAT_KEYS = {
    "tenant_id": "tenant-id",
    "correlation_id": "correlation-id",
    "user_id": "user-id",
}
# property names used by .NET peers serialising the same object
_PASCAL_KEYS = {
    "tenant_id": "TenantId",
    "correlation_id": "CorrelationId",
    "user_id": "UserId",
}


@dataclasses.dataclass(frozen=True)
class RequestContext:
    """Business correlation data for one request/use-case execution."""

    BAGGAGE_KEY: ClassVar[str] = "RequestContext"

    tenant_id: str | None = None
    correlation_id: str | None = None
    user_id: str | None = None

    @classmethod
    def new(cls, tenant_id: str | None = None, user_id: str | None = None) -> "RequestContext":
        return cls(tenant_id=tenant_id, correlation_id=str(uuid4()), user_id=user_id)

    def to_dict(self) -> dict[str, str | None]:
        return dataclasses.asdict(self)

    def store(self, context: "TraceContext") -> None:
        """Write this request context into *context*'s baggage (and nowhere else)."""
        context.set_baggage(self.BAGGAGE_KEY, json.dumps(self.to_dict(), separators=(",", ":")))

    @classmethod
    def load(cls, context: "TraceContext") -> "RequestContext | None":
        """Read the request context from *context*'s baggage; ``None`` if absent."""
        raw = context.get_baggage(cls.BAGGAGE_KEY)
        if raw is not None:
            parsed = cls._parse(raw)
            if parsed is not None:
                return parsed
        flat = {field: context.get_baggage(key) for field, key in _FLAT_KEYS.items()}
        if all(value is None for value in flat.values()):
            return None
        return cls(**flat)

    @classmethod
    def _parse(cls, raw: str) -> "RequestContext | None":
        try:
            data: Any = json.loads(raw)
        except ValueError:
            logger.debug("request_context.malformed_json")
            return None
        if not isinstance(data, dict):
            return None
        values: dict[str, str | None] = {}
        for field, pascal in _PASCAL_KEYS.items():
            value = data.get(field, data.get(pascal))
            values[field] = value if isinstance(value, str) else None
        return cls(**values)


__all__ = ["RequestContext"]
