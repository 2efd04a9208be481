"""Propagation – W3C ``traceparent``/``tracestate``/``baggage`` propagator.

``extract`` turns a carrier into a :class:`TraceContext` for the local span and
never raises; ``inject`` writes a context onto a carrier and is a pure
function of the context (overwrite, not append).
"""
from __future__ import annotations

import re
from typing import Any, NamedTuple, TypeVar

import structlog

from baggage_relay.propagation import baggage as baggage_codec
from baggage_relay.propagation.carriers import CarrierAdapter, TextHeaderAdapter
from baggage_relay.propagation.context import (
    IdGenerator,
    RandomIdGenerator,
    SpanIdentity,
    TraceContext,
    is_valid_span_id,
    is_valid_trace_id,
    new_root,
)

logger = structlog.get_logger(__name__)

C = TypeVar("C")

TRACEPARENT = "traceparent"
TRACESTATE = "tracestate"
BAGGAGE = "baggage"

SUPPORTED_VERSION = "00"
_INVALID_VERSION = "ff"
_TRACEPARENT_RE = re.compile(
    r"^(?P<version>[0-9a-f]{2})-(?P<trace_id>[0-9a-f]{32})-(?P<span_id>[0-9a-f]{16})-(?P<flags>[0-9a-f]{2})$"
)


class Traceparent(NamedTuple):
    trace_id: str
    span_id: str
    trace_flags: int


def parse_traceparent(value: str | None) -> Traceparent | None:
    """Parse ``00-<trace_id>-<span_id>-<flags>``; ``None`` if malformed."""
    if not value:
        return None
    match = _TRACEPARENT_RE.match(value.strip())
    if match is None or match["version"] == _INVALID_VERSION:
        return None
    if not is_valid_trace_id(match["trace_id"]) or not is_valid_span_id(match["span_id"]):
        return None
    return Traceparent(match["trace_id"], match["span_id"], int(match["flags"], 16))


def format_traceparent(span: SpanIdentity) -> str:
    return f"{SUPPORTED_VERSION}-{span.trace_id}-{span.span_id}-{span.trace_flags:02x}"


class W3CPropagator:
    """Extract/inject W3C trace context and baggage through a carrier adapter.

    Parameters
    ----------
    id_generator:
        Source of span ids for the local span created by :meth:`extract`.
    propagate_tracestate:
        When ``False`` the ``tracestate`` header is neither read nor written.
    """

    def __init__(
        self,
        id_generator: IdGenerator | None = None,
        propagate_tracestate: bool = True,
    ) -> None:
        self._ids = id_generator or RandomIdGenerator()
        self._propagate_tracestate = propagate_tracestate

    def extract(self, carrier: C | None, adapter: CarrierAdapter[C] | None = None) -> TraceContext:
        """Build the local operation's context from *carrier*.

        A valid ``traceparent`` makes the local span a child of the remote
        span; a missing or malformed one starts a new root.  Baggage is decoded
        in both cases.
        """
        adapter = adapter or TextHeaderAdapter()  # type: ignore[assignment]
        raw_parent = _safe_get(adapter, carrier, TRACEPARENT)
        parsed = parse_traceparent(raw_parent)

        if parsed is None:
            if raw_parent:
                logger.debug("propagation.malformed_traceparent", value=raw_parent)
            context = new_root(self._ids)
        else:
            trace_state = None
            if self._propagate_tracestate:
                trace_state = (_safe_get(adapter, carrier, TRACESTATE) or "").strip() or None
            context = TraceContext(
                span=SpanIdentity(
                    trace_id=parsed.trace_id,
                    span_id=self._ids.generate_span_id(),
                    parent_span_id=parsed.span_id,
                    trace_flags=parsed.trace_flags,
                    trace_state=trace_state,
                )
            )

        context.baggage.update(baggage_codec.decode(_safe_get(adapter, carrier, BAGGAGE)))
        return context

    def inject(self, context: TraceContext, carrier: C, adapter: CarrierAdapter[C] | None = None) -> None:
        """Write *context* onto *carrier*.

        ``tracestate`` and ``baggage`` are written only when non-empty.
        """
        adapter = adapter or TextHeaderAdapter()  # type: ignore[assignment]
        adapter.set(carrier, TRACEPARENT, format_traceparent(context.span))
        if self._propagate_tracestate and context.span.trace_state:
            adapter.set(carrier, TRACESTATE, context.span.trace_state)
        if context.baggage:
            adapter.set(carrier, BAGGAGE, baggage_codec.encode(context.baggage))


def _safe_get(adapter: CarrierAdapter[Any], carrier: Any, name: str) -> str | None:
    if carrier is None:
        return None
    try:
        return adapter.get(carrier, name)
    except Exception:  # noqa: BLE001
        logger.debug("propagation.carrier_read_failed", header=name, exc_info=True)
        return None


_DEFAULT = W3CPropagator()


def extract(carrier: C | None, adapter: CarrierAdapter[C] | None = None) -> TraceContext:
    """Module-level :meth:`W3CPropagator.extract` with default settings."""
    return _DEFAULT.extract(carrier, adapter)


def inject(context: TraceContext, carrier: C, adapter: CarrierAdapter[C] | None = None) -> None:
    """Module-level :meth:`W3CPropagator.inject` with default settings."""
    _DEFAULT.inject(context, carrier, adapter)


__all__ = [
    "BAGGAGE",
    "TRACEPARENT",
    "TRACESTATE",
    "Traceparent",
    "W3CPropagator",
    "extract",
    "format_traceparent",
    "inject",
    "parse_traceparent",
]
