"""OpenTelemetry adapter – translate between TraceContext and an OpenTelemetry ``Context``.

``to_otel_context`` builds a context whose current span is a non-recording
remote span carrying the TraceContext's identity, with the baggage copied
into OpenTelemetry baggage.  Business code can then start spans or read
baggage through the OpenTelemetry API without either side holding ambient
state.
"""
from __future__ import annotations

from typing import Any

import structlog

from baggage_relay.propagation import SpanIdentity, TraceContext, new_root

logger = structlog.get_logger(__name__)


def _require_otel() -> None:
    try:
        import opentelemetry  # noqa: F401
    except ImportError as exc:
        raise ImportError("Install 'baggage-relay[otel]' to use the OpenTelemetry adapter") from exc


def to_otel_context(context: TraceContext, base: Any = None) -> Any:
    """Return an OpenTelemetry ``Context`` parented on *context*."""
    _require_otel()
    from opentelemetry import baggage, trace  # type: ignore[import-untyped]
    from opentelemetry.trace import NonRecordingSpan, SpanContext, TraceFlags, TraceState

    span = context.span
    span_context = SpanContext(
        trace_id=int(span.trace_id, 16),
        span_id=int(span.span_id, 16),
        is_remote=True,
        trace_flags=TraceFlags(span.trace_flags),
        trace_state=TraceState.from_header([span.trace_state]) if span.trace_state else None,
    )
    otel_ctx = trace.set_span_in_context(NonRecordingSpan(span_context), base)
    for key, value in context.baggage.items():
        otel_ctx = baggage.set_baggage(key, value, context=otel_ctx)
    return otel_ctx


def from_otel_context(otel_ctx: Any) -> TraceContext:
    """Build a :class:`TraceContext` from an OpenTelemetry ``Context``.

    An invalid span context yields a new root.  Non-string baggage values are
    stringified.
    """
    _require_otel()
    from opentelemetry import baggage, trace  # type: ignore[import-untyped]
    from opentelemetry.trace import format_span_id, format_trace_id

    span_context = trace.get_current_span(otel_ctx).get_span_context()
    if span_context.is_valid:
        trace_state = span_context.trace_state.to_header() if span_context.trace_state else ""
        context = TraceContext(
            span=SpanIdentity(
                trace_id=format_trace_id(span_context.trace_id),
                span_id=format_span_id(span_context.span_id),
                trace_flags=int(span_context.trace_flags),
                trace_state=trace_state or None,
            )
        )
    else:
        logger.debug("otel.invalid_span_context")
        context = new_root()
    for key, value in baggage.get_all(otel_ctx).items():
        if not key:
            continue
        context.set_baggage(key, value if isinstance(value, str) else str(value))
    return context


__all__ = ["from_otel_context", "to_otel_context"]
