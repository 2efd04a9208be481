"""Observability – distributed tracing ports."""
from baggage_relay.observability.tracing.ports import Span, SpanKind, Tracer
from baggage_relay.observability.tracing.noop import NoopTracer

__all__ = ["NoopTracer", "Span", "SpanKind", "Tracer"]
