"""Observability – correlation, logging, tracing."""

from baggage_relay.observability.correlation import RequestContext
from baggage_relay.observability.logging import (
    JsonLoggerFactory,
    SensitiveFieldsFilter,
    TraceContextProcessor,
    bind_trace_context,
    get_logger,
)
from baggage_relay.observability.tracing import NoopTracer, Span, SpanKind, Tracer

__all__ = [
    "JsonLoggerFactory",
    "NoopTracer",
    "RequestContext",
    "SensitiveFieldsFilter",
    "Span",
    "SpanKind",
    "TraceContextProcessor",
    "Tracer",
    "bind_trace_context",
    "get_logger",
]
