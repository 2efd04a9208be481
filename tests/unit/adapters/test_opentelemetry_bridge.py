"""Unit tests – OpenTelemetry context bridge and OtelTracer (in-memory SDK exporter)."""
from __future__ import annotations

import pytest
from opentelemetry import baggage as otel_baggage
from opentelemetry import trace
from opentelemetry.context import Context
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from baggage_relay.adapters.opentelemetry import OtelTracer, from_otel_context, to_otel_context
from baggage_relay.observability.tracing import SpanKind
from baggage_relay.propagation import SpanIdentity, TraceContext

TRACE_ID = "4bf92f3577b34da6a3ce929d0e0e4736"
SPAN_ID = "00f067aa0ba902b7"


def _context() -> TraceContext:
    return TraceContext(
        span=SpanIdentity(trace_id=TRACE_ID, span_id=SPAN_ID, trace_state="vendor=1"),
        baggage={"tenant-id": "acme"},
    )


class TestContextBridge:
    def test_to_otel_context_sets_remote_parent(self) -> None:
        otel_ctx = to_otel_context(_context())
        span_context = trace.get_current_span(otel_ctx).get_span_context()
        assert span_context.trace_id == int(TRACE_ID, 16)
        assert span_context.span_id == int(SPAN_ID, 16)
        assert span_context.is_remote
        assert otel_baggage.get_baggage("tenant-id", otel_ctx) == "acme"

    def test_round_trip(self) -> None:
        original = _context()
        restored = from_otel_context(to_otel_context(original))
        assert restored.span == original.span
        assert restored.baggage == original.baggage

    def test_empty_context_becomes_root(self) -> None:
        context = from_otel_context(Context())
        assert context.parent_span_id is None
        assert context.baggage == {}


class TestOtelTracer:
    def setup_method(self) -> None:
        self.exporter = InMemorySpanExporter()
        provider = TracerProvider()
        provider.add_span_processor(SimpleSpanProcessor(self.exporter))
        self.tracer = OtelTracer("test", tracer_provider=provider)

    def test_span_is_parented_on_trace_context(self) -> None:
        parent = _context()
        with self.tracer.start_span("charge", parent, SpanKind.CLIENT, {"k": "v"}) as span:
            child = span.context
        finished = self.exporter.get_finished_spans()
        assert len(finished) == 1
        exported = finished[0]
        assert exported.name == "charge"
        assert exported.parent.span_id == int(SPAN_ID, 16)
        assert exported.context.trace_id == int(TRACE_ID, 16)
        assert child.parent_span_id == SPAN_ID
        assert child.span_id == f"{exported.context.span_id:016x}"
        assert child.baggage == {"tenant-id": "acme"}

    def test_exception_recorded_and_reraised(self) -> None:
        with pytest.raises(RuntimeError):
            with self.tracer.start_span("fail", _context()):
                raise RuntimeError("boom")
        exported = self.exporter.get_finished_spans()[0]
        assert exported.status.status_code == trace.StatusCode.ERROR

    def test_current_span_is_not_touched(self) -> None:
        with self.tracer.start_span("work", _context()):
            assert not trace.get_current_span().get_span_context().is_valid
