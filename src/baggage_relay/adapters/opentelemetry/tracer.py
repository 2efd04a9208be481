"""OpenTelemetry adapter – OtelTracer."""
from __future__ import annotations

import contextlib
from typing import Any, AsyncIterator, Iterator

from baggage_relay.adapters.opentelemetry.bridge import _require_otel, to_otel_context
from baggage_relay.observability.tracing import Span, SpanKind, Tracer
from baggage_relay.propagation import SpanIdentity, TraceContext, new_child


class _OtelSpan(Span):
    def __init__(self, span: Any, context: TraceContext) -> None:
        self._span = span
        self._context = context

    @property
    def context(self) -> TraceContext:
        return self._context

    def set_attribute(self, key: str, value: Any) -> None:
        self._span.set_attribute(key, value)

    def set_status_ok(self) -> None:
        from opentelemetry.trace import StatusCode  # type: ignore[import-untyped]
        self._span.set_status(StatusCode.OK)

    def record_exception(self, exc: Exception) -> None:
        self._span.record_exception(exc)
        from opentelemetry.trace import StatusCode  # type: ignore[import-untyped]
        self._span.set_status(StatusCode.ERROR, str(exc))

    def end(self) -> None:
        self._span.end()


def _child_context(span: Any, parent: TraceContext) -> TraceContext:
    """The started span's identity as a child of *parent*.

    Without an SDK the API hands back a non-recording span that reuses the
    parent's ids; a locally generated child context is used then.
    """
    from opentelemetry.trace import format_span_id  # type: ignore[import-untyped]

    span_context = span.get_span_context()
    span_id = format_span_id(span_context.span_id) if span_context.is_valid else None
    if span_id is None or span_id == parent.span_id:
        return new_child(parent)
    return TraceContext(
        span=SpanIdentity(
            trace_id=parent.trace_id,
            span_id=span_id,
            parent_span_id=parent.span_id,
            trace_flags=parent.span.trace_flags,
            trace_state=parent.span.trace_state,
        ),
        baggage=dict(parent.baggage),
    )


class OtelTracer(Tracer):
    """OpenTelemetry tracer adapter.

    Spans are started with an explicit parent built by
    :func:`~baggage_relay.adapters.opentelemetry.to_otel_context`; the
    OpenTelemetry "current span" is never touched.
    """

    def __init__(self, service_name: str = "service", tracer_provider: Any = None) -> None:
        _require_otel()
        from opentelemetry import trace  # type: ignore[import-untyped]
        self._tracer = trace.get_tracer(service_name, tracer_provider=tracer_provider)

    @contextlib.contextmanager
    def start_span(self, name: str, parent: TraceContext, kind: SpanKind = SpanKind.INTERNAL, attributes: dict[str, Any] | None = None) -> Iterator[Span]:
        from opentelemetry.trace import SpanKind as OtelKind  # type: ignore[import-untyped]
        _KIND_MAP = {
            SpanKind.INTERNAL: OtelKind.INTERNAL, SpanKind.SERVER: OtelKind.SERVER,
            SpanKind.CLIENT: OtelKind.CLIENT, SpanKind.PRODUCER: OtelKind.PRODUCER,
            SpanKind.CONSUMER: OtelKind.CONSUMER,
        }
        otel_span = self._tracer.start_span(
            name,
            context=to_otel_context(parent),
            kind=_KIND_MAP.get(kind, OtelKind.INTERNAL),
            attributes=attributes,
        )
        span = _OtelSpan(otel_span, _child_context(otel_span, parent))
        try:
            yield span
        except Exception as exc:
            span.record_exception(exc)
            raise
        finally:
            span.end()

    @contextlib.asynccontextmanager
    async def start_async_span(self, name: str, parent: TraceContext, kind: SpanKind = SpanKind.INTERNAL, attributes: dict[str, Any] | None = None) -> AsyncIterator[Span]:
        with self.start_span(name, parent, kind, attributes) as span:
            yield span


__all__ = ["OtelTracer"]
