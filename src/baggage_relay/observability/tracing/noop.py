"""Observability – NoopTracer."""
from __future__ import annotations

import contextlib
from typing import Any, AsyncIterator, Iterator

from baggage_relay.observability.tracing.ports import Span, SpanKind, Tracer
from baggage_relay.propagation.context import TraceContext, new_child


class _NoopSpan(Span):
    def __init__(self, context: TraceContext) -> None:
        self._context = context

    @property
    def context(self) -> TraceContext:
        return self._context

    def set_attribute(self, key: str, value: Any) -> None:
        pass

    def set_status_ok(self) -> None:
        pass

    def record_exception(self, exc: Exception) -> None:
        pass

    def end(self) -> None:
        pass


class NoopTracer(Tracer):
    """Records nothing, but still derives a child context for each span."""

    @contextlib.contextmanager
    def start_span(self, name: str, parent: TraceContext, kind: SpanKind = SpanKind.INTERNAL, attributes: dict[str, Any] | None = None) -> Iterator[Span]:  # noqa: ARG002
        yield _NoopSpan(new_child(parent))

    @contextlib.asynccontextmanager
    async def start_async_span(self, name: str, parent: TraceContext, kind: SpanKind = SpanKind.INTERNAL, attributes: dict[str, Any] | None = None) -> AsyncIterator[Span]:  # noqa: ARG002
        yield _NoopSpan(new_child(parent))


__all__ = ["NoopTracer"]
