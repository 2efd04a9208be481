"""Unit tests for the tracing ports and NoopTracer."""
from __future__ import annotations

import asyncio

import pytest

from baggage_relay.observability.tracing import NoopTracer, SpanKind
from baggage_relay.propagation import new_root


class TestNoopTracer:
    def test_span_context_is_child_of_parent(self) -> None:
        parent = new_root()
        parent.set_baggage("a", "1")
        with NoopTracer().start_span("work", parent, SpanKind.INTERNAL) as span:
            assert span.context.parent_span_id == parent.span_id
            assert span.context.trace_id == parent.trace_id
            assert span.context.baggage == {"a": "1"}

    def test_async_span(self) -> None:
        parent = new_root()

        async def run() -> str | None:
            async with NoopTracer().start_async_span("work", parent) as span:
                span.set_attribute("k", "v")
                return span.context.parent_span_id

        assert asyncio.run(run()) == parent.span_id

    def test_exception_propagates(self) -> None:
        with pytest.raises(ValueError):
            with NoopTracer().start_span("work", new_root()):
                raise ValueError("boom")
