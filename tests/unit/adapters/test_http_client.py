"""Unit tests – TracingHttpClient (respx-mocked)."""
from __future__ import annotations

import asyncio

import httpx
import pytest
import respx

from baggage_relay.adapters.http.client import TracingHttpClient
from baggage_relay.kernel.errors import ExternalServiceError, TimeoutError as AppTimeoutError
from baggage_relay.propagation import SpanIdentity, TraceContext, W3CPropagator

TRACEPARENT = "00-4bf92f3577b34da6a3ce929d0e0e4736-00f067aa0ba902b7-01"


def _context(**baggage: str) -> TraceContext:
    return TraceContext(
        span=SpanIdentity(
            trace_id="4bf92f3577b34da6a3ce929d0e0e4736",
            span_id="00f067aa0ba902b7",
            trace_state="vendor=1",
        ),
        baggage=dict(baggage),
    )


class TestTraceHeaderInjection:
    @respx.mock
    def test_headers_injected(self) -> None:
        route = respx.get("http://svc/orders").mock(return_value=httpx.Response(200))

        async def run() -> None:
            async with TracingHttpClient() as client:
                await client.get("http://svc/orders", _context(**{"tenant-id": "acme corp"}))

        asyncio.run(run())
        sent = route.calls.last.request
        assert sent.headers["traceparent"] == TRACEPARENT
        assert sent.headers["tracestate"] == "vendor=1"
        assert sent.headers["baggage"] == "tenant-id=acme%20corp"

    @respx.mock
    def test_no_baggage_header_when_empty(self) -> None:
        route = respx.post("http://svc/orders").mock(return_value=httpx.Response(201))

        async def run() -> None:
            async with TracingHttpClient() as client:
                await client.post("http://svc/orders", _context(), json={"a": 1})

        asyncio.run(run())
        assert "baggage" not in route.calls.last.request.headers

    @respx.mock
    def test_caller_headers_kept_and_trace_headers_win(self) -> None:
        route = respx.get("http://svc/x").mock(return_value=httpx.Response(200))

        async def run() -> None:
            async with TracingHttpClient() as client:
                await client.get(
                    "http://svc/x",
                    _context(),
                    headers={"X-Api": "1", "Traceparent": "stale"},
                )

        asyncio.run(run())
        sent = route.calls.last.request
        assert sent.headers["x-api"] == "1"
        assert sent.headers["traceparent"] == TRACEPARENT

    @respx.mock
    def test_tracestate_suppressed_by_propagator(self) -> None:
        route = respx.get("http://svc/x").mock(return_value=httpx.Response(200))

        async def run() -> None:
            async with TracingHttpClient(propagator=W3CPropagator(propagate_tracestate=False)) as client:
                await client.get("http://svc/x", _context())

        asyncio.run(run())
        assert "tracestate" not in route.calls.last.request.headers


class TestErrorMapping:
    @respx.mock
    def test_status_error(self) -> None:
        respx.get("http://svc/missing").mock(return_value=httpx.Response(404))

        async def run() -> None:
            async with TracingHttpClient() as client:
                await client.get("http://svc/missing", _context())

        with pytest.raises(ExternalServiceError) as exc_info:
            asyncio.run(run())
        assert exc_info.value.status_code == 404

    @respx.mock
    def test_timeout(self) -> None:
        respx.get("http://svc/slow").mock(side_effect=httpx.ReadTimeout("slow"))

        async def run() -> None:
            async with TracingHttpClient() as client:
                await client.get("http://svc/slow", _context())

        with pytest.raises(AppTimeoutError):
            asyncio.run(run())

    @respx.mock
    def test_connect_error(self) -> None:
        respx.delete("http://svc/down").mock(side_effect=httpx.ConnectError("refused"))

        async def run() -> None:
            async with TracingHttpClient() as client:
                await client.delete("http://svc/down", _context())

        with pytest.raises(ExternalServiceError):
            asyncio.run(run())
