"""FastAPI adapter – TraceContextMiddleware (pure ASGI)."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from baggage_relay.propagation import TRACEPARENT, TextHeaderAdapter, W3CPropagator, format_traceparent

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Receive, Scope, Send

logger = structlog.get_logger(__name__)

STATE_KEY = "trace_context"


def _require_fastapi() -> None:
    try:
        import fastapi  # noqa: F401
    except ImportError as exc:
        raise ImportError(
            "Install 'baggage-relay[fastapi]' to use the FastAPI adapter"
        ) from exc


class TraceContextMiddleware:
    """Extract the inbound context and expose it as ``request.state.trace_context``.

    The ``traceparent`` of the local (server) span is echoed on the response
    so callers can correlate.  ASGI header names arrive lower-cased as bytes
    and are decoded as latin-1 before extraction.
    """

    def __init__(
        self,
        app: "ASGIApp",
        propagator: W3CPropagator | None = None,
        echo_traceparent: bool = True,
    ) -> None:
        _require_fastapi()
        self.app = app
        self._propagator = propagator or W3CPropagator()
        self._adapter = TextHeaderAdapter()
        self._echo = echo_traceparent

    async def __call__(self, scope: "Scope", receive: "Receive", send: "Send") -> None:
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return

        headers: dict[str, str] = {}
        for raw_name, raw_value in scope.get("headers", []):
            name = raw_name.decode("latin-1").lower()
            value = raw_value.decode("latin-1")
            headers[name] = f"{headers[name]},{value}" if name in headers else value

        context = self._propagator.extract(headers, self._adapter)
        scope.setdefault("state", {})[STATE_KEY] = context
        logger.debug(
            "fastapi.trace_context_extracted",
            path=scope.get("path"),
            trace_id=context.trace_id,
            span_id=context.span_id,
            parent_span_id=context.parent_span_id,
        )

        if not self._echo:
            await self.app(scope, receive, send)
            return

        header = (TRACEPARENT.encode(), format_traceparent(context.span).encode())

        async def send_with_header(message: Any) -> None:
            if message["type"] == "http.response.start":
                headers_list: list[tuple[bytes, bytes]] = list(message.get("headers", []))
                headers_list.append(header)
                message = {**message, "headers": headers_list}
            await send(message)

        await self.app(scope, receive, send_with_header)


__all__ = ["STATE_KEY", "TraceContextMiddleware"]
