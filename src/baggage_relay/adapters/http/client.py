"""HTTP adapter – TracingHttpClient."""
from __future__ import annotations

from typing import Any

import structlog

from baggage_relay.kernel.errors import ExternalServiceError, TimeoutError as AppTimeoutError
from baggage_relay.propagation import TextHeaderAdapter, TraceContext, W3CPropagator

logger = structlog.get_logger(__name__)


def _require_httpx() -> Any:
    try:
        import httpx  # type: ignore[import-untyped]
        return httpx
    except ImportError as exc:
        raise ImportError("Install 'baggage-relay[http]' to use the HTTP adapter") from exc


class TracingHttpClient:
    """Thin async httpx wrapper that writes ``traceparent``/``tracestate``/``baggage``.

    Every request method takes the caller's :class:`TraceContext` explicitly;
    the injected headers overwrite any same-named header passed by the caller.
    """

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 10.0,
        propagator: W3CPropagator | None = None,
        **kwargs: Any,
    ) -> None:
        httpx = _require_httpx()
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, **kwargs)
        self._propagator = propagator or W3CPropagator()
        self._adapter = TextHeaderAdapter()

    async def __aenter__(self) -> "TracingHttpClient":
        await self._client.__aenter__()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self._client.__aexit__(*args)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(self, url: str, context: TraceContext, **kwargs: Any) -> Any:
        return await self.request("GET", url, context, **kwargs)

    async def post(self, url: str, context: TraceContext, **kwargs: Any) -> Any:
        return await self.request("POST", url, context, **kwargs)

    async def put(self, url: str, context: TraceContext, **kwargs: Any) -> Any:
        return await self.request("PUT", url, context, **kwargs)

    async def patch(self, url: str, context: TraceContext, **kwargs: Any) -> Any:
        return await self.request("PATCH", url, context, **kwargs)

    async def delete(self, url: str, context: TraceContext, **kwargs: Any) -> Any:
        return await self.request("DELETE", url, context, **kwargs)

    async def request(self, method: str, url: str, context: TraceContext, **kwargs: Any) -> Any:
        httpx = _require_httpx()
        headers: dict[str, str] = dict(kwargs.pop("headers", None) or {})
        self._propagator.inject(context, headers, self._adapter)
        logger.debug(
            "http.request",
            method=method,
            url=url,
            trace_id=context.trace_id,
            span_id=context.span_id,
        )
        try:
            response = await self._client.request(method, url, headers=headers, **kwargs)
            response.raise_for_status()
            return response
        except httpx.TimeoutException as exc:
            raise AppTimeoutError(f"HTTP request timed out: {method} {url}", cause=exc) from exc
        except httpx.HTTPStatusError as exc:
            raise ExternalServiceError(
                service=url,
                message=f"HTTP {exc.response.status_code} from {method} {url}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise ExternalServiceError(service=url, message=str(exc)) from exc


__all__ = ["TracingHttpClient"]
