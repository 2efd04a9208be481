"""FastAPI adapter – request dependencies.

No ``from __future__ import annotations`` here: FastAPI must see the real
``Request`` class on the dependency.
"""
from baggage_relay.adapters.fastapi.middleware import STATE_KEY, _require_fastapi
from baggage_relay.propagation import TraceContext, new_root


def _trace_context_dep_factory():  # noqa: ANN202
    """Return the ``get_trace_context`` dependency bound to FastAPI's ``Request``."""
    _require_fastapi()
    from fastapi import Request  # type: ignore[import-untyped]

    def get_trace_context(request: Request) -> TraceContext:
        """FastAPI dependency returning the request's :class:`TraceContext`.

        Usage::

            @app.get("/orders/{order_id}")
            async def get_order(order_id: str, ctx: TraceContext = Depends(get_trace_context)):
                ...

        Falls back to a new root context when :class:`TraceContextMiddleware`
        is not installed.
        """
        context = getattr(request.state, STATE_KEY, None)
        if isinstance(context, TraceContext):
            return context
        return new_root()

    return get_trace_context


def _make_trace_context_dep():  # noqa: ANN202
    try:
        return _trace_context_dep_factory()
    except ImportError:
        return None


# Build at import time (no-op if fastapi absent)
get_trace_context = _make_trace_context_dep()

__all__ = ["get_trace_context"]
