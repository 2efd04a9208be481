"""FastAPI adapter – inbound trace-context middleware and request dependency."""
from baggage_relay.adapters.fastapi.deps import get_trace_context
from baggage_relay.adapters.fastapi.middleware import TraceContextMiddleware

__all__ = ["TraceContextMiddleware", "get_trace_context"]
