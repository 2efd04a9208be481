"""HTTP adapter – async httpx client that injects trace context per request."""
from baggage_relay.adapters.http.client import TracingHttpClient

__all__ = ["TracingHttpClient"]
