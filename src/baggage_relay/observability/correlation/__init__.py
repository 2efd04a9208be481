"""Observability – correlation context carried in baggage."""
from baggage_relay.observability.correlation.context import RequestContext

__all__ = ["RequestContext"]
