"""OpenTelemetry adapter – context bridge and tracer."""
from baggage_relay.adapters.opentelemetry.bridge import from_otel_context, to_otel_context
from baggage_relay.adapters.opentelemetry.tracer import OtelTracer

__all__ = ["OtelTracer", "from_otel_context", "to_otel_context"]
