"""Observability – structlog configuration and trace-context processors."""
from baggage_relay.observability.logging.filters import DEFAULT_SENSITIVE_FIELDS, SensitiveFieldsFilter
from baggage_relay.observability.logging.factory import JsonLoggerFactory
from baggage_relay.observability.logging.processors import (
    TraceContextProcessor,
    bind_trace_context,
    get_logger,
    trace_fields,
)

__all__ = [
    "DEFAULT_SENSITIVE_FIELDS",
    "JsonLoggerFactory",
    "SensitiveFieldsFilter",
    "TraceContextProcessor",
    "bind_trace_context",
    "get_logger",
    "trace_fields",
]
