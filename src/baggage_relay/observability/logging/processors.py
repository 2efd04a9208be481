"""Observability – trace-context log fields.

Log lines are correlated by binding fields read from an explicit
:class:`~baggage_relay.propagation.context.TraceContext`; nothing here reads
ambient state and nothing writes to the context.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from baggage_relay.observability.correlation import RequestContext

if TYPE_CHECKING:
    from baggage_relay.propagation.context import TraceContext


def trace_fields(context: "TraceContext") -> dict[str, Any]:
    """Log fields for *context*: trace/span ids plus request-context ids when present."""
    fields: dict[str, Any] = {"trace_id": context.trace_id, "span_id": context.span_id}
    if context.parent_span_id is not None:
        fields["parent_span_id"] = context.parent_span_id
    request = RequestContext.load(context)
    if request is not None:
        for key, value in request.to_dict().items():
            if value is not None:
                fields[key] = value
    return fields


class TraceContextProcessor:
    """structlog processor that adds :func:`trace_fields` of a fixed context.

    Explicit fields already on the event win::

        log = structlog.wrap_logger(logger, processors=[TraceContextProcessor(ctx), ...])
    """

    def __init__(self, context: "TraceContext") -> None:
        self._fields = trace_fields(context)

    def __call__(
        self,
        logger: Any,           # noqa: ARG002
        method_name: str,      # noqa: ARG002
        event_dict: dict[str, Any],
    ) -> dict[str, Any]:
        for key, value in self._fields.items():
            event_dict.setdefault(key, value)
        return event_dict


def get_logger(name: str | None = None, **initial_values: Any) -> Any:
    """Return a bound structlog logger.

    Parameters
    ----------
    name:
        Logger name (typically ``__name__`` of the calling module).
    **initial_values:
        Key-value pairs to bind on the returned logger.
    """
    logger = structlog.get_logger(name)
    if initial_values:
        logger = logger.bind(**initial_values)
    return logger


def bind_trace_context(logger: Any, context: "TraceContext") -> Any:
    """Return *logger* bound with the :func:`trace_fields` of *context*."""
    return logger.bind(**trace_fields(context))


__all__ = ["TraceContextProcessor", "bind_trace_context", "get_logger", "trace_fields"]
