"""Propagation – baggage codec, carrier adapters, trace context, propagator, replay bridge."""
from baggage_relay.propagation.baggage import BaggageSet, decode, encode
from baggage_relay.propagation.carriers import (
    BinaryHeaderAdapter,
    CarrierAdapter,
    TextHeaderAdapter,
    TypedPropertyAdapter,
)
from baggage_relay.propagation.context import (
    DeterministicIdGenerator,
    IdGenerator,
    RandomIdGenerator,
    SpanIdentity,
    TraceContext,
    new_child,
    new_root,
)
from baggage_relay.propagation.propagator import (
    BAGGAGE,
    TRACEPARENT,
    TRACESTATE,
    W3CPropagator,
    extract,
    format_traceparent,
    inject,
    parse_traceparent,
)
from baggage_relay.propagation.replay import ReplayBridge, WorkflowCheckpointInput

__all__ = [
    "BAGGAGE",
    "BaggageSet",
    "BinaryHeaderAdapter",
    "CarrierAdapter",
    "DeterministicIdGenerator",
    "IdGenerator",
    "RandomIdGenerator",
    "ReplayBridge",
    "SpanIdentity",
    "TRACEPARENT",
    "TRACESTATE",
    "TextHeaderAdapter",
    "TraceContext",
    "TypedPropertyAdapter",
    "W3CPropagator",
    "WorkflowCheckpointInput",
    "decode",
    "encode",
    "extract",
    "format_traceparent",
    "inject",
    "new_child",
    "new_root",
    "parse_traceparent",
]
