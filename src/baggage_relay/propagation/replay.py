"""Propagation – replay bridge for durable, checkpointed orchestrations.

A durable engine may tear an orchestration down and re-run it from persisted
history any number of times.  Nothing ambient survives that, and a span
started with random ids during a replay would change identity on every run.

The bridge therefore:

1. at **enqueue** time, embeds the triggering context into the
   :class:`WorkflowCheckpointInput` the engine persists verbatim;
2. at every **replay** (the first execution included), re-derives the
   orchestrator's and each step's context from that persisted field with
   :func:`~baggage_relay.propagation.context.new_child` and a
   :class:`~baggage_relay.propagation.context.DeterministicIdGenerator`.

The same logical step thus gets the same span id on every replay.  The price
is start-time fidelity: a replayed child span "starts" at a fixed logical
point, not at wall-clock time.
"""
from __future__ import annotations

import dataclasses
import json
from collections.abc import Mapping
from typing import Any, TypeVar

import structlog

from baggage_relay.kernel.errors import SerializationError
from baggage_relay.propagation import baggage as baggage_codec
from baggage_relay.propagation.carriers import CarrierAdapter, TextHeaderAdapter
from baggage_relay.propagation.context import (
    DeterministicIdGenerator,
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
    parse_traceparent,
)

logger = structlog.get_logger(__name__)

C = TypeVar("C")

TRACE_CONTEXT_FIELD = "trace_context"
PAYLOAD_FIELD = "payload"
INSTANCE_ID_FIELD = "instance_id"


@dataclasses.dataclass(frozen=True)
class WorkflowCheckpointInput:
    """Orchestration input persisted by the durable engine.

    ``trace_context`` holds the triggering context in wire form
    (``{"traceparent": ..., "tracestate": ..., "baggage": ...}``) so it is
    rehydrated byte-for-byte on every replay.  ``None`` means the history
    predates context propagation.
    """

    payload: Any = None
    trace_context: dict[str, str] | None = None
    instance_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {PAYLOAD_FIELD: self.payload, INSTANCE_ID_FIELD: self.instance_id}
        if self.trace_context is not None:
            data[TRACE_CONTEXT_FIELD] = dict(self.trace_context)
        return data

    def to_json(self) -> str:
        try:
            return json.dumps(self.to_dict(), ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise SerializationError(
                "Workflow input is not JSON serialisable",
                payload_type=type(self.payload).__name__,
                cause=exc,
            ) from exc

    @classmethod
    def from_dict(cls, data: Any) -> "WorkflowCheckpointInput":
        """Rehydrate persisted input; a missing or malformed context field is dropped."""
        if not isinstance(data, Mapping):
            return cls(payload=data)
        raw_context = data.get(TRACE_CONTEXT_FIELD)
        trace_context: dict[str, str] | None = None
        if isinstance(raw_context, Mapping):
            trace_context = {
                str(k): v for k, v in raw_context.items() if isinstance(v, str)
            }
        instance_id = data.get(INSTANCE_ID_FIELD)
        return cls(
            payload=data.get(PAYLOAD_FIELD),
            trace_context=trace_context,
            instance_id=instance_id if isinstance(instance_id, str) else "",
        )

    @classmethod
    def from_json(cls, raw: str | bytes) -> "WorkflowCheckpointInput":
        try:
            return cls.from_dict(json.loads(raw))
        except ValueError as exc:
            raise SerializationError("Workflow input is not valid JSON", cause=exc) from exc


class ReplayBridge:
    """Carry a :class:`TraceContext` through a durable orchestration.

    Parameters
    ----------
    propagator:
        Used once, at enqueue time, to extract the trigger's context from a
        live carrier.
    """

    ORCHESTRATOR_SCOPE = "orchestrator"

    def __init__(self, propagator: W3CPropagator | None = None) -> None:
        self._propagator = propagator or W3CPropagator()

    # ------------------------------------------------------------------
    # Enqueue side (live execution)
    # ------------------------------------------------------------------

    def enqueue(self, trigger: TraceContext, payload: Any = None, instance_id: str = "") -> WorkflowCheckpointInput:
        """Embed *trigger* into a new checkpoint input."""
        wire: dict[str, str] = {}
        self._propagator.inject(trigger, wire, TextHeaderAdapter())
        return WorkflowCheckpointInput(payload=payload, trace_context=wire, instance_id=instance_id)

    def enqueue_from_carrier(
        self,
        carrier: C | None,
        adapter: CarrierAdapter[C],
        payload: Any = None,
        instance_id: str = "",
    ) -> WorkflowCheckpointInput:
        """Extract the trigger's context from a live carrier, then :meth:`enqueue` it."""
        return self.enqueue(self._propagator.extract(carrier, adapter), payload, instance_id)

    # ------------------------------------------------------------------
    # Replay side (deterministic)
    # ------------------------------------------------------------------

    def rehydrate(self, checkpoint: WorkflowCheckpointInput) -> TraceContext:
        """Return the persisted trigger context itself (not a child).

        Falls back to a root context when the field is missing or malformed;
        that root is seeded from the instance id so it is also stable across
        replays of the same instance.
        """
        wire = checkpoint.trace_context or {}
        parsed = parse_traceparent(wire.get(TRACEPARENT))
        if parsed is None:
            logger.debug(
                "replay.trace_context_missing",
                instance_id=checkpoint.instance_id,
                has_field=checkpoint.trace_context is not None,
            )
            seed = checkpoint.instance_id
            context = new_root(DeterministicIdGenerator(f"root/{seed}") if seed else None)
        else:
            context = TraceContext(
                span=SpanIdentity(
                    trace_id=parsed.trace_id,
                    span_id=parsed.span_id,
                    trace_flags=parsed.trace_flags,
                    trace_state=(wire.get(TRACESTATE) or "").strip() or None,
                )
            )
        context.baggage.update(baggage_codec.decode(wire.get(BAGGAGE)))
        return context

    def derive(self, checkpoint: WorkflowCheckpointInput) -> TraceContext:
        """Context for the orchestrator body on this replay."""
        trigger = self.rehydrate(checkpoint)
        ids = DeterministicIdGenerator(
            f"{checkpoint.instance_id}/{trigger.trace_id}/{trigger.span_id}/{self.ORCHESTRATOR_SCOPE}"
        )
        return new_child(trigger, ids)

    def derive_step(self, checkpoint: WorkflowCheckpointInput, sequence: int, name: str = "") -> TraceContext:
        """Context for the *sequence*-th step scheduled by the orchestrator."""
        orchestrator = self.derive(checkpoint)
        ids = DeterministicIdGenerator(f"{orchestrator.trace_id}/{orchestrator.span_id}/{sequence}/{name}")
        return new_child(orchestrator, ids)


__all__ = [
    "INSTANCE_ID_FIELD",
    "PAYLOAD_FIELD",
    "ReplayBridge",
    "TRACE_CONTEXT_FIELD",
    "WorkflowCheckpointInput",
]
