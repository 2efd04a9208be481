"""Unit tests for WorkflowCheckpointInput and ReplayBridge."""
from __future__ import annotations

import json

import pytest

from baggage_relay.kernel.errors import SerializationError
from baggage_relay.propagation import (
    ReplayBridge,
    SpanIdentity,
    TextHeaderAdapter,
    TraceContext,
    WorkflowCheckpointInput,
)

TRACE_ID = "4bf92f3577b34da6a3ce929d0e0e4736"
SPAN_ID = "00f067aa0ba902b7"


def _trigger() -> TraceContext:
    return TraceContext(
        span=SpanIdentity(trace_id=TRACE_ID, span_id=SPAN_ID, trace_state="k=v"),
        baggage={"tenant-id": "acme corp", "user-id": "42"},
    )


class TestWorkflowCheckpointInput:
    def test_enqueue_embeds_wire_form(self) -> None:
        checkpoint = ReplayBridge().enqueue(_trigger(), {"order": 1}, "inst-1")
        assert checkpoint.trace_context == {
            "traceparent": f"00-{TRACE_ID}-{SPAN_ID}-01",
            "tracestate": "k=v",
            "baggage": "tenant-id=acme%20corp,user-id=42",
        }
        assert checkpoint.payload == {"order": 1}
        assert checkpoint.instance_id == "inst-1"

    def test_json_round_trip(self) -> None:
        checkpoint = ReplayBridge().enqueue(_trigger(), {"order": 1}, "inst-1")
        assert WorkflowCheckpointInput.from_json(checkpoint.to_json()) == checkpoint

    def test_missing_field_serialises_without_key(self) -> None:
        data = WorkflowCheckpointInput(payload=1).to_dict()
        assert "trace_context" not in data

    def test_from_dict_drops_non_string_context_values(self) -> None:
        checkpoint = WorkflowCheckpointInput.from_dict(
            {"payload": 1, "trace_context": {"traceparent": 5, "baggage": "a=1"}}
        )
        assert checkpoint.trace_context == {"baggage": "a=1"}

    def test_from_dict_tolerates_malformed_shapes(self) -> None:
        assert WorkflowCheckpointInput.from_dict({"trace_context": "nope"}).trace_context is None
        assert WorkflowCheckpointInput.from_dict([1, 2]).payload == [1, 2]
        assert WorkflowCheckpointInput.from_dict({"instance_id": 7}).instance_id == ""

    def test_unserialisable_payload_raises(self) -> None:
        with pytest.raises(SerializationError):
            WorkflowCheckpointInput(payload=object()).to_json()

    def test_invalid_json_raises(self) -> None:
        with pytest.raises(SerializationError):
            WorkflowCheckpointInput.from_json("{not json")


class TestReplayBridge:
    def test_rehydrate_returns_persisted_span(self) -> None:
        bridge = ReplayBridge()
        context = bridge.rehydrate(bridge.enqueue(_trigger(), instance_id="i"))
        assert context.span == SpanIdentity(trace_id=TRACE_ID, span_id=SPAN_ID, trace_state="k=v")
        assert context.baggage == {"tenant-id": "acme corp", "user-id": "42"}

    def test_derive_is_deterministic_across_replays(self) -> None:
        bridge = ReplayBridge()
        checkpoint = bridge.enqueue(_trigger(), {"order": 1}, "inst-1")
        persisted = checkpoint.to_json()

        first = bridge.derive(WorkflowCheckpointInput.from_json(persisted))
        second = ReplayBridge().derive(WorkflowCheckpointInput.from_json(persisted))
        assert first == second
        assert first.trace_id == TRACE_ID
        assert first.parent_span_id == SPAN_ID
        assert first.baggage == {"tenant-id": "acme corp", "user-id": "42"}

    def test_steps_are_children_of_orchestrator(self) -> None:
        bridge = ReplayBridge()
        checkpoint = bridge.enqueue(_trigger(), instance_id="inst-1")
        orchestrator = bridge.derive(checkpoint)
        step = bridge.derive_step(checkpoint, 0, "reserve")
        assert step.trace_id == TRACE_ID
        assert step.parent_span_id == orchestrator.span_id

    def test_step_ids_are_stable_and_distinct(self) -> None:
        bridge = ReplayBridge()
        checkpoint = bridge.enqueue(_trigger(), instance_id="inst-1")
        ids = [bridge.derive_step(checkpoint, i, "step").span_id for i in range(3)]
        assert len(set(ids)) == 3
        assert ids == [bridge.derive_step(checkpoint, i, "step").span_id for i in range(3)]
        assert bridge.derive_step(checkpoint, 0, "other").span_id != ids[0]

    def test_derived_baggage_is_a_copy(self) -> None:
        bridge = ReplayBridge()
        checkpoint = bridge.enqueue(_trigger(), instance_id="inst-1")
        bridge.derive(checkpoint).set_baggage("tenant-id", "changed")
        assert bridge.derive(checkpoint).get_baggage("tenant-id") == "acme corp"

    def test_missing_field_falls_back_to_stable_root(self) -> None:
        bridge = ReplayBridge()
        legacy = WorkflowCheckpointInput.from_json(json.dumps({"payload": {"order": 1}, "instance_id": "old"}))
        assert legacy.trace_context is None
        first = bridge.derive(legacy)
        second = bridge.derive(legacy)
        assert first == second
        assert bridge.rehydrate(legacy).parent_span_id is None

    def test_malformed_field_falls_back_to_root(self) -> None:
        checkpoint = WorkflowCheckpointInput(
            payload=None, trace_context={"traceparent": "junk", "baggage": "a=1"}, instance_id="x"
        )
        context = ReplayBridge().rehydrate(checkpoint)
        assert context.parent_span_id is None
        assert context.baggage == {"a": "1"}

    def test_fallback_roots_differ_per_instance(self) -> None:
        bridge = ReplayBridge()
        a = bridge.derive(WorkflowCheckpointInput(instance_id="a"))
        b = bridge.derive(WorkflowCheckpointInput(instance_id="b"))
        assert a.trace_id != b.trace_id

    def test_enqueue_from_carrier(self) -> None:
        carrier = {"traceparent": f"00-{TRACE_ID}-{SPAN_ID}-01", "baggage": "a=1"}
        checkpoint = ReplayBridge().enqueue_from_carrier(carrier, TextHeaderAdapter(), {"x": 1}, "i")
        trigger = ReplayBridge().rehydrate(checkpoint)
        assert trigger.trace_id == TRACE_ID
        assert trigger.span_id != SPAN_ID
        assert trigger.baggage == {"a": "1"}
