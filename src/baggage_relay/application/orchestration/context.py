"""Application orchestration – OrchestrationContext."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from baggage_relay.application.orchestration.errors import (
    NonDeterministicOrchestrationError,
    OrchestrationFailedError,
)
from baggage_relay.application.orchestration.store import OrchestrationRecord
from baggage_relay.kernel.errors import NotFoundError
from baggage_relay.propagation import ReplayBridge, TraceContext, WorkflowCheckpointInput

logger = structlog.get_logger(__name__)

type Activity = Callable[[TraceContext, Any], Awaitable[Any]]

SEQUENCE_FIELD = "sequence"
NAME_FIELD = "name"
RESULT_FIELD = "result"
SPAN_ID_FIELD = "span_id"


class OrchestrationContext:
    """Handle passed to an orchestrator function on every replay.

    ``trace_context`` is the orchestrator's own context, re-derived from the
    persisted input each time; it never changes across replays of the same
    instance.  :meth:`call_activity` hands each step its own context as the
    first argument.
    """

    def __init__(
        self,
        record: OrchestrationRecord,
        bridge: ReplayBridge,
        activities: dict[str, Activity],
        persist: Callable[[OrchestrationRecord], Awaitable[None]],
    ) -> None:
        self._record = record
        self._bridge = bridge
        self._activities = activities
        self._persist = persist
        self._checkpoint = WorkflowCheckpointInput.from_dict(record.input)
        self._trace_context = bridge.derive(self._checkpoint)
        self._sequence = 0

    @property
    def instance_id(self) -> str:
        return self._record.instance_id

    @property
    def input(self) -> Any:
        return self._checkpoint.payload

    @property
    def trace_context(self) -> TraceContext:
        return self._trace_context

    @property
    def is_replaying(self) -> bool:
        """``True`` while the next activity result will come from history."""
        return self._sequence < len(self._record.history)

    async def call_activity(self, name: str, arg: Any = None) -> Any:
        """Run activity *name* (or replay its recorded result).

        Raises :class:`OrchestrationFailedError` when the activity raises.
        """
        sequence = self._sequence
        self._sequence += 1
        step_context = self._bridge.derive_step(self._checkpoint, sequence, name)
        history = self._record.history

        if sequence < len(history):
            event = history[sequence]
            if event.get(NAME_FIELD) != name:
                raise NonDeterministicOrchestrationError(
                    self.instance_id, sequence, str(event.get(NAME_FIELD)), name
                )
            logger.debug(
                "orchestration.activity_replayed",
                instance_id=self.instance_id,
                activity=name,
                sequence=sequence,
                span_id=step_context.span_id,
            )
            return event.get(RESULT_FIELD)

        fn = self._activities.get(name)
        if fn is None:
            raise NotFoundError("activity", name)

        logger.debug(
            "orchestration.activity_started",
            instance_id=self.instance_id,
            activity=name,
            sequence=sequence,
            trace_id=step_context.trace_id,
            span_id=step_context.span_id,
        )
        try:
            result = await fn(step_context, arg)
        except Exception as exc:
            raise OrchestrationFailedError(self.instance_id, name, exc) from exc

        history.append(
            {
                SEQUENCE_FIELD: sequence,
                NAME_FIELD: name,
                RESULT_FIELD: result,
                SPAN_ID_FIELD: step_context.span_id,
            }
        )
        await self._persist(self._record)
        return result


__all__ = ["Activity", "OrchestrationContext"]
