"""Application orchestration – DurableOrchestrator."""

from __future__ import annotations

import uuid
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import structlog

from baggage_relay.application.orchestration.context import Activity, OrchestrationContext
from baggage_relay.application.orchestration.errors import (
    OrchestrationError,
    OrchestrationFailedError,
)
from baggage_relay.application.orchestration.state import OrchestrationStatus
from baggage_relay.application.orchestration.store import (
    InMemoryOrchestrationStore,
    OrchestrationRecord,
    OrchestrationStore,
)
from baggage_relay.kernel.errors import NotFoundError
from baggage_relay.propagation import CarrierAdapter, ReplayBridge, TraceContext, WorkflowCheckpointInput

logger = structlog.get_logger(__name__)

C = TypeVar("C")

type OrchestratorFunction = Callable[[OrchestrationContext], Awaitable[Any]]


class DurableOrchestrator:
    """In-process, replay-based orchestration engine.

    :meth:`run` always executes the orchestrator function from the start.
    Activities that already completed return their recorded result instead
    of running again, and every context the function sees is re-derived from
    the persisted input by the :class:`~baggage_relay.propagation.ReplayBridge`,
    so a replay reproduces the same span ids as the first execution.

    Example::

        engine = DurableOrchestrator()
        engine.activity("reserve", reserve_stock)
        engine.register("place-order", place_order)
        instance_id = await engine.schedule("place-order", {"sku": "A1"}, trigger)
        output = await engine.run(instance_id)
    """

    def __init__(
        self,
        store: OrchestrationStore | None = None,
        bridge: ReplayBridge | None = None,
    ) -> None:
        self._store = store or InMemoryOrchestrationStore()
        self._bridge = bridge or ReplayBridge()
        self._orchestrations: dict[str, OrchestratorFunction] = {}
        self._activities: dict[str, Activity] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, name: str, fn: OrchestratorFunction) -> None:
        """Register orchestrator function *fn* under *name*."""
        self._orchestrations[name] = fn

    def activity(self, name: str, fn: Activity) -> None:
        """Register activity *fn*; it is called as ``fn(trace_context, arg)``."""
        self._activities[name] = fn

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    async def schedule(
        self,
        name: str,
        payload: Any = None,
        trigger: TraceContext | None = None,
        instance_id: str | None = None,
    ) -> str:
        """Persist a new instance whose input embeds *trigger*; return its id."""
        instance_id = self._new_instance_id(name, instance_id)
        checkpoint = (
            self._bridge.enqueue(trigger, payload, instance_id)
            if trigger is not None
            else WorkflowCheckpointInput(payload=payload, instance_id=instance_id)
        )
        return await self._create(name, checkpoint)

    async def schedule_from_carrier(
        self,
        name: str,
        carrier: C | None,
        adapter: CarrierAdapter[C],
        payload: Any = None,
        instance_id: str | None = None,
    ) -> str:
        """Like :meth:`schedule`, extracting the trigger from a live carrier."""
        instance_id = self._new_instance_id(name, instance_id)
        checkpoint = self._bridge.enqueue_from_carrier(carrier, adapter, payload, instance_id)
        return await self._create(name, checkpoint)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def run(self, instance_id: str) -> Any:
        """Replay instance *instance_id* and return the orchestrator's output.

        Raises :class:`OrchestrationFailedError` when an activity or the
        orchestrator body raises; the record is left ``FAILED``.
        """
        record = await self._store.load(instance_id)
        if record is None:
            raise NotFoundError("orchestration instance", instance_id)
        fn = self._orchestrations.get(record.name)
        if fn is None:
            raise NotFoundError("orchestration", record.name)

        ctx = OrchestrationContext(record, self._bridge, self._activities, self._store.save)
        log = logger.bind(
            instance_id=instance_id,
            orchestration=record.name,
            trace_id=ctx.trace_context.trace_id,
            span_id=ctx.trace_context.span_id,
        )
        log.debug("orchestration.replay_started", history_length=len(record.history))

        record.status = OrchestrationStatus.RUNNING
        await self._store.save(record)
        try:
            output = await fn(ctx)
        except OrchestrationError as exc:
            await self._fail(record)
            log.warning("orchestration.failed", code=exc.code, error=exc.message)
            raise
        except Exception as exc:
            await self._fail(record)
            log.warning("orchestration.failed", error=repr(exc))
            raise OrchestrationFailedError(instance_id, None, exc) from exc

        record.status = OrchestrationStatus.COMPLETED
        record.output = output
        await self._store.save(record)
        log.debug("orchestration.completed")
        return output

    async def get(self, instance_id: str) -> OrchestrationRecord | None:
        return await self._store.load(instance_id)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _new_instance_id(self, name: str, instance_id: str | None) -> str:
        if name not in self._orchestrations:
            raise NotFoundError("orchestration", name)
        return instance_id or str(uuid.uuid4())

    async def _create(self, name: str, checkpoint: WorkflowCheckpointInput) -> str:
        record = OrchestrationRecord(
            instance_id=checkpoint.instance_id,
            name=name,
            input=checkpoint.to_dict(),
        )
        await self._store.save(record)
        logger.debug("orchestration.scheduled", instance_id=record.instance_id, orchestration=name)
        return record.instance_id

    async def _fail(self, record: OrchestrationRecord) -> None:
        record.status = OrchestrationStatus.FAILED
        await self._store.save(record)


__all__ = ["DurableOrchestrator", "OrchestratorFunction"]
