"""Application orchestration – OrchestrationStore port and InMemoryOrchestrationStore."""

from __future__ import annotations

import abc
import copy
from dataclasses import dataclass, field
from typing import Any

from baggage_relay.application.orchestration.state import OrchestrationStatus


@dataclass
class OrchestrationRecord:
    """Durable representation of one orchestration instance.

    ``input`` is the :class:`~baggage_relay.propagation.WorkflowCheckpointInput`
    in dict form and is never rewritten after scheduling.  ``history`` holds
    one entry per completed activity, in call order.
    """

    instance_id: str
    name: str
    input: dict[str, Any]
    history: list[dict[str, Any]] = field(default_factory=list)
    status: OrchestrationStatus = OrchestrationStatus.PENDING
    output: Any = None


class OrchestrationStore(abc.ABC):
    """Port – persist and retrieve orchestration instances."""

    @abc.abstractmethod
    async def save(self, record: OrchestrationRecord) -> None:
        """Persist (upsert) *record*."""

    @abc.abstractmethod
    async def load(self, instance_id: str) -> OrchestrationRecord | None:
        """Return the latest record for *instance_id*, or ``None``."""


class InMemoryOrchestrationStore(OrchestrationStore):
    """In-memory :class:`OrchestrationStore` for tests and local development.

    Records are deep-copied on the way in and out so callers cannot mutate
    what has been "persisted".
    """

    def __init__(self) -> None:
        self._records: dict[str, OrchestrationRecord] = {}

    async def save(self, record: OrchestrationRecord) -> None:
        self._records[record.instance_id] = copy.deepcopy(record)

    async def load(self, instance_id: str) -> OrchestrationRecord | None:
        record = self._records.get(instance_id)
        return copy.deepcopy(record) if record is not None else None

    def all_records(self) -> list[OrchestrationRecord]:
        return [copy.deepcopy(r) for r in self._records.values()]

    def clear(self) -> None:
        self._records.clear()


__all__ = ["InMemoryOrchestrationStore", "OrchestrationRecord", "OrchestrationStore"]
