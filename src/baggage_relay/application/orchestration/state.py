"""Application orchestration – OrchestrationStatus enum."""

from __future__ import annotations

import enum


class OrchestrationStatus(enum.Enum):
    """Lifecycle states of an orchestration instance."""

    PENDING = "PENDING"
    """Scheduled; the orchestrator function has not run yet."""

    RUNNING = "RUNNING"
    """The orchestrator function is being (re)played."""

    COMPLETED = "COMPLETED"
    """The orchestrator function returned; ``output`` holds its result."""

    FAILED = "FAILED"
    """An activity or the orchestrator body raised."""


__all__ = ["OrchestrationStatus"]
