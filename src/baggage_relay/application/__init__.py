"""Application – use-case building blocks (framework-agnostic)."""

from baggage_relay.application.orchestration import (
    DurableOrchestrator,
    InMemoryOrchestrationStore,
    NonDeterministicOrchestrationError,
    OrchestrationContext,
    OrchestrationError,
    OrchestrationFailedError,
    OrchestrationRecord,
    OrchestrationStatus,
    OrchestrationStore,
)

__all__ = [
    "DurableOrchestrator",
    "InMemoryOrchestrationStore",
    "NonDeterministicOrchestrationError",
    "OrchestrationContext",
    "OrchestrationError",
    "OrchestrationFailedError",
    "OrchestrationRecord",
    "OrchestrationStatus",
    "OrchestrationStore",
]
