"""Application – replaying durable orchestrations."""

from baggage_relay.application.orchestration.context import OrchestrationContext
from baggage_relay.application.orchestration.engine import DurableOrchestrator
from baggage_relay.application.orchestration.errors import (
    NonDeterministicOrchestrationError,
    OrchestrationError,
    OrchestrationFailedError,
)
from baggage_relay.application.orchestration.state import OrchestrationStatus
from baggage_relay.application.orchestration.store import (
    InMemoryOrchestrationStore,
    OrchestrationRecord,
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
