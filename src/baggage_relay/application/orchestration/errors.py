"""Application orchestration – errors."""

from __future__ import annotations

from typing import Any

from baggage_relay.kernel.errors import ApplicationError


class OrchestrationError(ApplicationError):
    """Base class for orchestration execution errors."""

    default_code = "orchestration_error"

    def __init__(self, message: str, instance_id: str, **kwargs: Any) -> None:
        detail = {"instance_id": instance_id, **kwargs.pop("detail", {})}
        super().__init__(message, detail=detail, **kwargs)
        self.instance_id = instance_id


class OrchestrationFailedError(OrchestrationError):
    """An activity or the orchestrator body raised.

    ``step`` is the failing activity name, ``None`` when the orchestrator
    function itself raised.
    """

    default_code = "orchestration_failed"

    def __init__(self, instance_id: str, step: str | None, cause: BaseException) -> None:
        where = f"activity '{step}'" if step else "orchestrator body"
        super().__init__(
            f"Orchestration '{instance_id}' failed in {where}",
            instance_id,
            detail={"step": step},
            cause=cause,
        )
        self.step = step


class NonDeterministicOrchestrationError(OrchestrationError):
    """Replayed code scheduled a different activity than the recorded history."""

    default_code = "orchestration_non_deterministic"

    def __init__(self, instance_id: str, sequence: int, expected: str, actual: str) -> None:
        super().__init__(
            f"Orchestration '{instance_id}' step {sequence}: history has '{expected}', code called '{actual}'",
            instance_id,
            detail={"sequence": sequence, "expected": expected, "actual": actual},
        )
        self.sequence = sequence


__all__ = [
    "NonDeterministicOrchestrationError",
    "OrchestrationError",
    "OrchestrationFailedError",
]
