"""Kernel error hierarchy – public re-export surface.

Hierarchy::

    BaseError
    ├── DomainError          (domain.py)
    │   ├── ValidationError
    │   └── NotFoundError
    ├── ApplicationError     (application.py)
    │   └── TimeoutError
    └── InfrastructureError  (infrastructure.py)
        ├── SerializationError
        └── ExternalServiceError
"""

from baggage_relay.kernel.errors.application import ApplicationError, TimeoutError
from baggage_relay.kernel.errors.base import BaseError
from baggage_relay.kernel.errors.domain import DomainError, NotFoundError, ValidationError
from baggage_relay.kernel.errors.infrastructure import (
    ExternalServiceError,
    InfrastructureError,
    SerializationError,
)

__all__ = [
    "ApplicationError",
    "BaseError",
    "DomainError",
    "ExternalServiceError",
    "InfrastructureError",
    "NotFoundError",
    "SerializationError",
    "TimeoutError",
    "ValidationError",
]
