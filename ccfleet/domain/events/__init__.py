"""
Domain Events Package

Architectural Intent:
- Contains domain events emitted by the provisioning use cases
- Events are the primary mechanism for cross-boundary communication
"""

from ccfleet.domain.events.event_base import DomainEvent
from ccfleet.domain.events.provisioning_events import (
    PlanStartedEvent,
    ValidationFailedEvent,
    TargetsReconciledEvent,
    DeploymentProvisionedEvent,
    DeploymentTornDownEvent,
)

__all__ = [
    "DomainEvent",
    "PlanStartedEvent",
    "ValidationFailedEvent",
    "TargetsReconciledEvent",
    "DeploymentProvisionedEvent",
    "DeploymentTornDownEvent",
]
