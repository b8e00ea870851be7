"""
Provisioning Events

Domain Events:
- PlanStartedEvent: a provisioning plan is about to run
- ValidationFailedEvent: the size class / compute pairing was rejected
- TargetsReconciledEvent: a registration delta was applied to a target group
- DeploymentProvisionedEvent: a provisioning plan finished (successfully or not)
- DeploymentTornDownEvent: every resource of a deployment was removed
"""

from dataclasses import dataclass
from typing import Any

from ccfleet.domain.events.event_base import DomainEvent


@dataclass(frozen=True)
class PlanStartedEvent(DomainEvent):
    step_names: tuple[str, ...] = ()


@dataclass(frozen=True)
class ValidationFailedEvent(DomainEvent):
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "message": self.message}


@dataclass(frozen=True)
class TargetsReconciledEvent(DomainEvent):
    target_group_arn: str = ""
    added: int = 0
    removed: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "target_group_arn": self.target_group_arn,
            "added": self.added,
            "removed": self.removed,
        }


@dataclass(frozen=True)
class DeploymentProvisionedEvent(DomainEvent):
    success: bool = False
    skipped_steps: tuple[str, ...] = ()


@dataclass(frozen=True)
class DeploymentTornDownEvent(DomainEvent):
    pass
