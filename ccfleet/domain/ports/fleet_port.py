"""
Fleet Port

Architectural Intent:
- Contract for the autoscaling group of connector instances
- Receives a fully-resolved FleetSpec; only reached after validation passed
"""

from typing import Protocol, runtime_checkable

from ccfleet.domain.value_objects.deployment_identity import DeploymentIdentity
from ccfleet.domain.value_objects.handles import FleetHandles, FleetSpec


@runtime_checkable
class FleetPort(Protocol):
    async def provision_fleet(self, spec: FleetSpec) -> FleetHandles: ...

    async def destroy_fleet(self, identity: DeploymentIdentity) -> int: ...
