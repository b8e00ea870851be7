"""
Network Port

Architectural Intent:
- Contract for the external virtual-network provider
- Supplies the VPC and one connector subnet per availability zone to every
  other component
"""

from typing import Protocol, runtime_checkable

from ccfleet.domain.value_objects.deployment_identity import DeploymentIdentity
from ccfleet.domain.value_objects.handles import NetworkHandles
from ccfleet.domain.value_objects.settings import NetworkSettings


@runtime_checkable
class NetworkPort(Protocol):
    async def provision_network(
        self, identity: DeploymentIdentity, settings: NetworkSettings
    ) -> NetworkHandles:
        """Create (or return the existing) VPC, subnets, route tables and gateways."""
        ...

    async def destroy_network(self, identity: DeploymentIdentity) -> int:
        """Remove network resources. Returns the number of resources removed."""
        ...
