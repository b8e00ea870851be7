"""
Support Provider Port

Architectural Intent:
- Contract for bastion, workload, IAM and security-group modules
- Each takes identity and network handles and returns opaque handles that
  the fleet consumes unmodified
"""

from typing import Protocol, runtime_checkable

from ccfleet.domain.value_objects.deployment_identity import DeploymentIdentity
from ccfleet.domain.value_objects.handles import (
    BastionHandles,
    IamHandles,
    NetworkHandles,
    SecurityGroupHandles,
    WorkloadHandles,
)


@runtime_checkable
class SupportPort(Protocol):
    async def provision_bastion(
        self, identity: DeploymentIdentity, network: NetworkHandles
    ) -> BastionHandles: ...

    async def provision_workloads(
        self, identity: DeploymentIdentity, network: NetworkHandles, count: int
    ) -> WorkloadHandles: ...

    async def provision_iam(self, identity: DeploymentIdentity) -> IamHandles: ...

    async def provision_security_groups(
        self, identity: DeploymentIdentity, network: NetworkHandles
    ) -> SecurityGroupHandles: ...

    async def destroy_support(self, identity: DeploymentIdentity) -> int: ...
