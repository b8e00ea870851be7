"""
Load Balancer Port

Architectural Intent:
- Contract for the gateway load balancer, its target group, and target
  membership changes
- register/deregister act on a single target set per call so callers can
  build transactional applies on top
"""

from typing import Protocol, Sequence, runtime_checkable

from ccfleet.domain.value_objects.deployment_identity import DeploymentIdentity
from ccfleet.domain.value_objects.handles import LoadBalancerHandles, NetworkHandles
from ccfleet.domain.value_objects.settings import LoadBalancerSettings
from ccfleet.domain.value_objects.target_registration import TargetRegistration


@runtime_checkable
class LoadBalancerPort(Protocol):
    async def provision_load_balancer(
        self,
        identity: DeploymentIdentity,
        network: NetworkHandles,
        settings: LoadBalancerSettings,
    ) -> LoadBalancerHandles: ...

    async def register_targets(
        self, target_group_arn: str, registrations: Sequence[TargetRegistration]
    ) -> None: ...

    async def deregister_targets(
        self, target_group_arn: str, registrations: Sequence[TargetRegistration]
    ) -> None: ...

    async def describe_targets(self, target_group_arn: str) -> list[TargetRegistration]: ...

    async def destroy_load_balancer(self, identity: DeploymentIdentity) -> int: ...
