"""
Endpoint and DNS Ports

Architectural Intent:
- Contracts for the endpoint publisher (GWLB endpoint service plus one
  endpoint per availability zone) and the DNS redirection provisioner
- Both run last and consume only network and load balancer outputs
"""

from typing import Protocol, runtime_checkable

from ccfleet.domain.value_objects.deployment_identity import DeploymentIdentity
from ccfleet.domain.value_objects.handles import (
    DnsHandles,
    EndpointHandles,
    LoadBalancerHandles,
    NetworkHandles,
)
from ccfleet.domain.value_objects.settings import DnsSettings, EndpointSettings


@runtime_checkable
class EndpointPort(Protocol):
    async def publish_endpoints(
        self,
        identity: DeploymentIdentity,
        network: NetworkHandles,
        load_balancer: LoadBalancerHandles,
        settings: EndpointSettings,
    ) -> EndpointHandles: ...

    async def destroy_endpoints(self, identity: DeploymentIdentity) -> int: ...


@runtime_checkable
class DnsPort(Protocol):
    async def provision_resolver_rules(
        self,
        identity: DeploymentIdentity,
        network: NetworkHandles,
        endpoints: EndpointHandles,
        settings: DnsSettings,
    ) -> DnsHandles: ...

    async def destroy_resolver_rules(self, identity: DeploymentIdentity) -> int: ...
