"""
Domain Ports Package

Architectural Intent:
- Contains port interfaces (abstract contracts) for external collaborators
- Ports define what the provisioning core needs, adapters implement how
- Follows Hexagonal Architecture principles
"""

from ccfleet.domain.ports.network_port import NetworkPort
from ccfleet.domain.ports.support_port import SupportPort
from ccfleet.domain.ports.load_balancer_port import LoadBalancerPort
from ccfleet.domain.ports.fleet_port import FleetPort
from ccfleet.domain.ports.endpoint_port import EndpointPort, DnsPort
from ccfleet.domain.ports.state_repository_port import DeploymentStateRepository
from ccfleet.domain.ports.event_bus_port import EventBusPort

__all__ = [
    "NetworkPort",
    "SupportPort",
    "LoadBalancerPort",
    "FleetPort",
    "EndpointPort",
    "DnsPort",
    "DeploymentStateRepository",
    "EventBusPort",
]
