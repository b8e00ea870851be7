"""
Provider Handles

Architectural Intent:
- Immutable outputs returned by each external provisioner
- Consumers receive these values, never the provisioner itself
- Support-provider handles are passed through to the fleet unmodified
"""

from dataclasses import dataclass, field

from ccfleet.domain.value_objects.bootstrap_payload import BootstrapPayload
from ccfleet.domain.value_objects.settings import ScalingSettings
from ccfleet.domain.value_objects.size_class import SizeClass


@dataclass(frozen=True)
class NetworkHandles:
    vpc_id: str
    cc_subnet_ids: tuple[str, ...]
    availability_zones: tuple[str, ...] = ()
    public_subnet_ids: tuple[str, ...] = ()
    workload_subnet_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class BastionHandles:
    instance_id: str = ""
    public_ip: str = ""

    @property
    def enabled(self) -> bool:
        return bool(self.instance_id)


@dataclass(frozen=True)
class WorkloadHandles:
    instance_ids: tuple[str, ...] = ()
    private_ips: tuple[str, ...] = ()


@dataclass(frozen=True)
class IamHandles:
    instance_profile_id: str
    role_name: str = ""


@dataclass(frozen=True)
class SecurityGroupHandles:
    management_sg_id: str
    service_sg_id: str

    @property
    def ids(self) -> tuple[str, ...]:
        return (self.management_sg_id, self.service_sg_id)


@dataclass(frozen=True)
class LoadBalancerHandles:
    gwlb_arn: str
    target_group_arn: str


@dataclass(frozen=True)
class FleetSpec:
    name: str
    size_class: SizeClass
    instance_type: str
    subnet_ids: tuple[str, ...]
    instance_profile_id: str
    security_group_ids: tuple[str, ...]
    target_group_arn: str
    bootstrap: BootstrapPayload = BootstrapPayload()
    scaling: ScalingSettings = ScalingSettings()
    tags: dict[str, str] = field(default_factory=dict, hash=False)


@dataclass(frozen=True)
class FleetHandles:
    asg_names: tuple[str, ...]
    launch_template_id: str = ""


@dataclass(frozen=True)
class EndpointHandles:
    service_name: str
    endpoint_ids: tuple[str, ...]


@dataclass(frozen=True)
class DnsHandles:
    rule_ids: tuple[str, ...] = ()
