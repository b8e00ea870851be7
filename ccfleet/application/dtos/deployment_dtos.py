"""
Deployment DTOs

Architectural Intent:
- Data Transfer Objects for provisioning use case boundaries
- Input validation at the application boundary
- Decouples configuration representation from the domain model
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, TYPE_CHECKING

from ccfleet.domain.errors import ValidationError
from ccfleet.domain.value_objects.address_sets import AddressSets
from ccfleet.domain.value_objects.bootstrap_payload import BootstrapPayload
from ccfleet.domain.value_objects.deployment_identity import validate_name_prefix
from ccfleet.domain.value_objects.settings import (
    DnsSettings,
    EndpointSettings,
    HealthCheckSettings,
    LoadBalancerSettings,
    NetworkSettings,
    ScalingSettings,
    SupportSettings,
)
from ccfleet.domain.value_objects.size_class import SizeClass
from ccfleet.domain.value_objects.target_registration import (
    RegistrationDelta,
    TargetRegistration,
)
from ccfleet.domain.value_objects.validation_result import ValidationResult

if TYPE_CHECKING:
    from ccfleet.infrastructure.config import CCFleetConfig


@dataclass(frozen=True)
class ProvisionRequest:
    name_prefix: str
    owner_tag: str
    size_class: SizeClass
    compute_profile: str
    address_sets: AddressSets = AddressSets()
    network: NetworkSettings = NetworkSettings()
    load_balancer: LoadBalancerSettings = LoadBalancerSettings()
    scaling: ScalingSettings = ScalingSettings()
    endpoint: EndpointSettings = EndpointSettings()
    dns: DnsSettings = DnsSettings()
    support: SupportSettings = SupportSettings()
    bootstrap: BootstrapPayload = BootstrapPayload()
    extra_tags: dict[str, str] = field(default_factory=dict, hash=False)
    strict_slots: bool = False

    def __post_init__(self) -> None:
        validate_name_prefix(self.name_prefix)
        if not self.owner_tag:
            raise ValidationError("owner_tag cannot be empty")
        if not self.compute_profile:
            raise ValidationError("compute_profile cannot be empty")
        if not isinstance(self.size_class, SizeClass):
            object.__setattr__(self, "size_class", SizeClass.parse(self.size_class))

    @staticmethod
    def from_config(config: "CCFleetConfig") -> "ProvisionRequest":
        connector = config.connector
        lb = config.load_balancer

        if connector.bootstrap_path:
            bootstrap = BootstrapPayload.from_file(connector.bootstrap_path)
        else:
            bootstrap = BootstrapPayload.from_parameters(
                {
                    "SECRET_NAME": connector.secret_name,
                    "HTTP_PROBE_PORT": str(connector.http_probe_port),
                    "GWLB_ENABLED": "true",
                }
            )

        return ProvisionRequest(
            name_prefix=config.identity.name_prefix,
            owner_tag=config.identity.owner_tag,
            size_class=SizeClass.parse(connector.size_class),
            compute_profile=connector.instance_type,
            address_sets=AddressSets.of(
                config.addresses.slot1, config.addresses.slot2, config.addresses.slot3
            ),
            network=NetworkSettings(
                region=config.network.region,
                vpc_cidr=config.network.vpc_cidr,
                az_count=config.network.az_count,
            ),
            load_balancer=LoadBalancerSettings(
                cross_zone_enabled=lb.cross_zone_enabled,
                health_check=HealthCheckSettings(
                    port=lb.health_check_port,
                    path=lb.health_check_path,
                    interval=lb.health_check_interval,
                    healthy_threshold=lb.healthy_threshold,
                    unhealthy_threshold=lb.unhealthy_threshold,
                ),
                deregistration_delay=lb.deregistration_delay,
                flow_stickiness=lb.flow_stickiness,
                rebalance_flows=lb.rebalance_flows,
            ),
            scaling=ScalingSettings(
                min_size=connector.min_size,
                max_size=connector.max_size,
                target_cpu_utilization=connector.target_cpu_utilization,
                health_check_grace_period=connector.health_check_grace_period,
                warm_pool_enabled=connector.warm_pool_enabled,
                zonal_asg_enabled=connector.zonal_asg_enabled,
            ),
            endpoint=EndpointSettings(
                acceptance_required=config.endpoint.acceptance_required,
                allowed_principals=config.endpoint.allowed_principals,
            ),
            dns=DnsSettings(domain_names=config.dns.domain_names),
            support=SupportSettings(
                bastion_enabled=config.support.bastion_enabled,
                workload_count=config.support.workload_count,
            ),
            bootstrap=bootstrap,
            extra_tags=dict(config.identity.tags),
            strict_slots=config.addresses.strict_slots,
        )


@dataclass(frozen=True)
class DeploymentOutputs:
    deployment_name: str = ""
    vpc_id: str = ""
    cc_subnet_ids: tuple[str, ...] = ()
    gwlb_arn: str = ""
    target_group_arn: str = ""
    endpoint_service_name: str = ""
    endpoint_ids: tuple[str, ...] = ()
    asg_names: tuple[str, ...] = ()
    resolver_rule_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class ProvisionResponse:
    success: bool
    message: str
    outputs: DeploymentOutputs = DeploymentOutputs()
    validation: Optional[ValidationResult] = None
    delta: RegistrationDelta = RegistrationDelta()
    skipped_steps: tuple[str, ...] = ()
    failed_steps: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class PlanPreview:
    deployment_name: str
    step_order: tuple[str, ...]
    validation: ValidationResult
    registrations: tuple[TargetRegistration, ...] = ()
    delta: RegistrationDelta = RegistrationDelta()
    warnings: tuple[str, ...] = ()
