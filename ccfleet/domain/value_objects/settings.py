"""
Provisioning Settings Value Objects

Architectural Intent:
- Typed, validated settings for each provisioner, built once from configuration
- Range checks live here so adapters can trust what they receive
"""

import ipaddress
from dataclasses import dataclass

from ccfleet.domain.errors import ValidationError

FLOW_STICKINESS_MODES = ("5-tuple", "3-tuple", "2-tuple")


def _check_range(name: str, value: int, low: int, high: int) -> None:
    if not low <= value <= high:
        raise ValidationError(f"{name} must be {low}-{high}, got {value}")


@dataclass(frozen=True)
class HealthCheckSettings:
    port: int = 50000
    path: str = "/?cchealth"
    interval: int = 10
    healthy_threshold: int = 3
    unhealthy_threshold: int = 3

    def __post_init__(self) -> None:
        _check_range("health check port", self.port, 1, 65535)
        if not self.path.startswith("/"):
            raise ValidationError(f"health check path must start with '/', got {self.path!r}")
        _check_range("health check interval", self.interval, 5, 300)
        _check_range("healthy threshold", self.healthy_threshold, 2, 10)
        _check_range("unhealthy threshold", self.unhealthy_threshold, 2, 10)


@dataclass(frozen=True)
class LoadBalancerSettings:
    cross_zone_enabled: bool = False
    health_check: HealthCheckSettings = HealthCheckSettings()
    deregistration_delay: int = 0
    flow_stickiness: str = "5-tuple"
    rebalance_flows: bool = True

    def __post_init__(self) -> None:
        _check_range("deregistration delay", self.deregistration_delay, 0, 3600)
        if self.flow_stickiness not in FLOW_STICKINESS_MODES:
            raise ValidationError(
                f"flow_stickiness must be one of {', '.join(FLOW_STICKINESS_MODES)}, "
                f"got {self.flow_stickiness!r}"
            )


@dataclass(frozen=True)
class ScalingSettings:
    min_size: int = 2
    max_size: int = 4
    target_cpu_utilization: int = 80
    health_check_grace_period: int = 900
    warm_pool_enabled: bool = False
    zonal_asg_enabled: bool = False

    def __post_init__(self) -> None:
        if self.min_size < 0:
            raise ValidationError(f"min_size cannot be negative, got {self.min_size}")
        if self.min_size > self.max_size:
            raise ValidationError(
                f"min_size ({self.min_size}) cannot exceed max_size ({self.max_size})"
            )
        _check_range("target CPU utilization", self.target_cpu_utilization, 1, 100)
        if self.health_check_grace_period < 0:
            raise ValidationError("health_check_grace_period cannot be negative")


@dataclass(frozen=True)
class NetworkSettings:
    region: str = "us-east-1"
    vpc_cidr: str = "10.1.0.0/16"
    az_count: int = 2

    def __post_init__(self) -> None:
        try:
            network = ipaddress.ip_network(self.vpc_cidr)
        except ValueError:
            raise ValidationError(f"invalid vpc_cidr {self.vpc_cidr!r}") from None
        if network.version != 4 or network.prefixlen > 16:
            raise ValidationError(
                f"vpc_cidr must be an IPv4 block of /16 or larger, got {self.vpc_cidr}"
            )
        _check_range("az_count", self.az_count, 1, 6)


@dataclass(frozen=True)
class SupportSettings:
    bastion_enabled: bool = True
    workload_count: int = 2

    def __post_init__(self) -> None:
        _check_range("workload_count", self.workload_count, 0, 16)


@dataclass(frozen=True)
class EndpointSettings:
    acceptance_required: bool = False
    allowed_principals: tuple[str, ...] = ()


@dataclass(frozen=True)
class DnsSettings:
    domain_names: tuple[str, ...] = ()
