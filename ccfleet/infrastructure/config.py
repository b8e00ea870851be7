"""
Configuration Module

Architectural Intent:
- Centralized configuration loading from JSON files
- Provides typed access to every provisioning setting
- Falls back to sensible defaults when config file is absent
- Environment variables override file-based config

Design Decisions:
- Config is a frozen dataclass for immutability after load
- Nested config sections map to sub-dataclasses
- Raw values only; range and compatibility checks happen when the request
  is mapped onto domain value objects
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import dataclasses
import json
import logging
import os

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdentityConfig:
    """Deployment naming and tagging."""
    name_prefix: str = "zscc"
    owner_tag: str = "ccfleet-admin"
    vendor: str = "Zscaler"
    managed_by: str = "ccfleet"
    tags: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class NetworkConfig:
    """Virtual network layout."""
    region: str = "us-east-1"
    vpc_cidr: str = "10.1.0.0/16"
    az_count: int = 2


@dataclass(frozen=True)
class ConnectorConfig:
    """Connector fleet sizing and bootstrap."""
    size_class: str = "small"
    instance_type: str = "m5n.large"
    bootstrap_path: str = ""
    secret_name: str = ""
    http_probe_port: int = 50000
    min_size: int = 2
    max_size: int = 4
    target_cpu_utilization: int = 80
    health_check_grace_period: int = 900
    warm_pool_enabled: bool = False
    zonal_asg_enabled: bool = False


@dataclass(frozen=True)
class AddressesConfig:
    """Per-interface-slot addresses pending target registration."""
    slot1: tuple[str, ...] = ()
    slot2: tuple[str, ...] = ()
    slot3: tuple[str, ...] = ()
    strict_slots: bool = False


@dataclass(frozen=True)
class LoadBalancerConfig:
    """Gateway load balancer and target group health check."""
    cross_zone_enabled: bool = False
    health_check_port: int = 50000
    health_check_path: str = "/?cchealth"
    health_check_interval: int = 10
    healthy_threshold: int = 3
    unhealthy_threshold: int = 3
    deregistration_delay: int = 0
    flow_stickiness: str = "5-tuple"
    rebalance_flows: bool = True


@dataclass(frozen=True)
class EndpointConfig:
    """Endpoint service published over the load balancer."""
    acceptance_required: bool = False
    allowed_principals: tuple[str, ...] = ()


@dataclass(frozen=True)
class DnsConfig:
    """Resolver rules redirecting DNS to the connectors."""
    domain_names: tuple[str, ...] = ()


@dataclass(frozen=True)
class SupportConfig:
    """Bastion and connectivity-test workloads."""
    bastion_enabled: bool = True
    workload_count: int = 2


@dataclass(frozen=True)
class StateConfig:
    """Applied-state database."""
    db_path: str = "ccfleet.db"


@dataclass(frozen=True)
class TelemetryConfig:
    """OpenTelemetry configuration."""
    endpoint: str = ""
    insecure: bool = False


@dataclass(frozen=True)
class CCFleetConfig:
    """Root configuration for ccfleet."""
    identity: IdentityConfig = field(default_factory=IdentityConfig)
    network: NetworkConfig = field(default_factory=NetworkConfig)
    connector: ConnectorConfig = field(default_factory=ConnectorConfig)
    addresses: AddressesConfig = field(default_factory=AddressesConfig)
    load_balancer: LoadBalancerConfig = field(default_factory=LoadBalancerConfig)
    endpoint: EndpointConfig = field(default_factory=EndpointConfig)
    dns: DnsConfig = field(default_factory=DnsConfig)
    support: SupportConfig = field(default_factory=SupportConfig)
    state: StateConfig = field(default_factory=StateConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
    log_level: str = "WARNING"


_SECTIONS = {
    "identity": IdentityConfig,
    "network": NetworkConfig,
    "connector": ConnectorConfig,
    "addresses": AddressesConfig,
    "load_balancer": LoadBalancerConfig,
    "endpoint": EndpointConfig,
    "dns": DnsConfig,
    "support": SupportConfig,
    "state": StateConfig,
    "telemetry": TelemetryConfig,
}


def _env_override(data: dict, prefix: str = "CCFLEET") -> dict:
    """Override config values with environment variables.

    Environment variables follow the pattern CCFLEET_SECTION_KEY. Section
    names may themselves contain underscores (load_balancer), so the longest
    matching section wins.
    For example: CCFLEET_CONNECTOR_SIZE_CLASS=medium,
    CCFLEET_ADDRESSES_SLOT1=10.0.1.5,10.0.1.6
    """
    for key, value in os.environ.items():
        if not key.startswith(f"{prefix}_"):
            continue
        rest = key[len(prefix) + 1:].lower()
        section = next(
            (s for s in sorted(_SECTIONS, key=len, reverse=True) if rest.startswith(f"{s}_")),
            None,
        )
        if section:
            data.setdefault(section, {})[rest[len(section) + 1:]] = value
        else:
            data[rest] = value
    return data


def _parse_config_file(path: Path) -> dict:
    """Parse a JSON config file. Returns empty dict on failure."""
    try:
        with open(path) as f:
            return json.load(f)
    except FileNotFoundError:
        logger.debug("Config file not found: %s", path)
        return {}
    except json.JSONDecodeError as e:
        logger.warning("Invalid config file %s: %s", path, e)
        return {}


def _build_sub_config(cls, data: dict):
    """Build a sub-config dataclass from a dict, ignoring unknown keys."""
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    unknown = sorted(set(data) - valid_fields)
    if unknown:
        logger.debug("Ignoring unknown %s keys: %s", cls.__name__, unknown)
    filtered = {k: v for k, v in data.items() if k in valid_fields}

    for f in dataclasses.fields(cls):
        if f.name not in filtered:
            continue
        val = filtered[f.name]

        # Convert comma-separated strings to tuples for tuple fields
        if f.type == "tuple[str, ...]":
            if isinstance(val, str):
                filtered[f.name] = tuple(v.strip() for v in val.split(",") if v.strip())
            elif isinstance(val, list):
                filtered[f.name] = tuple(val)

        # Convert string numbers to int/bool
        elif isinstance(val, str):
            if f.type == "int":
                filtered[f.name] = int(val)
            elif f.type == "bool":
                filtered[f.name] = val.lower() in ("true", "1", "yes")
            elif f.type == "dict[str, str]":
                filtered[f.name] = json.loads(val)

    return cls(**filtered)


def load_config(
    path: Optional[str] = None,
    env_prefix: str = "CCFLEET",
) -> CCFleetConfig:
    """Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables (CCFLEET_SECTION_KEY)
    2. Config file values
    3. Defaults

    Args:
        path: Path to config file (JSON). Defaults to ccfleet.json in CWD.
        env_prefix: Environment variable prefix. Defaults to CCFLEET.
    """
    config_path = Path(path) if path else Path("ccfleet.json")
    data = _parse_config_file(config_path)
    data = _env_override(data, env_prefix)

    sections = {
        name: _build_sub_config(cls, data.get(name, {}))
        for name, cls in _SECTIONS.items()
    }
    return CCFleetConfig(**sections, log_level=data.get("log_level", "WARNING"))
