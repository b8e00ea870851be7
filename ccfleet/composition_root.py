"""
Composition Root

Architectural Intent:
- Dependency injection composition root for the ccfleet application
- Single place where all adapters and use cases are wired together
- No adapter instantiation should occur outside this module

Design Decisions:
- Uses a simple dataclass container instead of a DI framework
- One simulated AWS control plane implements every provider port
- Telemetry export stays disabled until an endpoint is configured
"""

from dataclasses import dataclass
from typing import Optional

from ccfleet.application.use_cases.plan_deployment import PlanDeployment
from ccfleet.application.use_cases.provision_deployment import ProvisionDeployment
from ccfleet.application.use_cases.teardown_deployment import TeardownDeployment
from ccfleet.domain.services.config_validator import ConfigValidator
from ccfleet.domain.services.identity_generator import IdentityGenerator
from ccfleet.infrastructure.adapters.aws_adapter import AWSAdapter
from ccfleet.infrastructure.config import CCFleetConfig, load_config
from ccfleet.infrastructure.event_bus import EventBus
from ccfleet.infrastructure.repositories.sqlite_state_repository import SQLiteStateRepository
from ccfleet.infrastructure.telemetry.otel_exporter import OTELExporter, create_exporter


@dataclass
class CCFleetContainer:
    """DI container holding all wired dependencies."""

    config: CCFleetConfig
    aws_adapter: AWSAdapter
    state: SQLiteStateRepository
    event_bus: EventBus
    telemetry: OTELExporter
    provision: ProvisionDeployment
    plan: PlanDeployment
    teardown: TeardownDeployment

    def close(self) -> None:
        self.telemetry.export()
        self.state.close()


def create_container(config: Optional[CCFleetConfig] = None) -> CCFleetContainer:
    """Create and wire all dependencies."""
    config = config or load_config()

    aws_adapter = AWSAdapter(region=config.network.region)
    state = SQLiteStateRepository(config.state.db_path)
    event_bus = EventBus()
    telemetry = create_exporter(
        endpoint=config.telemetry.endpoint, insecure=config.telemetry.insecure
    )
    identity_generator = IdentityGenerator(
        vendor=config.identity.vendor, managed_by=config.identity.managed_by
    )
    validator = ConfigValidator()

    provision = ProvisionDeployment(
        network=aws_adapter,
        support=aws_adapter,
        load_balancer=aws_adapter,
        fleet=aws_adapter,
        endpoints=aws_adapter,
        dns=aws_adapter,
        state=state,
        identity_generator=identity_generator,
        validator=validator,
        event_bus=event_bus,
        telemetry=telemetry,
    )
    plan = PlanDeployment(state, identity_generator, validator)
    teardown = TeardownDeployment(
        network=aws_adapter,
        support=aws_adapter,
        load_balancer=aws_adapter,
        fleet=aws_adapter,
        endpoints=aws_adapter,
        dns=aws_adapter,
        state=state,
        event_bus=event_bus,
    )

    return CCFleetContainer(
        config=config,
        aws_adapter=aws_adapter,
        state=state,
        event_bus=event_bus,
        telemetry=telemetry,
        provision=provision,
        plan=plan,
        teardown=teardown,
    )
