"""
Teardown Deployment Use Case

Architectural Intent:
- Removes every resource group of a deployment in reverse dependency order
- Deregisters the last applied target set as one transaction before the
  load balancer goes away
- Forgets the persisted identity only after the whole plan succeeded
"""

import logging
from typing import Optional

from ccfleet.application.orchestration.dag_orchestrator import (
    DAGOrchestrator,
    OrchestrationError,
    WorkflowStep,
)
from ccfleet.application.services.registration_transaction import RegistrationTransaction
from ccfleet.domain.events.provisioning_events import DeploymentTornDownEvent
from ccfleet.domain.ports.endpoint_port import DnsPort, EndpointPort
from ccfleet.domain.ports.event_bus_port import EventBusPort
from ccfleet.domain.ports.fleet_port import FleetPort
from ccfleet.domain.ports.load_balancer_port import LoadBalancerPort
from ccfleet.domain.ports.network_port import NetworkPort
from ccfleet.domain.ports.state_repository_port import DeploymentStateRepository
from ccfleet.domain.ports.support_port import SupportPort
from ccfleet.domain.services.target_registration_engine import compute_delta
from ccfleet.domain.value_objects.deployment_identity import DeploymentIdentity

logger = logging.getLogger(__name__)


class TeardownDeployment:
    def __init__(
        self,
        network: NetworkPort,
        support: SupportPort,
        load_balancer: LoadBalancerPort,
        fleet: FleetPort,
        endpoints: EndpointPort,
        dns: DnsPort,
        state: DeploymentStateRepository,
        event_bus: Optional[EventBusPort] = None,
    ):
        self.network = network
        self.support = support
        self.load_balancer = load_balancer
        self.fleet = fleet
        self.endpoints = endpoints
        self.dns = dns
        self.state = state
        self.event_bus = event_bus

    async def execute(self, name_prefix: str) -> bool:
        suffix = self.state.load_suffix(name_prefix)
        if not suffix:
            logger.warning("No recorded deployment for prefix %s", name_prefix)
            return False
        identity = DeploymentIdentity(name_prefix=name_prefix, suffix=suffix)

        async def dns_step(context, results):
            return await self.dns.destroy_resolver_rules(identity)

        async def endpoints_step(context, results):
            return await self.endpoints.destroy_endpoints(identity)

        async def targets_step(context, results):
            applied = self.state.load_registrations(name_prefix)
            delta = compute_delta(applied, ())
            transaction = RegistrationTransaction(self.load_balancer, self.state, name_prefix)
            await transaction.apply(delta, ())
            return len(delta.to_remove)

        async def fleet_step(context, results):
            return await self.fleet.destroy_fleet(identity)

        async def load_balancer_step(context, results):
            return await self.load_balancer.destroy_load_balancer(identity)

        async def support_step(context, results):
            return await self.support.destroy_support(identity)

        async def network_step(context, results):
            return await self.network.destroy_network(identity)

        orchestrator = DAGOrchestrator([
            WorkflowStep("dns", dns_step),
            WorkflowStep("endpoints", endpoints_step, depends_on=["dns"]),
            WorkflowStep("target_registrations", targets_step),
            WorkflowStep("fleet", fleet_step),
            WorkflowStep(
                "load_balancer",
                load_balancer_step,
                depends_on=["endpoints", "target_registrations", "fleet"],
            ),
            WorkflowStep("support", support_step, depends_on=["fleet"]),
            WorkflowStep(
                "network", network_step, depends_on=["load_balancer", "support"]
            ),
        ])

        try:
            plan = await orchestrator.execute({"deployment": name_prefix})
        except OrchestrationError as e:
            logger.error("Teardown of %s failed: %s", identity, e)
            return False

        self.state.forget(name_prefix)
        removed = sum(v for v in plan.results.values() if isinstance(v, int))
        logger.info("Tore down %s (%d resources)", identity, removed)
        if self.event_bus:
            await self.event_bus.publish([DeploymentTornDownEvent(aggregate_id=name_prefix)])
        return True
