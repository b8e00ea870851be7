"""
Provision Deployment Use Case

Architectural Intent:
- Orchestrates one convergent provisioning run of a connector deployment
- The plan graph is declared once (PLAN_GRAPH) and executed by the
  DAGOrchestrator; independent branches run concurrently
- Validation is an explicit result gating the fleet and target registration
  branches: a rejected configuration produces no instances and no targets

Idempotency:
- The identity suffix is persisted on first run and reused afterwards
- Providers return existing resources for unchanged inputs
- Target registrations converge by applying only the delta against the last
  applied record, as one transaction
"""

from __future__ import annotations
import logging
from typing import Any, Awaitable, Callable, Mapping, Optional

from ccfleet.application.dtos.deployment_dtos import (
    DeploymentOutputs,
    ProvisionRequest,
    ProvisionResponse,
)
from ccfleet.application.orchestration.dag_orchestrator import (
    DAGOrchestrator,
    OrchestrationError,
    StepOutcome,
    StepStatus,
    WorkflowStep,
)
from ccfleet.application.services.registration_transaction import RegistrationTransaction
from ccfleet.domain.errors import DependencyUnavailableError
from ccfleet.domain.events.event_base import DomainEvent
from ccfleet.domain.events.provisioning_events import (
    DeploymentProvisionedEvent,
    PlanStartedEvent,
    TargetsReconciledEvent,
    ValidationFailedEvent,
)
from ccfleet.domain.ports.endpoint_port import DnsPort, EndpointPort
from ccfleet.domain.ports.event_bus_port import EventBusPort
from ccfleet.domain.ports.fleet_port import FleetPort
from ccfleet.domain.ports.load_balancer_port import LoadBalancerPort
from ccfleet.domain.ports.network_port import NetworkPort
from ccfleet.domain.ports.state_repository_port import DeploymentStateRepository
from ccfleet.domain.ports.support_port import SupportPort
from ccfleet.domain.services.config_validator import ConfigValidator
from ccfleet.domain.services.identity_generator import IdentityGenerator
from ccfleet.domain.services.target_registration_engine import (
    compute_delta,
    compute_registrations,
    shared_addresses,
    unused_slot_mismatches,
)
from ccfleet.domain.value_objects.deployment_identity import DeploymentIdentity
from ccfleet.domain.value_objects.handles import (
    BastionHandles,
    FleetSpec,
    LoadBalancerHandles,
    NetworkHandles,
    WorkloadHandles,
)
from ccfleet.domain.value_objects.target_registration import RegistrationDelta
from ccfleet.domain.value_objects.validation_result import ValidationResult

logger = logging.getLogger(__name__)

# name -> (data dependencies, validation gates)
PLAN_GRAPH: dict[str, tuple[tuple[str, ...], tuple[str, ...]]] = {
    "identity": ((), ()),
    "network": (("identity",), ()),
    "validate": ((), ()),
    "iam": (("identity",), ()),
    "security_groups": (("identity", "network"), ()),
    "bastion": (("identity", "network"), ()),
    "workloads": (("identity", "network"), ()),
    "load_balancer": (("identity", "network"), ()),
    "target_registrations": (("identity", "load_balancer"), ("validate",)),
    "fleet": (
        ("identity", "network", "iam", "security_groups", "load_balancer"),
        ("validate",),
    ),
    "endpoints": (("identity", "network", "load_balancer"), ()),
    "dns": (("identity", "network", "endpoints"), ()),
}

# Synthetic connectivity-test hosts; losing them never fails the plan.
NON_CRITICAL_STEPS = frozenset({"workloads"})


def build_plan_steps(
    executors: Mapping[str, Callable[[dict[str, Any], Mapping[str, Any]], Awaitable[Any]]],
) -> list[WorkflowStep]:
    return [
        WorkflowStep(
            name,
            executors[name],
            depends_on=list(deps),
            is_critical=name not in NON_CRITICAL_STEPS,
            gated_by=list(gates),
        )
        for name, (deps, gates) in PLAN_GRAPH.items()
    ]


def resolve_identity(
    generator: IdentityGenerator,
    state: DeploymentStateRepository,
    request: ProvisionRequest,
    persist: bool = True,
) -> DeploymentIdentity:
    """Reuse the persisted suffix for this deployment, or draw and persist one."""
    suffix = state.load_suffix(request.name_prefix)
    if suffix:
        return generator.rebuild(
            request.name_prefix, suffix, request.owner_tag, request.extra_tags
        )
    identity = generator.generate(request.name_prefix, request.owner_tag, request.extra_tags)
    if persist:
        state.save_suffix(request.name_prefix, identity.suffix)
        logger.info("Generated deployment identity %s", identity)
    return identity


def validate_request(
    validator: ConfigValidator, request: ProvisionRequest
) -> ValidationResult:
    result = validator.validate(request.size_class, request.compute_profile)
    if not result:
        return result
    shared = shared_addresses(request.size_class, request.address_sets)
    if shared:
        return ValidationResult.failure(
            f"address(es) {', '.join(shared)} listed in more than one slot used by "
            f"size class {request.size_class}"
        )
    if request.strict_slots:
        mismatches = unused_slot_mismatches(request.size_class, request.address_sets)
        if mismatches:
            return ValidationResult.failure("; ".join(str(m) for m in mismatches))
    return result


def _require_network(results: Mapping[str, Any], component: str) -> NetworkHandles:
    network: NetworkHandles = results["network"]
    if not network.vpc_id:
        raise DependencyUnavailableError(component, "network", "missing VPC id")
    if not network.cc_subnet_ids:
        raise DependencyUnavailableError(component, "network", "no connector subnets")
    return network


def _require_load_balancer(results: Mapping[str, Any], component: str) -> LoadBalancerHandles:
    lb: LoadBalancerHandles = results["load_balancer"]
    if not lb.target_group_arn:
        raise DependencyUnavailableError(component, "load_balancer", "missing target group ARN")
    if not lb.gwlb_arn:
        raise DependencyUnavailableError(component, "load_balancer", "missing load balancer ARN")
    return lb


class ProvisionDeployment:
    def __init__(
        self,
        network: NetworkPort,
        support: SupportPort,
        load_balancer: LoadBalancerPort,
        fleet: FleetPort,
        endpoints: EndpointPort,
        dns: DnsPort,
        state: DeploymentStateRepository,
        identity_generator: Optional[IdentityGenerator] = None,
        validator: Optional[ConfigValidator] = None,
        event_bus: Optional[EventBusPort] = None,
        telemetry: Any = None,
    ):
        self.network = network
        self.support = support
        self.load_balancer = load_balancer
        self.fleet = fleet
        self.endpoints = endpoints
        self.dns = dns
        self.state = state
        self.identity_generator = identity_generator or IdentityGenerator()
        self.validator = validator or ConfigValidator()
        self.event_bus = event_bus
        self.telemetry = telemetry

    def build_orchestrator(
        self, request: ProvisionRequest, events: list[DomainEvent]
    ) -> DAGOrchestrator:
        prefix = request.name_prefix

        async def identity_step(context, results) -> DeploymentIdentity:
            return resolve_identity(self.identity_generator, self.state, request)

        async def network_step(context, results) -> NetworkHandles:
            return await self.network.provision_network(results["identity"], request.network)

        async def validate_step(context, results) -> ValidationResult:
            result = validate_request(self.validator, request)
            if not result:
                logger.error(
                    "Configuration rejected: %s",
                    result.message,
                    extra={"deployment": prefix, "step": "validate"},
                )
                events.append(ValidationFailedEvent(aggregate_id=prefix, message=result.message))
                if self.telemetry:
                    self.telemetry.record_validation_failure(
                        str(request.size_class), request.compute_profile
                    )
            return result

        async def iam_step(context, results):
            return await self.support.provision_iam(results["identity"])

        async def security_groups_step(context, results):
            network = _require_network(results, "security_groups")
            return await self.support.provision_security_groups(results["identity"], network)

        async def bastion_step(context, results) -> BastionHandles:
            if not request.support.bastion_enabled:
                return BastionHandles()
            network = _require_network(results, "bastion")
            return await self.support.provision_bastion(results["identity"], network)

        async def workloads_step(context, results) -> WorkloadHandles:
            if not request.support.workload_count:
                return WorkloadHandles()
            network = _require_network(results, "workloads")
            return await self.support.provision_workloads(
                results["identity"], network, request.support.workload_count
            )

        async def load_balancer_step(context, results) -> LoadBalancerHandles:
            network = _require_network(results, "load_balancer")
            return await self.load_balancer.provision_load_balancer(
                results["identity"], network, request.load_balancer
            )

        async def target_registrations_step(context, results):
            lb = _require_load_balancer(results, "target_registrations")
            desired = compute_registrations(
                request.size_class, request.address_sets, lb.target_group_arn
            )
            applied = self.state.load_registrations(prefix)
            delta = compute_delta(applied, desired)
            transaction = RegistrationTransaction(self.load_balancer, self.state, prefix)
            await transaction.apply(delta, desired)
            events.append(
                TargetsReconciledEvent(
                    aggregate_id=prefix,
                    target_group_arn=lb.target_group_arn,
                    added=len(delta.to_add),
                    removed=len(delta.to_remove),
                )
            )
            if self.telemetry:
                self.telemetry.record_registrations(len(delta.to_add), len(delta.to_remove))
            return delta

        async def fleet_step(context, results):
            identity: DeploymentIdentity = results["identity"]
            network = _require_network(results, "fleet")
            lb = _require_load_balancer(results, "fleet")
            iam = results["iam"]
            if not iam.instance_profile_id:
                raise DependencyUnavailableError("fleet", "iam", "missing instance profile")
            spec = FleetSpec(
                name=identity.resource_name("ccvm"),
                size_class=request.size_class,
                instance_type=request.compute_profile,
                subnet_ids=network.cc_subnet_ids,
                instance_profile_id=iam.instance_profile_id,
                security_group_ids=results["security_groups"].ids,
                target_group_arn=lb.target_group_arn,
                bootstrap=request.bootstrap,
                scaling=request.scaling,
                tags=identity.tags_for("ccvm"),
            )
            return await self.fleet.provision_fleet(spec)

        async def endpoints_step(context, results):
            network = _require_network(results, "endpoints")
            lb = _require_load_balancer(results, "endpoints")
            return await self.endpoints.publish_endpoints(
                results["identity"], network, lb, request.endpoint
            )

        async def dns_step(context, results):
            network = _require_network(results, "dns")
            return await self.dns.provision_resolver_rules(
                results["identity"], network, results["endpoints"], request.dns
            )

        return DAGOrchestrator(
            build_plan_steps(
                {
                    "identity": identity_step,
                    "network": network_step,
                    "validate": validate_step,
                    "iam": iam_step,
                    "security_groups": security_groups_step,
                    "bastion": bastion_step,
                    "workloads": workloads_step,
                    "load_balancer": load_balancer_step,
                    "target_registrations": target_registrations_step,
                    "fleet": fleet_step,
                    "endpoints": endpoints_step,
                    "dns": dns_step,
                }
            )
        )

    def _record_outcomes(self, outcomes: Mapping[str, StepOutcome]) -> None:
        if not self.telemetry:
            return
        for outcome in outcomes.values():
            self.telemetry.record_step(outcome.name, outcome.status.value, outcome.duration_ms)

    async def _publish(self, events: list[DomainEvent]) -> None:
        if self.event_bus and events:
            await self.event_bus.publish(events)

    async def execute(self, request: ProvisionRequest) -> ProvisionResponse:
        events: list[DomainEvent] = [
            PlanStartedEvent(aggregate_id=request.name_prefix, step_names=tuple(PLAN_GRAPH))
        ]
        mismatches = unused_slot_mismatches(request.size_class, request.address_sets)
        warnings = [str(m) for m in mismatches]
        if not request.strict_slots:
            for m in mismatches:
                logger.warning(
                    "Registration mismatch: %s",
                    m,
                    extra={"deployment": request.name_prefix, "slot": m.slot_index},
                )

        orchestrator = self.build_orchestrator(request, events)
        logger.info(
            "Provisioning %s (%s, %s)",
            request.name_prefix,
            request.size_class,
            request.compute_profile,
        )

        try:
            plan = await orchestrator.execute({"deployment": request.name_prefix})
        except OrchestrationError as e:
            logger.error("Provisioning failed: %s", e)
            self._record_outcomes(e.outcomes)
            failed = tuple(n for n, o in e.outcomes.items() if o.status is StepStatus.FAILED)
            events.append(DeploymentProvisionedEvent(aggregate_id=request.name_prefix))
            await self._publish(events)
            return ProvisionResponse(
                success=False,
                message=str(e),
                failed_steps=failed,
                warnings=tuple(warnings),
            )

        self._record_outcomes(plan.outcomes)
        results = plan.results
        validation: ValidationResult = results["validate"]

        for name in plan.failed:
            warnings.append(f"{name} failed: {plan.outcomes[name].error}")

        success = bool(validation)
        message = (
            f"Deployment {results['identity']} converged"
            if success
            else f"Validation failed: {validation.message}"
        )
        if success:
            logger.info(message)

        events.append(
            DeploymentProvisionedEvent(
                aggregate_id=request.name_prefix,
                success=success,
                skipped_steps=tuple(plan.skipped),
            )
        )
        await self._publish(events)

        return ProvisionResponse(
            success=success,
            message=message,
            outputs=self._outputs(results),
            validation=validation,
            delta=results.get("target_registrations", RegistrationDelta()),
            skipped_steps=tuple(plan.skipped),
            failed_steps=tuple(plan.failed),
            warnings=tuple(warnings),
        )

    @staticmethod
    def _outputs(results: Mapping[str, Any]) -> DeploymentOutputs:
        identity = results.get("identity")
        network = results.get("network")
        lb = results.get("load_balancer")
        endpoints = results.get("endpoints")
        fleet = results.get("fleet")
        dns = results.get("dns")
        return DeploymentOutputs(
            deployment_name=str(identity) if identity else "",
            vpc_id=network.vpc_id if network else "",
            cc_subnet_ids=network.cc_subnet_ids if network else (),
            gwlb_arn=lb.gwlb_arn if lb else "",
            target_group_arn=lb.target_group_arn if lb else "",
            endpoint_service_name=endpoints.service_name if endpoints else "",
            endpoint_ids=endpoints.endpoint_ids if endpoints else (),
            asg_names=fleet.asg_names if fleet else (),
            resolver_rule_ids=dns.rule_ids if dns else (),
        )
