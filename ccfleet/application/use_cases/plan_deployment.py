"""
Plan Deployment Use Case

Architectural Intent:
- Side-effect-free dry run of ProvisionDeployment
- Reports the step order, the validation verdict, the desired target
  registrations and the delta against the last applied record
- Never persists an identity or touches a provider
"""

import logging
from typing import Optional

from ccfleet.application.dtos.deployment_dtos import PlanPreview, ProvisionRequest
from ccfleet.application.orchestration.dag_orchestrator import DAGOrchestrator
from ccfleet.application.use_cases.provision_deployment import (
    build_plan_steps,
    PLAN_GRAPH,
    resolve_identity,
    validate_request,
)
from ccfleet.domain.ports.state_repository_port import DeploymentStateRepository
from ccfleet.domain.services.config_validator import ConfigValidator
from ccfleet.domain.services.identity_generator import IdentityGenerator
from ccfleet.domain.services.target_registration_engine import (
    compute_delta,
    compute_registrations,
    unused_slot_mismatches,
)

logger = logging.getLogger(__name__)


async def _noop(context, results) -> None:
    return None


class PlanDeployment:
    def __init__(
        self,
        state: DeploymentStateRepository,
        identity_generator: Optional[IdentityGenerator] = None,
        validator: Optional[ConfigValidator] = None,
    ):
        self.state = state
        self.identity_generator = identity_generator or IdentityGenerator()
        self.validator = validator or ConfigValidator()

    async def execute(self, request: ProvisionRequest) -> PlanPreview:
        identity = resolve_identity(
            self.identity_generator, self.state, request, persist=False
        )
        step_order = DAGOrchestrator(
            build_plan_steps({name: _noop for name in PLAN_GRAPH})
        ).topological_order()
        validation = validate_request(self.validator, request)
        warnings = tuple(
            str(m) for m in unused_slot_mismatches(request.size_class, request.address_sets)
        )

        if not validation:
            logger.info("Plan for %s stops at validation: %s", identity, validation.message)
            return PlanPreview(
                deployment_name=str(identity),
                step_order=tuple(step_order),
                validation=validation,
                warnings=warnings,
            )

        applied = self.state.load_registrations(request.name_prefix)
        target_group = (
            applied[0].target_group_id
            if applied
            else f"(known after apply: {identity.resource_name('tg')})"
        )
        desired = compute_registrations(request.size_class, request.address_sets, target_group)
        delta = compute_delta(applied, desired)
        logger.info("Plan for %s: %s", identity, delta)
        return PlanPreview(
            deployment_name=str(identity),
            step_order=tuple(step_order),
            validation=validation,
            registrations=desired,
            delta=delta,
            warnings=warnings,
        )
