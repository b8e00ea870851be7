"""Tests for the ProvisionDeployment use case with mocked provider ports."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from ccfleet.application.use_cases.provision_deployment import (
    NON_CRITICAL_STEPS,
    PLAN_GRAPH,
    ProvisionDeployment,
    build_plan_steps,
)
from ccfleet.domain.events.provisioning_events import (
    DeploymentProvisionedEvent,
    PlanStartedEvent,
    TargetsReconciledEvent,
    ValidationFailedEvent,
)
from ccfleet.domain.value_objects.address_sets import AddressSets
from ccfleet.domain.value_objects.handles import (
    BastionHandles,
    DnsHandles,
    EndpointHandles,
    FleetHandles,
    IamHandles,
    LoadBalancerHandles,
    NetworkHandles,
    SecurityGroupHandles,
    WorkloadHandles,
)
from ccfleet.domain.value_objects.settings import SupportSettings
from ccfleet.domain.value_objects.size_class import SizeClass

TG = "arn:aws:elasticloadbalancing:us-east-1:123456789012:targetgroup/tg/1"


def _make_ports(**overrides):
    network = MagicMock()
    network.provision_network = AsyncMock(
        return_value=NetworkHandles("vpc-1", ("subnet-a", "subnet-b"))
    )
    support = MagicMock()
    support.provision_iam = AsyncMock(return_value=IamHandles("AIPA-1"))
    support.provision_security_groups = AsyncMock(
        return_value=SecurityGroupHandles("sg-mgmt", "sg-svc")
    )
    support.provision_bastion = AsyncMock(return_value=BastionHandles("i-bastion", "1.2.3.4"))
    support.provision_workloads = AsyncMock(return_value=WorkloadHandles(("i-w1",), ("10.1.1.10",)))
    lb = MagicMock()
    lb.provision_load_balancer = AsyncMock(return_value=LoadBalancerHandles("gwlb-arn", TG))
    lb.register_targets = AsyncMock()
    lb.deregister_targets = AsyncMock()
    fleet = MagicMock()
    fleet.provision_fleet = AsyncMock(return_value=FleetHandles(("zscc-ccvm-asg",)))
    endpoints = MagicMock()
    endpoints.publish_endpoints = AsyncMock(
        return_value=EndpointHandles("com.amazonaws.vpce.svc", ("vpce-1", "vpce-2"))
    )
    dns = MagicMock()
    dns.provision_resolver_rules = AsyncMock(return_value=DnsHandles(("rslvr-rr-1",)))
    ports = dict(
        network=network, support=support, load_balancer=lb,
        fleet=fleet, endpoints=endpoints, dns=dns,
    )
    ports.update(overrides)
    return ports


def _make_use_case(state, ports, **kwargs):
    return ProvisionDeployment(state=state, **ports, **kwargs)


class TestPlanGraph:
    def test_fleet_and_registrations_gated_by_validation(self):
        steps = {s.name: s for s in build_plan_steps({n: AsyncMock() for n in PLAN_GRAPH})}
        assert steps["fleet"].gated_by == ["validate"]
        assert steps["target_registrations"].gated_by == ["validate"]
        assert steps["network"].gated_by == []

    def test_workloads_non_critical(self):
        steps = {s.name: s for s in build_plan_steps({n: AsyncMock() for n in PLAN_GRAPH})}
        assert NON_CRITICAL_STEPS == {"workloads"}
        assert steps["workloads"].is_critical is False
        assert steps["fleet"].is_critical is True


class TestProvisionDeployment:
    @pytest.mark.asyncio
    async def test_happy_path(self, state, make_request):
        ports = _make_ports()
        bus = MagicMock()
        bus.publish = AsyncMock()
        use_case = _make_use_case(state, ports, event_bus=bus)

        response = await use_case.execute(make_request())

        assert response.success
        assert response.validation.ok
        assert response.skipped_steps == ()
        assert response.outputs.target_group_arn == TG
        assert response.outputs.endpoint_ids == ("vpce-1", "vpce-2")
        assert response.outputs.deployment_name.startswith("zscc-")
        assert len(response.delta.to_add) == 4
        assert ports["load_balancer"].register_targets.await_count == 4

        spec = ports["fleet"].provision_fleet.await_args.args[0]
        assert spec.size_class is SizeClass.LARGE
        assert spec.instance_type == "m5n.4xlarge"
        assert spec.security_group_ids == ("sg-mgmt", "sg-svc")
        assert spec.target_group_arn == TG
        assert spec.name == f"zscc-ccvm-{state.load_suffix('zscc')}"

        events = bus.publish.await_args.args[0]
        assert isinstance(events[0], PlanStartedEvent)
        assert any(isinstance(e, TargetsReconciledEvent) and e.added == 4 for e in events)
        assert isinstance(events[-1], DeploymentProvisionedEvent)
        assert events[-1].success is True

    @pytest.mark.asyncio
    async def test_incompatible_profile_creates_no_fleet_or_targets(self, state, make_request):
        ports = _make_ports()
        bus = MagicMock()
        bus.publish = AsyncMock()
        telemetry = MagicMock()
        use_case = _make_use_case(state, ports, event_bus=bus, telemetry=telemetry)

        response = await use_case.execute(
            make_request(size_class="large", compute_profile="t3.medium")
        )

        assert not response.success
        assert "t3.medium" in response.message
        assert set(response.skipped_steps) == {"fleet", "target_registrations"}
        ports["fleet"].provision_fleet.assert_not_called()
        ports["load_balancer"].register_targets.assert_not_called()
        # Network and load balancer branches still converge.
        ports["network"].provision_network.assert_awaited_once()
        ports["endpoints"].publish_endpoints.assert_awaited_once()
        telemetry.record_validation_failure.assert_called_once_with("large", "t3.medium")
        events = bus.publish.await_args.args[0]
        assert any(isinstance(e, ValidationFailedEvent) for e in events)

    @pytest.mark.asyncio
    async def test_identity_reused_across_runs(self, state, make_request):
        use_case = _make_use_case(state, _make_ports())

        first = await use_case.execute(make_request())
        second = await use_case.execute(make_request())

        assert first.outputs.deployment_name == second.outputs.deployment_name

    @pytest.mark.asyncio
    async def test_second_run_registers_nothing_new(self, state, make_request):
        ports = _make_ports()
        use_case = _make_use_case(state, ports)

        await use_case.execute(make_request())
        ports["load_balancer"].register_targets.reset_mock()
        response = await use_case.execute(make_request())

        assert response.delta.is_empty
        ports["load_balancer"].register_targets.assert_not_called()
        ports["load_balancer"].deregister_targets.assert_not_called()

    @pytest.mark.asyncio
    async def test_shrinking_size_class_deregisters(self, state, make_request):
        ports = _make_ports()
        use_case = _make_use_case(state, ports)

        await use_case.execute(make_request(size_class="medium", compute_profile="m5.2xlarge"))
        response = await use_case.execute(
            make_request(size_class="small", compute_profile="m5.2xlarge")
        )

        assert [r.slot_index for r in response.delta.to_remove] == [2]
        assert response.delta.to_add == ()
        assert any("slot 2" in w for w in response.warnings)

    @pytest.mark.asyncio
    async def test_strict_slots_rejects_unused_addresses(self, state, make_request):
        ports = _make_ports()
        use_case = _make_use_case(state, ports)

        response = await use_case.execute(
            make_request(size_class="small", compute_profile="m5n.large", strict_slots=True)
        )

        assert not response.success
        assert "slot 2" in response.message
        ports["fleet"].provision_fleet.assert_not_called()

    @pytest.mark.asyncio
    async def test_address_shared_by_consumed_slots_is_rejected(self, state, make_request):
        ports = _make_ports()
        use_case = _make_use_case(state, ports)

        response = await use_case.execute(
            make_request(
                size_class="medium",
                compute_profile="m5n.2xlarge",
                address_sets=AddressSets.of(["10.1.200.10"], ["10.1.200.10"]),
            )
        )

        assert not response.success
        assert "10.1.200.10" in response.message
        ports["fleet"].provision_fleet.assert_not_called()
        ports["load_balancer"].register_targets.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_vpc_id_fails_plan(self, state, make_request):
        network = MagicMock()
        network.provision_network = AsyncMock(return_value=NetworkHandles("", ("subnet-a",)))
        ports = _make_ports(network=network)

        response = await _make_use_case(state, ports).execute(make_request())

        assert not response.success
        assert "upstream 'network' is unavailable" in response.message
        assert response.failed_steps
        ports["fleet"].provision_fleet.assert_not_called()

    @pytest.mark.asyncio
    async def test_workload_failure_is_a_warning(self, state, make_request):
        ports = _make_ports()
        ports["support"].provision_workloads = AsyncMock(side_effect=RuntimeError("quota"))

        response = await _make_use_case(state, ports).execute(make_request())

        assert response.success
        assert response.failed_steps == ("workloads",)
        assert any("quota" in w for w in response.warnings)

    @pytest.mark.asyncio
    async def test_bastion_disabled_skips_provider_call(self, state, make_request):
        ports = _make_ports()
        request = make_request(support=SupportSettings(bastion_enabled=False, workload_count=0))

        response = await _make_use_case(state, ports).execute(request)

        assert response.success
        ports["support"].provision_bastion.assert_not_called()
        ports["support"].provision_workloads.assert_not_called()

    @pytest.mark.asyncio
    async def test_telemetry_records_every_step(self, state, make_request):
        telemetry = MagicMock()
        use_case = _make_use_case(state, _make_ports(), telemetry=telemetry)

        await use_case.execute(make_request(address_sets=AddressSets.of(["10.0.0.1"])))

        recorded = {c.args[0] for c in telemetry.record_step.call_args_list}
        assert recorded == set(PLAN_GRAPH)
        telemetry.record_registrations.assert_called_once_with(1, 0)
