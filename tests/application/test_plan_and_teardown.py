"""Tests for the dry-run plan and teardown use cases."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from ccfleet.application.use_cases.plan_deployment import PlanDeployment
from ccfleet.application.use_cases.provision_deployment import PLAN_GRAPH
from ccfleet.application.use_cases.teardown_deployment import TeardownDeployment
from ccfleet.domain.events.provisioning_events import DeploymentTornDownEvent
from ccfleet.domain.value_objects.target_registration import TargetRegistration


class TestPlanDeployment:
    @pytest.mark.asyncio
    async def test_plan_does_not_persist_identity(self, state, make_request):
        preview = await PlanDeployment(state).execute(make_request())

        assert state.load_suffix("zscc") is None
        assert preview.deployment_name.startswith("zscc-")
        assert preview.validation.ok

    @pytest.mark.asyncio
    async def test_step_order_respects_dependencies(self, state, make_request):
        preview = await PlanDeployment(state).execute(make_request())

        order = list(preview.step_order)
        assert set(order) == set(PLAN_GRAPH)
        for name, (deps, gates) in PLAN_GRAPH.items():
            for dep in deps + gates:
                assert order.index(dep) < order.index(name)

    @pytest.mark.asyncio
    async def test_plan_before_first_apply(self, state, make_request):
        preview = await PlanDeployment(state).execute(make_request())

        assert len(preview.registrations) == 4
        assert preview.registrations[0].target_group_id.startswith("(known after apply")
        assert len(preview.delta.to_add) == 4

    @pytest.mark.asyncio
    async def test_plan_against_applied_state(self, state, make_request):
        state.save_suffix("zscc", "abcd1234")
        state.save_registrations(
            "zscc",
            [
                TargetRegistration("tg-1", "10.1.200.10", 1),
                TargetRegistration("tg-1", "10.9.9.9", 1),
            ],
        )

        preview = await PlanDeployment(state).execute(make_request())

        assert preview.deployment_name == "zscc-abcd1234"
        assert [r.address for r in preview.delta.to_remove] == ["10.9.9.9"]
        assert len(preview.delta.to_add) == 3

    @pytest.mark.asyncio
    async def test_plan_with_invalid_profile(self, state, make_request):
        preview = await PlanDeployment(state).execute(
            make_request(compute_profile="t3.medium")
        )

        assert not preview.validation
        assert preview.registrations == ()
        assert preview.delta.is_empty


def _make_teardown_ports(order=None):
    ports = {}
    for name, method in (
        ("network", "destroy_network"),
        ("support", "destroy_support"),
        ("load_balancer", "destroy_load_balancer"),
        ("fleet", "destroy_fleet"),
        ("endpoints", "destroy_endpoints"),
        ("dns", "destroy_resolver_rules"),
    ):
        async def destroy(identity, m=method):
            if order is not None:
                order.append(m)
            return 1

        port = MagicMock()
        setattr(port, method, AsyncMock(side_effect=destroy))
        ports[name] = port
    ports["load_balancer"].deregister_targets = AsyncMock()
    ports["load_balancer"].register_targets = AsyncMock()
    return ports


class TestTeardownDeployment:
    @pytest.mark.asyncio
    async def test_unknown_deployment(self, state):
        ports = _make_teardown_ports()
        assert await TeardownDeployment(state=state, **ports).execute("zscc") is False
        ports["network"].destroy_network.assert_not_called()

    @pytest.mark.asyncio
    async def test_teardown_in_reverse_order(self, state):
        state.save_suffix("zscc", "abcd1234")
        reg = TargetRegistration("tg-1", "10.0.0.1", 1)
        state.save_registrations("zscc", [reg])
        order = []
        ports = _make_teardown_ports(order)
        bus = MagicMock()
        bus.publish = AsyncMock()

        ok = await TeardownDeployment(state=state, event_bus=bus, **ports).execute("zscc")

        assert ok is True
        ports["load_balancer"].deregister_targets.assert_awaited_once_with("tg-1", [reg])
        assert order.index("destroy_resolver_rules") < order.index("destroy_endpoints")
        assert order.index("destroy_endpoints") < order.index("destroy_load_balancer")
        assert order.index("destroy_fleet") < order.index("destroy_load_balancer")
        assert order.index("destroy_load_balancer") < order.index("destroy_network")
        assert order.index("destroy_support") < order.index("destroy_network")
        assert state.load_suffix("zscc") is None
        assert state.load_registrations("zscc") == []
        assert isinstance(bus.publish.await_args.args[0][0], DeploymentTornDownEvent)

    @pytest.mark.asyncio
    async def test_failed_teardown_keeps_state(self, state):
        state.save_suffix("zscc", "abcd1234")
        ports = _make_teardown_ports()
        ports["fleet"].destroy_fleet = AsyncMock(side_effect=RuntimeError("asg busy"))

        ok = await TeardownDeployment(state=state, **ports).execute("zscc")

        assert ok is False
        assert state.load_suffix("zscc") == "abcd1234"
        ports["network"].destroy_network.assert_not_called()
