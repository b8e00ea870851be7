"""Tests for transactional target registration."""

import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock, call

from ccfleet.application.services.registration_transaction import RegistrationTransaction
from ccfleet.domain.errors import RegistrationApplyError
from ccfleet.domain.value_objects.target_registration import (
    RegistrationDelta,
    TargetRegistration,
)

TG = "tg-arn"
A = TargetRegistration(TG, "10.0.0.1", 1)
B = TargetRegistration(TG, "10.0.0.2", 1)
C = TargetRegistration(TG, "10.0.1.1", 2)


def _make_lb():
    lb = MagicMock()
    lb.register_targets = AsyncMock()
    lb.deregister_targets = AsyncMock()
    return lb


class TestRegistrationTransaction:
    @pytest.mark.asyncio
    async def test_empty_delta_makes_no_calls(self):
        lb = _make_lb()
        state = MagicMock()
        tx = RegistrationTransaction(lb, state, "zscc")

        await tx.apply(RegistrationDelta(), [A])

        lb.register_targets.assert_not_called()
        lb.deregister_targets.assert_not_called()
        state.save_registrations.assert_called_once_with("zscc", [A])

    @pytest.mark.asyncio
    async def test_removals_before_additions(self):
        lb = _make_lb()
        order = []
        lb.register_targets.side_effect = lambda tg, regs: order.append(("add", regs[0]))
        lb.deregister_targets.side_effect = lambda tg, regs: order.append(("remove", regs[0]))
        state = MagicMock()

        await RegistrationTransaction(lb, state, "zscc").apply(
            RegistrationDelta(to_add=(A, B), to_remove=(C,)), [A, B]
        )

        assert order == [("remove", C), ("add", A), ("add", B)]
        state.save_registrations.assert_called_once_with("zscc", [A, B])

    @pytest.mark.asyncio
    async def test_failure_rolls_back_completed_changes(self):
        lb = _make_lb()
        lb.register_targets.side_effect = [None, RuntimeError("throttled"), None]
        state = MagicMock()

        with pytest.raises(RegistrationApplyError, match="throttled"):
            await RegistrationTransaction(lb, state, "zscc").apply(
                RegistrationDelta(to_add=(A, B), to_remove=(C,)), [A, B]
            )

        # C removed, A added, B failed -> undo A, then re-add C
        assert lb.deregister_targets.await_args_list == [call(TG, [C]), call(TG, [A])]
        assert lb.register_targets.await_args_list[-1] == call(TG, [C])
        state.save_registrations.assert_not_called()

    @pytest.mark.asyncio
    async def test_cancellation_rolls_back_and_propagates(self):
        lb = _make_lb()
        started = asyncio.Event()

        async def register(tg, regs):
            if regs[0] == B:
                started.set()
                await asyncio.sleep(10)

        lb.register_targets.side_effect = register
        state = MagicMock()
        tx = RegistrationTransaction(lb, state, "zscc")

        task = asyncio.create_task(tx.apply(RegistrationDelta(to_add=(A, B)), [A, B]))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        lb.deregister_targets.assert_awaited_once_with(TG, [A])
        state.save_registrations.assert_not_called()

    @pytest.mark.asyncio
    async def test_unrevertable_addition_is_recorded_as_applied(self):
        lb = _make_lb()
        lb.register_targets.side_effect = [None, RuntimeError("boom")]
        lb.deregister_targets.side_effect = RuntimeError("also down")
        state = MagicMock()
        state.load_registrations.return_value = [C]

        with pytest.raises(RegistrationApplyError, match="1 change"):
            await RegistrationTransaction(lb, state, "zscc").apply(
                RegistrationDelta(to_add=(A, B)), [C, A, B]
            )

        state.save_registrations.assert_called_once_with("zscc", [C, A])

    @pytest.mark.asyncio
    async def test_unrevertable_removal_is_recorded_as_gone(self):
        lb = _make_lb()
        lb.register_targets.side_effect = RuntimeError("down")
        state = MagicMock()
        state.load_registrations.return_value = [A, C]

        with pytest.raises(RegistrationApplyError):
            await RegistrationTransaction(lb, state, "zscc").apply(
                RegistrationDelta(to_add=(B,), to_remove=(C,)), [A, B]
            )

        # C was deregistered, B failed, re-adding C failed too
        state.save_registrations.assert_called_once_with("zscc", [A])
