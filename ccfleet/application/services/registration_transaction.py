"""
Registration Transaction

Architectural Intent:
- Applies a registration delta to a target group as one unit
- Either every removal and addition lands, or everything already performed
  is reverted before the error propagates
- Cancellation mid-apply is treated like a failure: revert, then re-raise

Design Decisions:
- One target per load balancer call, so the undo log is exact
- Removals run before additions, mirroring a shrink-then-grow re-plan
- The applied record is saved after the whole delta succeeded, or after a
  rollback that could not revert every change, so the next delta starts
  from what the target group actually holds
"""

from __future__ import annotations
import asyncio
import logging
from typing import Awaitable, Callable, NamedTuple, Sequence

from ccfleet.domain.errors import RegistrationApplyError
from ccfleet.domain.ports.load_balancer_port import LoadBalancerPort
from ccfleet.domain.ports.state_repository_port import DeploymentStateRepository
from ccfleet.domain.value_objects.target_registration import (
    RegistrationDelta,
    TargetRegistration,
)

logger = logging.getLogger(__name__)

_Operation = Callable[[str, Sequence[TargetRegistration]], Awaitable[None]]


class _Change(NamedTuple):
    undo: _Operation
    registration: TargetRegistration
    added: bool


class RegistrationTransaction:
    def __init__(
        self,
        load_balancer: LoadBalancerPort,
        state: DeploymentStateRepository,
        name_prefix: str,
    ) -> None:
        self.load_balancer = load_balancer
        self.state = state
        self.name_prefix = name_prefix
        self.log_context = {"deployment": name_prefix, "step": "target_registrations"}

    async def _rollback(self, undo_log: list[_Change]) -> list[_Change]:
        """Revert the undo log in reverse; return the changes left in place."""
        stuck: list[_Change] = []
        for change in reversed(undo_log):
            registration = change.registration
            try:
                await change.undo(registration.target_group_id, [registration])
            except Exception as e:
                logger.error(
                    "Rollback step failed for %s: %s",
                    registration,
                    e,
                    extra={
                        **self.log_context,
                        "slot": registration.slot_index,
                        "target_group": registration.target_group_id,
                    },
                )
                stuck.append(change)
        if stuck:
            self._record_stuck(stuck)
        return stuck

    def _record_stuck(self, stuck: list[_Change]) -> None:
        current = list(self.state.load_registrations(self.name_prefix))
        for change in reversed(stuck):
            if change.added:
                current.append(change.registration)
            elif change.registration in current:
                current.remove(change.registration)
        self.state.save_registrations(self.name_prefix, current)
        logger.error(
            "Rollback left %d change(s) in place; recorded %d applied target(s)",
            len(stuck),
            len(current),
            extra=self.log_context,
        )

    async def apply(
        self,
        delta: RegistrationDelta,
        desired: Sequence[TargetRegistration],
    ) -> RegistrationDelta:
        if delta.is_empty:
            logger.info(
                "Target registrations already converged (%d targets)",
                len(desired),
                extra=self.log_context,
            )
            self.state.save_registrations(self.name_prefix, desired)
            return delta

        lb = self.load_balancer
        plan: list[tuple[_Operation, _Change]] = [
            (lb.deregister_targets, _Change(lb.register_targets, r, False))
            for r in delta.to_remove
        ] + [
            (lb.register_targets, _Change(lb.deregister_targets, r, True))
            for r in delta.to_add
        ]

        undo_log: list[_Change] = []
        try:
            for do, change in plan:
                await do(change.registration.target_group_id, [change.registration])
                undo_log.append(change)
        except asyncio.CancelledError:
            logger.error(
                "Registration apply cancelled after %d/%d changes; rolling back",
                len(undo_log),
                len(plan),
                extra=self.log_context,
            )
            await asyncio.shield(self._rollback(undo_log))
            raise
        except Exception as e:
            logger.error(
                "Registration apply failed after %d/%d changes; rolling back: %s",
                len(undo_log),
                len(plan),
                e,
                extra=self.log_context,
            )
            stuck = await self._rollback(undo_log)
            detail = f"; {len(stuck)} change(s) could not be reverted" if stuck else ""
            raise RegistrationApplyError(
                f"target registration failed and was rolled back: {e}{detail}"
            ) from e

        self.state.save_registrations(self.name_prefix, desired)
        logger.info("Applied registration delta %s", delta, extra=self.log_context)
        return delta
