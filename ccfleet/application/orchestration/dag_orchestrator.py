"""
Plan Orchestration Module

Architectural Intent:
- DAG-based execution of the provisioning plan
- Automatically parallelizes independent branches
- Enforces dependency ordering and validation gates

Parallelization Strategy:
- Every step owns one future, resolved exactly once with its outcome
- A step awaits only the futures of its own dependencies, so independent
  branches run concurrently
- Results from previous steps are available to dependent steps

Failure Semantics:
- A failed critical step cancels in-flight steps and fails the whole plan
- A failed non-critical step, or a step whose gate is falsy, is recorded and
  every transitive dependent is skipped
"""

from __future__ import annotations
import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Callable, Awaitable, Any, Mapping, Optional

from opentelemetry import trace

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

StepCallable = Callable[[dict[str, Any], Mapping[str, Any]], Awaitable[Any]]


def _log_context(context: Mapping[str, Any], step: "WorkflowStep") -> dict[str, Any]:
    return {"deployment": context.get("deployment"), "step": step.name}


@dataclass
class WorkflowStep:
    name: str
    execute: StepCallable
    depends_on: list[str] = field(default_factory=list)
    is_critical: bool = True
    gated_by: list[str] = field(default_factory=list)

    @property
    def dependencies(self) -> list[str]:
        """Explicit dependencies followed by gates not already listed."""
        return self.depends_on + [g for g in self.gated_by if g not in self.depends_on]


class StepStatus(Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class StepOutcome:
    name: str
    status: StepStatus
    value: Any = None
    error: Optional[BaseException] = None
    reason: str = ""
    duration_ms: float = 0.0


@dataclass
class PlanResult:
    outcomes: dict[str, StepOutcome] = field(default_factory=dict)

    @property
    def results(self) -> dict[str, Any]:
        return {
            name: o.value
            for name, o in self.outcomes.items()
            if o.status is StepStatus.SUCCEEDED
        }

    def _names(self, status: StepStatus) -> list[str]:
        return [name for name, o in self.outcomes.items() if o.status is status]

    @property
    def skipped(self) -> list[str]:
        return self._names(StepStatus.SKIPPED)

    @property
    def failed(self) -> list[str]:
        return self._names(StepStatus.FAILED)

    @property
    def succeeded(self) -> bool:
        return all(o.status is StepStatus.SUCCEEDED for o in self.outcomes.values())

    def __getitem__(self, name: str) -> Any:
        return self.results[name]

    def __contains__(self, name: str) -> bool:
        return name in self.results


class OrchestrationError(Exception):
    def __init__(self, message: str, outcomes: Optional[dict[str, StepOutcome]] = None):
        super().__init__(message)
        self.outcomes = outcomes or {}


class DAGOrchestrator:
    def __init__(self, steps: list[WorkflowStep]) -> None:
        self.steps: dict[str, WorkflowStep] = {}
        for s in steps:
            if s.name in self.steps:
                raise OrchestrationError(f"Duplicate step name: {s.name}")
            self.steps[s.name] = s
        self._validated = False

    def _validate_dependencies(self) -> None:
        for step in self.steps.values():
            for dep in step.dependencies:
                if dep not in self.steps:
                    raise OrchestrationError(
                        f"Step {step.name} depends on unknown step: {dep}"
                    )

    def _validate_no_cycles(self) -> None:
        visited: set[str] = set()
        rec_stack: set[str] = set()

        def has_cycle(name: str) -> bool:
            visited.add(name)
            rec_stack.add(name)

            step = self.steps.get(name)
            if step:
                for dep in step.dependencies:
                    if dep not in visited:
                        if has_cycle(dep):
                            return True
                    elif dep in rec_stack:
                        return True

            rec_stack.remove(name)
            return False

        for step_name in self.steps:
            if step_name not in visited:
                if has_cycle(step_name):
                    raise OrchestrationError(
                        f"Circular dependency detected involving step: {step_name}"
                    )

    def validate(self) -> None:
        if not self._validated:
            self._validate_dependencies()
            self._validate_no_cycles()
            self._validated = True

    def topological_order(self) -> list[str]:
        """Deterministic order: among ready steps, declaration order wins."""
        self.validate()
        placed: set[str] = set()
        order: list[str] = []
        while len(order) < len(self.steps):
            for name, step in self.steps.items():
                if name not in placed and all(d in placed for d in step.dependencies):
                    placed.add(name)
                    order.append(name)
                    break
        return order

    def dependents_of(self, name: str) -> set[str]:
        """All steps that transitively depend on the given step."""
        found: set[str] = set()
        frontier = [name]
        while frontier:
            current = frontier.pop()
            for other in self.steps.values():
                if current in other.dependencies and other.name not in found:
                    found.add(other.name)
                    frontier.append(other.name)
        return found

    async def _run_step(
        self,
        step: WorkflowStep,
        context: dict[str, Any],
        results: dict[str, Any],
        futures: dict[str, asyncio.Future],
    ) -> StepOutcome:
        upstream: list[StepOutcome] = [await futures[d] for d in step.dependencies]

        blocked = next((o for o in upstream if o.status is not StepStatus.SUCCEEDED), None)
        if blocked is not None:
            return StepOutcome(
                step.name,
                StepStatus.SKIPPED,
                reason=f"upstream step {blocked.name} {blocked.status.value}",
            )

        for gate in step.gated_by:
            gate_value = results[gate]
            if not gate_value:
                return StepOutcome(
                    step.name,
                    StepStatus.SKIPPED,
                    reason=f"gated by {gate}: {gate_value}",
                )

        logger.debug("Starting step %s", step.name, extra=_log_context(context, step))
        started = time.perf_counter()
        with tracer.start_as_current_span(f"ccfleet.step.{step.name}") as span:
            try:
                value = await step.execute(context, MappingProxyType(results))
            except Exception as e:
                span.record_exception(e)
                elapsed = (time.perf_counter() - started) * 1000
                return StepOutcome(step.name, StepStatus.FAILED, error=e, duration_ms=elapsed)
        elapsed = (time.perf_counter() - started) * 1000
        return StepOutcome(step.name, StepStatus.SUCCEEDED, value=value, duration_ms=elapsed)

    async def execute(self, context: dict[str, Any]) -> PlanResult:
        self.validate()

        loop = asyncio.get_running_loop()
        futures: dict[str, asyncio.Future] = {name: loop.create_future() for name in self.steps}
        results: dict[str, Any] = {}
        plan = PlanResult()

        async def run(step: WorkflowStep) -> None:
            outcome = await self._run_step(step, context, results, futures)
            plan.outcomes[step.name] = outcome
            extra = _log_context(context, step)
            if outcome.status is StepStatus.SUCCEEDED:
                results[step.name] = outcome.value
                logger.info(
                    "Step %s succeeded in %.1f ms", step.name, outcome.duration_ms, extra=extra
                )
            elif outcome.status is StepStatus.SKIPPED:
                logger.warning("Step %s skipped: %s", step.name, outcome.reason, extra=extra)
            else:
                logger.error("Step %s failed: %s", step.name, outcome.error, extra=extra)
            futures[step.name].set_result(outcome)
            if outcome.status is StepStatus.FAILED and step.is_critical:
                raise OrchestrationError(
                    f"Critical step {step.name} failed: {outcome.error}", plan.outcomes
                ) from outcome.error

        tasks = [
            asyncio.create_task(run(step), name=f"ccfleet-step-{name}")
            for name, step in self.steps.items()
        ]
        try:
            await asyncio.gather(*tasks)
        except OrchestrationError:
            for t in tasks:
                t.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        finally:
            for t in tasks:
                if not t.done():
                    t.cancel()

        plan.outcomes = {name: plan.outcomes[name] for name in self.steps}
        return plan
