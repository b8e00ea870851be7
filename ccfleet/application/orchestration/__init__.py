"""
Application Orchestration Package

Architectural Intent:
- Contains the provisioning plan executor
- DAG-based execution for parallel-safe, gated provisioning plans
"""

from ccfleet.application.orchestration.dag_orchestrator import (
    DAGOrchestrator,
    WorkflowStep,
    OrchestrationError,
    PlanResult,
    StepOutcome,
    StepStatus,
)

__all__ = [
    "DAGOrchestrator",
    "WorkflowStep",
    "OrchestrationError",
    "PlanResult",
    "StepOutcome",
    "StepStatus",
]
