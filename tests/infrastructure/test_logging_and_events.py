"""Tests for logging configuration and the in-memory event bus."""

import io
import json
import logging

import pytest

from ccfleet.application.orchestration.dag_orchestrator import DAGOrchestrator, WorkflowStep
from ccfleet.domain.events.provisioning_events import (
    DeploymentTornDownEvent,
    TargetsReconciledEvent,
    ValidationFailedEvent,
)
from ccfleet.infrastructure.event_bus import EventBus
from ccfleet.infrastructure.logging import (
    ContextFormatter,
    JSONFormatter,
    configure_logging,
    parse_level,
)


def _record(message="step %s failed", args=("fleet",), **context):
    record = logging.LogRecord(
        "ccfleet.test", logging.ERROR, __file__, 1, message, args, None
    )
    for key, value in context.items():
        setattr(record, key, value)
    return record


class TestLogging:
    def test_configure_sets_level(self):
        configure_logging(level=logging.DEBUG)
        logger = logging.getLogger("ccfleet")
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1

    def test_reconfigure_replaces_handlers(self):
        configure_logging(level=logging.INFO)
        handler = configure_logging(level=logging.WARNING)
        assert logging.getLogger("ccfleet").handlers == [handler]

    def test_json_format(self):
        handler = configure_logging(level=logging.INFO, json_format=True)
        assert isinstance(handler.formatter, JSONFormatter)

    def test_json_formatter_output(self):
        entry = json.loads(JSONFormatter().format(_record()))
        assert entry["level"] == "ERROR"
        assert entry["logger"] == "ccfleet.test"
        assert entry["message"] == "step fleet failed"
        assert "step" not in entry

    def test_json_formatter_context_fields(self):
        record = _record(deployment="zscc", step="target_registrations", slot=2)
        entry = json.loads(JSONFormatter().format(record))
        assert entry["deployment"] == "zscc"
        assert entry["step"] == "target_registrations"
        assert entry["slot"] == 2

    def test_human_formatter_prefixes_context(self):
        line = ContextFormatter().format(_record(deployment="zscc", step="fleet", slot=3))
        assert "[zscc/fleet slot=3] step fleet failed" in line

    def test_human_formatter_without_context(self):
        line = ContextFormatter().format(_record())
        assert line.endswith("ccfleet.test: step fleet failed")

    @pytest.mark.asyncio
    async def test_step_records_carry_deployment_and_step(self):
        stream = io.StringIO()
        configure_logging(level=logging.INFO, json_format=True, stream=stream)

        async def noop(context, results):
            return True

        await DAGOrchestrator([WorkflowStep("network", noop)]).execute({"deployment": "zscc"})

        entries = [json.loads(line) for line in stream.getvalue().splitlines()]
        step_entries = [e for e in entries if e.get("step") == "network"]
        assert step_entries and step_entries[0]["deployment"] == "zscc"
        configure_logging()

    def test_parse_level(self):
        assert parse_level("debug") == logging.DEBUG
        assert parse_level("nonsense") == logging.WARNING


class TestEventBus:
    @pytest.mark.asyncio
    async def test_publish_to_subscribers(self):
        bus = EventBus()
        received = []

        async def handler(event):
            received.append(event)

        bus.subscribe(TargetsReconciledEvent, handler)
        event = TargetsReconciledEvent(aggregate_id="zscc", target_group_arn="tg", added=2)
        await bus.publish([event, DeploymentTornDownEvent(aggregate_id="zscc")])

        assert received == [event]

    @pytest.mark.asyncio
    async def test_no_subscribers(self):
        await EventBus().publish([DeploymentTornDownEvent()])

    def test_event_to_dict(self):
        event = ValidationFailedEvent(aggregate_id="zscc", message="bad profile")
        data = event.to_dict()
        assert data["event_type"] == "ValidationFailedEvent"
        assert data["message"] == "bad profile"
        assert data["occurred_at"]
