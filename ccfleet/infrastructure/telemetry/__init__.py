"""
ccfleet Telemetry Infrastructure

Architectural Intent:
- OpenTelemetry integration for observability
- Metrics and traces export for provisioning runs
"""

from ccfleet.infrastructure.telemetry.otel_exporter import (
    OTELExporter,
    OTELConfig,
    create_exporter,
)

__all__ = [
    "OTELExporter",
    "OTELConfig",
    "create_exporter",
]
