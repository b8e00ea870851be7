"""
OpenTelemetry Exporter for ccfleet

Architectural Intent:
- Exports provisioning telemetry to OTLP-compatible backends
- Per-step plan durations, target registration churn, validation rejections
- Step spans are opened by the orchestrator through the tracing API and are
  exported once this module installs the SDK providers

Security:
- Endpoint defaults to empty string (must be explicitly configured)
- Non-localhost http:// endpoints rejected unless insecure=True
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Any
from urllib.parse import urlparse
import logging
from datetime import datetime, UTC

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource, SERVICE_NAME
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

logger = logging.getLogger(__name__)


@dataclass
class OTELConfig:
    endpoint: str = ""
    service_name: str = "ccfleet"
    environment: str = "development"
    enable_traces: bool = True
    enable_metrics: bool = True
    insecure: bool = False

    def __post_init__(self) -> None:
        if self.endpoint:
            parsed = urlparse(self.endpoint)
            is_localhost = parsed.hostname in ("localhost", "127.0.0.1", "::1")
            if parsed.scheme == "http" and not is_localhost and not self.insecure:
                raise ValueError(
                    f"Non-localhost HTTP endpoint '{self.endpoint}' requires "
                    "insecure=True or use https://. "
                    "Set insecure=True to explicitly allow plaintext export."
                )


class OTELExporter:
    """
    OpenTelemetry exporter for provisioning runs.

    Metrics are always buffered locally so a run can be summarized even when
    no collector is configured.
    """

    def __init__(self, config: OTELConfig):
        self.config = config
        self._initialized = False
        self._metrics_buffer: list[dict[str, Any]] = []
        self._meter: Any = None
        self._histograms: dict[str, Any] = {}
        self._counters: dict[str, Any] = {}

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> None:
        """Install SDK providers and OTLP exporters."""
        if not self.config.endpoint:
            logger.info("OTEL endpoint not configured, telemetry export disabled")
            return

        try:
            resource = Resource(
                attributes={
                    SERVICE_NAME: self.config.service_name,
                    "environment": self.config.environment,
                }
            )

            if self.config.enable_traces:
                provider = TracerProvider(resource=resource)
                provider.add_span_processor(
                    BatchSpanProcessor(
                        OTLPSpanExporter(
                            endpoint=self.config.endpoint, insecure=self.config.insecure
                        )
                    )
                )
                trace.set_tracer_provider(provider)

            if self.config.enable_metrics:
                reader = PeriodicExportingMetricReader(
                    OTLPMetricExporter(
                        endpoint=self.config.endpoint, insecure=self.config.insecure
                    )
                )
                metrics.set_meter_provider(
                    MeterProvider(resource=resource, metric_readers=[reader])
                )
                self._meter = metrics.get_meter(__name__)

            self._initialized = True

        except Exception as e:
            logger.error("Failed to initialize OTEL: %s", e)
            self._initialized = False

    def _instrument(self, kind: str, name: str, unit: str) -> Any:
        cache = self._histograms if kind == "histogram" else self._counters
        if name not in cache and self._meter:
            if kind == "histogram":
                cache[name] = self._meter.create_histogram(name, unit=unit)
            else:
                cache[name] = self._meter.create_counter(name, unit=unit)
        return cache.get(name)

    def record_metric(
        self,
        name: str,
        value: float,
        unit: str = "",
        attributes: Optional[dict[str, str]] = None,
        kind: str = "counter",
    ) -> None:
        """Buffer a metric value and forward it to the SDK when initialized."""
        self._metrics_buffer.append(
            {
                "name": name,
                "value": value,
                "unit": unit,
                "attributes": attributes or {},
                "timestamp": datetime.now(UTC).isoformat(),
            }
        )

        if self._initialized:
            instrument = self._instrument(kind, name, unit)
            if instrument is None:
                return
            if kind == "histogram":
                instrument.record(value, attributes=attributes or {})
            else:
                instrument.add(value, attributes=attributes or {})

    def record_step(self, step: str, status: str, duration_ms: float) -> None:
        self.record_metric(
            "ccfleet.plan.step.duration_ms",
            duration_ms,
            unit="ms",
            attributes={"step": step, "status": status},
            kind="histogram",
        )

    def record_registrations(self, added: int, removed: int) -> None:
        self.record_metric("ccfleet.targets.registered", float(added))
        self.record_metric("ccfleet.targets.deregistered", float(removed))

    def record_validation_failure(self, size_class: str, compute_profile: str) -> None:
        self.record_metric(
            "ccfleet.validation.failed",
            1.0,
            attributes={"size_class": size_class, "compute_profile": compute_profile},
        )

    def summary(self) -> dict[str, float]:
        """Sum of buffered values per metric name."""
        totals: dict[str, float] = {}
        for entry in self._metrics_buffer:
            totals[entry["name"]] = totals.get(entry["name"], 0.0) + entry["value"]
        return totals

    def export(self) -> None:
        """Flush providers and clear the local buffer."""
        if not self._initialized:
            return

        provider = metrics.get_meter_provider()
        if hasattr(provider, "force_flush"):
            provider.force_flush()
        exported_count = len(self._metrics_buffer)
        self._metrics_buffer.clear()

        if exported_count:
            logger.debug("Flushed %d buffered metrics", exported_count)


def create_exporter(
    endpoint: Optional[str] = None,
    service_name: str = "ccfleet",
    insecure: bool = False,
) -> OTELExporter:
    """Factory function to create OTEL exporter."""
    config = OTELConfig(
        endpoint=endpoint or "",
        service_name=service_name,
        insecure=insecure,
    )
    exporter = OTELExporter(config)
    exporter.initialize()
    return exporter
