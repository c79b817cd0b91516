"""
OpenTelemetry Exporter for ncloud-mcp

Architectural Intent:
- Exports per-invocation telemetry (latency, outcome, spans) to an OTLP
  backend
- Disabled unless an endpoint is configured; metrics are still buffered
  locally so tests and the CLI can inspect them

Security:
- Endpoint defaults to empty string (must be explicitly configured)
- Non-localhost http:// endpoints rejected unless insecure=True
- Span and metric attributes carry action names only, never arguments or
  credentials
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass
from typing import Optional, Any
from urllib.parse import urlparse
import logging
from datetime import datetime, UTC

logger = logging.getLogger(__name__)

INVOCATION_DURATION_METRIC = "ncloud.action.duration_ms"
INVOCATION_COUNT_METRIC = "ncloud.action.invocations"

# Oldest samples are dropped once the local buffer is full
METRICS_BUFFER_SIZE = 1000


@dataclass
class OTELConfig:
    endpoint: str = ""
    service_name: str = "ncloud-mcp"
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
    OpenTelemetry exporter for tool invocations.

    Supports:
    - OTLP gRPC trace export (one span per invocation)
    - OTLP gRPC metric export (latency histogram, invocation counter)
    """

    def __init__(self, config: OTELConfig):
        self.config = config
        self._initialized = False
        self._metrics_buffer: deque[dict[str, Any]] = deque(maxlen=METRICS_BUFFER_SIZE)
        self._meter: Any = None
        self._tracer: Any = None
        self._instruments: dict[str, Any] = {}

    @property
    def enabled(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Initialize OpenTelemetry SDK and exporters."""
        if not self.config.endpoint:
            logger.info("OTEL endpoint not configured, telemetry disabled")
            return

        try:
            from opentelemetry import trace
            from opentelemetry.sdk.trace import TracerProvider
            from opentelemetry.sdk.trace.export import BatchSpanProcessor
            from opentelemetry.sdk.resources import Resource, SERVICE_NAME
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
                OTLPSpanExporter,
            )
            from opentelemetry import metrics
            from opentelemetry.sdk.metrics import MeterProvider
            from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
            from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import (
                OTLPMetricExporter,
            )

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
                            endpoint=self.config.endpoint,
                            insecure=self.config.insecure,
                        )
                    )
                )
                trace.set_tracer_provider(provider)
                self._tracer = trace.get_tracer(__name__)

            if self.config.enable_metrics:
                metric_reader = PeriodicExportingMetricReader(
                    OTLPMetricExporter(
                        endpoint=self.config.endpoint,
                        insecure=self.config.insecure,
                    )
                )
                metrics.set_meter_provider(
                    MeterProvider(resource=resource, metric_readers=[metric_reader])
                )
                self._meter = metrics.get_meter(__name__)

            self._initialized = True

        except ImportError:
            logger.warning("OpenTelemetry SDK not installed, telemetry disabled")
            self._initialized = False
        except Exception as e:
            logger.error("Failed to initialize OTEL: %s", e)
            self._initialized = False

    def _instrument(self, name: str, kind: str, unit: str = "") -> Any:
        if name not in self._instruments and self._meter:
            if kind == "histogram":
                self._instruments[name] = self._meter.create_histogram(name, unit=unit)
            else:
                self._instruments[name] = self._meter.create_counter(name, unit=unit)
        return self._instruments.get(name)

    def record_metric(
        self,
        name: str,
        value: float,
        unit: str = "",
        attributes: Optional[dict[str, str]] = None,
        kind: str = "histogram",
    ) -> None:
        """Record a metric value."""
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
            instrument = self._instrument(name, kind, unit)
            if instrument is None:
                return
            if kind == "histogram":
                instrument.record(value, attributes=attributes or {})
            else:
                instrument.add(value, attributes=attributes or {})

    def record_invocation(self, action: str, success: bool, duration_ms: float) -> None:
        """Record the outcome and latency of one tool invocation."""
        attributes = {"action": action, "success": str(success).lower()}
        self.record_metric(
            INVOCATION_DURATION_METRIC, duration_ms, unit="ms", attributes=attributes
        )
        self.record_metric(
            INVOCATION_COUNT_METRIC, 1, attributes=attributes, kind="counter"
        )

    def start_span(
        self,
        name: str,
        attributes: Optional[dict[str, str]] = None,
    ) -> Optional[Any]:
        """Start a tracing span, or return None when tracing is off."""
        if not self._initialized or self._tracer is None:
            return None
        return self._tracer.start_span(name, attributes=attributes or {})

    def end_span(self, span: Any, error: Optional[str] = None) -> None:
        """End a tracing span, marking it failed when error is given."""
        if span is None:
            return
        if error:
            from opentelemetry.trace import Status, StatusCode

            span.set_status(Status(StatusCode.ERROR, error))
        span.end()

    def drain(self) -> list[dict[str, Any]]:
        """Return and clear the local metric buffer."""
        drained = list(self._metrics_buffer)
        self._metrics_buffer.clear()
        return drained

    async def shutdown(self) -> None:
        """Flush pending telemetry before the process exits."""
        if not self._initialized:
            return

        from opentelemetry import metrics, trace

        tracer_provider = trace.get_tracer_provider()
        if hasattr(tracer_provider, "shutdown"):
            tracer_provider.shutdown()
        meter_provider = metrics.get_meter_provider()
        if hasattr(meter_provider, "shutdown"):
            meter_provider.shutdown()
        self._initialized = False
        logger.debug("Telemetry providers shut down")


async def create_exporter(
    endpoint: Optional[str] = None,
    service_name: str = "ncloud-mcp",
    insecure: bool = False,
) -> OTELExporter:
    """Factory function to create OTEL exporter."""
    config = OTELConfig(
        endpoint=endpoint or "",
        service_name=service_name,
        insecure=insecure,
    )
    exporter = OTELExporter(config)
    await exporter.initialize()
    return exporter
