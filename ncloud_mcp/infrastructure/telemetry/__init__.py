"""
Telemetry Infrastructure

Architectural Intent:
- OpenTelemetry integration for tool invocation traces and metrics
"""

from ncloud_mcp.infrastructure.telemetry.otel_exporter import (
    OTELExporter,
    OTELConfig,
    create_exporter,
)

__all__ = [
    "OTELExporter",
    "OTELConfig",
    "create_exporter",
]
