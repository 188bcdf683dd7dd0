"""OpenTelemetry tracing for page loads.

Page loads always run inside a ``page.load`` span. Without
``init_telemetry()`` the global tracer provider is the no-op one, so spans
cost nothing. With ``OTEL_ENABLED=true`` spans are exported via gRPC OTLP.
"""

import logging
import os

from opentelemetry import trace

logger = logging.getLogger(__name__)

# Configuration from environment
OTEL_ENABLED = os.getenv("OTEL_ENABLED", "false").lower() == "true"
OTEL_SERVICE_NAME = os.getenv("OTEL_SERVICE_NAME", "pagewright")
OTEL_EXPORTER_OTLP_ENDPOINT = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "")


def get_tracer() -> trace.Tracer:
    return trace.get_tracer("pagewright")


def init_telemetry() -> None:
    """Initialize OpenTelemetry tracing if enabled.

    Sets up a TracerProvider with a gRPC OTLP exporter.
    """
    if not OTEL_ENABLED:
        logger.info("OpenTelemetry tracing disabled (OTEL_ENABLED=false)")
        return

    if not OTEL_EXPORTER_OTLP_ENDPOINT:
        logger.warning(
            "OTEL_ENABLED=true but OTEL_EXPORTER_OTLP_ENDPOINT not set. "
            "Skipping OpenTelemetry initialization."
        )
        return

    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
            OTLPSpanExporter,
        )
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor

        resource = Resource.create(
            {
                "service.name": OTEL_SERVICE_NAME,
                "deployment.environment": os.getenv("ENVIRONMENT", "development"),
            }
        )
        provider = TracerProvider(resource=resource)
        exporter = OTLPSpanExporter(endpoint=OTEL_EXPORTER_OTLP_ENDPOINT, insecure=True)
        provider.add_span_processor(BatchSpanProcessor(exporter))
        trace.set_tracer_provider(provider)

        logger.info(
            "OpenTelemetry initialized: service=%s, endpoint=%s",
            OTEL_SERVICE_NAME,
            OTEL_EXPORTER_OTLP_ENDPOINT,
        )

    except ImportError as e:
        logger.error(
            "OpenTelemetry packages not installed: %s. "
            "Install with: pip install pagewright[otel]",
            e,
        )


def shutdown_telemetry() -> None:
    """Shutdown OpenTelemetry tracer provider gracefully."""
    if not OTEL_ENABLED:
        return

    provider = trace.get_tracer_provider()
    if hasattr(provider, "shutdown"):
        provider.shutdown()
        logger.info("OpenTelemetry tracer provider shut down")
