"""OpenTelemetry tracing for plagiarism batches."""
from contextlib import contextmanager
from typing import Iterator, Optional

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter, SpanExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

from app.utils.logger import logger

tracer = trace.get_tracer("plagiarism_checker")


def _build_exporter(otlp_endpoint: Optional[str]) -> SpanExporter:
    if otlp_endpoint:
        logger.info(f"Tracing spans exported to OTLP endpoint: {otlp_endpoint}")
        return OTLPSpanExporter(endpoint=otlp_endpoint)
    logger.info("Tracing spans exported to console")
    return ConsoleSpanExporter()


def initialize_tracing(
    service_name: str = "plagiarism-checker",
    service_version: str = "1.0.0",
    otlp_endpoint: Optional[str] = None,
    tracing_enabled: bool = True,
) -> Optional[TracerProvider]:
    """
    Install a global TracerProvider for batch spans.

    Args:
        service_name: Name of the service for traces
        service_version: Version of the service
        otlp_endpoint: Optional OTLP HTTP endpoint (e.g., http://localhost:4318/v1/traces);
                      console exporter when None
        tracing_enabled: Enable/disable tracing

    Returns:
        TracerProvider instance if tracing is enabled, None otherwise
    """
    if not tracing_enabled:
        logger.info("Tracing is disabled")
        return None

    try:
        resource = Resource.create({"service.name": service_name, "service.version": service_version})
        tracer_provider = TracerProvider(resource=resource)
        tracer_provider.add_span_processor(BatchSpanProcessor(_build_exporter(otlp_endpoint)))
        trace.set_tracer_provider(tracer_provider)
    except Exception as e:
        logger.error(f"Failed to initialize tracing: {str(e)}", exc_info=True)
        return None

    return tracer_provider


@contextmanager
def batch_span(name: str, documents: int) -> Iterator[trace.Span]:
    """
    Open a span around one batch comparison.

    Spans are no-ops until ``initialize_tracing`` installs a provider.
    """
    with tracer.start_as_current_span(name) as span:
        span.set_attribute("plagiarism.documents", documents)
        yield span


def shutdown_tracing(tracer_provider: Optional[TracerProvider]) -> None:
    """Flush pending spans and shut the provider down."""
    if tracer_provider:
        try:
            tracer_provider.shutdown()
            logger.info("Tracing shutdown completed")
        except Exception as e:
            logger.warning(f"Error during tracing shutdown: {str(e)}")
