"""
OpenTelemetry tracer setup.

Until initialize_tracing() runs, get_tracer() hands out tracers of the
global no-op provider, so instrumented code pays almost nothing.
"""

import logging
import os
import sys

from opentelemetry import trace
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from ... import __version__

logger = logging.getLogger(__name__)

INSTRUMENTATION_NAME = "mysqldump"

_tracer: trace.Tracer | None = None
_provider: TracerProvider | None = None


def _otlp_processor(endpoint: str) -> SpanProcessor:
    # The gRPC exporter is heavy to import and only needed with a collector
    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

    return BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint, insecure=True))


def initialize_tracing(
    service_name: str = "mysqldump-py",
    otlp_endpoint: str | None = None,
    console_export: bool = False,
) -> trace.Tracer:
    """
    Install an SDK tracer provider with the requested exporters.

    Args:
        service_name: ``service.name`` resource attribute
        otlp_endpoint: Collector address such as ``localhost:4317``;
            defaults to the OTLP_ENDPOINT environment variable
        console_export: Also print finished spans to stderr

    Returns:
        The tracer used by trace_operation()
    """
    global _tracer, _provider

    if _provider is not None:
        logger.warning("Tracing already initialized")
        return get_tracer()

    provider = TracerProvider(
        resource=Resource.create({SERVICE_NAME: service_name, SERVICE_VERSION: __version__})
    )

    exporters: list[str] = []
    endpoint = otlp_endpoint or os.getenv("OTLP_ENDPOINT")
    if endpoint:
        provider.add_span_processor(_otlp_processor(endpoint))
        exporters.append(f"otlp({endpoint})")
    if console_export:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter(out=sys.stderr)))
        exporters.append("console")

    trace.set_tracer_provider(provider)
    _provider = provider
    _tracer = provider.get_tracer(INSTRUMENTATION_NAME, __version__)

    logger.info(f"Tracing initialized for {service_name}, exporters: {', '.join(exporters) or 'none'}")
    return _tracer


def get_tracer() -> trace.Tracer:
    if _tracer is not None:
        return _tracer
    return trace.get_tracer(INSTRUMENTATION_NAME)


def shutdown_tracing() -> None:
    """Flush pending spans and forget the provider; safe to call twice."""
    global _tracer, _provider

    provider, _provider, _tracer = _provider, None, None
    if provider is None:
        return
    provider.shutdown()
    logger.debug("Tracing shut down")
