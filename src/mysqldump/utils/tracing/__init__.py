"""
Distributed tracing using OpenTelemetry.

Instruments connection setup, catalog queries, table export and statement
replay. Spans are no-ops until initialize_tracing() is called.
"""

from .context import add_span_event, trace_operation
from .tracer import get_tracer, initialize_tracing, shutdown_tracing

__all__ = [
    "initialize_tracing",
    "get_tracer",
    "shutdown_tracing",
    "trace_operation",
    "add_span_event",
]
