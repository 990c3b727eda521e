"""
Span helpers for dump and replay operations.

Call sites never hold a tracer: they open a span with trace_operation()
and attach events to whatever span is current with add_span_event().
"""

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.util.types import AttributeValue

from .tracer import get_tracer

_PRIMITIVES = (bool, int, float, str)


def span_attributes(values: Mapping[str, Any]) -> dict[str, AttributeValue]:
    """Keep primitive values as they are and stringify everything else; drop None."""
    return {
        key: value if isinstance(value, _PRIMITIVES) else str(value)
        for key, value in values.items()
        if value is not None
    }


def record_error(span: trace.Span, error: BaseException) -> None:
    """Mark ``span`` as failed by ``error``."""
    span.set_attributes({
        "error": True,
        "error.type": type(error).__name__,
        "error.message": str(error),
    })
    span.record_exception(error)
    span.set_status(trace.Status(trace.StatusCode.ERROR, str(error)))


@contextmanager
def trace_operation(
    operation_name: str,
    kind: trace.SpanKind = trace.SpanKind.INTERNAL,
    **attributes: Any,
) -> Iterator[trace.Span]:
    """
    Run the block inside a span named ``operation_name``.

    An exception escaping the block is recorded on the span and re-raised.

    Example:
        >>> with trace_operation("export_table", database="shop", table="orders") as span:
        ...     span.set_attribute("rows", writer.write_records("orders"))
    """
    with get_tracer().start_as_current_span(
        operation_name,
        kind=kind,
        attributes=span_attributes(attributes),
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        try:
            yield span
        except Exception as e:
            record_error(span, e)
            raise


def add_span_event(name: str, **attributes: Any) -> None:
    """
    Add an event to the current span; a no-op outside a recording span.

    Example:
        >>> with trace_operation("replay"):
        ...     add_span_event("statement_skipped", reason="dry_run")
    """
    span = trace.get_current_span()
    if span.is_recording():
        span.add_event(name, attributes=span_attributes(attributes))
