"""OpenTelemetry spans around the lifecycle steps.

Until ``setup_tracing`` installs a provider, spans go to the no-op provider
and cost next to nothing.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
)

INSTRUMENTATION_NAME = "embedded_postgres"

_tracer: trace.Tracer | None = None
_provider: TracerProvider | None = None


def setup_tracing(
    service_name: str = INSTRUMENTATION_NAME,
    otlp_endpoint: str | None = None,
    console_export: bool = False,
) -> trace.Tracer:
    """Install a tracer provider exporting lifecycle spans.

    Args:
        service_name: ``service.name`` resource attribute.
        otlp_endpoint: gRPC collector, e.g. "http://localhost:4317".
        console_export: Print finished spans to stdout as they end.

    Returns:
        The tracer used by ``trace_span``.
    """
    global _tracer, _provider

    from embedded_postgres import __version__

    provider = TracerProvider(
        resource=Resource.create({"service.name": service_name, "service.version": __version__})
    )
    if otlp_endpoint:
        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True))
        )
    if console_export:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
    _provider = provider
    _tracer = trace.get_tracer(INSTRUMENTATION_NAME)
    return _tracer


def shutdown_tracing() -> None:
    """Flush pending spans; short-lived test processes call this before exit."""
    global _provider
    if _provider is not None:
        _provider.shutdown()
        _provider = None


def get_tracer() -> trace.Tracer:
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer(INSTRUMENTATION_NAME)
    return _tracer


@contextmanager
def trace_span(name: str, attributes: dict[str, Any] | None = None) -> Iterator[trace.Span]:
    """Run the block inside a span named ``name``.

    Attribute values that OpenTelemetry cannot store (paths, enums) are
    converted to strings. Exceptions are recorded on the span and re-raised.
    """
    with get_tracer().start_as_current_span(name) as span:
        for key, value in (attributes or {}).items():
            if not isinstance(value, (str, bool, int, float)):
                value = str(value)
            span.set_attribute(key, value)
        yield span
