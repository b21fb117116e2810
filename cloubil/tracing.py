"""OpenTelemetry tracing for cloubil.

Spans use X-Ray compatible trace ids and propagation. Export is opt-in: an
OTLP endpoint, the console, both or neither, as chosen by the caller from
``cloubil.config``.
"""

import os
from functools import wraps
from typing import Any, Callable, TypeVar, ParamSpec

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.resources import Resource, SERVICE_NAME
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.propagators.aws import AwsXRayPropagator
from opentelemetry.sdk.extension.aws.trace import AwsXRayIdGenerator
from opentelemetry.propagate import set_global_textmap
from opentelemetry.trace import Status, StatusCode

from . import __version__

P = ParamSpec("P")
T = TypeVar("T")

# Set once by init_tracing; None until then
_tracer: trace.Tracer | None = None


def init_tracing(
    service_name: str = "cloubil",
    otlp_endpoint: str | None = None,
    enable_console_export: bool = False,
) -> trace.Tracer:
    """Install the global tracer provider and return cloubil's tracer.

    Later calls return the first tracer unchanged.

    Args:
        service_name: Service name recorded on every span
        otlp_endpoint: OTLP gRPC collector, e.g. "http://localhost:4317"; no OTLP export when None
        enable_console_export: Also print finished spans to stdout
    """
    global _tracer

    if _tracer is not None:
        return _tracer

    provider = TracerProvider(
        resource=Resource.create({
            SERVICE_NAME: service_name,
            "service.version": __version__,
            "deployment.environment": os.getenv("ENVIRONMENT", "development"),
        }),
        id_generator=AwsXRayIdGenerator(),
    )
    set_global_textmap(AwsXRayPropagator())

    if otlp_endpoint:
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True)))
    if enable_console_export:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
    _tracer = trace.get_tracer(service_name)
    return _tracer


def get_tracer() -> trace.Tracer:
    """Return the tracer, initializing without exporters on first use."""
    return _tracer if _tracer is not None else init_tracing()


def traced(
    name: str | None = None,
    attributes: dict[str, Any] | None = None,
) -> Callable[[Callable[P, T]], Callable[P, T]]:
    """Run the decorated function inside a span named ``name`` (default: the function name).

    Exceptions are recorded on the span and re-raised.
    """
    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        span_name = name or func.__name__

        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            with get_tracer().start_as_current_span(span_name, attributes=attributes) as span:
                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    span.set_status(Status(StatusCode.ERROR, str(e)))
                    span.record_exception(e)
                    raise
                span.set_status(Status(StatusCode.OK))
                return result

        return wrapper

    return decorator


def add_cost_query_span_attributes(span: trace.Span, **attributes: str | None) -> None:
    """Set ``cost_query.<key>`` on ``span`` for each non-empty value.

    cloubil passes operation, region, period_start, period_end and amount.
    """
    for key, value in attributes.items():
        if value:
            span.set_attribute(f"cost_query.{key}", value)
