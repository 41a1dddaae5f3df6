"""OpenTelemetry tracing configuration for orchd.

Each model invocation of a fan-out can be traced as its own span so slow or
failing providers show up side by side in a trace viewer.

Configuration:
    Set environment variables or use settings:
    - ORCHD_ENABLE_TRACING: Enable/disable tracing (default: False)
    - ORCHD_OTEL_EXPORTER_ENDPOINT: OTLP HTTP endpoint for span export
    - ORCHD_OTEL_SERVICE_NAME: service.name resource attribute

Example:
    >>> from orchd.telemetry import configure_tracing, trace_provider_call
    >>>
    >>> configure_tracing()
    >>> with trace_provider_call(provider="openai", model="gpt-4o-mini", name="fast") as span:
    ...     text = await provider.call(context, config, prompt, code)
"""

import logging
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import Status, StatusCode

from orchd._version import get_version
from orchd.config import get_settings

logger = logging.getLogger(__name__)

_tracer = None
_tracing_enabled = False


class NoOpSpan:
    """Stand-in span used while tracing is disabled."""

    def set_attribute(self, *args: Any, **kwargs: Any) -> None:
        pass

    def set_status(self, *args: Any, **kwargs: Any) -> None:
        pass

    def record_exception(self, *args: Any, **kwargs: Any) -> None:
        pass


def configure_tracing() -> None:
    """Configure OpenTelemetry tracing.

    Installs a TracerProvider with an OTLP HTTP exporter when tracing is
    enabled in settings. Idempotent.
    """
    global _tracer, _tracing_enabled

    settings = get_settings()
    if not settings.enable_tracing:
        logger.debug("OpenTelemetry tracing is disabled")
        return
    if _tracing_enabled:
        return

    resource = Resource.create(
        {
            "service.name": settings.otel_service_name,
            "service.version": get_version(),
        }
    )
    provider = TracerProvider(resource=resource)

    if settings.otel_exporter_endpoint:
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otel_exporter_endpoint)))
        logger.info(f"OTLP exporter configured with endpoint: {settings.otel_exporter_endpoint}")

    trace.set_tracer_provider(provider)
    _tracer = trace.get_tracer("orchd.engine")
    _tracing_enabled = True
    logger.info("OpenTelemetry tracing configured")


def is_tracing_enabled() -> bool:
    """Check if tracing is currently enabled."""
    return _tracing_enabled


def shutdown_tracing() -> None:
    """Flush pending spans before the process exits."""
    if not is_tracing_enabled():
        return
    provider = trace.get_tracer_provider()
    if isinstance(provider, TracerProvider):
        provider.shutdown()


@contextmanager
def trace_provider_call(provider: str, model: str, name: str, **attributes: Any):
    """Context manager for tracing one provider invocation.

    Args:
        provider: Provider id
        model: Provider-specific model id
        name: Caller-facing label of the model configuration
        **attributes: Additional span attributes to include

    Yields:
        The active span, or a NoOpSpan when tracing is disabled
    """
    if not _tracing_enabled or _tracer is None:
        yield NoOpSpan()
        return

    with _tracer.start_as_current_span(
        "orchd.provider_call",
        attributes={
            "orchd.provider": provider,
            "orchd.model": model,
            "orchd.name": name,
            **attributes,
        },
    ) as span:
        try:
            yield span
        except Exception as e:
            span.record_exception(e)
            span.set_status(Status(StatusCode.ERROR, str(e)))
            raise


def record_result(span: Any, error: str | None) -> None:
    """Mark a provider-call span with the invocation outcome."""
    if not is_tracing_enabled():
        return
    span.set_attribute("orchd.success", error is None)
    if error is not None:
        span.set_status(Status(StatusCode.ERROR, error))
