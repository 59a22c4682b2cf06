"""OpenTelemetry tracing helpers for llmwire.

Only the OpenTelemetry API is a hard dependency. Until an SDK provider is
installed the tracer is a no-op, so instrumented calls cost nothing unless
tracing is switched on with :func:`configure_telemetry` (``otel`` extra).

Usage::

    from llmwire.utils.telemetry import get_tracer, record_response

    _tracer = get_tracer(__name__)

    with _tracer.start_as_current_span("model.generate") as span:
        response = ...
        record_response(span, response)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from opentelemetry import trace

if TYPE_CHECKING:
    from llmwire.core.interface.models import CanonicalResponse

# Span attribute keys
ATTR_MODEL = "llmwire.model"
ATTR_PROVIDER = "llmwire.provider"
ATTR_STREAM = "llmwire.stream"
ATTR_MESSAGES = "llmwire.request.messages"
ATTR_TOOLS = "llmwire.request.tools"
ATTR_PARTIALS = "llmwire.stream.partials"
ATTR_TOKENS_PROMPT = "llmwire.tokens.prompt"
ATTR_TOKENS_COMPLETION = "llmwire.tokens.completion"
ATTR_TOKENS_TOTAL = "llmwire.tokens.total"
ATTR_FINISH_REASON = "llmwire.finish_reason"
ATTR_FUNCTION_CALLS = "llmwire.response.function_calls"

_INSTRUMENTATION_NAME = "llmwire"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return a tracer for *name* (no-op until an SDK provider is set)."""
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def record_response(span: trace.Span, response: CanonicalResponse) -> None:
    """Attach finish reason, function-call count and token usage to *span*."""
    span.set_attribute(ATTR_FINISH_REASON, response.finish_reason.value)
    span.set_attribute(ATTR_FUNCTION_CALLS, len(response.function_calls))
    usage = response.usage
    if usage is None:
        return
    if usage.prompt_tokens is not None:
        span.set_attribute(ATTR_TOKENS_PROMPT, usage.prompt_tokens)
    if usage.completion_tokens is not None:
        span.set_attribute(ATTR_TOKENS_COMPLETION, usage.completion_tokens)
    if usage.total_tokens is not None:
        span.set_attribute(ATTR_TOKENS_TOTAL, usage.total_tokens)


def configure_telemetry(
    *,
    service_name: str = "llmwire",
    export_to_console: bool = True,
    otlp_endpoint: str | None = None,
) -> None:
    """Install an SDK tracer provider (requires ``llmwire[otel]``).

    Parameters
    ----------
    service_name:
        Value of the ``service.name`` resource attribute.
    export_to_console:
        Print finished spans as JSON to stdout.
    otlp_endpoint:
        Also ship spans over OTLP/gRPC to this endpoint.

    Raises
    ------
    ImportError
        If ``opentelemetry-sdk`` (or, with *otlp_endpoint*, the OTLP
        exporter) is not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace.export import (  # pyright: ignore[reportMissingImports]
            BatchSpanProcessor,
            ConsoleSpanExporter,
            SimpleSpanProcessor,
        )
    except ImportError as exc:
        msg = (
            "opentelemetry-sdk is required for configure_telemetry(). "
            "Install it with: pip install llmwire[otel]"
        )
        raise ImportError(msg) from exc

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))

    if export_to_console:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
    if otlp_endpoint:
        provider.add_span_processor(BatchSpanProcessor(_otlp_exporter(otlp_endpoint)))

    trace.set_tracer_provider(provider)


def _otlp_exporter(endpoint: str) -> Any:
    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (  # pyright: ignore[reportMissingImports]
            OTLPSpanExporter,
        )
    except ImportError as exc:
        msg = (
            "opentelemetry-exporter-otlp is required for OTLP export. "
            "Install it with: pip install llmwire[otel]"
        )
        raise ImportError(msg) from exc
    return OTLPSpanExporter(endpoint=endpoint)
