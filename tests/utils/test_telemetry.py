"""Tests for OpenTelemetry tracing helpers."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from opentelemetry import trace

from llmwire.core.interface.models import (
    CanonicalContent,
    CanonicalResponse,
    FinishReason,
    FunctionCallPart,
    Usage,
)
from llmwire.utils.telemetry import (
    ATTR_FINISH_REASON,
    ATTR_FUNCTION_CALLS,
    ATTR_TOKENS_COMPLETION,
    ATTR_TOKENS_PROMPT,
    ATTR_TOKENS_TOTAL,
    configure_telemetry,
    get_tracer,
    record_response,
)


class TestGetTracer:
    def test_returns_tracer(self) -> None:
        tracer = get_tracer("test.module")
        assert isinstance(tracer, trace.Tracer)

    def test_default_name(self) -> None:
        assert isinstance(get_tracer(), trace.Tracer)

    def test_noop_span(self) -> None:
        """Without SDK configured, spans should be no-ops."""
        with get_tracer("test.noop").start_as_current_span("test") as span:
            span.set_attribute("key", "value")


class TestRecordResponse:
    def test_usage_and_calls(self) -> None:
        span = MagicMock()
        response = CanonicalResponse(
            content=CanonicalContent.model(calls=[FunctionCallPart(id="c", name="f")]),
            usage=Usage(prompt_tokens=3, completion_tokens=4, total_tokens=7),
            finish_reason=FinishReason.STOP,
        )

        record_response(span, response)

        attrs = {call.args[0]: call.args[1] for call in span.set_attribute.call_args_list}
        assert attrs == {
            ATTR_FINISH_REASON: "stop",
            ATTR_FUNCTION_CALLS: 1,
            ATTR_TOKENS_PROMPT: 3,
            ATTR_TOKENS_COMPLETION: 4,
            ATTR_TOKENS_TOTAL: 7,
        }

    def test_without_usage(self) -> None:
        span = MagicMock()
        record_response(span, CanonicalResponse(content=CanonicalContent.model("x")))
        assert span.set_attribute.call_count == 2


class TestConfigureTelemetry:
    def test_raises_without_sdk(self) -> None:
        """configure_telemetry requires opentelemetry-sdk."""
        with patch.dict("sys.modules", {"opentelemetry.sdk.resources": None}):
            with pytest.raises(ImportError, match="opentelemetry-sdk"):
                configure_telemetry()

    def test_installs_provider(self) -> None:
        try:
            from opentelemetry.sdk.trace import TracerProvider
        except ImportError:
            pytest.skip("opentelemetry-sdk not installed")

        with patch("llmwire.utils.telemetry.trace.set_tracer_provider") as set_provider:
            configure_telemetry(service_name="test-svc", export_to_console=False)

        provider = set_provider.call_args.args[0]
        assert isinstance(provider, TracerProvider)
        assert provider.resource.attributes["service.name"] == "test-svc"

    def test_otlp_raises_without_exporter(self) -> None:
        """OTLP export requires opentelemetry-exporter-otlp."""
        try:
            import opentelemetry.sdk.trace  # noqa: F401
        except ImportError:
            pytest.skip("opentelemetry-sdk not installed")

        with patch.dict("sys.modules", {"opentelemetry.exporter.otlp.proto.grpc.trace_exporter": None}):
            with pytest.raises(ImportError, match="opentelemetry-exporter-otlp"):
                configure_telemetry(export_to_console=False, otlp_endpoint="http://localhost:4317")
