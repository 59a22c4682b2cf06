"""ModelClient — the agent runtime's entry point to a vendor model.

Wraps the official async OpenAI and Anthropic SDKs behind a canonical
interface: callers pass canonical history and options and get canonical
responses back, either as one completed turn or as a :class:`CanonicalStream`.
The client never retries; transport failures surface as ``TransportError``.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from typing import Any

from anthropic import AsyncAnthropic
from openai import AsyncOpenAI
from opentelemetry import trace

from llmwire.core.interface.config import ModelConfig
from llmwire.core.interface.errors import MalformedResponseError, wrap_transport_error
from llmwire.core.interface.models import CanonicalContent, CanonicalResponse, GenerationOptions
from llmwire.core.interface.streaming import CanonicalStream
from llmwire.core.interface.transpiler import Transpiler
from llmwire.core.interface.transpilers.anthropic import DEFAULT_MAX_TOKENS, AnthropicTranspiler
from llmwire.core.interface.transpilers.openai import OpenAITranspiler
from llmwire.utils.telemetry import (
    ATTR_MESSAGES,
    ATTR_MODEL,
    ATTR_PARTIALS,
    ATTR_PROVIDER,
    ATTR_STREAM,
    ATTR_TOOLS,
    get_tracer,
    record_response,
)

logger = logging.getLogger(__name__)

_tracer = get_tracer(__name__)


def get_transpiler(provider: str, *, default_max_tokens: int = DEFAULT_MAX_TOKENS) -> Transpiler:
    """Return a fresh transpiler for *provider* (unknown providers use OpenAI)."""
    if provider == "anthropic":
        return AnthropicTranspiler(default_max_tokens=default_max_tokens)
    return OpenAITranspiler()


class ModelClient:
    """Async client for one configured model.

    Usage::

        client = ModelClient(ModelConfig(model="anthropic/claude-sonnet-4-5"))
        response = await client.generate(history, options)

        async with client.generate_stream(history, options) as stream:
            async for chunk in stream:
                ...

    One instance may serve concurrent requests; its only shared mutable
    state is the transpiler's tool-call ID table, which is lock-protected.
    """

    def __init__(
        self,
        config: ModelConfig,
        *,
        sdk_client: Any = None,
        transpiler: Transpiler | None = None,
    ) -> None:
        self.config = config
        self.transpiler = transpiler or get_transpiler(
            config.provider, default_max_tokens=config.default_max_tokens
        )
        self._client = sdk_client
        self._owns_client = sdk_client is None

    def _get_client(self) -> Any:
        """Lazily create and return the vendor SDK client."""
        if self._client is None:
            if self.config.provider == "anthropic":
                self._client = AsyncAnthropic(
                    api_key=self.config.api_key, base_url=self.config.api_base
                )
            else:
                self._client = AsyncOpenAI(api_key=self.config.api_key, base_url=self.config.api_base)
        return self._client

    def build_request(
        self,
        history: list[CanonicalContent],
        options: GenerationOptions | None = None,
        *,
        stream: bool = False,
    ) -> dict[str, Any]:
        """Return the vendor parameters for a request without sending it."""
        params = self.transpiler.build_request(self.config.model_name, history, options)
        if stream:
            params.update(self.transpiler.stream_params())
        return params

    async def generate(
        self,
        history: list[CanonicalContent],
        options: GenerationOptions | None = None,
    ) -> CanonicalResponse:
        """Send one non-streaming request and return the completed turn.

        Raises:
            RequestConstructionError: Before any network call, if the request
                cannot be serialized.
            TransportError: If the vendor call fails.
            MalformedResponseError: If the response has no choices/content.
        """
        with _tracer.start_as_current_span("model.generate") as span:
            params = self.build_request(history, options)
            self._annotate(span, params, stream=False)

            try:
                raw = await self._create(params)
            except Exception as exc:
                raise wrap_transport_error(exc, provider=self.config.provider, phase="generate") from exc

            response = self.transpiler.convert_response(self._as_dict(raw))
            record_response(span, response)
            return response

    def generate_stream(
        self,
        history: list[CanonicalContent],
        options: GenerationOptions | None = None,
    ) -> CanonicalStream:
        """Start a streaming request.

        The request is built immediately, so construction errors raise here.
        Nothing is sent until the returned stream is first iterated.
        """
        params = self.build_request(history, options, stream=True)
        return CanonicalStream(self._stream(params))

    def generate_content(
        self,
        history: list[CanonicalContent],
        options: GenerationOptions | None = None,
        *,
        stream: bool = False,
    ) -> CanonicalStream:
        """Single runtime entry point: always returns a lazy response stream.

        With ``stream=False`` the stream holds exactly one completed response.
        """
        if stream:
            return self.generate_stream(history, options)
        return CanonicalStream(self._single(history, options))

    async def _single(
        self,
        history: list[CanonicalContent],
        options: GenerationOptions | None,
    ) -> AsyncGenerator[CanonicalResponse, None]:
        yield await self.generate(history, options)

    async def _stream(self, params: dict[str, Any]) -> AsyncGenerator[CanonicalResponse, None]:
        """Yield partial deltas as chunks arrive, then the aggregated turn.

        The span is not made current: this generator is suspended between
        items and may be closed from another context.
        """
        provider = self.config.provider
        aggregator = self.transpiler.stream_aggregator()
        span = _tracer.start_span("model.stream")
        self._annotate(span, params, stream=True)
        partials = 0

        try:
            try:
                raw_stream = await self._create(params)
            except Exception as exc:
                raise wrap_transport_error(exc, provider=provider, phase="stream") from exc

            async with raw_stream:
                chunks = raw_stream.__aiter__()
                while True:
                    try:
                        chunk = await chunks.__anext__()
                    except StopAsyncIteration:
                        break
                    except Exception as exc:
                        raise wrap_transport_error(exc, provider=provider, phase="stream") from exc

                    partial = aggregator.add(self._as_dict(chunk))
                    if partial is not None:
                        partials += 1
                        yield partial

            final = aggregator.final()
            span.set_attribute(ATTR_PARTIALS, partials)
            record_response(span, final)
            yield final
        except Exception as exc:
            span.record_exception(exc)
            span.set_status(trace.Status(trace.StatusCode.ERROR, str(exc)))
            raise
        finally:
            span.end()

    async def _create(self, params: dict[str, Any]) -> Any:
        client = self._get_client()
        logger.debug(
            "Sending %s request: model=%s messages=%d stream=%s",
            self.config.provider,
            params.get("model"),
            len(params.get("messages", [])),
            bool(params.get("stream")),
        )
        if self.config.provider == "anthropic":
            return await client.messages.create(**params)
        return await client.chat.completions.create(**params)

    def _as_dict(self, payload: Any) -> dict[str, Any]:
        """Turn an SDK response/chunk model into a plain dict."""
        if isinstance(payload, dict):
            return payload
        dump = getattr(payload, "model_dump", None)
        if callable(dump):
            data = dump()
            if isinstance(data, dict):
                return data
        raise MalformedResponseError(
            f"unexpected {self.config.provider} payload type {type(payload).__name__}"
        )

    def _annotate(self, span: trace.Span, params: dict[str, Any], *, stream: bool) -> None:
        span.set_attribute(ATTR_MODEL, self.config.model)
        span.set_attribute(ATTR_PROVIDER, self.config.provider)
        span.set_attribute(ATTR_STREAM, stream)
        span.set_attribute(ATTR_MESSAGES, len(params.get("messages", [])))
        span.set_attribute(ATTR_TOOLS, len(params.get("tools", [])))

    async def aclose(self) -> None:
        """Close the SDK client if this instance created it."""
        client = self._client
        if client is None or not self._owns_client:
            return
        self._client = None
        await client.close()
