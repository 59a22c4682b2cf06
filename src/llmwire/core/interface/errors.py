"""Error types for the adapter layer.

Four kinds of failure exist: construction errors (the request cannot be
serialized), transport errors (network or vendor failures, never retried
here), malformed-response errors (an upstream payload that cannot be a valid
turn), and configuration errors. Lenient-decode conditions are not errors.
"""

from __future__ import annotations

import asyncio

import httpx

RETRYABLE_STATUS_CODES = frozenset({408, 409, 429, 500, 502, 503, 504})


class AdapterError(Exception):
    """Base error for all llmwire failures."""


class ConfigError(AdapterError):
    """A model configuration could not be read or validated."""


class RequestConstructionError(AdapterError):
    """A canonical request could not be turned into vendor parameters."""


class TransportError(AdapterError):
    """A vendor call failed in transit or was rejected upstream.

    ``retryable`` is advisory: the adapter never retries, the caller owns
    retry policy.
    """

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        phase: str,
        status_code: int | None = None,
        retryable: bool = False,
    ) -> None:
        self.provider = provider
        self.phase = phase
        self.status_code = status_code
        self.retryable = retryable
        super().__init__(message)


class MalformedResponseError(AdapterError):
    """The vendor returned a payload that cannot be converted."""


class NoChoicesInResponseError(MalformedResponseError):
    """A Chat Completions response carried no choices."""

    def __init__(self) -> None:
        super().__init__("no choices in OpenAI response")


class NoContentInResponseError(MalformedResponseError):
    """A Messages response carried no content blocks."""

    def __init__(self) -> None:
        super().__init__("no content in Anthropic response")


class StreamProtocolError(MalformedResponseError):
    """A streamed event arrived out of order or reported a vendor error."""


def _status_code(exc: BaseException) -> int | None:
    for attr in ("status_code", "status"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and 100 <= value <= 599:
            return value
    response = getattr(exc, "response", None)
    value = getattr(response, "status_code", None)
    if isinstance(value, int) and 100 <= value <= 599:
        return value
    return None


def wrap_transport_error(exc: BaseException, *, provider: str, phase: str) -> TransportError:
    """Wrap an SDK or network exception with provider context.

    Callers raise the result ``from exc`` so the original stays on the chain.
    """
    if isinstance(exc, asyncio.CancelledError):
        raise exc
    if isinstance(exc, TransportError):
        return exc

    status_code = _status_code(exc)
    retryable = status_code in RETRYABLE_STATUS_CODES or isinstance(
        exc, (httpx.TimeoutException, httpx.TransportError)
    )
    # SDK connection errors wrap the httpx error as __cause__
    cause = exc.__cause__
    if not retryable and isinstance(cause, (httpx.TimeoutException, httpx.TransportError)):
        retryable = True

    status_note = f" (status={status_code})" if status_code is not None else ""
    detail = str(exc)
    message = f"{provider} {phase} failed{status_note}"
    return TransportError(
        f"{message}: {detail}" if detail else message,
        provider=provider,
        phase=phase,
        status_code=status_code,
        retryable=retryable,
    )
