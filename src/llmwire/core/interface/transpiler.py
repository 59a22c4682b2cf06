"""Transpiler protocol — converts between canonical turns and one vendor protocol.

Each vendor (Chat Completions, Messages) has a concrete transpiler that
builds request parameters from canonical input, converts a completed
response, and creates a stream aggregator for streamed responses. All vendor
payloads are plain dicts.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from llmwire.core.interface.models import (
        CanonicalContent,
        CanonicalResponse,
        GenerationOptions,
    )


class StreamAggregator(Protocol):
    """Incremental consumer of one vendor stream."""

    def add(self, chunk: dict[str, Any]) -> CanonicalResponse | None:
        """Fold *chunk* into the aggregate state.

        Returns a partial response when the chunk carries a non-empty text
        delta, else ``None``.
        """
        ...

    def final(self) -> CanonicalResponse:
        """Convert the aggregate into the single turn-complete response."""
        ...


class Transpiler(Protocol):
    """Protocol for vendor-specific request/response transpilers."""

    provider: str

    def build_request(
        self,
        model: str,
        history: list[CanonicalContent],
        options: GenerationOptions | None = None,
    ) -> dict[str, Any]:
        """Return keyword arguments for the vendor SDK's create call.

        Raises:
            RequestConstructionError: If part of the request cannot be serialized.
        """
        ...

    def stream_params(self) -> dict[str, Any]:
        """Extra keyword arguments that switch the create call to streaming."""
        ...

    def convert_response(self, response: dict[str, Any]) -> CanonicalResponse:
        """Convert a completed vendor response.

        Raises:
            MalformedResponseError: If the response carries no choices/content.
        """
        ...

    def stream_aggregator(self) -> StreamAggregator:
        """Create a fresh aggregator for one streamed call."""
        ...
