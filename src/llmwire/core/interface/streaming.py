"""CanonicalStream — the lazy response sequence handed to the agent runtime.

Wraps an async generator of :class:`CanonicalResponse` values. The sequence
is finite and single-use: once exhausted, closed, or failed it stays that
way. Closing it (explicitly, or by leaving an ``async with`` block) closes
the generator, which in turn closes the vendor HTTP response. A bare
``break`` out of ``async for`` does not close it; the response stays open
until ``aclose()`` or garbage collection.

Usage::

    async with client.generate_stream(history, options) as stream:
        async for response in stream:
            if response.partial:
                print(response.text, end="")
    print(stream.final.usage)
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from types import TracebackType

from llmwire.core.interface.models import CanonicalResponse


class CanonicalStream:
    """Single-use async iterator of partial responses plus one final response."""

    def __init__(self, source: AsyncGenerator[CanonicalResponse, None]) -> None:
        self._source = source
        self._final: CanonicalResponse | None = None
        self._closed = False

    @property
    def final(self) -> CanonicalResponse | None:
        """The turn-complete response, once it has been yielded."""
        return self._final

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> CanonicalStream:
        return self

    async def __anext__(self) -> CanonicalResponse:
        if self._closed:
            raise StopAsyncIteration
        try:
            response = await self._source.__anext__()
        except BaseException:
            # StopAsyncIteration, errors and cancellation all end the sequence
            await self.aclose()
            raise
        if response.turn_complete:
            self._final = response
        return response

    async def aclose(self) -> None:
        """Stop the stream and release the underlying network response."""
        if self._closed:
            return
        self._closed = True
        await self._source.aclose()

    async def collect(self) -> list[CanonicalResponse]:
        """Drain the stream and return every response in order."""
        return [response async for response in self]

    async def __aenter__(self) -> CanonicalStream:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
