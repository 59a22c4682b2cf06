"""Vendor-specific transpiler implementations."""

from llmwire.core.interface.transpilers.anthropic import AnthropicStreamAggregator, AnthropicTranspiler
from llmwire.core.interface.transpilers.openai import OpenAIStreamAggregator, OpenAITranspiler

__all__ = [
    "AnthropicStreamAggregator",
    "AnthropicTranspiler",
    "OpenAIStreamAggregator",
    "OpenAITranspiler",
]
