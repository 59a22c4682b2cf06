"""Canonical model interface and vendor transpilation."""

from llmwire.core.interface.client import ModelClient, get_transpiler
from llmwire.core.interface.config import ModelConfig, load_model_config
from llmwire.core.interface.errors import (
    AdapterError,
    ConfigError,
    MalformedResponseError,
    NoChoicesInResponseError,
    NoContentInResponseError,
    RequestConstructionError,
    StreamProtocolError,
    TransportError,
)
from llmwire.core.interface.models import (
    CanonicalContent,
    CanonicalResponse,
    FinishReason,
    FunctionCallPart,
    FunctionResponsePart,
    GenerationOptions,
    ImagePart,
    Part,
    Schema,
    SchemaType,
    TextPart,
    ThinkingPart,
    ToolDeclaration,
    Usage,
)
from llmwire.core.interface.streaming import CanonicalStream
from llmwire.core.interface.transpiler import StreamAggregator, Transpiler

__all__ = [
    "AdapterError",
    "CanonicalContent",
    "CanonicalResponse",
    "CanonicalStream",
    "ConfigError",
    "FinishReason",
    "FunctionCallPart",
    "FunctionResponsePart",
    "GenerationOptions",
    "ImagePart",
    "MalformedResponseError",
    "ModelClient",
    "ModelConfig",
    "NoChoicesInResponseError",
    "NoContentInResponseError",
    "Part",
    "RequestConstructionError",
    "Schema",
    "SchemaType",
    "StreamAggregator",
    "StreamProtocolError",
    "TextPart",
    "ThinkingPart",
    "ToolDeclaration",
    "Transpiler",
    "TransportError",
    "Usage",
    "get_transpiler",
    "load_model_config",
]
