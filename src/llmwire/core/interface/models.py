"""Canonical content model — the vendor-neutral boundary types of llmwire.

A conversation is an ordered list of :class:`CanonicalContent` turns. Each
turn carries ordered :class:`Part` values drawn from a closed set of
variants. Vendor transpilers convert these to and from their wire formats;
nothing outside ``transpilers/`` ever sees a vendor payload.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Parts — closed variant, discriminated on ``type``
# ---------------------------------------------------------------------------


class TextPart(BaseModel):
    """Plain text."""

    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str


class ImagePart(BaseModel):
    """Inline image bytes.

    Only jpeg/jpg/png/gif/webp are forwarded to vendors; other MIME types
    are accepted here and dropped by the transpilers.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["image"] = "image"
    mime_type: str
    data: bytes


class FunctionCallPart(BaseModel):
    """A tool invocation emitted by the model."""

    model_config = ConfigDict(frozen=True)

    type: Literal["function_call"] = "function_call"
    id: str
    name: str
    args: dict[str, Any] = Field(default_factory=lambda: dict[str, Any]())


class FunctionResponsePart(BaseModel):
    """The caller-supplied result of a tool invocation, matched by ``id``."""

    model_config = ConfigDict(frozen=True)

    type: Literal["function_response"] = "function_response"
    id: str
    name: str = ""
    response: dict[str, Any] = Field(default_factory=lambda: dict[str, Any]())


class ThinkingPart(BaseModel):
    """Model reasoning that must be replayed verbatim in later requests.

    Messages API tool loops with extended thinking reject an assistant turn
    whose signed thinking block is missing. ``redacted_data`` holds the
    opaque payload of a redacted block; ``thinking``/``signature`` are empty
    then. Chat Completions has no equivalent and drops these parts.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["thinking"] = "thinking"
    thinking: str = ""
    signature: str = ""
    redacted_data: str = ""


Part = Annotated[
    TextPart | ImagePart | FunctionCallPart | FunctionResponsePart | ThinkingPart,
    Field(discriminator="type"),
]

Role = Literal["user", "model", "system"]


class CanonicalContent(BaseModel):
    """One conversation turn. ``model`` is the assistant role."""

    model_config = ConfigDict(frozen=True)

    role: Role
    parts: list[Part] = []

    @property
    def text(self) -> str:
        """Text parts joined with newlines, in part order."""
        return "\n".join(p.text for p in self.parts if isinstance(p, TextPart) and p.text)

    @property
    def function_calls(self) -> list[FunctionCallPart]:
        return [p for p in self.parts if isinstance(p, FunctionCallPart)]

    @classmethod
    def user(cls, text: str, *images: ImagePart) -> CanonicalContent:
        """Create a user turn with text followed by optional images."""
        parts: list[Part] = [TextPart(text=text), *images]
        return cls(role="user", parts=parts)

    @classmethod
    def model(cls, text: str = "", calls: list[FunctionCallPart] | None = None) -> CanonicalContent:
        """Create a model (assistant) turn."""
        parts: list[Part] = [TextPart(text=text)] if text else []
        parts.extend(calls or [])
        return cls(role="model", parts=parts)

    @classmethod
    def system(cls, text: str) -> CanonicalContent:
        """Create a system turn."""
        return cls(role="system", parts=[TextPart(text=text)])

    @classmethod
    def tool_results(cls, *results: FunctionResponsePart) -> CanonicalContent:
        """Create a user turn carrying function responses."""
        return cls(role="user", parts=list(results))


# ---------------------------------------------------------------------------
# Tool declarations and the generic schema tree
# ---------------------------------------------------------------------------


class SchemaType(str, Enum):
    """Type tag of a generic schema node."""

    UNSPECIFIED = "TYPE_UNSPECIFIED"
    STRING = "STRING"
    NUMBER = "NUMBER"
    INTEGER = "INTEGER"
    BOOLEAN = "BOOLEAN"
    ARRAY = "ARRAY"
    OBJECT = "OBJECT"


class Schema(BaseModel):
    """Generic, vendor-neutral parameter schema (recursive)."""

    model_config = ConfigDict(frozen=True)

    type: SchemaType = SchemaType.UNSPECIFIED
    description: str = ""
    properties: dict[str, Schema] = {}
    required: list[str] = []
    items: Schema | None = None
    enum: list[str] = []


class ToolDeclaration(BaseModel):
    """A function the model may call.

    ``parameters`` is intentionally untyped: it may be a :class:`Schema`, a
    pre-rendered JSON-schema mapping, ``None``, or a framework's own schema
    object. :func:`llmwire.core.interface.schema.render_parameters` resolves it.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    parameters: Any = None


# ---------------------------------------------------------------------------
# Generation options
# ---------------------------------------------------------------------------

ThinkingLevel = Literal["low", "medium", "high"]


class GenerationOptions(BaseModel):
    """Per-request generation settings. Every field is optional."""

    model_config = ConfigDict(frozen=True)

    temperature: float | None = None
    top_p: float | None = None
    max_output_tokens: int | None = None
    stop_sequences: list[str] = []
    system_instruction: CanonicalContent | None = None
    response_mime_type: str | None = None
    response_schema: Any = None
    thinking_level: ThinkingLevel | None = None
    tools: list[ToolDeclaration] = []


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class FinishReason(str, Enum):
    """Vendor stop reasons normalized to one set."""

    STOP = "stop"
    MAX_TOKENS = "max_tokens"
    SAFETY = "safety"
    UNSPECIFIED = "unspecified"


class Usage(BaseModel):
    """Token usage. Absent entirely when the vendor reports zero."""

    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    total_tokens: int | None = None


class CanonicalResponse(BaseModel):
    """A model response, either a streamed delta or the completed turn."""

    content: CanonicalContent
    usage: Usage | None = None
    finish_reason: FinishReason = FinishReason.UNSPECIFIED
    partial: bool = False
    turn_complete: bool = True

    @property
    def text(self) -> str:
        """Concatenated text of the response content."""
        return "".join(p.text for p in self.content.parts if isinstance(p, TextPart))

    @property
    def function_calls(self) -> list[FunctionCallPart]:
        return self.content.function_calls

    @classmethod
    def delta(cls, text: str) -> CanonicalResponse:
        """A partial, not-yet-complete streamed text fragment."""
        return cls(
            content=CanonicalContent(role="model", parts=[TextPart(text=text)]),
            partial=True,
            turn_complete=False,
        )
