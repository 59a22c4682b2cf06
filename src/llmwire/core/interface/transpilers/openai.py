"""OpenAI transpiler — canonical turns to and from the Chat Completions protocol.

Key differences from the canonical model:
- "model" becomes "assistant"; the system instruction is a leading system message.
- Function responses become standalone ``tool`` messages.
- Tool-call IDs are capped at 40 characters (see ``LengthLimitedIDAdapter``).
- Arguments travel as JSON strings and are decoded leniently on the way back.
"""

from __future__ import annotations

from typing import Any

from llmwire.core.interface.errors import NoChoicesInResponseError
from llmwire.core.interface.models import (
    CanonicalContent,
    CanonicalResponse,
    FunctionCallPart,
    FunctionResponsePart,
    GenerationOptions,
    ImagePart,
    Part,
    TextPart,
    ThinkingLevel,
    ToolDeclaration,
    Usage,
)
from llmwire.core.interface.schema import render_parameters, to_strict_schema
from llmwire.core.interface.tool_ids import LengthLimitedIDAdapter
from llmwire.core.interface.transpilers._common import (
    build_usage,
    dump_json,
    encode_image,
    is_supported_image,
    join_texts,
    map_finish_reason,
    parse_arguments,
    system_text,
)

_ROLES = {"user": "user", "model": "assistant", "system": "system"}


class OpenAITranspiler:
    """Converts between canonical turns and OpenAI's chat completion format."""

    provider = "openai"

    def __init__(self, id_adapter: LengthLimitedIDAdapter | None = None) -> None:
        self.ids = id_adapter or LengthLimitedIDAdapter()

    # -- requests -----------------------------------------------------------

    def build_request(
        self,
        model: str,
        history: list[CanonicalContent],
        options: GenerationOptions | None = None,
    ) -> dict[str, Any]:
        """Build ``chat.completions.create`` keyword arguments."""
        options = options or GenerationOptions()
        messages: list[dict[str, Any]] = []

        instruction = system_text(options.system_instruction)
        if instruction:
            messages.append({"role": "system", "content": instruction})

        for content in history:
            messages.extend(self._content_to_messages(content))

        params: dict[str, Any] = {"model": model, "messages": messages}
        self._apply_options(params, options)
        return params

    def stream_params(self) -> dict[str, Any]:
        return {"stream": True, "stream_options": {"include_usage": True}}

    def _apply_options(self, params: dict[str, Any], options: GenerationOptions) -> None:
        if options.temperature is not None:
            params["temperature"] = options.temperature
        if options.max_output_tokens:
            params["max_tokens"] = options.max_output_tokens
        if options.top_p is not None:
            params["top_p"] = options.top_p

        # A single stop sequence is sent as a bare string
        if len(options.stop_sequences) == 1:
            params["stop"] = options.stop_sequences[0]
        elif len(options.stop_sequences) > 1:
            params["stop"] = list(options.stop_sequences)

        if options.thinking_level is not None:
            params["reasoning_effort"] = _reasoning_effort(options.thinking_level)

        if options.response_mime_type == "application/json":
            params["response_format"] = {"type": "json_object"}
        if options.response_schema is not None:
            schema = render_parameters(options.response_schema)
            json_schema: dict[str, Any] = {
                "name": "response",
                "schema": to_strict_schema(schema),
                "strict": True,
            }
            description = schema.get("description")
            if isinstance(description, str) and description:
                json_schema["description"] = description
            params["response_format"] = {"type": "json_schema", "json_schema": json_schema}

        if options.tools:
            params["tools"] = [_tool_to_openai(tool) for tool in options.tools]

    def _content_to_messages(self, content: CanonicalContent) -> list[dict[str, Any]]:
        """Convert one canonical turn into zero or more OpenAI messages.

        Function responses are lifted out as ``tool`` messages; the remaining
        parts are grouped into one role message.
        """
        messages: list[dict[str, Any]] = []
        texts: list[str] = []
        images: list[dict[str, Any]] = []
        tool_calls: list[dict[str, Any]] = []

        for part in content.parts:
            if isinstance(part, FunctionResponsePart):
                messages.append(
                    {
                        "role": "tool",
                        "tool_call_id": self.ids.normalize(part.id),
                        "content": dump_json(part.response, "function response"),
                    }
                )
            elif isinstance(part, FunctionCallPart):
                tool_calls.append(
                    {
                        "id": self.ids.normalize(part.id),
                        "type": "function",
                        "function": {
                            "name": part.name,
                            "arguments": dump_json(part.args, "function args"),
                        },
                    }
                )
            elif isinstance(part, TextPart):
                if part.text:
                    texts.append(part.text)
            elif isinstance(part, ImagePart):
                if is_supported_image(part.mime_type):
                    images.append(_image_to_openai(part))
            # ThinkingPart has no Chat Completions form

        if texts or images or tool_calls:
            message = _role_message(content.role, texts, images, tool_calls)
            if message is not None:
                messages.append(message)
        return messages

    # -- responses ----------------------------------------------------------

    def convert_response(self, response: dict[str, Any]) -> CanonicalResponse:
        """Convert a ``ChatCompletion`` dict to a turn-complete response."""
        choices = response.get("choices") or []
        if not choices:
            raise NoChoicesInResponseError()

        choice = choices[0]
        message = choice.get("message") or {}
        return CanonicalResponse(
            content=self.model_content(message.get("content"), message.get("tool_calls")),
            usage=_usage(response.get("usage")),
            finish_reason=map_finish_reason(choice.get("finish_reason")),
            partial=False,
            turn_complete=True,
        )

    def model_content(self, text: Any, tool_calls: Any) -> CanonicalContent:
        """Build the canonical model turn from message text and tool calls."""
        parts: list[Part] = []
        if isinstance(text, str) and text:
            parts.append(TextPart(text=text))

        for call in tool_calls or []:
            function = call.get("function") or {}
            parts.append(
                FunctionCallPart(
                    id=self.ids.denormalize(call.get("id") or ""),
                    name=function.get("name") or "",
                    args=parse_arguments(function.get("arguments")),
                )
            )
        return CanonicalContent(role="model", parts=parts)

    def stream_aggregator(self) -> OpenAIStreamAggregator:
        return OpenAIStreamAggregator(self)


class OpenAIStreamAggregator:
    """Accumulates ``ChatCompletionChunk`` dicts for the first choice.

    Text deltas are concatenated, tool-call fragments are merged by their
    ``index`` (arguments appended, id and name taken from the first fragment
    carrying them), and the last reported finish reason and usage win.
    """

    def __init__(self, transpiler: OpenAITranspiler) -> None:
        self._transpiler = transpiler
        self._texts: list[str] = []
        self._tool_calls: dict[int, dict[str, str]] = {}
        self._finish_reason: str | None = None
        self._usage: dict[str, Any] | None = None
        self._saw_choice = False

    def add(self, chunk: dict[str, Any]) -> CanonicalResponse | None:
        usage = chunk.get("usage")
        if isinstance(usage, dict):
            self._usage = usage

        choice = _first_choice(chunk.get("choices") or [])
        if choice is None:
            return None
        self._saw_choice = True

        if choice.get("finish_reason"):
            self._finish_reason = choice["finish_reason"]

        delta = choice.get("delta") or {}
        for fragment in delta.get("tool_calls") or []:
            self._add_tool_call(fragment)

        text = delta.get("content")
        if isinstance(text, str) and text:
            self._texts.append(text)
            return CanonicalResponse.delta(text)
        return None

    def _add_tool_call(self, fragment: dict[str, Any]) -> None:
        index = fragment.get("index")
        if not isinstance(index, int):
            index = len(self._tool_calls)
        entry = self._tool_calls.setdefault(index, {"id": "", "name": "", "arguments": ""})

        if fragment.get("id") and not entry["id"]:
            entry["id"] = fragment["id"]
        function = fragment.get("function") or {}
        if function.get("name") and not entry["name"]:
            entry["name"] = function["name"]
        if function.get("arguments"):
            entry["arguments"] += function["arguments"]

    def final(self) -> CanonicalResponse:
        if not self._saw_choice:
            raise NoChoicesInResponseError()

        tool_calls = [
            {"id": entry["id"], "function": {"name": entry["name"], "arguments": entry["arguments"]}}
            for _, entry in sorted(self._tool_calls.items())
        ]
        return CanonicalResponse(
            content=self._transpiler.model_content("".join(self._texts), tool_calls),
            usage=_usage(self._usage),
            finish_reason=map_finish_reason(self._finish_reason),
            partial=False,
            turn_complete=True,
        )


def _first_choice(choices: list[dict[str, Any]]) -> dict[str, Any] | None:
    for choice in choices:
        if choice.get("index", 0) == 0:
            return choice
    return None


def _role_message(
    role: str,
    texts: list[str],
    images: list[dict[str, Any]],
    tool_calls: list[dict[str, Any]],
) -> dict[str, Any] | None:
    wire_role = _ROLES.get(role)
    if wire_role == "user":
        if not images:
            return {"role": "user", "content": join_texts(texts)}
        parts: list[dict[str, Any]] = [{"type": "text", "text": text} for text in texts]
        parts.extend(images)
        return {"role": "user", "content": parts}
    if wire_role == "assistant":
        message: dict[str, Any] = {"role": "assistant"}
        if texts:
            message["content"] = join_texts(texts)
        if tool_calls:
            message["tool_calls"] = tool_calls
        return message
    if wire_role == "system":
        return {"role": "system", "content": join_texts(texts)}
    return None


def _image_to_openai(part: ImagePart) -> dict[str, Any]:
    return {
        "type": "image_url",
        "image_url": {
            "url": f"data:{part.mime_type};base64,{encode_image(part.data)}",
            "detail": "auto",
        },
    }


def _tool_to_openai(tool: ToolDeclaration) -> dict[str, Any]:
    function: dict[str, Any] = {"name": tool.name}
    if tool.description:
        function["description"] = tool.description
    function["parameters"] = render_parameters(tool.parameters)
    return {"type": "function", "function": function}


def _reasoning_effort(level: ThinkingLevel) -> str:
    if level in ("low", "high"):
        return level
    return "medium"


def _usage(raw: Any) -> Usage | None:
    if not isinstance(raw, dict):
        return None
    return build_usage(raw.get("prompt_tokens"), raw.get("completion_tokens"), raw.get("total_tokens"))
