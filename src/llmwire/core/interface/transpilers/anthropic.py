"""Anthropic transpiler — canonical turns to and from the Messages protocol.

Key differences from the canonical model:
- The system instruction is a separate top-level ``system`` parameter.
- ``max_tokens`` is mandatory.
- Function responses are ``tool_result`` blocks inside user messages.
- Consecutive same-role messages are merged, then unpaired ``tool_use``
  blocks are removed (see :mod:`llmwire.core.interface.repair`).
- Tool IDs must match ``[a-zA-Z0-9_-]+`` (see ``sanitize_tool_id``).
"""

from __future__ import annotations

import json
import logging
from typing import Any

from llmwire.core.interface.errors import NoContentInResponseError, StreamProtocolError
from llmwire.core.interface.models import (
    CanonicalContent,
    CanonicalResponse,
    FunctionCallPart,
    FunctionResponsePart,
    GenerationOptions,
    ImagePart,
    Part,
    TextPart,
    ThinkingPart,
    ToolDeclaration,
    Usage,
)
from llmwire.core.interface.repair import repair_tool_pairing
from llmwire.core.interface.schema import render_parameters, to_strict_schema
from llmwire.core.interface.tool_ids import sanitize_tool_id
from llmwire.core.interface.transpilers._common import (
    build_usage,
    dump_json,
    encode_image,
    is_supported_image,
    map_finish_reason,
    parse_arguments,
    system_text,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 4096

_THINKING_BUDGETS = {
    "low": 2048,
    "medium": 4096,
    "high": 6144,
}

_THINKING_BLOCK_TYPES = frozenset({"thinking", "redacted_thinking"})


class AnthropicTranspiler:
    """Converts between canonical turns and Anthropic's messages API format."""

    provider = "anthropic"

    def __init__(self, default_max_tokens: int = DEFAULT_MAX_TOKENS) -> None:
        self.default_max_tokens = default_max_tokens

    # -- requests -----------------------------------------------------------

    def build_request(
        self,
        model: str,
        history: list[CanonicalContent],
        options: GenerationOptions | None = None,
    ) -> dict[str, Any]:
        """Build ``messages.create`` keyword arguments.

        The message list is merged by role and repaired before it is returned,
        so it always satisfies the tool_use/tool_result pairing rule.
        """
        options = options or GenerationOptions()
        params: dict[str, Any] = {
            "model": model,
            "max_tokens": options.max_output_tokens or self.default_max_tokens,
        }

        instruction = system_text(options.system_instruction)
        if instruction:
            params["system"] = [{"type": "text", "text": instruction}]

        raw_messages: list[dict[str, Any]] = []
        for content in history:
            raw_messages.extend(self._content_to_messages(content))
        params["messages"] = repair_tool_pairing(_merge_consecutive_roles(raw_messages))

        if options.temperature is not None:
            params["temperature"] = options.temperature
        if options.top_p is not None:
            params["top_p"] = options.top_p
        if options.stop_sequences:
            params["stop_sequences"] = list(options.stop_sequences)

        if options.thinking_level is not None and not _thinking_replayable(params["messages"]):
            logger.warning(
                "Disabling extended thinking: the pending tool_use turn has no thinking block to replay"
            )
        elif options.thinking_level is not None:
            budget = _THINKING_BUDGETS.get(options.thinking_level, _THINKING_BUDGETS["medium"])
            params["thinking"] = {"type": "enabled", "budget_tokens": budget}
            if params["max_tokens"] <= budget:
                params["max_tokens"] = budget + self.default_max_tokens

        if options.response_schema is not None:
            schema = to_strict_schema(render_parameters(options.response_schema))
            params["extra_body"] = {
                "output_config": {"format": {"type": "json_schema", "schema": schema}}
            }
        elif options.response_mime_type == "application/json":
            logger.debug("Messages API has no JSON mode without a schema; ignoring mime type")

        if options.tools:
            params["tools"] = [_tool_to_anthropic(tool) for tool in options.tools]

        return params

    def stream_params(self) -> dict[str, Any]:
        return {"stream": True}

    def _content_to_messages(self, content: CanonicalContent) -> list[dict[str, Any]]:
        """Convert one canonical turn into at most two messages.

        Function responses become a user message of ``tool_result`` blocks;
        the other parts become one message in the turn's role. Replayable
        thinking blocks of a model turn lead its assistant message.
        """
        results: list[dict[str, Any]] = []
        thinking: list[dict[str, Any]] = []
        blocks: list[dict[str, Any]] = []

        for part in content.parts:
            if isinstance(part, FunctionResponsePart):
                results.append(
                    {
                        "type": "tool_result",
                        "tool_use_id": sanitize_tool_id(part.id),
                        "content": dump_json(part.response, "function response"),
                    }
                )
            elif isinstance(part, FunctionCallPart):
                blocks.append(
                    {
                        "type": "tool_use",
                        "id": sanitize_tool_id(part.id),
                        "name": part.name,
                        "input": _tool_input(part.args),
                    }
                )
            elif isinstance(part, TextPart):
                if part.text:
                    blocks.append({"type": "text", "text": part.text})
            elif isinstance(part, ImagePart):
                if is_supported_image(part.mime_type):
                    blocks.append(_image_to_anthropic(part))
            elif content.role == "model":
                block = _thinking_to_anthropic(part)
                if block is not None:
                    thinking.append(block)

        messages: list[dict[str, Any]] = []
        if results:
            messages.append({"role": "user", "content": results})
        if blocks:
            role = "assistant" if content.role == "model" else "user"
            messages.append({"role": role, "content": thinking + blocks})
        return messages

    # -- responses ----------------------------------------------------------

    def convert_response(self, response: dict[str, Any]) -> CanonicalResponse:
        """Convert a ``Message`` dict to a turn-complete response."""
        blocks = response.get("content") or []
        if not blocks:
            raise NoContentInResponseError()

        parts: list[Part] = []
        for block in blocks:
            block_type = block.get("type")
            if block_type == "text":
                parts.append(TextPart(text=block.get("text") or ""))
            elif block_type == "tool_use":
                parts.append(
                    FunctionCallPart(
                        id=block.get("id") or "",
                        name=block.get("name") or "",
                        args=parse_arguments(block.get("input")),
                    )
                )
            elif block_type == "thinking":
                parts.append(
                    ThinkingPart(
                        thinking=block.get("thinking") or "",
                        signature=block.get("signature") or "",
                    )
                )
            elif block_type == "redacted_thinking":
                parts.append(ThinkingPart(redacted_data=block.get("data") or ""))

        return CanonicalResponse(
            content=CanonicalContent(role="model", parts=parts),
            usage=_usage(response.get("usage")),
            finish_reason=map_finish_reason(response.get("stop_reason")),
            partial=False,
            turn_complete=True,
        )

    def stream_aggregator(self) -> AnthropicStreamAggregator:
        return AnthropicStreamAggregator(self)


class AnthropicStreamAggregator:
    """Rebuilds a ``Message`` snapshot from raw stream events.

    Follows the SDK's accumulation rules: ``message_start`` opens the
    snapshot, blocks are appended on ``content_block_start``, text and
    thinking deltas are concatenated, tool input JSON is buffered until
    ``content_block_stop``, and ``message_delta`` updates the stop reason
    and usage.
    """

    def __init__(self, transpiler: AnthropicTranspiler) -> None:
        self._transpiler = transpiler
        self._message: dict[str, Any] | None = None
        self._partial_json: dict[int, str] = {}

    def add(self, chunk: dict[str, Any]) -> CanonicalResponse | None:
        event_type = chunk.get("type")

        if event_type == "error":
            raise StreamProtocolError(f"anthropic stream error: {chunk.get('error')}")
        if event_type == "ping":
            return None
        if event_type == "message_start":
            message = dict(chunk.get("message") or {})
            message["content"] = list(message.get("content") or [])
            self._message = message
            return None

        message = self._require_message(event_type)

        if event_type == "content_block_start":
            block = dict(chunk.get("content_block") or {})
            index = chunk.get("index", len(message["content"]))
            if block.get("type") == "tool_use":
                block["input"] = {}
                self._partial_json[index] = ""
            message["content"].append(block)

        elif event_type == "content_block_delta":
            return self._apply_delta(chunk.get("index"), chunk.get("delta") or {})

        elif event_type == "content_block_stop":
            self._finish_tool_input(chunk.get("index"))

        elif event_type == "message_delta":
            delta = chunk.get("delta") or {}
            for key in ("stop_reason", "stop_sequence"):
                if delta.get(key) is not None:
                    message[key] = delta[key]
            usage = dict(message.get("usage") or {})
            for key, value in (chunk.get("usage") or {}).items():
                if value is not None:
                    usage[key] = value
            message["usage"] = usage

        return None

    def _apply_delta(self, index: Any, delta: dict[str, Any]) -> CanonicalResponse | None:
        block = self._block(index)
        delta_type = delta.get("type")

        if delta_type == "text_delta":
            text = delta.get("text") or ""
            if block.get("type") == "text":
                block["text"] = (block.get("text") or "") + text
            if text:
                return CanonicalResponse.delta(text)
        elif delta_type == "input_json_delta":
            self._partial_json[index] = self._partial_json.get(index, "") + (
                delta.get("partial_json") or ""
            )
        elif delta_type == "thinking_delta":
            block["thinking"] = (block.get("thinking") or "") + (delta.get("thinking") or "")
        elif delta_type == "signature_delta":
            block["signature"] = delta.get("signature")
        return None

    def _finish_tool_input(self, index: Any) -> None:
        raw = self._partial_json.pop(index, None)
        if raw is not None:
            self._block(index)["input"] = parse_arguments(raw)

    def _block(self, index: Any) -> dict[str, Any]:
        content = self._require_message("content_block_delta")["content"]
        if not isinstance(index, int) or not 0 <= index < len(content):
            raise StreamProtocolError(f"stream delta for unknown content block {index!r}")
        block: dict[str, Any] = content[index]
        return block

    def _require_message(self, event_type: Any) -> dict[str, Any]:
        if self._message is None:
            raise StreamProtocolError(f"unexpected {event_type!r} event before message_start")
        return self._message

    def final(self) -> CanonicalResponse:
        if self._message is None:
            raise StreamProtocolError("stream ended before message_start")
        for index in list(self._partial_json):
            self._finish_tool_input(index)
        return self._transpiler.convert_response(self._message)


def _merge_consecutive_roles(
    messages: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Merge consecutive messages with the same role.

    Results of one assistant turn may arrive as several canonical turns;
    merging puts them all in the single user message that follows the
    tool_use blocks.
    """
    merged: list[dict[str, Any]] = []
    for message in messages:
        if merged and merged[-1]["role"] == message["role"]:
            merged[-1] = {
                "role": message["role"],
                "content": merged[-1]["content"] + message["content"],
            }
        else:
            merged.append(message)
    return merged


def _tool_input(args: dict[str, Any]) -> dict[str, Any]:
    """Wire-ready tool input: JSON-clean copy of *args*, ``{}`` for null."""
    decoded = json.loads(dump_json(args, "function args"))
    return decoded if isinstance(decoded, dict) else {}


def _image_to_anthropic(part: ImagePart) -> dict[str, Any]:
    media_type = "image/jpeg" if part.mime_type == "image/jpg" else part.mime_type
    return {
        "type": "image",
        "source": {"type": "base64", "media_type": media_type, "data": encode_image(part.data)},
    }


def _tool_to_anthropic(tool: ToolDeclaration) -> dict[str, Any]:
    rendered = render_parameters(tool.parameters)
    input_schema: dict[str, Any] = {"type": "object"}
    if "properties" in rendered:
        input_schema["properties"] = rendered["properties"]
    if isinstance(rendered.get("required"), list):
        input_schema["required"] = rendered["required"]

    definition: dict[str, Any] = {"name": tool.name, "input_schema": input_schema}
    if tool.description:
        definition["description"] = tool.description
    return definition


def _usage(raw: Any) -> Usage | None:
    if not isinstance(raw, dict):
        return None
    return build_usage(raw.get("input_tokens"), raw.get("output_tokens"))


def _thinking_to_anthropic(part: ThinkingPart) -> dict[str, Any] | None:
    """Replay form of a thinking part; unsigned thinking cannot be replayed."""
    if part.redacted_data:
        return {"type": "redacted_thinking", "data": part.redacted_data}
    if part.signature:
        return {"type": "thinking", "thinking": part.thinking, "signature": part.signature}
    logger.debug("Dropping unsigned thinking part")
    return None


def _thinking_replayable(messages: list[dict[str, Any]]) -> bool:
    """Whether the last assistant turn can continue under extended thinking.

    With thinking enabled, an assistant turn holding ``tool_use`` blocks must
    start with the thinking block it was generated with.
    """
    for message in reversed(messages):
        if message["role"] != "assistant":
            continue
        content = message["content"]
        if not any(block.get("type") == "tool_use" for block in content):
            return True
        return content[0].get("type") in _THINKING_BLOCK_TYPES
    return True
