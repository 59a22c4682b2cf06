"""Helpers shared by the vendor transpilers."""

from __future__ import annotations

import base64
import json
import logging
from typing import Any

from llmwire.core.interface.errors import RequestConstructionError
from llmwire.core.interface.models import CanonicalContent, FinishReason, TextPart, Usage

logger = logging.getLogger(__name__)

SUPPORTED_IMAGE_TYPES = frozenset(
    {"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"}
)

_FINISH_REASONS: dict[str, FinishReason] = {
    "stop": FinishReason.STOP,
    "end_turn": FinishReason.STOP,
    "stop_sequence": FinishReason.STOP,
    "tool_calls": FinishReason.STOP,
    "tool_use": FinishReason.STOP,
    "function_call": FinishReason.STOP,
    "length": FinishReason.MAX_TOKENS,
    "max_tokens": FinishReason.MAX_TOKENS,
    "content_filter": FinishReason.SAFETY,
}


def map_finish_reason(reason: Any) -> FinishReason:
    """Map a vendor stop/finish reason; unknown values are ``unspecified``."""
    if not isinstance(reason, str):
        return FinishReason.UNSPECIFIED
    return _FINISH_REASONS.get(reason, FinishReason.UNSPECIFIED)


def join_texts(texts: list[str]) -> str:
    return "\n".join(texts)


def system_text(content: CanonicalContent | None) -> str:
    """Non-empty text parts of a system instruction, newline-joined."""
    if content is None:
        return ""
    return join_texts([p.text for p in content.parts if isinstance(p, TextPart) and p.text])


def is_supported_image(mime_type: str) -> bool:
    if mime_type in SUPPORTED_IMAGE_TYPES:
        return True
    logger.debug("Dropping image part with unsupported MIME type %s", mime_type)
    return False


def encode_image(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def dump_json(value: Any, what: str) -> str:
    """Serialize *value* for the wire or raise a construction error."""
    try:
        return json.dumps(value)
    except (TypeError, ValueError) as exc:
        raise RequestConstructionError(f"failed to marshal {what}: {exc}") from exc


def parse_arguments(raw: Any) -> dict[str, Any]:
    """Decode tool-call arguments leniently.

    Mappings are copied, JSON object strings are decoded, and anything else
    (empty, malformed, or non-object JSON) becomes an empty dict.
    """
    if isinstance(raw, dict):
        return dict(raw)
    if not isinstance(raw, str) or not raw:
        return {}
    try:
        decoded = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        logger.debug("Malformed tool arguments, using empty map: %.80r", raw)
        return {}
    return decoded if isinstance(decoded, dict) else {}


def build_usage(prompt_tokens: Any, completion_tokens: Any, total_tokens: Any = None) -> Usage | None:
    """Build usage counts, or ``None`` when the vendor reports zero usage."""
    prompt = prompt_tokens if isinstance(prompt_tokens, int) else 0
    completion = completion_tokens if isinstance(completion_tokens, int) else 0
    total = total_tokens if isinstance(total_tokens, int) else prompt + completion
    if total == 0:
        return None
    return Usage(prompt_tokens=prompt, completion_tokens=completion, total_tokens=total)
