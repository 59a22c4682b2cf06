"""History repair for the Messages API tool-pairing rule.

Every assistant message holding ``tool_use`` blocks must be followed
immediately by a user message holding a ``tool_result`` for each of them.
Histories rebuilt from canonical turns can break that rule (a result was
never recorded, or was trimmed away). :func:`repair_tool_pairing` makes the
list valid by dropping unpaired ``tool_use`` blocks. The repair is lossy on
purpose and is not an error.
"""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)

_THINKING_TYPES = frozenset({"thinking", "redacted_thinking"})


def repair_tool_pairing(messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Drop tool_use blocks that lack a tool_result in the next message.

    Single forward pass. An assistant message left without content, or
    with only thinking blocks, is dropped entirely. Messages without
    tool_use blocks pass through as-is.
    """
    result: list[dict[str, Any]] = []

    for index, message in enumerate(messages):
        use_ids = _block_ids(message, "tool_use", "id") if message["role"] == "assistant" else []
        if not use_ids:
            result.append(message)
            continue

        following = messages[index + 1] if index + 1 < len(messages) else None
        allowed: set[str] = set()
        if following is not None and following["role"] == "user":
            allowed = set(_block_ids(following, "tool_result", "tool_use_id"))

        dropped = [tool_id for tool_id in use_ids if tool_id not in allowed]
        if not dropped:
            result.append(message)
            continue

        logger.warning("Dropping %d unpaired tool_use block(s): %s", len(dropped), dropped)
        kept = [
            block
            for block in message["content"]
            if not (_block_type(block) == "tool_use" and block.get("id") not in allowed)
        ]
        if any(_block_type(block) not in _THINKING_TYPES for block in kept):
            result.append({**message, "content": kept})

    return result


def _block_type(block: Any) -> str | None:
    return block.get("type") if isinstance(block, dict) else None


def _block_ids(message: dict[str, Any], block_type: str, key: str) -> list[str]:
    content = message.get("content")
    if not isinstance(content, list):
        return []
    return [block[key] for block in content if _block_type(block) == block_type]
