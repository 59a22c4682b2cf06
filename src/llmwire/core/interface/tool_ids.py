"""Tool-call identifier adapters.

Vendors constrain the wire-level ``tool_call_id`` differently:

- Chat Completions caps IDs at 40 characters. Longer IDs are replaced by a
  tagged SHA-256 prefix and remembered so the original can be restored.
- Messages requires IDs matching ``[a-zA-Z0-9_-]+``. Offending IDs are
  replaced by a tagged SHA-256 prefix. The replacement is a pure function of
  the original, so a tool_use and the tool_result answering it always agree
  without any table.
"""

from __future__ import annotations

import hashlib
import logging
import re
import threading

logger = logging.getLogger(__name__)

MAX_TOOL_CALL_ID_LENGTH = 40
SHORT_ID_PREFIX = "tc_"
SANITIZED_ID_PREFIX = "toolu_"

_VALID_ID_RE = re.compile(r"[a-zA-Z0-9_-]+")


class LengthLimitedIDAdapter:
    """Shortens over-long IDs and keeps a ``short -> original`` table.

    The table lives as long as the adapter and is never evicted; its size is
    bounded by the number of distinct over-long IDs sent through this
    instance. Inserts and lookups are guarded by a lock so one adapter can be
    shared by concurrent requests.
    """

    def __init__(self, max_length: int = MAX_TOOL_CALL_ID_LENGTH) -> None:
        self.max_length = max_length
        self._originals: dict[str, str] = {}
        self._lock = threading.Lock()

    def normalize(self, tool_call_id: str) -> str:
        """Return *tool_call_id*, shortened if it exceeds the limit."""
        if len(tool_call_id) <= self.max_length:
            return tool_call_id

        digest = hashlib.sha256(tool_call_id.encode("utf-8")).hexdigest()
        short_id = SHORT_ID_PREFIX + digest[: self.max_length - len(SHORT_ID_PREFIX)]

        with self._lock:
            self._originals[short_id] = tool_call_id
        logger.debug("Shortened tool call id %r to %s", tool_call_id, short_id)
        return short_id

    def denormalize(self, tool_call_id: str) -> str:
        """Return the original ID for a shortened one, else echo the input."""
        with self._lock:
            return self._originals.get(tool_call_id, tool_call_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._originals)


def sanitize_tool_id(tool_call_id: str) -> str:
    """Return an ID accepted by the Messages API for *tool_call_id*.

    Valid IDs pass through unchanged; anything else (including the empty
    string) maps to ``toolu_`` plus 32 hex characters of its SHA-256.
    """
    if _VALID_ID_RE.fullmatch(tool_call_id):
        return tool_call_id
    digest = hashlib.sha256(tool_call_id.encode("utf-8")).hexdigest()
    return SANITIZED_ID_PREFIX + digest[:32]
