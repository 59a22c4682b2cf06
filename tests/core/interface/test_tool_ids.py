"""Tests for tool-call ID adapters."""

import re

from llmwire.core.interface.tool_ids import (
    MAX_TOOL_CALL_ID_LENGTH,
    LengthLimitedIDAdapter,
    sanitize_tool_id,
)


class TestLengthLimitedIDAdapter:
    def setup_method(self) -> None:
        self.adapter = LengthLimitedIDAdapter()

    def test_short_id_unchanged(self) -> None:
        assert self.adapter.normalize("call_abc") == "call_abc"
        assert len(self.adapter) == 0

    def test_id_at_limit_unchanged(self) -> None:
        tool_id = "x" * MAX_TOOL_CALL_ID_LENGTH
        assert self.adapter.normalize(tool_id) == tool_id

    def test_long_id_shortened(self) -> None:
        long_id = "call_" + "a" * 60
        short = self.adapter.normalize(long_id)
        assert short.startswith("tc_")
        assert len(short) == MAX_TOOL_CALL_ID_LENGTH
        assert re.fullmatch(r"tc_[0-9a-f]{37}", short)

    def test_normalize_is_deterministic(self) -> None:
        long_id = "y" * 100
        assert self.adapter.normalize(long_id) == LengthLimitedIDAdapter().normalize(long_id)

    def test_denormalize_restores_original(self) -> None:
        long_id = "toolu_" + "z" * 80
        short = self.adapter.normalize(long_id)
        assert self.adapter.denormalize(short) == long_id
        assert len(self.adapter) == 1

    def test_denormalize_unknown_echoes(self) -> None:
        assert self.adapter.denormalize("tc_unknown") == "tc_unknown"

    def test_custom_limit(self) -> None:
        adapter = LengthLimitedIDAdapter(max_length=10)
        short = adapter.normalize("abcdefghijk")
        assert len(short) == 10


class TestSanitizeToolId:
    def test_valid_id_passes(self) -> None:
        assert sanitize_tool_id("toolu_01-AbC") == "toolu_01-AbC"

    def test_invalid_characters_replaced(self) -> None:
        sanitized = sanitize_tool_id("call:1/2")
        assert re.fullmatch(r"toolu_[0-9a-f]{32}", sanitized)

    def test_deterministic(self) -> None:
        assert sanitize_tool_id("a b") == sanitize_tool_id("a b")
        assert sanitize_tool_id("a b") != sanitize_tool_id("a c")

    def test_empty_id_replaced(self) -> None:
        assert sanitize_tool_id("").startswith("toolu_")

    def test_idempotent(self) -> None:
        once = sanitize_tool_id("call #7")
        assert sanitize_tool_id(once) == once

    def test_trailing_newline_rejected(self) -> None:
        assert sanitize_tool_id("abc\n") != "abc\n"
