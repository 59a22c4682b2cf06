"""Tests for tool_use/tool_result history repair."""

import logging

import pytest

from llmwire.core.interface.repair import repair_tool_pairing


def _use(tool_id: str) -> dict:
    return {"type": "tool_use", "id": tool_id, "name": "f", "input": {}}


def _result(tool_id: str) -> dict:
    return {"type": "tool_result", "tool_use_id": tool_id, "content": "{}"}


class TestRepairToolPairing:
    def test_paired_history_unchanged(self) -> None:
        messages = [
            {"role": "user", "content": [{"type": "text", "text": "hi"}]},
            {"role": "assistant", "content": [_use("a")]},
            {"role": "user", "content": [_result("a")]},
        ]
        assert repair_tool_pairing(messages) == messages

    def test_partial_pairing_drops_unmatched(self, caplog: pytest.LogCaptureFixture) -> None:
        messages = [
            {"role": "assistant", "content": [{"type": "text", "text": "x"}, _use("a"), _use("b")]},
            {"role": "user", "content": [_result("a")]},
        ]
        with caplog.at_level(logging.WARNING, logger="llmwire.core.interface.repair"):
            repaired = repair_tool_pairing(messages)

        assert repaired[0]["content"] == [{"type": "text", "text": "x"}, _use("a")]
        assert repaired[1] == messages[1]
        assert "unpaired" in caplog.text

    def test_assistant_without_follower_loses_tool_use(self) -> None:
        messages = [
            {"role": "user", "content": [{"type": "text", "text": "q"}]},
            {"role": "assistant", "content": [{"type": "text", "text": "x"}, _use("a")]},
        ]
        repaired = repair_tool_pairing(messages)
        assert repaired[1]["content"] == [{"type": "text", "text": "x"}]

    def test_emptied_assistant_message_dropped(self) -> None:
        messages = [
            {"role": "user", "content": [{"type": "text", "text": "q"}]},
            {"role": "assistant", "content": [_use("a")]},
            {"role": "user", "content": [{"type": "text", "text": "never mind"}]},
        ]
        repaired = repair_tool_pairing(messages)
        assert [m["role"] for m in repaired] == ["user", "user"]

    def test_follower_must_be_user(self) -> None:
        messages = [
            {"role": "assistant", "content": [_use("a")]},
            {"role": "assistant", "content": [_result("a")]},
        ]
        repaired = repair_tool_pairing(messages)
        assert repaired == [messages[1]]

    def test_input_not_mutated(self) -> None:
        assistant = {"role": "assistant", "content": [{"type": "text", "text": "x"}, _use("a")]}
        repair_tool_pairing([assistant])
        assert len(assistant["content"]) == 2

    def test_string_content_passes(self) -> None:
        messages = [{"role": "assistant", "content": "plain"}]
        assert repair_tool_pairing(messages) == messages

    def test_thinking_only_leftover_dropped(self) -> None:
        thinking = {"type": "thinking", "thinking": "plan", "signature": "sig"}
        messages = [
            {"role": "user", "content": [{"type": "text", "text": "q"}]},
            {"role": "assistant", "content": [thinking, _use("a")]},
        ]
        assert repair_tool_pairing(messages) == [messages[0]]
