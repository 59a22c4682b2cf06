"""Tests for ``llmwire inspect`` CLI command."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from click.testing import CliRunner

from llmwire.cli import main

if TYPE_CHECKING:
    from pathlib import Path


def _invoke(*args: str) -> tuple[int, str]:
    result = CliRunner().invoke(main, ["inspect", *args])
    return result.exit_code, result.output


class TestInspectCommand:
    def test_openai_request(self) -> None:
        code, output = _invoke("Hello", "-m", "openai/gpt-4o", "-s", "Be brief.")

        assert code == 0, output
        params = json.loads(output)
        assert params["model"] == "gpt-4o"
        assert params["messages"] == [
            {"role": "system", "content": "Be brief."},
            {"role": "user", "content": "Hello"},
        ]

    def test_anthropic_request(self) -> None:
        code, output = _invoke("Hello", "-m", "anthropic/claude-sonnet-4-5", "--max-tokens", "100")

        assert code == 0, output
        params = json.loads(output)
        assert params["max_tokens"] == 100
        assert params["messages"][0]["role"] == "user"

    def test_stop_sequences(self) -> None:
        _, single = _invoke("Hi", "--stop", "END")
        _, multiple = _invoke("Hi", "--stop", "A", "--stop", "B")

        assert json.loads(single)["stop"] == "END"
        assert json.loads(multiple)["stop"] == ["A", "B"]

    def test_stream_params(self) -> None:
        code, output = _invoke("Hi", "--stream")

        assert code == 0, output
        params = json.loads(output)
        assert params["stream"] is True
        assert params["stream_options"] == {"include_usage": True}

    def test_image(self, tmp_path: Path) -> None:
        image = tmp_path / "photo.jpg"
        image.write_bytes(b"\xff\xd8\xff")

        code, output = _invoke("What is this?", "-m", "anthropic/claude-sonnet-4-5", "--image", str(image))

        assert code == 0, output
        block = json.loads(output)["messages"][0]["content"][1]
        assert block["type"] == "image"
        assert block["source"]["media_type"] == "image/jpeg"

    def test_unsupported_provider(self) -> None:
        code, output = _invoke("Hi", "-m", "gemini/flash")
        assert code == 1
        assert "Error:" in output
