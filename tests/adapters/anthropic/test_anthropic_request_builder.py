"""Tests for AnthropicRequestBuilder and AnthropicApi."""

from __future__ import annotations

import pytest

from ai_adapters.adapters.anthropic.api import AnthropicApi
from ai_adapters.adapters.anthropic.request_builder import (
    AnthropicRequestBuilder,
    calculate_cost,
)
from ai_adapters.models.options import ChatOptions
from ai_adapters.models.requests import Message


class TestAnthropicRequestBuilder:
    def test_headers(self) -> None:
        builder = AnthropicRequestBuilder("sk-ant-abc", anthropic_version="2024-01-01")
        headers = builder.build_headers()

        assert headers["x-api-key"] == "sk-ant-abc"
        assert headers["anthropic-version"] == "2024-01-01"
        assert builder.get_redacted_headers(headers)["x-api-key"] == "[REDACTED]"

    def test_configured_max_tokens_default(self) -> None:
        builder = AnthropicRequestBuilder("k", default_max_tokens=4096)
        body = builder.build_request_body(
            [Message(role="user", content="hi")], ChatOptions(model="claude-3-haiku-20240307")
        )

        assert body["max_tokens"] == 4096
        assert "system" not in body
        assert "temperature" not in body

    def test_assistant_turns_kept_in_order(self) -> None:
        builder = AnthropicRequestBuilder("k")
        messages = [
            Message(role="user", content="a"),
            Message(role="assistant", content="b"),
            Message(role="system", content="s"),
            Message(role="user", content="c"),
        ]
        body = builder.build_request_body(messages, ChatOptions(model="m"))

        assert [m["content"] for m in body["messages"]] == ["a", "b", "c"]
        assert body["system"] == "s"


class TestAnthropicCost:
    def test_dated_model(self) -> None:
        assert calculate_cost("claude-3-haiku-20240307", 1_000_000, 0) == pytest.approx(0.25)

    def test_unknown_model(self) -> None:
        assert calculate_cost("not-a-claude", 1, 1) is None


def test_api_requires_key() -> None:
    with pytest.raises(ValueError):
        AnthropicApi("")
