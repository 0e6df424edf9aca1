"""Pytest configuration and shared fixtures.

HTTP is never hit for real: clients get an ``httpx.AsyncClient`` backed by
``httpx.MockTransport`` that replays scripted responses.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from ai_adapters.adapters.anthropic.api import AnthropicApi
from ai_adapters.adapters.openai.api import OpenAIApi
from ai_adapters.core.retry import RetryPolicy
from tests.http_helpers import ResponseSpec, ScriptedTransport

TEST_OPENAI_KEY = "sk-test-key-1234567890"
TEST_ANTHROPIC_KEY = "sk-ant-test-key-1234567890"
TEST_BASE_URL = "https://api.test"


@pytest.fixture
def fast_retry_policy() -> RetryPolicy:
    """Default policy shape without the real backoff sleeps."""
    return RetryPolicy(max_attempts=10, initial_delay=0.0, max_delay=0.0)


@pytest.fixture
def make_transport() -> Callable[..., ScriptedTransport]:
    def _factory(*responses: ResponseSpec) -> ScriptedTransport:
        return ScriptedTransport(responses)

    return _factory


@pytest.fixture
def make_openai_api() -> Callable[..., OpenAIApi]:
    def _factory(transport: ScriptedTransport, **kwargs: Any) -> OpenAIApi:
        return OpenAIApi(
            TEST_OPENAI_KEY,
            base_url=TEST_BASE_URL,
            http_client=transport.client(),
            **kwargs,
        )

    return _factory


@pytest.fixture
def make_anthropic_api() -> Callable[..., AnthropicApi]:
    def _factory(transport: ScriptedTransport, **kwargs: Any) -> AnthropicApi:
        return AnthropicApi(
            TEST_ANTHROPIC_KEY,
            base_url=TEST_BASE_URL,
            http_client=transport.client(),
            **kwargs,
        )

    return _factory
