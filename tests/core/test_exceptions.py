"""Tests for the error taxonomy and HTTP status classification."""

from __future__ import annotations

import pytest

from ai_adapters.core.exceptions import (
    ClientAPIError,
    ModelClientError,
    NetworkError,
    NonTransientAIError,
    RateLimitError,
    ResponseFormatError,
    TransientAIError,
    error_for_status,
    is_transient_status,
)


class TestIsTransientStatus:
    @pytest.mark.parametrize("status", [408, 429, 500, 502, 503, 504, 529])
    def test_transient(self, status: int) -> None:
        assert is_transient_status(status)

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 409, 413, 422])
    def test_not_transient(self, status: int) -> None:
        assert not is_transient_status(status)


class TestErrorForStatus:
    def test_rate_limit(self) -> None:
        error = error_for_status(429, "slow down", provider="openai", retry_after=3.0)
        assert isinstance(error, RateLimitError)
        assert isinstance(error, TransientAIError)
        assert error.retry_after == 3.0
        assert error.status_code == 429
        assert error.context["error_type"] == "rate_limit"
        assert str(error) == "429 - slow down"

    def test_server_error(self) -> None:
        error = error_for_status(503, "unavailable", provider="anthropic")
        assert type(error) is TransientAIError
        assert error.provider == "anthropic"
        assert error.context["error_type"] == "transient"

    def test_client_error(self) -> None:
        error = error_for_status(401, "bad key")
        assert isinstance(error, ClientAPIError)
        assert isinstance(error, NonTransientAIError)
        assert not isinstance(error, TransientAIError)
        assert error.context == {"status_code": 401, "error_type": "client"}


class TestHierarchy:
    def test_everything_is_a_model_client_error(self) -> None:
        for cls in (
            TransientAIError,
            RateLimitError,
            NetworkError,
            NonTransientAIError,
            ClientAPIError,
            ResponseFormatError,
        ):
            assert issubclass(cls, ModelClientError)

    def test_network_error_has_no_status(self) -> None:
        error = NetworkError("reset", provider="openai")
        assert error.status_code is None
        assert error.context["error_type"] == "network"

    def test_response_format_error_is_not_retryable(self) -> None:
        assert not issubclass(ResponseFormatError, TransientAIError)
