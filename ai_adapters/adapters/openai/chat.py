"""Chat completions over ``POST /v1/chat/completions``."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ai_adapters.adapters.openai.request_builder import OpenAIRequestBuilder, calculate_cost
from ai_adapters.adapters.response_utils import (
    as_int,
    build_metadata,
    log_empty_body,
    mapping_errors,
    require_mapping,
    require_mapping_list,
    usage_from_counts,
)
from ai_adapters.core.options import merge_layers
from ai_adapters.core.retry import DEFAULT_RETRY_POLICY, RetryPolicy
from ai_adapters.models.options import ChatOptions
from ai_adapters.models.responses import ChatResponse, Generation, ResponseMetadata

if TYPE_CHECKING:
    from ai_adapters.adapters.base_client import ApiResponse
    from ai_adapters.adapters.openai.api import OpenAIApi
    from ai_adapters.core.retry import RetryContext
    from ai_adapters.models.requests import ChatRequest

logger = logging.getLogger(__name__)

DEFAULT_CHAT_MODEL = "gpt-4o-mini"
HARD_DEFAULT_OPTIONS = ChatOptions(model=DEFAULT_CHAT_MODEL)


class OpenAIChatClient:
    """OpenAI-compatible chat client with retries."""

    provider_name = "openai"
    capability = "chat"

    def __init__(
        self,
        api: OpenAIApi,
        *,
        default_options: ChatOptions | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._api = api
        self._default_options = default_options
        self._retry_policy = retry_policy or DEFAULT_RETRY_POLICY

    @property
    def default_options(self) -> ChatOptions | None:
        return self._default_options

    def resolve_options(self, request: ChatRequest) -> ChatOptions:
        """Hard default, then client default, then per-call options."""
        return merge_layers(HARD_DEFAULT_OPTIONS, self._default_options, request.options)

    async def call(self, request: ChatRequest) -> ChatResponse:
        """Complete ``request``, retrying transient failures.

        Raises:
            ValueError: If ``request`` is None.
            TransientAIError: When retries are exhausted.
            NonTransientAIError: On the first non-retryable failure.
        """
        if request is None:
            msg = "Chat request must not be None"
            raise ValueError(msg)

        async def attempt(context: RetryContext) -> ChatResponse:
            options = self.resolve_options(request)
            body = OpenAIRequestBuilder.build_chat_body(request.messages, options)
            response = await self._api.chat_completions(body)
            return self._to_response(response, options)

        return await self._retry_policy.execute(attempt)

    def _to_response(self, response: ApiResponse, options: ChatOptions) -> ChatResponse:
        data = response.json()
        if data is None:
            log_empty_body(response, self.capability, options.model)
            return ChatResponse(
                metadata=build_metadata(response, model=options.model),
            )

        data = require_mapping(data, response)
        generations = []
        with mapping_errors(response):
            for choice in require_mapping_list(data, "choices", response):
                message = require_mapping(choice.get("message") or {}, response)
                generations.append(
                    Generation(
                        text=message.get("content") or "",
                        finish_reason=choice.get("finish_reason"),
                    )
                )

            model = data.get("model") or options.model
            return ChatResponse(
                results=generations,
                metadata=self._metadata(response, data, model),
            )

    def _metadata(self, response: ApiResponse, data: dict, model: str | None) -> ResponseMetadata:
        usage_data = require_mapping(data.get("usage") or {}, response)
        prompt_tokens = as_int(usage_data.get("prompt_tokens"))
        completion_tokens = as_int(usage_data.get("completion_tokens"))
        cost = None
        if isinstance(model, str) and prompt_tokens is not None and completion_tokens is not None:
            cost = calculate_cost(model, prompt_tokens, completion_tokens)

        return build_metadata(
            response,
            model=model,
            usage=usage_from_counts(
                prompt_tokens,
                completion_tokens,
                usage_data.get("total_tokens"),
                cost_usd=cost,
            ),
            extra={
                "id": data.get("id"),
                "created": data.get("created"),
                "system_fingerprint": data.get("system_fingerprint"),
            },
        )
