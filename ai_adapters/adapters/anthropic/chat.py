"""Chat over the Anthropic ``POST /v1/messages`` endpoint."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ai_adapters.adapters.anthropic.request_builder import calculate_cost
from ai_adapters.adapters.response_utils import (
    as_int,
    build_metadata,
    log_empty_body,
    mapping_errors,
    require_mapping,
    require_mapping_list,
    usage_from_counts,
)
from ai_adapters.core.exceptions import ResponseFormatError
from ai_adapters.core.options import merge_layers
from ai_adapters.core.retry import DEFAULT_RETRY_POLICY, RetryPolicy
from ai_adapters.models.options import ChatOptions
from ai_adapters.models.responses import ChatResponse, Generation, Usage

if TYPE_CHECKING:
    from ai_adapters.adapters.anthropic.api import AnthropicApi
    from ai_adapters.adapters.base_client import ApiResponse
    from ai_adapters.core.retry import RetryContext
    from ai_adapters.models.requests import ChatRequest

logger = logging.getLogger(__name__)

DEFAULT_ANTHROPIC_MODEL = "claude-3-5-haiku-20241022"
HARD_DEFAULT_OPTIONS = ChatOptions(model=DEFAULT_ANTHROPIC_MODEL)


class AnthropicChatClient:
    """Anthropic-compatible chat client with retries."""

    provider_name = "anthropic"
    capability = "chat"

    def __init__(
        self,
        api: AnthropicApi,
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
        return merge_layers(HARD_DEFAULT_OPTIONS, self._default_options, request.options)

    async def call(self, request: ChatRequest) -> ChatResponse:
        if request is None:
            msg = "Chat request must not be None"
            raise ValueError(msg)
        if all(message.role == "system" for message in request.messages):
            msg = "Anthropic chat needs at least one user or assistant message"
            raise ValueError(msg)

        async def attempt(context: RetryContext) -> ChatResponse:
            options = self.resolve_options(request)
            body = self._api.request_builder.build_request_body(request.messages, options)
            response = await self._api.messages(body)
            return self._to_response(response, options)

        return await self._retry_policy.execute(attempt)

    def _to_response(self, response: ApiResponse, options: ChatOptions) -> ChatResponse:
        data = response.json()
        if data is None:
            log_empty_body(response, self.capability, options.model)
            return ChatResponse(metadata=build_metadata(response, model=options.model))

        data = require_mapping(data, response)

        # Content is a list of blocks; only text blocks carry output
        parts = []
        for block in require_mapping_list(data, "content", response):
            if block.get("type") != "text":
                continue
            text = block.get("text") or ""
            if not isinstance(text, str):
                msg = "Text block must carry a string"
                raise ResponseFormatError(
                    msg, provider=self.provider_name, status_code=response.status_code
                )
            parts.append(text)

        model = data.get("model") or options.model
        usage = require_mapping(data.get("usage") or {}, response)
        with mapping_errors(response):
            return ChatResponse(
                results=[Generation(text="".join(parts), finish_reason=data.get("stop_reason"))],
                metadata=build_metadata(
                    response,
                    model=model,
                    usage=self._usage(usage, model),
                    extra={"id": data.get("id"), "stop_sequence": data.get("stop_sequence")},
                ),
            )

    @staticmethod
    def _usage(usage: dict[str, Any], model: str | None) -> Usage | None:
        input_tokens = as_int(usage.get("input_tokens"))
        output_tokens = as_int(usage.get("output_tokens"))
        cost = None
        if isinstance(model, str) and input_tokens is not None and output_tokens is not None:
            cost = calculate_cost(model, input_tokens, output_tokens)
        return usage_from_counts(input_tokens, output_tokens, cost_usd=cost)
