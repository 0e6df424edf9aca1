"""Embeddings over ``POST /v1/embeddings``."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ai_adapters.adapters.openai.request_builder import OpenAIRequestBuilder
from ai_adapters.adapters.response_utils import (
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
from ai_adapters.models.options import EmbeddingOptions
from ai_adapters.models.responses import Embedding, EmbeddingResponse

if TYPE_CHECKING:
    from ai_adapters.adapters.base_client import ApiResponse
    from ai_adapters.adapters.openai.api import OpenAIApi
    from ai_adapters.core.retry import RetryContext
    from ai_adapters.models.requests import EmbeddingRequest

logger = logging.getLogger(__name__)

DEFAULT_EMBEDDING_MODEL = "text-embedding-ada-002"
HARD_DEFAULT_OPTIONS = EmbeddingOptions(model=DEFAULT_EMBEDDING_MODEL)


class OpenAIEmbeddingClient:
    """OpenAI-compatible embedding client with retries."""

    provider_name = "openai"
    capability = "embedding"

    def __init__(
        self,
        api: OpenAIApi,
        *,
        default_options: EmbeddingOptions | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._api = api
        self._default_options = default_options
        self._retry_policy = retry_policy or DEFAULT_RETRY_POLICY

    @property
    def default_options(self) -> EmbeddingOptions | None:
        return self._default_options

    def resolve_options(self, request: EmbeddingRequest) -> EmbeddingOptions:
        return merge_layers(HARD_DEFAULT_OPTIONS, self._default_options, request.options)

    async def call(self, request: EmbeddingRequest) -> EmbeddingResponse:
        """Embed every input of ``request``; results are ordered by index."""
        if request is None:
            msg = "Embedding request must not be None"
            raise ValueError(msg)

        async def attempt(context: RetryContext) -> EmbeddingResponse:
            options = self.resolve_options(request)
            body = OpenAIRequestBuilder.build_embedding_body(request.inputs, options)
            response = await self._api.embeddings(body)
            return self._to_response(response, options)

        return await self._retry_policy.execute(attempt)

    def _to_response(
        self, response: ApiResponse, options: EmbeddingOptions
    ) -> EmbeddingResponse:
        data = response.json()
        if data is None:
            log_empty_body(response, self.capability, options.model)
            return EmbeddingResponse(metadata=build_metadata(response, model=options.model))

        data = require_mapping(data, response)
        embeddings = []
        with mapping_errors(response):
            for position, item in enumerate(require_mapping_list(data, "data", response)):
                vector = item.get("embedding")
                if not isinstance(vector, list):
                    # base64 encoding_format returns a string the portable model cannot hold
                    msg = "Embedding vector must be a list of floats"
                    raise ResponseFormatError(msg, provider=self.provider_name)
                embeddings.append(Embedding(index=item.get("index", position), vector=vector))
            embeddings.sort(key=lambda embedding: embedding.index)

            usage = require_mapping(data.get("usage") or {}, response)
            return EmbeddingResponse(
                results=embeddings,
                metadata=build_metadata(
                    response,
                    model=data.get("model") or options.model,
                    usage=usage_from_counts(
                        usage.get("prompt_tokens"), None, usage.get("total_tokens")
                    ),
                ),
            )
