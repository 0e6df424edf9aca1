"""Image generation over ``POST /v1/images/generations``."""

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
)
from ai_adapters.core.options import merge_layers
from ai_adapters.core.retry import DEFAULT_RETRY_POLICY, RetryPolicy
from ai_adapters.models.options import ImageOptions
from ai_adapters.models.responses import ImageGeneration, ImageResponse

if TYPE_CHECKING:
    from ai_adapters.adapters.base_client import ApiResponse
    from ai_adapters.adapters.openai.api import OpenAIApi
    from ai_adapters.core.retry import RetryContext
    from ai_adapters.models.requests import ImageRequest

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_MODEL = "dall-e-3"
HARD_DEFAULT_OPTIONS = ImageOptions(model=DEFAULT_IMAGE_MODEL)


class OpenAIImageClient:
    """OpenAI-compatible image generation client with retries."""

    provider_name = "openai"
    capability = "image"

    def __init__(
        self,
        api: OpenAIApi,
        *,
        default_options: ImageOptions | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._api = api
        self._default_options = default_options
        self._retry_policy = retry_policy or DEFAULT_RETRY_POLICY

    @property
    def default_options(self) -> ImageOptions | None:
        return self._default_options

    def resolve_options(self, request: ImageRequest) -> ImageOptions:
        return merge_layers(HARD_DEFAULT_OPTIONS, self._default_options, request.options)

    async def call(self, request: ImageRequest) -> ImageResponse:
        if request is None:
            msg = "Image request must not be None"
            raise ValueError(msg)

        async def attempt(context: RetryContext) -> ImageResponse:
            options = self.resolve_options(request)
            body = OpenAIRequestBuilder.build_image_body(request.prompt, options)
            response = await self._api.create_image(body)
            return self._to_response(response, options)

        return await self._retry_policy.execute(attempt)

    def _to_response(self, response: ApiResponse, options: ImageOptions) -> ImageResponse:
        data = response.json()
        if data is None:
            log_empty_body(response, self.capability, options.model)
            return ImageResponse(metadata=build_metadata(response, model=options.model))

        data = require_mapping(data, response)
        with mapping_errors(response):
            images = [
                ImageGeneration(
                    url=item.get("url"),
                    b64_json=item.get("b64_json"),
                    revised_prompt=item.get("revised_prompt"),
                )
                for item in require_mapping_list(data, "data", response)
            ]
        return ImageResponse(
            results=images,
            metadata=build_metadata(
                response, model=options.model, extra={"created": data.get("created")}
            ),
        )
