"""Model client factory for creating provider- and capability-specific clients.

Usage:
    api = ModelClientFactory.create_api("openai", config)
    chat = ModelClientFactory.create("chat", config, api=api)
    embed = ModelClientFactory.create("embedding", config, api=api)
    response = await chat.call(ChatRequest.from_text("Hello"))
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ai_adapters.models.options import (
    ChatOptions,
    EmbeddingOptions,
    ImageOptions,
    SpeechOptions,
    TranscriptionOptions,
)

if TYPE_CHECKING:
    import httpx

    from ai_adapters.adapters.anthropic.api import AnthropicApi
    from ai_adapters.adapters.base_client import BaseApiClient
    from ai_adapters.adapters.openai.api import OpenAIApi
    from ai_adapters.adapters.protocol import ModelClientProtocol
    from ai_adapters.config import AppConfig
    from ai_adapters.core.retry import RetryPolicy

logger = logging.getLogger(__name__)

VALID_PROVIDERS = frozenset({"openai", "anthropic"})

SUPPORTED_CAPABILITIES: dict[str, frozenset[str]] = {
    "openai": frozenset({"chat", "embedding", "image", "speech", "transcription"}),
    "anthropic": frozenset({"chat"}),
}


class ModelClientFactory:
    """Factory for creating model clients from configuration."""

    @staticmethod
    def create(
        capability: str,
        config: AppConfig,
        *,
        provider: str | None = None,
        api: BaseApiClient | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> ModelClientProtocol:
        """Create the client for ``capability``.

        Args:
            capability: One of chat, embedding, image, speech, transcription.
            config: Application configuration.
            provider: Provider name; defaults to ``config.runtime.llm_provider``.
            api: REST client to share between capability clients. Created
                from ``config`` when omitted.
            retry_policy: Overrides the policy built from ``config.retry``.

        Raises:
            ValueError: If the provider or the provider/capability pair is not supported.
        """
        provider = ModelClientFactory._normalize_provider(
            provider or ModelClientFactory.get_provider_from_config(config)
        )
        capability = capability.lower().strip()

        if capability not in SUPPORTED_CAPABILITIES[provider]:
            msg = (
                f"Provider {provider!r} does not support capability {capability!r}. "
                f"Supported: {sorted(SUPPORTED_CAPABILITIES[provider])}"
            )
            raise ValueError(msg)

        if api is None:
            api = ModelClientFactory.create_api(provider, config)
        elif api.provider_name != provider:
            msg = f"REST client for {api.provider_name!r} cannot serve provider {provider!r}"
            raise ValueError(msg)

        policy = retry_policy or config.retry.to_policy()

        logger.info(
            "model_client_factory_creating",
            extra={"provider": provider, "capability": capability},
        )

        if provider == "anthropic":
            return ModelClientFactory._create_anthropic_chat(api, config, policy)  # type: ignore[arg-type]
        return ModelClientFactory._create_openai(capability, api, config, policy)  # type: ignore[arg-type]

    @staticmethod
    def create_all(
        config: AppConfig,
        *,
        provider: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> dict[str, ModelClientProtocol]:
        """Create every client a provider supports, all sharing one REST client."""
        provider = ModelClientFactory._normalize_provider(
            provider or ModelClientFactory.get_provider_from_config(config)
        )
        api = ModelClientFactory.create_api(provider, config, http_client=http_client)
        return {
            capability: ModelClientFactory.create(
                capability, config, provider=provider, api=api, retry_policy=retry_policy
            )
            for capability in sorted(SUPPORTED_CAPABILITIES[provider])
        }

    @staticmethod
    def create_api(
        provider: str,
        config: AppConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> BaseApiClient:
        """Create the REST client for ``provider``."""
        provider = ModelClientFactory._normalize_provider(provider)
        runtime = config.runtime

        if provider == "openai":
            from ai_adapters.adapters.openai.api import OpenAIApi

            return OpenAIApi(
                config.openai.api_key,
                base_url=config.openai.base_url,
                organization=config.openai.organization,
                timeout_sec=runtime.request_timeout_sec,
                max_response_size_mb=runtime.max_response_size_mb,
                debug_payloads=runtime.debug_payloads,
                http_client=http_client,
            )

        from ai_adapters.adapters.anthropic.api import AnthropicApi

        return AnthropicApi(
            config.anthropic.api_key,
            base_url=config.anthropic.base_url,
            anthropic_version=config.anthropic.version,
            default_max_tokens=config.anthropic.max_tokens,
            timeout_sec=runtime.request_timeout_sec,
            max_response_size_mb=runtime.max_response_size_mb,
            debug_payloads=runtime.debug_payloads,
            http_client=http_client,
        )

    @staticmethod
    def get_provider_from_config(config: AppConfig) -> str:
        return config.runtime.llm_provider

    @staticmethod
    def _normalize_provider(provider: str) -> str:
        provider = provider.lower().strip()
        if provider not in VALID_PROVIDERS:
            msg = f"Invalid LLM provider: {provider}. Must be one of {sorted(VALID_PROVIDERS)}"
            raise ValueError(msg)
        return provider

    @staticmethod
    def _create_openai(
        capability: str,
        api: OpenAIApi,
        config: AppConfig,
        policy: RetryPolicy,
    ) -> ModelClientProtocol:
        openai_config = config.openai

        if capability == "chat":
            from ai_adapters.adapters.openai.chat import OpenAIChatClient

            return OpenAIChatClient(
                api,
                default_options=ChatOptions(
                    model=openai_config.chat_model, temperature=openai_config.temperature
                ),
                retry_policy=policy,
            )
        if capability == "embedding":
            from ai_adapters.adapters.openai.embedding import OpenAIEmbeddingClient

            return OpenAIEmbeddingClient(
                api,
                default_options=EmbeddingOptions(model=openai_config.embedding_model),
                retry_policy=policy,
            )
        if capability == "image":
            from ai_adapters.adapters.openai.image import OpenAIImageClient

            return OpenAIImageClient(
                api,
                default_options=ImageOptions(model=openai_config.image_model),
                retry_policy=policy,
            )
        if capability == "speech":
            from ai_adapters.adapters.openai.speech import OpenAISpeechClient

            return OpenAISpeechClient(
                api,
                default_options=SpeechOptions(
                    model=openai_config.speech_model, voice=openai_config.speech_voice
                ),
                retry_policy=policy,
            )
        from ai_adapters.adapters.openai.transcription import OpenAITranscriptionClient

        return OpenAITranscriptionClient(
            api,
            default_options=TranscriptionOptions(model=openai_config.transcription_model),
            retry_policy=policy,
        )

    @staticmethod
    def _create_anthropic_chat(
        api: AnthropicApi,
        config: AppConfig,
        policy: RetryPolicy,
    ) -> ModelClientProtocol:
        from ai_adapters.adapters.anthropic.chat import AnthropicChatClient

        return AnthropicChatClient(
            api,
            default_options=ChatOptions(
                model=config.anthropic.model, max_tokens=config.anthropic.max_tokens
            ),
            retry_policy=policy,
        )
