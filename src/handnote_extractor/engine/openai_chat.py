"""Chat-completions adapters for OpenAI-compatible endpoints (Azure OpenAI, OpenRouter)."""
from __future__ import annotations

import logging
import time
from typing import Any

from openai import AsyncAzureOpenAI, AsyncOpenAI, OpenAIError

from handnote_extractor.engine.base import Content, ImagePayload, ModelAdapter, ModelResponse
from handnote_extractor.engine.errors import ProviderCallError, ProviderConfigurationError

logger = logging.getLogger(__name__)


class OpenAIChatAdapter(ModelAdapter):
    provider = "openai"
    missing_config_message = "API key is not set"

    def __init__(
        self,
        model: str,
        display_name: str,
        client: AsyncOpenAI | None,
        max_completion_tokens: int = 16384,
    ) -> None:
        super().__init__(model, display_name)
        self.client = client
        self.max_completion_tokens = max_completion_tokens

    def is_configured(self) -> bool:
        return self.client is not None

    def build_messages(self, prompt: str, content: Content) -> list[dict[str, Any]]:
        if isinstance(content, ImagePayload):
            return [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {"type": "image_url", "image_url": {"url": content.data_url()}},
                    ],
                }
            ]
        return [
            {"role": "system", "content": prompt},
            {"role": "user", "content": content},
        ]

    async def invoke(self, prompt: str, content: Content) -> ModelResponse:
        if self.client is None:
            raise ProviderConfigurationError(self.provider, self.missing_config_message)

        start = time.perf_counter()
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                max_completion_tokens=self.max_completion_tokens,
                messages=self.build_messages(prompt, content),
            )
        except OpenAIError as exc:
            raise ProviderCallError(self.provider, f"{self.model} call failed: {exc}") from exc
        latency_ms = int((time.perf_counter() - start) * 1000)

        text = response.choices[0].message.content if response.choices else None
        usage = response.usage
        logger.debug("%s: %s answered in %dms", self.provider, self.model, latency_ms)
        return ModelResponse(
            text=text or "",
            latency_ms=latency_ms,
            input_tokens=usage.prompt_tokens if usage else None,
            output_tokens=usage.completion_tokens if usage else None,
        )


class AzureOpenAIAdapter(OpenAIChatAdapter):
    """Azure OpenAI deployment; `model` is the deployment name."""

    provider = "azure_openai"
    missing_config_message = "AZURE_KEY / AZURE_OPENAI_ENDPOINT are not set"

    @staticmethod
    def build_client(
        api_key: str | None, endpoint: str | None, api_version: str
    ) -> AsyncAzureOpenAI | None:
        if not api_key or not endpoint:
            return None
        return AsyncAzureOpenAI(api_key=api_key, azure_endpoint=endpoint, api_version=api_version)


class OpenRouterAdapter(OpenAIChatAdapter):
    provider = "openrouter"
    missing_config_message = "OPENROUTER_API_KEY is not set"

    @staticmethod
    def build_client(api_key: str | None, base_url: str) -> AsyncOpenAI | None:
        if not api_key:
            return None
        return AsyncOpenAI(api_key=api_key, base_url=base_url)
