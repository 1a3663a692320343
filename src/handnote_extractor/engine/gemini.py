from __future__ import annotations

import logging
import time

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from handnote_extractor.engine.base import Content, ImagePayload, ModelAdapter, ModelResponse
from handnote_extractor.engine.errors import ProviderCallError, ProviderConfigurationError

logger = logging.getLogger(__name__)


class GeminiAdapter(ModelAdapter):
    """Google Gemini via the google-genai async client.

    Text stages carry their input inside the filled prompt, so only the
    prompt is sent for text content. Image content is sent as an inline
    part next to the prompt.
    """

    provider = "gemini"

    def __init__(self, model: str, display_name: str, client: genai.Client | None) -> None:
        super().__init__(model, display_name)
        self.client = client

    @staticmethod
    def build_client(api_key: str | None) -> genai.Client | None:
        if not api_key:
            return None
        return genai.Client(api_key=api_key)

    def is_configured(self) -> bool:
        return self.client is not None

    async def invoke(self, prompt: str, content: Content) -> ModelResponse:
        if self.client is None:
            raise ProviderConfigurationError(self.provider, "GEMINI_API_KEY is not set")

        if isinstance(content, ImagePayload):
            contents: list = [
                prompt,
                types.Part.from_bytes(data=content.data, mime_type=content.mime_type),
            ]
        else:
            contents = [prompt]

        start = time.perf_counter()
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model, contents=contents
            )
        except genai_errors.APIError as exc:
            raise ProviderCallError(self.provider, f"{self.model} call failed: {exc}") from exc
        latency_ms = int((time.perf_counter() - start) * 1000)

        usage = response.usage_metadata
        logger.debug("gemini: %s answered in %dms", self.model, latency_ms)
        return ModelResponse(
            text=response.text or "",
            latency_ms=latency_ms,
            input_tokens=usage.prompt_token_count if usage else None,
            output_tokens=usage.candidates_token_count if usage else None,
        )
