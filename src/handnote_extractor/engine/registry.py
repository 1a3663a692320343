from __future__ import annotations

import logging

from handnote_extractor.engine.base import ModelAdapter
from handnote_extractor.engine.gemini import GeminiAdapter
from handnote_extractor.engine.mock import MockAdapter
from handnote_extractor.engine.openai_chat import AzureOpenAIAdapter, OpenRouterAdapter
from handnote_extractor.schemas.config import (
    AZURE_OPENAI,
    GEMINI,
    MEDGEMMA,
    OPENROUTER,
    ModelSpec,
    PipelineConfig,
)

logger = logging.getLogger(__name__)

# Dry-run confidences: A clearly ahead so every stage exercises a decisive pick
DRY_RUN_CONFIDENCE_A = 0.92
DRY_RUN_CONFIDENCE_B = 0.7


class ModelRegistry:
    """Owns the provider clients for one process and hands out adapters.

    Build it once from a PipelineConfig and pass it to every pipeline run.
    Providers without credentials still get adapters; those raise
    ProviderConfigurationError when invoked.
    """

    def __init__(self, config: PipelineConfig) -> None:
        self.config = config
        self._adapters: dict[tuple[ModelSpec, bool], ModelAdapter] = {}
        self._clients: dict[str, object] = {}

        if not config.dry_run:
            self._clients[GEMINI] = GeminiAdapter.build_client(config.gemini_api_key)
            self._clients[AZURE_OPENAI] = AzureOpenAIAdapter.build_client(
                config.azure_api_key, config.azure_endpoint, config.azure_api_version
            )
            self._clients[OPENROUTER] = OpenRouterAdapter.build_client(
                config.openrouter_api_key, config.openrouter_base_url
            )
            missing = [name for name, client in self._clients.items() if client is None]
            if missing:
                logger.warning("registry: providers not configured: %s", ", ".join(missing))

    def adapter(self, spec: ModelSpec, primary: bool = True) -> ModelAdapter:
        key = (spec, primary)
        if key not in self._adapters:
            self._adapters[key] = self._build(spec, primary)
        return self._adapters[key]

    def stage_pair(self, stage: str) -> tuple[ModelAdapter, ModelAdapter]:
        spec_a, spec_b = self.config.models_for(stage)
        return self.adapter(spec_a, primary=True), self.adapter(spec_b, primary=False)

    def configured_providers(self) -> dict[str, bool]:
        if self.config.dry_run:
            return {"mock": True}
        return {name: client is not None for name, client in self._clients.items()}

    def _build(self, spec: ModelSpec, primary: bool) -> ModelAdapter:
        if self.config.dry_run:
            confidence = DRY_RUN_CONFIDENCE_A if primary else DRY_RUN_CONFIDENCE_B
            return MockAdapter(spec.model, spec.display_name, confidence=confidence)

        if spec.provider == GEMINI:
            return GeminiAdapter(spec.model, spec.display_name, self._clients[GEMINI])
        if spec.provider == AZURE_OPENAI:
            return AzureOpenAIAdapter(
                spec.model,
                spec.display_name,
                self._clients[AZURE_OPENAI],
                max_completion_tokens=self.config.max_completion_tokens,
            )
        if spec.provider == OPENROUTER:
            return OpenRouterAdapter(
                spec.model,
                spec.display_name,
                self._clients[OPENROUTER],
                max_completion_tokens=self.config.max_completion_tokens,
            )
        if spec.provider == MEDGEMMA:
            # torch/transformers are an optional extra; import only when asked for
            from handnote_extractor.engine.medgemma import MedGemmaAdapter

            return MedGemmaAdapter(spec.model, spec.display_name, self.config)
        raise ValueError(f"Unknown provider: {spec.provider}")
