from __future__ import annotations

import os
from dataclasses import dataclass, field

GEMINI = "gemini"
AZURE_OPENAI = "azure_openai"
OPENROUTER = "openrouter"
MEDGEMMA = "medgemma"

PROVIDERS = (GEMINI, AZURE_OPENAI, OPENROUTER, MEDGEMMA)


@dataclass(frozen=True)
class ModelSpec:
    provider: str  # one of PROVIDERS
    model: str  # provider model id or Azure deployment name
    display_name: str


@dataclass
class PipelineConfig:
    # Model pairs: A is the primary model and wins confidence ties
    ocr_model_a: ModelSpec = field(
        default_factory=lambda: ModelSpec(GEMINI, "gemini-3-flash-preview", "Gemini Flash")
    )
    ocr_model_b: ModelSpec = field(
        default_factory=lambda: ModelSpec(AZURE_OPENAI, "gpt-4o", "Azure GPT-4o")
    )
    text_model_a: ModelSpec = field(
        default_factory=lambda: ModelSpec(GEMINI, "gemini-3-pro-preview", "Gemini Pro")
    )
    text_model_b: ModelSpec = field(
        default_factory=lambda: ModelSpec(AZURE_OPENAI, "gpt-5-mini", "Azure GPT-5-mini")
    )

    gemini_api_key: str | None = None
    azure_api_key: str | None = None
    azure_endpoint: str | None = None
    azure_api_version: str = "2024-12-01-preview"
    openrouter_api_key: str | None = None
    openrouter_base_url: str = "https://openrouter.ai/api/v1"

    max_completion_tokens: int = 16384
    call_timeout_seconds: float = 120.0
    confidence_threshold: float = 0.1
    dry_run: bool = False

    # Local MedGemma settings, only used when a ModelSpec names the medgemma provider
    device: str = "cuda"
    torch_dtype: str = "bfloat16"
    max_new_tokens: int = 2048
    image_size: int = 896
    quantize_4bit: bool = False

    def models_for(self, stage: str) -> tuple[ModelSpec, ModelSpec]:
        """Return the (A, B) model pair for a stage key."""
        if stage == "ocr":
            return self.ocr_model_a, self.ocr_model_b
        if stage in ("classification", "extraction", "labs"):
            return self.text_model_a, self.text_model_b
        raise KeyError(f"Unknown stage: {stage}")

    @classmethod
    def from_env(cls, **overrides) -> PipelineConfig:
        """Build a config from environment variables; keyword overrides win."""
        values: dict[str, object] = {
            "gemini_api_key": os.getenv("GEMINI_API_KEY") or None,
            "azure_api_key": os.getenv("AZURE_KEY") or os.getenv("AZURE_OPENAI_API_KEY") or None,
            "azure_endpoint": os.getenv("AZURE_OPENAI_ENDPOINT") or None,
            "openrouter_api_key": os.getenv("OPENROUTER_API_KEY") or None,
        }
        api_version = os.getenv("AZURE_OPENAI_API_VERSION")
        if api_version:
            values["azure_api_version"] = api_version
        timeout = os.getenv("HANDNOTE_CALL_TIMEOUT")
        if timeout:
            values["call_timeout_seconds"] = float(timeout)
        values.update(overrides)
        return cls(**values)
