"""Model adapters, prompts and the provider registry."""
from handnote_extractor.engine.base import ImagePayload, ModelAdapter, ModelResponse
from handnote_extractor.engine.errors import (
    HandnoteError,
    ImageInputError,
    MalformedOutputError,
    ProviderCallError,
    ProviderConfigurationError,
)
from handnote_extractor.engine.registry import ModelRegistry

__all__ = [
    "ImagePayload", "ModelAdapter", "ModelResponse", "ModelRegistry",
    "HandnoteError", "ImageInputError", "MalformedOutputError",
    "ProviderCallError", "ProviderConfigurationError",
]
