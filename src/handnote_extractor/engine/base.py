from __future__ import annotations

import base64
from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ImagePayload:
    """Raw image bytes plus the mime type they were uploaded with."""

    data: bytes
    mime_type: str

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.to_base64()}"


Content = str | ImagePayload


@dataclass
class ModelResponse:
    text: str
    latency_ms: int
    input_tokens: int | None = None
    output_tokens: int | None = None


class ModelAdapter(ABC):
    """One remote (or local) model that answers a prompt about some content.

    Implementations raise ProviderConfigurationError when they cannot be
    called at all and ProviderCallError when the call fails.
    """

    provider: str = ""

    def __init__(self, model: str, display_name: str) -> None:
        self.model = model
        self.display_name = display_name

    @abstractmethod
    async def invoke(self, prompt: str, content: Content) -> ModelResponse:
        """Send prompt + content to the model and return its raw text."""

    def is_configured(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self.model!r}, display_name={self.display_name!r})"
