"""Exception hierarchy for the extraction pipeline."""


class HandnoteError(Exception):
    """Base class for all handnote_extractor errors."""


class MalformedOutputError(HandnoteError):
    """A model response could not be read as a JSON object."""

    def __init__(self, message: str, raw_text: str = "") -> None:
        super().__init__(message)
        self.raw_text = raw_text


class ProviderError(HandnoteError):
    """Base class for failures attributable to a model provider."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class ProviderConfigurationError(ProviderError):
    """The provider cannot be called because it is not configured (e.g. no API key)."""


class ProviderCallError(ProviderError):
    """The provider call itself failed: network, HTTP status or timeout."""


class ImageInputError(HandnoteError):
    """No usable image was supplied to the pipeline."""
