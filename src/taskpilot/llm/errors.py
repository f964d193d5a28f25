"""
LLM exceptions.

Configuration and provider failures propagate to callers unchanged.
Malformed model output is not an error; generation recovers from it.
"""


class LLMError(Exception):
    """Base class for LLM layer errors."""


class ConfigurationError(LLMError):
    """No usable provider configuration for the call."""


class UnsupportedProviderError(LLMError):
    """Provider tag is not one of the recognized values."""

    def __init__(self, provider: str):
        super().__init__(f"Unsupported LLM provider: {provider}")
        self.provider = provider


class ProviderError(LLMError):
    """Vendor endpoint failed (HTTP status, network, or unreadable body)."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        status_code: int | None = None,
        status_text: str | None = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.status_text = status_text
