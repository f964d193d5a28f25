"""Custom provider - any OpenAI-compatible endpoint at a user-supplied URL."""

from taskpilot.core.typing import JSONDict
from taskpilot.llm.base import ProviderConfig, ProviderType, Usage
from taskpilot.llm.errors import ConfigurationError
from taskpilot.llm.openai import OpenAIProvider, parse_openai_usage


class CustomProvider(OpenAIProvider):
    """OpenAI-compatible endpoint (self-hosted, proxies, regional resellers).

    The configured base_url is the full chat completions URL.
    Responses are read leniently since compatible servers vary.
    """

    provider_type = ProviderType.CUSTOM
    label = "Custom"

    def endpoint(self, config: ProviderConfig) -> str:
        if not config.base_url:
            raise ConfigurationError("Custom provider requires base_url")
        return config.base_url

    def parse_response(self, data: JSONDict) -> tuple[str, Usage]:
        content = ""
        choices = data.get("choices")
        if isinstance(choices, list) and choices:
            message = choices[0].get("message") or {}
            content = message.get("content") or ""
        if not content:
            content = data.get("content") or ""
        return content, parse_openai_usage(data.get("usage"))
