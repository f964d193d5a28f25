"""Provider client - holds the active config and dispatches to vendor adapters."""

from taskpilot.core.logging import get_logger
from taskpilot.core.types import Message
from taskpilot.llm.base import LLMProvider, ProviderConfig, ProviderResponse, ProviderType
from taskpilot.llm.claude import ClaudeProvider
from taskpilot.llm.custom import CustomProvider
from taskpilot.llm.errors import ConfigurationError, UnsupportedProviderError
from taskpilot.llm.gemini import GeminiProvider
from taskpilot.llm.openai import OpenAIProvider

logger = get_logger("llm.client")

ADAPTERS: dict[ProviderType, type[LLMProvider]] = {
    ProviderType.OPENAI: OpenAIProvider,
    ProviderType.CLAUDE: ClaudeProvider,
    ProviderType.GEMINI: GeminiProvider,
    ProviderType.CUSTOM: CustomProvider,
}


class ProviderClient:
    """Sends messages to whichever provider the configuration names."""

    def __init__(self, config: ProviderConfig | None = None, timeout: float | None = None):
        self._config = config
        self._timeout = timeout
        self._providers: dict[ProviderType, LLMProvider] = {}

    def set_config(self, config: ProviderConfig) -> None:
        """Replace the active configuration. Validated only when a call is made."""
        self._config = config
        logger.info(f"Provider config set: {config.provider_name} / {config.model}")

    def get_config(self) -> ProviderConfig | None:
        return self._config

    def register(self, provider: LLMProvider) -> None:
        """Install an adapter instance for its provider type."""
        self._providers[provider.provider_type] = provider
        logger.debug(f"Registered provider: {provider.provider_type.value}")

    def get(self, provider_type: ProviderType) -> LLMProvider:
        """Get the adapter for a provider type, creating the built-in one on demand."""
        if provider_type not in self._providers:
            self._providers[provider_type] = ADAPTERS[provider_type](timeout=self._timeout)
        return self._providers[provider_type]

    async def send(
        self,
        messages: list[Message],
        config: ProviderConfig | None = None,
    ) -> ProviderResponse:
        """Send messages with the given or held configuration.

        Args:
            messages: Ordered role-tagged messages
            config: Per-call configuration (defaults to the held one)

        Returns:
            ProviderResponse with normalized content and usage

        Raises:
            ConfigurationError: No configuration available
            UnsupportedProviderError: Unknown provider tag
            ProviderError: Vendor call failed
        """
        active = config or self._config
        if active is None:
            raise ConfigurationError("LLM configuration not set")

        if not isinstance(active.provider, ProviderType):
            raise UnsupportedProviderError(active.provider_name)

        provider = self.get(active.provider)
        logger.info(
            f"Sending {len(messages)} message(s) to {active.provider_name} ({active.model})"
        )
        response = await provider.complete(messages, active)
        logger.info(
            f"{active.provider_name} replied: {len(response.content)} chars, "
            f"{response.usage.total_tokens} tokens"
        )
        return response

    async def close(self) -> None:
        """Close all provider connections."""
        for provider in self._providers.values():
            await provider.close()
