"""
LLM module - language model provider abstraction.

Providers:
- openai: OpenAI chat completions
- claude: Anthropic Claude messages API
- gemini: Google generative language API
- custom: any OpenAI-compatible endpoint

ProviderClient dispatches to the provider named by the active config.
"""

from taskpilot.llm.base import ProviderConfig, ProviderResponse, ProviderType, Usage
from taskpilot.llm.client import ProviderClient
from taskpilot.llm.errors import (
    ConfigurationError,
    LLMError,
    ProviderError,
    UnsupportedProviderError,
)

__all__ = [
    "ConfigurationError",
    "LLMError",
    "ProviderClient",
    "ProviderConfig",
    "ProviderError",
    "ProviderResponse",
    "ProviderType",
    "UnsupportedProviderError",
    "Usage",
]
