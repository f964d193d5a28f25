"""
LLM provider interface.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from taskpilot.core.types import Message

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 1000


class ProviderType(Enum):
    OPENAI = "openai"
    CLAUDE = "claude"
    GEMINI = "gemini"
    CUSTOM = "custom"


@dataclass
class ProviderConfig:
    """How to reach an LLM. Not validated until a call is made."""

    provider: ProviderType | str
    api_key: str
    model: str
    base_url: str | None = None  # Only used by the custom provider
    temperature: float | None = None
    max_tokens: int | None = None

    def __post_init__(self) -> None:
        # Unknown tags stay strings and fail at dispatch time
        if isinstance(self.provider, str):
            try:
                self.provider = ProviderType(self.provider.strip().lower())
            except ValueError:
                pass

    @property
    def provider_name(self) -> str:
        if isinstance(self.provider, ProviderType):
            return self.provider.value
        return str(self.provider)

    @property
    def effective_temperature(self) -> float:
        return DEFAULT_TEMPERATURE if self.temperature is None else self.temperature

    @property
    def effective_max_tokens(self) -> int:
        return self.max_tokens or DEFAULT_MAX_TOKENS

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "provider": self.provider_name,
            "api_key": self.api_key,
            "model": self.model,
        }
        if self.base_url:
            data["base_url"] = self.base_url
        if self.temperature is not None:
            data["temperature"] = self.temperature
        if self.max_tokens is not None:
            data["max_tokens"] = self.max_tokens
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProviderConfig":
        return cls(
            provider=data.get("provider", ""),
            api_key=data.get("api_key", ""),
            model=data.get("model", ""),
            base_url=data.get("base_url"),
            temperature=data.get("temperature"),
            max_tokens=data.get("max_tokens"),
        )


@dataclass
class Usage:
    """Token accounting, normalized across vendors."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }


@dataclass
class ProviderResponse:
    """Normalized response from an LLM provider."""

    content: str
    usage: Usage = field(default_factory=Usage)
    provider: ProviderType | None = None
    model: str = ""


class LLMProvider(ABC):
    """Abstract LLM provider (one per vendor wire format)."""

    provider_type: ProviderType

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        config: ProviderConfig,
    ) -> ProviderResponse:
        """
        Send role-tagged messages and return normalized text plus usage.

        Args:
            messages: Ordered prompt turns
            config: Provider configuration for this call

        Returns:
            ProviderResponse with content and usage

        Raises:
            ProviderError: Vendor returned a failure or unreadable body
        """
        ...

    async def close(self) -> None:
        """Release network resources."""
        return None
