"""OpenAI chat completions provider."""

import httpx

from taskpilot.core.config import get_settings
from taskpilot.core.logging import get_logger, preview
from taskpilot.core.types import Message
from taskpilot.core.typing import JSONDict
from taskpilot.llm.base import (
    LLMProvider,
    ProviderConfig,
    ProviderResponse,
    ProviderType,
    Usage,
)
from taskpilot.llm.errors import ProviderError

logger = get_logger("llm.openai")

OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"


class OpenAIProvider(LLMProvider):
    """OpenAI chat completions API."""

    provider_type = ProviderType.OPENAI
    label = "OpenAI"

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout or get_settings().request_timeout
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    def endpoint(self, config: ProviderConfig) -> str:
        return OPENAI_CHAT_URL

    def build_payload(self, messages: list[Message], config: ProviderConfig) -> JSONDict:
        return {
            "model": config.model,
            "messages": [m.to_llm_format() for m in messages],
            "temperature": config.effective_temperature,
            "max_tokens": config.effective_max_tokens,
        }

    def parse_response(self, data: JSONDict) -> tuple[str, Usage]:
        content = data["choices"][0]["message"]["content"] or ""
        return content, parse_openai_usage(data.get("usage"))

    async def complete(
        self,
        messages: list[Message],
        config: ProviderConfig,
    ) -> ProviderResponse:
        """Generate completion via an OpenAI-compatible endpoint."""
        url = self.endpoint(config)
        payload = self.build_payload(messages, config)

        logger.debug(
            f"{self.label} request: model={config.model}, "
            f"max_tokens={payload['max_tokens']}, temperature={payload['temperature']}"
        )
        for msg in messages:
            logger.debug(f"{self.label} [{msg.role}]: {preview(msg.content)}")

        try:
            response = await self.client.post(
                url,
                json=payload,
                headers={"Authorization": f"Bearer {config.api_key}"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_text = e.response.reason_phrase
            logger.error(f"{self.label} HTTP error: {e.response.status_code} - {e.response.text}")
            raise ProviderError(
                f"{self.label} API error: {status_text}",
                provider=self.provider_type.value,
                status_code=e.response.status_code,
                status_text=status_text,
            ) from e
        except httpx.RequestError as e:
            logger.error(f"{self.label} request failed: {e}")
            raise ProviderError(
                f"{self.label} API error: {e}",
                provider=self.provider_type.value,
            ) from e

        try:
            content, usage = self.parse_response(response.json())
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
            logger.error(f"{self.label} returned an unreadable body: {e}")
            raise ProviderError(
                f"{self.label} API error: malformed response",
                provider=self.provider_type.value,
                status_code=response.status_code,
                status_text=response.reason_phrase,
            ) from e

        logger.debug(f"{self.label} response: {preview(content, 200)}")
        logger.debug(
            f"{self.label} usage: {usage.prompt_tokens} in, "
            f"{usage.completion_tokens} out, {usage.total_tokens} total"
        )

        return ProviderResponse(
            content=content,
            usage=usage,
            provider=self.provider_type,
            model=config.model,
        )

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None


def parse_openai_usage(usage: JSONDict | None) -> Usage:
    """Normalize an OpenAI-style usage block (snake or camel case)."""
    if not isinstance(usage, dict):
        return Usage()

    prompt = usage.get("prompt_tokens", usage.get("promptTokens")) or 0
    completion = usage.get("completion_tokens", usage.get("completionTokens")) or 0
    total = usage.get("total_tokens", usage.get("totalTokens"))
    if total is None:
        total = prompt + completion
    return Usage(
        prompt_tokens=int(prompt),
        completion_tokens=int(completion),
        total_tokens=int(total),
    )
