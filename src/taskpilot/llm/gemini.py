"""Google Gemini generateContent provider."""

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

logger = get_logger("llm.gemini")

GEMINI_BASE = "https://generativelanguage.googleapis.com/v1beta"


def build_gemini_payload(messages: list[Message], config: ProviderConfig) -> JSONDict:
    """Convert role-tagged messages into a generateContent request body.

    Gemini has no system or assistant roles in `contents`: the system
    message moves to `systemInstruction` and assistant turns become `model`.
    """
    system_prompt = None
    contents = []
    for msg in messages:
        if msg.role == "system":
            if system_prompt is None:
                system_prompt = msg.content
            continue
        contents.append({
            "role": "model" if msg.role == "assistant" else "user",
            "parts": [{"text": msg.content}],
        })

    payload: JSONDict = {
        "contents": contents,
        "generationConfig": {
            "temperature": config.effective_temperature,
            "maxOutputTokens": config.effective_max_tokens,
        },
    }
    if system_prompt:
        payload["systemInstruction"] = {"parts": [{"text": system_prompt}]}
    return payload


class GeminiProvider(LLMProvider):
    """Google generative language API."""

    provider_type = ProviderType.GEMINI

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout or get_settings().request_timeout
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=GEMINI_BASE, timeout=self.timeout)
        return self._client

    async def complete(
        self,
        messages: list[Message],
        config: ProviderConfig,
    ) -> ProviderResponse:
        """Generate completion via Gemini generateContent."""
        payload = build_gemini_payload(messages, config)

        # Key travels in the query string; keep it out of logs
        logger.debug(
            f"Gemini request: model={config.model}, "
            f"maxOutputTokens={payload['generationConfig']['maxOutputTokens']}"
        )
        for entry in payload["contents"]:
            logger.debug(f"Gemini [{entry['role']}]: {preview(entry['parts'][0]['text'])}")

        try:
            response = await self.client.post(
                f"/models/{config.model}:generateContent",
                params={"key": config.api_key},
                json=payload,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_text = e.response.reason_phrase
            logger.error(f"Gemini HTTP error: {e.response.status_code} - {status_text}")
            raise ProviderError(
                f"Gemini API error: {status_text}",
                provider=self.provider_type.value,
                status_code=e.response.status_code,
                status_text=status_text,
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Gemini request failed: {type(e).__name__}")
            raise ProviderError(
                f"Gemini API error: {type(e).__name__}",
                provider=self.provider_type.value,
            ) from e

        try:
            data = response.json()
            parts = data["candidates"][0]["content"]["parts"]
            content = "".join(part.get("text", "") for part in parts)
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
            logger.error(f"Gemini returned an unreadable body: {e}")
            raise ProviderError(
                "Gemini API error: malformed response",
                provider=self.provider_type.value,
                status_code=response.status_code,
                status_text=response.reason_phrase,
            ) from e

        metadata = data.get("usageMetadata") or {}
        usage = Usage(
            prompt_tokens=metadata.get("promptTokenCount", 0),
            completion_tokens=metadata.get("candidatesTokenCount", 0),
            total_tokens=metadata.get("totalTokenCount", 0),
        )

        logger.debug(f"Gemini response: {preview(content, 200)}")
        logger.debug(f"Gemini usage: {usage.prompt_tokens} in, {usage.completion_tokens} out")

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
