"""
Claude API provider implementation.

Uses Anthropic's SDK. The system prompt travels as a top-level field,
never as a conversation turn.
"""

import anthropic
import httpx
from anthropic import APIConnectionError, APIError, APIStatusError

from taskpilot.core.config import get_settings
from taskpilot.core.logging import get_logger, preview
from taskpilot.core.types import Message
from taskpilot.core.typing import MessageDict
from taskpilot.llm.base import (
    LLMProvider,
    ProviderConfig,
    ProviderResponse,
    ProviderType,
    Usage,
)
from taskpilot.llm.errors import ProviderError

logger = get_logger("llm.claude")

ANTHROPIC_BASE_URL = "https://api.anthropic.com"


def split_system_prompt(messages: list[Message]) -> tuple[str | None, list[MessageDict]]:
    """Separate the first system message from the conversation turns."""
    system_prompt = None
    conversation = []
    for msg in messages:
        if msg.role == "system":
            if system_prompt is None:
                system_prompt = msg.content
            continue
        conversation.append(msg.to_llm_format())
    return system_prompt, conversation


class ClaudeProvider(LLMProvider):
    """Anthropic Claude API provider."""

    provider_type = ProviderType.CLAUDE

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout or get_settings().request_timeout
        self._client: anthropic.AsyncAnthropic | None = None
        self._client_key: str | None = None

    async def client_for(self, api_key: str) -> anthropic.AsyncAnthropic:
        """SDK client for api_key, rebuilt when the key changes."""
        if self._client is not None and self._client_key == api_key:
            return self._client

        await self.close()
        # One request per call: SDK retries disabled
        self._client = anthropic.AsyncAnthropic(
            api_key=api_key,
            base_url=ANTHROPIC_BASE_URL,
            max_retries=0,
            http_client=httpx.AsyncClient(timeout=self.timeout),
        )
        self._client_key = api_key
        return self._client

    async def complete(
        self,
        messages: list[Message],
        config: ProviderConfig,
    ) -> ProviderResponse:
        """Generate completion using Claude API."""
        system_prompt, conversation = split_system_prompt(messages)

        request: dict = {
            "model": config.model,
            "max_tokens": config.effective_max_tokens,
            "messages": conversation,
        }
        if system_prompt:
            request["system"] = system_prompt

        logger.debug(f"Claude request: model={config.model}, max_tokens={request['max_tokens']}")
        if system_prompt:
            logger.debug(f"Claude system prompt ({len(system_prompt)} chars)")
        for msg in conversation:
            logger.debug(f"Claude [{msg['role']}]: {preview(msg['content'])}")

        client = await self.client_for(config.api_key)
        try:
            response = await client.messages.create(**request)
        except APIStatusError as e:
            status_text = e.response.reason_phrase
            logger.error(f"Claude API error: {e.status_code} - {e.message}")
            raise ProviderError(
                f"Claude API error: {status_text}",
                provider=self.provider_type.value,
                status_code=e.status_code,
                status_text=status_text,
            ) from e
        except APIConnectionError as e:
            logger.error(f"Connection error: {e}")
            raise ProviderError(
                f"Claude API error: {e}",
                provider=self.provider_type.value,
            ) from e
        except APIError as e:
            logger.error(f"API error: {e}")
            raise ProviderError(
                f"Claude API error: {e}",
                provider=self.provider_type.value,
            ) from e

        try:
            content, usage = parse_claude_response(response)
        except (ValueError, TypeError, AttributeError) as e:
            logger.error(f"Claude returned an unreadable body: {e}")
            raise ProviderError(
                "Claude API error: malformed response",
                provider=self.provider_type.value,
            ) from e

        logger.debug(f"Claude response ({usage.completion_tokens} tokens): {preview(content, 200)}")
        logger.debug(f"Claude usage: {usage.prompt_tokens} in, {usage.completion_tokens} out")

        return ProviderResponse(
            content=content,
            usage=usage,
            provider=self.provider_type,
            model=config.model,
        )

    async def close(self) -> None:
        """Close the SDK client."""
        if self._client is not None:
            await self._client.close()
        self._client = None
        self._client_key = None


def parse_claude_response(response) -> tuple[str, Usage]:
    """First text block plus token usage; ValueError if either is missing."""
    blocks = getattr(response, "content", None) or []
    text_blocks = [b for b in blocks if getattr(b, "type", None) == "text"]
    if not text_blocks:
        raise ValueError("no text block in response")

    usage = getattr(response, "usage", None)
    if usage is None:
        raise ValueError("no usage in response")

    input_tokens = usage.input_tokens or 0
    output_tokens = usage.output_tokens or 0
    return text_blocks[0].text, Usage(
        prompt_tokens=input_tokens,
        completion_tokens=output_tokens,
        total_tokens=input_tokens + output_tokens,
    )
