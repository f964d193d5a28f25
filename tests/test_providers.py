"""
Unit tests for vendor adapters.

HTTP is mocked with respx, including the Anthropic SDK's transport.
"""

import json

import httpx
import pytest
import respx

from taskpilot.core.types import Message
from taskpilot.llm.base import ProviderConfig, ProviderType
from taskpilot.llm.claude import ClaudeProvider, split_system_prompt
from taskpilot.llm.client import ProviderClient
from taskpilot.llm.custom import CustomProvider
from taskpilot.llm.errors import ConfigurationError, ProviderError
from taskpilot.llm.gemini import GEMINI_BASE, GeminiProvider, build_gemini_payload
from taskpilot.llm.openai import OPENAI_CHAT_URL, OpenAIProvider

ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"
CUSTOM_URL = "https://llm.example.com/v1/chat/completions"

MESSAGES = [
    Message(role="system", content="You make tasks."),
    Message(role="user", content="Prepare the demo"),
]


def _sent_json(route: respx.Route) -> dict:
    return json.loads(route.calls.last.request.content)


# --- OpenAI ---


@pytest.mark.asyncio
@respx.mock
async def test_openai_request_and_response():
    route = respx.post(OPENAI_CHAT_URL).mock(
        return_value=httpx.Response(
            200,
            json={
                "choices": [{"message": {"role": "assistant", "content": "hello"}}],
                "usage": {"prompt_tokens": 12, "completion_tokens": 3, "total_tokens": 15},
            },
        )
    )
    provider = OpenAIProvider(timeout=5)
    config = ProviderConfig(provider="openai", api_key="sk-test", model="gpt-3.5-turbo")

    response = await provider.complete(MESSAGES, config)

    assert response.content == "hello"
    assert response.usage.prompt_tokens == 12
    assert response.usage.completion_tokens == 3
    assert response.usage.total_tokens == 15
    assert response.provider == ProviderType.OPENAI

    request = route.calls.last.request
    assert request.headers["Authorization"] == "Bearer sk-test"
    assert _sent_json(route) == {
        "model": "gpt-3.5-turbo",
        "messages": [
            {"role": "system", "content": "You make tasks."},
            {"role": "user", "content": "Prepare the demo"},
        ],
        "temperature": 0.7,
        "max_tokens": 1000,
    }
    await provider.close()


@pytest.mark.asyncio
@respx.mock
async def test_openai_total_tokens_summed_when_missing():
    respx.post(OPENAI_CHAT_URL).mock(
        return_value=httpx.Response(
            200,
            json={
                "choices": [{"message": {"content": "x"}}],
                "usage": {"prompt_tokens": 7, "completion_tokens": 2},
            },
        )
    )
    provider = OpenAIProvider(timeout=5)
    config = ProviderConfig(provider="openai", api_key="k", model="m")

    response = await provider.complete(MESSAGES, config)
    assert response.usage.total_tokens == 9
    await provider.close()


@pytest.mark.asyncio
@respx.mock
async def test_openai_sends_explicit_zero_temperature():
    route = respx.post(OPENAI_CHAT_URL).mock(
        return_value=httpx.Response(200, json={"choices": [{"message": {"content": "x"}}]})
    )
    provider = OpenAIProvider(timeout=5)
    config = ProviderConfig(provider="openai", api_key="k", model="m", temperature=0, max_tokens=50)

    await provider.complete(MESSAGES, config)

    sent = _sent_json(route)
    assert sent["temperature"] == 0
    assert sent["max_tokens"] == 50
    await provider.close()


@pytest.mark.asyncio
@respx.mock
async def test_openai_http_error_raises_provider_error():
    respx.post(OPENAI_CHAT_URL).mock(return_value=httpx.Response(401, json={"error": "bad key"}))
    provider = OpenAIProvider(timeout=5)
    config = ProviderConfig(provider="openai", api_key="k", model="m")

    with pytest.raises(ProviderError, match="OpenAI API error: Unauthorized") as exc_info:
        await provider.complete(MESSAGES, config)

    assert exc_info.value.status_code == 401
    assert exc_info.value.status_text == "Unauthorized"
    assert exc_info.value.provider == "openai"
    await provider.close()


@pytest.mark.asyncio
@respx.mock
async def test_openai_network_error_raises_provider_error():
    respx.post(OPENAI_CHAT_URL).mock(side_effect=httpx.ConnectError("refused"))
    provider = OpenAIProvider(timeout=5)
    config = ProviderConfig(provider="openai", api_key="k", model="m")

    with pytest.raises(ProviderError):
        await provider.complete(MESSAGES, config)
    await provider.close()


@pytest.mark.asyncio
@respx.mock
async def test_openai_malformed_body_raises_provider_error():
    respx.post(OPENAI_CHAT_URL).mock(return_value=httpx.Response(200, json={"unexpected": True}))
    provider = OpenAIProvider(timeout=5)
    config = ProviderConfig(provider="openai", api_key="k", model="m")

    with pytest.raises(ProviderError, match="malformed"):
        await provider.complete(MESSAGES, config)
    await provider.close()


# --- Custom ---


@pytest.mark.asyncio
@respx.mock
async def test_custom_posts_to_base_url():
    route = respx.post(CUSTOM_URL).mock(
        return_value=httpx.Response(
            200,
            json={
                "choices": [{"message": {"content": "custom reply"}}],
                "usage": {"prompt_tokens": 4, "completion_tokens": 6, "total_tokens": 10},
            },
        )
    )
    provider = CustomProvider(timeout=5)
    config = ProviderConfig(provider="custom", api_key="ck", model="local-model", base_url=CUSTOM_URL)

    response = await provider.complete(MESSAGES, config)

    assert response.content == "custom reply"
    assert response.usage.total_tokens == 10
    assert route.calls.last.request.headers["Authorization"] == "Bearer ck"
    assert _sent_json(route)["model"] == "local-model"
    await provider.close()


@pytest.mark.asyncio
@respx.mock
async def test_custom_reads_top_level_content_and_zeroes_usage():
    respx.post(CUSTOM_URL).mock(return_value=httpx.Response(200, json={"content": "flat"}))
    provider = CustomProvider(timeout=5)
    config = ProviderConfig(provider="custom", api_key="ck", model="m", base_url=CUSTOM_URL)

    response = await provider.complete(MESSAGES, config)

    assert response.content == "flat"
    assert response.usage.prompt_tokens == 0
    assert response.usage.completion_tokens == 0
    assert response.usage.total_tokens == 0
    await provider.close()


@pytest.mark.asyncio
@respx.mock
async def test_custom_error_status():
    respx.post(CUSTOM_URL).mock(return_value=httpx.Response(503))
    provider = CustomProvider(timeout=5)
    config = ProviderConfig(provider="custom", api_key="ck", model="m", base_url=CUSTOM_URL)

    with pytest.raises(ProviderError, match="Custom API error: Service Unavailable"):
        await provider.complete(MESSAGES, config)
    await provider.close()


@pytest.mark.asyncio
async def test_custom_without_base_url_is_configuration_error():
    provider = CustomProvider(timeout=5)
    config = ProviderConfig(provider="custom", api_key="ck", model="m")

    with pytest.raises(ConfigurationError, match="base_url"):
        await provider.complete(MESSAGES, config)


# --- Claude ---


def test_split_system_prompt():
    system, conversation = split_system_prompt(
        [
            Message(role="system", content="first"),
            Message(role="user", content="u1"),
            Message(role="assistant", content="a1"),
            Message(role="system", content="second"),
        ]
    )
    assert system == "first"
    assert conversation == [
        {"role": "user", "content": "u1"},
        {"role": "assistant", "content": "a1"},
    ]


def _anthropic_message(text: str, input_tokens: int, output_tokens: int) -> dict:
    return {
        "id": "msg_01",
        "type": "message",
        "role": "assistant",
        "model": "claude-3-haiku-20240307",
        "content": [{"type": "text", "text": text}],
        "stop_reason": "end_turn",
        "stop_sequence": None,
        "usage": {"input_tokens": input_tokens, "output_tokens": output_tokens},
    }


@pytest.mark.asyncio
@respx.mock
async def test_claude_moves_system_prompt_to_top_level():
    route = respx.post(ANTHROPIC_URL).mock(
        return_value=httpx.Response(200, json=_anthropic_message("ok", 20, 5))
    )
    provider = ClaudeProvider(timeout=5)
    config = ProviderConfig(provider="claude", api_key="ak", model="claude-3-haiku-20240307")

    response = await provider.complete(MESSAGES, config)

    sent = _sent_json(route)
    assert sent["system"] == "You make tasks."
    assert sent["messages"] == [{"role": "user", "content": "Prepare the demo"}]
    assert all(m["role"] != "system" for m in sent["messages"])
    assert sent["model"] == "claude-3-haiku-20240307"
    assert sent["max_tokens"] == 1000
    assert route.calls.last.request.headers["x-api-key"] == "ak"

    assert response.content == "ok"
    assert response.usage.prompt_tokens == 20
    assert response.usage.completion_tokens == 5
    assert response.usage.total_tokens == 25
    await provider.close()


@pytest.mark.asyncio
@respx.mock
async def test_claude_omits_system_when_absent():
    route = respx.post(ANTHROPIC_URL).mock(
        return_value=httpx.Response(200, json=_anthropic_message("ok", 1, 1))
    )
    provider = ClaudeProvider(timeout=5)
    config = ProviderConfig(provider="claude", api_key="ak", model="claude-3-haiku-20240307")

    await provider.complete([Message(role="user", content="hi")], config)

    assert "system" not in _sent_json(route)
    await provider.close()


@pytest.mark.asyncio
@respx.mock
async def test_claude_error_status_raises_provider_error():
    route = respx.post(ANTHROPIC_URL).mock(
        return_value=httpx.Response(
            401,
            json={"type": "error", "error": {"type": "authentication_error", "message": "bad"}},
        )
    )
    provider = ClaudeProvider(timeout=5)
    config = ProviderConfig(provider="claude", api_key="ak", model="claude-3-haiku-20240307")

    with pytest.raises(ProviderError, match="Claude API error: Unauthorized") as exc_info:
        await provider.complete(MESSAGES, config)

    assert exc_info.value.status_code == 401
    # Exactly one request: retries are disabled
    assert route.call_count == 1
    await provider.close()


@pytest.mark.asyncio
@respx.mock
async def test_claude_malformed_body_raises_provider_error():
    respx.post(ANTHROPIC_URL).mock(return_value=httpx.Response(200, json={"unexpected": True}))
    provider = ClaudeProvider(timeout=5)
    config = ProviderConfig(provider="claude", api_key="ak", model="claude-3-haiku-20240307")

    with pytest.raises(ProviderError, match="malformed response"):
        await provider.complete(MESSAGES, config)
    await provider.close()


@pytest.mark.asyncio
@respx.mock
async def test_claude_ignores_base_url_environment(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_BASE_URL", "https://proxy.invalid")
    route = respx.post(ANTHROPIC_URL).mock(
        return_value=httpx.Response(200, json=_anthropic_message("ok", 1, 1))
    )
    provider = ClaudeProvider(timeout=5)
    config = ProviderConfig(provider="claude", api_key="ak", model="claude-3-haiku-20240307")

    await provider.complete(MESSAGES, config)

    assert route.call_count == 1
    await provider.close()


@pytest.mark.asyncio
@respx.mock
async def test_claude_rebuilds_client_when_key_changes():
    route = respx.post(ANTHROPIC_URL).mock(
        return_value=httpx.Response(200, json=_anthropic_message("ok", 1, 1))
    )
    provider = ClaudeProvider(timeout=5)

    first = await provider.client_for("key-one")
    assert await provider.client_for("key-one") is first

    second = await provider.client_for("key-two")
    assert second is not first
    assert first.is_closed()

    config = ProviderConfig(provider="claude", api_key="key-two", model="claude-3-haiku-20240307")
    await provider.complete(MESSAGES, config)
    assert route.calls.last.request.headers["x-api-key"] == "key-two"
    await provider.close()


# --- Gemini ---


def test_gemini_payload_role_mapping():
    config = ProviderConfig(provider="gemini", api_key="g", model="gemini-1.5-flash")
    payload = build_gemini_payload(
        [
            Message(role="system", content="sys"),
            Message(role="user", content="u1"),
            Message(role="assistant", content="a1"),
        ],
        config,
    )

    assert payload["contents"] == [
        {"role": "user", "parts": [{"text": "u1"}]},
        {"role": "model", "parts": [{"text": "a1"}]},
    ]
    assert payload["systemInstruction"] == {"parts": [{"text": "sys"}]}
    assert payload["generationConfig"] == {"temperature": 0.7, "maxOutputTokens": 1000}


def test_gemini_payload_without_system():
    config = ProviderConfig(provider="gemini", api_key="g", model="m")
    payload = build_gemini_payload([Message(role="user", content="u")], config)
    assert "systemInstruction" not in payload


@pytest.mark.asyncio
@respx.mock
async def test_gemini_request_and_response():
    route = respx.post(
        url__startswith=f"{GEMINI_BASE}/models/gemini-1.5-flash:generateContent"
    ).mock(
        return_value=httpx.Response(
            200,
            json={
                "candidates": [{"content": {"role": "model", "parts": [{"text": "gem reply"}]}}],
                "usageMetadata": {
                    "promptTokenCount": 8,
                    "candidatesTokenCount": 4,
                    "totalTokenCount": 12,
                },
            },
        )
    )
    provider = GeminiProvider(timeout=5)
    config = ProviderConfig(provider="gemini", api_key="g-key", model="gemini-1.5-flash")

    response = await provider.complete(
        MESSAGES + [Message(role="assistant", content="earlier answer")], config
    )

    request = route.calls.last.request
    assert request.url.params["key"] == "g-key"
    assert "Authorization" not in request.headers

    sent = _sent_json(route)
    roles = [entry["role"] for entry in sent["contents"]]
    assert roles == ["user", "model"]
    assert "system" not in roles
    assert sent["systemInstruction"]["parts"][0]["text"] == "You make tasks."

    assert response.content == "gem reply"
    assert response.usage.total_tokens == 12
    await provider.close()


@pytest.mark.asyncio
@respx.mock
async def test_gemini_missing_usage_defaults_to_zero():
    respx.post(url__startswith=f"{GEMINI_BASE}/models/m:generateContent").mock(
        return_value=httpx.Response(
            200, json={"candidates": [{"content": {"parts": [{"text": "x"}]}}]}
        )
    )
    provider = GeminiProvider(timeout=5)
    config = ProviderConfig(provider="gemini", api_key="g", model="m")

    response = await provider.complete(MESSAGES, config)
    assert response.usage.total_tokens == 0
    await provider.close()


@pytest.mark.asyncio
@respx.mock
async def test_gemini_error_status():
    respx.post(url__startswith=f"{GEMINI_BASE}/models/m:generateContent").mock(
        return_value=httpx.Response(400)
    )
    provider = GeminiProvider(timeout=5)
    config = ProviderConfig(provider="gemini", api_key="g", model="m")

    with pytest.raises(ProviderError, match="Gemini API error: Bad Request"):
        await provider.complete(MESSAGES, config)
    await provider.close()


# --- Through the client ---


@pytest.mark.asyncio
@respx.mock
async def test_client_routes_by_provider_tag():
    respx.post(OPENAI_CHAT_URL).mock(
        return_value=httpx.Response(200, json={"choices": [{"message": {"content": "openai"}}]})
    )
    respx.post(ANTHROPIC_URL).mock(
        return_value=httpx.Response(200, json=_anthropic_message("claude", 1, 1))
    )
    client = ProviderClient(timeout=5)

    client.set_config(ProviderConfig(provider="openai", api_key="k", model="m"))
    assert (await client.send(MESSAGES)).content == "openai"

    client.set_config(ProviderConfig(provider="claude", api_key="k", model="claude-3-haiku-20240307"))
    assert (await client.send(MESSAGES)).content == "claude"

    await client.close()
