"""Shared fixtures."""

from pathlib import Path

import pytest

from taskpilot.board.store import SQLiteTaskStore
from taskpilot.core.types import Message
from taskpilot.llm.base import (
    LLMProvider,
    ProviderConfig,
    ProviderResponse,
    ProviderType,
    Usage,
)
from taskpilot.llm.client import ProviderClient


class StubProvider(LLMProvider):
    """Returns canned content and records what it was sent."""

    provider_type = ProviderType.OPENAI

    def __init__(self, content: str = "", usage: Usage | None = None):
        self.content = content
        self.usage = usage or Usage(prompt_tokens=10, completion_tokens=5, total_tokens=15)
        self.calls: list[tuple[list[Message], ProviderConfig]] = []

    async def complete(self, messages, config):
        self.calls.append((messages, config))
        return ProviderResponse(
            content=self.content,
            usage=self.usage,
            provider=self.provider_type,
            model=config.model,
        )


@pytest.fixture
def openai_config() -> ProviderConfig:
    return ProviderConfig(provider="openai", api_key="k", model="gpt-3.5-turbo")


@pytest.fixture
def stub_provider() -> StubProvider:
    return StubProvider()


@pytest.fixture
def stub_client(stub_provider: StubProvider, openai_config: ProviderConfig) -> ProviderClient:
    """Client whose openai adapter is the stub."""
    client = ProviderClient(openai_config)
    client.register(stub_provider)
    return client


@pytest.fixture
async def task_store(tmp_path: Path):
    """Temporary SQLite task store."""
    store = SQLiteTaskStore(tmp_path / "board.db")
    await store.connect()
    yield store
    await store.close()


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point settings at a temporary data dir and ignore any .env."""
    data_dir = tmp_path / "data"
    monkeypatch.setenv("TASKPILOT_DATA_DIR", str(data_dir))
    monkeypatch.delenv("TASKPILOT_API_KEY", raising=False)
    monkeypatch.chdir(tmp_path)
    return data_dir
