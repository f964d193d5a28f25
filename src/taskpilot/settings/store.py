"""
Persisted LLM settings.

Provider config and system prompt live in one YAML file so they
survive between runs. Unreadable files are treated as empty.
"""

from pathlib import Path
from typing import Any

import yaml

from taskpilot.core.logging import get_logger
from taskpilot.generation.service import TaskGenerator
from taskpilot.llm.base import ProviderConfig
from taskpilot.llm.client import ProviderClient

logger = get_logger("settings")

LLM_CONFIG_KEY = "llm"
SYSTEM_PROMPT_KEY = "system_prompt"


class SettingsStore:
    """YAML-backed store for provider config and system prompt."""

    def __init__(self, path: Path):
        self.path = path

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to read settings from {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed settings file: {self.path}")
            return {}
        return data

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, allow_unicode=True, sort_keys=False)

    def load_provider_config(self) -> ProviderConfig | None:
        raw = self._read().get(LLM_CONFIG_KEY)
        if not isinstance(raw, dict):
            return None
        return ProviderConfig.from_dict(raw)

    def save_provider_config(self, config: ProviderConfig) -> None:
        data = self._read()
        data[LLM_CONFIG_KEY] = config.to_dict()
        self._write(data)
        logger.info(f"Saved provider config: {config.provider_name} / {config.model}")

    def load_system_prompt(self) -> str | None:
        prompt = self._read().get(SYSTEM_PROMPT_KEY)
        return prompt if isinstance(prompt, str) and prompt else None

    def save_system_prompt(self, prompt: str) -> None:
        data = self._read()
        data[SYSTEM_PROMPT_KEY] = prompt
        self._write(data)
        logger.info(f"Saved system prompt ({len(prompt)} chars)")

    def reset_system_prompt(self) -> None:
        """Forget the saved prompt so the built-in default applies."""
        data = self._read()
        if data.pop(SYSTEM_PROMPT_KEY, None) is not None:
            self._write(data)
            logger.info("Removed saved system prompt")

    def initialize(self, client: ProviderClient, generator: TaskGenerator) -> None:
        """Apply saved settings to a client and generator."""
        config = self.load_provider_config()
        if config is not None:
            client.set_config(config)

        prompt = self.load_system_prompt()
        if prompt is not None:
            generator.set_system_prompt(prompt)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)

    @staticmethod
    def is_configured(config: ProviderConfig | None) -> bool:
        """True when provider, API key and model are all present."""
        return bool(config and config.provider and config.api_key and config.model)
