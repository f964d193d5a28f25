"""
Task generation orchestrator.

Turns one free-text input into task drafts: builds the (system, user)
prompt, calls the provider client, and parses the reply. Provider and
configuration errors propagate; malformed output never does.
"""

from dataclasses import dataclass, field
from typing import Any

from taskpilot.core.logging import get_logger
from taskpilot.core.types import Message, TaskDraft
from taskpilot.generation.parser import TaskParser
from taskpilot.generation.prompts import DEFAULT_SYSTEM_PROMPT
from taskpilot.llm.base import ProviderConfig, Usage
from taskpilot.llm.client import ProviderClient

logger = get_logger("generation")


@dataclass
class GenerationResult:
    """Drafts produced for one input."""

    tasks: list[TaskDraft]
    usage: Usage = field(default_factory=Usage)
    used_fallback: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"tasks": [task.to_dict() for task in self.tasks]}


@dataclass
class PromptTestResult:
    """Raw model output for prompt debugging."""

    response: str
    usage: Usage = field(default_factory=Usage)


class TaskGenerator:
    """Generates task drafts from free text with the active provider."""

    def __init__(self, client: ProviderClient, system_prompt: str | None = None):
        self.client = client
        self._system_prompt = system_prompt or DEFAULT_SYSTEM_PROMPT

    def set_system_prompt(self, prompt: str) -> None:
        self._system_prompt = prompt

    def get_system_prompt(self) -> str:
        return self._system_prompt

    def get_default_system_prompt(self) -> str:
        return DEFAULT_SYSTEM_PROMPT

    def reset_system_prompt(self) -> None:
        self._system_prompt = DEFAULT_SYSTEM_PROMPT

    def build_messages(self, text: str, system_prompt: str | None = None) -> list[Message]:
        """Exactly one system message followed by one user message."""
        return [
            Message(role="system", content=system_prompt or self._system_prompt),
            Message(role="user", content=text),
        ]

    async def generate_tasks(
        self,
        text: str,
        system_prompt: str | None = None,
        config: ProviderConfig | None = None,
    ) -> GenerationResult:
        """Generate task drafts from free text.

        Args:
            text: Typed or transcribed input
            system_prompt: Override for this call only
            config: Provider config for this call only

        Returns:
            GenerationResult, never empty when the provider call succeeded
        """
        response = await self.client.send(self.build_messages(text, system_prompt), config)

        drafts = TaskParser.parse(response.content)
        if drafts is None:
            logger.info("Model output not parseable, using fallback task")
            return GenerationResult(
                tasks=[TaskParser.fallback(text)],
                usage=response.usage,
                used_fallback=True,
            )

        logger.info(f"Generated {len(drafts)} task(s)")
        return GenerationResult(tasks=drafts, usage=response.usage)

    async def test_prompt(
        self,
        text: str,
        system_prompt: str | None = None,
        config: ProviderConfig | None = None,
    ) -> PromptTestResult:
        """Same call as generate_tasks, returning the raw text unparsed."""
        response = await self.client.send(self.build_messages(text, system_prompt), config)
        return PromptTestResult(response=response.content, usage=response.usage)
