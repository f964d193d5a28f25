"""
Generation module - free text to task drafts.

- prompts: built-in system prompt
- parser: recovery ladder for model output
- service: TaskGenerator orchestrator
"""

from taskpilot.generation.service import GenerationResult, PromptTestResult, TaskGenerator

__all__ = ["GenerationResult", "PromptTestResult", "TaskGenerator"]
