"""
Core module - configuration, logging, shared types.

Components:
- config: Settings management via pydantic-settings
- types: Shared data structures (Message, TaskDraft, Task, Column)
- logging: Structured logging setup
"""

from taskpilot.core.config import Settings
from taskpilot.core.types import Message, Task, TaskDraft, TaskStatus

__all__ = ["Settings", "Message", "Task", "TaskDraft", "TaskStatus"]
