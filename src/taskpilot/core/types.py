"""
Shared type definitions.

Core data structures used across modules.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class TaskStatus(Enum):
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"
    ARCHIVED = "archived"

    @classmethod
    def coerce(cls, value: Any, default: "TaskStatus | None" = None) -> "TaskStatus":
        """Map a loose status value onto the enum, falling back to TODO."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return default or cls.TODO


@dataclass
class Message:
    """One prompt turn sent to an LLM provider."""

    role: str  # "system" | "user" | "assistant"
    content: str

    def to_llm_format(self) -> dict[str, Any]:
        """Convert to OpenAI-style message dict."""
        return {"role": self.role, "content": self.content}


@dataclass
class TaskDraft:
    """Unpersisted task produced by generation."""

    title: str
    description: str = ""
    status: TaskStatus = TaskStatus.TODO

    def to_dict(self) -> dict[str, str]:
        return {
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
        }


@dataclass
class Task:
    """Task persisted on the board."""

    id: str
    title: str
    description: str
    status: TaskStatus
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass
class Column:
    """Board lane holding the tasks of one status."""

    id: str
    title: str
    status: TaskStatus
    tasks: list[Task] = field(default_factory=list)
