"""Recover task drafts from free-text model output."""

import json
import re
from typing import Any

from taskpilot.core.logging import get_logger
from taskpilot.core.types import TaskDraft, TaskStatus

logger = get_logger("generation.parser")

FALLBACK_TITLE_LENGTH = 50

# First "{" through last "}" so nested objects stay intact
_OBJECT_PATTERN = re.compile(r"\{.*\}", re.DOTALL)


class TaskParser:
    """Parse model output into TaskDrafts.

    Ladder, first success wins:
    1. whole content as JSON
    2. the brace-delimited span embedded in the content
    3. nothing usable -> None (caller builds the fallback draft)
    """

    @staticmethod
    def parse(content: str) -> list[TaskDraft] | None:
        candidates = [content]
        match = _OBJECT_PATTERN.search(content)
        if match:
            candidates.append(match.group(0))

        for candidate in candidates:
            try:
                data = json.loads(candidate)
            except (json.JSONDecodeError, TypeError):
                continue

            drafts = TaskParser.coerce_drafts(data)
            if drafts is not None:
                return drafts

        logger.warning(f"No task data found in model output ({len(content)} chars)")
        return None

    @staticmethod
    def coerce_drafts(data: Any) -> list[TaskDraft] | None:
        """Accept {"tasks": [...]}, a bare list, or a single task object.

        Returns None when the value is not task-shaped or yields no drafts.
        """
        if isinstance(data, dict) and isinstance(data.get("tasks"), list):
            items = data["tasks"]
        elif isinstance(data, dict) and "title" in data:
            items = [data]
        elif isinstance(data, list):
            items = data
        else:
            return None

        drafts = [d for d in (TaskParser.coerce_draft(item) for item in items) if d]
        if not drafts:
            return None
        return drafts

    @staticmethod
    def coerce_draft(item: Any) -> TaskDraft | None:
        """Repair one task object field by field; None if it has no title."""
        if not isinstance(item, dict):
            return None

        title = item.get("title")
        if not isinstance(title, str) or not title.strip():
            return None

        description = item.get("description")
        if not isinstance(description, str):
            description = "" if description is None else str(description)

        return TaskDraft(
            title=title.strip(),
            description=description,
            status=TaskStatus.coerce(item.get("status")),
        )

    @staticmethod
    def fallback(text: str) -> TaskDraft:
        """Single todo draft built from the raw input."""
        return TaskDraft(
            title=truncate_title(text),
            description=text,
            status=TaskStatus.TODO,
        )


def truncate_title(text: str, limit: int = FALLBACK_TITLE_LENGTH) -> str:
    """Cut text to `limit` characters, marking the cut with an ellipsis."""
    return text[:limit] + ("..." if len(text) > limit else "")
