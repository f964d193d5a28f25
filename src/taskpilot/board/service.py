"""
Board service.

Groups tasks into status columns and applies board events: generated
drafts, quick tasks from a voice transcript, drag-completed moves and
edits from the task detail view.
"""

from taskpilot.board.store import TaskStore
from taskpilot.core.logging import get_logger
from taskpilot.core.types import Column, Task, TaskDraft, TaskStatus
from taskpilot.generation.parser import truncate_title
from taskpilot.generation.service import TaskGenerator

logger = get_logger("board")

# Column id equals the status value
COLUMN_TITLES: dict[TaskStatus, str] = {
    TaskStatus.TODO: "To Do",
    TaskStatus.IN_PROGRESS: "In Progress",
    TaskStatus.DONE: "Done",
    TaskStatus.ARCHIVED: "Archived",
}


def column_status(column_id: str) -> TaskStatus:
    """Resolve a column id to its status."""
    try:
        return TaskStatus(column_id)
    except ValueError:
        raise ValueError(f"Unknown column: {column_id}") from None


class BoardService:
    """Kanban board over a task store."""

    def __init__(self, store: TaskStore, generator: TaskGenerator | None = None):
        self.store = store
        self.generator = generator

    async def columns(self) -> list[Column]:
        tasks = await self.store.fetch_all()
        return [
            Column(
                id=status.value,
                title=title,
                status=status,
                tasks=[t for t in tasks if t.status == status],
            )
            for status, title in COLUMN_TITLES.items()
        ]

    async def add_task(self, draft: TaskDraft) -> Task:
        return await self.store.create(draft)

    async def add_generated(self, text: str, system_prompt: str | None = None) -> list[Task]:
        """Generate drafts from free text and put each on the board."""
        if self.generator is None:
            raise RuntimeError("Board has no task generator")

        result = await self.generator.generate_tasks(text, system_prompt)
        created = []
        for draft in result.tasks:
            created.append(await self.store.create(draft))
        logger.info(f"Added {len(created)} generated task(s)")
        return created

    async def add_from_transcript(self, text: str) -> Task | None:
        """Quick todo from a final speech transcript; blank input is ignored."""
        if not text.strip():
            return None
        return await self.store.create(
            TaskDraft(title=truncate_title(text), description=text, status=TaskStatus.TODO)
        )

    async def move_task(self, task_id: str, source: str, destination: str) -> Task | None:
        """Apply a drag-completed event. Same-column drops change nothing."""
        column_status(source)
        new_status = column_status(destination)
        if source == destination:
            return None

        task = await self.store.update(task_id, status=new_status)
        logger.info(f"Moved task {task_id}: {source} -> {destination}")
        return task

    async def delete_task(self, task_id: str) -> None:
        await self.store.delete(task_id)

    async def update_task(
        self,
        task_id: str,
        title: str | None = None,
        description: str | None = None,
    ) -> Task:
        """Edit a task's title and/or description; a blank title is rejected."""
        if title is not None:
            title = title.strip()
            if not title:
                raise ValueError("Task title cannot be empty")

        task = await self.store.update(task_id, title=title, description=description)
        logger.info(f"Updated task {task_id}")
        return task
