"""Task persistence: store interface and SQLite implementation."""

import sqlite3
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from uuid import uuid4

import aiosqlite

from taskpilot.core.logging import get_logger
from taskpilot.core.types import Task, TaskDraft, TaskStatus

logger = get_logger("board.store")


def _adapt_datetime(dt: datetime) -> str:
    """Convert datetime to ISO format string for SQLite storage."""
    return dt.isoformat()


def _convert_datetime(val: bytes) -> datetime:
    """Convert ISO format string from SQLite to datetime."""
    return datetime.fromisoformat(val.decode())


# Python 3.12 deprecates the implicit datetime adapters
sqlite3.register_adapter(datetime, _adapt_datetime)
sqlite3.register_converter("DATETIME", _convert_datetime)

SCHEMA = """
CREATE TABLE IF NOT EXISTS tasks (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    status TEXT NOT NULL DEFAULT 'todo',
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status);
"""

_COLUMNS = "id, title, description, status, created_at, updated_at"


class TaskNotFoundError(LookupError):
    """No task with the given id."""

    def __init__(self, task_id: str):
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class TaskStore(ABC):
    """Abstract task storage interface."""

    @abstractmethod
    async def fetch_all(self) -> list[Task]:
        """All tasks, oldest first."""
        ...

    @abstractmethod
    async def get(self, task_id: str) -> Task | None:
        ...

    @abstractmethod
    async def create(self, draft: TaskDraft) -> Task:
        """Persist a draft, assigning id and timestamps."""
        ...

    @abstractmethod
    async def update(
        self,
        task_id: str,
        title: str | None = None,
        description: str | None = None,
        status: TaskStatus | None = None,
    ) -> Task:
        """Apply the given fields. Raises TaskNotFoundError."""
        ...

    @abstractmethod
    async def delete(self, task_id: str) -> None:
        """Remove a task. Raises TaskNotFoundError."""
        ...


class SQLiteTaskStore(TaskStore):
    """SQLite-backed task store."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._conn: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Initialize database connection and schema."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = await aiosqlite.connect(
            self.db_path,
            detect_types=sqlite3.PARSE_DECLTYPES | sqlite3.PARSE_COLNAMES,
        )
        await self._conn.executescript(SCHEMA)
        await self._conn.commit()
        logger.info(f"Connected to task store: {self.db_path}")

    async def close(self) -> None:
        """Close database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None

    @property
    def conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("Task store not connected. Call connect() first.")
        return self._conn

    async def fetch_all(self) -> list[Task]:
        async with self.conn.execute(
            f"SELECT {_COLUMNS} FROM tasks ORDER BY created_at ASC, rowid ASC"
        ) as cursor:
            rows = await cursor.fetchall()
        return [self._row_to_task(row) for row in rows]

    async def get(self, task_id: str) -> Task | None:
        async with self.conn.execute(
            f"SELECT {_COLUMNS} FROM tasks WHERE id = ?", (task_id,)
        ) as cursor:
            row = await cursor.fetchone()
        return self._row_to_task(row) if row else None

    async def create(self, draft: TaskDraft) -> Task:
        now = datetime.now()
        task = Task(
            id=str(uuid4()),
            title=draft.title,
            description=draft.description or "",
            status=draft.status,
            created_at=now,
            updated_at=now,
        )
        await self.conn.execute(
            f"INSERT INTO tasks ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?)",
            (
                task.id,
                task.title,
                task.description,
                task.status.value,
                task.created_at,
                task.updated_at,
            ),
        )
        await self.conn.commit()
        logger.debug(f"Created task {task.id}: {task.title}")
        return task

    async def update(
        self,
        task_id: str,
        title: str | None = None,
        description: str | None = None,
        status: TaskStatus | None = None,
    ) -> Task:
        task = await self.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)

        if title is not None:
            task.title = title
        if description is not None:
            task.description = description
        if status is not None:
            task.status = status
        task.updated_at = datetime.now()

        await self.conn.execute(
            """UPDATE tasks SET title = ?, description = ?, status = ?, updated_at = ?
               WHERE id = ?""",
            (task.title, task.description, task.status.value, task.updated_at, task_id),
        )
        await self.conn.commit()
        logger.debug(f"Updated task {task_id} ({task.status.value})")
        return task

    async def delete(self, task_id: str) -> None:
        cursor = await self.conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
        await self.conn.commit()
        if cursor.rowcount == 0:
            raise TaskNotFoundError(task_id)
        logger.debug(f"Deleted task {task_id}")

    @staticmethod
    def _row_to_task(row) -> Task:
        return Task(
            id=row[0],
            title=row[1],
            description=row[2] or "",
            status=TaskStatus.coerce(row[3]),
            created_at=row[4],
            updated_at=row[5],
        )
