"""
Board module - task persistence and column operations.
"""

from taskpilot.board.service import COLUMN_TITLES, BoardService
from taskpilot.board.store import SQLiteTaskStore, TaskNotFoundError, TaskStore

__all__ = ["COLUMN_TITLES", "BoardService", "SQLiteTaskStore", "TaskNotFoundError", "TaskStore"]
