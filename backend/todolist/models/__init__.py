"""SQLAlchemy model package."""

from todolist.models.lookup import Department, Role, TaskStatus
from todolist.models.user import User
from todolist.models.task import Task, StoredFile, TaskFile

__all__ = [
    "Department", "Role", "TaskStatus",
    "User",
    "Task", "StoredFile", "TaskFile",
]
