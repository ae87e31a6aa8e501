"""Pydantic schemas for tasks and task lifecycle requests."""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from todolist.schemas.file import StoredFileOut, TempUploadedFile


class TaskBase(BaseModel):
    subject: str = Field(min_length=1, max_length=200)
    action: str = Field(min_length=1)
    due_date: date
    completed_date: Optional[date] = None
    notes: Optional[str] = None
    department_id: Optional[int] = None
    task_status_id: int


class TaskCreate(TaskBase):
    staged_files: List[TempUploadedFile] = []


class TaskUpdate(TaskBase):
    staged_files: List[TempUploadedFile] = []
    removed_file_ids: List[int] = []


class TaskOut(TaskBase):
    task_id: int
    department_id: int
    department_name: Optional[str] = None
    task_status_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TaskDetailOut(TaskOut):
    files: List[StoredFileOut] = []
    is_same_department: bool = False


class TaskPage(BaseModel):
    items: List[TaskOut]
    total: int
    page: int
    page_size: int
    total_pages: int
