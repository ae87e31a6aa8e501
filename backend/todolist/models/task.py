"""SQLAlchemy models for tasks and their file attachments."""

from sqlalchemy import Column, Integer, String, Text, Date, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from todolist.database import Base


class Task(Base):
    __tablename__ = "tasks"

    task_id = Column(Integer, primary_key=True, autoincrement=True)
    subject = Column(String(200), nullable=False)
    action = Column(Text, nullable=False)
    due_date = Column(Date, nullable=False)
    completed_date = Column(Date)
    notes = Column(Text)
    department_id = Column(Integer, ForeignKey("departments.department_id"), nullable=False)
    task_status_id = Column(Integer, ForeignKey("task_statuses.task_status_id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    department = relationship("Department")
    task_status = relationship("TaskStatus")

    @property
    def department_name(self):
        return self.department.name if self.department else None

    @property
    def task_status_name(self):
        return self.task_status.name if self.task_status else None

    __table_args__ = (
        Index("idx_task_department", "department_id"),
        Index("idx_task_status", "task_status_id"),
        Index("idx_task_due_date", "due_date"),
        # Task ids are never reused; attachment directories are keyed by them.
        {"sqlite_autoincrement": True},
    )


class StoredFile(Base):
    __tablename__ = "files"

    file_id = Column(Integer, primary_key=True, autoincrement=True)
    filename = Column(String(255), nullable=False)
    file_path = Column(String(1000), nullable=False)  # absolute path on disk


class TaskFile(Base):
    __tablename__ = "task_files"

    task_file_id = Column(Integer, primary_key=True, autoincrement=True)
    task_id = Column(Integer, ForeignKey("tasks.task_id"), nullable=False)
    file_id = Column(Integer, ForeignKey("files.file_id"), nullable=False)

    __table_args__ = (
        Index("idx_task_file_task", "task_id"),
        Index("idx_task_file_file", "file_id"),
    )
