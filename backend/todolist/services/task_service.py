"""Task lifecycle service.

Creates, updates and deletes a task together with its File/TaskFile rows and
the attachment binaries on disk as one unit: row changes and promotions run
inside a single transaction, filesystem deletions only happen after commit,
and a failure rolls the rows back and moves promoted binaries back where they
came from.
"""

import csv
import io
import logging
import math
import os
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from todolist.database import transactional_unit
from todolist.errors import IOFailure, NotFound, TransactionFailure, ValidationFailure
from todolist.models.lookup import Department, TaskStatus
from todolist.models.task import StoredFile, Task
from todolist.models.user import User
from todolist.repositories import file_repository, lookup_repository, task_file_repository, task_repository
from todolist.schemas.file import StoredFileOut, TempUploadedFile
from todolist.schemas.task import TaskCreate, TaskDetailOut, TaskUpdate
from todolist.services.attachment_store import AttachmentStore, store as default_store
from todolist.utils.permissions import (
    ensure_can_manage_task,
    is_admin,
    is_same_department,
    resolve_effective_department,
)

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = ["#", "Subject", "Action", "Department", "Status", "Due Date", "Completed Date", "Notes"]


class _AttachmentJournal:
    """Filesystem side of one lifecycle operation."""

    def __init__(self, store: AttachmentStore):
        self.store = store
        self.promoted: list[tuple[str, str, Optional[str]]] = []  # (temp, permanent, backup)
        self.created_dirs: list[str] = []
        self.pending_deletions: list[str] = []

    def promote(self, staged: TempUploadedFile, task_id: int) -> str:
        self.store.check_file_name(staged.file_name)
        directory = self.store.task_directory(task_id)
        if not os.path.isdir(directory) and directory not in self.created_dirs:
            self.created_dirs.append(directory)
        destination = os.path.join(directory, staged.file_name)
        backup = self.store.set_aside(destination)
        try:
            path = self.store.promote(staged.temp_file_path, directory, staged.file_name)
        except Exception:
            if backup:
                self.store.restore(backup, destination)
            raise
        self.promoted.append((staged.temp_file_path, path, backup))
        return path

    def delete_after_commit(self, path: str) -> None:
        self.pending_deletions.append(path)

    def revert(self) -> None:
        for temp_path, path, backup in reversed(self.promoted):
            try:
                self.store.demote(path, temp_path)
                if backup:
                    self.store.restore(backup, path)
            except IOFailure as exc:
                logger.warning("[tasks] could not undo promotion of %s: %s", path, exc)
        for directory in self.created_dirs:
            self.store.remove_empty_directory(directory)
        self.promoted = []
        self.pending_deletions = []

    def finish(self) -> None:
        # A removed file re-added under the same name now holds the new binary.
        occupied = {path for _, path, _ in self.promoted}
        for path in self.pending_deletions:
            if path not in occupied:
                self.store.delete_permanent(path)
        for _, _, backup in self.promoted:
            if backup:
                self.store.delete_permanent(backup)


def _surface(operation: str, task_id: Optional[int], exc: Exception) -> Exception:
    logger.warning("[tasks] %s of task %s rolled back: %s", operation, task_id, exc)
    if isinstance(exc, SQLAlchemyError):
        return TransactionFailure(f"Failed to {operation} task: {exc}")
    return exc


def _effective_department(current_user: User, requested_department_id: Optional[int]) -> int:
    department_id = resolve_effective_department(
        is_admin(current_user),
        current_user.department_id,
        requested_department_id,
    )
    if not department_id:
        raise ValidationFailure("Department is required.")
    return department_id


def _ensure_staged(store: AttachmentStore, staged_files: List[TempUploadedFile]) -> None:
    for staged in staged_files:
        if not store.is_staged_path(staged.temp_file_path):
            raise ValidationFailure(f"'{staged.file_name}' is not a staged upload.")
        store.check_file_name(staged.file_name)


def _check_references(db: Session, department_id: int, task_status_id: int) -> None:
    if lookup_repository.get_by_id(db, Department, department_id) is None:
        raise NotFound(f"Department {department_id} does not exist.")
    if lookup_repository.get_by_id(db, TaskStatus, task_status_id) is None:
        raise NotFound(f"Task status {task_status_id} does not exist.")


def _task_values(data: TaskCreate | TaskUpdate, department_id: int) -> dict:
    return {
        "subject": data.subject,
        "action": data.action,
        "due_date": data.due_date,
        "completed_date": data.completed_date,
        "notes": data.notes,
        "department_id": department_id,
        "task_status_id": data.task_status_id,
    }


def _supersede_same_path(db: Session, task_id: int, file_path: str) -> None:
    links = {link.file_id: link for link in task_file_repository.get_task_files_by_task_id(db, task_id)}
    for stored in file_repository.get_files_by_path(db, file_path):
        link = links.get(stored.file_id)
        if link is None:
            continue
        task_file_repository.delete_task_file(db, link.task_file_id)
        file_repository.delete_file(db, stored.file_id)


def _attach_staged(db: Session, journal: _AttachmentJournal, task_id: int, staged_files: List[TempUploadedFile]) -> None:
    for staged in staged_files:
        path = journal.promote(staged, task_id)
        _supersede_same_path(db, task_id, path)
        file_id = file_repository.add_file(db, staged.file_name, path)
        task_file_repository.add_task_file(db, task_id, file_id)


def _remove_files(db: Session, journal: _AttachmentJournal, task_id: int, removed_file_ids: List[int]) -> None:
    for file_id in removed_file_ids:
        links = task_file_repository.get_task_files_by_task_id(db, task_id)
        link = next((row for row in links if row.file_id == file_id), None)
        if link is None:
            # Already gone or owned by another task.
            continue
        stored = file_repository.get_file_by_id(db, file_id)
        task_file_repository.delete_task_file(db, link.task_file_id)
        file_repository.delete_file(db, file_id)
        if stored is not None:
            journal.delete_after_commit(stored.file_path)


def get_task(db: Session, task_id: int) -> Task:
    task = task_repository.get_task_by_id(db, task_id)
    if not task:
        raise NotFound("Task not found.")
    return task


def get_task_files(db: Session, task_id: int) -> List[StoredFile]:
    links = task_file_repository.get_task_files_by_task_id(db, task_id)
    return file_repository.get_files_by_ids(db, [link.file_id for link in links])


def get_task_detail(db: Session, task_id: int, current_user: User) -> TaskDetailOut:
    task = get_task(db, task_id)
    files = [StoredFileOut.model_validate(row) for row in get_task_files(db, task_id)]
    return TaskDetailOut.model_validate(task).model_copy(
        update={
            "files": files,
            "is_same_department": is_same_department(current_user.department_id, task.department_id),
        }
    )


def list_tasks(db: Session, page: int = 1, page_size: int = 5, **filters) -> dict:
    rows = task_repository.get_all_tasks_with_info(db, **filters)
    total = len(rows)
    start = (page - 1) * page_size
    return {
        "items": rows[start:start + page_size],
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": max(1, math.ceil(total / page_size)),
    }


def export_tasks_csv(db: Session, **filters) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(EXPORT_COLUMNS)
    for task in task_repository.get_all_tasks_with_info(db, **filters):
        writer.writerow([
            task.task_id,
            task.subject,
            task.action,
            task.department_name or "",
            task.task_status_name or "",
            task.due_date.isoformat(),
            task.completed_date.isoformat() if task.completed_date else "",
            task.notes or "",
        ])
    return buffer.getvalue()


def create_task(db: Session, data: TaskCreate, current_user: User, store: AttachmentStore = default_store) -> Task:
    department_id = _effective_department(current_user, data.department_id)
    _ensure_staged(store, data.staged_files)

    journal = _AttachmentJournal(store)
    task_id = None
    try:
        with transactional_unit(db):
            _check_references(db, department_id, data.task_status_id)
            task_id = task_repository.add_task(db, Task(**_task_values(data, department_id)))
            _attach_staged(db, journal, task_id, data.staged_files)
    except Exception as exc:
        journal.revert()
        failure = _surface("add", task_id, exc)
        if failure is exc:
            raise
        raise failure from exc

    journal.finish()
    logger.info("[tasks] task %s created by %s with %d attachment(s)", task_id, current_user.username, len(data.staged_files))
    return get_task(db, task_id)


def update_task(
    db: Session,
    task_id: int,
    data: TaskUpdate,
    current_user: User,
    store: AttachmentStore = default_store,
) -> Task:
    task = get_task(db, task_id)
    ensure_can_manage_task(current_user, task)
    department_id = _effective_department(current_user, data.department_id)
    _ensure_staged(store, data.staged_files)

    journal = _AttachmentJournal(store)
    try:
        with transactional_unit(db):
            _check_references(db, department_id, data.task_status_id)
            task_repository.update_task(db, task, _task_values(data, department_id))
            _remove_files(db, journal, task_id, data.removed_file_ids)
            _attach_staged(db, journal, task_id, data.staged_files)
    except Exception as exc:
        journal.revert()
        failure = _surface("save", task_id, exc)
        if failure is exc:
            raise
        raise failure from exc

    journal.finish()
    logger.info(
        "[tasks] task %s updated by %s (+%d/-%d attachment(s))",
        task_id, current_user.username, len(data.staged_files), len(journal.pending_deletions),
    )
    return get_task(db, task_id)


def delete_task(db: Session, task_id: int, current_user: User, store: AttachmentStore = default_store) -> None:
    task = get_task(db, task_id)
    ensure_can_manage_task(current_user, task)

    journal = _AttachmentJournal(store)
    try:
        with transactional_unit(db):
            links = task_file_repository.get_task_files_by_task_id(db, task_id)
            task_file_repository.delete_all_task_files_of_task(db, task_id)
            file_ids = [link.file_id for link in links]
            files = file_repository.get_files_by_ids(db, file_ids)
            file_repository.delete_files(db, file_ids)
            task_repository.delete_task(db, task_id)
            for stored in files:
                journal.delete_after_commit(stored.file_path)
    except Exception as exc:
        journal.revert()
        failure = _surface("delete", task_id, exc)
        if failure is exc:
            raise
        raise failure from exc

    journal.finish()
    store.remove_empty_directory(store.task_directory(task_id))
    logger.info("[tasks] task %s deleted by %s", task_id, current_user.username)
