"""Task repository functions."""

from datetime import date
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from todolist.models.task import Task
from todolist.repositories.base import persist


def get_all_tasks(db: Session) -> List[Task]:
    return db.query(Task).order_by(Task.task_id.desc()).all()


def get_all_tasks_with_info(
    db: Session,
    subject: Optional[str] = None,
    department_id: Optional[int] = None,
    task_status_id: Optional[int] = None,
    due_from: Optional[date] = None,
    due_to: Optional[date] = None,
    completed_from: Optional[date] = None,
    completed_to: Optional[date] = None,
) -> List[Task]:
    q = db.query(Task).options(joinedload(Task.department), joinedload(Task.task_status))
    if subject and subject.strip():
        q = q.filter(func.lower(Task.subject).contains(subject.strip().lower()))
    if department_id is not None:
        q = q.filter(Task.department_id == department_id)
    if task_status_id is not None:
        q = q.filter(Task.task_status_id == task_status_id)
    if due_from is not None:
        q = q.filter(Task.due_date >= due_from)
    if due_to is not None:
        q = q.filter(Task.due_date <= due_to)
    # Completed-date bounds exclude tasks that are not completed yet.
    if completed_from is not None:
        q = q.filter(Task.completed_date.isnot(None), Task.completed_date >= completed_from)
    if completed_to is not None:
        q = q.filter(Task.completed_date.isnot(None), Task.completed_date <= completed_to)
    return q.order_by(Task.task_id.desc()).all()


def get_task_by_id(db: Session, task_id: int) -> Optional[Task]:
    return db.query(Task).filter(Task.task_id == task_id).first()


def add_task(db: Session, task: Task) -> int:
    db.add(task)
    persist(db)
    return task.task_id


def update_task(db: Session, task: Task, values: dict) -> Task:
    for k, v in values.items():
        setattr(task, k, v)
    persist(db)
    return task


def delete_task(db: Session, task_id: int) -> None:
    db.query(Task).filter(Task.task_id == task_id).delete(synchronize_session=False)
    persist(db)


def count_tasks_in_department(db: Session, department_id: int) -> int:
    return db.query(Task).filter(Task.department_id == department_id).count()


def count_tasks_with_status(db: Session, task_status_id: int) -> int:
    return db.query(Task).filter(Task.task_status_id == task_status_id).count()
