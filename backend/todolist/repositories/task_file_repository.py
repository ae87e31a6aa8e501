"""TaskFile (task to file association) repository functions."""

from typing import List

from sqlalchemy.orm import Session

from todolist.models.task import TaskFile
from todolist.repositories.base import persist


def get_all_task_files(db: Session) -> List[TaskFile]:
    return db.query(TaskFile).order_by(TaskFile.task_file_id).all()


def get_task_files_by_task_id(db: Session, task_id: int) -> List[TaskFile]:
    return (
        db.query(TaskFile)
        .filter(TaskFile.task_id == task_id)
        .order_by(TaskFile.task_file_id)
        .all()
    )


def add_task_file(db: Session, task_id: int, file_id: int) -> int:
    link = TaskFile(task_id=task_id, file_id=file_id)
    db.add(link)
    persist(db)
    return link.task_file_id


def delete_task_file(db: Session, task_file_id: int) -> None:
    db.query(TaskFile).filter(TaskFile.task_file_id == task_file_id).delete(synchronize_session=False)
    persist(db)


def delete_all_task_files_of_task(db: Session, task_id: int) -> None:
    db.query(TaskFile).filter(TaskFile.task_id == task_id).delete(synchronize_session=False)
    persist(db)
