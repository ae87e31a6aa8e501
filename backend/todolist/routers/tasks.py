"""Tasks API router. Validates requests and delegates to the task lifecycle service."""

from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from todolist.database import get_db
from todolist.middleware.auth_middleware import get_current_user
from todolist.models.user import User
from todolist.schemas.task import TaskCreate, TaskDetailOut, TaskOut, TaskPage, TaskUpdate
from todolist.services import task_service

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


def task_filters(
    subject: Optional[str] = None,
    department_id: Optional[int] = None,
    task_status_id: Optional[int] = None,
    due_from: Optional[date] = None,
    due_to: Optional[date] = None,
    completed_from: Optional[date] = None,
    completed_to: Optional[date] = None,
) -> dict:
    return {
        "subject": subject,
        "department_id": department_id,
        "task_status_id": task_status_id,
        "due_from": due_from,
        "due_to": due_to,
        "completed_from": completed_from,
        "completed_to": completed_to,
    }


@router.get("", response_model=TaskPage)
def list_tasks(
    page: int = Query(1, ge=1),
    page_size: int = Query(5, ge=1, le=100),
    filters: dict = Depends(task_filters),
    db: Session = Depends(get_db),
    _current_user: User = Depends(get_current_user),
):
    return task_service.list_tasks(db, page=page, page_size=page_size, **filters)


@router.get("/export")
def export_tasks(
    filters: dict = Depends(task_filters),
    db: Session = Depends(get_db),
    _current_user: User = Depends(get_current_user),
):
    filename = f"Tasks_{datetime.now():%Y%m%d_%H%M%S}.csv"
    return Response(
        content=task_service.export_tasks_csv(db, **filters),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.get("/{task_id}", response_model=TaskDetailOut)
def get_task(task_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return task_service.get_task_detail(db, task_id, current_user)


@router.post("", response_model=TaskOut)
def create_task(data: TaskCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return task_service.create_task(db, data, current_user)


@router.put("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: int,
    data: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return task_service.update_task(db, task_id, data, current_user)


@router.delete("/{task_id}")
def delete_task(task_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    task_service.delete_task(db, task_id, current_user)
    return {"message": "Task deleted."}
