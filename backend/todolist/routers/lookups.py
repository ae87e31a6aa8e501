"""Department, role and task status API routers.

The three lookups share one shape, so their routers are built by the same
factory. Listing is open to any signed-in user for form dropdowns; changes
are admin-only.
"""

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from todolist.database import get_db
from todolist.middleware.auth_middleware import get_current_user, require_admin
from todolist.models.lookup import Department, Role, TaskStatus
from todolist.models.user import User
from todolist.schemas.lookup import (
    DepartmentCreate,
    DepartmentOut,
    RoleCreate,
    RoleOut,
    TaskStatusCreate,
    TaskStatusOut,
)
from todolist.services import lookup_service


def _build_router(prefix: str, tag: str, model, create_schema, out_schema) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[tag])

    @router.get("", response_model=List[out_schema])
    def list_items(db: Session = Depends(get_db), _current_user: User = Depends(get_current_user)):
        return lookup_service.list_items(db, model)

    @router.get("/{item_id}", response_model=out_schema)
    def get_item(item_id: int, db: Session = Depends(get_db), _current_user: User = Depends(get_current_user)):
        return lookup_service.get_item(db, model, item_id)

    @router.post("", response_model=out_schema)
    def create_item(
        data: create_schema,
        db: Session = Depends(get_db),
        _current_user: User = Depends(require_admin),
    ):
        return lookup_service.create_item(db, model, data.name)

    @router.put("/{item_id}", response_model=out_schema)
    def update_item(
        item_id: int,
        data: create_schema,
        db: Session = Depends(get_db),
        _current_user: User = Depends(require_admin),
    ):
        return lookup_service.update_item(db, model, item_id, data.name)

    @router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_item(item_id: int, db: Session = Depends(get_db), _current_user: User = Depends(require_admin)):
        lookup_service.delete_item(db, model, item_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router


departments_router = _build_router("/api/departments", "departments", Department, DepartmentCreate, DepartmentOut)
roles_router = _build_router("/api/roles", "roles", Role, RoleCreate, RoleOut)
task_statuses_router = _build_router("/api/task-statuses", "task-statuses", TaskStatus, TaskStatusCreate, TaskStatusOut)
