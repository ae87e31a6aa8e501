"""Department, role and task status management."""

from sqlalchemy import inspect
from sqlalchemy.orm import Session

from todolist.config import settings
from todolist.errors import Conflict, NotFound
from todolist.models.lookup import Department, Role, TaskStatus
from todolist.repositories import lookup_repository, task_repository, user_repository

LABELS = {Department: "Department", Role: "Role", TaskStatus: "Task status"}

BLOCK = "block"


def _reference_count(db: Session, model, item_id: int) -> int:
    if model is Department:
        return task_repository.count_tasks_in_department(db, item_id) + user_repository.count_users_in_department(db, item_id)
    if model is Role:
        return user_repository.count_users_with_role(db, item_id)
    return task_repository.count_tasks_with_status(db, item_id)


def list_items(db: Session, model):
    return lookup_repository.get_all(db, model)


def get_item(db: Session, model, item_id: int):
    item = lookup_repository.get_by_id(db, model, item_id)
    if not item:
        raise NotFound(f"{LABELS[model]} not found.")
    return item


def _ensure_unique(db: Session, model, name: str, item_id: int | None = None):
    existing = lookup_repository.get_by_name(db, model, name)
    if existing is not None and inspect(existing).identity[0] != item_id:
        raise Conflict(f"{LABELS[model]} '{name}' already exists.")


def create_item(db: Session, model, name: str):
    name = name.strip()
    _ensure_unique(db, model, name)
    return lookup_repository.add(db, model, name)


def update_item(db: Session, model, item_id: int, name: str):
    item = get_item(db, model, item_id)
    name = name.strip()
    _ensure_unique(db, model, name, item_id)
    return lookup_repository.update_name(db, item, name)


def delete_item(db: Session, model, item_id: int):
    item = get_item(db, model, item_id)
    if settings.LOOKUP_DELETE_POLICY == BLOCK:
        references = _reference_count(db, model, item_id)
        if references:
            raise Conflict(f"{LABELS[model]} is still referenced by {references} record(s).")
    lookup_repository.delete(db, item)
