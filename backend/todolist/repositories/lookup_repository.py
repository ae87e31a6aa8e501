"""Repository functions shared by the named lookup entities.

Department, Role and TaskStatus have the same shape (an integer key and a
unique ``name``), so the functions here take the model class explicitly.
"""

from typing import List, Optional, Type

from sqlalchemy.orm import Session

from todolist.models.lookup import Department, Role, TaskStatus
from todolist.repositories.base import persist

LookupModel = Type[Department] | Type[Role] | Type[TaskStatus]


def _pk(model: LookupModel):
    return model.__mapper__.primary_key[0]


def get_all(db: Session, model: LookupModel) -> List:
    return db.query(model).order_by(_pk(model)).all()


def get_by_id(db: Session, model: LookupModel, item_id: int) -> Optional[object]:
    return db.query(model).filter(_pk(model) == item_id).first()


def get_by_name(db: Session, model: LookupModel, name: str) -> Optional[object]:
    return db.query(model).filter(model.name == name).first()


def add(db: Session, model: LookupModel, name: str):
    item = model(name=name)
    db.add(item)
    persist(db)
    db.refresh(item)
    return item


def update_name(db: Session, item, name: str):
    item.name = name
    persist(db)
    db.refresh(item)
    return item


def delete(db: Session, item) -> None:
    db.delete(item)
    persist(db)
