"""User repository functions."""

from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from todolist.models.user import User
from todolist.repositories.base import persist


def get_all_users(db: Session) -> List[User]:
    return db.query(User).order_by(User.user_id).all()


def get_all_users_with_info(db: Session) -> List[User]:
    return (
        db.query(User)
        .options(joinedload(User.department), joinedload(User.role))
        .order_by(User.user_id)
        .all()
    )


def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.user_id == user_id).first()


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


def add_user(db: Session, user: User) -> User:
    db.add(user)
    persist(db)
    db.refresh(user)
    return user


def update_user(db: Session, user: User, values: dict) -> User:
    for k, v in values.items():
        setattr(user, k, v)
    persist(db)
    db.refresh(user)
    return user


def update_user_password(db: Session, user: User, hashed_password: str, must_change_password: bool) -> User:
    user.hashed_password = hashed_password
    user.must_change_password = must_change_password
    persist(db)
    db.refresh(user)
    return user


def delete_user(db: Session, user: User) -> None:
    db.delete(user)
    persist(db)


def count_users_in_department(db: Session, department_id: int) -> int:
    return db.query(User).filter(User.department_id == department_id).count()


def count_users_with_role(db: Session, role_id: int) -> int:
    return db.query(User).filter(User.role_id == role_id).count()
