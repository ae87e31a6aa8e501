"""User management service."""

from typing import Optional

from sqlalchemy.orm import Session

from todolist.errors import Conflict, NotFound, ValidationFailure
from todolist.models.lookup import Department, Role
from todolist.models.user import User
from todolist.repositories import lookup_repository, user_repository
from todolist.schemas.user import PasswordReset, UserCreate, UserUpdate
from todolist.services.auth_service import get_password_hash

NON_NULLABLE_FIELDS = ("username", "is_active")


def _validate_references(db: Session, department_id: Optional[int], role_id: Optional[int]):
    if department_id and lookup_repository.get_by_id(db, Department, department_id) is None:
        raise NotFound(f"Department {department_id} does not exist.")
    if role_id and lookup_repository.get_by_id(db, Role, role_id) is None:
        raise NotFound(f"Role {role_id} does not exist.")


def list_users(db: Session):
    return user_repository.get_all_users_with_info(db)


def get_user(db: Session, user_id: int) -> User:
    user = user_repository.get_user_by_id(db, user_id)
    if not user:
        raise NotFound("User not found.")
    return user


def create_user(db: Session, data: UserCreate) -> User:
    if user_repository.get_user_by_username(db, data.username):
        raise Conflict(f"Username '{data.username}' is already taken.")
    _validate_references(db, data.department_id, data.role_id)
    user = User(
        username=data.username,
        first_name=data.first_name,
        last_name=data.last_name,
        department_id=data.department_id or None,
        role_id=data.role_id or None,
        hashed_password=get_password_hash(data.password),
        must_change_password=data.must_change_password,
    )
    return user_repository.add_user(db, user)


def update_user(db: Session, user_id: int, data: UserUpdate) -> User:
    user = get_user(db, user_id)
    updates = data.model_dump(exclude_unset=True)
    for key in NON_NULLABLE_FIELDS:
        if key in updates and updates[key] is None:
            raise ValidationFailure(f"'{key}' cannot be null.")
    if updates.get("username") and updates["username"] != user.username:
        if user_repository.get_user_by_username(db, updates["username"]):
            raise Conflict(f"Username '{updates['username']}' is already taken.")
    for key in ("department_id", "role_id"):
        if key in updates and not updates[key]:
            updates[key] = None
    _validate_references(db, updates.get("department_id"), updates.get("role_id"))
    return user_repository.update_user(db, user, updates)


def reset_password(db: Session, user_id: int, data: PasswordReset) -> User:
    user = get_user(db, user_id)
    return user_repository.update_user_password(
        db, user, get_password_hash(data.new_password), data.must_change_password
    )


def delete_user(db: Session, user_id: int, current_user: User):
    user = get_user(db, user_id)
    if user.user_id == current_user.user_id:
        raise Conflict("You cannot delete your own account.")
    user_repository.delete_user(db, user)
