"""Users API router. Validates requests and delegates to the service layer."""

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from todolist.database import get_db
from todolist.middleware.auth_middleware import require_admin
from todolist.models.user import User
from todolist.schemas.user import PasswordReset, UserCreate, UserOut, UserUpdate
from todolist.services import user_service

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("", response_model=List[UserOut])
def list_users(db: Session = Depends(get_db), _current_user: User = Depends(require_admin)):
    return user_service.list_users(db)


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: int, db: Session = Depends(get_db), _current_user: User = Depends(require_admin)):
    return user_service.get_user(db, user_id)


@router.post("", response_model=UserOut)
def create_user(data: UserCreate, db: Session = Depends(get_db), _current_user: User = Depends(require_admin)):
    return user_service.create_user(db, data)


@router.put("/{user_id}", response_model=UserOut)
def update_user(
    user_id: int,
    data: UserUpdate,
    db: Session = Depends(get_db),
    _current_user: User = Depends(require_admin),
):
    return user_service.update_user(db, user_id, data)


@router.put("/{user_id}/password", response_model=UserOut)
def reset_password(
    user_id: int,
    data: PasswordReset,
    db: Session = Depends(get_db),
    _current_user: User = Depends(require_admin),
):
    return user_service.reset_password(db, user_id, data)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: int, db: Session = Depends(get_db), current_user: User = Depends(require_admin)):
    user_service.delete_user(db, user_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
