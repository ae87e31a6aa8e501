"""Authentication service: password hashing, login and session tokens."""

import logging
from datetime import datetime, timedelta

from fastapi import HTTPException, status
from jose import jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from todolist.config import settings
from todolist.models.user import User
from todolist.repositories import user_repository
from todolist.schemas.user import IdentityOut, PasswordChange
from todolist.utils.permissions import is_admin

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def build_identity(user: User) -> IdentityOut:
    return IdentityOut(
        user_id=user.user_id,
        username=user.username,
        screen_name=user.screen_name,
        is_admin=is_admin(user),
        department_id=user.department_id,
        must_change_password=bool(user.must_change_password),
    )


def create_access_token(user: User) -> str:
    expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    identity = build_identity(user)
    payload = {
        "sub": str(user.user_id),
        "username": identity.username,
        "is_admin": identity.is_admin,
        "department_id": identity.department_id,
        "must_change_password": identity.must_change_password,
        "exp": expire,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def authenticate(db: Session, username: str, password: str) -> User:
    user = user_repository.get_user_by_username(db, username)
    if not user or not user.is_active or not verify_password(password, user.hashed_password):
        logger.info("[auth] failed login for %s", username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )
    return user


def change_own_password(db: Session, user: User, data: PasswordChange) -> User:
    return user_repository.update_user_password(
        db,
        user,
        get_password_hash(data.new_password),
        must_change_password=False,
    )
