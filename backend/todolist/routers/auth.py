"""Auth API router. Validates requests and delegates to the service layer."""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from todolist.config import settings
from todolist.database import get_db
from todolist.middleware.auth_middleware import get_authenticated_user
from todolist.models.user import User
from todolist.schemas.user import IdentityOut, LoginRequest, PasswordChange, TokenResponse
from todolist.services import auth_service

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _set_session_cookie(response: Response, user: User) -> str:
    token = auth_service.create_access_token(user)
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    return token


@router.post("/login", response_model=TokenResponse)
def login(request: LoginRequest, response: Response, db: Session = Depends(get_db)):
    user = auth_service.authenticate(db, request.username, request.password)
    token = _set_session_cookie(response, user)
    return TokenResponse(access_token=token, identity=auth_service.build_identity(user))


@router.post("/logout")
def logout(response: Response, current_user: User = Depends(get_authenticated_user)):
    response.delete_cookie(settings.AUTH_COOKIE_NAME)
    return {"message": "Signed out."}


@router.get("/me", response_model=IdentityOut)
def me(current_user: User = Depends(get_authenticated_user)):
    return auth_service.build_identity(current_user)


@router.post("/change-password", response_model=TokenResponse)
def change_password(
    data: PasswordChange,
    response: Response,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_authenticated_user),
):
    user = auth_service.change_own_password(db, current_user, data)
    # Reissue the session so the must-change claim is cleared.
    token = _set_session_cookie(response, user)
    return TokenResponse(access_token=token, identity=auth_service.build_identity(user))
