"""Pydantic schemas for users and authentication."""

import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator

PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[^a-zA-Z0-9]).{8,}$")
PASSWORD_RULE = (
    "Password must be at least 8 characters, with at least one uppercase letter, "
    "one lowercase letter, one digit, and one special character."
)


class UserBase(BaseModel):
    username: str = Field(min_length=1, max_length=50)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    department_id: Optional[int] = None
    role_id: Optional[int] = None


class UserCreate(UserBase):
    password: str = Field(min_length=1)
    must_change_password: bool = True


class UserUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=1, max_length=50)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    department_id: Optional[int] = None
    role_id: Optional[int] = None
    is_active: Optional[bool] = None


class UserOut(UserBase):
    user_id: int
    department_name: Optional[str] = None
    role_name: Optional[str] = None
    must_change_password: bool
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PasswordReset(BaseModel):
    new_password: str = Field(min_length=1)
    confirm_password: str = Field(min_length=1)
    must_change_password: bool = True

    @model_validator(mode="after")
    def passwords_match(self):
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords do not match.")
        return self


class PasswordChange(PasswordReset):
    must_change_password: bool = False

    @model_validator(mode="after")
    def password_strength(self):
        if not PASSWORD_PATTERN.match(self.new_password):
            raise ValueError(PASSWORD_RULE)
        return self


class LoginRequest(BaseModel):
    username: str
    password: str


class IdentityOut(BaseModel):
    user_id: int
    username: str
    screen_name: str
    is_admin: bool
    department_id: Optional[int] = None
    must_change_password: bool


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    identity: IdentityOut
