"""Centralised application settings loaded from environment variables."""

from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./todolist.db"
    SECRET_KEY: str = "change-me-to-a-random-secret-key"
    DEBUG: bool = True
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]
    LOG_LEVEL: str = "INFO"

    # Session
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    AUTH_COOKIE_NAME: str = "todolist_session"
    ADMIN_ROLE_NAME: str = "Admin"

    # Attachments
    ATTACHMENT_ROOT: str = "attachments"
    # Empty means the system temp directory
    TEMP_UPLOAD_DIR: str = ""
    MAX_UPLOAD_SIZE: int = 50 * 1024 * 1024  # 50 MB
    ACCEPTED_CONTENT_TYPE: str = "application/pdf"

    # allow: a non-admin may pick another department explicitly
    # reject: a non-admin may only file tasks under their own department
    NON_ADMIN_DEPARTMENT_POLICY: str = "allow"
    # orphan: lookups are deleted even while referenced
    # block: deletion is refused while tasks or users reference the row
    LOOKUP_DELETE_POLICY: str = "orphan"

    class Config:
        env_file = str(Path(__file__).resolve().parents[1] / ".env")


settings = Settings()
