"""Service layer package."""

from todolist.services import (
    attachment_service,
    auth_service,
    lookup_service,
    task_service,
    user_service,
)
