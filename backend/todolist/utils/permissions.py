"""Access policy helpers for roles and department scoping."""

from typing import Optional

from todolist.config import settings
from todolist.errors import PermissionDenied
from todolist.models.task import Task
from todolist.models.user import User

ALLOW = "allow"
REJECT = "reject"


def is_admin(user: User) -> bool:
    return user.role_name == settings.ADMIN_ROLE_NAME


def _is_set(department_id: Optional[int]) -> bool:
    return department_id is not None and department_id != 0


def resolve_effective_department(
    is_admin: bool,
    caller_department_id: Optional[int],
    requested_department_id: Optional[int],
    policy: Optional[str] = None,
) -> Optional[int]:
    """Return the department a task may be filed under for the caller.

    Admins are unconstrained. For everyone else a missing or zero request
    falls back to the caller's own department; an explicit different
    department passes through under the ``allow`` policy and is refused under
    ``reject``.
    """
    if is_admin:
        return requested_department_id
    if not _is_set(requested_department_id):
        return caller_department_id
    if (policy or settings.NON_ADMIN_DEPARTMENT_POLICY) == REJECT and requested_department_id != caller_department_id:
        raise PermissionDenied("You can only file tasks under your own department.")
    return requested_department_id


def is_same_department(caller_department_id: Optional[int], task_department_id: Optional[int]) -> bool:
    return _is_set(caller_department_id) and caller_department_id == task_department_id


def can_manage_task(user: User, task: Task) -> bool:
    return is_admin(user) or is_same_department(user.department_id, task.department_id)


def ensure_can_manage_task(user: User, task: Task) -> None:
    if not can_manage_task(user, task):
        raise PermissionDenied("You can only change tasks of your own department.")
