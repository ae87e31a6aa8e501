"""Entity repositories: stateless query/write functions taking a session first."""

from todolist.repositories import (
    file_repository,
    lookup_repository,
    task_file_repository,
    task_repository,
    user_repository,
)
