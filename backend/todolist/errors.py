"""Tagged error taxonomy shared by repositories, services and routers.

Every error carries a ``kind`` tag so callers can branch on the category
instead of parsing message text, and the HTTP status it is reported with.
"""


class TodoListError(Exception):
    kind = "error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(TodoListError):
    kind = "not_found"
    status_code = 404


class ValidationFailure(TodoListError):
    kind = "validation_failure"
    status_code = 400


class UnsupportedMediaType(TodoListError):
    kind = "unsupported_media_type"
    status_code = 415


class IOFailure(TodoListError):
    kind = "io_failure"
    status_code = 500


class TransactionFailure(TodoListError):
    kind = "transaction_failure"
    status_code = 500


class Conflict(TodoListError):
    kind = "conflict"
    status_code = 409


class PermissionDenied(TodoListError):
    kind = "permission_denied"
    status_code = 403
