# app/utils/exceptions.py
from typing import Optional

from fastapi import status


class TaskAccessError(Exception):
    """Base class for authorization outcomes that terminate a request"""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "task_access_error"
    default_detail = "Request could not be authorized"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class MalformedCredential(TaskAccessError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "malformed_credential"
    default_detail = "Credential is missing required claims"


class NotFound(TaskAccessError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_detail = "Task not found"


class Forbidden(TaskAccessError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    default_detail = "You do not have permission to perform this action"


class InvalidAssignment(Forbidden):
    code = "invalid_assignment"
    default_detail = "You cannot assign tasks to this user"
