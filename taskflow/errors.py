# taskflow/errors.py
"""
Error taxonomy for the task and time-accounting core.

Every service operation either returns a result or raises exactly one of
these. The API layer maps them to HTTP responses in one exception handler.
"""

from typing import Optional


class TaskFlowError(Exception):
    status_code = 400
    default_message = "Request could not be processed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(TaskFlowError):
    status_code = 404
    default_message = "Not found"


class PermissionDenied(TaskFlowError):
    status_code = 403
    default_message = "Not authorised to perform this action"


class InvalidArgument(TaskFlowError):
    status_code = 400
    default_message = "Invalid argument"


class AlreadyPunchedIn(TaskFlowError):
    default_message = "Already punched in today"


class AlreadyPunchedOut(TaskFlowError):
    default_message = "Already punched out today"


class NotPunchedIn(TaskFlowError):
    default_message = "Not punched in today"


class NoActiveTimer(TaskFlowError):
    default_message = "No active timer for this task"


class Conflict(TaskFlowError):
    status_code = 409
    default_message = "Resource already exists"
