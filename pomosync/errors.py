# -*- coding: utf-8 -*-

from typing import Any, Optional


class PomosyncError(Exception):
    code = "ERROR"

    def __init__(
        self, message: str, code: Optional[str] = None, details: Any = None
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.details = details


class ValidationError(PomosyncError, ValueError):
    code = "VALIDATION_ERROR"


class TaskNotFoundError(PomosyncError, ValueError):
    code = "TASK_NOT_FOUND"


class UserNotFoundError(PomosyncError):
    code = "USER_NOT_FOUND"


class CloudError(PomosyncError):
    """Raised when a Supabase call fails; the SDK error is chained."""

    code = "CLOUD_ERROR"


class AuthError(PomosyncError):
    code = "AUTH_ERROR"
