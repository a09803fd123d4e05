"""
Application Exceptions

Typed business-rule errors raised by the service layer. Each carries a
stable machine-readable ``code`` and the HTTP status the API renders it with.

Usage:
    from lms_quiz.core.exceptions import NotFoundError

    if not attempt:
        raise NotFoundError("Quiz attempt not found", code="ATTEMPT_NOT_FOUND")
"""

from typing import Optional, Any, Dict


class AppError(Exception):
    """Base exception for all expected application errors"""

    status_code: int = 400

    def __init__(
        self,
        message: str,
        code: str = "BAD_REQUEST",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "success": False,
            "message": self.message,
            "code": self.code,
        }
        if self.details:
            body["details"] = self.details
        return body


class NotFoundError(AppError):
    """Quiz, attempt or user is absent"""

    status_code = 404

    def __init__(self, message: str = "Not found", code: str = "NOT_FOUND", **kwargs):
        super().__init__(message, code=code, **kwargs)


class ForbiddenError(AppError):
    """Role or ownership violation"""

    status_code = 403

    def __init__(self, message: str = "Forbidden", code: str = "FORBIDDEN", **kwargs):
        super().__init__(message, code=code, **kwargs)


class ConflictError(AppError):
    """Duplicate active attempt or repeated submission"""

    status_code = 409

    def __init__(self, message: str = "Conflict", code: str = "CONFLICT", **kwargs):
        super().__init__(message, code=code, **kwargs)


class InvalidStateError(AppError):
    """Operation not allowed in the current state"""

    status_code = 400

    def __init__(self, message: str = "Invalid state", code: str = "INVALID_STATE", **kwargs):
        super().__init__(message, code=code, **kwargs)


class AuthenticationError(AppError):
    """Missing, invalid or expired credentials"""

    status_code = 401

    def __init__(self, message: str = "Authentication failed", code: str = "AUTH_FAILED", **kwargs):
        super().__init__(message, code=code, **kwargs)
