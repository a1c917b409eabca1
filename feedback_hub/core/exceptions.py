from typing import Any, Dict, Optional

class AppException(Exception):
    """
    Base for errors the services raise on purpose.
    The app-level handler turns them into ``{"success": false, "errors": [...]}`` with ``status_code``.
    """
    def __init__(
        self,
        message: str,
        status_code: int = 400,
        error_code: str = "BUSINESS_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)

class ValidationError(AppException):
    """A workflow rule was broken, e.g. submitting a non-draft or closing a cycle twice."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="VALIDATION_ERROR",
            details=details
        )

class AuthenticationError(AppException):
    """Bad Google ID token or session JWT."""
    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(
            message=message,
            status_code=401,
            error_code="AUTH_FAILED"
        )

class AccessDeniedError(AppException):
    """Caller is signed in but has no stake in the feedback, cycle or organization asked for."""
    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(
            message=message,
            status_code=403,
            error_code="PERMISSION_DENIED"
        )

class NotFoundError(AppException):
    # Also used for drafts looked up by their recipient
    def __init__(self, message: str = "Resource not found"):
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND"
        )

class ConflictError(AppException):
    """Duplicate feedback for the same cycle, pair and review type, or a second active manager."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=409,
            error_code="CONFLICT",
            details=details
        )
