"""
services/exceptions.py

Domain errors raised by the service layer.
middlewares/error_handler.py maps each one onto an HTTP status and the shared error envelope.
"""

from typing import Any, Optional


class DomainError(Exception):
    status_code = 400
    code = "DOMAIN_ERROR"

    def __init__(self, message: str, details: Optional[Any] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        if code:
            self.code = code


class NotFoundError(DomainError):
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(DomainError):
    status_code = 409
    code = "CONFLICT"


class DuplicateAttendanceError(ConflictError):
    code = "DUPLICATE_RECORDS_FOUND"

    def __init__(self, duplicates, message: str = "Attendance records already exist for this date"):
        super().__init__(message, details={"duplicates": duplicates})
        self.duplicates = duplicates


class BusinessRuleError(DomainError):
    """Validation failure detected by a service (field errors go in details)."""
    status_code = 400
    code = "VALIDATION_ERROR"


class LLMUnavailableError(DomainError):
    status_code = 503
    code = "LLM_DISABLED"
