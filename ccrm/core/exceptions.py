"""
Custom exceptions for the CCRM platform.
"""

from typing import Optional, Any, Dict


class CCRMException(Exception):
    """Base exception for all CCRM-related errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ValidationError(CCRMException):
    """Raised when data validation fails."""
    pass


class InvalidCourseDefinitionError(ValidationError):
    """Raised when a course is built without a code or a title."""

    def __init__(self, message: str = "Code/Title required", **kwargs):
        super().__init__(message, error_code=kwargs.pop("error_code", "invalid_course"), **kwargs)


class EnrollmentError(CCRMException):
    """Raised when enrollment operations fail."""
    pass


class DuplicateEnrollmentError(EnrollmentError):
    """Raised when a student is already enrolled in a course."""

    def __init__(self, registration_number: str, course_code: str):
        super().__init__(
            f"Already enrolled in {course_code}",
            error_code="duplicate_enrollment",
            details={"registration_number": registration_number, "course_code": course_code},
        )
        self.registration_number = registration_number
        self.course_code = course_code


class ResourceNotFoundError(CCRMException):
    """Raised when a requested resource is not found."""
    pass


class DuplicateEntityError(CCRMException):
    """Raised when attempting to create a duplicate entity."""
    pass


class InterchangeError(CCRMException):
    """Base class for interchange file failures."""
    pass


class InterchangeParseError(InterchangeError):
    """Raised when a data line of an interchange file cannot be parsed."""

    def __init__(self, message: str, line_number: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message, error_code="interchange_parse", details=details)
        self.line_number = line_number


class InterchangeIOError(InterchangeError):
    """Raised when an interchange file cannot be read or written."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message, error_code="interchange_io", details={"path": path})
        self.path = path


class ConfigurationError(CCRMException):
    """Raised when configuration is invalid."""
    pass
