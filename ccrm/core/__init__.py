"""
Core module containing the record entities, grading scale and exceptions.
"""

from .entities import *
from .interfaces import *
from .exceptions import *
from .enums import *

__all__ = [
    # Entities
    "Person",
    "Student",
    "Instructor",
    "Course",
    "CourseBuilder",
    "Enrollment",

    # Interfaces
    "Profiled",
    "Repository",

    # Enums
    "PersonType",
    "Semester",
    "Grade",
    "GRADE_THRESHOLDS",
    "from_marks",

    # Exceptions
    "CCRMException",
    "ValidationError",
    "InvalidCourseDefinitionError",
    "EnrollmentError",
    "DuplicateEnrollmentError",
    "ResourceNotFoundError",
    "DuplicateEntityError",
    "InterchangeError",
    "InterchangeParseError",
    "InterchangeIOError",
    "ConfigurationError",
]
