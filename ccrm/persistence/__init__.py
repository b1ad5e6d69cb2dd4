"""
Persistence module: in-memory repositories and the interchange file codec.
"""

from .repositories import BaseRepository, StudentRepository, CourseRepository, InstructorRepository
from .interchange import InterchangeCodec, STUDENT_HEADER, COURSE_HEADER, DELIMITER

__all__ = [
    "BaseRepository",
    "StudentRepository",
    "CourseRepository",
    "InstructorRepository",
    "InterchangeCodec",
    "STUDENT_HEADER",
    "COURSE_HEADER",
    "DELIMITER",
]
