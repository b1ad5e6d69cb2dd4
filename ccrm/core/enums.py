"""
Enumerations and the grading scale for the CCRM platform.
"""

from enum import Enum


class PersonType(Enum):
    """Types of persons in the system."""
    STUDENT = "student"
    INSTRUCTOR = "instructor"


class Semester(Enum):
    """Academic terms a course can run in."""
    SPRING = "SPRING"
    SUMMER = "SUMMER"
    FALL = "FALL"

    @classmethod
    def from_name(cls, name: str) -> "Semester":
        """Look up a semester by its exact enumeration name."""
        try:
            return cls[name]
        except KeyError:
            raise ValueError(f"Unknown semester: {name!r}") from None


class Grade(Enum):
    """Letter grades, highest first, each carrying a point value."""
    S = 10
    A = 9
    B = 8
    C = 7
    D = 6
    E = 5
    F = 0

    @property
    def points(self) -> int:
        return self.value

    @classmethod
    def from_marks(cls, mark: float) -> "Grade":
        """Convert a numeric mark to a grade. The first threshold reached wins."""
        for threshold, grade in GRADE_THRESHOLDS:
            if mark >= threshold:
                return grade
        return cls.F


# Lower bound of each bucket, checked highest-first.
GRADE_THRESHOLDS = (
    (90, Grade.S),
    (80, Grade.A),
    (70, Grade.B),
    (60, Grade.C),
    (50, Grade.D),
    (40, Grade.E),
)


def from_marks(mark: float) -> Grade:
    return Grade.from_marks(mark)
